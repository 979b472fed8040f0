"""Async PostgREST (Supabase) remote store client."""

from typing import Any, Optional, Sequence

import httpx
import structlog

from haulbooks.config import get_settings
from haulbooks.remote.base import RemoteStore, RemoteStoreError

logger = structlog.get_logger(__name__)


def in_filter(ids: Sequence[str]) -> str:
    """Build a PostgREST ``in`` filter with quoted values."""
    quoted = ",".join('"{}"'.format(str(i).replace('"', '\\"')) for i in ids)
    return f"in.({quoted})"


class PostgrestRemoteStore(RemoteStore):
    """Remote store speaking the PostgREST protocol over httpx."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self._api_key = api_key or settings.supabase_anon_key.get_secret_value()
        if access_token is None and settings.supabase_access_token is not None:
            access_token = settings.supabase_access_token.get_secret_value()
        self._access_token = access_token or None
        self._timeout = timeout if timeout is not None else settings.remote_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def has_session(self) -> bool:
        return bool(self.base_url and self._api_key and self._access_token)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PostgrestRemoteStore":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        """Get request headers with API key and session token."""
        headers = {
            "apikey": self._api_key,
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
    ) -> Any:
        """Issue one request against a table endpoint."""
        client = await self._get_client()
        try:
            response = await client.request(
                method,
                f"/rest/v1/{table}",
                params=params,
                json=json,
                headers=self._get_headers(),
            )
        except httpx.HTTPError as e:
            logger.debug("remote_transport_error", method=method, table=table, error=str(e))
            raise RemoteStoreError(f"{method} {table} failed: {e}") from e

        if response.status_code >= 400:
            raise RemoteStoreError(
                f"{method} {table} returned HTTP {response.status_code}",
                status_code=response.status_code,
                details=response.text,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteStoreError(
                f"Invalid JSON from {table}",
                status_code=response.status_code,
                details=response.text[:200],
            ) from e

    async def select(self, table: str) -> list[dict[str, Any]]:
        """Return every row of a table."""
        data = await self._request("GET", table, params={"select": "*"})
        if not isinstance(data, list):
            raise RemoteStoreError(f"Invalid response format for {table}")
        logger.debug("remote_selected", table=table, rows=len(data))
        return data

    async def insert(self, table: str, row: dict[str, Any]) -> None:
        """Insert one row."""
        await self._request("POST", table, json=row)

    async def update(self, table: str, row_id: str, row: dict[str, Any]) -> None:
        """Replace the row with the given id."""
        await self._request("PATCH", table, params={"id": f"eq.{row_id}"}, json=row)

    async def delete(self, table: str, row_id: str) -> None:
        """Delete the row with the given id."""
        await self._request("DELETE", table, params={"id": f"eq.{row_id}"})

    async def delete_many(self, table: str, ids: Sequence[str]) -> None:
        """Delete every listed row in a single request."""
        if not ids:
            return
        await self._request("DELETE", table, params={"id": in_filter(ids)})
