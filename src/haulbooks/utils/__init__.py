"""Utility functions for haulbooks."""

from haulbooks.utils.date_parser import parse_date, parse_iso_date
from haulbooks.utils.amount_parser import parse_amount
from haulbooks.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_iso_date", "parse_amount", "resolve_account"]
