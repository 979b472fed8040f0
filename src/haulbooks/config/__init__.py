"""Configuration module for haulbooks."""

from haulbooks.config.logging import configure_logging
from haulbooks.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging"]
