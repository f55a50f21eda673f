"""Core: config, error mapping, rate limits and application bootstrap."""

from procurement.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
