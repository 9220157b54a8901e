"""
HTTP client for the statistics service.
"""
from .client import StatsApiClient, resolve_base_url

__all__ = ["StatsApiClient", "resolve_base_url"]
