"""Utility helpers for reusable functionality."""

from .datetime import ensure_app_timezone, get_app_timezone, parse_timestamp
from .tasks import LatestTaskRunner

__all__ = [
    "ensure_app_timezone",
    "get_app_timezone",
    "parse_timestamp",
    "LatestTaskRunner",
]
