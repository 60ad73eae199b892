"""Shared column helpers"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, comparable with values read back from any backend"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
