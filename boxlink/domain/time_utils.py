"""Datetime parsing helpers for list-store and mailbox timestamps."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def parse_store_datetime(value: Any) -> Optional[datetime]:
    """Parse list-store ISO timestamps into timezone-aware datetimes.

    Empty values return ``None``; naive values are treated as UTC because the
    store reports ``Created``/``Modified`` in UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            return None
        normalized = text.replace(" ", "T", 1)
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            parsed = _parse_with_fallback(text)
            if parsed is None:
                return None

    if parsed.tzinfo is None or parsed.tzinfo.utcoffset(parsed) is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_store_datetime(value: Optional[datetime]) -> str:
    """Serialize a datetime as the UTC ISO text the list store accepts."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def _parse_with_fallback(text: str) -> Optional[datetime]:
    fallback_formats = (
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d",
        "%d/%m/%Y %H:%M",
    )
    for fmt in fallback_formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


__all__ = ["parse_store_datetime", "to_store_datetime", "utc_now"]
