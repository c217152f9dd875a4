# Overview: Clock and timestamp helpers. Everything is stored as naive UTC.

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

RECEIPT_FORMAT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> datetime:
    """Naive UTC now, the form every created_at column holds."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    "2026-10-18T09:30:00Z" for a stored timestamp (naive means UTC).

    Seconds precision, so records written in the same second sort by id.
    """
    if dt is None:
        return None
    stamp = _as_utc(dt).replace(microsecond=0, tzinfo=None)
    return stamp.isoformat() + "Z"


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Read back a to_utc_z() string (or any ISO-8601 datetime) as naive UTC.

    Blank input gives None; an offset, if present, is applied.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    "YYYY-MM-DD" from a query string or form. A full timestamp is cut to its
    date. Blank gives None; anything else malformed raises ValueError.
    """
    text = (value or "").strip()
    if not text:
        return None
    return date.fromisoformat(text[:10])


def format_local(dt: Optional[datetime]) -> str:
    """Timestamp as printed on receipts and report lines."""
    return dt.strftime(RECEIPT_FORMAT) if dt is not None else ""
