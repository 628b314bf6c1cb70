# src/danfe_tracking/parsing/dates.py
"""
Date normalization for SSW payloads.

SSW mixes at least three encodings: ISO timestamps on the document endpoint,
``dd/MM/yyyy HH:mm:ss`` on the result endpoint, and ``dd/MM/yy`` dates
embedded in free-text event descriptions. Everything funnels through
``normalize_date`` so event ordering never depends on which one we got.

Times without an explicit offset are taken as UTC.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import pandas as pd


class DatePolicy(str, Enum):
    STRICT = "strict"     # day/month/year tokens only; None on any problem
    LENIENT = "lenient"   # ISO first, then tokens; never None


# Fixed (not "now") so normalization stays reproducible.
EPOCH_PLACEHOLDER = datetime(1970, 1, 1, tzinfo=timezone.utc)

MIN_YEAR = 2000
MAX_YEAR = 2100


def _is_digits(s: str, max_len: int = 2) -> bool:
    return 0 < len(s) <= max_len and s.isascii() and s.isdigit()


def _parse_tokens(raw: str) -> Optional[datetime]:
    parts = raw.split()
    if not 1 <= len(parts) <= 2:
        return None

    date_parts = parts[0].split("/")
    if len(date_parts) != 3 or not all(_is_digits(p) for p in date_parts[:2]):
        return None
    day, month, year_s = date_parts
    if not _is_digits(year_s, max_len=4):
        return None

    if len(year_s) == 2:
        year = 2000 + int(year_s)
    elif len(year_s) == 4:
        year = int(year_s)
    else:
        return None
    if not MIN_YEAR <= year <= MAX_YEAR:
        return None

    hour = minute = second = 0
    if len(parts) == 2:
        time_parts = parts[1].split(":")
        if len(time_parts) not in (2, 3) or not all(_is_digits(p) for p in time_parts):
            return None
        hour, minute = int(time_parts[0]), int(time_parts[1])
        second = int(time_parts[2]) if len(time_parts) == 3 else 0

    try:
        return datetime(year, int(month), int(day), hour, minute, second, tzinfo=timezone.utc)
    except (ValueError, OverflowError):
        # 31/02, 25:00 and friends
        return None


def _parse_iso(raw: str) -> Optional[datetime]:
    ts = pd.to_datetime(raw, format="ISO8601", utc=True, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def normalize_date(
    raw: Optional[str],
    policy: DatePolicy = DatePolicy.STRICT,
    *,
    fallback: datetime = EPOCH_PLACEHOLDER,
) -> Optional[datetime]:
    """
    Parse a provider date/time string into a tz-aware UTC datetime.

    - STRICT: ``dd/mm/yy[yy] [HH:MM[:SS]]`` only. Returns None on any malformed
      component or a year outside [2000, 2100]; callers pick their own fallback.
    - LENIENT: ISO-8601 first, then the STRICT token parser; returns `fallback`
      (the epoch placeholder by default) when both fail. Never returns None.
    """
    text = raw.strip() if isinstance(raw, str) else ""

    if policy is DatePolicy.STRICT:
        return _parse_tokens(text) if text else None

    if not text:
        return fallback
    return _parse_iso(text) or _parse_tokens(text) or fallback


def format_display_date(value: datetime) -> str:
    """Display form used for estimated delivery: ISO calendar date."""
    return value.date().isoformat()


__all__ = [
    "DatePolicy",
    "EPOCH_PLACEHOLDER",
    "normalize_date",
    "format_display_date",
]
