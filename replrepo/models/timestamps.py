"""Timestamp parsing shared by the row models."""

import re
from datetime import datetime
from typing import Optional


# Fractional seconds; PostgREST trims trailing zeros, so any width from 1 to 9 appears
FRACTION = re.compile(r"\.(\d+)")


def _pad_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp as returned by the data service.

    Accepts datetimes unchanged. Returns None for empty or unparseable input.
    """
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    text = FRACTION.sub(_pad_fraction, value.replace("Z", "+00:00"), count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
