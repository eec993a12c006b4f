"""Utility helpers for parsers."""
from __future__ import annotations

import re
from datetime import date

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:Z|[+-]\d{2}:\d{2})?$")


def parse_iso_date(date_str: str) -> date:
    """Convert an ``xsd:date`` (``YYYY-MM-DD`` with optional zone) to :class:`date`."""
    s = date_str.strip()
    m = _ISO_DATE.match(s)
    if not m:
        raise ValueError(f"Invalid date value '{date_str}'")
    y, mth, d = (int(g) for g in m.groups())
    return date(y, mth, d)


def format_cii_date(value: date) -> str:
    """Return ``value`` as ``CCYYMMDD``."""
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"
