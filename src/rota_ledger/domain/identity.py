"""Naming rules that decide when two event rows are the same logical event."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

# Remote rows are titled "M/D Name" (e.g. "1/14 Sunday Service").
_DATE_TOKEN = re.compile(r"^\s*\d{1,2}/\d{1,2}\s+")


def strip_date_token(name: str) -> str:
    stripped = _DATE_TOKEN.sub("", name, count=1).strip()
    return stripped or name.strip()


def name_key(name: str) -> str:
    """Comparable form of a display name: date token removed, whitespace collapsed, case-folded."""

    return " ".join(strip_date_token(name).split()).casefold()


def make_logical_id(day: date, name: str) -> str:
    return f"{day.isoformat()}:{name_key(name)}"


def date_from_logical_id(logical_id: str) -> Optional[date]:
    head, _, _ = logical_id.partition(":")
    try:
        return date.fromisoformat(head)
    except ValueError:
        return None


def weekday_index(day: date) -> int:
    """Weekday numbered 0 (Sunday) through 6 (Saturday)."""

    return (day.weekday() + 1) % 7


__all__ = ["date_from_logical_id", "make_logical_id", "name_key", "strip_date_token", "weekday_index"]
