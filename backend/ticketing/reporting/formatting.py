"""Text formatting helpers shared by the report renderer."""

from __future__ import annotations

import calendar
from datetime import date, datetime

CURRENCY_TAG = "RM"
ELLIPSIS = "..."


def format_currency(amount: float | int | None) -> str:
    """``6000`` -> ``"RM 6,000.00"``."""
    return f"{CURRENCY_TAG} {float(amount or 0):,.2f}"


def format_percentage(value: float | int | None) -> str:
    return f"{float(value or 0):.2f}%"


def parse_date(value: date | datetime | str) -> date:
    """Accept a date, a datetime, or an ISO-8601 string (``Z`` suffix allowed)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return date.fromisoformat(text[:10])
    raise ValueError(f"Cannot interpret {value!r} as a date")


def format_date(value: date | datetime | str) -> str:
    """``2024-05-01`` -> ``"01 May 2024"``."""
    return parse_date(value).strftime("%d %b %Y")


def format_month_year(value: date | datetime | str) -> str:
    """``2024-05-01`` -> ``"May 2024"``."""
    return parse_date(value).strftime("%b %Y")


def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    return calendar.month_name[month]


def format_hour_range(hour: int) -> str:
    """``10`` -> ``"10:00 - 10:59"``."""
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be between 0 and 23, got {hour}")
    return f"{hour}:00 - {hour}:59"


def truncate(text: str | None, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, appending ``...`` when cut."""
    text = text or ""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]
