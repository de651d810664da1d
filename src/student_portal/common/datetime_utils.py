from __future__ import annotations

from datetime import date, datetime


def today_weekday_name(today: date | None = None) -> str:
    """English weekday name, e.g. ``Monday``."""
    return (today or now_local().date()).strftime("%A")


def now_local() -> datetime:
    """Current local time.

    Wrapped so tests can patch it.
    """
    return datetime.now()
