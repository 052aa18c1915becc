# week_resolver.py
#
# Works out which league week we are in from the sheet's "today" cell and the
# WeekDates tab.

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional

from models import WeekDate  # type: ignore[import]

logger = logging.getLogger(__name__)

DEFAULT_WEEK = 1


def parse_sheet_date(value: str) -> Optional[date]:
    """
    Parse a date as the league sheet writes it.

    Accepts DD/MM/YYYY, DD-MM-YYYY, YYYY-MM-DD and full ISO datetimes.
    Returns None when the value can't be read.
    """
    text = (value or "").strip()
    if not text:
        return None

    if "/" in text:
        parts = text.split("/")
        if len(parts) == 3:
            try:
                day, month, year = (int(p) for p in parts)
                return date(year, month, day)
            except ValueError:
                return None
        return None

    if "-" in text and "T" not in text:
        parts = text.split("-")
        if len(parts) == 3 and len(parts[0]) != 4:
            try:
                day, month, year = (int(p) for p in parts)
                return date(year, month, day)
            except ValueError:
                return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _sorted_weeks(week_dates: Iterable[WeekDate]) -> List[WeekDate]:
    return sorted(week_dates, key=lambda w: w.week)


def active_week(today: date, week_dates: Iterable[WeekDate]) -> int:
    """The week whose start..finish range contains today (week 1 otherwise)."""
    for w in _sorted_weeks(week_dates):
        start = parse_sheet_date(w.start_date)
        finish = parse_sheet_date(w.finish_date)
        if start is None or finish is None:
            continue
        if start <= today <= finish:
            return w.week
    return DEFAULT_WEEK


def selection_week(today: date, week_dates: Iterable[WeekDate]) -> int:
    """
    The week managers should be picking for.

    Once a week has started its lineup is locked, so selections move on to
    the following week. In the final week there is nothing after it, so the
    final week is returned; before the season starts it's the first week.
    """
    weeks = _sorted_weeks(week_dates)
    if not weeks:
        return DEFAULT_WEEK

    latest_started: Optional[int] = None
    for i, w in enumerate(weeks):
        start = parse_sheet_date(w.start_date)
        if start is None:
            logger.warning("Week %s has an unreadable start date %r", w.week, w.start_date)
            continue
        if today >= start:
            latest_started = i

    if latest_started is None:
        return weeks[0].week
    if latest_started + 1 < len(weeks):
        return weeks[latest_started + 1].week
    return weeks[latest_started].week
