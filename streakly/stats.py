"""Derived stats — streaks, the 7-day window, and aggregate counters.

Pure functions. Nothing here reads storage or holds state; every result is
recomputed from the habit list and a reference date.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone, timedelta

from streakly.config import TIMEZONE_OFFSET_HOURS

TZ = timezone(timedelta(hours=TIMEZONE_OFFSET_HOURS))

# Fixed English labels so rendering does not depend on process locale.
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class DayCell:
    date: date
    weekday: str        # "Mon" … "Sun"
    day_of_month: int


@dataclass(frozen=True)
class Stats:
    total: int = 0
    completed_today: int = 0
    best_streak: int = 0


def today() -> date:
    """Current calendar date in the configured offset."""
    return datetime.now(TZ).date()


def streak(completed_dates, as_of: date) -> int:
    """Count consecutive completed days walking back from as_of (inclusive).

    0 when as_of itself is not completed.
    """
    count = 0
    check = as_of
    while check in completed_dates:
        count += 1
        check -= timedelta(days=1)
    return count


def last_7_days(as_of: date) -> list[DayCell]:
    """as_of-6 … as_of, oldest first."""
    days = []
    for i in range(6, -1, -1):
        d = as_of - timedelta(days=i)
        days.append(DayCell(date=d, weekday=_WEEKDAYS[d.weekday()], day_of_month=d.day))
    return days


def aggregate(habits, as_of: date) -> Stats:
    return Stats(
        total=len(habits),
        completed_today=sum(1 for h in habits if h.is_completed(as_of)),
        best_streak=max((streak(h.completed_dates, as_of) for h in habits), default=0),
    )


def summary(habits, as_of: date) -> str:
    """One-line summary, e.g. "2/3 habits done today, 5-day Reading streak"."""
    if not habits:
        return ""
    stats = aggregate(habits, as_of)
    parts = [f"{stats.completed_today}/{stats.total} habits done today"]

    # Top streak (≥2 days); first habit wins ties
    top = None
    for h in habits:
        days = streak(h.completed_dates, as_of)
        if days >= 2 and (top is None or days > top[1]):
            top = (h.name, days)
    if top:
        parts.append(f"{top[1]}-day {top[0]} streak")
    return ", ".join(parts)
