"""
Habit Tracker.

Per-day completion toggling and the rolling consistency indicator shown
next to the habit list.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date, timedelta

from studydesk.core.dates import days_back, iso_date, percent
from studydesk.core.models import Habit

DEFAULT_WINDOW_DAYS = 14


def toggle(habit: Habit, day: str) -> Habit:
    """Add ``day`` to the completed set, or remove it if already present."""
    if day in habit.completed_dates:
        dates = tuple(d for d in habit.completed_dates if d != day)
    else:
        dates = (*habit.completed_dates, day)
    return replace(habit, completed_dates=dates)


def completion_rate(habits: Sequence[Habit], day: str) -> int:
    """Percentage of habits completed on ``day``; 0 when there are no habits."""
    done = sum(1 for h in habits if day in h.completed_dates)
    return percent(done, len(habits))


def rolling_window(today: date, days: int = DEFAULT_WINDOW_DAYS) -> list[str]:
    """``[today - (days-1) .. today]`` as ISO dates."""
    return days_back(today, days)


def consistency(
    habits: Sequence[Habit],
    today: date,
    days: int = DEFAULT_WINDOW_DAYS,
) -> list[tuple[str, int]]:
    """(date, completion rate) for each day of the rolling window."""
    return [(day, completion_rate(habits, day)) for day in rolling_window(today, days)]


def current_streak(habit: Habit, today: date) -> int:
    """
    Consecutive completed days ending today.

    If today is not done yet the streak is counted up to yesterday, so an
    unfinished morning does not read as a broken streak.
    """
    done = set(habit.completed_dates)
    cursor = today if iso_date(today) in done else today - timedelta(days=1)
    streak = 0
    while iso_date(cursor) in done:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
