"""
Focus timer bookkeeping and the exam countdown.

The timer itself runs in the UI; only finished focus blocks are logged to
the store.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from enum import Enum

from studydesk.core.models import FocusSession

FOCUS_MINUTES = 25
BREAK_MINUTES = 5


class TimerMode(str, Enum):
    FOCUS = "focus"
    BREAK = "break"


def mode_minutes(mode: TimerMode) -> int:
    return FOCUS_MINUTES if mode is TimerMode.FOCUS else BREAK_MINUTES


def should_log(mode: TimerMode, topic_id: str | None) -> bool:
    """Only focus blocks tied to a topic are recorded."""
    return mode is TimerMode.FOCUS and bool(topic_id)


def focus_minutes_by_topic(sessions: Sequence[FocusSession]) -> dict[str, int]:
    """Total logged minutes per topic id, in first-seen order."""
    totals: dict[str, int] = {}
    for session in sessions:
        totals[session.topic_id] = totals.get(session.topic_id, 0) + session.duration
    return totals


def total_focus_minutes(sessions: Sequence[FocusSession], day: str | None = None) -> int:
    """Minutes logged overall, or on one ISO date."""
    return sum(s.duration for s in sessions if day is None or s.date.startswith(day))


@dataclass(frozen=True)
class Countdown:
    days: int
    hours: int
    minutes: int

    def __str__(self) -> str:
        return f"{self.days}d {self.hours}h {self.minutes}m"


def countdown(now: datetime, exam_date: date) -> Countdown:
    """
    Time left until midnight UTC of ``exam_date``.

    Clamps to zero once the exam has started.
    """
    target = datetime.combine(exam_date, time.min, tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    seconds = max(0, int((target - now).total_seconds()))
    days, rest = divmod(seconds, 86400)
    return Countdown(days=days, hours=rest // 3600, minutes=(rest % 3600) // 60)
