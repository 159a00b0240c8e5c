"""
Revision Scheduler.

Fixed-cadence spaced repetition for syllabus topics: every time a topic is
marked Reading or Revised it gets a fresh plan of four revisions at
+1, +3, +7 and +30 days. Rescheduling replaces the topic's pending plan;
completed revisions are kept as history.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta

from loguru import logger

from studydesk.core.dates import iso_date
from studydesk.core.models import Revision, RevisionStatus, new_id

REVISION_INTERVALS: tuple[int, ...] = (1, 3, 7, 30)


@dataclass
class RevisionScheduler:
    """
    Computes and reconciles revision plans.

    Args:
        intervals: Day offsets of one plan
        id_factory: Id generator (injectable for tests)
    """

    intervals: tuple[int, ...] = REVISION_INTERVALS
    id_factory: Callable[[], str] = new_id

    def plan(self, topic_id: str, today: date) -> list[Revision]:
        """Build one batch of pending revisions starting from ``today``."""
        return [
            Revision(
                id=self.id_factory(),
                topic_id=topic_id,
                date=iso_date(today + timedelta(days=days)),
                status=RevisionStatus.PENDING,
            )
            for days in self.intervals
        ]

    def schedule(
        self,
        revisions: Sequence[Revision],
        topic_id: str,
        today: date,
    ) -> list[Revision]:
        """
        Replace the pending plan of ``topic_id``.

        Returns:
            New revision list: all revisions except this topic's pending
            ones, followed by the new batch.
        """
        kept = [r for r in revisions if r.topic_id != topic_id or not r.is_pending]
        dropped = len(revisions) - len(kept)
        batch = self.plan(topic_id, today)
        logger.debug(
            "Scheduled {} revisions for {} (replaced {} pending)",
            len(batch),
            topic_id,
            dropped,
        )
        return kept + batch


def complete(revisions: Sequence[Revision], revision_id: str) -> list[Revision]:
    """Mark a revision completed. Unknown or already completed ids are no-ops."""
    return [
        replace(r, status=RevisionStatus.COMPLETED) if r.id == revision_id and r.is_pending else r
        for r in revisions
    ]


def due(revisions: Sequence[Revision], today: date) -> list[Revision]:
    """Pending revisions dated today or earlier, most overdue first."""
    cutoff = iso_date(today)
    pending = [r for r in revisions if r.is_pending and r.date <= cutoff]
    return sorted(pending, key=lambda r: r.date)


def upcoming(revisions: Sequence[Revision], today: date, days: int = 7) -> list[Revision]:
    """Pending revisions falling in the next ``days`` days (excluding today)."""
    start = iso_date(today)
    end = iso_date(today + timedelta(days=days))
    pending = [r for r in revisions if r.is_pending and start < r.date <= end]
    return sorted(pending, key=lambda r: r.date)


def pending_for_topic(revisions: Sequence[Revision], topic_id: str) -> list[Revision]:
    return [r for r in revisions if r.topic_id == topic_id and r.is_pending]
