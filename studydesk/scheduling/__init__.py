"""Spaced-repetition revision scheduling."""

from studydesk.scheduling.revisions import (
    REVISION_INTERVALS,
    RevisionScheduler,
    complete,
    due,
    pending_for_topic,
    upcoming,
)

__all__ = [
    "REVISION_INTERVALS",
    "RevisionScheduler",
    "complete",
    "due",
    "pending_for_topic",
    "upcoming",
]
