"""
Core Module - Entity model and shared helpers.

All feature modules (syllabus, scheduling, habits, flashcards, store)
import their entities from here rather than redefining shapes.
"""

from studydesk.core.models import (
    Bookmark,
    CardStatus,
    DashboardState,
    Deck,
    Flashcard,
    FocusSession,
    Habit,
    Resource,
    ResourceType,
    Revision,
    RevisionStatus,
    SyllabusTopic,
    Task,
    TopicStatus,
    new_id,
)

__all__ = [
    "Bookmark",
    "CardStatus",
    "DashboardState",
    "Deck",
    "Flashcard",
    "FocusSession",
    "Habit",
    "Resource",
    "ResourceType",
    "Revision",
    "RevisionStatus",
    "SyllabusTopic",
    "Task",
    "TopicStatus",
    "new_id",
]
