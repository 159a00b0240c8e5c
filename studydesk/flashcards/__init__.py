"""Flashcard study sessions."""

from studydesk.flashcards.session import (
    RATING_CHOICES,
    RateOutcome,
    SessionPhase,
    StudySession,
)

__all__ = ["RATING_CHOICES", "RateOutcome", "SessionPhase", "StudySession"]
