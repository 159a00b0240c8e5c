"""
Flashcard Study Session.

A session draws a shuffled copy of a deck's cards and walks them one at a
time:

    UNANSWERED --reveal()--> REVEALED --rate()--> UNANSWERED (next card)
                                              \\-> COMPLETE   (after last card)

Ratings are written back through a callback to the canonical deck in the
store, never to the session's own snapshot. The drawn order is fixed at
start; later changes to the deck do not resize or reorder it.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from studydesk.core.models import CardStatus, Deck, Flashcard
from studydesk.errors import SessionStateError

# Called as on_rate(deck_id, card_id, status)
RateCallback = Callable[[str, str, CardStatus], None]

RATING_CHOICES = (CardStatus.LEARNING, CardStatus.MASTERED)


class SessionPhase(str, Enum):
    """Where the session is in the current card's cycle."""

    UNANSWERED = "unanswered"
    REVEALED = "revealed"
    COMPLETE = "complete"


@dataclass(frozen=True)
class RateOutcome:
    """Result of rating one card."""

    card: Flashcard
    status: CardStatus
    advanced: bool  # moved on to another card
    completed: bool  # True only for the rating that finished the session


class StudySession:
    """
    Runs one pass over a deck.

    A session over an empty deck starts in COMPLETE with
    ``started_complete`` set; no rating is possible, so no RateOutcome ever
    reports ``completed``. Callers check ``started_complete`` (or
    ``is_complete``) right after construction.

    Args:
        deck: Deck to study (its cards are copied at construction)
        on_rate: Write-back callback, normally DashboardStore.update_flashcard_status
        rng: Random source for the shuffle (pass a seeded Random in tests)
    """

    def __init__(
        self,
        deck: Deck,
        on_rate: RateCallback,
        rng: random.Random | None = None,
    ):
        self.deck_id = deck.id
        self.deck_title = deck.title
        self._on_rate = on_rate

        cards = list(deck.cards)
        (rng or random.Random()).shuffle(cards)
        self._cards: tuple[Flashcard, ...] = tuple(cards)
        self._index = 0
        self._ratings: dict[str, CardStatus] = {}
        self.started_complete = not cards
        self.phase = SessionPhase.COMPLETE if self.started_complete else SessionPhase.UNANSWERED

        logger.debug("Study session started: deck={}, cards={}", deck.id, len(cards))

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def cards(self) -> tuple[Flashcard, ...]:
        """The drawn order."""
        return self._cards

    @property
    def total(self) -> int:
        return len(self._cards)

    @property
    def position(self) -> int:
        """1-based number of the current card (``total`` once complete)."""
        return min(self._index + 1, self.total)

    @property
    def is_complete(self) -> bool:
        return self.phase is SessionPhase.COMPLETE

    @property
    def current(self) -> Flashcard | None:
        if self.is_complete:
            return None
        return self._cards[self._index]

    @property
    def ratings(self) -> dict[str, CardStatus]:
        """Card id -> status given in this session."""
        return dict(self._ratings)

    # =========================================================================
    # Transitions
    # =========================================================================

    def reveal(self) -> Flashcard:
        """Show the back of the current card."""
        if self.phase is not SessionPhase.UNANSWERED:
            raise SessionStateError(f"Cannot reveal in phase {self.phase.value}")
        self.phase = SessionPhase.REVEALED
        return self._cards[self._index]

    def rate(self, status: CardStatus) -> RateOutcome:
        """
        Rate the revealed card and advance.

        Args:
            status: learning ("needs practice") or mastered ("got it")

        Returns:
            RateOutcome; ``completed`` is True exactly once per session.

        Raises:
            SessionStateError: If the card was not revealed or the session is over
            ValueError: If ``status`` is not a rating choice
        """
        if self.phase is not SessionPhase.REVEALED:
            raise SessionStateError(f"Cannot rate in phase {self.phase.value}")
        status = CardStatus(status)
        if status not in RATING_CHOICES:
            raise ValueError(f"Rating must be one of {[s.value for s in RATING_CHOICES]}")

        card = self._cards[self._index]
        self._on_rate(self.deck_id, card.id, status)
        self._ratings[card.id] = status

        self._index += 1
        if self._index >= len(self._cards):
            self.phase = SessionPhase.COMPLETE
            logger.info(
                "Study session complete: deck={}, mastered={}/{}",
                self.deck_id,
                sum(1 for s in self._ratings.values() if s is CardStatus.MASTERED),
                self.total,
            )
            return RateOutcome(card=card, status=status, advanced=False, completed=True)

        self.phase = SessionPhase.UNANSWERED
        return RateOutcome(card=card, status=status, advanced=True, completed=False)
