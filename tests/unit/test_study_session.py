"""
Unit tests for the flashcard study session.

Tests the reveal/rate state machine, completion signalling and write-back
to the store.
"""

import random
from unittest.mock import Mock

import pytest

from studydesk.core.models import CardStatus, Deck
from studydesk.errors import SessionStateError
from studydesk.flashcards.session import SessionPhase, StudySession


class TestSessionStart:
    """Tests for session construction."""

    def test_starts_unanswered(self, sample_deck):
        session = StudySession(sample_deck, on_rate=Mock(), rng=random.Random(1))
        assert session.phase is SessionPhase.UNANSWERED
        assert session.position == 1
        assert session.total == 3

    def test_shuffle_is_a_permutation(self, sample_deck):
        session = StudySession(sample_deck, on_rate=Mock(), rng=random.Random(7))
        assert sorted(c.id for c in session.cards) == ["c1", "c2", "c3"]

    def test_seeded_shuffle_is_reproducible(self, sample_deck):
        first = StudySession(sample_deck, on_rate=Mock(), rng=random.Random(42))
        second = StudySession(sample_deck, on_rate=Mock(), rng=random.Random(42))
        assert first.cards == second.cards

    def test_empty_deck_is_complete(self):
        """An empty deck starts complete and never fires a rating."""
        on_rate = Mock()
        session = StudySession(Deck(id="d0", title="Empty"), on_rate=on_rate)
        assert session.is_complete
        assert session.started_complete
        assert session.current is None
        on_rate.assert_not_called()


class TestTransitions:
    """Tests for the state machine."""

    def test_reveal_then_rate_advances(self, sample_deck):
        session = StudySession(sample_deck, on_rate=Mock(), rng=random.Random(1))
        first = session.current

        assert session.reveal() == first
        assert session.phase is SessionPhase.REVEALED

        outcome = session.rate(CardStatus.MASTERED)
        assert outcome.card == first
        assert outcome.advanced
        assert not outcome.completed
        assert session.phase is SessionPhase.UNANSWERED
        assert session.position == 2

    def test_rate_before_reveal_fails(self, sample_deck):
        session = StudySession(sample_deck, on_rate=Mock())
        with pytest.raises(SessionStateError):
            session.rate(CardStatus.MASTERED)

    def test_double_reveal_fails(self, sample_deck):
        session = StudySession(sample_deck, on_rate=Mock())
        session.reveal()
        with pytest.raises(SessionStateError):
            session.reveal()

    def test_new_is_not_a_rating(self, sample_deck):
        session = StudySession(sample_deck, on_rate=Mock())
        session.reveal()
        with pytest.raises(ValueError):
            session.rate(CardStatus.NEW)
        assert session.phase is SessionPhase.REVEALED

    def test_actions_after_complete_fail(self):
        session = StudySession(Deck(id="d0", title="Empty"), on_rate=Mock())
        with pytest.raises(SessionStateError):
            session.reveal()


class TestFullPass:
    """Tests for a complete pass over a deck."""

    def test_each_card_rated_once_and_completion_fires_once(self, sample_deck):
        on_rate = Mock()
        session = StudySession(sample_deck, on_rate=on_rate, rng=random.Random(3))

        outcomes = []
        while not session.is_complete:
            session.reveal()
            outcomes.append(session.rate(CardStatus.LEARNING))

        assert [o.completed for o in outcomes] == [False, False, True]
        assert not outcomes[-1].advanced
        rated = [c.args[1] for c in on_rate.call_args_list]
        assert sorted(rated) == ["c1", "c2", "c3"]
        assert all(c.args[0] == "d1" for c in on_rate.call_args_list)

    def test_writes_back_to_store(self, store, sample_deck):
        """Every card ends learning or mastered with lastReviewed set."""
        deck = store.add_deck("Polity")
        for card in sample_deck.cards:
            store.add_flashcard(deck.id, card.front, card.back)

        session = StudySession(
            store.find_deck(deck.id),
            on_rate=store.update_flashcard_status,
            rng=random.Random(5),
        )
        ratings = [CardStatus.MASTERED, CardStatus.LEARNING, CardStatus.MASTERED]
        for rating in ratings:
            session.reveal()
            session.rate(rating)

        cards = store.find_deck(deck.id).cards
        assert all(c.status in (CardStatus.LEARNING, CardStatus.MASTERED) for c in cards)
        assert all(c.last_reviewed == "2025-01-01T09:30:00.000Z" for c in cards)
        assert sum(1 for c in cards if c.status is CardStatus.MASTERED) == 2

    def test_deck_changes_do_not_affect_session(self, store):
        """Cards added mid-session are not drawn."""
        deck = store.add_deck("Polity")
        store.add_flashcard(deck.id, "Q1", "A1")
        session = StudySession(store.find_deck(deck.id), on_rate=store.update_flashcard_status)

        store.add_flashcard(deck.id, "Q2", "A2")
        session.reveal()
        outcome = session.rate(CardStatus.MASTERED)

        assert outcome.completed
        assert session.total == 1

    def test_non_empty_deck_did_not_start_complete(self, sample_deck):
        """Only an empty deck is flagged as complete from the start."""
        session = StudySession(sample_deck, on_rate=Mock(), rng=random.Random(2))
        while not session.is_complete:
            session.reveal()
            session.rate(CardStatus.MASTERED)
        assert not session.started_complete
