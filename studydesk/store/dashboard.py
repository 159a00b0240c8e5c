"""
Dashboard State Store.

The single owner of the dashboard state graph. Every mutator:
1. builds the next version of the affected collection (never in place)
2. swaps it into ``self.state``
3. persists the full snapshot synchronously (best effort)

Not-found ids are silent no-ops. Input validation happens at the boundary
(CLI, ``studydesk.validation``); the store trusts its arguments.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

from loguru import logger

from studydesk.core.dates import iso_date, iso_timestamp, utc_now
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
    Task,
    TopicStatus,
    new_id,
)
from studydesk.habits import toggle
from studydesk.scheduling.revisions import RevisionScheduler, complete
from studydesk.store.persistence import JsonFileStorage, KeyValueStorage, SnapshotRepository
from studydesk.syllabus.defaults import default_state
from studydesk.syllabus.tree import update_status

# Status changes that (re)start the revision cycle of a topic
SCHEDULING_TRIGGERS = frozenset({TopicStatus.READING, TopicStatus.REVISED})

BOOKMARK_FIELDS = frozenset({"title", "link", "date", "note", "source"})


class DashboardStore:
    """
    Explicit state store (one per process, no ambient singleton).

    Args:
        repository: Snapshot persistence
        state: Initial state (defaults to the built-in first-run state)
        clock: Returns the current time (injectable for tests)
        scheduler: Revision scheduler
        id_factory: Id generator for new entities
    """

    def __init__(
        self,
        repository: SnapshotRepository,
        state: DashboardState | None = None,
        clock: Callable[[], datetime] = utc_now,
        scheduler: RevisionScheduler | None = None,
        id_factory: Callable[[], str] = new_id,
    ):
        self.repository = repository
        self.state = state if state is not None else default_state()
        self.clock = clock
        self.id_factory = id_factory
        self.scheduler = scheduler or RevisionScheduler(id_factory=id_factory)

    @classmethod
    def load(
        cls,
        repository: SnapshotRepository,
        clock: Callable[[], datetime] = utc_now,
        **kwargs: Any,
    ) -> DashboardStore:
        """Create a store from the persisted snapshot, or first-run defaults."""
        state = repository.load()
        if state is None:
            logger.info("Starting with default dashboard state")
        return cls(repository, state=state, clock=clock, **kwargs)

    @classmethod
    def open(cls, settings: Any, storage: KeyValueStorage | None = None) -> DashboardStore:
        """
        Boot the store from application settings.

        Args:
            settings: ``config.Settings`` instance
            storage: Override storage (defaults to JSON files in ``settings.data_dir``)
        """
        storage = storage or JsonFileStorage(Path(settings.data_dir))
        return cls.load(SnapshotRepository(storage, settings.dashboard_key))

    # =========================================================================
    # Internals
    # =========================================================================

    def _commit(self, **changes: Any) -> None:
        self.state = replace(self.state, **changes)
        self.repository.save(self.state)

    def today(self) -> date:
        return self.clock().date()

    def now_iso(self) -> str:
        return iso_timestamp(self.clock())

    # =========================================================================
    # Whole-state
    # =========================================================================

    def restore(self, state: DashboardState) -> None:
        """Replace the entire state (import, no merge) and persist it."""
        self.state = state
        self.repository.save(self.state)
        logger.info("Dashboard state restored")

    def save(self) -> bool:
        return self.repository.save(self.state)

    # =========================================================================
    # Syllabus & Revisions
    # =========================================================================

    def update_syllabus_status(self, topic_id: str, status: TopicStatus) -> bool:
        """
        Set a topic's status.

        Moving a topic to Reading or Revised also replaces its pending
        revision plan. Returns whether the topic was found.
        """
        status = TopicStatus(status)
        syllabus, found = update_status(self.state.syllabus, topic_id, status)
        if not found:
            logger.debug("update_syllabus_status: unknown topic {}", topic_id)
            return False

        changes: dict[str, Any] = {"syllabus": list(syllabus)}
        if status in SCHEDULING_TRIGGERS:
            changes["revisions"] = self.scheduler.schedule(
                self.state.revisions, topic_id, self.today()
            )
        self._commit(**changes)
        return True

    def schedule_revision(self, topic_id: str) -> list[Revision]:
        """Replace the pending plan of ``topic_id``; returns the new batch."""
        revisions = self.scheduler.schedule(self.state.revisions, topic_id, self.today())
        self._commit(revisions=revisions)
        return [r for r in revisions if r.topic_id == topic_id and r.is_pending]

    def complete_revision(self, revision_id: str) -> None:
        self._commit(revisions=complete(self.state.revisions, revision_id))

    # =========================================================================
    # Habits
    # =========================================================================

    def add_habit(self, name: str) -> Habit:
        habit = Habit(id=self.id_factory(), name=name)
        self._commit(habits=[*self.state.habits, habit])
        return habit

    def delete_habit(self, habit_id: str) -> None:
        self._commit(habits=[h for h in self.state.habits if h.id != habit_id])

    def toggle_habit(self, habit_id: str, day: str | None = None) -> None:
        """Toggle completion of a habit on ``day`` (ISO date, defaults to today)."""
        day = day or iso_date(self.today())
        self._commit(
            habits=[toggle(h, day) if h.id == habit_id else h for h in self.state.habits]
        )

    # =========================================================================
    # Tasks
    # =========================================================================

    def add_task(self, text: str) -> Task:
        task = Task(id=self.id_factory(), text=text)
        self._commit(tasks=[*self.state.tasks, task])
        return task

    def toggle_task(self, task_id: str) -> None:
        self._commit(
            tasks=[
                replace(t, completed=not t.completed) if t.id == task_id else t
                for t in self.state.tasks
            ]
        )

    def update_task(self, task_id: str, text: str) -> None:
        self._commit(
            tasks=[replace(t, text=text) if t.id == task_id else t for t in self.state.tasks]
        )

    def delete_task(self, task_id: str) -> None:
        self._commit(tasks=[t for t in self.state.tasks if t.id != task_id])

    # =========================================================================
    # Resources & Focus
    # =========================================================================

    def add_resource(
        self,
        topic_id: str,
        type: ResourceType,
        content: str,
        title: str | None = None,
    ) -> Resource:
        resource = Resource(
            id=self.id_factory(),
            topic_id=topic_id,
            type=ResourceType(type),
            content=content,
            title=title,
        )
        self._commit(resources=[*self.state.resources, resource])
        return resource

    def update_resource(self, resource_id: str, content: str) -> None:
        """Replace the content of a resource (title and type are kept)."""
        self._commit(
            resources=[
                replace(r, content=content) if r.id == resource_id else r
                for r in self.state.resources
            ]
        )

    def delete_resource(self, resource_id: str) -> None:
        self._commit(resources=[r for r in self.state.resources if r.id != resource_id])

    def log_focus_session(self, topic_id: str, duration: int) -> FocusSession:
        session = FocusSession(
            id=self.id_factory(),
            topic_id=topic_id,
            duration=duration,
            date=self.now_iso(),
        )
        self._commit(focus_sessions=[*self.state.focus_sessions, session])
        return session

    # =========================================================================
    # Bookmarks
    # =========================================================================

    def add_bookmark(
        self,
        title: str,
        link: str,
        id: str | None = None,
        note: str | None = None,
        source: str | None = None,
    ) -> Bookmark:
        bookmark = Bookmark(
            id=id or self.id_factory(),
            title=title,
            link=link,
            date=self.now_iso(),
            note=note,
            source=source,
        )
        self._commit(bookmarks=[*self.state.bookmarks, bookmark])
        return bookmark

    def remove_bookmark(self, key: str) -> None:
        """Remove every bookmark whose id or link equals ``key``."""
        self._commit(
            bookmarks=[b for b in self.state.bookmarks if b.id != key and b.link != key]
        )

    def update_bookmark(self, bookmark_id: str, **fields: Any) -> None:
        """Shallow-merge ``fields`` into the bookmark with ``bookmark_id``."""
        unknown = set(fields) - BOOKMARK_FIELDS
        if unknown:
            raise TypeError(f"Unknown bookmark fields: {sorted(unknown)}")
        self._commit(
            bookmarks=[
                replace(b, **fields) if b.id == bookmark_id else b for b in self.state.bookmarks
            ]
        )

    def is_bookmarked(self, link: str) -> bool:
        return any(b.link == link or b.id == link for b in self.state.bookmarks)

    # =========================================================================
    # Decks & Flashcards
    # =========================================================================

    def find_deck(self, deck_id: str) -> Deck | None:
        return next((d for d in self.state.decks if d.id == deck_id), None)

    def add_deck(self, title: str, description: str | None = None) -> Deck:
        deck = Deck(id=self.id_factory(), title=title, description=description)
        self._commit(decks=[*self.state.decks, deck])
        return deck

    def delete_deck(self, deck_id: str) -> None:
        self._commit(decks=[d for d in self.state.decks if d.id != deck_id])

    def add_flashcard(self, deck_id: str, front: str, back: str) -> Flashcard | None:
        """Append a new card to a deck; None if the deck does not exist."""
        if self.find_deck(deck_id) is None:
            return None
        card = Flashcard(id=self.id_factory(), deck_id=deck_id, front=front, back=back)
        self._commit(
            decks=[
                replace(d, cards=(*d.cards, card)) if d.id == deck_id else d
                for d in self.state.decks
            ]
        )
        return card

    def update_flashcard_status(self, deck_id: str, card_id: str, status: CardStatus) -> None:
        """Record a rating on the canonical card and stamp ``lastReviewed``."""
        status = CardStatus(status)
        reviewed = self.now_iso()

        def _rate(deck: Deck) -> Deck:
            return replace(
                deck,
                cards=tuple(
                    replace(c, status=status, last_reviewed=reviewed) if c.id == card_id else c
                    for c in deck.cards
                ),
            )

        self._commit(decks=[_rate(d) if d.id == deck_id else d for d in self.state.decks])
