"""
Dashboard entity model.

Every entity is an immutable dataclass; collections inside entities are
tuples so a state update always produces new objects along the changed path
and shares everything else.

The ``to_dict``/``from_dict`` pair maps to the persisted document, which keeps
the camelCase keys of the first storage layout (``topicId``,
``completedDates``, ``lastReviewed`` ...). ``from_dict`` trusts its input;
validation of untrusted documents lives in ``studydesk.store.schema``.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def new_id() -> str:
    """Generate a short random identifier."""
    return uuid.uuid4().hex[:12]


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# Enumerations
# =============================================================================


class TopicStatus(str, Enum):
    """Reading progress of a syllabus topic."""

    NOT_STARTED = "Not Started"
    READING = "Reading"
    REVISED = "Revised"
    MASTERED = "Mastered"


class RevisionStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class ResourceType(str, Enum):
    NOTE = "note"
    LINK = "link"


class CardStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


# =============================================================================
# Syllabus
# =============================================================================


@dataclass(frozen=True)
class SyllabusTopic:
    """
    A node of the syllabus tree.

    A node is a leaf iff it has no subtopics. Only leaves count toward
    completion percentages.
    """

    id: str
    title: str
    status: TopicStatus = TopicStatus.NOT_STARTED
    subtopics: tuple[SyllabusTopic, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return not self.subtopics

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
        }
        if self.subtopics:
            data["subtopics"] = [child.to_dict() for child in self.subtopics]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SyllabusTopic:
        return cls(
            id=data["id"],
            title=data["title"],
            status=TopicStatus(data.get("status", TopicStatus.NOT_STARTED.value)),
            subtopics=tuple(cls.from_dict(child) for child in data.get("subtopics") or ()),
        )


# =============================================================================
# Daily Tracking
# =============================================================================


@dataclass(frozen=True)
class Habit:
    """A daily habit with the ISO dates (YYYY-MM-DD) it was completed on."""

    id: str
    name: str
    completed_dates: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "completedDates": list(self.completed_dates)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Habit:
        return cls(
            id=data["id"],
            name=data["name"],
            completed_dates=tuple(data.get("completedDates") or ()),
        )


@dataclass(frozen=True)
class Task:
    id: str
    text: str
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Task:
        return cls(id=data["id"], text=data["text"], completed=bool(data.get("completed", False)))


@dataclass(frozen=True)
class FocusSession:
    """A finished focus block. Append-only."""

    id: str
    topic_id: str
    duration: int  # minutes
    date: str  # ISO datetime

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "topicId": self.topic_id, "duration": self.duration, "date": self.date}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FocusSession:
        return cls(
            id=data["id"],
            topic_id=data["topicId"],
            duration=data["duration"],
            date=data["date"],
        )


# =============================================================================
# Revision & Resources
# =============================================================================


@dataclass(frozen=True)
class Revision:
    """A single spaced-repetition revision slot for a topic."""

    id: str
    topic_id: str
    date: str  # ISO date YYYY-MM-DD
    status: RevisionStatus = RevisionStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status is RevisionStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "topicId": self.topic_id,
            "date": self.date,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Revision:
        return cls(
            id=data["id"],
            topic_id=data["topicId"],
            date=data["date"],
            status=RevisionStatus(data.get("status", RevisionStatus.PENDING.value)),
        )


@dataclass(frozen=True)
class Resource:
    """A note (markdown) or link (URL) attached to a topic."""

    id: str
    topic_id: str
    type: ResourceType
    content: str
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "topicId": self.topic_id,
            "type": self.type.value,
            "content": self.content,
            "title": self.title,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Resource:
        return cls(
            id=data["id"],
            topic_id=data["topicId"],
            type=ResourceType(data["type"]),
            content=data["content"],
            title=data.get("title"),
        )


@dataclass(frozen=True)
class Bookmark:
    """
    A saved article link.

    Legacy records migrated from the URL-only format use the link as id.
    """

    id: str
    title: str
    link: str
    date: str  # ISO datetime
    note: str | None = None
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "date": self.date,
            "note": self.note,
            "source": self.source,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Bookmark:
        return cls(
            id=data["id"],
            title=data["title"],
            link=data["link"],
            date=data["date"],
            note=data.get("note"),
            source=data.get("source"),
        )


# =============================================================================
# Flashcards
# =============================================================================


@dataclass(frozen=True)
class Flashcard:
    id: str
    deck_id: str
    front: str
    back: str
    last_reviewed: str | None = None
    status: CardStatus = CardStatus.NEW

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "deckId": self.deck_id,
            "front": self.front,
            "back": self.back,
            "lastReviewed": self.last_reviewed,
            "status": self.status.value,
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Flashcard:
        return cls(
            id=data["id"],
            deck_id=data["deckId"],
            front=data["front"],
            back=data["back"],
            last_reviewed=data.get("lastReviewed"),
            status=CardStatus(data.get("status", CardStatus.NEW.value)),
        )


@dataclass(frozen=True)
class Deck:
    """A titled deck that owns its cards."""

    id: str
    title: str
    description: str | None = None
    cards: tuple[Flashcard, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "cards": [card.to_dict() for card in self.cards],
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Deck:
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description"),
            cards=tuple(Flashcard.from_dict(c) for c in data.get("cards") or ()),
        )


# =============================================================================
# State Root
# =============================================================================


@dataclass
class DashboardState:
    """
    The complete state graph persisted as one snapshot.

    Collections are replaced, never mutated in place, so a previously
    handed-out list stays valid after a store operation.
    """

    syllabus: list[SyllabusTopic] = field(default_factory=list)
    habits: list[Habit] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    revisions: list[Revision] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)
    focus_sessions: list[FocusSession] = field(default_factory=list)
    bookmarks: list[Bookmark] = field(default_factory=list)
    decks: list[Deck] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted document layout."""
        return {
            "syllabus": [t.to_dict() for t in self.syllabus],
            "habits": [h.to_dict() for h in self.habits],
            "tasks": [t.to_dict() for t in self.tasks],
            "revisions": [r.to_dict() for r in self.revisions],
            "resources": [r.to_dict() for r in self.resources],
            "focusSessions": [s.to_dict() for s in self.focus_sessions],
            "bookmarks": [b.to_dict() for b in self.bookmarks],
            "decks": [d.to_dict() for d in self.decks],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DashboardState:
        return cls(
            syllabus=[SyllabusTopic.from_dict(t) for t in data.get("syllabus", [])],
            habits=[Habit.from_dict(h) for h in data.get("habits", [])],
            tasks=[Task.from_dict(t) for t in data.get("tasks", [])],
            revisions=[Revision.from_dict(r) for r in data.get("revisions", [])],
            resources=[Resource.from_dict(r) for r in data.get("resources", [])],
            focus_sessions=[FocusSession.from_dict(s) for s in data.get("focusSessions", [])],
            bookmarks=[Bookmark.from_dict(b) for b in data.get("bookmarks", [])],
            decks=[Deck.from_dict(d) for d in data.get("decks", [])],
        )
