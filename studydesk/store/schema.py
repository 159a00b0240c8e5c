"""
Snapshot schema and migrations.

The persisted document is untrusted: it may come from an older release, a
hand-edited file or a remote backup. Each collection is validated on its own
with pydantic models mirroring the entity layout; a collection that fails
validation falls back independently (defaults or empty) instead of failing
the whole load.

Known historical shapes:
- v1: no ``version`` key (first release layout)
- v1 bookmarks: a bare list of URL strings
- v2: current layout, ``"version": 2``
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from studydesk.core.dates import iso_timestamp, utc_now
from studydesk.core.models import (
    Bookmark,
    CardStatus,
    DashboardState,
    Deck,
    FocusSession,
    Habit,
    Resource,
    ResourceType,
    Revision,
    RevisionStatus,
    SyllabusTopic,
    Task,
    TopicStatus,
)
from studydesk.errors import SnapshotDecodeError
from studydesk.syllabus.defaults import default_habits, default_syllabus, default_tasks

SCHEMA_VERSION = 2
PAPER_COUNT = 4
MIN_SECTIONS_PER_PAPER = 4
LEGACY_BOOKMARK_TITLE = "Legacy Bookmark"

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


# ========================================
# Document Models
# ========================================


class _DocModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TopicDoc(_DocModel):
    id: str
    title: str
    status: TopicStatus = TopicStatus.NOT_STARTED
    subtopics: list[TopicDoc] | None = None


TopicDoc.model_rebuild()


class HabitDoc(_DocModel):
    id: str
    name: str
    completed_dates: list[str] = Field(default_factory=list, alias="completedDates")


class TaskDoc(_DocModel):
    id: str
    text: str
    completed: bool = False


class RevisionDoc(_DocModel):
    id: str
    topic_id: str = Field(alias="topicId")
    date: str
    status: RevisionStatus = RevisionStatus.PENDING


class ResourceDoc(_DocModel):
    id: str
    topic_id: str = Field(alias="topicId")
    type: ResourceType
    content: str
    title: str | None = None


class FocusSessionDoc(_DocModel):
    id: str
    topic_id: str = Field(alias="topicId")
    duration: int
    date: str


class BookmarkDoc(_DocModel):
    id: str
    title: str
    link: str
    date: str
    note: str | None = None
    source: str | None = None


class FlashcardDoc(_DocModel):
    id: str
    deck_id: str = Field(alias="deckId")
    front: str
    back: str
    last_reviewed: str | None = Field(default=None, alias="lastReviewed")
    status: CardStatus = CardStatus.NEW


class DeckDoc(_DocModel):
    id: str
    title: str
    description: str | None = None
    cards: list[FlashcardDoc] = Field(default_factory=list)

    @field_validator("cards", mode="before")
    @classmethod
    def _drop_invalid_cards(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return _valid_records(value, FlashcardDoc, "cards")


# ========================================
# Decoding
# ========================================


def _valid_records(raw: list[Any], model: type[M], name: str) -> list[M]:
    """Validate each element on its own; invalid records are logged and dropped."""
    adapter = TypeAdapter(model)
    kept: list[M] = []
    for index, item in enumerate(raw):
        try:
            kept.append(adapter.validate_python(item))
        except ValidationError as e:
            logger.warning("Dropping invalid '{}' record #{}: {} error(s)", name, index, e.error_count())
    return kept


def _decode_list(
    raw: Any,
    model: type[_DocModel],
    build: Callable[[dict[str, Any]], T],
    name: str,
) -> list[T] | None:
    """
    Decode one collection record by record.

    Returns None when ``raw`` is absent or not a list; otherwise the valid
    records in their stored order.
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Discarding '{}': expected a list, got {}", name, type(raw).__name__)
        return None
    return [build(doc.to_doc()) for doc in _valid_records(raw, model, name)]


def _decode_syllabus(raw: Any) -> list[SyllabusTopic]:
    # The tree is replaced wholesale, never merged
    try:
        docs = TypeAdapter(list[TopicDoc]).validate_python(raw)
    except ValidationError as e:
        if raw is not None:
            logger.warning("Discarding invalid syllabus: {} error(s)", e.error_count())
        return default_syllabus()

    topics = [SyllabusTopic.from_dict(doc.to_doc()) for doc in docs]
    if len(topics) != PAPER_COUNT or any(
        len(paper.subtopics) < MIN_SECTIONS_PER_PAPER for paper in topics
    ):
        logger.info("Stored syllabus has an outdated structure, using the built-in tree")
        return default_syllabus()
    return topics


def _decode_bookmarks(raw: Any, now: datetime) -> list[Bookmark]:
    """Current bookmark objects are kept; bare URL strings are migrated."""
    if not isinstance(raw, list):
        return []

    stamp = iso_timestamp(now)
    adapter = TypeAdapter(BookmarkDoc)
    bookmarks: list[Bookmark] = []
    migrated = 0
    for index, item in enumerate(raw):
        if isinstance(item, str):
            bookmarks.append(
                Bookmark(id=item, title=LEGACY_BOOKMARK_TITLE, link=item, date=stamp)
            )
            migrated += 1
            continue
        try:
            doc = adapter.validate_python(item)
        except ValidationError as e:
            logger.warning("Dropping invalid 'bookmarks' record #{}: {} error(s)", index, e.error_count())
            continue
        bookmarks.append(Bookmark.from_dict(doc.to_doc()))

    if migrated:
        logger.info("Migrated {} legacy bookmark(s)", migrated)
    return bookmarks


def _fallback(value: list[T] | None, default: Callable[[], list[T]]) -> list[T]:
    return default() if value is None else value


def decode_document(data: dict[str, Any], now: datetime | None = None) -> DashboardState:
    """Build a state from an already parsed document, applying migrations."""
    now = now or utc_now()
    version = data.get("version", 1)
    if version != SCHEMA_VERSION:
        logger.debug("Decoding snapshot version {}", version)

    habits = _decode_list(data.get("habits"), HabitDoc, Habit.from_dict, "habits")
    tasks = _decode_list(data.get("tasks"), TaskDoc, Task.from_dict, "tasks")
    revisions = _decode_list(data.get("revisions"), RevisionDoc, Revision.from_dict, "revisions")
    resources = _decode_list(data.get("resources"), ResourceDoc, Resource.from_dict, "resources")
    focus_sessions = _decode_list(
        data.get("focusSessions"), FocusSessionDoc, FocusSession.from_dict, "focusSessions"
    )
    decks = _decode_list(data.get("decks"), DeckDoc, Deck.from_dict, "decks")

    return DashboardState(
        syllabus=_decode_syllabus(data.get("syllabus")),
        habits=_fallback(habits, default_habits),
        tasks=_fallback(tasks, default_tasks),
        revisions=_fallback(revisions, list),
        resources=_fallback(resources, list),
        focus_sessions=_fallback(focus_sessions, list),
        bookmarks=_decode_bookmarks(data.get("bookmarks"), now),
        decks=_fallback(decks, list),
    )


def decode_snapshot(raw: str, now: datetime | None = None) -> DashboardState:
    """
    Parse and migrate a serialized snapshot.

    Args:
        raw: JSON text as stored
        now: Timestamp for migrated records (defaults to the current time)

    Raises:
        SnapshotDecodeError: If ``raw`` is not JSON or not a JSON object
    """
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError is a ValueError; deep nesting raises RecursionError
        raise SnapshotDecodeError(f"Snapshot is not valid JSON: {type(e).__name__}: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotDecodeError(f"Snapshot must be a JSON object, got {type(data).__name__}")
    return decode_document(data, now)


def encode_document(state: DashboardState) -> dict[str, Any]:
    return {"version": SCHEMA_VERSION, **state.to_dict()}


def encode_snapshot(state: DashboardState) -> str:
    """Serialize the full state (never a diff)."""
    return json.dumps(encode_document(state), ensure_ascii=False)
