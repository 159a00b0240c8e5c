"""
Topic Notebook.

Helpers over the resource list: one "Main Note" per topic plus any number
of links, and the flattened, searchable topic index grouped by paper.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from studydesk.core.models import Resource, ResourceType, SyllabusTopic
from studydesk.syllabus.tree import iter_leaves

if TYPE_CHECKING:
    from studydesk.store.dashboard import DashboardStore

MAIN_NOTE_TITLE = "Main Note"


@dataclass(frozen=True)
class ResourceCounts:
    notes: int
    links: int


@dataclass(frozen=True)
class NotebookEntry:
    """A leaf topic with the paper it belongs to."""

    id: str
    title: str
    paper: str  # "GS Paper I"
    paper_id: str


def find_note(resources: Sequence[Resource], topic_id: str) -> Resource | None:
    """First note attached to ``topic_id``."""
    return next(
        (r for r in resources if r.topic_id == topic_id and r.type is ResourceType.NOTE),
        None,
    )


def save_note(store: DashboardStore, topic_id: str, content: str) -> Resource:
    """Update the topic's note in place, or create the "Main Note"."""
    existing = find_note(store.state.resources, topic_id)
    if existing is None:
        return store.add_resource(topic_id, ResourceType.NOTE, content, title=MAIN_NOTE_TITLE)
    store.update_resource(existing.id, content)
    return find_note(store.state.resources, topic_id) or existing


def links_for_topic(resources: Sequence[Resource], topic_id: str) -> list[Resource]:
    return [r for r in resources if r.topic_id == topic_id and r.type is ResourceType.LINK]


def resource_counts(resources: Sequence[Resource], topic_id: str) -> ResourceCounts:
    mine = [r for r in resources if r.topic_id == topic_id]
    return ResourceCounts(
        notes=sum(1 for r in mine if r.type is ResourceType.NOTE),
        links=sum(1 for r in mine if r.type is ResourceType.LINK),
    )


def leaf_topics(topics: Sequence[SyllabusTopic]) -> list[NotebookEntry]:
    """Every leaf below each paper, labelled with the paper's short title."""
    return [
        NotebookEntry(
            id=leaf.id,
            title=leaf.title,
            paper=paper.title.split(":")[0],
            paper_id=paper.id,
        )
        for paper in topics
        for leaf in iter_leaves(paper.subtopics)
    ]


def search_topics(entries: Sequence[NotebookEntry], query: str) -> list[NotebookEntry]:
    """Case-insensitive match on topic title or paper name."""
    needle = query.lower()
    return [e for e in entries if needle in e.title.lower() or needle in e.paper.lower()]


def group_by_paper(entries: Sequence[NotebookEntry]) -> dict[str, list[NotebookEntry]]:
    grouped: dict[str, list[NotebookEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.paper, []).append(entry)
    return grouped
