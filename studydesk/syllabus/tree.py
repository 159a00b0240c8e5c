"""
Syllabus Tree Operations.

Pure functions over the nested topic hierarchy:
- depth-first lookup and pre-order traversal
- status update by path copy (ancestors are shallow-copied, untouched
  subtrees are shared by reference)
- weighted completion percentages over leaf topics
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, Sequence
from dataclasses import dataclass, replace

from studydesk.core.dates import percent
from studydesk.core.models import SyllabusTopic, TopicStatus

UNKNOWN_TOPIC = "Unknown Topic"

STATUS_WEIGHTS: dict[TopicStatus, float] = {
    TopicStatus.NOT_STARTED: 0.0,
    TopicStatus.READING: 0.25,
    TopicStatus.REVISED: 0.75,
    TopicStatus.MASTERED: 1.0,
}


# =============================================================================
# Traversal
# =============================================================================


def iter_preorder(topics: Sequence[SyllabusTopic]) -> Iterator[SyllabusTopic]:
    """Yield every node, parents before children, siblings in order."""
    for topic in topics:
        yield topic
        yield from iter_preorder(topic.subtopics)


def iter_leaves(topics: Sequence[SyllabusTopic]) -> Iterator[SyllabusTopic]:
    for topic in iter_preorder(topics):
        if topic.is_leaf:
            yield topic


def find_by_id(topics: Sequence[SyllabusTopic], topic_id: str) -> SyllabusTopic | None:
    for topic in iter_preorder(topics):
        if topic.id == topic_id:
            return topic
    return None


def topic_title(topics: Sequence[SyllabusTopic], topic_id: str) -> str:
    topic = find_by_id(topics, topic_id)
    return topic.title if topic else UNKNOWN_TOPIC


def collect_topics(
    topics: Sequence[SyllabusTopic],
    ids: Collection[str],
) -> list[SyllabusTopic]:
    """Topics whose id is in ``ids``, in tree pre-order."""
    return [topic for topic in iter_preorder(topics) if topic.id in ids]


# =============================================================================
# Update
# =============================================================================


def _rebuild(
    topics: Sequence[SyllabusTopic],
    topic_id: str,
    status: TopicStatus,
) -> tuple[list[SyllabusTopic], bool]:
    for index, topic in enumerate(topics):
        if topic.id == topic_id:
            changed = replace(topic, status=status)
        elif topic.subtopics:
            children, found = _rebuild(topic.subtopics, topic_id, status)
            if not found:
                continue
            changed = replace(topic, subtopics=tuple(children))
        else:
            continue
        updated = list(topics)
        updated[index] = changed
        return updated, True
    return list(topics), False


def update_status(
    topics: Sequence[SyllabusTopic],
    topic_id: str,
    status: TopicStatus,
) -> tuple[Sequence[SyllabusTopic], bool]:
    """
    Set the status of one node anywhere in the tree.

    Args:
        topics: Root topics (the papers)
        topic_id: Node to update
        status: New status

    Returns:
        (new root list, found). When the id is unknown the input sequence
        itself is returned with found=False.
    """
    updated, found = _rebuild(topics, topic_id, status)
    if not found:
        return topics, False
    return updated, True


# =============================================================================
# Completion
# =============================================================================


def completion_of(topics: Sequence[SyllabusTopic]) -> int:
    """Weighted completion over all leaves below ``topics``; 0 with no leaves."""
    leaves = list(iter_leaves(topics))
    score = sum(STATUS_WEIGHTS[leaf.status] for leaf in leaves)
    return percent(score, len(leaves))


def compute_completion(topic: SyllabusTopic) -> int:
    """Completion percentage of one subtree (a leaf counts as itself)."""
    return completion_of([topic])


@dataclass(frozen=True)
class PaperProgress:
    """Completion of one top-level paper, for the progress chart."""

    paper_id: str
    label: str
    title: str
    progress: int


def paper_label(title: str) -> str:
    """Short chart label: "GS Paper II: Governance" -> "GS II"."""
    words = title.split(" ")
    if len(words) < 3:
        return title
    return f"{words[0]} {words[2].rstrip(':')}"


def paper_progress(topics: Sequence[SyllabusTopic]) -> list[PaperProgress]:
    return [
        PaperProgress(
            paper_id=paper.id,
            label=paper_label(paper.title),
            title=paper.title,
            progress=compute_completion(paper),
        )
        for paper in topics
    ]


def overall_progress(topics: Sequence[SyllabusTopic]) -> int:
    """Mean of the per-paper percentages, rounded."""
    papers = paper_progress(topics)
    return percent(sum(p.progress for p in papers) / 100, len(papers))
