"""Syllabus tree: default content and recursive tree operations."""

from studydesk.syllabus.defaults import default_state, default_syllabus
from studydesk.syllabus.tree import (
    STATUS_WEIGHTS,
    PaperProgress,
    collect_topics,
    completion_of,
    compute_completion,
    find_by_id,
    iter_leaves,
    iter_preorder,
    overall_progress,
    paper_progress,
    topic_title,
    update_status,
)

__all__ = [
    "STATUS_WEIGHTS",
    "PaperProgress",
    "collect_topics",
    "completion_of",
    "compute_completion",
    "default_state",
    "default_syllabus",
    "find_by_id",
    "iter_leaves",
    "iter_preorder",
    "overall_progress",
    "paper_progress",
    "topic_title",
    "update_status",
]
