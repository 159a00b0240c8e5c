"""Boundary checks for user input, applied before anything reaches the store."""

from __future__ import annotations

from datetime import date
from urllib.parse import urlparse

from studydesk.core.models import TopicStatus
from studydesk.errors import InvalidInputError


def require_text(value: str | None, field: str) -> str:
    """Strip ``value`` and reject it if empty."""
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"{field} must not be empty")
    return text


def validate_url(value: str | None, field: str = "link") -> str:
    url = require_text(value, field)
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidInputError(f"{field} must be an http(s) URL: {url}")
    return url


def validate_bookmark_input(title: str | None, link: str | None) -> tuple[str, str]:
    """Returns the cleaned (title, link) pair."""
    return require_text(title, "title"), validate_url(link)


def parse_topic_status(value: str) -> TopicStatus:
    """Accept a status by value ("Not Started") or name ("not_started")."""
    normalized = value.strip().lower().replace("_", " ").replace("-", " ")
    for status in TopicStatus:
        if normalized in (status.value.lower(), status.name.lower().replace("_", " ")):
            return status
    choices = ", ".join(s.value for s in TopicStatus)
    raise InvalidInputError(f"Unknown status '{value}' (expected one of: {choices})")


def parse_iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError as e:
        raise InvalidInputError(f"Not an ISO date (YYYY-MM-DD): {value}") from e
