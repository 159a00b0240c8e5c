"""
News feed and reader-mode wire types.

Fetching RSS and extracting articles is done by external services; this
module only describes what they return and merges per-source results into
the single "Daily Briefing" list.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from pydantic import BaseModel, ConfigDict, Field

from studydesk.errors import StudydeskError

MAX_ITEMS = 50


# ========================================
# Feed Catalogue
# ========================================


class FeedSource(BaseModel):
    id: str
    title: str
    url: str
    category: str


FEEDS: tuple[FeedSource, ...] = (
    FeedSource(
        id="hindu",
        title="The Hindu",
        url="https://www.thehindu.com/news/national/feeder/default.rss",
        category="National",
    ),
    FeedSource(
        id="pib",
        title="PIB",
        url="https://www.pib.gov.in/RssMain.aspx?ModId=6&Lang=1&Regid=3",
        category="Government",
    ),
    FeedSource(
        id="ie_explained",
        title="IE Explained",
        url="https://indianexpress.com/section/explained/feed/",
        category="Explained",
    ),
    FeedSource(
        id="ie_editorials",
        title="IE Editorials",
        url="https://indianexpress.com/section/opinion/editorials/feed/",
        category="Editorial",
    ),
    FeedSource(
        id="ie_economy",
        title="IE Economy",
        url="https://indianexpress.com/section/business/economy/feed/",
        category="Economy",
    ),
    FeedSource(
        id="ie_world",
        title="IE World",
        url="https://indianexpress.com/section/world/feed/",
        category="International",
    ),
    FeedSource(
        id="ie_sci",
        title="IE Science",
        url="https://indianexpress.com/section/technology/science/feed/",
        category="Sci-Tech",
    ),
)


# ========================================
# Wire Models
# ========================================


class NewsItem(BaseModel):
    """One headline from a feed."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    link: str
    pub_date: str | None = Field(None, alias="pubDate")
    content_snippet: str | None = Field(None, alias="contentSnippet")
    image_url: str | None = Field(None, alias="imageUrl")
    category: str | None = None
    source: str | None = None


class FeedResult(BaseModel):
    """Outcome of fetching one source; failed sources carry ``error=True``."""

    id: str
    source: str
    category: str | None = None
    items: list[NewsItem] = Field(default_factory=list)
    error: bool = False


class Article(BaseModel):
    """Reader-mode extraction of a page."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    content: str
    text_content: str | None = Field(None, alias="textContent")
    excerpt: str | None = None
    byline: str | None = None
    site_name: str | None = Field(None, alias="siteName")


# ========================================
# Article Errors
# ========================================


class ArticleRequestError(StudydeskError):
    """Reader-mode failure with the HTTP status the service answers with."""

    status_code = 500

    def __init__(self, message: str = "Failed to process article"):
        super().__init__(message)
        self.message = message


class MissingUrlError(ArticleRequestError):
    status_code = 400

    def __init__(self, message: str = "URL is required"):
        super().__init__(message)


class ArticleParseError(ArticleRequestError):
    status_code = 422

    def __init__(self, message: str = "Failed to parse article"):
        super().__init__(message)


def article_error_for_status(status_code: int, message: str | None = None) -> ArticleRequestError:
    """Map a reader-service response status back to its error type."""
    for error_cls in (MissingUrlError, ArticleParseError):
        if error_cls.status_code == status_code:
            return error_cls(message) if message else error_cls()
    return ArticleRequestError(message) if message else ArticleRequestError()


# ========================================
# Aggregation
# ========================================


def parse_pub_date(value: str | None) -> datetime | None:
    """Parse RFC 822 (RSS) or ISO 8601 dates; None when missing or invalid."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def aggregate_feeds(results: Iterable[FeedResult], limit: int = MAX_ITEMS) -> list[NewsItem]:
    """
    Merge per-source results into one list.

    Items are tagged with their source, sorted newest first (undated items
    last, keeping their relative order) and capped at ``limit``. Failed
    sources contribute nothing.
    """
    merged: list[NewsItem] = []
    for result in results:
        if result.error:
            continue
        for item in result.items:
            merged.append(
                item.model_copy(
                    update={"source": result.source, "category": item.category or result.category}
                )
            )

    def _key(item: NewsItem) -> tuple[int, float]:
        parsed = parse_pub_date(item.pub_date)
        if parsed is None:
            return (1, 0.0)
        return (0, -parsed.timestamp())

    return sorted(merged, key=_key)[:limit]


def sources_of(items: Iterable[NewsItem]) -> list[str]:
    """Distinct sources in first-seen order."""
    seen: dict[str, None] = {}
    for item in items:
        if item.source:
            seen.setdefault(item.source, None)
    return list(seen)


def bookmark_from_news(item: NewsItem) -> dict[str, str | None]:
    """Arguments for ``DashboardStore.add_bookmark`` from a headline."""
    return {
        "title": item.title,
        "link": item.link,
        "source": item.source,
    }
