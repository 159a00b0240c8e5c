"""News feed types and aggregation."""

from studydesk.news.feeds import (
    FEEDS,
    Article,
    ArticleParseError,
    ArticleRequestError,
    FeedResult,
    FeedSource,
    MissingUrlError,
    NewsItem,
    aggregate_feeds,
    bookmark_from_news,
)

__all__ = [
    "FEEDS",
    "Article",
    "ArticleParseError",
    "ArticleRequestError",
    "FeedResult",
    "FeedSource",
    "MissingUrlError",
    "NewsItem",
    "aggregate_feeds",
    "bookmark_from_news",
]
