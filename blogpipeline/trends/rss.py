"""RSS/Atom headline source — one bucket per feed."""

import html
import re

from ..config import RSS_SOURCES
from ..log import get_logger
from .base import CandidateBucket, TrendSource

_TAG_RE = re.compile(r"<[^>]+>")


def clean_title(raw: str) -> str:
    """Strip markup and entities from a feed title."""
    text = _TAG_RE.sub("", raw or "")
    return " ".join(html.unescape(text).split())


class RSSSource(TrendSource):
    name = "rss"

    def __init__(self, config: dict = None):
        config = config or {}
        self.feeds = config.get("feeds", RSS_SOURCES)
        self.per_feed = config.get("per_feed", 20)

    @property
    def is_available(self) -> bool:
        try:
            import feedparser  # noqa: F401
            return True
        except ImportError:
            return False

    def fetch_buckets(self, seeds: list, region: str) -> list:
        buckets = []
        for feed in self.feeds:
            try:
                titles = self.fetch_titles(feed["url"])
            except Exception as e:
                get_logger().warning("RSS fetch failed for %s: %s", feed["url"], e)
                continue
            buckets.append(CandidateBucket(type="rss", source_name=feed["name"], items=titles))
        return buckets

    def fetch_titles(self, url: str) -> list:
        import feedparser

        parsed = feedparser.parse(url)
        if getattr(parsed, "bozo", False) and not parsed.entries:
            raise ValueError(f"unparsable feed: {getattr(parsed, 'bozo_exception', '')}")

        titles = []
        for entry in parsed.entries:
            title = clean_title(entry.get("title", ""))
            if title:
                titles.append(title)
            if len(titles) >= self.per_feed:
                break
        get_logger().debug("Found %d titles from %s", len(titles), url)
        return titles
