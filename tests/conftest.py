"""Shared test fixtures."""

import pytest

from blogpipeline.store import LocalStore
from blogpipeline.trends.base import CandidateBucket, TrendSource


@pytest.fixture
def store(tmp_path):
    """A LocalStore rooted in a temporary directory."""
    return LocalStore(tmp_path / "data")


@pytest.fixture
def sample_buckets():
    """Mixed-provenance buckets resembling a real Round 0 fetch."""
    return [
        CandidateBucket(
            type="autocomplete",
            source_name="serp:autocomplete",
            items=[
                "Apple iPhone 16 launch date?",
                "Latest",
                "my password reset",
                "2025 09 03 123 456",
                "OpenAI o3 mini",
                "OpenAI o3  mini",
            ],
        ),
        CandidateBucket(
            type="trending",
            source_name="serp:trending",
            items=[
                "India vs Pakistan live",
                "OpenAI o3 mini features",
                "apple latest news",
            ],
        ),
        CandidateBucket(
            type="rss",
            source_name="rss:theverge",
            items=[
                "Apple announces iPhone 16 with camera upgrades",
                "OpenAI launches o3-mini updates",
                "News",
            ],
        ),
    ]


class FakeSource(TrendSource):
    """In-memory source returning fixed buckets and counting calls."""

    def __init__(self, name, buckets=None, error=None, available=True):
        self.name = name
        self._buckets = buckets or []
        self._error = error
        self._available = available
        self.calls = 0

    @property
    def is_available(self) -> bool:
        return self._available

    def fetch_buckets(self, seeds, region):
        self.calls += 1
        if self._error:
            raise self._error
        return list(self._buckets)


@pytest.fixture
def fake_source():
    return FakeSource
