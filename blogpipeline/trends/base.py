"""CandidateBucket / TrendItem dataclasses + TrendSource ABC."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

# Provenance categories, highest priority first when merging
BUCKET_TYPES = ("trending", "related", "autocomplete", "rss")
TYPE_PRIORITY = {"trending": 3, "related": 2, "autocomplete": 1, "rss": 0}

# Fields tried, in order, when a provider returns objects instead of strings
DEFAULT_RAW_KEYS = ("value", "query", "question", "title", "search_term")


def coerce_strings(raw, keys=DEFAULT_RAW_KEYS) -> list:
    """Pull candidate strings out of a loosely-typed provider list.

    Strings are kept as-is; dicts contribute their first scalar field among
    `keys`; anything else is skipped. Repeats keep the first occurrence.
    """
    out = []
    seen = set()
    for entry in raw or []:
        text = None
        if isinstance(entry, str):
            text = entry
        elif isinstance(entry, dict):
            for key in keys:
                value = entry.get(key)
                if isinstance(value, (str, int, float)) and not isinstance(value, bool):
                    text = str(value)
                    break
        if text is not None and text not in seen:
            seen.add(text)
            out.append(text)
    return out


@dataclass
class CandidateBucket:
    """A batch of raw candidate strings from one named source."""
    type: str  # autocomplete | related | trending | rss
    source_name: str  # e.g. "serp:trending", "rss:theverge"
    items: list = field(default_factory=list)
    from_cache: Optional[bool] = None  # None for sources that never cache

    def __post_init__(self):
        if self.type not in TYPE_PRIORITY:
            raise ValueError(f"Unknown bucket type: {self.type!r}")
        if not isinstance(self.source_name, str) or not self.source_name:
            raise ValueError("Bucket source_name must be a non-empty string")
        if not isinstance(self.items, list):
            raise ValueError(f"Bucket items must be a list, got {type(self.items).__name__}")
        for item in self.items:
            if not isinstance(item, str):
                raise ValueError(f"Bucket items must be strings, got {type(item).__name__}")

    @classmethod
    def from_raw(cls, type: str, source_name: str, raw, keys=DEFAULT_RAW_KEYS,
                 from_cache: Optional[bool] = None) -> "CandidateBucket":
        """Build a bucket from an unvalidated provider payload."""
        return cls(type=type, source_name=source_name,
                   items=coerce_strings(raw, keys), from_cache=from_cache)


@dataclass
class TrendItem:
    """A normalized, scored candidate blog topic."""
    query: str
    type: str
    score: float = 0.0
    source: list = field(default_factory=list)
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "query": self.query,
            "type": self.type,
            "score": self.score,
            "source": list(self.source),
        }
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "TrendItem":
        return cls(
            query=data["query"],
            type=data["type"],
            score=data["score"],
            source=list(data["source"]),
            reason=data.get("reason"),
        )


@dataclass
class TrendResult:
    """Aggregator output: ranked items + per-source counts."""
    items: list = field(default_factory=list)
    source_counts: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "items": [i.to_dict() for i in self.items],
            "sourceCounts": dict(self.source_counts),
        }


class TrendSource(ABC):
    """Abstract base class for candidate providers."""

    name: str = "unknown"

    @abstractmethod
    def fetch_buckets(self, seeds: list, region: str) -> list:
        """Fetch raw candidates from this provider as CandidateBuckets."""
        ...

    @property
    def is_available(self) -> bool:
        """Check if this source is configured and available."""
        return True
