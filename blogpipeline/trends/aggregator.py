"""TrendAggregator — deterministic normalize/dedup/score over candidate buckets.

Pure: no I/O, no clock, no randomness. The same ordered buckets always
produce the same ranked items, which is what makes Round 0 re-runs
reproducible.
"""

import math
import re
import unicodedata

from .base import BUCKET_TYPES, TYPE_PRIORITY, TrendItem, TrendResult

MAX_QUERY_WORDS = 6
MAX_ITEMS = 12
MAX_REASON_CHARS = 48
MAX_REASON_WORDS = 12

BASE_SCORE = 0.5
MULTI_SOURCE_BOOST = 0.10
TRENDING_BOOST = 0.10
TRENDING_SOURCE_PREFIX = "serp:trending"

NEAR_DUP_MAX_EDITS = 2
NEAR_DUP_MIN_OVERLAP = 0.75

# Kept although Unicode files them under punctuation/symbols ("c++", "c#", "gpt-5")
KEEP_SYMBOLS = frozenset("+#-")
_PERSONAL_RE = re.compile(r"\b(my|me|account|password)\b")
_NUMERIC_RE = re.compile(r"^\d+([./-]\d+)*$")
GENERIC_TOKENS = frozenset({"news", "update", "latest"})
NUMERIC_DROP_RATIO = 0.6


class InvariantViolation(Exception):
    """An output item broke a post-condition. Indicates an aggregator bug."""


def _is_punctuation(ch: str) -> bool:
    """Unicode punctuation (P*), symbol (S*) or control (Cc), minus KEEP_SYMBOLS.

    Combining marks (Mn/Mc) are part of the word they sit on: Devanagari
    vowel signs, decomposed accents.
    """
    if ch in KEEP_SYMBOLS:
        return False
    category = unicodedata.category(ch)
    return category[0] in "PS" or category == "Cc"


def normalize_query(raw: str) -> str:
    """Lowercase, strip punctuation (keeping + # -), collapse whitespace, cap words.

    Input is NFC-composed first so "café" typed either way yields one key.
    May return ""; callers treat that as a drop.
    """
    text = unicodedata.normalize("NFC", raw).lower()
    text = "".join(" " if _is_punctuation(ch) else ch for ch in text)
    return " ".join(text.split()[:MAX_QUERY_WORDS])


def should_drop(query: str) -> bool:
    tokens = query.split()
    if not tokens:
        return True
    if _PERSONAL_RE.search(query):
        return True
    numeric = sum(1 for t in tokens if _NUMERIC_RE.match(t))
    if numeric / len(tokens) > NUMERIC_DROP_RATIO:
        return True
    # "news" alone or "latest news" is noise; "apple latest news" is a topic
    return all(t in GENERIC_TOKENS for t in tokens)


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a):
        cur = [i + 1]
        for j, cb in enumerate(b):
            cost = 0 if ca == cb else 1
            cur.append(min(cur[j] + 1, prev[j + 1] + 1, prev[j] + cost))
        prev = cur
    return prev[-1]


def token_overlap(a: str, b: str) -> float:
    """Jaccard overlap of the two token sets (1.0 when both are empty)."""
    ta, tb = set(a.split()), set(b.split())
    if not ta and not tb:
        return 1.0
    return len(ta & tb) / len(ta | tb)


def near_duplicate(a: str, b: str) -> bool:
    return (levenshtein(a, b) <= NEAR_DUP_MAX_EDITS
            or token_overlap(a, b) >= NEAR_DUP_MIN_OVERLAP)


def _absorb(target: TrendItem, sources, type_: str):
    """Merge provenance into target: union sources, upgrade (never downgrade) type."""
    for name in sources:
        if name not in target.source:
            target.source.append(name)
    if TYPE_PRIORITY[type_] > TYPE_PRIORITY[target.type]:
        target.type = type_


def _clamp(score: float) -> float:
    return round(min(1.0, max(0.0, score)), 4)


def rank_key(item: TrendItem):
    """Score descending, then shorter query first."""
    return (-item.score, len(item.query))


def count_sources(items) -> dict:
    counts = {}
    for item in items:
        for name in item.source:
            counts[name] = counts.get(name, 0) + 1
    return counts


def validate_items(items, limit: int = MAX_ITEMS):
    """Raise InvariantViolation if any output post-condition does not hold."""
    if len(items) > limit:
        raise InvariantViolation(f"{len(items)} items exceeds cap of {limit}")
    seen = set()
    for item in items:
        if not isinstance(item.query, str) or not item.query:
            raise InvariantViolation(f"Empty or non-string query: {item.query!r}")
        if item.query in seen:
            raise InvariantViolation(f"Duplicate query in output: {item.query!r}")
        seen.add(item.query)
        if item.type not in BUCKET_TYPES:
            raise InvariantViolation(f"Unknown type {item.type!r} for {item.query!r}")
        score = item.score
        if (not isinstance(score, (int, float)) or isinstance(score, bool)
                or math.isnan(score) or not 0 <= score <= 1):
            raise InvariantViolation(f"Score out of range for {item.query!r}: {score!r}")
        if not isinstance(item.source, list) or not item.source:
            raise InvariantViolation(f"Missing source list for {item.query!r}")
        if item.reason is not None and len(item.reason.split()) > MAX_REASON_WORDS:
            raise InvariantViolation(f"Reason too long for {item.query!r}: {item.reason!r}")


class TrendAggregator:
    """Buckets of raw candidate strings in, ranked TrendItems out."""

    def __init__(self, max_items: int = MAX_ITEMS):
        self.max_items = max_items

    def process(self, buckets) -> TrendResult:
        collected = self._collect(buckets)
        merged = self._merge_near_duplicates(collected)
        for item in merged:
            self._score(item)

        # list.sort is stable: equal keys keep first-seen order
        merged.sort(key=rank_key)
        final = merged[:self.max_items]

        validate_items(final, self.max_items)
        return TrendResult(items=final, source_counts=count_sources(final))

    def _collect(self, buckets) -> list:
        """Exact-key pass: one entry per normalized query, in first-seen order."""
        collected = {}
        for bucket in buckets:
            for raw in bucket.items:
                query = normalize_query(raw)
                if should_drop(query):
                    continue
                existing = collected.get(query)
                if existing is None:
                    collected[query] = TrendItem(
                        query=query, type=bucket.type, score=0.0, source=[bucket.source_name],
                    )
                else:
                    _absorb(existing, [bucket.source_name], bucket.type)
        return list(collected.values())

    def _merge_near_duplicates(self, entries) -> list:
        """Greedy first-match merge; the earliest spelling stays canonical."""
        accepted = []
        for entry in entries:
            for target in accepted:
                if near_duplicate(target.query, entry.query):
                    _absorb(target, entry.source, entry.type)
                    break
            else:
                accepted.append(entry)
        return accepted

    def _score(self, item: TrendItem):
        multi_source = len(item.source) > 1
        trending = any(s.startswith(TRENDING_SOURCE_PREFIX) for s in item.source)

        score = BASE_SCORE
        labels = []
        if trending:
            score += TRENDING_BOOST
            labels.append("trending")
        if multi_source:
            score += MULTI_SOURCE_BOOST
            labels.append("multi-source")

        item.score = _clamp(score)
        item.reason = ", ".join(labels)[:MAX_REASON_CHARS] if labels else None
