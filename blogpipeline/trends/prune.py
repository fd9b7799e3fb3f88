"""Optional LLM re-scoring of aggregated trends.

The model may nudge scores up by at most MAX_BOOST; it can never add items
or push a score outside [0, 1]. Any failure leaves the list untouched.
"""

import math
from dataclasses import replace

from ..log import get_logger
from .aggregator import MAX_ITEMS, normalize_query, rank_key

MAX_BOOST = 0.2

PROMPT_TEMPLATE = """You are scoring short search queries for blog topics.
Keep {limit} or fewer. Prefer widely interesting, multi-source, and non-duplicative.
Return as CSV: query,boost where boost in [0..{max_boost}].

Items:
{items}
"""


def build_prompt(items, limit: int = MAX_ITEMS) -> str:
    lines = "\n".join(f"- {i.query} [{i.type}]" for i in items)
    return PROMPT_TEMPLATE.format(limit=limit, max_boost=MAX_BOOST, items=lines)


def parse_boosts(text: str) -> dict:
    """Parse `query,boost` lines into {normalized query: clamped boost}.

    Only the first two fields count: a query containing a comma leaves a
    non-numeric second field and the line is ignored.
    """
    boosts = {}
    for line in text.splitlines():
        parts = line.split(",")
        if len(parts) < 2:
            continue
        query = normalize_query(parts[0].strip().lstrip("-*").strip())
        try:
            boost = float(parts[1].strip())
        except ValueError:
            continue
        if query and math.isfinite(boost):
            boosts[query] = max(0.0, min(MAX_BOOST, boost))
    return boosts


def llm_prune(items, complete, limit: int = MAX_ITEMS) -> list:
    """Apply LLM boosts, re-rank and cap. Returns `items` unchanged on failure."""
    if not items:
        return items
    logger = get_logger()
    try:
        reply = complete(build_prompt(items, limit))
    except Exception as e:
        logger.warning("LLM prune skipped due to error: %s", e)
        return items
    if not reply:
        return items

    boosts = parse_boosts(reply)
    logger.debug("LLM boosts for %d of %d items", len(boosts), len(items))
    boosted = [
        replace(i, source=list(i.source),
                score=round(max(0.0, min(1.0, i.score + boosts.get(i.query, 0.0))), 4))
        for i in items
    ]
    boosted.sort(key=rank_key)
    return boosted[:limit]
