"""SerpApi candidate source: autocomplete, related searches, trending now."""

import json
from datetime import datetime, timezone

import requests

from ..config import DEFAULT_REGION, get_serpapi_key
from ..log import get_logger
from ..retry import with_retry
from ..store import cache_key
from .base import CandidateBucket, TrendSource, coerce_strings

BASE_URL = "https://serpapi.com/search.json"

AUTOCOMPLETE_FIELDS = ("suggestions", "suggested_queries")
RELATED_FIELDS = ("related_questions", "related_searches", "related", "people_also_search_for")
TRENDING_FIELDS = ("trending_searches", "trending")


@with_retry(max_retries=2, base_delay=2.0, retry_on=(requests.RequestException,))
def _fetch_json(params: dict) -> dict:
    r = requests.get(BASE_URL, params=params, timeout=15)
    r.raise_for_status()
    data = r.json()
    if not isinstance(data, dict):
        raise ValueError(f"SerpApi returned {type(data).__name__}, expected an object")
    return data


def _first_list(data: dict, fields) -> list:
    for name in fields:
        value = data.get(name)
        if isinstance(value, list) and value:
            return value
    return []


class SerpSource(TrendSource):
    """Three buckets per call: serp:autocomplete, serp:related, serp:trending.

    Each bucket's string list is cached per (seeds, region, UTC day) so
    re-runs on the same day cost nothing.
    """

    name = "serp"

    def __init__(self, config: dict = None, store=None):
        config = config or {}
        self.language = config.get("hl", "en")
        self.store = store

    @property
    def is_available(self) -> bool:
        return bool(get_serpapi_key())

    def fetch_buckets(self, seeds: list, region: str) -> list:
        region = region or DEFAULT_REGION
        day = datetime.now(timezone.utc).date().isoformat()
        base_key = json.dumps({"seeds": list(seeds), "region": region, "day": day}, sort_keys=True)

        fetchers = [
            ("autocomplete", lambda: self.suggestions(seeds, region)),
            ("related", lambda: self.related(seeds, region)),
            ("trending", lambda: self.trending(region)),
        ]
        buckets = []
        for kind, fetch in fetchers:
            items, hit = self._cached(f"{base_key}:{kind}", fetch)
            buckets.append(CandidateBucket.from_raw(kind, f"serp:{kind}", items, from_cache=hit))
        return buckets

    def _cached(self, raw_key: str, fetch):
        """Return (raw items, from_cache). Empty results are not cached.

        Cached payloads go back through CandidateBucket.from_raw, so an entry
        written in an older shape still parses.
        """
        key = cache_key("serpapi", raw_key)
        if self.store is not None:
            cached = self.store.get(key)
            if isinstance(cached, list):
                return cached, True
        items = fetch()
        if self.store is not None and items:
            self.store.set(key, items)
        return items, False

    def _params(self, engine: str, region: str, **extra) -> dict:
        return {
            "engine": engine,
            "hl": self.language,
            "gl": region,
            "api_key": get_serpapi_key(),
            **extra,
        }

    def _per_seed(self, engine: str, seeds: list, region: str, fields, keys) -> list:
        logger = get_logger()
        out = []
        for seed in seeds:
            try:
                data = _fetch_json(self._params(engine, region, q=seed))
            except Exception as e:
                logger.warning("SerpApi %s failed for %r: %s", engine, seed, e)
                continue
            for text in coerce_strings(_first_list(data, fields), keys):
                if text not in out:
                    out.append(text)
        return out

    def suggestions(self, seeds: list, region: str) -> list:
        return self._per_seed("google_autocomplete", seeds, region,
                              AUTOCOMPLETE_FIELDS, ("value", "query"))

    def related(self, seeds: list, region: str) -> list:
        return self._per_seed("google", seeds, region,
                              RELATED_FIELDS, ("question", "query", "title"))

    def trending(self, region: str) -> list:
        try:
            data = _fetch_json(self._params("google_trends_trending_now", region))
        except Exception as e:
            get_logger().warning("SerpApi trending failed: %s", e)
            return []
        return coerce_strings(_first_list(data, TRENDING_FIELDS), ("query", "title", "search_term"))
