"""TrendEngine — parallel multi-source fetching into ordered candidate buckets."""

import concurrent.futures

from ..config import load_config
from ..log import get_logger, log


class TrendEngine:
    """Fetches candidate buckets from all enabled sources."""

    FETCH_TIMEOUT = 60

    def __init__(self, sources: list = None, store=None, config: dict = None):
        self.store = store
        if sources is not None:
            self._sources = list(sources)
        else:
            self._sources = []
            self._load_sources(config if config is not None else load_config())

    @property
    def sources(self) -> list:
        return list(self._sources)

    def _load_sources(self, config: dict):
        """Register sources in fixed order: serp, google_trends, rss."""
        source_config = config.get("trend_sources", {})

        from .google_trends import GoogleTrendsSource
        from .rss import RSSSource
        from .serp import SerpSource

        source_map = {
            "serp": lambda cfg: SerpSource(cfg, store=self.store),
            "google_trends": GoogleTrendsSource,
            "rss": RSSSource,
        }

        for name, factory in source_map.items():
            src_cfg = source_config.get(name, {})
            if src_cfg.get("enabled", name in ("serp", "rss")):
                try:
                    self._sources.append(factory(src_cfg))
                except Exception as e:
                    get_logger().warning("Failed to init source %s: %s", name, e)

    def collect(self, seeds: list, region: str = None):
        """Fetch every available source in parallel.

        Returns (buckets, cached). Buckets keep source registration order
        regardless of which fetch finishes first. `cached` is True only when
        there were cacheable buckets and all of them were cache hits.
        """
        logger = get_logger()
        available = [src for src in self._sources if src.is_available]
        if not available:
            logger.warning("No trend sources available")
            return [], False

        buckets = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=len(available)) as pool:
            futures = [pool.submit(src.fetch_buckets, seeds, region) for src in available]
            for src, future in zip(available, futures):
                try:
                    fetched = future.result(timeout=self.FETCH_TIMEOUT)
                except Exception as e:
                    logger.warning("%s: failed - %s", src.name, e)
                    continue
                count = sum(len(b.items) for b in fetched)
                log(f"{src.name}: {len(fetched)} buckets, {count} candidates")
                buckets.extend(fetched)

        cacheable = [b for b in buckets if b.from_cache is not None]
        cached = bool(cacheable) and all(b.from_cache for b in cacheable)
        return buckets, cached

