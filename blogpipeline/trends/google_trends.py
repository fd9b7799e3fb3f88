"""Google Trends daily trending searches via pytrends."""

from ..config import DEFAULT_REGION
from .base import CandidateBucket, TrendSource

# pytrends `pn` names for the region codes the pipeline accepts
REGION_TO_PN = {
    "us": "united_states",
    "gb": "united_kingdom",
    "in": "india",
    "au": "australia",
    "ca": "canada",
}


class GoogleTrendsSource(TrendSource):
    name = "google_trends"

    def __init__(self, config: dict = None):
        config = config or {}
        self.limit = config.get("limit", 20)

    @property
    def is_available(self) -> bool:
        try:
            from pytrends.request import TrendReq  # noqa: F401
            return True
        except ImportError:
            return False

    def fetch_buckets(self, seeds: list, region: str) -> list:
        from pytrends.request import TrendReq

        pytrends = TrendReq(hl="en-US", tz=0)
        trending = pytrends.trending_searches(pn=self._region_to_pn(region))
        titles = [str(v) for v in trending[0].head(self.limit).tolist()]
        return [CandidateBucket(type="trending", source_name="trends:google", items=titles)]

    def _region_to_pn(self, region: str) -> str:
        return REGION_TO_PN.get((region or DEFAULT_REGION).lower(), "united_states")
