"""Tests for blogpipeline/trends/engine.py — source loading, parallel collect, aggregation of collected buckets."""

import os
from unittest.mock import patch

from blogpipeline.trends.aggregator import TrendAggregator
from blogpipeline.trends.base import CandidateBucket
from blogpipeline.trends.engine import TrendEngine
from blogpipeline.trends.google_trends import GoogleTrendsSource
from blogpipeline.trends.rss import RSSSource
from blogpipeline.trends.serp import SerpSource


class TestLoadSources:
    def test_default_sources(self):
        engine = TrendEngine(config={})
        assert [type(s) for s in engine.sources] == [SerpSource, RSSSource]

    def test_google_trends_opt_in(self):
        engine = TrendEngine(config={"trend_sources": {"google_trends": {"enabled": True}}})
        assert [type(s) for s in engine.sources] == [SerpSource, GoogleTrendsSource, RSSSource]

    def test_disable_source(self):
        engine = TrendEngine(config={"trend_sources": {"serp": {"enabled": False}}})
        assert [type(s) for s in engine.sources] == [RSSSource]

    def test_store_passed_to_serp(self, store):
        engine = TrendEngine(store=store, config={})
        assert engine.sources[0].store is store

    def test_rss_feeds_from_config(self):
        feeds = [{"name": "rss:hn", "url": "https://hnrss.org/frontpage"}]
        engine = TrendEngine(config={"trend_sources": {
            "serp": {"enabled": False}, "rss": {"feeds": feeds},
        }})
        assert engine.sources[0].feeds == feeds


class TestCollect:
    def test_keeps_registration_order(self, fake_source):
        a = fake_source("a", [CandidateBucket(type="rss", source_name="rss:a", items=["x"])])
        b = fake_source("b", [CandidateBucket(type="trending", source_name="serp:trending",
                                              items=["y"])])
        buckets, _ = TrendEngine(sources=[a, b]).collect(["seed"], "us")
        assert [bk.source_name for bk in buckets] == ["rss:a", "serp:trending"]

    def test_failing_source_skipped(self, fake_source):
        ok = fake_source("ok", [CandidateBucket(type="rss", source_name="rss:ok", items=["x"])])
        bad = fake_source("bad", error=RuntimeError("down"))
        buckets, _ = TrendEngine(sources=[bad, ok]).collect([], "us")
        assert [bk.source_name for bk in buckets] == ["rss:ok"]
        assert bad.calls == 1

    def test_unavailable_source_not_called(self, fake_source):
        off = fake_source("off", available=False)
        buckets, cached = TrendEngine(sources=[off]).collect([], "us")
        assert buckets == []
        assert cached is False
        assert off.calls == 0

    def test_cached_only_when_all_cacheable_hit(self, fake_source):
        hit = CandidateBucket(type="trending", source_name="serp:trending", items=[],
                              from_cache=True)
        miss = CandidateBucket(type="related", source_name="serp:related", items=[],
                               from_cache=False)
        rss = CandidateBucket(type="rss", source_name="rss:a", items=[])

        _, cached = TrendEngine(sources=[fake_source("s", [hit, rss])]).collect([], "us")
        assert cached is True
        _, cached = TrendEngine(sources=[fake_source("s", [hit, miss])]).collect([], "us")
        assert cached is False
        _, cached = TrendEngine(sources=[fake_source("r", [rss])]).collect([], "us")
        assert cached is False


class TestCollectThenAggregate:
    def test_aggregates_across_sources(self, fake_source):
        serp = fake_source("serp", [
            CandidateBucket(type="autocomplete", source_name="serp:autocomplete",
                            items=["OpenAI GPT-5"]),
            CandidateBucket(type="trending", source_name="serp:trending",
                            items=["openai gpt-5", "mars rover"]),
        ])
        rss = fake_source("rss", [
            CandidateBucket(type="rss", source_name="rss:theverge", items=["News", "Mars Rover"]),
        ])
        result = TrendAggregator().process(
            TrendEngine(sources=[serp, rss]).collect(["ai"], "us")[0]
        )

        assert [i.query for i in result.items] == ["mars rover", "openai gpt-5"]
        assert result.source_counts == {
            "serp:trending": 2, "rss:theverge": 1, "serp:autocomplete": 1,
        }

    @patch.dict(os.environ, {"SERPAPI_KEY": ""})
    @patch("blogpipeline.config.load_config", return_value={})
    @patch("feedparser.parse", side_effect=OSError("offline"))
    def test_offline_yields_empty_result(self, _parse, _cfg):
        result = TrendAggregator().process(TrendEngine(config={}).collect(["ai"], "us")[0])
        assert result.items == []
        assert result.source_counts == {}
