"""Tests for blogpipeline/trends/prune.py — optional LLM re-scoring."""

from blogpipeline.trends.base import TrendItem
from blogpipeline.trends.prune import build_prompt, llm_prune, parse_boosts


def items():
    return [
        TrendItem(query="mars rover", type="trending", score=0.7,
                  source=["serp:trending", "rss:a"], reason="trending, multi-source"),
        TrendItem(query="rust", type="rss", score=0.5, source=["rss:a"]),
        TrendItem(query="electric vehicle batteries", type="related", score=0.5,
                  source=["serp:related"]),
    ]


class TestBuildPrompt:
    def test_lists_items_with_type(self):
        prompt = build_prompt(items())
        assert "- mars rover [trending]" in prompt
        assert "- rust [rss]" in prompt
        assert "Keep 12 or fewer" in prompt


class TestParseBoosts:
    def test_parses_and_clamps(self):
        text = "query,boost\nRust,0.15\n- Mars Rover, 0.9\nelectric vehicle batteries,-1\n"
        assert parse_boosts(text) == {
            "rust": 0.15,
            "mars rover": 0.2,
            "electric vehicle batteries": 0.0,
        }

    def test_ignores_garbage(self):
        assert parse_boosts("no commas here\nrust,abc\nmars,nan\n,0.1") == {}

    def test_uses_first_two_fields_only(self):
        assert parse_boosts("apple, inc,0.1") == {}
        assert parse_boosts("rust,0.1,extra") == {"rust": 0.1}


class TestLlmPrune:
    def test_applies_boosts_and_reranks(self):
        result = llm_prune(items(), lambda prompt: "electric vehicle batteries,0.2\nrust,0.1")
        assert [(i.query, i.score) for i in result] == [
            ("mars rover", 0.7),
            ("electric vehicle batteries", 0.7),
            ("rust", 0.6),
        ]

    def test_does_not_mutate_input(self):
        original = items()
        llm_prune(original, lambda prompt: "rust,0.2")
        assert original[1].score == 0.5

    def test_caps_output(self):
        many = [TrendItem(query=f"topic {chr(97 + i)}", type="rss", score=0.5, source=["rss:a"])
                for i in range(15)]
        assert len(llm_prune(many, lambda prompt: "", limit=12)) == 15
        assert len(llm_prune(many, lambda prompt: "topic a,0.1", limit=12)) == 12

    def test_llm_error_returns_items_unchanged(self):
        def broken(prompt):
            raise RuntimeError("rate limited")

        original = items()
        assert llm_prune(original, broken) is original

    def test_empty_items_skip_llm(self):
        calls = []
        assert llm_prune([], lambda prompt: calls.append(prompt)) == []
        assert calls == []
