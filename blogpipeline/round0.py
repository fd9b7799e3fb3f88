"""Round 0 — gather trend signals and persist the ranked trend artifact.

Deterministic by default: fetch candidate buckets, aggregate them, and
optionally let an LLM nudge the ranking. Re-running a completed run
returns the stored artifact unless forced.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .config import ARTIFACT_PATHS, get_region, llm_available, use_round0_llm
from .log import get_logger, log
from .state import RunState
from .store import LocalStore
from .trends.aggregator import TrendAggregator, count_sources, validate_items
from .trends.base import TrendItem
from .trends.engine import TrendEngine
from .trends.prune import llm_prune

ROUND = "trends"


class InvalidRoundInput(ValueError):
    """The Round 0 payload is missing fields or has the wrong types."""


@dataclass
class Round0Input:
    run_id: str
    seeds: list = field(default_factory=list)
    region: Optional[str] = None
    use_llm: bool = False
    force: bool = False


def parse_input(payload: dict) -> Round0Input:
    if not isinstance(payload, dict):
        raise InvalidRoundInput(f"payload must be an object, got {type(payload).__name__}")

    run_id = payload.get("run_id")
    if not isinstance(run_id, str) or not run_id.strip():
        raise InvalidRoundInput("run_id must be a non-empty string")
    if "/" in run_id or ".." in run_id:
        raise InvalidRoundInput(f"run_id may not contain path separators: {run_id!r}")

    seeds = payload.get("seeds")
    if not isinstance(seeds, list) or not all(isinstance(s, str) for s in seeds):
        raise InvalidRoundInput("seeds must be a list of strings")

    region = payload.get("region")
    if region is not None and not isinstance(region, str):
        raise InvalidRoundInput("region must be a string")

    flags = {}
    for name in ("use_llm", "force"):
        value = payload.get(name, False)
        if not isinstance(value, bool):
            raise InvalidRoundInput(f"{name} must be a boolean")
        flags[name] = value

    return Round0Input(run_id=run_id, seeds=seeds, region=region, **flags)


def validate_artifact(artifact: dict):
    """Re-check a stored or freshly built artifact before trusting it."""
    items = [TrendItem.from_dict(i) for i in artifact["items"]]
    validate_items(items)
    if not isinstance(artifact.get("cached"), bool):
        raise ValueError("artifact.cached must be a boolean")
    if artifact.get("sourceCounts") != count_sources(items):
        raise ValueError("artifact.sourceCounts does not match its items")


def run(payload: dict, engine: TrendEngine = None, store=None, complete=None) -> dict:
    """Run Round 0 for one pipeline run and return the artifact dict."""
    logger = get_logger()
    t0 = time.monotonic()

    params = parse_input(payload)
    store = store or LocalStore()
    artifact_path = ARTIFACT_PATHS["trends"].format(run_id=params.run_id)
    log(f"Starting Round 0 for run {params.run_id}")

    state = RunState.load(store, params.run_id)
    if not params.force and state.is_done(ROUND):
        existing = store.read_artifact(artifact_path)
        if existing is not None:
            log(f"Round 0 already done for run {params.run_id} - returning stored artifact")
            return existing
    if params.force and ROUND in state.rounds:
        logger.info("Forced re-run: clearing previous %s state for run %s", ROUND, params.run_id)
        state.reset(ROUND)
        state.save(store)

    try:
        engine = engine or TrendEngine(store=store)
        region = params.region or get_region()

        t_fetch = time.monotonic()
        buckets, cached = engine.collect(params.seeds, region)
        logger.info("Fetched %d buckets in %.2fs", len(buckets), time.monotonic() - t_fetch)

        result = TrendAggregator().process(buckets)
        items = result.items
        logger.info("Deterministic processing kept %d items", len(items))

        if (params.use_llm or use_round0_llm()) and (complete is not None or llm_available()):
            if complete is None:
                from .llm import complete
            items = llm_prune(items, complete)
            logger.info("LLM prune kept %d items", len(items))

        artifact = {
            "items": [i.to_dict() for i in items],
            "cached": cached,
            "sourceCounts": count_sources(items),
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        validate_artifact(artifact)
        store.write_artifact(artifact_path, artifact)
    except Exception as e:
        logger.error("Round 0 failed for run %s: %s", params.run_id, e)
        state.fail_round(ROUND, str(e))
        state.save(store)
        raise

    state.complete_round(ROUND, {"path": artifact_path, "count": len(items), "cached": cached})
    state.save(store)
    logger.debug("Run state for %s:\n%s", params.run_id, state.summary())
    log(f"Finished Round 0 for run {params.run_id} in {time.monotonic() - t0:.2f}s")
    return artifact
