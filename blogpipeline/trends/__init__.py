"""Multi-source trend discovery and deterministic aggregation."""

from .aggregator import InvariantViolation, TrendAggregator
from .base import CandidateBucket, TrendItem, TrendResult, TrendSource
from .engine import TrendEngine

__all__ = [
    "CandidateBucket",
    "InvariantViolation",
    "TrendAggregator",
    "TrendEngine",
    "TrendItem",
    "TrendResult",
    "TrendSource",
]
