"""Snapshot history persistence and comparison."""

from .compare import (
    ComparisonDelta,
    MetricTrend,
    TrendSummary,
    compare_snapshots,
    linear_slope,
    summarize_trends,
)
from .store import HistorySeries, HistoryStore, previous_snapshot, record_name

__all__ = [
    "HistoryStore",
    "HistorySeries",
    "record_name",
    "previous_snapshot",
    "ComparisonDelta",
    "compare_snapshots",
    "MetricTrend",
    "TrendSummary",
    "summarize_trends",
    "linear_slope",
]
