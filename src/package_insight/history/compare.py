"""Compare snapshots: run-to-run deltas and trends over the whole series."""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..formatting import sparkline
from ..snapshot.models import Snapshot


@dataclass(frozen=True)
class ComparisonDelta:
    """Change of the headline metrics between two snapshots.

    A field is None unless both snapshots carry a non-zero value for it.
    """

    build_time_change: Optional[int] = None  # ms
    dist_size_change: Optional[int] = None  # bytes
    dependency_count_change: Optional[int] = None

    @property
    def empty(self) -> bool:
        return (
            self.build_time_change is None
            and self.dist_size_change is None
            and self.dependency_count_change is None
        )


def build_time(snapshot: Snapshot) -> Optional[int]:
    build = snapshot.build
    if build.present and build.success and build.duration_ms:
        return build.duration_ms
    return None


def dist_size(snapshot: Snapshot) -> Optional[int]:
    dist = snapshot.dist
    if dist.present and dist.sizes.total_size:
        return dist.sizes.total_size
    return None


def dependency_count(snapshot: Snapshot) -> Optional[int]:
    deps = snapshot.dependencies
    if deps.present and deps.counts.dependencies:
        return deps.counts.dependencies
    return None


def _delta(
    metric: Callable[[Snapshot], Optional[int]], current: Snapshot, previous: Snapshot
) -> Optional[int]:
    now, before = metric(current), metric(previous)
    if now is None or before is None:
        return None
    return now - before


def compare_snapshots(current: Snapshot, previous: Snapshot) -> ComparisonDelta:
    """Delta of ``current`` against ``previous``."""
    return ComparisonDelta(
        build_time_change=_delta(build_time, current, previous),
        dist_size_change=_delta(dist_size, current, previous),
        dependency_count_change=_delta(dependency_count, current, previous),
    )


# ── Trends ───────────────────────────────────────────────────────────

TREND_METRICS: Dict[str, Callable[[Snapshot], Optional[int]]] = {
    "build_time": build_time,
    "dist_size": dist_size,
    "dependency_count": dependency_count,
}


@dataclass(frozen=True)
class MetricTrend:
    """One metric followed across the history series."""

    metric: str
    points: Tuple[Tuple[str, float], ...]  # (created_at, value), chronological
    first: float
    last: float
    slope: float  # least-squares change per run

    @property
    def values(self) -> List[float]:
        return [v for _, v in self.points]

    @property
    def sparkline(self) -> str:
        return sparkline(self.values)

    @property
    def change_pct(self) -> Optional[float]:
        if not self.first:
            return None
        return (self.last - self.first) / self.first * 100.0


@dataclass(frozen=True)
class TrendSummary:
    runs: int
    metrics: Tuple[MetricTrend, ...]

    def get(self, metric: str) -> Optional[MetricTrend]:
        for trend in self.metrics:
            if trend.metric == metric:
                return trend
        return None


def linear_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their index."""
    if len(values) < 2:
        return 0.0
    x = np.arange(len(values), dtype=float)
    y = np.asarray(values, dtype=float)
    slope, _intercept = np.polyfit(x, y, 1)
    return float(slope)


def summarize_trends(series: Sequence[Snapshot]) -> TrendSummary:
    """Trend of each headline metric over ``series`` (chronological).

    Snapshots lacking a metric are skipped for that metric. A metric needs
    at least two points to be reported.
    """
    trends = []
    for name, metric in TREND_METRICS.items():
        points = tuple(
            (s.created_at, float(value))
            for s in series
            for value in (metric(s),)
            if value is not None
        )
        if len(points) < 2:
            continue
        values = [v for _, v in points]
        trends.append(
            MetricTrend(
                metric=name,
                points=points,
                first=values[0],
                last=values[-1],
                slope=linear_slope(values),
            )
        )
    return TrendSummary(runs=len(series), metrics=tuple(trends))
