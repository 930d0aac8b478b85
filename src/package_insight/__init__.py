"""
Package Insight - TypeScript/JavaScript package inspection

Probes a package directory (manifest, compiler config, build output,
installed dependencies, published tarball, git and registry history),
records an immutable snapshot of it, keeps a history of snapshots and
renders Markdown, HTML and JSON reports with heuristic recommendations.
"""

__version__ = "0.3.0"
__author__ = "Naman Agarwal"

from .analysis.aggregator import PackageAnalyzer
from .history.store import HistoryStore
from .insights import Insight, Severity, classify, derive_insights
from .snapshot.models import Snapshot

__all__ = [
    "PackageAnalyzer",  # Main entry point
    "HistoryStore",
    "Snapshot",
    "Insight",
    "Severity",
    "derive_insights",
    "classify",
]
