"""Exception hierarchy for Package Insight."""

from .analysis import (
    AnalysisError,
    CommandError,
    FileAccessError,
    HistoryError,
    ManifestError,
)
from .base import PackageInsightError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .taxonomy import ProbeFailure, failure_for

__all__ = [
    "PackageInsightError",
    "AnalysisError",
    "CommandError",
    "FileAccessError",
    "HistoryError",
    "ManifestError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "ProbeFailure",
    "failure_for",
]
