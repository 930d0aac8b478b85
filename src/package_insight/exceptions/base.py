"""Base exception for Package Insight."""

from typing import Dict, Optional

from .taxonomy import ProbeFailure


class PackageInsightError(Exception):
    """
    Base exception for all Package Insight errors.

    Attributes:
        message: Human-readable summary
        details: Extra key/value context appended to ``str(error)``
        failure: Section failure kind recorded when a probe raises this error
            (None for errors that never come from a probe)
    """

    failure: Optional[ProbeFailure] = None

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, str]] = None,
        failure: Optional[ProbeFailure] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if failure is not None:
            self.failure = failure

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
