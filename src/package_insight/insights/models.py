"""Data models for the insight engine."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from ..config import ThresholdConfig
from ..snapshot.models import Snapshot


class Severity(str, Enum):
    INFO = "info"
    MEDIUM = "medium"
    HIGH = "high"
    POSITIVE = "positive"


@dataclass(frozen=True)
class Insight:
    """One recommendation derived from a snapshot.

    Attributes:
        text: Human-readable recommendation
        severity: How much attention it deserves
        rule: Stable name of the rule that produced it
    """

    text: str
    severity: Severity
    rule: str

    def to_dict(self) -> dict:
        return {"text": self.text, "severity": self.severity.value, "rule": self.rule}


@dataclass(frozen=True)
class RuleContext:
    """Everything a rule may look at.

    ``now`` is the snapshot's own creation time, so evaluating the same
    snapshot always gives the same answer.
    """

    snapshot: Snapshot
    previous: Optional[Snapshot]
    thresholds: ThresholdConfig
    now: Optional[datetime]


@dataclass(frozen=True)
class Rule:
    """A named check with a fixed severity.

    ``evaluate`` returns the insight text when the rule fires, None otherwise.
    """

    name: str
    section: str
    severity: Severity
    evaluate: Callable[[RuleContext], Optional[str]]
