"""Insight engine: heuristic recommendations derived from snapshots."""

from .classify import classify
from .engine import derive_insights
from .models import Insight, Rule, RuleContext, Severity
from .rules import RULES

__all__ = [
    "derive_insights",
    "classify",
    "Insight",
    "Severity",
    "Rule",
    "RuleContext",
    "RULES",
]
