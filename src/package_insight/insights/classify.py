"""Keyword classifier for free-text insights.

Generated insights carry the severity of the rule that produced them. This
classifier serves text without one, e.g. insights read back from reports
written by older versions.
"""

from .models import Severity

# Checked in this order; the first tier with a matching keyword wins
HIGH_KEYWORDS = (
    "extremely large",
    "high compression ratio",
    "hasn't been updated in",
    "significantly larger",
)
MEDIUM_KEYWORDS = ("consider", "large", "no test", "no lint")
POSITIVE_KEYWORDS = ("excellent", "great job", "active maintenance")


def classify(text: str) -> Severity:
    """Severity of an insight text by keyword (case-insensitive)."""
    lowered = text.lower()
    if any(k in lowered for k in HIGH_KEYWORDS):
        return Severity.HIGH
    if any(k in lowered for k in MEDIUM_KEYWORDS):
        return Severity.MEDIUM
    if any(k in lowered for k in POSITIVE_KEYWORDS):
        return Severity.POSITIVE
    return Severity.INFO
