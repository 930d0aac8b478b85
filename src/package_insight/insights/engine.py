"""Derive insights from a snapshot and its history."""

from typing import List, Optional, Sequence

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..formatting import parse_timestamp
from ..history.store import previous_snapshot
from ..logging_config import get_logger
from ..snapshot.models import Snapshot
from .models import Insight, RuleContext, Severity
from .rules import FALLBACK_RULE, FALLBACK_TEXT, RULES

logger = get_logger(__name__)


def derive_insights(
    snapshot: Snapshot,
    history: Sequence[Snapshot] = (),
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    previous: Optional[Snapshot] = None,
) -> List[Insight]:
    """
    Evaluate every rule against ``snapshot``.

    Pure and deterministic: time-based rules measure against the snapshot's
    own ``created_at``. The result is never empty; when no rule fires a
    single positive insight is returned.

    Args:
        snapshot: Snapshot to evaluate
        history: Chronological series the snapshot belongs to (may include it)
        thresholds: Limits used by the rules
        previous: Snapshot to compare against; defaults to the last entry of
            ``history`` created before ``snapshot``

    Returns:
        Insights in rule-table order
    """
    if previous is None and history:
        previous = previous_snapshot(tuple(history), snapshot)

    ctx = RuleContext(
        snapshot=snapshot,
        previous=previous,
        thresholds=thresholds,
        now=parse_timestamp(snapshot.created_at),
    )

    insights = []
    for rule in RULES:
        text = rule.evaluate(ctx)
        if text:
            insights.append(Insight(text=text, severity=rule.severity, rule=rule.name))

    if not insights:
        insights.append(Insight(text=FALLBACK_TEXT, severity=Severity.POSITIVE, rule=FALLBACK_RULE))

    logger.debug("%d insight(s) for %s", len(insights), snapshot.package_name)
    return insights
