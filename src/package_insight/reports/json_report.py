"""JSON report: the snapshot plus its insights and the comparison with the previous run."""

import json
from typing import Optional, Sequence

from ..history.compare import compare_snapshots
from ..history.store import previous_snapshot
from ..insights.models import Insight
from ..snapshot.codec import to_dict
from ..snapshot.models import Snapshot


def build_json_report(
    snapshot: Snapshot,
    insights: Sequence[Insight],
    history: Sequence[Snapshot] = (),
    generated_at: Optional[str] = None,
) -> dict:
    previous = previous_snapshot(tuple(history), snapshot)
    return {
        "package_name": snapshot.package_name,
        "generated_at": generated_at or snapshot.created_at,
        "analysis": to_dict(snapshot),
        "insights": [i.to_dict() for i in insights],
        "comparison": to_dict(compare_snapshots(snapshot, previous)) if previous else None,
        "history_runs": len(history),
    }


def render_json(
    snapshot: Snapshot,
    insights: Sequence[Insight],
    history: Sequence[Snapshot] = (),
    generated_at: Optional[str] = None,
) -> str:
    """Render the JSON report as an indented document."""
    return json.dumps(build_json_report(snapshot, insights, history, generated_at), indent=2)
