"""Write the three report formats for one run."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..exceptions import FileAccessError
from ..insights.models import Insight
from ..logging_config import get_logger
from ..snapshot.models import Snapshot
from .html import render_html
from .json_report import render_json
from .markdown import render_markdown

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReportPaths:
    markdown: Path
    html: Path
    json: Path


def report_paths(output_dir: Path, package_name: str) -> ReportPaths:
    stem = f"{package_name}-analysis"
    return ReportPaths(
        markdown=output_dir / f"{stem}.md",
        html=output_dir / f"{stem}.html",
        json=output_dir / f"{stem}.json",
    )


def write_reports(
    snapshot: Snapshot,
    insights: Sequence[Insight],
    history: Sequence[Snapshot],
    output_dir: Path,
    generated_at: Optional[str] = None,
) -> ReportPaths:
    """Render and write ``<name>-analysis.{md,html,json}`` into ``output_dir``.

    Raises:
        FileAccessError: If the directory or a report cannot be written
    """
    output_dir = Path(output_dir)
    paths = report_paths(output_dir, snapshot.package_name)
    rendered = (
        (paths.markdown, render_markdown(snapshot, insights, history, generated_at)),
        (paths.html, render_html(snapshot, insights, history, generated_at)),
        (paths.json, render_json(snapshot, insights, history, generated_at)),
    )

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileAccessError(output_dir, str(e)) from e

    for path, text in rendered:
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise FileAccessError(path, str(e)) from e
        logger.debug(f"Wrote {path}")
    return paths
