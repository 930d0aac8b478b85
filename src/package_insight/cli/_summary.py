"""Rich tables printed after a run."""

from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..formatting import format_bytes, format_duration, format_percent
from ..insights.models import Insight
from ..reports.writer import ReportPaths
from ..snapshot.models import Snapshot
from ._common import SEVERITY_STYLES


def summary_table(snapshot: Snapshot) -> Table:
    """Headline numbers for one snapshot; sections that did not run show N/A."""
    m, b, d = snapshot.manifest, snapshot.build, snapshot.dist
    deps, sizes, pack = snapshot.dependencies, snapshot.dependency_sizes, snapshot.package_size

    table = Table(title=f"Package Analysis: {escape(snapshot.package_name)}", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value")

    table.add_row("Version", escape(m.version or "unknown") if m.present else "N/A")
    table.add_row(
        "Build time",
        format_duration(b.duration_ms) if b.success and b.duration_ms is not None else "N/A",
    )
    table.add_row(
        "Distribution",
        f"{d.files.total_files} files, {format_bytes(d.sizes.total_size)}" if d.present else "N/A",
    )
    table.add_row(
        "Dependencies",
        f"{deps.counts.dependencies} runtime, {deps.counts.dev_dependencies} dev"
        if deps.present
        else "N/A",
    )
    table.add_row("node_modules", format_bytes(sizes.total_size) if sizes.present else "N/A")
    table.add_row(
        "Packed size",
        f"{format_bytes(pack.packed_size)} ({format_percent(pack.compression_ratio)} of unpacked)"
        if pack.present and pack.success
        else "N/A",
    )
    return table


def insights_table(insights: Sequence[Insight]) -> Table:
    table = Table(title="Insights", show_lines=False)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Insight")
    for insight in insights:
        sev = insight.severity.value
        style = SEVERITY_STYLES.get(sev, "")
        table.add_row(f"[{style}]{sev}[/{style}]", escape(insight.text))
    return table


def print_summary(
    console: Console, snapshot: Snapshot, insights: Sequence[Insight], paths: ReportPaths
) -> None:
    console.print()
    console.print(summary_table(snapshot))
    console.print()
    console.print(insights_table(insights))
    console.print()
    console.print("[bold]Reports written:[/bold]")
    for path in (paths.markdown, paths.html, paths.json):
        console.print(f"  {escape(str(path))}")
