"""Markdown report."""

from pathlib import PurePath
from typing import List, Optional, Sequence

from ..formatting import (
    format_bytes,
    format_datetime,
    format_duration,
    format_percent,
    format_signed,
)
from ..history.compare import compare_snapshots, summarize_trends
from ..history.store import previous_snapshot
from ..insights.models import Insight
from ..snapshot.models import Snapshot

# Unit formatter per trend metric
_TREND_FORMAT = {
    "build_time": ("Build Time", format_duration),
    "dist_size": ("Distribution Size", format_bytes),
    "dependency_count": ("Runtime Dependencies", lambda v: f"{v:g}"),
}


def _yes_no(value: Optional[bool]) -> str:
    return "Yes" if value is True else "No"


def _or_na(value) -> str:
    return str(value) if value not in (None, "") else "N/A"


def render_markdown(
    snapshot: Snapshot,
    insights: Sequence[Insight],
    history: Sequence[Snapshot] = (),
    generated_at: Optional[str] = None,
) -> str:
    """Render the full Markdown report for ``snapshot``.

    Args:
        snapshot: Snapshot being reported
        insights: Insights derived for it
        history: Chronological series (may include ``snapshot``)
        generated_at: Timestamp printed in the header (defaults to ``created_at``)
    """
    lines: List[str] = [
        f"# TypeScript Package Analysis: {snapshot.package_name}",
        f"Generated on: {format_datetime(generated_at or snapshot.created_at)}",
        "",
    ]
    for section in (
        _package_summary,
        _version_section,
        _build_section,
        _dist_section,
        _compiler_config_section,
        _dependencies_section,
        _dependency_sizes_section,
        _package_size_section,
        _performance_section,
    ):
        lines.extend(section(snapshot))
        lines.append("")

    lines.extend(_changes_section(snapshot, history))
    lines.extend(_trends_section(history))

    lines.append("## Insights and Recommendations")
    if insights:
        lines.extend(f"- **[{i.severity.value}]** {i.text}" for i in insights)
    else:
        lines.append("No insights available.")
    lines.append("")
    return "\n".join(lines)


# ── Sections ─────────────────────────────────────────────────────────


def _package_summary(s: Snapshot) -> List[str]:
    m = s.manifest
    out = ["## Package Summary"]
    if not m.present:
        out.append(f"- package.json {'could not be read' if m.failed else 'not found'}")
        return out
    out += [
        f"- **Name**: {m.name or s.package_name}",
        f"- **Version**: {_or_na(m.version)}",
        f"- **Description**: {_or_na(m.description)}",
        f"- **Author**: {m.author or 'Not specified'}",
        f"- **License**: {_or_na(m.license)}",
        f"- **Entry Points**: main={_or_na(m.main)}, module={_or_na(m.module)}, types={_or_na(m.types)}",
        f"- **Exports Field**: {_yes_no(m.has_exports)}",
        f"- **Scripts**: {', '.join(m.script_names) or 'None'}",
    ]
    return out


def _version_section(s: Snapshot) -> List[str]:
    v = s.version
    out = ["## Version & Modification Information"]
    if not v.present:
        out.append("- Version history information not available")
        return out
    out += [
        f"- **Current Version**: {_or_na(v.current_version)}",
        f"- **Package.json Last Modified**: {format_datetime(v.manifest_modified)}",
    ]
    for label, stamp in (("Newest File", v.newest_file), ("Oldest File", v.oldest_file)):
        if stamp is None:
            out.append(f"- **{label}**: N/A")
        else:
            out.append(f"- **{label}**: {stamp.path} ({format_datetime(stamp.mtime)})")

    git = v.git
    if git.present:
        out += [
            "",
            "### Git Information",
            f"- **Last Commit**: {_or_na(git.last_commit_date)}",
            f"- **Current Branch**: {_or_na(git.current_branch)}",
            f"- **Commit Count**: {git.commit_count}",
            f"- **Contributors**: {git.contributors_count}",
            f"- **Tags**: {git.tag_count} ({', '.join(git.tags) or 'N/A'})",
        ]

    registry = v.registry
    if registry.present:
        out += [
            "",
            "### NPM Version History",
            f"- **Initially Published**: {format_datetime(registry.created)}",
            f"- **Last Published**: {format_datetime(registry.modified)}",
            f"- **Version Count**: {registry.version_count}",
            "- **Recent Versions**:",
        ]
        recent = registry.versions[:5]
        if recent:
            out += [f"  - {pv.version}: {format_datetime(pv.date)}" for pv in recent]
        else:
            out.append("  - No version history available")
    return out


def _build_section(s: Snapshot) -> List[str]:
    b = s.build
    out = ["## Build Information"]
    if b.present and b.success:
        out += [
            f"- **Build Time**: {format_duration(b.duration_ms or 0)}",
            f"- **Build Script**: {'Present' if s.manifest.has_build_script else 'Not found'}",
        ]
    elif b.failed:
        out.append(f"- **Build Failed**: {b.error or 'Unknown error'}")
    else:
        out.append("- Build was skipped")
    return out


def _dist_section(s: Snapshot) -> List[str]:
    d = s.dist
    out = ["## Distribution Files"]
    if not d.present:
        out.append("- Distribution directory not found")
        return out
    f, z, mods = d.files, d.sizes, d.modules
    out += [
        f"- **Distribution Directory**: {PurePath(d.path).name if d.path else 'N/A'}",
        f"- **Total Files**: {f.total_files}",
        f"- **Total Size**: {format_bytes(z.total_size)}",
        "",
        "### File Breakdown",
        f"- JavaScript Files: {f.js_files} ({format_bytes(z.js_size)})",
        f"- TypeScript Declaration Files: {f.dts_files} ({format_bytes(z.dts_size)})",
        f"- Source Map Files: {f.map_files} ({format_bytes(z.map_size)})",
        f"- Declaration Map Files: {f.dts_map_files} ({format_bytes(z.dts_map_size)})",
        f"- Other Files: {f.other_files} ({format_bytes(z.other_size)})",
        "",
        "### Module Information",
        f"- ESM Modules: {mods.esm_modules}",
        f"- CommonJS Modules: {mods.cjs_modules}",
        f"- Source Map References: {mods.source_map_references}",
    ]
    return out


def _compiler_config_section(s: Snapshot) -> List[str]:
    tc = s.compiler_config
    out = ["## TypeScript Configuration"]
    if not tc.present:
        out.append(
            "- TypeScript configuration could not be parsed"
            if tc.failed
            else "- TypeScript configuration not found"
        )
        return out
    out += [
        f"- **Config File**: {PurePath(tc.path).name if tc.path else 'N/A'}",
        f"- **Target**: {tc.target or 'Not specified'}",
        f"- **Module**: {tc.module or 'Not specified'}",
        f"- **Declaration**: {_yes_no(tc.declaration)}",
        f"- **Declaration Maps**: {_yes_no(tc.declaration_map)}",
        f"- **Source Maps**: {_yes_no(tc.source_map)}",
        f"- **Strict Mode**: {_yes_no(tc.strict)}",
        f"- **JSX Support**: {'Yes' if tc.jsx else 'No'}",
        f"- **Paths Mappings**: {tc.paths}",
        f"- **References**: {tc.references}",
        f"- **Incremental Builds**: {_yes_no(tc.incremental)}",
    ]
    return out


def _dependencies_section(s: Snapshot) -> List[str]:
    d = s.dependencies
    out = ["## Dependencies"]
    if not d.present:
        out.append("- Dependency information not available")
        return out
    c, t = d.counts, d.tooling
    out += [
        f"- **Runtime Dependencies**: {c.dependencies}",
        f"- **Development Dependencies**: {c.dev_dependencies}",
        f"- **Peer Dependencies**: {c.peer_dependencies}",
        f"- **Type Definitions**: {c.type_definitions}",
        "",
        "### Tooling",
        f"- **Build Tools**: {', '.join(t.build_tools) or 'None detected'}",
        f"- **Testing Tools**: {', '.join(t.testing_tools) or 'None detected'}",
        f"- **Linting Tools**: {', '.join(t.linting_tools) or 'None detected'}",
    ]
    return out


def _dependency_sizes_section(s: Snapshot) -> List[str]:
    d = s.dependency_sizes
    out = ["## Dependency Size Analysis"]
    if not d.present:
        out.append("- Dependency size analysis failed or was skipped")
        return out
    out += [
        f"- **Total node_modules Size**: {format_bytes(d.total_size)}",
        f"- **Direct Dependencies**: {d.direct_dependencies_count}",
        f"- **Transitive Dependencies**: {d.transitive_dependencies_count}",
        f"- **Total Installed Dependencies**: {d.all_dependencies_count}",
        "",
        "### Largest Dependencies",
    ]
    if d.dependency_sizes:
        out += [
            f"- {dep.name} ({dep.version}): {format_bytes(dep.size)}"
            for dep in d.dependency_sizes[:10]
        ]
    else:
        out.append("- No dependency size information available")
    return out


def _package_size_section(s: Snapshot) -> List[str]:
    p = s.package_size
    out = ["## Package Size Analysis"]
    if not (p.present and p.success):
        out.append("- Package size analysis failed or was skipped")
        return out
    out += [
        f"- **Packed Size (npm tarball)**: {format_bytes(p.packed_size)}",
        f"- **Unpacked Size**: {format_bytes(p.unpacked_size)}",
        f"- **Compression Ratio**: {format_percent(p.compression_ratio)}",
        f"- **Tarball Location**: {_or_na(p.tarball_path)}",
        "",
        "### Largest Files in Package",
    ]
    if p.largest_files:
        out += [f"- {f.path}: {format_bytes(f.size)}" for f in p.largest_files]
    else:
        out.append("- No file size information available")
    return out


def _performance_section(s: Snapshot) -> List[str]:
    d, b = s.dist, s.build
    z = d.sizes
    if d.present and d.files.dts_files > 0 and z.dts_size > 0:
        ratio = f"{z.js_size / z.dts_size:.2f}:1"
    else:
        ratio = "N/A"
    return [
        "## Performance Metrics",
        f"- Total Distribution Size: {format_bytes(z.total_size) if d.present else 'N/A'}",
        f"- Type Definitions Size: {format_bytes(z.dts_size) if d.present else 'N/A'}",
        f"- Source Maps Size: {format_bytes(z.map_size + z.dts_map_size) if d.present else 'N/A'}",
        f"- JavaScript to TypeScript Ratio: {ratio}",
        f"- Build Time: {format_duration(b.duration_ms) if b.success and b.duration_ms else 'N/A'}",
    ]


def _changes_section(s: Snapshot, history: Sequence[Snapshot]) -> List[str]:
    previous = previous_snapshot(tuple(history), s)
    if previous is None:
        return []
    delta = compare_snapshots(s, previous)
    if delta.empty:
        return []
    out = [
        "## Changes Since Last Analysis",
        f"Compared with the analysis of {format_datetime(previous.created_at)}",
    ]
    if delta.build_time_change is not None:
        out.append(f"- Build Time: {format_signed(delta.build_time_change, format_duration)}")
    if delta.dist_size_change is not None:
        out.append(f"- Distribution Size: {format_signed(delta.dist_size_change, format_bytes)}")
    if delta.dependency_count_change is not None:
        out.append(f"- Runtime Dependencies: {delta.dependency_count_change:+d}")
    out.append("")
    return out


def _trends_section(history: Sequence[Snapshot]) -> List[str]:
    summary = summarize_trends(history)
    if not summary.metrics:
        return []
    out = [
        "## Historical Trends",
        f"Across {summary.runs} analyses",
        "",
        "| Metric | Trend | First | Latest | Per Run |",
        "|---|---|---|---|---|",
    ]
    for trend in summary.metrics:
        label, fmt = _TREND_FORMAT[trend.metric]
        out.append(
            f"| {label} | {trend.sparkline} | {fmt(trend.first)} | {fmt(trend.last)} "
            f"| {format_signed(trend.slope, fmt)} |"
        )
    out.append("")
    return out
