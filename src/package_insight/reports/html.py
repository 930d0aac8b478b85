"""Generate a self-contained HTML report.

Everything is inline: CSS, the history series as a JSON blob inside a
``<script type="application/json">`` tag, and the history charts drawn as
plain SVG polylines. The file has no external dependencies (no CDN) and
opens from any local file:// path.
"""

import json
from html import escape
from typing import List, Optional, Sequence, Tuple

from ..formatting import (
    format_bytes,
    format_datetime,
    format_duration,
    format_percent,
    format_signed,
    parse_timestamp,
    relative_time,
)
from ..history.compare import build_time, compare_snapshots, dependency_count, dist_size
from ..history.store import previous_snapshot
from ..insights.models import Insight
from ..snapshot.codec import to_dict
from ..snapshot.models import Snapshot

# Chart geometry (SVG user units)
_CHART_W = 600
_CHART_H = 200
_CHART_PAD = 32

_CHARTS = (
    ("Build Time", build_time, format_duration, "#58a6ff"),
    ("Distribution Size", dist_size, format_bytes, "#3fb950"),
    ("Runtime Dependencies", dependency_count, lambda v: f"{v:g}", "#d29922"),
)


def _e(value) -> str:
    """HTML-escape any value (None renders as N/A)."""
    if value is None or value == "":
        return "N/A"
    return escape(str(value), quote=True)


def render_html(
    snapshot: Snapshot,
    insights: Sequence[Insight],
    history: Sequence[Snapshot] = (),
    generated_at: Optional[str] = None,
) -> str:
    """Render the HTML report for ``snapshot``.

    Args:
        snapshot: Snapshot being reported
        insights: Insights derived for it
        history: Chronological series (may include ``snapshot``); charts are
            drawn when it holds at least two runs
        generated_at: Timestamp printed in the header (defaults to ``created_at``)
    """
    body = "\n".join(
        [
            _summary_card(snapshot),
            _version_card(snapshot),
            _dist_card(snapshot),
            _compiler_config_card(snapshot),
            _dependencies_card(snapshot),
            _package_size_card(snapshot),
            _changes_card(snapshot, history),
            _history_card(history),
            _insights_card(insights),
        ]
    )
    return _PAGE.format(
        title=_e(snapshot.package_name),
        generated=_e(format_datetime(generated_at or snapshot.created_at)),
        body=body,
        history_json=history_blob(history),
    )


def history_blob(history: Sequence[Snapshot]) -> str:
    """The full ``history`` series as JSON safe to embed in a ``<script>`` element."""
    data = [to_dict(s) for s in history]
    # "</" would close the script element early
    return json.dumps(data).replace("</", "<\\/")


# ── Cards ────────────────────────────────────────────────────────────


def _card(title: str, inner: str) -> str:
    return f'<section class="card">\n<h2>{_e(title)}</h2>\n{inner}\n</section>'


def _rows(pairs: Sequence[Tuple[str, object]]) -> str:
    cells = "".join(f"<tr><th>{_e(k)}</th><td>{_e(v)}</td></tr>" for k, v in pairs)
    return f'<table class="kv">{cells}</table>'


def _dated(value: Optional[str], created_at: str) -> str:
    """Timestamp plus its age at analysis time, e.g. ``... UTC (3 months ago)``."""
    moment, now = parse_timestamp(value), parse_timestamp(created_at)
    if moment is None or now is None:
        return format_datetime(value)
    return f"{format_datetime(value)} ({relative_time(moment, now)})"


def _notice(text: str) -> str:
    return f'<p class="muted">{_e(text)}</p>'


def _summary_card(s: Snapshot) -> str:
    m = s.manifest
    if not m.present:
        return _card("Package Summary", _notice("package.json not found" if m.absent else f"package.json could not be read: {m.error}"))
    return _card(
        "Package Summary",
        _rows(
            [
                ("Name", m.name or s.package_name),
                ("Version", m.version),
                ("Description", m.description),
                ("Author", m.author or "Not specified"),
                ("License", m.license),
                ("Main", m.main),
                ("Module", m.module),
                ("Types", m.types),
                ("Exports field", "Yes" if m.has_exports else "No"),
                ("Scripts", ", ".join(m.script_names) or "None"),
                ("Build time", format_duration(s.build.duration_ms) if s.build.success and s.build.duration_ms else None),
            ]
        ),
    )


def _version_card(s: Snapshot) -> str:
    v = s.version
    if not v.present:
        return _card("Version & Modification History", _notice("Version history information not available"))
    pairs: List[Tuple[str, object]] = [
        ("Current version", v.current_version),
        ("package.json modified", _dated(v.manifest_modified, s.created_at)),
        ("Newest file", f"{v.newest_file.path} ({format_datetime(v.newest_file.mtime)})" if v.newest_file else None),
        ("Oldest file", f"{v.oldest_file.path} ({format_datetime(v.oldest_file.mtime)})" if v.oldest_file else None),
    ]
    if v.git.present:
        g = v.git
        pairs += [
            ("Last commit", g.last_commit_date),
            ("Branch", g.current_branch),
            ("Commits", g.commit_count),
            ("Contributors", g.contributors_count),
            ("Tags", f"{g.tag_count} ({', '.join(g.tags) or 'N/A'})"),
        ]
    if v.registry.present:
        r = v.registry
        pairs += [
            ("First published", format_datetime(r.created)),
            ("Last published", _dated(r.modified, s.created_at)),
            ("Published versions", r.version_count),
            ("Latest published", r.latest_version),
        ]
    return _card("Version & Modification History", _rows(pairs))


def _dist_card(s: Snapshot) -> str:
    d = s.dist
    if not d.present:
        return _card("Distribution Files", _notice("Distribution directory not found"))
    f, z, mods = d.files, d.sizes, d.modules
    breakdown = [
        ("JavaScript", f.js_files, z.js_size),
        ("Declarations (.d.ts)", f.dts_files, z.dts_size),
        ("Source maps", f.map_files, z.map_size),
        ("Declaration maps", f.dts_map_files, z.dts_map_size),
        ("Other", f.other_files, z.other_size),
    ]
    rows = "".join(
        f"<tr><td>{_e(label)}</td><td class=\"num\">{count}</td>"
        f"<td class=\"num\">{_e(format_bytes(size))}</td>"
        f"<td>{_bar(size, z.total_size)}</td></tr>"
        for label, count, size in breakdown
    )
    table = (
        '<table class="grid"><tr><th>Type</th><th>Files</th><th>Size</th><th>Share</th></tr>'
        f"{rows}</table>"
    )
    summary = _rows(
        [
            ("Directory", d.path),
            ("Total files", f.total_files),
            ("Total size", format_bytes(z.total_size)),
            ("ESM modules", mods.esm_modules),
            ("CommonJS modules", mods.cjs_modules),
            ("Source map references", mods.source_map_references),
        ]
    )
    return _card("Distribution Files", summary + table)


def _bar(part: int, total: int) -> str:
    pct = (part / total * 100) if total else 0.0
    return (
        f'<svg class="bar" width="120" height="10" role="img" aria-label="{pct:.1f}%">'
        f'<rect width="120" height="10" fill="#21262d"/>'
        f'<rect width="{pct * 1.2:.1f}" height="10" fill="#58a6ff"/></svg>'
    )


def _compiler_config_card(s: Snapshot) -> str:
    tc = s.compiler_config
    if not tc.present:
        return _card("TypeScript Configuration", _notice("TypeScript configuration not found" if tc.absent else f"tsconfig could not be parsed: {tc.error}"))

    def yn(value: Optional[bool]) -> str:
        return "Yes" if value is True else "No"

    return _card(
        "TypeScript Configuration",
        _rows(
            [
                ("Config file", tc.path),
                ("Target", tc.target or "Not specified"),
                ("Module", tc.module or "Not specified"),
                ("Module resolution", tc.module_resolution or "Not specified"),
                ("Strict", yn(tc.strict)),
                ("Declaration", yn(tc.declaration)),
                ("Declaration maps", yn(tc.declaration_map)),
                ("Source maps", yn(tc.source_map)),
                ("esModuleInterop", yn(tc.es_module_interop)),
                ("skipLibCheck", yn(tc.skip_lib_check)),
                ("Incremental", yn(tc.incremental)),
                ("JSX", tc.jsx or "No"),
                ("Path mappings", tc.paths),
                ("Project references", tc.references),
                ("Extends", tc.extends),
            ]
        ),
    )


def _dependencies_card(s: Snapshot) -> str:
    d, z = s.dependencies, s.dependency_sizes
    parts = []
    if d.present:
        c, t = d.counts, d.tooling
        parts.append(
            _rows(
                [
                    ("Runtime", c.dependencies),
                    ("Development", c.dev_dependencies),
                    ("Peer", c.peer_dependencies),
                    ("Type definitions", c.type_definitions),
                    ("Build tools", ", ".join(t.build_tools) or "None detected"),
                    ("Testing tools", ", ".join(t.testing_tools) or "None detected"),
                    ("Linting tools", ", ".join(t.linting_tools) or "None detected"),
                ]
            )
        )
    else:
        parts.append(_notice("Dependency information not available"))

    if z.present:
        parts.append(
            _rows(
                [
                    ("node_modules size", format_bytes(z.total_size)),
                    ("Installed packages", z.all_dependencies_count),
                    ("Direct", z.direct_dependencies_count),
                    ("Transitive", z.transitive_dependencies_count),
                ]
            )
        )
        if z.dependency_sizes:
            rows = "".join(
                f"<tr><td>{_e(dep.name)}</td><td>{_e(dep.version)}</td>"
                f"<td class=\"num\">{_e(format_bytes(dep.size))}</td>"
                f"<td>{_bar(dep.size, z.total_size)}</td></tr>"
                for dep in z.dependency_sizes[:10]
            )
            parts.append(
                '<h3>Largest Dependencies</h3><table class="grid">'
                "<tr><th>Package</th><th>Version</th><th>Size</th><th>Share</th></tr>"
                f"{rows}</table>"
            )
    else:
        parts.append(_notice("Dependency size analysis failed or was skipped"))
    return _card("Dependencies", "\n".join(parts))


def _package_size_card(s: Snapshot) -> str:
    p = s.package_size
    if not (p.present and p.success):
        return _card("Package Size Analysis", _notice("Package size analysis failed or was skipped"))
    summary = _rows(
        [
            ("Packed size", format_bytes(p.packed_size)),
            ("Unpacked size", format_bytes(p.unpacked_size)),
            ("Compression ratio", format_percent(p.compression_ratio)),
            ("Tarball", p.tarball_name),
        ]
    )
    rows = "".join(
        f"<tr><td>{_e(f.path)}</td><td class=\"num\">{_e(format_bytes(f.size))}</td></tr>"
        for f in p.largest_files
    )
    files = (
        '<h3>Largest Files</h3><table class="grid"><tr><th>File</th><th>Size</th></tr>'
        f"{rows}</table>"
        if rows
        else _notice("No file size information available")
    )
    return _card("Package Size Analysis", summary + files)


def _changes_card(s: Snapshot, history: Sequence[Snapshot]) -> str:
    previous = previous_snapshot(tuple(history), s)
    if previous is None:
        return ""
    delta = compare_snapshots(s, previous)
    if delta.empty:
        return ""
    pairs: List[Tuple[str, object]] = [("Compared with", format_datetime(previous.created_at))]
    if delta.build_time_change is not None:
        pairs.append(("Build time", format_signed(delta.build_time_change, format_duration)))
    if delta.dist_size_change is not None:
        pairs.append(("Distribution size", format_signed(delta.dist_size_change, format_bytes)))
    if delta.dependency_count_change is not None:
        pairs.append(("Runtime dependencies", f"{delta.dependency_count_change:+d}"))
    return _card("Changes Since Last Analysis", _rows(pairs))


def _history_card(history: Sequence[Snapshot]) -> str:
    if len(history) < 2:
        return ""
    charts = [
        line_chart(title, [metric(s) for s in history], fmt, color)
        for title, metric, fmt, color in _CHARTS
    ]
    return _card("Historical Data", "\n".join(c for c in charts if c))


def line_chart(title: str, values: Sequence[Optional[float]], fmt, color: str) -> str:
    """Inline SVG line chart; runs without a value are left out. Empty if < 2 points."""
    points = [(i, float(v)) for i, v in enumerate(values) if v is not None]
    if len(points) < 2:
        return ""
    n = max(len(values) - 1, 1)
    lo = min(v for _, v in points)
    hi = max(v for _, v in points)
    span = (hi - lo) or 1.0
    inner_w = _CHART_W - 2 * _CHART_PAD
    inner_h = _CHART_H - 2 * _CHART_PAD

    coords = []
    for i, v in points:
        x = _CHART_PAD + inner_w * i / n
        y = _CHART_PAD + inner_h * (1 - (v - lo) / span)
        coords.append((x, y, v))

    polyline = " ".join(f"{x:.1f},{y:.1f}" for x, y, _ in coords)
    dots = "".join(
        f'<circle cx="{x:.1f}" cy="{y:.1f}" r="3" fill="{color}"><title>{_e(fmt(v))}</title></circle>'
        for x, y, v in coords
    )
    return (
        f'<figure class="chart"><figcaption>{_e(title)}</figcaption>'
        f'<svg viewBox="0 0 {_CHART_W} {_CHART_H}" role="img" aria-label="{_e(title)}">'
        f'<rect width="{_CHART_W}" height="{_CHART_H}" fill="#161b22"/>'
        f'<text x="{_CHART_PAD}" y="20" class="axis">{_e(fmt(hi))}</text>'
        f'<text x="{_CHART_PAD}" y="{_CHART_H - 8}" class="axis">{_e(fmt(lo))}</text>'
        f'<polyline points="{polyline}" fill="none" stroke="{color}" stroke-width="2"/>'
        f"{dots}</svg></figure>"
    )


def _insights_card(insights: Sequence[Insight]) -> str:
    if not insights:
        return _card("Insights and Recommendations", _notice("No insights available."))
    items = "".join(
        f'<li class="insight {_e(i.severity.value)}">'
        f'<span class="badge">{_e(i.severity.value)}</span> {_e(i.text)}</li>'
        for i in insights
    )
    return _card("Insights and Recommendations", f'<ul class="insights">{items}</ul>')


_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Package Analysis: {title}</title>
<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; background: #0d1117; color: #c9d1d9; }}
header {{ padding: 24px 32px; border-bottom: 1px solid #21262d; }}
header h1 {{ font-size: 24px; color: #58a6ff; margin-bottom: 8px; }}
header p {{ font-size: 13px; color: #8b949e; }}
main {{ padding: 16px 32px; display: grid; gap: 16px; }}
.card {{ background: #161b22; border: 1px solid #21262d; border-radius: 8px; padding: 16px; }}
.card h2 {{ font-size: 18px; color: #58a6ff; margin-bottom: 12px; }}
.card h3 {{ font-size: 14px; color: #8b949e; margin: 12px 0 6px; }}
table {{ border-collapse: collapse; font-size: 13px; }}
.kv th {{ text-align: left; color: #8b949e; font-weight: 500; padding: 3px 16px 3px 0; }}
.grid {{ width: 100%; margin-top: 8px; }}
.grid th, .grid td {{ text-align: left; padding: 4px 8px; border-bottom: 1px solid #21262d; }}
.num {{ text-align: right; font-variant-numeric: tabular-nums; }}
.muted {{ color: #8b949e; font-size: 13px; }}
.chart {{ margin: 8px 0 16px; }}
.chart figcaption {{ font-size: 13px; color: #8b949e; margin-bottom: 4px; }}
.chart svg {{ width: 100%; max-width: 600px; }}
.axis {{ fill: #8b949e; font-size: 11px; }}
.insights {{ list-style: none; }}
.insight {{ padding: 8px 12px; margin-bottom: 8px; border-left: 4px solid #8b949e; background: #0d1117; border-radius: 4px; font-size: 14px; }}
.insight.high {{ border-left-color: #f85149; }}
.insight.medium {{ border-left-color: #d29922; }}
.insight.positive {{ border-left-color: #3fb950; }}
.badge {{ font-size: 11px; text-transform: uppercase; letter-spacing: 0.5px; color: #8b949e; margin-right: 6px; }}
footer {{ padding: 24px 32px; text-align: center; color: #484f58; font-size: 12px; border-top: 1px solid #21262d; }}
</style>
</head>
<body>
<header>
  <h1>Package Analysis: {title}</h1>
  <p>Generated on {generated}</p>
</header>
<main>
{body}
</main>
<footer>Generated by Package Insight</footer>
<script type="application/json" id="history-data">{history_json}</script>
</body>
</html>
"""
