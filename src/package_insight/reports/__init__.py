"""Markdown, HTML and JSON report renderers."""

from .html import render_html
from .json_report import build_json_report, render_json
from .markdown import render_markdown
from .writer import ReportPaths, report_paths, write_reports

__all__ = [
    "render_markdown",
    "render_html",
    "render_json",
    "build_json_report",
    "write_reports",
    "report_paths",
    "ReportPaths",
]
