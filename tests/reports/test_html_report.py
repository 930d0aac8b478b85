"""Tests for the self-contained HTML report."""

import json
import re

from package_insight.insights import Insight, Severity
from package_insight.reports import render_html
from package_insight.reports.html import history_blob, line_chart
from package_insight.snapshot import Snapshot, from_dict


def _embedded_history(html):
    match = re.search(r'<script type="application/json" id="history-data">(.*?)</script>', html, re.S)
    return json.loads(match.group(1))


class TestRenderHtml:
    def test_self_contained(self, full_snapshot, sample_insights):
        html = render_html(full_snapshot(), sample_insights)

        assert html.startswith("<!DOCTYPE html>")
        assert "<style>" in html
        assert "<script src" not in html
        assert "<link" not in html
        assert "http://" not in html and "https://" not in html

    def test_insights_carry_severity_class(self, full_snapshot, sample_insights):
        html = render_html(full_snapshot(), sample_insights)

        assert '<li class="insight high">' in html
        assert '<li class="insight medium">' in html
        assert "Extremely large node_modules size (120.00MB)." in html

    def test_text_is_escaped(self, make_snapshot):
        hostile = Insight(
            text='<img src=x onerror="alert(1)"> & more',
            severity=Severity.INFO,
            rule="custom",
        )
        html = render_html(make_snapshot(package_name="<b>pkg</b>"), [hostile])

        assert "<img src=x" not in html
        assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt; &amp; more" in html
        assert "<b>pkg</b>" not in html
        assert "&lt;b&gt;pkg&lt;/b&gt;" in html

    def test_absent_sections(self, make_snapshot, sample_insights):
        html = render_html(make_snapshot(), sample_insights)

        assert "package.json not found" in html
        assert "Distribution directory not found" in html
        assert "<svg viewBox" not in html

    def test_history_charts(self, full_snapshot, sample_insights):
        series = tuple(
            full_snapshot(created_at=f"2024-06-0{day}T00:00:00.000+00:00", build_ms=ms)
            for day, ms in ((1, 1000), (2, 2000), (3, 3000))
        )

        html = render_html(series[-1], sample_insights, history=series)

        assert "Historical Data" in html
        assert html.count("<polyline") == 3
        assert "Changes Since Last Analysis" in html

    def test_full_history_is_embedded(self, full_snapshot, sample_insights):
        before = full_snapshot(created_at="2024-06-01T00:00:00.000+00:00", build_ms=4000)
        after = full_snapshot(created_at="2024-06-02T00:00:00.000+00:00", build_ms=6000)

        data = _embedded_history(render_html(after, sample_insights, history=(before, after)))

        assert [d["created_at"] for d in data] == [before.created_at, after.created_at]
        assert [d["build"]["duration_ms"] for d in data] == [4000, 6000]
        assert data[0]["manifest"]["status"] == "present"
        assert data[0]["manifest"]["name"] == "my-lib"
        assert from_dict(Snapshot, data[1]) == after

    def test_version_dates_show_age(self, full_snapshot, sample_insights):
        html = render_html(full_snapshot(), sample_insights)

        assert "2024-05-01 00:00:00 UTC (1 month ago)" in html


class TestHistoryBlob:
    def test_script_end_tag_cannot_break_out(self, make_snapshot):
        blob = history_blob((make_snapshot(created_at="</script><script>alert(1)"),))

        assert "</script>" not in blob
        assert json.loads(blob)[0]["created_at"] == "</script><script>alert(1)"

    def test_empty(self):
        assert history_blob(()) == "[]"


class TestLineChart:
    def test_needs_two_points(self):
        assert line_chart("Build", [None, 1000, None], str, "#fff") == ""

    def test_skips_missing_runs(self):
        svg = line_chart("Build", [1000, None, 3000], str, "#fff")

        assert svg.count("<circle") == 2
        assert "<polyline" in svg

    def test_flat_series(self):
        svg = line_chart("Deps", [2, 2, 2], str, "#fff")
        assert svg.count("<circle") == 3
