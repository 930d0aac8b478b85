"""Tests for the version/provenance probe (git and npm registry faked)."""

import json
import os
from datetime import datetime, timezone

import pytest

from package_insight.exceptions import ManifestError, ProbeFailure
from package_insight.probes.version import (
    GitInspector,
    analyze_version,
    fetch_registry_history,
    source_file_stamps,
)

REGISTRY_TIME = {
    "created": "2023-01-01T00:00:00.000Z",
    "modified": "2023-03-02T00:00:00.000Z",
    "1.0.0": "2023-01-01T00:00:00.000Z",
    "1.1.0": "2023-02-01T00:00:00.000Z",
    "1.0.1": "2023-01-15T00:00:00.000Z",
}


def _fake_git(fake_shell):
    fake_shell.on("git", "log", "-1", stdout="Mon Jan 1 10:00:00 2024 +0000\n")
    fake_shell.on("git", "rev-list", "--count", stdout="42\n")
    fake_shell.on("git", "tag", stdout="v1.2.0\nv1.1.0\nv1.0.0\n")
    fake_shell.on("git", "rev-parse", stdout="main\n")
    fake_shell.on("git", "log", "--format=%aN", stdout="Ann\nBob\nAnn\n")


def _set_mtime(path, when):
    ts = when.timestamp()
    os.utime(path, (ts, ts))


class TestGitInspector:
    def test_not_a_repository(self, make_package, fake_shell):
        git = GitInspector(make_package()).inspect()

        assert git.absent
        assert git.failure is ProbeFailure.MISSING
        assert fake_shell.calls == []

    def test_collects_repository_facts(self, make_package, fake_shell):
        pkg = make_package(files={".git/HEAD": "ref: refs/heads/main\n"})
        _fake_git(fake_shell)

        git = GitInspector(pkg, max_tags=2).inspect()

        assert git.present
        assert git.last_commit_date == "Mon Jan 1 10:00:00 2024 +0000"
        assert git.commit_count == 42
        assert git.tags == ("v1.2.0", "v1.1.0")
        assert git.tag_count == 3
        assert git.current_branch == "main"
        assert git.contributors_count == 2

    def test_git_failure_is_error_section(self, make_package, fake_shell):
        pkg = make_package(files={".git/HEAD": "ref: refs/heads/main\n"})
        fake_shell.on("git", fail="fatal: not a git repository")

        git = GitInspector(pkg).inspect()

        assert git.failed
        assert git.failure is ProbeFailure.COMMAND_FAILURE


class TestRegistryHistory:
    def test_versions_newest_first(self, tmp_path, fake_shell):
        fake_shell.on("npm", "view", stdout=json.dumps(REGISTRY_TIME))

        r = fetch_registry_history("my-lib", tmp_path)

        assert r.present
        assert [v.version for v in r.versions] == ["1.1.0", "1.0.1", "1.0.0"]
        assert r.version_count == 3
        assert r.latest_version == "1.1.0"
        assert r.created == "2023-01-01T00:00:00.000Z"
        assert fake_shell.commands() == [("npm", "view", "my-lib", "time", "--json")]

    def test_unpublished_package(self, tmp_path, fake_shell):
        fake_shell.on("npm", "view", fail="npm ERR! 404 Not Found")

        r = fetch_registry_history("my-lib", tmp_path)

        assert r.failed
        assert r.failure is ProbeFailure.COMMAND_FAILURE
        assert r.latest_version is None

    def test_unparseable_output(self, tmp_path, fake_shell):
        fake_shell.on("npm", "view", stdout="not json")

        r = fetch_registry_history("my-lib", tmp_path)

        assert r.failed
        assert r.failure is ProbeFailure.PARSE_ERROR

    def test_no_package_name(self, tmp_path, fake_shell):
        r = fetch_registry_history(None, tmp_path)
        assert r.absent
        assert fake_shell.calls == []


class TestSourceFileStamps:
    def test_newest_and_oldest_ignore_build_output(self, make_package):
        pkg = make_package(
            files={
                "src/index.ts": "export {}",
                "src/util.ts": "export {}",
                "dist/index.js": "built",
                "node_modules/dep/index.js": "dep",
            }
        )
        _set_mtime(pkg / "package.json", datetime(2024, 3, 1, tzinfo=timezone.utc))
        _set_mtime(pkg / "src/index.ts", datetime(2024, 5, 1, tzinfo=timezone.utc))
        _set_mtime(pkg / "src/util.ts", datetime(2023, 1, 1, tzinfo=timezone.utc))
        _set_mtime(pkg / "dist/index.js", datetime(2025, 1, 1, tzinfo=timezone.utc))
        _set_mtime(pkg / "node_modules/dep/index.js", datetime(2020, 1, 1, tzinfo=timezone.utc))

        newest, oldest = source_file_stamps(pkg)

        assert newest.path == "src/index.ts"
        assert oldest.path == "src/util.ts"
        assert newest.mtime.startswith("2024-05-01T00:00:00")

    def test_empty_directory(self, tmp_path):
        assert source_file_stamps(tmp_path) == (None, None)


class TestAnalyzeVersion:
    def test_assembles_sources(self, make_package, fake_shell):
        pkg = make_package(files={".git/HEAD": "ref: refs/heads/main\n"})
        _fake_git(fake_shell)
        fake_shell.on("npm", "view", stdout=json.dumps(REGISTRY_TIME))
        _set_mtime(pkg / "package.json", datetime(2024, 3, 1, tzinfo=timezone.utc))

        v = analyze_version(pkg)

        assert v.present
        assert v.current_version == "1.0.0"
        assert v.manifest_modified.startswith("2024-03-01T00:00:00")
        assert v.git.present
        assert v.registry.present

    def test_without_git_or_registry(self, make_package, fake_shell):
        v = analyze_version(make_package({"name": "my-lib"}))

        assert v.present
        assert v.current_version == "unknown"
        assert v.git.absent
        assert v.registry.failed

    def test_missing_manifest_is_absent(self, make_package, fake_shell):
        v = analyze_version(make_package(manifest=None))
        assert v.absent
        assert v.failure is ProbeFailure.MISSING

    def test_malformed_manifest_raises(self, make_package, fake_shell):
        with pytest.raises(ManifestError):
            analyze_version(make_package("{oops"))
