"""Tests for the exception hierarchy and probe failure taxonomy."""

import json
from pathlib import Path

import pytest

from package_insight.exceptions import (
    AnalysisError,
    CommandError,
    ConfigurationError,
    FileAccessError,
    HistoryError,
    InvalidConfigError,
    InvalidPathError,
    ManifestError,
    PackageInsightError,
    ProbeFailure,
    failure_for,
)


class TestHierarchy:
    """Every error is catchable as PackageInsightError."""

    @pytest.mark.parametrize(
        "error",
        [
            FileAccessError(Path("a.json"), "denied"),
            ManifestError(Path("package.json"), "bad"),
            CommandError(["npm", "run", "build"], "exit 1", returncode=1),
            HistoryError(Path("h.json"), "exists"),
        ],
    )
    def test_analysis_errors(self, error):
        assert isinstance(error, AnalysisError)
        assert isinstance(error, PackageInsightError)

    def test_configuration_errors(self):
        assert isinstance(InvalidPathError(Path("x"), "missing"), ConfigurationError)
        assert isinstance(InvalidConfigError("max_tags", 0, "too small"), ConfigurationError)

    def test_details_in_message(self):
        e = CommandError(["npm", "pack"], "timed out", returncode=None)
        assert str(e) == "Command failed: npm pack: timed out (command=npm pack)"

    def test_manifest_error_names_the_file(self):
        e = ManifestError(Path("/pkg/tsconfig.json"), "Expecting value")
        assert e.message == "Failed to parse tsconfig.json: Expecting value"

    def test_command_error_keeps_stderr(self):
        e = CommandError(["npm", "run", "build"], "exit 2", returncode=2, stderr="TS2322")
        assert e.command == ("npm", "run", "build")
        assert e.returncode == 2
        assert e.stderr == "TS2322"
        assert e.details["returncode"] == "2"


class TestFailureFor:
    def test_command(self):
        assert failure_for(CommandError(["git"], "not found")) is ProbeFailure.COMMAND_FAILURE

    def test_parse(self):
        assert failure_for(ManifestError(Path("package.json"), "bad")) is ProbeFailure.PARSE_ERROR
        assert failure_for(json.JSONDecodeError("x", "doc", 0)) is ProbeFailure.PARSE_ERROR

    def test_missing(self):
        assert failure_for(FileAccessError(Path("a"), "gone")) is ProbeFailure.MISSING
        assert failure_for(FileNotFoundError("a")) is ProbeFailure.MISSING

    def test_other_os_errors(self):
        assert failure_for(PermissionError("denied")) is ProbeFailure.PARSE_ERROR

    def test_wire_values(self):
        assert [f.value for f in ProbeFailure] == ["missing", "parse-error", "command-failure"]


class TestDeclaredFailure:
    """Errors carry the failure kind recorded on the section they break."""

    def test_class_defaults(self):
        assert FileAccessError.failure is ProbeFailure.MISSING
        assert ManifestError.failure is ProbeFailure.PARSE_ERROR
        assert CommandError.failure is ProbeFailure.COMMAND_FAILURE
        assert PackageInsightError.failure is None

    def test_instance_override(self):
        e = PackageInsightError("node_modules vanished", failure=ProbeFailure.MISSING)

        assert e.failure is ProbeFailure.MISSING
        assert failure_for(e) is ProbeFailure.MISSING
        assert PackageInsightError.failure is None

    def test_undeclared_package_error(self):
        assert failure_for(HistoryError(Path("h.json"), "exists")) is ProbeFailure.PARSE_ERROR

    def test_str_without_details(self):
        assert str(PackageInsightError("plain")) == "plain"
