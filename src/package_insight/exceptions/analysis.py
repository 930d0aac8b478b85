"""Analysis-related exceptions: file access, manifest parsing, commands, history."""

from pathlib import Path
from typing import Optional, Sequence

from .base import PackageInsightError
from .taxonomy import ProbeFailure


class AnalysisError(PackageInsightError):
    """Base class for analysis-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    failure = ProbeFailure.MISSING

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ManifestError(AnalysisError):
    """Raised when a JSON configuration file (package.json, tsconfig) is malformed."""

    failure = ProbeFailure.PARSE_ERROR

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Failed to parse {Path(filepath).name}: {reason}",
            details={"filepath": str(filepath)},
        )
        self.filepath = filepath
        self.reason = reason


class CommandError(AnalysisError):
    """Raised when an external command cannot be run or exits non-zero."""

    failure = ProbeFailure.COMMAND_FAILURE

    def __init__(
        self,
        command: Sequence[str],
        reason: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        cmd_str = " ".join(command)
        details = {"command": cmd_str}
        if returncode is not None:
            details["returncode"] = str(returncode)
        super().__init__(f"Command failed: {cmd_str}: {reason}", details=details)
        self.command = tuple(command)
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr


class HistoryError(AnalysisError):
    """Raised when a history record cannot be written."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot write history record: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason
