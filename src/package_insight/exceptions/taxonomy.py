"""Per-section failure taxonomy.

Probes never raise past their own section. Instead every section of a
snapshot carries a status, and when something went wrong, one of the
failure kinds below plus the error text.

    missing          expected file or directory absent (warning, not fatal)
    parse-error      malformed JSON / config file
    command-failure  external tool exited non-zero, timed out or is not installed

Package errors declare their kind in a ``failure`` class attribute.
"""

from __future__ import annotations

from enum import Enum


class ProbeFailure(str, Enum):
    """Why a probe could not fill its section."""

    MISSING = "missing"
    PARSE_ERROR = "parse-error"
    COMMAND_FAILURE = "command-failure"


def failure_for(exc: BaseException) -> ProbeFailure:
    """Map an exception raised inside a probe to its failure kind."""
    failure = getattr(exc, "failure", None)
    if isinstance(failure, ProbeFailure):
        return failure
    if isinstance(exc, FileNotFoundError):
        return ProbeFailure.MISSING
    # Malformed data (json.JSONDecodeError is a ValueError), other OS errors
    return ProbeFailure.PARSE_ERROR
