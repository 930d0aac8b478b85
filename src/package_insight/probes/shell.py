"""Run external commands (npm, git) and capture their output."""

from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from ..exceptions import CommandError
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one finished command."""

    args: tuple
    returncode: int
    stdout: str
    stderr: str
    duration_ms: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(
    args: Sequence[str],
    cwd: Path,
    timeout: Optional[int] = None,
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
) -> CommandResult:
    """Run ``args`` in ``cwd`` and wait for it to finish.

    Args:
        args: Command and arguments (no shell interpretation)
        cwd: Working directory
        timeout: Seconds before the command is killed (None = wait forever)
        env: Extra environment variables merged over ``os.environ``
        check: Raise CommandError on a non-zero exit status

    Returns:
        CommandResult with captured stdout/stderr and wall-clock duration

    Raises:
        CommandError: If the executable is missing, times out, or (with
            ``check``) exits non-zero
    """
    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)

    logger.debug("Running %s in %s", " ".join(args), cwd)
    start = time.perf_counter()
    try:
        proc = subprocess.run(
            list(args),
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            env=full_env,
        )
    except FileNotFoundError:
        raise CommandError(args, f"executable '{args[0]}' not found")
    except subprocess.TimeoutExpired:
        raise CommandError(args, f"timed out after {timeout}s")
    except OSError as e:
        raise CommandError(args, str(e))
    duration_ms = int(round((time.perf_counter() - start) * 1000))

    result = CommandResult(
        args=tuple(args),
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        duration_ms=duration_ms,
    )

    if check and not result.ok:
        detail = _last_lines(result.stderr) or _last_lines(result.stdout)
        raise CommandError(
            args,
            f"exited with status {result.returncode}" + (f": {detail}" if detail else ""),
            returncode=result.returncode,
            stderr=result.stderr,
        )

    return result


def _last_lines(text: str, count: int = 3) -> str:
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    return " | ".join(lines[-count:])
