"""Build timing probe."""

from pathlib import Path
from typing import Optional

from ..exceptions import CommandError, ProbeFailure
from ..formatting import format_duration
from ..logging_config import get_logger
from ..snapshot.models import BuildInfo, SectionStatus
from . import shell

logger = get_logger(__name__)


def measure_build(
    package_dir: Path, npm_command: str = "npm", timeout: Optional[int] = None
) -> BuildInfo:
    """
    Clean, then time ``npm run build``.

    A missing or failing clean script is ignored. A failing build yields a
    section with ``success=False`` and the error text; nothing is raised.
    """
    try:
        shell.run_command([npm_command, "run", "clean"], cwd=package_dir, timeout=timeout)
        logger.info("Cleaned previous build artifacts")
    except CommandError as e:
        logger.debug("Clean step skipped: %s", e)

    try:
        result = shell.run_command(
            [npm_command, "run", "build"],
            cwd=package_dir,
            timeout=timeout,
            env={"FORCE_COLOR": "0"},
        )
    except CommandError as e:
        logger.error("Build failed: %s", e.reason)
        return BuildInfo(
            status=SectionStatus.ERROR, error=str(e), failure=ProbeFailure.COMMAND_FAILURE
        )

    logger.info("Build completed in %s", format_duration(result.duration_ms))
    return BuildInfo(status=SectionStatus.PRESENT, success=True, duration_ms=result.duration_ms)


def skipped_build() -> BuildInfo:
    """Section recorded when build timing is disabled."""
    return BuildInfo(error="build skipped")
