"""Published package size probe (``npm pack``)."""

import re
from pathlib import Path
from typing import List, Optional

from ..exceptions import CommandError, ProbeFailure
from ..formatting import format_bytes, format_percent
from ..logging_config import get_logger
from ..snapshot.models import PackageSizeInfo, PackedFile, SectionStatus
from . import shell

logger = get_logger(__name__)

# "npm notice 1.2kB dist/index.js" inside the "Tarball Contents" block
_CONTENTS_HEADER = "Tarball Contents"
_NOTICE_PREFIX = "npm notice"
_FILE_LINE_RE = re.compile(r"^npm notice\s+([\d.]+\s*[kMGT]?B)\s+(.+?)\s*$")


def parse_dry_run_files(output: str) -> List[str]:
    """Extract the file paths listed by ``npm pack --dry-run``.

    Only lines of the "Tarball Contents" table are taken; the summary block
    that follows ("=== Tarball Details ===") and any other notices are
    ignored.
    """
    paths: List[str] = []
    in_contents = False
    for raw in output.splitlines():
        line = raw.strip()
        if not line.startswith(_NOTICE_PREFIX):
            continue
        if _CONTENTS_HEADER in line:
            in_contents = True
            continue
        if "===" in line:
            in_contents = False
            continue
        if not in_contents:
            continue
        match = _FILE_LINE_RE.match(line)
        if match:
            paths.append(match.group(2))
    return paths


def analyze_package_size(
    package_dir: Path,
    pack_dir: Path,
    npm_command: str = "npm",
    timeout: Optional[int] = None,
    max_files: int = 10,
) -> PackageSizeInfo:
    """
    Pack the package and measure what would be published.

    The tarball is written to ``pack_dir``. The unpacked size is the sum of
    the on-disk sizes of the files ``npm pack --dry-run`` lists. A failing
    ``npm`` command yields ``success=False``; nothing is raised.
    """
    pack_dir.mkdir(parents=True, exist_ok=True)

    try:
        pack = shell.run_command(
            [npm_command, "pack", f"--pack-destination={pack_dir}"],
            cwd=package_dir,
            timeout=timeout,
        )
        out_lines = [line.strip() for line in pack.stdout.strip().splitlines() if line.strip()]
        tarball_name = out_lines[-1] if out_lines else ""
        tarball_path = pack_dir / tarball_name
        if not tarball_name or not tarball_path.is_file():
            raise CommandError(pack.args, f"tarball {tarball_path} not found after npm pack")
        packed_size = tarball_path.stat().st_size

        # npm >= 7 prints the notices on stderr
        dry_run = shell.run_command(
            [npm_command, "pack", "--dry-run"], cwd=package_dir, timeout=timeout
        )
    except CommandError as e:
        logger.error("Package size analysis failed: %s", e)
        return PackageSizeInfo(
            status=SectionStatus.ERROR, error=str(e), failure=ProbeFailure.COMMAND_FAILURE
        )

    included: List[PackedFile] = []
    for rel in parse_dry_run_files(dry_run.stderr + "\n" + dry_run.stdout):
        candidate = package_dir / rel
        if candidate.is_file():
            included.append(PackedFile(path=rel, size=candidate.stat().st_size))

    # Largest first; path breaks ties
    included.sort(key=lambda f: (-f.size, f.path))
    unpacked_size = sum(f.size for f in included)
    ratio = packed_size / unpacked_size if unpacked_size > 0 else 0.0

    logger.info(
        "Packed %s, unpacked %s, ratio %s",
        format_bytes(packed_size), format_bytes(unpacked_size), format_percent(ratio),
    )

    return PackageSizeInfo(
        status=SectionStatus.PRESENT,
        success=True,
        packed_size=packed_size,
        unpacked_size=unpacked_size,
        compression_ratio=ratio,
        tarball_path=str(tarball_path),
        tarball_name=tarball_name,
        largest_files=tuple(included[:max_files]),
    )


def skipped_package_size() -> PackageSizeInfo:
    """Section recorded when packing is disabled."""
    return PackageSizeInfo(error="pack skipped")
