"""Version and provenance probe: package.json mtime, git, npm registry."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from ..exceptions import CommandError, ProbeFailure, failure_for
from ..formatting import parse_timestamp
from ..logging_config import get_logger
from ..snapshot.models import (
    FileStamp,
    GitInfo,
    PublishedVersion,
    RegistryHistory,
    SectionStatus,
    VersionInfo,
)
from . import shell
from .dist import DIST_CANDIDATES
from .filesystem import walk_files
from .manifest import MANIFEST_NAME, load_manifest

logger = get_logger(__name__)

# Registry "time" keys that are not versions
_REGISTRY_META_KEYS = ("created", "modified")


class GitInspector:
    """Collect repository facts for a package checkout."""

    def __init__(
        self,
        repo_path: Path,
        git_command: str = "git",
        timeout: Optional[int] = None,
        max_tags: int = 10,
    ):
        self.repo_path = Path(repo_path)
        self.git_command = git_command
        self.timeout = timeout
        self.max_tags = max_tags

    def inspect(self) -> GitInfo:
        """Return git facts, or an absent section when there is no ``.git`` directory.

        A failing git command turns the section into an error; it never raises.
        """
        if not (self.repo_path / ".git").is_dir():
            logger.info("Not a git repository: %s", self.repo_path)
            return GitInfo(failure=ProbeFailure.MISSING)

        try:
            last_commit = self._git("log", "-1", "--format=%cd")
            commit_count = int(self._git("rev-list", "--count", "HEAD") or 0)
            tags = self._lines(self._git("tag", "--sort=-v:refname"))
            branch = self._git("rev-parse", "--abbrev-ref", "HEAD")
            authors = set(self._lines(self._git("log", "--format=%aN")))
        except (CommandError, ValueError) as e:
            logger.warning("Could not get git information: %s", e)
            return GitInfo(status=SectionStatus.ERROR, error=str(e), failure=failure_for(e))

        return GitInfo(
            status=SectionStatus.PRESENT,
            last_commit_date=last_commit or None,
            commit_count=commit_count,
            tags=tuple(tags[: self.max_tags]),
            tag_count=len(tags),
            current_branch=branch or None,
            contributors_count=len(authors),
        )

    def _git(self, *args: str) -> str:
        result = shell.run_command(
            [self.git_command, *args], cwd=self.repo_path, timeout=self.timeout
        )
        return result.stdout.strip()

    @staticmethod
    def _lines(text: str) -> list:
        return [line.strip() for line in text.splitlines() if line.strip()]


def fetch_registry_history(
    package_name: Optional[str],
    cwd: Path,
    npm_command: str = "npm",
    timeout: Optional[int] = None,
) -> RegistryHistory:
    """Ask the npm registry when each version of ``package_name`` was published.

    Unpublished packages (or an offline registry) give an error section;
    that is expected and only logged at info level.
    """
    if not package_name:
        return RegistryHistory(failure=ProbeFailure.MISSING)

    try:
        result = shell.run_command(
            [npm_command, "view", package_name, "time", "--json"], cwd=cwd, timeout=timeout
        )
        data = json.loads(result.stdout)
        if not isinstance(data, dict):
            raise ValueError("registry time data is not an object")
    except (CommandError, ValueError) as e:
        logger.info("No registry history for %s: %s", package_name, e)
        return RegistryHistory(status=SectionStatus.ERROR, error=str(e), failure=failure_for(e))

    versions = [
        PublishedVersion(version=str(key), date=value)
        for key, value in data.items()
        if key not in _REGISTRY_META_KEYS and isinstance(value, str)
    ]
    versions.sort(key=_publish_sort_key, reverse=True)

    return RegistryHistory(
        status=SectionStatus.PRESENT,
        created=_opt_str(data.get("created")),
        modified=_opt_str(data.get("modified")),
        versions=tuple(versions),
        version_count=len(versions),
    )


def analyze_version(
    package_dir: Path,
    git_command: str = "git",
    npm_command: str = "npm",
    timeout: Optional[int] = None,
    max_tags: int = 10,
) -> VersionInfo:
    """
    Gather version provenance for the package.

    Raises:
        FileAccessError: If package.json cannot be read
        ManifestError: If package.json is not valid JSON
    """
    manifest_path = package_dir / MANIFEST_NAME
    if not manifest_path.is_file():
        logger.warning("package.json not found, skipping version history analysis")
        return VersionInfo(failure=ProbeFailure.MISSING, error="package.json not found")

    data = load_manifest(package_dir)
    newest, oldest = source_file_stamps(package_dir)

    return VersionInfo(
        status=SectionStatus.PRESENT,
        current_version=str(data.get("version") or "unknown"),
        manifest_modified=_mtime_iso(manifest_path),
        newest_file=newest,
        oldest_file=oldest,
        git=GitInspector(package_dir, git_command, timeout, max_tags).inspect(),
        registry=fetch_registry_history(
            _opt_str(data.get("name")), package_dir, npm_command, timeout
        ),
    )


def source_file_stamps(package_dir: Path) -> Tuple[Optional[FileStamp], Optional[FileStamp]]:
    """Most and least recently modified package source files.

    Installed dependencies, ``.git`` and top-level build output are ignored.
    """
    newest = oldest = None
    newest_mtime = oldest_mtime = 0.0
    for path in walk_files(package_dir, skip_dirs=("node_modules", ".git")):
        rel = path.relative_to(package_dir)
        if len(rel.parts) > 1 and rel.parts[0] in DIST_CANDIDATES:
            continue
        try:
            mtime = path.stat().st_mtime
        except OSError:
            continue
        if newest is None or mtime > newest_mtime:
            newest, newest_mtime = rel, mtime
        if oldest is None or mtime < oldest_mtime:
            oldest, oldest_mtime = rel, mtime

    if newest is None:
        return None, None
    return (
        FileStamp(path=newest.as_posix(), mtime=_iso(newest_mtime)),
        FileStamp(path=oldest.as_posix(), mtime=_iso(oldest_mtime)),
    )


def _mtime_iso(path: Path) -> str:
    return _iso(path.stat().st_mtime)


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def _opt_str(value) -> Optional[str]:
    return str(value) if value else None


def _publish_sort_key(entry: PublishedVersion):
    parsed = parse_timestamp(entry.date)
    epoch = parsed.timestamp() if parsed is not None else 0.0
    return (epoch, entry.version)
