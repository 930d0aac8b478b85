"""PackageAnalyzer: runs every probe in order and assembles a Snapshot.

Probe order:
  manifest → version → compiler config → build → dist
           → dependencies → dependency sizes → package size

Each probe is isolated: an exception raised inside one becomes an
``error`` status on that section only, and the remaining probes still run.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Type, TypeVar

from .. import __version__
from ..config import AnalysisConfig
from ..exceptions import InvalidPathError, PackageInsightError, failure_for
from ..logging_config import get_logger
from ..probes import (
    analyze_compiler_config,
    analyze_dependencies,
    analyze_dependency_sizes,
    analyze_dist,
    analyze_manifest,
    analyze_package_size,
    analyze_version,
    measure_build,
    skipped_build,
    skipped_package_size,
)
from ..snapshot.models import (
    BuildInfo,
    CompilerConfigInfo,
    DependencyInfo,
    DependencySizeInfo,
    DistInfo,
    ManifestInfo,
    PackageSizeInfo,
    Section,
    SectionStatus,
    Snapshot,
    VersionInfo,
)

ProgressCallback = Optional[Callable[[str], None]]

S = TypeVar("S", bound=Section)

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunPaths:
    """Where one package's analysis output goes."""

    output_dir: Path
    history_dir: Path
    pack_dir: Path


def run_paths(package_name: str, config: AnalysisConfig, cwd: Optional[Path] = None) -> RunPaths:
    """Resolve the output layout ``<output_root>/<package_name>/{history,pack-analysis}``."""
    root = Path(config.output_root)
    if not root.is_absolute():
        root = (cwd or Path.cwd()) / root
    output_dir = root / package_name
    return RunPaths(
        output_dir=output_dir,
        history_dir=output_dir / config.history_dir_name,
        pack_dir=output_dir / config.pack_dir_name,
    )


class PackageAnalyzer:
    """Inspect one package directory and produce a Snapshot."""

    def __init__(self, package_dir: str, config: Optional[AnalysisConfig] = None):
        self.package_dir = Path(package_dir).resolve()
        self.config = config or AnalysisConfig()

        if not self.package_dir.exists():
            raise InvalidPathError(self.package_dir, "Path does not exist")
        if not self.package_dir.is_dir():
            raise InvalidPathError(self.package_dir, "Path is not a directory")

        self.package_name = self.package_dir.name
        self.paths = run_paths(self.package_name, self.config)

    def build_snapshot(
        self, on_progress: ProgressCallback = None, now: Optional[datetime] = None
    ) -> Snapshot:
        """Run all probes and return the resulting Snapshot.

        Args:
            on_progress: Called with a short message before each probe
            now: Timestamp recorded as ``created_at`` (defaults to the current UTC time)

        Returns:
            Snapshot with one section per probe
        """
        cfg = self.config
        pkg = self.package_dir
        created_at = (now or datetime.now(timezone.utc)).isoformat(timespec="milliseconds")

        def step(message: str) -> None:
            logger.info(message)
            if on_progress:
                on_progress(message)

        step("Analyzing package.json...")
        manifest = self._isolate(ManifestInfo, analyze_manifest, pkg)

        step("Analyzing version history...")
        version = self._isolate(
            VersionInfo,
            analyze_version,
            pkg,
            git_command=cfg.git_command,
            npm_command=cfg.npm_command,
            timeout=cfg.command_timeout,
            max_tags=cfg.max_tags,
        )

        step("Analyzing TypeScript configuration...")
        compiler_config = self._isolate(CompilerConfigInfo, analyze_compiler_config, pkg)

        if cfg.run_build:
            step("Measuring build time...")
            build = self._isolate(
                BuildInfo,
                measure_build,
                pkg,
                npm_command=cfg.npm_command,
                timeout=cfg.command_timeout,
            )
        else:
            logger.info("Build timing skipped")
            build = skipped_build()

        step("Analyzing distribution files...")
        dist = self._isolate(DistInfo, analyze_dist, pkg)

        step("Analyzing dependencies...")
        dependencies = self._isolate(DependencyInfo, analyze_dependencies, pkg)

        step("Analyzing dependency sizes...")
        dependency_sizes = self._isolate(
            DependencySizeInfo, analyze_dependency_sizes, pkg, limit=cfg.max_dependency_sizes
        )

        if cfg.run_pack:
            step("Analyzing package size...")
            package_size = self._isolate(
                PackageSizeInfo,
                analyze_package_size,
                pkg,
                self.paths.pack_dir,
                npm_command=cfg.npm_command,
                timeout=cfg.command_timeout,
                max_files=cfg.max_largest_files,
            )
        else:
            logger.info("Package size analysis skipped")
            package_size = skipped_package_size()

        return Snapshot(
            package_name=self.package_name,
            package_path=str(pkg),
            created_at=created_at,
            tool_version=__version__,
            manifest=manifest,
            version=version,
            compiler_config=compiler_config,
            build=build,
            dist=dist,
            dependencies=dependencies,
            dependency_sizes=dependency_sizes,
            package_size=package_size,
        )

    def _isolate(self, section_type: Type[S], probe: Callable[..., S], *args, **kwargs) -> S:
        """Run one probe; turn a raised error into an ``error`` section of ``section_type``."""
        try:
            return probe(*args, **kwargs)
        except (PackageInsightError, OSError, ValueError) as e:
            logger.error("Error analyzing %s: %s", _LABELS.get(section_type, "package"), e)
            return section_type(
                status=SectionStatus.ERROR,
                error=str(e),
                failure=failure_for(e),
            )


_LABELS = {
    ManifestInfo: "package.json",
    VersionInfo: "version history",
    CompilerConfigInfo: "tsconfig",
    BuildInfo: "build",
    DistInfo: "dist folder",
    DependencyInfo: "dependencies",
    DependencySizeInfo: "dependency sizes",
    PackageSizeInfo: "package size",
}
