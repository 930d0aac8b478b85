"""Declared dependencies and installed ``node_modules`` size probes."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from ..exceptions import FileAccessError, ManifestError, ProbeFailure
from ..logging_config import get_logger
from ..snapshot.models import (
    DependencyCounts,
    DependencyInfo,
    DependencySize,
    DependencySizeInfo,
    SectionStatus,
    Tooling,
)
from .filesystem import directory_size, read_json
from .manifest import MANIFEST_NAME, load_manifest

logger = get_logger(__name__)

BUILD_TOOLS = (
    "typescript", "rollup", "webpack", "esbuild", "babel",
    "tsc", "vite", "parcel", "gulp", "grunt",
)
TESTING_TOOLS = (
    "jest", "mocha", "chai", "jasmine", "vitest",
    "karma", "ava", "tap", "cypress", "playwright",
)
LINTING_TOOLS = ("eslint", "tslint", "prettier", "stylelint")

TYPES_SCOPE = "@types/"


def analyze_dependencies(package_dir: Path) -> DependencyInfo:
    """
    Count declared dependencies and detect tooling in devDependencies.

    Raises:
        FileAccessError: If package.json cannot be read
        ManifestError: If package.json is not valid JSON
    """
    if not (package_dir / MANIFEST_NAME).is_file():
        logger.warning("package.json not found, skipping dependency analysis")
        return DependencyInfo(failure=ProbeFailure.MISSING, error="package.json not found")

    data = load_manifest(package_dir)
    deps = _mapping(data.get("dependencies"))
    dev_deps = _mapping(data.get("devDependencies"))
    peer_deps = _mapping(data.get("peerDependencies"))

    counts = DependencyCounts(
        dependencies=len(deps),
        dev_dependencies=len(dev_deps),
        peer_dependencies=len(peer_deps),
        type_definitions=sum(1 for name in dev_deps if name.startswith(TYPES_SCOPE)),
        total=len(deps) + len(dev_deps) + len(peer_deps),
    )

    tooling = Tooling(
        build_tools=_present(BUILD_TOOLS, dev_deps),
        testing_tools=_present(TESTING_TOOLS, dev_deps),
        linting_tools=_present(LINTING_TOOLS, dev_deps),
    )

    return DependencyInfo(status=SectionStatus.PRESENT, counts=counts, tooling=tooling)


def analyze_dependency_sizes(package_dir: Path, limit: int = 20) -> DependencySizeInfo:
    """
    Measure each installed top-level package in ``node_modules``.

    Scoped packages (``@org/name``) count individually. Only the ``limit``
    largest packages are kept, but the total covers all of them.

    Args:
        package_dir: Package root
        limit: Number of largest dependencies to keep
    """
    node_modules = package_dir / "node_modules"
    if not node_modules.is_dir():
        logger.warning("node_modules not found, skipping dependency size analysis")
        return DependencySizeInfo(failure=ProbeFailure.MISSING, error="node_modules not found")

    sizes: List[DependencySize] = []
    for name, path in _installed_packages(node_modules):
        sizes.append(DependencySize(name=name, size=directory_size(path), version=_installed_version(path)))

    # Largest first; name breaks ties so the order is stable
    sizes.sort(key=lambda d: (-d.size, d.name))

    direct = _direct_dependency_count(package_dir)

    return DependencySizeInfo(
        status=SectionStatus.PRESENT,
        total_size=sum(d.size for d in sizes),
        dependency_sizes=tuple(sizes[:limit]),
        all_dependencies_count=len(sizes),
        direct_dependencies_count=direct,
        transitive_dependencies_count=max(0, len(sizes) - direct),
    )


# ── Private helpers ──────────────────────────────────────────────────


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _present(tools: Tuple[str, ...], dev_deps: Dict[str, Any]) -> Tuple[str, ...]:
    return tuple(tool for tool in tools if dev_deps.get(tool))


def _installed_packages(node_modules: Path) -> List[Tuple[str, Path]]:
    """
    Top-level installed packages as ``(name, directory)`` pairs.

    pnpm and workspaces install packages as symlinks; those are measured at
    their target. Each target is counted once, and a link pointing back at
    an enclosing directory (the package itself, node_modules) is skipped.
    """
    root = node_modules.resolve()
    seen: Set[Path] = set()
    packages = []

    def add(name: str, entry: Path) -> None:
        target = _package_directory(entry)
        if target is None or target in seen:
            return
        if root == target or _is_within(root, target):
            logger.debug("Skipping %s: links to an enclosing directory", name)
            return
        seen.add(target)
        packages.append((name, target))

    for entry in sorted(node_modules.iterdir()):
        if entry.name.startswith(".") or not entry.is_dir():
            continue
        if entry.name.startswith("@"):
            for scoped in sorted(entry.iterdir()):
                add(f"{entry.name}/{scoped.name}", scoped)
        else:
            add(entry.name, entry)
    return packages


def _package_directory(entry: Path) -> Optional[Path]:
    try:
        target = entry.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        # Dangling link or link cycle
        logger.debug("Cannot resolve %s: %s", entry, e)
        return None
    return target if target.is_dir() else None


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def _installed_version(package_path: Path) -> str:
    manifest = package_path / MANIFEST_NAME
    if not manifest.is_file():
        return "unknown"
    try:
        data = read_json(manifest)
    except (FileAccessError, ManifestError) as e:
        logger.debug("Cannot read version of %s: %s", package_path.name, e)
        return "unknown"
    if isinstance(data, dict) and data.get("version"):
        return str(data["version"])
    return "unknown"


def _direct_dependency_count(package_dir: Path) -> int:
    if not (package_dir / MANIFEST_NAME).is_file():
        return 0
    try:
        data = load_manifest(package_dir)
    except (FileAccessError, ManifestError) as e:
        logger.debug("Cannot count direct dependencies: %s", e)
        return 0
    return len(_mapping(data.get("dependencies")))
