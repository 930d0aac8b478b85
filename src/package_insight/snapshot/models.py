"""Data models for analysis snapshots: immutable records of a single analysis run.

A Snapshot is made of independent sections, one per probe. Each section
records whether its input was found (``present``), not found (``absent``)
or could not be read (``error``), so one failing probe never hides the
others.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..exceptions.taxonomy import ProbeFailure


class SectionStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True)
class Section:
    """Common status fields shared by every snapshot section."""

    status: SectionStatus = SectionStatus.ABSENT
    error: Optional[str] = None
    failure: Optional[ProbeFailure] = None

    @property
    def present(self) -> bool:
        return self.status is SectionStatus.PRESENT

    @property
    def absent(self) -> bool:
        return self.status is SectionStatus.ABSENT

    @property
    def failed(self) -> bool:
        return self.status is SectionStatus.ERROR


# ── package.json ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class ManifestInfo(Section):
    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    license: Optional[str] = None
    main: Optional[str] = None
    module: Optional[str] = None
    types: Optional[str] = None

    # Entry points
    has_esm: bool = False
    has_cjs: bool = False
    has_types: bool = False
    has_exports: bool = False

    # Scripts
    script_names: Tuple[str, ...] = ()
    has_prepublish_script: bool = False
    has_prepack_script: bool = False
    has_build_script: bool = False
    has_test_script: bool = False
    has_lint_script: bool = False
    has_prettier_script: bool = False

    # Dependency counts as declared
    dependencies: int = 0
    dev_dependencies: int = 0
    peer_dependencies: int = 0

    has_source_maps: bool = False
    side_effects: Optional[bool] = None
    files: Tuple[str, ...] = ()


# ── Version & provenance ─────────────────────────────────────────────


@dataclass(frozen=True)
class GitInfo(Section):
    last_commit_date: Optional[str] = None
    commit_count: int = 0
    tags: Tuple[str, ...] = ()  # most recent first
    tag_count: int = 0
    current_branch: Optional[str] = None
    contributors_count: int = 0


@dataclass(frozen=True)
class PublishedVersion:
    version: str
    date: str  # ISO-8601


@dataclass(frozen=True)
class RegistryHistory(Section):
    created: Optional[str] = None
    modified: Optional[str] = None
    versions: Tuple[PublishedVersion, ...] = ()  # newest first
    version_count: int = 0

    @property
    def latest_version(self) -> Optional[str]:
        return self.versions[0].version if self.versions else None


@dataclass(frozen=True)
class FileStamp:
    path: str
    mtime: str  # ISO-8601


@dataclass(frozen=True)
class VersionInfo(Section):
    current_version: Optional[str] = None
    manifest_modified: Optional[str] = None  # ISO-8601 mtime of package.json
    newest_file: Optional[FileStamp] = None
    oldest_file: Optional[FileStamp] = None
    git: GitInfo = field(default_factory=GitInfo)
    registry: RegistryHistory = field(default_factory=RegistryHistory)


# ── tsconfig.json ────────────────────────────────────────────────────


@dataclass(frozen=True)
class CompilerConfigInfo(Section):
    path: Optional[str] = None
    target: Optional[str] = None
    module: Optional[str] = None
    declaration: Optional[bool] = None
    declaration_map: Optional[bool] = None
    source_map: Optional[bool] = None
    strict: Optional[bool] = None
    es_module_interop: Optional[bool] = None
    skip_lib_check: Optional[bool] = None
    force_consistent_casing: Optional[bool] = None
    out_dir: Optional[str] = None
    root_dir: Optional[str] = None
    composite: Optional[bool] = None
    incremental: Optional[bool] = None
    jsx: Optional[str] = None
    lib: Tuple[str, ...] = ()
    types: Tuple[str, ...] = ()
    paths: int = 0  # number of path mappings
    base_url: Optional[str] = None
    resolve_json_module: Optional[bool] = None
    module_resolution: Optional[str] = None
    extends: Optional[str] = None
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    references: int = 0  # number of project references


# ── Build ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BuildInfo(Section):
    success: bool = False
    duration_ms: Optional[int] = None


# ── Build output directory ───────────────────────────────────────────


@dataclass(frozen=True)
class DistFileStats:
    js_files: int = 0
    dts_files: int = 0
    map_files: int = 0
    dts_map_files: int = 0
    json_files: int = 0
    css_files: int = 0
    other_files: int = 0
    total_files: int = 0


@dataclass(frozen=True)
class DistSizeStats:
    js_size: int = 0
    dts_size: int = 0
    map_size: int = 0
    dts_map_size: int = 0
    other_size: int = 0
    total_size: int = 0


@dataclass(frozen=True)
class ModuleFormatInfo:
    esm_modules: int = 0
    cjs_modules: int = 0
    source_map_references: int = 0
    has_both_module_types: bool = False


@dataclass(frozen=True)
class DistInfo(Section):
    path: Optional[str] = None
    files: DistFileStats = field(default_factory=DistFileStats)
    sizes: DistSizeStats = field(default_factory=DistSizeStats)
    modules: ModuleFormatInfo = field(default_factory=ModuleFormatInfo)


# ── Dependencies ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class DependencyCounts:
    dependencies: int = 0
    dev_dependencies: int = 0
    peer_dependencies: int = 0
    type_definitions: int = 0
    total: int = 0


@dataclass(frozen=True)
class Tooling:
    build_tools: Tuple[str, ...] = ()
    testing_tools: Tuple[str, ...] = ()
    linting_tools: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DependencyInfo(Section):
    counts: DependencyCounts = field(default_factory=DependencyCounts)
    tooling: Tooling = field(default_factory=Tooling)


@dataclass(frozen=True)
class DependencySize:
    name: str
    size: int
    version: str = "unknown"


@dataclass(frozen=True)
class DependencySizeInfo(Section):
    total_size: int = 0
    dependency_sizes: Tuple[DependencySize, ...] = ()  # largest first
    all_dependencies_count: int = 0
    direct_dependencies_count: int = 0
    transitive_dependencies_count: int = 0


# ── Published tarball ────────────────────────────────────────────────


@dataclass(frozen=True)
class PackedFile:
    path: str
    size: int


@dataclass(frozen=True)
class PackageSizeInfo(Section):
    success: bool = False
    packed_size: int = 0
    unpacked_size: int = 0
    compression_ratio: float = 0.0
    tarball_path: Optional[str] = None
    tarball_name: Optional[str] = None
    largest_files: Tuple[PackedFile, ...] = ()  # largest first


# ── Snapshot ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Snapshot:
    """Complete, immutable record of one analysis run.

    Every field is a plain value, a tuple or another frozen record so the
    snapshot can be serialised to JSON (see ``snapshot.codec``) and read
    back without loss.
    """

    # ── Metadata ──────────────────────────────────────────────────
    package_name: str
    package_path: str
    created_at: str  # ISO-8601, UTC
    tool_version: str = ""
    schema_version: int = 1

    # ── Sections ──────────────────────────────────────────────────
    manifest: ManifestInfo = field(default_factory=ManifestInfo)
    version: VersionInfo = field(default_factory=VersionInfo)
    compiler_config: CompilerConfigInfo = field(default_factory=CompilerConfigInfo)
    build: BuildInfo = field(default_factory=BuildInfo)
    dist: DistInfo = field(default_factory=DistInfo)
    dependencies: DependencyInfo = field(default_factory=DependencyInfo)
    dependency_sizes: DependencySizeInfo = field(default_factory=DependencySizeInfo)
    package_size: PackageSizeInfo = field(default_factory=PackageSizeInfo)
