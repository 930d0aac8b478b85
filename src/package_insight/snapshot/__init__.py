"""Immutable analysis snapshots and their JSON codec."""

from .codec import from_dict, snapshot_from_json, snapshot_to_json, to_dict
from .models import (
    BuildInfo,
    CompilerConfigInfo,
    DependencyCounts,
    DependencyInfo,
    DependencySize,
    DependencySizeInfo,
    DistFileStats,
    DistInfo,
    DistSizeStats,
    FileStamp,
    GitInfo,
    ManifestInfo,
    ModuleFormatInfo,
    PackageSizeInfo,
    PackedFile,
    PublishedVersion,
    RegistryHistory,
    Section,
    SectionStatus,
    Snapshot,
    Tooling,
    VersionInfo,
)

__all__ = [
    "Snapshot",
    "Section",
    "SectionStatus",
    "ManifestInfo",
    "VersionInfo",
    "GitInfo",
    "RegistryHistory",
    "PublishedVersion",
    "FileStamp",
    "CompilerConfigInfo",
    "BuildInfo",
    "DistInfo",
    "DistFileStats",
    "DistSizeStats",
    "ModuleFormatInfo",
    "DependencyInfo",
    "DependencyCounts",
    "Tooling",
    "DependencySizeInfo",
    "DependencySize",
    "PackageSizeInfo",
    "PackedFile",
    "to_dict",
    "from_dict",
    "snapshot_to_json",
    "snapshot_from_json",
]
