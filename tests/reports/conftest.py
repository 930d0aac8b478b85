"""Fixtures for report rendering tests."""

import pytest

from package_insight.config import MIB
from package_insight.insights import Insight, Severity
from package_insight.snapshot.models import (
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
    SectionStatus,
    Tooling,
    VersionInfo,
)

PRESENT = SectionStatus.PRESENT


@pytest.fixture
def full_snapshot(make_snapshot):
    """A snapshot with every section present."""

    def _make(created_at="2024-06-02T00:00:00.000+00:00", build_ms=6000, dist_size=3 * MIB, deps=3):
        return make_snapshot(
            created_at=created_at,
            manifest=ManifestInfo(
                status=PRESENT,
                name="my-lib",
                version="1.2.0",
                description="Utilities",
                author="Jane Doe",
                license="MIT",
                main="dist/index.cjs",
                module="dist/index.mjs",
                types="dist/index.d.ts",
                has_esm=True,
                has_cjs=True,
                has_types=True,
                script_names=("build", "test"),
                has_build_script=True,
                has_test_script=True,
            ),
            version=VersionInfo(
                status=PRESENT,
                current_version="1.2.0",
                manifest_modified="2024-05-01T00:00:00+00:00",
                newest_file=FileStamp(path="src/index.ts", mtime="2024-05-30T00:00:00+00:00"),
                oldest_file=FileStamp(path="LICENSE", mtime="2022-01-01T00:00:00+00:00"),
                git=GitInfo(
                    status=PRESENT,
                    last_commit_date="Thu May 30 10:00:00 2024 +0000",
                    commit_count=120,
                    tags=("v1.2.0", "v1.1.0"),
                    tag_count=2,
                    current_branch="main",
                    contributors_count=4,
                ),
                registry=RegistryHistory(
                    status=PRESENT,
                    created="2023-01-01T00:00:00.000Z",
                    modified="2024-05-01T00:00:00.000Z",
                    versions=(
                        PublishedVersion(version="1.2.0", date="2024-05-01T00:00:00.000Z"),
                        PublishedVersion(version="1.1.0", date="2023-09-01T00:00:00.000Z"),
                    ),
                    version_count=2,
                ),
            ),
            compiler_config=CompilerConfigInfo(
                status=PRESENT,
                path="/work/my-lib/tsconfig.json",
                target="ES2020",
                module="ESNext",
                strict=True,
                declaration=True,
                declaration_map=True,
                es_module_interop=True,
                paths=2,
            ),
            build=BuildInfo(status=PRESENT, success=True, duration_ms=build_ms),
            dist=DistInfo(
                status=PRESENT,
                path="/work/my-lib/dist",
                files=DistFileStats(js_files=4, dts_files=4, map_files=4, total_files=12),
                sizes=DistSizeStats(
                    js_size=dist_size // 2,
                    dts_size=dist_size // 4,
                    map_size=dist_size // 4,
                    total_size=dist_size,
                ),
                modules=ModuleFormatInfo(esm_modules=4, source_map_references=4),
            ),
            dependencies=DependencyInfo(
                status=PRESENT,
                counts=DependencyCounts(dependencies=deps, dev_dependencies=6, total=deps + 6),
                tooling=Tooling(
                    build_tools=("typescript",),
                    testing_tools=("jest",),
                    linting_tools=("eslint",),
                ),
            ),
            dependency_sizes=DependencySizeInfo(
                status=PRESENT,
                total_size=30 * MIB,
                dependency_sizes=(
                    DependencySize(name="typescript", size=20 * MIB, version="5.4.0"),
                    DependencySize(name="jest", size=5 * MIB, version="29.0.0"),
                ),
                all_dependencies_count=40,
                direct_dependencies_count=3,
                transitive_dependencies_count=37,
            ),
            package_size=PackageSizeInfo(
                status=PRESENT,
                success=True,
                packed_size=200 * 1024,
                unpacked_size=800 * 1024,
                compression_ratio=0.25,
                tarball_path="/out/my-lib/pack-analysis/my-lib-1.2.0.tgz",
                tarball_name="my-lib-1.2.0.tgz",
                largest_files=(PackedFile(path="dist/index.js", size=300 * 1024),),
            ),
        )

    return _make


@pytest.fixture
def sample_insights():
    return [
        Insight(text="Extremely large node_modules size (120.00MB).", severity=Severity.HIGH, rule="extreme-node-modules"),
        Insight(text="Consider adding 'exports' field.", severity=Severity.MEDIUM, rule="missing-exports"),
    ]
