"""The ordered rule table.

Rules are grouped by the snapshot section they inspect and evaluated in
table order, which is also the order insights are reported in. A rule
only looks at sections that were read successfully.
"""

import math
from typing import Optional, Tuple

from ..config import MIB
from ..formatting import months_between, parse_timestamp
from ..history.compare import build_time, dist_size
from .models import Rule, RuleContext, Severity

# Path fragments of files that rarely belong in a published package
NON_ESSENTIAL_MARKERS = ("test", "docs", "example", ".git")

LEGACY_TARGETS = ("es3", "es5")


def _mb(num_bytes: float) -> str:
    return f"{num_bytes / MIB:.2f}"


# ── package.json ─────────────────────────────────────────────────────


def _types_field_missing(ctx: RuleContext) -> Optional[str]:
    m, dist = ctx.snapshot.manifest, ctx.snapshot.dist
    if m.present and not m.has_types and dist.present and dist.files.dts_files > 0:
        return (
            "Add 'types' or 'typings' field in package.json to help TypeScript users "
            "find your type definitions."
        )
    return None


def _no_build_script(ctx: RuleContext) -> Optional[str]:
    m = ctx.snapshot.manifest
    if m.present and not m.has_build_script:
        return "Consider adding a 'build' script in package.json for easier builds."
    return None


def _no_test_script(ctx: RuleContext) -> Optional[str]:
    m = ctx.snapshot.manifest
    if m.present and not m.has_test_script:
        return "No test script detected. Consider adding tests for better code quality."
    return None


def _dual_entry_points(ctx: RuleContext) -> Optional[str]:
    m = ctx.snapshot.manifest
    if m.present and m.has_esm and m.has_cjs:
        return (
            "Package provides both ESM and CommonJS entry points, which is excellent "
            "for compatibility."
        )
    return None


def _missing_esm_entry(ctx: RuleContext) -> Optional[str]:
    m = ctx.snapshot.manifest
    if m.present and m.has_cjs and not m.has_esm:
        return (
            "Consider adding an ESM entry point (via 'module' field) for modern bundlers "
            "and environments."
        )
    return None


def _missing_exports(ctx: RuleContext) -> Optional[str]:
    m = ctx.snapshot.manifest
    if m.present and not m.has_exports and (m.has_esm or m.has_cjs):
        return (
            "Consider adding 'exports' field in package.json for better control over "
            "entry points in modern Node.js."
        )
    return None


# ── tsconfig ─────────────────────────────────────────────────────────


def _legacy_target(ctx: RuleContext) -> Optional[str]:
    tc = ctx.snapshot.compiler_config
    if tc.present and tc.target and tc.target.lower() in LEGACY_TARGETS:
        return (
            "Consider targeting a more modern JavaScript version like ES2018 or higher "
            "for better performance and smaller bundles."
        )
    return None


def _strict_disabled(ctx: RuleContext) -> Optional[str]:
    tc = ctx.snapshot.compiler_config
    if tc.present and not tc.strict:
        return "Enable 'strict' mode in TypeScript for stronger type-checking and better type safety."
    return None


def _declaration_map_missing(ctx: RuleContext) -> Optional[str]:
    tc = ctx.snapshot.compiler_config
    if tc.present and tc.declaration and not tc.declaration_map:
        return (
            "Consider enabling 'declarationMap' to improve developer experience when "
            "using your library."
        )
    return None


def _interop_disabled(ctx: RuleContext) -> Optional[str]:
    tc = ctx.snapshot.compiler_config
    if tc.present and not tc.es_module_interop:
        return "Enable 'esModuleInterop' for better interoperability with CommonJS modules."
    return None


# ── Build output ─────────────────────────────────────────────────────


def _large_dist(ctx: RuleContext) -> Optional[str]:
    dist = ctx.snapshot.dist
    if dist.present and dist.sizes.total_size > ctx.thresholds.dist_size_limit:
        return (
            f"Distribution size is {_mb(dist.sizes.total_size)}MB, which is relatively "
            "large. Consider code-splitting or removing unused dependencies."
        )
    return None


def _mixed_module_syntax(ctx: RuleContext) -> Optional[str]:
    dist = ctx.snapshot.dist
    if dist.present and dist.modules.has_both_module_types:
        return (
            "Some files contain both ESM and CommonJS module syntax. Consider "
            "standardizing to one module format per file."
        )
    return None


def _oversized_source_maps(ctx: RuleContext) -> Optional[str]:
    dist = ctx.snapshot.dist
    if not dist.present or not dist.sizes.map_size or not dist.sizes.js_size:
        return None
    if dist.sizes.map_size / dist.sizes.js_size > ctx.thresholds.source_map_ratio_limit:
        return (
            "Source maps are significantly larger than your code. Consider using "
            "'cheap-module-source-map' or similar options for development."
        )
    return None


def _declaration_maps_absent(ctx: RuleContext) -> Optional[str]:
    dist = ctx.snapshot.dist
    if dist.present and dist.files.dts_map_files == 0 and dist.files.dts_files > 0:
        return (
            "No declaration source maps found. Adding them improves IDE navigation to "
            "source code when using your package."
        )
    return None


# ── Version & maintenance ────────────────────────────────────────────


def _stale_package(ctx: RuleContext) -> Optional[str]:
    version = ctx.snapshot.version
    if not version.present or ctx.now is None:
        return None
    modified = parse_timestamp(version.manifest_modified)
    if modified is None:
        return None
    months = months_between(modified, ctx.now)
    if months > ctx.thresholds.stale_months:
        return (
            f"Package hasn't been updated in {math.floor(months)} months. Consider "
            "reviewing for outdated dependencies or deprecation."
        )
    return None


def _unpublished_version(ctx: RuleContext) -> Optional[str]:
    version = ctx.snapshot.version
    if not version.present or not version.registry.present:
        return None
    latest = version.registry.latest_version
    if latest is not None and latest != version.current_version:
        return (
            f"Current version ({version.current_version}) differs from latest published "
            f"version ({latest}). The package may have unpublished changes."
        )
    return None


def _publish_cadence(ctx: RuleContext) -> Optional[Tuple[float, float]]:
    """(versions per month, months between first and last publish) or None."""
    version = ctx.snapshot.version
    if not version.present or not version.registry.present:
        return None
    registry = version.registry
    created = parse_timestamp(registry.created)
    modified = parse_timestamp(registry.modified)
    if registry.version_count <= 0 or created is None or modified is None:
        return None
    lifetime = months_between(created, modified)
    return registry.version_count / max(1.0, lifetime), lifetime


def _active_maintenance(ctx: RuleContext) -> Optional[str]:
    cadence = _publish_cadence(ctx)
    if cadence is None:
        return None
    per_month, _lifetime = cadence
    if per_month > ctx.thresholds.active_versions_per_month:
        return (
            f"Package is frequently updated ({per_month:.1f} versions/month), "
            "indicating active maintenance."
        )
    return None


def _infrequent_updates(ctx: RuleContext) -> Optional[str]:
    cadence = _publish_cadence(ctx)
    if cadence is None:
        return None
    per_month, lifetime = cadence
    th = ctx.thresholds
    if per_month < th.inactive_versions_per_month and lifetime > th.inactive_min_months:
        return (
            f"Package has infrequent updates ({per_month:.2f} versions/month), "
            "suggesting limited maintenance."
        )
    return None


# ── Dependencies ─────────────────────────────────────────────────────


def _too_many_dependencies(ctx: RuleContext) -> Optional[str]:
    deps = ctx.snapshot.dependencies
    count = deps.counts.dependencies
    if deps.present and count > ctx.thresholds.max_dependencies:
        return (
            f"Package has {count} dependencies. Consider reducing dependencies to "
            "improve install time and reduce security risks."
        )
    return None


def _no_testing_tools(ctx: RuleContext) -> Optional[str]:
    deps = ctx.snapshot.dependencies
    if deps.present and not deps.tooling.testing_tools:
        return "No testing libraries detected. Consider adding tests with Jest, Mocha, or Vitest."
    return None


def _no_linting_tools(ctx: RuleContext) -> Optional[str]:
    deps = ctx.snapshot.dependencies
    if deps.present and not deps.tooling.linting_tools:
        return "No linting tools detected. Consider using ESLint and Prettier for code quality."
    return None


# ── Installed dependency sizes ───────────────────────────────────────


def _extreme_node_modules(ctx: RuleContext) -> Optional[str]:
    sizes = ctx.snapshot.dependency_sizes
    if sizes.present and sizes.total_size > ctx.thresholds.node_modules_extreme:
        return (
            f"Extremely large node_modules size ({_mb(sizes.total_size)}MB). Consider "
            "using fewer dependencies or switching to lighter alternatives."
        )
    return None


def _large_node_modules(ctx: RuleContext) -> Optional[str]:
    sizes = ctx.snapshot.dependency_sizes
    th = ctx.thresholds
    if sizes.present and th.node_modules_large < sizes.total_size <= th.node_modules_extreme:
        return (
            f"Large node_modules size ({_mb(sizes.total_size)}MB). Review the 'Largest "
            "Dependencies' section to identify potential reductions."
        )
    return None


def _many_transitive_dependencies(ctx: RuleContext) -> Optional[str]:
    sizes = ctx.snapshot.dependency_sizes
    if not sizes.present or not sizes.total_size:
        return None
    transitive, direct = sizes.transitive_dependencies_count, sizes.direct_dependencies_count
    if transitive and direct and transitive > direct * ctx.thresholds.transitive_ratio_limit:
        return (
            f"High number of transitive dependencies ({transitive}). Consider dependencies "
            "with fewer sub-dependencies to reduce complexity."
        )
    return None


def _dominant_dependency(ctx: RuleContext) -> Optional[str]:
    sizes = ctx.snapshot.dependency_sizes
    if not sizes.present or not sizes.total_size or not sizes.dependency_sizes:
        return None
    largest = sizes.dependency_sizes[0]
    pct = largest.size / sizes.total_size * 100
    if pct > ctx.thresholds.dominant_dependency_pct:
        return (
            f'Dependency "{largest.name}" accounts for {pct:.1f}% of total node_modules '
            "size. Consider if this dependency is essential or could be replaced."
        )
    return None


# ── Published package ────────────────────────────────────────────────


def _large_tarball(ctx: RuleContext) -> Optional[str]:
    pkg = ctx.snapshot.package_size
    if pkg.present and pkg.success and pkg.packed_size > ctx.thresholds.packed_size_limit:
        return (
            f"Published package size is {_mb(pkg.packed_size)}MB, which is relatively "
            "large. Consider reviewing the 'Largest Files' section and excluding "
            "unnecessary files using the 'files' field in package.json."
        )
    return None


def _poor_compression(ctx: RuleContext) -> Optional[str]:
    pkg = ctx.snapshot.package_size
    if pkg.present and pkg.success and pkg.compression_ratio > ctx.thresholds.compression_ratio_limit:
        return (
            "Package has a high compression ratio, indicating it may contain already "
            "compressed assets (images, etc.) or binary files. Consider optimizing these "
            "assets before packaging."
        )
    return None


def _non_essential_files(ctx: RuleContext) -> Optional[str]:
    pkg = ctx.snapshot.package_size
    if not pkg.present or not pkg.success:
        return None
    if any(
        marker in f.path for f in pkg.largest_files for marker in NON_ESSENTIAL_MARKERS
    ):
        return (
            "Package contains test, documentation, or example files that might not be "
            "needed in production. Consider using the 'files' field in package.json to "
            "include only necessary files."
        )
    return None


# ── Trend against the previous run ───────────────────────────────────


def _growth_pct(now: Optional[int], before: Optional[int]) -> Optional[float]:
    if now is None or not before:
        return None
    return (now - before) / before * 100.0


def _build_regression(ctx: RuleContext) -> Optional[str]:
    if ctx.previous is None:
        return None
    now, before = build_time(ctx.snapshot), build_time(ctx.previous)
    pct = _growth_pct(now, before)
    if pct is not None and pct > ctx.thresholds.build_regression_pct:
        return (
            f"Build time grew by {pct:.1f}% since the last analysis ({before}ms to "
            f"{now}ms). Consider profiling the build for new bottlenecks."
        )
    return None


def _dist_growth(ctx: RuleContext) -> Optional[str]:
    if ctx.previous is None:
        return None
    now, before = dist_size(ctx.snapshot), dist_size(ctx.previous)
    pct = _growth_pct(now, before)
    if pct is not None and pct > ctx.thresholds.dist_growth_pct:
        return (
            f"Distribution size grew by {pct:.1f}% since the last analysis. Consider "
            "checking for newly bundled code or dependencies."
        )
    return None


def _dependency_increase(ctx: RuleContext) -> Optional[str]:
    prev = ctx.previous
    deps = ctx.snapshot.dependencies
    if prev is None or not deps.present or not prev.dependencies.present:
        return None
    now, before = deps.counts.dependencies, prev.dependencies.counts.dependencies
    if now > before:
        return f"Runtime dependencies went from {before} to {now} since the last analysis."
    return None


RULES: Tuple[Rule, ...] = (
    # package.json
    Rule("types-field-missing", "manifest", Severity.MEDIUM, _types_field_missing),
    Rule("no-build-script", "manifest", Severity.MEDIUM, _no_build_script),
    Rule("no-test-script", "manifest", Severity.MEDIUM, _no_test_script),
    Rule("dual-entry-points", "manifest", Severity.POSITIVE, _dual_entry_points),
    Rule("missing-esm-entry", "manifest", Severity.MEDIUM, _missing_esm_entry),
    Rule("missing-exports", "manifest", Severity.MEDIUM, _missing_exports),
    # tsconfig
    Rule("legacy-target", "compiler_config", Severity.MEDIUM, _legacy_target),
    Rule("strict-disabled", "compiler_config", Severity.MEDIUM, _strict_disabled),
    Rule("declaration-map-missing", "compiler_config", Severity.MEDIUM, _declaration_map_missing),
    Rule("interop-disabled", "compiler_config", Severity.MEDIUM, _interop_disabled),
    # build output
    Rule("large-dist", "dist", Severity.MEDIUM, _large_dist),
    Rule("mixed-module-syntax", "dist", Severity.MEDIUM, _mixed_module_syntax),
    Rule("oversized-source-maps", "dist", Severity.MEDIUM, _oversized_source_maps),
    Rule("declaration-maps-absent", "dist", Severity.INFO, _declaration_maps_absent),
    # version & maintenance
    Rule("stale-package", "version", Severity.HIGH, _stale_package),
    Rule("unpublished-version", "version", Severity.INFO, _unpublished_version),
    Rule("active-maintenance", "version", Severity.POSITIVE, _active_maintenance),
    Rule("infrequent-updates", "version", Severity.MEDIUM, _infrequent_updates),
    # dependencies
    Rule("too-many-dependencies", "dependencies", Severity.MEDIUM, _too_many_dependencies),
    Rule("no-testing-tools", "dependencies", Severity.MEDIUM, _no_testing_tools),
    Rule("no-linting-tools", "dependencies", Severity.MEDIUM, _no_linting_tools),
    # installed sizes
    Rule("extreme-node-modules", "dependency_sizes", Severity.HIGH, _extreme_node_modules),
    Rule("large-node-modules", "dependency_sizes", Severity.MEDIUM, _large_node_modules),
    Rule(
        "many-transitive-dependencies",
        "dependency_sizes",
        Severity.MEDIUM,
        _many_transitive_dependencies,
    ),
    Rule("dominant-dependency", "dependency_sizes", Severity.MEDIUM, _dominant_dependency),
    # published package
    Rule("large-tarball", "package_size", Severity.MEDIUM, _large_tarball),
    Rule("poor-compression", "package_size", Severity.HIGH, _poor_compression),
    Rule("non-essential-files", "package_size", Severity.MEDIUM, _non_essential_files),
    # previous run
    Rule("build-regression", "trend", Severity.MEDIUM, _build_regression),
    Rule("dist-growth", "trend", Severity.MEDIUM, _dist_growth),
    Rule("dependency-increase", "trend", Severity.INFO, _dependency_increase),
)

FALLBACK_TEXT = "Package follows best practices for TypeScript libraries. Great job!"
FALLBACK_RULE = "best-practices"
