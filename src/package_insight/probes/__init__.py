"""Probes: each one inspects one aspect of a package and returns a snapshot section.

Filesystem probes read files only. ``version``, ``build`` and
``package_size`` also run ``git``/``npm`` through :mod:`.shell`.
"""

from .build import measure_build, skipped_build
from .compiler_config import analyze_compiler_config, find_compiler_config
from .dependencies import analyze_dependencies, analyze_dependency_sizes
from .dist import analyze_dist, find_dist_directory
from .manifest import analyze_manifest
from .package_size import analyze_package_size, parse_dry_run_files, skipped_package_size
from .shell import CommandResult, run_command
from .version import GitInspector, analyze_version, fetch_registry_history

__all__ = [
    "analyze_manifest",
    "analyze_version",
    "analyze_compiler_config",
    "measure_build",
    "analyze_dist",
    "analyze_dependencies",
    "analyze_dependency_sizes",
    "analyze_package_size",
    "find_compiler_config",
    "find_dist_directory",
    "fetch_registry_history",
    "parse_dry_run_files",
    "skipped_build",
    "skipped_package_size",
    "GitInspector",
    "CommandResult",
    "run_command",
]
