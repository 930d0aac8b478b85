"""Configuration loading and management for Package Insight.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.package-insight.toml)
    3. Project config (./package-insight.toml)
    4. Explicit config file (--config)
    5. Environment variables (PACKAGE_INSIGHT_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(run_build=False)
    >>> config.run_build
    False
    >>> config.thresholds.max_dependencies
    20
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError, PackageInsightError

Verbosity = Literal["quiet", "normal", "verbose"]

MIB = 1024 * 1024

ENV_PREFIX = "PACKAGE_INSIGHT_"


@dataclass(frozen=True)
class ThresholdConfig:
    """Limits used by the insight rules.

    Attributes:
        Distribution:
            dist_size_limit: Build output size (bytes) above which it is flagged
            source_map_ratio_limit: Source map bytes per JS byte considered excessive

        Maintenance:
            stale_months: Months since package.json changed before it counts as stale
            active_versions_per_month: Publish cadence considered active maintenance
            inactive_versions_per_month: Publish cadence considered limited maintenance
            inactive_min_months: Package lifetime required before flagging low cadence

        Dependencies:
            max_dependencies: Runtime dependency count above which it is flagged
            node_modules_large: Installed size (bytes) considered large
            node_modules_extreme: Installed size (bytes) considered extremely large
            transitive_ratio_limit: Allowed transitive/direct dependency ratio
            dominant_dependency_pct: Share of node_modules one package may take

        Published package:
            packed_size_limit: Tarball size (bytes) above which it is flagged
            compression_ratio_limit: packed/unpacked ratio hinting at binary content

        Trends (against the previous snapshot):
            build_regression_pct: Build time growth (%) worth reporting
            dist_growth_pct: Distribution size growth (%) worth reporting
    """

    # === Distribution ===
    dist_size_limit: int = 1 * MIB
    source_map_ratio_limit: float = 2.0

    # === Maintenance ===
    stale_months: float = 12.0
    active_versions_per_month: float = 3.0
    inactive_versions_per_month: float = 0.1
    inactive_min_months: float = 12.0

    # === Dependencies ===
    max_dependencies: int = 20
    node_modules_large: int = 50 * MIB
    node_modules_extreme: int = 100 * MIB
    transitive_ratio_limit: float = 5.0
    dominant_dependency_pct: float = 25.0

    # === Published package ===
    packed_size_limit: int = 1 * MIB
    compression_ratio_limit: float = 0.9

    # === Trends ===
    build_regression_pct: float = 25.0
    dist_growth_pct: float = 10.0

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        if self.node_modules_large > self.node_modules_extreme:
            raise ValueError("node_modules_large must not exceed node_modules_extreme")

        if not 0.0 <= self.compression_ratio_limit <= 1.0:
            raise ValueError("compression_ratio_limit must be between 0.0 and 1.0")

        if not 0.0 < self.dominant_dependency_pct <= 100.0:
            raise ValueError("dominant_dependency_pct must be in (0, 100]")

        if self.inactive_versions_per_month > self.active_versions_per_month:
            raise ValueError(
                "inactive_versions_per_month must not exceed active_versions_per_month"
            )

        for field_name in (
            "dist_size_limit",
            "packed_size_limit",
            "max_dependencies",
            "stale_months",
            "source_map_ratio_limit",
            "transitive_ratio_limit",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be positive")


# Default threshold configuration (singleton)
DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one analysis run.

    Attributes:
        Output layout:
            output_root: Directory under which a per-package folder is created
            history_dir_name: Sub-folder (inside the package folder) for history records
            pack_dir_name: Sub-folder receiving the tarball produced by ``npm pack``

        Probes:
            run_build: Run ``npm run clean`` / ``npm run build`` and time it
            run_pack: Run ``npm pack`` to measure the published size
            command_timeout: Seconds before an external command is abandoned (None = wait)
            npm_command: Executable used for package-manager commands
            git_command: Executable used for version-control commands

        Report sizes:
            max_dependency_sizes: Largest installed dependencies kept in the snapshot
            max_largest_files: Largest published files kept in the snapshot
            max_tags: Most recent git tags kept in the snapshot

        Output control:
            verbosity: Logging verbosity level (quiet, normal, verbose)
            log_file: File that also receives log records (None = stderr only)
    """

    # Output layout
    output_root: str = "package-analysis"
    history_dir_name: str = "history"
    pack_dir_name: str = "pack-analysis"

    # Probes
    run_build: bool = True
    run_pack: bool = True
    command_timeout: Optional[int] = None
    npm_command: str = "npm"
    git_command: str = "git"

    # Report sizes
    max_dependency_sizes: int = 20
    max_largest_files: int = 10
    max_tags: int = 10

    # Output control
    verbosity: Verbosity = "normal"
    log_file: Optional[str] = None

    # Insight thresholds (nested config)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.command_timeout is not None and self.command_timeout < 1:
            raise ValueError("command_timeout must be at least 1 second")

        for field_name in ("max_dependency_sizes", "max_largest_files", "max_tags"):
            if getattr(self, field_name) < 1:
                raise ValueError(f"{field_name} must be at least 1")

        if not self.output_root:
            raise ValueError("output_root must not be empty")
        if not self.history_dir_name or not self.pack_dir_name:
            raise ValueError("history_dir_name and pack_dir_name must not be empty")

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options never mask a file value.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        PackageInsightError: If a config file is missing or unreadable
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".package-insight.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise PackageInsightError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "package-insight.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise PackageInsightError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise PackageInsightError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise PackageInsightError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    thresholds_dict = merged.pop("thresholds", None)
    if thresholds_dict is not None:
        if isinstance(thresholds_dict, dict):
            try:
                merged["thresholds"] = ThresholdConfig(**thresholds_dict)
            except TypeError as e:
                raise PackageInsightError(f"Invalid [thresholds] config: {e}")
            except ValueError as e:
                raise InvalidConfigError("thresholds", thresholds_dict, str(e))
        elif isinstance(thresholds_dict, ThresholdConfig):
            merged["thresholds"] = thresholds_dict

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise PackageInsightError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise InvalidConfigError("config", merged, str(e))


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from PACKAGE_INSIGHT_* environment variables.

    Every scalar field of AnalysisConfig can be set, e.g.
    ``PACKAGE_INSIGHT_RUN_BUILD=false`` or ``PACKAGE_INSIGHT_COMMAND_TIMEOUT=600``.

    Returns:
        Dict of field_name -> parsed_value for any PACKAGE_INSIGHT_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint, field_name)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise PackageInsightError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any, field_name: str) -> Any:
    """Parse environment variable string to the correct type.

    Args:
        value: Raw string from environment
        type_hint: Type annotation from dataclass
        field_name: Field name for error messages

    Returns:
        Parsed value or None if the field cannot be set from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]; extract X
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    # Nested dataclasses (thresholds) are file-only
    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        PackageInsightError: If no TOML parser is available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise PackageInsightError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
