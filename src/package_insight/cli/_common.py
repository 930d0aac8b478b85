"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config

console = Console()
err_console = Console(stderr=True)

SEVERITY_STYLES = {
    "high": "bold red",
    "medium": "yellow",
    "info": "cyan",
    "positive": "green",
}


def resolve_config(
    config: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    skip_build: bool = False,
    skip_pack: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Path] = None,
) -> AnalysisConfig:
    """Build the run configuration from CLI options."""
    overrides = {}
    if output_dir is not None:
        overrides["output_root"] = str(output_dir)
    if skip_build:
        overrides["run_build"] = False
    if skip_pack:
        overrides["run_pack"] = False
    if log_file is not None:
        overrides["log_file"] = str(log_file)
    return load_config(config_file=config, verbose=verbose, quiet=quiet, **overrides)
