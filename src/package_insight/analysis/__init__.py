"""Snapshot assembly from the individual probes."""

from .aggregator import PackageAnalyzer, RunPaths, run_paths

__all__ = ["PackageAnalyzer", "RunPaths", "run_paths"]
