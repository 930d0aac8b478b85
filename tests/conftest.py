"""Shared fixtures for Package Insight tests.

Packages are built in ``tmp_path``; ``npm`` and ``git`` are never run for
real. The ``fake_shell`` fixture replaces ``probes.shell.run_command`` with
a scripted stand-in.
"""

import json
import os
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

import pytest

from package_insight.exceptions import CommandError
from package_insight.probes import shell
from package_insight.probes.shell import CommandResult
from package_insight.snapshot.models import Snapshot

DEFAULT_MANIFEST = {
    "name": "my-lib",
    "version": "1.0.0",
    "description": "A small library",
    "main": "dist/index.js",
    "scripts": {"build": "tsc", "test": "jest"},
}


class FakeShell:
    """Scripted replacement for ``run_command``.

    Responses are registered per argument prefix; the longest matching
    prefix wins. Unregistered commands fail like a missing executable.
    """

    def __init__(self):
        self.calls = []
        self._responses: Dict[Tuple[str, ...], dict] = {}

    def on(
        self,
        *prefix: str,
        stdout: str = "",
        stderr: str = "",
        duration_ms: int = 10,
        fail: Optional[str] = None,
        action: Optional[Callable[[Tuple[str, ...], Path], None]] = None,
    ) -> "FakeShell":
        self._responses[tuple(prefix)] = {
            "stdout": stdout,
            "stderr": stderr,
            "duration_ms": duration_ms,
            "fail": fail,
            "action": action,
        }
        return self

    def __call__(self, args, cwd, timeout=None, env=None, check=True):
        args = tuple(args)
        self.calls.append({"args": args, "cwd": Path(cwd), "timeout": timeout, "env": env})

        matches = [p for p in self._responses if args[: len(p)] == p]
        if not matches:
            raise CommandError(args, f"executable '{args[0]}' not found")
        response = self._responses[max(matches, key=len)]

        if response["fail"] is not None:
            raise CommandError(args, response["fail"], returncode=1, stderr=response["fail"])
        if response["action"] is not None:
            response["action"](args, Path(cwd))
        return CommandResult(
            args=args,
            returncode=0,
            stdout=response["stdout"],
            stderr=response["stderr"],
            duration_ms=response["duration_ms"],
        )

    def commands(self):
        return [c["args"] for c in self.calls]


@pytest.fixture
def fake_shell(monkeypatch):
    """Replace external commands with a FakeShell (nothing is faked by default)."""
    fake = FakeShell()
    monkeypatch.setattr(shell, "run_command", fake)
    return fake


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Run from an empty directory with no user config or PACKAGE_INSIGHT_* variables."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("PACKAGE_INSIGHT_"):
            monkeypatch.delenv(key)
    return work


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_file(path: Path, content="") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def make_package(tmp_path):
    """Factory building a package directory.

    Args (of the returned callable):
        manifest: package.json content (dict), raw text, or None for no file
        files: Mapping of relative path -> str/bytes content
        name: Directory name
    """

    def _make(manifest=DEFAULT_MANIFEST, files=None, name="my-lib"):
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        if isinstance(manifest, dict):
            write_json(root / "package.json", manifest)
        elif isinstance(manifest, str):
            write_file(root / "package.json", manifest)
        for rel, content in (files or {}).items():
            write_file(root / rel, content)
        return root

    return _make


@pytest.fixture
def make_snapshot():
    """Factory for Snapshot records with every section absent unless given."""

    def _make(created_at="2024-06-01T12:00:00.000+00:00", **sections):
        return Snapshot(
            package_name=sections.pop("package_name", "my-lib"),
            package_path="/work/my-lib",
            created_at=created_at,
            tool_version="test",
            **sections,
        )

    return _make


def pack_into_destination(tarball_name: str, size: int):
    """FakeShell action writing a tarball of ``size`` bytes like ``npm pack`` does."""

    def _action(args, cwd):
        dest = next(a.split("=", 1)[1] for a in args if a.startswith("--pack-destination="))
        write_file(Path(dest) / tarball_name, b"\0" * size)

    return _action


@pytest.fixture
def pack_action():
    return pack_into_destination
