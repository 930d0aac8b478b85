"""
Filesystem helpers shared by the probes.

Directory walks skip symbolic links (``node_modules/.bin`` is full of them)
and return paths in a stable, sorted order.
"""

import json
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Optional

from ..exceptions import FileAccessError, ManifestError


def walk_files(root: Path, skip_dirs: Iterable[str] = ()) -> Iterator[Path]:
    """
    Yield every regular file below ``root``.

    Args:
        root: Directory to walk
        skip_dirs: Directory names pruned wherever they appear

    Yields:
        File paths, sorted per directory
    """
    skipped = set(skip_dirs)
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames[:] = sorted(d for d in dirnames if d not in skipped)
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_symlink():
                continue
            yield path


def file_size(path: Path) -> int:
    """Size of one file in bytes (0 if it vanished meanwhile)."""
    try:
        return path.stat().st_size
    except OSError:
        return 0


def total_size(paths: Iterable[Path]) -> int:
    """Sum of file sizes."""
    return sum(file_size(p) for p in paths)


def directory_size(path: Path) -> int:
    """Total size of all files below ``path``."""
    return total_size(walk_files(path))


def read_text(filepath: Path, encoding: str = "utf-8", errors: str = "replace") -> str:
    """
    Read a text file.

    Raises:
        FileAccessError: If the file cannot be read
    """
    try:
        with open(filepath, encoding=encoding, errors=errors) as f:
            return f.read()
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")


def read_json(filepath: Path, allow_comments: bool = False) -> Any:
    """
    Parse a JSON file.

    Args:
        filepath: File to parse
        allow_comments: Accept JSON-with-comments (tsconfig style): ``//``
            and ``/* */`` comments plus trailing commas

    Raises:
        FileAccessError: If the file cannot be read
        ManifestError: If the content is not valid JSON
    """
    text = read_text(filepath, encoding="utf-8-sig")
    if allow_comments:
        text = strip_json_comments(text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(filepath, str(e))


def strip_json_comments(text: str) -> str:
    """Remove comments and trailing commas from JSON-with-comments text.

    String literals are left untouched, so values such as ``"src/*"`` or
    ``"http://..."`` survive.
    """
    return _drop_trailing_commas(_drop_comments(text))


def first_existing(root: Path, names: Iterable[str], want_dir: Optional[bool] = None) -> Optional[Path]:
    """Return the first ``root / name`` that exists (optionally of the wanted kind)."""
    for name in names:
        candidate = root / name
        if not candidate.exists():
            continue
        if want_dir is True and not candidate.is_dir():
            continue
        if want_dir is False and not candidate.is_file():
            continue
        return candidate
    return None


# ── Private helpers ──────────────────────────────────────────────────


def _drop_comments(text: str) -> str:
    out = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _drop_trailing_commas(text: str) -> str:
    out = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)
