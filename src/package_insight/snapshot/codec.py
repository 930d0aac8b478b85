"""Serialise snapshots to plain JSON-compatible dicts and back.

``to_dict`` flattens dataclasses, enums and tuples into dicts, strings and
lists. ``from_dict`` rebuilds the records by walking each dataclass's type
hints, so adding a field to a section needs no codec change. Unknown keys
are ignored and missing keys fall back to the field default, which keeps
older history records loadable.
"""

from __future__ import annotations

import dataclasses
import json
import typing
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Type, TypeVar, Union, get_type_hints

from .models import Snapshot

T = TypeVar("T")


def to_dict(value: Any) -> Any:
    """Convert a record (or any nested value) to JSON-compatible data."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_dict(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_dict(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_dict(v) for k, v in value.items()}
    return value


def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
    """Rebuild a dataclass instance of type ``cls`` from ``to_dict`` output.

    Raises:
        ValueError: If ``data`` is not a mapping or a value has the wrong shape
    """
    if not isinstance(data, dict):
        raise ValueError(f"expected an object for {cls.__name__}, got {type(data).__name__}")

    hints = _type_hints(cls)
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _convert(hints[f.name], data[f.name])

    try:
        return cls(**kwargs)
    except TypeError as e:
        # Required field missing
        raise ValueError(f"invalid {cls.__name__}: {e}") from e


def snapshot_to_json(snapshot: Snapshot, indent: int = 2) -> str:
    return json.dumps(to_dict(snapshot), indent=indent)


def snapshot_from_json(text: str) -> Snapshot:
    """Parse a JSON document produced by ``snapshot_to_json``.

    Raises:
        ValueError: On malformed JSON (``json.JSONDecodeError``) or bad structure
    """
    return from_dict(Snapshot, json.loads(text))


# ── Private helpers ──────────────────────────────────────────────────


@lru_cache(maxsize=None)
def _type_hints(cls: type) -> Dict[str, Any]:
    return get_type_hints(cls)


def _convert(hint: Any, value: Any) -> Any:
    if value is None:
        return None

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    # Optional[X]
    if origin is Union:
        non_none = [a for a in args if a is not type(None)]
        return _convert(non_none[0], value) if non_none else value

    # Tuple[X, ...]
    if origin is tuple:
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"expected a list, got {type(value).__name__}")
        item_hint = args[0] if args else Any
        return tuple(_convert(item_hint, v) for v in value)

    if isinstance(hint, type):
        if dataclasses.is_dataclass(hint):
            return from_dict(hint, value)
        if issubclass(hint, Enum):
            return hint(value)
        if hint is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
    return value
