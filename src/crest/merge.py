"""Deep merge of option trees.

Layers are folded left to right into a new mapping; later layers win. The
inputs are never mutated. Rules for a key present in both sides:

- callables (on either side), ``None`` and dates in the override replace
  the base value outright;
- a string override containing the ``#{_}`` placeholder is expanded with
  the base string, e.g. ``"#{_}, gzip"`` over ``"deflate"``;
- lists merge element-wise by index and drop ``None`` elements;
- mappings merge recursively;
- anything else is replaced.

Mixing a list or mapping with another type raises ``MergeTypeError``.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Mapping

from .errors import MergeTypeError

PARENT_PLACEHOLDER = re.compile(r"#\{\s*_\s*\}")

_MISSING = object()


def deep_merge(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge option trees into a new dict.

    Args:
        layers: Mappings from lowest to highest priority. ``None`` entries
            are skipped.

    Returns:
        A new dict; nested containers are copies of the inputs.
    """
    result: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            result[key] = _merge_value(result.get(key, _MISSING), value, key)
    return result


def _merge_list(base: list[Any], override: list[Any], key: Any) -> list[Any]:
    merged = list(base)
    for index, value in enumerate(override):
        current = merged[index] if index < len(merged) else _MISSING
        item = _merge_value(current, value, key)
        if index < len(merged):
            merged[index] = item
        else:
            merged.append(item)
    return [item for item in merged if item is not None]


def _merge_value(base: Any, override: Any, key: Any) -> Any:
    if (
        base is _MISSING
        or callable(base)
        or override is None
        or callable(override)
        or isinstance(override, date)
    ):
        return _copy(override)

    if isinstance(override, str) and PARENT_PLACEHOLDER.search(override):
        if isinstance(base, str):
            return PARENT_PLACEHOLDER.sub(lambda _: base, override)
        return base

    if isinstance(base, list) or isinstance(override, list):
        if not (isinstance(base, list) and isinstance(override, list)):
            raise MergeTypeError(
                f"Trying to combine an array with a non-array ({key})"
            )
        return _merge_list(base, override, key)

    if isinstance(base, Mapping) or isinstance(override, Mapping):
        if not (isinstance(base, Mapping) and isinstance(override, Mapping)):
            raise MergeTypeError(
                f"Trying to combine an object with a non-object ({key})"
            )
        return deep_merge(base, override)

    return override


def _copy(value: Any) -> Any:
    """Copy containers so merged trees never alias caller input."""
    if isinstance(value, Mapping):
        return deep_merge(value)
    if isinstance(value, list):
        return [_copy(item) for item in value]
    return value
