"""Sparse structural diff between two indexed gauge snapshots.

Delta shapes:

* ``[new]`` - key added
* ``[old, 0, 0]`` - key removed
* ``[old, new]`` - value replaced
* ``{key: delta, ...}`` - object with changed members
* ``{"_t": "a", "<i>": delta, "_<i>": [old, 0, 0]}`` - array, positional

Unchanged members are omitted, so "did a field change" is a key lookup.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional


ARRAY_MARKER = "_t"
ARRAY_TYPE = "a"

Delta = Any


def _scalar_equal(old: Any, new: Any) -> bool:
    # JSON true and 1 are different values.
    if isinstance(old, bool) or isinstance(new, bool):
        return type(old) is type(new) and old == new
    if type(old) is not type(new) and not (
        isinstance(old, (int, float)) and isinstance(new, (int, float))
    ):
        return False
    return old == new


def _diff_dict(old: Mapping[str, Any], new: Mapping[str, Any]) -> Optional[dict]:
    result: dict[str, Delta] = {}
    for key, new_value in new.items():
        if key not in old:
            result[key] = [new_value]
            continue
        sub = diff_values(old[key], new_value)
        if sub is not None:
            result[key] = sub
    for key, old_value in old.items():
        if key not in new:
            result[key] = [old_value, 0, 0]
    return result or None


def _diff_list(old: list, new: list) -> Optional[dict]:
    result: dict[str, Delta] = {ARRAY_MARKER: ARRAY_TYPE}
    for idx in range(max(len(old), len(new))):
        if idx >= len(old):
            result[str(idx)] = [new[idx]]
        elif idx >= len(new):
            result[f"_{idx}"] = [old[idx], 0, 0]
        else:
            sub = diff_values(old[idx], new[idx])
            if sub is not None:
                result[str(idx)] = sub
    return result if len(result) > 1 else None


def diff_values(old: Any, new: Any) -> Optional[Delta]:
    """Return the delta from ``old`` to ``new`` or ``None`` when deeply equal."""
    if isinstance(old, dict) and isinstance(new, dict):
        return _diff_dict(old, new)
    if isinstance(old, list) and isinstance(new, list):
        return _diff_list(old, new)
    if isinstance(old, (dict, list)) or isinstance(new, (dict, list)):
        return [old, new]
    if _scalar_equal(old, new):
        return None
    return [old, new]


def diff_indexed(
    old_indexed: Mapping[str, Mapping[str, Any]],
    new_indexed: Mapping[str, Mapping[str, Any]],
) -> dict[str, Delta]:
    """Delta per gauge id present in ``new_indexed``.

    Gauges only present in ``old_indexed`` are not visited, so removals are
    not reported.
    """
    deltas: dict[str, Delta] = {}
    for key, gauge in new_indexed.items():
        delta = diff_values(old_indexed.get(key, {}), gauge)
        if delta:
            deltas[key] = delta
    return deltas


def iter_fields(delta: Mapping[str, Delta]) -> Iterator[tuple[str, Delta]]:
    for key, value in delta.items():
        if key == ARRAY_MARKER:
            continue
        yield key, value


def touched(delta: Mapping[str, Delta], field: str) -> bool:
    return field != ARRAY_MARKER and field in delta

