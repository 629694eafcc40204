"""Shared validation helpers for every processor and transformer.

Pure functions: no click, no logging setup, no storage.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_CONTAINER_TYPES = (list, tuple, set, frozenset, dict, bytes, bytearray)


def is_unset(value: Any) -> bool:
    """None and the empty string both mean "no value" for select-like types."""
    return value is None or value == ""


def is_blank(value: Any) -> bool:
    """None, empty strings, and whitespace-only strings are blank."""
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def is_string_coercible(value: Any) -> bool:
    """Scalars can be stored as text; containers cannot."""
    return value is not None and not isinstance(value, _CONTAINER_TYPES)


def is_option_scalar(value: Any) -> bool:
    """Option ids arrive as strings or numbers. Booleans are not ids."""
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def coerce_to_string(value: Any) -> str:
    """Render a scalar the way it is stored in the ``value`` column.

    ``True`` -> ``"true"``, ``3.0`` -> ``"3"``, everything else via ``str()``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def config_int(config: Mapping[str, Any], key: str) -> int | None:
    """Read an integer setting. Booleans and non-numbers are treated as absent."""
    raw = config.get(key)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return int(raw)


def option_ids(config: Mapping[str, Any]) -> list[str] | None:
    """Return the configured option ids, or None if no usable option list exists.

    Options are ``{"id": ..., "name": ...}`` objects; bare strings are accepted
    as ids for hand-written schemas.
    """
    options = config.get("options")
    if not isinstance(options, (list, tuple)) or not options:
        return None
    ids: list[str] = []
    for opt in options:
        if isinstance(opt, Mapping):
            if "id" in opt:
                ids.append(coerce_to_string(opt["id"]))
        elif is_option_scalar(opt):
            ids.append(coerce_to_string(opt))
    return ids


def find_duplicates(values: list[str]) -> list[str]:
    """Return each value that occurs more than once, in first-repeat order."""
    seen: set[str] = set()
    dupes: list[str] = []
    for v in values:
        if v in seen and v not in dupes:
            dupes.append(v)
        seen.add(v)
    return dupes


def to_number(value: Any) -> int | float | None:
    """Parse a numeric filter value. Integral results come back as int."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number: float = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number
