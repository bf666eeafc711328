"""Narrowing helpers for untyped data (parsed TOML, environment mappings)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

Table = dict[str, object]


def as_table(obj: object) -> Table | None:
    """``obj`` as a string-keyed dict, or None for anything else."""
    if isinstance(obj, dict) and all(isinstance(k, str) for k in cast(dict[object, object], obj)):
        return cast(Table, obj)
    return None


def lookup_str(source: Mapping[str, object], key: str, *, strip: bool = True) -> str | None:
    """String value under ``key``, None if absent or not a string.

    With ``strip`` the value is trimmed and blank counts as absent. Regexes
    and templates are whitespace-sensitive and are read with ``strip=False``.
    """
    value = source.get(key)
    if not isinstance(value, str):
        return None
    if not strip:
        return value
    return value.strip() or None
