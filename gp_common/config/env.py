"""Parsing of ``GP_*`` environment variable values.

Every parser returns None when the value is absent or not understood, so the
settings layer can tell "unset" and "invalid" apart from a real value.
"""

from __future__ import annotations

from typing import Callable, TypeVar

N = TypeVar("N", int, float)

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def parse_bool_env(value: str | None) -> bool | None:
    """Parse an on/off switch such as ``GP_PERF_SAMPLING``.

    Accepts 1/true/yes/on and 0/false/no/off, case-insensitive.
    """
    if value is None:
        return None
    token = value.strip().lower()
    if token in _TRUE:
        return True
    if token in _FALSE:
        return False
    return None


def _parse_number(value: str | None, kind: Callable[[str], N]) -> N | None:
    if value is None:
        return None
    try:
        return kind(value.strip())
    except ValueError:
        return None


def parse_int_env(value: str | None) -> int | None:
    return _parse_number(value, int)


def parse_float_env(value: str | None) -> float | None:
    return _parse_number(value, float)
