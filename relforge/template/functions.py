"""Built-in template functions.

Version templates need integer arithmetic (``add``, ``sub``, ``inc``);
branch templates need calendar helpers (``Week``, ``ISOYear``, ``YearDay``)
and ``printf`` for zero padding.
"""

from __future__ import annotations

import re
from datetime import date

from relforge.template.engine import TemplateError, TemplateFunction

__all__ = ["DEFAULT_FUNCTIONS"]

_V_VERB_RE = re.compile(r"%%|%([-+# 0]*\d*(?:\.\d+)?)v")


def _int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TemplateError(f"{name}: expected an integer, got {type(value).__name__}")
    return value


def _date(name: str, value: object) -> date:
    # datetime is a date subclass
    if not isinstance(value, date):
        raise TemplateError(f"{name}: expected a date, got {type(value).__name__}")
    return value


def add(a: object, b: object) -> int:
    return _int("add", a) + _int("add", b)


def sub(a: object, b: object) -> int:
    return _int("sub", a) - _int("sub", b)


def inc(a: object) -> int:
    return _int("inc", a) + 1


def week(t: object) -> int:
    """ISO 8601 week number (1-53)."""
    return _date("Week", t).isocalendar().week


def iso_year(t: object) -> int:
    """Year the ISO week belongs to (differs from .Year around New Year)."""
    return _date("ISOYear", t).isocalendar().year


def year_day(t: object) -> int:
    return _date("YearDay", t).timetuple().tm_yday


def printf(fmt: object, *args: object) -> str:
    if not isinstance(fmt, str):
        raise TemplateError("printf: format must be a string")
    # %v (any value) has no %-operator equivalent; %s is the closest. %% stays literal.
    py_fmt = _V_VERB_RE.sub(lambda m: "%%" if m.group(0) == "%%" else f"%{m.group(1)}s", fmt)
    try:
        return py_fmt % args
    except (TypeError, ValueError, OverflowError) as e:
        raise TemplateError(f"printf: {e}") from e


DEFAULT_FUNCTIONS: dict[str, TemplateFunction] = {
    "add": add,
    "sub": sub,
    "inc": inc,
    "printf": printf,
    "Week": week,
    "ISOYear": iso_year,
    "YearDay": year_day,
}
