"""Parsing and statistics helpers shared by the cleaner and the analyzers."""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

_REJECTED_NUMBER_TEXT = re.compile(r"[A-Za-z_]")


def _finite(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def parse_optional_number(value: object | None) -> Optional[float]:
    """Parse ``value`` as a float, returning ``None`` when it is absent or invalid.

    Thousands separators and surrounding whitespace are stripped first, so
    ``" 1,234.50 "`` parses to ``1234.5``. Text carrying letters or
    underscores (``"1e3"``, ``"1_000"``, ``"n/a"``) is rejected.
    """

    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _finite(value)
    text = str(value).strip()
    if not text or _REJECTED_NUMBER_TEXT.search(text):
        return None
    return _finite(text.replace(",", ""))


def parse_number(value: object | None) -> float:
    """Lenient float parse; anything unparseable becomes ``0.0``.

    Callers must validate the result themselves (for example ``> 0``).
    """

    parsed = parse_optional_number(value)
    return 0.0 if parsed is None else parsed


def parse_int(value: object | None) -> Optional[int]:
    # thousands separators are not valid in a year or a count
    if isinstance(value, str) and "," in value:
        return None
    parsed = parse_optional_number(value)
    if parsed is None or not parsed.is_integer():
        return None
    return int(parsed)


def parse_date(value: object | None) -> Optional[date]:
    """Parse a calendar date, returning ``None`` for missing or invalid input.

    Text without any digit is refused before it reaches pandas, which would
    otherwise resolve words like ``"now"`` or ``"today"`` to the wall clock.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text or not any(ch.isdigit() for ch in text):
        return None
    stamp = pd.to_datetime(text, errors="coerce")
    if stamp is None or pd.isna(stamp):
        return None
    return stamp.date()


def days_between(start: Optional[date], end: Optional[date]) -> int:
    """Whole days from ``start`` to ``end``; 0 when either side is unknown."""

    if start is None or end is None:
        return 0
    return (end - start).days


def median(values: Sequence[float]) -> float:
    """Median rounded to 2 decimals; ``0.0`` for an empty sequence."""

    if len(values) == 0:
        return 0.0
    result = float(np.median(np.asarray(values, dtype=float)))
    return round(result, 2)


def average(values: Iterable[object]) -> float:
    """Arithmetic mean over the entries that are valid finite numbers.

    Non-numeric entries (``None``, text, NaN) are skipped rather than counted
    as zero. Returns ``0.0`` when nothing valid remains.
    """

    total = 0.0
    count = 0
    for value in values:
        numeric = _finite(value)
        if numeric is None:
            continue
        total += numeric
        count += 1
    return total / count if count else 0.0


def format_number(value: object, decimals: int = 2) -> str:
    """Format like ``1,234,567.89``; non-numeric input renders as zero."""

    numeric = _finite(value)
    if numeric is None:
        numeric = 0.0
    text = f"{numeric:,.{decimals}f}"
    # "-0.00" after rounding is still zero
    if text.startswith("-") and float(text[1:].replace(",", "")) == 0:
        text = text[1:]
    return text


def format_int(value: int) -> str:
    return f"{int(value):,}"


__all__ = [
    "average",
    "days_between",
    "format_int",
    "format_number",
    "median",
    "parse_date",
    "parse_int",
    "parse_number",
    "parse_optional_number",
]
