"""Default-fill helpers applied once at the ingestion boundary.

Spreadsheet cells arrive as whatever the reader produced: numbers, strings,
``None`` or NaN for blanks. Numeric fields follow a "missing numeric is 0"
contract so downstream scoring never special-cases absent values. Fields whose
presence changes behaviour (pre-computed errors, altitude subtypes) use the
optional variant and stay ``None`` instead.
"""

from __future__ import annotations

import math
from typing import Any

import pandas as pd

_TRUE_LABELS = {"1", "true", "t", "yes", "y", "pass", "passed", "ok"}
_FALSE_LABELS = {"0", "false", "f", "no", "n", "fail", "failed"}


def is_blank(value: Any) -> bool:
    """Return True for None, NaN/NA/NaT cells and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # array-likes have no single missing-ness
        return False


def coerce_optional_float(value: Any) -> float | None:
    """Parse a numeric cell, returning None when it is blank or malformed."""
    if is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_float(value: Any) -> float:
    """Parse a numeric cell; blank or malformed input becomes 0.0."""
    number = coerce_optional_float(value)
    return 0.0 if number is None else number


def coerce_label(value: Any) -> str | None:
    """Return a trimmed string label, or None for blank cells.

    Integral floats (``3.0``) are rendered without the decimal part, which is
    how spreadsheet readers surface whole-number cells in mixed columns.
    """
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_point_id(value: Any) -> str:
    """Normalise a test point identifier into its join-key form."""
    label = coerce_label(value)
    return label or ""


def coerce_flag(value: Any) -> bool | None:
    """Interpret a pass/fail qualifier cell (``Yes``/``No``, ``1``/``0``...)."""
    if is_blank(value):
        return None
    if isinstance(value, bool):
        return value
    label = coerce_label(value)
    if label is None:
        return None
    lowered = label.lower()
    if lowered in _TRUE_LABELS:
        return True
    if lowered in _FALSE_LABELS:
        return False
    return None
