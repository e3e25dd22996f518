"""
Primitive scanners shared by every extraction engine.

Numeric coercion never raises: strip "$" and ",", trim, parse as float, and
fall back to 0. The backward row scans are a best-effort heuristic (any large
enough trailing number matches), so the floors and bounds are parameters.
"""
from __future__ import annotations

import math
import re
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from maine_shared import CURRENCY_FLOOR

Pattern = Union[str, "re.Pattern[str]"]


def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _parse_text_number(value) -> Optional[float]:
    s = str(value).replace("$", "").replace(",", "").strip()
    if not s:
        return None
    try:
        v = float(s)
    except ValueError:
        return None
    return v if math.isfinite(v) else None


def coerce_number(value) -> float:
    if isinstance(value, (bool, np.bool_)) or _is_empty(value):
        return 0.0
    if isinstance(value, (int, float, np.integer, np.floating)):
        v = float(value)
        return v if math.isfinite(v) else 0.0
    v = _parse_text_number(value)
    return 0.0 if v is None else v


def is_numeric_cell(value) -> bool:
    """True for real numbers and for text that coerces cleanly (e.g. "$1,200")."""
    if isinstance(value, (bool, np.bool_)) or _is_empty(value):
        return False
    if isinstance(value, (int, float, np.integer, np.floating)):
        return math.isfinite(float(value))
    return _parse_text_number(value) is not None


def numeric_cells(cells: Sequence) -> list:
    return [coerce_number(c) for c in cells if is_numeric_cell(c)]


def cell_text(value) -> str:
    if _is_empty(value):
        return ""
    return str(value).strip()


def row_text(cells: Sequence) -> str:
    return " ".join(t for t in (cell_text(c) for c in cells or ()) if t)


def currency_like_value(cells: Sequence, floor: float = CURRENCY_FLOOR) -> float:
    """
    Find the amount in a row by scanning from the last cell backward.

    Args:
        cells: Row of mixed cell values
        floor: Magnitude a value must exceed to count as an amount

    Returns:
        First qualifying value, or 0 when nothing qualifies ("not found")
    """
    for cell in reversed(list(cells or ())):
        v = coerce_number(cell)
        if abs(v) > floor:
            return v
    return 0.0


def bounded_number(cells: Sequence, low: float, high: float) -> float:
    """Backward scan for the first strictly positive value inside (low, high); 0 if none."""
    for cell in reversed(list(cells or ())):
        v = coerce_number(cell)
        if v > 0 and low < v < high:
            return v
    return 0.0


def label_match(text: str, pattern: Pattern) -> Optional[Tuple[str, ...]]:
    """
    Case-insensitive search of a labelled pattern in free text.

    Returns the captured groups, the whole match as a 1-tuple when the pattern
    has no groups, or None on a miss.
    """
    if not text:
        return None
    if isinstance(pattern, str):
        pattern = re.compile(pattern, re.IGNORECASE)
    elif not pattern.flags & re.IGNORECASE:
        pattern = re.compile(pattern.pattern, pattern.flags | re.IGNORECASE)
    m = pattern.search(text)
    if not m:
        return None
    return m.groups() if m.groups() else (m.group(0),)
