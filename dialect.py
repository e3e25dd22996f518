"""
Decide which extraction engine applies to a document.

Extracted PDF text is always an ED279 allocation report. For workbooks the
signals are checked from most to least specific: an explicit hint, exact
allocation markers, the Summary/Detail sheet pair, weak staffing keywords,
and finally the generic comparative parser. Unrecognized hints are ignored.
"""
from __future__ import annotations

from typing import Optional

from maine_shared import (
    ALLOCATION_MARKERS,
    DIALECT_HINTS,
    SHEET_DETAIL,
    SHEET_SUMMARY,
    STAFFING_MARKERS,
)
from report_models import Dialect, RawDocument
from scanners import row_text


def normalize_hint(hint: Optional[str]) -> Optional[Dialect]:
    """Map a caller hint to a Dialect; None, "auto" and unrecognized hints mean detect."""
    key = (hint or "auto").strip().lower()
    value = DIALECT_HINTS.get(key)
    return Dialect(value) if value else None


def sheet_text(rows) -> str:
    return " ".join(row_text(r) for r in rows or ()).lower()


def has_comparative_sheets(document: RawDocument) -> bool:
    names = document.sheet_names
    return SHEET_SUMMARY in names and SHEET_DETAIL in names


def classify(document: RawDocument, hint: Optional[str] = "auto") -> Dialect:
    # extracted PDF text only ever carries an ED279 report
    if not document.is_spreadsheet:
        return Dialect.ALLOCATION

    forced = normalize_hint(hint)
    if forced is not None:
        return forced

    text = sheet_text(document.first_sheet())
    if any(marker in text for marker in ALLOCATION_MARKERS):
        return Dialect.ALLOCATION
    if has_comparative_sheets(document):
        return Dialect.COMPARATIVE
    if any(marker in text for marker in STAFFING_MARKERS):
        return Dialect.STAFFING
    return Dialect.COMPARATIVE
