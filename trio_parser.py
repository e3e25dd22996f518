"""
Comparative budget-vs-actual statements (Trio exports and look-alikes).

With paired "Summary" and "Detail" sheets the layout is known: category
rollups after a "Budget Category" header, line items after an "Account Code"
header. Anything else falls back to a generic single-sheet scan that keeps
every row whose first cell is a valid account code.
"""
from __future__ import annotations

import re
from typing import Any, List, Optional, Sequence, Tuple

from account_codes import parse_account_code
from dialect import has_comparative_sheets
from maine_shared import (
    GENERIC_SCAN_ROWS,
    NON_DISTRICT_PREFIXES,
    REPORT_TYPE_COMPARATIVE,
    REPORT_TYPE_GENERIC,
    SHEET_DETAIL,
    SHEET_SUMMARY,
    UNKNOWN,
)
from report_models import Extraction, LineItem, RawDocument, SummaryRow
from scanners import cell_text, coerce_number, is_numeric_cell, numeric_cells, row_text

SUMMARY_HEADER = "Budget Category"
DETAIL_HEADER = "Account Code"

SUMMARY_FY_PATTERN = re.compile(r"FY(\d{2})-(\d{2})", re.IGNORECASE)
CREATED_ON_PATTERN = re.compile(r"Created On:\s*(\d{1,2}/\d{1,2}/\d{4})", re.IGNORECASE)
CATEGORY_ROW_PATTERN = re.compile(r"^\d{2}\s+.+")
GENERIC_FY_PATTERN = re.compile(r"FY\s?\d{2,4}(?:[-/]\d{2,4})?|\d{4}[-/]\d{2,4}", re.IGNORECASE)


def _cell(row: Sequence[Any], i: int) -> Any:
    return row[i] if i < len(row) else None


def _line_item(code, description: str, budget: float, actual: float,
               encumbered: float, available: float) -> LineItem:
    return LineItem(
        account_code=code,
        description=description,
        budget=budget,
        actual=actual,
        encumbered=encumbered,
        available=available,
        funding_category=code.funding_category,
    )


# ---------------- Summary + Detail workbook ----------------
def summary_metadata(rows: Sequence[Sequence[Any]]) -> Tuple[str, str, str]:
    """District from the first cell; fiscal year and Created On date, later rows overriding earlier ones."""
    district = UNKNOWN
    if rows and cell_text(_cell(rows[0], 0)):
        district = cell_text(rows[0][0])

    fiscal_year = UNKNOWN
    generated_date = UNKNOWN
    for row in rows:
        text = row_text(row)
        m = SUMMARY_FY_PATTERN.search(text)
        if m:
            fiscal_year = f"FY{m.group(1)}-{m.group(2)}"
        m = CREATED_ON_PATTERN.search(text)
        if m:
            generated_date = m.group(1)
    return district, fiscal_year, generated_date


def summary_rows(rows: Sequence[Sequence[Any]]) -> List[SummaryRow]:
    out: List[SummaryRow] = []
    found_header = False
    for row in rows:
        first = cell_text(_cell(row, 0))
        if first == SUMMARY_HEADER:
            found_header = True
            continue
        if not found_header or not CATEGORY_ROW_PATTERN.match(first):
            continue
        budget = coerce_number(_cell(row, 1))
        # negative budget marks a revenue category
        if budget < 0:
            continue
        out.append(SummaryRow(
            category=first,
            budget=budget,
            actual=coerce_number(_cell(row, 2)),
            encumbered=coerce_number(_cell(row, 3)),
            available=coerce_number(_cell(row, 4)),
        ))
    return out


def find_header_row(rows: Sequence[Sequence[Any]], label: str) -> Optional[int]:
    for i, row in enumerate(rows):
        if any(cell_text(c) == label for c in row):
            return i
    return None


def detail_items(rows: Sequence[Sequence[Any]]) -> List[LineItem]:
    header = find_header_row(rows, DETAIL_HEADER)
    if header is None:
        return []
    items: List[LineItem] = []
    for row in rows[header + 1:]:
        code = parse_account_code(_cell(row, 0))
        if code is None:
            continue
        items.append(_line_item(
            code,
            cell_text(_cell(row, 1)),
            coerce_number(_cell(row, 2)),
            coerce_number(_cell(row, 3)),
            coerce_number(_cell(row, 4)),
            coerce_number(_cell(row, 5)),
        ))
    return items


def parse_summary_detail(document: RawDocument) -> Extraction:
    summary_sheet = document.sheet(SHEET_SUMMARY)
    district, fiscal_year, generated_date = summary_metadata(summary_sheet)
    return Extraction(
        report_type=REPORT_TYPE_COMPARATIVE,
        district=district,
        fiscal_year=fiscal_year,
        generated_date=generated_date,
        summary=tuple(summary_rows(summary_sheet)),
        details=tuple(detail_items(document.sheet(SHEET_DETAIL))),
    )


# ---------------- Generic single-sheet scan ----------------
def is_district_like(value, keywords: Sequence[str] = ()) -> bool:
    if not isinstance(value, str):
        return False
    s = value.strip()
    if len(s) <= 3 or is_numeric_cell(s) or parse_account_code(s) is not None:
        return False
    if s.lower().startswith(NON_DISTRICT_PREFIXES):
        return False
    if keywords and not any(k in s.lower() for k in keywords):
        return False
    return any(ch.isalpha() for ch in s)


def scan_metadata(rows: Sequence[Sequence[Any]], limit: int = GENERIC_SCAN_ROWS,
                   keywords: Sequence[str] = ()) -> Tuple[str, str]:
    """First district-like first cell and first fiscal-year mention within the first `limit` rows."""
    district = UNKNOWN
    fiscal_year = UNKNOWN
    for row in rows[:limit]:
        first = _cell(row, 0)
        if district == UNKNOWN and is_district_like(first, keywords):
            district = " ".join(first.split())
        if fiscal_year == UNKNOWN:
            m = GENERIC_FY_PATTERN.search(row_text(row))
            if m:
                fiscal_year = m.group(0).upper().replace(" ", "")
    return district, fiscal_year


def generic_line_item(row: Sequence[Any]) -> Optional[LineItem]:
    code = parse_account_code(_cell(row, 0))
    if code is None:
        return None
    rest = list(row[1:])
    description = next(
        (cell_text(c) for c in rest if isinstance(c, str) and cell_text(c) and not is_numeric_cell(c)),
        "",
    )
    nums = numeric_cells(rest)
    budget, actual, encumbered = (nums + [0.0, 0.0, 0.0])[:3]
    available = nums[3] if len(nums) >= 4 else budget - actual - encumbered
    return _line_item(code, description, budget, actual, encumbered, available)


def parse_generic(document: RawDocument) -> Extraction:
    rows = document.first_sheet()
    district, fiscal_year = scan_metadata(rows)
    details = [item for item in (generic_line_item(r) for r in rows) if item is not None]
    return Extraction(
        report_type=REPORT_TYPE_GENERIC,
        district=district,
        fiscal_year=fiscal_year,
        details=tuple(details),
    )


def parse_comparative(document: RawDocument) -> Extraction:
    if has_comparative_sheets(document):
        return parse_summary_detail(document)
    return parse_generic(document)
