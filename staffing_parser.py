"""
Staffing rosters: open-schema records keyed by whatever header the export wrote.

The loosely typed part stays in StaffingRoster.records; the only typed
projection is the FTE total.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from maine_shared import DISTRICT_KEYWORDS, REPORT_TYPE_STAFFING, STAFFING_HEADER_KEYWORDS, UNKNOWN
from report_models import Extraction, RawDocument, StaffingRoster
from scanners import cell_text, coerce_number, row_text
from trio_parser import scan_metadata


def find_staffing_header(rows: Sequence[Sequence[Any]]) -> Optional[int]:
    for i, row in enumerate(rows):
        text = row_text(row).lower()
        if any(k in text for k in STAFFING_HEADER_KEYWORDS):
            return i
    return None


def header_names(row: Sequence[Any]) -> List[str]:
    names = []
    for j, cell in enumerate(row):
        name = cell_text(cell) or f"Column {j + 1}"
        if name in names:
            name = f"{name} ({j + 1})"
        names.append(name)
    return names


def roster_records(rows: Sequence[Sequence[Any]], headers: Sequence[str]) -> List[Mapping[str, Any]]:
    records = []
    for row in rows:
        record = OrderedDict((h, row[j] if j < len(row) else None) for j, h in enumerate(headers))
        if any(cell_text(v) for v in record.values()):
            records.append(record)
    return records


def fte_field(headers: Sequence[str]) -> Optional[str]:
    return next((h for h in headers if "fte" in h.lower()), None)


def total_fte(records: Sequence[Mapping[str, Any]], headers: Sequence[str]) -> float:
    key = fte_field(headers)
    if key is None:
        return 0.0
    return sum(coerce_number(r.get(key)) for r in records)


def parse_staffing(document: RawDocument) -> Extraction:
    rows = document.first_sheet()
    header = find_staffing_header(rows)

    preamble = rows[:header] if header is not None else rows
    district, fiscal_year = scan_metadata(preamble, keywords=DISTRICT_KEYWORDS)
    records: Tuple[Mapping[str, Any], ...] = ()
    fte = 0.0
    if header is not None:
        headers = header_names(rows[header])
        records = tuple(roster_records(rows[header + 1:], headers))
        fte = total_fte(records, headers)

    return Extraction(
        report_type=REPORT_TYPE_STAFFING,
        district=district,
        fiscal_year=fiscal_year,
        generated_date=UNKNOWN,
        staffing=StaffingRoster(records=records, total_fte=fte),
    )
