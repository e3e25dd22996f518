"""
ED279 / EPS allocation report extraction.

Two input forms carry the same fields:

* grid form (a spreadsheet export): every row is tested against a rule table;
  metadata rules keep the first hit, amount rules keep the last nonzero hit
  because later "total" rows in these reports supersede subtotal rows;
* text form (text pulled out of the state PDF): one labelled regex per field,
  first match only.

A field that is never located stays at 0 / "Unknown"; partial extraction is
normal and never aborts the pass.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from account_codes import FundingCategory
from maine_shared import (
    CURRENCY_FLOOR,
    DISTRICT_KEYWORDS,
    DISTRICT_MIN_LENGTH,
    DISTRICT_SCAN_ROWS,
    PUPIL_BOUNDS,
    RATE_BOUNDS,
    REPORT_TYPE_ALLOCATION,
    UNKNOWN,
    VALUATION_FLOOR,
)
from report_models import AllocationReport, Extraction, RawDocument, SummaryRow, percent_of
from scanners import bounded_number, coerce_number, currency_like_value, label_match, row_text

FIRST_WINS = "first"
LAST_WINS = "last"

GRID_FY_PATTERN = re.compile(r"FY\d{2,4}[-/]?(?:\d{2,4})?|\d{4}[-/]\d{2,4}", re.IGNORECASE)
DATE_PATTERN = re.compile(r"(\d{1,2}/\d{1,2}/\d{4})")


@dataclass(frozen=True)
class FieldRule:
    """
    One field-detection rule.

    predicate(text, row_index) decides whether the row is a candidate,
    extract(cells, text) pulls the value out of it (a falsy value means "not
    found" and never overwrites), and policy says whether the first or the last
    hit is kept.
    """
    target: str
    predicate: Callable[[str, int], bool]
    extract: Callable[[Sequence[Any], str], Any]
    policy: str = LAST_WINS


def apply_rules(rows: Sequence[Sequence[Any]], rules: Sequence[FieldRule]) -> Dict[str, Any]:
    found: Dict[str, Any] = {}
    for idx, cells in enumerate(rows):
        text = row_text(cells).lower()
        if not text:
            continue
        for rule in rules:
            if rule.policy == FIRST_WINS and rule.target in found:
                continue
            if not rule.predicate(text, idx):
                continue
            value = rule.extract(cells, text)
            if value:
                found[rule.target] = value
    return found


# ---------------- Predicate / extractor builders ----------------
def _all(*words: str, exclude: Tuple[str, ...] = ()) -> Callable[[str, int], bool]:
    return lambda t, _i: all(w in t for w in words) and not any(x in t for x in exclude)


def _any(*phrases: str, exclude: Tuple[str, ...] = ()) -> Callable[[str, int], bool]:
    return lambda t, _i: any(p in t for p in phrases) and not any(x in t for x in exclude)


def _currency(floor: float) -> Callable[[Sequence[Any], str], float]:
    return lambda cells, _t: currency_like_value(cells, floor)


def _bounded(bounds: Tuple[float, float]) -> Callable[[Sequence[Any], str], float]:
    low, high = bounds
    return lambda cells, _t: bounded_number(cells, low, high)


def _is_percent_row(t: str) -> bool:
    return "%" in t or "percent" in t


def _share_amount(side: str) -> Callable[[str, int], bool]:
    return lambda t, _i: side in t and ("share" in t or "contribution" in t) and not _is_percent_row(t)


def _share_pct(side: str) -> Callable[[str, int], bool]:
    return lambda t, _i: side in t and "share" in t and _is_percent_row(t)


def _district_candidate(cells: Sequence[Any], _t: str) -> Optional[str]:
    for cell in cells:
        if not isinstance(cell, str):
            continue
        s = " ".join(cell.split())
        low = s.lower()
        if len(s) > DISTRICT_MIN_LENGTH and any(k in low for k in DISTRICT_KEYWORDS):
            return s
    return None


def fiscal_year_label(raw: str) -> str:
    """FY labels pass through upper-cased; a bare 2024-2025 span becomes FY24-25."""
    s = raw.strip().upper()
    m = re.fullmatch(r"(\d{4})[-/](\d{2,4})", s)
    if m:
        return f"FY{m.group(1)[-2:]}-{m.group(2)[-2:]}"
    return s


def _fiscal_year(_cells: Sequence[Any], text: str) -> Optional[str]:
    m = GRID_FY_PATTERN.search(text)
    return fiscal_year_label(m.group(0)) if m else None


def _date(_cells: Sequence[Any], text: str) -> Optional[str]:
    m = DATE_PATTERN.search(text)
    return m.group(1) if m else None


# Ordered category keyword rules: (category, required words, excluded words)
CATEGORY_KEYWORDS: Tuple[Tuple[FundingCategory, Tuple[str, ...], Tuple[str, ...]], ...] = (
    (FundingCategory.REGULAR_INSTRUCTION, ("regular", "instruction"), ()),
    (FundingCategory.SPECIAL_EDUCATION, ("special", "education"), ("high-cost", "high cost")),
    (FundingCategory.CAREER_TECHNICAL, ("career", "technical"), ()),
    (FundingCategory.OTHER_INSTRUCTION, ("other", "instruction"), ()),
    (FundingCategory.STUDENT_STAFF_SUPPORT, ("student", "support"), ()),
    (FundingCategory.SYSTEM_ADMIN, ("system", "admin"), ()),
    (FundingCategory.SCHOOL_ADMIN, ("school", "admin"), ("district",)),
    (FundingCategory.TRANSPORTATION, ("transport",), ("total",)),
    (FundingCategory.FACILITIES_MAINT, ("facilit", "maint"), ()),
    (FundingCategory.DEBT_SERVICE, ("debt", "service"), ()),
    (FundingCategory.ALL_OTHER, ("all", "other"), ()),
)


def grid_rules(currency_floor: float = CURRENCY_FLOOR) -> List[FieldRule]:
    money = _currency(currency_floor)
    rules = [
        FieldRule("district", lambda _t, i: i < DISTRICT_SCAN_ROWS, _district_candidate, FIRST_WINS),
        FieldRule("fiscal_year", lambda t, _i: True, _fiscal_year, FIRST_WINS),
        FieldRule("generated_date", lambda t, _i: True, _date, FIRST_WINS),
    ]
    rules += [
        FieldRule(cat.value, _all(*words, exclude=excluded), money)
        for cat, words, excluded in CATEGORY_KEYWORDS
    ]
    rules += [
        FieldRule("total_allocation", _any("total allocation", "100% eps", "total eps allocation"), money),
        FieldRule("operating_allocation", _all("operating", "allocation"), money),
        FieldRule("special_ed_high_cost", _any("high-cost", "high cost"), money),
        FieldRule("teacher_retirement", _all("retirement"), money),
        FieldRule("gifted_talented", _all("gifted"), money),
        FieldRule("local_share", _share_amount("local"), money),
        FieldRule("state_share", _share_amount("state"), money),
        FieldRule("local_share_pct", _share_pct("local"), _bounded(RATE_BOUNDS)),
        FieldRule("state_share_pct", _share_pct("state"), _bounded(RATE_BOUNDS)),
        FieldRule("pupil_count", _any("pupil", "enrollment", exclude=("per pupil", "rate")), _bounded(PUPIL_BOUNDS)),
        FieldRule("mil_rate", _any("mil rate", "mill rate", "mill expectation", "mil expectation"), _bounded(RATE_BOUNDS)),
        FieldRule("adjusted_valuation", _all("valuation"), _currency(VALUATION_FLOOR)),
    ]
    return rules


def _allocation_summary(amounts: Sequence[Tuple[str, float]], total: float, sort: bool) -> Tuple[SummaryRow, ...]:
    rows = [(label, amt) for label, amt in amounts if amt > 0]
    if sort:
        rows = sorted(rows, key=lambda r: r[1], reverse=True)
    return tuple(
        SummaryRow(category=label, eps_allocation=amt, percent_of_total=percent_of(amt, total))
        for label, amt in rows
    )


def parse_allocation_grid(document: RawDocument, currency_floor: float = CURRENCY_FLOOR) -> Extraction:
    rows = [r for name in document.sheet_names for r in document.sheet(name)]
    found = apply_rules(rows, grid_rules(currency_floor))

    allocations = {}
    for cat, _words, _excluded in CATEGORY_KEYWORDS:
        amt = found.get(cat.value, 0.0)
        if amt:
            allocations[cat] = amt

    total = found.get("total_allocation") or sum(allocations.values())

    report = AllocationReport(
        total_allocation=total,
        operating_allocation=found.get("operating_allocation", 0.0),
        special_ed_allocation=allocations.get(FundingCategory.SPECIAL_EDUCATION, 0.0),
        special_ed_high_cost=found.get("special_ed_high_cost", 0.0),
        transportation_allocation=allocations.get(FundingCategory.TRANSPORTATION, 0.0),
        teacher_retirement=found.get("teacher_retirement", 0.0),
        gifted_talented=found.get("gifted_talented", 0.0),
        debt_service=allocations.get(FundingCategory.DEBT_SERVICE, 0.0),
        local_share=found.get("local_share", 0.0),
        state_share=found.get("state_share", 0.0),
        local_share_pct=found.get("local_share_pct", 0.0),
        state_share_pct=found.get("state_share_pct", 0.0),
        pupil_count=found.get("pupil_count", 0.0),
        mil_rate=found.get("mil_rate", 0.0),
        adjusted_valuation=found.get("adjusted_valuation", 0.0),
        allocations=allocations,
    )

    summary = _allocation_summary(
        [(cat.display_name, amt) for cat, amt in allocations.items()], total, sort=True
    )

    return Extraction(
        report_type=REPORT_TYPE_ALLOCATION,
        district=found.get("district", UNKNOWN),
        fiscal_year=found.get("fiscal_year", UNKNOWN),
        generated_date=found.get("generated_date", UNKNOWN),
        summary=summary,
        allocation=report,
    )


# ---------------- Text (PDF) form ----------------
_AMOUNT = r"\$?([\d,]+\.?\d*)"

# (targets for the captured groups, pattern); first match only
TEXT_RULES: Tuple[Tuple[Tuple[str, ...], "re.Pattern[str]"], ...] = tuple(
    (targets, re.compile(pattern, re.IGNORECASE))
    for targets, pattern in (
        (("pupil_count",), r"Total\s+(\d+\.?\d*)\s+100\.00%"),
        (("eps_rate_k8", "eps_rate_912"), r"Calculated EPS Rates Per Pupil[:\s]*=?\s*(\d{1,2},?\d{3})\s+(\d{1,2},?\d{3})"),
        (("operating_allocation",), r"Operating Allocation Totals?\s*=?\s*" + _AMOUNT),
        (("special_ed_allocation",), r"Special Education\s*-\s*EPS Allocation[\s\S]*?=?\s*" + _AMOUNT),
        (("special_ed_high_cost",), r"Special Education\s*-\s*High-Cost[\s\S]*?=?\s*" + _AMOUNT),
        (("transportation_allocation",), r"Transportation Operating\s*-\s*EPS Allocation[\s\S]*?=?\s*" + _AMOUNT),
        (("teacher_retirement",), r"Teacher Retirement Amount[\s\S]*?" + _AMOUNT),
        (("gifted_talented",), r"Gifted & Talented[\s\S]*?=\s*" + _AMOUNT),
        (("total_allocation",), r"100%\s*EPS\s*Allocation\s*" + _AMOUNT),
        (("debt_service",), r"Total Debt Service Allocation\s*=\s*" + _AMOUNT),
        (("state_share",), r"Adjusted State Contribution\s*" + _AMOUNT),
        (("local_share",), r"Adjusted Local Contribution\s*" + _AMOUNT),
        (("local_share_pct", "state_share_pct"),
         r"After Adjustments\s*:\s*Local Share %\s*=\s*([\d.]+)\s*%\s*State Share %\s*=\s*([\d.]+)\s*%"),
        (("mil_rate",), r"Mill\s*Expectation\s*\n?\s*([\d.]+)"),
        (("adjusted_valuation",), r"Adjusted (?:State )?Valuation\s*:?\s*" + _AMOUNT),
    )
)

TEXT_DISTRICT_PATTERN = re.compile(
    r"ORG ID\s*:\s*\d+\s+([A-Za-z\-\s]+(?:CSD|SAD|RSU|School Department|Schools?))", re.IGNORECASE
)
TEXT_FY_PATTERN = re.compile(r"(\d{4})\s*-\s*(\d{4})")

# Named amounts in the order the state report lists them
TEXT_SUMMARY_FIELDS = (
    ("Operating Allocation (Basic EPS)", "operating_allocation"),
    ("Special Education - EPS", "special_ed_allocation"),
    ("Special Education - High Cost", "special_ed_high_cost"),
    ("Transportation", "transportation_allocation"),
    ("Teacher Retirement", "teacher_retirement"),
    ("Gifted & Talented", "gifted_talented"),
    ("Debt Service", "debt_service"),
)


def scan_text_fields(text: str) -> Dict[str, float]:
    found: Dict[str, float] = {}
    for targets, pattern in TEXT_RULES:
        groups = label_match(text, pattern)
        if groups is None:
            continue
        for target, raw in zip(targets, groups):
            found[target] = coerce_number(raw)
    return found


def parse_allocation_text(document: RawDocument) -> Extraction:
    text = document.text or ""

    district = UNKNOWN
    m = label_match(text, TEXT_DISTRICT_PATTERN)
    if m:
        district = " ".join(m[0].split())

    fiscal_year = UNKNOWN
    m = label_match(text, TEXT_FY_PATTERN)
    if m:
        fiscal_year = f"FY{m[0][-2:]}-{m[1][-2:]}"

    generated_date = UNKNOWN
    m = label_match(text, DATE_PATTERN)
    if m:
        generated_date = m[0]

    found = scan_text_fields(text)
    if found.get("adjusted_valuation", 0.0) <= VALUATION_FLOOR:
        found["adjusted_valuation"] = 0.0

    total = found.get("total_allocation", 0.0)
    if not total:
        total = sum(found.get(key, 0.0) for _label, key in TEXT_SUMMARY_FIELDS)
    state = found.get("state_share", 0.0)
    local = found["local_share"] if "local_share" in found else total - state

    allocations = {}
    for cat, key in (
        (FundingCategory.SPECIAL_EDUCATION, "special_ed_allocation"),
        (FundingCategory.TRANSPORTATION, "transportation_allocation"),
        (FundingCategory.DEBT_SERVICE, "debt_service"),
    ):
        if found.get(key):
            allocations[cat] = found[key]

    report = AllocationReport(
        total_allocation=total,
        operating_allocation=found.get("operating_allocation", 0.0),
        special_ed_allocation=found.get("special_ed_allocation", 0.0),
        special_ed_high_cost=found.get("special_ed_high_cost", 0.0),
        transportation_allocation=found.get("transportation_allocation", 0.0),
        teacher_retirement=found.get("teacher_retirement", 0.0),
        gifted_talented=found.get("gifted_talented", 0.0),
        debt_service=found.get("debt_service", 0.0),
        local_share=local,
        state_share=state,
        local_share_pct=found.get("local_share_pct", 0.0),
        state_share_pct=found.get("state_share_pct", 0.0),
        pupil_count=found.get("pupil_count", 0.0),
        eps_rate_k8=found.get("eps_rate_k8", 0.0),
        eps_rate_912=found.get("eps_rate_912", 0.0),
        mil_rate=found.get("mil_rate", 0.0),
        adjusted_valuation=found.get("adjusted_valuation", 0.0),
        allocations=allocations,
    )

    summary = _allocation_summary(
        [(label, found.get(key, 0.0)) for label, key in TEXT_SUMMARY_FIELDS], total, sort=False
    )

    return Extraction(
        report_type=REPORT_TYPE_ALLOCATION,
        district=district,
        fiscal_year=fiscal_year,
        generated_date=generated_date,
        summary=summary,
        allocation=report,
    )


def parse_allocation(document: RawDocument, currency_floor: float = CURRENCY_FLOOR) -> Extraction:
    if document.is_text:
        return parse_allocation_text(document)
    return parse_allocation_grid(document, currency_floor=currency_floor)
