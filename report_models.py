"""
Normalized report structures and the import error taxonomy.

Everything here is built once during an extraction pass and never mutated.
`to_dict()` produces the camelCase record tree handed to presentation and
export; optional sections that do not apply are left out, not null-filled.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from account_codes import AccountCode, FundingCategory
from maine_shared import UNKNOWN


def percent_spent(budget: float, actual: float) -> float:
    return (actual / budget) * 100 if budget > 0 else 0.0


def percent_of(part: float, total: float) -> float:
    return (part / total) * 100 if total > 0 else 0.0


# ---------------- Errors ----------------
class ErrorKind(str, Enum):
    INPUT_MISSING = "InputMissing"
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    EXTRACTION_FAILURE = "ExtractionFailure"


class ImportFailure(Exception):
    """Document-level fault; field-level misses never raise."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


# ---------------- Input ----------------
class Dialect(str, Enum):
    ALLOCATION = "allocation"
    COMPARATIVE = "comparative"
    STAFFING = "staffing"


SPREADSHEET = "spreadsheet"
TEXT = "text"


@dataclass(frozen=True)
class RawDocument:
    kind: str
    sheets: Optional[Mapping[str, Sequence[Sequence[Any]]]] = None
    text: Optional[str] = None
    source_name: str = ""

    @classmethod
    def from_sheets(cls, sheets: Mapping[str, Sequence[Sequence[Any]]], source_name: str = "") -> "RawDocument":
        ordered = OrderedDict((str(name), [list(r or ()) for r in rows]) for name, rows in sheets.items())
        return cls(kind=SPREADSHEET, sheets=ordered, source_name=source_name)

    @classmethod
    def from_text(cls, text: str, source_name: str = "") -> "RawDocument":
        return cls(kind=TEXT, text=text or "", source_name=source_name)

    @property
    def is_spreadsheet(self) -> bool:
        return self.kind == SPREADSHEET and self.sheets is not None

    @property
    def is_text(self) -> bool:
        return self.kind == TEXT and self.text is not None

    @property
    def sheet_names(self) -> list:
        return list(self.sheets.keys()) if self.sheets else []

    def first_sheet(self) -> list:
        if not self.sheets:
            return []
        return list(next(iter(self.sheets.values())))

    def sheet(self, name: str) -> list:
        return list((self.sheets or {}).get(name) or [])


# ---------------- Rows ----------------
@dataclass(frozen=True)
class LineItem:
    account_code: AccountCode
    description: str
    budget: float
    actual: float
    encumbered: float
    available: float
    funding_category: FundingCategory

    @property
    def function(self) -> str:
        return self.account_code.function

    @property
    def percent_spent(self) -> float:
        return percent_spent(self.budget, self.actual)

    def to_dict(self) -> Dict[str, Any]:
        ac = self.account_code
        return {
            "accountCode": ac.code,
            "description": self.description,
            "fund": ac.fund,
            "program": ac.program,
            "function": ac.function,
            "object": ac.object,
            "location": ac.location,
            "budget": self.budget,
            "actual": self.actual,
            "encumbered": self.encumbered,
            "available": self.available,
            "percentSpent": self.percent_spent,
            "epsCategory": self.funding_category.value,
        }


@dataclass(frozen=True)
class SummaryRow:
    category: str
    budget: float = 0.0
    actual: float = 0.0
    encumbered: float = 0.0
    available: float = 0.0
    eps_allocation: Optional[float] = None
    percent_of_total: Optional[float] = None

    @property
    def percent_spent(self) -> float:
        return percent_spent(self.budget, self.actual)

    def to_dict(self) -> Dict[str, Any]:
        if self.eps_allocation is not None:
            return {
                "category": self.category,
                "epsAllocation": self.eps_allocation,
                "percentOfTotal": self.percent_of_total or 0.0,
            }
        return {
            "category": self.category,
            "budget": self.budget,
            "actual": self.actual,
            "encumbered": self.encumbered,
            "available": self.available,
            "percentSpent": self.percent_spent,
        }


@dataclass(frozen=True)
class Totals:
    budget: float = 0.0
    actual: float = 0.0
    encumbered: float = 0.0
    available: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"budget": self.budget, "actual": self.actual,
                "encumbered": self.encumbered, "available": self.available}


# ---------------- Dialect payloads ----------------
@dataclass(frozen=True)
class AllocationReport:
    total_allocation: float = 0.0
    operating_allocation: float = 0.0
    special_ed_allocation: float = 0.0
    special_ed_high_cost: float = 0.0
    transportation_allocation: float = 0.0
    teacher_retirement: float = 0.0
    gifted_talented: float = 0.0
    debt_service: float = 0.0
    local_share: float = 0.0
    state_share: float = 0.0
    local_share_pct: float = 0.0
    state_share_pct: float = 0.0
    pupil_count: float = 0.0
    eps_rate_k8: float = 0.0
    eps_rate_912: float = 0.0
    mil_rate: float = 0.0
    adjusted_valuation: float = 0.0
    allocations: Mapping[FundingCategory, float] = field(default_factory=dict)

    @property
    def per_pupil_allocation(self) -> Optional[float]:
        if self.pupil_count <= 0:
            return None
        return self.total_allocation / self.pupil_count

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "totalAllocation": self.total_allocation,
            "operatingAllocation": self.operating_allocation,
            "specialEdAllocation": self.special_ed_allocation,
            "specialEdHighCost": self.special_ed_high_cost,
            "transportationAllocation": self.transportation_allocation,
            "teacherRetirement": self.teacher_retirement,
            "giftedTalented": self.gifted_talented,
            "debtService": self.debt_service,
            "localShare": self.local_share,
            "stateShare": self.state_share,
            "localSharePct": self.local_share_pct,
            "stateSharePct": self.state_share_pct,
            "pupilCount": self.pupil_count,
            "epsRateK8": self.eps_rate_k8,
            "epsRate912": self.eps_rate_912,
            "milRate": self.mil_rate,
            "adjustedValuation": self.adjusted_valuation,
            "allocations": {cat.value: amt for cat, amt in self.allocations.items()},
        }
        if self.per_pupil_allocation is not None:
            out["perPupilAllocation"] = self.per_pupil_allocation
        return out


@dataclass(frozen=True)
class StaffingRoster:
    records: Tuple[Mapping[str, Any], ...] = ()
    total_fte: float = 0.0

    @property
    def position_count(self) -> int:
        return len(self.records)


# ---------------- Engine output / final report ----------------
@dataclass(frozen=True)
class Extraction:
    """Partially filled report returned by one extraction engine."""
    report_type: str
    district: str = UNKNOWN
    fiscal_year: str = UNKNOWN
    generated_date: str = UNKNOWN
    summary: Tuple[SummaryRow, ...] = ()
    details: Tuple[LineItem, ...] = ()
    allocation: Optional[AllocationReport] = None
    staffing: Optional[StaffingRoster] = None


@dataclass(frozen=True)
class NormalizedReport:
    dialect: Dialect
    report_type: str
    district: str
    fiscal_year: str
    generated_date: str
    summary: Tuple[SummaryRow, ...]
    details: Tuple[LineItem, ...]
    totals: Totals
    allocation: Optional[AllocationReport] = None
    funding_summary: Optional[Mapping[FundingCategory, Mapping[str, float]]] = None
    staffing: Optional[StaffingRoster] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "dialect": self.dialect.value,
            "reportType": self.report_type,
            "district": self.district,
            "fiscalYear": self.fiscal_year,
            "generatedDate": self.generated_date,
            "summary": [r.to_dict() for r in self.summary],
            "details": [d.to_dict() for d in self.details],
            "totals": self.totals.to_dict(),
        }
        if self.allocation is not None:
            out["ed279"] = self.allocation.to_dict()
        if self.funding_summary is not None:
            out["epsSummary"] = {
                cat.value: {"budget": v["budget"], "actual": v["actual"]}
                for cat, v in self.funding_summary.items()
            }
        if self.staffing is not None:
            out["staffing"] = [dict(r) for r in self.staffing.records]
            out["totalFTE"] = self.staffing.total_fte
            out["positionCount"] = self.staffing.position_count
        return out
