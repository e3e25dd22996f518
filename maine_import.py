"""
Import pipeline: RawDocument -> classify -> engine -> aggregate -> assemble.

`parse_document` is the caller-facing contract: it returns an ImportResult
that is either a success carrying a complete NormalizedReport or a failure
carrying a short message and an ErrorKind, never a mix of the two.

Usage:
    from maine_import import import_file

    result = import_file("data/RSU5_comparative.xlsx")
    if result.success:
        print(result.report.totals)
    else:
        print(result.error_kind, result.error)
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from aggregate import compute_totals, funding_reconciliation, summarize_by_function
from assemble import assemble_report
from dialect import classify
from document_loader import load_document
from ed279_parser import parse_allocation
from maine_shared import CURRENCY_FLOOR
from report_models import Dialect, ErrorKind, Extraction, ImportFailure, NormalizedReport, RawDocument
from staffing_parser import parse_staffing
from trio_parser import parse_comparative

ENGINES: Dict[Dialect, Callable[..., Extraction]] = {
    Dialect.ALLOCATION: parse_allocation,
    Dialect.COMPARATIVE: parse_comparative,
    Dialect.STAFFING: parse_staffing,
}

FAILURE_MESSAGES = {
    Dialect.ALLOCATION: "Failed to parse allocation report.",
    Dialect.COMPARATIVE: "Failed to parse comparative statement.",
    Dialect.STAFFING: "Failed to parse staffing report.",
}
PDF_FAILURE_MESSAGE = "Failed to parse ED279 PDF."


@dataclass(frozen=True)
class ImportResult:
    success: bool
    report: Optional[NormalizedReport] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, report: NormalizedReport) -> "ImportResult":
        return cls(success=True, report=report)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ImportResult":
        return cls(success=False, error=message, error_kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.report.to_dict()}
        return {"success": False, "error": self.error, "errorKind": self.error_kind.value}


def extract(document: RawDocument, dialect: Dialect, currency_floor: float = CURRENCY_FLOOR) -> Extraction:
    """Run the engine for `dialect`; unexpected engine faults become EXTRACTION_FAILURE."""
    if dialect is not Dialect.ALLOCATION and not document.is_spreadsheet:
        raise ImportFailure(
            ErrorKind.UNSUPPORTED_FORMAT,
            f"{dialect.value.title()} reports must be supplied as an Excel workbook.",
        )
    engine = ENGINES[dialect]
    try:
        if dialect is Dialect.ALLOCATION:
            return engine(document, currency_floor=currency_floor)
        return engine(document)
    except ImportFailure:
        raise
    except Exception as exc:
        message = PDF_FAILURE_MESSAGE if document.is_text else FAILURE_MESSAGES[dialect]
        raise ImportFailure(ErrorKind.EXTRACTION_FAILURE, message) from exc


def build_report(document: Optional[RawDocument], hint: Optional[str] = "auto",
                 currency_floor: float = CURRENCY_FLOOR) -> NormalizedReport:
    """Same pipeline as parse_document, raising ImportFailure instead of returning a result."""
    if document is None:
        raise ImportFailure(ErrorKind.INPUT_MISSING, "No file provided")
    if not (document.is_spreadsheet or document.is_text):
        raise ImportFailure(
            ErrorKind.UNSUPPORTED_FORMAT,
            "Unsupported file type. Please upload an Excel (.xlsx, .xls) or PDF file.",
        )
    dialect = classify(document, hint)
    extraction = extract(document, dialect, currency_floor=currency_floor)

    details = extraction.details
    summary = None
    if not extraction.summary and details:
        summary = summarize_by_function(details)
    funding = funding_reconciliation(details) if details else None

    return assemble_report(
        dialect,
        extraction,
        totals=compute_totals(details),
        summary=summary,
        funding_summary=funding,
    )


def parse_document(document: Optional[RawDocument], hint: Optional[str] = "auto",
                   currency_floor: float = CURRENCY_FLOOR) -> ImportResult:
    try:
        return ImportResult.ok(build_report(document, hint, currency_floor=currency_floor))
    except ImportFailure as exc:
        return ImportResult.failure(exc.kind, exc.message)


def import_file(path: Union[str, Path, None], hint: Optional[str] = "auto") -> ImportResult:
    """Load a file from disk and run it through parse_document."""
    if path is None:
        return ImportResult.failure(ErrorKind.INPUT_MISSING, "No file provided")
    try:
        document = load_document(path)
    except ImportFailure as exc:
        return ImportResult.failure(exc.kind, exc.message)
    return parse_document(document, hint)
