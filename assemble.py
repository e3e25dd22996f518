"""Merge engine output and aggregator output into one NormalizedReport."""
from __future__ import annotations

from typing import Mapping, Optional, Sequence

from account_codes import FundingCategory
from report_models import Dialect, Extraction, NormalizedReport, SummaryRow, Totals


def assemble_report(
    dialect: Dialect,
    extraction: Extraction,
    totals: Totals,
    summary: Optional[Sequence[SummaryRow]] = None,
    funding_summary: Optional[Mapping[FundingCategory, Mapping[str, float]]] = None,
) -> NormalizedReport:
    """
    Combine the classifier decision, the engine's partial report and any
    aggregated sections.

    Args:
        dialect: Classifier decision
        extraction: Engine output (metadata, native summary, details, payloads)
        totals: Expenditure totals over the details
        summary: Aggregated summary; None keeps the engine's native summary
        funding_summary: Funding-category reconciliation, if one applies

    Returns:
        NormalizedReport holding copies of every sequence and mapping
    """
    rows = extraction.summary if summary is None else summary
    funding = None
    if funding_summary is not None:
        funding = {cat: dict(v) for cat, v in funding_summary.items()}
    return NormalizedReport(
        dialect=dialect,
        report_type=extraction.report_type,
        district=extraction.district,
        fiscal_year=extraction.fiscal_year,
        generated_date=extraction.generated_date,
        summary=tuple(rows),
        details=tuple(extraction.details),
        totals=totals,
        allocation=extraction.allocation,
        funding_summary=funding,
        staffing=extraction.staffing,
    )
