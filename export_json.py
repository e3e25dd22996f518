"""
JSON interchange export for the downstream budget-analysis system.

The export is the only durable output of an import: the normalized report plus
a metadata envelope (district, fiscal year, report type, generation and export
timestamps, originating tool).

Usage:
    from export_json import save_export

    path = save_export(result.report, OUTPUT_DIR)
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from maine_shared import EXPORT_TOOL_NAME, OUTPUT_DIR, make_safe_filename
from report_models import NormalizedReport

EXPORT_SECTIONS = ("ed279", "summary", "details", "totals", "epsSummary", "staffing", "totalFTE", "positionCount")


def build_export(report: NormalizedReport, exported_at: Optional[str] = None) -> Dict[str, Any]:
    """
    Wrap a report in the export envelope.

    Args:
        report: Normalized report from a successful import
        exported_at: ISO-8601 timestamp; defaults to the current UTC time

    Returns:
        Dict ready for json.dumps; sections that do not apply are omitted
    """
    data = report.to_dict()
    export: Dict[str, Any] = {
        "metadata": {
            "district": report.district,
            "fiscalYear": report.fiscal_year,
            "reportType": report.report_type,
            "dialect": report.dialect.value,
            "generatedDate": report.generated_date,
            "exportedAt": exported_at or datetime.now(timezone.utc).isoformat(),
            "exportedFrom": EXPORT_TOOL_NAME,
        }
    }
    for key in EXPORT_SECTIONS:
        if key in data:
            export[key] = data[key]
    return export


def export_filename(report: NormalizedReport) -> str:
    return f"{make_safe_filename(report.district)}_{make_safe_filename(report.fiscal_year)}_import.json"


def dumps_export(report: NormalizedReport, exported_at: Optional[str] = None) -> str:
    # default=str covers dates and other verbatim staffing cells
    return json.dumps(build_export(report, exported_at), indent=2, ensure_ascii=False, default=str)


def save_export(report: NormalizedReport, out_dir: Path = OUTPUT_DIR,
                exported_at: Optional[str] = None, quiet: bool = False) -> Path:
    """Write the export JSON into out_dir and return its path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename(report)
    path.write_text(dumps_export(report, exported_at), encoding="utf-8")
    if not quiet:
        print(f"  Saved: {path} ({len(report.details)} line items, {len(report.summary)} summary rows)")
    return path


def load_export(path: Path) -> Dict[str, Any]:
    """
    Read an export back.

    Raises:
        FileNotFoundError: If the export does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Export not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))
