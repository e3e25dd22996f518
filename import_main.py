"""
Command line importer for Maine school financial exports.

For each file:
1. Loads the workbook / PDF / extracted text
2. Classifies the report (ED279 allocation, comparative statement, staffing)
3. Extracts and normalizes it
4. Prints a short summary and writes the JSON export to the output directory

Usage:
    python import_main.py data/ED279_RSU5.pdf data/RSU5_FY25.xlsx --out output
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from export_json import save_export
from maine_import import import_file
from maine_shared import DIALECT_HINTS, OUTPUT_DIR
from report_models import NormalizedReport


def _money(v: float) -> str:
    return f"${v:,.0f}"


def print_report(report: NormalizedReport) -> None:
    print(f"  Report type: {report.report_type} ({report.dialect.value})")
    print(f"  District:    {report.district}")
    print(f"  Fiscal year: {report.fiscal_year}")
    print(f"  Generated:   {report.generated_date}")

    if report.allocation is not None:
        a = report.allocation
        print(f"  Total EPS allocation: {_money(a.total_allocation)}")
        print(f"  State share:          {_money(a.state_share)}")
        print(f"  Local share:          {_money(a.local_share)}")
        per_pupil = a.per_pupil_allocation
        print(f"  Per pupil:            {_money(per_pupil) if per_pupil is not None else 'N/A'}")
    elif report.staffing is not None:
        print(f"  Positions: {report.staffing.position_count}")
        print(f"  Total FTE: {report.staffing.total_fte:.2f}")
    else:
        t = report.totals
        print(f"  Line items: {len(report.details)}")
        print(f"  Budget {_money(t.budget)} | Actual {_money(t.actual)} | "
              f"Encumbered {_money(t.encumbered)} | Available {_money(t.available)}")

    if report.summary:
        print("\n  Summary:")
        for row in report.summary:
            if row.eps_allocation is not None:
                print(f"    {row.category:40s} {_money(row.eps_allocation):>16s} {row.percent_of_total:6.1f}%")
            else:
                print(f"    {row.category:40s} {_money(row.budget):>16s} {row.percent_spent:6.1f}% spent")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Import Maine ED279, Trio and staffing exports into normalized JSON.")
    ap.add_argument("files", nargs="+", help="Excel (.xlsx, .xls), PDF or extracted-text files")
    ap.add_argument("--report-type", default="auto", choices=sorted(DIALECT_HINTS),
                    help="Skip detection and force a report type (default: auto)")
    ap.add_argument("--out", default=str(OUTPUT_DIR), help="Directory for JSON exports")
    ap.add_argument("--no-export", action="store_true", help="Only print the summary")
    ap.add_argument("--quiet", action="store_true", help="Suppress progress output")
    args = ap.parse_args(argv)

    say = (lambda *a, **k: None) if args.quiet else print

    say("=" * 60)
    say("Maine School Financial Import")
    say("=" * 60)

    failed: List[str] = []
    for i, name in enumerate(args.files, 1):
        say(f"\n[{i}/{len(args.files)}] {name}")
        result = import_file(Path(name), hint=args.report_type)
        if not result.success:
            failed.append(name)
            say(f"[FAIL] {result.error_kind.value}: {result.error}")
            continue
        if not args.quiet:
            print_report(result.report)
        if not args.no_export:
            save_export(result.report, Path(args.out), quiet=args.quiet)
        say("[OK]")

    if failed:
        say(f"\n{len(failed)} of {len(args.files)} file(s) failed: {', '.join(failed)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
