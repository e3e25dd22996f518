"""Test the JSON export envelope and the command line importer"""
import json

import pandas as pd

from export_json import build_export, dumps_export, export_filename, load_export, save_export
from import_main import main
from maine_import import parse_document
from maine_shared import EXPORT_TOOL_NAME
from report_models import RawDocument

STAMP = "2024-10-15T12:00:00+00:00"

SUMMARY = [
    ["RSU 5 Freeport"],
    ["FY24-25"],
    ["Created On: 10/01/2024"],
    ["Budget Category", "Budget", "Actual", "Encumbered", "Available"],
    ["10 Instruction", 500000, 450000, 10000, 40000],
]
DETAIL = [
    ["Account Code", "Description", "Budget", "Actual", "Encumbered", "Available"],
    ["1000-1100-1000-1010-010", "Teacher Salaries", 300000, 290000, 0, 10000],
]


def _comparative_report():
    return parse_document(RawDocument.from_sheets({"Summary": SUMMARY, "Detail": DETAIL})).report


def _allocation_report():
    text = "ORG ID: 1234 Freeport RSU\n100% EPS Allocation $1,800,000\nTotal 450.0 100.00%\n"
    return parse_document(RawDocument.from_text(text)).report


def test_export_metadata():
    export = build_export(_comparative_report(), exported_at=STAMP)
    assert export["metadata"] == {
        "district": "RSU 5 Freeport",
        "fiscalYear": "FY24-25",
        "reportType": "Comparative Financial Statement",
        "dialect": "comparative",
        "generatedDate": "10/01/2024",
        "exportedAt": STAMP,
        "exportedFrom": EXPORT_TOOL_NAME,
    }
    assert set(export) == {"metadata", "summary", "details", "totals", "epsSummary"}
    print("✓ export envelope")


def test_export_sections_follow_dialect():
    export = build_export(_allocation_report(), exported_at=STAMP)
    assert "ed279" in export
    assert export["ed279"]["perPupilAllocation"] == 4000.0
    assert "epsSummary" not in export
    assert "staffing" not in export


def test_export_timestamp_defaults_to_now():
    stamp = build_export(_comparative_report())["metadata"]["exportedAt"]
    assert stamp.endswith("+00:00")


def test_dumps_is_valid_json():
    data = json.loads(dumps_export(_comparative_report(), exported_at=STAMP))
    assert data["totals"]["budget"] == 300000.0


def test_save_and_load(tmp_path):
    report = _comparative_report()
    assert export_filename(report) == "RSU_5_Freeport_FY24-25_import.json"
    path = save_export(report, tmp_path / "out", exported_at=STAMP, quiet=True)
    assert path.exists()
    assert load_export(path) == json.loads(dumps_export(report, exported_at=STAMP))


def test_cli_writes_export(tmp_path):
    src = tmp_path / "rsu5.xlsx"
    with pd.ExcelWriter(src, engine="openpyxl") as writer:
        pd.DataFrame(SUMMARY).to_excel(writer, sheet_name="Summary", header=False, index=False)
        pd.DataFrame(DETAIL).to_excel(writer, sheet_name="Detail", header=False, index=False)
    out = tmp_path / "out"

    assert main([str(src), "--out", str(out), "--quiet"]) == 0
    written = load_export(out / "RSU_5_Freeport_FY24-25_import.json")
    assert written["metadata"]["dialect"] == "comparative"
    assert len(written["details"]) == 1


def test_cli_reports_failures(tmp_path, capsys):
    assert main([str(tmp_path / "missing.xlsx"), "--no-export"]) == 1
    assert "[FAIL] InputMissing" in capsys.readouterr().out


if __name__ == "__main__":
    print("Running export tests...\n")
    test_export_metadata()
    test_export_sections_follow_dialect()
    test_export_timestamp_defaults_to_now()
    test_dumps_is_valid_json()
    print("\n✓ All tests passed! (run with pytest for the file-system tests)")
