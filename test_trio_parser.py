"""Test Trio comparative statement extraction (Summary/Detail workbook and generic scan)"""
import math

from account_codes import FundingCategory
from maine_shared import DISTRICT_KEYWORDS, REPORT_TYPE_COMPARATIVE, REPORT_TYPE_GENERIC
from report_models import RawDocument
from trio_parser import (
    detail_items,
    generic_line_item,
    is_district_like,
    parse_comparative,
    scan_metadata,
    summary_metadata,
    summary_rows,
)

SUMMARY = [
    ["RSU 5 Freeport"],
    ["Comparative Financial Statement FY24-25"],
    ["Created On: 10/01/2024"],
    [],
    ["Budget Category", "Budget", "Actual", "Encumbered", "Available"],
    ["10 Instruction", 500000, 450000, 10000, 40000],
    ["90 Local Revenue", -20000, -5000, 0, 0],
    ["Total", 500000, 450000, 10000, 40000],
]

DETAIL = [
    ["RSU 5 Freeport"],
    ["Account Code", "Description", "Budget", "Actual", "Encumbered", "Available"],
    ["1000-1100-1000-1010-010", "Teacher Salaries", 300000, 290000, 0, 10000],
    ["1000-1100-1000", "Truncated code", 5000, 5000, 0, 0],
    [None, "Subtotal", 300000],
]


def _workbook():
    return RawDocument.from_sheets({"Summary": SUMMARY, "Detail": DETAIL})


def test_summary_detail_workbook():
    ext = parse_comparative(_workbook())
    assert ext.report_type == REPORT_TYPE_COMPARATIVE
    assert ext.district == "RSU 5 Freeport"
    assert ext.fiscal_year == "FY24-25"
    assert ext.generated_date == "10/01/2024"

    assert len(ext.summary) == 1
    row = ext.summary[0]
    assert row.category == "10 Instruction"
    assert (row.budget, row.actual, row.encumbered, row.available) == (500000.0, 450000.0, 10000.0, 40000.0)
    assert row.percent_spent == 90.0

    assert len(ext.details) == 1
    item = ext.details[0]
    assert item.account_code.code == "1000-1100-1000-1010-010"
    assert item.description == "Teacher Salaries"
    assert item.funding_category is FundingCategory.REGULAR_INSTRUCTION
    assert math.isclose(item.percent_spent, 290000 / 300000 * 100)
    print("✓ Summary/Detail workbook")


def test_malformed_codes_are_skipped():
    items = detail_items(DETAIL)
    assert [i.account_code.code for i in items] == ["1000-1100-1000-1010-010"]


def test_revenue_categories_excluded_from_summary():
    assert all(r.budget >= 0 for r in summary_rows(SUMMARY))
    assert summary_rows([["10 Instruction", 1, 1, 0, 0]]) == []  # no header, no rows


def test_summary_metadata_later_rows_override():
    rows = [["District A"], ["FY23-24"], ["Created On: 1/2/2023"], ["Amended FY24-25"], ["Created On: 3/4/2024"]]
    assert summary_metadata(rows) == ("District A", "FY24-25", "3/4/2024")
    assert summary_metadata([]) == ("Unknown", "Unknown", "Unknown")


def test_detail_without_header_is_empty():
    assert detail_items([["1000-1100-1000-1010-010", "x", 1, 1, 0, 0]]) == []


def test_generic_single_sheet_scan():
    rows = [
        ["Yarmouth School Department"],
        ["FY2025 Budget vs Actual"],
        ["Account", "Description", "Budget", "Expended", "Encumbered"],
        ["1000-1100-1000-1010-010", "Salaries", "$10,000", 4000, 1000],
        ["2000-1100-2700-5100-000", "Bus Fuel", 5000, 1000, 0, 3500],
        ["not-a-code", "x", 1],
    ]
    ext = parse_comparative(RawDocument.from_sheets({"Report": rows}))
    assert ext.report_type == REPORT_TYPE_GENERIC
    assert ext.district == "Yarmouth School Department"
    assert ext.fiscal_year == "FY2025"
    assert ext.generated_date == "Unknown"
    assert ext.summary == ()

    salaries, fuel = ext.details
    assert (salaries.budget, salaries.actual, salaries.encumbered) == (10000.0, 4000.0, 1000.0)
    assert salaries.available == 5000.0  # derived when no fourth amount
    assert fuel.available == 3500.0
    assert fuel.description == "Bus Fuel"
    assert fuel.funding_category is FundingCategory.TRANSPORTATION
    print("✓ generic scan")


def test_generic_line_item_padding():
    item = generic_line_item(["1000-1100-2400-1010-000", "Principal", 2500])
    assert (item.budget, item.actual, item.encumbered, item.available) == (2500.0, 0.0, 0.0, 2500.0)
    assert generic_line_item(["Principal", 2500]) is None
    assert generic_line_item([]) is None


def test_is_district_like():
    assert is_district_like("Freeport RSU 5")
    assert not is_district_like("FY2025 Report")
    assert not is_district_like("Budget vs Actual")
    assert not is_district_like("12345")
    assert not is_district_like("abc")
    assert not is_district_like("1000-1100-1000-1010-010")
    assert not is_district_like(42)
    assert not is_district_like("Staffing Report", DISTRICT_KEYWORDS)
    assert is_district_like("MSAD 51 Cumberland", DISTRICT_KEYWORDS)


def test_scan_metadata_window():
    rows = [["Account listing"]] * 10 + [["Late District Name"]]
    assert scan_metadata(rows) == ("Unknown", "Unknown")
    assert scan_metadata(rows, limit=11)[0] == "Late District Name"


if __name__ == "__main__":
    print("Running Trio parser tests...\n")
    test_summary_detail_workbook()
    test_malformed_codes_are_skipped()
    test_revenue_categories_excluded_from_summary()
    test_summary_metadata_later_rows_override()
    test_detail_without_header_is_empty()
    test_generic_single_sheet_scan()
    test_generic_line_item_padding()
    test_is_district_like()
    test_scan_metadata_window()
    print("\n✓ All tests passed!")
