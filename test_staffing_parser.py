"""Test staffing roster extraction"""
from maine_shared import REPORT_TYPE_STAFFING
from report_models import RawDocument
from staffing_parser import find_staffing_header, header_names, parse_staffing, total_fte

ROSTER = [
    ["Staffing Report FY25"],
    ["Freeport School Department"],
    [],
    ["Employee", "Position", "Building", "FTE", None],
    ["Smith, A", "Teacher", "Morse Street", 1.0, "x"],
    ["Jones, B", "Ed Tech", "Mast Landing", "0.5"],
    [None, None, None, None, None],
    ["Lee, C", "Nurse", "FHS", "n/a"],
]


def test_header_detection():
    # "staffing" in the title row is not a header keyword
    assert find_staffing_header(ROSTER) == 3
    assert find_staffing_header(ROSTER[1:]) == 2
    assert find_staffing_header([["a"], ["b"]]) is None


def test_header_names_fill_blanks_and_duplicates():
    assert header_names(["Name", None, "FTE", "Name"]) == ["Name", "Column 2", "FTE", "Name (4)"]


def test_parse_staffing_roster():
    ext = parse_staffing(RawDocument.from_sheets({"Roster": ROSTER[1:]}))
    assert ext.report_type == REPORT_TYPE_STAFFING
    assert ext.district == "Freeport School Department"
    assert ext.generated_date == "Unknown"

    roster = ext.staffing
    assert roster.position_count == 3
    assert list(roster.records[0].keys()) == ["Employee", "Position", "Building", "FTE", "Column 5"]
    assert roster.records[1]["Column 5"] is None  # short rows padded
    assert roster.total_fte == 1.5
    assert ext.summary == () and ext.details == ()
    print("✓ roster records and FTE total")


def test_title_row_is_not_a_district():
    rows = [["Staffing Report FY25"], ["Position", "FTE"], ["Teacher", 1]]
    ext = parse_staffing(RawDocument.from_sheets({"S": rows}))
    assert ext.district == "Unknown"
    assert ext.fiscal_year == "FY25"
    assert ext.staffing.total_fte == 1.0


def test_no_fte_column():
    records = [{"Position": "Teacher"}]
    assert total_fte(records, ["Position"]) == 0.0


def test_no_header_means_empty_roster():
    ext = parse_staffing(RawDocument.from_sheets({"S": [["Freeport School Department"], ["nothing here"]]}))
    assert ext.staffing.position_count == 0
    assert ext.staffing.total_fte == 0.0
    assert ext.district == "Freeport School Department"


if __name__ == "__main__":
    print("Running staffing tests...\n")
    test_header_detection()
    test_header_names_fill_blanks_and_duplicates()
    test_parse_staffing_roster()
    test_title_row_is_not_a_district()
    test_no_fte_column()
    test_no_header_means_empty_roster()
    print("\n✓ All tests passed!")
