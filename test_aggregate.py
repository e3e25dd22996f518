"""Test totals, function rollups and funding-category reconciliation"""
from account_codes import FundingCategory, parse_account_code
from aggregate import compute_totals, function_label, funding_reconciliation, summarize_by_function
from report_models import LineItem


def _item(code, budget, actual=0.0, encumbered=0.0, available=None, description="line"):
    ac = parse_account_code(code)
    if available is None:
        available = budget - actual - encumbered
    return LineItem(ac, description, float(budget), float(actual), float(encumbered),
                    float(available), ac.funding_category)


ITEMS = [
    _item("2000-1100-2700-5100-000", 10000, 4000, 500),
    _item("1000-1100-1000-1010-010", 300000, 290000, 0, 10000),
    _item("2000-1100-2700-5200-000", 5000, 1000, 0),
    _item("1000-1100-2400-1010-000", 15000, 7000, 0),
    _item("1000-9000-1000-9010-000", -20000, -5000, 0),  # revenue line
]


def test_transportation_rollup():
    rows = summarize_by_function(ITEMS[0:1] + ITEMS[2:3])
    assert len(rows) == 1
    assert rows[0].category == "2700 – Transportation"
    assert rows[0].budget == 15000.0
    assert rows[0].actual == 5000.0
    assert rows[0].encumbered == 500.0
    assert rows[0].available == 9500.0
    print("✓ function rollup")


def test_rollup_sorted_by_budget_descending():
    rows = summarize_by_function(ITEMS)
    assert [r.category for r in rows] == [
        "1000 – Instruction",
        "2700 – Transportation",
        "2400 – School Administration",
    ]
    # tied budgets keep first-seen order
    tied = summarize_by_function([
        _item("1000-1100-2600-1010-000", 100),
        _item("1000-1100-2120-1010-000", 100),
    ])
    assert [r.category for r in tied] == ["2600 – Operations & Maintenance", "2120 – Guidance Services"]


def test_rollup_empty_and_unknown_function():
    assert summarize_by_function([]) == []
    assert summarize_by_function(ITEMS[4:]) == []
    assert function_label("3100") == "3100 – Function 3100"


def test_totals_exclude_revenue():
    t = compute_totals(ITEMS)
    assert t.budget == 10000 + 300000 + 5000 + 15000
    assert t.actual == 4000 + 290000 + 1000 + 7000
    assert t.encumbered == 500.0
    assert t.available == sum(i.available for i in ITEMS if i.budget > 0)
    empty = compute_totals([])
    assert (empty.budget, empty.actual, empty.encumbered, empty.available) == (0, 0, 0, 0)


def test_funding_reconciliation():
    rec = funding_reconciliation(ITEMS)
    assert list(rec) == [
        FundingCategory.TRANSPORTATION,
        FundingCategory.REGULAR_INSTRUCTION,
        FundingCategory.SCHOOL_ADMIN,
    ]
    assert rec[FundingCategory.TRANSPORTATION] == {"budget": 15000.0, "actual": 5000.0}
    assert rec[FundingCategory.REGULAR_INSTRUCTION] == {"budget": 300000.0, "actual": 290000.0}
    assert funding_reconciliation([]) == {}
    # budgets across categories add back up to the expenditure total
    assert sum(v["budget"] for v in rec.values()) == compute_totals(ITEMS).budget


if __name__ == "__main__":
    print("Running aggregation tests...\n")
    test_transportation_rollup()
    test_rollup_sorted_by_budget_descending()
    test_rollup_empty_and_unknown_function()
    test_totals_exclude_revenue()
    test_funding_reconciliation()
    print("\n✓ All tests passed!")
