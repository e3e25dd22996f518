"""
Derived rollups over extracted line items.

Only expenditure lines (budget > 0) count; revenue and non-conforming rows
never contribute to totals, function summaries or the funding-category
reconciliation.
"""
from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd

from account_codes import FundingCategory, function_name
from report_models import LineItem, SummaryRow, Totals


def expenditure_items(details: Sequence[LineItem]) -> List[LineItem]:
    return [d for d in details if d.budget > 0]


def compute_totals(details: Sequence[LineItem]) -> Totals:
    spend = expenditure_items(details)
    return Totals(
        budget=sum(d.budget for d in spend),
        actual=sum(d.actual for d in spend),
        encumbered=sum(d.encumbered for d in spend),
        available=sum(d.available for d in spend),
    )


def _frame(items: Sequence[LineItem]) -> pd.DataFrame:
    return pd.DataFrame(
        [{
            "function": d.function,
            "category": d.funding_category.value,
            "budget": d.budget,
            "actual": d.actual,
            "encumbered": d.encumbered,
        } for d in items],
        columns=["function", "category", "budget", "actual", "encumbered"],
    )


def function_label(code: str) -> str:
    return f"{code} – {function_name(code)}"


def summarize_by_function(details: Sequence[LineItem]) -> List[SummaryRow]:
    """
    Synthesize summary rows when a report has no native summary block.

    Groups expenditure lines by the function segment of their account code and
    sorts the groups by budget, largest first (ties keep first-seen order).

    Args:
        details: Extracted line items

    Returns:
        One SummaryRow per function code, labelled "<code> – <function name>"
    """
    df = _frame(expenditure_items(details))
    if df.empty:
        return []
    grouped = (
        df.groupby("function", sort=False)[["budget", "actual", "encumbered"]]
        .sum()
        .sort_values("budget", ascending=False, kind="stable")
    )
    rows = []
    for code, g in grouped.iterrows():
        budget, actual, encumbered = float(g["budget"]), float(g["actual"]), float(g["encumbered"])
        rows.append(SummaryRow(
            category=function_label(str(code)),
            budget=budget,
            actual=actual,
            encumbered=encumbered,
            available=budget - actual - encumbered,
        ))
    return rows


def funding_reconciliation(details: Sequence[LineItem]) -> Dict[FundingCategory, Dict[str, float]]:
    """Budget/actual per funding category, in first-seen order."""
    df = _frame(expenditure_items(details))
    if df.empty:
        return {}
    grouped = df.groupby("category", sort=False)[["budget", "actual"]].sum()
    return {
        FundingCategory(cat): {"budget": float(g["budget"]), "actual": float(g["actual"])}
        for cat, g in grouped.iterrows()
    }
