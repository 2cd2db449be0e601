"""Month-over-month spending nudges."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Sequence

import pandas as pd

from analytics.balances import round_currency, to_decimal
from core.models import PersonalExpense, SpendingNudge

__all__ = [
    "HISTORY_MONTHS",
    "MIN_HISTORY_MONTHS",
    "MIN_CATEGORY_TOTAL",
    "MIN_OVERALL_TOTAL",
    "NUDGE_THRESHOLD_PCT",
    "MAX_NUDGES",
    "detect_spending_nudges",
]

HISTORY_MONTHS = 3
MIN_HISTORY_MONTHS = 2
MIN_CATEGORY_TOTAL = Decimal("50")
MIN_OVERALL_TOTAL = Decimal("100")
NUDGE_THRESHOLD_PCT = Decimal("15")
MAX_NUDGES = 5

_ZERO = Decimal("0")


def _total(amounts: pd.Series) -> Decimal:
    return sum(amounts, _ZERO)


def _compare(
    current: Decimal, history: Sequence[Decimal], min_history: int
) -> Optional[tuple[Decimal, Decimal]]:
    """Return ``(average, percent deviation)`` or None when history is too thin."""

    spent = [total for total in history if total > 0]
    if not spent or len(spent) < min_history:
        return None
    average = sum(spent, _ZERO) / len(spent)
    return average, (current - average) / average * 100


def _nudge(category: Optional[str], average: Decimal, current: Decimal, pct: Decimal) -> SpendingNudge:
    return {
        "category": category,
        "average": round_currency(average),
        "current": round_currency(current),
        "deviation_pct": float(pct),
    }


def detect_spending_nudges(
    expenses: Iterable[PersonalExpense],
    month: int,
    year: int,
    *,
    history_months: int = HISTORY_MONTHS,
    min_history_months: int = MIN_HISTORY_MONTHS,
    min_category_total: Decimal = MIN_CATEGORY_TOTAL,
    min_overall_total: Decimal = MIN_OVERALL_TOTAL,
    threshold_pct: Decimal = NUDGE_THRESHOLD_PCT,
    limit: int = MAX_NUDGES,
) -> list[SpendingNudge]:
    """Compare one month's spending with the average of the months before it.

    Each category, and overall spending, is compared against the average of
    the ``history_months`` calendar months preceding ``month``/``year``. Only
    prior months with positive spending enter the average, and at least
    ``min_history_months`` of them are required.

    Parameters
    ----------
    expenses:
        Personal expenses in any order. Entries without a date are ignored and
        entries without a category only count toward overall spending.
    month, year:
        The month under review, ``month`` running from 1 to 12.
    min_category_total:
        A category is skipped when its current total is below this floor.
    min_overall_total:
        The overall nudge requires a current total strictly above this floor.
    threshold_pct:
        Minimum absolute deviation from the average, in percent.
    limit:
        Maximum number of nudges returned.

    Returns
    -------
    list[SpendingNudge]
        Largest absolute deviation first. The overall nudge has ``category``
        set to None and sorts ahead of categories with the same deviation.
    """

    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")

    records = [
        {
            "category": expense.category or None,
            "period": pd.Period(year=expense.date.year, month=expense.date.month, freq="M"),
            "amount": to_decimal(expense.amount),
        }
        for expense in expenses
        if expense.date is not None
    ]
    if not records:
        return []

    frame = pd.DataFrame.from_records(records)
    selected = pd.Period(year=year, month=month, freq="M")
    prior = [selected - offset for offset in range(1, history_months + 1)]

    overall_totals = frame.groupby("period")["amount"].agg(_total).to_dict()
    categorised = frame.dropna(subset=["category"])
    category_totals = categorised.groupby(["category", "period"], sort=False)["amount"].agg(_total).to_dict()

    nudges: list[SpendingNudge] = []

    for category in categorised["category"].unique():
        current = category_totals.get((category, selected), _ZERO)
        comparison = _compare(
            current, [category_totals.get((category, period), _ZERO) for period in prior], min_history_months
        )
        if comparison is None or current < min_category_total:
            continue
        average, pct = comparison
        if abs(pct) < threshold_pct:
            continue
        nudges.append(_nudge(str(category), average, current, pct))

    current = overall_totals.get(selected, _ZERO)
    comparison = _compare(current, [overall_totals.get(period, _ZERO) for period in prior], min_history_months)
    if comparison is not None and current > min_overall_total:
        average, pct = comparison
        if abs(pct) >= threshold_pct:
            nudges.insert(0, _nudge(None, average, current, pct))

    nudges.sort(key=lambda nudge: abs(nudge["deviation_pct"]), reverse=True)
    return nudges[:limit]
