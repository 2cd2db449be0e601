"""Recurring expense detection helpers."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

import numpy as np
import pandas as pd

from analytics.balances import round_currency, to_decimal
from analytics.categorize import DEFAULT_CATEGORY, grouping_key, normalize_identity
from core.models import PersonalExpense, RecurringGroup, RecurringSummary

__all__ = [
    "MIN_MONTHS",
    "MIN_MEAN_AMOUNT",
    "MAX_VARIATION",
    "detect_recurring",
    "typical_day_of_month",
]

MIN_MONTHS = 2
MIN_MEAN_AMOUNT = Decimal("10")
MAX_VARIATION = 0.5

_ZERO = Decimal("0")


def detect_recurring(
    expenses: Iterable[PersonalExpense],
    *,
    min_months: int = MIN_MONTHS,
    min_mean: Decimal = MIN_MEAN_AMOUNT,
    max_variation: float = MAX_VARIATION,
) -> RecurringSummary:
    """Identify expenses that repeat across calendar months with stable amounts.

    Expenses are grouped by ``category::identity`` where the identity is the
    normalised vendor (or the first two description words when the vendor is
    unknown). A group is recurring when it spans at least ``min_months``
    distinct months, its mean amount is at least ``min_mean`` and the
    coefficient of variation of its amounts is at most ``max_variation``.

    Parameters
    ----------
    expenses:
        Personal expenses in any order. Entries without a date are ignored.
    min_months:
        Minimum number of distinct ``(year, month)`` buckets.
    min_mean:
        Mean amount below which a group is treated as noise.
    max_variation:
        Upper bound on population standard deviation divided by the mean.

    Returns
    -------
    RecurringSummary
        Ids of every expense in a recurring group, and one summary per group
        sorted by descending average amount.
    """

    records: list[dict[str, object]] = []
    for expense in expenses:
        if expense.date is None:
            continue
        category = expense.category or DEFAULT_CATEGORY
        identity = normalize_identity(expense.vendor, expense.description)
        records.append(
            {
                "id": expense.id,
                "group_key": grouping_key(category, expense.vendor, expense.description),
                "category": category,
                "identity": identity,
                "month": f"{expense.date.year:04d}-{expense.date.month:02d}",
                "day": int(expense.date.day),
                "amount": to_decimal(expense.amount),
            }
        )

    if not records:
        return RecurringSummary()

    frame = pd.DataFrame.from_records(records)

    recurring_ids: set[str] = set()
    recurring_groups: list[RecurringGroup] = []

    for _, group_df in frame.groupby("group_key", sort=False):
        month_count = int(group_df["month"].nunique())
        if month_count < min_months:
            continue

        amounts: list[Decimal] = list(group_df["amount"])
        mean = sum(amounts, _ZERO) / len(amounts)
        if mean < min_mean:
            continue

        deviation = float(np.std(np.array([float(value) for value in amounts], dtype=float)))
        if deviation / float(mean) > max_variation:
            continue

        recurring_ids.update(str(value) for value in group_df["id"])
        recurring_groups.append(
            {
                "name": str(group_df["identity"].iat[0]),
                "category": str(group_df["category"].iat[0]),
                "avg_amount": round_currency(mean),
                "month_count": month_count,
                "typical_day_of_month": typical_day_of_month(group_df["day"].tolist()),
            }
        )

    recurring_groups.sort(key=lambda group: group["avg_amount"], reverse=True)
    return RecurringSummary(recurring_ids=frozenset(recurring_ids), recurring_groups=recurring_groups)


def typical_day_of_month(days: Iterable[int]) -> int:
    """Median day of month; two middle values are averaged and rounded half up."""

    values = list(days)
    if not values:
        return 0
    median = float(np.median(values))
    return int(np.floor(median + 0.5))
