"""Formatting helpers for Tellr summaries."""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Iterable

from core.models import PairwiseDebt, RecurringGroup, SpendingNudge

__all__ = [
    "strip_code_fences",
    "format_currency",
    "format_debt",
    "build_balance_insights",
    "build_recurring_insights",
    "build_nudge_insights",
]


_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around a model reply."""

    return _FENCE_END.sub("", _FENCE_START.sub("", text.strip())).strip()


def format_currency(amount: Decimal | float, symbol: str = "₹") -> str:
    return f"{symbol}{amount:,.2f}"


def format_debt(debt: PairwiseDebt, symbol: str = "₹") -> str:
    return f"{debt.debtor_name} owes {debt.creditor_name} {format_currency(debt.amount, symbol)}"


def build_balance_insights(debts: Iterable[PairwiseDebt], symbol: str = "₹") -> list[str]:
    lines = [format_debt(debt, symbol) for debt in debts]
    if not lines:
        return ["All settled up."]
    return lines


def build_recurring_insights(groups: Iterable[RecurringGroup], symbol: str = "₹") -> list[str]:
    insights: list[str] = []
    for group in groups:
        months = group["month_count"]
        insights.append(
            f"{group['name'].title()} ({group['category']}): "
            f"{format_currency(group['avg_amount'], symbol)} across {months} months, "
            f"usually around day {group['typical_day_of_month']}."
        )
    return insights


def build_nudge_insights(nudges: Iterable[SpendingNudge], symbol: str = "₹") -> list[str]:
    insights: list[str] = []
    for nudge in nudges:
        label = nudge["category"] or "Overall spending"
        direction = "more" if nudge["deviation_pct"] > 0 else "less"
        insights.append(
            f"{label}: {format_currency(nudge['current'], symbol)} this month, "
            f"{abs(nudge['deviation_pct']):.0f}% {direction} than your usual "
            f"{format_currency(nudge['average'], symbol)}."
        )
    return insights
