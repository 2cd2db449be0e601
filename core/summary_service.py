"""Recomputation of group balances and recurring summaries from stored records.

The hosting app subscribes to the document store and calls into this module
whenever a snapshot arrives. Every call rebuilds results from scratch; nothing
is carried over between calls except the latest records held by
:class:`GroupSnapshot`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from analytics.balances import compute_balances, summarise_member_positions
from analytics.nudges import detect_spending_nudges
from analytics.recurring import detect_recurring
from config import get_settings
from core.data_loader import load_group_expenses, load_members, load_personal_expenses, load_settlements
from core.formatting import build_balance_insights, build_nudge_insights, build_recurring_insights
from core.models import GroupDashboard, NudgeDashboard, RecurringDashboard

logger = logging.getLogger(__name__)

__all__ = ["prepare_group_balances", "prepare_recurring_summary", "prepare_spending_nudges", "GroupSnapshot"]

Record = Mapping[str, Any]


def prepare_group_balances(
    member_records: Iterable[Record],
    expense_records: Iterable[Record],
    settlement_records: Iterable[Record],
    *,
    symbol: Optional[str] = None,
) -> GroupDashboard:
    members = load_members(member_records)
    expenses = load_group_expenses(expense_records)
    settlements = load_settlements(settlement_records)

    debts = compute_balances(expenses, settlements, members)
    logger.debug(
        "Recomputed balances from %d expenses and %d settlements: %d open debts",
        len(expenses),
        len(settlements),
        len(debts),
    )

    return {
        "debts": debts,
        "positions": summarise_member_positions(debts),
        "insights": build_balance_insights(debts, symbol or get_settings().currency_symbol),
    }


def prepare_recurring_summary(
    expense_records: Iterable[Record],
    *,
    symbol: Optional[str] = None,
) -> RecurringDashboard:
    expenses = load_personal_expenses(expense_records)
    summary = detect_recurring(expenses)
    logger.debug(
        "Detected %d recurring groups across %d expenses", len(summary.recurring_groups), len(expenses)
    )

    return {
        "recurring_ids": summary.recurring_ids,
        "recurring_groups": summary.recurring_groups,
        "insights": build_recurring_insights(summary.recurring_groups, symbol or get_settings().currency_symbol),
    }


def prepare_spending_nudges(
    expense_records: Iterable[Record],
    month: int,
    year: int,
    *,
    symbol: Optional[str] = None,
) -> NudgeDashboard:
    expenses = load_personal_expenses(expense_records)
    nudges = detect_spending_nudges(expenses, month, year)
    logger.debug("Found %d spending nudges for %04d-%02d", len(nudges), year, month)

    return {
        "nudges": nudges,
        "insights": build_nudge_insights(nudges, symbol or get_settings().currency_symbol),
    }


class GroupSnapshot:
    """Latest stored records for one group, recomputed on every update.

    Each ``apply_*`` method replaces one collection wholesale, mirroring a
    snapshot callback from the store, and returns freshly computed balances.
    """

    def __init__(self, group_id: str):
        self.group_id = group_id
        self._members: list[Record] = []
        self._expenses: list[Record] = []
        self._settlements: list[Record] = []

    def apply_group(self, group_record: Record) -> GroupDashboard:
        self._members = list(group_record.get("members") or [])
        return self.recompute()

    def apply_expenses(self, expense_records: Iterable[Record]) -> GroupDashboard:
        self._expenses = list(expense_records)
        return self.recompute()

    def apply_settlements(self, settlement_records: Iterable[Record]) -> GroupDashboard:
        self._settlements = list(settlement_records)
        return self.recompute()

    def recompute(self) -> GroupDashboard:
        logger.debug("Recomputing balances for group %s", self.group_id)
        return prepare_group_balances(self._members, self._expenses, self._settlements)
