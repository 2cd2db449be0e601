"""Shared data model definitions for the Tellr expense core."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, TypedDict

UNKNOWN_LABEL = "Unknown"


@dataclass(frozen=True)
class Member:
    uid: str
    display_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.email or UNKNOWN_LABEL


@dataclass(frozen=True)
class Split:
    uid: str
    amount: Decimal


@dataclass(frozen=True)
class GroupExpense:
    id: str
    paid_by: str
    amount: Decimal
    splits: tuple[Split, ...] = ()
    description: str = ""
    category: Optional[str] = None
    date: Optional[date] = None


@dataclass(frozen=True)
class Settlement:
    """A recorded payment reducing what ``from_uid`` owes ``to_uid``."""

    from_uid: str
    to_uid: str
    amount: Decimal
    id: Optional[str] = None


@dataclass(frozen=True)
class PairwiseDebt:
    """Net balance between two members; ``amount`` is always positive."""

    debtor: str
    creditor: str
    amount: Decimal
    debtor_name: str = UNKNOWN_LABEL
    creditor_name: str = UNKNOWN_LABEL


@dataclass(frozen=True)
class PersonalExpense:
    id: str
    category: Optional[str] = None
    vendor: Optional[str] = None
    description: str = ""
    date: Optional[date] = None
    amount: Optional[Decimal] = None


class RecurringGroup(TypedDict):
    """Summary of one detected recurring expense pattern."""

    name: str
    category: str
    avg_amount: Decimal
    month_count: int
    typical_day_of_month: int


@dataclass(frozen=True)
class RecurringSummary:
    recurring_ids: frozenset[str] = field(default_factory=frozenset)
    recurring_groups: list[RecurringGroup] = field(default_factory=list)


class SpendingNudge(TypedDict):
    """Month spending that strays from the recent average; ``category`` is None for overall."""

    category: Optional[str]
    average: Decimal
    current: Decimal
    deviation_pct: float


class GroupDashboard(TypedDict):
    debts: list[PairwiseDebt]
    positions: dict[str, Decimal]
    insights: list[str]


class RecurringDashboard(TypedDict):
    recurring_ids: frozenset[str]
    recurring_groups: list[RecurringGroup]
    insights: list[str]


class NudgeDashboard(TypedDict):
    nudges: list[SpendingNudge]
    insights: list[str]


@dataclass(frozen=True)
class ParsedExpense:
    """Structured expense fields extracted from free text or a receipt."""

    amount: Decimal
    category: str
    vendor: str
    description: str
    date: date


@dataclass(frozen=True)
class SavingsTip:
    tip: str
    potential: Optional[str] = None


__all__ = [
    "UNKNOWN_LABEL",
    "Member",
    "Split",
    "GroupExpense",
    "Settlement",
    "PairwiseDebt",
    "PersonalExpense",
    "RecurringGroup",
    "RecurringSummary",
    "SpendingNudge",
    "GroupDashboard",
    "RecurringDashboard",
    "NudgeDashboard",
    "ParsedExpense",
    "SavingsTip",
]
