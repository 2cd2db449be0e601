"""Core domain package for the Tellr expense application."""

from .data_loader import (
    RecordValidationError,
    load_group_expenses,
    load_members,
    load_personal_expenses,
    load_personal_expenses_csv,
    load_settlements,
)
from .models import (
    GroupDashboard,
    GroupExpense,
    Member,
    NudgeDashboard,
    PairwiseDebt,
    ParsedExpense,
    PersonalExpense,
    RecurringDashboard,
    RecurringGroup,
    RecurringSummary,
    SavingsTip,
    Settlement,
    SpendingNudge,
    Split,
)

__all__ = [
    "GroupDashboard",
    "RecurringDashboard",
    "NudgeDashboard",
    "SpendingNudge",
    "GroupExpense",
    "Member",
    "PairwiseDebt",
    "ParsedExpense",
    "PersonalExpense",
    "RecurringGroup",
    "RecurringSummary",
    "SavingsTip",
    "Settlement",
    "Split",
    "RecordValidationError",
    "load_group_expenses",
    "load_members",
    "load_personal_expenses",
    "load_personal_expenses_csv",
    "load_settlements",
]
