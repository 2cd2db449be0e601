"""Net pairwise balance computation for shared group expenses."""

from __future__ import annotations

from collections import defaultdict
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable, Sequence

from core.models import UNKNOWN_LABEL, GroupExpense, Member, PairwiseDebt, Settlement, Split

__all__ = [
    "SETTLED_EPSILON",
    "round_currency",
    "to_decimal",
    "compute_balances",
    "build_equal_splits",
    "summarise_member_positions",
]

SETTLED_EPSILON = Decimal("0.01")
_CENTS = Decimal("0.01")
_ZERO = Decimal("0")


def round_currency(value: Decimal) -> Decimal:
    """Quantise ``value`` to cents; a residue of exactly 0.005 rounds to 0.00."""

    return value.quantize(_CENTS, rounding=ROUND_HALF_EVEN)


def to_decimal(value: object) -> Decimal:
    """Coerce an amount to Decimal; ``None`` and non-finite numbers count as zero."""

    if value is None:
        return _ZERO
    result = value if isinstance(value, Decimal) else Decimal(str(value))
    return result if result.is_finite() else _ZERO


def compute_balances(
    expenses: Iterable[GroupExpense],
    settlements: Iterable[Settlement],
    members: Iterable[Member],
) -> list[PairwiseDebt]:
    """Return the net debts between group members, largest first.

    Parameters
    ----------
    expenses:
        Shared expenses; each split owed by someone other than the payer adds
        to what that member owes the payer.
    settlements:
        Recorded payments. Each one reduces only the ``from -> to`` debt and
        never drops it below zero.
    members:
        Used to resolve display labels. Unknown uids are labelled "Unknown".

    Returns
    -------
    list[PairwiseDebt]
        At most one entry per unordered pair, sorted by descending amount.
        Ties keep the order in which pairs were first seen.
    """

    labels = {member.uid: member.label for member in members}

    # owed[debtor][creditor]
    owed: dict[str, dict[str, Decimal]] = defaultdict(dict)

    for expense in expenses:
        for split in expense.splits or ():
            amount = to_decimal(split.amount)
            if split.uid == expense.paid_by or amount <= 0:
                continue
            row = owed[split.uid]
            row[expense.paid_by] = row.get(expense.paid_by, _ZERO) + amount

    for settlement in settlements:
        row = owed[settlement.from_uid]
        remaining = row.get(settlement.to_uid, _ZERO) - to_decimal(settlement.amount)
        row[settlement.to_uid] = max(_ZERO, remaining)

    debts: list[PairwiseDebt] = []
    seen: set[tuple[str, str]] = set()

    for first, row in list(owed.items()):
        for second in list(row):
            if first == second:
                continue
            pair = tuple(sorted((first, second)))
            if pair in seen:
                continue
            seen.add(pair)

            forward = owed.get(first, {}).get(second, _ZERO)
            reverse = owed.get(second, {}).get(first, _ZERO)
            net = round_currency(forward - reverse)
            if abs(net) < SETTLED_EPSILON:
                continue

            debtor, creditor = (first, second) if net > 0 else (second, first)
            debts.append(
                PairwiseDebt(
                    debtor=debtor,
                    creditor=creditor,
                    amount=abs(net),
                    debtor_name=labels.get(debtor, UNKNOWN_LABEL),
                    creditor_name=labels.get(creditor, UNKNOWN_LABEL),
                )
            )

    debts.sort(key=lambda debt: debt.amount, reverse=True)
    return debts


def build_equal_splits(amount: Decimal, members: Sequence[Member]) -> list[Split]:
    """Split ``amount`` equally across ``members``, each share rounded to cents."""

    total = to_decimal(amount)
    if total <= 0:
        raise ValueError("Expense amount must be greater than zero")
    if not members:
        return []

    share = round_currency(total / len(members))
    return [Split(uid=member.uid, amount=share) for member in members]


def summarise_member_positions(debts: Iterable[PairwiseDebt]) -> dict[str, Decimal]:
    """Return each member's net position: positive when owed, negative when owing."""

    positions: dict[str, Decimal] = {}
    for debt in debts:
        positions[debt.creditor] = positions.get(debt.creditor, _ZERO) + debt.amount
        positions[debt.debtor] = positions.get(debt.debtor, _ZERO) - debt.amount
    return positions
