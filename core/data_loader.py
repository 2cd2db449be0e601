"""Record loading utilities for Tellr's storage hand-off.

The document store hands over JSON-like records with camelCase keys. The
helpers here turn them into the typed records in :mod:`core.models` so the
analytics functions never see partially shaped data.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Final, Iterable, Mapping, Optional, TypeVar

import pandas as pd

from core.models import GroupExpense, Member, PersonalExpense, Settlement, Split

logger = logging.getLogger(__name__)

__all__ = [
    "RecordValidationError",
    "load_members",
    "load_group_expenses",
    "load_settlements",
    "load_personal_expenses",
    "load_personal_expenses_csv",
]

_CACHE_SIZE: Final[int] = 8
_SPLIT_TOLERANCE: Final[Decimal] = Decimal("0.01")

T = TypeVar("T")


class RecordValidationError(ValueError):
    """Raised when a stored record cannot be converted into a typed record."""


def _require_str(record: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if value is not None and str(value).strip():
            return str(value)
    raise RecordValidationError(f"Missing required field '{keys[0]}'")


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    text = str(value)
    return text if text.strip() else None


def _coerce_decimal(value: Any, field: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise RecordValidationError(f"Field '{field}' must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise RecordValidationError(f"Field '{field}' is not a valid amount: {value!r}") from exc
    if not amount.is_finite():
        raise RecordValidationError(f"Field '{field}' is not a finite amount: {value!r}")
    return amount


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable date %r", value)
        return None
    if pd.isna(timestamp):
        return None
    return timestamp.date()


def _load(
    records: Iterable[Mapping[str, Any]],
    build: Callable[[Mapping[str, Any]], T],
    kind: str,
    strict: bool,
) -> list[T]:
    loaded: list[T] = []
    for index, record in enumerate(records):
        try:
            if not isinstance(record, Mapping):
                raise RecordValidationError(f"Expected a mapping, got {type(record).__name__}")
            loaded.append(build(record))
        except RecordValidationError as exc:
            if strict:
                raise RecordValidationError(f"Invalid {kind} record at position {index}: {exc}") from exc
            logger.warning("Skipping invalid %s record at position %d: %s", kind, index, exc)
    return loaded


def _build_member(record: Mapping[str, Any]) -> Member:
    return Member(
        uid=_require_str(record, "uid"),
        display_name=_optional_str(record.get("displayName", record.get("display_name"))),
        email=_optional_str(record.get("email")),
    )


def _build_split(record: Any) -> Split:
    if not isinstance(record, Mapping):
        raise RecordValidationError("Split entries must be mappings")
    return Split(uid=_require_str(record, "uid"), amount=_coerce_decimal(record.get("amount"), "split.amount"))


def _build_group_expense(record: Mapping[str, Any]) -> GroupExpense:
    raw_splits = record.get("splits") or []
    if not isinstance(raw_splits, (list, tuple)):
        raise RecordValidationError("Field 'splits' must be a list")

    expense = GroupExpense(
        id=_require_str(record, "id"),
        paid_by=_require_str(record, "paidBy", "paid_by"),
        amount=_coerce_decimal(record.get("amount"), "amount"),
        splits=tuple(_build_split(split) for split in raw_splits),
        description=_optional_str(record.get("description")) or "",
        category=_optional_str(record.get("category")),
        date=_coerce_date(record.get("date")),
    )

    split_total = sum((split.amount for split in expense.splits), Decimal("0"))
    if expense.splits and abs(split_total - expense.amount) >= _SPLIT_TOLERANCE:
        logger.warning(
            "Expense %s splits sum to %s but amount is %s", expense.id, split_total, expense.amount
        )
    return expense


def _build_settlement(record: Mapping[str, Any]) -> Settlement:
    return Settlement(
        from_uid=_require_str(record, "from", "from_uid"),
        to_uid=_require_str(record, "to", "to_uid"),
        amount=_coerce_decimal(record.get("amount"), "amount"),
        id=_optional_str(record.get("id")),
    )


def _build_personal_expense(record: Mapping[str, Any]) -> PersonalExpense:
    raw_amount = record.get("amount")
    missing_amount = raw_amount is None or (isinstance(raw_amount, float) and pd.isna(raw_amount))
    return PersonalExpense(
        id=_require_str(record, "id"),
        category=_optional_str(record.get("category")),
        vendor=_optional_str(record.get("vendor")),
        description=_optional_str(record.get("description")) or "",
        date=_coerce_date(record.get("date")),
        amount=None if missing_amount else _coerce_decimal(raw_amount, "amount"),
    )


def load_members(records: Iterable[Mapping[str, Any]], *, strict: bool = False) -> list[Member]:
    """Convert group member records into :class:`Member` objects."""

    return _load(records, _build_member, "member", strict)


def load_group_expenses(records: Iterable[Mapping[str, Any]], *, strict: bool = False) -> list[GroupExpense]:
    """Convert shared expense records (``paidBy``, ``splits``) into typed expenses.

    A record whose splits do not add up to its amount is kept; the mismatch
    is only logged because balances are computed from the splits alone.
    """

    return _load(records, _build_group_expense, "group expense", strict)


def load_settlements(records: Iterable[Mapping[str, Any]], *, strict: bool = False) -> list[Settlement]:
    return _load(records, _build_settlement, "settlement", strict)


def load_personal_expenses(
    records: Iterable[Mapping[str, Any]], *, strict: bool = False
) -> list[PersonalExpense]:
    """Convert personal expense records; missing category, date or amount are allowed."""

    return _load(records, _build_personal_expense, "personal expense", strict)


@lru_cache(maxsize=_CACHE_SIZE)
def load_personal_expenses_csv(csv_path: str | Path) -> tuple[PersonalExpense, ...]:
    """Return personal expenses parsed from a CSV export.

    Results are cached to avoid redundant disk reads when recomputing
    summaries for the same source file multiple times during a session.
    """

    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    df = pd.read_csv(path, dtype={"id": str, "amount": str})
    if "id" not in df.columns:
        raise ValueError(f"CSV file has no 'id' column: {path}")
    df = df.astype(object).where(df.notna(), None)
    return tuple(load_personal_expenses(df.to_dict(orient="records")))
