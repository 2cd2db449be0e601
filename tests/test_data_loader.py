"""Tests for converting stored records into typed records."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

import pandas as pd
import pytest

from core.data_loader import (
    RecordValidationError,
    load_group_expenses,
    load_members,
    load_personal_expenses,
    load_personal_expenses_csv,
    load_settlements,
)
from core.models import Member, Settlement, Split


def test_load_group_expenses_reads_camel_case_records():
    expenses = load_group_expenses(
        [
            {
                "id": "exp-1",
                "paidBy": "a",
                "amount": 90.3,
                "description": "Dinner",
                "date": "2024-03-02",
                "splits": [
                    {"uid": "a", "name": "Asha", "amount": 30.1},
                    {"uid": "b", "name": "Bilal", "amount": 30.1},
                    {"uid": "c", "name": "Chen", "amount": 30.1},
                ],
            }
        ]
    )

    assert len(expenses) == 1
    expense = expenses[0]
    assert expense.paid_by == "a"
    assert expense.amount == Decimal("90.3")
    assert expense.splits[1] == Split(uid="b", amount=Decimal("30.1"))
    assert expense.date == date(2024, 3, 2)


def test_invalid_records_are_skipped_with_warning(caplog):
    records = [
        {"from": "b", "to": "a", "amount": "25"},
        {"from": "b", "amount": "10"},
        {"from": "b", "to": "a", "amount": "ten"},
        "not-a-record",
    ]

    with caplog.at_level(logging.WARNING, logger="core.data_loader"):
        settlements = load_settlements(records)

    assert settlements == [Settlement(from_uid="b", to_uid="a", amount=Decimal("25"))]
    assert len([r for r in caplog.records if "Skipping invalid settlement" in r.getMessage()]) == 3


def test_strict_mode_raises_on_first_invalid_record():
    with pytest.raises(RecordValidationError, match="position 1"):
        load_group_expenses(
            [
                {"id": "ok", "paidBy": "a", "amount": 10, "splits": []},
                {"id": "bad", "amount": 10, "splits": []},
            ],
            strict=True,
        )


def test_split_mismatch_is_logged_but_kept(caplog):
    with caplog.at_level(logging.WARNING, logger="core.data_loader"):
        expenses = load_group_expenses(
            [{"id": "e1", "paidBy": "a", "amount": 100, "splits": [{"uid": "b", "amount": 40}]}]
        )

    assert len(expenses) == 1
    assert "splits sum to" in caplog.text


def test_load_members_falls_back_to_email_label():
    members = load_members(
        [
            {"uid": "a", "displayName": "Asha", "email": "asha@example.com"},
            {"uid": "b", "displayName": "", "email": "bilal@example.com"},
            {"uid": "c"},
        ]
    )

    assert members[0] == Member(uid="a", display_name="Asha", email="asha@example.com")
    assert [member.label for member in members] == ["Asha", "bilal@example.com", "Unknown"]


def test_personal_expenses_tolerate_missing_fields():
    expenses = load_personal_expenses(
        [
            {"id": "p1", "amount": 649, "category": "Subscriptions", "vendor": "Netflix", "date": datetime(2024, 1, 5, 12)},
            {"id": "p2", "description": "Something"},
            {"id": "p3", "amount": 10, "date": "not a date"},
        ]
    )

    assert [expense.id for expense in expenses] == ["p1", "p2", "p3"]
    assert expenses[0].date == date(2024, 1, 5)
    assert expenses[0].amount == Decimal("649")
    assert expenses[1].amount is None
    assert expenses[1].category is None
    assert expenses[2].date is None


def test_load_personal_expenses_csv(tmp_path):
    csv_path = tmp_path / "expenses.csv"
    pd.DataFrame(
        [
            {"id": "1", "amount": "649.00", "category": "Subscriptions", "vendor": "Netflix", "description": "Plan", "date": "2024-01-05"},
            {"id": "2", "amount": "120.50", "category": "Groceries", "vendor": None, "description": "Veg market", "date": "2024-01-07"},
        ]
    ).to_csv(csv_path, index=False)

    expenses = load_personal_expenses_csv(str(csv_path))

    assert len(expenses) == 2
    assert expenses[0].amount == Decimal("649.00")
    assert expenses[1].vendor is None
    assert expenses[1].date == date(2024, 1, 7)


def test_load_personal_expenses_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_personal_expenses_csv(str(tmp_path / "missing.csv"))
