"""Unit tests for month-over-month spending nudges."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from analytics.nudges import detect_spending_nudges
from core.models import PersonalExpense


def _spend(category: str | None, amount: str, year: int, month: int, day: int = 10) -> PersonalExpense:
    return PersonalExpense(
        id=f"{category}-{year}-{month}-{day}-{amount}",
        category=category,
        date=date(year, month, day),
        amount=Decimal(amount),
    )


def _history(category: str | None, *amounts: str, current: str) -> list[PersonalExpense]:
    """Spending for March to May 2024 followed by the June 2024 total."""

    expenses = [_spend(category, amount, 2024, month) for month, amount in zip((3, 4, 5), amounts)]
    return expenses + [_spend(category, current, 2024, 6)]


def test_category_and_overall_nudges_fire_above_average():
    nudges = detect_spending_nudges(_history("Groceries", "1000", "1000", "1000", current="1500"), 6, 2024)

    assert nudges == [
        {"category": None, "average": Decimal("1000.00"), "current": Decimal("1500.00"), "deviation_pct": 50.0},
        {"category": "Groceries", "average": Decimal("1000.00"), "current": Decimal("1500.00"), "deviation_pct": 50.0},
    ]


def test_spending_below_average_is_reported_as_negative():
    nudges = detect_spending_nudges(_history("Transport", "1000", "1000", current="800"), 6, 2024)

    assert [nudge["deviation_pct"] for nudge in nudges] == [pytest.approx(-20.0), pytest.approx(-20.0)]


def test_one_month_of_history_is_not_enough():
    expenses = [_spend("Travel", "1000", 2024, 5), _spend("Travel", "5000", 2024, 6)]

    assert detect_spending_nudges(expenses, 6, 2024) == []


def test_average_uses_only_months_with_spending():
    expenses = [_spend("Health", "600", 2024, 3), _spend("Health", "1000", 2024, 5), _spend("Health", "1200", 2024, 6)]

    nudges = detect_spending_nudges(expenses, 6, 2024)

    assert nudges[0]["average"] == Decimal("800.00")
    assert nudges[0]["deviation_pct"] == pytest.approx(50.0)


def test_history_wraps_into_previous_year():
    expenses = [
        _spend("Utilities", "400", 2023, 11),
        _spend("Utilities", "400", 2023, 12),
        _spend("Utilities", "900", 2024, 1),
    ]

    nudges = detect_spending_nudges(expenses, 1, 2024)

    assert [nudge["category"] for nudge in nudges] == [None, "Utilities"]
    assert nudges[1]["average"] == Decimal("400.00")


def test_older_months_are_outside_the_window():
    expenses = [_spend("Gifts", "1000", 2024, 1), _spend("Gifts", "1000", 2024, 2), _spend("Gifts", "3000", 2024, 6)]

    assert detect_spending_nudges(expenses, 6, 2024) == []


@pytest.mark.parametrize(("current", "expected"), [("49.99", []), ("50", ["Coffee"])])
def test_category_floor_of_fifty(current, expected):
    nudges = detect_spending_nudges(_history("Coffee", "20", "20", "20", current=current), 6, 2024)

    assert [nudge["category"] for nudge in nudges] == expected


@pytest.mark.parametrize(("current", "expected"), [("100", []), ("100.01", [None])])
def test_overall_floor_of_one_hundred(current, expected):
    nudges = detect_spending_nudges(_history(None, "80", "80", current=current), 6, 2024)

    assert [nudge["category"] for nudge in nudges] == expected


@pytest.mark.parametrize(("current", "count"), [("1149", 0), ("1150", 2), ("851", 0), ("850", 2)])
def test_fifteen_percent_threshold(current, count):
    nudges = detect_spending_nudges(_history("Shopping", "1000", "1000", current=current), 6, 2024)

    assert len(nudges) == count


def test_zero_history_totals_never_divide_by_zero():
    expenses = [
        _spend("Shopping", "100", 2024, 4, day=1),
        _spend("Shopping", "-100", 2024, 4, day=2),
        _spend("Shopping", "100", 2024, 5, day=1),
        _spend("Shopping", "-100", 2024, 5, day=2),
        _spend("Shopping", "500", 2024, 6),
    ]

    assert detect_spending_nudges(expenses, 6, 2024) == []
    assert detect_spending_nudges(expenses, 6, 2024, min_history_months=0) == []


def test_largest_deviations_first_and_capped_at_five():
    expenses: list[PersonalExpense] = []
    for step in range(1, 8):
        expenses += _history(f"Category {step}", "100", "100", current=str(100 * (step + 1)))

    nudges = detect_spending_nudges(expenses, 6, 2024)

    assert [nudge["category"] for nudge in nudges] == ["Category 7", "Category 6", "Category 5", None, "Category 4"]
    assert nudges[3]["deviation_pct"] == pytest.approx(400.0)


def test_undated_and_uncategorised_expenses():
    expenses = _history("Groceries", "1000", "1000", current="1000") + [
        PersonalExpense(id="undated", category="Groceries", amount=Decimal("9000")),
        _spend(None, "600", 2024, 6),
    ]

    nudges = detect_spending_nudges(expenses, 6, 2024)

    assert nudges == [
        {"category": None, "average": Decimal("1000.00"), "current": Decimal("1600.00"), "deviation_pct": 60.0},
    ]


def test_no_expenses_gives_no_nudges():
    assert detect_spending_nudges([], 6, 2024) == []


def test_month_must_be_a_calendar_month():
    with pytest.raises(ValueError, match="between 1 and 12"):
        detect_spending_nudges([], 13, 2024)
