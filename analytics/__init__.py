"""Analytics helpers shared across Tellr services."""

from analytics.balances import (
    SETTLED_EPSILON,
    build_equal_splits,
    compute_balances,
    round_currency,
    summarise_member_positions,
    to_decimal,
)
from analytics.categorize import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    UNKNOWN_VENDOR,
    grouping_key,
    is_known_vendor,
    normalize_category,
    normalize_identity,
)
from analytics.nudges import detect_spending_nudges
from analytics.recurring import detect_recurring, typical_day_of_month

__all__ = [
    "SETTLED_EPSILON",
    "build_equal_splits",
    "compute_balances",
    "round_currency",
    "summarise_member_positions",
    "to_decimal",
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "UNKNOWN_VENDOR",
    "grouping_key",
    "is_known_vendor",
    "normalize_category",
    "normalize_identity",
    "detect_spending_nudges",
    "detect_recurring",
    "typical_day_of_month",
]
