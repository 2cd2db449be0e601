"""Category and vendor normalisation helpers used across analytics pipelines."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

__all__ = [
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "UNKNOWN_VENDOR",
    "normalize_category",
    "is_known_vendor",
    "normalize_identity",
    "grouping_key",
]

CATEGORIES: tuple[str, ...] = (
    "Food & Dining",
    "Groceries",
    "Housing/Rent",
    "Transport",
    "Shopping",
    "Entertainment",
    "Health",
    "Utilities",
    "Subscriptions",
    "Education",
    "Travel",
    "Personal Care",
    "Gifts",
    "Other",
)

DEFAULT_CATEGORY = "Other"
UNKNOWN_VENDOR = "Unknown"


def normalize_category(raw_category: Optional[str]) -> str:
    """Return ``raw_category`` when it is a supported category, otherwise "Other"."""

    if raw_category in CATEGORIES:
        return str(raw_category)
    return DEFAULT_CATEGORY


def is_known_vendor(vendor: Optional[str]) -> bool:
    return bool(vendor and vendor.strip() and vendor.strip() != UNKNOWN_VENDOR)


@lru_cache(maxsize=512)
def normalize_identity(vendor: Optional[str], description: Optional[str]) -> str:
    """Return the identity used to group an expense with its repeats.

    Parameters
    ----------
    vendor:
        Extracted merchant name. "Unknown" and blank values are ignored.
    description:
        Free text summary, used when no vendor is known.

    Returns
    -------
    str
        The lower-cased, trimmed vendor, or the first two whitespace separated
        tokens of the lower-cased description.
    """

    if is_known_vendor(vendor):
        return str(vendor).strip().lower()

    tokens = (description or "").lower().split()
    return " ".join(tokens[:2])


def grouping_key(category: Optional[str], vendor: Optional[str], description: Optional[str]) -> str:
    """Alias combining category and identity as ``category::identity``."""

    return f"{category or DEFAULT_CATEGORY}::{normalize_identity(vendor, description)}"
