"""AI-assisted spending chat and savings suggestions for Tellr."""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Sequence

import pandas as pd
from openai import APIError, OpenAI

from config import get_settings
from core.ai.client import build_openai_client
from core.formatting import format_currency, strip_code_fences
from core.models import PersonalExpense, SavingsTip
from prompts import render_prompt

logger = logging.getLogger(__name__)

PROMPT_ASK = "ask_expenses"
PROMPT_SAVINGS = "savings_suggestions"
MAX_OUTPUT_TOKENS = 512
RECENT_WINDOW_DAYS = 30
TOP_CATEGORY_COUNT = 5

__all__ = [
    "AISummaryError",
    "build_expense_summary",
    "ask_expenses",
    "generate_savings_suggestions",
]


class AISummaryError(RuntimeError):
    """Raised when the AI summary cannot be generated."""


def _expense_frame(expenses: Iterable[PersonalExpense]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                "category": expense.category or "Other",
                "date": pd.Timestamp(expense.date) if expense.date else pd.NaT,
                "amount": float(expense.amount or 0),
            }
            for expense in expenses
        ],
        columns=["category", "date", "amount"],
    )
    frame["date"] = pd.to_datetime(frame["date"])
    return frame


def build_expense_summary(
    expenses: Iterable[PersonalExpense],
    today: date | None = None,
    symbol: str | None = None,
) -> str:
    """Render the plain-text spending context handed to the assistant."""

    frame = _expense_frame(expenses)
    if frame.empty:
        return "No expenses recorded yet."

    currency = symbol or get_settings().currency_symbol
    reference = pd.Timestamp(today or date.today())
    cutoff = reference - pd.Timedelta(days=RECENT_WINDOW_DAYS)

    recent = frame[frame["date"] >= cutoff]
    by_category = frame.groupby("category")["amount"].sum().sort_values(ascending=False)
    top_lines = "\n".join(
        f"  - {category}: {format_currency(amount, currency)}"
        for category, amount in by_category.head(TOP_CATEGORY_COUNT).items()
    )

    return (
        f"Total all-time: {format_currency(frame['amount'].sum(), currency)} "
        f"across {len(frame)} transactions\n"
        f"Last {RECENT_WINDOW_DAYS} days: {format_currency(recent['amount'].sum(), currency)} "
        f"({len(recent)} transactions)\n"
        f"Top spending categories (all-time):\n{top_lines}"
    )


def _complete(client: OpenAI, messages: Sequence[Mapping[str, Any]]) -> str:
    try:
        response = client.chat.completions.create(
            model=get_settings().openai_model,
            messages=list(messages),
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=0.2,
        )
    except APIError as exc:
        raise AISummaryError(f"OpenAI API error: {exc}") from exc

    try:
        text = response.choices[0].message.content or ""
    except (AttributeError, IndexError) as exc:  # pragma: no cover - unexpected SDK output
        raise AISummaryError("Unexpected response format from OpenAI API") from exc

    if not text.strip():
        raise AISummaryError("OpenAI response was empty")
    return text.strip()


def ask_expenses(
    chat_messages: Sequence[Mapping[str, str]],
    expenses: Iterable[PersonalExpense],
    *,
    today: date | None = None,
    client_factory: Callable[[], OpenAI] | None = None,
) -> str:
    """Answer the latest question in ``chat_messages`` using the spending context."""

    if not chat_messages:
        raise AISummaryError("No question provided")

    resolved_today = today or date.today()
    settings = get_settings()
    system_prompt = render_prompt(
        PROMPT_ASK,
        currency=settings.currency_symbol,
        today=resolved_today.strftime("%d %B %Y"),
        summary=build_expense_summary(expenses, resolved_today, settings.currency_symbol),
    )
    client = (client_factory or build_openai_client)()
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend({"role": str(m["role"]), "content": str(m["content"])} for m in chat_messages)
    return _complete(client, messages)


def generate_savings_suggestions(
    expenses: Iterable[PersonalExpense],
    *,
    today: date | None = None,
    client_factory: Callable[[], OpenAI] | None = None,
) -> list[SavingsTip]:
    """Return 3-4 savings tips derived from the user's spending summary."""

    settings = get_settings()
    summary = build_expense_summary(expenses, today, settings.currency_symbol)
    client = (client_factory or build_openai_client)()
    text = _complete(
        client,
        [
            {"role": "system", "content": render_prompt(PROMPT_SAVINGS, currency=settings.currency_symbol)},
            {
                "role": "user",
                "content": f"Here is my expense data:\n{summary}\n\nGive me personalized savings suggestions.",
            },
        ],
    )
    return _parse_tips(text)


def _parse_tips(response_text: str) -> list[SavingsTip]:
    try:
        data = json.loads(strip_code_fences(response_text))
    except json.JSONDecodeError as exc:
        raise AISummaryError("Savings suggestions were not valid JSON") from exc

    if not isinstance(data, list):
        raise AISummaryError("Savings suggestions must be a JSON array")

    tips: list[SavingsTip] = []
    for item in data:
        if not isinstance(item, Mapping) or not item.get("tip"):
            logger.warning("Dropping malformed savings tip: %r", item)
            continue
        potential = item.get("potential")
        tips.append(SavingsTip(tip=str(item["tip"]), potential=str(potential) if potential else None))
    return tips
