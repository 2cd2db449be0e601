"""LLM-backed extraction of structured expenses from text and receipt images."""

from __future__ import annotations

import base64
import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping

from openai import APIError, OpenAI

from analytics.balances import round_currency
from analytics.categorize import CATEGORIES, UNKNOWN_VENDOR, normalize_category
from config import get_settings
from core.ai.client import build_openai_client
from core.formatting import strip_code_fences
from core.models import ParsedExpense
from prompts import render_prompt

logger = logging.getLogger(__name__)

PROMPT_PARSE_EXPENSE = "parse_expense"
PROMPT_PARSE_RECEIPT = "parse_receipt"
MAX_OUTPUT_TOKENS = 256
RECEIPT_FALLBACK_DESCRIPTION = "Receipt scan"

NOT_AN_EXPENSE = "not_an_expense"
INVALID_AMOUNT = "invalid_amount"
PARSE_ERROR = "parse_error"

__all__ = [
    "ExpenseParseError",
    "NOT_AN_EXPENSE",
    "INVALID_AMOUNT",
    "PARSE_ERROR",
    "parse_expense_text",
    "parse_receipt_image",
    "decode_expense_reply",
]


class ExpenseParseError(RuntimeError):
    """Raised when the model output cannot be turned into an expense."""

    def __init__(self, reason: str, message: str | None = None):
        self.reason = reason
        super().__init__(message or reason)


def _coerce_amount(value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExpenseParseError(INVALID_AMOUNT, "Could not extract a valid amount")
    amount = Decimal(str(value))
    if not amount.is_finite() or amount <= 0:
        raise ExpenseParseError(INVALID_AMOUNT, "Could not extract a valid amount")
    return round_currency(amount)


def _coerce_date(value: Any, today: date) -> date:
    if not value:
        return today
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("Model returned an unparseable date %r; using %s", value, today)
        return today


def decode_expense_reply(text: str, *, today: date, fallback_description: str) -> ParsedExpense:
    """Validate a raw model reply and normalise it into a :class:`ParsedExpense`."""

    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise ExpenseParseError(PARSE_ERROR, "Model reply was not valid JSON") from exc

    if not isinstance(data, Mapping):
        raise ExpenseParseError(PARSE_ERROR, "Model reply was not a JSON object")
    if data.get("error") == NOT_AN_EXPENSE:
        raise ExpenseParseError(NOT_AN_EXPENSE, "Input does not describe an expense")

    return ParsedExpense(
        amount=_coerce_amount(data.get("amount")),
        category=normalize_category(data.get("category")),
        vendor=str(data.get("vendor") or UNKNOWN_VENDOR),
        description=str(data.get("description") or fallback_description),
        date=_coerce_date(data.get("date"), today),
    )


def _complete(client: OpenAI, messages: list[dict[str, Any]]) -> str:
    try:
        response = client.chat.completions.create(
            model=get_settings().openai_model,
            messages=messages,
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=0,
        )
    except APIError as exc:
        raise ExpenseParseError(PARSE_ERROR, f"OpenAI API error: {exc}") from exc

    try:
        text = response.choices[0].message.content or ""
    except (AttributeError, IndexError) as exc:  # pragma: no cover - unexpected SDK output
        raise ExpenseParseError(PARSE_ERROR, "Unexpected response format from OpenAI API") from exc

    if not text.strip():
        raise ExpenseParseError(PARSE_ERROR, "OpenAI response was empty")
    return text


def parse_expense_text(
    text: str,
    *,
    today: date | None = None,
    client_factory: Callable[[], OpenAI] | None = None,
) -> ParsedExpense:
    """Extract amount, category, vendor, description and date from free text."""

    if not text or not text.strip():
        raise ExpenseParseError(NOT_AN_EXPENSE, "No expense text provided")

    resolved_today = today or date.today()
    client = (client_factory or build_openai_client)()
    system_prompt = render_prompt(
        PROMPT_PARSE_EXPENSE,
        today=resolved_today.isoformat(),
        categories=", ".join(CATEGORIES),
        currency=get_settings().currency_symbol,
    )

    reply = _complete(
        client,
        [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": text},
        ],
    )
    logger.debug("Parsed expense reply: %s", reply)
    return decode_expense_reply(reply, today=resolved_today, fallback_description=text.strip()[:40])


def parse_receipt_image(
    image_bytes: bytes,
    media_type: str = "image/jpeg",
    *,
    today: date | None = None,
    client_factory: Callable[[], OpenAI] | None = None,
) -> ParsedExpense:
    """Extract expense fields from a photographed receipt."""

    if not image_bytes:
        raise ExpenseParseError(PARSE_ERROR, "Receipt image is empty")

    resolved_today = today or date.today()
    client = (client_factory or build_openai_client)()
    system_prompt = render_prompt(
        PROMPT_PARSE_RECEIPT,
        today=resolved_today.isoformat(),
        categories=", ".join(CATEGORIES),
    )
    encoded = base64.b64encode(image_bytes).decode("ascii")

    reply = _complete(
        client,
        [
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": f"data:{media_type};base64,{encoded}"}},
                    {"type": "text", "text": "Extract the expense details from this receipt."},
                ],
            },
        ],
    )
    return decode_expense_reply(reply, today=resolved_today, fallback_description=RECEIPT_FALLBACK_DESCRIPTION)
