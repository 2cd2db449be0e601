"""AI-focused helpers for Tellr."""

from .client import AIConfigurationError, build_openai_client
from .parser import ExpenseParseError, decode_expense_reply, parse_expense_text, parse_receipt_image
from .summary import AISummaryError, ask_expenses, build_expense_summary, generate_savings_suggestions

__all__ = [
    "AIConfigurationError",
    "build_openai_client",
    "ExpenseParseError",
    "decode_expense_reply",
    "parse_expense_text",
    "parse_receipt_image",
    "AISummaryError",
    "ask_expenses",
    "build_expense_summary",
    "generate_savings_suggestions",
]
