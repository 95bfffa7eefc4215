"""AI Agents package."""

from expense_tracker.agents.errors import (
    ExtractionError,
    classify_error,
    user_message_for,
)
from expense_tracker.agents.extraction import (
    DEFAULT_TITLE,
    ExpenseExtractionAgent,
    build_prompt,
    clean_response,
    coerce_amount,
    create_gemini_model,
    decode_response,
    normalize_fields,
)

__all__ = [
    "DEFAULT_TITLE",
    "ExpenseExtractionAgent",
    "ExtractionError",
    "build_prompt",
    "classify_error",
    "clean_response",
    "coerce_amount",
    "create_gemini_model",
    "decode_response",
    "normalize_fields",
    "user_message_for",
]
