"""
Extraction error classification.

Provider exceptions are mapped onto ExtractionErrorKind immediately after the
Gemini call. Nothing downstream inspects provider-specific status codes.
"""

import json
from typing import Optional

from google.api_core import exceptions as google_exceptions

from expense_tracker.models.expense import ExtractionErrorKind


RATE_LIMIT_STATUS = 429
AUTH_STATUSES = (401, 403)


class ExtractionError(Exception):
    """An extraction attempt failed; ``kind`` drives the user-facing message."""

    def __init__(self, kind: ExtractionErrorKind, message: str):
        self.kind = kind
        super().__init__(message)


def _status_code(exc: BaseException) -> Optional[int]:
    """HTTP status carried by a provider exception, if any."""
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _looks_like_bad_key(exc: BaseException) -> bool:
    # Gemini answers an invalid key with 400 INVALID_ARGUMENT
    return (
        isinstance(exc, google_exceptions.InvalidArgument)
        and "api key" in str(exc).lower()
    )


def classify_error(exc: BaseException) -> ExtractionError:
    """
    Normalize any exception raised by the extraction pipeline.

    Already-classified errors pass through unchanged.
    """
    if isinstance(exc, ExtractionError):
        return exc

    message = str(exc) or type(exc).__name__

    if isinstance(exc, (google_exceptions.ResourceExhausted, google_exceptions.TooManyRequests)):
        return ExtractionError(ExtractionErrorKind.RATE_LIMITED, message)

    if isinstance(exc, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
        return ExtractionError(ExtractionErrorKind.UNAUTHORIZED, message)

    if _looks_like_bad_key(exc):
        return ExtractionError(ExtractionErrorKind.UNAUTHORIZED, message)

    status = _status_code(exc)
    if status == RATE_LIMIT_STATUS:
        return ExtractionError(ExtractionErrorKind.RATE_LIMITED, message)
    if status in AUTH_STATUSES:
        return ExtractionError(ExtractionErrorKind.UNAUTHORIZED, message)

    if isinstance(exc, json.JSONDecodeError):
        return ExtractionError(ExtractionErrorKind.MALFORMED, message)

    return ExtractionError(ExtractionErrorKind.UNKNOWN, message)


QUOTA_MESSAGE = (
    "🚫 API Quota Exceeded!\n\n"
    "You've hit the free tier limit for Google Gemini API.\n\n"
    "To continue:\n"
    "1. Upgrade to a paid plan: https://ai.google.dev/pricing\n"
    "2. Or add a valid credit card to your Google Cloud account"
)

CREDENTIAL_MESSAGE = (
    "❌ API Key Error!\n\n"
    "Please check your GEMINI_API_KEY in the .env file is correct."
)

GENERIC_MESSAGE = "❌ Failed to process expense. Please try again.\n\nError: {error}"


def user_message_for(error: ExtractionError) -> str:
    """Turn a classified error into the alert shown to the user."""
    if error.kind == ExtractionErrorKind.RATE_LIMITED:
        return QUOTA_MESSAGE
    if error.kind == ExtractionErrorKind.UNAUTHORIZED:
        return CREDENTIAL_MESSAGE
    return GENERIC_MESSAGE.format(error=str(error) or "Unknown error")
