"""
AI Expense Extraction Agent

Turns a free-form description ("100 rupees biryani") into an ExpenseRecord:

    prompt -> Gemini -> strip code fences -> json.loads -> normalize

The LLM is a TRANSLATOR only. Whatever it returns is treated as untrusted:
every field of the resulting record is filled in with a fallback when the
model leaves it out or returns something unusable.

Prompt construction, cleanup and normalization are plain functions so they
can be exercised without a model.
"""

import json
import math
import re
from datetime import date
from typing import Any, Optional

import google.generativeai as genai
import structlog

from expense_tracker.agents.errors import ExtractionError, classify_error
from expense_tracker.config import GeminiSettings, get_settings
from expense_tracker.models.expense import ExpenseRecord, ExtractionErrorKind


DEFAULT_TITLE = "Expense"

_FENCE_OPEN = re.compile(r"```json", re.IGNORECASE)
_FENCE = re.compile(r"```")
# Leading number of a string, as in "100 rupees" or "  -12.5e1abc"
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def build_prompt(text: str, today: date) -> str:
    """
    Build the extraction instruction for one submission.

    Raises ValueError for blank input; callers are expected to check first
    so that no network call is made.
    """
    if not text or not text.strip():
        raise ValueError("Cannot build an extraction prompt from empty text")

    return f"""You are an expense extraction assistant.
Extract details in JSON format from the text: "{text.strip()}".
Include:
- title (short name of expense)
- amount (in number)
- category (like Food, Travel, etc.)
- description (short summary)
- date (use current date: {today.isoformat()} if the text does not mention one)

Return ONLY valid JSON, no additional text."""


def clean_response(raw: Optional[str]) -> str:
    """Remove Markdown code fences (```json ... ```) and surrounding whitespace."""
    text = raw or ""
    text = _FENCE_OPEN.sub("", text)
    text = _FENCE.sub("", text)
    return text.strip()


def decode_response(raw: Optional[str]) -> dict:
    """
    Decode the model output as a JSON object.

    Raises ExtractionError(MALFORMED) for invalid JSON or a non-object value.
    There is no best-effort partial decode.
    """
    cleaned = clean_response(raw)
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        # JSONDecodeError, or an integer literal past the digit limit
        raise ExtractionError(
            ExtractionErrorKind.MALFORMED,
            f"Model returned invalid JSON: {e}",
        ) from e

    if not isinstance(data, dict):
        raise ExtractionError(
            ExtractionErrorKind.MALFORMED,
            f"Model returned {type(data).__name__}, expected a JSON object",
        )
    return data


def _text_or_none(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (bool, dict, list)):
        return None
    text = str(value).strip()
    return text or None


def coerce_amount(value: Any) -> float:
    """
    Best-effort number from an untrusted value.

    Numbers pass through; strings use their leading numeric prefix
    ("100 rupees" -> 100.0). Everything else, and NaN/infinity or overflow, is 0.
    """
    if isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        match = _NUMBER_PREFIX.match(value)
        if not match:
            return 0.0
        try:
            number = float(match.group())
        except (ValueError, OverflowError):
            return 0.0
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def normalize_fields(
    data: dict,
    today: date,
    default_title: str = DEFAULT_TITLE,
) -> ExpenseRecord:
    """
    Build a fully populated ExpenseRecord from decoded model output.

    Never raises for any dict input.
    """
    title = _text_or_none(data.get("title")) or default_title
    description = (
        _text_or_none(data.get("description"))
        or _text_or_none(data.get("category"))
        or ""
    )
    amount = coerce_amount(data.get("amount"))
    expense_date = _text_or_none(data.get("date")) or today.isoformat()

    return ExpenseRecord(
        title=title,
        description=description,
        amount=amount,
        date=expense_date,
    )


def create_gemini_model(settings: Optional[GeminiSettings] = None) -> "genai.GenerativeModel":
    """
    Create the Gemini model used for extraction.

    Call once per process and share the result; a missing API key is not
    an error here.
    """
    settings = settings or get_settings().gemini
    if settings.api_key:
        genai.configure(api_key=settings.api_key)
    return genai.GenerativeModel(
        model_name=settings.model_name,
        generation_config={
            "temperature": settings.temperature,
            "max_output_tokens": settings.max_tokens,
        }
    )


class ExpenseExtractionAgent:
    """
    AI agent that extracts one expense from free-form text.

    RESPONSIBILITIES:
    - Build the prompt
    - Make exactly one Gemini call (no retry)
    - Classify any failure into an ExtractionError
    - Normalize the decoded object into an ExpenseRecord

    BOUNDARIES:
    - NEVER appends to the expense list (the flow does)
    - NEVER guesses a record when the call or decode fails
    """

    def __init__(
        self,
        model: Optional[Any] = None,
        settings: Optional[GeminiSettings] = None,
        default_title: str = DEFAULT_TITLE,
    ):
        """
        Args:
            model: Shared Gemini model (or a test double exposing
                   ``generate_content_async``). Created from settings if None.
            settings: Gemini settings; read from the environment if None.
            default_title: Title used when the model returns none.
        """
        self._settings = settings or get_settings().gemini
        self._model = model if model is not None else create_gemini_model(self._settings)
        self._default_title = default_title
        self._logger = structlog.get_logger("expense_tracker.agents")

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    async def _generate(self, prompt: str) -> str:
        """One provider call; returns the single generation's text."""
        if not self._settings.api_key:
            raise ExtractionError(
                ExtractionErrorKind.UNAUTHORIZED,
                "GEMINI_API_KEY is not set",
            )

        try:
            response = await self._model.generate_content_async(prompt)
        except Exception as e:
            raise classify_error(e) from e

        try:
            # .text raises ValueError when the response has no usable candidate
            text = response.text
        except ValueError as e:
            raise ExtractionError(
                ExtractionErrorKind.MALFORMED,
                f"Model returned no text: {e}",
            ) from e

        self._logger.debug("raw_model_response", content=text)
        return text

    async def extract(self, text: str, today: Optional[date] = None) -> ExpenseRecord:
        """
        Extract an expense from free-form text.

        Raises:
            ValueError: If text is blank (no call is made)
            ExtractionError: For every provider or decode failure
        """
        today = today or date.today()
        prompt = build_prompt(text, today)

        raw = await self._generate(prompt)
        data = decode_response(raw)
        self._logger.debug("parsed_model_response", data=data)

        return normalize_fields(data, today, self._default_title)
