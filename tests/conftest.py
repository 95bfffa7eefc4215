"""
Shared fixtures: test doubles for the Gemini model and the speech backend.

No real API calls are made anywhere in the test suite.
"""

import asyncio
from datetime import date
from typing import Optional

import pytest

from expense_tracker.agents import ExpenseExtractionAgent
from expense_tracker.config import GeminiSettings
from expense_tracker.ledger import ExpenseLedger
from expense_tracker.orchestrator import ExpenseCaptureFlow
from expense_tracker.services.speech.interface import (
    MicrophonePermissionError,
    RecognitionBackend,
)


TODAY = date(2024, 12, 15)


class FakeResponse:
    """Mimics a Gemini response: ``.text`` may raise ValueError."""

    def __init__(self, text):
        self._text = text

    @property
    def text(self) -> str:
        if isinstance(self._text, Exception):
            raise self._text
        return self._text


class FakeGeminiModel:
    """Records prompts and answers with a canned text or exception."""

    def __init__(
        self,
        text: str = "{}",
        error: Optional[BaseException] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.text = text
        self.error = error
        self.gate = gate
        self.prompts: list[str] = []

    async def generate_content_async(self, prompt: str) -> FakeResponse:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return FakeResponse(self.text)


class FakeRecognitionBackend(RecognitionBackend):
    """Scriptable backend: tests push transcripts, errors and ends."""

    def __init__(self, available: bool = True, permission: bool = True):
        self.available = available
        self.permission = permission
        self.open_calls = 0
        self.close_calls = 0
        self._callbacks = None

    @property
    def language(self) -> str:
        return "en-IN"

    @property
    def session_open(self) -> bool:
        return self._callbacks is not None

    def is_available(self) -> bool:
        return self.available

    def request_permission(self) -> None:
        if not self.permission:
            raise MicrophonePermissionError("Permission denied by user")

    def open_session(self, on_final, on_error, on_end) -> None:
        self.open_calls += 1
        self._callbacks = (on_final, on_error, on_end)

    def close_session(self) -> None:
        self.close_calls += 1
        self._callbacks = None

    def emit_final(self, transcript: str) -> None:
        if self._callbacks:
            self._callbacks[0](transcript)

    def emit_error(self, error: Exception) -> None:
        if self._callbacks:
            self._callbacks[1](error)

    def emit_end(self) -> None:
        if self._callbacks:
            self._callbacks[2]()


@pytest.fixture
def gemini_settings() -> GeminiSettings:
    return GeminiSettings(api_key="test-api-key", model_name="gemini-test")


@pytest.fixture
def fake_model() -> FakeGeminiModel:
    return FakeGeminiModel(
        text=(
            '{"title": "Biryani", "amount": 100, "category": "Food", '
            '"description": "Chicken biryani for lunch", "date": "2024-12-14"}'
        )
    )


@pytest.fixture
def agent(fake_model, gemini_settings) -> ExpenseExtractionAgent:
    return ExpenseExtractionAgent(model=fake_model, settings=gemini_settings)


@pytest.fixture
def flow(agent) -> ExpenseCaptureFlow:
    return ExpenseCaptureFlow(agent=agent, ledger=ExpenseLedger())


@pytest.fixture
def backend() -> FakeRecognitionBackend:
    return FakeRecognitionBackend()
