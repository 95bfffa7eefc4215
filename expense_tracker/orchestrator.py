"""
Main Orchestrator for Expense Tracker

Ties the components together and defines the capture flows:
1. AI text (typed text -> extract -> append)
2. Voice (final transcript -> extract -> append), wired via connect_voice
3. Manual entry (form fields -> append)

The orchestrator enforces the boundaries:
- Blank input never reaches the model
- Every extraction failure is caught here, classified, and turned into a
  user-facing message; nothing escapes to the UI as an exception
- The loading flag is always released, whatever happens
- Every step is audited
"""

import asyncio
import threading
from datetime import date
from typing import Any, Callable, Coroutine, Optional, TypeVar

from expense_tracker.agents import (
    ExpenseExtractionAgent,
    classify_error,
    create_gemini_model,
    user_message_for,
)
from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import get_settings
from expense_tracker.ledger import ExpenseLedger
from expense_tracker.models.expense import (
    CaptureOutcome,
    CaptureSource,
    ManualExpenseInput,
)
from expense_tracker.services.speech import GoogleSpeechBackend
from expense_tracker.voice import VoiceCapture


T = TypeVar("T")

_loop: Optional[asyncio.AbstractEventLoop] = None
_loop_lock = threading.Lock()


def _background_loop() -> asyncio.AbstractEventLoop:
    global _loop
    with _loop_lock:
        if _loop is None or _loop.is_closed():
            _loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=_loop.run_forever,
                name="expense-tracker-loop",
                daemon=True,
            )
            thread.start()
        return _loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine from synchronous code (Streamlit callbacks) and wait.

    All coroutines share one long-lived event loop so the Gemini async
    client stays bound to a single loop.
    """
    future = asyncio.run_coroutine_threadsafe(coro, _background_loop())
    return future.result()


class ExpenseCaptureFlow:
    """
    Orchestrates capture for one browser session.

    Flow for text and voice:
    1. Reject blank input (no network call, nothing appended)
    2. Extract with the agent (one Gemini call, no retry)
    3. On failure: classify, audit, return a user message
    4. On success: append to the session ledger

    Only AI text submissions respect the ``loading`` gate; a voice
    transcript may be extracted while a text submission is in flight.
    """

    def __init__(
        self,
        agent: Optional[ExpenseExtractionAgent] = None,
        ledger: Optional[ExpenseLedger] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._agent = agent or ExpenseExtractionAgent()
        self._ledger = ledger if ledger is not None else ExpenseLedger()
        self._audit_logger = audit_logger
        self._loading = False

    @property
    def ledger(self) -> ExpenseLedger:
        return self._ledger

    @property
    def loading(self) -> bool:
        """True while an AI text submission is outstanding."""
        return self._loading

    async def submit_text(
        self,
        text: Optional[str],
        today: Optional[date] = None,
    ) -> CaptureOutcome:
        """
        Add an expense from typed free-form text.

        Ignored (no call, nothing appended) when the text is blank or
        another text submission is still in flight.
        """
        if not text or not text.strip():
            self._ignore(CaptureSource.TEXT, "empty input")
            return CaptureOutcome.skipped()

        if self._loading:
            self._ignore(CaptureSource.TEXT, "submission already in flight")
            return CaptureOutcome.skipped()

        self._loading = True
        try:
            return await self._extract_and_append(text, CaptureSource.TEXT, today)
        finally:
            self._loading = False

    async def submit_transcript(
        self,
        transcript: Optional[str],
        today: Optional[date] = None,
    ) -> CaptureOutcome:
        """Add an expense from a final voice transcript."""
        if not transcript or not transcript.strip():
            self._ignore(CaptureSource.VOICE, "empty transcript")
            return CaptureOutcome.skipped()

        return await self._extract_and_append(transcript, CaptureSource.VOICE, today)

    def add_manual(self, entry: ManualExpenseInput) -> CaptureOutcome:
        """Add an expense typed into the manual form."""
        record = self._ledger.append(entry.to_record())
        if self._audit_logger:
            self._audit_logger.log_expense_added(
                title=record.title,
                amount=record.amount,
                source=CaptureSource.MANUAL.value,
            )
        return CaptureOutcome.added(record)

    def _ignore(self, source: CaptureSource, reason: str) -> None:
        if self._audit_logger:
            self._audit_logger.log_submission_ignored(
                source=source.value,
                reason=reason,
            )

    async def _extract_and_append(
        self,
        text: str,
        source: CaptureSource,
        today: Optional[date],
    ) -> CaptureOutcome:
        correlation_id = create_correlation_id()

        if self._audit_logger:
            self._audit_logger.log_extraction_requested(
                source=source.value,
                text_length=len(text),
                correlation_id=correlation_id,
            )

        try:
            record = await self._agent.extract(text, today)
        except Exception as e:
            error = classify_error(e)
            if self._audit_logger:
                self._audit_logger.log_extraction_failed(
                    kind=error.kind.value,
                    error_message=str(error),
                    correlation_id=correlation_id,
                )
            return CaptureOutcome.failed(error.kind, user_message_for(error))

        if self._audit_logger:
            self._audit_logger.log_extraction_succeeded(
                model_name=self._agent.model_name,
                correlation_id=correlation_id,
            )

        self._ledger.append(record)

        if self._audit_logger:
            self._audit_logger.log_expense_added(
                title=record.title,
                amount=record.amount,
                source=source.value,
                correlation_id=correlation_id,
            )

        return CaptureOutcome.added(record)


def connect_voice(
    voice: VoiceCapture,
    flow: ExpenseCaptureFlow,
    on_outcome: Optional[Callable[[CaptureOutcome], None]] = None,
) -> Callable[[], None]:
    """
    Send every final transcript from ``voice`` straight into ``flow``.

    Returns the unsubscribe function.
    """
    def handle_transcript(transcript: str) -> None:
        outcome = run_async(flow.submit_transcript(transcript))
        if on_outcome:
            on_outcome(outcome)

    return voice.subscribe(handle_transcript)


def create_app_components(
    model: Optional[Any] = None,
    recorder_supported: bool = True,
) -> tuple[ExpenseCaptureFlow, VoiceCapture]:
    """
    Factory function to create the components of one browser session.

    Args:
        model: Shared Gemini model. Pass the process-wide instance so that
               sessions don't each configure their own client.
        recorder_supported: Whether the browser offers audio recording.

    Returns:
        (capture_flow, voice_capture)
    """
    settings = get_settings()
    audit_logger = AuditLogger()

    agent = ExpenseExtractionAgent(
        model=model if model is not None else create_gemini_model(settings.gemini),
        settings=settings.gemini,
        default_title=settings.app.default_title,
    )
    flow = ExpenseCaptureFlow(
        agent=agent,
        ledger=ExpenseLedger(),
        audit_logger=audit_logger,
    )

    backend = GoogleSpeechBackend(
        settings=settings.speech,
        recorder_supported=recorder_supported,
    )
    voice = VoiceCapture(backend, audit_logger=audit_logger)

    return flow, voice
