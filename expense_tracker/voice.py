"""
Voice Capture

Explicit state machine over a RecognitionBackend:

    IDLE --start()--> LISTENING --(final | error | end | stop())--> IDLE

LISTENING is entered only after the backend is available and microphone
permission is granted. Each final transcript is handed to every subscriber
exactly once, straight away, with no confirmation step.
"""

from enum import Enum
from typing import Callable, Optional

from expense_tracker.audit import AuditLogger
from expense_tracker.services.speech.interface import (
    MicrophonePermissionError,
    RecognitionBackend,
    SpeechUnavailableError,
)


TranscriptCallback = Callable[[str], None]


class VoiceState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


class VoiceCapture:
    """Start/stop voice capture and publish final transcripts."""

    def __init__(
        self,
        backend: RecognitionBackend,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._audit_logger = audit_logger
        self._state = VoiceState.IDLE
        self._subscribers: list[TranscriptCallback] = []
        self.last_error: Optional[Exception] = None

    @property
    def state(self) -> VoiceState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state == VoiceState.LISTENING

    @property
    def backend(self) -> RecognitionBackend:
        return self._backend

    def subscribe(self, callback: TranscriptCallback) -> Callable[[], None]:
        """
        Register a callback for final transcripts.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def start(self) -> None:
        """
        Begin listening.

        Raises:
            SpeechUnavailableError: Recognition is not supported here
            MicrophonePermissionError: Microphone access was refused
        """
        if self._state == VoiceState.LISTENING:
            return

        self.last_error = None

        if not self._backend.is_available():
            error = SpeechUnavailableError(
                "Speech recognition is not supported in this browser"
            )
            if self._audit_logger:
                self._audit_logger.log_speech_unavailable(str(error))
            raise error

        try:
            self._backend.request_permission()
        except MicrophonePermissionError as e:
            if self._audit_logger:
                self._audit_logger.log_microphone_denied(str(e))
            raise

        self._backend.open_session(
            on_final=self._handle_final,
            on_error=self._handle_error,
            on_end=self._handle_end,
        )
        self._state = VoiceState.LISTENING

        if self._audit_logger:
            self._audit_logger.log_voice_started(self._backend.language)

    def stop(self) -> None:
        """Stop listening. A no-op when already idle."""
        if self._state == VoiceState.IDLE:
            return
        self._finish("stopped")

    def _finish(self, reason: str) -> None:
        self._state = VoiceState.IDLE
        self._backend.close_session()
        if self._audit_logger:
            self._audit_logger.log_voice_stopped(reason)

    def _handle_final(self, transcript: str) -> None:
        if self._state != VoiceState.LISTENING:
            return

        self._finish("final_result")

        text = transcript.strip()
        if not text:
            return

        if self._audit_logger:
            self._audit_logger.log_voice_transcript(len(text))

        for callback in list(self._subscribers):
            callback(text)

    def _handle_error(self, error: Exception) -> None:
        if self._state != VoiceState.LISTENING:
            return

        self.last_error = error
        if self._audit_logger:
            self._audit_logger.log_voice_error(str(error))
        self._finish("error")

    def _handle_end(self) -> None:
        if self._state != VoiceState.LISTENING:
            return
        self._finish("ended")
