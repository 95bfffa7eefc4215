"""
Tests for the VoiceCapture state machine using a scripted backend.
"""

from unittest.mock import MagicMock

import pytest

from conftest import FakeRecognitionBackend
from expense_tracker.audit import AuditLogger
from expense_tracker.services.speech import (
    MicrophonePermissionError,
    RecognitionFailedError,
    SpeechUnavailableError,
)
from expense_tracker.voice import VoiceCapture, VoiceState


@pytest.fixture
def voice(backend) -> VoiceCapture:
    return VoiceCapture(backend)


class TestStart:

    def test_starts_idle(self, voice):
        assert voice.state == VoiceState.IDLE
        assert voice.is_listening is False

    def test_start_enters_listening(self, voice, backend):
        voice.start()
        assert voice.state == VoiceState.LISTENING
        assert backend.session_open
        assert backend.open_calls == 1

    def test_start_twice_is_a_no_op(self, voice, backend):
        voice.start()
        voice.start()
        assert backend.open_calls == 1

    def test_unavailable_backend_raises_and_stays_idle(self):
        backend = FakeRecognitionBackend(available=False)
        voice = VoiceCapture(backend)

        with pytest.raises(SpeechUnavailableError):
            voice.start()

        assert voice.state == VoiceState.IDLE
        assert backend.open_calls == 0

    def test_permission_denied_raises_and_stays_idle(self):
        backend = FakeRecognitionBackend(permission=False)
        audit_logger = MagicMock(spec=AuditLogger)
        voice = VoiceCapture(backend, audit_logger=audit_logger)

        with pytest.raises(MicrophonePermissionError):
            voice.start()

        assert voice.state == VoiceState.IDLE
        assert backend.open_calls == 0
        audit_logger.log_microphone_denied.assert_called_once()


class TestStop:

    def test_stop_while_idle_is_a_no_op(self, voice, backend):
        voice.stop()
        voice.stop()
        assert voice.state == VoiceState.IDLE
        assert backend.close_calls == 0

    def test_stop_returns_to_idle(self, voice, backend):
        voice.start()
        voice.stop()
        assert voice.state == VoiceState.IDLE
        assert backend.close_calls == 1

    def test_stop_after_stop(self, voice, backend):
        voice.start()
        voice.stop()
        voice.stop()
        assert backend.close_calls == 1


class TestResults:

    def test_final_transcript_reaches_subscriber_once(self, voice, backend):
        received = []
        voice.subscribe(received.append)

        voice.start()
        backend.emit_final("  50 rupees chai  ")

        assert received == ["50 rupees chai"]
        assert voice.state == VoiceState.IDLE
        assert not backend.session_open

    def test_every_subscriber_is_called(self, voice, backend):
        first, second = [], []
        voice.subscribe(first.append)
        voice.subscribe(second.append)

        voice.start()
        backend.emit_final("bus 30")

        assert first == ["bus 30"]
        assert second == ["bus 30"]

    def test_results_after_stop_are_dropped(self, voice, backend):
        received = []
        voice.subscribe(received.append)
        voice.start()
        on_final = backend._callbacks[0]
        voice.stop()

        on_final("late transcript")

        assert received == []

    def test_blank_transcript_is_not_published(self, voice, backend):
        received = []
        voice.subscribe(received.append)
        voice.start()
        backend.emit_final("   ")
        assert received == []
        assert voice.state == VoiceState.IDLE

    def test_unsubscribe(self, voice, backend):
        received = []
        unsubscribe = voice.subscribe(received.append)
        unsubscribe()
        unsubscribe()

        voice.start()
        backend.emit_final("bus 30")

        assert received == []

    def test_error_returns_to_idle_and_is_remembered(self, voice, backend):
        voice.start()
        error = RecognitionFailedError("network down")
        backend.emit_error(error)

        assert voice.state == VoiceState.IDLE
        assert voice.last_error is error

    def test_natural_end_returns_to_idle_without_error(self, voice, backend):
        voice.start()
        backend.emit_end()

        assert voice.state == VoiceState.IDLE
        assert voice.last_error is None

    def test_restart_clears_last_error(self, voice, backend):
        voice.start()
        backend.emit_error(RecognitionFailedError("network down"))
        voice.start()

        assert voice.last_error is None
        assert voice.state == VoiceState.LISTENING
