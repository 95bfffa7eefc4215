"""
Speech Recognition using the SpeechRecognition library

Audio is recorded in the browser (one WAV clip per utterance) and sent here.
Each clip is transcribed with Google's web speech API via
``Recognizer.recognize_google``, which returns only the final, most likely
alternative in the configured language.

Mapping onto the session callbacks:
- transcript recognized        -> on_final
- nothing intelligible heard   -> on_end (a normal end, not an error)
- service/audio failure        -> on_error
"""

import io
from typing import Optional

import speech_recognition as sr
import structlog

from expense_tracker.config import SpeechSettings, get_settings
from expense_tracker.services.speech.interface import (
    EndCallback,
    ErrorCallback,
    FinalCallback,
    MicrophonePermissionError,
    RecognitionBackend,
    RecognitionFailedError,
)


class GoogleSpeechBackend(RecognitionBackend):
    """
    Clip-based recognition backend.

    The host UI owns the recorder (and so the browser's microphone prompt);
    it passes ``recorder_supported`` to say whether one is offered and hands
    finished clips to ``feed_clip``.
    """

    def __init__(
        self,
        settings: Optional[SpeechSettings] = None,
        recognizer: Optional[sr.Recognizer] = None,
        recorder_supported: bool = True,
    ):
        self._settings = settings or get_settings().speech
        self._recognizer = recognizer or sr.Recognizer()
        self._recorder_supported = recorder_supported
        self._on_final: Optional[FinalCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._on_end: Optional[EndCallback] = None
        self._logger = structlog.get_logger("expense_tracker.speech")

    @property
    def language(self) -> str:
        return self._settings.language

    @property
    def session_open(self) -> bool:
        return self._on_final is not None

    def is_available(self) -> bool:
        if not self._settings.enabled or not self._recorder_supported:
            return False
        try:
            # recognize_google uploads FLAC; without a converter nothing works
            sr.get_flac_converter()
        except OSError:
            return False
        return True

    def request_permission(self) -> None:
        # The browser asks for the microphone when recording starts; here we
        # can only refuse when no recorder is offered at all.
        if not self._recorder_supported:
            raise MicrophonePermissionError(
                "This browser does not offer audio recording"
            )

    def open_session(
        self,
        on_final: FinalCallback,
        on_error: ErrorCallback,
        on_end: EndCallback,
    ) -> None:
        self._on_final = on_final
        self._on_error = on_error
        self._on_end = on_end

    def close_session(self) -> None:
        self._on_final = None
        self._on_error = None
        self._on_end = None

    def transcribe(self, audio_bytes: bytes) -> str:
        """
        Transcribe one WAV clip.

        Raises:
            sr.UnknownValueError: If no speech could be recognized
            RecognitionFailedError: If the audio or the service failed
        """
        try:
            with sr.AudioFile(io.BytesIO(audio_bytes)) as source:
                audio = self._recognizer.record(source)
        except (ValueError, EOFError, OSError) as e:
            # OSError: non-WAV input needs the FLAC converter, which is missing
            raise RecognitionFailedError(f"Unreadable audio clip: {e}") from e

        try:
            return self._recognizer.recognize_google(audio, language=self.language)
        except sr.RequestError as e:
            raise RecognitionFailedError(f"Could not request results: {e}") from e

    def feed_clip(self, audio_bytes: bytes) -> bool:
        """
        Recognize a recorded clip and report it to the open session.

        Returns False (and does nothing) when no session is open.
        """
        if not self.session_open:
            return False

        on_final, on_error, on_end = self._on_final, self._on_error, self._on_end

        try:
            transcript = self.transcribe(audio_bytes)
        except sr.UnknownValueError:
            self._logger.info("speech_not_understood", language=self.language)
            on_end()
            return True
        except RecognitionFailedError as e:
            self._logger.warning("speech_recognition_failed", error=str(e))
            on_error(e)
            return True

        transcript = (transcript or "").strip()
        if transcript:
            on_final(transcript)
        else:
            on_end()
        return True
