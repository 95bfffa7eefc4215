"""
Speech Recognition Interface

Abstract interface for speech-to-text backends. VoiceCapture only talks to
this interface, so the platform capability (browser recorder, local
microphone, a scripted test double) is swappable.

A backend delivers recognition results through three callbacks handed to
``open_session``:
- ``on_final(transcript)``: a completed utterance (never interim text)
- ``on_error(exc)``: recognition failed
- ``on_end()``: the session ended normally without a transcript
"""

from abc import ABC, abstractmethod
from typing import Callable


FinalCallback = Callable[[str], None]
ErrorCallback = Callable[[Exception], None]
EndCallback = Callable[[], None]


class RecognitionBackend(ABC):
    """
    Abstract interface for speech recognition.

    Implementations must only report final results with a single
    alternative, in the language they were configured with.
    """

    @property
    @abstractmethod
    def language(self) -> str:
        """Locale used for recognition (e.g. "en-IN")."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Whether speech recognition can work at all on this platform.

        Checked before every start; False disables voice capture.
        """
        pass

    @abstractmethod
    def request_permission(self) -> None:
        """
        Ask for microphone access.

        Raises:
            MicrophonePermissionError: If access is denied or no
                microphone can be used
        """
        pass

    @abstractmethod
    def open_session(
        self,
        on_final: FinalCallback,
        on_error: ErrorCallback,
        on_end: EndCallback,
    ) -> None:
        """Begin delivering recognition results to the given callbacks."""
        pass

    @abstractmethod
    def close_session(self) -> None:
        """
        Stop delivering results.

        Must be safe to call when no session is open.
        """
        pass


class SpeechError(Exception):
    """Base exception for speech capture."""
    pass


class SpeechUnavailableError(SpeechError):
    """Speech recognition is not supported on this platform."""
    pass


class MicrophonePermissionError(SpeechError):
    """Microphone access was denied or is unavailable."""
    pass


class RecognitionFailedError(SpeechError):
    """The recognition service could not process the audio."""
    pass
