"""Services package."""

from expense_tracker.services.speech import (
    GoogleSpeechBackend,
    MicrophonePermissionError,
    RecognitionBackend,
    RecognitionFailedError,
    SpeechError,
    SpeechUnavailableError,
)

__all__ = [
    "GoogleSpeechBackend",
    "MicrophonePermissionError",
    "RecognitionBackend",
    "RecognitionFailedError",
    "SpeechError",
    "SpeechUnavailableError",
]
