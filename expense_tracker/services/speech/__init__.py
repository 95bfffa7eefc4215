"""
Speech Services Package

Provides the recognition backend interface and the SpeechRecognition-based
implementation used by the Streamlit app.
"""

from expense_tracker.services.speech.interface import (
    MicrophonePermissionError,
    RecognitionBackend,
    RecognitionFailedError,
    SpeechError,
    SpeechUnavailableError,
)
from expense_tracker.services.speech.google_speech import GoogleSpeechBackend

__all__ = [
    # Interface
    "RecognitionBackend",
    # Exceptions
    "MicrophonePermissionError",
    "RecognitionFailedError",
    "SpeechError",
    "SpeechUnavailableError",
    # Implementation
    "GoogleSpeechBackend",
]
