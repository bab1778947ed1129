"""Speech recognition: platform backends and the recognition session."""

from turnkit.voice.recognition.base import (
    BENIGN_ERRORS,
    NO_SPEECH,
    RecognitionBackend,
    RecognitionListener,
    Recognizer,
)
from turnkit.voice.recognition.mock import MockRecognitionBackend, MockRecognizer
from turnkit.voice.recognition.session import RecognitionSession

__all__ = [
    "BENIGN_ERRORS",
    "NO_SPEECH",
    "MockRecognitionBackend",
    "MockRecognizer",
    "RecognitionBackend",
    "RecognitionListener",
    "RecognitionSession",
    "Recognizer",
]
