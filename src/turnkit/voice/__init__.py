"""Voice support for turnkit (recognition, synthesis, audio output)."""

from __future__ import annotations

from turnkit.voice.base import (
    AudioContent,
    FinalCallback,
    InterimCallback,
    RecognitionErrorCallback,
    RecognitionOptions,
    RecognitionResultBatch,
    TranscriptSegment,
    Utterance,
)
from turnkit.voice.echo import EchoGuard, EchoGuardConfig
from turnkit.voice.events import (
    AssistantReplyEvent,
    EchoDiscardedEvent,
    InterimTranscriptEvent,
    RecognitionStateChangedEvent,
    SynthesisEndedEvent,
    SynthesisStartedEvent,
    TurnErrorEvent,
    TurnEvent,
    UtteranceAcceptedEvent,
)
from turnkit.voice.output import AudioOutput, MockAudioOutput, MockPlayback, PlaybackHandle
from turnkit.voice.recognition import (
    MockRecognitionBackend,
    MockRecognizer,
    RecognitionBackend,
    RecognitionListener,
    RecognitionSession,
    Recognizer,
)
from turnkit.voice.synthesis import SynthesisDispatcher
from turnkit.voice.text import normalize_text
from turnkit.voice.tts import MockTTSProvider, TTSProvider


def get_speech_recognition_backend() -> type:
    """Get SpeechRecognitionBackend class (requires SpeechRecognition, PyAudio)."""
    from turnkit.voice.recognition.speech_recognition import SpeechRecognitionBackend

    return SpeechRecognitionBackend


def get_speech_recognition_config() -> type:
    """Get SpeechRecognitionConfig class."""
    from turnkit.voice.recognition.speech_recognition import SpeechRecognitionConfig

    return SpeechRecognitionConfig


def get_elevenlabs_provider() -> type:
    """Get ElevenLabsTTSProvider class (requires httpx)."""
    from turnkit.voice.tts.elevenlabs import ElevenLabsTTSProvider

    return ElevenLabsTTSProvider


def get_elevenlabs_config() -> type:
    """Get ElevenLabsConfig class."""
    from turnkit.voice.tts.elevenlabs import ElevenLabsConfig

    return ElevenLabsConfig


def get_pyttsx3_provider() -> type:
    """Get Pyttsx3TTSProvider class (requires pyttsx3)."""
    from turnkit.voice.tts.pyttsx3 import Pyttsx3TTSProvider

    return Pyttsx3TTSProvider


def get_pyttsx3_config() -> type:
    """Get Pyttsx3TTSConfig class."""
    from turnkit.voice.tts.pyttsx3 import Pyttsx3TTSConfig

    return Pyttsx3TTSConfig


def get_sounddevice_output() -> type:
    """Get SoundDeviceOutput class (requires sounddevice, numpy)."""
    from turnkit.voice.output.sounddevice import SoundDeviceOutput

    return SoundDeviceOutput


__all__ = [
    # Models
    "AudioContent",
    "RecognitionOptions",
    "RecognitionResultBatch",
    "TranscriptSegment",
    "Utterance",
    # Callbacks
    "FinalCallback",
    "InterimCallback",
    "RecognitionErrorCallback",
    # Echo filtering
    "EchoGuard",
    "EchoGuardConfig",
    "normalize_text",
    # Events
    "AssistantReplyEvent",
    "EchoDiscardedEvent",
    "InterimTranscriptEvent",
    "RecognitionStateChangedEvent",
    "SynthesisEndedEvent",
    "SynthesisStartedEvent",
    "TurnErrorEvent",
    "TurnEvent",
    "UtteranceAcceptedEvent",
    # Recognition
    "MockRecognitionBackend",
    "MockRecognizer",
    "RecognitionBackend",
    "RecognitionListener",
    "RecognitionSession",
    "Recognizer",
    # Synthesis
    "MockTTSProvider",
    "SynthesisDispatcher",
    "TTSProvider",
    # Output
    "AudioOutput",
    "MockAudioOutput",
    "MockPlayback",
    "PlaybackHandle",
    # Lazy loaders
    "get_elevenlabs_config",
    "get_elevenlabs_provider",
    "get_pyttsx3_config",
    "get_pyttsx3_provider",
    "get_sounddevice_output",
    "get_speech_recognition_backend",
    "get_speech_recognition_config",
]
