"""turnkit - Pure async Python library for hands-free voice assistant turns."""

from turnkit._version import __version__
from turnkit.config import (
    COOLDOWN_SECONDS,
    DEFAULT_LANGUAGE,
    DEFAULT_MIN_CONFIDENCE,
    RESTART_DELAY_SECONDS,
    TurnKitConfig,
)
from turnkit.core.controller import SuspensionWindow, TurnController
from turnkit.core.errors import (
    CapabilityUnavailableError,
    PlaybackError,
    RecognitionError,
    SubmissionError,
    SynthesisError,
    TurnKitError,
)
from turnkit.models import (
    AssistantReply,
    ErrorSource,
    InputModality,
    RecognitionState,
    SubmitRequest,
    SubmitResult,
    SynthesisOutcome,
)
from turnkit.providers.reply import (
    MockReplyProvider,
    ReplyProvider,
    WebhookReplyConfig,
    WebhookReplyProvider,
)
from turnkit.voice import (
    AssistantReplyEvent,
    AudioContent,
    AudioOutput,
    EchoDiscardedEvent,
    EchoGuard,
    InterimTranscriptEvent,
    MockAudioOutput,
    MockRecognitionBackend,
    MockTTSProvider,
    PlaybackHandle,
    RecognitionBackend,
    RecognitionSession,
    RecognitionStateChangedEvent,
    SynthesisDispatcher,
    SynthesisEndedEvent,
    SynthesisStartedEvent,
    TTSProvider,
    TurnErrorEvent,
    TurnEvent,
    Utterance,
    UtteranceAcceptedEvent,
    normalize_text,
)

__all__ = [
    "__version__",
    # Config
    "COOLDOWN_SECONDS",
    "DEFAULT_LANGUAGE",
    "DEFAULT_MIN_CONFIDENCE",
    "RESTART_DELAY_SECONDS",
    "TurnKitConfig",
    # Controller
    "SuspensionWindow",
    "TurnController",
    # Errors
    "CapabilityUnavailableError",
    "PlaybackError",
    "RecognitionError",
    "SubmissionError",
    "SynthesisError",
    "TurnKitError",
    # Models
    "AssistantReply",
    "ErrorSource",
    "InputModality",
    "RecognitionState",
    "SubmitRequest",
    "SubmitResult",
    "SynthesisOutcome",
    # Reply providers
    "MockReplyProvider",
    "ReplyProvider",
    "WebhookReplyConfig",
    "WebhookReplyProvider",
    # Voice
    "AssistantReplyEvent",
    "AudioContent",
    "AudioOutput",
    "EchoDiscardedEvent",
    "EchoGuard",
    "InterimTranscriptEvent",
    "MockAudioOutput",
    "MockRecognitionBackend",
    "MockTTSProvider",
    "PlaybackHandle",
    "RecognitionBackend",
    "RecognitionSession",
    "RecognitionStateChangedEvent",
    "SynthesisDispatcher",
    "SynthesisEndedEvent",
    "SynthesisStartedEvent",
    "TTSProvider",
    "TurnErrorEvent",
    "TurnEvent",
    "Utterance",
    "UtteranceAcceptedEvent",
    "normalize_text",
]
