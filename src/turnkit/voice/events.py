"""Turn events delivered to the user-facing layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from turnkit.models.enums import ErrorSource, InputModality, RecognitionState, SynthesisOutcome


def _utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class InterimTranscriptEvent:
    """Live transcription update for display.

    Never submitted; superseded by the next update.
    """

    text: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class RecognitionStateChangedEvent:
    """The recognition session moved to a new state."""

    old_state: RecognitionState
    new_state: RecognitionState
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class UtteranceAcceptedEvent:
    """An utterance passed filtering and is being submitted."""

    text: str
    modality: InputModality
    confidence: float | None = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class EchoDiscardedEvent:
    """A final transcript was dropped as an echo of the last reply.

    Expected steady-state behaviour, not an error.
    """

    text: str
    last_reply: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class AssistantReplyEvent:
    """The reasoning backend answered."""

    text: str
    in_reply_to: str
    modality: InputModality
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SynthesisStartedEvent:
    """Audio for *text* started playing."""

    text: str
    provider: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SynthesisEndedEvent:
    """A synthesis attempt finished.

    ``provider`` is None when no provider produced audio.
    """

    text: str
    outcome: SynthesisOutcome
    provider: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class TurnErrorEvent:
    """A transient, user-visible error."""

    source: ErrorSource
    message: str
    retryable: bool = False
    timestamp: datetime = field(default_factory=_utcnow)


TurnEvent = (
    InterimTranscriptEvent
    | RecognitionStateChangedEvent
    | UtteranceAcceptedEvent
    | EchoDiscardedEvent
    | AssistantReplyEvent
    | SynthesisStartedEvent
    | SynthesisEndedEvent
    | TurnErrorEvent
)
