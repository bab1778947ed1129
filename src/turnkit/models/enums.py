"""All string enums for turnkit."""

from __future__ import annotations

from enum import StrEnum, unique


@unique
class RecognitionState(StrEnum):
    """Lifecycle state of a recognition session.

    Audio capture is physically active only in ``LISTENING``.
    """

    IDLE = "idle"
    STARTING = "starting"
    LISTENING = "listening"
    SUSPENDED = "suspended"
    ERROR_BACKOFF = "error_backoff"


@unique
class InputModality(StrEnum):
    TEXT = "text"
    VOICE = "voice"


@unique
class ErrorSource(StrEnum):
    """Component that produced a user-facing error."""

    RECOGNITION = "recognition"
    SUBMISSION = "submission"
    SYNTHESIS = "synthesis"


@unique
class SynthesisOutcome(StrEnum):
    """How a synthesis attempt finished."""

    COMPLETED = "completed"
    STOPPED = "stopped"
    PLAYBACK_ERROR = "playback_error"
    FAILED = "failed"
