"""Exception hierarchy for turnkit."""

from __future__ import annotations


class TurnKitError(Exception):
    """Base exception for all turnkit errors."""


class CapabilityUnavailableError(TurnKitError):
    """A runtime capability (microphone, recognizer, synthesizer) is missing.

    Permanent for the lifetime of the component that raised it.
    """


class RecognitionError(TurnKitError):
    """The recognition platform reported a failure."""

    def __init__(self, kind: str, message: str | None = None) -> None:
        super().__init__(message or kind)
        self.kind = kind


class SubmissionError(TurnKitError):
    """Submitting an utterance to the reasoning backend failed.

    Always retryable by the user; turnkit never retries on its own.
    """

    retryable = True

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class SynthesisError(TurnKitError):
    """A TTS provider could not produce audio."""


class PlaybackError(TurnKitError):
    """Audio output failed while playing synthesized speech."""
