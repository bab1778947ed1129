"""Data models shared across turnkit."""

from turnkit.models.enums import ErrorSource, InputModality, RecognitionState, SynthesisOutcome
from turnkit.models.turn import AssistantReply, SubmitRequest, SubmitResult

__all__ = [
    "AssistantReply",
    "ErrorSource",
    "InputModality",
    "RecognitionState",
    "SubmitRequest",
    "SubmitResult",
    "SynthesisOutcome",
]
