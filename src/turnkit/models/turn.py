"""Submit-utterance contract models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from turnkit.models.enums import InputModality


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SubmitRequest(BaseModel):
    """An utterance handed to the reasoning backend."""

    text: str
    modality: InputModality = InputModality.TEXT
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("text")
    @classmethod
    def _validate_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("text must not be empty")
        return v


class SubmitResult(BaseModel):
    """Reply from the reasoning backend."""

    reply_text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class AssistantReply(BaseModel):
    """Most recent assistant reply, used for echo filtering."""

    text: str
    timestamp: datetime = Field(default_factory=_utcnow)
