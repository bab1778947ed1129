"""Base models for voice support."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TranscriptSegment:
    """One recognizer hypothesis within a result batch."""

    text: str
    confidence: float = 0.0
    is_final: bool = False


@dataclass(frozen=True)
class RecognitionResultBatch:
    """A result event from the recognition platform.

    ``segments`` holds every segment of the current platform session;
    ``result_index`` is the first one that changed in this event.
    """

    segments: tuple[TranscriptSegment, ...]
    result_index: int = 0

    @property
    def changed(self) -> tuple[TranscriptSegment, ...]:
        return self.segments[self.result_index :]


@dataclass(frozen=True)
class Utterance:
    """A unit of transcribed speech considered for submission."""

    text: str
    confidence: float
    is_final: bool = True


@dataclass(frozen=True)
class RecognitionOptions:
    """Options a platform recognizer is created with.

    Changing any of them requires tearing down the recognizer.
    """

    language: str = "pt-BR"
    continuous: bool = True
    interim_results: bool = True
    max_alternatives: int = 1


@dataclass
class AudioContent:
    """Synthesized speech ready for playback."""

    data: bytes
    sample_rate: int = 22050
    channels: int = 1
    format: str = "pcm_s16le"
    transcript: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        frame_bytes = 2 * self.channels
        if not self.sample_rate or not frame_bytes:
            return 0.0
        return len(self.data) / frame_bytes / self.sample_rate


# Callback aliases. Callbacks may be plain functions or coroutine functions.
InterimCallback = Callable[[str], Any]
"""Live transcript (final accumulator + current interim text)."""

FinalCallback = Callable[[Utterance], Any]
"""A final utterance that passed the confidence and length gate."""

RecognitionErrorCallback = Callable[[str], Any]
"""A user-visible recognition error kind (``no-speech`` is never sent)."""
