"""Speech recognition platform ABCs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from turnkit.voice.base import RecognitionOptions, RecognitionResultBatch

# Error kinds reported by recognizers.
NO_SPEECH = "no-speech"
AUDIO_CAPTURE = "audio-capture"
NETWORK = "network"
NOT_ALLOWED = "not-allowed"
NOT_SUPPORTED = "not-supported"
START_FAILED = "start-failed"

BENIGN_ERRORS = frozenset({NO_SPEECH})


class RecognitionListener(Protocol):
    """Receives platform events. All methods run on the event loop thread."""

    def handle_start(self) -> None: ...

    def handle_result(self, batch: RecognitionResultBatch) -> None: ...

    def handle_error(self, kind: str) -> None: ...

    def handle_end(self) -> None: ...


class Recognizer(ABC):
    """A single platform recognition object.

    ``start()`` and ``stop()`` only *request* the transition; the platform
    confirms it later through ``handle_start`` / ``handle_end`` on the
    listener. Every started recognizer eventually delivers ``handle_end``,
    including after errors.
    """

    @abstractmethod
    async def start(self) -> None:
        """Request audio capture. Raises if the platform refuses."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Request capture to stop. No-op if not capturing."""
        ...

    async def close(self) -> None:  # noqa: B027
        """Release the platform object. Override in subclasses if needed."""


class RecognitionBackend(ABC):
    """Factory for platform recognizers (microphone + recognition engine)."""

    @property
    def name(self) -> str:
        """Backend name (e.g. 'speech_recognition')."""
        return self.__class__.__name__

    @property
    @abstractmethod
    def is_supported(self) -> bool:
        """Whether the runtime can recognize speech at all.

        A False answer is permanent for the life of the backend.
        """
        ...

    @abstractmethod
    def create_recognizer(
        self, options: RecognitionOptions, listener: RecognitionListener
    ) -> Recognizer:
        """Create a recognizer bound to *options* and *listener*."""
        ...

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses if needed."""
