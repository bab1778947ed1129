"""Text-to-speech provider ABC."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from turnkit.voice.base import AudioContent


class TTSProvider(ABC):
    """Text-to-speech provider.

    Providers are tried in order by the synthesis dispatcher. A provider
    signals failure by raising: :class:`~turnkit.core.errors.SynthesisError`
    for a failed attempt, or
    :class:`~turnkit.core.errors.CapabilityUnavailableError` when it can never
    work in this runtime.
    """

    @property
    def name(self) -> str:
        """Provider name (e.g. 'elevenlabs', 'pyttsx3')."""
        return self.__class__.__name__

    @property
    def default_voice(self) -> str | None:
        """Default voice ID. Override in subclasses."""
        return None

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        *,
        voice: str | None = None,
        language: str | None = None,
    ) -> AudioContent:
        """Synthesize text to audio.

        Args:
            text: Text to synthesize.
            voice: Voice ID (uses default_voice if not specified).
            language: Language hint for providers that pick voices by locale.

        Returns:
            AudioContent with PCM audio.
        """
        ...

    async def warmup(self) -> None:  # noqa: B027
        """Pre-load engines so the first call is fast. Override in subclasses."""

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses if needed."""
