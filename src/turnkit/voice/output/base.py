"""Audio output ABCs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from turnkit.voice.base import AudioContent


class PlaybackHandle(ABC):
    """Exclusive claim on the speaker for one piece of audio.

    Acquired with :meth:`AudioOutput.open`, played once with :meth:`play`.
    """

    @abstractmethod
    async def play(self) -> bool:
        """Play to completion.

        Returns:
            True if playback finished naturally, False if :meth:`stop`
            interrupted it.

        Raises:
            PlaybackError: The output device failed.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop playback and release the device. Idempotent."""
        ...

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True from acquisition until playback ends or is stopped."""
        ...


class AudioOutput(ABC):
    """Speaker (or other sink) for synthesized speech."""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def open(self, audio: AudioContent) -> PlaybackHandle:
        """Acquire a playback handle for *audio* without starting it.

        Raises:
            PlaybackError: The audio cannot be played on this output.
        """
        ...

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses if needed."""
