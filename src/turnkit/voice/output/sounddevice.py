"""Speaker output through sounddevice (PortAudio).

Requires the ``local-audio`` optional dependency::

    pip install turnkit[local-audio]
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from turnkit.core.errors import PlaybackError
from turnkit.voice.output.base import AudioOutput, PlaybackHandle

if TYPE_CHECKING:
    from turnkit.voice.base import AudioContent

logger = logging.getLogger("turnkit.voice.output.sounddevice")


def _import_sounddevice() -> Any:
    """Import sounddevice, raising a clear error if missing."""
    try:
        import sounddevice as _sd

        return _sd
    except ImportError as exc:
        raise ImportError(
            "sounddevice is required for SoundDeviceOutput. "
            "Install it with: pip install turnkit[local-audio]"
        ) from exc


class SoundDevicePlayback(PlaybackHandle):
    """One ``sd.play()`` call on the default (or configured) output device."""

    def __init__(self, sd: Any, samples: Any, sample_rate: int, device: int | str | None) -> None:
        self._sd = sd
        self._samples = samples
        self._sample_rate = sample_rate
        self._device = device
        self._active = True
        self._stopped = False

    @property
    def is_active(self) -> bool:
        return self._active

    async def play(self) -> bool:
        if self._stopped:
            return False
        sd = self._sd

        def _play() -> None:
            sd.play(self._samples, samplerate=self._sample_rate, device=self._device)
            sd.wait()

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, _play)
        except sd.PortAudioError as exc:
            raise PlaybackError(f"Audio device error: {exc}") from exc
        finally:
            self._active = False
        return not self._stopped

    def stop(self) -> None:
        if not self._active:
            return
        self._stopped = True
        self._active = False
        self._sd.stop()
        logger.debug("Playback stopped")


class SoundDeviceOutput(AudioOutput):
    """Plays PCM s16le audio through the system speakers.

    Args:
        device: Sounddevice output device index or name (None = default).
    """

    def __init__(self, device: int | str | None = None) -> None:
        self._sd = _import_sounddevice()
        self._device = device

    @property
    def name(self) -> str:
        return "SoundDeviceOutput"

    async def open(self, audio: AudioContent) -> SoundDevicePlayback:
        import numpy as np

        if audio.format != "pcm_s16le":
            raise PlaybackError(f"Unsupported audio format: {audio.format}")
        n_samples = len(audio.data) // 2
        if n_samples == 0:
            raise PlaybackError("Empty audio")
        samples = np.frombuffer(audio.data[: n_samples * 2], dtype=np.int16)
        if audio.channels > 1:
            samples = samples[: len(samples) - len(samples) % audio.channels]
            samples = samples.reshape(-1, audio.channels)
        return SoundDevicePlayback(self._sd, samples, audio.sample_rate, self._device)
