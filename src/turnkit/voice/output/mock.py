"""Mock audio output for testing."""

from __future__ import annotations

import asyncio

from turnkit.core.errors import PlaybackError
from turnkit.voice.base import AudioContent
from turnkit.voice.output.base import AudioOutput, PlaybackHandle


class MockPlayback(PlaybackHandle):
    """Playback handle whose completion is controlled by the test."""

    def __init__(self, output: MockAudioOutput, audio: AudioContent) -> None:
        self._output = output
        self.audio = audio
        self._active = True
        self._played = False
        self._stopped = False
        self._finished = asyncio.Event()
        self._error: PlaybackError | None = None

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def play(self) -> bool:
        self._played = True
        self._output.play_count += 1
        if self._output.play_error is not None:
            self._release()
            raise self._output.play_error
        if self._output.auto_complete:
            await asyncio.sleep(self._output.duration)
            self._finished.set()
        await self._finished.wait()
        self._release()
        if self._error is not None:
            raise self._error
        return not self._stopped

    def stop(self) -> None:
        if not self._active:
            return
        self._stopped = True
        self._release()
        self._finished.set()

    # -- Simulation helpers --

    def complete(self) -> None:
        """Finish playback naturally."""
        self._finished.set()

    def fail(self, message: str = "device lost") -> None:
        """Fail playback mid-stream."""
        self._error = PlaybackError(message)
        self._finished.set()

    def _release(self) -> None:
        if self._active:
            self._active = False
            self._output.active_count -= 1


class MockAudioOutput(AudioOutput):
    """Mock audio output for testing.

    Tracks every handle and the peak number of simultaneously active
    handles.

    Args:
        auto_complete: Finish playback after ``duration`` seconds on its own.
        duration: Playback length used with ``auto_complete``.
    """

    def __init__(self, *, auto_complete: bool = True, duration: float = 0.0) -> None:
        self.auto_complete = auto_complete
        self.duration = duration
        self.open_error: PlaybackError | None = None
        self.play_error: PlaybackError | None = None
        self.handles: list[MockPlayback] = []
        self.active_count = 0
        self.max_active = 0
        self.play_count = 0

    @property
    def name(self) -> str:
        return "MockAudioOutput"

    @property
    def handle(self) -> MockPlayback:
        """The most recently opened handle."""
        return self.handles[-1]

    async def open(self, audio: AudioContent) -> MockPlayback:
        if self.open_error is not None:
            raise self.open_error
        handle = MockPlayback(self, audio)
        self.handles.append(handle)
        self.active_count += 1
        self.max_active = max(self.max_active, self.active_count)
        return handle
