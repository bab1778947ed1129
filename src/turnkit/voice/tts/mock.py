"""Mock text-to-speech provider for testing."""

from __future__ import annotations

import asyncio

from turnkit.voice.base import AudioContent
from turnkit.voice.tts.base import TTSProvider


class MockTTSProvider(TTSProvider):
    """Mock text-to-speech for testing.

    Args:
        name: Provider name reported in events.
        error: If set, every call raises this exception.
        delay: Seconds to wait before answering (simulates network latency).
    """

    def __init__(
        self,
        name: str = "MockTTS",
        *,
        voice: str = "mock-voice",
        error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self._name = name
        self._default_voice = voice
        self.error = error
        self.delay = delay
        self.calls: list[dict[str, str | None]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def default_voice(self) -> str:
        return self._default_voice

    async def synthesize(
        self,
        text: str,
        *,
        voice: str | None = None,
        language: str | None = None,
    ) -> AudioContent:
        self.calls.append(
            {"text": text, "voice": voice or self._default_voice, "language": language}
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        # ~50ms of silence per character at 16 kHz
        return AudioContent(
            data=b"\x00\x00" * 800 * len(text),
            sample_rate=16000,
            transcript=text,
            metadata={"provider": self._name},
        )
