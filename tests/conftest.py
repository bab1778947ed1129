"""Shared test fixtures and helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

import pytest

from turnkit.config import TurnKitConfig
from turnkit.core.controller import TurnController
from turnkit.providers.reply.mock import MockReplyProvider
from turnkit.voice.output.mock import MockAudioOutput
from turnkit.voice.recognition.mock import MockRecognitionBackend
from turnkit.voice.tts.mock import MockTTSProvider


@pytest.fixture
def advance() -> Callable[..., Coroutine[Any, Any, None]]:
    """Yield control to let pending tasks run without real delay.

    ::

        await advance()       # 5 yields (default)
        await advance(10)     # 10 yields for heavier workloads
    """

    async def _advance(n: int = 5) -> None:
        for _ in range(n):
            await asyncio.sleep(0)

    return _advance


def make_config(**overrides: Any) -> TurnKitConfig:
    """Config with short timers so tests run in milliseconds."""
    values: dict[str, Any] = {
        "continuous_listening": True,
        "tts_enabled": True,
        "restart_delay_seconds": 0.01,
        "cooldown_seconds": 0.05,
    }
    values.update(overrides)
    return TurnKitConfig(**values)


class Harness:
    """A TurnController wired to mock components."""

    def __init__(
        self,
        config: TurnKitConfig | None = None,
        *,
        replies: list[str] | None = None,
        reply_error: BaseException | None = None,
        tts_providers: list[MockTTSProvider] | None = None,
        auto_complete: bool = False,
    ) -> None:
        self.backend = MockRecognitionBackend()
        self.tts = tts_providers or [MockTTSProvider()]
        self.output = MockAudioOutput(auto_complete=auto_complete)
        self.reply = MockReplyProvider(replies, error=reply_error)
        self.controller = TurnController.create(
            config or make_config(),
            recognition_backend=self.backend,
            reply_provider=self.reply,
            tts_providers=self.tts,
            output=self.output,
        )
        self.events: list[Any] = []
        self.controller.on_event(self.events.append)

    @property
    def recognition(self) -> Any:
        return self.controller.recognition

    def events_of(self, cls: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, cls)]
