"""Speech synthesis dispatcher with an ordered provider fallback chain."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from turnkit.config import DEFAULT_LANGUAGE
from turnkit.core._tasks import await_callbacks
from turnkit.core.errors import CapabilityUnavailableError, PlaybackError, SynthesisError
from turnkit.models.enums import SynthesisOutcome
from turnkit.voice.events import SynthesisEndedEvent, SynthesisStartedEvent

if TYPE_CHECKING:
    from turnkit.voice.base import AudioContent
    from turnkit.voice.output.base import AudioOutput, PlaybackHandle
    from turnkit.voice.tts.base import TTSProvider

logger = logging.getLogger("turnkit.voice.synthesis")

SynthesisStartedCallback = Callable[[SynthesisStartedEvent], Any]
SynthesisEndedCallback = Callable[[SynthesisEndedEvent], Any]
SynthesisErrorCallback = Callable[[Exception], Any]


class SynthesisDispatcher:
    """Turns reply text into audible speech, one stream at a time.

    Providers are tried in order until one returns audio. The audio is then
    played through the output:

    1. ``speak()`` stops and releases any active playback first.
    2. The first provider that succeeds gets a playback handle;
       ``started`` callbacks are awaited *before* playback begins.
    3. ``ended`` callbacks fire once per attempt: after natural completion,
       ``stop()``, a playback error, or when every provider failed (in which
       case ``started`` never fired).

    ``speak()`` never raises; failures go to ``on_error`` callbacks.

    Args:
        providers: TTS providers in priority order (primary first).
        output: Audio sink that owns the speaker.
        language: Language hint passed to every provider.
    """

    def __init__(
        self,
        providers: Sequence[TTSProvider],
        output: AudioOutput,
        *,
        language: str = DEFAULT_LANGUAGE,
    ) -> None:
        if not providers:
            raise ValueError("SynthesisDispatcher needs at least one provider")
        self._providers = list(providers)
        self._output = output
        self._language = language
        self._handle: PlaybackHandle | None = None
        self._handle_meta: tuple[str, str] | None = None  # (text, provider)
        self._generation = 0
        self._unavailable: set[str] = set()

        self._started_callbacks: list[SynthesisStartedCallback] = []
        self._ended_callbacks: list[SynthesisEndedCallback] = []
        self._error_callbacks: list[SynthesisErrorCallback] = []

    @property
    def providers(self) -> list[TTSProvider]:
        return list(self._providers)

    @property
    def language(self) -> str:
        return self._language

    @language.setter
    def language(self, value: str) -> None:
        self._language = value

    @property
    def is_playing(self) -> bool:
        return self._handle is not None and self._handle.is_active

    def on_started(self, callback: SynthesisStartedCallback) -> None:
        self._started_callbacks.append(callback)

    def on_ended(self, callback: SynthesisEndedCallback) -> None:
        self._ended_callbacks.append(callback)

    def on_error(self, callback: SynthesisErrorCallback) -> None:
        self._error_callbacks.append(callback)

    async def speak(self, text: str) -> None:
        """Speak *text*, replacing anything currently playing."""
        await self.stop()
        self._generation += 1
        generation = self._generation

        failures: list[str] = []
        for provider in self._providers:
            if provider.name in self._unavailable:
                continue
            audio = await self._attempt(provider, text, failures)
            if generation != self._generation:
                logger.debug("Discarding synthesis for superseded request")
                return
            if audio is None:
                continue

            try:
                handle = await self._output.open(audio)
            except PlaybackError as exc:
                logger.warning("Output rejected audio from %s: %s", provider.name, exc)
                failures.append(f"{provider.name}: {exc}")
                continue
            if generation != self._generation:
                handle.stop()
                return

            await self._play(handle, text, provider.name)
            return

        await self._fail(text, failures)

    async def stop(self) -> None:
        """Stop the active playback, if any. Idempotent."""
        self._generation += 1
        handle = self._handle
        if handle is None:
            return
        handle.stop()
        await self._release(handle, SynthesisOutcome.STOPPED)

    async def close(self) -> None:
        await self.stop()
        for provider in self._providers:
            await provider.close()
        await self._output.close()

    # -- Internal --

    async def _attempt(
        self, provider: TTSProvider, text: str, failures: list[str]
    ) -> AudioContent | None:
        try:
            return await provider.synthesize(text, language=self._language)
        except CapabilityUnavailableError as exc:
            logger.warning("Disabling TTS provider %s: %s", provider.name, exc)
            self._unavailable.add(provider.name)
            failures.append(f"{provider.name}: {exc}")
            await await_callbacks(self._error_callbacks, exc, name="synthesis_error")
        except Exception as exc:
            logger.warning("TTS provider %s failed, trying next: %s", provider.name, exc)
            failures.append(f"{provider.name}: {exc}")
        return None

    async def _play(self, handle: PlaybackHandle, text: str, provider: str) -> None:
        self._handle = handle
        self._handle_meta = (text, provider)
        await await_callbacks(
            self._started_callbacks,
            SynthesisStartedEvent(text=text, provider=provider),
            name="synthesis_started",
        )
        if self._handle is not handle:
            # Stopped while started callbacks ran.
            return

        logger.debug("Playing %s audio (%d chars)", provider, len(text))
        try:
            completed = await handle.play()
        except PlaybackError as exc:
            logger.warning("Playback failed: %s", exc)
            await self._release(handle, SynthesisOutcome.PLAYBACK_ERROR)
            await await_callbacks(self._error_callbacks, exc, name="synthesis_error")
            return
        outcome = SynthesisOutcome.COMPLETED if completed else SynthesisOutcome.STOPPED
        await self._release(handle, outcome)

    async def _release(self, handle: PlaybackHandle, outcome: SynthesisOutcome) -> None:
        """Clear *handle* and emit ``ended``, once per handle."""
        if self._handle is not handle:
            return
        text, provider = self._handle_meta or ("", None)
        self._handle = None
        self._handle_meta = None
        await await_callbacks(
            self._ended_callbacks,
            SynthesisEndedEvent(text=text, outcome=outcome, provider=provider),
            name="synthesis_ended",
        )

    async def _fail(self, text: str, failures: list[str]) -> None:
        detail = "; ".join(failures) or "no provider available"
        logger.error("All TTS providers failed: %s", detail)
        await await_callbacks(
            self._ended_callbacks,
            SynthesisEndedEvent(text=text, outcome=SynthesisOutcome.FAILED),
            name="synthesis_ended",
        )
        await await_callbacks(
            self._error_callbacks,
            SynthesisError(f"Speech synthesis failed: {detail}"),
            name="synthesis_error",
        )
