"""Turn controller: orchestrates one voice/text dialogue."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from turnkit.config import TurnKitConfig
from turnkit.core._tasks import TaskScheduler, fire_callbacks
from turnkit.core.errors import SubmissionError
from turnkit.models.enums import ErrorSource, InputModality, RecognitionState
from turnkit.models.turn import AssistantReply, SubmitRequest
from turnkit.voice.echo import EchoGuard
from turnkit.voice.events import (
    AssistantReplyEvent,
    EchoDiscardedEvent,
    InterimTranscriptEvent,
    RecognitionStateChangedEvent,
    SynthesisEndedEvent,
    SynthesisStartedEvent,
    TurnErrorEvent,
    TurnEvent,
    UtteranceAcceptedEvent,
)
from turnkit.voice.recognition.base import NOT_ALLOWED, NOT_SUPPORTED
from turnkit.voice.recognition.session import RecognitionSession
from turnkit.voice.synthesis import SynthesisDispatcher

if TYPE_CHECKING:
    from turnkit.providers.reply.base import ReplyProvider
    from turnkit.voice.base import Utterance
    from turnkit.voice.output.base import AudioOutput
    from turnkit.voice.recognition.base import RecognitionBackend
    from turnkit.voice.tts.base import TTSProvider

logger = logging.getLogger("turnkit.controller")

TranscriptCallback = Callable[[str], Any]
ReplyCallback = Callable[[AssistantReplyEvent], Any]
ErrorCallback = Callable[[TurnErrorEvent], Any]
EventCallback = Callable[[TurnEvent], Any]

# Recognition errors the user cannot fix by simply trying again.
_PERMANENT_RECOGNITION_ERRORS = frozenset({NOT_SUPPORTED, NOT_ALLOWED})


@dataclass
class SuspensionWindow:
    """Microphone mute state around assistant speech.

    ``active`` while synthesis plays; afterwards the window stays closed
    until ``cooldown_until`` (event-loop time). ``resume_capture`` records
    whether capture should reopen when the window ends.
    """

    active: bool = False
    cooldown_until: float | None = None
    resume_capture: bool = False

    def request(self, active: bool, now: float, cooldown: float) -> None:
        self.active = active
        self.cooldown_until = None if active else now + cooldown

    def is_active(self, now: float) -> bool:
        if self.active:
            return True
        return self.cooldown_until is not None and now < self.cooldown_until

    def clear(self) -> None:
        self.active = False
        self.cooldown_until = None
        self.resume_capture = False


class TurnController:
    """Decides which utterances become turns and when the microphone is open.

    Final utterances from the :class:`RecognitionSession` pass through the
    :class:`EchoGuard` and are submitted to the :class:`ReplyProvider`. The
    reply is recorded as the last assistant reply and, when TTS is enabled,
    spoken through the :class:`SynthesisDispatcher`. While the assistant
    speaks (plus a cooldown) recognition stays suspended.

    Example::

        controller = TurnController.create(
            TurnKitConfig(continuous_listening=True, tts_enabled=True),
            recognition_backend=SpeechRecognitionBackend(),
            tts_providers=[ElevenLabsTTSProvider(cfg), Pyttsx3TTSProvider()],
            output=SoundDeviceOutput(),
            reply_provider=WebhookReplyProvider(webhook_cfg),
        )
        controller.on_reply(lambda event: print(event.text))
        await controller.start()
    """

    def __init__(
        self,
        recognition: RecognitionSession,
        synthesis: SynthesisDispatcher | None,
        reply_provider: ReplyProvider,
        *,
        config: TurnKitConfig | None = None,
        echo_guard: EchoGuard | None = None,
    ) -> None:
        self._config = config or TurnKitConfig()
        self._recognition = recognition
        self._synthesis = synthesis
        self._reply_provider = reply_provider
        self._echo_guard = echo_guard or EchoGuard()

        self._window = SuspensionWindow()
        self._cooldown_handle: asyncio.TimerHandle | None = None
        self._last_reply: AssistantReply | None = None
        self._awaiting_reply = 0
        self._closed = False
        self._tasks = TaskScheduler("controller")

        self._transcript_callbacks: list[TranscriptCallback] = []
        self._reply_callbacks: list[ReplyCallback] = []
        self._error_callbacks: list[ErrorCallback] = []
        self._event_callbacks: list[EventCallback] = []

        recognition.on_final(self._handle_final)
        recognition.on_interim(self._handle_interim)
        recognition.on_error(self._handle_recognition_error)
        recognition.on_state_change(self._handle_state_change)
        if synthesis is not None:
            synthesis.on_started(self._handle_synthesis_started)
            synthesis.on_ended(self._handle_synthesis_ended)
            synthesis.on_error(self._handle_synthesis_error)

    @classmethod
    def create(
        cls,
        config: TurnKitConfig,
        *,
        recognition_backend: RecognitionBackend,
        reply_provider: ReplyProvider,
        tts_providers: Sequence[TTSProvider] = (),
        output: AudioOutput | None = None,
        echo_guard: EchoGuard | None = None,
    ) -> TurnController:
        """Build a controller and its components from one config."""
        recognition = RecognitionSession(
            recognition_backend,
            language=config.language,
            continuous=config.continuous_listening,
            min_confidence=config.min_confidence,
            restart_delay=config.restart_delay_seconds,
        )
        synthesis = None
        if tts_providers and output is not None:
            synthesis = SynthesisDispatcher(tts_providers, output, language=config.language)
        return cls(
            recognition,
            synthesis,
            reply_provider,
            config=config,
            echo_guard=echo_guard,
        )

    # -- Read-only views --

    @property
    def config(self) -> TurnKitConfig:
        return self._config

    @property
    def recognition(self) -> RecognitionSession:
        return self._recognition

    @property
    def synthesis(self) -> SynthesisDispatcher | None:
        return self._synthesis

    @property
    def last_reply(self) -> AssistantReply | None:
        return self._last_reply

    @property
    def suspension(self) -> SuspensionWindow:
        return self._window

    @property
    def is_listening(self) -> bool:
        return self._recognition.is_listening

    @property
    def is_speaking(self) -> bool:
        return self._synthesis is not None and self._synthesis.is_playing

    @property
    def is_awaiting_reply(self) -> bool:
        """True while a submission is in flight."""
        return self._awaiting_reply > 0

    # -- Subscriptions --

    def on_transcript(self, callback: TranscriptCallback) -> None:
        """Live transcript text (final accumulator plus interim) for display."""
        self._transcript_callbacks.append(callback)

    def on_reply(self, callback: ReplyCallback) -> None:
        self._reply_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def on_event(self, callback: EventCallback) -> None:
        """Receive every :data:`TurnEvent`."""
        self._event_callbacks.append(callback)

    # -- Public API --

    async def configure(
        self,
        continuous_enabled: bool | None = None,
        tts_enabled: bool | None = None,
    ) -> None:
        """Toggle continuous listening and spoken replies."""
        update: dict[str, Any] = {}
        if continuous_enabled is not None:
            update["continuous_listening"] = continuous_enabled
        if tts_enabled is not None:
            update["tts_enabled"] = tts_enabled
        if not update:
            return
        self._config = self._config.model_copy(update=update)
        logger.info(
            "Configured: continuous=%s tts=%s",
            self._config.continuous_listening,
            self._config.tts_enabled,
        )

        if not self._config.tts_enabled and self._synthesis is not None:
            await self._synthesis.stop()

        await self._recognition.configure(continuous=self._config.continuous_listening)
        if self._config.continuous_listening:
            await self._maybe_start()

    async def start(self) -> None:
        """Begin listening when continuous mode is enabled."""
        if self._config.continuous_listening:
            await self._maybe_start()

    async def start_listening(self) -> None:
        """Open the microphone for one session (or continuously)."""
        await self._maybe_start()

    async def stop_listening(self) -> None:
        self._window.resume_capture = False
        await self._recognition.stop()

    async def toggle_listening(self) -> None:
        if self._recognition.state in (RecognitionState.LISTENING, RecognitionState.STARTING):
            await self.stop_listening()
        else:
            await self.start_listening()

    async def submit_text(self, text: str) -> str | None:
        """Submit typed input. Returns the reply text, or None on failure."""
        text = text.strip()
        if not text:
            return None
        return await self._submit(text, InputModality.TEXT)

    async def on_assistant_reply(self, text: str) -> None:
        """Record *text* as the latest reply and speak it if TTS is enabled."""
        self._last_reply = AssistantReply(text=text)
        if self._config.tts_enabled and self._synthesis is not None:
            self._tasks.schedule(self._synthesis.speak(text), name="speak")

    async def drain(self) -> None:
        """Wait for in-flight submissions and synthesis to finish."""
        await self._tasks.drain()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cancel_cooldown()
        await self._tasks.cancel_all()
        if self._synthesis is not None:
            await self._synthesis.close()
        await self._recognition.close()
        await self._reply_provider.close()

    # -- Recognition events --

    def _handle_interim(self, text: str) -> None:
        fire_callbacks(
            self._transcript_callbacks, text, scheduler=self._tasks, name="transcript"
        )
        self._emit(InterimTranscriptEvent(text=text))

    def _handle_final(self, utterance: Utterance) -> None:
        last = self._last_reply.text if self._last_reply is not None else None
        if self._echo_guard.is_echo(utterance.text, last):
            logger.debug("Discarding echo of last reply: %r", utterance.text)
            self._emit(EchoDiscardedEvent(text=utterance.text, last_reply=last or ""))
            return
        self._tasks.schedule(
            self._submit(utterance.text, InputModality.VOICE, utterance.confidence),
            name="submit_voice",
        )

    def _handle_recognition_error(self, kind: str) -> None:
        self._report(
            ErrorSource.RECOGNITION,
            kind,
            retryable=kind not in _PERMANENT_RECOGNITION_ERRORS,
        )

    def _handle_state_change(self, old: RecognitionState, new: RecognitionState) -> None:
        logger.debug("Recognition state %s -> %s", old, new)
        self._emit(RecognitionStateChangedEvent(old_state=old, new_state=new))

    # -- Synthesis events --

    async def _handle_synthesis_started(self, event: SynthesisStartedEvent) -> None:
        loop = asyncio.get_running_loop()
        if not self._recognition.is_suspended:
            self._window.resume_capture = self._capture_wanted()
        self._cancel_cooldown()
        self._window.request(True, loop.time(), self._config.cooldown_seconds)
        await self._recognition.set_suspended(True)
        self._emit(event)

    async def _handle_synthesis_ended(self, event: SynthesisEndedEvent) -> None:
        self._emit(event)
        if not self._window.active:
            # Nothing was played (all providers failed); the microphone was never muted.
            return
        loop = asyncio.get_running_loop()
        cooldown = self._config.cooldown_seconds
        self._window.request(False, loop.time(), cooldown)
        self._cancel_cooldown()
        self._cooldown_handle = loop.call_later(cooldown, self._on_cooldown_elapsed)

    def _handle_synthesis_error(self, exc: Exception) -> None:
        self._report(ErrorSource.SYNTHESIS, str(exc))

    def _on_cooldown_elapsed(self) -> None:
        self._cooldown_handle = None
        if self._window.active:
            return
        self._tasks.schedule(self._resume_recognition(), name="resume")

    async def _resume_recognition(self) -> None:
        if self._window.active:
            return
        resume = self._window.resume_capture
        self._window.clear()
        await self._recognition.set_suspended(False)
        if not resume:
            logger.debug("Cooldown elapsed; capture was not active, staying idle")
            return
        if self._config.continuous_listening and not self._window.active:
            logger.debug("Cooldown elapsed; resuming recognition")
            await self._recognition.start()

    # -- Internal --

    async def _submit(
        self,
        text: str,
        modality: InputModality,
        confidence: float | None = None,
    ) -> str | None:
        self._emit(UtteranceAcceptedEvent(text=text, modality=modality, confidence=confidence))
        self._awaiting_reply += 1
        try:
            result = await self._reply_provider.submit(
                SubmitRequest(text=text, modality=modality)
            )
        except SubmissionError as exc:
            logger.warning("Submission failed: %s", exc.reason)
            self._report(ErrorSource.SUBMISSION, exc.reason, retryable=True)
            return None
        except Exception as exc:
            logger.exception("Reply provider %s raised", self._reply_provider.name)
            self._report(ErrorSource.SUBMISSION, str(exc) or exc.__class__.__name__, retryable=True)
            return None
        finally:
            self._awaiting_reply -= 1

        reply = result.reply_text
        await self.on_assistant_reply(reply)
        event = AssistantReplyEvent(text=reply, in_reply_to=text, modality=modality)
        fire_callbacks(self._reply_callbacks, event, scheduler=self._tasks, name="reply")
        self._emit(event)
        return reply

    async def _maybe_start(self) -> None:
        loop = asyncio.get_running_loop()
        if self._window.is_active(loop.time()):
            logger.debug("Suspension window is active; recognition starts when it ends")
            self._window.resume_capture = True
            return
        await self._recognition.start()

    def _capture_wanted(self) -> bool:
        return self._recognition.restart_pending or self._recognition.state in (
            RecognitionState.LISTENING,
            RecognitionState.STARTING,
            RecognitionState.ERROR_BACKOFF,
        )

    def _cancel_cooldown(self) -> None:
        if self._cooldown_handle is not None:
            self._cooldown_handle.cancel()
            self._cooldown_handle = None

    def _report(self, source: ErrorSource, message: str, *, retryable: bool = False) -> None:
        event = TurnErrorEvent(source=source, message=message, retryable=retryable)
        fire_callbacks(self._error_callbacks, event, scheduler=self._tasks, name="error")
        self._emit(event)

    def _emit(self, event: TurnEvent) -> None:
        fire_callbacks(self._event_callbacks, event, scheduler=self._tasks, name="event")
