"""Continuous speech recognition session with auto-restart and confidence gating."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from turnkit.config import DEFAULT_LANGUAGE, DEFAULT_MIN_CONFIDENCE, RESTART_DELAY_SECONDS
from turnkit.core._tasks import TaskScheduler, fire_callbacks
from turnkit.models.enums import RecognitionState
from turnkit.voice.base import (
    FinalCallback,
    InterimCallback,
    RecognitionErrorCallback,
    RecognitionOptions,
    Utterance,
)
from turnkit.voice.recognition.base import BENIGN_ERRORS, NOT_SUPPORTED, START_FAILED

if TYPE_CHECKING:
    from turnkit.voice.base import RecognitionResultBatch
    from turnkit.voice.recognition.base import RecognitionBackend, Recognizer

logger = logging.getLogger("turnkit.voice.recognition")

# Transcripts must be strictly longer than this (after trimming) to be sent.
MIN_TRANSCRIPT_CHARS = 3

StateChangeCallback = Callable[[RecognitionState, RecognitionState], Any]


class RecognitionSession:
    """Owns one microphone recognition stream and its transcript state.

    The session is an explicit state machine (see
    :class:`~turnkit.models.enums.RecognitionState`)::

        IDLE --start()--> STARTING --platform start--> LISTENING
        LISTENING --platform end--> IDLE --(continuous, 1s)--> STARTING
        LISTENING --platform error--> ERROR_BACKOFF --platform end--> IDLE
        any --set_suspended(True)--> SUSPENDED --set_suspended(False)--> IDLE

    Final segments are accumulated until they pass the forwarding gate
    (trimmed length > 3 and confidence >= ``min_confidence``), then emitted
    through ``on_final`` and cleared. Interim text is only reported through
    ``on_interim`` for display.

    The session never decides *why* it is suspended; that is the turn
    controller's job.

    Args:
        backend: Platform recognition capability.
        language: Recognition language tag.
        continuous: Restart automatically when the platform ends a session.
        min_confidence: Confidence threshold for forwarding.
        restart_delay: Seconds between a platform end and the restart.
    """

    def __init__(
        self,
        backend: RecognitionBackend,
        *,
        language: str = DEFAULT_LANGUAGE,
        continuous: bool = True,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        restart_delay: float = RESTART_DELAY_SECONDS,
    ) -> None:
        self._backend = backend
        self._options = RecognitionOptions(language=language, continuous=continuous)
        self._min_confidence = min_confidence
        self._restart_delay = restart_delay

        self._state = RecognitionState.IDLE
        self._recognizer: Recognizer | None = None
        self._generation = 0
        self._suspended = False
        self._stop_requested = False
        self._restart_handle: asyncio.TimerHandle | None = None

        self._final_accumulator = ""
        self._interim = ""
        self._confidence = 0.0
        self._last_final_confidence = 0.0
        self._last_error: str | None = None
        self._unsupported_reported = False

        self._interim_callbacks: list[InterimCallback] = []
        self._final_callbacks: list[FinalCallback] = []
        self._error_callbacks: list[RecognitionErrorCallback] = []
        self._state_callbacks: list[StateChangeCallback] = []
        self._tasks = TaskScheduler("recognition")

    # -- Read-only views --

    @property
    def state(self) -> RecognitionState:
        return self._state

    @property
    def is_listening(self) -> bool:
        return self._state == RecognitionState.LISTENING

    @property
    def is_supported(self) -> bool:
        return self._backend.is_supported

    @property
    def is_suspended(self) -> bool:
        return self._suspended

    @property
    def restart_pending(self) -> bool:
        return self._restart_handle is not None

    @property
    def continuous(self) -> bool:
        return self._options.continuous

    @property
    def language(self) -> str:
        return self._options.language

    @property
    def min_confidence(self) -> float:
        return self._min_confidence

    @property
    def transcript(self) -> str:
        """Live transcript: accumulated final text plus current interim."""
        return self._final_accumulator + self._interim

    @property
    def confidence(self) -> float:
        """Confidence of the most recent final segment."""
        return self._confidence

    @property
    def last_error(self) -> str | None:
        return self._last_error

    # -- Subscriptions --

    def on_interim(self, callback: InterimCallback) -> None:
        self._interim_callbacks.append(callback)

    def on_final(self, callback: FinalCallback) -> None:
        self._final_callbacks.append(callback)

    def on_error(self, callback: RecognitionErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def on_state_change(self, callback: StateChangeCallback) -> None:
        self._state_callbacks.append(callback)

    # -- Control --

    async def start(self) -> None:
        """Request audio capture.

        No-op while LISTENING or STARTING. Refused while suspended.
        """
        if self._state in (RecognitionState.LISTENING, RecognitionState.STARTING):
            return
        if not self._backend.is_supported:
            self._report_unsupported()
            return
        if self._suspended:
            logger.debug("start() ignored: recognition is suspended")
            return

        self._cancel_restart()
        self._stop_requested = False
        self._last_error = None
        self._set_state(RecognitionState.STARTING)

        recognizer = self._ensure_recognizer()
        try:
            await recognizer.start()
        except Exception as exc:
            logger.warning("Recognizer failed to start: %s", exc)
            if self._state == RecognitionState.STARTING:
                self._set_state(RecognitionState.IDLE)
            self._surface_error(START_FAILED)

    async def stop(self) -> None:
        """Stop capture on user request. Does not auto-restart afterwards."""
        self._cancel_restart()
        self._stop_requested = True
        self._final_accumulator = ""
        self._interim = ""
        capturing = self._state in (RecognitionState.LISTENING, RecognitionState.STARTING)
        if self._state != RecognitionState.SUSPENDED:
            self._set_state(RecognitionState.IDLE)
        if capturing and self._recognizer is not None:
            await self._recognizer.stop()

    async def set_suspended(self, suspended: bool) -> None:
        """Mute or unmute recognition.

        Suspending cancels any pending restart and stops capture. Resuming
        only permits future starts; it never starts capture itself.
        """
        if suspended == self._suspended:
            return
        self._suspended = suspended

        if suspended:
            self._cancel_restart()
            capturing = self._state in (RecognitionState.LISTENING, RecognitionState.STARTING)
            self._interim = ""
            self._set_state(RecognitionState.SUSPENDED)
            if capturing and self._recognizer is not None:
                logger.debug("Suspending recognition: stopping capture")
                await self._recognizer.stop()
            return

        if self._state == RecognitionState.SUSPENDED:
            self._set_state(RecognitionState.IDLE)

    async def configure(
        self,
        *,
        language: str | None = None,
        continuous: bool | None = None,
        min_confidence: float | None = None,
    ) -> None:
        """Change recognition options.

        Language or continuous changes recreate the platform recognizer.
        Disabling continuous mode while capturing stops capture at once.
        """
        if min_confidence is not None:
            self._min_confidence = min_confidence

        new_options = RecognitionOptions(
            language=language if language is not None else self._options.language,
            continuous=continuous if continuous is not None else self._options.continuous,
            interim_results=self._options.interim_results,
            max_alternatives=self._options.max_alternatives,
        )
        if new_options == self._options:
            return

        self._options = new_options
        logger.info(
            "Recognition reconfigured (language=%s, continuous=%s)",
            new_options.language,
            new_options.continuous,
        )

        was_capturing = self._state in (RecognitionState.LISTENING, RecognitionState.STARTING)
        if was_capturing or not new_options.continuous:
            await self.stop()
        await self._teardown_recognizer()
        if was_capturing and new_options.continuous:
            await self.start()

    async def close(self) -> None:
        """Cancel timers and release the platform recognizer."""
        self._cancel_restart()
        if self._state in (RecognitionState.LISTENING, RecognitionState.STARTING):
            await self.stop()
        await self._teardown_recognizer()
        await self._tasks.cancel_all()

    # -- Platform events (RecognitionListener) --

    def handle_start(self) -> None:
        if self._state != RecognitionState.STARTING:
            # Suspended or stopped while the platform was starting.
            logger.debug("Platform started in state %s; stopping capture", self._state)
            if self._recognizer is not None:
                self._tasks.schedule(self._recognizer.stop(), name="stop_late_start")
            return
        logger.debug("Speech recognition started")
        self._set_state(RecognitionState.LISTENING)

    def handle_result(self, batch: RecognitionResultBatch) -> None:
        if self._suspended:
            logger.debug("Skipping result batch: recognition is suspended")
            return

        interim = ""
        final_text = ""
        best_confidence = 0.0
        for segment in batch.changed:
            if segment.is_final:
                final_text += segment.text
                best_confidence = max(best_confidence, segment.confidence)
                self._last_final_confidence = segment.confidence
                self._confidence = segment.confidence
            else:
                interim += segment.text

        self._final_accumulator += final_text
        self._interim = interim
        fire_callbacks(
            self._interim_callbacks, self.transcript, scheduler=self._tasks, name="interim"
        )

        if final_text.strip():
            self._try_forward(best_confidence)

    def handle_error(self, kind: str) -> None:
        logger.debug("Speech recognition error: %s", kind)
        if self._state in (RecognitionState.LISTENING, RecognitionState.STARTING):
            self._set_state(RecognitionState.ERROR_BACKOFF)
        if kind in BENIGN_ERRORS:
            return
        self._surface_error(kind)

    def handle_end(self) -> None:
        logger.debug("Speech recognition ended")
        self._interim = ""

        if self._suspended:
            self._final_accumulator = ""
            self._set_state(RecognitionState.SUSPENDED)
            return

        self._set_state(RecognitionState.IDLE)
        if self._final_accumulator.strip():
            self._try_forward(self._last_final_confidence)
        self._final_accumulator = ""

        if self._options.continuous and not self._stop_requested:
            self._schedule_restart()

    # -- Internal --

    def _try_forward(self, confidence: float) -> bool:
        text = self._final_accumulator.strip()
        if len(text) > MIN_TRANSCRIPT_CHARS and confidence >= self._min_confidence:
            logger.debug("Forwarding final transcript %r (confidence=%.2f)", text, confidence)
            self._final_accumulator = ""
            self._interim = ""
            fire_callbacks(
                self._final_callbacks,
                Utterance(text=text, confidence=confidence, is_final=True),
                scheduler=self._tasks,
                name="final",
            )
            return True
        logger.debug(
            "Holding transcript %r: confidence=%.2f (min %.2f), length=%d",
            text,
            confidence,
            self._min_confidence,
            len(text),
        )
        return False

    def _schedule_restart(self) -> None:
        if self._restart_handle is not None or self._suspended:
            return
        logger.debug("Scheduling recognition restart in %.1fs", self._restart_delay)
        loop = asyncio.get_running_loop()
        self._restart_handle = loop.call_later(self._restart_delay, self._on_restart_timer)

    def _on_restart_timer(self) -> None:
        self._restart_handle = None
        if self._suspended or self._state != RecognitionState.IDLE:
            return
        self._tasks.schedule(self.start(), name="restart")

    def _cancel_restart(self) -> None:
        if self._restart_handle is not None:
            self._restart_handle.cancel()
            self._restart_handle = None

    def _ensure_recognizer(self) -> Recognizer:
        if self._recognizer is None:
            self._generation += 1
            listener = _BoundListener(self, self._generation)
            self._recognizer = self._backend.create_recognizer(self._options, listener)
        return self._recognizer

    async def _teardown_recognizer(self) -> None:
        recognizer, self._recognizer = self._recognizer, None
        # Late events from the old recognizer are dropped by _BoundListener.
        self._generation += 1
        if recognizer is not None:
            await recognizer.close()

    def _set_state(self, state: RecognitionState) -> None:
        old = self._state
        if old == state:
            return
        self._state = state
        fire_callbacks(
            self._state_callbacks, old, state, scheduler=self._tasks, name="state_change"
        )

    def _report_unsupported(self) -> None:
        if self._unsupported_reported:
            return
        self._unsupported_reported = True
        logger.warning("Speech recognition is not supported by %s", self._backend.name)
        self._surface_error(NOT_SUPPORTED)

    def _surface_error(self, kind: str) -> None:
        self._last_error = kind
        fire_callbacks(self._error_callbacks, kind, scheduler=self._tasks, name="error")


class _BoundListener:
    """Forwards platform events for one recognizer generation only."""

    def __init__(self, session: RecognitionSession, generation: int) -> None:
        self._session = session
        self._generation = generation

    def _current(self) -> bool:
        return self._session._generation == self._generation

    def handle_start(self) -> None:
        if self._current():
            self._session.handle_start()

    def handle_result(self, batch: RecognitionResultBatch) -> None:
        if self._current():
            self._session.handle_result(batch)

    def handle_error(self, kind: str) -> None:
        if self._current():
            self._session.handle_error(kind)

    def handle_end(self) -> None:
        if self._current():
            self._session.handle_end()
