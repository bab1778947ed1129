"""Microphone recognition backend built on the SpeechRecognition package.

Captures phrases from the system microphone (PyAudio) and transcribes them
with the Google Web Speech API, which reports per-alternative confidence.

Requires the ``speech`` optional dependency::

    pip install turnkit[speech]
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from turnkit.voice.base import RecognitionResultBatch, TranscriptSegment
from turnkit.voice.recognition.base import (
    AUDIO_CAPTURE,
    NETWORK,
    NO_SPEECH,
    RecognitionBackend,
    RecognitionListener,
    Recognizer,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from turnkit.voice.base import RecognitionOptions

logger = logging.getLogger("turnkit.voice.recognition.speech_recognition")


def _import_speech_recognition() -> Any:
    """Import speech_recognition, raising a clear error if missing."""
    try:
        import speech_recognition as _sr

        return _sr
    except ImportError as exc:
        raise ImportError(
            "SpeechRecognition is required for SpeechRecognitionBackend. "
            "Install it with: pip install turnkit[speech]"
        ) from exc


@dataclass
class SpeechRecognitionConfig:
    """Configuration for the SpeechRecognition backend.

    Attributes:
        device_index: PyAudio input device index (None = default mic).
        energy_threshold: Fixed energy threshold; None enables dynamic
            adjustment.
        pause_threshold: Seconds of silence that end a phrase.
        listen_timeout: Seconds to wait for a phrase to begin before
            reporting ``no-speech``.
        phrase_time_limit: Maximum seconds per phrase.
        calibrate_seconds: Ambient-noise calibration when capture opens.
        stop_timeout: Seconds to wait for a stopped capture to release the
            microphone before a new one opens.
    """

    device_index: int | None = None
    energy_threshold: float | None = None
    pause_threshold: float = 0.8
    listen_timeout: float = 5.0
    phrase_time_limit: float | None = 15.0
    calibrate_seconds: float = 0.5
    stop_timeout: float = 2.0


def parse_google_result(result: Any) -> list[TranscriptSegment]:
    """Convert a ``recognize_google(show_all=True)`` payload to segments.

    Only the best alternative is kept. Google omits ``confidence`` on some
    responses; those are reported as 0.0 and will not pass the gate.
    """
    if not isinstance(result, dict):
        return []
    alternatives = result.get("alternative") or []
    if not alternatives:
        return []
    best = alternatives[0]
    text = str(best.get("transcript", "")).strip()
    if not text:
        return []
    return [
        TranscriptSegment(
            text=text,
            confidence=float(best.get("confidence", 0.0)),
            is_final=True,
        )
    ]


class _CaptureStopped(Exception):
    """Raised inside the worker when capture is stopped mid-read."""


class _StoppableStream:
    """Wraps a microphone stream so reads fail once *stop_event* is set.

    ``Recognizer.listen`` reads the source stream chunk by chunk, so a stop
    takes effect within one chunk instead of at the end of the phrase.
    """

    def __init__(self, stream: Any, stop_event: threading.Event) -> None:
        self._stream = stream
        self._stop_event = stop_event

    def read(self, size: int) -> bytes:
        if self._stop_event.is_set():
            raise _CaptureStopped
        return self._stream.read(size)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._stream, name)


class SpeechRecognitionRecognizer(Recognizer):
    """Runs blocking listen/recognize calls on a worker thread.

    Events are marshalled to the event loop with ``call_soon_threadsafe``.
    Each ``start()`` opens a new run; events still in flight from an older
    run are dropped.
    """

    def __init__(
        self,
        sr: Any,
        config: SpeechRecognitionConfig,
        options: RecognitionOptions,
        listener: RecognitionListener,
    ) -> None:
        self._sr = sr
        self._config = config
        self._options = options
        self._listener = listener
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._run_id = 0
        self._segments: list[TranscriptSegment] = []

        self._recognizer = sr.Recognizer()
        self._recognizer.pause_threshold = config.pause_threshold
        if config.energy_threshold is not None:
            self._recognizer.energy_threshold = config.energy_threshold
            self._recognizer.dynamic_energy_threshold = False

    async def start(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._run_id += 1
        run_id = self._run_id
        await self._join_previous()

        stop_event = threading.Event()
        self._stop_event = stop_event
        self._segments = []
        microphone = self._sr.Microphone(device_index=self._config.device_index)
        self._thread = threading.Thread(
            target=self._run,
            args=(microphone, run_id, stop_event),
            name="turnkit-speech-recognition",
            daemon=True,
        )
        self._thread.start()

    async def stop(self) -> None:
        self._stop_event.set()

    async def close(self) -> None:
        self._run_id += 1
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread.is_alive():
            await asyncio.to_thread(thread.join, self._config.stop_timeout)

    async def _join_previous(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is None or not thread.is_alive():
            return
        logger.debug("Waiting for previous capture to stop")
        await asyncio.to_thread(thread.join, self._config.stop_timeout)
        if thread.is_alive():
            raise RuntimeError("previous capture did not stop in time")

    # -- Worker thread --

    def _post(self, run_id: int, fn: Callable[..., None], *args: Any) -> None:
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self._deliver, run_id, fn, args)

    def _deliver(self, run_id: int, fn: Callable[..., None], args: tuple[Any, ...]) -> None:
        if run_id != self._run_id:
            logger.debug("Dropping event from superseded capture run %d", run_id)
            return
        fn(*args)

    def _run(self, microphone: Any, run_id: int, stop_event: threading.Event) -> None:
        try:
            with microphone as source:
                source.stream = _StoppableStream(source.stream, stop_event)
                if self._config.calibrate_seconds > 0:
                    self._recognizer.adjust_for_ambient_noise(
                        source, duration=self._config.calibrate_seconds
                    )
                self._post(run_id, self._listener.handle_start)
                self._listen_loop(source, run_id, stop_event)
        except _CaptureStopped:
            logger.debug("Capture stopped")
        except OSError as exc:
            logger.warning("Microphone capture failed: %s", exc)
            self._post(run_id, self._listener.handle_error, AUDIO_CAPTURE)
        except Exception:
            logger.exception("Speech recognition worker crashed")
            self._post(run_id, self._listener.handle_error, AUDIO_CAPTURE)
        finally:
            self._post(run_id, self._listener.handle_end)

    def _listen_loop(self, source: Any, run_id: int, stop_event: threading.Event) -> None:
        # In continuous mode silence is not an error; the session simply
        # keeps listening. Single-shot sessions end with ``no-speech``.
        sr = self._sr
        continuous = self._options.continuous
        while not stop_event.is_set():
            try:
                audio = self._recognizer.listen(
                    source,
                    timeout=self._config.listen_timeout,
                    phrase_time_limit=self._config.phrase_time_limit,
                )
            except sr.WaitTimeoutError:
                if not continuous:
                    self._post(run_id, self._listener.handle_error, NO_SPEECH)
                    return
                continue

            if stop_event.is_set():
                return

            try:
                result = self._recognizer.recognize_google(
                    audio, language=self._options.language, show_all=True
                )
            except sr.RequestError as exc:
                logger.warning("Recognition request failed: %s", exc)
                self._post(run_id, self._listener.handle_error, NETWORK)
                return

            if stop_event.is_set():
                return

            segments = parse_google_result(result)
            if segments:
                index = len(self._segments)
                self._segments.extend(segments)
                batch = RecognitionResultBatch(
                    segments=tuple(self._segments), result_index=index
                )
                self._post(run_id, self._listener.handle_result, batch)
            elif not continuous:
                self._post(run_id, self._listener.handle_error, NO_SPEECH)

            if not continuous:
                return


class SpeechRecognitionBackend(RecognitionBackend):
    """RecognitionBackend over ``speech_recognition`` + PyAudio."""

    def __init__(self, config: SpeechRecognitionConfig | None = None) -> None:
        self._config = config or SpeechRecognitionConfig()
        self._supported: bool | None = None

    @property
    def name(self) -> str:
        return "SpeechRecognitionBackend"

    @property
    def is_supported(self) -> bool:
        if self._supported is None:
            self._supported = self._probe()
        return self._supported

    def _probe(self) -> bool:
        try:
            sr = _import_speech_recognition()
            names = sr.Microphone.list_microphone_names()
        except (ImportError, AttributeError, OSError) as exc:
            logger.info("Speech recognition unavailable: %s", exc)
            return False
        return bool(names)

    def create_recognizer(
        self, options: RecognitionOptions, listener: RecognitionListener
    ) -> SpeechRecognitionRecognizer:
        sr = _import_speech_recognition()
        return SpeechRecognitionRecognizer(sr, self._config, options, listener)
