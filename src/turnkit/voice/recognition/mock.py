"""Mock recognition backend for testing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from turnkit.voice.base import RecognitionOptions, RecognitionResultBatch, TranscriptSegment
from turnkit.voice.recognition.base import RecognitionBackend, RecognitionListener, Recognizer


@dataclass
class MockRecognitionCall:
    """Record of a call made to a MockRecognizer."""

    method: str
    args: dict[str, Any] = field(default_factory=dict)


class MockRecognizer(Recognizer):
    """Recognizer driven by test code.

    By default the platform confirms ``start()`` and ``stop()`` immediately
    (``handle_start`` / ``handle_end``), like a fast browser engine. Set
    ``auto_confirm=False`` on the backend to deliver those events by hand.
    """

    def __init__(
        self,
        backend: MockRecognitionBackend,
        options: RecognitionOptions,
        listener: RecognitionListener,
    ) -> None:
        self._backend = backend
        self.options = options
        self.listener = listener
        self.capturing = False
        self.closed = False
        self.calls: list[MockRecognitionCall] = []

    async def start(self) -> None:
        self.calls.append(MockRecognitionCall(method="start"))
        self._backend.start_count += 1
        if self._backend.fail_start is not None:
            raise self._backend.fail_start
        if self._backend.auto_confirm:
            self.simulate_start()

    async def stop(self) -> None:
        self.calls.append(MockRecognitionCall(method="stop"))
        self._backend.stop_count += 1
        if self._backend.auto_confirm and self.capturing:
            self.simulate_end()

    async def close(self) -> None:
        self.calls.append(MockRecognitionCall(method="close"))
        self.closed = True
        self.capturing = False

    # -- Simulation helpers --

    def simulate_start(self) -> None:
        self.capturing = True
        self.listener.handle_start()

    def simulate_end(self) -> None:
        self.capturing = False
        self.listener.handle_end()

    def simulate_error(self, kind: str) -> None:
        self.listener.handle_error(kind)

    def simulate_result(
        self, segments: list[TranscriptSegment], *, result_index: int = 0
    ) -> None:
        self.listener.handle_result(
            RecognitionResultBatch(segments=tuple(segments), result_index=result_index)
        )

    def simulate_final(self, text: str, confidence: float = 0.9) -> None:
        self.simulate_result([TranscriptSegment(text=text, confidence=confidence, is_final=True)])

    def simulate_interim(self, text: str, confidence: float = 0.5) -> None:
        self.simulate_result([TranscriptSegment(text=text, confidence=confidence)])


class MockRecognitionBackend(RecognitionBackend):
    """Mock recognition backend for testing.

    Example:
        backend = MockRecognitionBackend()
        session = RecognitionSession(backend)
        await session.start()
        backend.recognizer.simulate_final("ok isso é um teste", 0.8)
    """

    def __init__(self, *, supported: bool = True, auto_confirm: bool = True) -> None:
        self._supported = supported
        self.auto_confirm = auto_confirm
        self.fail_start: Exception | None = None
        self.recognizers: list[MockRecognizer] = []
        self.start_count = 0
        self.stop_count = 0

    @property
    def name(self) -> str:
        return "MockRecognitionBackend"

    @property
    def is_supported(self) -> bool:
        return self._supported

    @property
    def recognizer(self) -> MockRecognizer:
        """The most recently created recognizer."""
        return self.recognizers[-1]

    def create_recognizer(
        self, options: RecognitionOptions, listener: RecognitionListener
    ) -> MockRecognizer:
        recognizer = MockRecognizer(self, options, listener)
        self.recognizers.append(recognizer)
        return recognizer
