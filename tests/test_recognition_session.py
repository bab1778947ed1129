"""Tests for RecognitionSession."""

from __future__ import annotations

import asyncio

from turnkit.models.enums import RecognitionState
from turnkit.voice.base import TranscriptSegment, Utterance
from turnkit.voice.recognition.base import NETWORK, NO_SPEECH, NOT_SUPPORTED, START_FAILED
from turnkit.voice.recognition.mock import MockRecognitionBackend
from turnkit.voice.recognition.session import RecognitionSession


def _session(
    backend: MockRecognitionBackend | None = None,
    *,
    continuous: bool = True,
    restart_delay: float = 0.01,
) -> tuple[RecognitionSession, MockRecognitionBackend, dict[str, list]]:
    backend = backend or MockRecognitionBackend()
    session = RecognitionSession(backend, continuous=continuous, restart_delay=restart_delay)
    seen: dict[str, list] = {"final": [], "interim": [], "error": [], "state": []}
    session.on_final(seen["final"].append)
    session.on_interim(seen["interim"].append)
    session.on_error(seen["error"].append)
    session.on_state_change(lambda old, new: seen["state"].append((old, new)))
    return session, backend, seen


class TestStartStop:
    async def test_start_reaches_listening(self) -> None:
        session, backend, seen = _session()
        await session.start()

        assert session.state == RecognitionState.LISTENING
        assert session.is_listening
        assert seen["state"] == [
            (RecognitionState.IDLE, RecognitionState.STARTING),
            (RecognitionState.STARTING, RecognitionState.LISTENING),
        ]
        assert backend.recognizer.options.language == "pt-BR"

    async def test_start_is_noop_while_listening(self) -> None:
        session, backend, _ = _session()
        await session.start()
        await session.start()
        assert backend.start_count == 1
        assert len(backend.recognizers) == 1

    async def test_start_is_noop_while_starting(self) -> None:
        backend = MockRecognitionBackend(auto_confirm=False)
        session, _, _ = _session(backend)
        await session.start()
        assert session.state == RecognitionState.STARTING
        await session.start()
        assert backend.start_count == 1

    async def test_manual_stop_does_not_restart(self) -> None:
        session, backend, _ = _session()
        await session.start()
        await session.stop()

        assert session.state == RecognitionState.IDLE
        assert not session.restart_pending
        await asyncio.sleep(0.05)
        assert backend.start_count == 1

    async def test_start_failure_returns_to_idle(self) -> None:
        backend = MockRecognitionBackend()
        backend.fail_start = RuntimeError("device busy")
        session, _, seen = _session(backend)
        await session.start()

        assert session.state == RecognitionState.IDLE
        assert seen["error"] == [START_FAILED]
        assert session.last_error == START_FAILED

    async def test_unsupported_reported_once(self) -> None:
        session, backend, seen = _session(MockRecognitionBackend(supported=False))
        await session.start()
        await session.start()

        assert not session.is_supported
        assert session.state == RecognitionState.IDLE
        assert seen["error"] == [NOT_SUPPORTED]
        assert backend.recognizers == []


class TestForwarding:
    async def test_final_above_threshold_is_forwarded(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_final("ok isso é um teste", 0.8)

        assert seen["final"] == [Utterance(text="ok isso é um teste", confidence=0.8)]
        assert session.transcript == ""
        assert session.confidence == 0.8

    async def test_short_final_is_held(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_final("sim", 0.9)

        assert seen["final"] == []
        assert session.transcript == "sim"

    async def test_low_confidence_final_is_held(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_final("abrir o navegador", 0.5)

        assert seen["final"] == []
        assert session.transcript == "abrir o navegador"

    async def test_held_text_is_prefixed_to_next_final(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_final("sim", 0.9)
        backend.recognizer.simulate_final(" pode abrir", 0.7)

        assert [u.text for u in seen["final"]] == ["sim pode abrir"]
        assert seen["final"][0].confidence == 0.7

    async def test_held_text_failing_gate_is_dropped_on_end(self) -> None:
        session, backend, seen = _session(continuous=False)
        await session.start()
        backend.recognizer.simulate_final("sim", 0.9)
        backend.recognizer.simulate_end()

        assert seen["final"] == []
        assert session.transcript == ""

    async def test_held_text_flushed_on_end_with_last_confidence(self) -> None:
        session, backend, seen = _session(continuous=False)
        await session.start()
        recognizer = backend.recognizer
        recognizer.simulate_final("abrir o e-mail", 0.4)
        # Whitespace-only final raises the last-final confidence without adding text.
        recognizer.simulate_final(" ", 0.9)
        assert seen["final"] == []

        recognizer.simulate_end()
        assert [u.text for u in seen["final"]] == ["abrir o e-mail"]
        assert seen["final"][0].confidence == 0.9

    async def test_interim_updates_transcript(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_interim("qual é")

        assert seen["interim"] == ["qual é"]
        assert session.transcript == "qual é"
        assert seen["final"] == []

    async def test_only_changed_segments_are_processed(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_result(
            [
                TranscriptSegment(text="já enviado antes", confidence=0.9, is_final=True),
                TranscriptSegment(text="novo", confidence=0.3),
            ],
            result_index=1,
        )

        assert seen["final"] == []
        assert session.transcript == "novo"

    async def test_best_confidence_in_batch_is_used(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_result(
            [
                TranscriptSegment(text="ligar a luz", confidence=0.95, is_final=True),
                TranscriptSegment(text=" da sala", confidence=0.5, is_final=True),
            ]
        )

        assert [u.text for u in seen["final"]] == ["ligar a luz da sala"]
        assert seen["final"][0].confidence == 0.95

    async def test_configured_threshold(self) -> None:
        backend = MockRecognitionBackend()
        session = RecognitionSession(backend, min_confidence=0.9)
        finals: list[Utterance] = []
        session.on_final(finals.append)
        await session.start()

        backend.recognizer.simulate_final("ok isso é um teste", 0.8)
        assert finals == []


class TestRestart:
    async def test_continuous_restarts_after_end(self) -> None:
        session, backend, _ = _session(restart_delay=0.01)
        await session.start()
        backend.recognizer.simulate_end()

        assert session.state == RecognitionState.IDLE
        assert session.restart_pending

        await asyncio.sleep(0.05)
        assert session.state == RecognitionState.LISTENING
        assert backend.start_count == 2

    async def test_restart_waits_for_delay(self) -> None:
        session, backend, _ = _session(restart_delay=0.2)
        await session.start()
        backend.recognizer.simulate_end()

        await asyncio.sleep(0.05)
        assert session.state == RecognitionState.IDLE
        assert backend.start_count == 1

    async def test_single_shot_does_not_restart(self) -> None:
        session, backend, _ = _session(continuous=False)
        await session.start()
        backend.recognizer.simulate_end()

        assert not session.restart_pending
        await asyncio.sleep(0.05)
        assert backend.start_count == 1

    async def test_no_speech_is_ignored(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_error(NO_SPEECH)

        assert session.state == RecognitionState.ERROR_BACKOFF
        assert seen["error"] == []

        backend.recognizer.simulate_end()
        await asyncio.sleep(0.05)
        assert session.state == RecognitionState.LISTENING

    async def test_other_errors_are_surfaced(self) -> None:
        session, backend, seen = _session()
        await session.start()
        backend.recognizer.simulate_error(NETWORK)

        assert seen["error"] == [NETWORK]
        assert session.last_error == NETWORK
        assert session.state == RecognitionState.ERROR_BACKOFF


class TestSuspension:
    async def test_suspend_stops_capture(self) -> None:
        session, backend, _ = _session()
        await session.start()
        await session.set_suspended(True)

        assert session.state == RecognitionState.SUSPENDED
        assert session.is_suspended
        assert not backend.recognizer.capturing
        assert not session.restart_pending

    async def test_start_refused_while_suspended(self) -> None:
        session, backend, _ = _session()
        await session.set_suspended(True)
        await session.start()

        assert session.state == RecognitionState.SUSPENDED
        assert backend.start_count == 0

    async def test_results_ignored_while_suspended(self) -> None:
        session, backend, seen = _session()
        await session.start()
        recognizer = backend.recognizer
        await session.set_suspended(True)
        recognizer.simulate_final("resposta do assistente", 0.95)

        assert seen["final"] == []
        assert session.transcript == ""

    async def test_suspend_cancels_pending_restart(self) -> None:
        session, backend, _ = _session(restart_delay=0.01)
        await session.start()
        backend.recognizer.simulate_end()
        assert session.restart_pending

        await session.set_suspended(True)
        await asyncio.sleep(0.05)
        assert backend.start_count == 1
        assert session.state == RecognitionState.SUSPENDED

    async def test_resume_does_not_start_capture(self) -> None:
        session, backend, _ = _session()
        await session.start()
        await session.set_suspended(True)
        await session.set_suspended(False)

        assert session.state == RecognitionState.IDLE
        await asyncio.sleep(0.05)
        assert backend.start_count == 1

    async def test_late_platform_start_is_stopped(self, advance) -> None:
        backend = MockRecognitionBackend(auto_confirm=False)
        session, _, _ = _session(backend)
        await session.start()
        await session.set_suspended(True)

        backend.recognizer.simulate_start()
        await advance()

        assert session.state == RecognitionState.SUSPENDED
        assert backend.stop_count == 2


class TestConfigure:
    async def test_language_change_recreates_recognizer(self) -> None:
        session, backend, _ = _session()
        await session.start()
        old = backend.recognizer

        await session.configure(language="en-US")

        assert old.closed
        assert len(backend.recognizers) == 2
        assert backend.recognizer.options.language == "en-US"
        assert session.language == "en-US"
        assert session.state == RecognitionState.LISTENING

    async def test_events_from_old_recognizer_are_dropped(self) -> None:
        session, backend, seen = _session()
        await session.start()
        old = backend.recognizer
        await session.configure(language="en-US")

        old.simulate_final("texto do reconhecedor antigo", 0.9)
        old.simulate_end()

        assert seen["final"] == []
        assert session.state == RecognitionState.LISTENING

    async def test_disabling_continuous_stops_capture(self) -> None:
        session, backend, _ = _session()
        await session.start()
        await session.configure(continuous=False)

        assert session.state == RecognitionState.IDLE
        assert not session.continuous
        await asyncio.sleep(0.05)
        assert backend.start_count == 1

    async def test_unchanged_options_keep_recognizer(self) -> None:
        session, backend, _ = _session()
        await session.start()
        await session.configure(language="pt-BR", continuous=True, min_confidence=0.7)

        assert len(backend.recognizers) == 1
        assert session.min_confidence == 0.7
        assert session.is_listening

    async def test_close_releases_recognizer(self) -> None:
        session, backend, _ = _session()
        await session.start()
        await session.close()

        assert backend.recognizer.closed
        assert session.state == RecognitionState.IDLE
        assert not session.restart_pending
