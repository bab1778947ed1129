"""Echo guard: reject transcripts that repeat the assistant's last reply."""

from __future__ import annotations

from dataclasses import dataclass

from turnkit.voice.text import normalize_text


@dataclass(frozen=True)
class EchoGuardConfig:
    """Thresholds for the prefix rule."""

    min_prefix_length: int = 10
    """Candidates must be longer than this to use the prefix rule."""

    prefix_chars: int = 20
    """How many leading characters of the candidate are compared."""


class EchoGuard:
    """Decides whether a transcript is the microphone re-capturing TTS.

    Both strings are normalized, then the candidate is an echo if:

    - the last reply contains it,
    - it contains the last reply, or
    - it is longer than ``min_prefix_length`` and the last reply starts
      with its first ``prefix_chars`` characters.

    Text that normalizes to nothing (punctuation or emoji only) is
    contained in any reply, so it counts as an echo whenever a reply
    exists. False positives (a user genuinely repeating part of the reply)
    are accepted.
    """

    def __init__(self, config: EchoGuardConfig | None = None) -> None:
        self._config = config or EchoGuardConfig()

    @property
    def config(self) -> EchoGuardConfig:
        return self._config

    def is_echo(self, candidate: str, last_reply: str | None) -> bool:
        if not last_reply:
            return False

        cand = normalize_text(candidate)
        last = normalize_text(last_reply)
        if cand in last or last in cand:
            return True

        return (
            len(cand) > self._config.min_prefix_length
            and last.startswith(cand[: self._config.prefix_chars])
        )
