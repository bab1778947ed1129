"""On-device text-to-speech via pyttsx3 (espeak / SAPI5 / NSSpeech).

Used as the fallback when the networked provider fails. The engine renders
to a temporary WAV file which is read back as PCM, so playback goes through
the same audio output as every other provider.

Requires the ``local-tts`` optional dependency::

    pip install turnkit[local-tts]
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
import wave
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from turnkit.core.errors import CapabilityUnavailableError, SynthesisError
from turnkit.voice.base import AudioContent
from turnkit.voice.tts.base import TTSProvider

logger = logging.getLogger(__name__)


@dataclass
class Pyttsx3TTSConfig:
    """Configuration for the pyttsx3 provider.

    Attributes:
        language: Preferred voice locale (BCP-47, e.g. ``"pt-BR"``).
        rate: Speaking rate in words per minute.
        volume: Output volume in [0, 1].
        driver_name: Force a pyttsx3 driver (None = platform default).
    """

    language: str = "pt-BR"
    rate: int = 180
    volume: float = 1.0
    driver_name: str | None = None


def _voice_languages(voice: Any) -> list[str]:
    """Language tags of a pyttsx3 voice, lower-cased with '-' separators.

    espeak reports languages as bytes prefixed with a priority byte
    (``b"\\x05pt-br"``); other drivers use plain strings.
    """
    tags: list[str] = []
    for lang in getattr(voice, "languages", None) or []:
        if isinstance(lang, bytes):
            lang = lang.lstrip(bytes(range(32))).decode("utf-8", errors="ignore")
        tags.append(str(lang).strip().lower().replace("_", "-"))
    return [t for t in tags if t]


def select_voice(voices: Iterable[Any], language: str) -> str | None:
    """Pick the voice id that best matches *language*.

    Preference: exact locale in the voice's languages, then the locale in
    its id or name, then the bare language code. Returns None when nothing
    matches so the engine keeps its default voice.
    """
    wanted = language.strip().lower().replace("_", "-")
    base = wanted.split("-", 1)[0]
    voices = list(voices)

    for voice in voices:
        if wanted in _voice_languages(voice):
            return str(voice.id)

    variants = {wanted, wanted.replace("-", "_")}
    for voice in voices:
        haystack = f"{getattr(voice, 'id', '')} {getattr(voice, 'name', '')}".lower()
        if any(v in haystack for v in variants):
            return str(voice.id)

    for voice in voices:
        if any(tag.split("-", 1)[0] == base for tag in _voice_languages(voice)):
            return str(voice.id)
    return None


class Pyttsx3TTSProvider(TTSProvider):
    """On-device synthesizer with a fixed regional voice preference."""

    def __init__(self, config: Pyttsx3TTSConfig | None = None) -> None:
        self._config = config or Pyttsx3TTSConfig()
        # pyttsx3 engines are not thread-safe; keep every call on one thread.
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="turnkit-pyttsx3")
        self._engine: Any = None
        self._voice_id: str | None = None

    @property
    def name(self) -> str:
        return "Pyttsx3TTS"

    @property
    def default_voice(self) -> str | None:
        return self._voice_id

    def _load_engine(self) -> Any:
        if self._engine is not None:
            return self._engine
        try:
            import pyttsx3

            engine = pyttsx3.init(self._config.driver_name)
        except ImportError as exc:
            raise CapabilityUnavailableError(
                "pyttsx3 is required for Pyttsx3TTSProvider. "
                "Install it with: pip install turnkit[local-tts]"
            ) from exc
        except (RuntimeError, OSError) as exc:
            raise CapabilityUnavailableError(f"No on-device speech engine: {exc}") from exc

        engine.setProperty("rate", self._config.rate)
        engine.setProperty("volume", self._config.volume)
        self._engine = engine
        self._apply_voice(self._config.language)
        return engine

    def _apply_voice(self, language: str) -> None:
        # Best effort: a missing regional voice falls back to the default.
        try:
            voice_id = select_voice(self._engine.getProperty("voices"), language)
        except Exception as exc:
            logger.debug("Voice lookup failed, keeping default voice: %s", exc)
            return
        if voice_id is None:
            logger.info("No %s voice installed; using the default voice", language)
            return
        try:
            self._engine.setProperty("voice", voice_id)
        except Exception as exc:
            logger.debug("Could not select voice %s: %s", voice_id, exc)
            return
        self._voice_id = voice_id

    def _render(self, text: str, voice: str | None, language: str | None) -> AudioContent:
        engine = self._load_engine()
        if voice:
            engine.setProperty("voice", voice)
        elif language and language != self._config.language:
            self._apply_voice(language)

        with tempfile.TemporaryDirectory(prefix="turnkit-tts-") as tmp:
            path = Path(tmp) / "speech.wav"
            try:
                engine.save_to_file(text, str(path))
                engine.runAndWait()
            except RuntimeError as exc:
                raise SynthesisError(f"On-device synthesis failed: {exc}") from exc
            if not path.exists():
                raise SynthesisError("On-device synthesis produced no audio")
            try:
                with wave.open(str(path), "rb") as wf:
                    if wf.getsampwidth() != 2:
                        raise SynthesisError(
                            f"Unsupported sample width {wf.getsampwidth()} from speech engine"
                        )
                    pcm = wf.readframes(wf.getnframes())
                    sample_rate = wf.getframerate()
                    channels = wf.getnchannels()
            except (wave.Error, EOFError) as exc:
                raise SynthesisError(f"Unreadable audio from speech engine: {exc}") from exc

        if not pcm:
            raise SynthesisError("On-device synthesis produced no audio")
        return AudioContent(
            data=pcm,
            sample_rate=sample_rate,
            channels=channels,
            transcript=text,
            metadata={"provider": self.name, "voice_id": self._voice_id},
        )

    async def warmup(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._load_engine)

    async def synthesize(
        self,
        text: str,
        *,
        voice: str | None = None,
        language: str | None = None,
    ) -> AudioContent:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._render, text, voice, language)

    async def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._engine = None
