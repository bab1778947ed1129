"""ElevenLabs text-to-speech provider (primary, networked)."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from turnkit.core.errors import SynthesisError
from turnkit.voice.base import AudioContent
from turnkit.voice.tts.base import TTSProvider

logger = logging.getLogger(__name__)

_PCM_RATES = {"pcm_16000": 16000, "pcm_22050": 22050, "pcm_24000": 24000, "pcm_44100": 44100}


@dataclass
class ElevenLabsConfig:
    """Configuration for ElevenLabs TTS provider.

    ``api_key`` may be None; synthesis then fails fast so the dispatcher
    falls back to the next provider.
    """

    api_key: str | None = None
    voice_id: str = "21m00Tcm4TlvDq8ikWAM"  # Rachel (default)
    model_id: str = "eleven_multilingual_v2"
    stability: float = 0.5
    similarity_boost: float = 0.5
    base_url: str = "https://api.elevenlabs.io/v1"
    output_format: str = "pcm_22050"  # raw PCM s16le, no decoder needed
    timeout: float = 30.0


class ElevenLabsTTSProvider(TTSProvider):
    """ElevenLabs text-to-speech provider."""

    def __init__(self, config: ElevenLabsConfig) -> None:
        if config.output_format not in _PCM_RATES:
            raise ValueError(
                f"output_format must be one of {sorted(_PCM_RATES)}, got {config.output_format!r}"
            )
        self._config = config
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "ElevenLabsTTS"

    @property
    def default_voice(self) -> str:
        return self._config.voice_id

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                headers={
                    "xi-api-key": self._config.api_key or "",
                    "Content-Type": "application/json",
                },
                timeout=self._config.timeout,
            )
        return self._client

    def _build_voice_settings(self) -> dict[str, float]:
        return {
            "stability": self._config.stability,
            "similarity_boost": self._config.similarity_boost,
        }

    async def synthesize(
        self,
        text: str,
        *,
        voice: str | None = None,
        language: str | None = None,
    ) -> AudioContent:
        """Synthesize text to PCM audio.

        Raises:
            SynthesisError: Missing API key, transport failure or a
                non-success response.
        """
        if not self._config.api_key:
            raise SynthesisError("ElevenLabs API key not configured")

        voice_id = voice or self._config.voice_id
        client = self._get_client()
        try:
            response = await client.post(
                f"/text-to-speech/{voice_id}",
                json={
                    "text": text,
                    "model_id": self._config.model_id,
                    "voice_settings": self._build_voice_settings(),
                },
                params={"output_format": self._config.output_format},
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise SynthesisError("ElevenLabs request timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise SynthesisError(
                f"ElevenLabs API error: http_{exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SynthesisError(f"ElevenLabs request failed: {exc}") from exc

        audio_bytes = response.content
        if not audio_bytes:
            raise SynthesisError("ElevenLabs returned no audio")

        logger.debug("ElevenLabs synthesized %d bytes for %d chars", len(audio_bytes), len(text))
        return AudioContent(
            data=audio_bytes,
            sample_rate=_PCM_RATES[self._config.output_format],
            format="pcm_s16le",
            transcript=text,
            metadata={"provider": self.name, "voice_id": voice_id},
        )

    async def close(self) -> None:
        """Release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
