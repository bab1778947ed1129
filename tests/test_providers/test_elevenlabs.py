"""Tests for the ElevenLabs TTS provider."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from turnkit.core.errors import SynthesisError
from turnkit.voice.tts.elevenlabs import ElevenLabsConfig, ElevenLabsTTSProvider


def _response(status: int = 200, content: bytes = b"\x01\x00" * 100) -> httpx.Response:
    return httpx.Response(
        status,
        content=content,
        request=httpx.Request("POST", "https://api.elevenlabs.io/v1/text-to-speech/v"),
    )


class TestElevenLabsTTSProvider:
    def test_defaults(self) -> None:
        config = ElevenLabsConfig(api_key="k")
        assert config.voice_id == "21m00Tcm4TlvDq8ikWAM"
        assert config.stability == 0.5
        assert config.similarity_boost == 0.5
        provider = ElevenLabsTTSProvider(config)
        assert provider.name == "ElevenLabsTTS"
        assert provider.default_voice == "21m00Tcm4TlvDq8ikWAM"

    def test_rejects_non_pcm_format(self) -> None:
        with pytest.raises(ValueError):
            ElevenLabsTTSProvider(ElevenLabsConfig(api_key="k", output_format="mp3_44100_128"))

    async def test_missing_api_key_fails_fast(self) -> None:
        provider = ElevenLabsTTSProvider(ElevenLabsConfig())
        with pytest.raises(SynthesisError, match="API key"):
            await provider.synthesize("olá")
        assert provider._client is None

    async def test_synthesize(self) -> None:
        provider = ElevenLabsTTSProvider(ElevenLabsConfig(api_key="k"))
        client = AsyncMock()
        client.post = AsyncMock(return_value=_response())
        provider._client = client

        audio = await provider.synthesize("Vai chover amanhã.")

        assert audio.sample_rate == 22050
        assert audio.format == "pcm_s16le"
        assert audio.data == b"\x01\x00" * 100
        assert audio.transcript == "Vai chover amanhã."

        call = client.post.call_args
        assert call.args[0] == "/text-to-speech/21m00Tcm4TlvDq8ikWAM"
        assert call.kwargs["params"] == {"output_format": "pcm_22050"}
        body = call.kwargs["json"]
        assert body["text"] == "Vai chover amanhã."
        assert body["voice_settings"] == {"stability": 0.5, "similarity_boost": 0.5}

    async def test_voice_override(self) -> None:
        provider = ElevenLabsTTSProvider(ElevenLabsConfig(api_key="k"))
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response())

        audio = await provider.synthesize("olá", voice="other-voice")

        assert provider._client.post.call_args.args[0] == "/text-to-speech/other-voice"
        assert audio.metadata["voice_id"] == "other-voice"

    @pytest.mark.parametrize(
        ("side_effect", "status", "match"),
        [
            (httpx.ReadTimeout("slow"), None, "timed out"),
            (httpx.ConnectError("refused"), None, "request failed"),
            (None, 401, "http_401"),
        ],
    )
    async def test_failures_raise_synthesis_error(
        self, side_effect: Exception | None, status: int | None, match: str
    ) -> None:
        provider = ElevenLabsTTSProvider(ElevenLabsConfig(api_key="k"))
        provider._client = AsyncMock()
        if side_effect is not None:
            provider._client.post = AsyncMock(side_effect=side_effect)
        else:
            provider._client.post = AsyncMock(return_value=_response(status or 500))

        with pytest.raises(SynthesisError, match=match):
            await provider.synthesize("olá")

    async def test_empty_audio(self) -> None:
        provider = ElevenLabsTTSProvider(ElevenLabsConfig(api_key="k"))
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response(content=b""))

        with pytest.raises(SynthesisError, match="no audio"):
            await provider.synthesize("olá")

    async def test_close(self) -> None:
        provider = ElevenLabsTTSProvider(ElevenLabsConfig(api_key="k"))
        client = AsyncMock()
        provider._client = client
        await provider.close()
        client.aclose.assert_awaited_once()
        assert provider._client is None
