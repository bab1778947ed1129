"""Tests for the webhook reply provider."""

from __future__ import annotations

import hashlib
import hmac
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from turnkit.core.errors import SubmissionError
from turnkit.models.enums import InputModality
from turnkit.models.turn import SubmitRequest
from turnkit.providers.reply.config import DEFAULT_FALLBACK_REPLY, WebhookReplyConfig
from turnkit.providers.reply.webhook import WebhookReplyProvider

URL = "http://localhost:5678/webhook/chat"


def _provider(**config: object) -> WebhookReplyProvider:
    return WebhookReplyProvider(WebhookReplyConfig(webhook_url=URL, **config))  # type: ignore[arg-type]


def _response(status: int = 200, **kwargs: object) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", URL), **kwargs)  # type: ignore[arg-type]


class TestWebhookReplyProvider:
    async def test_submit_success(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(
            return_value=_response(json={"output": "Vai chover amanhã."})
        )

        result = await provider.submit(
            SubmitRequest(text="vai chover?", modality=InputModality.VOICE)
        )

        assert result.reply_text == "Vai chover amanhã."
        call = provider._client.post.call_args
        assert call.args[0] == URL
        body = json.loads(call.kwargs["content"])
        assert body == {"message": "vai chover?", "inputType": "voice"}
        assert call.kwargs["headers"]["Content-Type"] == "application/json"

    async def test_response_field_is_accepted(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response(json={"response": "Oi!"}))

        result = await provider.submit(SubmitRequest(text="olá"))
        assert result.reply_text == "Oi!"

    async def test_list_payload_is_unwrapped(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response(json=[{"output": "Oi!"}]))

        result = await provider.submit(SubmitRequest(text="olá"))
        assert result.reply_text == "Oi!"

    async def test_missing_output_uses_fallback(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response(json={"status": "ok"}))

        result = await provider.submit(SubmitRequest(text="olá"))
        assert result.reply_text == DEFAULT_FALLBACK_REPLY

    async def test_metadata_and_custom_headers(self) -> None:
        provider = _provider(headers={"Authorization": "Bearer tok123"})
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response(json={"output": "ok"}))

        await provider.submit(SubmitRequest(text="olá", metadata={"session": "abc"}))

        call = provider._client.post.call_args
        assert call.kwargs["headers"]["Authorization"] == "Bearer tok123"
        assert json.loads(call.kwargs["content"])["metadata"] == {"session": "abc"}

    async def test_hmac_signature(self) -> None:
        provider = _provider(secret="my-secret-key")
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response(json={"output": "ok"}))

        await provider.submit(SubmitRequest(text="olá"))

        call = provider._client.post.call_args
        body = call.kwargs["content"]
        expected = hmac.new(b"my-secret-key", body.encode(), hashlib.sha256).hexdigest()
        assert call.kwargs["headers"]["X-TurnKit-Signature"] == expected

    async def test_timeout(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(SubmissionError) as exc_info:
            await provider.submit(SubmitRequest(text="olá"))
        assert exc_info.value.reason == "timeout"
        assert exc_info.value.retryable is True

    async def test_http_error_status(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response(500))

        with pytest.raises(SubmissionError) as exc_info:
            await provider.submit(SubmitRequest(text="olá"))
        assert exc_info.value.reason == "http_500"

    async def test_transport_error(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(SubmissionError) as exc_info:
            await provider.submit(SubmitRequest(text="olá"))
        assert exc_info.value.reason == "connection refused"

    async def test_invalid_json(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        provider._client.post = AsyncMock(return_value=_response(content=b"<html>oops</html>"))

        with pytest.raises(SubmissionError) as exc_info:
            await provider.submit(SubmitRequest(text="olá"))
        assert exc_info.value.reason == "invalid_response"

    async def test_close(self) -> None:
        provider = _provider()
        provider._client = AsyncMock()
        await provider.close()
        provider._client.aclose.assert_awaited_once()


class TestMockReplyProvider:
    async def test_cycles_replies(self) -> None:
        from turnkit.providers.reply.mock import MockReplyProvider

        provider = MockReplyProvider(["um", "dois"])
        texts = [(await provider.submit(SubmitRequest(text="x"))).reply_text for _ in range(3)]
        assert texts == ["um", "dois", "um"]
        assert len(provider.requests) == 3

    async def test_default_reply_echoes_text(self) -> None:
        from turnkit.providers.reply.mock import MockReplyProvider

        result = await MockReplyProvider().submit(SubmitRequest(text="olá"))
        assert result.reply_text == "ok: olá"
