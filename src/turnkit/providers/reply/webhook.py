"""Reply provider that POSTs utterances to a workflow webhook."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import Any

import httpx

from turnkit.core.errors import SubmissionError
from turnkit.models.turn import SubmitRequest, SubmitResult
from turnkit.providers.reply.base import ReplyProvider
from turnkit.providers.reply.config import WebhookReplyConfig

logger = logging.getLogger("turnkit.providers.webhook")


class WebhookReplyProvider(ReplyProvider):
    """POSTs ``{"message", "inputType"}`` JSON and reads the reply text.

    The reply is taken from ``output`` (or ``response``). A successful call
    with neither field yields ``config.fallback_reply``.
    """

    def __init__(self, config: WebhookReplyConfig) -> None:
        self._config = config
        self._client = httpx.AsyncClient(timeout=config.timeout)

    async def submit(self, request: SubmitRequest) -> SubmitResult:
        body = json.dumps(self._build_payload(request))
        headers = self._build_headers(body)

        try:
            resp = await self._client.post(
                self._config.webhook_url,
                content=body,
                headers=headers,
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as exc:
            logger.warning("Webhook timed out")
            raise SubmissionError("timeout") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Webhook returned HTTP %d", status)
            raise SubmissionError(f"http_{status}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Webhook request failed: %s", exc)
            raise SubmissionError(str(exc) or exc.__class__.__name__) from exc
        except ValueError as exc:
            logger.warning("Webhook returned invalid JSON: %s", exc)
            raise SubmissionError("invalid_response") from exc

        return self._parse_response(data)

    def _build_payload(self, request: SubmitRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "message": request.text,
            "inputType": str(request.modality),
        }
        if request.metadata:
            payload["metadata"] = request.metadata
        return payload

    def _build_headers(self, body: str) -> dict[str, str]:
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            **self._config.headers,
        }
        if self._config.secret is not None:
            signature = hmac.new(
                self._config.secret.get_secret_value().encode(),
                body.encode(),
                hashlib.sha256,
            ).hexdigest()
            headers["X-TurnKit-Signature"] = signature
        return headers

    def _parse_response(self, data: Any) -> SubmitResult:
        # Workflow engines often wrap single results in a list.
        if isinstance(data, list) and data:
            data = data[0]
        if not isinstance(data, dict):
            data = {}
        text = data.get("output") or data.get("response")
        if not isinstance(text, str) or not text.strip():
            logger.debug("Webhook reply had no output; using fallback text")
            text = self._config.fallback_reply
        return SubmitResult(reply_text=text, metadata={"provider": self.name})

    async def close(self) -> None:
        await self._client.aclose()
