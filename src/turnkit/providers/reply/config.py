"""Webhook reply provider configuration."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, Field, SecretStr, field_validator

DEFAULT_FALLBACK_REPLY = "Desculpe, não consegui processar sua mensagem."


class WebhookReplyConfig(BaseModel):
    """Configuration for :class:`WebhookReplyProvider`.

    Local automation servers (n8n and friends) usually run on localhost, so
    only the URL scheme and host are checked.
    """

    webhook_url: str
    secret: SecretStr | None = None
    timeout: float = Field(default=30.0, gt=0.0)
    headers: dict[str, str] = Field(default_factory=dict)
    fallback_reply: str = DEFAULT_FALLBACK_REPLY

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if not parsed.scheme or not parsed.hostname:
            raise ValueError("webhook_url must be a valid URL with scheme and host")
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"webhook_url scheme must be http or https, got {parsed.scheme!r}")
        return v
