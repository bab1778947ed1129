"""Reasoning backends that answer user utterances."""

from turnkit.providers.reply.base import ReplyProvider
from turnkit.providers.reply.config import DEFAULT_FALLBACK_REPLY, WebhookReplyConfig
from turnkit.providers.reply.mock import MockReplyProvider
from turnkit.providers.reply.webhook import WebhookReplyProvider

__all__ = [
    "DEFAULT_FALLBACK_REPLY",
    "MockReplyProvider",
    "ReplyProvider",
    "WebhookReplyConfig",
    "WebhookReplyProvider",
]
