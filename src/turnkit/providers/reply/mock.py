"""Mock reply provider for testing."""

from __future__ import annotations

import asyncio

from turnkit.models.turn import SubmitRequest, SubmitResult
from turnkit.providers.reply.base import ReplyProvider


class MockReplyProvider(ReplyProvider):
    """Returns canned replies in order, cycling when exhausted.

    Args:
        replies: Reply texts. Defaults to echoing ``"ok: <text>"``.
        error: If set, every call raises this exception.
        delay: Seconds to wait before answering.
    """

    def __init__(
        self,
        replies: list[str] | None = None,
        *,
        error: BaseException | None = None,
        delay: float = 0.0,
    ) -> None:
        self.replies = replies or []
        self.error = error
        self.delay = delay
        self.requests: list[SubmitRequest] = []
        self._index = 0

    async def submit(self, request: SubmitRequest) -> SubmitResult:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if not self.replies:
            return SubmitResult(reply_text=f"ok: {request.text}")
        text = self.replies[self._index % len(self.replies)]
        self._index += 1
        return SubmitResult(reply_text=text)
