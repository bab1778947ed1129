"""Abstract base class for reasoning backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from turnkit.models.turn import SubmitRequest, SubmitResult


class ReplyProvider(ABC):
    """Answers user utterances.

    Implementations raise :class:`~turnkit.core.errors.SubmissionError` on
    any failure; callers never retry automatically.
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def submit(self, request: SubmitRequest) -> SubmitResult:
        """Send *request* and return the assistant's reply."""
        ...

    async def close(self) -> None:  # noqa: B027
        """Release resources. Override in subclasses if needed."""
