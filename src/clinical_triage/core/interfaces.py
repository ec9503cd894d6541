"""Protocol interfaces for decoupling components."""

from __future__ import annotations

from collections.abc import Awaitable, Iterable, Sequence
from typing import Protocol, TypeVar

RawT_co = TypeVar("RawT_co", covariant=True)


class IngestionError(RuntimeError):
    """Raised when a message source cannot be read."""


class MessageSource(Protocol[RawT_co]):
    """Callable returning raw messages, either directly or via an awaitable."""

    def __call__(
        self,
    ) -> Iterable[RawT_co] | Awaitable[Iterable[RawT_co]]:
        """Return the full current set of raw messages."""
        raise NotImplementedError


class FolderService(Protocol):
    """Assigns destination folders to an email."""

    def route(self, subject: str, preview: str) -> Sequence[str]:
        """Return at least one folder tag, ordered by tie-break priority."""
        raise NotImplementedError


__all__ = [
    "FolderService",
    "IngestionError",
    "MessageSource",
]
