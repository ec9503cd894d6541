"""Bulk loading of analysed messages into stores, once or on an interval."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from ..core.interfaces import IngestionError, MessageSource
from ..core.models import (
    AnalyzedEmail,
    AnalyzedNotification,
    RawEmail,
    RawNotification,
)
from ..intelligence import EmailTriageService, NotificationTriageService
from ..storage import EmailStore, NotificationStore
from ..storage.base import BucketedStore
from .parser import coerce_emails, coerce_notifications

LOGGER = logging.getLogger(__name__)

RawT = TypeVar("RawT")
RecordT = TypeVar("RecordT", AnalyzedEmail, AnalyzedNotification)


class InboxLoader(Generic[RawT, RecordT]):
    """Pull raw messages from a source, analyse them and bulk-load a store.

    A failing source leaves the store's records untouched and records the
    error on its load state. Overlapping refreshes are not ordered: whichever
    finishes last determines the stored records.
    """

    def __init__(
        self,
        name: str,
        store: BucketedStore[RecordT],
        source: MessageSource[Any],
        *,
        coerce: Callable[[Iterable[Any]], Sequence[RawT]],
        analyze: Callable[[RawT], RecordT],
    ) -> None:
        self._name = name
        self._store = store
        self._source = source
        self._coerce = coerce
        self._analyze = analyze

    @property
    def name(self) -> str:
        return self._name

    async def refresh(self) -> bool:
        """Run one load; return ``True`` when the store was replaced."""
        self._store.mark_loading()
        try:
            payload = self._source()
            if inspect.isawaitable(payload):
                payload = await payload
            raw_items = self._coerce(payload)
            records = [self._analyze(item) for item in raw_items]
        except Exception as exc:  # pylint: disable=broad-except
            message = _format_load_error(exc)
            LOGGER.warning("Loading %s failed: %s", self._name, message)
            self._store.mark_failed(message)
            return False

        self._store.load(records)
        return True


def email_loader(
    store: EmailStore,
    source: MessageSource[RawEmail | Mapping[str, Any]],
    service: EmailTriageService | None = None,
) -> InboxLoader[RawEmail, AnalyzedEmail]:
    """Build a loader feeding ``store`` from an email source."""
    triage = service or EmailTriageService()
    return InboxLoader(
        "emails", store, source, coerce=coerce_emails, analyze=triage.analyze
    )


def notification_loader(
    store: NotificationStore,
    source: MessageSource[RawNotification | Mapping[str, Any]],
    service: NotificationTriageService | None = None,
) -> InboxLoader[RawNotification, AnalyzedNotification]:
    """Build a loader feeding ``store`` from a notification source."""
    triage = service or NotificationTriageService()
    return InboxLoader(
        "notifications", store, source, coerce=coerce_notifications, analyze=triage
    )


class RefreshScheduler:
    """Invoke loaders on a fixed interval from an asyncio task."""

    def __init__(
        self, loaders: Sequence[InboxLoader[Any, Any]], interval_seconds: float
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._loaders = tuple(loaders)
        self._interval = interval_seconds
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh_all(self) -> dict[str, bool]:
        """Run every loader once, concurrently, and report which succeeded."""
        results = await asyncio.gather(*(loader.refresh() for loader in self._loaders))
        return {
            loader.name: outcome
            for loader, outcome in zip(self._loaders, results, strict=True)
        }

    def start(self) -> None:
        """Begin scheduling; must be called from a running event loop."""
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event))
        LOGGER.info("Refresh scheduled every %.1fs", self._interval)

    async def stop(self) -> None:
        """Stop scheduling further runs and wait for any in-flight run."""
        if self._task is None or self._stop_event is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        self._stop_event = None
        LOGGER.info("Refresh scheduling stopped")

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                await self.refresh_all()


def _format_load_error(exc: Exception) -> str:
    if isinstance(exc, IngestionError):
        return str(exc)
    detail = str(exc).strip()
    if detail:
        return f"{type(exc).__name__}: {detail}"
    return type(exc).__name__


__all__ = [
    "InboxLoader",
    "RefreshScheduler",
    "email_loader",
    "notification_loader",
]
