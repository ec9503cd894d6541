"""In-memory notification store with per-category counters."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence

from ..core.models import (
    NOTIFICATION_CATEGORIES,
    AnalyzedNotification,
    NotificationFilters,
    NotificationSnapshot,
)
from .base import BucketedStore

LOGGER = logging.getLogger(__name__)


class NotificationStore(BucketedStore[AnalyzedNotification]):
    """Analysed notifications; each belongs to exactly one category bucket."""

    def __init__(self, categories: Iterable[str] = NOTIFICATION_CATEGORIES) -> None:
        super().__init__(categories)
        self._filters = NotificationFilters()

    def _buckets_of(self, record: AnalyzedNotification) -> Sequence[str]:
        return (record.analysis.category,)

    def _is_critical(self, record: AnalyzedNotification) -> bool:
        return record.analysis.criticality == "critical"

    def mark_read(self, notification_id: str) -> None:
        if self._set_read(notification_id, True):
            LOGGER.debug("Marked notification %s read", notification_id)

    def acknowledge_notification(self, notification_id: str) -> None:
        """Acknowledge a critical alert; counts exactly like :meth:`mark_read`."""
        if self._set_read(notification_id, True):
            LOGGER.info("Notification %s acknowledged", notification_id)

    def mark_all_read(self, category: str | None = None) -> None:
        changed = self._mark_all_read(category)
        LOGGER.debug(
            "Marked %d notification(s) read in %s", changed, category or "all categories"
        )

    def dismiss_notification(self, notification_id: str) -> None:
        if self._remove(notification_id) is not None:
            LOGGER.debug("Dismissed notification %s", notification_id)

    @property
    def filters(self) -> NotificationFilters:
        return self._filters

    def set_filters(self, filters: NotificationFilters) -> None:
        with self._lock:
            self._filters = filters

    def snapshot(self) -> NotificationSnapshot:
        """Return a detached copy of records, counters and view state."""
        with self._lock:
            return NotificationSnapshot(
                notifications=tuple(
                    dataclasses.replace(notification)
                    for notification in self._records.values()
                ),
                category_counts=self._copy_counts(),
                selected_id=self._selected_id,
                filters=self._filters,
                load_state=self._load_state,
                unread_count=self.unread_count(),
                critical_count=self.critical_count(),
            )


__all__ = ["NotificationStore"]
