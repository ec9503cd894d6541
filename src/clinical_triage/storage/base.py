"""Shared machinery for in-memory stores with per-bucket counters."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from typing import Generic, TypeVar

from ..core.datetime_utils import utc_now
from ..core.models import AnalyzedEmail, AnalyzedNotification, FolderCount, LoadState

LOGGER = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", AnalyzedEmail, AnalyzedNotification)


def count_buckets(
    records: Iterable[RecordT],
    buckets_of: Callable[[RecordT], Sequence[str]],
    known_buckets: Iterable[str] = (),
) -> dict[str, FolderCount]:
    """Count total and unread records per bucket in a single scan."""
    counts = {bucket: FolderCount() for bucket in known_buckets}
    for record in records:
        for bucket in buckets_of(record):
            entry = counts.setdefault(bucket, FolderCount())
            entry.total += 1
            if not record.read:
                entry.unread += 1
    return counts


class BucketedStore(Generic[RecordT]):
    """Record collection whose bucket counters are updated incrementally.

    Every public method holds the store lock for its whole duration, so no
    caller ever sees counters that disagree with the records.
    """

    def __init__(self, known_buckets: Iterable[str] = ()) -> None:
        self._lock = threading.RLock()
        self._known_buckets = tuple(known_buckets)
        self._records: dict[str, RecordT] = {}
        self._counts: dict[str, FolderCount] = count_buckets(
            (), self._buckets_of, self._known_buckets
        )
        self._selected_id: str | None = None
        self._load_state = LoadState()

    # Subclass hooks -----------------------------------------------------------
    def _buckets_of(self, record: RecordT) -> Sequence[str]:
        raise NotImplementedError

    def _is_critical(self, record: RecordT) -> bool:
        raise NotImplementedError

    # Loading ------------------------------------------------------------------
    def load(self, records: Iterable[RecordT]) -> None:
        """Replace every record and rebuild counters from scratch."""
        incoming: dict[str, RecordT] = {}
        for record in records:
            if record.id in incoming:
                LOGGER.warning("Duplicate id %s in bulk load; keeping last", record.id)
            incoming[record.id] = record
        counts = count_buckets(
            incoming.values(), self._buckets_of, self._known_buckets
        )
        with self._lock:
            self._records = incoming
            self._counts = counts
            if self._selected_id not in incoming:
                self._selected_id = None
            self._load_state = LoadState(loaded_at=utc_now())
        LOGGER.info("%s loaded %d record(s)", type(self).__name__, len(incoming))

    def add(self, record: RecordT) -> None:
        """Insert a newly arrived record, replacing any record with its id."""
        with self._lock:
            existing = self._records.pop(record.id, None)
            if existing is not None:
                self._detach(existing)
            self._records[record.id] = record
            self._attach(record)

    def mark_loading(self) -> None:
        """Flag that a load is in flight; existing records stay visible."""
        with self._lock:
            self._load_state = LoadState(
                loading=True, error=None, loaded_at=self._load_state.loaded_at
            )

    def mark_failed(self, message: str) -> None:
        """Record a failed load while keeping the last good records."""
        with self._lock:
            self._load_state = LoadState(
                loading=False, error=message, loaded_at=self._load_state.loaded_at
            )

    # Read access --------------------------------------------------------------
    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    def counts(self) -> dict[str, FolderCount]:
        """Return a copy of the per-bucket counters."""
        with self._lock:
            return self._copy_counts()

    def get(self, record_id: str) -> RecordT | None:
        with self._lock:
            return self._records.get(record_id)

    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for record in self._records.values() if not record.read)

    def critical_count(self) -> int:
        """Number of unread records labelled critical."""
        with self._lock:
            return sum(
                1
                for record in self._records.values()
                if not record.read and self._is_critical(record)
            )

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    # Mutations ----------------------------------------------------------------
    def select(self, record_id: str | None) -> None:
        with self._lock:
            self._selected_id = record_id

    def _set_read(self, record_id: str, value: bool) -> bool:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                LOGGER.debug("Ignoring read=%s for unknown id %s", value, record_id)
                return False
            if record.read == value:
                return False
            record.read = value
            delta = -1 if value else 1
            for bucket in self._buckets_of(record):
                self._counts.setdefault(bucket, FolderCount()).unread += delta
            return True

    def _remove(self, record_id: str) -> RecordT | None:
        with self._lock:
            record = self._records.pop(record_id, None)
            if record is None:
                LOGGER.debug("Ignoring removal of unknown id %s", record_id)
                return None
            self._detach(record)
            if self._selected_id == record_id:
                self._selected_id = None
            return record

    def _mark_all_read(self, bucket: str | None) -> int:
        with self._lock:
            if bucket is not None and bucket not in self._counts:
                LOGGER.debug("Ignoring mark-all-read for unknown bucket %s", bucket)
                return 0
            changed = 0
            for record in self._records.values():
                buckets = self._buckets_of(record)
                if bucket is not None and bucket not in buckets:
                    continue
                if record.read:
                    continue
                record.read = True
                changed += 1
                for other in buckets:
                    if other != bucket:
                        self._counts[other].unread -= 1
            if bucket is None:
                for entry in self._counts.values():
                    entry.unread = 0
            else:
                self._counts[bucket].unread = 0
            return changed

    # Counter primitives (caller holds the lock) -------------------------------
    def _attach(self, record: RecordT) -> None:
        for bucket in self._buckets_of(record):
            entry = self._counts.setdefault(bucket, FolderCount())
            entry.total += 1
            if not record.read:
                entry.unread += 1

    def _detach(self, record: RecordT) -> None:
        for bucket in self._buckets_of(record):
            entry = self._counts.setdefault(bucket, FolderCount())
            entry.total -= 1
            if not record.read:
                entry.unread -= 1

    def _copy_counts(self) -> dict[str, FolderCount]:
        return {
            bucket: FolderCount(total=entry.total, unread=entry.unread)
            for bucket, entry in self._counts.items()
        }


__all__ = ["BucketedStore", "count_buckets"]
