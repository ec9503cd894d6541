"""In-memory email store with folder counters and view state."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence

from ..core.config import InboxSettings, SortKey, SortOrder
from ..core.models import (
    ARCHIVE_FOLDER,
    EMAIL_FOLDERS,
    AnalyzedEmail,
    EmailFilters,
    EmailSnapshot,
)
from .base import BucketedStore

LOGGER = logging.getLogger(__name__)


class EmailStore(BucketedStore[AnalyzedEmail]):
    """Analysed emails plus per-folder counters, filters, sort and selection.

    Folder counters always equal a fresh scan of the stored emails: for every
    folder, ``total`` is the number of emails listing it and ``unread`` the
    number of those not yet read.
    """

    def __init__(
        self,
        settings: InboxSettings | None = None,
        *,
        folders: Iterable[str] = EMAIL_FOLDERS,
    ) -> None:
        super().__init__(folders)
        inbox = settings or InboxSettings()
        self._active_folder = inbox.default_folder
        self._filters = EmailFilters()
        self._sort_by: SortKey = inbox.sort_by
        self._sort_order: SortOrder = inbox.sort_order

    def _buckets_of(self, record: AnalyzedEmail) -> Sequence[str]:
        return record.folders

    def _is_critical(self, record: AnalyzedEmail) -> bool:
        return record.analysis.priority == "critical"

    # Flag mutations -----------------------------------------------------------
    def mark_read(self, email_id: str) -> None:
        if self._set_read(email_id, True):
            LOGGER.debug("Marked email %s read", email_id)

    def mark_unread(self, email_id: str) -> None:
        if self._set_read(email_id, False):
            LOGGER.debug("Marked email %s unread", email_id)

    def toggle_star(self, email_id: str) -> None:
        with self._lock:
            email = self._records.get(email_id)
            if email is None:
                LOGGER.debug("Ignoring star toggle for unknown id %s", email_id)
                return
            email.starred = not email.starred

    def mark_all_read(self, folder: str | None = None) -> None:
        """Mark every email in ``folder`` (or every email) as read."""
        changed = self._mark_all_read(folder)
        LOGGER.debug("Marked %d email(s) read in %s", changed, folder or "all folders")

    # Membership mutations -----------------------------------------------------
    def delete_email(self, email_id: str) -> None:
        if self._remove(email_id) is not None:
            LOGGER.debug("Deleted email %s", email_id)

    def archive_email(self, email_id: str) -> None:
        """Move an email out of all its folders into the archive folder."""
        with self._lock:
            email = self._records.get(email_id)
            if email is None:
                LOGGER.debug("Ignoring archive of unknown id %s", email_id)
                return
            self._detach(email)
            email.folders = [ARCHIVE_FOLDER]
            self._attach(email)
        LOGGER.debug("Archived email %s", email_id)

    # View state ---------------------------------------------------------------
    @property
    def active_folder(self) -> str:
        return self._active_folder

    @property
    def filters(self) -> EmailFilters:
        return self._filters

    def set_active_folder(self, folder: str) -> None:
        with self._lock:
            self._active_folder = folder
            self._selected_id = None

    def set_filters(self, filters: EmailFilters) -> None:
        with self._lock:
            self._filters = filters

    def clear_search(self) -> None:
        with self._lock:
            self._filters = dataclasses.replace(self._filters, search=None)

    def set_sort_by(self, sort_by: SortKey) -> None:
        with self._lock:
            self._sort_by = sort_by

    def set_sort_order(self, sort_order: SortOrder) -> None:
        with self._lock:
            self._sort_order = sort_order

    def snapshot(self) -> EmailSnapshot:
        """Return a detached copy of records, counters and view state."""
        with self._lock:
            return EmailSnapshot(
                emails=tuple(
                    dataclasses.replace(email, folders=list(email.folders))
                    for email in self._records.values()
                ),
                folder_counts=self._copy_counts(),
                active_folder=self._active_folder,
                selected_id=self._selected_id,
                filters=self._filters,
                sort_by=self._sort_by,
                sort_order=self._sort_order,
                load_state=self._load_state,
                unread_count=self.unread_count(),
                critical_count=self.critical_count(),
            )


__all__ = ["EmailStore"]
