"""Pure selection functions turning store snapshots into display lists."""

from __future__ import annotations

from datetime import datetime

from ..core.datetime_utils import ensure_utc
from ..core.models import (
    CRITICALITY_ORDER,
    PRIORITY_ORDER,
    AnalyzedEmail,
    AnalyzedNotification,
    EmailFilters,
    EmailSnapshot,
    NotificationFilters,
    NotificationSnapshot,
)


def select_filtered_emails(snapshot: EmailSnapshot) -> list[AnalyzedEmail]:
    """Return the emails of the active folder that pass every filter, sorted.

    Sort keys: ``priority`` ranks critical first, ``date`` ranks newest first
    and ``sender`` orders display names alphabetically; ``desc`` reverses the
    key. Emails with equal priority are always listed newest first.
    """
    visible = [
        email
        for email in snapshot.emails
        if snapshot.active_folder in email.folders
        and _email_matches(email, snapshot.filters)
    ]
    reverse = snapshot.sort_order == "desc"

    if snapshot.sort_by == "priority":
        visible.sort(key=lambda email: _timestamp_key(email.timestamp), reverse=True)
        visible.sort(
            key=lambda email: PRIORITY_ORDER.get(email.analysis.priority, 99),
            reverse=reverse,
        )
    elif snapshot.sort_by == "date":
        visible.sort(
            key=lambda email: _timestamp_key(email.timestamp), reverse=not reverse
        )
    elif snapshot.sort_by == "sender":
        visible.sort(key=lambda email: email.sender.name.casefold(), reverse=reverse)
    return visible


def select_selected_email(snapshot: EmailSnapshot) -> AnalyzedEmail | None:
    if snapshot.selected_id is None:
        return None
    for email in snapshot.emails:
        if email.id == snapshot.selected_id:
            return email
    return None


def select_filtered_notifications(
    snapshot: NotificationSnapshot,
) -> list[AnalyzedNotification]:
    """Return matching notifications, most critical first then newest first."""
    visible = [
        notification
        for notification in snapshot.notifications
        if _notification_matches(notification, snapshot.filters)
    ]
    visible.sort(
        key=lambda notification: _timestamp_key(notification.timestamp), reverse=True
    )
    visible.sort(
        key=lambda notification: CRITICALITY_ORDER.get(
            notification.analysis.criticality, 99
        )
    )
    return visible


def _email_matches(email: AnalyzedEmail, filters: EmailFilters) -> bool:
    if filters.priority and email.analysis.priority not in filters.priority:
        return False
    if filters.read is not None and email.read != filters.read:
        return False
    if filters.starred is not None and email.starred != filters.starred:
        return False
    if filters.search:
        needle = filters.search.casefold()
        fields = (email.subject, email.preview, email.sender.name, email.sender.email)
        if not any(needle in (value or "").casefold() for value in fields):
            return False
    return True


def _notification_matches(
    notification: AnalyzedNotification, filters: NotificationFilters
) -> bool:
    analysis = notification.analysis
    if filters.criticality and analysis.criticality not in filters.criticality:
        return False
    if filters.category and analysis.category not in filters.category:
        return False
    if filters.read is not None and notification.read != filters.read:
        return False
    timestamp = _timestamp_key(notification.timestamp)
    if filters.start is not None and timestamp < _timestamp_key(filters.start):
        return False
    if filters.end is not None and timestamp > _timestamp_key(filters.end):
        return False
    return True


def _timestamp_key(value: datetime) -> datetime:
    return ensure_utc(value) or value


__all__ = [
    "select_filtered_emails",
    "select_filtered_notifications",
    "select_selected_email",
]
