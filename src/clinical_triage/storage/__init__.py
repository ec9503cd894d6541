"""In-memory aggregate stores and the query layer over them."""

from .base import BucketedStore, count_buckets
from .email_store import EmailStore
from .notification_store import NotificationStore
from .query import (
    select_filtered_emails,
    select_filtered_notifications,
    select_selected_email,
)

__all__ = [
    "BucketedStore",
    "EmailStore",
    "NotificationStore",
    "count_buckets",
    "select_filtered_emails",
    "select_filtered_notifications",
    "select_selected_email",
]
