"""Ingestion pipeline components."""

from .loader import InboxLoader, RefreshScheduler, email_loader, notification_loader
from .parser import (
    coerce_emails,
    coerce_notifications,
    parse_email_payload,
    parse_notification_payload,
)
from .sources import JsonFileSource, sample_emails, sample_notifications, sample_sources

__all__ = [
    "InboxLoader",
    "JsonFileSource",
    "RefreshScheduler",
    "coerce_emails",
    "coerce_notifications",
    "email_loader",
    "notification_loader",
    "parse_email_payload",
    "parse_notification_payload",
    "sample_emails",
    "sample_notifications",
    "sample_sources",
]
