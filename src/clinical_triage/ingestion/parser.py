"""Validation of loosely shaped message payloads into raw domain records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.datetime_utils import ensure_utc, utc_now
from ..core.models import (
    EmailSender,
    NotificationSource,
    RawEmail,
    RawNotification,
)

LOGGER = logging.getLogger(__name__)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SenderPayload(_Payload):
    """Email sender; every field is optional."""

    email: str | None = None
    name: str | None = None
    department: str | None = None
    is_internal: bool = Field(default=False, alias="isInternal")
    trust_score: int = Field(default=50, ge=0, le=100, alias="trustScore")


class EmailPayload(_Payload):
    """Inbound email as received from a source."""

    id: str = Field(min_length=1)
    subject: str | None = None
    preview: str | None = None
    sender: SenderPayload | None = None
    timestamp: datetime | None = None
    read: bool = False
    starred: bool = False
    has_attachments: bool = Field(default=False, alias="hasAttachments")


class SourcePayload(_Payload):
    """Notification originator; the type falls back to ``unknown``."""

    type: str | None = None
    id: str | None = None
    name: str | None = None
    department: str | None = None


class NotificationPayload(_Payload):
    """Inbound notification as received from a source."""

    id: str = Field(min_length=1)
    title: str | None = None
    message: str | None = None
    timestamp: datetime | None = None
    read: bool = False
    source: SourcePayload | None = None
    related_patient_id: str | None = Field(default=None, alias="relatedPatientId")
    related_patient_name: str | None = Field(
        default=None, alias="relatedPatientName"
    )


def parse_email_payload(
    payload: Mapping[str, Any], *, received_at: datetime | None = None
) -> RawEmail:
    """Validate ``payload`` into a :class:`RawEmail`.

    Missing text becomes empty and a missing timestamp becomes
    ``received_at``. Raises :class:`pydantic.ValidationError` when the id is
    missing or a field cannot be coerced.
    """
    model = EmailPayload.model_validate(payload)
    sender = model.sender or SenderPayload()
    return RawEmail(
        id=model.id,
        subject=model.subject or "",
        preview=model.preview or "",
        sender=EmailSender(
            email=sender.email or "",
            name=sender.name or "",
            department=sender.department,
            is_internal=sender.is_internal,
            trust_score=sender.trust_score,
        ),
        timestamp=_resolve_timestamp(model.timestamp, received_at),
        read=model.read,
        starred=model.starred,
        has_attachments=model.has_attachments,
    )


def parse_notification_payload(
    payload: Mapping[str, Any], *, received_at: datetime | None = None
) -> RawNotification:
    """Validate ``payload`` into a :class:`RawNotification`."""
    model = NotificationPayload.model_validate(payload)
    source = model.source or SourcePayload()
    return RawNotification(
        id=model.id,
        title=model.title or "",
        message=model.message or "",
        timestamp=_resolve_timestamp(model.timestamp, received_at),
        read=model.read,
        source=NotificationSource(
            type=(source.type or "unknown").strip().casefold() or "unknown",
            id=source.id or "",
            name=source.name or "",
            department=source.department,
        ),
        related_patient_id=model.related_patient_id,
        related_patient_name=model.related_patient_name,
    )


def coerce_emails(items: Iterable[RawEmail | Mapping[str, Any]]) -> list[RawEmail]:
    """Accept raw records or payload mappings, dropping malformed entries."""
    received_at = utc_now()
    emails: list[RawEmail] = []
    for item in items:
        if isinstance(item, RawEmail):
            emails.append(item)
            continue
        try:
            emails.append(parse_email_payload(_as_mapping(item), received_at=received_at))
        except (ValidationError, TypeError) as exc:
            LOGGER.warning("Dropping malformed email payload: %s", exc)
    return emails


def coerce_notifications(
    items: Iterable[RawNotification | Mapping[str, Any]],
) -> list[RawNotification]:
    """Accept raw records or payload mappings, dropping malformed entries."""
    received_at = utc_now()
    notifications: list[RawNotification] = []
    for item in items:
        if isinstance(item, RawNotification):
            notifications.append(item)
            continue
        try:
            notifications.append(
                parse_notification_payload(_as_mapping(item), received_at=received_at)
            )
        except (ValidationError, TypeError) as exc:
            LOGGER.warning("Dropping malformed notification payload: %s", exc)
    return notifications


def _as_mapping(item: Any) -> Mapping[str, Any]:
    if not isinstance(item, Mapping):
        raise TypeError(f"expected a mapping, got {type(item).__name__}")
    return item


def _resolve_timestamp(value: datetime | None, fallback: datetime | None) -> datetime:
    if value is None:
        return fallback or utc_now()
    return ensure_utc(value) or value


__all__ = [
    "EmailPayload",
    "NotificationPayload",
    "coerce_emails",
    "coerce_notifications",
    "parse_email_payload",
    "parse_notification_payload",
]
