"""Message sources: the built-in sample set and JSON files on disk."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from ..core.datetime_utils import utc_now
from ..core.interfaces import IngestionError
from ..core.models import (
    EmailSender,
    NotificationSource,
    RawEmail,
    RawNotification,
)

LOGGER = logging.getLogger(__name__)


def sample_emails(now: datetime | None = None) -> list[RawEmail]:
    """Return the demo inbox with timestamps relative to ``now``."""
    reference = now or utc_now()
    return [
        RawEmail(
            id="email-001",
            subject="STAT: Critical Lab Results - Potassium 7.2",
            preview="Immediate attention required. Patient James Wilson has "
            "critically elevated potassium...",
            sender=EmailSender(
                email="lab@hospital.org",
                name="Clinical Laboratory",
                is_internal=True,
                trust_score=95,
            ),
            timestamp=reference - timedelta(minutes=5),
            read=False,
            starred=True,
            has_attachments=True,
        ),
        RawEmail(
            id="email-002",
            subject="URGENT: Pre-Authorization Denied - Patient needs surgery",
            preview="Insurance has denied pre-authorization for scheduled cardiac "
            "procedure. Appeal deadline...",
            sender=EmailSender(
                email="insurance@hospital.org",
                name="Insurance Coordinator",
                is_internal=True,
                trust_score=80,
            ),
            timestamp=reference - timedelta(minutes=30),
            has_attachments=True,
        ),
        RawEmail(
            id="email-003",
            subject="New Referral: Cardiology Consultation",
            preview="New patient referral from Dr. Martinez for cardiac evaluation...",
            sender=EmailSender(
                email="referrals@clinic.org",
                name="Referral Coordinator",
                is_internal=True,
                trust_score=75,
            ),
            timestamp=reference - timedelta(hours=2),
        ),
        RawEmail(
            id="email-004",
            subject="Weekly Staff Newsletter",
            preview="This week in hospital news: New parking policy, cafeteria "
            "menu updates...",
            sender=EmailSender(
                email="newsletter@hospital.org",
                name="Communications",
                is_internal=True,
                trust_score=60,
            ),
            timestamp=reference - timedelta(hours=24),
            read=True,
        ),
    ]


def sample_notifications(now: datetime | None = None) -> list[RawNotification]:
    """Return the demo notification feed with timestamps relative to ``now``."""
    reference = now or utc_now()

    def ago(minutes: int) -> datetime:
        return reference - timedelta(minutes=minutes)

    return [
        RawNotification(
            id="notif-001",
            title="CODE BLUE - Room 412",
            message="Patient John Smith experiencing cardiac arrest. "
            "Immediate response required.",
            timestamp=ago(2),
            source=NotificationSource(
                type="nurse", id="nurse-001", name="Sarah Johnson", department="ICU"
            ),
            related_patient_id="patient-001",
            related_patient_name="John Smith",
        ),
        RawNotification(
            id="notif-002",
            title="Critical Lab Results - Potassium 6.8 mEq/L",
            message="Patient Maria Garcia has critically elevated potassium. "
            "Review and treat immediately.",
            timestamp=ago(5),
            source=NotificationSource(
                type="lab", id="lab-001", name="Clinical Laboratory"
            ),
            related_patient_id="patient-002",
            related_patient_name="Maria Garcia",
        ),
        RawNotification(
            id="notif-003",
            title="Drug Interaction Alert",
            message="Potential severe interaction detected: Warfarin + Aspirin "
            "for patient Robert Chen.",
            timestamp=ago(15),
            source=NotificationSource(
                type="pharmacy", id="pharm-001", name="Central Pharmacy"
            ),
            related_patient_id="patient-003",
            related_patient_name="Robert Chen",
        ),
        RawNotification(
            id="notif-004",
            title="Abnormal Lab Results",
            message="Patient Emily Davis has elevated liver enzymes. AST: 156, "
            "ALT: 189. Review needed.",
            timestamp=ago(45),
            source=NotificationSource(
                type="lab", id="lab-001", name="Clinical Laboratory"
            ),
            related_patient_id="patient-004",
            related_patient_name="Emily Davis",
        ),
        RawNotification(
            id="notif-005",
            title="Appointment Reminder",
            message="Dr. Williams has 3 upcoming appointments in the next hour.",
            timestamp=ago(60),
            read=True,
            source=NotificationSource(
                type="system", id="sys-001", name="Scheduling System"
            ),
        ),
        RawNotification(
            id="notif-006",
            title="New Message from Dr. Patel",
            message="Regarding patient discharge summary for room 305.",
            timestamp=ago(90),
            source=NotificationSource(
                type="doctor",
                id="doc-001",
                name="Dr. Patel",
                department="Internal Medicine",
            ),
        ),
        RawNotification(
            id="notif-007",
            title="Staff Meeting Reminder",
            message="Weekly department meeting at 2:00 PM in Conference Room A.",
            timestamp=ago(120),
            read=True,
            source=NotificationSource(type="admin", id="admin-001", name="HR Department"),
        ),
        RawNotification(
            id="notif-008",
            title="System Maintenance Notice",
            message="Scheduled maintenance tonight 2-4 AM. Brief interruptions expected.",
            timestamp=ago(180),
            read=True,
            source=NotificationSource(type="system", id="sys-001", name="IT Department"),
        ),
    ]


class JsonFileSource:
    """Read ``{"emails": [...], "notifications": [...]}`` from disk on every call.

    Payload entries are returned as mappings; the loader validates them.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def emails(self) -> list[dict[str, Any]]:
        return self._section("emails")

    def notifications(self) -> list[dict[str, Any]]:
        return self._section("notifications")

    def _section(self, key: str) -> list[dict[str, Any]]:
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise IngestionError(f"Cannot read {self._path}: {exc}") from exc
        if not isinstance(document, dict):
            raise IngestionError(f"{self._path} must contain a JSON object")
        section = document.get(key, [])
        if not isinstance(section, list):
            raise IngestionError(f"'{key}' in {self._path} must be a list")
        LOGGER.debug("Read %d %s entries from %s", len(section), key, self._path)
        return section


def sample_sources(
    clock: Callable[[], datetime] = utc_now,
) -> tuple[Callable[[], list[RawEmail]], Callable[[], list[RawNotification]]]:
    """Return email and notification sources backed by the sample set."""
    return (
        lambda: sample_emails(clock()),
        lambda: sample_notifications(clock()),
    )


__all__ = [
    "JsonFileSource",
    "sample_emails",
    "sample_notifications",
    "sample_sources",
]
