"""Tests for keyword scoring of emails and notifications."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from clinical_triage.core.models import CRITICALITY_ORDER, PRIORITY_ORDER, EmailSender
from clinical_triage.intelligence.priority import (
    detect_sender_type,
    score_email,
    score_notification,
    sender_trust_modifier,
    source_modifier,
    time_context,
)

NOW = datetime(2025, 10, 26, 12, 0, tzinfo=timezone.utc)


def _lab_sender() -> EmailSender:
    return EmailSender(email="lab@hospital.org", name="Clinical Laboratory")


def test_stat_lab_email_is_critical() -> None:
    result = score_email(
        "STAT: Critical Lab Results - Potassium 7.2", "", _lab_sender()
    )

    assert sender_trust_modifier(_lab_sender()) == pytest.approx(0.95)
    assert result.label == "critical"
    assert "stat" in result.indicators
    assert "critical" in result.indicators
    assert result.confidence == 98


def test_newsletter_without_keywords_is_low() -> None:
    sender = EmailSender(email="newsletter@hospital.org", name="Communications")

    result = score_email("Weekly Staff Newsletter", "", sender)

    assert result.label == "low"
    assert result.indicators == ()
    assert result.confidence == 75


def test_empty_text_scores_lowest_band() -> None:
    email = score_email(None, None, None)
    notification = score_notification("", "", None)

    assert (email.label, email.confidence, email.indicators) == ("low", 75, ())
    assert (notification.label, notification.confidence) == ("info", 70)
    assert notification.indicators == ()


def test_overlapping_keywords_each_contribute() -> None:
    result = score_email("critical lab", "", _lab_sender())

    assert result.indicators == ("critical", "critical lab")
    assert result.score == pytest.approx(190.0)


def test_high_band_confidence_for_doctor_sender() -> None:
    sender = EmailSender(email="smith@clinic.org", name="Dr. Smith")

    result = score_email("Reply ASAP", "", sender)

    assert detect_sender_type(sender.email, sender.name) == "doctor"
    assert result.score == pytest.approx(34.0)
    assert result.label == "high"
    assert result.confidence == 77


@pytest.mark.parametrize(
    ("address", "name", "expected"),
    [
        ("lab@hospital.org", "Clinical Laboratory", "lab"),
        ("rx@hospital.org", "Central Pharmacy", "pharmacy"),
        ("scans@hospital.org", "Imaging Center", "radiology"),
        ("ed@hospital.org", "Front Desk", "emergency"),
        ("kim@hospital.org", "Kim Lee RN", "nurse"),
        ("hr@hospital.org", "People Team", "admin"),
        ("info@vendor.com", "Vendor", "external"),
        ("shared-services@hospital.org", "Shared Services", "emergency"),
        ("hundred@vendor.com", "Vendor", "emergency"),
        ("md.jones@clinic.org", "Jones", "doctor"),
        ("smith@clinic.org", "Dr Smith", "external"),
        (None, None, "external"),
    ],
)
def test_detect_sender_type(address: str | None, name: str | None, expected: str) -> None:
    assert detect_sender_type(address, name) == expected


def test_short_sender_markers_match_inside_words() -> None:
    sender = EmailSender(email="shared-services@hospital.org", name="Shared Services")

    result = score_email("Important priority", "", sender)

    assert sender_trust_modifier(sender) == pytest.approx(1.0)
    assert result.score == pytest.approx(80.0)
    assert (result.label, result.confidence) == ("critical", 88)


def test_unknown_notification_source_uses_default_modifier() -> None:
    result = score_notification("Urgent", "", "robot")

    assert source_modifier("robot") == 1.0
    assert result.label == "high"
    assert result.confidence == 76


def test_notification_bands() -> None:
    critical = score_notification(
        "CODE BLUE - Room 412",
        "Patient John Smith experiencing cardiac arrest. Immediate response required.",
        "nurse",
    )
    medium = score_notification(
        "Appointment Reminder",
        "Dr. Williams has 3 upcoming appointments in the next hour.",
        "system",
    )
    low = score_notification(
        "System Maintenance Notice",
        "Scheduled maintenance tonight 2-4 AM. Brief interruptions expected.",
        "system",
    )

    assert (critical.label, critical.confidence) == ("critical", 98)
    assert critical.indicators == ("code blue", "cardiac arrest", "immediate")
    assert (medium.label, medium.confidence) == ("medium", 66)
    assert (low.label, low.confidence) == ("low", 75)


def test_scoring_is_deterministic() -> None:
    first = score_notification("Drug interaction", "pending review", "pharmacy")
    second = score_notification("Drug interaction", "pending review", "pharmacy")

    assert first == second


def test_higher_scores_never_lower_the_label() -> None:
    email_keywords = ["priority", "asap", "important", "escalation", "urgent", "stat"]
    notification_keywords = ["fyi", "pending", "awaiting", "urgent", "asap", "sepsis"]
    sender = _lab_sender()

    email_results = [
        score_email(" ".join(email_keywords[:count]), "", sender)
        for count in range(len(email_keywords) + 1)
    ]
    notification_results = [
        score_notification(" ".join(notification_keywords[:count]), "", "doctor")
        for count in range(len(notification_keywords) + 1)
    ]

    for earlier, later in zip(email_results, email_results[1:]):
        assert later.score >= earlier.score
        assert PRIORITY_ORDER[later.label] <= PRIORITY_ORDER[earlier.label]
    for earlier, later in zip(notification_results, notification_results[1:]):
        assert later.score >= earlier.score
        assert CRITICALITY_ORDER[later.label] <= CRITICALITY_ORDER[earlier.label]


@pytest.mark.parametrize(
    ("minutes", "recent", "multiplier"),
    [(2, True, 1.5), (10, True, 1.2), (20, True, 1.0), (600, False, 1.0)],
)
def test_time_context(minutes: int, recent: bool, multiplier: float) -> None:
    context = time_context(NOW - timedelta(minutes=minutes), NOW)

    assert context.minutes_ago == minutes
    assert context.is_recent is recent
    assert context.urgency_multiplier == multiplier


def test_time_context_clamps_future_timestamps() -> None:
    context = time_context(NOW + timedelta(minutes=3), NOW)

    assert context.minutes_ago == 0
    assert context.urgency_multiplier == 1.5
