"""Tests for assembling analysed emails and notifications."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from clinical_triage.core.models import NotificationSource, RawNotification
from clinical_triage.ingestion import sample_emails
from clinical_triage.intelligence import (
    EmailTriageService,
    NotificationTriageService,
    estimated_response_time,
    suggest_actions,
)

NOW = datetime(2025, 10, 26, 12, 0, tzinfo=timezone.utc)


def _notification(
    *,
    title: str,
    message: str = "",
    source_type: str = "system",
    age: timedelta = timedelta(minutes=1),
    patient_id: str | None = None,
) -> RawNotification:
    return RawNotification(
        id="n-1",
        title=title,
        message=message,
        timestamp=NOW - age,
        source=NotificationSource(type=source_type, id="src-1", name="Source"),
        related_patient_id=patient_id,
    )


def test_email_analysis_combines_score_category_and_folders() -> None:
    raw = {email.id: email for email in sample_emails(NOW)}["email-001"]

    analysed = EmailTriageService().analyze(raw)

    assert analysed.analysis.priority == "critical"
    assert analysed.analysis.category == "lab-results"
    assert analysed.analysis.requires_action is True
    assert analysed.analysis.estimated_response_time == "Immediate"
    assert analysed.folders == ["urgent", "lab-results", "clinical"]
    assert analysed.read is False
    assert analysed.starred is True


def test_low_priority_email_needs_no_action() -> None:
    raw = {email.id: email for email in sample_emails(NOW)}["email-003"]

    analysed = EmailTriageService().analyze(raw)

    assert analysed.analysis.priority == "low"
    assert analysed.analysis.category == "referral"
    assert analysed.analysis.requires_action is False
    assert analysed.folders == ["referrals", "clinical"]


@pytest.mark.parametrize(
    ("priority", "expected"),
    [
        ("critical", "Immediate"),
        ("high", "< 2 hours"),
        ("medium", "< 24 hours"),
        ("low", "When available"),
    ],
)
def test_estimated_response_time(priority: str, expected: str) -> None:
    assert estimated_response_time(priority) == expected


def test_stale_system_notification_is_info_with_dismiss_only() -> None:
    service = NotificationTriageService(clock=lambda: NOW)

    analysed = service.analyze(
        _notification(
            title="Backup job", message="Nightly export ran", age=timedelta(hours=10)
        )
    )

    analysis = analysed.analysis
    assert analysis.criticality == "info"
    assert analysis.category == "system"
    assert analysis.time_context.is_recent is False
    assert analysis.time_context.minutes_ago == 600
    assert [action.id for action in analysis.suggested_actions] == ["dismiss"]
    assert analysis.requires_response is False


def test_critical_notification_links_to_patient() -> None:
    service = NotificationTriageService(clock=lambda: NOW)

    analysed = service.analyze(
        _notification(
            title="Code blue", source_type="nurse", patient_id="patient-001"
        )
    )

    actions = analysed.analysis.suggested_actions
    assert analysed.analysis.criticality == "critical"
    assert analysed.analysis.category == "clinical-emergency"
    assert analysed.analysis.requires_response is True
    assert analysed.analysis.time_context.urgency_multiplier == 1.5
    assert [action.id for action in actions] == ["respond-now", "acknowledge", "dismiss"]
    assert actions[0].url == "/patient/patient-001"
    assert actions[0].priority == "danger"


def test_suggest_actions_without_patient_uses_list_views() -> None:
    critical = suggest_actions("critical")
    high = suggest_actions("high")
    medium = suggest_actions("medium")

    assert critical[0].url == "/patients"
    assert [action.id for action in high] == ["review", "dismiss"]
    assert high[0].url == "/notifications"
    assert [action.id for action in medium] == ["dismiss"]
    assert all(action.id == "dismiss" for action in (critical[-1], high[-1]))
