"""Services combining scoring, routing and action suggestion into records."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from clinical_triage.core.datetime_utils import utc_now
from clinical_triage.core.interfaces import FolderService
from clinical_triage.core.models import (
    AnalyzedEmail,
    AnalyzedNotification,
    EmailAnalysis,
    EmailSender,
    KeywordScore,
    NotificationAnalysis,
    RawEmail,
    RawNotification,
)

from .actions import suggest_actions
from .category import KeywordFolderService, categorize_email, categorize_notification
from .priority import score_email, score_notification, time_context

LOGGER = logging.getLogger(__name__)

_RESPONSE_TIMES = {
    "critical": "Immediate",
    "high": "< 2 hours",
    "medium": "< 24 hours",
    "low": "When available",
}
_ACTIONABLE = frozenset({"critical", "high"})


def estimated_response_time(priority: str) -> str:
    """Return the display string for how soon an email needs an answer."""
    return _RESPONSE_TIMES.get(priority, _RESPONSE_TIMES["low"])


class EmailTriageService:
    """Turn raw emails into analysed, folder-routed records."""

    def __init__(
        self,
        folder_service: FolderService | None = None,
        *,
        scorer: Callable[
            [str | None, str | None, EmailSender | None], KeywordScore
        ] = score_email,
    ) -> None:
        self._folder_service = folder_service or KeywordFolderService()
        self._scorer = scorer

    def analyze(self, email: RawEmail) -> AnalyzedEmail:
        """Produce an :class:`AnalyzedEmail` for ``email``."""
        scored = self._scorer(email.subject, email.preview, email.sender)
        analysis = EmailAnalysis(
            priority=scored.label,  # type: ignore[arg-type]
            category=categorize_email(  # type: ignore[arg-type]
                email.subject, email.preview, scored.indicators
            ),
            confidence=scored.confidence,
            urgency_indicators=scored.indicators,
            estimated_response_time=estimated_response_time(scored.label),
            requires_action=scored.label in _ACTIONABLE,
        )
        folders = list(self._folder_service.route(email.subject, email.preview))
        LOGGER.debug(
            "Email %s scored %.1f -> %s in %s",
            email.id,
            scored.score,
            scored.label,
            folders,
        )
        return AnalyzedEmail(
            id=email.id,
            subject=email.subject,
            preview=email.preview,
            sender=email.sender,
            timestamp=email.timestamp,
            read=email.read,
            starred=email.starred,
            has_attachments=email.has_attachments,
            analysis=analysis,
            folders=folders,
        )

    __call__ = analyze


class NotificationTriageService:
    """Turn raw notifications into analysed records with suggested actions."""

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    def analyze(
        self, notification: RawNotification, now: datetime | None = None
    ) -> AnalyzedNotification:
        """Produce an :class:`AnalyzedNotification` for ``notification``."""
        reference = now or self._clock()
        source_type = notification.source.type
        scored = score_notification(
            notification.title, notification.message, source_type
        )
        criticality = scored.label
        analysis = NotificationAnalysis(
            criticality=criticality,  # type: ignore[arg-type]
            category=categorize_notification(  # type: ignore[arg-type]
                source_type, notification.title, notification.message, criticality
            ),
            confidence=scored.confidence,
            keywords=scored.indicators,
            suggested_actions=suggest_actions(
                criticality, notification.related_patient_id
            ),
            time_context=time_context(notification.timestamp, reference),
            requires_response=criticality in _ACTIONABLE,
        )
        LOGGER.debug(
            "Notification %s scored %.1f -> %s (%s)",
            notification.id,
            scored.score,
            criticality,
            analysis.category,
        )
        return AnalyzedNotification(
            id=notification.id,
            title=notification.title,
            message=notification.message,
            timestamp=notification.timestamp,
            source=notification.source,
            read=notification.read,
            analysis=analysis,
            related_patient_id=notification.related_patient_id,
            related_patient_name=notification.related_patient_name,
        )

    def __call__(self, notification: RawNotification) -> AnalyzedNotification:
        return self.analyze(notification)


__all__ = [
    "EmailTriageService",
    "NotificationTriageService",
    "estimated_response_time",
]
