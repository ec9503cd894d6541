"""Deterministic triage: keyword scoring, routing and action suggestion."""

from .actions import suggest_actions
from .assembler import (
    EmailTriageService,
    NotificationTriageService,
    estimated_response_time,
)
from .category import (
    FolderRule,
    KeywordFolderService,
    categorize_email,
    categorize_notification,
)
from .priority import (
    detect_sender_type,
    score_email,
    score_notification,
    time_context,
)

__all__ = [
    "EmailTriageService",
    "FolderRule",
    "KeywordFolderService",
    "NotificationTriageService",
    "categorize_email",
    "categorize_notification",
    "detect_sender_type",
    "estimated_response_time",
    "score_email",
    "score_notification",
    "suggest_actions",
    "time_context",
]
