"""Core domain models used across the application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

EmailPriority = Literal["critical", "high", "medium", "low"]
NotificationCriticality = Literal["critical", "high", "medium", "low", "info"]

EmailCategory = Literal[
    "clinical-urgent",
    "clinical-routine",
    "lab-results",
    "referral",
    "insurance",
    "appointment",
    "administrative",
    "newsletter",
]

NotificationCategory = Literal[
    "clinical-emergency",
    "clinical-urgent",
    "clinical-routine",
    "administrative-urgent",
    "administrative-routine",
    "system",
    "communication",
]

SourceType = Literal[
    "patient", "doctor", "nurse", "admin", "system", "lab", "pharmacy", "unknown"
]

ActionType = Literal["navigate", "acknowledge", "dismiss", "delegate", "respond"]
ActionEmphasis = Literal["primary", "secondary", "danger"]

# Lower rank sorts first.
PRIORITY_ORDER: dict[str, int] = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 3,
}
CRITICALITY_ORDER: dict[str, int] = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 3,
    "info": 4,
}

EMAIL_FOLDERS: tuple[str, ...] = (
    "inbox",
    "urgent",
    "clinical",
    "lab-results",
    "referrals",
    "insurance",
    "administrative",
)
NOTIFICATION_CATEGORIES: tuple[str, ...] = (
    "clinical-emergency",
    "clinical-urgent",
    "clinical-routine",
    "administrative-urgent",
    "administrative-routine",
    "system",
    "communication",
)
DEFAULT_FOLDER = "inbox"
ARCHIVE_FOLDER = "administrative"


@dataclass(frozen=True, slots=True)
class EmailSender:
    """Who sent an email."""

    email: str
    name: str
    department: str | None = None
    is_internal: bool = False
    trust_score: int = 50


@dataclass(frozen=True, slots=True)
class RawEmail:
    """Email as delivered by a source, before analysis."""

    id: str
    subject: str
    preview: str
    sender: EmailSender
    timestamp: datetime
    read: bool = False
    starred: bool = False
    has_attachments: bool = False


@dataclass(frozen=True, slots=True)
class NotificationSource:
    """Originator of a notification."""

    type: str
    id: str
    name: str
    department: str | None = None


@dataclass(frozen=True, slots=True)
class RawNotification:
    """Notification as delivered by a source, before analysis."""

    id: str
    title: str
    message: str
    timestamp: datetime
    source: NotificationSource
    read: bool = False
    related_patient_id: str | None = None
    related_patient_name: str | None = None


@dataclass(frozen=True, slots=True)
class KeywordScore:
    """Outcome of lexical scoring for a piece of text."""

    label: str
    confidence: int
    indicators: tuple[str, ...]
    score: float


@dataclass(frozen=True, slots=True)
class TimeContext:
    """Recency facts reported next to, never folded into, a notification label."""

    is_recent: bool
    minutes_ago: int
    urgency_multiplier: float


@dataclass(frozen=True, slots=True)
class NotificationAction:
    """Follow-up a user can take on a notification."""

    id: str
    label: str
    type: ActionType
    priority: ActionEmphasis
    url: str | None = None


@dataclass(frozen=True, slots=True)
class EmailAnalysis:
    """Triage result attached to an email."""

    priority: EmailPriority
    category: EmailCategory
    confidence: int
    urgency_indicators: tuple[str, ...]
    estimated_response_time: str
    requires_action: bool


@dataclass(frozen=True, slots=True)
class NotificationAnalysis:
    """Triage result attached to a notification."""

    criticality: NotificationCriticality
    category: NotificationCategory
    confidence: int
    keywords: tuple[str, ...]
    suggested_actions: tuple[NotificationAction, ...]
    time_context: TimeContext
    requires_response: bool


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class AnalyzedEmail:
    """Email held by the store; only ``read``, ``starred`` and ``folders`` change."""

    id: str
    subject: str
    preview: str
    sender: EmailSender
    timestamp: datetime
    read: bool
    starred: bool
    has_attachments: bool
    analysis: EmailAnalysis
    folders: list[str] = field(default_factory=list)


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class AnalyzedNotification:
    """Notification held by the store; only ``read`` changes."""

    id: str
    title: str
    message: str
    timestamp: datetime
    source: NotificationSource
    read: bool
    analysis: NotificationAnalysis
    related_patient_id: str | None = None
    related_patient_name: str | None = None

    @property
    def category(self) -> str:
        return self.analysis.category


@dataclass(slots=True)
class FolderCount:
    """Per-bucket badge counters."""

    total: int = 0
    unread: int = 0


@dataclass(frozen=True, slots=True)
class EmailFilters:
    """Email list filters; ``None`` disables a criterion."""

    priority: tuple[str, ...] | None = None
    read: bool | None = None
    starred: bool | None = None
    search: str | None = None


@dataclass(frozen=True, slots=True)
class NotificationFilters:
    """Notification list filters; ``None`` disables a criterion."""

    criticality: tuple[str, ...] | None = None
    category: tuple[str, ...] | None = None
    read: bool | None = None
    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True, slots=True)
class LoadState:
    """Status of the most recent bulk load."""

    loading: bool = False
    error: str | None = None
    loaded_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class EmailSnapshot:
    """Consistent copy of the email store taken under its lock."""

    emails: tuple[AnalyzedEmail, ...]
    folder_counts: dict[str, FolderCount]
    active_folder: str
    selected_id: str | None
    filters: EmailFilters
    sort_by: str
    sort_order: str
    load_state: LoadState
    unread_count: int = 0
    critical_count: int = 0


@dataclass(frozen=True, slots=True)
class NotificationSnapshot:
    """Consistent copy of the notification store taken under its lock."""

    notifications: tuple[AnalyzedNotification, ...]
    category_counts: dict[str, FolderCount]
    selected_id: str | None
    filters: NotificationFilters
    load_state: LoadState
    unread_count: int = 0
    critical_count: int = 0


__all__ = [
    "ARCHIVE_FOLDER",
    "CRITICALITY_ORDER",
    "DEFAULT_FOLDER",
    "EMAIL_FOLDERS",
    "NOTIFICATION_CATEGORIES",
    "PRIORITY_ORDER",
    "AnalyzedEmail",
    "AnalyzedNotification",
    "EmailAnalysis",
    "EmailFilters",
    "EmailSender",
    "EmailSnapshot",
    "FolderCount",
    "KeywordScore",
    "LoadState",
    "NotificationAction",
    "NotificationAnalysis",
    "NotificationFilters",
    "NotificationSnapshot",
    "NotificationSource",
    "RawEmail",
    "RawNotification",
    "TimeContext",
]
