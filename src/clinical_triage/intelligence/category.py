"""Rule-based folder routing and categorisation for emails and notifications."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from clinical_triage.core.interfaces import FolderService
from clinical_triage.core.models import DEFAULT_FOLDER

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FolderRule:
    """A folder is selected when any keyword occurs in the email text."""

    key: str
    keywords: tuple[str, ...]
    priority: int


DEFAULT_FOLDER_RULES: tuple[FolderRule, ...] = (
    FolderRule(
        key="urgent",
        keywords=("urgent", "stat", "critical", "immediate", "emergency", "asap"),
        priority=1,
    ),
    FolderRule(
        key="lab-results",
        keywords=("lab", "result", "test", "specimen", "pathology", "bloodwork"),
        priority=2,
    ),
    FolderRule(
        key="referrals",
        keywords=("referral", "consult", "transfer", "specialist"),
        priority=3,
    ),
    FolderRule(
        key="insurance",
        keywords=(
            "insurance",
            "authorization",
            "pre-auth",
            "claim",
            "coverage",
            "denied",
        ),
        priority=4,
    ),
    FolderRule(
        key="clinical",
        keywords=("patient", "diagnosis", "treatment", "medication", "prescription"),
        priority=5,
    ),
    FolderRule(
        key="administrative",
        keywords=("meeting", "schedule", "policy", "training", "hr", "payroll"),
        priority=6,
    ),
)


class KeywordFolderService(FolderService):
    """Assign email folders based on simple keyword heuristics."""

    def __init__(
        self,
        rules: Sequence[FolderRule] | None = None,
        *,
        default_folder: str = DEFAULT_FOLDER,
    ) -> None:
        self._rules: tuple[FolderRule, ...] = (
            tuple(rules) if rules is not None else DEFAULT_FOLDER_RULES
        )
        self._default_folder = default_folder

    @property
    def folder_keys(self) -> tuple[str, ...]:
        """Every folder this service can emit, default folder first."""
        keys = [self._default_folder]
        keys.extend(rule.key for rule in self._rules if rule.key not in keys)
        return tuple(keys)

    def route(self, subject: str | None, preview: str | None) -> tuple[str, ...]:
        """Return matched folders ordered by rule priority, or the default."""
        haystack = _build_haystack(subject, preview)
        matched = [
            rule for rule in self._rules if _contains_keyword(rule.keywords, haystack)
        ]
        if not matched:
            return (self._default_folder,)
        # Equal priorities keep rule-table order.
        ordered = sorted(matched, key=lambda rule: rule.priority)
        folders: list[str] = []
        for rule in ordered:
            if rule.key not in folders:
                folders.append(rule.key)
        return tuple(folders)


# First matching rule wins.
_EMAIL_CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("lab-results", ("lab", "result")),
    ("referral", ("referral",)),
    ("insurance", ("insurance", "auth")),
    ("appointment", ("appointment",)),
    ("newsletter", ("newsletter", "update")),
)


def categorize_email(
    subject: str | None, preview: str | None, indicators: Sequence[str]
) -> str:
    """Return the single content category for an email."""
    haystack = _build_haystack(subject, preview)
    for category, keywords in _EMAIL_CATEGORY_RULES:
        if _contains_keyword(keywords, haystack):
            return category
    if indicators:
        return "clinical-urgent"
    return "administrative"


_CLINICAL_SERVICE_SOURCES = frozenset({"lab", "pharmacy"})
_CARE_TEAM_SOURCES = frozenset({"patient", "doctor", "nurse"})
_SCHEDULING_KEYWORDS = ("appointment", "schedule")


def categorize_notification(
    source_type: str | None, title: str | None, message: str | None, criticality: str
) -> str:
    """Return the single category for a notification.

    The category depends on the source type combined with the computed
    criticality. Scheduling content from the care team is filed as
    administrative unless it is critical or high.
    """
    source = (source_type or "").casefold()

    if source in _CLINICAL_SERVICE_SOURCES:
        return _clinical_by_severity(criticality)

    if source in _CARE_TEAM_SOURCES:
        if criticality in ("critical", "high"):
            return _clinical_by_severity(criticality)
        if _contains_keyword(_SCHEDULING_KEYWORDS, _build_haystack(title, message)):
            return "administrative-routine"
        return "clinical-routine"

    if source == "admin":
        if criticality == "high":
            return "administrative-urgent"
        return "administrative-routine"

    if source == "system":
        return "system"

    LOGGER.debug("Unrecognised notification source %r filed as communication", source)
    return "communication"


def _clinical_by_severity(criticality: str) -> str:
    if criticality == "critical":
        return "clinical-emergency"
    if criticality == "high":
        return "clinical-urgent"
    return "clinical-routine"


def _build_haystack(*parts: str | None) -> str:
    return " ".join(part or "" for part in parts).casefold()


def _contains_keyword(keywords: Iterable[str], haystack: str) -> bool:
    for keyword in keywords:
        if keyword in haystack:
            return True
    return False


__all__ = [
    "DEFAULT_FOLDER_RULES",
    "FolderRule",
    "KeywordFolderService",
    "categorize_email",
    "categorize_notification",
]
