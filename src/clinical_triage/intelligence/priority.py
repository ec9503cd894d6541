"""Heuristic keyword scoring for emails and notifications.

Emails and notifications use independent keyword tiers, weights and
thresholds; the two rule sets are tuned separately and are not derived from
one another.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from clinical_triage.core.datetime_utils import minutes_since
from clinical_triage.core.models import EmailSender, KeywordScore, TimeContext


@dataclass(frozen=True)
class _KeywordTier:
    keywords: tuple[str, ...]
    weight: int


_EMAIL_TIERS: tuple[_KeywordTier, ...] = (
    _KeywordTier(
        keywords=(
            "stat",
            "emergency",
            "urgent",
            "critical",
            "immediate attention",
            "code blue",
            "life threatening",
            "adverse reaction",
            "anaphylaxis",
            "cardiac arrest",
            "stroke alert",
            "trauma",
            "sepsis",
            "critical lab",
        ),
        weight=100,
    ),
    _KeywordTier(
        keywords=(
            "priority",
            "asap",
            "important",
            "time-sensitive",
            "abnormal results",
            "escalation",
            "concerning",
            "review needed",
            "authorization needed",
            "pre-auth",
            "denied",
            "appeal",
        ),
        weight=40,
    ),
)

_NOTIFICATION_TIERS: tuple[_KeywordTier, ...] = (
    _KeywordTier(
        keywords=(
            "code blue",
            "cardiac arrest",
            "respiratory failure",
            "sepsis",
            "stroke",
            "anaphylaxis",
            "hemorrhage",
            "trauma",
            "seizure",
            "unresponsive",
            "critical",
            "emergency",
            "stat",
            "immediate",
            "life-threatening",
        ),
        weight=100,
    ),
    _KeywordTier(
        keywords=(
            "urgent",
            "abnormal lab",
            "medication error",
            "drug interaction",
            "fall risk",
            "deteriorating",
            "concerning",
            "escalation",
            "priority",
            "asap",
            "time-sensitive",
        ),
        weight=50,
    ),
    _KeywordTier(
        keywords=(
            "follow-up",
            "review needed",
            "pending",
            "awaiting",
            "scheduled",
            "reminder",
            "upcoming",
            "attention needed",
        ),
        weight=20,
    ),
    _KeywordTier(
        keywords=(
            "fyi",
            "information",
            "update",
            "completed",
            "processed",
            "routine",
            "standard",
            "normal",
        ),
        weight=5,
    ),
)

# Percent trust per coarse sender class; unknown senders count as external.
_SENDER_TRUST_SCORES = {
    "lab": 95,
    "pharmacy": 90,
    "radiology": 90,
    "emergency": 100,
    "doctor": 85,
    "nurse": 80,
    "admin": 70,
    "external": 50,
}

_SENDER_MARKERS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("lab", ("lab",)),
    ("pharmacy", ("pharm",)),
    ("radiology", ("radiology", "imaging")),
    ("emergency", ("emergency", "ed")),
    ("doctor", ("dr.", "md")),
    ("nurse", ("rn", "nurse")),
    ("admin", ("admin", "hr")),
)

_SOURCE_PRIORITY_MODIFIERS = {
    "lab": 1.2,
    "pharmacy": 1.1,
    "patient": 1.0,
    "doctor": 1.0,
    "nurse": 0.9,
    "admin": 0.7,
    "system": 0.5,
}
_DEFAULT_SOURCE_MODIFIER = 1.0

RECENT_WINDOW_MINUTES = 30


def detect_sender_type(address: str | None, name: str | None) -> str:
    """Classify a sender from its address and display name.

    Markers are plain substrings checked in table order, so short tokens such
    as ``ed`` also match inside longer words.
    """
    combined = f"{address or ''} {name or ''}".casefold()
    for sender_type, markers in _SENDER_MARKERS:
        if any(marker in combined for marker in markers):
            return sender_type
    return "external"


def sender_trust_modifier(sender: EmailSender | None) -> float:
    """Return the score multiplier for an email sender."""
    if sender is None:
        return _SENDER_TRUST_SCORES["external"] / 100
    sender_type = detect_sender_type(sender.email, sender.name)
    return _SENDER_TRUST_SCORES.get(sender_type, _SENDER_TRUST_SCORES["external"]) / 100


def source_modifier(source_type: str | None) -> float:
    """Return the score multiplier for a notification source type."""
    return _SOURCE_PRIORITY_MODIFIERS.get(
        (source_type or "").casefold(), _DEFAULT_SOURCE_MODIFIER
    )


def score_email(
    subject: str | None, preview: str | None, sender: EmailSender | None
) -> KeywordScore:
    """Score an email's subject and preview into a priority label."""
    content = _build_haystack(subject, preview)
    raw_score, indicators = _accumulate(content, _EMAIL_TIERS)
    score = raw_score * sender_trust_modifier(sender)
    label, confidence = _email_band(score)
    return KeywordScore(
        label=label,
        confidence=_round_half_up(confidence),
        indicators=indicators,
        score=score,
    )


def score_notification(
    title: str | None, message: str | None, source_type: str | None
) -> KeywordScore:
    """Score a notification's title and message into a criticality label."""
    content = _build_haystack(title, message)
    raw_score, keywords = _accumulate(content, _NOTIFICATION_TIERS)
    score = raw_score * source_modifier(source_type)
    label, confidence = _notification_band(score)
    return KeywordScore(
        label=label,
        confidence=_round_half_up(confidence),
        indicators=keywords,
        score=score,
    )


def time_context(timestamp: datetime, now: datetime) -> TimeContext:
    """Describe how recent a notification is relative to ``now``."""
    minutes_ago = minutes_since(timestamp, now)
    if minutes_ago < 5:
        multiplier = 1.5
    elif minutes_ago < 15:
        multiplier = 1.2
    else:
        multiplier = 1.0
    return TimeContext(
        is_recent=minutes_ago < RECENT_WINDOW_MINUTES,
        minutes_ago=minutes_ago,
        urgency_multiplier=multiplier,
    )


def _build_haystack(*parts: str | None) -> str:
    return " ".join(part or "" for part in parts).casefold()


def _accumulate(
    content: str, tiers: tuple[_KeywordTier, ...]
) -> tuple[int, tuple[str, ...]]:
    score = 0
    matched: list[str] = []
    for tier in tiers:
        for keyword in tier.keywords:
            if keyword in content:
                matched.append(keyword)
                score += tier.weight
    return score, tuple(matched)


def _email_band(score: float) -> tuple[str, float]:
    if score >= 70:
        return "critical", min(98.0, 80 + score / 10)
    if score >= 30:
        return "high", min(95.0, 70 + score / 5)
    if score >= 10:
        return "medium", min(90.0, 60 + score)
    return "low", 75.0


def _notification_band(score: float) -> tuple[str, float]:
    if score >= 80:
        return "critical", min(98.0, 85 + (score - 80) / 10)
    if score >= 40:
        return "high", min(95.0, 75 + (score - 40) / 8)
    if score >= 15:
        return "medium", min(90.0, 65 + (score - 15) / 5)
    if score >= 5:
        return "low", min(85.0, 55 + score * 2)
    return "info", 70.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


__all__ = [
    "RECENT_WINDOW_MINUTES",
    "detect_sender_type",
    "score_email",
    "score_notification",
    "sender_trust_modifier",
    "source_modifier",
    "time_context",
]
