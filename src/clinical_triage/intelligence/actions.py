"""Suggested follow-up actions for analysed notifications."""

from __future__ import annotations

from clinical_triage.core.models import NotificationAction

_DISMISS = NotificationAction(
    id="dismiss", label="Dismiss", type="dismiss", priority="secondary"
)
_ACKNOWLEDGE = NotificationAction(
    id="acknowledge", label="Acknowledge", type="acknowledge", priority="primary"
)


def suggest_actions(
    criticality: str, related_patient_id: str | None = None
) -> tuple[NotificationAction, ...]:
    """Return actions for a notification in display order.

    Critical items get a respond-now link and an acknowledge button, high
    items get a review link, and every notification ends with dismiss.
    """
    patient_url = (
        f"/patient/{related_patient_id}" if related_patient_id else None
    )
    actions: list[NotificationAction] = []

    if criticality == "critical":
        actions.append(
            NotificationAction(
                id="respond-now",
                label="Respond Now",
                type="navigate",
                priority="danger",
                url=patient_url or "/patients",
            )
        )
        actions.append(_ACKNOWLEDGE)
    elif criticality == "high":
        actions.append(
            NotificationAction(
                id="review",
                label="Review Details",
                type="navigate",
                priority="primary",
                url=patient_url or "/notifications",
            )
        )

    actions.append(_DISMISS)
    return tuple(actions)


__all__ = ["suggest_actions"]
