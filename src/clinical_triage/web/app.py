"""FastAPI application exposing triaged emails and notifications as JSON."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from clinical_triage.core import AppSettings, ServiceContainer, load_app_settings
from clinical_triage.core.config import SortKey, SortOrder
from clinical_triage.core.datetime_utils import serialize_datetime
from clinical_triage.core.interfaces import MessageSource
from clinical_triage.core.models import (
    AnalyzedEmail,
    AnalyzedNotification,
    EmailFilters,
    EmailPriority,
    FolderCount,
    LoadState,
    NotificationCriticality,
    NotificationFilters,
)
from clinical_triage.ingestion import (
    JsonFileSource,
    RefreshScheduler,
    email_loader,
    notification_loader,
    sample_sources,
)
from clinical_triage.storage import (
    EmailStore,
    NotificationStore,
    select_filtered_emails,
    select_filtered_notifications,
    select_selected_email,
)

LOGGER = logging.getLogger(__name__)

ENV_FILE_VARIABLE = "CLINICAL_TRIAGE_ENV_FILE"


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class EmailViewRequest(_Request):
    """Replace the email list view: folder, filters and sort."""

    folder: str | None = None
    priority: list[EmailPriority] | None = None
    read: bool | None = None
    starred: bool | None = None
    search: str | None = None
    sort_by: SortKey | None = Field(default=None, alias="sortBy")
    sort_order: SortOrder | None = Field(default=None, alias="sortOrder")


class NotificationViewRequest(_Request):
    """Replace the notification filters."""

    criticality: list[NotificationCriticality] | None = None
    category: list[str] | None = None
    read: bool | None = None
    start: datetime | None = None
    end: datetime | None = None


def build_container(
    settings: AppSettings,
    *,
    email_source: MessageSource[Any] | None = None,
    notification_source: MessageSource[Any] | None = None,
) -> ServiceContainer:
    """Wire stores, loaders and the refresh scheduler for one application."""
    if email_source is None or notification_source is None:
        if settings.source.json_path is not None:
            json_source = JsonFileSource(settings.source.json_path)
            default_emails, default_notifications = (
                json_source.emails,
                json_source.notifications,
            )
        else:
            default_emails, default_notifications = sample_sources()
        email_source = email_source or default_emails
        notification_source = notification_source or default_notifications

    container = ServiceContainer()
    container.register("settings", lambda _c: settings)
    container.register("email_store", lambda _c: EmailStore(settings.inbox))
    container.register("notification_store", lambda _c: NotificationStore())
    container.register(
        "email_loader",
        lambda c: email_loader(c.resolve("email_store"), email_source),
    )
    container.register(
        "notification_loader",
        lambda c: notification_loader(
            c.resolve("notification_store"), notification_source
        ),
    )
    container.register(
        "scheduler",
        lambda c: RefreshScheduler(
            (c.resolve("email_loader"), c.resolve("notification_loader")),
            settings.refresh.interval_seconds,
        ),
    )
    return container


def create_app(
    settings: AppSettings | None = None,
    *,
    email_source: MessageSource[Any] | None = None,
    notification_source: MessageSource[Any] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app_settings = settings or load_app_settings(env_file=_resolve_env_file())
    container = build_container(
        app_settings,
        email_source=email_source,
        notification_source=notification_source,
    )
    email_store = container.resolve("email_store", EmailStore)
    notification_store = container.resolve("notification_store", NotificationStore)
    scheduler = container.resolve("scheduler", RefreshScheduler)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        await scheduler.refresh_all()
        if app_settings.refresh.enabled:
            scheduler.start()
        try:
            yield
        finally:
            await scheduler.stop()

    app = FastAPI(title="Clinical Triage Inbox", lifespan=lifespan)
    app.state.container = container

    # Emails ---------------------------------------------------------------
    @app.get("/api/emails")
    async def list_emails() -> dict[str, Any]:
        snapshot = email_store.snapshot()
        selected = select_selected_email(snapshot)
        return {
            "emails": [
                _serialize_email(email) for email in select_filtered_emails(snapshot)
            ],
            "folderCounts": _serialize_counts(snapshot.folder_counts),
            "activeFolder": snapshot.active_folder,
            "selectedEmailId": snapshot.selected_id,
            "selectedEmail": _serialize_email(selected) if selected else None,
            "filters": {
                "priority": list(snapshot.filters.priority or ()),
                "read": snapshot.filters.read,
                "starred": snapshot.filters.starred,
                "search": snapshot.filters.search,
            },
            "sortBy": snapshot.sort_by,
            "sortOrder": snapshot.sort_order,
            "unreadCount": snapshot.unread_count,
            "criticalCount": snapshot.critical_count,
            **_serialize_load_state(snapshot.load_state),
        }

    @app.post("/api/emails/view")
    async def update_email_view(view: EmailViewRequest) -> dict[str, Any]:
        if view.folder is not None:
            if view.folder not in email_store.counts():
                raise HTTPException(
                    status_code=422,
                    detail=f"Unknown folder '{view.folder}'",
                )
            email_store.set_active_folder(view.folder)
        email_store.set_filters(
            EmailFilters(
                priority=tuple(view.priority) if view.priority else None,
                read=view.read,
                starred=view.starred,
                search=view.search or None,
            )
        )
        if view.sort_by is not None:
            email_store.set_sort_by(view.sort_by)
        if view.sort_order is not None:
            email_store.set_sort_order(view.sort_order)
        return {"ok": True}

    @app.post("/api/emails/read-all")
    async def mark_all_emails_read(folder: str | None = None) -> dict[str, Any]:
        email_store.mark_all_read(folder)
        return {"ok": True}

    @app.post("/api/emails/{email_id}/read")
    async def mark_email_read(email_id: str) -> dict[str, Any]:
        email_store.mark_read(email_id)
        return {"ok": True}

    @app.post("/api/emails/{email_id}/unread")
    async def mark_email_unread(email_id: str) -> dict[str, Any]:
        email_store.mark_unread(email_id)
        return {"ok": True}

    @app.post("/api/emails/{email_id}/star")
    async def toggle_email_star(email_id: str) -> dict[str, Any]:
        email_store.toggle_star(email_id)
        return {"ok": True}

    @app.post("/api/emails/{email_id}/archive")
    async def archive_email(email_id: str) -> dict[str, Any]:
        email_store.archive_email(email_id)
        return {"ok": True}

    @app.post("/api/emails/{email_id}/select")
    async def select_email(email_id: str) -> dict[str, Any]:
        email_store.select(email_id)
        return {"ok": True}

    @app.delete("/api/emails/{email_id}")
    async def delete_email(email_id: str) -> dict[str, Any]:
        email_store.delete_email(email_id)
        return {"ok": True}

    # Notifications --------------------------------------------------------
    @app.get("/api/notifications")
    async def list_notifications() -> dict[str, Any]:
        snapshot = notification_store.snapshot()
        return {
            "notifications": [
                _serialize_notification(notification)
                for notification in select_filtered_notifications(snapshot)
            ],
            "categoryCounts": _serialize_counts(snapshot.category_counts),
            "unreadCount": snapshot.unread_count,
            "criticalCount": snapshot.critical_count,
            **_serialize_load_state(snapshot.load_state),
        }

    @app.post("/api/notifications/view")
    async def update_notification_view(
        view: NotificationViewRequest,
    ) -> dict[str, Any]:
        notification_store.set_filters(
            NotificationFilters(
                criticality=tuple(view.criticality) if view.criticality else None,
                category=tuple(view.category) if view.category else None,
                read=view.read,
                start=view.start,
                end=view.end,
            )
        )
        return {"ok": True}

    @app.post("/api/notifications/read-all")
    async def mark_all_notifications_read(
        category: str | None = None,
    ) -> dict[str, Any]:
        notification_store.mark_all_read(category)
        return {"ok": True}

    @app.post("/api/notifications/{notification_id}/read")
    async def mark_notification_read(notification_id: str) -> dict[str, Any]:
        notification_store.mark_read(notification_id)
        return {"ok": True}

    @app.post("/api/notifications/{notification_id}/acknowledge")
    async def acknowledge_notification(notification_id: str) -> dict[str, Any]:
        notification_store.acknowledge_notification(notification_id)
        return {"ok": True}

    @app.delete("/api/notifications/{notification_id}")
    async def dismiss_notification(notification_id: str) -> dict[str, Any]:
        notification_store.dismiss_notification(notification_id)
        return {"ok": True}

    # Refresh --------------------------------------------------------------
    @app.post("/api/refresh")
    async def refresh(request: Request) -> dict[str, Any]:
        LOGGER.info("Manual refresh requested by %s", _client_host(request))
        results = await scheduler.refresh_all()
        return {"results": results}

    return app


def _serialize_email(email: AnalyzedEmail) -> dict[str, Any]:
    analysis = email.analysis
    return {
        "id": email.id,
        "subject": email.subject,
        "preview": email.preview,
        "sender": {
            "email": email.sender.email,
            "name": email.sender.name,
            "department": email.sender.department,
            "isInternal": email.sender.is_internal,
            "trustScore": email.sender.trust_score,
        },
        "timestamp": serialize_datetime(email.timestamp),
        "read": email.read,
        "starred": email.starred,
        "hasAttachments": email.has_attachments,
        "folders": list(email.folders),
        "analysis": {
            "priority": analysis.priority,
            "category": analysis.category,
            "confidence": analysis.confidence,
            "urgencyIndicators": list(analysis.urgency_indicators),
            "estimatedResponseTime": analysis.estimated_response_time,
            "requiresAction": analysis.requires_action,
        },
    }


def _serialize_notification(notification: AnalyzedNotification) -> dict[str, Any]:
    analysis = notification.analysis
    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "timestamp": serialize_datetime(notification.timestamp),
        "read": notification.read,
        "source": {
            "type": notification.source.type,
            "id": notification.source.id,
            "name": notification.source.name,
            "department": notification.source.department,
        },
        "relatedPatientId": notification.related_patient_id,
        "relatedPatientName": notification.related_patient_name,
        "criticality": analysis.criticality,
        "category": analysis.category,
        "confidence": analysis.confidence,
        "keywords": list(analysis.keywords),
        "suggestedActions": [
            {
                "id": action.id,
                "label": action.label,
                "type": action.type,
                "url": action.url,
                "priority": action.priority,
            }
            for action in analysis.suggested_actions
        ],
        "timeContext": {
            "isRecent": analysis.time_context.is_recent,
            "minutesAgo": analysis.time_context.minutes_ago,
            "urgencyMultiplier": analysis.time_context.urgency_multiplier,
        },
        "requiresResponse": analysis.requires_response,
    }


def _serialize_counts(counts: Mapping[str, FolderCount]) -> dict[str, dict[str, int]]:
    return {
        bucket: {"total": entry.total, "unread": entry.unread}
        for bucket, entry in counts.items()
    }


def _serialize_load_state(state: LoadState) -> dict[str, Any]:
    return {
        "loading": state.loading,
        "error": state.error,
        "loadedAt": serialize_datetime(state.loaded_at),
    }


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _resolve_env_file() -> Path | None:
    configured = os.getenv(ENV_FILE_VARIABLE)
    if configured:
        return Path(configured)
    default = Path(".env")
    return default if default.is_file() else None


__all__ = ["build_container", "create_app"]
