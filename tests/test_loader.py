"""Tests for bulk loading, JSON sources and the refresh scheduler."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from clinical_triage.core.interfaces import IngestionError
from clinical_triage.ingestion import (
    InboxLoader,
    JsonFileSource,
    coerce_notifications,
    RefreshScheduler,
    email_loader,
    notification_loader,
    sample_emails,
    sample_notifications,
)
from clinical_triage.intelligence import NotificationTriageService
from clinical_triage.storage import EmailStore, NotificationStore

NOW = datetime(2025, 10, 26, 12, 0, tzinfo=timezone.utc)


def test_loader_accepts_async_source() -> None:
    store = EmailStore()

    async def source() -> list:
        return sample_emails(NOW)

    assert asyncio.run(email_loader(store, source).refresh()) is True
    assert len(store) == 4
    assert store.counts()["urgent"].total == 2
    assert store.load_state.loading is False


def test_failed_refresh_keeps_previous_records() -> None:
    store = EmailStore()
    asyncio.run(email_loader(store, lambda: sample_emails(NOW)).refresh())

    def broken() -> list:
        raise ConnectionError("upstream unavailable")

    assert asyncio.run(email_loader(store, broken).refresh()) is False
    assert len(store) == 4
    assert store.load_state.error == "ConnectionError: upstream unavailable"
    assert store.load_state.loaded_at is not None


def test_ingestion_error_message_is_reported_verbatim() -> None:
    store = NotificationStore()

    def broken() -> list:
        raise IngestionError("feed offline")

    assert asyncio.run(notification_loader(store, broken).refresh()) is False
    assert store.load_state.error == "feed offline"


def test_analysis_failure_is_reported_like_a_source_failure() -> None:
    store = NotificationStore()
    initial = notification_loader(store, lambda: sample_notifications(NOW))
    asyncio.run(initial.refresh())

    def explode(raw):
        raise ValueError(f"cannot analyse {raw.id}")

    loader = InboxLoader(
        "notifications",
        store,
        lambda: sample_notifications(NOW),
        coerce=coerce_notifications,
        analyze=explode,
    )

    assert asyncio.run(loader.refresh()) is False
    assert store.load_state.loading is False
    assert store.load_state.error == "ValueError: cannot analyse notif-001"
    assert len(store) == 8


def test_loader_drops_malformed_payloads(caplog: pytest.LogCaptureFixture) -> None:
    store = NotificationStore()
    payload = [
        {"id": "n-1", "title": "Code blue", "source": {"type": "Nurse"}},
        {"title": "no id"},
        "not a mapping",
    ]
    loader = notification_loader(
        store, lambda: payload, NotificationTriageService(clock=lambda: NOW)
    )

    with caplog.at_level("WARNING"):
        assert asyncio.run(loader.refresh()) is True

    assert len(store) == 1
    assert store.get("n-1").analysis.criticality == "critical"
    assert "Dropping malformed notification payload" in caplog.text


def test_json_file_source_reads_sections(tmp_path: Path) -> None:
    path = tmp_path / "messages.json"
    path.write_text(
        json.dumps(
            {
                "emails": [
                    {
                        "id": "e-1",
                        "subject": "STAT potassium",
                        "sender": {"email": "lab@hospital.org", "name": "Lab"},
                    }
                ],
                "notifications": [],
            }
        ),
        encoding="utf-8",
    )
    source = JsonFileSource(path)
    store = EmailStore()

    assert asyncio.run(email_loader(store, source.emails).refresh()) is True
    assert store.get("e-1").analysis.priority == "critical"
    assert source.notifications() == []


@pytest.mark.parametrize(
    "content",
    ["{not json", "[1, 2]", '{"emails": {"id": "e-1"}}'],
)
def test_json_file_source_rejects_bad_documents(tmp_path: Path, content: str) -> None:
    path = tmp_path / "messages.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(IngestionError):
        JsonFileSource(path).emails()


def test_missing_json_file_fails_the_load(tmp_path: Path) -> None:
    store = EmailStore()
    source = JsonFileSource(tmp_path / "missing.json")

    assert asyncio.run(email_loader(store, source.emails).refresh()) is False
    assert "missing.json" in (store.load_state.error or "")


def test_scheduler_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        RefreshScheduler((), 0)


def test_refresh_all_reports_each_loader() -> None:
    emails = EmailStore()
    notifications = NotificationStore()

    def broken() -> list:
        raise IngestionError("feed offline")

    scheduler = RefreshScheduler(
        (
            email_loader(emails, lambda: sample_emails(NOW)),
            notification_loader(notifications, broken),
        ),
        30,
    )

    results = asyncio.run(scheduler.refresh_all())

    assert results == {"emails": True, "notifications": False}
    assert len(emails) == 4
    assert notifications.load_state.error == "feed offline"


def test_scheduler_runs_until_stopped() -> None:
    store = NotificationStore()
    calls: list[int] = []

    def source() -> list:
        calls.append(1)
        return sample_notifications(NOW)

    scheduler = RefreshScheduler((notification_loader(store, source),), 0.01)

    async def scenario() -> None:
        scheduler.start()
        assert scheduler.running
        await asyncio.sleep(0.1)
        await scheduler.stop()
        assert not scheduler.running

    asyncio.run(scenario())

    assert calls
    assert len(store) == 8
    stopped_at = len(calls)
    asyncio.run(asyncio.sleep(0.05))
    assert len(calls) == stopped_at
