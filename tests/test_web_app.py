"""Integration tests for the FastAPI web application."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi.testclient import TestClient

from clinical_triage.core.config import AppSettings
from clinical_triage.core.interfaces import IngestionError
from clinical_triage.ingestion import sample_sources
from clinical_triage.web import create_app

NOW = datetime(2025, 10, 26, 12, 0, tzinfo=timezone.utc)


def _client(**kwargs) -> TestClient:
    email_source, notification_source = sample_sources(lambda: NOW)
    kwargs.setdefault("email_source", email_source)
    kwargs.setdefault("notification_source", notification_source)
    return TestClient(create_app(AppSettings(), **kwargs))


def test_email_listing_reports_counts_and_view_state() -> None:
    with _client() as client:
        response = client.get("/api/emails")

    assert response.status_code == 200
    payload = response.json()
    assert payload["emails"] == []
    assert payload["activeFolder"] == "inbox"
    assert payload["folderCounts"]["urgent"] == {"total": 2, "unread": 2}
    assert payload["folderCounts"]["administrative"] == {"total": 2, "unread": 1}
    assert payload["unreadCount"] == 3
    assert payload["criticalCount"] == 2
    assert payload["sortBy"] == "priority"
    assert payload["error"] is None
    assert payload["loadedAt"] is not None


def test_view_update_switches_folder_and_sort() -> None:
    with _client() as client:
        update = client.post(
            "/api/emails/view", json={"folder": "clinical", "sortBy": "date"}
        )
        payload = client.get("/api/emails").json()

    assert update.json() == {"ok": True}
    assert [email["id"] for email in payload["emails"]] == [
        "email-001",
        "email-002",
        "email-003",
    ]
    first = payload["emails"][0]
    assert first["analysis"]["priority"] == "critical"
    assert first["analysis"]["estimatedResponseTime"] == "Immediate"
    assert first["folders"] == ["urgent", "lab-results", "clinical"]
    assert first["sender"]["trustScore"] == 95


def test_view_update_rejects_unknown_folder_and_fields() -> None:
    with _client() as client:
        unknown_folder = client.post("/api/emails/view", json={"folder": "spam"})
        unknown_field = client.post("/api/emails/view", json={"colour": "red"})
        bad_sort = client.post("/api/emails/view", json={"sortBy": "size"})

    assert unknown_folder.status_code == 422
    assert unknown_field.status_code == 422
    assert bad_sort.status_code == 422


def test_email_mutations_keep_counts_in_step() -> None:
    with _client() as client:
        client.post("/api/emails/email-001/read")
        after_read = client.get("/api/emails").json()["folderCounts"]
        client.post("/api/emails/email-002/archive")
        after_archive = client.get("/api/emails").json()["folderCounts"]

    assert after_read["urgent"] == {"total": 2, "unread": 1}
    assert after_read["clinical"] == {"total": 3, "unread": 2}
    assert after_archive["urgent"] == {"total": 1, "unread": 0}
    assert after_archive["administrative"] == {"total": 2, "unread": 1}
    assert after_archive["insurance"] == {"total": 0, "unread": 0}


def test_selection_and_delete() -> None:
    with _client() as client:
        client.post("/api/emails/email-003/select")
        selected = client.get("/api/emails").json()
        client.delete("/api/emails/email-003")
        after_delete = client.get("/api/emails").json()

    assert selected["selectedEmailId"] == "email-003"
    assert selected["selectedEmail"]["subject"] == "New Referral: Cardiology Consultation"
    assert after_delete["selectedEmailId"] is None
    assert after_delete["folderCounts"]["referrals"] == {"total": 0, "unread": 0}


def test_mark_all_read_in_folder() -> None:
    with _client() as client:
        client.post("/api/emails/read-all", params={"folder": "urgent"})
        counts = client.get("/api/emails").json()["folderCounts"]

    assert counts["urgent"]["unread"] == 0
    assert counts["clinical"] == {"total": 3, "unread": 1}


def test_notification_listing_and_acknowledge() -> None:
    with _client() as client:
        initial = client.get("/api/notifications").json()
        client.post("/api/notifications/notif-001/acknowledge")
        client.delete("/api/notifications/notif-008")
        updated = client.get("/api/notifications").json()

    assert [item["id"] for item in initial["notifications"][:3]] == [
        "notif-001",
        "notif-002",
        "notif-004",
    ]
    assert initial["unreadCount"] == 5
    assert initial["criticalCount"] == 3
    code_blue = initial["notifications"][0]
    assert [action["id"] for action in code_blue["suggestedActions"]] == [
        "respond-now",
        "acknowledge",
        "dismiss",
    ]
    assert code_blue["suggestedActions"][0]["url"] == "/patient/patient-001"
    assert updated["criticalCount"] == 2
    assert updated["categoryCounts"]["clinical-emergency"] == {"total": 3, "unread": 2}
    assert len(updated["notifications"]) == 7


def test_notification_filters() -> None:
    with _client() as client:
        client.post("/api/notifications/view", json={"category": ["system"]})
        payload = client.get("/api/notifications").json()

    assert [item["id"] for item in payload["notifications"]] == [
        "notif-005",
        "notif-008",
    ]


def test_failed_source_is_reported_as_error() -> None:
    def broken() -> list:
        raise IngestionError("mail gateway unreachable")

    with _client(email_source=broken) as client:
        payload = client.get("/api/emails").json()
        refresh = client.post("/api/refresh").json()

    assert payload["error"] == "mail gateway unreachable"
    assert payload["loading"] is False
    assert payload["folderCounts"]["urgent"] == {"total": 0, "unread": 0}
    assert refresh == {"results": {"emails": False, "notifications": True}}


def test_refresh_reloads_sources() -> None:
    with _client() as client:
        client.post("/api/emails/read-all")
        assert client.get("/api/emails").json()["unreadCount"] == 0
        refresh = client.post("/api/refresh").json()
        payload = client.get("/api/emails").json()

    assert refresh == {"results": {"emails": True, "notifications": True}}
    assert payload["unreadCount"] == 3


def test_mutations_on_unknown_ids_succeed_without_changes() -> None:
    with _client() as client:
        before = client.get("/api/emails").json()["folderCounts"]
        responses = [
            client.post("/api/emails/missing/read"),
            client.post("/api/emails/missing/archive"),
            client.delete("/api/emails/missing"),
            client.post("/api/notifications/missing/acknowledge"),
        ]
        after = client.get("/api/emails").json()["folderCounts"]

    assert all(response.status_code == 200 for response in responses)
    assert after == before


def test_mark_all_read_in_unknown_folder_does_not_create_it() -> None:
    with _client() as client:
        before = client.get("/api/emails").json()
        mark = client.post("/api/emails/read-all", params={"folder": "zzz"})
        view = client.post("/api/emails/view", json={"folder": "zzz"})
        after = client.get("/api/emails").json()

    assert mark.status_code == 200
    assert view.status_code == 422
    assert "zzz" not in after["folderCounts"]
    assert after["folderCounts"] == before["folderCounts"]
    assert after["unreadCount"] == before["unreadCount"]


def test_listing_counts_follow_mutations() -> None:
    with _client() as client:
        client.post("/api/emails/email-001/read")
        emails = client.get("/api/emails").json()
        client.post(
            "/api/notifications/read-all", params={"category": "clinical-emergency"}
        )
        notifications = client.get("/api/notifications").json()

    assert (emails["unreadCount"], emails["criticalCount"]) == (2, 1)
    assert (notifications["unreadCount"], notifications["criticalCount"]) == (2, 0)
