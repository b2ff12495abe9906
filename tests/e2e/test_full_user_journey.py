from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.models.domain.calendar_domain import Calendar
from app.routes import calendars as calendar_routes
from app.routes import children as children_routes
from app.routes import settings as settings_routes
from app.services.calendar.calendar_service import CalendarOperationsService


def test_full_parent_journey(
    monkeypatch, apply_auth_override, sync_service, settings_svc, credentials, gmail
):
    calendar_client = AsyncMock()
    calendar_client.create_calendar.return_value = Calendar(
        {"id": "school@group.calendar.google.com", "summary": "School", "timeZone": "UTC"}
    )
    calendar_ops = CalendarOperationsService(calendar_client, credentials, settings_svc)

    sent = []

    async def fake_send(payload):
        sent.append(payload)
        return True

    monkeypatch.setattr(children_routes, "child_sync_service", sync_service)
    monkeypatch.setattr(settings_routes, "settings_service", settings_svc)
    monkeypatch.setattr(settings_routes, "send_automation_webhook", fake_send)
    monkeypatch.setattr(calendar_routes, "calendar_operations_service", calendar_ops)

    app = FastAPI()
    apply_auth_override(app)
    app.include_router(children_routes.router)
    app.include_router(settings_routes.router)
    app.include_router(calendar_routes.router)
    client = TestClient(app)

    # Starting is refused until a child and a calendar exist
    refused = client.put("/settings/service", json={"automation_enabled": True})
    assert refused.status_code == 400

    alice = client.post(
        "/children",
        json={
            "name": "Alice",
            "label_name": "Alice School",
            "expected_senders": ["office@school.edu"],
            "keywords": ["homework"],
        },
    ).json()["child"]
    bob = client.post("/children", json={"name": "Bob", "label_name": "Bob School"}).json()["child"]
    assert gmail.filters[bob["filter_id"]]["criteria"]["query"] == '"Bob"'

    created = client.post("/calendars", json={"calendar_name": "School"})
    assert created.status_code == 201
    assert created.json()["settings"]["calendar_id"] == "school@group.calendar.google.com"

    started = client.put("/settings/service", json={"automation_enabled": True})
    assert started.status_code == 200
    assert started.json()["webhook_scheduled"] is True

    # The parent deletes Alice's label directly in Gmail
    del gmail.labels[alice["label_id"]]
    listed = client.get("/children").json()["children"]
    assert listed[0]["sync_status"] == {"label_deleted": True}
    assert "sync_status" not in listed[1]

    # Saving Alice again repairs the label
    repaired = client.put(
        f"/children/{alice['id']}",
        json={"name": "Alice", "label_name": "Alice School", "keywords": ["homework"]},
    ).json()["child"]
    assert repaired["label_id"] != alice["label_id"]
    assert "sync_status" not in client.get("/children").json()["children"][0]

    assert client.delete(f"/children/{bob['id']}").json() == {"success": True}
    assert bob["label_id"] not in gmail.labels
    assert [child["name"] for child in client.get("/children").json()["children"]] == ["Alice"]

    stopped = client.put("/settings/service", json={"automation_enabled": False})
    assert stopped.json()["settings"]["automation_enabled"] is False

    assert [payload["event"] for payload in sent] == ["service_started", "service_stopped"]
    assert [child["name"] for child in sent[0]["children"]] == ["Alice", "Bob"]
    assert [child["name"] for child in sent[1]["children"]] == ["Alice"]
