"""候补名单接口集成测试。"""

import pytest
from fastapi.testclient import TestClient

from app.packages.portal.store.memory import MemoryStore


def test_public_signup_returns_entry(client: TestClient):
    resp = client.post(
        "/api/waitlist",
        json={"email": "alice@example.com", "name": "Alice", "company": "Acme"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] >= 1
    assert body["email"] == "alice@example.com"
    assert body["company"] == "Acme"
    assert "createdAt" in body


def test_empty_company_is_stored_as_null(client: TestClient, store: MemoryStore):
    resp = client.post("/api/waitlist", json={"email": "bob@example.com", "name": "Bob", "company": ""})
    assert resp.status_code == 200
    assert resp.json()["company"] is None
    assert store.list_waitlist_entries()[0].company is None


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "name": "Alice"},
        {"email": "alice@example.com", "name": "A"},
        {"name": "Alice"},
        {"email": "alice@example.com"},
    ],
)
def test_invalid_signup_is_rejected_without_side_effects(client: TestClient, store: MemoryStore, payload):
    resp = client.post("/api/waitlist", json=payload)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid input"
    assert store.list_waitlist_entries() == []


def test_duplicate_email_is_rejected(client: TestClient, store: MemoryStore):
    payload = {"email": "dup@example.com", "name": "First"}
    assert client.post("/api/waitlist", json=payload).status_code == 200
    resp = client.post("/api/waitlist", json=payload)
    assert resp.status_code == 400
    assert len(store.list_waitlist_entries()) == 1


def test_admin_lists_newest_first_and_deletes(admin_client: TestClient, clock):
    ids = [
        admin_client.post("/api/waitlist", json={"email": f"u{i}@example.com", "name": f"User {i}"}).json()["id"]
        for i in range(3)
    ]

    listed = admin_client.get("/api/waitlist").json()
    assert [entry["id"] for entry in listed] == list(reversed(ids))

    assert admin_client.delete(f"/api/waitlist/{ids[1]}").json() == {"success": True}
    assert admin_client.delete(f"/api/waitlist/{ids[1]}").status_code == 200
    assert [entry["id"] for entry in admin_client.get("/api/waitlist").json()] == [ids[2], ids[0]]
