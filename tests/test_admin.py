import pytest
from fastapi.testclient import TestClient

from main import app
from sessions import SessionStore, get_store

client = TestClient(app)


@pytest.fixture
def store():
    fresh = SessionStore(max_sessions=10)
    app.dependency_overrides[get_store] = lambda: fresh
    yield fresh
    app.dependency_overrides.pop(get_store, None)


def test_admin_purge_not_configured(monkeypatch, store):
    monkeypatch.delenv("ADMIN_TOKEN", raising=False)
    r = client.post("/admin/sessions/purge")
    assert r.status_code == 500


def test_admin_purge_unauthorized(monkeypatch, store):
    monkeypatch.setenv("ADMIN_TOKEN", "secret")
    r = client.post("/admin/sessions/purge", headers={"x-admin-token": "wrong"})
    assert r.status_code == 401


def test_admin_purge_ok(monkeypatch, store):
    monkeypatch.setenv("ADMIN_TOKEN", "secret")
    client.post("/sessions", json={})
    client.post("/sessions", json={})
    r = client.post("/admin/sessions/purge", headers={"x-admin-token": "secret"})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True and body["count"] == 2
    assert len(store) == 0
    assert client.get("/health").json()["sessions"] == 0


def test_admin_purge_leaves_shared_store_alone(monkeypatch, store):
    monkeypatch.setenv("ADMIN_TOKEN", "secret")
    kept = get_store().create()
    client.post("/admin/sessions/purge", headers={"x-admin-token": "secret"})
    assert get_store().get(kept.id) is kept
    get_store().discard(kept.id)
