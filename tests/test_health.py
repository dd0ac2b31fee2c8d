from taskboard.db import db_ping
from taskboard.routes import health

def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

def test_ready_reports_failing_checks(client, monkeypatch):
    monkeypatch.setattr(health, "db_ping", lambda: True)
    monkeypatch.setattr(health, "redis_ping", lambda: False)

    r = client.get("/ready")
    assert r.status_code == 503
    assert r.json()["checks"] == {"db": True, "redis": False}

def test_ready_ok(client, monkeypatch):
    monkeypatch.setattr(health, "db_ping", lambda: True)
    monkeypatch.setattr(health, "redis_ping", lambda: True)

    r = client.get("/ready")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

def test_db_ping_against_a_live_engine(db_session):
    assert db_ping(db_session.get_bind()) is True

def test_ready_reports_probe_errors(client, monkeypatch):
    def boom():
        raise ConnectionError("refused")

    monkeypatch.setattr(health, "db_ping", boom)
    monkeypatch.setattr(health, "redis_ping", lambda: True)

    r = client.get("/ready")
    assert r.status_code == 503
    assert r.json()["errors"] == {"db": "ConnectionError: refused"}
