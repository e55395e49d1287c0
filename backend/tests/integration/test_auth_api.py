"""End-to-end tests of the authentication endpoints through the test client."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import pytest

from travel_api.core.logger import JSONFormatter
from travel_api.models import RefreshToken
from travel_api.services._shared.ports import RefreshTokenRecord, RevokedTokenRecord
from travel_api.uow import SQLAlchemyTransactionRunner

BASE = "/api/v1/auth"
PASSWORD = "correct-horse-battery"


def _register(client, email="a@example.com", username="alice", password=PASSWORD):
    return client.post(
        f"{BASE}/register", json={"email": email, "username": username, "password": password}
    )


def _login(client, email="a@example.com", password=PASSWORD):
    return client.post(f"{BASE}/login", json={"email": email, "password": password})


def _refresh(client, token):
    return client.post(f"{BASE}/refresh", json={"refresh_token": token})


def _seed(app, *records):
    """Write raw token rows through the SQL stores."""

    def work(uow):
        for record in records:
            if isinstance(record, RefreshTokenRecord):
                uow.refresh_tokens.create(record)
            else:
                uow.revoked_tokens.create(record)

    with app.app_context():
        SQLAlchemyTransactionRunner().run(work)


@pytest.fixture()
def user_id(client) -> str:
    resp = _register(client)
    assert resp.status_code == 201
    return resp.get_json()["data"]["user_id"]


def test_health(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json()["db"] == "ok"


def test_register_conflict_returns_problem_json(client, user_id):
    resp = _register(client, email="A@Example.com", username="someone-else")

    assert resp.status_code == 409
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "email_already_exists"
    assert body["status"] == 409
    assert body["request_id"]


def test_register_username_conflict(client, user_id):
    resp = _register(client, email="b@example.com", username="alice")

    assert resp.status_code == 409
    assert resp.get_json()["code"] == "username_already_exists"


def test_register_validates_payload(client):
    resp = client.post(
        f"{BASE}/register", json={"email": "not-an-email", "username": "al", "password": "short"}
    )

    assert resp.status_code == 422
    errors = resp.get_json()["details"]["errors"]
    assert set(errors) == {"email", "username", "password"}


def test_login_returns_token_pair(client, user_id):
    resp = _login(client)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["token_type"] == "bearer"


def test_login_failures_look_identical(client, user_id):
    wrong_password = _login(client, password="not-the-password")
    unknown_email = _login(client, email="nobody@example.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    a, b = wrong_password.get_json(), unknown_email.get_json()
    assert a["code"] == b["code"] == "invalid_credentials"
    assert a["detail"] == b["detail"]


def test_refresh_rotation_and_replay_containment(client, user_id):
    original = _login(client).get_json()["data"]
    other_device = _login(client).get_json()["data"]

    rotated = _refresh(client, original["refresh_token"])
    assert rotated.status_code == 200
    new_pair = rotated.get_json()["data"]
    assert new_pair["refresh_token"] != original["refresh_token"]

    replay = _refresh(client, original["refresh_token"])
    assert replay.status_code == 401
    assert replay.get_json()["code"] == "token_revoked"

    for token in (other_device["refresh_token"], new_pair["refresh_token"]):
        resp = _refresh(client, token)
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "token_not_found"


def test_refresh_expired_token(app, client, user_id):
    now = datetime.now(UTC)
    _seed(
        app,
        RefreshTokenRecord(
            id="expired-token",
            user_id=user_id,
            expires_at=now - timedelta(hours=1),
            created_at=now - timedelta(days=8),
        ),
    )

    resp = _refresh(client, "expired-token")

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "token_expired"


def test_refresh_unknown_or_missing_token(client):
    assert _refresh(client, "never-issued").get_json()["code"] == "token_not_found"
    assert client.post(f"{BASE}/refresh", json={}).status_code == 422


def test_consistency_fault_is_a_generic_server_error(app, client, user_id):
    now = datetime.now(UTC)
    _seed(
        app,
        RefreshTokenRecord(
            id="twice", user_id=user_id, expires_at=now + timedelta(days=1), created_at=now
        ),
        RevokedTokenRecord(
            token_id="twice", user_id=user_id, expires_at=now + timedelta(days=1), revoked_at=now
        ),
    )

    resp = _refresh(client, "twice")

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["code"] == "internal_server_error"
    assert "revoked" not in body["detail"].lower()


def test_database_failure_keeps_refresh_token_out_of_logs(app, db, client, caplog):
    """
    GIVEN a refresh request whose SQL statement fails in the driver
    WHEN the error is answered and logged
    THEN the presented token appears in no formatted log line nor in the body.
    """
    secret = "SECRETREFRESHTOKENVALUE0123456789abcdefghij"
    with app.app_context():
        RefreshToken.__table__.drop(db.engine)

    caplog.set_level(logging.DEBUG)
    resp = _refresh(client, secret)

    assert resp.status_code == 503
    assert secret not in resp.get_data(as_text=True)
    formatter = JSONFormatter()
    lines = [formatter.format(record) for record in caplog.records]
    assert any("transaction.failed" in line for line in lines)
    assert not [line for line in lines if secret in line]


def test_logout_then_reuse(client, user_id):
    pair = _login(client).get_json()["data"]

    first = client.post(f"{BASE}/logout", json={"refresh_token": pair["refresh_token"]})
    second = client.post(f"{BASE}/logout", json={"refresh_token": pair["refresh_token"]})

    assert first.status_code == 204
    assert second.status_code == 401
    assert second.get_json()["code"] == "token_revoked"


def test_me_requires_a_valid_access_token(client, user_id):
    pair = _login(client).get_json()["data"]

    ok = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {pair['access_token']}"})
    missing = client.get(f"{BASE}/me")
    forged = client.get(f"{BASE}/me", headers={"Authorization": "Bearer forged.token.value"})
    refresh_as_access = client.get(
        f"{BASE}/me", headers={"Authorization": f"Bearer {pair['refresh_token']}"}
    )

    assert ok.status_code == 200
    data = ok.get_json()["data"]
    assert data["id"] == user_id
    assert data["email"] == "a@example.com"
    assert "password_hash" not in data
    assert missing.status_code == 401
    assert missing.get_json()["code"] == "unauthorized"
    assert forged.get_json()["code"] == "invalid_credentials"
    assert refresh_as_access.status_code == 401


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"

    problem = client.get("/api/v1/nope", headers={"X-Request-ID": "req-456"})
    assert problem.status_code == 404
    assert problem.get_json()["request_id"] == "req-456"
