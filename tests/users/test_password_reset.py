from __future__ import annotations

from datetime import timedelta

from school_management.common.datetime_utils import now_local
from school_management.extensions import db
from school_management.users.model import PasswordResetToken


def test_reset_flow_changes_password(app, client, login, container):
    app.config["DEBUG"] = True
    res = client.post("/api/auth/forgot-password", json={"email": "teacher1@example.com"})
    assert res.status_code == 200
    token = res.get_json()["debugToken"]

    res = client.post("/api/auth/reset-password", json={"token": token, "password": "short"})
    assert res.status_code == 400

    res = client.post("/api/auth/reset-password", json={"token": token, "password": "brand-new-pass"})
    assert res.status_code == 200

    assert login("teacher1", "teacher123").status_code == 401
    assert login("teacher1", "brand-new-pass").status_code == 200

    # Tokens are single use
    res = client.post("/api/auth/reset-password", json={"token": token, "password": "another-pass"})
    assert res.status_code == 400


def test_unknown_email_gets_same_message(client):
    known = client.post("/api/auth/forgot-password", json={"email": "admin@example.com"}).get_json()
    unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"}).get_json()
    assert known["message"] == unknown["message"]
    assert "debugToken" not in unknown


def test_expired_token_is_rejected_and_cleaned(ctx, container):
    service = container.password_reset_service
    token = service.create_reset_token("admin@example.com")
    assert service.validate_reset_token(token) is not None

    reset = PasswordResetToken.query.filter_by(token=token).one()
    reset.expires_at = now_local() - timedelta(minutes=1)
    db.session.commit()

    assert service.validate_reset_token(token) is None
    assert PasswordResetToken.query.filter_by(token=token).first() is None


def test_cleanup_removes_only_expired(ctx, container):
    service = container.password_reset_service
    keep = service.create_reset_token("admin@example.com")
    expire = service.create_reset_token("teacher1@example.com")
    PasswordResetToken.query.filter_by(token=expire).one().expires_at = now_local() - timedelta(hours=1)
    db.session.commit()

    assert service.cleanup_expired_tokens() == 1
    assert PasswordResetToken.query.filter_by(token=keep).first() is not None
