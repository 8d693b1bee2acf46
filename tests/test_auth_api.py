# =============================================================================
# tests/test_auth_api.py - Authentication Endpoint Tests
# =============================================================================
# Registration, login throttling, logout, password reset/change, 2FA and
# session management through the HTTP API.
#
# Run with: pytest tests/test_auth_api.py -v
# =============================================================================

import re
from datetime import timedelta

import pyotp
from sqlalchemy import select, update

from core.tables import PasswordResetToken, UserSession
from lib.database import utcnow
from lib.email_client import EmailClient
from tests.conftest import DEFAULT_PASSWORD, bearer, register

API = "/api/v1"


def _login(client, email="alice@example.com", password=DEFAULT_PASSWORD, **extra):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password, **extra})


def _reset_token_from_outbox() -> str:
    _, template = EmailClient.outbox[-1]
    match = re.search(r"token=([\w-]+)", template.text)
    assert match, template.text
    return match.group(1)


# =============================================================================
# Registration / Login
# =============================================================================

class TestRegister:
    """Tests for POST /auth/register."""

    def test_register_returns_token_and_user(self, client):
        body = register(client, email="  Alice@Example.com ")

        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "alice@example.com"
        assert body["user"]["plan"] == "FREE"
        assert body["user"]["two_factor_enabled"] is False

    def test_register_sends_welcome_email(self, client):
        register(client)

        to, template = EmailClient.outbox[-1]
        assert to == "alice@example.com"
        assert template.subject.startswith("Welcome")

    def test_duplicate_email_conflicts(self, client):
        register(client)

        response = client.post(
            f"{API}/auth/register",
            json={"email": "ALICE@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EMAIL_TAKEN"

    def test_short_password_rejected(self, client):
        response = client.post(f"{API}/auth/register", json={"email": "a@example.com", "password": "short"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert "password" in error["details"]


class TestLogin:
    """Tests for POST /auth/login."""

    def test_login_success(self, client):
        register(client)

        response = _login(client)

        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_wrong_password_reports_remaining(self, client):
        register(client)

        response = _login(client, password="wrong-password")

        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "INVALID_CREDENTIALS"
        assert error["details"]["remaining_attempts"] == 4

    def test_unknown_email_looks_the_same(self, client):
        response = _login(client, email="nobody@example.com")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_lockout_after_five_failures(self, client):
        """Test the fifth failure locks the account even for the right password."""
        # Arrange
        register(client)
        for _ in range(4):
            assert _login(client, password="wrong-password").status_code == 401

        # Act
        fifth = _login(client, password="wrong-password")
        correct = _login(client)

        # Assert
        assert fifth.status_code == 429
        assert fifth.json()["error"]["code"] == "ACCOUNT_LOCKED"
        assert correct.status_code == 429

    def test_success_clears_failures(self, client):
        register(client)
        for _ in range(3):
            _login(client, password="wrong-password")

        assert _login(client).status_code == 200
        response = _login(client, password="wrong-password")

        assert response.json()["error"]["details"]["remaining_attempts"] == 4


class TestTokens:
    """Tests for bearer token validation and logout."""

    def test_missing_token(self, client):
        response = client.get(f"{API}/account/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_garbage_token(self, client):
        response = client.get(f"{API}/account/me", headers=bearer("not-a-jwt"))

        assert response.status_code == 401

    def test_logout_revokes_session(self, client):
        headers = bearer(register(client)["access_token"])

        assert client.post(f"{API}/auth/logout", headers=headers).status_code == 200
        response = client.get(f"{API}/account/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "SESSION_INVALID"

    def test_expired_session_rejected(self, client, db):
        headers = bearer(register(client)["access_token"])
        db.execute(update(UserSession).values(expires_at=utcnow() - timedelta(minutes=1)))
        db.commit()

        response = client.get(f"{API}/account/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "SESSION_INVALID"

    def test_stale_activity_is_bumped(self, client, db):
        """last_active_at moves forward once it is older than five minutes."""
        headers = bearer(register(client)["access_token"])
        stale = utcnow() - timedelta(minutes=10)
        db.execute(update(UserSession).values(last_active_at=stale))
        db.commit()

        assert client.get(f"{API}/account/me", headers=headers).status_code == 200

        db.expire_all()
        session = db.scalar(select(UserSession))
        assert session.last_active_at > stale + timedelta(minutes=9)

    def test_recent_activity_not_rewritten(self, client, db):
        headers = bearer(register(client)["access_token"])
        recent = utcnow() - timedelta(minutes=2)
        db.execute(update(UserSession).values(last_active_at=recent))
        db.commit()

        assert client.get(f"{API}/account/me", headers=headers).status_code == 200

        db.expire_all()
        session = db.scalar(select(UserSession))
        assert abs(session.last_active_at - recent) < timedelta(seconds=1)


# =============================================================================
# Password Reset / Change
# =============================================================================

class TestPasswordReset:
    """Tests for forgot-password and reset-password."""

    def test_forgot_password_unknown_email_is_silent(self, client):
        response = client.post(f"{API}/auth/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert EmailClient.outbox == []

    def test_full_reset_flow(self, client):
        # Arrange: registered user with a live session
        old_headers = bearer(register(client)["access_token"])
        client.post(f"{API}/auth/forgot-password", json={"email": "alice@example.com"})
        token = _reset_token_from_outbox()

        # Act
        response = client.post(
            f"{API}/auth/reset-password",
            json={"token": token, "password": "brand-new-password"},
        )

        # Assert: new password works, old sessions are gone, token is spent
        assert response.status_code == 200
        assert _login(client, password="brand-new-password").status_code == 200
        assert client.get(f"{API}/account/me", headers=old_headers).status_code == 401

        reused = client.post(
            f"{API}/auth/reset-password",
            json={"token": token, "password": "another-password"},
        )
        assert reused.status_code == 400
        assert reused.json()["error"]["code"] == "INVALID_TOKEN"

    def test_expired_token(self, client, db):
        register(client)
        client.post(f"{API}/auth/forgot-password", json={"email": "alice@example.com"})
        token = _reset_token_from_outbox()
        db.execute(update(PasswordResetToken).values(expires_at=utcnow() - timedelta(seconds=1)))
        db.commit()

        response = client.post(
            f"{API}/auth/reset-password",
            json={"token": token, "password": "brand-new-password"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TOKEN"
        assert _login(client).status_code == 200

    def test_used_token(self, client, db):
        register(client)
        client.post(f"{API}/auth/forgot-password", json={"email": "alice@example.com"})
        token = _reset_token_from_outbox()
        db.execute(update(PasswordResetToken).values(used_at=utcnow()))
        db.commit()

        response = client.post(
            f"{API}/auth/reset-password",
            json={"token": token, "password": "brand-new-password"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    def test_older_links_die_with_reset(self, client):
        register(client)
        client.post(f"{API}/auth/forgot-password", json={"email": "alice@example.com"})
        first = _reset_token_from_outbox()
        client.post(f"{API}/auth/forgot-password", json={"email": "alice@example.com"})
        second = _reset_token_from_outbox()

        assert client.post(
            f"{API}/auth/reset-password", json={"token": second, "password": "brand-new-password"}
        ).status_code == 200
        response = client.post(
            f"{API}/auth/reset-password", json={"token": first, "password": "another-password"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TOKEN"

    def test_unknown_token(self, client):
        response = client.post(
            f"{API}/auth/reset-password",
            json={"token": "x" * 32, "password": "brand-new-password"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TOKEN"


class TestChangePassword:
    """Tests for POST /account/change-password."""

    def test_wrong_current_password(self, client, auth_headers):
        response = client.post(
            f"{API}/account/change-password",
            json={"current_password": "nope-nope", "new_password": "brand-new-password"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_PASSWORD"

    def test_change_revokes_other_sessions(self, client, auth_headers):
        other = bearer(_login(client).json()["access_token"])

        response = client.post(
            f"{API}/account/change-password",
            json={"current_password": DEFAULT_PASSWORD, "new_password": "brand-new-password"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["sessions_revoked"] == 1
        assert client.get(f"{API}/account/me", headers=auth_headers).status_code == 200
        assert client.get(f"{API}/account/me", headers=other).status_code == 401


# =============================================================================
# Two-Factor Authentication
# =============================================================================

class TestTwoFactor:
    """Tests for the /auth/2fa endpoints and the 2FA login step."""

    def _enable(self, client, headers) -> dict:
        setup = client.post(f"{API}/auth/2fa/setup", headers=headers).json()
        code = pyotp.TOTP(setup["secret"]).now()
        response = client.post(f"{API}/auth/2fa/enable", json={"code": code}, headers=headers)
        assert response.status_code == 200, response.text
        return setup

    def test_setup_returns_secret_and_codes(self, client, auth_headers):
        response = client.post(f"{API}/auth/2fa/setup", headers=auth_headers)

        body = response.json()
        assert response.status_code == 200
        assert body["otpauth_url"].startswith("otpauth://totp/")
        assert len(body["backup_codes"]) == 10

    def test_enable_without_setup(self, client, auth_headers):
        response = client.post(f"{API}/auth/2fa/enable", json={"code": "123456"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "SETUP_EXPIRED"

    def test_enable_with_wrong_code(self, client, auth_headers):
        setup = client.post(f"{API}/auth/2fa/setup", headers=auth_headers).json()
        current = pyotp.TOTP(setup["secret"]).now()
        wrong = "000000" if current != "000000" else "111111"

        response = client.post(f"{API}/auth/2fa/enable", json={"code": wrong}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_CODE"

    def test_status_after_enable(self, client, auth_headers):
        self._enable(client, auth_headers)

        status = client.get(f"{API}/auth/2fa/status", headers=auth_headers).json()

        assert status == {"enabled": True, "backup_codes_count": 10}

    def test_setup_when_enabled(self, client, auth_headers):
        self._enable(client, auth_headers)

        response = client.post(f"{API}/auth/2fa/setup", headers=auth_headers)

        assert response.json()["error"]["code"] == "ALREADY_ENABLED"

    def test_login_requires_code(self, client, auth_headers):
        self._enable(client, auth_headers)

        response = _login(client)

        assert response.status_code == 200
        assert response.json() == {"requires_2fa": True}

    def test_login_with_totp(self, client, auth_headers):
        setup = self._enable(client, auth_headers)

        response = _login(client, totp_code=pyotp.TOTP(setup["secret"]).now())

        assert response.status_code == 200
        assert "access_token" in response.json()

    def test_backup_code_works_once(self, client, auth_headers):
        setup = self._enable(client, auth_headers)
        code = setup["backup_codes"][0]

        first = _login(client, totp_code=code.lower().replace("-", " "))
        second = _login(client, totp_code=code)

        assert first.status_code == 200
        assert second.status_code == 401
        assert second.json()["error"]["code"] == "INVALID_2FA_CODE"
        status = client.get(f"{API}/auth/2fa/status", headers=auth_headers).json()
        assert status["backup_codes_count"] == 9

    def test_disable(self, client, auth_headers):
        setup = self._enable(client, auth_headers)

        response = client.post(
            f"{API}/auth/2fa/disable",
            json={"code": pyotp.TOTP(setup["secret"]).now()},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert client.get(f"{API}/auth/2fa/status", headers=auth_headers).json()["enabled"] is False

    def test_disable_when_not_enabled(self, client, auth_headers):
        response = client.post(f"{API}/auth/2fa/disable", json={"code": "123456"}, headers=auth_headers)

        assert response.json()["error"]["code"] == "NOT_ENABLED"

    def test_regenerate_backup_codes(self, client, auth_headers):
        setup = self._enable(client, auth_headers)

        response = client.post(
            f"{API}/auth/2fa/backup-codes",
            json={"code": setup["backup_codes"][0]},
            headers=auth_headers,
        )

        new_codes = response.json()["backup_codes"]
        assert len(new_codes) == 10
        assert not set(new_codes) & set(setup["backup_codes"])


# =============================================================================
# Sessions
# =============================================================================

class TestSessions:
    """Tests for /sessions."""

    def test_list_marks_current(self, client, auth_headers):
        _login(client)

        body = client.get(f"{API}/sessions", headers=auth_headers).json()

        assert body["total"] == 2
        assert sum(1 for s in body["items"] if s["is_current"]) == 1

    def test_cannot_revoke_current(self, client, auth_headers):
        current = next(
            s for s in client.get(f"{API}/sessions", headers=auth_headers).json()["items"] if s["is_current"]
        )

        response = client.delete(f"{API}/sessions/{current['id']}", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CANNOT_REVOKE_CURRENT"

    def test_revoke_other_session(self, client, auth_headers):
        other_headers = bearer(_login(client).json()["access_token"])
        other = next(
            s for s in client.get(f"{API}/sessions", headers=auth_headers).json()["items"] if not s["is_current"]
        )

        response = client.delete(f"{API}/sessions/{other['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert client.get(f"{API}/account/me", headers=other_headers).status_code == 401

    def test_revoke_unknown_session(self, client, auth_headers):
        response = client.delete(f"{API}/sessions/does-not-exist", headers=auth_headers)

        assert response.status_code == 404

    def test_revoke_all_others(self, client, auth_headers):
        _login(client)
        _login(client)

        response = client.delete(f"{API}/sessions", headers=auth_headers)

        assert response.json() == {"revoked": 2}
        assert client.get(f"{API}/account/me", headers=auth_headers).status_code == 200
