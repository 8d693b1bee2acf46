# =============================================================================
# tests/test_billing.py - Stripe Checkout and Webhook Tests
# =============================================================================
# Stripe's HTTP API is never called: checkout uses stubbed stripe resources
# and webhooks are signed locally with the test webhook secret.
#
# Run with: pytest tests/test_billing.py -v
# =============================================================================

import hashlib
import hmac
import json
import time

import pytest
import stripe
from sqlalchemy import select

from app.config import settings
from core.tables import User

API = "/api/v1/billing"
WEBHOOK_SECRET = "whsec_test_secret"


def sign(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Build a Stripe-Signature header the way Stripe does."""
    timestamp = int(time.time())
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def event(event_type: str, obj: dict) -> bytes:
    return json.dumps({
        "id": "evt_test",
        "object": "event",
        "type": event_type,
        "data": {"object": obj},
    }).encode()


def load_user(db, email: str = "alice@example.com") -> User:
    db.expire_all()
    return db.scalar(select(User).where(User.email == email))


@pytest.fixture
def stripe_configured(monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(settings, "STRIPE_PRICE_ID", "price_123")
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)


@pytest.fixture
def fake_stripe(monkeypatch):
    """Record Stripe create calls instead of sending them."""
    calls = {"customers": [], "sessions": []}

    def create_customer(**kwargs):
        calls["customers"].append(kwargs)
        return {"id": "cus_123"}

    def create_session(**kwargs):
        calls["sessions"].append(kwargs)
        return {"id": "cs_123", "url": "https://checkout.stripe.com/c/pay/cs_123"}

    monkeypatch.setattr(stripe.Customer, "create", create_customer)
    monkeypatch.setattr(stripe.checkout.Session, "create", create_session)
    return calls


# =============================================================================
# Checkout
# =============================================================================

class TestCheckout:
    """Tests for POST /billing/checkout."""

    def test_not_configured(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "")

        response = client.post(f"{API}/checkout", headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "NOT_CONFIGURED"

    def test_creates_customer_and_session(self, client, auth_headers, stripe_configured, fake_stripe, db):
        response = client.post(f"{API}/checkout", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["url"] == "https://checkout.stripe.com/c/pay/cs_123"
        assert fake_stripe["customers"][0]["email"] == "alice@example.com"
        session = fake_stripe["sessions"][0]
        assert session["mode"] == "subscription"
        assert session["customer"] == "cus_123"
        assert session["line_items"] == [{"price": "price_123", "quantity": 1}]
        assert load_user(db).stripe_customer_id == "cus_123"

    def test_existing_customer_reused(self, client, auth_headers, stripe_configured, fake_stripe):
        client.post(f"{API}/checkout", headers=auth_headers)
        client.post(f"{API}/checkout", headers=auth_headers)

        assert len(fake_stripe["customers"]) == 1
        assert len(fake_stripe["sessions"]) == 2

    def test_already_pro(self, client, auth_headers, stripe_configured, fake_stripe, db):
        user = load_user(db)
        user.plan = "PRO"
        db.commit()

        response = client.post(f"{API}/checkout", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "ALREADY_PRO"

    def test_stripe_failure(self, client, auth_headers, stripe_configured, monkeypatch):
        def fail(**kwargs):
            raise stripe.InvalidRequestError("No such price", param="price")

        monkeypatch.setattr(stripe.Customer, "create", fail)

        response = client.post(f"{API}/checkout", headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "EXTERNAL_SERVICE_ERROR"


# =============================================================================
# Webhook
# =============================================================================

class TestWebhook:
    """Tests for POST /billing/webhook."""

    def _post(self, client, payload: bytes, signature: str | None = None):
        headers = {"stripe-signature": signature if signature is not None else sign(payload)}
        return client.post(f"{API}/webhook", content=payload, headers=headers)

    def test_bad_signature(self, client, stripe_configured):
        payload = event("checkout.session.completed", {})

        response = self._post(client, payload, signature=sign(payload, secret="whsec_wrong"))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_SIGNATURE"

    def test_missing_secret(self, client):
        response = self._post(client, event("checkout.session.completed", {}))

        assert response.status_code == 503

    def test_checkout_completed_upgrades(self, client, auth_headers, stripe_configured, db):
        user_id = load_user(db).id
        payload = event("checkout.session.completed", {
            "id": "cs_123",
            "object": "checkout.session",
            "client_reference_id": user_id,
            "customer": "cus_abc",
            "subscription": "sub_abc",
            "metadata": {"user_id": user_id},
        })

        response = self._post(client, payload)

        assert response.status_code == 200
        assert response.json() == {"received": True}
        user = load_user(db)
        assert user.plan == "PRO"
        assert user.stripe_subscription_id == "sub_abc"
        assert user.stripe_customer_id == "cus_abc"
        assert client.get("/api/v1/account/me", headers=auth_headers).json()["plan"] == "PRO"

    def test_subscription_deleted_downgrades(self, client, auth_headers, stripe_configured, db):
        user = load_user(db)
        user.plan = "PRO"
        user.stripe_customer_id = "cus_abc"
        user.stripe_subscription_id = "sub_abc"
        db.commit()
        payload = event("customer.subscription.deleted", {
            "id": "sub_abc",
            "object": "subscription",
            "customer": "cus_abc",
        })

        response = self._post(client, payload)

        assert response.status_code == 200
        user = load_user(db)
        assert user.plan == "FREE"
        assert user.stripe_subscription_id is None

    def test_other_events_acknowledged(self, client, stripe_configured):
        payload = event("invoice.paid", {"id": "in_123", "object": "invoice"})

        response = self._post(client, payload)

        assert response.status_code == 200
        assert response.json() == {"received": True}

    def test_unknown_user_ignored(self, client, stripe_configured):
        payload = event("checkout.session.completed", {
            "id": "cs_x",
            "object": "checkout.session",
            "client_reference_id": "no-such-user",
        })

        assert self._post(client, payload).status_code == 200


class TestConstructEvent:
    """Tests for BillingService.construct_event."""

    def test_returns_plain_dicts(self, stripe_configured):
        from core.services.billing_service import BillingService

        payload = event("checkout.session.completed", {
            "id": "cs_123",
            "object": "checkout.session",
            "metadata": {"user_id": "user-1"},
        })

        parsed = BillingService.construct_event(payload, sign(payload))

        assert type(parsed) is dict
        assert type(parsed["data"]["object"]["metadata"]) is dict
        assert parsed["data"]["object"].get("metadata").get("user_id") == "user-1"
