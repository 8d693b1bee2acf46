# =============================================================================
# core/services/billing_service.py - Stripe Subscription Billing
# =============================================================================
# FREE -> PRO upgrades go through a Stripe Checkout Session. The plan only
# changes when Stripe's signed webhook confirms it:
#   checkout.session.completed      -> PRO
#   customer.subscription.deleted   -> FREE
# =============================================================================

import json
import logging
from typing import Any

import stripe
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import BadRequestError, ExternalServiceError, NotConfiguredError, NotFoundError
from core.models.common import AuditAction, Plan
from core.services.audit_service import AuditService
from core.tables import User
from lib.database import utcnow
from lib.retry import with_retry

logger = logging.getLogger(__name__)


def _configure_stripe() -> None:
    if not settings.stripe_configured:
        raise NotConfiguredError("Billing")
    stripe.api_key = settings.STRIPE_SECRET_KEY


class BillingService:
    """Service for Stripe checkout and webhook handling."""

    @staticmethod
    def create_checkout_session(db: Session, user_id: str) -> str:
        """
        Start a PRO subscription checkout.

        Returns:
            Stripe-hosted checkout URL

        Raises:
            NotConfiguredError: Stripe key or price id missing
            BadRequestError: ALREADY_PRO
            ExternalServiceError: Stripe call failed after retries
        """
        _configure_stripe()

        user = db.scalar(select(User).where(User.id == user_id, User.deleted_at.is_(None)))
        if user is None:
            raise NotFoundError("User")
        if user.plan == Plan.PRO.value:
            raise BadRequestError("You are already on the Pro plan", code="ALREADY_PRO")

        try:
            if not user.stripe_customer_id:
                customer = with_retry(lambda: stripe.Customer.create(
                    email=user.email,
                    metadata={"user_id": user.id},
                ))
                user.stripe_customer_id = customer["id"]
                db.commit()
                logger.info(f"Created Stripe customer for user {user.id}")

            session = with_retry(lambda: stripe.checkout.Session.create(
                mode="subscription",
                customer=user.stripe_customer_id,
                client_reference_id=user.id,
                line_items=[{"price": settings.STRIPE_PRICE_ID, "quantity": 1}],
                success_url=f"{settings.APP_URL}/settings/billing?success=1",
                cancel_url=f"{settings.APP_URL}/settings/billing?canceled=1",
                metadata={"user_id": user.id},
            ))
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout failed for user {user.id}: {e}")
            raise ExternalServiceError("Stripe", str(e))

        return session["url"]

    @staticmethod
    def construct_event(payload: bytes, signature: str | None) -> dict[str, Any]:
        """
        Verify a webhook payload and return the event as a plain dict.

        The handlers read the JSON body rather than stripe's event object,
        which does not support dict methods such as .get().

        Raises:
            NotConfiguredError: No webhook secret
            BadRequestError: INVALID_SIGNATURE
        """
        if not settings.STRIPE_WEBHOOK_SECRET:
            raise NotConfiguredError("Billing webhook")
        try:
            stripe.Webhook.construct_event(
                payload=payload,
                sig_header=signature or "",
                secret=settings.STRIPE_WEBHOOK_SECRET,
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Rejected Stripe webhook: {e}")
            raise BadRequestError("Invalid webhook signature", code="INVALID_SIGNATURE")
        return json.loads(payload)

    @staticmethod
    def handle_event(db: Session, event: dict[str, Any]) -> bool:
        """
        Apply a verified event.

        Returns:
            True if the event changed a user's plan
        """
        event_type = event["type"]
        obj = event["data"]["object"]

        if event_type == "checkout.session.completed":
            return BillingService._upgrade(db, obj)
        if event_type == "customer.subscription.deleted":
            return BillingService._downgrade(db, obj)

        logger.debug(f"Ignoring Stripe event {event_type}")
        return False

    @staticmethod
    def _upgrade(db: Session, checkout: dict[str, Any]) -> bool:
        metadata = checkout.get("metadata") or {}
        user_id = metadata.get("user_id") or checkout.get("client_reference_id")
        customer_id = checkout.get("customer")

        conditions = []
        if user_id:
            conditions.append(User.id == user_id)
        if customer_id:
            conditions.append(User.stripe_customer_id == customer_id)
        if not conditions:
            logger.warning("checkout.session.completed without user reference")
            return False

        user = db.scalar(select(User).where(or_(*conditions), User.deleted_at.is_(None)))
        if user is None:
            logger.warning(f"checkout.session.completed for unknown user {user_id}")
            return False

        user.plan = Plan.PRO.value
        user.stripe_subscription_id = checkout.get("subscription")
        if customer_id and not user.stripe_customer_id:
            user.stripe_customer_id = customer_id
        user.plan_updated_at = utcnow()
        db.commit()

        logger.info(f"Upgraded user {user.id} to PRO")
        AuditService.record(
            db, user.id, AuditAction.BILLING_UPGRADED,
            entity_type="User", entity_id=user.id,
            meta={"subscription_id": user.stripe_subscription_id},
        )
        return True

    @staticmethod
    def _downgrade(db: Session, subscription: dict[str, Any]) -> bool:
        customer_id = subscription.get("customer")
        subscription_id = subscription.get("id")

        conditions = []
        if customer_id:
            conditions.append(User.stripe_customer_id == customer_id)
        if subscription_id:
            conditions.append(User.stripe_subscription_id == subscription_id)
        if not conditions:
            return False

        user = db.scalar(select(User).where(or_(*conditions)))
        if user is None:
            logger.warning(f"Subscription {subscription_id} deleted for unknown customer")
            return False

        user.plan = Plan.FREE.value
        user.stripe_subscription_id = None
        user.plan_updated_at = utcnow()
        db.commit()

        logger.info(f"Downgraded user {user.id} to FREE")
        AuditService.record(
            db, user.id, AuditAction.BILLING_DOWNGRADED,
            entity_type="User", entity_id=user.id,
            meta={"subscription_id": subscription_id},
        )
        return True
