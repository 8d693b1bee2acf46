# =============================================================================
# app/routers/billing.py - Billing Endpoints
# =============================================================================
# Stripe Checkout for FREE -> PRO upgrades and the Stripe webhook that
# actually flips the plan. The webhook is unauthenticated; its signature
# is what proves the request came from Stripe.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel

from app.auth import AuthUser, get_current_user
from app.dependencies import DbDep
from core.services.billing_service import BillingService
from lib.rate_limiter import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class CheckoutResponse(BaseModel):
    url: str


class WebhookResponse(BaseModel):
    received: bool = True


# =============================================================================
# Endpoints
# =============================================================================

@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    dependencies=[Depends(rate_limit("billing:checkout", 5))],
)
async def create_checkout(
    db: DbDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Start a PRO subscription checkout.

    Returns the hosted Stripe Checkout URL to redirect the browser to.

    Errors:
    - 400 ALREADY_PRO
    - 503 NOT_CONFIGURED: Stripe keys or price are missing
    """
    url = BillingService.create_checkout_session(db, user.id)
    return CheckoutResponse(url=url)


@router.post("/webhook", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    db: DbDep,
    stripe_signature: Annotated[str | None, Header(alias="stripe-signature")] = None,
):
    """
    Stripe webhook receiver.

    Verifies the signature over the raw body, then applies
    checkout.session.completed and customer.subscription.deleted.
    Other event types are acknowledged and ignored.
    """
    payload = await request.body()
    event = BillingService.construct_event(payload, stripe_signature)
    changed = BillingService.handle_event(db, event)
    logger.info(f"Processed Stripe event {event['type']} (plan changed: {changed})")
    return WebhookResponse()
