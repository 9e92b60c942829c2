"""
Billing Router — Sleft Signals
==============================

Stripe checkout, customer portal and webhook for the Warm Introductions plan.

Endpoints:
----------
- POST /api/stripe/create-checkout   → hosted checkout URL (or test-mode activation)
- POST /api/stripe/create-portal     → billing portal URL
- POST /api/stripe/webhook           → subscription lifecycle → providers.subscription_status
- GET  /api/stripe/plans             → plan catalogue

Design:
-------
• Without STRIPE_SECRET_KEY (or with testMode) checkout activates the
  subscription directly, so the network can be exercised locally
• Webhooks are verified against STRIPE_WEBHOOK_SECRET before anything is written
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from supabase import Client

from backend.dependencies import get_billing, get_supabase, settings_dep
from clients.stripe_billing import (
    PLANS,
    StripeBilling,
    checkout_error_detail,
    field,
    period_end_iso,
    provider_status,
)
from core.config import Settings
from database import models, queries

router = APIRouter(prefix="/stripe", tags=["billing"])

TEST_MODE_ORIGIN = "http://localhost:3001"


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    email: Optional[str] = None
    test_mode: bool = Field(default=False, alias="testMode")


class PortalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")


# --------------------------------------------------------------------------- #
# Checkout & portal
# --------------------------------------------------------------------------- #

def _activate_test_subscription(sb: Client, user_id: str) -> None:
    stamp = int(time.time() * 1000)
    rows = queries.update_provider(sb, user_id, {
        "subscription_status": models.ACTIVE,
        "stripe_subscription_id": f"test_sub_{stamp}",
        "stripe_customer_id": f"test_cus_{stamp}",
    })
    if not rows:
        raise RuntimeError(f"no provider row for user {user_id}")


@router.post("/create-checkout")
def create_checkout(
    request: CheckoutRequest,
    settings: Settings = Depends(settings_dep),
    sb: Client = Depends(get_supabase),
    billing: Optional[StripeBilling] = Depends(get_billing),
    origin_header: Optional[str] = Header(default=None, alias="origin"),
) -> Dict[str, Any]:
    if billing is None or request.test_mode:
        if not request.user_id:
            raise HTTPException(status_code=400, detail="Missing user ID")
        origin = origin_header or TEST_MODE_ORIGIN
        try:
            _activate_test_subscription(sb, request.user_id)
        except Exception as e:  # noqa: BLE001
            logger.exception(f"[Stripe] ❌ Test-mode activation failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to activate test subscription")

        logger.info(f"[Stripe] ✅ Test subscription activated for {request.user_id}")
        return {"url": f"{origin}/dashboard/network/hub?success=true&test=true", "testMode": True}

    if not request.user_id or not request.email:
        raise HTTPException(status_code=400, detail="Missing required fields")
    origin = origin_header or settings.frontend_url

    try:
        provider = queries.get_provider(sb, request.user_id) or {}
        customer_id = provider.get("stripe_customer_id")
        if not customer_id:
            customer_id = billing.create_customer(
                request.email,
                {"user_id": request.user_id, "provider_id": provider.get("id") or ""},
            )
            queries.update_provider(sb, request.user_id, {"stripe_customer_id": customer_id})

        url = billing.create_checkout_session(
            customer_id,
            origin,
            {"user_id": request.user_id, "provider_id": provider.get("id") or ""},
        )
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Stripe] ❌ Checkout failed: {e}")
        raise HTTPException(status_code=500, detail=checkout_error_detail(e))

    return {"url": url}


@router.post("/create-portal")
def create_portal(
    request: PortalRequest,
    settings: Settings = Depends(settings_dep),
    sb: Client = Depends(get_supabase),
    billing: Optional[StripeBilling] = Depends(get_billing),
    origin_header: Optional[str] = Header(default=None, alias="origin"),
) -> Dict[str, str]:
    if billing is None:
        raise HTTPException(status_code=500, detail="Stripe not configured")
    if not request.user_id:
        raise HTTPException(status_code=400, detail="Missing user ID")

    try:
        provider = queries.get_provider(sb, request.user_id)
        if not provider or not provider.get("stripe_customer_id"):
            raise HTTPException(status_code=404, detail="No subscription found")
        url = billing.create_portal_session(
            provider["stripe_customer_id"],
            f"{origin_header or settings.frontend_url}/dashboard/network",
        )
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Stripe] ❌ Portal session failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to create portal session")

    return {"url": url}


@router.get("/plans")
def list_plans() -> Dict[str, Any]:
    return {"plans": PLANS}


# --------------------------------------------------------------------------- #
# Webhook
# --------------------------------------------------------------------------- #

def _update_by_subscription(sb: Client, subscription_id: str, fields: Dict[str, Any]) -> None:
    sb.table(models.PROVIDERS).update(fields).eq("stripe_subscription_id", subscription_id).execute()


def apply_event(sb: Client, billing: StripeBilling, event: Any) -> None:
    """Mirror one verified Stripe event onto the providers table."""
    event_type = field(event, "type")
    obj = field(field(event, "data"), "object")

    if event_type == "checkout.session.completed":
        user_id = field(field(obj, "metadata"), "user_id")
        subscription_id = field(obj, "subscription")
        if not user_id or not subscription_id:
            logger.warning("[Stripe] ⚠️ Checkout completed without user_id or subscription")
            return
        subscription = billing.retrieve_subscription(subscription_id)
        queries.update_provider(sb, user_id, {
            "subscription_status": models.ACTIVE,
            "stripe_subscription_id": subscription_id,
            "subscription_ends_at": period_end_iso(subscription),
        })
        logger.info(f"[Stripe] ✅ Subscription activated for {user_id}")

    elif event_type == "customer.subscription.updated":
        _update_by_subscription(sb, field(obj, "id"), {
            "subscription_status": provider_status(field(obj, "status")),
            "subscription_ends_at": period_end_iso(obj),
        })

    elif event_type == "customer.subscription.deleted":
        _update_by_subscription(sb, field(obj, "id"), {
            "subscription_status": models.CANCELED,
            "stripe_subscription_id": None,
        })
        logger.info(f"[Stripe] Subscription {field(obj, 'id')} canceled")

    elif event_type == "invoice.payment_failed":
        subscription_id = field(obj, "subscription")
        if subscription_id:
            _update_by_subscription(sb, subscription_id, {"subscription_status": models.PAST_DUE})
            logger.warning(f"[Stripe] ⚠️ Payment failed for subscription {subscription_id}")

    else:
        logger.debug(f"[Stripe] Ignoring event {event_type}")


@router.post("/webhook")
async def webhook(
    request: Request,
    sb: Client = Depends(get_supabase),
    billing: Optional[StripeBilling] = Depends(get_billing),
    stripe_signature: Optional[str] = Header(default=None, alias="stripe-signature"),
) -> Dict[str, bool]:
    if billing is None:
        raise HTTPException(status_code=500, detail="Stripe not configured")
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing signature")

    payload = await request.body()
    try:
        event = billing.construct_event(payload, stripe_signature)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Stripe] ⚠️ Webhook signature verification failed: {e}")
        raise HTTPException(status_code=400, detail="Invalid signature")

    try:
        await run_in_threadpool(apply_event, sb, billing, event)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Stripe] ❌ Webhook handler failed: {e}")
        raise HTTPException(status_code=500, detail="Webhook handler failed")

    return {"received": True}
