"""
clients/stripe_billing.py
-------------------------
Stripe subscription billing for the Warm Introductions plan.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import stripe

from core.config import Settings

PLANS: Dict[str, Dict[str, Any]] = {
    "warm_intros": {
        "name": "Warm Introductions",
        "price": 250,
        "interval": "month",
        "features": [
            "We reach out to partners on your behalf",
            "Meetings scheduled for you",
            "Pre-qualified, mutual-fit partners",
            "Relationship facilitation support",
            "Access to community & insights",
        ],
    },
}

# Stripe subscription status -> providers.subscription_status
SUBSCRIPTION_STATUS_MAP = {
    "active": "active",
    "past_due": "past_due",
    "canceled": "canceled",
}


def provider_status(stripe_status: Optional[str]) -> str:
    return SUBSCRIPTION_STATUS_MAP.get(stripe_status or "", "trial")


ACCOUNT_SETUP_INCOMPLETE = (
    "Stripe account setup incomplete. Please set an account or business name "
    "in your Stripe dashboard before accepting payments."
)


def checkout_error_detail(error: Exception) -> str:
    """Caller-facing detail for a failed checkout; only Stripe's account-setup error is surfaced."""
    if isinstance(error, stripe.error.StripeError) and "account or business name" in str(error):
        return ACCOUNT_SETUP_INCOMPLETE
    return "Failed to create checkout session"


def field(obj: Any, key: str) -> Any:
    """Read `key` from a Stripe object or plain dict; None when absent."""
    if obj is None:
        return None
    try:
        return obj[key]
    except (KeyError, TypeError, AttributeError):
        return None


def period_end_iso(subscription: Any) -> Optional[str]:
    """Current period end as ISO-8601, from the subscription or its first item."""
    ts = field(subscription, "current_period_end")
    if ts is None:
        items = field(field(subscription, "items"), "data") or []
        ts = field(items[0], "current_period_end") if items else None
    if ts is None:
        return None
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).isoformat()


class StripeBilling:
    """Customer, checkout, portal and webhook helpers bound to one secret key."""

    def __init__(self, secret_key: str, price_id: str = "", webhook_secret: Optional[str] = None):
        if not secret_key:
            raise ValueError("STRIPE_SECRET_KEY must be set")
        self.secret_key = secret_key
        self.price_id = price_id
        self.webhook_secret = webhook_secret

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeBilling":
        return cls(
            secret_key=settings.stripe_secret_key or "",
            price_id=settings.stripe_price_id,
            webhook_secret=settings.stripe_webhook_secret,
        )

    def create_customer(self, email: str, metadata: Dict[str, str]) -> str:
        customer = stripe.Customer.create(email=email, metadata=metadata, api_key=self.secret_key)
        return customer["id"]

    def create_checkout_session(self, customer_id: str, origin: str, metadata: Dict[str, str]) -> str:
        session = stripe.checkout.Session.create(
            customer=customer_id,
            mode="subscription",
            payment_method_types=["card"],
            line_items=[{"price": self.price_id, "quantity": 1}],
            success_url=f"{origin}/dashboard/network?success=true&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{origin}/dashboard/network/upgrade?canceled=true",
            metadata=metadata,
            subscription_data={"metadata": metadata},
            api_key=self.secret_key,
        )
        return session["url"]

    def create_portal_session(self, customer_id: str, return_url: str) -> str:
        session = stripe.billing_portal.Session.create(
            customer=customer_id,
            return_url=return_url,
            api_key=self.secret_key,
        )
        return session["url"]

    def retrieve_subscription(self, subscription_id: str) -> Any:
        return stripe.Subscription.retrieve(subscription_id, api_key=self.secret_key)

    def construct_event(self, payload: bytes, signature: str) -> Any:
        """Verify the webhook signature; raises ValueError / SignatureVerificationError."""
        if not self.webhook_secret:
            raise ValueError("STRIPE_WEBHOOK_SECRET is not configured")
        return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
