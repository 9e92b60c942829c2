"""
API tests for Stripe checkout, portal and webhooks (/api/stripe/...).
"""

import asyncio
from unittest.mock import MagicMock

import pytest
import stripe

from backend import dependencies as deps


@pytest.fixture
def billing(client):
    mock = MagicMock()
    mock.create_customer.return_value = "cus_new"
    mock.create_checkout_session.return_value = "https://checkout.stripe.com/c/pay_1"
    mock.create_portal_session.return_value = "https://billing.stripe.com/p/session_1"
    client.app.dependency_overrides[deps.get_billing] = lambda: mock
    return mock


@pytest.fixture
def provider(sb):
    return sb.add("providers", {"user_id": "u1", "practice_name": "Peak PT", "subscription_status": "trial"})


# --------------------------------------------------------------------------- #
# Checkout
# --------------------------------------------------------------------------- #

def test_checkout_test_mode_activates_subscription(client, sb, provider):
    res = client.post("/api/stripe/create-checkout", json={"userId": "u1"})
    assert res.status_code == 200
    assert res.json() == {
        "url": "http://localhost:3001/dashboard/network/hub?success=true&test=true",
        "testMode": True,
    }
    row = sb.rows("providers")[0]
    assert row["subscription_status"] == "active"
    assert row["stripe_subscription_id"].startswith("test_sub_")
    assert row["stripe_customer_id"].startswith("test_cus_")


def test_checkout_test_mode_needs_provider(client):
    assert client.post("/api/stripe/create-checkout", json={}).status_code == 400
    res = client.post("/api/stripe/create-checkout", json={"userId": "ghost"})
    assert res.status_code == 500
    assert res.json()["detail"] == "Failed to activate test subscription"


def test_checkout_test_flag_wins_over_live_billing(client, billing, provider):
    res = client.post(
        "/api/stripe/create-checkout",
        json={"userId": "u1", "testMode": True},
        headers={"origin": "https://app.sleft.test"},
    )
    assert res.json()["url"].startswith("https://app.sleft.test/dashboard/network/hub")
    billing.create_checkout_session.assert_not_called()


def test_live_checkout_creates_customer_once(client, sb, billing, provider):
    res = client.post("/api/stripe/create-checkout", json={"userId": "u1", "email": "pt@peak.com"})
    assert res.json() == {"url": "https://checkout.stripe.com/c/pay_1"}

    billing.create_customer.assert_called_once_with(
        "pt@peak.com", {"user_id": "u1", "provider_id": provider["id"]}
    )
    customer_id, origin, metadata = billing.create_checkout_session.call_args.args
    assert (customer_id, origin) == ("cus_new", "http://localhost:3000")
    assert sb.rows("providers")[0]["stripe_customer_id"] == "cus_new"

    client.post("/api/stripe/create-checkout", json={"userId": "u1", "email": "pt@peak.com"})
    assert billing.create_customer.call_count == 1


def test_live_checkout_validation_and_errors(client, billing, provider):
    assert client.post("/api/stripe/create-checkout", json={"userId": "u1"}).status_code == 400

    billing.create_checkout_session.side_effect = stripe.error.StripeError(
        "In order to use Checkout, you must set an account or business name"
    )
    res = client.post("/api/stripe/create-checkout", json={"userId": "u1", "email": "a@b.co"})
    assert res.status_code == 500
    assert res.json()["detail"].startswith("Stripe account setup incomplete")

    billing.create_checkout_session.side_effect = stripe.error.StripeError("No such price: price_123")
    res = client.post("/api/stripe/create-checkout", json={"userId": "u1", "email": "a@b.co"})
    assert res.json()["detail"] == "Failed to create checkout session"


def test_live_checkout_hides_internal_error_text(client, sb, billing):
    sb.add("providers", {"user_id": "u2", "subscription_status": "trial"})
    billing.create_customer.side_effect = RuntimeError(
        "connect to db-internal.prod:5432 failed, password=hunter2 (account or business name)"
    )
    res = client.post("/api/stripe/create-checkout", json={"userId": "u2", "email": "a@b.co"})
    assert res.status_code == 500
    assert res.json() == {"detail": "Failed to create checkout session"}


# --------------------------------------------------------------------------- #
# Portal & plans
# --------------------------------------------------------------------------- #

def test_portal_requires_stripe(client):
    res = client.post("/api/stripe/create-portal", json={"userId": "u1"})
    assert res.status_code == 500
    assert res.json()["detail"] == "Stripe not configured"


def test_portal_needs_customer(client, sb, billing, provider):
    res = client.post("/api/stripe/create-portal", json={"userId": "u1"})
    assert res.status_code == 404

    sb.rows("providers")[0]["stripe_customer_id"] = "cus_1"
    res = client.post("/api/stripe/create-portal", json={"userId": "u1"})
    assert res.json() == {"url": "https://billing.stripe.com/p/session_1"}
    billing.create_portal_session.assert_called_once_with("cus_1", "http://localhost:3000/dashboard/network")


def test_plans(client):
    plans = client.get("/api/stripe/plans").json()["plans"]
    assert plans["warm_intros"]["price"] == 250


# --------------------------------------------------------------------------- #
# Webhook
# --------------------------------------------------------------------------- #

def _post_event(client, billing, event):
    billing.construct_event.return_value = event
    return client.post("/api/stripe/webhook", content=b"{}", headers={"stripe-signature": "t=1,v1=abc"})


def test_webhook_checkout_completed(client, sb, billing, provider):
    billing.retrieve_subscription.return_value = {"id": "sub_1", "current_period_end": 1767225600}
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {"metadata": {"user_id": "u1"}, "subscription": "sub_1"}},
    }
    res = _post_event(client, billing, event)
    assert res.json() == {"received": True}

    row = sb.rows("providers")[0]
    assert row["subscription_status"] == "active"
    assert row["stripe_subscription_id"] == "sub_1"
    assert row["subscription_ends_at"] == "2026-01-01T00:00:00+00:00"


def test_webhook_handler_runs_off_the_event_loop(client, billing, provider):
    seen = {}

    def retrieve(subscription_id):
        try:
            asyncio.get_running_loop()
            seen["on_loop"] = True
        except RuntimeError:
            seen["on_loop"] = False
        return {"id": subscription_id, "current_period_end": 1767225600}

    billing.retrieve_subscription.side_effect = retrieve
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {"metadata": {"user_id": "u1"}, "subscription": "sub_1"}},
    }
    assert _post_event(client, billing, event).status_code == 200
    assert seen == {"on_loop": False}


@pytest.mark.parametrize(
    "event_type, obj, expected",
    [
        ("customer.subscription.updated", {"id": "sub_1", "status": "past_due"}, "past_due"),
        ("customer.subscription.updated", {"id": "sub_1", "status": "incomplete"}, "trial"),
        ("customer.subscription.deleted", {"id": "sub_1"}, "canceled"),
        ("invoice.payment_failed", {"subscription": "sub_1"}, "past_due"),
    ],
)
def test_webhook_lifecycle(client, sb, billing, provider, event_type, obj, expected):
    sb.rows("providers")[0].update({"stripe_subscription_id": "sub_1", "subscription_status": "active"})
    _post_event(client, billing, {"type": event_type, "data": {"object": obj}})
    assert sb.rows("providers")[0]["subscription_status"] == expected


def test_webhook_item_level_period_end(client, sb, billing, provider):
    sb.rows("providers")[0]["stripe_subscription_id"] = "sub_1"
    obj = {"id": "sub_1", "status": "active", "items": {"data": [{"current_period_end": 1767225600}]}}
    _post_event(client, billing, {"type": "customer.subscription.updated", "data": {"object": obj}})
    assert sb.rows("providers")[0]["subscription_ends_at"] == "2026-01-01T00:00:00+00:00"


def test_webhook_signature_checks(client, billing):
    assert client.post("/api/stripe/webhook", content=b"{}").status_code == 400

    billing.construct_event.side_effect = ValueError("bad signature")
    res = client.post("/api/stripe/webhook", content=b"{}", headers={"stripe-signature": "nope"})
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid signature"


def test_webhook_requires_stripe(client):
    res = client.post("/api/stripe/webhook", content=b"{}", headers={"stripe-signature": "x"})
    assert res.status_code == 500
