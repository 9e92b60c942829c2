"""
Unit tests for the external API clients with their transports mocked out.
"""

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import requests

from backend import dependencies as deps
from clients import stripe_billing
from clients.airtable_client import AirtableClient, AirtableError
from clients.heygen_client import HeyGenClient, HeyGenError
from clients.llm_client import LLMClient
from clients.places_search import PlacesSearchClient
from core.adjacency_map import get_search_term


def _response(status=200, payload=None, text=""):
    resp = MagicMock()
    resp.ok = status < 400
    resp.status_code = status
    resp.json.return_value = payload if payload is not None else {}
    resp.text = text or json.dumps(payload or {})
    if resp.ok:
        resp.raise_for_status.return_value = None
    else:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


# --------------------------------------------------------------------------- #
# Serper
# --------------------------------------------------------------------------- #

def test_places_client_requires_key():
    with pytest.raises(ValueError):
        PlacesSearchClient(api_key="")


def test_search_places_shapes_results():
    session = MagicMock()
    session.post.return_value = _response(payload={"places": [
        {"title": "Bright Dental", "rating": 4.6, "ratingCount": 88, "phoneNumber": "555", "extra": "x"},
        {"address": "no title"},
    ]})
    client = PlacesSearchClient(api_key="k", session=session)

    places = client.search_places("dentist", "Austin, TX", num=5)
    assert places == [{
        "title": "Bright Dental",
        "address": None,
        "rating": 4.6,
        "ratingCount": 88,
        "phoneNumber": "555",
        "website": None,
        "category": None,
        "cid": None,
    }]

    url = session.post.call_args.args[0]
    kwargs = session.post.call_args.kwargs
    assert url == "https://google.serper.dev/places"
    assert kwargs["json"] == {"q": "dentist near Austin, TX", "location": "Austin, TX", "gl": "us", "hl": "en", "num": 5}
    assert kwargs["headers"]["X-API-KEY"] == "k"


def test_search_specialty_uses_search_phrase():
    session = MagicMock()
    session.post.return_value = _response(payload={"places": []})
    PlacesSearchClient(api_key="k", session=session).search_specialty("Physical Therapy", "Austin")
    assert session.post.call_args.kwargs["json"]["q"] == f"{get_search_term('Physical Therapy')} near Austin"


def test_search_errors_propagate():
    session = MagicMock()
    session.post.return_value = _response(status=403)
    with pytest.raises(requests.HTTPError):
        PlacesSearchClient(api_key="k", session=session).search_news("dental news")


# --------------------------------------------------------------------------- #
# Airtable
# --------------------------------------------------------------------------- #

def test_airtable_create_record():
    session = MagicMock()
    session.post.return_value = _response(payload={"records": [{"id": "rec1"}]})
    client = AirtableClient(api_key="k", base_id="app1", session=session)

    assert client.create_record("Snapshot Leads", {"Email": "a@b.co"}) == "rec1"
    assert session.post.call_args.args[0] == "https://api.airtable.com/v0/app1/Snapshot%20Leads"
    assert session.post.call_args.kwargs["json"] == {"records": [{"fields": {"Email": "a@b.co"}}]}


def test_airtable_error_status():
    session = MagicMock()
    session.post.return_value = _response(status=422, text="INVALID_VALUE")
    with pytest.raises(AirtableError, match="422"):
        AirtableClient(api_key="k", base_id="app1", session=session).create_record("T", {})


# --------------------------------------------------------------------------- #
# HeyGen
# --------------------------------------------------------------------------- #

def test_heygen_token_and_errors():
    session = MagicMock()
    session.request.return_value = _response(payload={"data": {"token": "tok"}})
    client = HeyGenClient(api_key="k", session=session)
    assert client.create_token() == "tok"
    assert session.request.call_args.args == ("POST", "https://api.heygen.com/v1/streaming.create_token")

    session.request.return_value = _response(status=401, payload={"message": "unauthorized"})
    with pytest.raises(HeyGenError) as excinfo:
        client.list_avatars()
    assert excinfo.value.status_code == 401
    assert excinfo.value.payload == {"message": "unauthorized"}


def test_heygen_speak_returns_task_id():
    session = MagicMock()
    session.request.return_value = _response(payload={"data": {"task_id": "t1"}})
    assert HeyGenClient(api_key="k", session=session).speak("s1", "Hello") == "t1"
    assert session.request.call_args.kwargs["json"]["task_type"] == "talk"


# --------------------------------------------------------------------------- #
# OpenAI
# --------------------------------------------------------------------------- #

def test_llm_complete_json_mode():
    llm = LLMClient(api_key="sk-test", model="gpt-4o-mini")
    completion = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content='{"a": 1}'))])
    llm.client = MagicMock()
    llm.client.chat.completions.create = AsyncMock(return_value=completion)

    text = asyncio.run(llm.complete([{"role": "user", "content": "hi"}], json_mode=True, max_tokens=50))
    assert text == '{"a": 1}'
    kwargs = llm.client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["max_tokens"] == 50


def test_llm_empty_content_is_blank():
    llm = LLMClient(api_key="sk-test")
    completion = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=None))])
    llm.client = MagicMock()
    llm.client.chat.completions.create = AsyncMock(return_value=completion)
    assert asyncio.run(llm.complete([])) == ""


def test_llm_client_is_shared_per_key_and_model(settings):
    assert deps.get_llm_client(settings.model_copy(update={"openai_api_key": None})) is None

    configured = settings.model_copy(update={"openai_api_key": "sk-test"})
    first = deps.get_llm_client(configured)
    assert isinstance(first, LLMClient)
    assert deps.get_llm_client(configured) is first

    other_model = configured.model_copy(update={"openai_model": "gpt-4o"})
    assert deps.get_llm_client(other_model) is not first


# --------------------------------------------------------------------------- #
# Stripe
# --------------------------------------------------------------------------- #

def test_provider_status_mapping():
    assert stripe_billing.provider_status("active") == "active"
    assert stripe_billing.provider_status("unpaid") == "trial"
    assert stripe_billing.provider_status(None) == "trial"


def test_period_end_iso():
    assert stripe_billing.period_end_iso({"current_period_end": 1767225600}) == "2026-01-01T00:00:00+00:00"
    assert stripe_billing.period_end_iso({"items": {"data": []}}) is None


def test_checkout_session_uses_price_and_metadata(monkeypatch):
    create = MagicMock(return_value={"url": "https://checkout"})
    monkeypatch.setattr(stripe_billing.stripe.checkout.Session, "create", create)

    billing = stripe_billing.StripeBilling(secret_key="sk_test", price_id="price_1")
    assert billing.create_checkout_session("cus_1", "http://localhost:3000", {"user_id": "u1"}) == "https://checkout"

    kwargs = create.call_args.kwargs
    assert kwargs["line_items"] == [{"price": "price_1", "quantity": 1}]
    assert kwargs["subscription_data"] == {"metadata": {"user_id": "u1"}}
    assert kwargs["success_url"].startswith("http://localhost:3000/dashboard/network?success=true")


def test_construct_event_requires_webhook_secret():
    billing = stripe_billing.StripeBilling(secret_key="sk_test")
    with pytest.raises(ValueError):
        billing.construct_event(b"{}", "sig")


def test_checkout_error_detail_only_surfaces_account_setup():
    setup = stripe_billing.stripe.error.StripeError("You must set an account or business name")
    assert stripe_billing.checkout_error_detail(setup) == stripe_billing.ACCOUNT_SETUP_INCOMPLETE

    generic = "Failed to create checkout session"
    assert stripe_billing.checkout_error_detail(stripe_billing.stripe.error.StripeError("No such price")) == generic
    assert stripe_billing.checkout_error_detail(RuntimeError("account or business name")) == generic
