"""
API tests for the LLM-backed conversations (/api/chat/...).
"""

import json
from unittest.mock import AsyncMock

import pytest

from analytics.discovery import GREETING, RECOVERY_MESSAGE
from analytics.onboarding import FALLBACK_GREETING
from backend import dependencies as deps


@pytest.fixture
def with_llm(client, llm):
    client.app.dependency_overrides[deps.get_llm_client] = lambda: llm
    return llm


EXTRACTION = {
    "business": {"name": "Cool Air", "industry": "HVAC", "location": "Tampa, FL"},
    "goal": "partnerships",
    "targetLeads": [{"type": "realtors", "reason": "r"}, {"type": "home inspectors", "reason": "r"}],
    "targetEvents": [],
    "targetIntel": [],
    "isComplete": True,
}


# --------------------------------------------------------------------------- #
# One-shot advice
# --------------------------------------------------------------------------- #

def test_chat_requires_message(client):
    assert client.post("/api/chat", json={}).status_code == 400


def test_chat_without_llm_is_500(client):
    res = client.post("/api/chat", json={"message": "How do I grow?"})
    assert res.status_code == 500
    assert res.json()["detail"] == "Failed to get AI response"


def test_chat_returns_reply(client, with_llm):
    with_llm.complete.return_value = "Partner with local gyms."
    res = client.post("/api/chat", json={"message": "How do I grow?"})
    assert res.json() == {"message": "Partner with local gyms."}
    assert with_llm.complete.call_args.kwargs["max_tokens"] == 200


# --------------------------------------------------------------------------- #
# Discovery
# --------------------------------------------------------------------------- #

def test_discovery_requires_user(client):
    assert client.post("/api/chat/discovery", json={"message": "hi"}).status_code == 400


def test_discovery_greets_new_conversation(client):
    res = client.post("/api/chat/discovery", json={"userId": "u1"})
    body = res.json()
    assert body["message"] == GREETING
    assert body["isReadyForStrategy"] is False
    assert "u1" in client.app.state.discovery_store


def test_discovery_turn_with_completed_extraction(client, with_llm):
    with_llm.complete = AsyncMock(side_effect=["Realtors and inspectors. Look good?", json.dumps(EXTRACTION)])

    body = client.post("/api/chat/discovery", json={"userId": "u1", "message": "HVAC in Tampa"}).json()
    assert body["message"] == "Realtors and inspectors. Look good?"
    assert body["isReadyForStrategy"] is True
    assert body["proposedStrategy"]["business"]["location"] == "Tampa, FL"

    conversation = client.app.state.discovery_store.get("u1")
    assert [m["role"] for m in conversation.messages] == ["system", "assistant", "user", "assistant"]
    assert with_llm.complete.await_args_list[1].kwargs["temperature"] == 0


def test_discovery_bad_extraction_degrades(client, with_llm):
    with_llm.complete = AsyncMock(side_effect=["Tell me more.", "not json at all"])
    body = client.post("/api/chat/discovery", json={"userId": "u1", "message": "hi"}).json()
    assert body["extractedData"] == {}
    assert body["proposedStrategy"] is None


def test_discovery_reply_failure_returns_recovery(client, with_llm):
    with_llm.complete = AsyncMock(side_effect=RuntimeError("rate limited"))
    res = client.post("/api/chat/discovery", json={"userId": "u1", "message": "hi"})
    assert res.status_code == 500
    assert res.json()["detail"]["message"] == RECOVERY_MESSAGE


def test_discovery_reset_and_delete(client, with_llm):
    store = client.app.state.discovery_store
    client.post("/api/chat/discovery", json={"userId": "u1"})
    with_llm.complete = AsyncMock(side_effect=["a", "{}"])
    client.post("/api/chat/discovery", json={"userId": "u1", "message": "hi"})
    assert len(store.get("u1").messages) == 4

    body = client.post("/api/chat/discovery", json={"userId": "u1", "reset": True}).json()
    assert body["message"] == GREETING
    assert len(store.get("u1").messages) == 2

    client.request("DELETE", "/api/chat/discovery", json={"userId": "u1"})
    assert "u1" not in store


# --------------------------------------------------------------------------- #
# Onboarding
# --------------------------------------------------------------------------- #

def test_onboarding_start_falls_back_without_llm(client):
    body = client.post("/api/chat/onboarding/start", json={"userId": "u1"}).json()
    assert body["message"] == FALLBACK_GREETING


def test_onboarding_start_uses_json_mode(client, with_llm, settings):
    with_llm.complete.return_value = json.dumps({"message": "Welcome!", "progress_percentage": 0})
    body = client.post("/api/chat/onboarding/start", json={"userId": "u1"}).json()
    assert body == {"success": True, "message": "Welcome!", "progress_percentage": 0}

    kwargs = with_llm.complete.call_args.kwargs
    assert kwargs["json_mode"] is True
    assert kwargs["model"] == settings.openai_onboarding_model


def test_onboarding_start_garbage_falls_back(client, with_llm):
    with_llm.complete.return_value = "{}"
    assert client.post("/api/chat/onboarding/start", json={}).json()["message"] == FALLBACK_GREETING


def test_onboarding_continue_keeps_memory_per_user(client):
    assert client.post("/api/chat/onboarding/continue", json={"userId": "u1"}).status_code == 400

    client.post("/api/chat/onboarding/continue", json={"userId": "u1", "userMessage": "My business is Iron Temple"})
    body = client.post(
        "/api/chat/onboarding/continue", json={"userId": "u1", "userMessage": "We are a fitness studio"}
    ).json()
    assert body["data_collected"] == {"business_name": "Iron Temple", "industry": "Fitness"}
    assert body["progress_percentage"] == 50

    client.post("/api/chat/onboarding/start", json={"userId": "u1"})
    assert "u1_conversation" not in client.app.state.onboarding_store, "Start clears old memory"
