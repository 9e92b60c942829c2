"""
API tests for registration, feedback, HeyGen proxies and the root probes.
"""

from unittest.mock import MagicMock

from backend import dependencies as deps
from clients.heygen_client import HeyGenError


# --------------------------------------------------------------------------- #
# Registration & feedback
# --------------------------------------------------------------------------- #

def test_register_requires_email_and_user(client):
    assert client.post("/api/auth/register", json={"email": "a@b.co"}).status_code == 400


def test_register_without_airtable_still_succeeds(client):
    body = client.post("/api/auth/register", json={"email": "a@b.co", "userId": "u1"}).json()
    assert body["success"] is True
    assert "warning" in body


def test_register_records_user(client):
    airtable = MagicMock()
    airtable.create_record.return_value = "recUser"
    client.app.dependency_overrides[deps.get_airtable] = lambda: airtable

    body = client.post(
        "/api/auth/register", json={"email": "a@b.co", "userId": "u1", "fullName": "Ana B"}
    ).json()
    assert body["airtableRecordId"] == "recUser"
    table, fields = airtable.create_record.call_args.args
    assert table == "Users"
    assert fields == {
        "Email": "a@b.co",
        "Full Name": "Ana B",
        "User ID": "u1",
        "Auth Provider": "email",
        "Status": "Active",
    }


def test_feedback_stored(client, sb):
    assert client.post("/api/feedback", json={"likes": "leads"}).status_code == 400

    body = client.post(
        "/api/feedback",
        json={"briefId": "b1", "likes": "leads", "dislikes": "news", "timestamp": "2025-06-01T00:00:00Z"},
    ).json()
    row = sb.rows("feedback")[0]
    assert body == {"success": True, "feedbackId": row["id"]}
    assert row["created_at"] == "2025-06-01T00:00:00Z"


def test_feedback_is_best_effort(client, sb):
    sb.failing_tables.add("feedback")
    body = client.post("/api/feedback", json={"likes": "a", "dislikes": "b"}).json()
    assert body == {"success": True, "message": "Feedback logged"}


# --------------------------------------------------------------------------- #
# HeyGen
# --------------------------------------------------------------------------- #

def test_heygen_without_key(client):
    res = client.post("/api/heygen/token")
    assert res.status_code == 500
    assert res.json()["detail"] == "HeyGen API key not configured"


def test_heygen_token_and_upstream_errors(client):
    heygen = MagicMock()
    heygen.create_token.return_value = "tok"
    heygen.list_avatars.side_effect = HeyGenError(401, {"message": "bad key"})
    client.app.dependency_overrides[deps.get_heygen] = lambda: heygen

    assert client.post("/api/heygen/token").json() == {"token": "tok"}

    res = client.get("/api/heygen/avatars")
    assert res.status_code == 401
    assert res.json() == {"message": "bad key"}


def test_heygen_avatar_chat(client, llm):
    heygen = MagicMock()
    heygen.speak.return_value = "task-1"
    client.app.dependency_overrides[deps.get_heygen] = lambda: heygen
    client.app.dependency_overrides[deps.get_llm_client] = lambda: llm

    assert client.post("/api/heygen/chat", json={"message": "hi"}).status_code == 400

    res = client.post("/api/heygen/chat", json={"message": "hi", "sessionId": "s1"})
    assert res.json() == {"success": True, "taskId": "task-1"}
    heygen.speak.assert_called_once_with("s1", "Sounds good.")


# --------------------------------------------------------------------------- #
# Root probes
# --------------------------------------------------------------------------- #

def test_root(client):
    body = client.get("/").json()
    assert body["status"] == "ok"
    assert body["metadata"]["project"] == "Sleft Signals"
    assert body["integrations"]["supabase"] is False


def test_health_with_supabase(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["supabase_connected"] is True


def test_health_degraded_without_supabase(client):
    client.app.dependency_overrides[deps.get_optional_supabase] = lambda: None
    body = client.get("/health").json()
    assert body["status"] == "degraded"
    assert body["message"] == "Supabase is not configured."


def test_status_summary(client):
    body = client.get("/status/summary").json()
    assert body["routers"] == sorted(["accounts", "billing", "briefs", "chat", "heygen", "network", "referrals"])
    assert body["conversations"] == {"discovery": 0, "onboarding": 0}
