"""
API tests for stored strategy briefs (/api/generate, /api/briefs, /api/user-briefs).
"""

import pytest

from backend import dependencies as deps
from fakes import place


def _generate(client, **extra):
    payload = {"userId": "user-1", "businessName": "Acme", "industry": "Retail", "location": "Denver, CO"}
    payload.update(extra)
    return client.post("/api/generate", json=payload)


@pytest.mark.parametrize("user_id", [None, "", "null", "undefined"])
def test_generate_requires_user(client, user_id):
    res = client.post("/api/generate", json={"userId": user_id, "businessName": "Acme"})
    assert res.status_code == 400


def test_generate_without_search_stores_empty_brief(client, sb):
    res = _generate(client)
    assert res.status_code == 200, res.text
    body = res.json()

    assert body["success"] is True
    assert body["brief"]["businessData"] == {"leads": [], "totalLeads": 0}
    assert "No leads found in this search." in body["brief"]["content"]

    stored = sb.rows("user_briefs")
    assert len(stored) == 1
    assert stored[0]["id"] == body["briefId"]
    assert stored[0]["brief_status"] == "completed"
    assert stored[0]["is_deleted"] is False
    assert stored[0]["form_data"]["userId"] == "user-1"


def test_generate_with_search_collects_leads_news_events(client, places):
    places.search_places.return_value = [place("Denver Bookkeeping", rating=4.5, phoneNumber="555")]
    places.search_news.return_value = [{"title": "Retail rebounds", "link": "https://news.com/x", "snippet": "s"}]
    places.search_web.return_value = [{"title": "Denver Retail Mixer", "link": "https://meetup.com/e"}]
    client.app.dependency_overrides[deps.get_places_client] = lambda: places

    body = _generate(client, targetLeads=[{"type": "bookkeepers"}]).json()["brief"]
    assert body["businessData"]["leads"][0]["businessName"] == "Denver Bookkeeping"
    assert body["businessData"]["leads"][0]["leadScore"] == 92
    assert body["newsData"]["articles"][0]["title"] == "Retail rebounds"
    assert body["meetupData"]["events"][0]["title"] == "Denver Retail Mixer"
    assert "Top opportunities: Denver Bookkeeping" in body["content"]


def test_generate_fails_when_insert_fails(client, sb):
    sb.failing_tables.add("user_briefs")
    res = _generate(client)
    assert res.status_code == 500
    assert res.json()["detail"] == "Failed to save brief to database"


def test_get_brief_round_trip_and_missing(client):
    brief_id = _generate(client).json()["briefId"]

    res = client.get(f"/api/briefs/{brief_id}")
    assert res.status_code == 200
    assert res.json()["brief"]["businessName"] == "Acme"

    assert client.get("/api/briefs/nope").status_code == 404
    assert client.get("/api/briefs/null").status_code == 400


def test_soft_delete_hides_brief(client, sb):
    brief_id = _generate(client).json()["briefId"]

    res = client.request("DELETE", f"/api/briefs/{brief_id}", json={})
    assert res.status_code == 400

    res = client.request("DELETE", f"/api/briefs/{brief_id}", json={"userId": "someone-else"})
    assert res.status_code == 200
    assert client.get(f"/api/briefs/{brief_id}").status_code == 200, "Only the owner can delete"

    client.request("DELETE", f"/api/briefs/{brief_id}", json={"userId": "user-1"})
    assert client.get(f"/api/briefs/{brief_id}").status_code == 404
    assert sb.rows("user_briefs")[0]["is_deleted"] is True


def test_user_briefs_pagination(client):
    ids = [_generate(client, businessName=f"Biz {i}").json()["briefId"] for i in range(3)]
    client.request("DELETE", f"/api/briefs/{ids[0]}", json={"userId": "user-1"})
    _generate(client, userId="user-2")

    page1 = client.get("/api/user-briefs/user-1", params={"page": 1, "limit": 1}).json()
    assert page1["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
    assert page1["briefs"][0]["business_name"] == "Biz 2", "Newest first"

    page2 = client.get("/api/user-briefs/user-1", params={"page": 2, "limit": 1}).json()
    assert page2["briefs"][0]["business_name"] == "Biz 1"


def test_user_briefs_validation(client):
    assert client.get("/api/user-briefs/undefined").status_code == 400
    assert client.get("/api/user-briefs/u", params={"limit": 51}).status_code == 422
    assert client.get("/api/user-briefs/u", params={"page": 0}).status_code == 422


def test_briefs_need_supabase(client):
    client.app.dependency_overrides[deps.get_optional_supabase] = lambda: None
    res = _generate(client)
    assert res.status_code == 503
