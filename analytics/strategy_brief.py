"""
analytics/strategy_brief.py
---------------------------
Collects partner leads, industry news and networking events for a business
and renders them into the markdown strategy brief stored in ``user_briefs``.

Each collector takes a plain search callable and degrades to an empty section
when the search fails, so one flaky upstream never sinks the whole brief.
"""

from __future__ import annotations

import datetime as dt
import secrets
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

from loguru import logger

from analytics.partner_matching import match_score

MAX_PARTNER_TYPES = 4
LEADS_PER_TYPE = 4
MAX_ARTICLES = 5
MAX_EVENTS = 6

Search = Callable[..., List[Dict[str, Any]]]


def new_brief_id() -> str:
    """12-character URL-safe brief identifier."""
    return secrets.token_urlsafe(9)


def _partner_types(target_leads: Optional[List[Any]], industry: str) -> List[str]:
    types: List[str] = []
    for lead in target_leads or []:
        label = lead.get("type") if isinstance(lead, dict) else lead
        if label and str(label).strip():
            types.append(str(label).strip())
    return types or [f"{industry} partners"]


def collect_partner_leads(
    target_leads: Optional[List[Any]],
    industry: str,
    location: str,
    business_name: str,
    search: Search,
) -> Dict[str, Any]:
    """Places for each requested partner type, skipping the business itself."""
    leads: List[Dict[str, Any]] = []
    own = (business_name or "").lower()

    for partner_type in _partner_types(target_leads, industry)[:MAX_PARTNER_TYPES]:
        try:
            places = search(partner_type, location)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"[Brief] ⚠️ Partner search '{partner_type}' failed: {e}")
            continue

        for place in places[:LEADS_PER_TYPE]:
            title = place.get("title") or ""
            if own and (own in title.lower() or title.lower() in own):
                continue
            leads.append({
                "businessName": title,
                "leadType": partner_type,
                "leadScore": match_score(place),
                "address": place.get("address"),
                "phone": place.get("phoneNumber"),
                "website": place.get("website"),
                "rating": place.get("rating"),
                "reviewCount": place.get("ratingCount") or 0,
            })

    leads.sort(key=lambda lead: -lead["leadScore"])
    return {"leads": leads, "totalLeads": len(leads)}


def collect_news(industry: str, location: str, search_news: Search) -> Dict[str, Any]:
    query = f"{industry} industry news {location}"
    try:
        items = search_news(query, num=MAX_ARTICLES)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Brief] ⚠️ News search failed: {e}")
        items = []

    articles = []
    for item in items[:MAX_ARTICLES]:
        link = item.get("link") or ""
        articles.append({
            "title": item.get("title"),
            "url": link or None,
            "summary": item.get("snippet") or "",
            "source": item.get("source") or urlparse(link).netloc.replace("www.", "", 1),
            "publishedAt": item.get("date"),
        })
    return {"articles": articles, "query": query}


def collect_events(
    industry: str,
    location: str,
    search_web: Search,
    networking_keyword: Optional[str] = None,
    target_events: Optional[List[Any]] = None,
) -> Dict[str, Any]:
    """Networking events from a web search on meetup/eventbrite listings."""
    topic = networking_keyword or industry
    if target_events:
        first = target_events[0]
        topic = (first.get("type") if isinstance(first, dict) else first) or topic
    query = f"{topic} networking events {location} site:meetup.com OR site:eventbrite.com"

    try:
        items = search_web(query, num=MAX_EVENTS)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Brief] ⚠️ Event search failed: {e}")
        items = []

    events = [
        {
            "title": item.get("title") or "Networking Event",
            "url": item.get("link"),
            "description": item.get("snippet") or "",
            "date": item.get("date"),
            "type": "PHYSICAL",
        }
        for item in items[:MAX_EVENTS]
    ]
    return {"events": events, "query": query}


def generate_simple_brief(
    business_name: str,
    industry: str,
    location: str,
    custom_goal: Optional[str],
    business_data: Dict[str, Any],
    news_data: Dict[str, Any],
    meetup_data: Dict[str, Any],
    today: Optional[dt.date] = None,
) -> str:
    """Markdown brief: executive summary, key findings, next steps."""
    leads = business_data.get("leads") or []
    articles = news_data.get("articles") or []
    events = meetup_data.get("events") or []

    top_leads = ", ".join(lead["businessName"] for lead in leads[:3])
    top_news = "; ".join(article["title"] for article in articles[:2])
    generated = (today or dt.date.today()).strftime("%m/%d/%Y")

    lead_line = f"Top opportunities: {top_leads}" if leads else "No leads found in this search."
    news_line = f"Recent headlines: {top_news}" if articles else "No recent news found."
    event_line = (
        f"{len(events)} networking opportunities identified in your area."
        if events
        else "No upcoming events found."
    )

    return f"""# Strategy Brief for {business_name}

## Executive Summary
We've analyzed the {industry} market in {location} to identify opportunities aligned with your goal: "{custom_goal or 'business growth'}".

## Key Findings

### Local Leads & Partners ({len(leads)} found)
{lead_line}

### Industry News ({len(articles)} articles)
{news_line}

### Networking Events ({len(events)} upcoming)
{event_line}

## Next Steps
1. Review the leads below and identify your top 3 outreach targets
2. Check the news articles for conversation starters
3. RSVP to relevant networking events

---
*Generated {generated}*"""


def format_brief(row: Dict[str, Any]) -> Dict[str, Any]:
    """``user_briefs`` row → camelCase payload."""
    return {
        "id": row.get("id"),
        "businessName": row.get("business_name"),
        "content": row.get("content"),
        "createdAt": row.get("created_at"),
        "metadata": row.get("metadata") or {},
        "businessData": row.get("business_data") or {},
        "newsData": row.get("news_data") or {},
        "meetupData": row.get("meetup_data") or {},
        "formData": row.get("form_data") or {},
        "userId": row.get("user_id"),
        "briefStatus": row.get("brief_status"),
    }
