"""
Strategy Briefs Router — Sleft Signals
======================================

Generation and storage of per-user strategy briefs.

Endpoints:
----------
- POST   /api/generate                → gather leads/news/events, render and store a brief
- GET    /api/briefs/{brief_id}       → one brief (camelCase)
- DELETE /api/briefs/{brief_id}       → soft delete, scoped to the owner
- GET    /api/user-briefs/{user_id}   → paginated list, newest first
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from supabase import Client

from analytics.strategy_brief import (
    collect_events,
    collect_news,
    collect_partner_leads,
    format_brief,
    generate_simple_brief,
    new_brief_id,
)
from backend.dependencies import get_places_client, get_supabase
from clients.places_search import PlacesSearchClient
from database import models, queries

router = APIRouter(tags=["briefs"])

_INVALID_IDS = {"", "null", "undefined"}

# --------------------------------------------------------------------------- #
# Models
# --------------------------------------------------------------------------- #

class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    business_name: Optional[str] = Field(default=None, alias="businessName")
    website_url: Optional[str] = Field(default=None, alias="websiteUrl")
    industry: Optional[str] = None
    location: Optional[str] = None
    custom_goal: Optional[str] = Field(default=None, alias="customGoal")
    networking_keyword: Optional[str] = Field(default=None, alias="networkingKeyword")
    target_leads: Optional[List[Any]] = Field(default=None, alias="targetLeads")
    target_events: Optional[List[Any]] = Field(default=None, alias="targetEvents")


class DeleteBriefRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")


def _no_results(*_args: Any, **_kwargs: Any) -> List[Dict[str, Any]]:
    return []


# --------------------------------------------------------------------------- #
# Routes
# --------------------------------------------------------------------------- #

@router.post("/generate")
def generate(
    request: GenerateRequest,
    sb: Client = Depends(get_supabase),
    places: Optional[PlacesSearchClient] = Depends(get_places_client),
) -> Dict[str, Any]:
    """
    Build and persist a strategy brief.

    - Partner leads, news and events each degrade to empty on search errors.
    - Without a Serper key every section is empty and the brief says so.
    - A failed insert is a 500: the caller needs the stored id.
    """
    user_id = (request.user_id or "").strip()
    if user_id in _INVALID_IDS:
        raise HTTPException(status_code=400, detail="User authentication required. Please log in and try again.")

    business_name = request.business_name or "Your Business"
    industry = request.industry or "General"
    location = request.location or ""
    logger.info(f"[Brief] 🚀 Generating brief for {business_name} ({industry}) in {location or 'unknown location'}")

    search_places = places.search_places if places else _no_results
    search_news = places.search_news if places else _no_results
    search_web = places.search_web if places else _no_results

    try:
        business_data = collect_partner_leads(
            request.target_leads, industry, location, business_name, search_places
        )
        news_data = collect_news(industry, location, search_news)
        meetup_data = collect_events(
            industry, location, search_web, request.networking_keyword, request.target_events
        )
        content = generate_simple_brief(
            business_name, industry, location, request.custom_goal,
            business_data, news_data, meetup_data,
        )
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Brief] ❌ Generation error: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate business intelligence")

    now = dt.datetime.now(dt.timezone.utc).isoformat()
    metadata = {
        "industry": industry,
        "location": location,
        "websiteUrl": request.website_url,
        "generatedAt": now,
    }
    form_data = {
        "businessName": business_name,
        "websiteUrl": request.website_url,
        "industry": industry,
        "location": location,
        "customGoal": request.custom_goal,
        "networkingKeyword": request.networking_keyword,
        "userId": user_id,
    }

    try:
        row = queries.insert_brief(sb, {
            "id": new_brief_id(),
            "user_id": user_id,
            "business_name": business_name,
            "content": content,
            "metadata": metadata,
            "business_data": business_data,
            "news_data": news_data,
            "meetup_data": meetup_data,
            "form_data": form_data,
            "brief_status": models.BRIEF_COMPLETED,
            "is_deleted": False,
            "created_at": now,
        })
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Supabase] ❌ Error saving brief: {e}")
        raise HTTPException(status_code=500, detail="Failed to save brief to database")

    if not row:
        raise HTTPException(status_code=500, detail="Failed to save brief to database")

    brief_id = row["id"]
    logger.info(f"[Supabase] ✅ Brief saved with ID: {brief_id}")
    return {
        "success": True,
        "briefId": brief_id,
        "brief": {
            "id": brief_id,
            "businessName": business_name,
            "content": content,
            "metadata": metadata,
            "businessData": business_data,
            "newsData": news_data,
            "meetupData": meetup_data,
            "formData": form_data,
            "createdAt": now,
        },
        "message": "Comprehensive business intelligence generated successfully",
    }


@router.get("/briefs/{brief_id}")
def get_brief(brief_id: str, sb: Client = Depends(get_supabase)) -> Dict[str, Any]:
    if brief_id.strip() in _INVALID_IDS:
        raise HTTPException(status_code=400, detail="Invalid brief ID")

    try:
        row = queries.get_brief(sb, brief_id)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Supabase] ❌ Error fetching brief {brief_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch brief")

    if row is None:
        raise HTTPException(status_code=404, detail="Brief not found")
    return {"success": True, "brief": format_brief(row)}


@router.delete("/briefs/{brief_id}")
def delete_brief(
    brief_id: str,
    request: DeleteBriefRequest,
    sb: Client = Depends(get_supabase),
) -> Dict[str, Any]:
    if not brief_id.strip() or not request.user_id:
        raise HTTPException(status_code=400, detail="Brief ID and User ID are required")

    try:
        queries.soft_delete_brief(sb, brief_id, request.user_id)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Supabase] ❌ Error deleting brief {brief_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete brief")

    logger.info(f"[Supabase] ✅ Brief {brief_id} deleted")
    return {"success": True, "message": "Brief deleted successfully"}


@router.get("/user-briefs/{user_id}")
def list_user_briefs(
    user_id: str,
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(10, ge=1, le=50, description="Briefs per page (1–50)"),
    sb: Client = Depends(get_supabase),
) -> Dict[str, Any]:
    if user_id.strip() in _INVALID_IDS:
        raise HTTPException(status_code=400, detail="Invalid user ID provided")

    try:
        briefs, total = queries.list_user_briefs(sb, user_id, page, limit)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Supabase] ❌ Error fetching briefs for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch briefs")

    return {
        "success": True,
        "briefs": briefs,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }
