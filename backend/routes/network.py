"""
Provider Network Router — Sleft Signals
=======================================

Provider profiles, the community feed, vendor reviews, partner discovery and
market intelligence.

Endpoints:
----------
- GET/POST /api/network/profile              → fetch / upsert provider profile
- GET/POST /api/network/posts                → feed (pinned first) / new post
- GET/POST /api/network/posts/{post_id}      → post + comments / new comment
- POST     /api/network/posts/{post_id}/upvote → toggle upvote
- GET/POST /api/network/reviews              → vendor reviews + product averages / new review
- GET      /api/network/discover             → scored local partner matches
- GET/POST /api/network/intelligence         → curated insight feed / store an insight

Design:
-------
• Only trial or active providers may post, review, or see partner contact details
• Table access goes through `database.queries`; errors surface as 500s
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from supabase import Client

from analytics.market_intelligence import SOURCE_NAME, build_intelligence_feed
from analytics.partner_matching import find_partner_matches, redact_contact, search_terms_for
from analytics.review_stats import product_averages
from backend.dependencies import get_optional_supabase, get_places_client, get_supabase
from clients.places_search import PlacesSearchClient
from database import models, queries
from supabase_client.helpers import fetch_recent

router = APIRouter(prefix="/network", tags=["network"])

# --------------------------------------------------------------------------- #
# Models
# --------------------------------------------------------------------------- #

class ProfileRequest(BaseModel):
    """userId plus any provider columns to write."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    user_id: Optional[str] = Field(default=None, alias="userId")

    def profile_fields(self) -> Dict[str, Any]:
        extra = self.model_extra or {}
        return {
            k: v for k, v in extra.items()
            if k not in models.PROTECTED_PROVIDER_COLUMNS and not k.startswith("stripe_")
        }


class PostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None


class CommentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    content: Optional[str] = None
    parent_comment_id: Optional[str] = Field(default=None, alias="parentCommentId")


class UpvoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")


class ReviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    review_type: Optional[str] = Field(default=None, alias="reviewType")
    product_name: Optional[str] = Field(default=None, alias="productName")
    vendor_name: Optional[str] = Field(default=None, alias="vendorName")
    overall_rating: Optional[float] = Field(default=None, alias="overallRating")
    ease_of_use: Optional[float] = Field(default=None, alias="easeOfUse")
    value_for_money: Optional[float] = Field(default=None, alias="valueForMoney")
    customer_support: Optional[float] = Field(default=None, alias="customerSupport")
    title: Optional[str] = None
    pros: Optional[str] = None
    cons: Optional[str] = None
    review_content: Optional[str] = Field(default=None, alias="reviewContent")
    would_recommend: Optional[bool] = Field(default=None, alias="wouldRecommend")


class IntelligenceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    summary: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    specialty: Optional[str] = None
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")
    source_name: Optional[str] = Field(default=None, alias="sourceName")


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #

def _require_provider(sb: Client, user_id: str, detail: str = "Provider not found") -> Dict[str, Any]:
    provider = queries.get_provider(sb, user_id)
    if provider is None:
        raise HTTPException(status_code=404, detail=detail)
    return provider


def _require_contributor(provider: Dict[str, Any], action: str) -> None:
    if provider.get("subscription_status") not in models.CAN_CONTRIBUTE:
        raise HTTPException(status_code=403, detail=f"Active subscription required to {action}")


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    return value.strip() or None if value else None


# --------------------------------------------------------------------------- #
# Profile
# --------------------------------------------------------------------------- #

@router.get("/profile")
def get_profile(
    user_id: Optional[str] = Query(None, alias="userId"),
    sb: Client = Depends(get_supabase),
) -> Dict[str, Any]:
    if not user_id:
        raise HTTPException(status_code=400, detail="Missing user ID")
    try:
        return {"provider": queries.get_provider(sb, user_id)}
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error fetching provider: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch provider")


@router.post("/profile")
def save_profile(request: ProfileRequest, sb: Client = Depends(get_supabase)) -> Dict[str, Any]:
    if not request.user_id:
        raise HTTPException(status_code=400, detail="Missing user ID")
    try:
        provider = queries.upsert_provider(sb, request.user_id, request.profile_fields())
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error saving provider: {e}")
        raise HTTPException(status_code=500, detail="Failed to save provider")
    return {"provider": provider}


# --------------------------------------------------------------------------- #
# Posts & comments
# --------------------------------------------------------------------------- #

@router.get("/posts")
def list_posts(
    category: Optional[str] = Query(None, description="One of the post categories; others are ignored"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    sb: Client = Depends(get_supabase),
) -> Dict[str, Any]:
    if category not in models.POST_CATEGORIES:
        category = None
    try:
        posts = queries.list_posts(sb, category, offset, limit)
        total = queries.count_posts(sb)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error fetching posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch posts")
    return {"posts": posts, "total": total, "hasMore": offset + limit < total}


@router.post("/posts")
def create_post(request: PostRequest, sb: Client = Depends(get_supabase)) -> Dict[str, Any]:
    if not request.user_id or not request.title or not request.content:
        raise HTTPException(status_code=400, detail="Missing required fields: userId, title, content")

    try:
        provider = _require_provider(sb, request.user_id, "Provider profile not found")
        _require_contributor(provider, "post")

        category = request.category if request.category in models.POST_CATEGORIES else models.DEFAULT_POST_CATEGORY
        post = queries.create_post(
            sb, provider["id"], request.title.strip(), request.content.strip(), category
        )
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error creating post: {e}")
        raise HTTPException(status_code=500, detail="Failed to create post")
    return {"post": post}


@router.get("/posts/{post_id}")
def get_post(post_id: str, sb: Client = Depends(get_supabase)) -> Dict[str, Any]:
    try:
        post = queries.get_post(sb, post_id)
        if post is None:
            raise HTTPException(status_code=404, detail="Post not found")
        comments = queries.list_comments(sb, post_id)
        queries.set_post_counter(sb, post_id, "view_count", (post.get("view_count") or 0) + 1)
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error fetching post {post_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch post")
    return {"post": post, "comments": comments}


@router.post("/posts/{post_id}")
def add_comment(post_id: str, request: CommentRequest, sb: Client = Depends(get_supabase)) -> Dict[str, Any]:
    if not request.user_id or not request.content:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        provider = _require_provider(sb, request.user_id)
        comment = queries.create_comment(
            sb, post_id, provider["id"], request.content.strip(), request.parent_comment_id or None
        )
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error creating comment: {e}")
        raise HTTPException(status_code=500, detail="Failed to create comment")
    return {"comment": comment}


@router.post("/posts/{post_id}/upvote")
def upvote(post_id: str, request: UpvoteRequest, sb: Client = Depends(get_supabase)) -> Dict[str, bool]:
    if not request.user_id:
        raise HTTPException(status_code=400, detail="Missing userId")

    try:
        provider = _require_provider(sb, request.user_id)
        upvoted = queries.toggle_upvote(sb, provider["id"], post_id)
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Upvote error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"upvoted": upvoted}


# --------------------------------------------------------------------------- #
# Vendor reviews
# --------------------------------------------------------------------------- #

@router.get("/reviews")
def list_reviews(
    review_type: Optional[str] = Query(None, alias="type"),
    product: Optional[str] = Query(None),
    sort: str = Query("recent", description="recent | rating | helpful"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    sb: Client = Depends(get_supabase),
) -> Dict[str, Any]:
    if review_type not in models.REVIEW_TYPES:
        review_type = None
    try:
        reviews = queries.list_reviews(sb, review_type, product, sort, offset, limit)
        stats = product_averages(queries.review_ratings(sb))
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error fetching reviews: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch reviews")
    return {"reviews": reviews, "productStats": stats, "total": len(reviews)}


@router.post("/reviews")
def create_review(request: ReviewRequest, sb: Client = Depends(get_supabase)) -> Dict[str, Any]:
    required = (
        request.user_id, request.review_type, request.product_name,
        request.overall_rating, request.title, request.review_content,
    )
    if not all(required):
        raise HTTPException(status_code=400, detail="Missing required fields")
    if not 1 <= request.overall_rating <= 5:
        raise HTTPException(status_code=400, detail="Rating must be between 1 and 5")

    try:
        provider = _require_provider(sb, request.user_id)
        _require_contributor(provider, "review")

        if queries.find_review(sb, provider["id"], request.product_name):
            raise HTTPException(status_code=409, detail="You have already reviewed this product")

        review = queries.create_review(sb, {
            "provider_id": provider["id"],
            "review_type": request.review_type,
            "product_name": request.product_name.strip(),
            "vendor_name": _strip_or_none(request.vendor_name),
            "overall_rating": request.overall_rating,
            "ease_of_use": request.ease_of_use or None,
            "value_for_money": request.value_for_money or None,
            "customer_support": request.customer_support or None,
            "title": request.title.strip(),
            "pros": _strip_or_none(request.pros),
            "cons": _strip_or_none(request.cons),
            "review_content": request.review_content.strip(),
            "would_recommend": request.would_recommend is not False,
        })
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error creating review: {e}")
        raise HTTPException(status_code=500, detail="Failed to create review")
    return {"review": review}


# --------------------------------------------------------------------------- #
# Partner discovery
# --------------------------------------------------------------------------- #

@router.get("/discover")
def discover(
    user_id: Optional[str] = Query(None, alias="userId"),
    sb: Client = Depends(get_supabase),
    places: Optional[PlacesSearchClient] = Depends(get_places_client),
) -> Dict[str, Any]:
    """Local partner matches for the provider's interest categories."""
    if not user_id:
        raise HTTPException(status_code=400, detail="Missing user ID")

    try:
        provider = _require_provider(sb, user_id, "Provider profile not found. Complete onboarding first.")
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Discover provider lookup failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    status = provider.get("subscription_status")
    is_subscribed = status == models.ACTIVE
    is_trialing = status == models.TRIAL

    matches: List[Dict[str, Any]] = []
    if places is None:
        logger.info("[Discover] ⚠️ SERPER_API_KEY not set, returning no matches")
    else:
        matches = find_partner_matches(
            provider.get("location") or "",
            search_terms_for(provider.get("patients_i_want") or []),
            lambda term, location: places.search_places(term, location, num=5),
            own_specialty=provider.get("specialty") or "",
        )

    if not (is_subscribed or is_trialing):
        matches = [redact_contact(m) for m in matches]

    return {
        "matches": matches,
        "total": len(matches),
        "subscription_status": status,
        "is_subscribed": is_subscribed,
        "is_trialing": is_trialing,
        "current_provider": {
            "id": provider.get("id"),
            "practice_name": provider.get("practice_name"),
            "specialty": provider.get("specialty"),
            "location": provider.get("location"),
        },
    }


# --------------------------------------------------------------------------- #
# Market intelligence
# --------------------------------------------------------------------------- #

@router.get("/intelligence")
def intelligence(
    user_id: Optional[str] = Query(None, alias="userId"),
    sb: Optional[Client] = Depends(get_optional_supabase),
    places: Optional[PlacesSearchClient] = Depends(get_places_client),
) -> Dict[str, Any]:
    """Curated feed; works without Supabase or Serper, just with less in it."""
    location, specialty, interests = "your area", "Healthcare", []
    stored: List[Dict[str, Any]] = []

    if sb is not None:
        if user_id:
            try:
                provider = queries.get_provider(sb, user_id)
            except Exception as e:  # noqa: BLE001
                logger.warning(f"[Network] ⚠️ Provider lookup failed for intelligence: {e}")
                provider = None
            if provider:
                location = provider.get("location") or location
                specialty = provider.get("specialty") or specialty
                interests = provider.get("patients_i_want") or []
        stored = fetch_recent(sb, models.MARKET_INTELLIGENCE, limit=5, debug=False)

    news: List[Dict[str, Any]] = []
    if places is not None:
        try:
            news = places.search_news(f"{specialty} practice growth tips {dt.date.today().year}", num=3)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"[Serper] ⚠️ News search failed: {e}")

    feed = build_intelligence_feed(specialty, interests, news=news, stored=stored)
    return {"intelligence": feed, "location": location, "specialty": specialty}


@router.post("/intelligence")
def create_intelligence(request: IntelligenceRequest, sb: Client = Depends(get_supabase)) -> Dict[str, Any]:
    if not request.title or not request.summary:
        raise HTTPException(status_code=400, detail="title and summary are required")
    try:
        item = queries.create_intelligence(sb, {
            "title": request.title,
            "summary": request.summary,
            "category": request.category or "insight",
            "location": request.location or None,
            "specialty": request.specialty or None,
            "source_url": request.source_url or None,
            "source_name": request.source_name or SOURCE_NAME,
            "relevance_score": 90,
            "ai_generated": True,
        })
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Network] ❌ Error creating intelligence: {e}")
        raise HTTPException(status_code=500, detail="Failed to create intelligence")
    return {"intelligence": item}
