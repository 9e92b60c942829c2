# database/queries.py
"""
CRUD operations against the hosted Supabase tables.

Every function takes the connected client first and lets postgrest errors
propagate; route handlers decide the HTTP status.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Tuple

from supabase import Client

from . import models


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def _first(rows: Optional[List[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    return rows[0] if rows else None


# ---------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------
def get_provider(sb: Client, user_id: str) -> Optional[Dict[str, Any]]:
    """Return the provider row owned by `user_id`, or None."""
    res = sb.table(models.PROVIDERS).select("*").eq("user_id", user_id).limit(1).execute()
    return _first(res.data)


def upsert_provider(sb: Client, user_id: str, profile: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Update the provider owned by `user_id`, creating it when missing.

    New providers join the network on a trial subscription.
    """
    if get_provider(sb, user_id):
        res = (
            sb.table(models.PROVIDERS)
            .update({**profile, "updated_at": _now()})
            .eq("user_id", user_id)
            .execute()
        )
    else:
        res = (
            sb.table(models.PROVIDERS)
            .insert({
                "user_id": user_id,
                **profile,
                "network_opted_in": True,
                "subscription_status": models.TRIAL,
            })
            .execute()
        )
    return _first(res.data)


def update_provider(sb: Client, user_id: str, fields: Dict[str, Any]) -> List[Dict[str, Any]]:
    res = sb.table(models.PROVIDERS).update(fields).eq("user_id", user_id).execute()
    return res.data or []


# ---------------------------------------------------------------------
# Strategy briefs
# ---------------------------------------------------------------------
def insert_brief(sb: Client, brief: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    res = sb.table(models.USER_BRIEFS).insert(brief).execute()
    return _first(res.data)


def get_brief(sb: Client, brief_id: str) -> Optional[Dict[str, Any]]:
    """Return a brief unless it is missing or soft-deleted."""
    res = sb.table(models.USER_BRIEFS).select("*").eq("id", brief_id).limit(1).execute()
    brief = _first(res.data)
    if brief is None or brief.get("is_deleted"):
        return None
    return brief


def list_user_briefs(sb: Client, user_id: str, page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
    """One page of a user's live briefs (newest first) and the total count."""
    start = (page - 1) * limit
    res = (
        sb.table(models.USER_BRIEFS)
        .select("id, business_name, metadata, created_at, brief_status, form_data, user_id", count="exact")
        .eq("user_id", user_id)
        .eq("is_deleted", False)
        .order("created_at", desc=True)
        .range(start, start + limit - 1)
        .execute()
    )
    return res.data or [], res.count or 0


def soft_delete_brief(sb: Client, brief_id: str, user_id: str) -> List[Dict[str, Any]]:
    res = (
        sb.table(models.USER_BRIEFS)
        .update({"is_deleted": True})
        .eq("id", brief_id)
        .eq("user_id", user_id)
        .execute()
    )
    return res.data or []


# ---------------------------------------------------------------------
# Network posts, comments, upvotes
# ---------------------------------------------------------------------
def list_posts(sb: Client, category: Optional[str], offset: int, limit: int) -> List[Dict[str, Any]]:
    """Pinned posts first, then newest."""
    query = sb.table(models.NETWORK_POSTS).select(f"*, {models.PROVIDER_SUMMARY}")
    if category:
        query = query.eq("category", category)
    res = (
        query.order("is_pinned", desc=True)
        .order("created_at", desc=True)
        .range(offset, offset + limit - 1)
        .execute()
    )
    return res.data or []


def count_posts(sb: Client) -> int:
    res = sb.table(models.NETWORK_POSTS).select("id", count="exact").execute()
    return res.count or 0


def create_post(sb: Client, provider_id: str, title: str, content: str, category: str) -> Optional[Dict[str, Any]]:
    res = (
        sb.table(models.NETWORK_POSTS)
        .insert({
            "provider_id": provider_id,
            "title": title,
            "content": content,
            "category": category,
        })
        .execute()
    )
    return _first(res.data)


def get_post(sb: Client, post_id: str) -> Optional[Dict[str, Any]]:
    res = (
        sb.table(models.NETWORK_POSTS)
        .select(f"*, {models.PROVIDER_SUMMARY}")
        .eq("id", post_id)
        .limit(1)
        .execute()
    )
    return _first(res.data)


def list_comments(sb: Client, post_id: str) -> List[Dict[str, Any]]:
    res = (
        sb.table(models.NETWORK_COMMENTS)
        .select(f"*, {models.COMMENT_PROVIDER_SUMMARY}")
        .eq("post_id", post_id)
        .order("created_at")
        .execute()
    )
    return res.data or []


def set_post_counter(sb: Client, post_id: str, column: str, value: int) -> None:
    sb.table(models.NETWORK_POSTS).update({column: value}).eq("id", post_id).execute()


def create_comment(
    sb: Client,
    post_id: str,
    provider_id: str,
    content: str,
    parent_comment_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    res = (
        sb.table(models.NETWORK_COMMENTS)
        .insert({
            "post_id": post_id,
            "provider_id": provider_id,
            "content": content,
            "parent_comment_id": parent_comment_id,
        })
        .execute()
    )
    sb.rpc("increment_comment_count", {"post_id": post_id}).execute()
    return _first(res.data)


def find_upvote(sb: Client, provider_id: str, post_id: str) -> Optional[Dict[str, Any]]:
    res = (
        sb.table(models.NETWORK_UPVOTES)
        .select("id")
        .eq("provider_id", provider_id)
        .eq("post_id", post_id)
        .limit(1)
        .execute()
    )
    return _first(res.data)


def toggle_upvote(sb: Client, provider_id: str, post_id: str) -> bool:
    """Add or remove this provider's upvote; True when the post is now upvoted."""
    existing = find_upvote(sb, provider_id, post_id)
    post = get_post(sb, post_id) or {}
    upvotes = post.get("upvotes") or 0

    if existing:
        sb.table(models.NETWORK_UPVOTES).delete().eq("id", existing["id"]).execute()
        set_post_counter(sb, post_id, "upvotes", max(0, upvotes - 1))
        return False

    sb.table(models.NETWORK_UPVOTES).insert({"provider_id": provider_id, "post_id": post_id}).execute()
    set_post_counter(sb, post_id, "upvotes", upvotes + 1)
    return True


# ---------------------------------------------------------------------
# Vendor reviews
# ---------------------------------------------------------------------
def list_reviews(
    sb: Client,
    review_type: Optional[str],
    product: Optional[str],
    sort: str,
    offset: int,
    limit: int,
) -> List[Dict[str, Any]]:
    query = sb.table(models.NETWORK_REVIEWS).select(f"*, {models.PROVIDER_SUMMARY}")
    if review_type:
        query = query.eq("review_type", review_type)
    if product:
        query = query.ilike("product_name", f"%{product}%")
    column = models.REVIEW_SORTS.get(sort, models.REVIEW_SORTS["recent"])
    res = query.order(column, desc=True).range(offset, offset + limit - 1).execute()
    return res.data or []


def review_ratings(sb: Client) -> List[Dict[str, Any]]:
    res = sb.table(models.NETWORK_REVIEWS).select("product_name, overall_rating").execute()
    return res.data or []


def find_review(sb: Client, provider_id: str, product_name: str) -> Optional[Dict[str, Any]]:
    """Existing review of the same product (case-insensitive) by this provider."""
    res = (
        sb.table(models.NETWORK_REVIEWS)
        .select("id")
        .eq("provider_id", provider_id)
        .ilike("product_name", product_name)
        .limit(1)
        .execute()
    )
    return _first(res.data)


def create_review(sb: Client, review: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    res = sb.table(models.NETWORK_REVIEWS).insert(review).execute()
    return _first(res.data)


# ---------------------------------------------------------------------
# Market intelligence
# ---------------------------------------------------------------------
def create_intelligence(sb: Client, item: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    res = sb.table(models.MARKET_INTELLIGENCE).insert(item).execute()
    return _first(res.data)
