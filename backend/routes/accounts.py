"""
Accounts Router — Sleft Signals
===============================

Registration bookkeeping and brief feedback.

Endpoints:
----------
- POST /api/auth/register   → record a new user in Airtable (best-effort)
- POST /api/feedback        → store likes/dislikes for a brief

Both endpoints report success even when the side store is unavailable:
the user-facing action (sign-up, feedback form) has already happened.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from supabase import Client

from backend.dependencies import get_airtable, get_supabase, settings_dep
from clients.airtable_client import AirtableClient
from core.config import Settings
from database import models
from supabase_client.helpers import insert_record

router = APIRouter(tags=["accounts"])


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    full_name: Optional[str] = Field(default=None, alias="fullName")
    user_id: Optional[str] = Field(default=None, alias="userId")
    provider: Optional[str] = None


class FeedbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    brief_id: Optional[str] = Field(default=None, alias="briefId")
    user_id: Optional[str] = Field(default=None, alias="userId")
    business_name: Optional[str] = Field(default=None, alias="businessName")
    likes: Optional[str] = None
    dislikes: Optional[str] = None
    timestamp: Optional[str] = None


@router.post("/auth/register")
def register(
    request: RegisterRequest,
    settings: Settings = Depends(settings_dep),
    airtable: Optional[AirtableClient] = Depends(get_airtable),
) -> Dict[str, Any]:
    if not request.email or not request.user_id:
        raise HTTPException(status_code=400, detail="email and userId are required")

    failed = {
        "success": True,
        "message": "User registered (Airtable recording failed)",
        "warning": "User data may not be recorded in Airtable",
    }
    if airtable is None:
        logger.info("[Airtable] ⚠️ Not configured, skipping registration record")
        return failed

    fields = {
        "Email": request.email,
        "Full Name": request.full_name or "",
        "User ID": request.user_id,
        "Auth Provider": request.provider or "email",
        "Status": "Active",
    }
    try:
        record_id = airtable.create_record(settings.airtable_table_id, fields)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Airtable] ⚠️ Registration record failed for {request.email}: {e}")
        return failed

    return {
        "success": True,
        "message": "User registered and recorded in Airtable",
        "airtableRecordId": record_id,
    }


@router.post("/feedback")
def submit_feedback(request: FeedbackRequest, sb: Client = Depends(get_supabase)) -> Dict[str, Any]:
    if not request.likes or not request.dislikes:
        raise HTTPException(status_code=400, detail="Both likes and dislikes are required")

    data = {
        "brief_id": request.brief_id,
        "user_id": request.user_id,
        "business_name": request.business_name,
        "likes": request.likes,
        "dislikes": request.dislikes,
    }
    if request.timestamp:
        data["created_at"] = request.timestamp

    row = insert_record(sb, models.FEEDBACK, data, debug=False)
    if not row:
        return {"success": True, "message": "Feedback logged"}

    logger.info(f"[Feedback] ✅ Stored feedback {row.get('id')} for brief {request.brief_id}")
    return {"success": True, "feedbackId": row.get("id")}
