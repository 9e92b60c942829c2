"""
backend/dependencies.py
-----------------------
FastAPI dependencies: the loaded Settings and the collaborators built from it.

Route handlers never read the environment themselves; they declare what they
need here and tests swap implementations through `app.dependency_overrides`.
"""

from __future__ import annotations

import random
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request
from supabase import Client

from clients.airtable_client import AirtableClient
from clients.heygen_client import HeyGenClient
from clients.llm_client import LLMClient
from clients.places_search import PlacesSearchClient
from clients.stripe_billing import StripeBilling
from core.config import Settings, get_settings
from core.conversation_store import ConversationStore
from supabase_client.config import get_supabase_client


def settings_dep() -> Settings:
    return get_settings()


def get_optional_supabase(settings: Settings = Depends(settings_dep)) -> Optional[Client]:
    if not settings.supabase_enabled:
        return None
    return get_supabase_client(settings)


def get_supabase(sb: Optional[Client] = Depends(get_optional_supabase)) -> Client:
    if sb is None:
        raise HTTPException(status_code=503, detail="Supabase is not configured.")
    return sb


def get_places_client(settings: Settings = Depends(settings_dep)) -> Optional[PlacesSearchClient]:
    """None when no Serper key is set; callers fall back to demo data or skip search."""
    if not settings.search_enabled:
        return None
    return PlacesSearchClient.from_settings(settings)


@lru_cache(maxsize=4)
def _llm_client(api_key: str, model: str) -> LLMClient:
    return LLMClient(api_key=api_key, model=model)


def get_llm_client(settings: Settings = Depends(settings_dep)) -> Optional[LLMClient]:
    """One AsyncOpenAI pool per (key, model), shared across requests."""
    if not settings.llm_enabled:
        return None
    return _llm_client(settings.openai_api_key or "", settings.openai_model)


def get_airtable(settings: Settings = Depends(settings_dep)) -> Optional[AirtableClient]:
    if not settings.airtable_enabled:
        return None
    return AirtableClient.from_settings(settings)


def get_heygen(settings: Settings = Depends(settings_dep)) -> HeyGenClient:
    if not settings.heygen_enabled:
        raise HTTPException(status_code=500, detail="HeyGen API key not configured")
    return HeyGenClient.from_settings(settings)


def get_billing(settings: Settings = Depends(settings_dep)) -> Optional[StripeBilling]:
    """None puts checkout into test mode."""
    if not settings.stripe_enabled:
        return None
    return StripeBilling.from_settings(settings)


def get_rng() -> random.Random:
    """Jitter source for fit scores and demo data."""
    return random.Random()


def get_discovery_store(request: Request) -> ConversationStore:
    return request.app.state.discovery_store


def get_onboarding_store(request: Request) -> ConversationStore:
    return request.app.state.onboarding_store
