"""
Referral Router — Sleft Signals
===============================

Referral-partner briefs and snapshots built on the adjacency map.

Endpoints:
----------
- POST /api/brief              → ranked referral sources + summary
- GET  /api/brief/{brief_id}   → same, from a shareable encoded id
- POST /api/snapshot           → brief + email capture (lead magnet)
- GET  /api/specialties        → specialties known to the adjacency map

Design:
-------
• Serper places search when SERPER_API_KEY is set, synthetic demo places otherwise
• Search failures degrade to fewer sources, never to an error response
• Airtable lead capture is best-effort
"""

from __future__ import annotations

import datetime as dt
import random
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from analytics.demo_sources import DemoPlaces
from analytics.referral_sources import (
    AggregationResult,
    PlacesSearch,
    UnknownSpecialtyError,
    aggregate_referral_sources,
    decode_brief_id,
    encode_brief_id,
)
from backend.dependencies import get_airtable, get_places_client, get_rng, settings_dep
from clients.airtable_client import AirtableClient
from clients.places_search import PlacesSearchClient
from core.adjacency_map import ALL_SPECIALTIES
from core.config import Settings

router = APIRouter(tags=["referrals"])

# --------------------------------------------------------------------------- #
# Models
# --------------------------------------------------------------------------- #

class BriefRequest(BaseModel):
    """Fields are optional so a missing one is reported as 400, not 422."""

    model_config = ConfigDict(populate_by_name=True)

    specialty: Optional[str] = None
    location: Optional[str] = None
    email: Optional[str] = None
    practice_name: Optional[str] = Field(default=None, alias="practiceName")


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #

def _search_for(places: Optional[PlacesSearchClient], rng: random.Random) -> PlacesSearch:
    if places is not None:
        return places.search_specialty
    return DemoPlaces(rng=rng).search


def _brief_payload(
    specialty: str,
    location: str,
    practice_name: str,
    result: AggregationResult,
) -> Dict[str, Any]:
    return {
        "specialty": specialty,
        "location": location,
        "practiceName": practice_name,
        "adjacentSpecialties": result.adjacent_specialties,
        "sources": [s.model_dump(by_alias=True) for s in result.sources],
        "specialtyCounts": result.specialty_counts,
        "summary": result.summary.model_dump(by_alias=True),
    }


def build_brief(
    specialty: Optional[str],
    location: Optional[str],
    practice_name: Optional[str],
    places: Optional[PlacesSearchClient],
    rng: random.Random,
) -> Dict[str, Any]:
    """Validate inputs and run the aggregator; raises HTTPException(400) on bad input."""
    location = (location or "").strip()
    if not (specialty or "").strip() or not location:
        raise HTTPException(status_code=400, detail="Specialty and location are required")

    try:
        result = aggregate_referral_sources(specialty, location, _search_for(places, rng), rng=rng)
    except UnknownSpecialtyError:
        raise HTTPException(status_code=400, detail="No referral partners found for this specialty")

    return _brief_payload(specialty, location, practice_name or "", result)


def _store_snapshot_lead(
    airtable: Optional[AirtableClient],
    table: str,
    email: str,
    brief: Dict[str, Any],
) -> Optional[str]:
    """Best-effort Airtable lead record; returns the record id or None."""
    if airtable is None:
        logger.info("[Airtable] ⚠️ Not configured, skipping snapshot lead storage")
        return None

    fields = {
        "Email": email,
        "Specialty": brief["specialty"],
        "Location": brief["location"],
        "Practice Name": brief["practiceName"],
        "Sources Found": brief["summary"]["totalSources"],
        "Avg Fit Score": brief["summary"]["avgFitScore"],
        "Created At": dt.datetime.now(dt.timezone.utc).isoformat(),
        "Source": "Snapshot Lead Magnet",
    }
    try:
        return airtable.create_record(table, fields)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[Airtable] ⚠️ Failed to store snapshot lead: {e}")
        return None


# --------------------------------------------------------------------------- #
# Routes
# --------------------------------------------------------------------------- #

@router.post("/brief")
def create_brief(
    request: BriefRequest,
    places: Optional[PlacesSearchClient] = Depends(get_places_client),
    rng: random.Random = Depends(get_rng),
) -> Dict[str, Any]:
    """Ranked referral sources for a specialty in a location."""
    try:
        brief = build_brief(request.specialty, request.location, request.practice_name, places, rng)
        brief["briefId"] = encode_brief_id(brief["specialty"], brief["location"], brief["practiceName"])
        return brief
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Referrals] ❌ Brief generation failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate referral brief")


@router.get("/brief/{brief_id}")
def get_brief(
    brief_id: str,
    places: Optional[PlacesSearchClient] = Depends(get_places_client),
    rng: random.Random = Depends(get_rng),
) -> Dict[str, Any]:
    """Rebuild a brief from its shareable id (scores are recomputed)."""
    decoded = decode_brief_id(brief_id)
    if decoded is None:
        raise HTTPException(status_code=400, detail="Invalid brief ID")

    try:
        brief = build_brief(
            decoded["specialty"], decoded["location"], decoded["practice_name"], places, rng
        )
        brief["briefId"] = brief_id
        return brief
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Referrals] ❌ Brief lookup failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate referral brief")


@router.post("/snapshot")
def create_snapshot(
    request: BriefRequest,
    settings: Settings = Depends(settings_dep),
    places: Optional[PlacesSearchClient] = Depends(get_places_client),
    airtable: Optional[AirtableClient] = Depends(get_airtable),
    rng: random.Random = Depends(get_rng),
) -> Dict[str, Any]:
    """Referral snapshot for the public lead magnet; requires an email."""
    email = (request.email or "").strip()
    if not request.specialty or not request.location or not email:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        brief = build_brief(request.specialty, request.location, request.practice_name, places, rng)
        _store_snapshot_lead(airtable, settings.airtable_leads_table, email, brief)

        brief["email"] = email
        brief["briefId"] = encode_brief_id(brief["specialty"], brief["location"], brief["practiceName"])
        return brief
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[Referrals] ❌ Snapshot generation failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate snapshot")


@router.get("/specialties")
def list_specialties() -> Dict[str, List[str]]:
    """Specialties with an adjacency entry, for UI pickers."""
    return {"specialties": list(ALL_SPECIALTIES)}
