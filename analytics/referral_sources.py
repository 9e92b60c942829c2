"""
analytics/referral_sources.py
-----------------------------
Referral source aggregation for briefs and snapshots.

Given a specialty and a location:
    1. resolve adjacent specialties (strongest partners first),
    2. search places for the first 4 of them, keeping 4 results each,
    3. stop as soon as 15 sources are collected,
    4. score every source and sort by fit score (stable: ties keep discovery order),
    5. summarise (mean fit score, per-specialty counts, plurality specialty).

The search callable is injected so the same pipeline runs against Serper,
synthetic demo data, or a test double.
"""

from __future__ import annotations

import base64
import binascii
import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from core.adjacency_map import calculate_fit_score, get_adjacent_specialties

# (adjacent_specialty, location) -> list of places shaped like Serper results
PlacesSearch = Callable[[str, str], List[Dict[str, Any]]]

MAX_SPECIALTIES = 4
PER_SPECIALTY = 4
MAX_SOURCES = 15
RADIUS_MILES = 10

DEFAULT_ADDRESS = "Address not available"
DEFAULT_DISTANCE = "Nearby"
DEFAULT_RATING = 4.0


class UnknownSpecialtyError(ValueError):
    """Raised when a specialty has no referral partners in the adjacency map."""


# --------------------------------------------------------------------------- #
# Models
# --------------------------------------------------------------------------- #

class ReferralSource(BaseModel):
    """One business matched to an adjacent specialty."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    specialty: str
    address: str = DEFAULT_ADDRESS
    distance: str = DEFAULT_DISTANCE
    rating: float = DEFAULT_RATING
    review_count: int = Field(default=0, alias="reviewCount")
    website: Optional[str] = None
    phone: Optional[str] = None
    fit_score: int = Field(alias="fitScore")


class SourceSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_sources: int = Field(alias="totalSources")
    avg_fit_score: int = Field(alias="avgFitScore")
    top_specialty: str = Field(alias="topSpecialty")
    radius_miles: int = Field(default=RADIUS_MILES, alias="radiusMiles")


@dataclass
class AggregationResult:
    adjacent_specialties: List[str]
    sources: List[ReferralSource] = field(default_factory=list)
    specialty_counts: Dict[str, int] = field(default_factory=dict)
    summary: Optional[SourceSummary] = None


# --------------------------------------------------------------------------- #
# Pipeline
# --------------------------------------------------------------------------- #

def place_to_source(place: Dict[str, Any], adjacent_specialty: str, fit_score: int) -> ReferralSource:
    """Shape one search result, filling the documented defaults for missing fields."""
    return ReferralSource(
        name=place.get("title") or "Unnamed practice",
        specialty=adjacent_specialty,
        address=place.get("address") or DEFAULT_ADDRESS,
        distance=place.get("distance") or DEFAULT_DISTANCE,
        rating=place.get("rating") or DEFAULT_RATING,
        review_count=place.get("ratingCount") or 0,
        website=place.get("website") or None,
        phone=place.get("phoneNumber") or None,
        fit_score=fit_score,
    )


def aggregate_referral_sources(
    specialty: str,
    location: str,
    search: PlacesSearch,
    rng: Optional[random.Random] = None,
    max_specialties: int = MAX_SPECIALTIES,
    per_specialty: int = PER_SPECIALTY,
    max_sources: int = MAX_SOURCES,
) -> AggregationResult:
    """
    Collect, score and rank referral sources for one (specialty, location).

    Parameters
    ----------
    specialty : str
        Specialty of the requesting practice (exact adjacency-map key).
    location : str
        Free-text location passed through to the search.
    search : callable
        ``search(adjacent_specialty, location) -> list[dict]``. Exceptions are
        logged and count as zero results for that specialty.
    rng : random.Random, optional
        Jitter source for fit scores.

    Returns
    -------
    AggregationResult
        Sources sorted by descending fit score plus the summary block.

    Raises
    ------
    UnknownSpecialtyError
        If `specialty` has no adjacent specialties.
    """
    adjacent = get_adjacent_specialties(specialty)
    if not adjacent:
        raise UnknownSpecialtyError(f"No referral partners found for specialty '{specialty}'")

    collected: List[ReferralSource] = []
    for adj_specialty in adjacent[:max_specialties]:
        try:
            places = search(adj_specialty, location) or []
        except Exception as e:  # noqa: BLE001
            logger.warning(f"[Search] ⚠️ '{adj_specialty}' near '{location}' failed: {e}")
            places = []

        for place in places[:per_specialty]:
            collected.append(
                place_to_source(place, adj_specialty, calculate_fit_score(specialty, adj_specialty, rng))
            )
            if len(collected) >= max_sources:
                break

        if len(collected) >= max_sources:
            break

    ranked = sorted(collected, key=lambda s: -s.fit_score)
    counts = count_by_specialty(ranked)
    result = AggregationResult(
        adjacent_specialties=adjacent,
        sources=ranked,
        specialty_counts=counts,
    )
    result.summary = summarize_sources(ranked, adjacent, counts)
    logger.info(
        f"[Referrals] {specialty} @ {location}: {len(ranked)} sources "
        f"from {len(counts)} specialties"
    )
    return result


def count_by_specialty(sources: List[ReferralSource]) -> Dict[str, int]:
    """Per-specialty source counts, in first-encountered order."""
    counts: Dict[str, int] = {}
    for source in sources:
        counts[source.specialty] = counts.get(source.specialty, 0) + 1
    return counts


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize_sources(
    sources: List[ReferralSource],
    adjacent_specialties: List[str],
    counts: Optional[Dict[str, int]] = None,
) -> SourceSummary:
    """Mean fit score (rounded), plurality specialty (first wins ties), constant radius."""
    counts = counts if counts is not None else count_by_specialty(sources)

    avg = round_half_up(sum(s.fit_score for s in sources) / len(sources)) if sources else 0

    top_specialty = adjacent_specialties[0] if adjacent_specialties else ""
    best = 0
    for name, count in counts.items():
        if count > best:
            top_specialty, best = name, count

    return SourceSummary(
        total_sources=len(sources),
        avg_fit_score=avg,
        top_specialty=top_specialty,
    )


# --------------------------------------------------------------------------- #
# Brief ids: url-safe base64 of "specialty|location|practiceName"
# --------------------------------------------------------------------------- #

def encode_brief_id(specialty: str, location: str, practice_name: str = "") -> str:
    raw = f"{specialty}|{location}|{practice_name or ''}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_brief_id(brief_id: str) -> Optional[Dict[str, str]]:
    """Return {"specialty", "location", "practice_name"} or None when malformed."""
    try:
        padded = brief_id + "=" * (-len(brief_id) % 4)
        decoded = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return None

    parts = decoded.split("|")
    specialty = parts[0] if parts else ""
    location = parts[1] if len(parts) > 1 else ""
    if not specialty or not location:
        return None
    return {
        "specialty": specialty,
        "location": location,
        "practice_name": parts[2] if len(parts) > 2 else "",
    }
