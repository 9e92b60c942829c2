"""
analytics/partner_matching.py
-----------------------------
Scoring for the network "discover" view: local practices found through places
search, ranked as potential mutual-referral partners for a provider.
"""

from __future__ import annotations

import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional

from loguru import logger

# provider interest category -> places queries
CATEGORY_SEARCH_TERMS: Dict[str, List[str]] = {
    "primary_care": ["family medicine clinic", "primary care doctor", "internal medicine practice", "pediatrician office"],
    "specialists": ["cardiologist", "dermatologist", "orthopedic surgeon", "gastroenterologist"],
    "mental_health": ["psychiatrist", "psychologist office", "mental health counselor", "therapy practice"],
    "physical_rehab": ["physical therapy clinic", "chiropractor", "sports medicine", "occupational therapy"],
    "dental_vision": ["dentist office", "orthodontist", "optometrist", "ophthalmologist"],
    "wellness_aesthetic": ["med spa", "medical spa", "functional medicine doctor", "wellness clinic", "aesthetic clinic"],
}
GENERAL_SEARCH_TERMS = ["medical clinic", "healthcare practice", "doctor office"]

MAX_QUERIES = 3
PLACES_PER_QUERY = 5
MAX_MATCHES = 12
MAX_MATCH_SCORE = 98

# (needles, specialty), checked in order
_CATEGORY_RULES = [
    (("physical therapy",), "Physical Therapy"),
    (("chiropractor",), "Chiropractic"),
    (("dentist", "dental"), "Dentistry"),
    (("orthodontist",), "Orthodontics"),
    (("optometrist", "optician"), "Optometry"),
    (("psychiatr",), "Psychiatry"),
    (("psycholog", "counselor", "therapist"), "Psychology"),
    (("spa", "aesthetic"), "Med Spa"),
    (("cardiolog",), "Cardiology"),
    (("dermatolog",), "Dermatology"),
    (("orthopedic",), "Orthopedics"),
    (("family", "primary", "internal medicine"), "Primary Care"),
    (("pediatric",), "Pediatrics"),
]
_TERM_RULES = [
    (("physical therapy", "PT"), "Physical Therapy"),
    (("chiropractor",), "Chiropractic"),
    (("dentist",), "Dentistry"),
    (("orthodontist",), "Orthodontics"),
    (("optometrist",), "Optometry"),
    (("psychiatrist",), "Psychiatry"),
    (("psychologist", "therapy"), "Psychology"),
    (("med spa", "medical spa"), "Med Spa"),
    (("cardiologist",), "Cardiology"),
    (("dermatologist",), "Dermatology"),
    (("orthopedic",), "Orthopedics"),
    (("family medicine", "primary care"), "Primary Care"),
]


def specialty_from_category(category: Optional[str], search_term: str) -> str:
    """Best-guess specialty of a place from its category, else from the query used."""
    if category:
        text, rules = category.lower(), _CATEGORY_RULES
    else:
        text, rules = search_term, _TERM_RULES
    for needles, specialty in rules:
        if any(n in text for n in needles):
            return specialty
    return "Healthcare"


def search_terms_for(interests: Iterable[str]) -> List[str]:
    terms: List[str] = []
    for interest in interests or []:
        terms.extend(CATEGORY_SEARCH_TERMS.get(interest, []))
    return terms or list(GENERAL_SEARCH_TERMS)


def match_score(place: Dict[str, Any]) -> int:
    """75 base + rating tier + review volume + website/phone bonuses, capped at 98."""
    score = 75
    rating = place.get("rating") or 0
    if rating >= 4.5:
        score += 15
    elif rating >= 4.0:
        score += 10
    elif rating >= 3.5:
        score += 5

    if (place.get("ratingCount") or 0) > 100:
        score += 5
    if place.get("website"):
        score += 3
    if place.get("phoneNumber"):
        score += 2
    return min(score, MAX_MATCH_SCORE)


def place_to_match(place: Dict[str, Any], search_term: str, location: str) -> Dict[str, Any]:
    specialty = specialty_from_category(place.get("category"), search_term)
    rating = place.get("rating")
    reviews = place.get("ratingCount")
    return {
        "id": place.get("cid") or f"serper-{uuid.uuid4().hex[:12]}",
        "practice_name": place["title"],
        "specialty": specialty,
        "location": place.get("address") or location,
        "match_score": match_score(place),
        "why_match": [
            f"Actively practicing {specialty} in your area",
            f"{f'{rating} stars' if rating else 'Established practice'} with {reviews or 'multiple'} reviews",
            "Great potential for mutual referral partnership",
        ],
        "address": place.get("address"),
        "phone": place.get("phoneNumber"),
        "website": place.get("website"),
        "rating": rating,
        "review_count": reviews,
    }


def find_partner_matches(
    location: str,
    search_terms: List[str],
    search: Callable[[str, str], List[Dict[str, Any]]],
    own_specialty: str = "",
) -> List[Dict[str, Any]]:
    """
    Search up to 3 queries, de-duplicate by name, drop same-specialty
    competitors, and keep the 12 best by match score.
    """
    matches: List[Dict[str, Any]] = []
    seen = set()

    for term in search_terms[:MAX_QUERIES]:
        try:
            places = search(term, location)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"[Discover] ⚠️ Search '{term}' failed: {e}")
            continue

        for place in places[:PLACES_PER_QUERY]:
            key = (place.get("title") or "").lower()
            if not key or key in seen:
                continue
            seen.add(key)
            matches.append(place_to_match(place, term, location))

    own = (own_specialty or "").lower()
    matches = [m for m in matches if m["specialty"].lower() != own]
    matches.sort(key=lambda m: -m["match_score"])
    return matches[:MAX_MATCHES]


def redact_contact(match: Dict[str, Any]) -> Dict[str, Any]:
    """Hide phone/website and keep only the last two address parts (city, state)."""
    address = match.get("address")
    return {
        **match,
        "phone": None,
        "website": None,
        "address": ",".join(address.split(",")[-2:]).strip() if address else None,
    }
