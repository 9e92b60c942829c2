"""
Sleft — Core Referral Adjacency Map
-----------------------------------
Maps each specialty to the specialties whose patients naturally flow to/from it,
and turns a position in that list into a referral fit score.

Lookups are exact and case-sensitive: an unknown specialty has no partners.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional

# --- Specialty -> ordered referral partners (strongest first) ---
ADJACENCY_MAP: Dict[str, List[str]] = {
    # surgical
    "Orthopedic Surgery": ["Physical Therapy", "Chiropractic", "Primary Care", "Imaging Center", "Pain Management", "Sports Medicine"],
    "Oral Surgery": ["Dentist", "Orthodontist", "Periodontist", "Primary Care"],
    "Plastic Surgery": ["Dermatology", "Primary Care", "Med Spa"],
    "General Surgery": ["Primary Care", "Gastroenterology", "Imaging Center"],
    "Cardiac Surgery": ["Cardiology", "Primary Care", "Pulmonology"],
    "Neurosurgery": ["Neurology", "Primary Care", "Pain Management", "Physical Therapy"],

    # rehab & therapy
    "Physical Therapy": ["Orthopedic Surgery", "Primary Care", "Chiropractic", "Sports Medicine", "Pain Management", "Neurology"],
    "Occupational Therapy": ["Orthopedic Surgery", "Neurology", "Primary Care", "Pediatrics"],
    "Chiropractic": ["Physical Therapy", "Orthopedic Surgery", "Imaging Center", "Primary Care", "Massage Therapy"],
    "Sports Medicine": ["Orthopedic Surgery", "Physical Therapy", "Primary Care", "Imaging Center"],

    # mental health
    "Psychiatry": ["Primary Care", "Psychology", "Counseling", "Neurology"],
    "Psychology": ["Primary Care", "Psychiatry", "Counseling"],
    "Counseling": ["Primary Care", "Psychiatry", "Psychology"],
    "Mental Health": ["Primary Care", "Psychiatry", "Psychology", "Counseling"],

    # dental
    "Dentist": ["Oral Surgery", "Orthodontist", "Periodontist", "Endodontist", "Primary Care"],
    "Orthodontist": ["Dentist", "Oral Surgery", "Pediatric Dentist"],
    "Periodontist": ["Dentist", "Oral Surgery"],
    "Endodontist": ["Dentist"],
    "Pediatric Dentist": ["Pediatrics", "Orthodontist"],

    # primary & internal
    "Primary Care": ["Cardiology", "Gastroenterology", "Orthopedic Surgery", "Mental Health", "Dermatology", "Endocrinology", "Pulmonology", "Neurology"],
    "Family Medicine": ["Cardiology", "Gastroenterology", "Orthopedic Surgery", "Mental Health", "Dermatology", "Pediatrics"],
    "Internal Medicine": ["Cardiology", "Gastroenterology", "Pulmonology", "Endocrinology", "Rheumatology"],
    "Pediatrics": ["Family Medicine", "Pediatric Dentist", "Occupational Therapy", "Psychology"],

    # medical specialties
    "Cardiology": ["Primary Care", "Cardiac Surgery", "Pulmonology", "Endocrinology"],
    "Gastroenterology": ["Primary Care", "General Surgery", "Imaging Center"],
    "Dermatology": ["Primary Care", "Plastic Surgery", "Allergy/Immunology"],
    "Endocrinology": ["Primary Care", "Cardiology", "Nutrition"],
    "Neurology": ["Primary Care", "Neurosurgery", "Physical Therapy", "Psychiatry", "Pain Management"],
    "Pulmonology": ["Primary Care", "Cardiology", "Allergy/Immunology"],
    "Rheumatology": ["Primary Care", "Orthopedic Surgery", "Physical Therapy"],
    "Oncology": ["Primary Care", "General Surgery", "Imaging Center", "Pain Management"],

    # pain & wellness
    "Pain Management": ["Primary Care", "Orthopedic Surgery", "Neurology", "Physical Therapy", "Chiropractic"],
    "Acupuncture": ["Chiropractic", "Physical Therapy", "Pain Management"],
    "Massage Therapy": ["Chiropractic", "Physical Therapy", "Acupuncture"],

    # eye care
    "Optometry": ["Ophthalmology", "Primary Care"],
    "Ophthalmology": ["Optometry", "Primary Care"],

    # women's health
    "OB/GYN": ["Primary Care", "Urology", "Endocrinology"],

    # other
    "Urology": ["Primary Care", "OB/GYN", "Oncology"],
    "ENT": ["Primary Care", "Allergy/Immunology", "Audiology"],
    "Allergy/Immunology": ["Primary Care", "ENT", "Pulmonology", "Dermatology"],
    "Podiatry": ["Primary Care", "Orthopedic Surgery", "Vascular Surgery"],
    "Imaging Center": ["Primary Care", "Orthopedic Surgery", "Chiropractic", "Gastroenterology"],
    "Urgent Care": ["Primary Care", "Orthopedic Surgery", "Imaging Center"],
    "Med Spa": ["Dermatology", "Plastic Surgery"],
    "Nutrition": ["Primary Care", "Endocrinology", "Gastroenterology"],
}

ALL_SPECIALTIES: List[str] = sorted(ADJACENCY_MAP)

# --- Specialty -> phrase that reads well in a places query ---
SEARCH_TERMS: Dict[str, str] = {
    "Physical Therapy": "physical therapy clinic",
    "Orthopedic Surgery": "orthopedic surgeon",
    "Primary Care": "primary care doctor",
    "Chiropractic": "chiropractor",
    "Pain Management": "pain management doctor",
    "Sports Medicine": "sports medicine doctor",
    "Neurology": "neurologist",
    "Cardiology": "cardiologist",
    "Dermatology": "dermatologist",
    "Dentist": "dentist",
    "Oral Surgery": "oral surgeon",
    "Orthodontist": "orthodontist",
    "Mental Health": "therapist mental health",
    "Psychiatry": "psychiatrist",
    "Psychology": "psychologist",
    "Counseling": "counselor therapist",
}

BASE_FIT_SCORE = 95
DECAY_PER_POSITION = 10
JITTER = 5
MIN_FIT_SCORE = 50
MAX_FIT_SCORE = 100


def get_adjacent_specialties(specialty: str) -> List[str]:
    """Return the ordered referral partners for `specialty` ([] when unknown)."""
    return list(ADJACENCY_MAP.get(specialty, []))


def get_search_term(specialty: str) -> str:
    """Search phrase for a specialty; unmapped labels are simply lowercased."""
    return SEARCH_TERMS.get(specialty) or specialty.lower()


def calculate_fit_score(
    specialty: str,
    adjacent_specialty: str,
    rng: Optional[random.Random] = None,
) -> int:
    """
    Score how strong a referral relationship is.

    Parameters
    ----------
    specialty : str
        The practice looking for partners.
    adjacent_specialty : str
        The candidate partner specialty.
    rng : random.Random, optional
        Source of the cosmetic jitter; pass a seeded instance for reproducible scores.

    Returns
    -------
    int
        0 when `adjacent_specialty` is not a partner of `specialty`,
        otherwise ``95 - 10*index`` plus a uniform jitter in [-5, 5], clamped to [50, 100].
    """
    adjacents = ADJACENCY_MAP.get(specialty, [])
    if adjacent_specialty not in adjacents:
        return 0

    index = adjacents.index(adjacent_specialty)
    base = BASE_FIT_SCORE - DECAY_PER_POSITION * index
    jitter = (rng or random).randint(-JITTER, JITTER)
    return max(MIN_FIT_SCORE, min(MAX_FIT_SCORE, base + jitter))
