"""
analytics/demo_sources.py
-------------------------
Synthetic places used when no search API key is configured.

Output has the same shape as a Serper places result so it flows through the
regular aggregation pipeline. All randomness comes from the injected RNG.
"""

from __future__ import annotations

import random
import re
from typing import Any, Dict, List, Optional

PRACTICE_NAMES: Dict[str, List[str]] = {
    "Physical Therapy": ["Peak Performance PT", "Movement Matters Therapy", "Active Life Physical Therapy", "Restore PT & Wellness"],
    "Orthopedic Surgery": ["Summit Orthopedics", "Precision Bone & Joint", "Advanced Ortho Specialists", "Metro Orthopedic Center"],
    "Primary Care": ["Family Health Partners", "Community Care Clinic", "Wellness First Medical", "Neighborhood Health Center"],
    "Chiropractic": ["Spine & Wellness Center", "Back to Health Chiropractic", "Align Chiropractic Care", "Peak Chiropractic"],
    "Pain Management": ["Pain Relief Specialists", "Comfort Care Pain Clinic", "Advanced Pain Solutions", "Integrated Pain Management"],
    "Sports Medicine": ["Athletic Edge Sports Med", "Peak Performance Sports", "Pro Sports Medicine", "Active Sports Health"],
    "Imaging Center": ["Premier Imaging", "Advanced Diagnostic Imaging", "ClearView Radiology", "Metro Imaging Center"],
    "Neurology": ["Brain & Spine Neurology", "Advanced Neuro Associates", "Neural Health Specialists", "Metro Neuroscience"],
    "Cardiology": ["Heart Health Specialists", "Advanced Cardiology Group", "Cardiovascular Care Center", "Metro Heart Clinic"],
    "Gastroenterology": ["Digestive Health Center", "GI Specialists of Metro", "Advanced Gastro Care", "Gut Health Associates"],
    "Dermatology": ["Clear Skin Dermatology", "Advanced Derm Associates", "Skin Health Center", "Metro Dermatology"],
    "Mental Health": ["Mind Matters Therapy", "Wellness Mental Health", "Balanced Mind Counseling", "Hope Psychiatric Services"],
    "Psychiatry": ["Clarity Psychiatry", "Mental Wellness Associates", "Behavioral Health Partners", "Mind Care Psychiatry"],
    "Psychology": ["Insight Psychology", "Clear Mind Counseling", "Behavioral Wellness Center", "Growth Psychology Group"],
    "Counseling": ["Hope Counseling Center", "Pathway Counseling", "New Horizons Therapy", "Clarity Counseling"],
    "Dentist": ["Bright Smile Dental", "Family Dental Care", "Premier Dentistry", "Comfort Dental Group"],
    "Oral Surgery": ["Metro Oral Surgery", "Advanced Oral & Maxillofacial", "Precision Oral Surgery", "Smile Surgery Center"],
    "Orthodontist": ["Perfect Smile Orthodontics", "Align Orthodontic Care", "Braces & Beyond", "Metro Orthodontics"],
}
DEFAULT_NAMES = ["Metro Health Center", "Advanced Care Specialists", "Premier Medical Group", "Community Health Partners"]
NAME_SUFFIXES = ["Group", "Associates", "Partners", "Clinic", "Center"]

STREET_NAMES = ["Oak", "Main", "Elm", "Park", "Medical Center", "Healthcare", "Professional", "Commerce", "Valley", "Ridge"]
STREET_TYPES = ["Dr", "Blvd", "Ave", "Way", "Pkwy", "St"]
AREA_CODES = ["512", "737", "832", "713", "214", "469", "972"]


def practice_name(specialty: str, index: int) -> str:
    """Cycle through the specialty's names; past the list, vary with a suffix."""
    names = PRACTICE_NAMES.get(specialty, DEFAULT_NAMES)
    base = names[index % len(names)]
    if index >= len(names):
        return f"{base.split(' ')[0]} {NAME_SUFFIXES[index % len(NAME_SUFFIXES)]}"
    return base


def street_address(location: str, index: int) -> str:
    number = 100 + (index * 127) % 9900
    street = STREET_NAMES[index % len(STREET_NAMES)]
    kind = STREET_TYPES[index % len(STREET_TYPES)]
    suite = f", Suite {100 + (index * 17) % 400}" if index % 3 == 0 else ""
    return f"{number} {street} {kind}{suite}, {location}"


def distance_label(index: int, rng: random.Random) -> str:
    miles = 0.3 + index * 0.7 + rng.random() * 0.5
    return f"{miles:.1f} mi"


def rating(rng: random.Random) -> float:
    return round(3.8 + rng.random() * 1.2, 1)


def review_count(rng: random.Random) -> int:
    return rng.randint(15, 499)


def phone_number(rng: random.Random) -> str:
    return f"({rng.choice(AREA_CODES)}) {rng.randint(200, 999)}-{rng.randint(1000, 9999)}"


def website_for(name: str) -> str:
    return f"https://{re.sub(r'[^a-z0-9]+', '', name.lower())}.com"


class DemoPlaces:
    """
    Stand-in for the places search.

    Keeps a running index across calls so addresses and names stay distinct
    within one brief.
    """

    def __init__(self, rng: Optional[random.Random] = None, per_call: int = 4):
        self.rng = rng or random.Random()
        self.per_call = per_call
        self._index = 0

    def search(self, specialty: str, location: str) -> List[Dict[str, Any]]:
        places = []
        for _ in range(self.per_call):
            name = practice_name(specialty, self._index)
            places.append(
                {
                    "title": name,
                    "address": street_address(location, self._index),
                    "distance": distance_label(self._index, self.rng),
                    "rating": rating(self.rng),
                    "ratingCount": review_count(self.rng),
                    "website": website_for(name),
                    "phoneNumber": phone_number(self.rng),
                    "category": specialty,
                }
            )
            self._index += 1
        return places
