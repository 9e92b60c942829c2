"""
analytics/market_intelligence.py
--------------------------------
Curated practice-growth insights, personalised by specialty and partner interests.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

SOURCE_NAME = "Sleft Health"
MAX_ITEMS = 12
NEWS_RELEVANCE = 75
PARTNER_RELEVANCE_PENALTY = 5

CURATED_INSIGHTS: Dict[str, List[Dict[str, Any]]] = {
    "primary_care": [
        {
            "title": "Increase Patient Retention with Same-Day Appointments",
            "summary": "Practices offering same-day sick visits see 40% higher retention. Consider blocking 2-3 slots daily for urgent needs. This reduces no-shows and builds loyalty.",
            "category": "operations",
            "relevance_score": 95,
        },
        {
            "title": "The 5-Minute Pre-Visit Survey That Cuts Appointment Time",
            "summary": "Sending a brief digital intake form 24 hours before visits reduces average appointment time by 8 minutes while improving documentation quality.",
            "category": "technology",
            "relevance_score": 92,
        },
    ],
    "physical_rehab": [
        {
            "title": "Build Orthopedic Referral Relationships That Stick",
            "summary": "Top PT practices send monthly outcome reports to referring physicians. Include patient progress photos (with consent) and specific functional improvements.",
            "category": "partnerships",
            "relevance_score": 96,
        },
        {
            "title": "Cash Pay PT Programs: What's Actually Working",
            "summary": "Practices adding wellness/maintenance programs see 35% revenue increase. Position as 'performance optimization' not just injury recovery.",
            "category": "marketing",
            "relevance_score": 91,
        },
    ],
    "mental_health": [
        {
            "title": "Reduce No-Shows with the 48-Hour Confirmation System",
            "summary": "Text reminders at 48hrs and 2hrs before appointments cut no-show rates by 50%. Include a 'running late?' option to reschedule instantly.",
            "category": "operations",
            "relevance_score": 94,
        },
        {
            "title": "Primary Care Partnerships for Mental Health Practices",
            "summary": "PCPs are desperate for reliable mental health referrals. Offer a 'fast track' program: guaranteed first appointment within 7 days for their patients.",
            "category": "partnerships",
            "relevance_score": 93,
        },
    ],
    "dental_vision": [
        {
            "title": "Membership Plans: The Alternative to Insurance Dependency",
            "summary": "Dental practices with in-house membership plans average 30% higher case acceptance. Typical structure: $30-40/month covers cleanings + 20% off all services.",
            "category": "finance",
            "relevance_score": 95,
        },
        {
            "title": "Google Reviews Strategy That Actually Works",
            "summary": "Ask for reviews at the moment of peak satisfaction - right after complimenting their smile in the mirror. Text the link before they leave the parking lot.",
            "category": "marketing",
            "relevance_score": 90,
        },
    ],
    "wellness_aesthetic": [
        {
            "title": "Before/After Content That Converts",
            "summary": "Med spas with consistent before/after posting see 3x more inquiries. Use consistent lighting, angles, and timing. Always get signed photo releases upfront.",
            "category": "marketing",
            "relevance_score": 96,
        },
        {
            "title": "Building Your VIP Membership Program",
            "summary": "Top med spas generate 40% of revenue from membership programs. Include monthly treatments + product discounts + priority booking.",
            "category": "finance",
            "relevance_score": 93,
        },
    ],
    "specialists": [
        {
            "title": "The Referral Thank-You Note That Gets Results",
            "summary": "Hand-written thank you notes to referring physicians within 48 hours increase future referrals by 25%. Include a brief update on the patient's care plan.",
            "category": "partnerships",
            "relevance_score": 94,
        },
        {
            "title": "Reduce Referral Leakage in Your Specialty",
            "summary": "Make it easy: provide referring offices with digital referral forms, direct scheduler phone lines, and same-week appointment availability.",
            "category": "operations",
            "relevance_score": 91,
        },
    ],
}

GENERAL_INSIGHTS: List[Dict[str, Any]] = [
    {
        "title": "AI Scheduling: The Tools That Are Actually Worth It",
        "summary": "After testing 12 AI scheduling tools, here's what we found: the best ones integrate with your EHR and handle reschedules automatically. Top picks: Klara, Luma Health, and Phreesia.",
        "category": "technology",
        "relevance_score": 88,
    },
    {
        "title": "The Google Business Profile Checklist for Healthcare",
        "summary": "Healthcare practices with complete GBP profiles get 70% more appointment requests. Key: add services, Q&A, weekly posts, and respond to ALL reviews within 24 hours.",
        "category": "marketing",
        "relevance_score": 87,
    },
    {
        "title": "Staff Retention: What Small Practices Are Doing Differently",
        "summary": "Practices with lowest turnover share 3 traits: flexible scheduling, professional development budgets ($500-1000/year), and regular 1-on-1s with leadership.",
        "category": "operations",
        "relevance_score": 85,
    },
    {
        "title": "Payment Processing: Stop Overpaying",
        "summary": "Most practices overpay by 0.5-1% on card processing. Get quotes from Stax, Square, and Payment Depot. Leverage them against each other.",
        "category": "finance",
        "relevance_score": 86,
    },
]

SPECIALTY_CATEGORIES: Dict[str, str] = {
    "Primary Care": "primary_care",
    "Family Medicine": "primary_care",
    "Internal Medicine": "primary_care",
    "Pediatrics": "primary_care",
    "Urgent Care": "primary_care",
    "Physical Therapy": "physical_rehab",
    "Chiropractic": "physical_rehab",
    "Orthopedics": "physical_rehab",
    "Pain Management": "physical_rehab",
    "Psychiatry": "mental_health",
    "Psychology": "mental_health",
    "Counseling": "mental_health",
    "Dentistry": "dental_vision",
    "Optometry": "dental_vision",
    "Orthodontics": "dental_vision",
    "Med Spa": "wellness_aesthetic",
    "Plastic Surgery": "wellness_aesthetic",
    "Functional Medicine": "wellness_aesthetic",
    "Dermatology": "specialists",
    "Cardiology": "specialists",
    "OB/GYN": "specialists",
}


def specialty_category(specialty: str) -> str:
    return SPECIALTY_CATEGORIES.get(specialty, "specialists")


def _item(item_id: str, insight: Dict[str, Any], created_at: str, **overrides: Any) -> Dict[str, Any]:
    item = {
        "id": item_id,
        "title": insight["title"],
        "summary": insight["summary"],
        "category": insight["category"],
        "source_url": None,
        "source_name": SOURCE_NAME,
        "relevance_score": insight["relevance_score"],
        "created_at": created_at,
    }
    item.update(overrides)
    return item


def build_intelligence_feed(
    specialty: str,
    interests: Iterable[str] = (),
    news: Optional[List[Dict[str, Any]]] = None,
    stored: Optional[List[Dict[str, Any]]] = None,
    now: Optional[dt.datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Assemble the feed, most relevant first, at most 12 items.

    Parameters
    ----------
    specialty : str
        Provider specialty; picks the curated category.
    interests : iterable of str
        Partner categories the provider wants; adds one tip per category.
    news : list of dict, optional
        Serper news items (title, link, snippet); the first two are used.
    stored : list of dict, optional
        Rows from the market_intelligence table.
    """
    created_at = (now or dt.datetime.now(dt.timezone.utc)).isoformat()
    category = specialty_category(specialty)
    feed: List[Dict[str, Any]] = []

    for i, insight in enumerate(CURATED_INSIGHTS.get(category, [])):
        feed.append(_item(f"curated-{category}-{i}", insight, created_at))

    for interest in interests or []:
        for i, insight in enumerate(CURATED_INSIGHTS.get(interest, [])[:1]):
            if any(f["title"] == insight["title"] for f in feed):
                continue
            feed.append(
                _item(
                    f"curated-{interest}-{i}",
                    insight,
                    created_at,
                    summary=f"For your {interest.replace('_', ' ', 1)} partners: {insight['summary']}",
                    relevance_score=insight["relevance_score"] - PARTNER_RELEVANCE_PENALTY,
                )
            )

    for i, insight in enumerate(GENERAL_INSIGHTS):
        feed.append(_item(f"general-{i}", insight, created_at))

    for row in stored or []:
        if not row.get("title"):
            continue
        feed.append({
            "id": str(row.get("id")),
            "title": row["title"],
            "summary": row.get("summary") or "",
            "category": row.get("category") or "insight",
            "source_url": row.get("source_url"),
            "source_name": row.get("source_name") or SOURCE_NAME,
            "relevance_score": row.get("relevance_score") or 0,
            "created_at": row.get("created_at") or created_at,
        })

    for i, article in enumerate((news or [])[:2]):
        link = article.get("link") or ""
        feed.append({
            "id": f"news-{i}",
            "title": article.get("title") or "",
            "summary": article.get("snippet") or "",
            "category": "industry",
            "source_url": link or None,
            "source_name": urlparse(link).netloc.replace("www.", "", 1) if link else "news",
            "relevance_score": NEWS_RELEVANCE,
            "created_at": created_at,
        })

    feed.sort(key=lambda item: -item["relevance_score"])
    return feed[:MAX_ITEMS]
