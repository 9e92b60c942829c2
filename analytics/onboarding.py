"""
analytics/onboarding.py
-----------------------
Rule-based onboarding interview: pulls business name, industry, location and
goal out of free text and picks the next question to ask.
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

NOT_ANSWERED = "NOT YET ANSWERED"
ESSENTIAL_FIELDS = ("business_name", "industry", "location", "custom_goal")
BRIEF_READY_PROGRESS = 75

ONBOARDING_FIELDS = (
    "business_name",
    "website_url",
    "industry",
    "location",
    "partnership_goals",
    "growth_objectives",
    "custom_goal",
    "networking_keyword",
)

FALLBACK_GREETING = (
    "Hi! I'm your AI business strategist and intelligence partner. I can help you "
    "with any business questions or create a comprehensive strategy brief for your "
    "company. What would you like to explore today?"
)

START_PROMPT = """You are an elite AI business strategist for Sleft Signals, a comprehensive business intelligence platform. You are capable of:

1. 🧠 Answering ANY business questions with expert-level insights
2. 📊 Collecting business information through natural conversation
3. 🎯 Generating personalized strategy briefs when sufficient data is available
4. 💡 Providing strategic advice, market analysis, and growth recommendations

Your personality: Professional yet friendly, data-driven, insightful, and genuinely helpful.

CONVERSATION OBJECTIVES:
- Help users with any business questions they have
- Naturally collect business information when relevant
- Provide value in every interaction
- Guide users toward brief generation when appropriate

RESPONSE FORMAT: Always respond with valid JSON:
{
  "message": "Your conversational response to the user",
  "data_collected": {
    "business_name": "NOT YET ANSWERED",
    "website_url": "NOT YET ANSWERED",
    "industry": "NOT YET ANSWERED",
    "location": "NOT YET ANSWERED",
    "partnership_goals": "NOT YET ANSWERED",
    "growth_objectives": "NOT YET ANSWERED",
    "custom_goal": "NOT YET ANSWERED",
    "networking_keyword": "NOT YET ANSWERED"
  },
  "conversation_type": "general" | "onboarding" | "brief_ready",
  "can_generate_brief": false,
  "progress_percentage": 0,
  "brief_generation_trigger": false,
  "action_items": [],
  "conversation_insights": "Brief analysis of conversation so far"
}

Start with a warm, engaging greeting that positions you as their business intelligence partner."""

_NAME_PATTERNS = [
    re.compile(
        r"my (?:business|company|shop|store|restaurant|gym|studio) (?:is |called |named )?[\"']?([^\"'\n,]+)[\"']?",
        re.I,
    ),
    re.compile(r"i (?:run|own|have|manage) (?:a )?[\"']?([^\"'\n,]+)[\"']?", re.I),
    re.compile(r"(?:called |named )[\"']?([^\"'\n,]+)[\"']?", re.I),
]
_LOCATION_PATTERN = re.compile(r"(?:in |at |from |based in )([A-Z][a-zA-Z\s]+(?:,\s*[A-Z]{2})?)", re.I)

INDUSTRIES = (
    "restaurant", "fitness", "gym", "wellness", "retail", "tech", "technology",
    "healthcare", "real estate", "consulting", "marketing", "beauty", "salon",
    "spa", "cafe", "coffee", "bar", "hotel", "agency", "ecommerce", "e-commerce",
)
_GOAL_WORDS = ("partner", "collaboration", "grow", "expand", "more customer")


def blank_profile() -> Dict[str, str]:
    return {name: NOT_ANSWERED for name in ONBOARDING_FIELDS}


def extract_business_data(message: str, existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge whatever the message reveals into a copy of `existing`."""
    data = dict(existing or {})
    lowered = message.lower()

    for pattern in _NAME_PATTERNS:
        match = pattern.search(message)
        if match and 2 < len(match.group(1)) < 50:
            data["business_name"] = match.group(1).strip()
            break

    for industry in INDUSTRIES:
        if industry in lowered:
            data["industry"] = industry[0].upper() + industry[1:]
            break

    location = _LOCATION_PATTERN.search(message)
    if location:
        data["location"] = location.group(1).strip()

    if any(word in lowered for word in _GOAL_WORDS):
        data["custom_goal"] = message[:100]

    return data


def calculate_progress(data: Dict[str, Any]) -> int:
    """Percentage of the four essential fields answered."""
    if not data:
        return 0
    filled = sum(
        1 for name in ESSENTIAL_FIELDS
        if data.get(name) and data.get(name) not in ("NOT_PROVIDED", NOT_ANSWERED)
    )
    return round(filled / len(ESSENTIAL_FIELDS) * 100)


def next_prompt(info: Dict[str, Any]) -> str:
    name = info.get("business_name")
    if not name:
        return "I'd love to help you! What's the name of your business?"
    if not info.get("industry"):
        return f"Great, {name}! What industry are you in? (e.g., restaurant, fitness, retail, tech, etc.)"
    if not info.get("location"):
        return f"Perfect! Where is {name} located? (City, State)"
    if not info.get("custom_goal"):
        return "Awesome! What's your main goal right now? (e.g., find partners, get more customers, expand)"
    return (
        f"Great! I have everything I need to generate your strategy brief for {name}. "
        'Click "Generate Brief" when you\'re ready!'
    )


@dataclass
class OnboardingMemory:
    messages: List[Dict[str, Any]] = field(default_factory=list)
    business_info: Dict[str, Any] = field(default_factory=dict)
    total_messages: int = 0
    collection_started: bool = False

    def record(self, role: str, content: str) -> None:
        self.messages.append({
            "role": role,
            "content": content,
            "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
        })


def continue_onboarding(memory: OnboardingMemory, user_message: str) -> Dict[str, Any]:
    """Advance the interview by one user message; mutates `memory`."""
    memory.record("user", user_message)
    memory.total_messages += 1

    extracted = extract_business_data(user_message, memory.business_info)
    has_new_data = any(
        value and value != memory.business_info.get(key) for key, value in extracted.items()
    )
    if has_new_data:
        memory.collection_started = True
        memory.business_info = {**memory.business_info, **extracted}

    reply = next_prompt(memory.business_info)
    progress = calculate_progress(memory.business_info)
    memory.record("assistant", reply)

    return {
        "success": True,
        "message": reply,
        "data_collected": memory.business_info,
        "conversation_insights": (
            f"Message {memory.total_messages}: "
            f"{'Business data extracted' if has_new_data else 'Awaiting info'}"
        ),
        "can_generate_brief": progress >= BRIEF_READY_PROGRESS,
        "progress_percentage": progress,
        "brief_generation_trigger": False,
        "is_business_data_collection": has_new_data,
    }


def fallback_start() -> Dict[str, Any]:
    return {
        "success": True,
        "message": FALLBACK_GREETING,
        "data_collected": blank_profile(),
        "conversation_type": "general",
        "can_generate_brief": False,
        "progress_percentage": 0,
        "brief_generation_trigger": False,
        "action_items": [],
    }
