"""
analytics/discovery.py
----------------------
Discovery chat: an LLM conversation that works out which referral-partner
types a business should target, plus a second extraction pass that turns the
transcript into a structured outreach strategy.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

GREETING = (
    "Hey! Sleft helps you find local businesses worth connecting with - the kind "
    "that can send you customers, not just one-off leads. What's your business?"
)
FALLBACK_REPLY = "Tell me more about your business."
RECOVERY_MESSAGE = "Sorry, I hit a snag. What's your business?"
MIN_PARTNER_TYPES = 2

SYSTEM_PROMPT = """You are Sleft's AI assistant helping users find REFERRAL PARTNERS - other businesses that can send them customers.

CRITICAL DISTINCTION - UNDERSTAND THIS:
- REFERRAL PARTNERS = Other businesses that serve the same customers BEFORE or AFTER you do. They REFER customers to you.
- CUSTOMERS = People/businesses who BUY your product/service directly.

WE FIND REFERRAL PARTNERS, NOT CUSTOMERS.

EXAMPLE - Payment Processing Company:
❌ WRONG (these are CUSTOMERS): retail stores, restaurants, e-commerce businesses
✅ RIGHT (these are REFERRAL PARTNERS): accountants, bookkeepers, business consultants, banks, commercial lenders, business attorneys, POS system vendors

EXAMPLE - HVAC Company:
❌ WRONG (these are CUSTOMERS): homeowners, property owners
✅ RIGHT (these are REFERRAL PARTNERS): realtors, property managers, home inspectors, general contractors

YOUR CORE BELIEF: One good referral partner beats 100 cold leads. A realtor who refers you to every home buyer is worth more than 100 random leads.

CONVERSATION FLOW:
1. Get their business name and what they do
2. Get their location
3. PROACTIVELY SUGGEST 3-5 referral partner types based on their industry
4. Ask if those suggestions sound right, or if they'd add/remove any
5. Once confirmed, summarize the plan

REFERRAL PARTNER SUGGESTIONS BY INDUSTRY:
- Payment Processing/Merchant Services: accountants, bookkeepers, business consultants, banks, commercial lenders, business attorneys, POS vendors, business coaches
- HVAC: realtors, property managers, home inspectors, general contractors, insurance adjusters
- Plumber: realtors, property managers, home inspectors, kitchen/bath remodelers, insurance adjusters
- Electrician: general contractors, solar installers, home inspectors, property managers, EV dealerships
- Landscaper: realtors, property managers, pool companies, outdoor living contractors, HOA managers
- Restaurant: hotels, event venues, wedding planners, corporate event planners, tourism boards
- Gym/Fitness: physical therapists, chiropractors, nutritionists, corporate HR departments, doctors
- Salon/Spa: wedding planners, photographers, boutiques, hotels, event venues
- Accountant: lawyers, financial advisors, real estate agents, business consultants, banks
- Lawyer: accountants, real estate agents, financial advisors, insurance agents, banks
- Insurance Agent: realtors, mortgage brokers, car dealerships, financial advisors, HR departments
- Real Estate Agent: mortgage brokers, home inspectors, insurance agents, attorneys, moving companies
- Mortgage Broker: realtors, financial advisors, accountants, divorce attorneys, estate attorneys
- Web Design/Marketing Agency: accountants, business consultants, commercial printers, business coaches
- Photographer: wedding planners, event venues, florists, caterers, bridal shops
- Caterer: event venues, wedding planners, corporate event planners, florists, photographers

HOW TO RESPOND:
- Keep responses SHORT (2-4 sentences max)
- Once you know their industry, IMMEDIATELY suggest partner types
- Ask "Do those sound right? Anyone you'd add or remove?"
- Don't wait for them to think of partners - be proactive

WHEN READY, FORMAT LIKE:
"Perfect. Here's what I'll search for in [location]:

🎯 PARTNERS
• [Partner type 1] - [one-line reason]
• [Partner type 2] - [one-line reason]
• [Partner type 3] - [one-line reason]

📅 EVENTS
• [Industry] networking events
• Business mixers

Look good?"

RULES:
- NEVER suggest their customers as partners
- ALWAYS suggest businesses that could REFER customers to them
- Be direct, not salesy
- Keep it simple"""

EXTRACTION_PROMPT = """Based on the conversation so far, extract the following information in JSON format.

IMPORTANT: "targetLeads" should be REFERRAL PARTNERS (businesses that can send them customers), NOT their direct customers.
Example for Payment Processing: accountants, bookkeepers, business consultants - NOT retail stores or restaurants (those are customers).

{
  "business": {
    "name": "business name (use industry if no specific name given, e.g. 'My Gym' or 'Payment Processing Company')",
    "industry": "their industry/what they do",
    "location": "city, state"
  },
  "goal": "partnerships",
  "targetLeads": [
    { "type": "Referral partner type (NOT customers)", "reason": "How they can refer customers" }
  ],
  "targetEvents": [
    { "type": "Event type", "reason": "Why relevant" }
  ],
  "targetIntel": [
    { "topic": "Intel topic", "reason": "Why useful" }
  ],
  "isComplete": true or false
}

SET "isComplete" to TRUE when ALL of these are true:
1. We know their industry/business type
2. We know their location
3. We have at least 2-3 referral partner types listed
4. The user has confirmed/agreed (said "ok", "yes", "looks good", "perfect", "that works", etc.)

Return ONLY valid JSON, no other text."""

_FENCE = re.compile(r"```(?:json)?\n?")


@dataclass
class DiscoveryConversation:
    """Transcript (system prompt first) and the latest extraction."""

    messages: List[Dict[str, str]] = field(default_factory=list)
    extracted: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def start(cls) -> "DiscoveryConversation":
        return cls(messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "assistant", "content": GREETING},
        ])

    def add(self, role: str, content: str) -> None:
        self.messages.append({"role": role, "content": content})

    def transcript(self) -> str:
        return "\n".join(f"{m['role']}: {m['content']}" for m in self.messages if m["role"] != "system")

    def extraction_messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": EXTRACTION_PROMPT},
            {"role": "user", "content": f"Conversation so far:\n{self.transcript()}"},
        ]


def parse_extraction(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse the extraction reply, tolerating markdown code fences.

    Returns None when the reply is not a JSON object.
    """
    cleaned = _FENCE.sub("", raw or "{}").strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(f"[Discovery] ⚠️ Failed to parse extraction: {e}")
        return None
    if not isinstance(parsed, dict):
        logger.warning("[Discovery] ⚠️ Extraction was not a JSON object")
        return None
    return parsed


def extracted_data(parsed: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "business": parsed.get("business"),
        "goal": parsed.get("goal"),
        "targetLeads": parsed.get("targetLeads") or [],
        "targetEvents": parsed.get("targetEvents") or [],
        "targetIntel": parsed.get("targetIntel") or [],
    }


def build_proposed_strategy(data: Dict[str, Any], is_complete: bool) -> Optional[Dict[str, Any]]:
    """
    The outreach strategy, once the user has confirmed and we know who they
    are, where they are, and at least two partner types to look for.
    """
    business = data.get("business") or {}
    leads = data.get("targetLeads") or []
    has_business = business.get("name") or business.get("industry")

    if not (is_complete and has_business and business.get("location") and len(leads) >= MIN_PARTNER_TYPES):
        return None

    return {
        "business": {
            "name": business.get("name") or f"My {business.get('industry') or 'Business'}",
            "industry": business.get("industry") or "General",
            "location": business["location"],
        },
        "goal": data.get("goal") or "partnerships",
        "targetLeads": leads,
        "targetEvents": data.get("targetEvents") or [],
        "targetIntel": data.get("targetIntel") or [],
    }
