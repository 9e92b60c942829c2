"""
Tests for the rule-based onboarding interview and the discovery chat helpers.
"""

import pytest

from analytics.discovery import (
    GREETING,
    SYSTEM_PROMPT,
    DiscoveryConversation,
    build_proposed_strategy,
    extracted_data,
    parse_extraction,
)
from analytics.onboarding import (
    FALLBACK_GREETING,
    NOT_ANSWERED,
    OnboardingMemory,
    calculate_progress,
    continue_onboarding,
    extract_business_data,
    fallback_start,
)


# --------------------------------------------------------------------------- #
# Onboarding
# --------------------------------------------------------------------------- #

def test_interview_walks_through_essential_fields():
    memory = OnboardingMemory()

    step = continue_onboarding(memory, "My business is Iron Temple")
    assert step["data_collected"]["business_name"] == "Iron Temple"
    assert step["progress_percentage"] == 25
    assert step["message"].startswith("Great, Iron Temple! What industry")
    assert step["is_business_data_collection"] is True

    step = continue_onboarding(memory, "We are a fitness studio")
    assert step["data_collected"]["industry"] == "Fitness"
    assert "Where is Iron Temple located" in step["message"]

    step = continue_onboarding(memory, "We are located in Austin, TX")
    assert step["data_collected"]["location"] == "Austin, TX"
    assert step["progress_percentage"] == 75
    assert step["can_generate_brief"] is True

    step = continue_onboarding(memory, "We want to grow with local partners")
    assert step["progress_percentage"] == 100
    assert "Generate Brief" in step["message"]
    assert step["brief_generation_trigger"] is False

    assert memory.total_messages == 4
    assert len(memory.messages) == 8, "User and assistant turns are both recorded"


def test_message_without_new_data_keeps_asking():
    memory = OnboardingMemory()
    step = continue_onboarding(memory, "hello there")
    assert step["is_business_data_collection"] is False
    assert step["conversation_insights"] == "Message 1: Awaiting info"
    assert step["message"] == "I'd love to help you! What's the name of your business?"
    assert memory.collection_started is False


def test_extract_business_data_merges_into_existing():
    data = extract_business_data("I own a coffee shop", {"location": "Denver"})
    assert data["industry"] == "Coffee"
    assert data["location"] == "Denver"


def test_progress_ignores_placeholders():
    assert calculate_progress({}) == 0
    assert calculate_progress({"business_name": NOT_ANSWERED, "industry": "Retail"}) == 25


def test_fallback_start_has_blank_profile():
    start = fallback_start()
    assert start["message"] == FALLBACK_GREETING
    assert set(start["data_collected"].values()) == {NOT_ANSWERED}
    assert len(start["data_collected"]) == 8


# --------------------------------------------------------------------------- #
# Discovery
# --------------------------------------------------------------------------- #

def test_conversation_starts_with_prompt_and_greeting():
    convo = DiscoveryConversation.start()
    assert convo.messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert convo.messages[1]["content"] == GREETING

    convo.add("user", "I run an HVAC company")
    transcript = convo.transcript()
    assert "system" not in transcript
    assert transcript.endswith("user: I run an HVAC company")
    assert convo.extraction_messages()[1]["content"].startswith("Conversation so far:\n")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('```json\n{"isComplete": true}\n```', {"isComplete": True}),
        ('{"goal": "partnerships"}', {"goal": "partnerships"}),
        (None, {}),
        ("not json", None),
        ("[1, 2]", None),
    ],
)
def test_parse_extraction(raw, expected):
    assert parse_extraction(raw) == expected


def _complete_data(leads=2, **business):
    return extracted_data({
        "business": {"name": "Cool Air", "industry": "HVAC", "location": "Tampa, FL", **business},
        "targetLeads": [{"type": f"type {i}", "reason": "r"} for i in range(leads)],
    })


def test_strategy_proposed_once_complete():
    strategy = build_proposed_strategy(_complete_data(), True)
    assert strategy["business"] == {"name": "Cool Air", "industry": "HVAC", "location": "Tampa, FL"}
    assert strategy["goal"] == "partnerships"
    assert len(strategy["targetLeads"]) == 2
    assert strategy["targetEvents"] == []


def test_strategy_name_falls_back_to_industry():
    strategy = build_proposed_strategy(_complete_data(name=None), True)
    assert strategy["business"]["name"] == "My HVAC"


@pytest.mark.parametrize(
    "data, complete",
    [
        (_complete_data(), False),
        (_complete_data(leads=1), True),
        (_complete_data(location=None), True),
        (_complete_data(name=None, industry=None), True),
    ],
)
def test_no_strategy_until_requirements_met(data, complete):
    assert build_proposed_strategy(data, complete) is None
