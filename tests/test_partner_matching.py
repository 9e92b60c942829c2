"""
Tests for partner discovery scoring and vendor review statistics.
"""

from analytics.partner_matching import (
    GENERAL_SEARCH_TERMS,
    find_partner_matches,
    match_score,
    redact_contact,
    search_terms_for,
    specialty_from_category,
)
from analytics.review_stats import product_averages
from fakes import place


def test_match_score_components_and_cap():
    assert match_score({}) == 75
    assert match_score({"rating": 3.6}) == 80
    assert match_score({"rating": 4.2, "website": "x"}) == 88
    full = {"rating": 4.9, "ratingCount": 250, "website": "x", "phoneNumber": "y"}
    assert match_score(full) == 98, "75+15+5+3+2 is capped at 98"


def test_specialty_from_category_then_search_term():
    assert specialty_from_category("Physical therapy clinic", "anything") == "Physical Therapy"
    assert specialty_from_category("Family practice physician", "x") == "Primary Care"
    assert specialty_from_category(None, "med spa") == "Med Spa"
    assert specialty_from_category(None, "optometrist") == "Optometry"
    assert specialty_from_category("Bakery", "x") == "Healthcare"


def test_search_terms_for_interests_with_general_fallback():
    assert search_terms_for(["mental_health"])[0] == "psychiatrist"
    assert search_terms_for([]) == GENERAL_SEARCH_TERMS
    assert search_terms_for(["unknown"]) == GENERAL_SEARCH_TERMS


def test_find_matches_dedupes_filters_and_ranks():
    results = {
        "psychiatrist": [
            place("Calm Minds", category="Psychiatrist", rating=4.8, website="w"),
            place("Peak PT", category="Physical therapy clinic", rating=4.0),
        ],
        "psychologist office": [
            place("calm minds", category="Psychiatrist"),
            place("Insight Psych", category="Psychologist", rating=3.0),
        ],
        "mental health counselor": [place("Never searched")],
    }
    searched = []

    def search(term, location):
        searched.append(term)
        if term == "therapy practice":
            raise AssertionError("only three queries are run")
        return results.get(term, [])

    terms = ["psychiatrist", "psychologist office", "mental health counselor", "therapy practice"]
    matches = find_partner_matches("Austin, TX", terms, search, own_specialty="Physical Therapy")

    assert searched == terms[:3]
    names = [m["practice_name"] for m in matches]
    assert "Peak PT" not in names, "Same-specialty competitors are dropped"
    assert names.count("Calm Minds") == 1 and "calm minds" not in names
    assert names[0] == "Calm Minds"
    assert [m["match_score"] for m in matches] == sorted((m["match_score"] for m in matches), reverse=True)
    assert matches[0]["why_match"][1] == "4.8 stars with multiple reviews"


def test_find_matches_caps_at_twelve_and_survives_search_errors():
    def search(term, location):
        if term == "b":
            raise TimeoutError("slow")
        return [place(f"{term}-{i}", rating=4.0) for i in range(5)]

    matches = find_partner_matches("Austin", ["a", "b", "c"], search)
    assert len(matches) == 10

    many = find_partner_matches("Austin", ["a", "c", "d"], search)
    assert len(many) == 12


def test_redact_contact_keeps_city_state_only():
    match = {"phone": "555", "website": "w", "address": "12 Elm St, Austin, TX 78701", "practice_name": "X"}
    redacted = redact_contact(match)
    assert redacted["phone"] is None and redacted["website"] is None
    assert redacted["address"] == "Austin, TX 78701"
    assert redacted["practice_name"] == "X"
    assert match["phone"] == "555", "Original is untouched"


def test_product_averages_most_reviewed_first():
    rows = [
        {"product_name": "Athena", "overall_rating": 4},
        {"product_name": "Athena", "overall_rating": 5},
        {"product_name": "Kareo", "overall_rating": 3},
        {"product_name": None, "overall_rating": 5},
        {"product_name": "Athena", "overall_rating": 4},
    ]
    stats = product_averages(rows)
    assert stats[0] == {"product_name": "Athena", "avg_rating": 4.3, "review_count": 3}
    assert stats[1]["product_name"] == "Kareo"
    assert len(product_averages(rows, top=1)) == 1
