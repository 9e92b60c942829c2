# database/models.py
"""
Table names and column vocabularies of the hosted Supabase schema.

Row shapes are owned by the database; this module only pins the names and
enumerations the backend validates against.
"""

PROVIDERS = "providers"
USER_BRIEFS = "user_briefs"
FEEDBACK = "feedback"
NETWORK_POSTS = "network_posts"
NETWORK_COMMENTS = "network_comments"
NETWORK_UPVOTES = "network_upvotes"
NETWORK_REVIEWS = "network_reviews"
MARKET_INTELLIGENCE = "market_intelligence"

PROVIDER_SUMMARY = "provider:providers(id, practice_name, specialty, location)"
COMMENT_PROVIDER_SUMMARY = "provider:providers(id, practice_name, specialty)"

# providers.subscription_status
TRIAL = "trial"
ACTIVE = "active"
PAST_DUE = "past_due"
CANCELED = "canceled"
CAN_CONTRIBUTE = (TRIAL, ACTIVE)

# provider columns written only by the backend (identity and Stripe webhooks)
PROTECTED_PROVIDER_COLUMNS = frozenset({
    "id",
    "user_id",
    "subscription_status",
    "subscription_ends_at",
    "stripe_customer_id",
    "stripe_subscription_id",
})

POST_CATEGORIES = (
    "software",
    "payment_processing",
    "marketing",
    "practice_management",
    "ai_tools",
    "patient_experience",
    "hiring",
    "insurance",
    "general",
    "announcement",
)
DEFAULT_POST_CATEGORY = "general"

REVIEW_TYPES = (
    "ehr_software",
    "practice_management",
    "payment_processing",
    "marketing_service",
    "billing_service",
    "telehealth",
    "scheduling",
    "patient_communication",
    "ai_tool",
    "other",
)

# sort key -> column (descending)
REVIEW_SORTS = {
    "recent": "created_at",
    "rating": "overall_rating",
    "helpful": "helpful_count",
}

BRIEF_COMPLETED = "completed"
