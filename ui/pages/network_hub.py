"""
Network Hub

Community feed, vendor reviews, scored partner matches and a curated
market-intelligence feed for members of the provider network.
Backed by:
- /api/network/posts, /api/network/posts/{id}, /api/network/posts/{id}/upvote
- /api/network/reviews
- /api/network/discover
- /api/network/intelligence
- /api/stripe/create-checkout
"""

import os
import sys

import pandas as pd
import streamlit as st

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from core.ui_helpers import fetch_backend, post_backend
from database import models
from ui.components.backend_status import render_status_bar

st.set_page_config(page_title="Network Hub", layout="wide")

st.title("🌐 Network Hub")
st.caption("Connect with local providers, compare vendors and find partners.")
render_status_bar()

CATEGORIES = list(models.POST_CATEGORIES)
REVIEW_TYPES = list(models.REVIEW_TYPES)

with st.sidebar:
    st.header("Account")
    user_id = st.text_input("User ID", key="user_id")
    email = st.text_input("Email", key="email")
    if user_id and st.button("⭐ Upgrade (Warm Introductions)"):
        checkout = post_backend("/api/stripe/create-checkout", {"userId": user_id, "email": email})
        if checkout.get("url"):
            st.markdown(f"[Continue to checkout]({checkout['url']})")

feed_tab, reviews_tab, discover_tab, intel_tab = st.tabs(
    ["📰 Feed", "⭐ Vendor Reviews", "🤝 Partner Matches", "📈 Market Intelligence"]
)

# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------
with feed_tab:
    category = st.selectbox("Category", options=["(any)"] + CATEGORIES)
    params = {"limit": 20, "offset": 0}
    if category != "(any)":
        params["category"] = category
    feed = fetch_backend("/api/network/posts", params=params)

    for post in feed.get("posts", []) if isinstance(feed, dict) else []:
        author = (post.get("provider") or {}).get("practice_name", "Unknown practice")
        with st.container(border=True):
            st.markdown(f"**{post.get('title')}** · _{post.get('category')}_ · {author}")
            st.write(post.get("content"))
            st.caption(f"👍 {post.get('upvotes', 0)} · 💬 {post.get('comment_count', 0)} · 👁 {post.get('view_count', 0)}")
            if user_id and st.button("👍 Upvote", key=f"up_{post['id']}"):
                post_backend(f"/api/network/posts/{post['id']}/upvote", {"userId": user_id})
                fetch_backend.clear()
                st.rerun()

    if user_id:
        with st.form("new_post"):
            st.markdown("**New post**")
            title = st.text_input("Title")
            content = st.text_area("Content")
            post_category = st.selectbox("Post category", options=CATEGORIES)
            if st.form_submit_button("Post"):
                if post_backend("/api/network/posts", {
                    "userId": user_id, "title": title, "content": content, "category": post_category,
                }).get("post"):
                    fetch_backend.clear()
                    st.rerun()

# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
with reviews_tab:
    review_type = st.selectbox("Type", options=["(any)"] + REVIEW_TYPES)
    sort = st.radio("Sort", options=list(models.REVIEW_SORTS), horizontal=True)
    params = {"sort": sort}
    if review_type != "(any)":
        params["type"] = review_type
    reviews = fetch_backend("/api/network/reviews", params=params)

    stats = reviews.get("productStats", []) if isinstance(reviews, dict) else []
    if stats:
        st.markdown("**Top-rated products**")
        st.dataframe(pd.DataFrame(stats), use_container_width=True, hide_index=True)
    for review in reviews.get("reviews", []) if isinstance(reviews, dict) else []:
        with st.container(border=True):
            st.markdown(f"**{review.get('product_name')}** · {'⭐' * int(review.get('overall_rating') or 0)}")
            st.markdown(f"_{review.get('title')}_")
            st.write(review.get("review_content"))

    if user_id:
        with st.form("new_review"):
            st.markdown("**Write a review**")
            product = st.text_input("Product")
            vendor = st.text_input("Vendor")
            rtype = st.selectbox("Review type", options=REVIEW_TYPES)
            rating = st.slider("Overall rating", 1, 5, 4)
            rtitle = st.text_input("Headline")
            body = st.text_area("Review")
            recommend = st.checkbox("Would recommend", value=True)
            if st.form_submit_button("Submit review"):
                if post_backend("/api/network/reviews", {
                    "userId": user_id, "reviewType": rtype, "productName": product, "vendorName": vendor,
                    "overallRating": rating, "title": rtitle, "reviewContent": body, "wouldRecommend": recommend,
                }).get("review"):
                    fetch_backend.clear()
                    st.rerun()

# ---------------------------------------------------------------------------
# Partner matches
# ---------------------------------------------------------------------------
with discover_tab:
    if not user_id:
        st.info("Enter your user ID to see partner matches.")
    else:
        found = fetch_backend("/api/network/discover", params={"userId": user_id})
        matches = found.get("matches", []) if isinstance(found, dict) else []
        if found and not (found.get("is_subscribed") or found.get("is_trialing")):
            st.warning("Contact details are hidden. Upgrade to see phone numbers and websites.")
        if matches:
            st.dataframe(
                pd.DataFrame(matches)[["practice_name", "specialty", "match_score", "rating", "address", "phone", "website"]],
                use_container_width=True,
                hide_index=True,
            )
        else:
            st.info("No partner matches yet. Add the patient types you want in your profile.")

# ---------------------------------------------------------------------------
# Market intelligence
# ---------------------------------------------------------------------------
with intel_tab:
    intel = fetch_backend("/api/network/intelligence", params={"userId": user_id} if user_id else None)
    if isinstance(intel, dict) and intel:
        st.caption(f"{intel.get('specialty')} · {intel.get('location')}")
        for item in intel.get("intelligence", []):
            with st.container(border=True):
                st.markdown(f"**{item.get('title')}** · relevance {item.get('relevance_score')}")
                st.write(item.get("summary"))
                if item.get("source_url"):
                    st.caption(f"[{item.get('source_name')}]({item['source_url']})")
