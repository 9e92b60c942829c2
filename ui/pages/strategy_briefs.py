"""
Strategy Briefs

Generate a partner/news/events brief for a business and browse the ones
already saved for this user.
Backed by:
- /api/generate
- /api/user-briefs/{user_id}
- /api/briefs/{brief_id}  (GET, DELETE)
"""

import os
import sys
from typing import Any, Dict, List

import pandas as pd
import streamlit as st

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from core.ui_helpers import delete_backend, fetch_backend, post_backend
from ui.components.backend_status import render_status_bar

st.set_page_config(page_title="Strategy Briefs", layout="wide")

st.title("📄 Strategy Briefs")
st.caption("Partner leads, local news and networking events in one brief.")
render_status_bar()

with st.sidebar:
    st.header("Account")
    user_id = st.text_input("User ID", key="user_id")
    page = st.number_input("Page", min_value=1, value=1, step=1)

if not user_id:
    st.info("Enter your user ID in the sidebar to generate and browse briefs.")
    st.stop()

# ---------------------------------------------------------------------------
# Generate
# ---------------------------------------------------------------------------
with st.expander("✨ Generate a new brief", expanded=True):
    with st.form("generate_form"):
        col_a, col_b = st.columns(2)
        with col_a:
            business_name = st.text_input("Business name")
            industry = st.text_input("Industry", placeholder="Physical Therapy")
            website_url = st.text_input("Website")
        with col_b:
            location = st.text_input("Location", placeholder="Austin, TX")
            networking_keyword = st.text_input("Networking keyword", placeholder="healthcare")
            custom_goal = st.text_area("Goal for the next 90 days")
        go = st.form_submit_button("Generate brief")

    if go:
        with st.spinner("Researching partners, news and events..."):
            result = post_backend("/api/generate", {
                "userId": user_id,
                "businessName": business_name,
                "industry": industry,
                "location": location,
                "websiteUrl": website_url,
                "networkingKeyword": networking_keyword,
                "customGoal": custom_goal,
            })
        if result.get("success"):
            st.success(f"Brief saved ({result['briefId']})")
            st.session_state["open_brief"] = result["briefId"]
            fetch_backend.clear()

# ---------------------------------------------------------------------------
# My briefs
# ---------------------------------------------------------------------------
st.subheader("My briefs")
listing = fetch_backend(f"/api/user-briefs/{user_id}", params={"page": page, "limit": 10})
briefs: List[Dict[str, Any]] = listing.get("briefs", []) if isinstance(listing, dict) else []
pagination = listing.get("pagination", {}) if isinstance(listing, dict) else {}

if not briefs:
    st.info("No briefs yet.")
else:
    st.caption(f"Page {pagination.get('page', 1)} of {max(pagination.get('pages', 1), 1)} · {pagination.get('total', 0)} total")
    df = pd.DataFrame(briefs)[["id", "business_name", "created_at", "brief_status"]]
    st.dataframe(df, use_container_width=True, hide_index=True)

    selected = st.selectbox("Open brief", options=[b["id"] for b in briefs])
    col_open, col_delete = st.columns(2)
    if col_open.button("📖 Open"):
        st.session_state["open_brief"] = selected
    if col_delete.button("🗑️ Delete"):
        if delete_backend(f"/api/briefs/{selected}", {"userId": user_id}).get("success"):
            st.success("Brief deleted")
            st.session_state.pop("open_brief", None)
            fetch_backend.clear()
            st.rerun()

open_id = st.session_state.get("open_brief")
if open_id:
    st.markdown("---")
    detail = fetch_backend(f"/api/briefs/{open_id}")
    brief = detail.get("brief") if isinstance(detail, dict) else None
    if brief:
        st.markdown(brief.get("content", ""))
        with st.expander("Raw data"):
            st.json({k: brief.get(k) for k in ("businessData", "newsData", "meetupData", "metadata")})
