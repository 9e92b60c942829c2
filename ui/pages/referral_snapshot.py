"""
Referral Snapshot

Pick a specialty and location; see which adjacent specialties refer to it and
the best-fit local practices, scored and ranked.
Backed by:
- /api/specialties (picker)
- /api/brief       (ranked sources)
- /api/snapshot    (same, with email capture)
- /api/brief/{id}  (shared brief by id)
"""

import os
import sys

import streamlit as st

# Ensure project root is on sys.path when running via `streamlit run ui/overview.py`
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from core.ui_helpers import fetch_backend, post_backend
from ui.components.backend_status import render_status_bar
from ui.components.visualizer import build_fit_score_figure, build_specialty_mix_figure, sources_to_frame

st.set_page_config(page_title="Referral Snapshot", layout="wide")

st.title("🧭 Referral Snapshot")
st.caption("Who already sees your future patients? Ranked referral sources near you.")
render_status_bar()

# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------
specialties = fetch_backend("/api/specialties").get("specialties", [])

with st.form("snapshot_form"):
    col_a, col_b = st.columns(2)
    with col_a:
        specialty = st.selectbox("Your specialty", options=specialties or ["Physical Therapy"])
        practice_name = st.text_input("Practice name (optional)")
    with col_b:
        location = st.text_input("Location", placeholder="Austin, TX")
        email = st.text_input("Email (to receive the snapshot)")
    submitted = st.form_submit_button("Find referral partners")

if submitted:
    payload = {"specialty": specialty, "location": location, "practiceName": practice_name}
    if email:
        brief = post_backend("/api/snapshot", {**payload, "email": email})
    else:
        brief = post_backend("/api/brief", payload)
    if brief:
        st.session_state["last_brief"] = brief

with st.expander("Open a shared brief"):
    shared_id = st.text_input("Brief id", key="shared_brief_id")
    if st.button("Load brief", disabled=not shared_id):
        brief = fetch_backend(f"/api/brief/{shared_id.strip()}")
        if brief:
            st.session_state["last_brief"] = brief

brief = st.session_state.get("last_brief")

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
if brief:
    summary = brief.get("summary", {})
    k1, k2, k3 = st.columns(3)
    k1.metric("Referral sources", summary.get("totalSources", 0))
    k2.metric("Avg fit score", summary.get("avgFitScore", 0))
    k3.metric("Top specialty", summary.get("topSpecialty") or "—")

    st.markdown("**Adjacent specialties:** " + ", ".join(brief.get("adjacentSpecialties", [])))
    st.caption(f"Shareable brief id: `{brief.get('briefId')}`")

    sources = brief.get("sources", [])
    if not sources:
        st.info("No referral sources found for this location.")
    else:
        chart_col, mix_col = st.columns([2, 1])
        with chart_col:
            st.plotly_chart(build_fit_score_figure(sources), use_container_width=True)
        with mix_col:
            st.plotly_chart(build_specialty_mix_figure(brief.get("specialtyCounts", {})), use_container_width=True)

        st.dataframe(sources_to_frame(sources), use_container_width=True, hide_index=True)
