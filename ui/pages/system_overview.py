# Ensure the app root is in the import path
import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

"""
Sleft Signals — System Overview
-------------------------------
Mission control for backend and integration health.

- Displays backend and Supabase status
- Confirms backend connectivity via /health and /status/summary
- Lists which external integrations are configured
"""

import pandas as pd
import streamlit as st

from core.ui_helpers import fetch_backend
from ui.components.backend_status import render_status_bar


# ----------------------------------------------------------------------------
# 1. Page Setup
# ----------------------------------------------------------------------------
st.set_page_config(page_title="Sleft Signals — System Overview", layout="wide")
st.title("🛰️ System Overview")
st.caption("Backend health, integrations and conversation cache at a glance.")
render_status_bar(expanded=True)


# ----------------------------------------------------------------------------
# 2. Backend Connectivity
# ----------------------------------------------------------------------------
col1, col2 = st.columns(2)

with col1:
    st.subheader("🔌 Backend Connection")
    health = fetch_backend("/health")
    if health:
        st.success("Backend reachable ✅")
        st.json(health)

with col2:
    st.subheader("🧩 System Summary")
    summary = fetch_backend("/status/summary")
    if summary:
        k1, k2 = st.columns(2)
        conversations = summary.get("conversations", {})
        k1.metric("Discovery chats", conversations.get("discovery", 0))
        k2.metric("Onboarding chats", conversations.get("onboarding", 0))
        st.json(summary)


# ----------------------------------------------------------------------------
# 3. Integrations
# ----------------------------------------------------------------------------
st.markdown("---")
st.subheader("🔗 Integrations")

integrations = (summary or {}).get("integrations", {})
if integrations:
    st.dataframe(
        pd.DataFrame(
            [{"Integration": k, "Configured": "✅" if v else "—"} for k, v in integrations.items()]
        ),
        use_container_width=True,
        hide_index=True,
    )
else:
    st.info("No integration data available.")


# ----------------------------------------------------------------------------
# 4. Footer
# ----------------------------------------------------------------------------
st.markdown("---")
st.caption("© 2026 Sleft Health — Referral Partner Intelligence")
