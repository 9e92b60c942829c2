"""
Sleft Signals — Streamlit Launcher
----------------------------------
Main entrypoint for the Sleft Signals multipage app.
This file ensures Streamlit loads all pages under ui/pages/.
"""

import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

import streamlit as st

from ui.components.backend_status import render_status_bar

st.set_page_config(page_title="Sleft Signals", layout="wide")

st.title("🤝 Welcome to Sleft Signals")
st.caption("Find the local practices that already send patients like yours")

st.markdown("""
Use the sidebar to navigate between pages:
- **Referral Snapshot** (adjacent specialties, scored referral sources)
- **Strategy Briefs** (generate, browse, delete)
- **Discovery Chat** (talk through your ideal partners)
- **Network Hub** (community feed, vendor reviews, partner matches, insights)
- **System Overview** (backend health and integrations)
""")

st.markdown("---")
st.info("Start exploring via the left sidebar navigation.")
render_status_bar()
st.caption("© 2026 Sleft Health — Referral Partner Intelligence")
