"""
Discovery Chat

Conversational interview that works out the ideal referral partners and,
once enough is known, proposes an outreach strategy.
Backed by:
- /api/chat/discovery (POST turn, DELETE reset)
"""

import os
import sys

import streamlit as st

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if ROOT_DIR not in sys.path:
    sys.path.append(ROOT_DIR)

from core.ui_helpers import delete_backend, post_backend
from ui.components.backend_status import render_status_bar

st.set_page_config(page_title="Discovery Chat", layout="wide")

st.title("💬 Discovery Chat")
st.caption("Tell us about your practice; we'll work out who should be sending you patients.")
render_status_bar()

with st.sidebar:
    st.header("Account")
    user_id = st.text_input("User ID", key="user_id")
    if st.button("🔄 Start over") and user_id:
        delete_backend("/api/chat/discovery", {"userId": user_id})
        st.session_state["discovery"] = {"messages": [], "extracted": {}, "strategy": None}

if not user_id:
    st.info("Enter your user ID in the sidebar to start.")
    st.stop()

state = st.session_state.setdefault("discovery", {"messages": [], "extracted": {}, "strategy": None})

if not state["messages"]:
    opening = post_backend("/api/chat/discovery", {"userId": user_id})
    if opening.get("message"):
        state["messages"].append({"role": "assistant", "content": opening["message"]})

for msg in state["messages"]:
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])

prompt = st.chat_input("Your answer")
if prompt:
    state["messages"].append({"role": "user", "content": prompt})
    reply = post_backend("/api/chat/discovery", {"userId": user_id, "message": prompt})
    if reply.get("message"):
        state["messages"].append({"role": "assistant", "content": reply["message"]})
        state["extracted"] = reply.get("extractedData") or state["extracted"]
        state["strategy"] = reply.get("proposedStrategy")
    st.rerun()

if state["extracted"]:
    with st.sidebar.expander("What we've learned", expanded=False):
        st.json(state["extracted"])

strategy = state.get("strategy")
if strategy:
    st.markdown("---")
    st.subheader("🎯 Proposed outreach strategy")
    st.json(strategy)
