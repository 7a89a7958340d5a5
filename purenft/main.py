"""main.py

Streamlit **entry-point** for the PureNFT marketplace.

Responsibilities
----------------
* Define global page layout (wide view, expanded sidebar, title).
* Configure logging once per process from ``LOG_LEVEL``.
* Sidebar: sign-in form (or the signed-in login) and a **navigation
  radio** – "Marketplace" vs "Profile".
* Poll URL query-params so a direct link such as ``...?nft_id=42`` opens
  the *NFT Details* sub-page immediately.
* Auto-refresh every *REFRESH_SECONDS* so the listing stays live.
* Flush queued notices once the page has been drawn.

Run with ``streamlit run purenft/main.py``.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Third-party imports
# -----------------------------------------------------------------------------
import logging

import streamlit as st
from streamlit_autorefresh import st_autorefresh

# -----------------------------------------------------------------------------
# 0) Global page configuration – must run before any Streamlit call
# -----------------------------------------------------------------------------
st.set_page_config(
    page_title="PureNFT",
    page_icon="🖼️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# -----------------------------------------------------------------------------
# Local imports (after Streamlit initialisation)
# -----------------------------------------------------------------------------
from purenft import APP_NAME
from purenft.config import settings
from purenft.services.errors import StoreError
from purenft._pages import nft_detail, registry
from purenft._pages._helpers import (
    PAGES,
    flush_notices,
    get_auth,
    get_viewer,
    notify,
    report_failure,
    set_viewer,
    update_page,
)

logging.basicConfig(
    level=settings()["LOG_LEVEL"],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# -----------------------------------------------------------------------------
# 1) Sidebar – account
# -----------------------------------------------------------------------------
st.sidebar.title(APP_NAME)
viewer = get_viewer()

if viewer.is_authenticated:
    st.sidebar.markdown(f"👤 **{viewer.user.login or viewer.user.email or 'Profile'}**")
else:
    with st.sidebar.form("login_form", clear_on_submit=False):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login")
    if submitted:
        try:
            set_viewer(get_auth().sign_in(email, password))
        except StoreError as exc:
            report_failure("log in", exc)
        else:
            notify("Success", "Logged in successfully")
            st.rerun()

# -----------------------------------------------------------------------------
# 2) Sidebar – navigation radio
# -----------------------------------------------------------------------------
params = st.query_params
nft_id = params.get("nft_id")

# Page switch requested by a page in the previous run
goto = st.session_state.pop("_goto_page", None)
if goto in PAGES:
    st.session_state["sidebar_page"] = goto

initial_page = params.get("page", "Marketplace")
if initial_page not in PAGES:
    initial_page = "Marketplace"

# Seed the radio once; afterwards session_state is the source of truth
st.session_state.setdefault("sidebar_page", initial_page)
page = st.sidebar.radio("Navigate", PAGES, key="sidebar_page", on_change=update_page)

# -----------------------------------------------------------------------------
# 3) Auto-refresh – keeps the listing up-to-date without F5
# -----------------------------------------------------------------------------
# The key "refresh" is also read by the marketplace page to detect reruns.
if settings()["REFRESH_SECONDS"] > 0 and page == "Marketplace" and not nft_id:
    st_autorefresh(interval=settings()["REFRESH_SECONDS"] * 1000, key="refresh")

# -----------------------------------------------------------------------------
# 4) Routing logic – NFT details page has priority
# -----------------------------------------------------------------------------
if nft_id:
    nft_detail.render(nft_id=nft_id)
else:
    registry[page]()

flush_notices()
