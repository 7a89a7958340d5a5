"""marketplace.py

Streamlit page that lists every NFT of the marketplace.

Key features
------------
* Pulls the listing through the session ``CachedStore`` – a new
  auto-refresh tick drops the cached listing so prices and owners stay live.
* Lets the user **filter** by creator and hide already sold items.
* Shows a price histogram and a table with a 🔍 link to each detail page.
"""

from __future__ import annotations

import plotly.express as px
import streamlit as st

from purenft.services import MarketService
from purenft.services.errors import StoreError
from purenft.services.market import NFTS
from ._helpers import get_store, get_viewer, nft_frame, report_failure


def render() -> None:  # noqa: D401 – imperative mood is clearer here
    """Render the **Marketplace** page."""

    st.title("Marketplace")
    store = get_store()

    # ------------------------------------------------------------------
    # Auto-refresh tick → stale listing
    # ------------------------------------------------------------------
    curr_tick = st.session_state.get("refresh", 0)
    last_tick = st.session_state.get("_last_refresh_tick")
    if last_tick is not None and curr_tick != last_tick:
        store.invalidate(NFTS, {})
    st.session_state["_last_refresh_tick"] = curr_tick

    # ------------------------------------------------------------------
    # 1) Fetch the listing
    # ------------------------------------------------------------------
    viewer = get_viewer()
    try:
        items = MarketService(store).list_items()
    except StoreError as exc:
        report_failure("load the marketplace", exc)
        st.info("The marketplace is unavailable right now.")
        return

    if not items:
        st.info("No NFTs listed yet.")
        return

    df_raw = nft_frame(items, viewer.user_id)

    # ------------------------------------------------------------------
    # 2) Filters
    # ------------------------------------------------------------------
    with st.expander("Filters", expanded=False):
        creator_opts = sorted(df_raw["Creator"].unique())
        creator_sel = st.multiselect(
            "Creator", creator_opts, default=creator_opts, key="creator_filter"
        )
        hide_sold = st.checkbox("Hide sold items", value=False, key="hide_sold")

    mask = df_raw["Creator"].isin(creator_sel)
    if hide_sold:
        mask &= df_raw["State"] != "🔒 Sold"
    df = df_raw[mask].sort_values("price", ascending=False).reset_index(drop=True)

    st.caption(f"🖼️ Loaded {len(df_raw)} NFTs (showing {len(df)})")
    if df.empty:
        st.info("No NFTs match the filters.")
        return

    # ------------------------------------------------------------------
    # 3) Price distribution
    # ------------------------------------------------------------------
    fig = px.histogram(df, x="price", nbins=20, labels={"price": "Price"})
    fig.update_layout(height=300, margin=dict(t=20, b=20, l=20, r=20), bargap=0.05)
    st.plotly_chart(fig, width="stretch")

    # ------------------------------------------------------------------
    # 4) Listing table
    # ------------------------------------------------------------------
    height_calc = min(35 * (1 + len(df)) + 5, 800)
    st.dataframe(
        df,
        hide_index=True,
        width="stretch",
        height=height_calc,
        column_order=["Details", "Name", "Creator", "Price", "Standard", "State"],
        column_config={
            "Details": st.column_config.LinkColumn(
                label=" ",
                display_text="🔍",
                max_chars=1,
                help="View NFT details",
            ),
        },
    )
