"""nft_detail.py

Streamlit sub-page that shows a **single NFT** in depth.

It is opened when the user clicks the 🔍 link in the Marketplace table
(``?nft_id=...``). The page:

1. Pulls the item (and, for a signed-in viewer, their balance) through
   the session cache.
2. Shows image, creator, description and price.
3. Derives the purchasability state and draws the matching affordance:
   *Owned*, *Sold* or a **Buy** button.
4. After a purchase request, invalidates the stale reads and redirects
   to the profile page.
5. Lists the token standard and the NFT's properties.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from purenft.services import MarketService, purchasability_state
from purenft.services.errors import ItemUnavailable, MissingPrerequisite, StoreError, ValidationError
from purenft.services.model import AlreadyPurchasedByOther, Owned, Purchasable
from ._helpers import fmt_eth, get_store, get_viewer, go_to_page, notify, report_failure


def render(nft_id: str) -> None:  # noqa: D401
    """Render the *NFT Details* page for a given ``nft_id``."""

    # ------------------------------------------------------------------
    # Back navigation – remove "nft_id" query param and rerun main page
    # ------------------------------------------------------------------
    if st.button("← Back to Marketplace"):
        go_to_page("Marketplace")

    viewer = get_viewer()
    market = MarketService(get_store())

    # ------------------------------------------------------------------
    # Fetch item (+ viewer balance) through the cache
    # ------------------------------------------------------------------
    try:
        item = market.load_item(nft_id)
        balance = market.load_viewer_balance(viewer) if item is not None else None
    except StoreError as exc:
        report_failure("load this NFT", exc)
        st.error("Could not load this NFT.")
        return

    if item is None:
        st.info("NFT not found")
        return

    state = purchasability_state(item, viewer.user_id)

    # ------------------------------------------------------------------
    # 1) Header – image left, facts right
    # ------------------------------------------------------------------
    left, right = st.columns(2)
    with left:
        if item.image:
            st.image(item.image, width="stretch")

    with right:
        st.header(item.name)
        st.caption(f"by {item.creator}" if item.creator else "Unknown creator")
        if item.description:
            st.markdown(item.description)

        c1, c2 = st.columns(2)
        c1.metric("Price", fmt_eth(item.price))
        if balance is not None:
            c2.metric("Your balance", fmt_eth(balance))

        # --------------------------------------------------------------
        # 2) Purchase affordance – one branch per state
        # --------------------------------------------------------------
        if isinstance(state, Owned):
            st.success("You own this NFT")
        elif isinstance(state, AlreadyPurchasedByOther):
            st.warning("This NFT has already been purchased")
        elif isinstance(state, Purchasable):
            if not viewer.is_authenticated:
                st.info("Log in from the sidebar to purchase this NFT.")
            elif st.button("Buy now", type="primary"):
                _purchase(market, item, viewer, balance)
        else:
            raise TypeError(f"Unknown purchasability state: {state!r}")

    st.markdown("---")

    # ------------------------------------------------------------------
    # 3) Details – token standard & properties
    # ------------------------------------------------------------------
    st.subheader("Details")
    st.metric("Token standard", item.token_standard)
    if item.properties:
        df_props = pd.DataFrame(
            [{"Trait": p.trait_type, "Value": p.value} for p in item.properties]
        )
        st.dataframe(df_props, hide_index=True, width="stretch")
    else:
        st.caption("This NFT has no properties.")


def _purchase(market: MarketService, item, viewer, balance) -> None:
    try:
        market.request_purchase(item, viewer, balance)
    except (ValidationError, MissingPrerequisite, ItemUnavailable) as exc:
        st.error(str(exc))
        return
    except StoreError as exc:
        report_failure("process your purchase", exc)
        return

    st.success("Purchase initiated – processing your purchase...")
    notify("Purchase initiated", f"Your purchase of {item.name} is being processed")
    market.on_purchase_complete(item.id, viewer.user_id, lambda: go_to_page("Profile"))
