"""profile.py

Streamlit page for the signed-in user's **profile & wallet**.

Main features
-------------
* Header with login and balance (one decimal, straight from the last
  full profile load – a withdrawal request does not change it).
* *Profile* tab: email, country, wallet address generation, nickname
  visibility.
* *Settings* tab: password change and sign-out.
* *Wallet* tab: deposit (confirmation step → rejection notice), withdraw
  (pending transaction) and the 10 most recent transactions.
* *NFT* tab: the viewer's own NFTs.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from purenft.config import settings
from purenft.services import ANONYMOUS, MarketService, WalletService
from purenft.services.errors import MissingPrerequisite, StoreError, ValidationError
from purenft.services.model import UserProfile
from ._colors import _row_style, status_label
from ._helpers import (
    fmt_date,
    fmt_eth,
    get_auth,
    get_store,
    get_viewer,
    go_to_page,
    nft_frame,
    notify,
    report_failure,
    set_viewer,
)

LIMITS_HELP = (
    "Due to the fact that you have only recently created your account, "
    "we are forced to limit the number of orders that you can join. "
    "This limit is updated every month."
)

# -----------------------------------------------------------------------------
# Page renderer
# -----------------------------------------------------------------------------

def render() -> None:  # noqa: D401 – imperative mood is fine
    """Entry-point for Streamlit – draw the **Profile** page.

    Workflow
    --------
    1. Bail out with an info box for anonymous viewers.
    2. Full profile load (never cached); absent profile → neutral info.
    3. Header metrics, then one tab per concern.
    """

    st.title("Profile")
    viewer = get_viewer()
    if not viewer.is_authenticated:
        st.info("Log in from the sidebar to see your profile.")
        return

    wallet = WalletService(get_store(), viewer)
    try:
        profile = wallet.load_profile()
    except StoreError as exc:
        report_failure("fetch user data", exc)
        st.error("Could not load your profile.")
        return

    if profile is None:
        st.info("No profile found for this account.")
        return

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------
    c1, c2 = st.columns(2)
    c1.metric("Login", f"@{profile.login}" if profile.login else "--")
    c2.metric("Balance", f"{profile.display_balance} {settings()['CURRENCY']}")

    tab_profile, tab_settings, tab_wallet, tab_nft = st.tabs(
        ["👤 Profile", "⚙️ Settings", "👛 Wallet", "🛍️ NFT"]
    )
    with tab_profile:
        _render_profile_tab(wallet, profile)
    with tab_settings:
        _render_settings_tab()
    with tab_wallet:
        _render_wallet_tab(wallet, profile)
    with tab_nft:
        _render_nft_tab()

# -----------------------------------------------------------------------------
# Tabs
# -----------------------------------------------------------------------------

def _render_profile_tab(wallet: WalletService, profile: UserProfile) -> None:
    st.subheader("Profile Information")
    c1, c2 = st.columns(2)
    c1.text_input("Email", value=profile.email, disabled=True)
    c2.text_input("Country", value=profile.country, disabled=True)

    addr_col, std_col = st.columns([0.8, 0.2])
    addr_col.text_input(
        "Wallet Address",
        value=profile.wallet_address or "",
        placeholder="No wallet address generated",
        disabled=True,
    )
    if profile.wallet_address:
        std_col.text_input("Standard", value="ERC-20", disabled=True)
    elif std_col.button("Generate Address"):
        try:
            wallet.save_wallet_address(wallet.generate_wallet_address())
        except StoreError as exc:
            report_failure("save wallet address", exc)
        else:
            notify("Success", "Wallet address has been generated and saved.")
            st.rerun()

    st.checkbox(
        "Hide my nickname from other users",
        value=profile.hide_nickname,
        key="hide_nickname_box",
        on_change=_toggle_nickname,
        args=(wallet,),
    )


def _toggle_nickname(wallet: WalletService) -> None:
    hide = st.session_state["hide_nickname_box"]
    try:
        wallet.set_hide_nickname(hide)
    except StoreError as exc:
        report_failure("update nickname visibility", exc)
    else:
        notify("Success", f"Nickname visibility {'hidden' if hide else 'visible'}")


def _render_settings_tab() -> None:
    st.subheader("Change Password")
    with st.form("password_form", clear_on_submit=True):
        st.text_input("Current Password", type="password")
        new_password = st.text_input("New Password", type="password")
        confirm_password = st.text_input("Confirm New Password", type="password")
        submitted = st.form_submit_button("Update Password")

    if submitted:
        try:
            get_auth().update_password(get_viewer(), new_password, confirm_password)
        except (ValidationError, MissingPrerequisite) as exc:
            st.error(str(exc))
        except StoreError as exc:
            report_failure("update password", exc)
        else:
            notify("Success", "Password has been updated")

    st.markdown("---")
    if st.button("Log out"):
        try:
            get_auth().sign_out(get_viewer())
        except StoreError as exc:
            report_failure("log out", exc)
            return
        set_viewer(ANONYMOUS)
        notify("Success", "Logged out successfully")
        go_to_page("Marketplace")


def _render_wallet_tab(wallet: WalletService, profile: UserProfile) -> None:
    currency = settings()["CURRENCY"]
    st.subheader("Wallet Operations")
    st.caption("My Limits - 0 / 5", help=LIMITS_HELP)

    dep_col, wd_col = st.columns(2)

    # ------------------------------------------------------------------
    # Deposit – request → confirmation step → rejection notice
    # ------------------------------------------------------------------
    with dep_col:
        with st.form("deposit_form", clear_on_submit=True):
            st.markdown(f"**Deposit {currency}**")
            dep_amount = st.text_input(f"Amount ({currency})", placeholder="0.00")
            dep_submitted = st.form_submit_button("Continue")
        if dep_submitted:
            st.session_state.pop("_pending_deposit", None)
            try:
                st.session_state["_pending_deposit"] = wallet.request_deposit(dep_amount, profile)
            except (ValidationError, MissingPrerequisite) as exc:
                st.error(str(exc))

        pending = st.session_state.get("_pending_deposit")
        if pending is not None:
            st.info(
                f"Send **{fmt_eth(pending.amount)}** to `{pending.wallet_address}` "
                "and confirm once the transfer is done."
            )
            ok_col, cancel_col = st.columns(2)
            if ok_col.button("Confirm deposit"):
                outcome = wallet.confirm_deposit(st.session_state.pop("_pending_deposit"))
                st.session_state["_fraud_warning"] = outcome.message
                notify("Rejected", outcome.message, "error")
                st.rerun()
            if cancel_col.button("Cancel"):
                st.session_state.pop("_pending_deposit", None)
                st.rerun()

        warning = st.session_state.get("_fraud_warning")
        if warning:
            st.warning(warning, icon="⚠️")
            if st.button("Close"):
                st.session_state.pop("_fraud_warning", None)
                st.rerun()

    # ------------------------------------------------------------------
    # Withdraw – local checks, then one pending row
    # ------------------------------------------------------------------
    with wd_col:
        with st.form("withdraw_form", clear_on_submit=True):
            st.markdown(f"**Withdraw {currency}**")
            wd_amount = st.text_input(f"Amount ({currency})", placeholder="0.00")
            wd_submitted = st.form_submit_button("Confirm Withdrawal")
        if wd_submitted:
            try:
                value = wallet.request_withdraw(wd_amount, profile)
            except ValidationError as exc:
                st.error(str(exc))
            except StoreError as exc:
                report_failure("process withdrawal", exc)
            else:
                notify(
                    "Withdrawal Requested",
                    f"Your withdrawal request for {fmt_eth(value)} has been submitted",
                )

    st.markdown("---")
    _render_transactions(wallet)


def _render_transactions(wallet: WalletService) -> None:
    st.subheader("Transaction History")
    try:
        txs = wallet.list_transactions()
    except StoreError as exc:
        report_failure("load transactions", exc)
        return

    if not txs:
        st.info("No transactions found")
        return

    df = pd.DataFrame(
        [
            {
                "Date": fmt_date(t.created_at),
                "Type": t.type.capitalize(),
                "Amount": fmt_eth(t.amount),
                "Status": status_label(t.status),
                "status": t.status,
            }
            for t in txs
        ]
    )
    st.dataframe(
        df.style.apply(_row_style, axis=1),
        hide_index=True,
        width="stretch",
        column_order=["Date", "Type", "Amount", "Status"],
    )


def _render_nft_tab() -> None:
    st.subheader("Your NFT Collection")
    viewer = get_viewer()
    try:
        items = MarketService(get_store()).list_owned(viewer)
    except StoreError as exc:
        report_failure("load your NFTs", exc)
        return

    if not items:
        st.info("You don't own any NFTs yet. Visit the marketplace to find one.")
        return

    st.dataframe(
        nft_frame(items, viewer.user_id),
        hide_index=True,
        width="stretch",
        column_order=["Details", "Name", "Creator", "Price", "Standard"],
        column_config={
            "Details": st.column_config.LinkColumn(label=" ", display_text="🔍", max_chars=1),
        },
    )
