"""_helpers.py

Utility helpers shared by multiple Streamlit pages.

The module groups four kinds of helpers:

1. **Session plumbing** – the signed-in ``Viewer`` and the per-session
   ``CachedStore`` live in ``st.session_state``; pages fetch them here and
   pass them to the services explicitly.
2. **Navigation** – ``update_page`` keeps ``?page=`` in sync with the
   sidebar and ``go_to_page`` switches page from inside a page.
3. **Notices** – ``notify`` queues a toast that ``flush_notices`` shows at
   the end of the script run; ``report_failure`` logs a store failure and
   queues the generic error notice.
4. **Formatting** – amounts, dates, purchasability labels, detail links.
"""

from __future__ import annotations

# Third-party -----------------------------------------------------------------
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal
from zoneinfo import ZoneInfo

import pandas as pd
import streamlit as st

# Project ---------------------------------------------------------------------
from purenft.config import settings
from purenft.services import (
    ANONYMOUS,
    CachedStore,
    Viewer,
    build_auth,
    build_store,
    purchasability_state,
)
from purenft.services.auth import AuthClient
from purenft.services.model import AlreadyPurchasedByOther, Owned, Purchasability, Purchasable

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# 0) Session plumbing
# -----------------------------------------------------------------------------

def get_viewer() -> Viewer:
    return st.session_state.get("viewer", ANONYMOUS)


# Page state that belongs to one signed-in user.
USER_STATE_KEYS = ("_store", "_pending_deposit", "_fraud_warning", "hide_nickname_box")


def set_viewer(viewer: Viewer) -> None:
    """Switch the session to *viewer* and drop everything kept for the old one."""
    st.session_state["viewer"] = viewer
    for key in USER_STATE_KEYS:
        st.session_state.pop(key, None)


def get_store() -> CachedStore:
    """Per-session store bound to the current viewer's token."""
    viewer = get_viewer()
    store = st.session_state.get("_store")
    if store is None or st.session_state.get("_store_token") != viewer.access_token:
        store = build_store(viewer.access_token)
        st.session_state["_store"] = store
        st.session_state["_store_token"] = viewer.access_token
    return store


def get_auth() -> AuthClient:
    if "_auth" not in st.session_state:
        st.session_state["_auth"] = build_auth()
    return st.session_state["_auth"]

# -----------------------------------------------------------------------------
# 1) Navigation
# -----------------------------------------------------------------------------

PAGES = ("Marketplace", "Profile")


def update_page(page: None | str = None) -> None:
    """Update the ?page=... query-parameter in the URL.

    Parameters
    ----------
    page : None | str
        The new page value to set or None to copy the sidebar selection.
    """
    if page is None:
        st.query_params.update(page=st.session_state.sidebar_page)
    else:
        st.query_params.update(page=page)


def go_to_page(page: str) -> None:
    """Leave the current (sub-)page for *page* and rerun immediately."""
    # The sidebar radio is already drawn in this run; main.py applies it next run.
    st.session_state["_goto_page"] = page
    if "nft_id" in st.query_params:
        del st.query_params["nft_id"]
    update_page(page)
    st.rerun()

# -----------------------------------------------------------------------------
# 2) Notices
# -----------------------------------------------------------------------------

_NOTICE_ICON = {"default": "✅", "error": "🚨"}


def notify(title: str, body: str, variant: Literal["default", "error"] = "default") -> None:
    """Queue a toast – shown once the current action has finished."""
    st.session_state.setdefault("_notices", []).append((title, body, variant))


def flush_notices() -> None:
    for title, body, variant in st.session_state.pop("_notices", []):
        st.toast(f"**{title}** – {body}", icon=_NOTICE_ICON.get(variant, "ℹ️"))


def report_failure(action: str, exc: Exception) -> None:
    """Log a store failure and queue the generic error notice for *action*."""
    logger.error("failed to %s: %s", action, exc, exc_info=exc)
    notify("Error", f"Failed to {action}. Please try again.", "error")

# -----------------------------------------------------------------------------
# 3) Formatting helpers
# -----------------------------------------------------------------------------

ZERO_DISPLAY = "--"  # Default display for missing values
DATE_FMT = "%Y-%m-%d"


def _remove_small_zeros(num_str: str) -> str:  # noqa: D401 – short desc fine
    """Strip redundant trailing zeros from a *decimal* string.

    Examples
    --------
    >>> _remove_small_zeros('1.230000')
    '1.23'
    >>> _remove_small_zeros('42.000')
    '42'
    >>> _remove_small_zeros('100')
    '100'
    """
    if "." not in num_str:
        return num_str
    return num_str.rstrip("0").rstrip(".")


def fmt_amount(value: Decimal | float | int | None, unity: str | None = None) -> str:
    """Exact, human-readable amount with thousands separators.

    ``Decimal('1.50')`` → ``"1.5"``; ``None`` → ``ZERO_DISPLAY``.
    """
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ZERO_DISPLAY
    formatted = _remove_small_zeros(f"{Decimal(str(value)):,f}")
    if unity:
        formatted += f" {unity}"
    return formatted


def fmt_eth(value: Decimal | float | int | None) -> str:
    return fmt_amount(value, settings()["CURRENCY"])


def fmt_date(ts: datetime | None, fmt: str = DATE_FMT) -> str:
    """Convert a UTC datetime (naive → assumed UTC) to the local zone and format it."""
    if ts is None:
        return ZERO_DISPLAY
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(ZoneInfo(settings()["LOCAL_TZ"])).strftime(fmt)


def fmt_state(state: Purchasability) -> str:
    """One-word purchasability label with a status light."""
    if isinstance(state, Owned):
        return "✅ Owned"
    if isinstance(state, AlreadyPurchasedByOther):
        return "🔒 Sold"
    if isinstance(state, Purchasable):
        return "🟢 For sale"
    raise TypeError(f"Unknown purchasability state: {state!r}")

# -----------------------------------------------------------------------------
# 4) DataFrame manipulation helpers
# -----------------------------------------------------------------------------

def _add_details_column(
    df: pd.DataFrame,
    *,
    id_col: str = "id",
    new_col: str = "Details",
    path_template: str = "?nft_id={nid}",
) -> pd.DataFrame:
    """Append a column with relative links to the NFT detail page.

    Returns a *copy* of *df*; empty frames are returned unchanged.
    """
    df = df.copy()
    if not df.empty:
        df[new_col] = df[id_col].astype(str).map(lambda nid: path_template.format(nid=nid))
    return df


def nft_frame(items, viewer_id: str | None) -> pd.DataFrame:
    """Tidy DataFrame of NFTs (one row each) used by listing tables."""
    records = [
        {
            "id": item.id,
            "Name": item.name,
            "Creator": item.creator,
            "price": float(item.price),
            "Price": fmt_eth(item.price),
            "Standard": item.token_standard,
            "State": fmt_state(purchasability_state(item, viewer_id)),
        }
        for item in items
    ]
    return _add_details_column(pd.DataFrame(records))
