"""_colors.py

Colour utilities for the **Transaction history** dataframe.

The module provides:
* Emoji *status lights* (``_STATUS_LIGHT``) shown next to each status.
* A base palette (``_BG0``) mapping transaction status → colour.
* Functions to dim a colour towards black (``_color_interp``), pick a
  legible text colour (``contrast_text_color``) and build the CSS list the
  pandas ``Styler`` expects (``_row_style``).
"""

from __future__ import annotations

from typing import List

import pandas as pd

# -----------------------------------------------------------------------------
# PUBLIC CONSTANTS – status → emoji / colour
# -----------------------------------------------------------------------------
_STATUS_LIGHT: dict[str, str] = {
    "pending": "🟡",
    "completed": "🟢",
    "failed": "🔴",
}

_BG0: dict[str, str] = {
    "pending": "#eab308",  # yellow
    "completed": "#22c55e",  # green
    "failed": "#ef4444",  # red
}

# Share of black blended into the base colour – keeps the badge subtle.
DIM = 0.8

# -----------------------------------------------------------------------------
# Helper functions (internal)
# -----------------------------------------------------------------------------

def _color_interp(c0: str, t: float) -> str:  # noqa: D401 – short desc ok
    """Return a **darkened** version of *c0* by blending with black.

    Parameters
    ----------
    c0 : str
        Hex colour "#RRGGBB" (no shorthand allowed).
    t : float
        Fraction 0 ≤ `t` ≤ 1. 0 ⇒ original colour; 1 ⇒ black.
    """
    r0, g0, b0 = int(c0[1:3], 16), int(c0[3:5], 16), int(c0[5:7], 16)
    r = round(r0 * (1 - t))
    g = round(g0 * (1 - t))
    b = round(b0 * (1 - t))
    return f"#{r:02x}{g:02x}{b:02x}"


def contrast_text_color(bg_hex: str) -> str:  # noqa: D401
    """Pick black or white text for best contrast on *bg_hex* (YIQ luminance)."""
    h = bg_hex.lstrip("#")
    if len(h) == 3:  # allow shorthand e.g. #fff
        h = "".join(ch * 2 for ch in h)
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return "#000000" if yiq >= 128 else "#ffffff"


def status_label(status: str) -> str:
    return f"{_STATUS_LIGHT.get(status, '⚪')} {status.capitalize()}"

# -----------------------------------------------------------------------------
# Main styling hook used by dataframe.style.apply
# -----------------------------------------------------------------------------

def _row_style(row: pd.Series, *, status_col: str = "status", dim: float = DIM) -> List[str]:
    """Return one CSS string per cell: only the *Status* cell gets a badge colour.

    *row* must carry the raw status (``pending``/``completed``/``failed``)
    in ``status_col``; unknown statuses leave the row unstyled.
    """
    base = _BG0.get(str(row.get(status_col, "")).lower())
    if base is None:
        return [""] * len(row)

    bg = _color_interp(base, dim)
    fg = base if contrast_text_color(bg) == "#ffffff" else "#000000"
    style = f"background-color:{bg};color:{fg}"
    return [style if col == "Status" else "" for col in row.index]
