"""Registry of Streamlit pages so main.py can route dynamically."""
from typing import Callable

from . import marketplace, nft_detail, profile

Page = Callable[[], None]

registry: dict[str, Page] = {
    "Marketplace": marketplace.render,
    "Profile": profile.render,
}

__all__ = ["nft_detail", "registry"]
