"""market.py

NFT listing, detail and purchase flow.

Reads go through the session ``CachedStore`` so navigating back and forth
between the marketplace and detail pages does not hammer the store. A
completed purchase invalidates exactly the reads it made stale.
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import Callable

from purenft.config import settings

from .auth import Viewer
from .cache import CachedStore
from .errors import InsufficientFunds, ItemUnavailable, NotSignedIn, malformed_rows
from .model import NFT, AlreadyPurchasedByOther, Owned, Purchasability, Purchasable

logger = logging.getLogger(__name__)

NFTS = "nfts"
PROFILES = "profiles"
TRANSACTIONS = "transactions"


def purchasability_state(item: NFT, viewer_id: str | None) -> Purchasability:
    """Classify *item* for *viewer_id*; ``Owned`` wins over any other owner."""
    if item.owner_id is not None and viewer_id is not None and item.owner_id == viewer_id:
        return Owned()
    if item.owner_id is not None:
        return AlreadyPurchasedByOther(owner_id=item.owner_id)
    return Purchasable(price=item.price)


class MarketService:
    def __init__(self, store: CachedStore):
        self.store = store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_items(self) -> list[NFT]:
        rows = self.store.select(NFTS)
        with malformed_rows(NFTS):
            return [NFT.model_validate(r) for r in rows]

    def list_owned(self, viewer: Viewer) -> list[NFT]:
        if not viewer.is_authenticated:
            return []
        rows = self.store.select(NFTS, eq={"owner_id": viewer.user_id})
        with malformed_rows(NFTS):
            return [NFT.model_validate(r) for r in rows]

    def load_item(self, item_id: str) -> NFT | None:
        """Fetch one NFT; ``None`` means *not found*, which is not an error."""
        row = self.store.select_one(NFTS, eq={"id": item_id})
        if not row:
            return None
        with malformed_rows(NFTS):
            return NFT.model_validate(row)

    def load_viewer_balance(self, viewer: Viewer) -> Decimal | None:
        """Balance of the signed-in viewer; no store call for anonymous viewers."""
        if not viewer.is_authenticated:
            return None
        row = self.store.select_one(PROFILES, eq={"user_id": viewer.user_id}, columns="balance")
        if row is None:
            return None
        with malformed_rows(PROFILES):
            balance = Decimal(str(row.get("balance") or 0))
            if not balance.is_finite() or balance < 0:
                raise ValueError(f"balance must be a non-negative number, got {balance}")
        return balance

    # ------------------------------------------------------------------
    # Purchase
    # ------------------------------------------------------------------

    def request_purchase(self, item: NFT, viewer: Viewer, balance: Decimal | None) -> None:
        """Record a pending purchase of *item*; settlement happens server-side."""
        if not viewer.is_authenticated:
            raise NotSignedIn()
        state = purchasability_state(item, viewer.user_id)
        if isinstance(state, Owned):
            raise ItemUnavailable("You already own this NFT")
        if isinstance(state, AlreadyPurchasedByOther):
            raise ItemUnavailable("This NFT has already been purchased")

        available = balance if balance is not None else Decimal("0")
        if available < item.price:
            raise InsufficientFunds(available, item.price)

        self.store.insert(
            TRANSACTIONS,
            [
                {
                    "user_id": viewer.user_id,
                    "type": "purchase",
                    "amount": str(item.price),
                    "status": "pending",
                    "item": item.id,
                }
            ],
        )
        logger.info("purchase of nft %s requested by user %s", item.id, viewer.user_id)

    def on_purchase_complete(
        self,
        item_id: str,
        viewer_id: str | None,
        navigate: Callable[[], None],
        *,
        delay: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Drop stale reads, wait for the success notice, then redirect."""
        self.store.invalidate(NFTS, {"id": item_id})
        if viewer_id is not None:
            self.store.invalidate(PROFILES, {"user_id": viewer_id})
            self.store.invalidate(NFTS, {"owner_id": viewer_id})
        self.store.invalidate(NFTS, {})  # listing

        sleep(settings()["REDIRECT_DELAY_SECONDS"] if delay is None else delay)
        navigate()
