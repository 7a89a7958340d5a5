"""wallet.py

Wallet request flow behind the *Profile* page.

* ``request_withdraw`` validates locally and appends one *pending*
  ``withdraw`` row – it never touches the balance, which only changes when
  the profile is loaded again.
* ``request_deposit`` / ``confirm_deposit`` open a confirmation step that
  always ends in a ``DepositRejected`` outcome; deposits persist nothing.
* ``list_transactions`` returns at most ``TRANSACTIONS_LIMIT`` rows,
  newest first.
"""

from __future__ import annotations

import logging
import secrets
from decimal import Decimal, InvalidOperation

from purenft.config import settings

from .auth import Viewer
from .cache import CachedStore
from .errors import (
    InsufficientFunds,
    InvalidAmount,
    MissingWalletAddress,
    NotSignedIn,
    malformed_rows,
)
from .model import AuthUser, DepositConfirmation, DepositRejected, Transaction, UserProfile

logger = logging.getLogger(__name__)

PROFILES = "profiles"
TRANSACTIONS = "transactions"


def parse_amount(raw) -> Decimal:
    """Turn user input into a positive, finite ``Decimal`` or raise ``InvalidAmount``."""
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(raw) from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount(raw)
    return amount


class WalletService:
    def __init__(self, store: CachedStore, viewer: Viewer):
        self.store = store
        self.viewer = viewer

    def _user(self) -> AuthUser:
        if not self.viewer.is_authenticated:
            raise NotSignedIn()
        return self.viewer.user

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def load_profile(self) -> UserProfile | None:
        """Full profile load – always asks the store, never the cache."""
        if not self.viewer.is_authenticated:
            return None
        user = self.viewer.user
        row = self.store.select_one(PROFILES, eq={"user_id": user.id}, fresh=True)
        if row is None:
            logger.info("no profile row for user %s", user.id)
            return None
        with malformed_rows(PROFILES):
            return UserProfile.from_rows(user, row)

    def set_hide_nickname(self, hide: bool) -> None:
        user = self._user()
        self.store.update(PROFILES, {"hide_nickname": hide}, eq={"user_id": user.id})

    @staticmethod
    def generate_wallet_address() -> str:
        """Random ERC-20 style address (``0x`` + 40 hex digits)."""
        return "0x" + secrets.token_hex(20)

    def save_wallet_address(self, address: str) -> None:
        user = self._user()
        self.store.update(PROFILES, {"wallet_address": address}, eq={"user_id": user.id})
        logger.info("saved wallet address for user %s", user.id)

    # ------------------------------------------------------------------
    # Deposit
    # ------------------------------------------------------------------

    def request_deposit(self, amount, profile: UserProfile) -> DepositConfirmation:
        if not profile.wallet_address:
            raise MissingWalletAddress()
        return DepositConfirmation(
            amount=parse_amount(amount),
            wallet_address=profile.wallet_address,
        )

    def confirm_deposit(self, confirmation: DepositConfirmation) -> DepositRejected:
        # No settlement path exists: every confirmed deposit is handed to support.
        logger.info(
            "deposit of %s to %s rejected for manual verification",
            confirmation.amount, confirmation.wallet_address,
        )
        return DepositRejected(
            amount=confirmation.amount,
            message=(
                f"Deposit of {confirmation.amount} {settings()['CURRENCY']} was rejected. "
                f"Please contact {settings()['SUPPORT_CONTACT']} for transaction verification"
            ),
        )

    # ------------------------------------------------------------------
    # Withdraw
    # ------------------------------------------------------------------

    def request_withdraw(self, amount, profile: UserProfile) -> Decimal:
        """Validate *amount* against *profile* and record a pending withdrawal.

        Raises ``InvalidAmount`` / ``InsufficientFunds`` without contacting
        the store. *profile* is left untouched.
        """
        value = parse_amount(amount)
        if value > profile.balance:
            raise InsufficientFunds(profile.balance, value)

        self.store.insert(
            TRANSACTIONS,
            [
                {
                    "user_id": profile.id,
                    "type": "withdraw",
                    "amount": str(value),
                    "status": "pending",
                }
            ],
        )
        logger.info("withdraw request of %s for user %s", value, profile.id)
        return value

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def list_transactions(self, limit: int | None = None) -> list[Transaction]:
        """Most recent transactions of the viewer, newest first.

        *limit* is clamped to ``1..TRANSACTIONS_LIMIT``.
        """
        if not self.viewer.is_authenticated:
            return []
        cap = settings()["TRANSACTIONS_LIMIT"]
        limit = cap if limit is None else max(1, min(limit, cap))
        rows = self.store.select(
            TRANSACTIONS,
            eq={"user_id": self.viewer.user_id},
            order="created_at",
            descending=True,
            limit=limit,
            fresh=True,
        )
        with malformed_rows(TRANSACTIONS):
            txs = [Transaction.model_validate(r) for r in rows]
        txs.sort(key=lambda t: t.created_at, reverse=True)
        return txs[:limit]
