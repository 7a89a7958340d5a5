"""model.py

Pydantic **domain models** shared across UI layers.

These classes mirror the rows stored in the hosted ``profiles``,
``transactions`` and ``nfts`` collections so that Streamlit pages (or any
other consumer) get validated, typed objects instead of raw dicts.
Monetary amounts are kept as ``Decimal`` – the store sends them as
decimal strings and float rounding would break the balance checks.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union

# Third-party
from pydantic import BaseModel, ConfigDict, Field, field_validator

TransactionType = Literal["deposit", "withdraw", "purchase"]
TransactionStatus = Literal["pending", "completed", "failed"]

# -----------------------------------------------------------------------------
# Users & profiles
# -----------------------------------------------------------------------------

class AuthUser(BaseModel):
    """User object as returned by the authentication provider."""

    id: str
    email: str = ""
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def login(self) -> str:
        return self.user_metadata.get("login") or ""


class UserProfile(BaseModel):
    """The signed-in user's profile merged with auth metadata."""

    id: str                                   # owning user id (``user_id`` column)
    email: str = ""
    login: str = ""
    country: str = ""
    balance: Decimal = Field(default=Decimal("0"), ge=0)
    wallet_address: Optional[str] = None
    hide_nickname: bool = False

    @field_validator("balance", mode="before")
    @classmethod
    def _null_balance(cls, v):
        return Decimal("0") if v in (None, "") else v

    @field_validator("wallet_address", mode="before")
    @classmethod
    def _blank_address(cls, v):
        return v or None

    @property
    def display_balance(self) -> str:
        """Balance as shown in the header – one decimal place."""
        return f"{self.balance:.1f}"

    @classmethod
    def from_rows(cls, user: AuthUser, row: dict) -> "UserProfile":
        """Merge a ``profiles`` row with the auth user; metadata fills gaps."""
        meta = user.user_metadata
        return cls(
            id=user.id,
            email=user.email,
            login=row.get("login") or meta.get("login") or "",
            country=row.get("country") or meta.get("country") or "",
            balance=row.get("balance"),
            wallet_address=row.get("wallet_address"),
            hide_nickname=bool(row.get("hide_nickname") or False),
        )


# -----------------------------------------------------------------------------
# Transactions
# -----------------------------------------------------------------------------

class Transaction(BaseModel):
    """One row of the ``transactions`` collection."""

    model_config = ConfigDict(extra="ignore")

    id: str
    type: TransactionType
    amount: Decimal
    created_at: datetime
    status: TransactionStatus
    item: Optional[str] = None                # NFT id for purchases
    user_id: Optional[str] = None

    @field_validator("id", "item", mode="before")
    @classmethod
    def _as_text(cls, v):
        return None if v is None else str(v)


# -----------------------------------------------------------------------------
# NFTs
# -----------------------------------------------------------------------------

class NFTProperty(BaseModel):
    trait_type: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _value_as_text(cls, v):
        return str(v)


class NFT(BaseModel):
    """Marketplace listing with a nullable owner reference."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    creator: str = ""
    image: str = ""
    price: Decimal
    description: Optional[str] = None
    token_standard: str = "ERC-721"
    properties: list[NFTProperty] = Field(default_factory=list)
    owner_id: Optional[str] = None

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def _as_text(cls, v):
        return None if v is None else str(v)

    @field_validator("properties", mode="before")
    @classmethod
    def _normalise_properties(cls, v):
        # Stored either as a list of {trait_type, value} or as a flat mapping
        if v is None:
            return []
        if isinstance(v, dict):
            return [{"trait_type": k, "value": val} for k, val in v.items()]
        return v


# -----------------------------------------------------------------------------
# Purchasability – tagged variant, exhaustively matched by the detail page
# -----------------------------------------------------------------------------

class Owned(BaseModel):
    kind: Literal["owned"] = "owned"


class AlreadyPurchasedByOther(BaseModel):
    kind: Literal["taken"] = "taken"
    owner_id: str


class Purchasable(BaseModel):
    kind: Literal["available"] = "available"
    price: Decimal


Purchasability = Annotated[
    Union[Owned, AlreadyPurchasedByOther, Purchasable],
    Field(discriminator="kind"),
]


# -----------------------------------------------------------------------------
# Deposit flow steps
# -----------------------------------------------------------------------------

class DepositConfirmation(BaseModel):
    """The confirmation step opened by a valid deposit request."""

    amount: Decimal
    wallet_address: str


class DepositRejected(BaseModel):
    """Terminal deposit outcome – the user must contact support manually."""

    amount: Decimal
    message: str
