"""errors.py

Exception hierarchy shared by the service layer and the pages.

Validation errors are raised *before* any store call; ``StoreError`` wraps
every failure of the remote collaborator without telling causes apart.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import InvalidOperation
from typing import Iterator

import pydantic


class MarketError(Exception):
    """Base class for everything the service layer raises on purpose."""


# -----------------------------------------------------------------------------
# Local input problems
# -----------------------------------------------------------------------------

class ValidationError(MarketError):
    """Bad local input – reported inline, never sent to the store."""


class InvalidAmount(ValidationError):
    def __init__(self, raw: object):
        super().__init__("Please enter a valid amount greater than 0")
        self.raw = raw


class InsufficientFunds(ValidationError):
    def __init__(self, balance, requested):
        super().__init__(
            f"Your balance ({balance}) is less than the requested amount ({requested})"
        )
        self.balance = balance
        self.requested = requested


class PasswordMismatch(ValidationError):
    def __init__(self):
        super().__init__("New passwords do not match")


# -----------------------------------------------------------------------------
# Missing prerequisites
# -----------------------------------------------------------------------------

class MissingPrerequisite(MarketError):
    """Something must be set up before the action is possible."""


class MissingWalletAddress(MissingPrerequisite):
    def __init__(self):
        super().__init__("You need to generate a wallet address in your profile first")


class NotSignedIn(MissingPrerequisite):
    def __init__(self):
        super().__init__("Please log in first")


class ItemUnavailable(MarketError):
    """The item cannot be bought by this viewer (owned or sold)."""


class NotFound(MarketError):
    """Item or profile absent – rendered as a neutral empty state."""


# -----------------------------------------------------------------------------
# Remote collaborator
# -----------------------------------------------------------------------------

class StoreError(MarketError):
    """Any failure while talking to the hosted store (opaque)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(StoreError):
    """Failure reported by the authentication provider."""


@contextmanager
def malformed_rows(collection: str) -> Iterator[None]:
    """Re-raise row parsing failures as ``StoreError``.

    Rows come from the remote collaborator, so an unexpected status, a null
    price or a garbage balance is a store failure, not a programming error.
    """
    try:
        yield
    except (pydantic.ValidationError, InvalidOperation, TypeError, ValueError) as exc:
        raise StoreError(f"Malformed row in {collection}: {exc}") from exc
