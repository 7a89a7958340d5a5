"""Tests for the wallet request flow."""

from decimal import Decimal

import pytest

from purenft.services.errors import (
    InsufficientFunds,
    InvalidAmount,
    MissingWalletAddress,
    NotSignedIn,
    StoreError,
)
from purenft.services.model import DepositConfirmation, DepositRejected
from purenft.services.wallet import WalletService, parse_amount

from .conftest import USER_ID


@pytest.fixture
def wallet(store, viewer):
    return WalletService(store, viewer)


@pytest.fixture
def profile(wallet):
    return wallet.load_profile()


def _withdraw_rows(client):
    return [r for r in client.tables["transactions"] if r["type"] == "withdraw" and r["status"] == "pending"]


# ---------------------------------------------------------------------------
# Amount parsing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw", ["0", "-1", "", "abc", "NaN", "Infinity", None, "0.000"])
def test_parse_amount_rejects_non_positive_or_garbage(raw):
    with pytest.raises(InvalidAmount):
        parse_amount(raw)


def test_parse_amount_keeps_decimal_precision():
    assert parse_amount(" 0.000000000000000001 ") == Decimal("0.000000000000000001")


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

def test_load_profile_merges_auth_metadata(profile):
    assert profile.id == USER_ID
    assert profile.email == "alice@example.com"
    assert profile.login == "alice"
    assert profile.country == "FR"  # empty column → metadata fallback
    assert profile.balance == Decimal("2.0")
    assert profile.display_balance == "2.0"
    assert profile.wallet_address is None


def test_load_profile_bypasses_cache(wallet, client):
    wallet.load_profile()
    wallet.load_profile()
    assert client.count("select", "profiles") == 2


def test_load_profile_anonymous_is_none(store, anonymous, client):
    assert WalletService(store, anonymous).load_profile() is None
    assert client.calls == []


def test_load_profile_missing_row_is_none(store, viewer, client):
    client.tables["profiles"] = []
    assert WalletService(store, viewer).load_profile() is None


def test_save_wallet_address_and_nickname(wallet, client):
    address = wallet.generate_wallet_address()
    assert address.startswith("0x") and len(address) == 42
    int(address[2:], 16)

    wallet.save_wallet_address(address)
    wallet.set_hide_nickname(True)

    row = client.tables["profiles"][0]
    assert row["wallet_address"] == address
    assert row["hide_nickname"] is True
    # The other user's row is untouched
    assert client.tables["profiles"][1]["wallet_address"] == "0xabc"


def test_profile_updates_require_viewer(store, anonymous):
    with pytest.raises(NotSignedIn):
        WalletService(store, anonymous).set_hide_nickname(True)


# ---------------------------------------------------------------------------
# Withdraw
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("amount", ["0", "-0.5", "3", "2.0000001"])
def test_withdraw_rejected_locally(wallet, profile, client, amount):
    before = len(client.tables["transactions"])
    with pytest.raises((InvalidAmount, InsufficientFunds)):
        wallet.request_withdraw(amount, profile)
    assert len(client.tables["transactions"]) == before
    assert client.count("insert") == 0


def test_withdraw_more_than_balance_is_insufficient_funds(wallet, profile):
    with pytest.raises(InsufficientFunds) as err:
        wallet.request_withdraw("3", profile)
    assert err.value.balance == Decimal("2.0")
    assert err.value.requested == Decimal("3")


def test_withdraw_creates_one_pending_row_and_keeps_balance(wallet, profile, client):
    assert wallet.request_withdraw("1.5", profile) == Decimal("1.5")

    rows = _withdraw_rows(client)
    assert len(rows) == 1
    assert rows[0]["amount"] == "1.5"
    assert rows[0]["user_id"] == USER_ID
    assert profile.display_balance == "2.0"


def test_withdraw_whole_balance_is_allowed(wallet, profile, client):
    wallet.request_withdraw("2", profile)
    assert len(_withdraw_rows(client)) == 1


def test_withdraw_store_failure_propagates(wallet, profile, client):
    def boom(collection, rows):
        raise StoreError("down")

    client.insert = boom
    with pytest.raises(StoreError):
        wallet.request_withdraw("1", profile)


# ---------------------------------------------------------------------------
# Deposit
# ---------------------------------------------------------------------------

def test_deposit_without_wallet_address(wallet, profile, client):
    with pytest.raises(MissingWalletAddress):
        wallet.request_deposit("1", profile)
    assert client.count("insert") == 0


def test_deposit_wallet_check_precedes_amount_check(wallet, profile):
    with pytest.raises(MissingWalletAddress):
        wallet.request_deposit("not a number", profile)


def test_deposit_confirmation_always_rejected(wallet, profile, client):
    profile = profile.model_copy(update={"wallet_address": "0xfeed"})
    before = len(client.tables["transactions"])

    confirmation = wallet.request_deposit("0.25", profile)
    assert confirmation == DepositConfirmation(amount=Decimal("0.25"), wallet_address="0xfeed")

    outcome = wallet.confirm_deposit(confirmation)
    assert isinstance(outcome, DepositRejected)
    assert "support" in outcome.message
    assert len(client.tables["transactions"]) == before


def test_deposit_invalid_amount(wallet, profile):
    profile = profile.model_copy(update={"wallet_address": "0xfeed"})
    with pytest.raises(InvalidAmount):
        wallet.request_deposit("0", profile)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

def test_list_transactions_capped_and_newest_first(wallet):
    txs = wallet.list_transactions()
    assert len(txs) == 10
    assert all(t.user_id == USER_ID for t in txs)
    stamps = [t.created_at for t in txs]
    assert stamps == sorted(stamps, reverse=True)


def test_list_transactions_sees_new_request(wallet, profile):
    wallet.list_transactions()
    wallet.request_withdraw("1.5", profile)
    newest = wallet.list_transactions()[0]
    assert newest.type == "withdraw"
    assert newest.status == "pending"
    assert newest.amount == Decimal("1.5")


def test_list_transactions_empty(store, viewer, client):
    client.tables["transactions"] = []
    assert WalletService(store, viewer).list_transactions() == []


def test_list_transactions_anonymous(store, anonymous):
    assert WalletService(store, anonymous).list_transactions() == []


@pytest.mark.parametrize("limit, expected", [(3, 3), (0, 1), (-5, 1), (50, 10)])
def test_list_transactions_limit_is_clamped(wallet, limit, expected):
    assert len(wallet.list_transactions(limit)) == expected


# ---------------------------------------------------------------------------
# Malformed store rows
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("field, value", [("type", "refund"), ("status", "cancelled"), ("amount", None)])
def test_list_transactions_malformed_row_is_store_error(wallet, client, field, value):
    client.tables["transactions"][0][field] = value
    with pytest.raises(StoreError):
        wallet.list_transactions()


@pytest.mark.parametrize("balance", ["-0.5", "n/a"])
def test_load_profile_malformed_balance_is_store_error(wallet, client, balance):
    client.tables["profiles"][0]["balance"] = balance
    with pytest.raises(StoreError):
        wallet.load_profile()
