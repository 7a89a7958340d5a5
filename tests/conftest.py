"""Shared fixtures: an in-memory row store and a scripted HTTP session."""

from __future__ import annotations

import itertools
import json as jsonlib
from datetime import datetime, timedelta, timezone

import pytest
import requests

from purenft.services.auth import Viewer
from purenft.services.cache import CachedStore
from purenft.services.model import AuthUser

USER_ID = "user-1"
OTHER_ID = "user-2"


class FakeStoreClient:
    """In-memory stand-in for ``StoreClient`` that records every call."""

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.calls: list[tuple] = []
        self._ids = itertools.count(1000)

    @staticmethod
    def _match(row: dict, eq) -> bool:
        return all(str(row.get(col)) == str(value) for col, value in (eq or {}).items())

    def select(self, collection, *, eq=None, columns="*", order=None, descending=True, limit=None):
        self.calls.append(("select", collection, dict(eq or {})))
        rows = [r for r in self.tables.get(collection, []) if self._match(r, eq)]
        if order:
            rows.sort(key=lambda r: r[order], reverse=descending)
        if limit:
            rows = rows[:limit]
        if columns != "*":
            wanted = columns.split(",")
            rows = [{c: r.get(c) for c in wanted} for r in rows]
        return [dict(r) for r in rows]

    def select_one(self, collection, *, eq, columns="*"):
        rows = self.select(collection, eq=eq, columns=columns, limit=1)
        return rows[0] if rows else None

    def insert(self, collection, rows):
        self.calls.append(("insert", collection, rows))
        for row in rows:
            stored = dict(row)
            stored.setdefault("id", str(next(self._ids)))
            stored.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            self.tables.setdefault(collection, []).append(stored)

    def update(self, collection, values, *, eq):
        self.calls.append(("update", collection, dict(eq)))
        for row in self.tables.get(collection, []):
            if self._match(row, eq):
                row.update(values)

    def count(self, kind: str, collection: str | None = None) -> int:
        return sum(
            1 for c in self.calls if c[0] == kind and (collection is None or c[1] == collection)
        )


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        if text is not None:
            self.content = text.encode()
        elif payload is None:
            self.content = b""
        else:
            self.content = jsonlib.dumps(payload).encode()

    def json(self):
        return jsonlib.loads(self.content)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Replays queued responses (or exceptions) and records the requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[dict] = []

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def _ts(minutes_ago: int) -> str:
    base = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return (base - timedelta(minutes=minutes_ago)).isoformat()


@pytest.fixture
def viewer() -> Viewer:
    user = AuthUser(id=USER_ID, email="alice@example.com", user_metadata={"login": "alice", "country": "FR"})
    return Viewer(user=user, access_token="token-1")


@pytest.fixture
def anonymous() -> Viewer:
    return Viewer()


@pytest.fixture
def tables() -> dict[str, list[dict]]:
    return {
        "profiles": [
            {"user_id": USER_ID, "login": "alice", "country": "", "balance": "2.0",
             "wallet_address": None, "hide_nickname": False},
            {"user_id": OTHER_ID, "login": "bob", "country": "DE", "balance": "10",
             "wallet_address": "0xabc", "hide_nickname": True},
        ],
        "transactions": [
            {"id": str(i), "user_id": USER_ID, "type": "withdraw", "amount": "0.1",
             "status": "completed", "created_at": _ts(i * 10)}
            for i in range(12)
        ] + [
            {"id": "other-tx", "user_id": OTHER_ID, "type": "deposit", "amount": "5",
             "status": "pending", "created_at": _ts(1)},
        ],
        "nfts": [
            {"id": "1", "name": "Free Bird", "creator": "ann", "image": "https://img/1.png",
             "price": "1.5", "description": "A bird", "token_standard": "ERC-721",
             "properties": [{"trait_type": "Background", "value": "Blue"}], "owner_id": None},
            {"id": "2", "name": "Mine", "creator": "ann", "image": "", "price": "0.5",
             "token_standard": "ERC-1155", "properties": {"Eyes": "Green"}, "owner_id": USER_ID},
            {"id": "3", "name": "Taken", "creator": "carl", "image": "", "price": "3",
             "token_standard": "ERC-721", "properties": None, "owner_id": OTHER_ID},
        ],
    }


@pytest.fixture
def client(tables) -> FakeStoreClient:
    return FakeStoreClient(tables)


@pytest.fixture
def store(client) -> CachedStore:
    return CachedStore(client)
