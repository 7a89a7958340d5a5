"""api.py

Thin synchronous REST wrapper around the hosted row store.

* Centralises **base-URL** + **API-key** handling so services can simply
  call ``select()``, ``insert()`` … without repeating boilerplate.
* Speaks the PostgREST dialect: equality predicates become
  ``?column=eq.value``, ordering ``?order=created_at.desc``.
* Every failure – network, HTTP status, bad JSON – is re-raised as an
  opaque ``StoreError``. One attempt per call, no retries.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library & 3rd-party imports
# -----------------------------------------------------------------------------
import logging
from typing import Any, Mapping

import requests

from .errors import StoreError

logger = logging.getLogger(__name__)

Predicate = Mapping[str, Any]

# -----------------------------------------------------------------------------
# Transport
# -----------------------------------------------------------------------------

class RestTransport:
    """Shared HTTP plumbing for the row store and the auth provider."""

    error_cls: type[StoreError] = StoreError

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token or self.api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ):
        """Perform one request and return the decoded JSON body (or ``None``).

        Raises ``error_cls`` for anything that is not a 2xx JSON (or empty)
        response so the caller never has to look at ``requests`` types.
        """
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            r = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
            r.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise self.error_cls(f"{method} {path} failed: {exc}", status_code=status) from exc
        except requests.RequestException as exc:
            raise self.error_cls(f"{method} {path} failed: {exc}") from exc

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as exc:
            raise self.error_cls(f"{method} {path} returned invalid JSON") from exc


# -----------------------------------------------------------------------------
# Row store
# -----------------------------------------------------------------------------

def _filters(eq: Predicate | None) -> dict[str, str]:
    return {col: f"eq.{value}" for col, value in (eq or {}).items()}


class StoreClient(RestTransport):
    """``select / insert / update`` against the ``/rest/v1/<collection>`` API."""

    def with_token(self, access_token: str | None) -> "StoreClient":
        """Return a client acting on behalf of *access_token* (same session)."""
        return StoreClient(
            self.base_url,
            self.api_key,
            access_token=access_token,
            timeout=self.timeout,
            session=self._session,
        )

    def select(
        self,
        collection: str,
        *,
        eq: Predicate | None = None,
        columns: str = "*",
        order: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[dict]:
        """Return the rows of *collection* matching every ``eq`` pair."""
        params = {"select": columns, **_filters(eq)}
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit:
            params["limit"] = str(limit)

        rows = self._request("GET", f"/rest/v1/{collection}", params=params)
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise self.error_cls(f"Expected a list of rows from {collection}, got {type(rows)}")
        return rows

    def select_one(
        self,
        collection: str,
        *,
        eq: Predicate,
        columns: str = "*",
    ) -> dict | None:
        """Return the single matching row, or ``None`` when absent."""
        rows = self.select(collection, eq=eq, columns=columns, limit=1)
        return rows[0] if rows else None

    def insert(self, collection: str, rows: list[dict]) -> None:
        self._request(
            "POST",
            f"/rest/v1/{collection}",
            json=rows,
            headers={"Prefer": "return=minimal"},
        )

    def update(self, collection: str, values: dict, *, eq: Predicate) -> None:
        if not eq:
            # PostgREST would happily update the whole table
            raise ValueError("update() needs at least one equality predicate")
        self._request(
            "PATCH",
            f"/rest/v1/{collection}",
            params=_filters(eq),
            json=values,
            headers={"Prefer": "return=minimal"},
        )
