"""
Remote store client.

A small synchronous PostgREST client over httpx. Panels build queries with
a chained builder and call `execute()`:

    rows = client.table("event_ticket_tiers").select("*").eq("event_id", eid).order("price").execute().data

Handles:
- Auth headers (anon key + optional user access token)
- Filter / order / limit encoding in PostgREST query syntax
- Error body parsing into StoreError
- Telemetry for every request
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import httpx

from engine.store.errors import NETWORK_ERROR_CODE, NO_ROWS_CODE, StoreError
from telemetry.logger import telemetry

logger = logging.getLogger("rockmundo.store")

Rows = Union[Dict[str, Any], List[Dict[str, Any]]]


@dataclass
class StoreResponse:
    data: Any
    status: int
    count: Optional[int] = None


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote_list_item(value: Any) -> str:
    text = _format_value(value)
    if any(ch in text for ch in ',()" '):
        return '"' + text.replace('"', '\\"') + '"'
    return text


class Query:
    """Chained builder for one table request."""

    def __init__(self, client: "StoreClient", table: str) -> None:
        self._client = client
        self.table = table
        self.method = "GET"
        self.params: List[Tuple[str, str]] = []
        self.body: Optional[Rows] = None
        self.prefer: List[str] = []
        self._columns: Optional[str] = None
        self._orders: List[str] = []
        self._single = False
        self._maybe_single = False
        self._count: Optional[str] = None

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def select(self, columns: str = "*", count: Optional[str] = None) -> "Query":
        """Read rows, or after a mutation, return the affected rows."""
        self._columns = columns
        if count:
            self._count = count
        return self

    def insert(self, rows: Rows) -> "Query":
        self.method = "POST"
        self.body = rows
        return self

    def upsert(self, rows: Rows, on_conflict: Optional[str] = None) -> "Query":
        self.method = "POST"
        self.body = rows
        self.prefer.append("resolution=merge-duplicates")
        if on_conflict:
            self.params.append(("on_conflict", on_conflict))
        return self

    def update(self, values: Dict[str, Any]) -> "Query":
        self.method = "PATCH"
        self.body = values
        return self

    def delete(self) -> "Query":
        self.method = "DELETE"
        return self

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def _filter(self, column: str, op: str, value: Any) -> "Query":
        self.params.append((column, f"{op}.{_format_value(value)}"))
        return self

    def eq(self, column: str, value: Any) -> "Query":
        if value is None:
            return self._filter(column, "is", None)
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "Query":
        return self._filter(column, "neq", value)

    def gt(self, column: str, value: Any) -> "Query":
        return self._filter(column, "gt", value)

    def gte(self, column: str, value: Any) -> "Query":
        return self._filter(column, "gte", value)

    def lt(self, column: str, value: Any) -> "Query":
        return self._filter(column, "lt", value)

    def lte(self, column: str, value: Any) -> "Query":
        return self._filter(column, "lte", value)

    def ilike(self, column: str, pattern: str) -> "Query":
        return self._filter(column, "ilike", pattern)

    def is_(self, column: str, value: Any) -> "Query":
        return self._filter(column, "is", value)

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        inner = ",".join(_quote_list_item(v) for v in values)
        self.params.append((column, f"in.({inner})"))
        return self

    def not_in(self, column: str, values: Iterable[Any]) -> "Query":
        inner = ",".join(_quote_list_item(v) for v in values)
        self.params.append((column, f"not.in.({inner})"))
        return self

    def contains(self, column: str, value: Any) -> "Query":
        """Array or jsonb containment (`cs`)."""
        if isinstance(value, (list, tuple)):
            encoded = "{" + ",".join(_quote_list_item(v) for v in value) + "}"
        elif isinstance(value, dict):
            encoded = json.dumps(value, separators=(",", ":"))
        else:
            encoded = _format_value(value)
        self.params.append((column, f"cs.{encoded}"))
        return self

    def or_(self, expression: str) -> "Query":
        """Raw PostgREST or-group, e.g. "user_id.eq.1,friend_id.eq.1"."""
        self.params.append(("or", f"({expression})"))
        return self

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------

    def order(self, column: str, desc: bool = False, nulls_first: Optional[bool] = None) -> "Query":
        part = f"{column}.{'desc' if desc else 'asc'}"
        if nulls_first is not None:
            part += ".nullsfirst" if nulls_first else ".nullslast"
        self._orders.append(part)
        return self

    def limit(self, count: int) -> "Query":
        self.params.append(("limit", str(int(count))))
        return self

    def single(self) -> "Query":
        """Exactly one row; zero or many raise StoreError."""
        self._single = True
        return self

    def maybe_single(self) -> "Query":
        """At most one row; zero gives data=None."""
        self._maybe_single = True
        return self

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def build(self) -> Tuple[str, List[Tuple[str, str]], Dict[str, str]]:
        """Method, query params and extra headers for this request."""
        params = list(self.params)
        headers: Dict[str, str] = {}
        prefer = list(self.prefer)

        if self.method == "GET":
            params.insert(0, ("select", self._columns or "*"))
        else:
            prefer.append("return=representation")
            if self._columns:
                params.insert(0, ("select", self._columns))
        if self._orders:
            params.append(("order", ",".join(self._orders)))
        if self._count:
            prefer.append(f"count={self._count}")
        if self._single:
            headers["Accept"] = "application/vnd.pgrst.object+json"
        if prefer:
            headers["Prefer"] = ",".join(prefer)
        return self.method, params, headers

    def execute(self) -> StoreResponse:
        method, params, headers = self.build()
        response = self._client.request(
            method, f"/{self.table}", params=params, body=self.body, headers=headers, table=self.table,
        )
        if self._maybe_single:
            rows = response.data or []
            if isinstance(rows, list):
                if len(rows) > 1:
                    raise StoreError(
                        f"Expected at most one row from {self.table}, got {len(rows)}",
                        code=NO_ROWS_CODE, status=response.status,
                    )
                response.data = rows[0] if rows else None
        return response


class StoreClient:
    """
    Synchronous client for the hosted PostgREST API.

    Args:
        url: project URL, e.g. https://xyz.supabase.co
        key: anon/public API key
        access_token: signed-in user's JWT; the anon key is used when absent
        transport: optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        url: str,
        key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base = url.rstrip("/")
        self.key = key
        self.access_token = access_token
        self._http = httpx.Client(base_url=f"{self.base}/rest/v1", timeout=timeout, transport=transport)

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.access_token or self.key}",
            "Content-Type": "application/json",
        }
        return headers

    def table(self, name: str) -> Query:
        return Query(self, name)

    def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> StoreResponse:
        """Call a database function."""
        return self.request("POST", f"/rpc/{function}", body=params or {}, table=f"rpc:{function}")

    def request(
        self,
        method: str,
        path: str,
        params: Optional[List[Tuple[str, str]]] = None,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        table: str = "",
    ) -> StoreResponse:
        merged = self._headers()
        merged.update(headers or {})
        started = time.perf_counter()
        logger.debug(f"{method} {path} params={params}")

        try:
            resp = self._http.request(
                method,
                path,
                params=params,
                content=None if body is None else json.dumps(body, default=str),
                headers=merged,
            )
        except httpx.RequestError as e:
            telemetry.store_call(table, method, None, (time.perf_counter() - started) * 1000, NETWORK_ERROR_CODE)
            raise StoreError(f"Store request to {path} failed: {e}", code=NETWORK_ERROR_CODE) from e

        elapsed_ms = (time.perf_counter() - started) * 1000
        payload: Any = None
        if resp.content:
            try:
                payload = resp.json()
            except ValueError:
                payload = resp.text

        if resp.status_code >= 400:
            error = StoreError.from_body(payload, resp.status_code)
            telemetry.store_call(table, method, resp.status_code, elapsed_ms, error.code or str(resp.status_code))
            logger.warning(f"{method} {path} -> {resp.status_code} {error.code}: {error}")
            raise error

        telemetry.store_call(table, method, resp.status_code, elapsed_ms)
        return StoreResponse(data=payload, status=resp.status_code, count=_parse_count(resp))

    def close(self) -> None:
        self._http.close()


def _parse_count(resp: httpx.Response) -> Optional[int]:
    """Total from a Content-Range header like "0-9/42"."""
    content_range = resp.headers.get("content-range", "")
    if "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None
