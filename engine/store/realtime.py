"""
Channel-based change notifications.

Panels subscribe to table changes through named channels on a
RealtimeHub. Change payloads have the hosted backend's shape:

    {"table": "jam_session_messages", "eventType": "INSERT", "new": {...}, "old": {...}}

`RealtimeHub.dispatch()` routes one payload to every matching
subscription. `PollingFeed` is the transport used by the pygame client:
each `update(dt)` it pulls rows newer than its cursor through the store
client and dispatches them as INSERT changes, which keeps everything on
the single frame-loop thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from engine.store.client import StoreClient
from engine.store.errors import StoreError

logger = logging.getLogger("rockmundo.realtime")

Change = Dict[str, Any]
ChangeCallback = Callable[[Change], None]


@dataclass
class Subscription:
    table: str
    callback: ChangeCallback
    event: str = "INSERT"
    filter: Optional[Tuple[str, Any]] = None

    def matches(self, change: Change) -> bool:
        if change.get("table") != self.table:
            return False
        if self.event != "*" and change.get("eventType") != self.event:
            return False
        if self.filter is not None:
            column, value = self.filter
            row = change.get("new") or change.get("old") or {}
            if row.get(column) != value:
                return False
        return True


@dataclass
class RealtimeChannel:
    name: str
    hub: "RealtimeHub"
    subscriptions: List[Subscription] = field(default_factory=list)
    joined: bool = False

    def on(
        self,
        table: str,
        callback: ChangeCallback,
        event: str = "INSERT",
        filter: Optional[Tuple[str, Any]] = None,
    ) -> "RealtimeChannel":
        self.subscriptions.append(Subscription(table, callback, event, filter))
        return self

    def subscribe(self) -> "RealtimeChannel":
        self.joined = True
        logger.debug(f"channel {self.name} joined ({len(self.subscriptions)} listeners)")
        return self

    def unsubscribe(self) -> None:
        self.joined = False
        self.hub.remove_channel(self.name)


class RealtimeHub:
    """Registry of named channels."""

    def __init__(self) -> None:
        self.channels: Dict[str, RealtimeChannel] = {}

    def channel(self, name: str) -> RealtimeChannel:
        """Fresh channel under `name`; an existing one with that name is replaced."""
        channel = RealtimeChannel(name=name, hub=self)
        self.channels[name] = channel
        return channel

    def remove_channel(self, name: str) -> None:
        self.channels.pop(name, None)

    def dispatch(self, change: Change) -> int:
        """Deliver one change; returns how many callbacks received it."""
        delivered = 0
        for channel in list(self.channels.values()):
            if not channel.joined:
                continue
            for sub in channel.subscriptions:
                if sub.matches(change):
                    sub.callback(change)
                    delivered += 1
        return delivered


class PollingFeed:
    """
    Pulls new rows of one table and dispatches them as INSERT changes.

    A feed built without `since` starts at the newest existing row: its
    first poll only reads that row's cursor value, so history already in
    the table is never replayed. Reads take rows at or after the cursor and
    drop the ids already delivered at that exact value, which keeps rows
    sharing a timestamp across a batch boundary.

    Args:
        client: store client used for the reads
        hub: where changes are dispatched
        table: table to watch
        filter: optional (column, value) equality narrowing the read
        cursor_column: monotonically increasing column (timestamps work)
        since: initial cursor; rows before it are never delivered
        interval: seconds between polls when driven by update()
    """

    def __init__(
        self,
        client: StoreClient,
        hub: RealtimeHub,
        table: str,
        filter: Optional[Tuple[str, Any]] = None,
        cursor_column: str = "created_at",
        since: Optional[str] = None,
        interval: float = 2.0,
        batch_size: int = 50,
    ) -> None:
        self.client = client
        self.hub = hub
        self.table = table
        self.filter = filter
        self.cursor_column = cursor_column
        self.cursor = since
        self.interval = interval
        self.batch_size = batch_size
        self._seeded = since is not None
        # ids already delivered whose cursor value equals self.cursor
        self._seen_at_cursor: Set[Any] = set()
        self._elapsed = 0.0
        self.last_error: Optional[StoreError] = None

    def _query(self):
        query = self.client.table(self.table).select("*")
        if self.filter is not None:
            query = query.eq(*self.filter)
        return query

    def _advance(self, row: Dict[str, Any]) -> None:
        value = row.get(self.cursor_column)
        if value is None:
            return
        if value != self.cursor:
            self.cursor = value
            self._seen_at_cursor = set()
        if row.get("id") is not None:
            self._seen_at_cursor.add(row["id"])

    def _seed(self) -> None:
        rows = self._query().order(self.cursor_column, desc=True).limit(1).execute().data or []
        for row in rows:
            self._advance(row)
        self._seeded = True
        logger.debug(f"{self.table} feed starts at {self.cursor}")

    def poll(self) -> int:
        """Fetch and dispatch rows newer than the cursor. Returns rows dispatched."""
        try:
            if not self._seeded:
                self._seed()
                self.last_error = None
                return 0
            query = self._query()
            if self.cursor is not None:
                query = query.gte(self.cursor_column, self.cursor)
            rows = query.order(self.cursor_column).limit(self.batch_size).execute().data or []
        except StoreError as e:
            # Next tick retries with the same cursor; the failure is kept for the UI.
            self.last_error = e
            logger.warning(f"poll of {self.table} failed: {e}")
            return 0

        self.last_error = None
        delivered = 0
        for row in rows:
            if row.get(self.cursor_column) == self.cursor and row.get("id") in self._seen_at_cursor:
                continue
            self.hub.dispatch({"table": self.table, "eventType": "INSERT", "new": row, "old": None})
            self._advance(row)
            delivered += 1
        return delivered

    def update(self, dt: float) -> int:
        self._elapsed += dt
        if self._elapsed < self.interval:
            return 0
        self._elapsed = 0.0
        return self.poll()
