"""
Friendship panel: requests, the relationship summary with one friend,
direct messages and trust permissions.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from engine.store import relationships as api
from engine.store.client import StoreClient
from engine.store.realtime import RealtimeHub
from engine.toasts import ToastLog
from systems.relationships import (
    RelationshipEvent,
    RelationshipSummary,
    build_pair_key,
    calculate_relationship_summary,
)
from ui.panels.base import PanelRow, StorePanel, dim_row, header_row, stat_row, title_row
from ui.screen_constants import COLOR_ACCENT_SUCCESS, COLOR_TEXT_DIM

DEFAULT_PERMISSIONS: Dict[str, bool] = {
    "share_schedule": False,
    "share_finances": False,
    "band_invites": True,
    "jam_invites": True,
}


class FriendshipPanel(StorePanel):
    title = "Friends"
    context = "friendships"

    def __init__(self, client: StoreClient, toasts: ToastLog, hub: RealtimeHub,
                 user_id: Optional[str], profile_id: Optional[str]) -> None:
        super().__init__(client, toasts)
        self.hub = hub
        self.user_id = user_id
        self.profile_id = profile_id
        self.friendships: List[Dict[str, Any]] = []
        self.search_results: List[Dict[str, Any]] = []
        self.selected: Optional[Dict[str, Any]] = None
        self.events: List[RelationshipEvent] = []
        self.summary: Optional[RelationshipSummary] = None
        self.messages: List[Dict[str, Any]] = []
        self.permissions: Dict[str, Any] = dict(DEFAULT_PERMISSIONS)
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Friend list
    # ------------------------------------------------------------------

    def load(self) -> bool:
        if not self.profile_id:
            return False
        ok, rows = self._attempt("load", lambda: api.load_friendships(self.client, self.profile_id),
                                 "Unable to load friends")
        if ok:
            self.friendships = rows
        return ok

    def _by_status(self, status: str) -> List[Dict[str, Any]]:
        return [f for f in self.friendships if f["friendship"].get("status") == status]

    @property
    def accepted(self) -> List[Dict[str, Any]]:
        return self._by_status("accepted")

    @property
    def incoming(self) -> List[Dict[str, Any]]:
        return [f for f in self._by_status("pending") if not f["is_requester"]]

    @property
    def outgoing(self) -> List[Dict[str, Any]]:
        return [f for f in self._by_status("pending") if f["is_requester"]]

    def search(self, query: str) -> List[Dict[str, Any]]:
        exclude = [self.profile_id] if self.profile_id else []
        for entry in self.friendships:
            other = entry.get("other_profile")
            if other:
                exclude.append(other["id"])
        ok, rows = self._attempt("search", lambda: api.search_profiles(self.client, query, exclude),
                                 "Search failed")
        self.search_results = rows if ok else []
        return self.search_results

    def send_request(self, target_profile_id: str) -> bool:
        ok, _ = self._attempt(
            "request",
            lambda: api.create_friend_request(self.client, self.profile_id, target_profile_id),
            "Unable to send request",
        )
        if ok:
            self.toasts.push("Friend request sent")
            self.search_results = [p for p in self.search_results if p.get("id") != target_profile_id]
            self.load()
        return ok

    def respond(self, friendship_id: str, status: str) -> bool:
        ok, _ = self._attempt("respond", lambda: api.respond_to_friendship(self.client, friendship_id, status),
                              "Unable to update request")
        if ok:
            for entry in self.friendships:
                if entry["friendship"]["id"] == friendship_id:
                    entry["friendship"]["status"] = status
            self.toasts.push("Request updated", f"Friendship marked {status}.")
        return ok

    def cancel(self, friendship_id: str) -> bool:
        ok, _ = self._attempt("cancel", lambda: api.cancel_friendship(self.client, friendship_id),
                              "Unable to remove friendship")
        if ok:
            self.friendships = [f for f in self.friendships if f["friendship"]["id"] != friendship_id]
            if self.selected and self.selected["friendship"]["id"] == friendship_id:
                self.deselect()
        return ok

    # ------------------------------------------------------------------
    # Selected friend
    # ------------------------------------------------------------------

    @property
    def dm_channel(self) -> Optional[str]:
        other = (self.selected or {}).get("other_profile")
        if not other or not self.profile_id:
            return None
        return f"dm:{build_pair_key(self.profile_id, other['id'])}"

    def select(self, friendship_id: str) -> bool:
        entry = next((f for f in self.friendships if f["friendship"]["id"] == friendship_id), None)
        if entry is None or not entry.get("other_profile"):
            return False
        self.deselect()
        self.selected = entry
        other = entry["other_profile"]

        user_ids = [uid for uid in (self.user_id, other.get("user_id")) if uid]
        ok, events = self._attempt(
            "events",
            lambda: api.fetch_relationship_events(self.client, self.profile_id, other["id"], user_ids),
            "Unable to load relationship history",
        )
        if ok:
            self.events = events
            self.summary = calculate_relationship_summary(events)

        channel = self.dm_channel
        ok, messages = self._attempt("messages", lambda: api.fetch_direct_messages(self.client, channel),
                                     "Unable to load messages")
        if ok:
            self.messages = messages
        self._unsubscribe = api.subscribe_to_direct_messages(self.hub, channel, self._on_message)

        if self.user_id:
            ok, permissions = self._attempt(
                "permissions",
                lambda: api.fetch_permission_history(self.client, other["id"], self.user_id),
                "Unable to load permissions",
            )
            if ok and permissions:
                self.permissions = {**DEFAULT_PERMISSIONS, **permissions}
        return True

    def deselect(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.selected = None
        self.events = []
        self.summary = None
        self.messages = []
        self.permissions = dict(DEFAULT_PERMISSIONS)

    def _on_message(self, message: Dict[str, Any]) -> None:
        if message.get("id") and any(m.get("id") == message["id"] for m in self.messages):
            return
        self.messages.append(message)

    def send_message(self, text: str) -> bool:
        channel = self.dm_channel
        if channel is None or not self.user_id:
            return False
        ok, sent = self._attempt("send_message", lambda: api.send_direct_message(self.client, channel, self.user_id, text),
                                 "Message not sent")
        return bool(ok and sent)

    def record_interaction(self, activity_type: str, message: str) -> bool:
        """Log an interaction with the selected friend and refresh the summary."""
        other = (self.selected or {}).get("other_profile")
        if not other:
            return False
        ok, _ = self._attempt(
            "record",
            lambda: api.record_relationship_event(
                self.client, self.user_id, self.profile_id, other["id"], activity_type, message,
                other_user_id=other.get("user_id"),
            ),
            "Unable to record interaction",
        )
        if ok:
            self.select(self.selected["friendship"]["id"])
        return ok

    def save_permissions(self, **changes: Any) -> bool:
        other = (self.selected or {}).get("other_profile")
        if not other:
            return False
        updated = {**self.permissions, **changes}
        ok, _ = self._attempt(
            "permissions_save",
            lambda: api.upsert_permission_settings(self.client, self.profile_id, other["id"], updated),
            "Unable to save permissions",
        )
        if ok:
            self.permissions = updated
            self.toasts.push("Permissions updated")
        return ok

    def rows(self) -> List[PanelRow]:
        out = [
            title_row(self.title),
            stat_row("Friends", len(self.accepted)),
            stat_row("Incoming requests", len(self.incoming)),
            stat_row("Sent requests", len(self.outgoing)),
            header_row("Friends"),
        ]
        for entry in self.accepted:
            other = entry.get("other_profile") or {}
            name = other.get("display_name") or other.get("username") or "Unknown"
            color = COLOR_ACCENT_SUCCESS if entry is self.selected else COLOR_TEXT_DIM
            out.append(PanelRow(name, color, 1))

        if self.summary is not None:
            s = self.summary
            span = f"{s.tier_minimum}+" if s.tier_maximum is None else f"{s.tier_minimum}-{s.tier_maximum}"
            out += [
                header_row("Relationship"),
                stat_row("Affinity", s.affinity_score),
                stat_row("Tier", f"{s.tier_label} ({span})"),
                stat_row("Next tier", f"{s.progress_to_next_tier:.0%}"),
            ]
            for milestone in s.milestone_progress:
                mark = "x" if milestone.achieved else " "
                out.append(dim_row(f"[{mark}] {milestone.label} ({milestone.threshold})", indent=1))
        if self.selected is not None:
            out.append(header_row("Messages"))
            for message in self.messages[-6:]:
                out.append(dim_row(message.get("message", ""), indent=1))
        return out
