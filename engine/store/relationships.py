"""
Relationship data access: friendships, affinity events, direct messages
and trust permissions.

Affinity events and permission changes live in activity_feed rows whose
metadata names the other profile and the pair key; there is no dedicated
relationships table.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from engine.error_handler import ValidationError
from engine.store.client import StoreClient
from engine.store.errors import StoreError
from engine.store.realtime import RealtimeChannel, RealtimeHub
from systems.relationships import (
    RelationshipEvent,
    build_pair_key,
    event_weight,
    filter_relationship_events,
)

logger = logging.getLogger("rockmundo.store")

RELATIONSHIP_METADATA_KEY = "relationship_profile_id"
RELATIONSHIP_PAIR_KEY = "relationship_pair_key"
PERMISSION_UPDATE_TYPE = "relationship_permission_update"

EVENT_COLUMNS = "id, user_id, activity_type, message, metadata, created_at"
PROFILE_COLUMNS = (
    "id, user_id, username, display_name, bio, fame, fans, level, age, cash, current_city_id, avatar_url"
)
FRIENDSHIP_STATUSES = ("pending", "accepted", "declined", "blocked")


# ============================================================================
# Friendships
# ============================================================================

def fetch_friendships_for_profile(client: StoreClient, profile_id: str) -> List[Dict[str, Any]]:
    return client.table("friendships").select("*").or_(
        f"requestor_id.eq.{profile_id},addressee_id.eq.{profile_id}"
    ).order("created_at", desc=True).execute().data or []


def fetch_profiles_by_ids(client: StoreClient, profile_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
    if not profile_ids:
        return {}
    rows = client.table("profiles").select(PROFILE_COLUMNS).in_("id", profile_ids).execute().data or []
    return {row["id"]: row for row in rows}


def load_friendships(client: StoreClient, profile_id: str) -> List[Dict[str, Any]]:
    """
    Friendships of a profile, each decorated with the other side's profile.

    Returns:
        Dicts with keys friendship, other_profile (None when the profile
        row is missing) and is_requester.
    """
    friendships = fetch_friendships_for_profile(client, profile_id)
    if not friendships:
        return []

    related = set()
    for friendship in friendships:
        related.add(friendship["requestor_id"])
        related.add(friendship["addressee_id"])
    related.discard(profile_id)

    profiles = fetch_profiles_by_ids(client, sorted(related))

    decorated = []
    for friendship in friendships:
        is_requester = friendship["requestor_id"] == profile_id
        other_id = friendship["addressee_id"] if is_requester else friendship["requestor_id"]
        decorated.append({
            "friendship": friendship,
            "other_profile": profiles.get(other_id),
            "is_requester": is_requester,
        })
    return decorated


def respond_to_friendship(client: StoreClient, friendship_id: str, status: str) -> None:
    if status == "pending" or status not in FRIENDSHIP_STATUSES:
        raise ValidationError(f"Cannot respond to a friendship with status {status!r}")
    client.table("friendships").update({"status": status}).eq("id", friendship_id).execute()


def cancel_friendship(client: StoreClient, friendship_id: str) -> None:
    client.table("friendships").delete().eq("id", friendship_id).execute()


def create_friend_request(client: StoreClient, requestor_profile_id: str, target_profile_id: str) -> Dict[str, Any]:
    if requestor_profile_id == target_profile_id:
        raise ValidationError("Cannot befriend yourself", user_message="You can't send a request to yourself.")
    rows = client.table("friendships").insert({
        "requestor_id": requestor_profile_id,
        "addressee_id": target_profile_id,
        "status": "pending",
    }).execute().data or []
    return rows[0] if rows else {}


def search_profiles(
    client: StoreClient,
    query: str,
    exclude_profile_ids: Sequence[str] = (),
    limit: int = 10,
) -> List[Dict[str, Any]]:
    """Profiles whose username or display name contains the query."""
    term = query.strip()
    if not term:
        return []
    request = client.table("profiles").select(PROFILE_COLUMNS).or_(
        f"username.ilike.*{term}*,display_name.ilike.*{term}*"
    )
    if exclude_profile_ids:
        request.not_in("id", exclude_profile_ids)
    return request.limit(limit).execute().data or []


# ============================================================================
# Affinity events
# ============================================================================

def record_relationship_event(
    client: StoreClient,
    user_id: str,
    profile_id: str,
    other_profile_id: str,
    activity_type: str,
    message: str,
    other_user_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    if not user_id or not profile_id or not other_profile_id:
        raise ValidationError("Missing identifiers for relationship event")

    payload_metadata: Dict[str, Any] = {
        RELATIONSHIP_METADATA_KEY: other_profile_id,
        RELATIONSHIP_PAIR_KEY: build_pair_key(profile_id, other_profile_id),
        "other_profile_user_id": other_user_id,
        "affinity_value": event_weight(activity_type),
    }
    payload_metadata.update(metadata or {})

    client.table("activity_feed").insert({
        "user_id": user_id,
        "activity_type": activity_type,
        "message": message,
        "metadata": payload_metadata,
    }).execute()


def fetch_relationship_events(
    client: StoreClient,
    profile_id: str,
    other_profile_id: str,
    user_ids: Sequence[str],
    limit: int = 75,
) -> List[RelationshipEvent]:
    """
    Events tagged with this pair, newest first.

    Reads the activity feeds of every user in `user_ids` (the current user
    first). When row-level security refuses the friend's feed, the read is
    retried once against the current user's feed alone; any other failure,
    or a failed retry, propagates.
    """
    if not profile_id or not other_profile_id or not user_ids:
        return []

    def _query():
        return client.table("activity_feed").select(EVENT_COLUMNS)

    try:
        rows = _query().in_("user_id", user_ids).order(
            "created_at", desc=True
        ).limit(limit * 2).execute().data or []
    except StoreError as e:
        if not e.is_rls_violation:
            raise
        logger.info(f"activity_feed read refused ({e.code}); retrying with own feed only")
        rows = _query().eq("user_id", user_ids[0]).order(
            "created_at", desc=True
        ).limit(limit * 2).execute().data or []

    return filter_relationship_events(rows, profile_id, other_profile_id, limit)


# ============================================================================
# Direct messages
# ============================================================================

def fetch_direct_messages(client: StoreClient, channel: str) -> List[Dict[str, Any]]:
    return client.table("global_chat").select(
        "id, channel, message, created_at, user_id"
    ).eq("channel", channel).order("created_at").limit(200).execute().data or []


def send_direct_message(client: StoreClient, channel: str, user_id: str, message: str) -> bool:
    """Post a trimmed message. Blank messages are dropped; returns whether one was sent."""
    trimmed = message.strip()
    if not trimmed:
        return False
    client.table("global_chat").insert({
        "channel": channel,
        "user_id": user_id,
        "message": trimmed,
    }).execute()
    return True


def subscribe_to_direct_messages(
    hub: RealtimeHub,
    channel: str,
    on_message: Callable[[Dict[str, Any]], None],
) -> Callable[[], None]:
    """Listen for new messages on a DM channel. Returns the unsubscribe function."""
    subscription: RealtimeChannel = hub.channel(f"relationship-dm:{channel}").on(
        "global_chat",
        lambda change: on_message(change["new"]),
        event="INSERT",
        filter=("channel", channel),
    ).subscribe()
    return subscription.unsubscribe


# ============================================================================
# Permissions, bands, profiles
# ============================================================================

def upsert_permission_settings(
    client: StoreClient,
    profile_id: str,
    other_profile_id: str,
    settings: Dict[str, Any],
) -> None:
    row = client.table("profiles").select("user_id").eq("id", profile_id).maybe_single().execute().data
    user_id = (row or {}).get("user_id")
    if not user_id:
        raise ValidationError("Unable to resolve user id for profile")

    record_relationship_event(
        client,
        user_id=user_id,
        profile_id=profile_id,
        other_profile_id=other_profile_id,
        activity_type=PERMISSION_UPDATE_TYPE,
        message="Updated trust permissions",
        metadata={"permissions": settings},
    )


def fetch_permission_history(
    client: StoreClient,
    other_profile_id: str,
    user_id: str,
) -> Optional[Dict[str, Any]]:
    """Most recent permission settings the user granted the other profile."""
    row = client.table("activity_feed").select("metadata").eq(
        "user_id", user_id
    ).eq("activity_type", PERMISSION_UPDATE_TYPE).contains(
        "metadata", {RELATIONSHIP_METADATA_KEY: other_profile_id}
    ).order("created_at", desc=True).limit(1).maybe_single().execute().data

    metadata = (row or {}).get("metadata")
    if not isinstance(metadata, dict):
        return None
    permissions = metadata.get("permissions")
    if not isinstance(permissions, dict) or not permissions:
        return None
    return permissions


def fetch_band_memberships(client: StoreClient, profile_id: str) -> List[Dict[str, Any]]:
    return client.table("band_members").select(
        "band_id, role, bands!band_members_band_id_fkey(id, name, genre, fame)"
    ).eq("profile_id", profile_id).order("created_at", desc=True).execute().data or []


def fetch_profile_by_id(client: StoreClient, profile_id: str) -> Optional[Dict[str, Any]]:
    return client.table("profiles").select(PROFILE_COLUMNS).eq("id", profile_id).maybe_single().execute().data


def fetch_activity_feed_for_profile(client: StoreClient, profile_id: str, limit: int = 30) -> List[Dict[str, Any]]:
    profile = fetch_profile_by_id(client, profile_id)
    if not profile or not profile.get("user_id"):
        return []
    return client.table("activity_feed").select(
        "id, activity_type, message, metadata, created_at"
    ).eq("user_id", profile["user_id"]).order("created_at", desc=True).limit(limit).execute().data or []
