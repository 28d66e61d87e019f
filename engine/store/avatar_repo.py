"""Load and save a profile's avatar configuration."""

from __future__ import annotations

import logging
from typing import Optional

from engine.error_handler import ValidationError
from engine.store.client import StoreClient
from systems.avatar.config import AvatarConfig, default_avatar_config

logger = logging.getLogger("rockmundo.store")

AVATAR_TABLE = "player_avatar_config"


def load_avatar_config(client: StoreClient, profile_id: Optional[str]) -> Optional[AvatarConfig]:
    """
    The stored avatar for a profile, filled with defaults.

    Returns None without a profile id, and the default avatar when the
    profile has never saved one.
    """
    if not profile_id:
        return None
    row = client.table(AVATAR_TABLE).select("*").eq("profile_id", profile_id).maybe_single().execute().data
    if not row:
        logger.debug(f"no stored avatar for {profile_id}; using defaults")
        return default_avatar_config(profile_id)
    return AvatarConfig.from_row(row).with_defaults()


def save_avatar_config(client: StoreClient, profile_id: Optional[str], config: AvatarConfig) -> str:
    """
    Update the profile's avatar row, or insert one if none exists.

    Returns:
        "updated" or "inserted"
    """
    if not profile_id:
        raise ValidationError("Not authenticated", user_message="Sign in to save your avatar.")

    values = config.with_defaults().to_row()
    existing = client.table(AVATAR_TABLE).select("id").eq("profile_id", profile_id).maybe_single().execute().data
    if existing:
        client.table(AVATAR_TABLE).update(values).eq("profile_id", profile_id).execute()
        return "updated"

    values["profile_id"] = profile_id
    client.table(AVATAR_TABLE).insert(values).execute()
    return "inserted"
