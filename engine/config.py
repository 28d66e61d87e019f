"""
Client configuration: display preferences plus the remote store connection.

Values come from config/settings.json; the ROCKMUNDO_* environment
variables override the store fields so credentials need not live on disk.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any, Tuple

logger = logging.getLogger("rockmundo.config")

# Config file location
CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
CONFIG_DIR.mkdir(exist_ok=True)
CONFIG_FILE = CONFIG_DIR / "settings.json"

ENV_STORE_URL = "ROCKMUNDO_STORE_URL"
ENV_STORE_KEY = "ROCKMUNDO_STORE_KEY"
ENV_PROFILE_ID = "ROCKMUNDO_PROFILE_ID"
ENV_USER_ID = "ROCKMUNDO_USER_ID"


class GameConfig:
    """Manages client configuration/settings."""

    def __init__(self) -> None:
        self.width: int = 1280
        self.height: int = 720
        self.fullscreen: bool = False
        self.store_url: str = ""
        self.store_key: str = ""
        self.access_token: Optional[str] = None
        self.user_id: Optional[str] = None
        self.profile_id: Optional[str] = None
        self.avatar_seed: float = 0.5
        self.request_timeout: float = 10.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for saving."""
        return {
            "width": self.width,
            "height": self.height,
            "fullscreen": self.fullscreen,
            "store_url": self.store_url,
            "store_key": self.store_key,
            "user_id": self.user_id,
            "profile_id": self.profile_id,
            "avatar_seed": self.avatar_seed,
            "request_timeout": self.request_timeout,
        }

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Load config from dictionary."""
        self.width = data.get("width", 1280)
        self.height = data.get("height", 720)
        self.fullscreen = data.get("fullscreen", False)
        self.store_url = data.get("store_url", "")
        self.store_key = data.get("store_key", "")
        self.user_id = data.get("user_id")
        self.profile_id = data.get("profile_id")
        self.avatar_seed = float(data.get("avatar_seed", 0.5))
        self.request_timeout = float(data.get("request_timeout", 10.0))

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> None:
        """Let environment variables override the store connection."""
        env = os.environ if environ is None else environ
        self.store_url = env.get(ENV_STORE_URL, self.store_url)
        self.store_key = env.get(ENV_STORE_KEY, self.store_key)
        self.profile_id = env.get(ENV_PROFILE_ID, self.profile_id)
        self.user_id = env.get(ENV_USER_ID, self.user_id)

    @property
    def store_configured(self) -> bool:
        return bool(self.store_url and self.store_key)

    def get_resolution(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def save(self) -> bool:
        """Save config to file."""
        try:
            with CONFIG_FILE.open("w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False

    def load(self) -> bool:
        """Load config from file."""
        if not CONFIG_FILE.exists():
            return False

        try:
            with CONFIG_FILE.open("r", encoding="utf-8") as f:
                data = json.load(f)
            self.from_dict(data)
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Error loading config: {e}")
            return False


# Global config instance
_config = GameConfig()


def get_config() -> GameConfig:
    """Get the global config instance."""
    return _config


def load_config() -> GameConfig:
    """Load file settings, then environment overrides, and return the config."""
    _config.load()
    _config.apply_env()
    return _config


def save_config() -> bool:
    """Save the global config."""
    return _config.save()
