"""
Unit tests for toasts, error surfacing and client configuration.
"""

import pytest

from engine.config import ENV_PROFILE_ID, ENV_STORE_KEY, ENV_STORE_URL, GameConfig
from engine.error_handler import (
    GENERIC_FAILURE,
    MAX_CONSECUTIVE_FAILURES,
    GameError,
    ValidationError,
    handle_critical_error,
    log_error,
)
from engine.toasts import ToastLog, get_variant_color


class TestToastLog:
    """Tests for ToastLog."""

    def test_variants(self, toasts):
        toasts.success("Saved")
        toasts.error("Failed", "nope")
        toasts.push("Note")
        assert [t.variant for t in toasts.history] == ["success", "destructive", "default"]
        assert toasts.latest.title == "Note"

    def test_history_bounded(self):
        log = ToastLog(max_size=3)
        for i in range(5):
            log.push(str(i))
        assert [t.title for t in log.history] == ["2", "3", "4"]

    def test_visible_window(self):
        log = ToastLog(display_seconds=4.0)
        toast = log.push("Hi")
        assert log.visible(now=toast.created_at + 3.9) == [toast]
        assert log.visible(now=toast.created_at + 4.1) == []

    def test_clear(self, toasts):
        toasts.push("x")
        toasts.clear()
        assert toasts.latest is None

    def test_variant_colors(self):
        assert get_variant_color("DESTRUCTIVE") == (255, 120, 120)
        assert get_variant_color("sparkly") == get_variant_color("default")


class TestErrorSurfacing:
    """Tests for log_error and handle_critical_error."""

    def test_log_error_uses_user_message(self, toasts):
        log_error(ValidationError("bad form", user_message="Please fill in a name"), "test", toasts=toasts)
        assert toasts.latest.variant == "destructive"
        assert toasts.latest.title == "Error"
        assert toasts.latest.description == "Please fill in a name"

    def test_explicit_description_wins(self, toasts):
        log_error(GameError("x"), "test", user_message="Could not save", toasts=toasts, title="Save failed")
        assert (toasts.latest.title, toasts.latest.description) == ("Save failed", "Could not save")

    def test_plain_exception_gets_generic_text(self, toasts):
        log_error(RuntimeError("boom"), "test", toasts=toasts)
        assert toasts.latest.description == GENERIC_FAILURE

    def test_no_toast_without_log(self):
        log_error(RuntimeError("boom"), "test")

    def test_recovery_action(self, toasts):
        ran = []
        assert handle_critical_error(RuntimeError("boom"), "loop", toasts, lambda: ran.append(1)) is True
        assert ran == [1]
        assert toasts.latest.title == "Screen reset"

    def test_failed_recovery_without_toasts_reraises(self):
        def broken():
            raise ValueError("still broken")

        assert handle_critical_error(RuntimeError("boom"), "loop", None, broken) is False

    def test_repeated_failures_give_up(self, toasts):
        ran = []
        assert handle_critical_error(RuntimeError("boom"), "loop", toasts, lambda: ran.append(1),
                                     consecutive=MAX_CONSECUTIVE_FAILURES - 1) is True
        toasts.clear()
        assert handle_critical_error(RuntimeError("boom"), "loop", toasts, lambda: ran.append(1),
                                     consecutive=MAX_CONSECUTIVE_FAILURES) is False
        assert ran == [1]
        assert toasts.latest is None


class TestGameConfig:
    """Tests for GameConfig."""

    def test_defaults_offline(self):
        config = GameConfig()
        assert not config.store_configured
        assert config.get_resolution() == (1280, 720)

    def test_env_overrides(self):
        config = GameConfig()
        config.from_dict({"store_url": "https://file.example", "store_key": "file-key"})
        config.apply_env({ENV_STORE_URL: "https://env.example", ENV_PROFILE_ID: "p-7"})
        assert config.store_url == "https://env.example"
        assert config.store_key == "file-key"
        assert config.profile_id == "p-7"
        assert config.store_configured

    def test_dict_round_trip(self):
        config = GameConfig()
        config.from_dict({"width": 800, "height": 600, "avatar_seed": "0.25", ENV_STORE_KEY: "ignored"})
        data = config.to_dict()
        assert data["width"] == 800
        assert data["avatar_seed"] == pytest.approx(0.25)
        assert "access_token" not in data
