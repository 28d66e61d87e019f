"""
Unit tests for the busking and music video panels.
"""

import random
from datetime import datetime, timezone

import pytest

from ui.panels.busking import BuskingPanel
from ui.panels.music_video import MusicVideoPanel


class _FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(1)
        self.value = value

    def random(self) -> float:
        return self.value


LOCATIONS = [
    {"id": "loc-1", "name": "Old Town Plaza", "recommended_skill": 65, "risk_level": "medium",
     "base_payout": 200, "fame_reward": 10, "experience_reward": 20},
    {"id": "loc-2", "name": "Subway", "recommended_skill": 80, "risk_level": "high", "base_payout": 300},
]
MODIFIERS = [{"id": "mod-1", "name": "Friendly dog", "risk_modifier": -10, "rarity": "rare"}]


def _busking(store_client, toasts, fake_store, roll):
    fake_store.add("GET", "busking_locations", LOCATIONS)
    fake_store.add("GET", "busking_modifiers", MODIFIERS)
    panel = BuskingPanel(store_client, toasts, "p-1", skill_score=65, rng=_FixedRandom(roll))
    assert panel.load()
    return panel


class TestBuskingPanel:
    """Tests for BuskingPanel."""

    def test_load_picks_first_spot(self, store_client, toasts, fake_store):
        panel = _busking(store_client, toasts, fake_store, 0.1)
        assert panel.location.id == "loc-1"
        assert len(panel.modifiers) == 1
        assert panel.success_chance == 43
        history = fake_store.calls("GET", "busking_sessions")[0]
        assert ("user_id", "eq.p-1") in fake_store.params(history)

    def test_modifier_changes_odds(self, store_client, toasts, fake_store):
        panel = _busking(store_client, toasts, fake_store, 0.1)
        panel.select_modifier("mod-1")
        assert panel.success_chance == 53
        panel.select_modifier(None)
        assert panel.modifier is None

    def test_select_unknown_location(self, store_client, toasts, fake_store):
        panel = _busking(store_client, toasts, fake_store, 0.1)
        assert not panel.select_location("nowhere")
        assert panel.select_location("loc-2")
        assert panel.location.name == "Subway"

    def test_successful_set(self, store_client, toasts, fake_store):
        panel = _busking(store_client, toasts, fake_store, 0.1)
        fake_store.add("POST", "busking_sessions", [{"id": "s1", "success": True, "cash_earned": 200}], status=201)
        outcome = panel.perform()
        assert outcome.success
        assert toasts.latest.title == "Great set!"
        assert toasts.latest.variant == "success"
        assert panel.history[0]["id"] == "s1"
        body = fake_store.body(fake_store.calls("POST", "busking_sessions")[0])
        assert body["location_id"] == "loc-1"
        assert body["success_chance"] == 43

    def test_failed_set(self, store_client, toasts, fake_store):
        panel = _busking(store_client, toasts, fake_store, 0.99)
        outcome = panel.perform()
        assert not outcome.success
        assert toasts.latest.title == "Tough crowd"
        assert toasts.latest.description == outcome.failure_reason

    def test_save_failure_keeps_nothing(self, store_client, toasts, fake_store):
        panel = _busking(store_client, toasts, fake_store, 0.1)
        fake_store.error("POST", "busking_sessions", "42501")
        assert panel.perform() is None
        assert panel.last_outcome is None
        assert panel.history == []
        assert toasts.latest.title == "Session failed to save"

    def test_perform_needs_profile(self, store_client, toasts):
        panel = BuskingPanel(store_client, toasts, None)
        assert panel.perform() is None
        assert toasts.latest.title == "Pick a spot first"

    def test_load_failure(self, store_client, toasts, fake_store):
        fake_store.error("GET", "busking_locations", "PGRST000", status=500)
        panel = BuskingPanel(store_client, toasts, "p-1")
        assert not panel.load()
        assert toasts.latest.title == "Unable to load busking spots"
        assert fake_store.calls("GET", "busking_modifiers") == []

    def test_rows(self, store_client, toasts, fake_store):
        panel = _busking(store_client, toasts, fake_store, 0.1)
        texts = [r.text for r in panel.rows()]
        assert "Success chance: 43%" in texts
        assert "--- Modifiers ---" in texts


@pytest.fixture
def video_panel(store_client, toasts):
    return MusicVideoPanel(store_client, toasts, "u-1", band_ids=["b-1", "b-2"])


class TestMusicVideoPanel:
    """Tests for MusicVideoPanel."""

    def test_load_owned_rows(self, video_panel, fake_store):
        fake_store.add("GET", "releases", [{"id": "r-1", "title": "Debut", "band_id": "b-1"}])
        fake_store.add("GET", "music_video_configs", [])
        assert video_panel.load()
        assert video_panel.selected_release_id == "r-1"
        params = fake_store.params(fake_store.calls("GET", "releases")[0])
        assert ("or", "(user_id.eq.u-1,band_id.in.(b-1,b-2))") in params

    def test_load_without_user(self, store_client, toasts, fake_store):
        assert not MusicVideoPanel(store_client, toasts, None).load()
        assert fake_store.requests == []

    def test_create(self, video_panel, toasts, fake_store):
        video_panel.releases = [{"id": "r-1", "band_id": "b-2"}]
        video_panel.selected_release_id = "r-1"
        video_panel.options.cast_quality = "emerging"
        fake_store.add("POST", "music_video_configs", {"id": "mv-1", "theme": "cinematic"}, status=201)

        row = video_panel.create()
        assert row == {"id": "mv-1", "theme": "cinematic"}
        assert video_panel.configs[0]["id"] == "mv-1"
        assert toasts.latest.title == "Music video plan created"

        body = fake_store.body(fake_store.calls("POST", "music_video_configs")[0])
        assert body["band_id"] == "b-2"
        assert body["budget_amount"] == 153000
        assert body["cast_quality"] is None
        assert body["production_notes"] is None

    def test_create_failure(self, video_panel, toasts, fake_store):
        fake_store.error("POST", "music_video_configs", "23502", "null value", status=400)
        assert video_panel.create() is None
        assert video_panel.configs == []
        assert toasts.latest.title == "Unable to create plan"

    def test_sync_metrics(self, video_panel, toasts, fake_store):
        video_panel.configs = [{"id": "mv-1", "theme": "cinematic"}]
        fake_store.add("POST", "music_video_metrics", {"music_video_id": "mv-1", "youtube_views": 5})
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)

        row = video_panel.sync_metrics("mv-1", now)
        assert row["youtube_views"] == 5
        assert video_panel.configs[0]["music_video_metrics"] == row
        request = fake_store.calls("POST", "music_video_metrics")[0]
        assert ("on_conflict", "music_video_id") in fake_store.params(request)
        assert fake_store.body(request)["last_synced_at"] == "2024-05-01T00:00:00+00:00"

    def test_sync_unknown_config(self, video_panel, fake_store):
        assert video_panel.sync_metrics("missing") is None
        assert fake_store.requests == []

    def test_set_status(self, video_panel, toasts):
        video_panel.configs = [{"id": "mv-1", "status": "draft"}]
        assert video_panel.set_status("mv-1", "released")
        assert video_panel.configs[0]["status"] == "released"
        assert not video_panel.set_status("mv-1", "viral")
        assert toasts.latest.title == "Unknown status"

    def test_rows_summaries(self, video_panel):
        assert "No music videos planned yet" in [r.text for r in video_panel.rows()]
        video_panel.configs = [{"id": "mv-1", "theme": "cinematic", "budget_amount": 1000, "status": "released"}]
        texts = [r.text for r in video_panel.rows()]
        assert "cinematic  $1,000  [Released]" in texts
