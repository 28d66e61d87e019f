"""
Unit tests for the dashboard and avatar studio scenes and the shared UI components.
"""

import pygame
import pytest

from engine.scenes.avatar_studio import AvatarStudioScene
from engine.scenes.dashboard import TAB_WINDOW, DashboardScene, build_panels
from systems.avatar.hair import all_hair_style_keys
from ui.panels.base import PanelRow, dim_row, title_row
from ui.screen_components import draw_panel, draw_toasts, get_rarity_color, truncate


def _key(key):
    return pygame.event.Event(pygame.KEYDOWN, key=key)


class TestScreenComponents:
    """Tests for the shared drawing helpers."""

    def test_draw_panel_stops_at_bottom(self, sample_screen):
        font = pygame.font.Font(None, 16)
        rows = [title_row("Title")] + [PanelRow(f"row {i}") for i in range(4)]
        drawn = draw_panel(sample_screen, font, rows, pygame.Rect(0, 0, 300, 100))
        assert drawn == 3

    def test_draw_panel_scroll(self, sample_screen):
        font = pygame.font.Font(None, 16)
        rows = [dim_row(str(i)) for i in range(3)]
        assert draw_panel(sample_screen, font, rows, pygame.Rect(0, 0, 300, 200), scroll=2) == 1

    def test_draw_toasts(self, sample_screen, toasts):
        toasts.error("Failed", "A very long description " * 5)
        draw_toasts(sample_screen, pygame.font.Font(None, 16), toasts, 320)

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("a" * 20, 10) == "aaaaaaa..."

    def test_rarity_colors(self):
        assert get_rarity_color("LEGENDARY") == (255, 200, 120)
        assert get_rarity_color(None) == (220, 220, 220)


class TestDashboard:
    """Tests for panel assembly and tab navigation."""

    def test_offline_builds_local_panels(self, toasts, hub):
        panels = build_panels(toasts, None, hub, None, None)
        assert list(panels) == ["analytics", "tickets", "sponsors", "lineup", "pricing"]

    def test_online_adds_store_panels(self, toasts, hub, store_client):
        panels = build_panels(toasts, store_client, hub, "u-1", "p-1", event_id="e-1")
        assert list(panels)[5:] == ["videos", "busking", "jams", "friends", "underworld"]

    def test_pricing_reads_sponsor_total(self, toasts, hub):
        panels = build_panels(toasts, None, hub, None, None)
        panels["sponsors"].form.name = "Acme"
        panels["sponsors"].form.contribution = 20000
        panels["sponsors"].add()
        assert panels["pricing"].recommendation().tickets_to_break_even == 639

    def test_tab_switch_loads_once(self, sample_screen, toasts, hub, store_client, fake_store):
        panels = build_panels(toasts, store_client, hub, "u-1", "p-1", event_id="e-1")
        scene = DashboardScene(sample_screen, toasts, panels)
        scene.handle_event(_key(pygame.K_RIGHT))
        assert scene.current_name == "tickets"
        scene.handle_event(_key(pygame.K_LEFT))
        scene.handle_event(_key(pygame.K_RIGHT))
        assert len(fake_store.calls("GET", "event_ticket_tiers")) == 1
        scene.handle_event(_key(pygame.K_F5))
        assert len(fake_store.calls("GET", "event_ticket_tiers")) == 2

    def test_tabs_wrap_and_window(self, sample_screen, toasts, hub, store_client):
        panels = build_panels(toasts, store_client, hub, "u-1", "p-1")
        scene = DashboardScene(sample_screen, toasts, panels)
        assert scene.visible_tabs() == scene.names[:TAB_WINDOW]
        scene.handle_event(_key(pygame.K_LEFT))
        assert scene.current_name == "underworld"
        assert scene.visible_tabs() == scene.names[-TAB_WINDOW:]

    def test_scroll_bounds(self, sample_screen, toasts, hub):
        scene = DashboardScene(sample_screen, toasts, build_panels(toasts, None, hub, None, None))
        scene.handle_event(_key(pygame.K_UP))
        assert scene.scroll == 0
        scene.handle_event(_key(pygame.K_DOWN))
        assert scene.scroll == 1

    def test_draw(self, sample_screen, toasts, hub):
        scene = DashboardScene(sample_screen, toasts, build_panels(toasts, None, hub, None, None))
        toasts.push("Hello")
        scene.draw()


class TestAvatarStudio:
    """Tests for AvatarStudioScene."""

    @pytest.fixture
    def studio(self, sample_screen, toasts):
        return AvatarStudioScene(sample_screen, toasts, profile_id="p-1")

    def test_framing_keys(self, studio):
        studio.handle_event(_key(pygame.K_1))
        assert studio.camera.preset == "face"
        studio.handle_event(_key(pygame.K_3))
        assert studio.camera.preset == "full"

    def test_zoom_keys_and_wheel(self, studio):
        start = studio.camera.distance
        studio.handle_event(_key(pygame.K_MINUS))
        assert studio.camera.distance == pytest.approx(start + 0.2)
        studio.handle_event(pygame.event.Event(pygame.MOUSEWHEEL, x=0, y=1))
        assert studio.camera.distance == pytest.approx(start)

    def test_expression_cycle(self, studio):
        studio.handle_event(_key(pygame.K_e))
        assert studio.expression == "happy"
        assert studio.scene.expression == "happy"

    def test_hair_cycle_keeps_pose(self, studio):
        studio.update(1.0)
        pose = studio.scene.root.position
        keys = all_hair_style_keys()
        before = studio.scene.hair_style
        after = studio.cycle_hair()
        assert keys.index(after) == (keys.index(before) + 1) % len(keys)
        assert studio.scene.root.position == pose

    def test_save_offline(self, studio, toasts):
        studio.handle_event(_key(pygame.K_s))
        assert toasts.latest.title == "Offline"

    def test_save_online(self, sample_screen, toasts, store_client, fake_store):
        studio = AvatarStudioScene(sample_screen, toasts, client=store_client, profile_id="p-1")
        assert studio.save()
        assert toasts.latest.title == "Avatar saved"
        assert toasts.latest.description == "Look inserted."

    def test_save_without_profile(self, sample_screen, toasts, store_client):
        studio = AvatarStudioScene(sample_screen, toasts, client=store_client)
        assert not studio.save()
        assert toasts.latest.title == "Save failed"

    def test_draw(self, studio):
        studio.update(0.016)
        studio.draw()
        assert studio.renderer.last_triangle_count > 0
