"""
Dashboard scene: one tab per panel.

LEFT/RIGHT switch tabs, UP/DOWN scroll, F5 reloads the current panel from
the store.
"""

from typing import Dict, List, Optional

import pygame

from engine.store.client import StoreClient
from engine.store.realtime import RealtimeHub
from engine.toasts import ToastLog
from ui.panels import (
    BuskingPanel,
    EventAnalyticsPanel,
    FriendshipPanel,
    JamSessionPanel,
    LineupPlannerPanel,
    MusicVideoPanel,
    Panel,
    PricingStrategyPanel,
    SponsorPanel,
    TicketTierPanel,
    UnderworldPanel,
)
from ui.screen_components import draw_panel, draw_screen_footer, draw_screen_header, draw_toasts
from ui.screen_constants import MARGIN_X, MARGIN_Y_FOOTER, MARGIN_Y_START

TAB_WINDOW = 5
FOOTER_HINTS = ["LEFT/RIGHT: tabs   UP/DOWN: scroll   F5: reload   TAB: avatar studio   ESC: quit"]


def build_panels(
    toasts: ToastLog,
    client: Optional[StoreClient],
    hub: RealtimeHub,
    user_id: Optional[str],
    profile_id: Optional[str],
    event_id: Optional[str] = None,
) -> Dict[str, Panel]:
    """
    Panels in tab order.

    Without a store client only the local event-planning panels are built.
    """
    sponsors = SponsorPanel(toasts)
    lineup = LineupPlannerPanel(toasts)
    pricing = PricingStrategyPanel(toasts, sponsor_contribution=lambda: sponsors.total_contribution)
    tickets = TicketTierPanel(client, toasts, event_id=event_id)
    analytics = EventAnalyticsPanel(toasts, tickets, sponsors, lineup, pricing)

    panels: Dict[str, Panel] = {
        "analytics": analytics,
        "tickets": tickets,
        "sponsors": sponsors,
        "lineup": lineup,
        "pricing": pricing,
    }
    if client is not None:
        panels.update({
            "videos": MusicVideoPanel(client, toasts, user_id),
            "busking": BuskingPanel(client, toasts, profile_id),
            "jams": JamSessionPanel(client, toasts, hub, profile_id, user_id),
            "friends": FriendshipPanel(client, toasts, hub, user_id, profile_id),
            "underworld": UnderworldPanel(client, toasts, user_id),
        })
    return panels


class DashboardScene:
    def __init__(self, screen: pygame.Surface, toasts: ToastLog, panels: Dict[str, Panel]) -> None:
        self.screen = screen
        self.toasts = toasts
        self.panels = panels
        self.names: List[str] = list(panels.keys())
        self.index = 0
        self.scroll = 0
        self.loaded: set = set()
        self.font_main = pygame.font.SysFont("consolas", 20)
        self.font_small = pygame.font.SysFont("consolas", 16)

    @property
    def current_name(self) -> str:
        return self.names[self.index]

    @property
    def current(self) -> Panel:
        return self.panels[self.current_name]

    def visible_tabs(self) -> List[str]:
        """Up to TAB_WINDOW tab names, keeping the current one in view."""
        start = max(0, min(self.index - TAB_WINDOW // 2, len(self.names) - TAB_WINDOW))
        return self.names[start:start + TAB_WINDOW]

    def switch(self, offset: int) -> None:
        self.index = (self.index + offset) % len(self.names)
        self.scroll = 0
        if self.current_name not in self.loaded:
            self.reload()

    def reload(self) -> None:
        """Load the current panel if it is store backed."""
        load = getattr(self.current, "load", None)
        if load is not None:
            load()
        self.loaded.add(self.current_name)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_RIGHT:
            self.switch(1)
        elif event.key == pygame.K_LEFT:
            self.switch(-1)
        elif event.key == pygame.K_DOWN:
            self.scroll = min(self.scroll + 1, max(0, len(self.current.rows()) - 1))
        elif event.key == pygame.K_UP:
            self.scroll = max(0, self.scroll - 1)
        elif event.key == pygame.K_F5:
            self.reload()

    def update(self, dt: float) -> None:
        pass

    def draw(self) -> None:
        w, h = self.screen.get_size()
        self.screen.fill((15, 15, 20))
        draw_screen_header(self.screen, self.font_main, "Rockmundo", self.current_name, self.visible_tabs(), w)
        rect = pygame.Rect(MARGIN_X, MARGIN_Y_START, w - MARGIN_X * 2, h - MARGIN_Y_START - MARGIN_Y_FOOTER - 10)
        draw_panel(self.screen, self.font_small, self.current.rows(), rect, self.scroll)
        draw_screen_footer(self.screen, self.font_small, FOOTER_HINTS, w, h)
        draw_toasts(self.screen, self.font_small, self.toasts, w)
