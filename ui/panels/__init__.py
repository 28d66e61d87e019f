"""
Dashboard panels.

Each panel keeps its own form state, talks to the store through
`StorePanel._attempt()` and exposes `rows()` for drawing.
"""

from .base import Panel, PanelRow, StorePanel
from .busking import BuskingPanel
from .events import (
    EventAnalyticsPanel,
    LineupPlannerPanel,
    PricingStrategyPanel,
    SponsorPanel,
    TicketTierPanel,
)
from .friendships import FriendshipPanel
from .jam_sessions import JamSessionPanel
from .music_video import MusicVideoPanel
from .underworld import UnderworldPanel

__all__ = [
    "Panel",
    "PanelRow",
    "StorePanel",
    "BuskingPanel",
    "EventAnalyticsPanel",
    "LineupPlannerPanel",
    "PricingStrategyPanel",
    "SponsorPanel",
    "TicketTierPanel",
    "FriendshipPanel",
    "JamSessionPanel",
    "MusicVideoPanel",
    "UnderworldPanel",
]
