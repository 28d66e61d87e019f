"""Busking panel: pick a spot and a gimmick, see the odds, play a set."""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

from engine.error_handler import ValidationError
from engine.store.client import StoreClient
from engine.toasts import ToastLog
from systems.busking import (
    BuskingLocation,
    BuskingModifier,
    BuskingOutcome,
    calculate_success_chance,
    resolve_busking_session,
)
from ui.panels.base import PanelRow, StorePanel, dim_row, header_row, money, stat_row, title_row
from ui.screen_components import get_rarity_color

HISTORY_LIMIT = 10


class BuskingPanel(StorePanel):
    title = "Busking"
    context = "busking"

    def __init__(
        self,
        client: StoreClient,
        toasts: ToastLog,
        profile_id: Optional[str],
        skill_score: float = 50,
        city_multiplier: float = 1.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(client, toasts)
        self.profile_id = profile_id
        self.skill_score = skill_score
        self.city_multiplier = city_multiplier
        self.rng = rng or random.Random()
        self.locations: List[BuskingLocation] = []
        self.modifiers: List[BuskingModifier] = []
        self.history: List[Dict[str, Any]] = []
        self.location: Optional[BuskingLocation] = None
        self.modifier: Optional[BuskingModifier] = None
        self.last_outcome: Optional[BuskingOutcome] = None

    def load(self) -> bool:
        ok, locations = self._attempt(
            "load_locations",
            lambda: self.client.table("busking_locations").select("*").order("recommended_skill").execute().data or [],
            "Unable to load busking spots",
        )
        if not ok:
            return False
        ok, modifiers = self._attempt(
            "load_modifiers",
            lambda: self.client.table("busking_modifiers").select("*").order("name").execute().data or [],
            "Unable to load busking modifiers",
        )
        if not ok:
            return False

        self.locations = [BuskingLocation.from_row(r) for r in locations]
        self.modifiers = [BuskingModifier.from_row(r) for r in modifiers]
        if self.location is None and self.locations:
            self.location = self.locations[0]
        return self.load_history()

    def load_history(self) -> bool:
        if not self.profile_id:
            return True
        ok, rows = self._attempt(
            "load_history",
            lambda: self.client.table("busking_sessions").select("*").eq(
                "user_id", self.profile_id
            ).order("created_at", desc=True).limit(HISTORY_LIMIT).execute().data or [],
            "Unable to load busking history",
        )
        if ok:
            self.history = rows
        return ok

    def select_location(self, location_id: str) -> bool:
        found = next((loc for loc in self.locations if loc.id == location_id), None)
        if found is not None:
            self.location = found
        return found is not None

    def select_modifier(self, modifier_id: Optional[str]) -> None:
        """None clears the modifier."""
        self.modifier = next((m for m in self.modifiers if m.id == modifier_id), None)

    @property
    def success_chance(self) -> Optional[int]:
        if self.location is None:
            return None
        return calculate_success_chance(self.skill_score, self.location, self.modifier, self.city_multiplier)

    def perform(self) -> Optional[BuskingOutcome]:
        """Roll a session and record it. Nothing is kept locally if the save fails."""
        if self.location is None or not self.profile_id:
            self._fail(ValidationError("no location or profile"), "perform", "Pick a spot first")
            return None

        outcome = resolve_busking_session(
            self.skill_score, self.location, self.modifier, self.city_multiplier, self.rng
        )
        row = outcome.to_session_row(self.profile_id, self.location, self.modifier)
        ok, saved = self._attempt(
            "perform",
            lambda: self.client.table("busking_sessions").insert(row).select("*").maybe_single().execute().data,
            "Session failed to save",
        )
        if not ok:
            return None

        self.last_outcome = outcome
        self.history = ([saved or row] + self.history)[:HISTORY_LIMIT]
        if outcome.success:
            self.toasts.success(
                "Great set!",
                f"You earned {money(outcome.cash_earned)} and {outcome.fame_gained} fame at {self.location.name}.",
            )
        else:
            self.toasts.error("Tough crowd", outcome.failure_reason or "The set fell flat.")
        return outcome

    def rows(self) -> List[PanelRow]:
        out = [title_row(self.title), stat_row("Skill", f"{self.skill_score:.0f}")]
        if self.location is None:
            out.append(dim_row("No busking spots available"))
            return out

        loc = self.location
        out += [
            stat_row("Spot", f"{loc.name} ({loc.risk_level} risk, skill {loc.recommended_skill:.0f})"),
            stat_row("Modifier", self.modifier.name if self.modifier else "None"),
            stat_row("Success chance", f"{self.success_chance}%"),
        ]
        if self.modifiers:
            out.append(header_row("Modifiers"))
            for mod in self.modifiers:
                out.append(PanelRow(f"{mod.name} x{mod.payout_multiplier:g} pay", get_rarity_color(mod.rarity), 1))
        if self.history:
            out.append(header_row("Recent sets"))
            for entry in self.history:
                result = "hit" if entry.get("success") else "miss"
                out.append(dim_row(f"{result}  {money(entry.get('cash_earned') or 0)}  +{entry.get('fame_gained') or 0} fame"))
        return out
