"""
Event builder panels: ticket tiers, sponsors, lineup, pricing and analytics.

Only ticket tiers are stored remotely; sponsors, lineup and pricing are
planning state that lives in the panel and feeds the analytics view.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Callable, List, Optional

from engine.error_handler import ValidationError
from engine.store.client import StoreClient
from engine.toasts import ToastLog
from systems.events import (
    SPONSOR_LEVELS,
    LineupSlot,
    PricingStrategy,
    SponsorPackage,
    TicketTier,
    activation_summary,
    confirmed_revenue,
    lineup_energy,
    planning_confidence,
    potential_revenue,
    recommend_pricing,
    stage_count,
    summarize_event,
    title_slot_open,
    total_capacity,
    total_contribution,
)
from ui.panels.base import Panel, PanelRow, StorePanel, dim_row, header_row, money, stat_row, title_row

TICKET_TIER_TABLE = "event_ticket_tiers"


# ============================================================================
# Ticket tiers
# ============================================================================

class TicketTierPanel(StorePanel):
    """CRUD for one event's ticket tiers, kept ordered by price."""

    title = "Ticket Tiers"
    context = "ticket_tiers"

    def __init__(
        self,
        client: StoreClient,
        toasts: ToastLog,
        event_id: Optional[str] = None,
        on_change: Optional[Callable[[List[TicketTier]], None]] = None,
    ) -> None:
        super().__init__(client, toasts)
        self.event_id = event_id
        self.on_change = on_change
        self.tiers: List[TicketTier] = []
        self.form = TicketTier(name="")
        self.editing_id: Optional[str] = None

    def _set_tiers(self, tiers: List[TicketTier]) -> None:
        self.tiers = tiers
        if self.on_change:
            self.on_change(list(tiers))

    def load(self) -> bool:
        if not self.event_id:
            self._set_tiers([])
            return True
        ok, rows = self._attempt(
            "load",
            lambda: self.client.table(TICKET_TIER_TABLE).select("*").eq(
                "event_id", self.event_id
            ).order("price").execute().data or [],
            "Unable to load ticket tiers",
        )
        if ok:
            self._set_tiers([TicketTier.from_row(r) for r in rows])
        return ok

    def reset_form(self) -> None:
        self.form = TicketTier(name="")
        self.editing_id = None

    def edit(self, tier: TicketTier) -> None:
        self.form = replace(tier)
        self.editing_id = tier.id

    def save(self) -> Optional[TicketTier]:
        """Insert the form as a new tier, or update the one being edited."""
        if not self.event_id:
            self.toasts.push(
                "Set an event identifier first",
                "Ticket tiers must be associated with an event ID before they can be saved.",
            )
            return None
        if not self.form.name.strip():
            self._fail(
                ValidationError("tier name missing"), "save", "Tier name required",
                "Provide a descriptive label so fans know exactly what they are purchasing.",
            )
            return None

        payload = self.form.to_row(self.event_id)
        editing_id = self.editing_id

        def _save():
            table = self.client.table(TICKET_TIER_TABLE)
            query = table.update(payload).eq("id", editing_id) if editing_id else table.insert(payload)
            return query.select("*").maybe_single().execute().data

        ok, row = self._attempt(
            "save", _save, "Unable to save tier",
            "The store could not process this tier. Review your data and try again.",
        )
        if not ok or not row:
            return None

        saved = TicketTier.from_row(row)
        tiers = [t for t in self.tiers if t.id != saved.id] + [saved]
        tiers.sort(key=lambda t: t.price)
        self._set_tiers(tiers)
        self.reset_form()
        self.toasts.push(
            "Ticket tier updated" if editing_id else "Ticket tier created",
            f"{saved.name} is synced with the store.",
        )
        return saved

    def delete(self, tier_id: str) -> bool:
        ok, _ = self._attempt(
            "delete",
            lambda: self.client.table(TICKET_TIER_TABLE).delete().eq("id", tier_id).execute(),
            "Unable to delete tier",
        )
        if ok:
            self._set_tiers([t for t in self.tiers if t.id != tier_id])
            if self.editing_id == tier_id:
                self.reset_form()
            self.toasts.push("Ticket tier removed", "The tier has been deleted from the store.")
        return ok

    @property
    def total_capacity(self) -> int:
        return total_capacity(self.tiers)

    @property
    def projected_revenue(self) -> float:
        return potential_revenue(self.tiers)

    @property
    def confirmed_revenue(self) -> float:
        return confirmed_revenue(self.tiers)

    def rows(self) -> List[PanelRow]:
        out = [
            title_row(self.title),
            stat_row("Capacity", f"{self.total_capacity:,}"),
            stat_row("Projected revenue", money(self.projected_revenue)),
            stat_row("Confirmed revenue", money(self.confirmed_revenue)),
            header_row("Tiers"),
        ]
        if not self.tiers:
            out.append(dim_row("No tiers yet"))
        for tier in self.tiers:
            marker = "*" if tier.id == self.editing_id else " "
            out.append(PanelRow(f"{marker} {tier.name}  {money(tier.price)}  {tier.tickets_sold}/{tier.quantity} sold"))
            if tier.benefits:
                out.append(dim_row(tier.benefits, indent=1))
        return out


# ============================================================================
# Sponsors
# ============================================================================

class SponsorPanel(Panel):
    title = "Sponsorship"
    context = "sponsors"

    def __init__(self, toasts: ToastLog, on_change: Optional[Callable[[List[SponsorPackage]], None]] = None) -> None:
        super().__init__(toasts)
        self.sponsors: List[SponsorPackage] = []
        self.form = SponsorPackage(name="")
        self.on_change = on_change

    def _set(self, sponsors: List[SponsorPackage]) -> None:
        self.sponsors = sponsors
        if self.on_change:
            self.on_change(list(sponsors))

    def add(self) -> Optional[SponsorPackage]:
        """Add the form as a sponsor; a blank name is ignored."""
        if not self.form.name.strip():
            return None
        if self.form.level not in SPONSOR_LEVELS:
            self._fail(ValidationError(f"unknown sponsor level {self.form.level}"), "add", "Unknown sponsor tier")
            return None
        sponsor = replace(self.form, id=uuid.uuid4().hex)
        self._set(self.sponsors + [sponsor])
        self.form = SponsorPackage(name="")
        return sponsor

    def remove(self, sponsor_id: str) -> None:
        self._set([s for s in self.sponsors if s.id != sponsor_id])

    @property
    def total_contribution(self) -> float:
        return total_contribution(self.sponsors)

    def rows(self) -> List[PanelRow]:
        out = [
            title_row(self.title),
            stat_row("Partners", len(self.sponsors)),
            stat_row("Cash commitments", money(self.total_contribution)),
            stat_row("Activation focus", activation_summary(self.sponsors)),
            stat_row("Title availability", "Open" if title_slot_open(self.sponsors) else "Locked"),
            header_row("Sponsors"),
        ]
        for sponsor in self.sponsors:
            out.append(PanelRow(f"{sponsor.name} ({sponsor.level})  {money(sponsor.contribution)}"))
            if sponsor.activation_focus:
                out.append(dim_row(sponsor.activation_focus, indent=1))
        return out


# ============================================================================
# Lineup
# ============================================================================

class LineupPlannerPanel(Panel):
    title = "Lineup"
    context = "lineup"

    def __init__(self, toasts: ToastLog, on_change: Optional[Callable[[List[LineupSlot]], None]] = None) -> None:
        super().__init__(toasts)
        self.slots: List[LineupSlot] = []
        self.on_change = on_change

    def _set(self, slots: List[LineupSlot]) -> None:
        self.slots = slots
        if self.on_change:
            self.on_change(list(slots))

    def add(self, artist: str, stage: str = "", start_time: str = "", end_time: str = "",
            notes: str = "") -> Optional[LineupSlot]:
        if not artist.strip():
            self._fail(ValidationError("artist missing"), "add", "Artist required",
                       "Name the act before adding it to the lineup.")
            return None
        slot = LineupSlot(artist.strip(), stage.strip(), start_time, end_time, notes)
        self._set(self.slots + [slot])
        return slot

    def remove(self, slot_id: str) -> None:
        self._set([s for s in self.slots if s.id != slot_id])

    def move(self, slot_id: str, offset: int) -> bool:
        """Shift a slot earlier (negative) or later in the running order."""
        index = next((i for i, s in enumerate(self.slots) if s.id == slot_id), None)
        if index is None:
            return False
        target = max(0, min(len(self.slots) - 1, index + offset))
        if target == index:
            return False
        slots = list(self.slots)
        slots.insert(target, slots.pop(index))
        self._set(slots)
        return True

    @property
    def energy(self) -> int:
        return lineup_energy(self.slots)

    def rows(self) -> List[PanelRow]:
        out = [
            title_row(self.title),
            stat_row("Acts", len(self.slots)),
            stat_row("Stages", stage_count(self.slots)),
            stat_row("Lineup energy", f"{self.energy}/100"),
            header_row("Running order"),
        ]
        for i, slot in enumerate(self.slots, start=1):
            when = f" {slot.start_time}-{slot.end_time}" if slot.start_time else ""
            stage = f" @ {slot.stage}" if slot.stage else ""
            out.append(PanelRow(f"{i}. {slot.artist}{stage}{when}"))
        return out


# ============================================================================
# Pricing
# ============================================================================

class PricingStrategyPanel(Panel):
    title = "Pricing Strategy"
    context = "pricing"

    def __init__(self, toasts: ToastLog, sponsor_contribution: Callable[[], float] = lambda: 0.0) -> None:
        super().__init__(toasts)
        self.strategy = PricingStrategy()
        self.sponsor_contribution = sponsor_contribution

    def update(self, **changes) -> PricingStrategy:
        """Apply form edits; demand is kept within 0-100 and money never negative."""
        if "demand_score" in changes:
            changes["demand_score"] = max(0.0, min(100.0, float(changes["demand_score"])))
        for key in ("base_price", "break_even_cost", "marketing_budget"):
            if key in changes:
                changes[key] = max(0.0, float(changes[key]))
        self.strategy = replace(self.strategy, **changes)
        return self.strategy

    def toggle_dynamic(self) -> bool:
        self.strategy = replace(self.strategy, dynamic_pricing=not self.strategy.dynamic_pricing)
        return self.strategy.dynamic_pricing

    def recommendation(self):
        return recommend_pricing(self.strategy, self.sponsor_contribution())

    def rows(self) -> List[PanelRow]:
        s = self.strategy
        rec = self.recommendation()
        out = [
            title_row(self.title),
            stat_row("Base price", money(s.base_price)),
            stat_row("Dynamic pricing", "On" if s.dynamic_pricing else "Off"),
            stat_row("Demand score", f"{s.demand_score:.0f}"),
            stat_row("Break-even cost", money(s.break_even_cost)),
            stat_row("Marketing budget", money(s.marketing_budget)),
            header_row("Recommendation"),
            stat_row("Door price", f"${rec.recommended_price:,.2f}"),
            stat_row("Band", f"${rec.floor_price:,.2f} - ${rec.ceiling_price:,.2f}"),
        ]
        if rec.tickets_to_break_even is not None:
            out.append(stat_row("Tickets to break even", f"{rec.tickets_to_break_even:,}"))
        return out


# ============================================================================
# Analytics
# ============================================================================

class EventAnalyticsPanel(Panel):
    """Read-only roll-up of the other event panels."""

    title = "Event Analytics"
    context = "analytics"

    def __init__(
        self,
        toasts: ToastLog,
        tickets: TicketTierPanel,
        sponsors: SponsorPanel,
        lineup: LineupPlannerPanel,
        pricing: PricingStrategyPanel,
        event_name: str = "",
        event_date: str = "",
        venue: str = "",
    ) -> None:
        super().__init__(toasts)
        self.tickets = tickets
        self.sponsors = sponsors
        self.lineup = lineup
        self.pricing = pricing
        self.event_name = event_name
        self.event_date = event_date
        self.venue = venue

    def summary(self):
        return summarize_event(self.lineup.slots, self.sponsors.sponsors, self.tickets.tiers, self.pricing.strategy)

    @property
    def planning_confidence(self) -> int:
        return planning_confidence(self.tickets.tiers, self.sponsors.sponsors, self.lineup.slots)

    def rows(self) -> List[PanelRow]:
        data = self.summary()
        parts = [p for p in (self.event_name, f"Scheduled {self.event_date}" if self.event_date else "Date TBD",
                             self.venue) if p]
        out = [
            title_row(self.title),
            dim_row(" - ".join(parts)),
            stat_row("Planning confidence", f"{self.planning_confidence}%"),
            stat_row("Potential revenue", money(data.potential_revenue)),
            stat_row("Confirmed revenue", money(data.confirmed_revenue)),
            stat_row("Sponsor leverage", money(data.total_contribution)),
            stat_row("Break-even coverage", f"{data.break_even_coverage:,}%"),
            stat_row("Lineup energy", f"{data.lineup_energy:.0f}"),
            stat_row("Sponsor impact", f"{data.sponsor_impact:.0f}"),
            header_row("Revenue mix"),
        ]
        for mix in data.revenue_mix:
            out.append(PanelRow(f"{mix['name']}: {money(mix['sold'])} of {money(mix['potential'])}"))
        return out
