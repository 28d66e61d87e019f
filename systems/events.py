# systems/events.py
"""
Event planning math: ticket tiers, sponsors, lineup and pricing.

Features:
- Ticket tier aggregates (capacity, potential and confirmed revenue)
- Sponsor package aggregates and title-slot availability
- Lineup energy and overall planning confidence for the event builder
- Pricing strategy recommendation
- Analytics summary combining all of the above
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .rounding import round_half_up


# ============================================================================
# Records
# ============================================================================

SPONSOR_LEVELS = ("title", "presenting", "supporting", "local")


@dataclass
class TicketTier:
    name: str
    price: float = 0.0
    quantity: int = 0
    benefits: Optional[str] = None
    tickets_sold: int = 0
    fees: float = 0.0
    id: Optional[str] = None
    event_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TicketTier":
        """Normalize a stored tier; missing sold/fees count as zero."""
        return cls(
            name=row.get("name") or "",
            price=float(row.get("price") or 0),
            quantity=int(row.get("quantity") or 0),
            benefits=row.get("benefits"),
            tickets_sold=int(row.get("tickets_sold") or 0),
            fees=float(row.get("fees") or 0),
            id=row.get("id"),
            event_id=row.get("event_id"),
        )

    def to_row(self, event_id: str) -> Dict[str, Any]:
        return {
            "event_id": event_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "benefits": self.benefits or None,
            "tickets_sold": self.tickets_sold,
            "fees": self.fees,
        }

    @property
    def potential_revenue(self) -> float:
        return self.price * self.quantity

    @property
    def confirmed_revenue(self) -> float:
        return self.price * self.tickets_sold


@dataclass
class SponsorPackage:
    name: str
    level: str = "supporting"
    contribution: float = 0.0
    benefits: str = ""
    activation_focus: str = ""
    roi_goal: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class LineupSlot:
    artist: str
    stage: str = ""
    start_time: str = ""
    end_time: str = ""
    notes: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class PricingStrategy:
    base_price: float = 85.0
    dynamic_pricing: bool = True
    break_even_cost: float = 65000.0
    marketing_budget: float = 12000.0
    demand_score: float = 60.0


# ============================================================================
# Aggregates
# ============================================================================

def total_capacity(tiers: Sequence[TicketTier]) -> int:
    return sum(t.quantity for t in tiers)


def tickets_sold(tiers: Sequence[TicketTier]) -> int:
    return sum(t.tickets_sold for t in tiers)


def potential_revenue(tiers: Sequence[TicketTier]) -> float:
    return sum(t.potential_revenue for t in tiers)


def confirmed_revenue(tiers: Sequence[TicketTier]) -> float:
    return sum(t.confirmed_revenue for t in tiers)


def total_contribution(sponsors: Sequence[SponsorPackage]) -> float:
    return sum(s.contribution for s in sponsors)


def activation_summary(sponsors: Sequence[SponsorPackage]) -> str:
    if not sponsors:
        return "0 activations scoped"
    active = sum(1 for s in sponsors if s.activation_focus)
    return f"{active} active experiential commitments"


def title_slot_open(sponsors: Sequence[SponsorPackage]) -> bool:
    return not any(s.level == "title" for s in sponsors)


def stage_count(lineup: Sequence[LineupSlot]) -> int:
    """Distinct non-blank stage names, case-insensitive."""
    return len({s.stage.strip().lower() for s in lineup if s.stage.strip()})


def lineup_energy(lineup: Sequence[LineupSlot]) -> int:
    """Builder view: 15 per act plus 10 per stage, capped at 100."""
    return min(100, len(lineup) * 15 + stage_count(lineup) * 10)


def planning_confidence(
    tiers: Sequence[TicketTier],
    sponsors: Sequence[SponsorPackage],
    lineup: Sequence[LineupSlot],
) -> int:
    tier_mix = 20 if tiers else 0
    return min(100, 30 + tier_mix + len(sponsors) * 10 + len(lineup) * 5)


# ============================================================================
# Pricing
# ============================================================================

@dataclass
class PricingRecommendation:
    recommended_price: float
    floor_price: float
    ceiling_price: float
    total_costs: float
    tickets_to_break_even: Optional[int]


def recommend_pricing(
    strategy: PricingStrategy,
    sponsor_contribution: float = 0.0,
) -> PricingRecommendation:
    """
    Suggested door price for a strategy.

    With dynamic pricing the price follows demand: each point above 50
    adds 0.5%, each point below takes 0.5% off. The band is +/-20% around
    the recommendation (a fixed price has no band). Sponsor money offsets
    costs before the break-even ticket count is computed.
    """
    base = max(0.0, strategy.base_price)
    if strategy.dynamic_pricing:
        price = base * (1 + (strategy.demand_score - 50) / 200)
        floor_price, ceiling_price = price * 0.8, price * 1.2
    else:
        price = base
        floor_price = ceiling_price = base

    costs = strategy.break_even_cost + strategy.marketing_budget
    uncovered = max(0.0, costs - sponsor_contribution)
    to_break_even = math.ceil(uncovered / price) if price > 0 else None

    return PricingRecommendation(
        recommended_price=round_half_up(price, 2),
        floor_price=round_half_up(floor_price, 2),
        ceiling_price=round_half_up(ceiling_price, 2),
        total_costs=costs,
        tickets_to_break_even=to_break_even,
    )


# ============================================================================
# Analytics
# ============================================================================

@dataclass
class EventAnalytics:
    total_sponsors: int
    total_contribution: float
    total_capacity: int
    tickets_sold: int
    potential_revenue: float
    confirmed_revenue: float
    lineup_energy: float
    sponsor_impact: float
    break_even_coverage: float
    revenue_mix: List[Dict[str, Any]]


def summarize_event(
    lineup: Sequence[LineupSlot],
    sponsors: Sequence[SponsorPackage],
    tiers: Sequence[TicketTier],
    pricing: PricingStrategy,
) -> EventAnalytics:
    """
    Figures for the analytics view.

    The analytics lineup score weighs demand instead of stage spread:
    12 per act plus half the demand score.
    """
    contribution = total_contribution(sponsors)
    confirmed = confirmed_revenue(tiers)
    coverage = 0.0
    if pricing.break_even_cost:
        coverage = round_half_up((contribution + confirmed) / pricing.break_even_cost * 100, 1)

    return EventAnalytics(
        total_sponsors=len(sponsors),
        total_contribution=contribution,
        total_capacity=total_capacity(tiers),
        tickets_sold=tickets_sold(tiers),
        potential_revenue=potential_revenue(tiers),
        confirmed_revenue=confirmed,
        lineup_energy=min(100, len(lineup) * 12 + pricing.demand_score / 2),
        sponsor_impact=min(100, contribution / 1000 + len(sponsors) * 8),
        break_even_coverage=coverage,
        revenue_mix=[
            {
                "name": t.name,
                "potential": round_half_up(t.potential_revenue, 2),
                "sold": round_half_up(t.confirmed_revenue, 2),
            }
            for t in tiers
        ],
    )
