"""
Unit tests for event planning aggregates, pricing and analytics.
"""

import pytest

from systems.events import (
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
)


@pytest.fixture
def tiers():
    return [
        TicketTier(name="GA", price=50, quantity=100, tickets_sold=40),
        TicketTier(name="VIP", price=150, quantity=20, tickets_sold=5),
    ]


@pytest.fixture
def lineup():
    return [
        LineupSlot(artist="Headliner", stage="Main"),
        LineupSlot(artist="Support", stage="main "),
        LineupSlot(artist="Opener", stage="B"),
    ]


class TestTicketTiers:
    """Tests for tier records and aggregates."""

    def test_from_row_defaults(self):
        tier = TicketTier.from_row({"id": "t1", "name": "Early Bird", "price": "35", "quantity": 10})
        assert tier.price == 35.0
        assert tier.tickets_sold == 0
        assert tier.fees == 0.0

    def test_to_row_blanks_benefits(self):
        row = TicketTier(name="GA", price=10, quantity=5, benefits="").to_row("event-1")
        assert row["event_id"] == "event-1"
        assert row["benefits"] is None

    def test_aggregates(self, tiers):
        assert total_capacity(tiers) == 120
        assert potential_revenue(tiers) == 8000
        assert confirmed_revenue(tiers) == 2750

    def test_empty(self):
        assert total_capacity([]) == 0
        assert potential_revenue([]) == 0


class TestSponsorsAndLineup:
    """Tests for sponsor and lineup aggregates."""

    def test_activation_summary(self):
        assert activation_summary([]) == "0 activations scoped"
        sponsors = [SponsorPackage(name="A", activation_focus="VIP lounge"), SponsorPackage(name="B")]
        assert activation_summary(sponsors) == "1 active experiential commitments"

    def test_title_slot(self):
        assert title_slot_open([SponsorPackage(name="A", level="presenting")])
        assert not title_slot_open([SponsorPackage(name="A", level="title")])

    def test_sponsor_ids_unique(self):
        assert SponsorPackage(name="A").id != SponsorPackage(name="A").id

    def test_stage_count_is_case_insensitive(self, lineup):
        assert stage_count(lineup) == 2
        assert stage_count([LineupSlot(artist="x", stage="  ")]) == 0

    def test_lineup_energy(self, lineup):
        assert lineup_energy(lineup) == 65
        assert lineup_energy([LineupSlot(artist=str(i), stage=str(i)) for i in range(10)]) == 100

    def test_planning_confidence(self, tiers, lineup):
        assert planning_confidence([], [], []) == 30
        assert planning_confidence(tiers, [SponsorPackage(name="A")], lineup) == 75


class TestPricing:
    """Tests for recommend_pricing."""

    def test_dynamic_defaults(self):
        rec = recommend_pricing(PricingStrategy())
        assert rec.recommended_price == pytest.approx(89.25)
        assert rec.floor_price == pytest.approx(71.4)
        assert rec.ceiling_price == pytest.approx(107.1)
        assert rec.total_costs == 77000
        assert rec.tickets_to_break_even == 863

    def test_sponsors_offset_costs(self):
        assert recommend_pricing(PricingStrategy(), sponsor_contribution=20000).tickets_to_break_even == 639

    def test_sponsors_cover_everything(self):
        assert recommend_pricing(PricingStrategy(), sponsor_contribution=100000).tickets_to_break_even == 0

    def test_fixed_price_has_no_band(self):
        rec = recommend_pricing(PricingStrategy(dynamic_pricing=False))
        assert rec.recommended_price == rec.floor_price == rec.ceiling_price == 85
        assert rec.tickets_to_break_even == 906

    def test_low_demand_discounts(self):
        rec = recommend_pricing(PricingStrategy(base_price=100, demand_score=30))
        assert rec.recommended_price == pytest.approx(90)

    def test_free_event_never_breaks_even(self):
        assert recommend_pricing(PricingStrategy(base_price=0)).tickets_to_break_even is None


class TestAnalytics:
    """Tests for summarize_event."""

    def test_summary(self, tiers):
        sponsors = [SponsorPackage(name="Acme", contribution=10000)]
        lineup = [LineupSlot(artist="A"), LineupSlot(artist="B")]
        summary = summarize_event(lineup, sponsors, tiers, PricingStrategy())
        assert summary.total_sponsors == 1
        assert summary.total_capacity == 120
        assert summary.tickets_sold == 45
        assert summary.potential_revenue == 8000
        assert summary.confirmed_revenue == 2750
        assert summary.lineup_energy == 54
        assert summary.sponsor_impact == 18
        assert summary.break_even_coverage == pytest.approx(19.6)
        assert summary.revenue_mix == [
            {"name": "GA", "potential": 5000, "sold": 2000},
            {"name": "VIP", "potential": 3000, "sold": 750},
        ]

    def test_zero_break_even_cost(self):
        summary = summarize_event([], [], [], PricingStrategy(break_even_cost=0))
        assert summary.break_even_coverage == 0.0
        assert summary.revenue_mix == []
