"""
Unit tests for busking odds and outcomes.
"""

import random

import pytest

from systems.busking import (
    FAILURE_REASONS,
    BuskingLocation,
    BuskingModifier,
    calculate_success_chance,
    resolve_busking_session,
    risk_penalty,
)
from systems.rounding import round_half_up


@pytest.fixture
def plaza():
    return BuskingLocation(id="loc-1", name="Old Town Plaza", recommended_skill=65, risk_level="medium",
                           base_payout=200, fame_reward=10, experience_reward=20)


class _FixedRandom(random.Random):
    """random() always returns `value`; the rest behaves normally."""

    def __init__(self, value: float) -> None:
        super().__init__(1)
        self.value = value

    def random(self) -> float:
        return self.value


class TestRounding:
    def test_halves_round_up(self):
        assert round_half_up(46.5) == 47
        assert round_half_up(46.49) == 46
        assert round_half_up(2.25, 1) == 2.3


class TestSuccessChance:
    """Tests for calculate_success_chance."""

    def test_worked_example_rounds_half_up(self, plaza):
        # 58 + (70 - 65) * 0.7 - 15 = 46.5
        assert calculate_success_chance(70, plaza) == 47

    def test_risk_levels(self):
        assert risk_penalty("low") == 5
        assert risk_penalty("medium") == 15
        assert risk_penalty("high") == 25
        assert risk_penalty("extreme") == 15

    def test_clamped_low(self, plaza):
        assert calculate_success_chance(0, plaza) == 10

    def test_clamped_high(self, plaza):
        assert calculate_success_chance(200, plaza) == 95

    def test_modifier_risk_in_points(self, plaza):
        safer = BuskingModifier(id="m", name="Friendly dog", risk_modifier=-10)
        assert calculate_success_chance(65, plaza, safer) == 53

    def test_city_multiplier_before_clamp(self, plaza):
        assert calculate_success_chance(65, plaza, city_multiplier=1.5) == 65
        assert calculate_success_chance(200, plaza, city_multiplier=0.5) == 69


class TestResolveSession:
    """Tests for resolve_busking_session."""

    def test_success_when_roll_under_chance(self, plaza):
        outcome = resolve_busking_session(65, plaza, rng=_FixedRandom(0.1))
        assert outcome.success is True
        assert outcome.chance == 43
        assert 160 <= outcome.cash_earned <= 240
        assert outcome.fame_gained == 10
        assert outcome.experience_gained == 20
        assert outcome.failure_reason is None

    def test_failure_pays_a_fraction(self, plaza):
        outcome = resolve_busking_session(65, plaza, rng=_FixedRandom(0.99))
        assert outcome.success is False
        assert outcome.cash_earned == 30
        assert outcome.fame_gained == 0
        assert outcome.experience_gained == 10
        assert outcome.failure_reason in FAILURE_REASONS

    def test_modifier_boosts_rewards(self, plaza):
        mod = BuskingModifier(id="m", name="Light show", payout_multiplier=2.0,
                              fame_multiplier=1.5, experience_bonus=5)
        outcome = resolve_busking_session(65, plaza, mod, rng=_FixedRandom(0.0))
        assert outcome.success is True
        assert 320 <= outcome.cash_earned <= 480
        assert outcome.fame_gained == 15
        assert outcome.experience_gained == 25

    def test_seeded_rng_is_repeatable(self, plaza):
        a = resolve_busking_session(70, plaza, rng=random.Random(42))
        b = resolve_busking_session(70, plaza, rng=random.Random(42))
        assert a == b

    def test_session_row(self, plaza):
        outcome = resolve_busking_session(65, plaza, rng=_FixedRandom(0.99))
        row = outcome.to_session_row("p-1", plaza, None)
        assert row["user_id"] == "p-1"
        assert row["location_id"] == "loc-1"
        assert row["modifier_id"] is None
        assert row["success"] is False

    def test_location_from_row_defaults(self):
        loc = BuskingLocation.from_row({"id": 7, "name": "Subway"})
        assert loc.id == "7"
        assert loc.risk_level == "medium"
        assert loc.base_payout == 0
