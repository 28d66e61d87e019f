"""
Unit tests for underworld purchase rules and boosts.
"""

from datetime import datetime, timezone

import pytest

from engine.error_handler import PurchaseError
from systems.underworld import (
    UnderworldProduct,
    boost_expiry,
    boost_multiplier,
    derive_boost,
    has_active_boost,
    has_instant_effects,
    instant_effect_updates,
    skill_xp_effect,
    validate_purchase,
)


@pytest.fixture
def tonic():
    return UnderworldProduct.from_row({
        "id": "item-1",
        "name": "Midnight Tonic",
        "price_cash": 500,
        "effects": {"health": 30, "xp_multiplier": 1.5},
        "duration_hours": 24,
    })


class TestProduct:
    def test_from_row_defaults(self):
        product = UnderworldProduct.from_row({"id": 3, "name": "Mystery Box"})
        assert product.id == "3"
        assert product.category == "consumable"
        assert product.rarity == "common"
        assert product.effects == {}
        assert product.is_available is True


class TestValidatePurchase:
    """Tests for validate_purchase."""

    def test_cash_purchase_returns_price(self, tonic):
        assert validate_purchase(tonic, "cash", 800) == 500

    def test_exact_balance_is_enough(self, tonic):
        assert validate_purchase(tonic, "cash", 500) == 500

    def test_insufficient_funds(self, tonic):
        with pytest.raises(PurchaseError) as exc:
            validate_purchase(tonic, "cash", 499)
        assert exc.value.user_message == "Insufficient funds"

    def test_crypto_not_supported(self, tonic):
        with pytest.raises(PurchaseError) as exc:
            validate_purchase(tonic, "token", 10_000)
        assert exc.value.user_message == "Crypto payments coming soon"

    def test_token_only_product(self):
        product = UnderworldProduct(id="x", name="Relic", price_token_id="tok", price_token_amount=3)
        with pytest.raises(PurchaseError) as exc:
            validate_purchase(product, "cash", 10_000)
        assert exc.value.user_message == "Product cannot be purchased with cash"


class TestEffects:
    """Tests for instant effects and boosts."""

    def test_vitals_capped(self):
        updates = instant_effect_updates({"health": 30, "energy": 50},
                                         {"health": 90, "energy": 20})
        assert updates == {"health": 100, "energy": 70}

    def test_xp_goes_to_experience(self):
        updates = instant_effect_updates({"xp": 200, "fame": 5}, {"experience": 1000, "fame": None})
        assert updates == {"experience": 1200, "fame": 5}

    def test_no_instant_effects(self):
        assert instant_effect_updates({"xp_multiplier": 2}, {"health": 10}) == {}
        assert not has_instant_effects({"xp_multiplier": 2})
        assert has_instant_effects({"fame": 1})

    def test_skill_xp_effect(self):
        assert skill_xp_effect({"skill_slug": "guitar", "skill_xp": "50"}) == ("guitar", 50)
        assert skill_xp_effect({"skill_slug": "guitar"}) is None

    def test_boost_type_order(self):
        assert derive_boost({"fame_multiplier": 1.2, "xp_multiplier": 1.5}) == ("xp_multiplier", 1.5)
        assert derive_boost({"energy_regen": 2}) == ("energy_regen", 2.0)
        assert derive_boost({}) == ("unknown", 1.0)

    def test_boost_expiry(self):
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert boost_expiry(24, now) == "2024-01-02T12:00:00+00:00"
        assert boost_expiry(None, now) is None
        assert boost_expiry(0, now) is None

    def test_active_boost_lookup(self):
        boosts = [{"boost_type": "xp_multiplier", "boost_value": 1.5}, {"boost_type": "fame_multiplier"}]
        assert has_active_boost(boosts, "xp_multiplier")
        assert not has_active_boost(boosts, "energy_regen")
        assert boost_multiplier(boosts, "xp_multiplier") == 1.5
        assert boost_multiplier(boosts, "fame_multiplier") == 1
        assert boost_multiplier([], "xp_multiplier") == 1
