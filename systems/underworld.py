# systems/underworld.py
"""
Underworld store rules: payment checks, instant effects and timed boosts.

Products carry a free-form `effects` dict. Instant effects (health,
energy, xp, fame, skill_xp) are applied once at purchase; products with a
duration also start a boost whose type is the first multiplier-style key
present in the effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from engine.error_handler import PurchaseError

MAX_VITAL = 100     # health and energy cap

# Checked in this order; the first present key decides the boost
BOOST_TYPES = ("xp_multiplier", "fame_multiplier", "energy_regen", "all_multiplier")


@dataclass
class UnderworldProduct:
    id: str
    name: str
    category: str = "consumable"
    rarity: str = "common"
    price_cash: Optional[int] = None
    price_token_id: Optional[str] = None
    price_token_amount: Optional[int] = None
    effects: Dict[str, Any] = field(default_factory=dict)
    duration_hours: Optional[float] = None
    is_available: bool = True
    description: str = ""
    lore: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UnderworldProduct":
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            category=row.get("category") or "consumable",
            rarity=row.get("rarity") or "common",
            price_cash=row.get("price_cash"),
            price_token_id=row.get("price_token_id"),
            price_token_amount=row.get("price_token_amount"),
            effects=dict(row.get("effects") or {}),
            duration_hours=row.get("duration_hours"),
            is_available=bool(row.get("is_available", True)),
            description=row.get("description") or "",
            lore=row.get("lore") or "",
        )


def validate_purchase(product: UnderworldProduct, payment_method: str, balance: float) -> int:
    """
    Check a purchase can go ahead and return the cash to deduct.

    Raises:
        PurchaseError: crypto payment, no cash price, or insufficient funds
    """
    if payment_method != "cash":
        raise PurchaseError(f"Unsupported payment method {payment_method!r}",
                            user_message="Crypto payments coming soon")
    if not product.price_cash:
        raise PurchaseError(f"{product.id} has no cash price",
                            user_message="Product cannot be purchased with cash")
    if balance < product.price_cash:
        raise PurchaseError(f"balance {balance} < price {product.price_cash}",
                            user_message="Insufficient funds")
    return int(product.price_cash)


def has_instant_effects(effects: Dict[str, Any]) -> bool:
    return any(effects.get(key) for key in ("health", "energy", "xp", "fame"))


def instant_effect_updates(effects: Dict[str, Any], profile: Dict[str, Any]) -> Dict[str, float]:
    """
    Profile column updates for the instant effects.

    Health and energy are capped at 100; xp goes to the experience column.
    """
    updates: Dict[str, float] = {}
    if effects.get("health"):
        updates["health"] = min(MAX_VITAL, (profile.get("health") or 0) + effects["health"])
    if effects.get("energy"):
        updates["energy"] = min(MAX_VITAL, (profile.get("energy") or 0) + effects["energy"])
    if effects.get("xp"):
        updates["experience"] = (profile.get("experience") or 0) + effects["xp"]
    if effects.get("fame"):
        updates["fame"] = (profile.get("fame") or 0) + effects["fame"]
    return updates


def skill_xp_effect(effects: Dict[str, Any]) -> Optional[Tuple[str, int]]:
    """(skill slug, xp) when the product trains a skill."""
    slug = effects.get("skill_slug")
    amount = effects.get("skill_xp")
    if not slug or not amount:
        return None
    return str(slug), int(amount)


def derive_boost(effects: Dict[str, Any]) -> Tuple[str, float]:
    for boost_type in BOOST_TYPES:
        if effects.get(boost_type):
            return boost_type, float(effects[boost_type])
    return "unknown", 1.0


def boost_expiry(duration_hours: Optional[float], now: Optional[datetime] = None) -> Optional[str]:
    if not duration_hours:
        return None
    now = now or datetime.now(timezone.utc)
    return (now + timedelta(hours=duration_hours)).isoformat()


def has_active_boost(boosts: Iterable[Dict[str, Any]], boost_type: str) -> bool:
    return any(b.get("boost_type") == boost_type for b in boosts)


def boost_multiplier(boosts: Iterable[Dict[str, Any]], boost_type: str) -> float:
    """Value of the first active boost of that type, else 1."""
    for boost in boosts:
        if boost.get("boost_type") == boost_type:
            return boost.get("boost_value") or 1
    return 1
