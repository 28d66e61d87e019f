# systems/busking.py
"""
Busking: street performance success chance and session outcomes.

A location has a recommended skill and a risk level; an optional modifier
(a prop or gimmick the player brings) shifts risk and rewards; the city
the player is in scales the final chance.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .rounding import clamp, round_half_up


# ============================================================================
# Constants & Configuration
# ============================================================================

BASE_SUCCESS_CHANCE = 58
SKILL_WEIGHT = 0.7          # points of chance per point of skill over the recommendation
MIN_SUCCESS_CHANCE = 10
MAX_SUCCESS_CHANCE = 95

RISK_PENALTIES: Dict[str, int] = {
    "low": 5,
    "medium": 15,
    "high": 25,
}
DEFAULT_RISK_PENALTY = RISK_PENALTIES["medium"]

# Payout spread around the location's base payout on success
PAYOUT_VARIANCE = (0.8, 1.2)
# Share of the base payout still collected after a failed set
FAILURE_PAYOUT_RATIO = 0.15

FAILURE_REASONS = (
    "Police moved you along",
    "The crowd never formed",
    "Rain cut the set short",
    "A rival busker drowned you out",
)


@dataclass
class BuskingLocation:
    id: str
    name: str
    recommended_skill: float = 50
    risk_level: str = "medium"
    base_payout: int = 100
    fame_reward: int = 5
    experience_reward: int = 10
    cooldown_minutes: int = 60
    description: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "BuskingLocation":
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            recommended_skill=float(row.get("recommended_skill") or 0),
            risk_level=row.get("risk_level") or "medium",
            base_payout=int(row.get("base_payout") or 0),
            fame_reward=int(row.get("fame_reward") or 0),
            experience_reward=int(row.get("experience_reward") or 0),
            cooldown_minutes=int(row.get("cooldown_minutes") or 0),
            description=row.get("description") or "",
        )


@dataclass
class BuskingModifier:
    id: str
    name: str
    rarity: str = "common"
    risk_modifier: float = 0.0
    payout_multiplier: float = 1.0
    fame_multiplier: float = 1.0
    experience_bonus: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "BuskingModifier":
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            rarity=row.get("rarity") or "common",
            risk_modifier=float(row.get("risk_modifier") or 0),
            payout_multiplier=float(row.get("payout_multiplier") or 1),
            fame_multiplier=float(row.get("fame_multiplier") or 1),
            experience_bonus=int(row.get("experience_bonus") or 0),
        )


@dataclass
class BuskingOutcome:
    success: bool
    chance: int
    roll: float
    cash_earned: int
    fame_gained: int
    experience_gained: int
    failure_reason: Optional[str] = None

    def to_session_row(self, profile_id: str, location: BuskingLocation,
                       modifier: Optional[BuskingModifier]) -> Dict[str, Any]:
        return {
            "user_id": profile_id,
            "location_id": location.id,
            "modifier_id": modifier.id if modifier else None,
            "success": self.success,
            "success_chance": self.chance,
            "cash_earned": self.cash_earned,
            "fame_gained": self.fame_gained,
            "experience_gained": self.experience_gained,
            "failure_reason": self.failure_reason,
        }


# ============================================================================
# Core calculation
# ============================================================================

def risk_penalty(risk_level: str) -> int:
    """Unknown risk levels are treated as medium."""
    return RISK_PENALTIES.get(risk_level, DEFAULT_RISK_PENALTY)


def calculate_success_chance(
    skill_score: float,
    location: BuskingLocation,
    modifier: Optional[BuskingModifier] = None,
    city_multiplier: float = 1.0,
) -> int:
    """
    Percent chance (10-95) that a set at `location` goes well.

    Formula:
        58 + (skill - recommended) * 0.7 - risk penalty - modifier risk,
        times the city multiplier, clamped to [10, 95], rounded half up.

    A modifier's risk_modifier is in percentage points; negative values
    make the set safer.
    """
    raw = (
        BASE_SUCCESS_CHANCE
        + (skill_score - location.recommended_skill) * SKILL_WEIGHT
        - risk_penalty(location.risk_level)
        - (modifier.risk_modifier if modifier else 0)
    )
    return int(round_half_up(clamp(raw * city_multiplier, MIN_SUCCESS_CHANCE, MAX_SUCCESS_CHANCE)))


def resolve_busking_session(
    skill_score: float,
    location: BuskingLocation,
    modifier: Optional[BuskingModifier] = None,
    city_multiplier: float = 1.0,
    rng: Optional[random.Random] = None,
) -> BuskingOutcome:
    """Roll one session. Pass a seeded `random.Random` for repeatable results."""
    rng = rng or random.Random()
    chance = calculate_success_chance(skill_score, location, modifier, city_multiplier)
    roll = rng.random() * 100

    payout_mult = modifier.payout_multiplier if modifier else 1.0
    fame_mult = modifier.fame_multiplier if modifier else 1.0
    xp_bonus = modifier.experience_bonus if modifier else 0

    if roll < chance:
        spread = rng.uniform(*PAYOUT_VARIANCE)
        return BuskingOutcome(
            success=True,
            chance=chance,
            roll=roll,
            cash_earned=int(round_half_up(location.base_payout * payout_mult * spread * city_multiplier)),
            fame_gained=int(round_half_up(location.fame_reward * fame_mult)),
            experience_gained=location.experience_reward + xp_bonus,
        )

    return BuskingOutcome(
        success=False,
        chance=chance,
        roll=roll,
        cash_earned=int(round_half_up(location.base_payout * FAILURE_PAYOUT_RATIO)),
        fame_gained=0,
        experience_gained=location.experience_reward // 2,
        failure_reason=rng.choice(FAILURE_REASONS),
    )
