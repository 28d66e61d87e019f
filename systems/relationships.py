# systems/relationships.py
"""
Relationship affinity: tiers, event weights and milestone tracking.

Every interaction between two profiles is stored as an activity_feed row
tagged with the pair. Affinity is the running sum of those events; the
tier and milestone views are derived from it on demand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional


# ============================================================================
# Tiers, weights & milestones
# ============================================================================

@dataclass(frozen=True)
class FriendshipTier:
    id: str
    label: str
    min_affinity: int
    max_affinity: Optional[int]


FRIENDSHIP_TIERS: List[FriendshipTier] = [
    FriendshipTier("acquaintance", "Acquaintance", 0, 249),
    FriendshipTier("bandmate", "Bandmate", 250, 599),
    FriendshipTier("inner_circle", "Inner Circle", 600, 999),
    FriendshipTier("legendary_duo", "Legendary Duo", 1000, None),
]

# Affinity granted per activity type
RELATIONSHIP_EVENT_WEIGHTS: Dict[str, int] = {
    "relationship_message": 5,
    "relationship_gift": 25,
    "relationship_jam": 40,
    "relationship_gig": 60,
    "relationship_collab": 80,
    "relationship_permission_update": 10,
    "relationship_conflict": -30,
}

DEFAULT_EVENT_WEIGHT = 5


@dataclass(frozen=True)
class RelationshipMilestone:
    id: str
    label: str
    threshold: int


RELATIONSHIP_MILESTONES: List[RelationshipMilestone] = [
    RelationshipMilestone("first_jam", "First jam together", 50),
    RelationshipMilestone("trusted_ally", "Trusted ally", 250),
    RelationshipMilestone("shared_stage", "Shared the stage", 600),
    RelationshipMilestone("lifelong_duo", "Lifelong duo", 1000),
]


# ============================================================================
# Event records
# ============================================================================

@dataclass
class RelationshipEvent:
    id: str
    user_id: str
    activity_type: str
    message: str
    metadata: Dict[str, Any]
    created_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "RelationshipEvent":
        return cls(
            id=str(row.get("id", "")),
            user_id=str(row.get("user_id", "")),
            activity_type=row.get("activity_type") or "",
            message=row.get("message") or "",
            metadata=dict(row.get("metadata") or {}),
            created_at=row.get("created_at") or "",
        )

    @property
    def affinity_value(self) -> int:
        value = self.metadata.get("affinity_value")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return int(value)
        return RELATIONSHIP_EVENT_WEIGHTS.get(self.activity_type, 0)


def build_pair_key(profile_id: str, other_profile_id: str) -> str:
    """Order-independent key for a pair of profiles."""
    return ":".join(sorted((profile_id, other_profile_id)))


def event_weight(activity_type: str) -> int:
    return RELATIONSHIP_EVENT_WEIGHTS.get(activity_type, DEFAULT_EVENT_WEIGHT)


def filter_relationship_events(
    rows: Iterable[Dict[str, Any]],
    profile_id: str,
    other_profile_id: str,
    limit: int,
) -> List[RelationshipEvent]:
    """Keep rows tagged with the other profile or with this pair's key."""
    pair_key = build_pair_key(profile_id, other_profile_id)
    events: List[RelationshipEvent] = []
    for row in rows:
        metadata = row.get("metadata") or {}
        if (
            metadata.get("relationship_profile_id") == other_profile_id
            or metadata.get("relationship_pair_key") == pair_key
        ):
            events.append(RelationshipEvent.from_row(row))
        if len(events) >= limit:
            break
    return events


# ============================================================================
# Summary
# ============================================================================

@dataclass
class MilestoneProgress:
    id: str
    label: str
    threshold: int
    achieved: bool


@dataclass
class RelationshipSummary:
    affinity_score: int
    tier_id: str
    tier_label: str
    tier_minimum: int
    tier_maximum: Optional[int]
    progress_to_next_tier: float
    milestone_progress: List[MilestoneProgress]


def tier_for_affinity(score: float) -> FriendshipTier:
    """Highest tier whose minimum the score reaches; negatives stay acquaintances."""
    for tier in reversed(FRIENDSHIP_TIERS):
        if score >= tier.min_affinity:
            return tier
    return FRIENDSHIP_TIERS[0]


def next_tier(tier: FriendshipTier) -> Optional[FriendshipTier]:
    for candidate in FRIENDSHIP_TIERS:
        if candidate.min_affinity > tier.min_affinity:
            return candidate
    return None


def tier_progress(score: float) -> float:
    """
    Fraction of the way from the current tier's minimum to the next one.

    Returns 1.0 at the top tier. Clamped to [0, 1].
    """
    tier = tier_for_affinity(score)
    upcoming = next_tier(tier)
    if upcoming is None:
        return 1.0
    span = (upcoming.min_affinity - tier.min_affinity) or 1
    return max(0.0, min(1.0, (score - tier.min_affinity) / span))


def calculate_relationship_summary(events: Iterable[RelationshipEvent]) -> RelationshipSummary:
    score = sum(event.affinity_value for event in events)
    tier = tier_for_affinity(score)
    return RelationshipSummary(
        affinity_score=score,
        tier_id=tier.id,
        tier_label=tier.label,
        tier_minimum=tier.min_affinity,
        tier_maximum=tier.max_affinity,
        progress_to_next_tier=tier_progress(score),
        milestone_progress=[
            MilestoneProgress(m.id, m.label, m.threshold, score >= m.threshold)
            for m in RELATIONSHIP_MILESTONES
        ],
    )
