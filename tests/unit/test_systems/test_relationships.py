"""
Unit tests for relationship affinity tiers and summaries.
"""

import pytest

from systems.relationships import (
    FRIENDSHIP_TIERS,
    RelationshipEvent,
    build_pair_key,
    calculate_relationship_summary,
    event_weight,
    filter_relationship_events,
    tier_for_affinity,
    tier_progress,
)


def _event(activity_type, affinity=None, **metadata):
    if affinity is not None:
        metadata["affinity_value"] = affinity
    return RelationshipEvent.from_row({
        "id": "e", "user_id": "u", "activity_type": activity_type,
        "message": "", "metadata": metadata, "created_at": "2024-01-01T00:00:00Z",
    })


class TestTiers:
    """Tests for tier lookup and progress."""

    def test_tier_table(self):
        assert [t.id for t in FRIENDSHIP_TIERS] == ["acquaintance", "bandmate", "inner_circle", "legendary_duo"]
        assert FRIENDSHIP_TIERS[-1].max_affinity is None

    @pytest.mark.parametrize("score,tier_id", [
        (0, "acquaintance"),
        (249, "acquaintance"),
        (250, "bandmate"),
        (300, "bandmate"),
        (600, "inner_circle"),
        (999, "inner_circle"),
        (1000, "legendary_duo"),
        (5000, "legendary_duo"),
        (-40, "acquaintance"),
    ])
    def test_tier_for_affinity(self, score, tier_id):
        assert tier_for_affinity(score).id == tier_id

    def test_progress_within_tier(self):
        assert tier_progress(300) == pytest.approx((300 - 250) / (600 - 250))

    def test_progress_clamped(self):
        assert tier_progress(-100) == 0.0
        assert tier_progress(1500) == 1.0


class TestEvents:
    """Tests for event parsing and filtering."""

    def test_pair_key_order_independent(self):
        assert build_pair_key("b", "a") == build_pair_key("a", "b") == "a:b"

    def test_affinity_from_metadata_first(self):
        assert _event("relationship_message", affinity=42).affinity_value == 42

    def test_affinity_falls_back_to_weight(self):
        assert _event("relationship_jam").affinity_value == 40
        assert _event("something_else").affinity_value == 0

    def test_boolean_metadata_is_not_a_number(self):
        assert _event("relationship_gift", affinity=True).affinity_value == 25

    def test_event_weight_default(self):
        assert event_weight("relationship_collab") == 80
        assert event_weight("unknown") == 5

    def test_filter_by_profile_or_pair(self):
        rows = [
            {"id": "1", "metadata": {"relationship_profile_id": "other"}},
            {"id": "2", "metadata": {"relationship_pair_key": build_pair_key("me", "other")}},
            {"id": "3", "metadata": {"relationship_profile_id": "someone"}},
            {"id": "4", "metadata": None},
        ]
        events = filter_relationship_events(rows, "me", "other", limit=10)
        assert [e.id for e in events] == ["1", "2"]

    def test_filter_respects_limit(self):
        rows = [{"id": str(i), "metadata": {"relationship_profile_id": "other"}} for i in range(5)]
        assert len(filter_relationship_events(rows, "me", "other", limit=3)) == 3


class TestSummary:
    """Tests for calculate_relationship_summary."""

    def test_bandmate_summary(self):
        events = [_event("relationship_gig", affinity=150), _event("relationship_collab", affinity=150)]
        summary = calculate_relationship_summary(events)
        assert summary.affinity_score == 300
        assert summary.tier_id == "bandmate"
        assert summary.tier_minimum == 250
        assert summary.tier_maximum == 599
        assert summary.progress_to_next_tier == pytest.approx(50 / 350)
        achieved = {m.id: m.achieved for m in summary.milestone_progress}
        assert achieved == {"first_jam": True, "trusted_ally": True, "shared_stage": False, "lifelong_duo": False}

    def test_empty_history(self):
        summary = calculate_relationship_summary([])
        assert summary.affinity_score == 0
        assert summary.tier_id == "acquaintance"
        assert not any(m.achieved for m in summary.milestone_progress)

    def test_conflicts_reduce_affinity(self):
        events = [_event("relationship_jam"), _event("relationship_conflict")]
        assert calculate_relationship_summary(events).affinity_score == 10
