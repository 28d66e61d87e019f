"""
Unit tests for band chemistry modifiers, drama and drift.
"""

import random

import pytest

from systems.chemistry import (
    DRAMA_PRESETS,
    BandChemistryState,
    apply_drama_event,
    calculate_band_chemistry_modifiers,
    calculate_weekly_drift,
    evaluate_drama_triggers,
    jam_chemistry_gain,
)


class _FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(1)
        self.value = value

    def random(self) -> float:
        return self.value


class TestModifiers:
    """Tests for calculate_band_chemistry_modifiers."""

    def test_default_state(self):
        mods = calculate_band_chemistry_modifiers(BandChemistryState())
        assert mods.song_quality_modifier == pytest.approx(1.05)
        assert mods.performance_rating_modifier == pytest.approx(1.033)
        assert mods.member_leave_risk == 0
        assert mods.drama_event_chance == 2
        assert mods.rehearsal_efficiency == pytest.approx(1.05)
        assert mods.fan_perception == 5

    def test_low_tension_ignores_rng(self):
        a = calculate_band_chemistry_modifiers(BandChemistryState(), rng=_FixedRandom(0.0))
        b = calculate_band_chemistry_modifiers(BandChemistryState(), rng=_FixedRandom(0.99))
        assert a == b

    def test_high_tension_usually_hurts(self):
        state = BandChemistryState(romantic_tension=80)
        mods = calculate_band_chemistry_modifiers(state, rng=_FixedRandom(0.5))
        assert mods.performance_rating_modifier == pytest.approx(0.933)
        assert mods.song_quality_modifier == pytest.approx(0.97)
        assert mods.drama_event_chance == 11
        assert mods.member_leave_risk == 11
        assert mods.fan_perception == -3

    def test_high_tension_can_be_electric(self):
        state = BandChemistryState(romantic_tension=80)
        mods = calculate_band_chemistry_modifiers(state, rng=_FixedRandom(0.1))
        assert mods.performance_rating_modifier == pytest.approx(1.113)

    def test_worst_case_hits_clamps(self):
        state = BandChemistryState(chemistry_level=0, romantic_tension=100,
                                   creative_alignment=0, conflict_index=100)
        mods = calculate_band_chemistry_modifiers(state, rng=_FixedRandom(0.9))
        assert mods.song_quality_modifier == pytest.approx(0.6)
        assert mods.performance_rating_modifier == pytest.approx(0.5)
        assert mods.member_leave_risk == 75
        assert mods.drama_event_chance == 57
        assert mods.rehearsal_efficiency == pytest.approx(0.5)
        assert mods.fan_perception == -25


class TestDrama:
    """Tests for triggers and presets."""

    def test_weekly_check_scales_with_conflict(self):
        state = BandChemistryState(conflict_index=80)
        assert evaluate_drama_triggers(state, "weekly_check") == [("member_threat_leave", 16)]

    def test_weekly_check_unity(self):
        state = BandChemistryState(chemistry_level=80, conflict_index=10)
        assert evaluate_drama_triggers(state, "weekly_check") == [("unity_moment", 10)]

    def test_breakup_escalates(self):
        state = BandChemistryState(romantic_tension=45, conflict_index=55)
        keys = [k for k, _ in evaluate_drama_triggers(state, "romantic_breakup")]
        assert keys == ["romantic_breakup", "member_threat_leave", "rivalry_eruption"]

    def test_unknown_source_has_no_candidates(self):
        assert evaluate_drama_triggers(BandChemistryState(), "karaoke") == []

    def test_every_candidate_is_a_preset(self):
        state = BandChemistryState(chemistry_level=90, romantic_tension=90,
                                   creative_alignment=10, conflict_index=90)
        for source in ("romantic_breakup", "rivalry", "creative_disagreement", "public_scandal",
                       "weekly_check", "gig_outcome", "songwriting_session"):
            for key, _ in evaluate_drama_triggers(state, source):
                assert key in DRAMA_PRESETS

    def test_apply_event(self):
        state = apply_drama_event(BandChemistryState(), "affair_scandal")
        assert state == BandChemistryState(chemistry_level=25, romantic_tension=40,
                                           creative_alignment=35, conflict_index=35)

    def test_apply_event_clamps(self):
        state = BandChemistryState(chemistry_level=95, romantic_tension=2,
                                   creative_alignment=95, conflict_index=5)
        after = apply_drama_event(state, "unity_moment")
        assert after == BandChemistryState(chemistry_level=100, romantic_tension=0,
                                           creative_alignment=100, conflict_index=0)

    def test_unknown_preset_raises(self):
        with pytest.raises(KeyError):
            apply_drama_event(BandChemistryState(), "food_fight")


class TestDrift:
    """Tests for weekly drift and jam gains."""

    def test_weekly_drift(self):
        state = BandChemistryState(chemistry_level=50, romantic_tension=10,
                                   creative_alignment=20, conflict_index=70)
        after = calculate_weekly_drift(state)
        assert after.conflict_index == 67
        assert after.romantic_tension == 8
        assert after.creative_alignment == 22
        assert after.chemistry_level == 48

    def test_drift_does_not_go_negative(self):
        after = calculate_weekly_drift(BandChemistryState(romantic_tension=1, conflict_index=0))
        assert after.romantic_tension == 0
        assert after.conflict_index == 0
        assert after.chemistry_level == 50

    def test_high_alignment_drifts_down(self):
        assert calculate_weekly_drift(BandChemistryState(creative_alignment=80)).creative_alignment == 79

    @pytest.mark.parametrize("minutes,gain", [(44, 4), (45, 6), (14, 0), (-10, 0)])
    def test_jam_gain(self, minutes, gain):
        assert jam_chemistry_gain(minutes) == gain
