# systems/chemistry.py
"""
Band chemistry: four axes that feed gameplay modifiers and drama.

Axes (all 0-100):
- chemistry_level: overall cohesion
- romantic_tension: higher is more volatile
- creative_alignment: higher is better synergy
- conflict_index: higher is more friction

Features:
- Modifier calculation (song quality, performance, leave risk, ...)
- Drama presets and trigger evaluation per source
- Worst-case preview of a drama event
- Weekly natural drift
- Chemistry gained from jam sessions
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .rounding import clamp, round_half_up


# ============================================================================
# State & modifiers
# ============================================================================

@dataclass
class BandChemistryState:
    chemistry_level: float = 50.0
    romantic_tension: float = 0.0
    creative_alignment: float = 50.0
    conflict_index: float = 0.0


@dataclass
class BandChemistryModifiers:
    song_quality_modifier: float
    performance_rating_modifier: float
    member_leave_risk: int          # % per week
    drama_event_chance: int         # % per action
    rehearsal_efficiency: float
    fan_perception: int             # -25..25 added to fan growth


HIGH_TENSION_THRESHOLD = 50


def calculate_band_chemistry_modifiers(
    state: BandChemistryState,
    rng: Optional[random.Random] = None,
) -> BandChemistryModifiers:
    """
    Derive gameplay modifiers from a chemistry state.

    Above 50 romantic tension the performance modifier is volatile: usually
    -0.1, but 40% of the time an electric +0.08. `rng` decides which.
    """
    rng = rng or random
    chem = state.chemistry_level
    tension = state.romantic_tension
    creative = state.creative_alignment
    conflict = state.conflict_index

    song_quality = clamp(
        0.7 + creative / 200 + chem / 500 - conflict / 500 - tension / 1000,
        0.6, 1.5,
    )

    volatility = 0.0
    if tension > HIGH_TENSION_THRESHOLD:
        volatility = -0.1 if rng.random() > 0.4 else 0.08
    performance = clamp(
        0.6 + chem / 150 - conflict / 400 + creative / 500 + volatility,
        0.5, 1.5,
    )

    leave_risk = clamp(conflict * 0.4 + tension * 0.2 - chem * 0.3 - creative * 0.1 + 15, 0, 80)
    drama_chance = clamp(2 + conflict * 0.35 + tension * 0.2 - chem * 0.15, 2, 60)
    rehearsal = clamp(0.6 + chem / 200 + creative / 250 - conflict / 500, 0.5, 1.5)
    fan_perception = clamp(chem / 5 - conflict / 5 - tension / 10 - 5, -25, 25)

    return BandChemistryModifiers(
        song_quality_modifier=round_half_up(song_quality, 3),
        performance_rating_modifier=round_half_up(performance, 3),
        member_leave_risk=int(round_half_up(leave_risk)),
        drama_event_chance=int(round_half_up(drama_chance)),
        rehearsal_efficiency=round_half_up(rehearsal, 3),
        fan_perception=int(round_half_up(fan_perception)),
    )


# ============================================================================
# Drama presets
# ============================================================================

@dataclass(frozen=True)
class DramaPreset:
    key: str
    drama_type: str
    label: str
    severity: str              # minor | moderate | major | critical
    chemistry_change: int
    romantic_tension_change: int
    creative_alignment_change: int
    conflict_index_change: int
    member_leave_risk: int
    is_public: bool
    description: str


def _preset(key, drama_type, label, severity, chem, tension, creative, conflict, leave, public, description):
    return DramaPreset(key, drama_type, label, severity, chem, tension, creative, conflict, leave, public, description)


DRAMA_PRESETS: Dict[str, DramaPreset] = {p.key: p for p in [
    # Romantic
    _preset("romantic_breakup", "romantic_breakup", "Romantic Breakup", "major",
            -15, 30, -10, 20, 25, False, "Two band members ended their relationship"),
    _preset("romantic_tension_rise", "romantic_tension", "Romantic Tension", "moderate",
            -5, 15, -3, 8, 5, False, "Unresolved romantic feelings creating awkwardness"),
    _preset("affair_scandal", "affair_scandal", "Affair Scandal", "critical",
            -25, 40, -15, 35, 40, True, "A secret affair within the band has been exposed"),
    # Creative
    _preset("creative_clash", "creative_clash", "Creative Clash", "moderate",
            -8, 0, -20, 15, 10, False, "Members disagree on the band's musical direction"),
    _preset("genre_disagreement", "genre_disagreement", "Genre Disagreement", "minor",
            -3, 0, -12, 8, 5, False, "Dispute over what genre to pursue"),
    _preset("songwriting_dispute", "songwriting_dispute", "Songwriting Dispute", "moderate",
            -6, 0, -15, 12, 8, False, "Conflict over songwriting credits or direction"),
    # Rivalry
    _preset("rivalry_eruption", "rivalry_eruption", "Rivalry Eruption", "major",
            -12, 5, -8, 25, 20, False, "A personal rivalry has escalated between members"),
    _preset("jealousy_incident", "jealousy_incident", "Jealousy Incident", "moderate",
            -7, 10, -5, 15, 10, False, "Jealousy over spotlight, skills, or relationships"),
    _preset("leadership_challenge", "leadership_challenge", "Leadership Challenge", "major",
            -10, 0, -5, 20, 15, False, "A member is challenging the band leader's authority"),
    # Public
    _preset("public_scandal", "public_scandal", "Public Scandal", "critical",
            -20, 10, -10, 30, 30, True, "A scandal involving band members has gone public"),
    _preset("media_fallout", "media_fallout", "Media Fallout", "major",
            -12, 5, -5, 18, 12, True, "Negative media coverage straining the band"),
    _preset("fan_backlash", "fan_backlash", "Fan Backlash", "moderate",
            -8, 0, -8, 12, 8, True, "Fans reacting negatively, putting pressure on the band"),
    # Escalation
    _preset("member_threat_leave", "member_threat_leave", "Member Threatens to Leave", "critical",
            -18, 5, -10, 30, 50, False, "A member is threatening to leave the band"),
    _preset("member_ultimatum", "member_ultimatum", "Ultimatum Issued", "critical",
            -15, 5, -8, 25, 35, False, "A member has issued an ultimatum to the band"),
    _preset("intervention", "intervention", "Band Intervention", "major",
            5, -5, 3, -10, -5, False, "The band held an intervention to address issues"),
    # Positive
    _preset("reconciliation", "reconciliation", "Reconciliation", "moderate",
            12, -10, 8, -15, -15, False, "Members have reconciled and resolved their differences"),
    _preset("creative_breakthrough", "creative_breakthrough", "Creative Breakthrough", "moderate",
            10, 0, 20, -8, -10, False, "The band had a creative breakthrough together"),
    _preset("unity_moment", "unity_moment", "Unity Moment", "minor",
            15, -5, 10, -12, -20, False, "A shared experience brought the band closer together"),
]}

TRIGGER_SOURCES = (
    "romantic_breakup",
    "rivalry",
    "creative_disagreement",
    "public_scandal",
    "weekly_check",
    "gig_outcome",
    "songwriting_session",
)

Candidate = Tuple[str, float]


def evaluate_drama_triggers(state: BandChemistryState, source: str) -> List[Candidate]:
    """(preset key, probability %) pairs that could fire for this source."""
    out: List[Candidate] = []

    if source == "romantic_breakup":
        out.append(("romantic_breakup", 90))
        if state.romantic_tension > 40:
            out.append(("member_threat_leave", 20))
        if state.conflict_index > 50:
            out.append(("rivalry_eruption", 30))

    elif source == "rivalry":
        out.append(("rivalry_eruption", 70))
        out.append(("jealousy_incident", 40))
        if state.conflict_index > 60:
            out.append(("member_threat_leave", 25))

    elif source == "creative_disagreement":
        out.append(("creative_clash", 60))
        out.append(("genre_disagreement", 40))
        out.append(("songwriting_dispute", 30))
        if state.creative_alignment > 60:
            out.append(("creative_breakthrough", 15))

    elif source == "public_scandal":
        out.append(("public_scandal", 80))
        out.append(("media_fallout", 60))
        out.append(("fan_backlash", 50))

    elif source == "weekly_check":
        if state.conflict_index > 60:
            out.append(("member_threat_leave", state.conflict_index / 5))
        if state.romantic_tension > 50:
            out.append(("romantic_tension_rise", state.romantic_tension / 4))
        if state.creative_alignment < 30:
            out.append(("creative_clash", 15))
        if state.chemistry_level > 75 and state.conflict_index < 20:
            out.append(("unity_moment", 10))

    elif source == "gig_outcome":
        if state.conflict_index > 40:
            out.append(("rivalry_eruption", 15))
        if state.romantic_tension > 60:
            out.append(("jealousy_incident", 20))
        if state.chemistry_level > 60:
            out.append(("unity_moment", 12))

    elif source == "songwriting_session":
        if state.creative_alignment < 40:
            out.append(("songwriting_dispute", 25))
        if state.creative_alignment > 70:
            out.append(("creative_breakthrough", 20))

    return out


def apply_drama_event(state: BandChemistryState, preset_key: str) -> BandChemistryState:
    """New state with the preset's axis changes applied and clamped to 0-100."""
    preset = DRAMA_PRESETS[preset_key]
    return BandChemistryState(
        chemistry_level=clamp(state.chemistry_level + preset.chemistry_change, 0, 100),
        romantic_tension=clamp(state.romantic_tension + preset.romantic_tension_change, 0, 100),
        creative_alignment=clamp(state.creative_alignment + preset.creative_alignment_change, 0, 100),
        conflict_index=clamp(state.conflict_index + preset.conflict_index_change, 0, 100),
    )


# ============================================================================
# Drift & jam gains
# ============================================================================

def calculate_weekly_drift(state: BandChemistryState) -> BandChemistryState:
    """
    Natural weekly change: conflict -3, tension -2, creative alignment
    drifts toward 50, and chemistry erodes by 2 while conflict is above 50.
    """
    creative = state.creative_alignment
    if creative < 50:
        creative = clamp(creative + 2, 0, 100)
    elif creative > 50:
        creative = clamp(creative - 1, 0, 100)

    chemistry = state.chemistry_level
    if state.conflict_index > 50:
        chemistry = clamp(chemistry - 2, 0, 100)

    return replace(
        state,
        conflict_index=clamp(state.conflict_index - 3, 0, 100),
        romantic_tension=clamp(state.romantic_tension - 2, 0, 100),
        creative_alignment=creative,
        chemistry_level=chemistry,
    )


def jam_chemistry_gain(duration_minutes: float) -> int:
    """2 chemistry per full 15 minutes jammed."""
    return int(max(0, duration_minutes) // 15) * 2
