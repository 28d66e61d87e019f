# systems/music_video.py
"""
Music video campaigns: option catalogues, budget and reach projections.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .rounding import clamp, round_half_up


# ============================================================================
# Catalogues  (value, label)
# ============================================================================

THEME_OPTIONS: List[Tuple[str, str]] = [
    ("cinematic", "Cinematic Narrative"),
    ("performance", "Performance Showcase"),
    ("animated", "Animated"),
    ("narrative", "Concept Narrative"),
    ("experimental", "Experimental"),
]

ART_STYLES: List[Tuple[str, str]] = [
    ("neon_cyberpunk", "Neon Cyberpunk"),
    ("vintage_film", "Vintage Film"),
    ("modern_minimal", "Modern Minimal"),
    ("surrealist", "Surrealist"),
    ("documentary", "Documentary"),
]

BUDGET_TIERS: List[Tuple[str, str]] = [
    ("diy", "DIY"),
    ("indie", "Indie"),
    ("studio", "Studio"),
    ("blockbuster", "Blockbuster"),
]

IMAGE_QUALITIES: List[Tuple[str, str]] = [
    ("hd", "HD"),
    ("4k", "4K"),
    ("6k", "6K"),
    ("8k", "8K"),
]

CAST_OPTIONS: List[Tuple[str, str]] = [
    ("band_only", "Band Only"),
    ("featured_dancers", "Featured Dancers"),
    ("celebrity_cameo", "Celebrity Cameo"),
    ("professional_actors", "Professional Cast"),
]

CAST_QUALITY_OPTIONS: List[Tuple[str, str]] = [
    ("emerging", "Emerging Talent"),
    ("seasoned", "Seasoned Performers"),
    ("award_winning", "Award Winning"),
]

LOCATION_STYLES: List[Tuple[str, str]] = [
    ("studio_with_led", "LED Volume Stage"),
    ("urban_night", "Urban Nightscape"),
    ("desert_scape", "Desert Landscape"),
    ("sound_stage", "Sound Stage"),
    ("on_tour", "On Tour Documentary"),
]

STATUS_LABELS: Dict[str, str] = {
    "draft": "Draft",
    "planned": "Planned",
    "in_production": "In Production",
    "post_production": "Post Production",
    "released": "Released",
    "archived": "Archived",
}


# ============================================================================
# Cost & hype tables
# ============================================================================

BASE_BUDGET = {"diy": 5000, "indie": 25000, "studio": 120000, "blockbuster": 500000}
QUALITY_MULTIPLIER = {"hd": 1.0, "4k": 1.15, "6k": 1.3, "8k": 1.5}
CAST_COST = {"band_only": 0, "featured_dancers": 8000, "celebrity_cameo": 60000, "professional_actors": 30000}
CAST_QUALITY_MULTIPLIER = {"emerging": 0.8, "seasoned": 1.0, "award_winning": 1.6}
LOCATION_COST = {
    "studio_with_led": 15000,
    "urban_night": 6000,
    "desert_scape": 12000,
    "sound_stage": 8000,
    "on_tour": 4000,
}

THEME_HYPE = {"cinematic": 18, "performance": 12, "animated": 15, "narrative": 14, "experimental": 10}
ART_STYLE_HYPE = {"neon_cyberpunk": 12, "vintage_film": 8, "modern_minimal": 6, "surrealist": 10, "documentary": 5}
BUDGET_HYPE = {"diy": 10, "indie": 20, "studio": 32, "blockbuster": 45}
QUALITY_HYPE = {"hd": 0, "4k": 4, "6k": 6, "8k": 8}
CAST_HYPE = {"band_only": 0, "featured_dancers": 5, "celebrity_cameo": 14, "professional_actors": 8}

CHART_NAMES = {
    "diy": "Indie Breakouts",
    "indie": "Alternative Top 100",
    "studio": "Global Hot 100",
    "blockbuster": "Global Hot 100",
}
MTV_PROGRAMS = {
    "cinematic": "Total Request Live",
    "performance": "Live Sessions",
    "animated": "Animation Block",
    "narrative": "Premiere Hour",
    "experimental": "120 Minutes",
}

_YOUTUBE_ID = re.compile(r"(?:v=|youtu\.be/|embed/|shorts/)([A-Za-z0-9_-]{11})")


@dataclass
class MusicVideoOptions:
    theme: str = "cinematic"
    art_style: str = "neon_cyberpunk"
    budget_tier: str = "studio"
    image_quality: str = "4k"
    cast_option: str = "band_only"
    cast_quality: Optional[str] = "seasoned"
    location_style: Optional[str] = "studio_with_led"

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MusicVideoOptions":
        return cls(
            theme=row.get("theme") or "cinematic",
            art_style=row.get("art_style") or "neon_cyberpunk",
            budget_tier=row.get("budget_tier") or "studio",
            image_quality=row.get("image_quality") or "4k",
            cast_option=row.get("cast_option") or "band_only",
            cast_quality=row.get("cast_quality"),
            location_style=row.get("location_style"),
        )


@dataclass
class MusicVideoPlan:
    budget_amount: int
    hype_score: int
    youtube_views: int
    chart_position: int
    chart_velocity: str
    mtv_spins: int


def calculate_music_video_plan(options: MusicVideoOptions) -> MusicVideoPlan:
    """
    Budget and projected reach for one set of choices.

    Unknown catalogue values contribute nothing (zero cost, zero hype,
    multiplier 1.0). Cast quality only matters when extra cast is hired.
    """
    cast_quality_mult = 1.0
    if options.cast_option != "band_only" and options.cast_quality:
        cast_quality_mult = CAST_QUALITY_MULTIPLIER.get(options.cast_quality, 1.0)

    budget = (
        BASE_BUDGET.get(options.budget_tier, 0) * QUALITY_MULTIPLIER.get(options.image_quality, 1.0)
        + CAST_COST.get(options.cast_option, 0) * cast_quality_mult
        + LOCATION_COST.get(options.location_style or "", 0)
    )

    hype = clamp(
        THEME_HYPE.get(options.theme, 0)
        + ART_STYLE_HYPE.get(options.art_style, 0)
        + BUDGET_HYPE.get(options.budget_tier, 0)
        + QUALITY_HYPE.get(options.image_quality, 0)
        + CAST_HYPE.get(options.cast_option, 0) * cast_quality_mult,
        0, 100,
    )
    hype_score = int(round_half_up(hype))

    return MusicVideoPlan(
        budget_amount=int(round_half_up(budget)),
        hype_score=hype_score,
        youtube_views=int(round_half_up(budget * 0.8 + hype_score ** 2 * 120)),
        chart_position=max(1, 100 - int(round_half_up(hype_score * 0.9))),
        chart_velocity=chart_velocity(hype_score),
        mtv_spins=max(0, int(round_half_up((hype_score - 30) * 1.5))),
    )


def chart_velocity(hype_score: float) -> str:
    if hype_score >= 80:
        return "Rocketing"
    if hype_score >= 60:
        return "Climbing"
    if hype_score >= 40:
        return "Steady"
    return "Slow burn"


def youtube_video_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    match = _YOUTUBE_ID.search(url)
    return match.group(1) if match else None


def plan_metadata(row: Dict[str, Any]) -> Dict[str, Any]:
    """Plan plus the chart, MTV program and video id a stored config maps to."""
    options = MusicVideoOptions.from_row(row)
    return {
        "plan": calculate_music_video_plan(options),
        "chart_name": CHART_NAMES.get(options.budget_tier, "Global Hot 100"),
        "mtv_program": MTV_PROGRAMS.get(options.theme, "Total Request Live"),
        "youtube_video_id": youtube_video_id(row.get("youtube_video_url")),
    }


def metrics_row(config_row: Dict[str, Any], synced_at: str) -> Dict[str, Any]:
    """music_video_metrics upsert payload projected from a config row."""
    meta = plan_metadata(config_row)
    plan: MusicVideoPlan = meta["plan"]
    return {
        "music_video_id": config_row["id"],
        "youtube_video_id": meta["youtube_video_id"],
        "youtube_views": plan.youtube_views,
        "chart_name": meta["chart_name"],
        "chart_position": plan.chart_position,
        "chart_velocity": plan.chart_velocity,
        "mtv_program": meta["mtv_program"],
        "mtv_spins": plan.mtv_spins,
        "last_synced_at": synced_at,
    }


# ============================================================================
# Campaign summary
# ============================================================================

@dataclass
class CampaignSummary:
    total_views: int = 0
    total_budget: int = 0
    total_mtv_spins: int = 0
    chart_positions: List[int] = field(default_factory=list)

    @property
    def average_chart(self) -> Optional[int]:
        if not self.chart_positions:
            return None
        return int(round_half_up(sum(self.chart_positions) / len(self.chart_positions)))


def summarize_campaigns(configs: Iterable[Dict[str, Any]]) -> Optional[CampaignSummary]:
    """
    Totals across configs. Synced metrics win over projections.

    Returns None when there are no configs.
    """
    summary = CampaignSummary()
    seen = False
    for config in configs:
        seen = True
        plan = calculate_music_video_plan(MusicVideoOptions.from_row(config))
        metrics = config.get("music_video_metrics") or {}
        if isinstance(metrics, list):
            metrics = metrics[0] if metrics else {}

        views = metrics.get("youtube_views")
        position = metrics.get("chart_position")
        spins = metrics.get("mtv_spins")

        summary.total_views += plan.youtube_views if views is None else views
        summary.total_budget += int(config.get("budget_amount") or 0)
        summary.total_mtv_spins += plan.mtv_spins if spins is None else spins
        summary.chart_positions.append(plan.chart_position if position is None else position)
    return summary if seen else None
