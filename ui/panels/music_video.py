"""Music video campaign panel: plan a video, track projections, sync metrics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from engine.error_handler import ValidationError
from engine.store.client import StoreClient
from engine.toasts import ToastLog
from systems.music_video import (
    STATUS_LABELS,
    MusicVideoOptions,
    MusicVideoPlan,
    calculate_music_video_plan,
    metrics_row,
    summarize_campaigns,
)
from ui.panels.base import PanelRow, StorePanel, dim_row, header_row, money, stat_row, title_row

CONFIG_COLUMNS = "*, releases:releases(id, title, release_type, artist_name), music_video_metrics(*)"


class MusicVideoPanel(StorePanel):
    title = "Music Videos"
    context = "music_video"

    def __init__(self, client: StoreClient, toasts: ToastLog, user_id: Optional[str],
                 band_ids: Sequence[str] = ()) -> None:
        super().__init__(client, toasts)
        self.user_id = user_id
        self.band_ids = list(band_ids)
        self.releases: List[Dict[str, Any]] = []
        self.configs: List[Dict[str, Any]] = []
        self.options = MusicVideoOptions()
        self.selected_release_id: Optional[str] = None
        self.production_notes = ""
        self.youtube_url = ""

    def _owned(self, query):
        """Rows the user owns directly or through one of their bands."""
        if self.band_ids:
            return query.or_(f"user_id.eq.{self.user_id},band_id.in.({','.join(self.band_ids)})")
        return query.eq("user_id", self.user_id)

    def load(self) -> bool:
        if not self.user_id:
            return False
        ok, releases = self._attempt(
            "load_releases",
            lambda: self._owned(self.client.table("releases").select(
                "id, title, artist_name, release_type, release_status, band_id"
            )).order("created_at", desc=True).execute().data or [],
            "Unable to load releases",
        )
        if not ok:
            return False
        ok, configs = self._attempt(
            "load_configs",
            lambda: self._owned(self.client.table("music_video_configs").select(CONFIG_COLUMNS)).order(
                "created_at", desc=True
            ).execute().data or [],
            "Unable to load music videos",
        )
        if not ok:
            return False

        self.releases = releases
        self.configs = configs
        if self.selected_release_id is None and releases:
            self.selected_release_id = releases[0]["id"]
        return True

    @property
    def plan(self) -> MusicVideoPlan:
        return calculate_music_video_plan(self.options)

    def _release(self, release_id: Optional[str]) -> Optional[Dict[str, Any]]:
        return next((r for r in self.releases if r["id"] == release_id), None)

    def create(self) -> Optional[Dict[str, Any]]:
        if not self.user_id:
            self._fail(ValidationError("no user"), "create", "Sign in required")
            return None

        o = self.options
        release = self._release(self.selected_release_id)
        band_id = (release or {}).get("band_id") or (self.band_ids[0] if self.band_ids else None)
        payload = {
            "release_id": self.selected_release_id,
            "user_id": self.user_id,
            "band_id": band_id,
            "theme": o.theme,
            "art_style": o.art_style,
            "budget_tier": o.budget_tier,
            "budget_amount": self.plan.budget_amount,
            "image_quality": o.image_quality,
            "cast_option": o.cast_option,
            "cast_quality": None if o.cast_option == "band_only" else o.cast_quality,
            "location_style": o.location_style,
            "production_notes": self.production_notes.strip() or None,
            "youtube_video_url": self.youtube_url.strip() or None,
        }
        ok, row = self._attempt(
            "create",
            lambda: self.client.table("music_video_configs").insert(payload).select(
                CONFIG_COLUMNS
            ).single().execute().data,
            "Unable to create plan",
        )
        if not ok:
            return None
        self.configs.insert(0, row)
        self.toasts.push("Music video plan created", "Your visual release has been added to the campaign tracker.")
        return row

    def sync_metrics(self, config_id: str, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        config = next((c for c in self.configs if c["id"] == config_id), None)
        if config is None:
            return None
        stamp = (now or datetime.now(timezone.utc)).isoformat()
        payload = metrics_row(config, stamp)
        ok, row = self._attempt(
            "sync_metrics",
            lambda: self.client.table("music_video_metrics").upsert(
                payload, on_conflict="music_video_id"
            ).select("*").single().execute().data,
            "Sync failed",
        )
        if not ok:
            return None
        config["music_video_metrics"] = row
        self.toasts.push("Metrics synced", "YouTube, chart, and MTV projections have been refreshed.")
        return row

    def set_status(self, config_id: str, status: str) -> bool:
        if status not in STATUS_LABELS:
            self._fail(ValidationError(f"unknown status {status}"), "set_status", "Unknown status")
            return False
        ok, _ = self._attempt(
            "set_status",
            lambda: self.client.table("music_video_configs").update({"status": status}).eq("id", config_id).execute(),
            "Unable to update status",
        )
        if ok:
            for config in self.configs:
                if config["id"] == config_id:
                    config["status"] = status
        return ok

    def rows(self) -> List[PanelRow]:
        plan = self.plan
        o = self.options
        out = [
            title_row(self.title),
            stat_row("Blueprint", f"{o.theme} / {o.art_style} / {o.budget_tier} / {o.image_quality}"),
            stat_row("Budget", money(plan.budget_amount)),
            stat_row("Projected views", f"{plan.youtube_views:,}"),
            stat_row("Chart entry", f"#{plan.chart_position} ({plan.chart_velocity})"),
            stat_row("MTV spins", plan.mtv_spins),
        ]
        summary = summarize_campaigns(self.configs)
        if summary is not None:
            out += [
                header_row("Campaigns"),
                stat_row("Total budget", money(summary.total_budget)),
                stat_row("Total views", f"{summary.total_views:,}"),
                stat_row("Total MTV spins", f"{summary.total_mtv_spins:,}"),
                stat_row("Average chart", f"#{summary.average_chart}"),
            ]
            for config in self.configs:
                status = STATUS_LABELS.get(config.get("status") or "", config.get("status") or "draft")
                out.append(PanelRow(f"{(config.get('theme') or 'untitled').replace('_', ' ')}  {money(config.get('budget_amount') or 0)}  [{status}]"))
        else:
            out.append(dim_row("No music videos planned yet"))
        return out
