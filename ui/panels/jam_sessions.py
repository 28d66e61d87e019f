"""
Jam session lobby: create, join and leave sessions, and chat inside one.

Chat messages arrive through the realtime hub. `open_session()` joins the
session's channel; `close_session()` leaves it. The lobby also shows the
player's jam history and, when they are in a band, its chemistry
modifiers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from engine.error_handler import ValidationError
from engine.store.client import StoreClient
from engine.store.realtime import RealtimeHub
from engine.toasts import ToastLog
from systems.chemistry import (
    DRAMA_PRESETS,
    BandChemistryModifiers,
    BandChemistryState,
    Candidate,
    apply_drama_event,
    calculate_band_chemistry_modifiers,
    calculate_weekly_drift,
    evaluate_drama_triggers,
    jam_chemistry_gain,
)
from systems.jam_sessions import (
    JamSessionForm,
    check_access_code,
    early_leave_multiplier,
    join_cost_share,
    parse_time,
    partition_sessions,
    session_duration_minutes,
    total_chemistry_gained,
    total_xp_earned,
)
from ui.panels.base import PanelRow, StorePanel, dim_row, header_row, money, stat_row, title_row

MESSAGES_TABLE = "jam_session_messages"
OUTCOMES_TABLE = "jam_session_outcomes"
MESSAGE_LIMIT = 100
SESSION_COLUMNS = "*, current_participants:jam_session_participants(count)"


def band_state_from_row(row: Dict[str, Any]) -> BandChemistryState:
    """Chemistry axes from a `bands` row; missing columns keep the neutral defaults."""
    state = BandChemistryState()
    for axis in ("chemistry_level", "romantic_tension", "creative_alignment", "conflict_index"):
        if row.get(axis) is not None:
            setattr(state, axis, float(row[axis]))
    return state


class JamSessionPanel(StorePanel):
    title = "Jam Sessions"
    context = "jam_sessions"

    def __init__(self, client: StoreClient, toasts: ToastLog, hub: RealtimeHub,
                 profile_id: Optional[str], user_id: Optional[str] = None) -> None:
        super().__init__(client, toasts)
        self.hub = hub
        self.profile_id = profile_id
        self.user_id = user_id
        self.sessions: List[Dict[str, Any]] = []
        self.outcomes: List[Dict[str, Any]] = []
        self.band: Optional[Dict[str, Any]] = None
        self.band_state: Optional[BandChemistryState] = None
        self.band_modifiers: Optional[BandChemistryModifiers] = None
        self.band_risks: List[Candidate] = []
        self.form = JamSessionForm()
        self.access_attempts: Dict[str, str] = {}
        self.current_session_id: Optional[str] = None
        self.participants: List[Dict[str, Any]] = []
        self.messages: List[Dict[str, Any]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Lobby
    # ------------------------------------------------------------------

    def load(self) -> bool:
        ok, rows = self._attempt(
            "load",
            lambda: self.client.table("jam_sessions").select(SESSION_COLUMNS).order(
                "created_at", desc=True
            ).execute().data or [],
            "Unable to load jam sessions",
        )
        if not ok:
            return False
        self.sessions = rows
        return self.load_outcomes() and self.load_band()

    def load_outcomes(self) -> bool:
        if not self.profile_id:
            return True
        ok, rows = self._attempt(
            "outcomes",
            lambda: self.client.table(OUTCOMES_TABLE).select("*").eq(
                "participant_id", self.profile_id
            ).order("created_at", desc=True).execute().data or [],
            "Unable to load jam history",
        )
        if ok:
            self.outcomes = rows
        return ok

    def load_band(self) -> bool:
        """Fetch the player's band and derive its chemistry modifiers."""
        self.band = None
        self.band_state = None
        self.band_modifiers = None
        self.band_risks = []
        if not self.user_id:
            return True

        def fetch() -> Optional[Dict[str, Any]]:
            member = self.client.table("band_members").select("band_id").eq(
                "user_id", self.user_id
            ).limit(1).maybe_single().execute().data
            if not member or not member.get("band_id"):
                return None
            return self.client.table("bands").select("*").eq("id", member["band_id"]).maybe_single().execute().data

        ok, band = self._attempt("band", fetch, "Unable to load band chemistry")
        if ok and band:
            self.band = band
            self.band_state = band_state_from_row(band)
            self.band_modifiers = calculate_band_chemistry_modifiers(self.band_state)
            self.band_risks = evaluate_drama_triggers(self.band_state, "weekly_check")
        return ok

    def worst_case(self) -> Optional[Tuple[str, BandChemistryState]]:
        """Most likely weekly drama event and the band state if it lands."""
        if self.band_state is None or not self.band_risks:
            return None
        key, _ = max(self.band_risks, key=lambda risk: risk[1])
        return key, apply_drama_event(self.band_state, key)

    @property
    def lobby(self) -> Dict[str, List[Dict[str, Any]]]:
        return partition_sessions(self.sessions)

    def create(self) -> Optional[Dict[str, Any]]:
        if not self.profile_id:
            self._fail(ValidationError("no profile"), "create", "Sign in required")
            return None
        try:
            self.form.validate()
        except ValidationError as e:
            self._fail(e, "create", "Missing information")
            return None

        row = self.form.to_row(self.profile_id)
        ok, saved = self._attempt(
            "create",
            lambda: self.client.table("jam_sessions").insert(row).select("*").maybe_single().execute().data,
            "Failed to create session",
        )
        if not ok:
            return None
        self.sessions.insert(0, saved or row)
        self.form = JamSessionForm()
        self.toasts.push("Jam session created!")
        return saved

    def join(self, session_id: str) -> bool:
        session = next((s for s in self.sessions if s.get("id") == session_id), None)
        if session is None or not self.profile_id:
            return False
        if not check_access_code(session, self.access_attempts.get(session_id)):
            self._fail(ValidationError("access code mismatch"), "join", "Incorrect access code")
            return False

        ok, _ = self._attempt(
            "join",
            lambda: self.client.rpc("join_jam_session", {"p_session_id": session_id}),
            "Failed to join session",
        )
        if ok:
            self.toasts.push("Joined session!")
            self.open_session(session_id)
        return ok

    def leave(self, session_id: str, now: Optional[datetime] = None) -> Optional[float]:
        """
        Leave a session, applying the early-leave penalty while it is active.

        Returns the reward multiplier recorded, or None on failure.
        """
        session = next((s for s in self.sessions if s.get("id") == session_id), None)
        if session is None or not self.profile_id:
            return None

        now = now or datetime.now(timezone.utc)
        multiplier = 1.0
        started = parse_time(session.get("started_at"))
        ends = parse_time(session.get("scheduled_end"))
        if session.get("status") == "active" and started and ends:
            multiplier = early_leave_multiplier(started, ends, now)

        update = {"left_at": now.isoformat(), "reward_multiplier": multiplier}
        ok, _ = self._attempt(
            "leave",
            lambda: self.client.table("jam_session_participants").update(update).eq(
                "jam_session_id", session_id
            ).eq("profile_id", self.profile_id).execute(),
            "Failed to leave session",
        )
        if not ok:
            return None

        if session_id == self.current_session_id:
            self.close_session()
        if multiplier < 1:
            self.toasts.error("Left session", f"Early leave penalty applied ({int(multiplier * 100)}% rewards)")
        else:
            self.toasts.push("Left session")
        return multiplier

    # ------------------------------------------------------------------
    # Inside a session
    # ------------------------------------------------------------------

    def open_session(self, session_id: str) -> bool:
        self.close_session()
        ok, participants = self._attempt(
            "participants",
            lambda: self.client.table("jam_session_participants").select(
                "*, profiles(id, username, display_name)"
            ).eq("jam_session_id", session_id).execute().data or [],
            "Unable to load participants",
        )
        if not ok:
            return False
        ok, messages = self._attempt(
            "messages",
            lambda: self.client.table(MESSAGES_TABLE).select("*").eq(
                "session_id", session_id
            ).order("created_at").limit(MESSAGE_LIMIT).execute().data or [],
            "Unable to load messages",
        )
        if not ok:
            return False

        self.current_session_id = session_id
        self.participants = participants
        self.messages = messages
        channel = self.hub.channel(f"jam-session:{session_id}").on(
            MESSAGES_TABLE, self._on_message, event="INSERT", filter=("session_id", session_id),
        ).subscribe()
        self._unsubscribe = channel.unsubscribe
        return True

    def _on_message(self, change: Dict[str, Any]) -> None:
        message = change["new"]
        if any(m.get("id") == message.get("id") for m in self.messages if m.get("id")):
            return
        self.messages.append(message)
        if len(self.messages) > MESSAGE_LIMIT:
            self.messages = self.messages[-MESSAGE_LIMIT:]

    def send_message(self, text: str) -> bool:
        trimmed = text.strip()
        if not trimmed or not self.current_session_id or not self.profile_id:
            return False
        ok, _ = self._attempt(
            "send_message",
            lambda: self.client.table(MESSAGES_TABLE).insert({
                "session_id": self.current_session_id,
                "profile_id": self.profile_id,
                "message": trimmed,
                "message_type": "chat",
            }).execute(),
            "Message not sent",
        )
        return ok

    def close_session(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.current_session_id = None
        self.participants = []
        self.messages = []

    def rows(self) -> List[PanelRow]:
        lobby = self.lobby
        out = [
            title_row(self.title),
            stat_row("Waiting", len(lobby["waiting"])),
            stat_row("Active", len(lobby["active"])),
            stat_row("Completed", len(lobby["completed"])),
            stat_row("Sessions played", len(self.outcomes)),
            stat_row("Total XP earned", total_xp_earned(self.outcomes)),
            stat_row("Chemistry gained", total_chemistry_gained(self.outcomes)),
            header_row("Open sessions"),
        ]
        for session in lobby["waiting"]:
            lock = " [private]" if session.get("is_private") else ""
            out.append(PanelRow(
                f"{session.get('name')} - {session.get('genre')} @ {session.get('tempo')} bpm"
                f"  max {session.get('max_participants')}{lock}"
            ))
            details = []
            share = join_cost_share(session)
            if share is not None:
                details.append(f"join for {money(share)}")
            minutes = session_duration_minutes(session)
            if minutes is not None:
                details.append(f"{int(minutes)} min, +{jam_chemistry_gain(minutes)} chemistry")
            if details:
                out.append(dim_row(", ".join(details), indent=1))
        if not lobby["waiting"]:
            out.append(dim_row("No open sessions"))

        if self.band_modifiers is not None:
            mods = self.band_modifiers
            out.append(header_row(f"Band chemistry: {self.band.get('name') or 'your band'}"))
            out.append(stat_row("Chemistry", int(self.band_state.chemistry_level)))
            out.append(stat_row("Song quality", f"x{mods.song_quality_modifier:.2f}"))
            out.append(stat_row("Performance", f"x{mods.performance_rating_modifier:.2f}"))
            out.append(stat_row("Rehearsal", f"x{mods.rehearsal_efficiency:.2f}"))
            out.append(stat_row("Leave risk", f"{mods.member_leave_risk}%/week"))
            out.append(stat_row("Drama chance", f"{mods.drama_event_chance}%"))
            drift = calculate_weekly_drift(self.band_state)
            out.append(stat_row("Next week", f"chemistry {drift.chemistry_level:.0f}, conflict {drift.conflict_index:.0f}"))
            for key, probability in self.band_risks:
                out.append(dim_row(f"{DRAMA_PRESETS[key].label} {probability:.0f}%", indent=1))
            worst = self.worst_case()
            if worst is not None:
                key, after = worst
                out.append(dim_row(
                    f"Worst case ({DRAMA_PRESETS[key].label}): chemistry {after.chemistry_level:.0f},"
                    f" conflict {after.conflict_index:.0f}",
                    indent=1,
                ))

        if self.current_session_id:
            out.append(header_row(f"Chat ({len(self.participants)} musicians)"))
            for message in self.messages[-8:]:
                out.append(dim_row(message.get("message", ""), indent=1))
        return out
