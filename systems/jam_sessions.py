# systems/jam_sessions.py

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from engine.error_handler import ValidationError

SESSION_STATUSES = ("waiting", "active", "completed")
DEFAULT_TEMPO = 120
DEFAULT_MAX_PARTICIPANTS = 4

# (share of the session still left, reward multiplier) for early leavers
EARLY_LEAVE_PENALTIES = (
    (75, 0.10),
    (50, 0.25),
    (25, 0.50),
    (10, 0.75),
)


@dataclass
class JamSessionForm:
    name: str = ""
    description: str = ""
    genre: str = ""
    tempo: int = DEFAULT_TEMPO
    max_participants: int = DEFAULT_MAX_PARTICIPANTS
    skill_requirement: int = 0
    is_private: bool = False
    access_code: str = ""

    def validate(self) -> None:
        if not self.name.strip() or not self.genre:
            raise ValidationError("jam session form incomplete",
                                  user_message="Please provide session name and genre")
        if self.max_participants < 1:
            raise ValidationError("max_participants must be positive",
                                  user_message="A session needs room for at least one musician")

    def to_row(self, host_id: str) -> Dict[str, Any]:
        """Insert payload; blank descriptions become NULL, public sessions carry no code."""
        return {
            "host_id": host_id,
            "name": self.name.strip(),
            "description": self.description.strip() or None,
            "genre": self.genre,
            "tempo": self.tempo,
            "max_participants": self.max_participants,
            "skill_requirement": self.skill_requirement,
            "is_private": self.is_private,
            "access_code": self.access_code.strip() if self.is_private else None,
            "status": "waiting",
        }


def check_access_code(session: Dict[str, Any], attempt: Optional[str]) -> bool:
    """Public sessions always pass; private ones need the exact trimmed code."""
    if not session.get("is_private"):
        return True
    code = (attempt or "").strip()
    return bool(code) and code == session.get("access_code")


def cost_per_participant(total_cost: float, participants: int) -> int:
    """Even split rounded up so the host is never short."""
    if participants <= 0:
        return int(math.ceil(total_cost))
    return int(math.ceil(total_cost / participants))


def partition_sessions(sessions: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Group sessions by lobby status; unknown statuses are dropped."""
    groups: Dict[str, List[Dict[str, Any]]] = {status: [] for status in SESSION_STATUSES}
    for session in sessions:
        status = session.get("status")
        if status in groups:
            groups[status].append(session)
    return groups


def early_leave_multiplier(started_at: datetime, scheduled_end: datetime, now: datetime) -> float:
    """
    Reward multiplier for leaving an active session before it ends.

    The more of the session still left, the steeper the cut; leaving in
    the final 10% keeps full rewards.
    """
    total = (scheduled_end - started_at).total_seconds()
    if total <= 0:
        return 1.0
    elapsed = (now - started_at).total_seconds()
    left_pct = (total - elapsed) / total * 100
    for threshold, multiplier in EARLY_LEAVE_PENALTIES:
        if left_pct > threshold:
            return multiplier
    return 1.0


def total_xp_earned(outcomes: Iterable[Dict[str, Any]]) -> int:
    return sum(int(o.get("xp_earned") or 0) for o in outcomes)


def total_chemistry_gained(outcomes: Iterable[Dict[str, Any]]) -> int:
    return sum(int(o.get("chemistry_gained") or 0) for o in outcomes)


def parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def session_duration_minutes(session: Dict[str, Any]) -> Optional[float]:
    """Booked length of a session, from duration_hours or its scheduled window."""
    if session.get("duration_hours"):
        return float(session["duration_hours"]) * 60
    start = parse_time(session.get("scheduled_start") or session.get("started_at"))
    end = parse_time(session.get("scheduled_end"))
    if start is None or end is None:
        return None
    return max(0.0, (end - start).total_seconds() / 60)


def participant_count(session: Dict[str, Any]) -> int:
    """
    Musicians already in a session.

    Reads the embedded `current_participants:jam_session_participants(count)`
    aggregate; a session always has at least its host.
    """
    embedded = session.get("current_participants")
    if isinstance(embedded, list) and embedded:
        return max(1, int(embedded[0].get("count") or 0))
    if isinstance(embedded, int):
        return max(1, embedded)
    return 1


def join_cost_share(session: Dict[str, Any]) -> Optional[int]:
    """What a new musician pays to join: the room cost split over the roster after joining."""
    total = session.get("total_cost")
    if not total:
        return None
    seats = min(participant_count(session) + 1, session.get("max_participants") or DEFAULT_MAX_PARTICIPANTS)
    return cost_per_participant(total, seats)
