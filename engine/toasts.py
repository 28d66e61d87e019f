from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from settings import TOAST_DISPLAY_SECONDS, TOAST_LIMIT

# Type alias for RGB colors used in UI rendering
Color = Tuple[int, int, int]

# ---------------------------------------------------------------------------
# Variant → color helpers (used by the toast strip)
# ---------------------------------------------------------------------------

_VARIANT_COLORS: dict[str, Color] = {
    "default": (220, 220, 220),
    "success": (140, 210, 160),
    "destructive": (255, 120, 120),
}


def get_variant_color(variant: str) -> Color:
    """Map a toast variant to an RGB color; unknown variants use the default."""
    return _VARIANT_COLORS.get(str(variant).lower(), _VARIANT_COLORS["default"])


@dataclass
class Toast:
    title: str
    description: str = ""
    variant: str = "default"
    created_at: float = field(default_factory=time.monotonic)

    @property
    def color(self) -> Color:
        return get_variant_color(self.variant)


class ToastLog:
    """
    Short notifications raised by panels.

    Features:
    - Keeps a bounded history (oldest dropped first)
    - Tracks the latest toast for the status strip
    - `visible()` returns the toasts still inside their display window
    """

    def __init__(self, max_size: int = TOAST_LIMIT, display_seconds: float = TOAST_DISPLAY_SECONDS) -> None:
        """
        Args:
            max_size: Maximum number of toasts to keep
            display_seconds: How long a toast stays on screen
        """
        self.history: List[Toast] = []
        self.max_size = max_size
        self.display_seconds = display_seconds

    def push(self, title: str, description: str = "", variant: str = "default") -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        self.history.append(toast)

        # Clamp history size (keep most recent entries)
        max_len = max(1, int(self.max_size))
        if len(self.history) > max_len:
            self.history = self.history[-max_len:]
        return toast

    def success(self, title: str, description: str = "") -> Toast:
        return self.push(title, description, "success")

    def error(self, title: str, description: str = "") -> Toast:
        return self.push(title, description, "destructive")

    @property
    def latest(self) -> Optional[Toast]:
        return self.history[-1] if self.history else None

    def visible(self, now: Optional[float] = None) -> List[Toast]:
        now = time.monotonic() if now is None else now
        return [t for t in self.history if now - t.created_at <= self.display_seconds]

    def clear(self) -> None:
        self.history = []
