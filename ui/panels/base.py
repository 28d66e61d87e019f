"""
Base classes for the dashboard panels.

A panel owns its form state and the rows it last loaded. Store calls go
through `_attempt()`: a GameError (store failure, validation, refused
purchase) is logged, surfaced as a toast and leaves the panel's state as it
was. `rows()` returns the display lines that `ui.screen_components.draw_panel`
renders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from engine.error_handler import GameError, log_error
from engine.store.client import StoreClient
from engine.toasts import ToastLog
from ui.screen_constants import COLOR_CATEGORY, COLOR_TEXT, COLOR_TEXT_DIM, COLOR_TITLE

Color = Tuple[int, int, int]


@dataclass
class PanelRow:
    text: str
    color: Color = COLOR_TEXT
    indent: int = 0
    kind: str = "text"      # title | header | text


def title_row(text: str) -> PanelRow:
    return PanelRow(text, COLOR_TITLE, kind="title")


def header_row(text: str) -> PanelRow:
    return PanelRow(f"--- {text} ---", COLOR_CATEGORY, kind="header")


def stat_row(label: str, value: Any, indent: int = 0) -> PanelRow:
    return PanelRow(f"{label}: {value}", COLOR_TEXT, indent)


def dim_row(text: str, indent: int = 0) -> PanelRow:
    return PanelRow(text, COLOR_TEXT_DIM, indent)


def money(amount: float) -> str:
    return f"${amount:,.0f}"


class Panel:
    """Panel with local state only."""

    title = ""
    context = "panel"

    def __init__(self, toasts: ToastLog) -> None:
        self.toasts = toasts

    def rows(self) -> List[PanelRow]:
        raise NotImplementedError

    def _fail(self, error: GameError, action: str, title: str, description: Optional[str] = None) -> None:
        log_error(error, f"{self.context}.{action}", user_message=description, toasts=self.toasts, title=title)


class StorePanel(Panel):
    """Panel backed by the remote store."""

    def __init__(self, client: StoreClient, toasts: ToastLog) -> None:
        super().__init__(toasts)
        self.client = client
        self.loading = False

    def _attempt(
        self,
        action: str,
        call: Callable[[], Any],
        failure_title: str,
        failure_description: Optional[str] = None,
    ) -> Tuple[bool, Any]:
        """
        Run one store interaction.

        Returns:
            (True, result) on success, (False, None) after the failure has
            been logged and toasted
        """
        self.loading = True
        try:
            return True, call()
        except GameError as e:
            self._fail(e, action, failure_title, failure_description)
            return False, None
        finally:
            self.loading = False
