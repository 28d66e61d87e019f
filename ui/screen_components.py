"""
Reusable UI components for the dashboard screens.

This module contains the rendering functions shared by the panel scene
and the avatar studio: panel rows, the toast strip, header tabs and
footer hints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import pygame

from ui.screen_constants import (
    BORDER_WIDTH_THIN,
    COLOR_BG_PANEL,
    COLOR_BG_TOAST,
    COLOR_BORDER,
    COLOR_FOOTER,
    COLOR_TAB_ACTIVE,
    COLOR_TAB_INACTIVE,
    COLOR_TITLE,
    INDENT_DEFAULT,
    LINE_HEIGHT_MEDIUM,
    LINE_HEIGHT_SMALL,
    LINE_HEIGHT_TITLE,
    MARGIN_X,
    MARGIN_Y_FOOTER,
    MARGIN_Y_TOP,
    MAX_TOAST_TEXT,
    PANEL_PADDING,
    TAB_SPACING,
    TAB_X_OFFSET,
    TOAST_HEIGHT,
    TOAST_SPACING,
    TOAST_WIDTH,
)

if TYPE_CHECKING:
    from engine.toasts import ToastLog
    from ui.panels.base import PanelRow


def get_rarity_color(rarity: str) -> tuple[int, int, int]:
    """
    Get a display color for a store item or modifier based on its rarity.

    Falls back to a neutral color if the rarity is unknown.
    """
    rarity_key = (rarity or "").lower()
    palette = {
        "common": (220, 220, 220),
        "uncommon": (140, 220, 140),   # soft green
        "rare": (140, 180, 255),       # soft blue
        "epic": (200, 150, 255),       # purple
        "legendary": (255, 200, 120),  # orange/gold
    }
    return palette.get(rarity_key, (220, 220, 220))


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def row_height(row: "PanelRow") -> int:
    if row.kind == "title":
        return LINE_HEIGHT_TITLE
    if row.kind == "header":
        return LINE_HEIGHT_MEDIUM
    return LINE_HEIGHT_SMALL


# ============================================================================
# Rendering Functions
# ============================================================================

def draw_panel(
    screen: pygame.Surface,
    ui_font: pygame.font.Font,
    rows: List["PanelRow"],
    rect: pygame.Rect,
    scroll: int = 0,
) -> int:
    """
    Draw panel rows inside `rect`, skipping the first `scroll` rows.

    Rows that would overflow the bottom edge are not drawn.

    Returns:
        Number of rows drawn
    """
    background = pygame.Surface(rect.size, pygame.SRCALPHA)
    background.fill(COLOR_BG_PANEL)
    screen.blit(background, rect.topleft)
    pygame.draw.rect(screen, COLOR_BORDER, rect, BORDER_WIDTH_THIN)

    y = rect.y + PANEL_PADDING
    bottom = rect.bottom - PANEL_PADDING
    drawn = 0
    for row in rows[max(0, scroll):]:
        height = row_height(row)
        if y + height > bottom:
            break
        surf = ui_font.render(row.text, True, row.color)
        screen.blit(surf, (rect.x + PANEL_PADDING + row.indent * INDENT_DEFAULT, y))
        y += height
        drawn += 1
    return drawn


def draw_toasts(
    screen: pygame.Surface,
    ui_font: pygame.font.Font,
    toasts: "ToastLog",
    w: int,
    now: Optional[float] = None,
) -> None:
    """Draw visible toasts stacked down the top-right corner, newest first."""
    x = w - TOAST_WIDTH - MARGIN_X // 2
    y = MARGIN_Y_TOP
    for toast in reversed(toasts.visible(now)):
        box = pygame.Surface((TOAST_WIDTH, TOAST_HEIGHT), pygame.SRCALPHA)
        box.fill(COLOR_BG_TOAST)
        screen.blit(box, (x, y))
        pygame.draw.rect(screen, toast.color, (x, y, TOAST_WIDTH, TOAST_HEIGHT), BORDER_WIDTH_THIN)

        title_surf = ui_font.render(truncate(toast.title, MAX_TOAST_TEXT), True, toast.color)
        screen.blit(title_surf, (x + 8, y + 4))
        if toast.description:
            desc_surf = ui_font.render(truncate(toast.description, MAX_TOAST_TEXT), True, COLOR_FOOTER)
            screen.blit(desc_surf, (x + 8, y + 4 + LINE_HEIGHT_SMALL - 2))
        y += TOAST_HEIGHT + TOAST_SPACING


def draw_screen_header(
    screen: pygame.Surface,
    ui_font: pygame.font.Font,
    title: str,
    current_screen: str,
    available_screens: List[str],
    w: int,
) -> None:
    """Draw header with title and tab indicators."""
    # Title
    title_surf = ui_font.render(title, True, COLOR_TITLE)
    screen.blit(title_surf, (MARGIN_X, MARGIN_Y_TOP))

    # Tab indicators (aligned near the top-right).
    tab_x = w - TAB_X_OFFSET
    tab_y = MARGIN_Y_TOP

    for i, screen_name in enumerate(available_screens):
        x = tab_x + i * TAB_SPACING
        tab_text = screen_name.replace("_", " ").capitalize()
        if screen_name == current_screen:
            tab_surf = ui_font.render(tab_text, True, COLOR_TAB_ACTIVE)
            screen.blit(tab_surf, (x, tab_y))
            pygame.draw.line(screen, COLOR_TAB_ACTIVE, (x, tab_y + 22), (x + tab_surf.get_width(), tab_y + 22), 2)
        else:
            tab_surf = ui_font.render(tab_text, True, COLOR_TAB_INACTIVE)
            screen.blit(tab_surf, (x, tab_y))


def draw_screen_footer(
    screen: pygame.Surface,
    ui_font: pygame.font.Font,
    hints: List[str],
    w: int,
    h: int,
) -> None:
    """Draw footer with navigation hints."""
    footer_y = h - MARGIN_Y_FOOTER
    for i, hint in enumerate(hints):
        hint_surf = ui_font.render(hint, True, COLOR_FOOTER)
        screen.blit(hint_surf, (MARGIN_X, footer_y + i * LINE_HEIGHT_SMALL))
