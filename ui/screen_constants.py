"""
UI constants for the dashboard and studio screens.

Colors, spacing and layout values shared by the panel renderer, the toast
strip and the avatar studio overlay.
"""

# ============================================================================
# Base Colors
# ============================================================================
COLOR_TITLE = (255, 255, 210)
COLOR_TEXT = (230, 230, 230)
COLOR_TEXT_DIM = (210, 210, 210)
COLOR_TEXT_DIMMER = (190, 190, 190)
COLOR_CATEGORY = (220, 220, 170)
COLOR_TAB_ACTIVE = (255, 255, 210)
COLOR_TAB_INACTIVE = (160, 160, 160)
COLOR_FOOTER = (170, 170, 170)

# Background colors
COLOR_BG_PANEL = (25, 25, 35, 240)  # Semi-transparent panel background
COLOR_BG_TOAST = (15, 15, 25, 230)

# Border colors
COLOR_BORDER = (100, 120, 150)

# Accent colors
COLOR_ACCENT_SUCCESS = (100, 220, 100)
COLOR_ACCENT_DANGER = (255, 120, 120)

# ============================================================================
# Spacing
# ============================================================================
MARGIN_X = 40
MARGIN_Y_TOP = 30
MARGIN_Y_START = 90
MARGIN_Y_FOOTER = 50
LINE_HEIGHT_SMALL = 22
LINE_HEIGHT_MEDIUM = 24
LINE_HEIGHT_TITLE = 28
INDENT_DEFAULT = 20

# Layout
# Tab spacing and starting X for the header tabs.
TAB_SPACING = 110
TAB_X_OFFSET = 620

# Panel properties
PANEL_PADDING = 12
BORDER_WIDTH_THIN = 1

# Toast strip
TOAST_WIDTH = 360
TOAST_HEIGHT = 48
TOAST_SPACING = 6
MAX_TOAST_TEXT = 48
