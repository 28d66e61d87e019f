# settings.py

# Window / display
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 720
FPS = 60
TITLE = "Rockmundo"

# Colors
COLOR_BG = (15, 15, 20)
AVATAR_BACKGROUND = (24, 20, 32)
AVATAR_FLOOR_COLOR = "#26212f"

# Avatar idle animation (amplitude in scene units / radians, rate in rad/s)
IDLE_BOB_AMPLITUDE = 0.003
IDLE_BOB_RATE = 1.2
IDLE_YAW_AMPLITUDE = 0.02
IDLE_YAW_RATE = 0.3

# Avatar camera
CAMERA_MIN_DISTANCE = 0.8
CAMERA_MAX_DISTANCE = 4.5
CAMERA_FOV = 45.0
CAMERA_AUTO_ROTATE_SPEED = 0.5  # radians per second
CAMERA_ZOOM_STEP = 0.2

# preset -> (target height, distance)
CAMERA_PRESETS = {
    "face": (1.5, 0.8),
    "upper": (1.25, 1.6),
    "full": (0.9, 3.2),
}
DEFAULT_CAMERA_PRESET = "full"

# Renderer
LIGHT_DIRECTION = (0.35, 0.82, 0.55)
SPHERE_SEGMENTS = (10, 7)
CYLINDER_SEGMENTS = 10
TORUS_SEGMENTS = (12, 6)

# Toasts
TOAST_LIMIT = 20
TOAST_DISPLAY_SECONDS = 4.0
