"""
Avatar preview camera.

Orbit camera around the character: framing presets, clamped zoom distance
and an optional slow auto-rotation.
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Tuple

from settings import (
    CAMERA_AUTO_ROTATE_SPEED,
    CAMERA_FOV,
    CAMERA_MAX_DISTANCE,
    CAMERA_MIN_DISTANCE,
    CAMERA_PRESETS,
    CAMERA_ZOOM_STEP,
    DEFAULT_CAMERA_PRESET,
)

Vec3 = Tuple[float, float, float]


class CameraManager:
    """
    Manages orbit position, zoom distance and framing preset.

    Responsibilities:
    - Keep the camera distance inside [min_distance, max_distance]
    - Switch between face / upper / full framing
    - Advance the azimuth while auto-rotate is on
    - Produce eye and target positions for the renderer
    """

    def __init__(
        self,
        presets: Optional[Dict[str, Tuple[float, float]]] = None,
        min_distance: float = CAMERA_MIN_DISTANCE,
        max_distance: float = CAMERA_MAX_DISTANCE,
        fov: float = CAMERA_FOV,
    ) -> None:
        """
        Args:
            presets: preset name -> (target height, distance)
            min_distance: closest allowed zoom
            max_distance: farthest allowed zoom
            fov: vertical field of view in degrees
        """
        self.presets = presets or dict(CAMERA_PRESETS)
        self.min_distance = min_distance
        self.max_distance = max_distance
        self.fov = fov

        self.preset: str = DEFAULT_CAMERA_PRESET
        self.target_y: float = 0.0
        self.distance: float = 0.0
        self.azimuth: float = 0.0
        self.elevation: float = 0.08
        self.auto_rotate: bool = False
        self.auto_rotate_speed: float = CAMERA_AUTO_ROTATE_SPEED

        self.set_preset(self.preset if self.preset in self.presets else next(iter(self.presets)))

    # ------------------------------------------------------------------
    # Framing and zoom
    # ------------------------------------------------------------------

    def set_preset(self, name: str) -> bool:
        """Jump to a framing preset. Unknown names are ignored."""
        if name not in self.presets:
            return False
        target_y, distance = self.presets[name]
        self.preset = name
        self.target_y = float(target_y)
        self.distance = self._clamp(distance)
        return True

    def _clamp(self, distance: float) -> float:
        return max(self.min_distance, min(float(distance), self.max_distance))

    def set_distance(self, distance: float) -> float:
        self.distance = self._clamp(distance)
        return self.distance

    def zoom_in(self, step: float = CAMERA_ZOOM_STEP) -> float:
        return self.set_distance(self.distance - step)

    def zoom_out(self, step: float = CAMERA_ZOOM_STEP) -> float:
        return self.set_distance(self.distance + step)

    def toggle_auto_rotate(self) -> bool:
        self.auto_rotate = not self.auto_rotate
        return self.auto_rotate

    def orbit(self, delta: float) -> None:
        self.azimuth = (self.azimuth + delta) % (math.pi * 2)

    def update(self, dt: float) -> None:
        """Advance auto-rotation by `dt` seconds."""
        if self.auto_rotate:
            self.orbit(self.auto_rotate_speed * dt)

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    @property
    def target(self) -> Vec3:
        return (0.0, self.target_y, 0.0)

    @property
    def eye(self) -> Vec3:
        """Camera position on the orbit sphere around the target."""
        horizontal = self.distance * math.cos(self.elevation)
        return (
            horizontal * math.sin(self.azimuth),
            self.target_y + self.distance * math.sin(self.elevation),
            horizontal * math.cos(self.azimuth),
        )
