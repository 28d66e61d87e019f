# systems/avatar/config.py

"""Avatar parameter model: one flat record of sliders, enums and colours."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

BODY_TYPES = ("slim", "average", "muscular", "heavy")
JAW_SHAPES = ("round", "square", "pointed", "oval")
EYEBROW_STYLE_KEYS = ("thin", "normal", "thick", "arched", "straight")
AGE_APPEARANCES = ("young", "adult", "mature")


@dataclass
class AvatarConfig:
    """
    Cosmetic appearance of one character.

    Every field is optional. Composers substitute their own fallbacks for
    anything left as None; `with_defaults()` produces the fully populated
    record that the save path stores. Values are never validated or
    clamped, so out-of-range sliders simply produce odd geometry.
    """
    id: Optional[str] = None
    profile_id: Optional[str] = None

    # Body - basic
    skin_tone: Optional[str] = None
    body_type: Optional[str] = None
    height: Optional[float] = None
    gender: Optional[str] = None

    # Body - advanced
    weight: Optional[float] = None
    muscle_definition: Optional[float] = None
    shoulder_width: Optional[float] = None
    hip_width: Optional[float] = None
    torso_length: Optional[float] = None
    arm_length: Optional[float] = None
    leg_length: Optional[float] = None
    age_appearance: Optional[str] = None

    # Hair
    hair_style_key: Optional[str] = None
    hair_color: Optional[str] = None

    # Face - structure
    face_width: Optional[float] = None
    face_length: Optional[float] = None
    jaw_shape: Optional[str] = None
    cheekbone: Optional[float] = None
    chin_prominence: Optional[float] = None

    # Face - eyes
    eye_style: Optional[str] = None
    eye_color: Optional[str] = None
    eye_size: Optional[float] = None
    eye_spacing: Optional[float] = None
    eye_tilt: Optional[float] = None

    # Face - eyebrows
    eyebrow_style: Optional[str] = None
    eyebrow_color: Optional[str] = None
    eyebrow_thickness: Optional[float] = None

    # Face - nose
    nose_style: Optional[str] = None
    nose_width: Optional[float] = None
    nose_length: Optional[float] = None
    nose_bridge: Optional[float] = None

    # Face - mouth
    mouth_style: Optional[str] = None
    lip_fullness: Optional[float] = None
    lip_width: Optional[float] = None
    lip_color: Optional[str] = None

    # Face - ears
    ear_size: Optional[float] = None
    ear_angle: Optional[float] = None

    # Extras
    beard_style: Optional[str] = None
    tattoo_style: Optional[str] = None
    scar_style: Optional[str] = None

    # Clothing
    shirt_id: Optional[str] = None
    shirt_color: Optional[str] = None
    pants_id: Optional[str] = None
    pants_color: Optional[str] = None
    jacket_id: Optional[str] = None
    jacket_color: Optional[str] = None
    shoes_id: Optional[str] = None
    shoes_color: Optional[str] = None

    # Accessories
    accessory_1_id: Optional[str] = None
    accessory_2_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AvatarConfig":
        """Build from a store row, ignoring columns this model doesn't know."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (row or {}).items() if k in known})

    def to_row(self) -> Dict[str, Any]:
        """Column dict for the store, without identity columns or None values."""
        row: Dict[str, Any] = {}
        for f in fields(self):
            if f.name in ("id", "profile_id"):
                continue
            value = getattr(self, f.name)
            if value is not None:
                row[f.name] = value
        return row

    def with_defaults(self) -> "AvatarConfig":
        """
        Return a copy with every absent field filled from AVATAR_DEFAULTS.

        Text fields treat "" like None; numbers only fall back when None,
        so an explicit 0.0 survives.
        """
        updates: Dict[str, Any] = {}
        for name, default in AVATAR_DEFAULTS.items():
            value = getattr(self, name)
            if isinstance(default, str):
                if not value:
                    updates[name] = default
            elif value is None:
                updates[name] = default
        return replace(self, **updates)

    @property
    def has_jacket(self) -> bool:
        return bool(self.jacket_color)


# ============================================================================
# Stored-profile defaults
# ============================================================================

AVATAR_DEFAULTS: Dict[str, Any] = {
    "skin_tone": "#e0ac69",
    "body_type": "average",
    "height": 1.0,
    "gender": "male",
    "weight": 1.0,
    "muscle_definition": 0.5,
    "shoulder_width": 1.0,
    "hip_width": 1.0,
    "torso_length": 1.0,
    "arm_length": 1.0,
    "leg_length": 1.0,
    "age_appearance": "adult",
    "hair_style_key": "messy",
    "hair_color": "#2d1a0a",
    "face_width": 1.0,
    "face_length": 1.0,
    "jaw_shape": "round",
    "cheekbone": 0.5,
    "chin_prominence": 0.5,
    "eye_style": "default",
    "eye_color": "#2d1a0a",
    "eye_size": 1.0,
    "eye_spacing": 1.0,
    "eye_tilt": 0.0,
    "eyebrow_style": "normal",
    "eyebrow_color": "#1a1a1a",
    "eyebrow_thickness": 1.0,
    "nose_style": "default",
    "nose_width": 1.0,
    "nose_length": 1.0,
    "nose_bridge": 0.5,
    "mouth_style": "default",
    "lip_fullness": 1.0,
    "lip_width": 1.0,
    "lip_color": "#c4777f",
    "ear_size": 1.0,
    "ear_angle": 0.0,
    "shirt_color": "#2d0a0a",
    "pants_color": "#1a1a1a",
    "shoes_color": "#1a1a1a",
}


def default_avatar_config(profile_id: Optional[str] = None) -> AvatarConfig:
    """Config used when a profile has never saved an avatar."""
    return AvatarConfig(profile_id=profile_id).with_defaults()
