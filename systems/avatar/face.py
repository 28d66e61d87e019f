"""
Face composer.

Layers eyes, brows, nose, mouth, cheeks, chin, jaw and ears onto the head
position. Coordinates are relative to the head centre.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from systems.avatar.config import AvatarConfig
from systems.avatar.primitives import Group, Primitive, box, capsule, cone, cylinder, sphere

EXPRESSIONS = ("neutral", "happy", "singing", "intense")

EYE_WHITE = "#f8f8f8"
PUPIL = "#0a0a0a"
HIGHLIGHT = "#ffffff"
NOSTRIL = "#2a1515"
MOUTH_INTERIOR = "#1a0808"
TEETH = "#f5f5f0"
TONGUE = "#c45555"
LIP_CREASE = "#3a1818"

# Fallbacks when the config leaves a face field empty
FACE_FALLBACKS: Dict[str, object] = {
    "skin_tone": "#e0ac69",
    "eye_color": "#4a3728",
    "eyebrow_style": "normal",
    "eyebrow_color": "#1a1a1a",
    "lip_color": "#c4777f",
    "jaw_shape": "oval",
}


# ============================================================================
# Eyebrow table
# ============================================================================

@dataclass(frozen=True)
class BrowShape:
    width: float
    height: float
    depth: float
    arch: float


# style -> (width factor, height factor, depth factor, arch angle)
EYEBROW_STYLES: Dict[str, tuple] = {
    "thin": (0.75, 0.5, 1.0, 0.15),
    "thick": (1.15, 1.6, 1.2, 0.1),
    "arched": (1.0, 1.0, 1.0, 0.25),
    "straight": (1.1, 1.0, 1.0, 0.0),
    "normal": (1.0, 1.0, 1.0, 0.12),
}


def eyebrow_shape(style: Optional[str], thickness: float = 1.0) -> BrowShape:
    """Brow box size and arch for a style; unknown styles read as normal."""
    w, h, d, arch = EYEBROW_STYLES.get(style or "normal", EYEBROW_STYLES["normal"])
    return BrowShape(
        width=0.04 * w,
        height=0.008 * thickness * h,
        depth=0.012 * d,
        arch=arch,
    )


# ============================================================================
# Mouth state
# ============================================================================

@dataclass(frozen=True)
class MouthState:
    open: bool
    width: float
    height: float
    smile: bool = False
    tight: bool = False


def mouth_state(expression: str, lip_width: float = 1.0, lip_fullness: float = 1.0) -> MouthState:
    if expression == "singing":
        return MouthState(True, lip_width * 0.9, 0.02 * lip_fullness)
    if expression == "happy":
        return MouthState(False, lip_width * 1.1, 0.008 * lip_fullness, smile=True)
    if expression == "intense":
        return MouthState(False, lip_width * 0.85, 0.006 * lip_fullness, tight=True)
    return MouthState(False, lip_width, 0.007 * lip_fullness)


# ============================================================================
# Jaw profiles (supplement to the head sphere)
# ============================================================================

def _jaw(shape: str, skin: str, face_width: float) -> Primitive:
    pos = (0, -0.075, 0.02)
    if shape == "square":
        return box(0.16 * face_width, 0.05, 0.1, position=pos, color=skin, roughness=0.55, tag="jaw")
    if shape == "pointed":
        return cone(0.07 * face_width, 0.07, position=(0, -0.085, 0.02), rotation=(3.141592653589793, 0, 0),
                    color=skin, roughness=0.55, tag="jaw")
    if shape == "round":
        return sphere(0.075, position=pos, scale=(face_width * 1.05, 0.7, 0.9),
                      color=skin, roughness=0.55, tag="jaw")
    return sphere(0.07, position=pos, scale=(face_width * 0.95, 0.85, 0.85),
                  color=skin, roughness=0.55, tag="jaw")


def _num(value: Optional[float], default: float) -> float:
    return default if value is None else float(value)


# ============================================================================
# Composition
# ============================================================================

def compose_face(config: AvatarConfig, expression: str = "neutral") -> Group:
    """
    Build the facial feature tree for `config` showing `expression`.

    Args:
        config: appearance sliders; absent fields use FACE_FALLBACKS / 1.0
        expression: neutral, happy, singing or intense. Only singing opens
            the mouth.

    Returns:
        Group named "face" positioned at the head origin
    """
    skin = config.skin_tone or FACE_FALLBACKS["skin_tone"]
    eye_color = config.eye_color or FACE_FALLBACKS["eye_color"]
    brow_color = config.eyebrow_color or FACE_FALLBACKS["eyebrow_color"]
    lip_color = config.lip_color or FACE_FALLBACKS["lip_color"]

    eye_size = _num(config.eye_size, 1.0)
    eye_spacing = _num(config.eye_spacing, 1.0)
    eye_tilt = _num(config.eye_tilt, 0.0)
    nose_width = _num(config.nose_width, 1.0)
    nose_bridge = _num(config.nose_bridge, 0.5)
    lip_fullness = _num(config.lip_fullness, 1.0)
    lip_width = _num(config.lip_width, 1.0)
    ear_size = _num(config.ear_size, 1.0)
    ear_angle = _num(config.ear_angle, 0.0)
    cheekbone = _num(config.cheekbone, 0.5)
    chin = _num(config.chin_prominence, 0.5)

    eye_x = 0.042 * eye_spacing
    iris = 0.018 * eye_size
    white = 0.026 * eye_size

    face = Group("face")

    # Eyes
    for side in (-1, 1):
        x = side * eye_x
        tilt = -side * eye_tilt
        face.add(
            sphere(0.032, position=(x, 0.02, 0.1), color=skin, roughness=0.7, tag="eye_socket"),
            sphere(white, position=(x, 0.02, 0.115), rotation=(0, 0, tilt),
                   color=EYE_WHITE, roughness=0.1, tag="eye_white"),
            sphere(iris, position=(x, 0.02, 0.132), rotation=(0, 0, tilt),
                   color=eye_color, roughness=0.3, tag="iris"),
            sphere(iris * 0.45, position=(x, 0.02, 0.142), color=PUPIL, roughness=0.1, tag="pupil"),
            sphere(0.004, position=(x - 0.004, 0.025, 0.145), color=HIGHLIGHT,
                   emissive=HIGHLIGHT, tag="eye_highlight"),
            box(0.035, 0.008, 0.02, position=(x, 0.035, 0.12), rotation=(0.3, 0, tilt),
                color=skin, roughness=0.6, tag="upper_lid"),
            box(0.03, 0.005, 0.015, position=(x, 0.005, 0.12), rotation=(-0.2, 0, tilt),
                color=skin, roughness=0.6, tag="lower_lid"),
        )

    # Brows
    brow = eyebrow_shape(config.eyebrow_style, _num(config.eyebrow_thickness, 1.0))
    for side in (-1, 1):
        group = Group("brow", position=(side * eye_x, 0.052, 0.12))
        group.add(box(brow.width, brow.height, brow.depth,
                      rotation=(0, 0, -side * (brow.arch + eye_tilt)),
                      color=brow_color, roughness=0.9, tag="brow"))
        for i in range(5):
            tilt = -0.2 + i * 0.1 if side < 0 else 0.2 - i * 0.1
            group.add(box(0.002, brow.height * 0.8, 0.004,
                          position=(-brow.width / 2 + (brow.width / 4) * i, brow.height / 2, 0),
                          rotation=(0, 0, tilt), color=brow_color, tag="brow_hair"))
        face.add(group)

    face.add(_nose(skin, nose_width, nose_bridge))
    face.add(_mouth(mouth_state(expression, lip_width, lip_fullness), lip_fullness, lip_color, skin))

    cheek_scale = 1 + (cheekbone - 0.5) * 0.15
    chin_scale = 1 + (chin - 0.5) * 0.2
    for side in (-1, 1):
        face.add(sphere(0.025, position=(side * 0.09 * cheek_scale, 0.01, 0.05),
                        color=skin, roughness=0.5, tag="cheekbone"))
    face.add(sphere(0.03 * chin_scale, position=(0, -0.1 * chin_scale, 0.08),
                    color=skin, roughness=0.5, tag="chin"))
    face.add(_jaw(config.jaw_shape or str(FACE_FALLBACKS["jaw_shape"]), skin, _num(config.face_width, 1.0)))

    # Ears
    for side in (-1, 1):
        ear = Group("ear", position=(side * 0.145, 0.01, 0), rotation=(0, -side * ear_angle * 0.3, 0))
        ear.add(
            capsule(0.022 * ear_size, 0.03 * ear_size, color=skin, roughness=0.6, tag="ear"),
            capsule(0.012 * ear_size, 0.018 * ear_size, position=(-side * 0.008, 0, 0.005),
                    color=skin, roughness=0.8, tag="inner_ear"),
            sphere(0.01 * ear_size, position=(-side * 0.005, -0.025 * ear_size, 0),
                   color=skin, roughness=0.5, tag="earlobe"),
        )
        face.add(ear)
    return face


def _nose(skin: str, nose_width: float, nose_bridge: float) -> Group:
    nose = Group("nose", position=(0, -0.01, 0.12))
    nose.add(
        box(0.018, 0.03, 0.025, position=(0, 0.02 + nose_bridge * 0.015, -0.02),
            color=skin, roughness=0.6, tag="nose_bridge"),
        sphere(0.018 * nose_width, position=(0, -0.01, 0.01), color=skin, roughness=0.5, tag="nose_tip"),
    )
    for side in (-1, 1):
        nose.add(sphere(0.012, position=(side * 0.015 * nose_width, -0.005, -0.005),
                        rotation=(0, -side * 0.3, 0), color=skin, roughness=0.6, tag="nose_side"))
    for side in (-1, 1):
        nose.add(sphere(0.006, position=(side * 0.01 * nose_width, -0.018, 0.005),
                        color=NOSTRIL, roughness=0.9, tag="nostril"))
    return nose


def _mouth(state: MouthState, lip_fullness: float, lip_color: str, skin: str) -> Group:
    mouth = Group("mouth", position=(0, -0.055, 0.11))
    w, h = state.width, state.height
    if state.open:
        mouth.add(
            cylinder(0.022 * w, 0.018 * w, h, color=MOUTH_INTERIOR, roughness=0.9, tag="mouth_open"),
            box(0.05 * w, 0.006 * lip_fullness, 0.015, position=(0, h / 2 + 0.003, 0.008),
                color=lip_color, roughness=0.4, tag="lip_upper"),
            box(0.045 * w, 0.008 * lip_fullness, 0.018, position=(0, -h / 2 - 0.004, 0.01),
                color=lip_color, roughness=0.4, tag="lip_lower"),
            box(0.03, 0.006, 0.006, position=(0, 0.006, 0.012), color=TEETH, roughness=0.2, tag="teeth"),
            sphere(0.012, position=(0, -0.005, 0.005), color=TONGUE, roughness=0.6, tag="tongue"),
        )
        return mouth

    mouth.add(
        box(0.052 * w, 0.007 * lip_fullness, 0.014, position=(0, 0.004, 0.01),
            color=lip_color, roughness=0.35, tag="lip_upper"),
        sphere(0.008 * lip_fullness, position=(0, 0.008, 0.015), color=lip_color,
               roughness=0.35, tag="cupids_bow"),
        box(0.048 * w, 0.009 * lip_fullness, 0.016, position=(0, -0.006, 0.012),
            color=lip_color, roughness=0.35, tag="lip_lower"),
        box(0.045 * w, 0.002, 0.004, position=(0, 0, 0.018), color=LIP_CREASE,
            roughness=0.8, tag="lip_crease"),
    )
    for side in (-1, 1):
        mouth.add(sphere(0.004, position=(side * 0.028 * w, 0, 0.008), color=skin,
                         roughness=0.7, tag="mouth_corner"))
    return mouth
