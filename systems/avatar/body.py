"""
Body composer.

Maps the body sliders of an AvatarConfig to a tree of primitive solids.
Everything below the neck lives here: torso, optional jacket, shoulders,
arms and hands, belt, legs and shoes. The whole tree is scaled by the
character height.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from systems.avatar.config import AvatarConfig
from systems.avatar.primitives import Group, box, capsule, cylinder, sphere, torus

# ============================================================================
# Base proportions per body type: (torso width, torso depth, torso height)
# ============================================================================

BODY_BASE: Dict[str, Tuple[float, float, float]] = {
    "slim": (0.14, 0.1, 0.4),
    "average": (0.17, 0.12, 0.42),
    "muscular": (0.2, 0.14, 0.44),
    "heavy": (0.22, 0.16, 0.4),
}

BELT_COLOR = "#1a1a1a"
BUCKLE_COLOR = "#8a8a8a"
ZIPPER_COLOR = "#2a2a2a"
SOLE_COLOR = "#1a1a1a"

# Fallbacks the composer uses when a field is absent
FALLBACK_SKIN = "#e0ac69"
FALLBACK_SHIRT = "#2d0a0a"
FALLBACK_PANTS = "#1a1a1a"
FALLBACK_SHOES = "#1a1a1a"

FINGER_OFFSETS = (0.015, 0.005, -0.005, -0.015)


@dataclass(frozen=True)
class BodyDimensions:
    torso_w: float
    torso_d: float
    torso_h: float
    shoulder_w: float
    hip_w: float
    arm_radius: float
    arm_length: float
    leg_radius: float
    leg_length: float
    chest_prominence: float


def derive_body_dimensions(
    body_type: Optional[str] = "average",
    gender: Optional[str] = "male",
    weight: float = 1.0,
    muscle_definition: float = 0.5,
    shoulder_width: float = 1.0,
    hip_width: float = 1.0,
    torso_length: float = 1.0,
    arm_length: float = 1.0,
    leg_length: float = 1.0,
) -> BodyDimensions:
    """
    Derive torso and limb sizes from the body sliders.

    Args:
        body_type: slim / average / muscular / heavy; anything else is average
        gender: only "female" changes the proportions
        weight: widens torso, hips and limbs (0.75 + weight * 0.5)
        muscle_definition: widens shoulders and arms (1 + muscle * 0.2)

    Returns:
        BodyDimensions, a pure function of the arguments
    """
    torso_w, torso_d, torso_h = BODY_BASE.get(body_type or "", BODY_BASE["average"])
    weight_mod = 0.75 + weight * 0.5
    muscle_mod = 1 + muscle_definition * 0.2
    female = gender == "female"

    return BodyDimensions(
        torso_w=torso_w * weight_mod * (0.9 if female else muscle_mod) * shoulder_width,
        torso_d=torso_d * weight_mod,
        torso_h=torso_h * torso_length,
        shoulder_w=(0.22 if female else 0.26) * shoulder_width * muscle_mod,
        hip_w=(0.19 if female else 0.16) * hip_width * weight_mod,
        arm_radius=(0.035 if female else 0.04) * weight_mod * muscle_mod,
        arm_length=0.32 * arm_length,
        leg_radius=(0.055 if female else 0.06) * weight_mod,
        leg_length=0.38 * leg_length,
        chest_prominence=0.03 if female else 0.01 * muscle_mod,
    )


def dimensions_for(config: AvatarConfig) -> BodyDimensions:
    """derive_body_dimensions() fed from a config, absent sliders at their defaults."""
    return derive_body_dimensions(
        body_type=config.body_type or "average",
        gender=config.gender or "male",
        weight=_num(config.weight, 1.0),
        muscle_definition=_num(config.muscle_definition, 0.5),
        shoulder_width=_num(config.shoulder_width, 1.0),
        hip_width=_num(config.hip_width, 1.0),
        torso_length=_num(config.torso_length, 1.0),
        arm_length=_num(config.arm_length, 1.0),
        leg_length=_num(config.leg_length, 1.0),
    )


def _num(value: Optional[float], default: float) -> float:
    return default if value is None else float(value)


# ============================================================================
# Composition
# ============================================================================

def compose_body(config: AvatarConfig) -> Group:
    """Build the body tree for `config`."""
    dims = dimensions_for(config)
    torso_length = _num(config.torso_length, 1.0)
    leg_length = _num(config.leg_length, 1.0)

    skin = config.skin_tone or FALLBACK_SKIN
    shirt = config.shirt_color or FALLBACK_SHIRT
    pants = config.pants_color or FALLBACK_PANTS
    shoes = config.shoes_color or FALLBACK_SHOES
    jacket = config.jacket_color if config.has_jacket else None
    clothing = jacket or shirt

    root = Group("body", scale=_num(config.height, 1.0))
    root.add(
        _torso(dims, torso_length, shirt, jacket),
        cylinder(0.055, 0.065, 0.12, position=(0, 1.38 * torso_length, 0),
                 color=skin, roughness=0.5, tag="neck"),
    )
    for side in (-1, 1):
        root.add(_shoulder(dims, torso_length, side, clothing))
    for side in (-1, 1):
        root.add(_arm(dims, torso_length, side, skin))

    belt_y = 0.7 * torso_length
    root.add(
        cylinder(dims.hip_w + 0.01, dims.hip_w + 0.01, 0.045, position=(0, belt_y, 0),
                 color=BELT_COLOR, roughness=0.3, metalness=0.2, tag="belt"),
        box(0.04, 0.035, 0.01, position=(0, belt_y, dims.hip_w + 0.015),
            color=BUCKLE_COLOR, metalness=0.7, roughness=0.2, tag="buckle"),
    )
    for side in (-1, 1):
        root.add(_leg(dims, leg_length, side, pants, skin))
    for side in (-1, 1):
        root.add(_shoe(side, shoes))
    return root


def _torso(dims: BodyDimensions, torso_length: float, shirt: str, jacket: Optional[str]) -> Group:
    torso = Group("torso", position=(0, 1 * torso_length, 0))
    torso.add(
        capsule(dims.torso_w, dims.torso_h, color=shirt, roughness=0.7, tag="torso"),
        sphere(dims.torso_w * 0.7 + dims.chest_prominence,
               position=(0, 0.08, dims.torso_d * 0.6), color=shirt, roughness=0.7, tag="chest"),
        torus(0.06, 0.015, math.pi, position=(0, dims.torso_h * 0.45, dims.torso_d * 0.3),
              color=shirt, roughness=0.6, tag="collar"),
    )
    if jacket:
        torso.add(
            capsule(dims.torso_w + 0.015, dims.torso_h - 0.02, color=jacket,
                    roughness=0.5, tag="jacket"),
            box(0.04, 0.08, 0.02, position=(-0.06, dims.torso_h * 0.4, dims.torso_d * 0.5),
                rotation=(0, 0.3, 0.2), color=jacket, roughness=0.5, tag="jacket_collar"),
            box(0.04, 0.08, 0.02, position=(0.06, dims.torso_h * 0.4, dims.torso_d * 0.5),
                rotation=(0, -0.3, -0.2), color=jacket, roughness=0.5, tag="jacket_collar"),
            box(0.015, dims.torso_h * 0.8, 0.008, position=(0, 0, dims.torso_w + 0.02),
                color=ZIPPER_COLOR, metalness=0.6, roughness=0.3, tag="zipper"),
        )
    return torso


def _shoulder(dims: BodyDimensions, torso_length: float, side: int, clothing: str) -> Group:
    shoulder = Group("shoulder", position=(side * dims.shoulder_w * 0.9, 1.22 * torso_length, 0))
    shoulder.add(
        sphere(0.055, color=clothing, roughness=0.6, tag="shoulder"),
        sphere(0.04, position=(0, 0.02, 0.02), color=clothing, roughness=0.65, tag="shoulder_muscle"),
    )
    return shoulder


def _arm(dims: BodyDimensions, torso_length: float, side: int, skin: str) -> Group:
    # side -1 is the character's left; the right arm mirrors x and z-rotations
    arm = Group("arm", position=(side * dims.shoulder_w, 1.05 * torso_length, 0))
    arm.add(
        capsule(dims.arm_radius, dims.arm_length * 0.5, rotation=(0, 0, -side * 0.25),
                color=skin, roughness=0.5, tag="upper_arm"),
        sphere(dims.arm_radius * 0.9, position=(side * 0.06, -0.12, 0),
               color=skin, roughness=0.5, tag="elbow"),
        capsule(dims.arm_radius * 0.85, dims.arm_length * 0.45, position=(side * 0.1, -0.22, 0),
                rotation=(0, 0, -side * 0.15), color=skin, roughness=0.5, tag="forearm"),
        sphere(dims.arm_radius * 0.6, position=(side * 0.14, -0.35, 0),
               color=skin, roughness=0.5, tag="wrist"),
    )

    hand = Group("hand", position=(side * 0.16, -0.4, 0))
    hand.add(
        box(0.05, 0.06, 0.025, color=skin, roughness=0.5, tag="hand"),
        capsule(0.008, 0.025, position=(-side * 0.025, 0, 0.015), rotation=(0, -side * 0.3, 0),
                color=skin, roughness=0.5, tag="thumb"),
    )
    for x in FINGER_OFFSETS:
        hand.add(capsule(0.006, 0.02, position=(-side * x, -0.04, 0),
                         color=skin, roughness=0.5, tag="finger"))
    arm.add(hand)
    return arm


def _leg(dims: BodyDimensions, leg_length: float, side: int, pants: str, skin: str) -> Group:
    leg = Group("leg", position=(side * 0.08, 0.42 * leg_length, 0))
    leg.add(
        capsule(dims.leg_radius, dims.leg_length * 0.45, position=(0, 0.08, 0),
                color=pants, roughness=0.6, tag="thigh"),
        sphere(dims.leg_radius * 0.85, position=(0, -0.12, 0.01),
               color=pants, roughness=0.6, tag="knee"),
        capsule(dims.leg_radius * 0.8, dims.leg_length * 0.4, position=(0, -0.32, 0),
                color=pants, roughness=0.6, tag="shin"),
        sphere(dims.leg_radius * 0.5, position=(0, -0.52, 0),
               color=skin, roughness=0.5, tag="ankle"),
    )
    return leg


def _shoe(side: int, shoes: str) -> Group:
    shoe = Group("shoe", position=(side * 0.08, 0.06, 0.02))
    shoe.add(
        box(0.085, 0.07, 0.15, color=shoes, roughness=0.4, tag="shoe"),
        sphere(0.042, position=(0, -0.01, 0.06), color=shoes, roughness=0.4, tag="shoe_toe"),
        box(0.09, 0.015, 0.16, position=(0, -0.03, 0), color=SOLE_COLOR, roughness=0.8, tag="sole"),
    )
    return shoe
