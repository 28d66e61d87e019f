"""
Scene composer.

Puts body, head, face, hair and extras together into one renderable tree
and owns the idle sway. Camera framing lives in
engine/managers/camera_manager.py because it is view state, not avatar data.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from settings import (
    AVATAR_BACKGROUND,
    AVATAR_FLOOR_COLOR,
    IDLE_BOB_AMPLITUDE,
    IDLE_BOB_RATE,
    IDLE_YAW_AMPLITUDE,
    IDLE_YAW_RATE,
)
from systems.avatar.body import compose_body
from systems.avatar.config import AvatarConfig
from systems.avatar.face import EXPRESSIONS, compose_face
from systems.avatar.hair import HAIR_STYLES, compose_hair
from systems.avatar.primitives import Group, Primitive, Vec3, box, cylinder, sphere, torus

HEAD_RADIUS = 0.15
HEAD_HEIGHT = 1.5

# Seed-picked looks for characters without a saved config
SEED_HAIR_STYLES = ["rocker", "messy", "mohawk", "long-straight", "short-spiky", "curly", "ponytail", "bald"]
SEED_HAIR_COLORS = ["#1a1a1a", "#3d2616", "#8b4513", "#daa520", "#a52a2a", "#4a3728"]
SEED_SHIRT_COLORS = ["#1a1a1a", "#2d0a0a", "#0a0a2d", "#1a0a1a", "#0a1a0a", "#2d2d2d"]
SEED_SKIN_TONES = ["#ffdbac", "#f1c27d", "#e0ac69", "#c68642", "#8d5524"]

TATTOO_INK = "#1b2a4a"
SCAR_TONE = "#b07a6a"
ACCESSORY_ACCENT = "#c0a060"


def _pick(options: List[str], seed: float) -> str:
    return options[int(math.floor(seed * len(options))) % len(options)]


def default_look_for_seed(seed: float) -> AvatarConfig:
    """Colour and hair choices for an NPC with only a seed."""
    return AvatarConfig(
        hair_style_key=_pick(SEED_HAIR_STYLES, seed),
        hair_color=_pick(SEED_HAIR_COLORS, seed),
        shirt_color=_pick(SEED_SHIRT_COLORS, seed),
        skin_tone=_pick(SEED_SKIN_TONES, seed),
    )


def resolve_hair_style(key: Optional[str], seed: float) -> str:
    """Known keys (and bald) pass through; anything else gets the seed pick."""
    if key and (key == "bald" or key in HAIR_STYLES):
        return key
    return _pick(SEED_HAIR_STYLES, seed)


def expression_for_performance(role: str, animation_state: str) -> str:
    """Face shown by a band member on stage."""
    if animation_state in ("playing", "solo"):
        return "singing" if role == "vocalist" else "intense"
    return "neutral"


# ============================================================================
# Extras: beard, decals, accessories
# ============================================================================

def _beard(style: Optional[str], color: str) -> Optional[Group]:
    if not style:
        return None
    beard = Group("beard", position=(0, -0.07, 0.08))
    if style == "stubble":
        beard.add(sphere(0.1, scale=(1.0, 0.55, 0.6), color=color, roughness=1.0, tag="beard"))
    elif style == "goatee":
        beard.add(
            box(0.035, 0.05, 0.02, position=(0, -0.04, 0.03), color=color, roughness=0.95, tag="beard"),
            box(0.05, 0.008, 0.01, position=(0, 0.02, 0.045), color=color, roughness=0.95, tag="moustache"),
        )
    elif style == "full":
        beard.add(
            sphere(0.11, position=(0, -0.02, 0), scale=(1.1, 0.8, 0.7), color=color, roughness=0.95, tag="beard"),
            box(0.06, 0.012, 0.015, position=(0, 0.02, 0.05), color=color, roughness=0.95, tag="moustache"),
        )
    else:
        beard.add(box(0.05, 0.01, 0.012, position=(0, 0.02, 0.045), color=color,
                      roughness=0.95, tag="moustache"))
    return beard


def _tattoo(style: Optional[str]) -> Optional[Primitive]:
    """Flat ink decal. Arm decals sit on the left upper arm, neck on the throat."""
    if not style:
        return None
    if style in ("sleeve", "arm"):
        return box(0.012, 0.16, 0.09, position=(-0.285, 1.02, 0.0), rotation=(0, 0, 0.25),
                   color=TATTOO_INK, roughness=0.9, tag="tattoo")
    if style == "face":
        return box(0.02, 0.03, 0.004, position=(0.07, HEAD_HEIGHT + 0.03, 0.135),
                   color=TATTOO_INK, roughness=0.9, tag="tattoo")
    return box(0.06, 0.04, 0.004, position=(0, 1.37, 0.062),
               color=TATTOO_INK, roughness=0.9, tag="tattoo")


def _scar(style: Optional[str]) -> Optional[Primitive]:
    if not style:
        return None
    if style == "eyebrow":
        return box(0.004, 0.03, 0.004, position=(0.045, HEAD_HEIGHT + 0.055, 0.135), rotation=(0, 0, 0.3),
                   color=SCAR_TONE, roughness=0.7, tag="scar")
    if style == "lip":
        return box(0.003, 0.02, 0.004, position=(0.012, HEAD_HEIGHT - 0.05, 0.13),
                   color=SCAR_TONE, roughness=0.7, tag="scar")
    return box(0.035, 0.004, 0.004, position=(-0.08, HEAD_HEIGHT - 0.005, 0.115), rotation=(0, 0, -0.5),
               color=SCAR_TONE, roughness=0.7, tag="scar")


ACCESSORY_KINDS = ("visor", "crown", "orb", "sunglasses", "earring")


def accessory_kind(accessory_id: Optional[str]) -> Optional[str]:
    """Accessory ids carry their kind as a prefix ("crown-gold", "visor_neon")."""
    if not accessory_id:
        return None
    lowered = accessory_id.lower()
    for kind in ACCESSORY_KINDS:
        if lowered.startswith(kind):
            return kind
    return None


def _accessory(kind: Optional[str]) -> Optional[Primitive]:
    if kind == "visor":
        return box(0.28, 0.05, 0.05, position=(0, 0.03, 0.13), color=ACCESSORY_ACCENT,
                   roughness=0.3, metalness=0.6, emissive="#302410", tag="accessory")
    if kind == "crown":
        return torus(0.12, 0.02, math.pi * 2, position=(0, 0.16, 0), rotation=(math.pi / 2, 0, 0),
                     color=ACCESSORY_ACCENT, roughness=0.25, metalness=0.75, tag="accessory")
    if kind == "orb":
        return sphere(0.05, position=(0.3, 0.2, 0.1), color=ACCESSORY_ACCENT,
                      roughness=0.1, metalness=0.5, emissive="#403018", tag="accessory")
    if kind == "sunglasses":
        return box(0.2, 0.03, 0.02, position=(0, 0.02, 0.15), color="#0a0a0a",
                   roughness=0.1, metalness=0.4, tag="accessory")
    if kind == "earring":
        return torus(0.012, 0.003, math.pi * 2, position=(-0.15, -0.025, 0.01),
                     color=ACCESSORY_ACCENT, roughness=0.2, metalness=0.8, tag="accessory")
    return None


# ============================================================================
# Scene
# ============================================================================

@dataclass
class SceneLighting:
    ambient: float = 0.35
    direction: Vec3 = (0.35, 0.82, 0.55)
    intensity: float = 1.0


@dataclass
class AvatarScene:
    root: Group
    expression: str = "neutral"
    hair_style: str = "bald"
    lighting: SceneLighting = field(default_factory=SceneLighting)
    background: Tuple[int, int, int] = AVATAR_BACKGROUND

    def primitives(self) -> List[Primitive]:
        return self.root.primitives()


def compose_avatar(
    config: AvatarConfig,
    expression: str = "neutral",
    seed: float = 0.5,
    show_floor: bool = True,
) -> AvatarScene:
    """
    Assemble the full character.

    Args:
        config: appearance; absent colours fall back to seed-picked ones
        expression: one of EXPRESSIONS, anything else renders neutral
        seed: drives hair scatter and the fallback look
        show_floor: include the floor disc under the feet

    Returns:
        AvatarScene whose root group is what IdleAnimator moves
    """
    if expression not in EXPRESSIONS:
        expression = "neutral"

    look = default_look_for_seed(seed)
    skin = config.skin_tone or look.skin_tone
    hair_color = config.hair_color or look.hair_color
    hair_style = resolve_hair_style(config.hair_style_key, seed)
    effective = replace(config, skin_tone=skin, shirt_color=config.shirt_color or look.shirt_color)

    height = config.height if config.height is not None else 1.0
    torso_length = config.torso_length if config.torso_length is not None else 1.0
    face_width = config.face_width if config.face_width is not None else 1.0
    face_length = config.face_length if config.face_length is not None else 1.0

    root = Group("avatar")
    root.add(compose_body(effective))

    head = Group("head", position=(0, HEAD_HEIGHT * torso_length * height, 0), scale=height)
    head.add(
        sphere(HEAD_RADIUS, scale=(face_width, face_length, 1.0), color=skin, roughness=0.45, tag="head"),
        compose_face(effective, expression),
        compose_hair(hair_style, hair_color, seed),
        _beard(config.beard_style, hair_color),
        _accessory(accessory_kind(config.accessory_1_id)),
        _accessory(accessory_kind(config.accessory_2_id)),
    )
    root.add(head)

    decals = Group("decals", scale=height)
    decals.add(_tattoo(config.tattoo_style), _scar(config.scar_style))
    if decals.children:
        root.add(decals)

    if show_floor:
        root.add(cylinder(0.6, 0.6, 0.01, position=(0, -0.005, 0),
                          color=AVATAR_FLOOR_COLOR, roughness=0.9, tag="floor"))

    return AvatarScene(root=root, expression=expression, hair_style=hair_style)


# ============================================================================
# Idle animation
# ============================================================================

class IdleAnimator:
    """
    Gentle breathing bob and yaw sway for a preview avatar.

    Writes the root transform only while `animate` is set; switching it off
    leaves the last pose in place.
    """

    def __init__(self, animate: bool = True) -> None:
        self.animate = animate
        self.elapsed: float = 0.0

    def toggle(self) -> bool:
        self.animate = not self.animate
        return self.animate

    @staticmethod
    def offsets(elapsed: float) -> Tuple[float, float]:
        """(vertical bob, yaw) at `elapsed` seconds."""
        bob = IDLE_BOB_AMPLITUDE * math.sin(elapsed * IDLE_BOB_RATE)
        yaw = IDLE_YAW_AMPLITUDE * math.sin(elapsed * IDLE_YAW_RATE)
        return bob, yaw

    def update(self, dt: float, root: Group) -> None:
        self.elapsed += dt
        self.apply(root, self.elapsed)

    def apply(self, root: Group, elapsed: float) -> None:
        if not self.animate:
            return
        bob, yaw = self.offsets(elapsed)
        x, _, z = root.position
        rx, _, rz = root.rotation
        root.position = (x, bob, z)
        root.rotation = (rx, yaw, rz)
