"""
Hair composer.

One builder per named style, registered in HAIR_STYLES. Builders share
nothing but the seeded-random helpers, so adding a style never disturbs
the others. Scattered styles (spiky, messy, curly, afro, rocker, ...)
pull every jitter value from `seeded_random`, which makes a layout a pure
function of (style, colour, seed).
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional

from systems.avatar.primitives import Group, box, capsule, cone, sphere, torus
from systems.avatar.seeded import generate_hair_strands, seeded_random as sr

HAIR_OFFSET = (0.0, 0.15, 0.0)
HAIR_TIE_COLOR = "#2a2a2a"

HairBuilder = Callable[[str, float], Group]

HAIR_STYLES: Dict[str, HairBuilder] = {}


def register_hair_style(key: str) -> Callable[[HairBuilder], HairBuilder]:
    def decorator(builder: HairBuilder) -> HairBuilder:
        HAIR_STYLES[key] = builder
        return builder
    return decorator


def all_hair_style_keys() -> List[str]:
    """Every selectable style, including bald."""
    return ["bald"] + list(HAIR_STYLES.keys())


def compose_hair(style_key: Optional[str], color: str, seed: float = 0.5) -> Optional[Group]:
    """
    Build the hair cluster for `style_key`.

    Returns None for "bald" and for unknown keys; otherwise a Group
    lifted to the top of the head.
    """
    builder = HAIR_STYLES.get(style_key or "")
    if builder is None:
        return None
    cluster = builder(color, seed)
    cluster.name = f"hair:{style_key}"
    cluster.position = HAIR_OFFSET
    return cluster


def _fibonacci_shell(count: int, radius: float, lift: float):
    """Points spread over a sphere (golden spiral), as (index, x, y, z)."""
    for i in range(count):
        phi = math.acos(-1 + (2 * i) / count)
        theta = math.sqrt(count * math.pi) * phi
        yield (
            i,
            radius * math.cos(theta) * math.sin(phi),
            lift + radius * math.cos(phi),
            radius * math.sin(theta) * math.sin(phi),
        )


# ============================================================================
# Short styles
# ============================================================================

@register_hair_style("buzzcut")
def _buzzcut(color: str, seed: float) -> Group:
    g = Group()
    g.add(sphere(0.145, position=(0, 0.12, 0), color=color, roughness=0.95, tag="hair_base"))
    for _, x, y, z in _fibonacci_shell(30, 0.14, 0.12):
        if y < 0.08:
            continue
        g.add(sphere(0.008, position=(x, y, z), color=color, roughness=1.0, tag="hair_texture"))
    return g


@register_hair_style("short-spiky")
def _short_spiky(color: str, seed: float) -> Group:
    spikes = generate_hair_strands(16, 0.09, seed)
    g = Group()
    g.add(sphere(0.13, position=(0, 0.14, 0), color=color, roughness=0.8, tag="hair_base"))
    for s in spikes:
        g.add(cone(0.018, s.length, position=(s.x, 0.16 + s.y, s.z),
                   rotation=(s.rotation, 0, s.rotation * 0.5), color=color, roughness=0.7, tag="spike"))
    for s in spikes[:8]:
        g.add(cone(0.015, s.length * 0.8, position=(s.x * 0.6, 0.18, s.z * 0.6),
                   rotation=(s.rotation * 0.5, 0, 0), color=color, roughness=0.7, tag="spike"))
    return g


@register_hair_style("mohawk")
def _mohawk(color: str, seed: float) -> Group:
    g = Group()
    g.add(sphere(0.135, position=(0, 0.1, 0), color=color, roughness=0.95, tag="hair_base"))
    for i in range(8):
        z = -0.1 + i * 0.035
        height_mod = 1 - abs(i - 3.5) * 0.1
        g.add(
            cone(0.025, 0.12 * height_mod, position=(0, 0.16 + height_mod * 0.05, z),
                 rotation=(0.2 - i * 0.03, 0, 0), color=color, roughness=0.7, tag="spike"),
            cone(0.018, 0.08 * height_mod, position=(0, 0.15, z),
                 rotation=(0.3, 0, 0), color=color, roughness=0.7, tag="spike"),
        )
    return g


@register_hair_style("undercut")
def _undercut(color: str, seed: float) -> Group:
    g = Group()
    g.add(
        sphere(0.14, position=(0, 0.08, 0), color=color, roughness=0.95, tag="hair_base"),
        box(0.12, 0.06, 0.14, position=(-0.02, 0.17, 0.02), rotation=(0.2, 0, 0.3),
            color=color, roughness=0.5, tag="hair_top"),
        capsule(0.025, 0.08, position=(-0.04, 0.15, 0.08), rotation=(0, 0, 0.4),
                color=color, roughness=0.5, tag="hair_front"),
    )
    return g


@register_hair_style("slickedback")
def _slickedback(color: str, seed: float) -> Group:
    g = Group()
    g.add(
        capsule(0.11, 0.14, position=(0, 0.12, -0.03), rotation=(-0.25, 0, 0),
                color=color, roughness=0.2, metalness=0.1, tag="hair_base"),
        box(0.04, 0.08, 0.1, position=(-0.1, 0.1, 0), rotation=(0, 0.2, 0.1),
            color=color, roughness=0.25, tag="hair_side"),
        box(0.04, 0.08, 0.1, position=(0.1, 0.1, 0), rotation=(0, -0.2, -0.1),
            color=color, roughness=0.25, tag="hair_side"),
    )
    return g


@register_hair_style("topheavy")
def _topheavy(color: str, seed: float) -> Group:
    g = Group()
    g.add(
        box(0.16, 0.14, 0.14, position=(0, 0.18, 0), color=color, roughness=0.6, tag="hair_top"),
        sphere(0.08, position=(0, 0.2, 0.05), color=color, roughness=0.6, tag="hair_top"),
        sphere(0.07, position=(0, 0.2, -0.05), color=color, roughness=0.6, tag="hair_top"),
        sphere(0.05, position=(-0.08, 0.14, 0), color=color, roughness=0.6, tag="hair_side"),
        sphere(0.05, position=(0.08, 0.14, 0), color=color, roughness=0.6, tag="hair_side"),
    )
    return g


# ============================================================================
# Long styles
# ============================================================================

@register_hair_style("long-straight")
def _long_straight(color: str, seed: float) -> Group:
    g = Group()
    g.add(
        capsule(0.12, 0.2, position=(0, 0.08, -0.02), color=color, roughness=0.6, tag="hair_base"),
        sphere(0.12, position=(0, 0.15, 0), color=color, roughness=0.55, tag="hair_top"),
    )
    for side in (-1, 1):
        for i, x in enumerate((0.08, 0.1, 0.12)):
            g.add(capsule(0.025, 0.22, position=(side * x, -0.02 - i * 0.04, 0.02),
                          rotation=(0, 0, -side * (0.15 + i * 0.05)),
                          color=color, roughness=0.55, tag="strand"))
    for x in (-0.04, 0.0, 0.04):
        g.add(capsule(0.03, 0.28, position=(x, -0.08, -0.1), rotation=(0.4, 0, 0),
                      color=color, roughness=0.6, tag="strand"))
    return g


@register_hair_style("ponytail")
def _ponytail(color: str, seed: float) -> Group:
    g = Group()
    g.add(
        sphere(0.11, position=(0, 0.15, 0), color=color, roughness=0.5, tag="hair_top"),
        torus(0.025, 0.008, math.pi * 2, position=(0, 0.05, -0.12), rotation=(math.pi / 2, 0, 0),
              color=HAIR_TIE_COLOR, roughness=0.3, tag="hair_tie"),
    )
    for i, x in enumerate((-0.02, 0.0, 0.02)):
        g.add(capsule(0.032, 0.22, position=(x, -0.08 - i * 0.02, -0.18),
                      rotation=(0.6 + sr(seed + i) * 0.2, 0, sr(seed + i * 2) * 0.1),
                      color=color, roughness=0.55, tag="ponytail_strand"))
    g.add(
        capsule(0.015, 0.08, position=(-0.1, 0.08, 0.02), rotation=(0, 0, 0.3),
                color=color, roughness=0.5, tag="wisp"),
        capsule(0.015, 0.08, position=(0.1, 0.08, 0.02), rotation=(0, 0, -0.3),
                color=color, roughness=0.5, tag="wisp"),
    )
    return g


@register_hair_style("rocker")
def _rocker(color: str, seed: float) -> Group:
    g = Group()
    g.add(sphere(0.12, position=(0, 0.14, 0.02), color=color, roughness=0.55, tag="hair_top"))
    for i in range(8):
        g.add(capsule(0.018, 0.32 + sr(seed + i * 3) * 0.08, position=(-0.06 + i * 0.017, 0, -0.1),
                      rotation=(0.5 + sr(seed + i) * 0.2, 0, sr(seed + i * 2) * 0.1 - 0.05),
                      color=color, roughness=0.55, tag="strand"))
    for side in (-1, 1):
        g.add(capsule(0.025, 0.18, position=(side * 0.1, 0.02, 0), rotation=(0, 0, side * 0.2),
                      color=color, roughness=0.55, tag="hair_side"))
    return g


@register_hair_style("dreadlocks")
def _dreadlocks(color: str, seed: float) -> Group:
    g = Group()
    g.add(sphere(0.1, position=(0, 0.12, 0), color=color, roughness=0.9, tag="hair_base"))
    for i in range(18):
        angle = (i / 18) * math.pi * 2
        length = 0.18 + sr(seed + i) * 0.1
        tilt = (sr(seed + i * 2) - 0.5) * 0.6
        x, z = math.cos(angle) * 0.08, math.sin(angle) * 0.08
        g.add(capsule(0.02, length, position=(x, 0.06, z), rotation=(tilt, 0, tilt * 0.5),
                      color=color, roughness=0.85, tag="dread"))
        for pos in (0.3, 0.5, 0.7):
            g.add(torus(0.022, 0.004, math.pi * 2, position=(x, 0.06 - length * pos * 0.5, z),
                        color=color, roughness=0.9, tag="dread_ring"))
    return g


@register_hair_style("braids")
def _braids(color: str, seed: float) -> Group:
    g = Group()
    g.add(sphere(0.11, position=(0, 0.14, 0), color=color, roughness=0.6, tag="hair_top"))
    for x in (-0.05, 0.0, 0.05):
        braid = Group("braid")
        for j in range(6):
            braid.add(sphere(0.025, position=(x + math.sin(j * 0.8) * 0.01, 0.04 - j * 0.04, -0.1 - j * 0.015),
                             rotation=(0.3, 0, 0), color=color, roughness=0.65, tag="braid_segment"))
        g.add(braid)
    for x in (-0.1, 0.1):
        g.add(capsule(0.022, 0.1, position=(x, 0.06, 0), rotation=(0, 0, -0.2 if x > 0 else 0.2),
                      color=color, roughness=0.6, tag="hair_side"))
    return g


# ============================================================================
# Volume styles
# ============================================================================

@register_hair_style("curly")
def _curly(color: str, seed: float) -> Group:
    g = Group()
    g.add(sphere(0.14, position=(0, 0.12, 0), color=color, roughness=0.8, tag="hair_base"))
    for i in range(24):
        angle = (i / 24) * math.pi * 2
        radius = 0.1 + sr(seed + i) * 0.03
        size = 0.03 + sr(seed + i * 2) * 0.015
        y = 0.1 + sr(seed + i * 3) * 0.08
        g.add(sphere(size, position=(math.cos(angle) * radius, y, math.sin(angle) * radius),
                     color=color, roughness=0.7, tag="curl"))
    for i in range(8):
        g.add(sphere(0.025, position=((sr(seed + i * 10) - 0.5) * 0.1,
                                      0.18 + sr(seed + i * 11) * 0.04,
                                      (sr(seed + i * 12) - 0.5) * 0.1),
                     color=color, roughness=0.7, tag="curl"))
    return g


@register_hair_style("afro")
def _afro(color: str, seed: float) -> Group:
    g = Group()
    g.add(sphere(0.2, position=(0, 0.12, 0), color=color, roughness=0.95, tag="hair_base"))
    for i, x, y, z in _fibonacci_shell(50, 0.19, 0.12):
        if y < 0.06:
            continue
        g.add(sphere(0.015 + sr(seed + i) * 0.01, position=(x, y, z),
                     color=color, roughness=1.0, tag="hair_texture"))
    return g


@register_hair_style("messy")
def _messy(color: str, seed: float) -> Group:
    g = Group()
    g.add(sphere(0.12, position=(0, 0.13, 0), color=color, roughness=0.7, tag="hair_base"))
    for i, s in enumerate(generate_hair_strands(18, 0.1, seed)):
        g.add(capsule(0.018, s.length, position=(s.x, 0.12 + s.y, s.z),
                      rotation=(sr(seed + i * 3) * 0.8 - 0.4, sr(seed + i * 5) * math.pi,
                                sr(seed + i * 7) * 0.6 - 0.3),
                      color=color, roughness=0.6, tag="strand"))
    return g
