"""Deterministic sine-hash random used to scatter hair strands and curls."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List


def seeded_random(seed: float) -> float:
    """
    Return a value in [0, 1) that depends only on `seed`.

    Same seed, same value: hair layouts are repeatable without an RNG.
    """
    x = math.sin(seed * 12.9898 + seed * 78.233) * 43758.5453
    return x - math.floor(x)


@dataclass(frozen=True)
class HairStrand:
    x: float
    y: float
    z: float
    rotation: float
    length: float
    angle: float


def generate_hair_strands(count: int, radius: float, seed: float) -> List[HairStrand]:
    """
    Lay out `count` strands around a ring of `radius`.

    Each strand index pulls its angle jitter, radius, height, tilt and
    length from a different offset of the seed so the values stay
    uncorrelated.
    """
    strands: List[HairStrand] = []
    for i in range(count):
        angle = (i / count) * math.pi * 2 + seeded_random(seed + i) * 0.3
        r = radius * (0.8 + seeded_random(seed + i * 2) * 0.4)
        strands.append(
            HairStrand(
                x=math.cos(angle) * r,
                y=seeded_random(seed + i * 3) * 0.03,
                z=math.sin(angle) * r,
                rotation=seeded_random(seed + i * 4) * 0.4 - 0.2,
                length=0.08 + seeded_random(seed + i * 5) * 0.06,
                angle=angle,
            )
        )
    return strands
