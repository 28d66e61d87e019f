"""
Vector helpers and primitive tessellation for the software avatar renderer.

Every primitive kind becomes a triangle mesh in its local space. Faces are
wound counter-clockwise seen from outside so the renderer can cull by the
sign of the face normal.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, List, Sequence, Tuple

from settings import CYLINDER_SEGMENTS, SPHERE_SEGMENTS, TORUS_SEGMENTS

Vec3 = Tuple[float, float, float]
Face = Tuple[int, int, int]


# ============================================================================
# Vector math
# ============================================================================

def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def mul(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] * b[0], a[1] * b[1], a[2] * b[2])


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def length(v: Vec3) -> float:
    return math.sqrt(dot(v, v))


def normalize(v: Vec3) -> Vec3:
    n = length(v)
    if n == 0:
        return (0.0, 0.0, 0.0)
    return (v[0] / n, v[1] / n, v[2] / n)


def rotate_point(point: Vec3, rotation: Vec3) -> Vec3:
    """Rotate about X, then Y, then Z (radians)."""
    x, y, z = point
    rx, ry, rz = rotation
    if rx:
        c, s = math.cos(rx), math.sin(rx)
        y, z = y * c - z * s, y * s + z * c
    if ry:
        c, s = math.cos(ry), math.sin(ry)
        x, z = x * c + z * s, -x * s + z * c
    if rz:
        c, s = math.cos(rz), math.sin(rz)
        x, y = x * c - y * s, x * s + y * c
    return (x, y, z)


def hex_to_rgb(value: str) -> Vec3:
    """
    Parse "#rrggbb" or "#rgb" into floats in [0, 1].

    Malformed strings read as white rather than raising.
    """
    text = (value or "").strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        return (1.0, 1.0, 1.0)
    try:
        raw = int(text, 16)
    except ValueError:
        return (1.0, 1.0, 1.0)
    return (((raw >> 16) & 255) / 255, ((raw >> 8) & 255) / 255, (raw & 255) / 255)


# ============================================================================
# Meshes
# ============================================================================

@dataclass(frozen=True)
class Mesh:
    vertices: Tuple[Vec3, ...]
    faces: Tuple[Face, ...]


def _orient(vertices: Sequence[Vec3], faces: List[Face], inside: Callable[[Vec3], Vec3]) -> Mesh:
    """Flip any face whose normal points toward the interior reference point."""
    oriented: List[Face] = []
    for a, b, c in faces:
        p1, p2, p3 = vertices[a], vertices[b], vertices[c]
        normal = cross(sub(p2, p1), sub(p3, p1))
        centroid = ((p1[0] + p2[0] + p3[0]) / 3, (p1[1] + p2[1] + p3[1]) / 3, (p1[2] + p2[2] + p3[2]) / 3)
        if dot(normal, sub(centroid, inside(centroid))) < 0:
            oriented.append((a, c, b))
        else:
            oriented.append((a, b, c))
    return Mesh(tuple(vertices), tuple(oriented))


def _origin(_: Vec3) -> Vec3:
    return (0.0, 0.0, 0.0)


def _rings(rings: List[List[Vec3]], close_caps: bool = False) -> Tuple[List[Vec3], List[Face]]:
    """Stitch consecutive rings of equal size into quads (two triangles each)."""
    vertices: List[Vec3] = [v for ring in rings for v in ring]
    faces: List[Face] = []
    n = len(rings[0])
    for r in range(len(rings) - 1):
        base, nxt = r * n, (r + 1) * n
        for i in range(n):
            j = (i + 1) % n
            faces.append((base + i, nxt + i, base + j))
            faces.append((nxt + i, nxt + j, base + j))
    if close_caps:
        for ring_index in (0, len(rings) - 1):
            center = len(vertices)
            y = rings[ring_index][0][1]
            vertices.append((0.0, y, 0.0))
            base = ring_index * n
            for i in range(n):
                faces.append((center, base + i, base + (i + 1) % n))
    return vertices, faces


def _lat_long(radius: float, segments: int, phis: List[float], y_shift: Callable[[float], float]) -> List[List[Vec3]]:
    rings = []
    for phi in phis:
        sin_phi, cos_phi = math.sin(phi), math.cos(phi)
        ring = []
        for i in range(segments):
            theta = (i / segments) * math.pi * 2
            ring.append((radius * sin_phi * math.cos(theta),
                         radius * cos_phi + y_shift(phi),
                         radius * sin_phi * math.sin(theta)))
        rings.append(ring)
    return rings


def sphere_mesh(radius: float) -> Mesh:
    w, h = SPHERE_SEGMENTS
    phis = [(k / h) * math.pi for k in range(h + 1)]
    vertices, faces = _rings(_lat_long(radius, w, phis, lambda _: 0.0))
    return _orient(vertices, faces, _origin)


def capsule_mesh(radius: float, body_length: float) -> Mesh:
    """Y-aligned capsule: a cylinder of `body_length` capped by hemispheres."""
    w, h = SPHERE_SEGMENTS
    half = max(2, h // 2)
    upper = [(k / half) * (math.pi / 2) for k in range(half + 1)]
    lower = [math.pi / 2 + (k / half) * (math.pi / 2) for k in range(half + 1)]
    rings = _lat_long(radius, w, upper, lambda _: body_length / 2)
    rings += _lat_long(radius, w, lower, lambda _: -body_length / 2)
    vertices, faces = _rings(rings)

    def axis_point(p: Vec3) -> Vec3:
        return (0.0, max(-body_length / 2, min(p[1], body_length / 2)), 0.0)

    return _orient(vertices, faces, axis_point)


def cylinder_mesh(radius_top: float, radius_bottom: float, height: float) -> Mesh:
    n = CYLINDER_SEGMENTS
    top = [(math.cos(i / n * math.pi * 2) * radius_top, height / 2, math.sin(i / n * math.pi * 2) * radius_top)
           for i in range(n)]
    bottom = [(math.cos(i / n * math.pi * 2) * radius_bottom, -height / 2,
               math.sin(i / n * math.pi * 2) * radius_bottom) for i in range(n)]
    vertices, faces = _rings([top, bottom], close_caps=True)
    return _orient(vertices, faces, _origin)


def cone_mesh(radius: float, height: float) -> Mesh:
    n = CYLINDER_SEGMENTS
    vertices: List[Vec3] = [(0.0, height / 2, 0.0), (0.0, -height / 2, 0.0)]
    for i in range(n):
        theta = i / n * math.pi * 2
        vertices.append((math.cos(theta) * radius, -height / 2, math.sin(theta) * radius))
    faces: List[Face] = []
    for i in range(n):
        a, b = 2 + i, 2 + (i + 1) % n
        faces.append((0, a, b))
        faces.append((1, b, a))
    return _orient(vertices, faces, _origin)


def box_mesh(width: float, height: float, depth: float) -> Mesh:
    hw, hh, hd = width / 2, height / 2, depth / 2
    vertices = [
        (-hw, -hh, -hd), (hw, -hh, -hd), (hw, hh, -hd), (-hw, hh, -hd),
        (-hw, -hh, hd), (hw, -hh, hd), (hw, hh, hd), (-hw, hh, hd),
    ]
    faces = [
        (0, 2, 1), (0, 3, 2),
        (1, 6, 5), (1, 2, 6),
        (5, 7, 4), (5, 6, 7),
        (4, 3, 0), (4, 7, 3),
        (3, 6, 2), (3, 7, 6),
        (4, 1, 5), (4, 0, 1),
    ]
    return _orient(vertices, faces, _origin)


def torus_mesh(radius: float, tube: float, arc: float) -> Mesh:
    """Torus in the XY plane around Z; `arc` < 2*pi leaves an open segment."""
    radial, tubular = TORUS_SEGMENTS
    full = arc >= math.pi * 2 - 1e-9
    steps = radial if full else radial + 1
    vertices: List[Vec3] = []
    for i in range(steps):
        u = (i / radial) * arc
        for j in range(tubular):
            v = (j / tubular) * math.pi * 2
            vertices.append((
                (radius + tube * math.cos(v)) * math.cos(u),
                (radius + tube * math.cos(v)) * math.sin(u),
                tube * math.sin(v),
            ))
    faces: List[Face] = []
    for i in range(radial):
        ni = (i + 1) % steps if full else i + 1
        for j in range(tubular):
            nj = (j + 1) % tubular
            a, b = i * tubular + j, ni * tubular + j
            c, d = ni * tubular + nj, i * tubular + nj
            faces.append((a, b, d))
            faces.append((b, c, d))

    def ring_point(p: Vec3) -> Vec3:
        angle = math.atan2(p[1], p[0])
        return (radius * math.cos(angle), radius * math.sin(angle), 0.0)

    return _orient(vertices, faces, ring_point)


_BUILDERS = {
    "sphere": sphere_mesh,
    "capsule": capsule_mesh,
    "cylinder": cylinder_mesh,
    "cone": cone_mesh,
    "box": box_mesh,
    "torus": torus_mesh,
}


@lru_cache(maxsize=2048)
def tessellate(kind: str, args: Tuple[float, ...]) -> Mesh:
    """Mesh for a primitive kind and its args; unknown kinds give an empty mesh."""
    builder = _BUILDERS.get(kind)
    if builder is None:
        return Mesh((), ())
    return builder(*args)
