"""
Painter's-algorithm renderer for avatar scenes.

Walks the primitive tree, transforms tessellated meshes to world space,
culls back faces, projects through the orbit camera, shades each triangle
with one directional light and draws them far-to-near with
pygame.draw.polygon.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import pygame

from engine.render.geometry import (
    Vec3,
    add,
    cross,
    dot,
    hex_to_rgb,
    length,
    mul,
    normalize,
    rotate_point,
    sub,
    tessellate,
)
from settings import LIGHT_DIRECTION
from systems.avatar.primitives import Group, Primitive

if TYPE_CHECKING:
    from engine.managers.camera_manager import CameraManager
    from systems.avatar.scene import AvatarScene

Vec2 = Tuple[float, float]
NEAR_PLANE = 0.1


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass
class Triangle:
    points: Tuple[Vec2, Vec2, Vec2]
    depth: float
    color: Tuple[int, int, int]


class CameraBasis:
    """View basis and perspective projection for one frame."""

    def __init__(self, eye: Vec3, target: Vec3, fov: float, size: Tuple[int, int]) -> None:
        self.eye = eye
        self.width, self.height = size
        self.forward = normalize(sub(target, eye))
        up: Vec3 = (0.0, 1.0, 0.0)
        if length(cross(self.forward, up)) < 1e-3:
            up = (0.0, 0.0, 1.0)
        self.right = normalize(cross(self.forward, up))
        self.up = normalize(cross(self.right, self.forward))
        self.aspect = self.width / self.height if self.height else 1.0
        self.focal = 1 / math.tan((fov * math.pi) / 360)

    def project(self, point: Vec3) -> Optional[Tuple[Vec2, float]]:
        """Screen position and depth, or None when behind the near plane."""
        rel = sub(point, self.eye)
        cx, cy, cz = dot(rel, self.right), dot(rel, self.up), dot(rel, self.forward)
        if cz <= NEAR_PLANE:
            return None
        x_ndc = (cx * self.focal) / (cz * self.aspect)
        y_ndc = (cy * self.focal) / cz
        return (
            (self.width / 2 + x_ndc * self.width / 2, self.height / 2 - y_ndc * self.height / 2),
            cz,
        )


def transform_vertex(vertex: Vec3, primitive: Primitive, chain: Sequence[Group]) -> Vec3:
    """Local primitive vertex -> world space through the ancestor chain."""
    v = rotate_point(mul(vertex, primitive.scale), primitive.rotation)
    v = add(v, primitive.position)
    for group in reversed(chain):
        v = rotate_point(mul(v, group.scale3), group.rotation)
        v = add(v, group.position)
    return v


class AvatarRenderer:
    """Turns an AvatarScene into shaded screen triangles."""

    def __init__(self, light_direction: Vec3 = LIGHT_DIRECTION, ambient: float = 0.35) -> None:
        self.light = normalize(light_direction)
        self.ambient = ambient
        self.last_triangle_count: int = 0

    def shade(self, primitive: Primitive, normal: Vec3, view: Vec3) -> Tuple[int, int, int]:
        light = max(0.0, dot(normal, self.light))
        half = normalize(add(self.light, normalize(view)))
        specular = math.pow(max(0.0, dot(normal, half)), 12) * primitive.metalness * 0.35
        diffuse = 0.55 + (1 - primitive.roughness) * 0.45
        shading = _clamp(self.ambient + light * diffuse + specular, 0.0, 1.25)

        base = hex_to_rgb(primitive.color)
        glow = hex_to_rgb(primitive.emissive) if primitive.emissive else (0.0, 0.0, 0.0)
        return tuple(
            int(round(_clamp(base[i] * shading + glow[i] * 0.25, 0.0, 1.0) * 255)) for i in range(3)
        )

    def collect_triangles(
        self,
        scene: "AvatarScene",
        camera: "CameraManager",
        size: Tuple[int, int],
    ) -> List[Triangle]:
        """Visible, shaded triangles sorted far to near."""
        basis = CameraBasis(camera.eye, camera.target, camera.fov, size)
        triangles: List[Triangle] = []

        for primitive, chain in scene.root.walk():
            mesh = tessellate(primitive.kind, tuple(primitive.args))
            if not mesh.faces:
                continue
            world = [transform_vertex(v, primitive, chain) for v in mesh.vertices]
            projected = [None] * len(world)

            for a, b, c in mesh.faces:
                p1, p2, p3 = world[a], world[b], world[c]
                normal = cross(sub(p2, p1), sub(p3, p1))
                n_len = length(normal)
                if n_len == 0:
                    continue
                normal = (normal[0] / n_len, normal[1] / n_len, normal[2] / n_len)
                centroid = ((p1[0] + p2[0] + p3[0]) / 3, (p1[1] + p2[1] + p3[1]) / 3, (p1[2] + p2[2] + p3[2]) / 3)
                view = sub(basis.eye, centroid)
                if dot(normal, view) <= 0:
                    continue

                corners = []
                for idx in (a, b, c):
                    if projected[idx] is None:
                        projected[idx] = basis.project(world[idx]) or False
                    corners.append(projected[idx])
                if not all(corners):
                    continue

                triangles.append(Triangle(
                    points=(corners[0][0], corners[1][0], corners[2][0]),
                    depth=(corners[0][1] + corners[1][1] + corners[2][1]) / 3,
                    color=self.shade(primitive, normal, view),
                ))

        triangles.sort(key=lambda t: t.depth, reverse=True)
        self.last_triangle_count = len(triangles)
        return triangles

    def draw(self, surface: pygame.Surface, scene: "AvatarScene", camera: "CameraManager") -> int:
        """Clear to the scene background and paint the avatar. Returns triangles drawn."""
        surface.fill(scene.background)
        triangles = self.collect_triangles(scene, camera, surface.get_size())
        for tri in triangles:
            pygame.draw.polygon(surface, tri.color, tri.points)
        return len(triangles)
