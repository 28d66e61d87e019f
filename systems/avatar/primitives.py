"""
Primitive solids and transform groups produced by the avatar composers.

A composer never draws anything: it returns a tree of `Group` nodes whose
leaves are `Primitive` solids with a local position/rotation and a simple
material. The renderer (engine/render) walks the tree and accumulates the
ancestor transforms.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

Vec3 = Tuple[float, float, float]

ORIGIN: Vec3 = (0.0, 0.0, 0.0)
UNIT: Vec3 = (1.0, 1.0, 1.0)

# Primitive kinds and the meaning of their `args` tuple:
#   capsule  (radius, length)
#   sphere   (radius,)
#   cylinder (radius_top, radius_bottom, height)
#   box      (width, height, depth)
#   cone     (radius, height)
#   torus    (radius, tube, arc)
PRIMITIVE_KINDS = ("capsule", "sphere", "cylinder", "box", "cone", "torus")


@dataclass
class Primitive:
    """One solid with a local transform and material."""
    kind: str
    args: Tuple[float, ...]
    position: Vec3 = ORIGIN
    rotation: Vec3 = ORIGIN
    color: str = "#ffffff"
    roughness: float = 0.5
    metalness: float = 0.0
    emissive: Optional[str] = None
    tag: str = ""
    scale: Vec3 = UNIT


Node = Union["Group", Primitive]


@dataclass
class Group:
    """
    A transform node.

    Children inherit position, rotation and scale. `scale` may be a scalar
    (uniform, as the body group uses the character height) or a 3-tuple.
    """
    name: str = ""
    position: Vec3 = ORIGIN
    rotation: Vec3 = ORIGIN
    scale: Union[float, Vec3] = 1.0
    children: List[Node] = field(default_factory=list)

    def add(self, *nodes: Optional[Node]) -> "Group":
        """Append nodes, skipping None (lets optional parts be passed inline)."""
        for node in nodes:
            if node is not None:
                self.children.append(node)
        return self

    @property
    def scale3(self) -> Vec3:
        if isinstance(self.scale, (int, float)):
            s = float(self.scale)
            return (s, s, s)
        return self.scale

    def walk(self, chain: Tuple["Group", ...] = ()) -> Iterator[Tuple[Primitive, Tuple["Group", ...]]]:
        """Yield (primitive, ancestor groups from root to parent)."""
        chain = chain + (self,)
        for child in self.children:
            if isinstance(child, Group):
                yield from child.walk(chain)
            else:
                yield child, chain

    def primitives(self) -> List[Primitive]:
        return [prim for prim, _ in self.walk()]

    def groups(self) -> Iterator["Group"]:
        yield self
        for child in self.children:
            if isinstance(child, Group):
                yield from child.groups()

    def find(self, tag: str) -> List[Primitive]:
        """All primitives carrying `tag`."""
        return [prim for prim in self.primitives() if prim.tag == tag]

    def find_group(self, name: str) -> Optional["Group"]:
        for group in self.groups():
            if group.name == name:
                return group
        return None

    def count(self, kind: Optional[str] = None) -> int:
        if kind is None:
            return len(self.primitives())
        return sum(1 for prim in self.primitives() if prim.kind == kind)


# ============================================================================
# Shorthand constructors
# ============================================================================

def capsule(radius: float, length: float, **kw) -> Primitive:
    return Primitive("capsule", (radius, length), **kw)


def sphere(radius: float, **kw) -> Primitive:
    return Primitive("sphere", (radius,), **kw)


def cylinder(radius_top: float, radius_bottom: float, height: float, **kw) -> Primitive:
    return Primitive("cylinder", (radius_top, radius_bottom, height), **kw)


def box(width: float, height: float, depth: float, **kw) -> Primitive:
    return Primitive("box", (width, height, depth), **kw)


def cone(radius: float, height: float, **kw) -> Primitive:
    return Primitive("cone", (radius, height), **kw)


def torus(radius: float, tube: float, arc: float, **kw) -> Primitive:
    return Primitive("torus", (radius, tube, arc), **kw)
