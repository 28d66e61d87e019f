"""
Procedural avatar pipeline: parameters -> primitive tree.

Composers are pure functions of an AvatarConfig; rendering lives in
engine/render.
"""

from systems.avatar.config import AVATAR_DEFAULTS, AvatarConfig, default_avatar_config
from systems.avatar.body import BodyDimensions, compose_body, derive_body_dimensions
from systems.avatar.face import EXPRESSIONS, compose_face
from systems.avatar.hair import HAIR_STYLES, all_hair_style_keys, compose_hair
from systems.avatar.scene import AvatarScene, IdleAnimator, compose_avatar
from systems.avatar.seeded import generate_hair_strands, seeded_random

__all__ = [
    "AVATAR_DEFAULTS",
    "AvatarConfig",
    "default_avatar_config",
    "BodyDimensions",
    "compose_body",
    "derive_body_dimensions",
    "EXPRESSIONS",
    "compose_face",
    "HAIR_STYLES",
    "all_hair_style_keys",
    "compose_hair",
    "AvatarScene",
    "IdleAnimator",
    "compose_avatar",
    "generate_hair_strands",
    "seeded_random",
]
