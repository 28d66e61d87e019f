"""
Avatar studio: live preview of the player's character.

Controls:
- 1 / 2 / 3: face, upper body, full body framing
- + / - / mouse wheel: zoom
- R: toggle auto-rotate
- SPACE: toggle idle animation
- E: cycle expression
- H: cycle hair style
- S: save the avatar to the store (when connected)
"""

from dataclasses import replace
from typing import Optional

import pygame

from engine.error_handler import GameError, log_error
from engine.managers.camera_manager import CameraManager
from engine.render.avatar_renderer import AvatarRenderer
from engine.store import avatar_repo
from engine.store.client import StoreClient
from engine.toasts import ToastLog
from systems.avatar.config import AvatarConfig, default_avatar_config
from systems.avatar.face import EXPRESSIONS
from systems.avatar.hair import all_hair_style_keys
from systems.avatar.scene import AvatarScene, IdleAnimator, compose_avatar
from ui.screen_components import draw_screen_footer, draw_toasts

PRESET_KEYS = {
    pygame.K_1: "face",
    pygame.K_2: "upper",
    pygame.K_3: "full",
}

FOOTER_HINTS = [
    "1/2/3: framing   +/-/wheel: zoom   R: rotate   SPACE: animate",
    "E: expression   H: hair   S: save   TAB: dashboard   ESC: quit",
]


class AvatarStudioScene:
    """
    Preview scene for one avatar config.

    The primitive tree is rebuilt only when the look changes (expression or
    hair); camera and idle animation act on the existing tree each frame.
    """

    def __init__(
        self,
        screen: pygame.Surface,
        toasts: ToastLog,
        config: Optional[AvatarConfig] = None,
        client: Optional[StoreClient] = None,
        profile_id: Optional[str] = None,
        seed: float = 0.5,
    ) -> None:
        self.screen = screen
        self.toasts = toasts
        self.client = client
        self.profile_id = profile_id
        self.seed = seed
        self.font_small = pygame.font.SysFont("consolas", 18)

        self.config = config or default_avatar_config(profile_id)
        self.expression = "neutral"
        self.camera = CameraManager()
        self.animator = IdleAnimator(animate=True)
        self.renderer = AvatarRenderer()
        self.scene: AvatarScene = self._compose()

    def _compose(self) -> AvatarScene:
        return compose_avatar(self.config, self.expression, self.seed)

    def rebuild(self) -> None:
        """Recompose the tree, keeping the current idle pose."""
        old_root = self.scene.root
        self.scene = self._compose()
        self.scene.root.position = old_root.position
        self.scene.root.rotation = old_root.rotation

    # ------------------------------------------------------------------
    # Look changes
    # ------------------------------------------------------------------

    def cycle_expression(self) -> str:
        idx = EXPRESSIONS.index(self.expression) if self.expression in EXPRESSIONS else -1
        self.expression = EXPRESSIONS[(idx + 1) % len(EXPRESSIONS)]
        self.rebuild()
        return self.expression

    def cycle_hair(self) -> str:
        keys = all_hair_style_keys()
        current = self.scene.hair_style
        idx = keys.index(current) if current in keys else -1
        self.config = replace(self.config, hair_style_key=keys[(idx + 1) % len(keys)])
        self.rebuild()
        return self.config.hair_style_key

    def save(self) -> bool:
        if self.client is None:
            self.toasts.push("Offline", "Connect a store to save your avatar.")
            return False
        try:
            result = avatar_repo.save_avatar_config(self.client, self.profile_id, self.config)
        except GameError as e:
            log_error(e, "avatar_studio.save", toasts=self.toasts, title="Save failed")
            return False
        self.toasts.success("Avatar saved", f"Look {result}.")
        return True

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEWHEEL:
            if event.y > 0:
                self.camera.zoom_in()
            elif event.y < 0:
                self.camera.zoom_out()
            return

        if event.type != pygame.KEYDOWN:
            return

        key = event.key
        if key in PRESET_KEYS:
            self.camera.set_preset(PRESET_KEYS[key])
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            self.camera.zoom_in()
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            self.camera.zoom_out()
        elif key == pygame.K_r:
            self.camera.toggle_auto_rotate()
        elif key == pygame.K_SPACE:
            self.animator.toggle()
        elif key == pygame.K_e:
            self.cycle_expression()
        elif key == pygame.K_h:
            self.cycle_hair()
        elif key == pygame.K_s:
            self.save()

    def update(self, dt: float) -> None:
        self.camera.update(dt)
        self.animator.update(dt, self.scene.root)

    def draw(self) -> None:
        self.renderer.draw(self.screen, self.scene, self.camera)
        w, h = self.screen.get_size()

        status = (
            f"{self.camera.preset}  dist {self.camera.distance:.1f}  "
            f"{self.expression}  {self.scene.hair_style}  "
            f"{self.renderer.last_triangle_count} tris"
        )
        self.screen.blit(self.font_small.render(status, True, (220, 220, 220)), (20, 20))
        draw_screen_footer(self.screen, self.font_small, FOOTER_HINTS, w, h)
        draw_toasts(self.screen, self.font_small, self.toasts, w)
