import sys
from pathlib import Path
from typing import List, Optional

import pygame

from settings import WINDOW_WIDTH, WINDOW_HEIGHT, TITLE, FPS
from engine.config import load_config
from engine.error_handler import GameError, handle_critical_error, log_error
from engine.scenes.avatar_studio import AvatarStudioScene
from engine.scenes.dashboard import DashboardScene, build_panels
from engine.store import avatar_repo
from engine.store.client import StoreClient
from engine.store.realtime import PollingFeed, RealtimeHub
from engine.toasts import ToastLog
from systems.avatar.config import AvatarConfig
from telemetry.logger import telemetry

# Tables whose new rows drive realtime channels
LIVE_TABLES = ("jam_session_messages", "global_chat")


def connect_store(config, toasts: ToastLog) -> Optional[StoreClient]:
    if not config.store_configured:
        toasts.push("Offline mode", "Set ROCKMUNDO_STORE_URL and ROCKMUNDO_STORE_KEY to connect.")
        return None
    return StoreClient(config.store_url, config.store_key, config.access_token, timeout=config.request_timeout)


def load_avatar(client: Optional[StoreClient], profile_id: Optional[str], toasts: ToastLog) -> Optional[AvatarConfig]:
    if client is None:
        return None
    try:
        return avatar_repo.load_avatar_config(client, profile_id)
    except GameError as e:
        log_error(e, "main.load_avatar", toasts=toasts, title="Avatar not loaded")
        return None


def main() -> None:
    config = load_config()
    telemetry.init(Path("logs") / "telemetry.jsonl")

    pygame.init()
    pygame.display.set_caption(TITLE)

    flags = pygame.FULLSCREEN if config.fullscreen else 0
    screen = pygame.display.set_mode((config.width or WINDOW_WIDTH, config.height or WINDOW_HEIGHT), flags)
    clock = pygame.time.Clock()

    toasts = ToastLog()
    hub = RealtimeHub()
    client = connect_store(config, toasts)
    feeds: List[PollingFeed] = []
    if client is not None:
        feeds = [PollingFeed(client, hub, table) for table in LIVE_TABLES]

    studio = AvatarStudioScene(
        screen, toasts,
        config=load_avatar(client, config.profile_id, toasts),
        client=client,
        profile_id=config.profile_id,
        seed=config.avatar_seed,
    )
    dashboard = DashboardScene(screen, toasts, build_panels(toasts, client, hub, config.user_id, config.profile_id))
    scene = studio

    # --- Main loop ---
    running = True
    failures = 0
    while running:
        dt = clock.tick(FPS) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                continue
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False
                continue
            if event.type == pygame.KEYDOWN and event.key == pygame.K_TAB:
                scene = dashboard if scene is studio else studio
                continue
            scene.handle_event(event)

        try:
            for feed in feeds:
                feed.update(dt)
            scene.update(dt)
            scene.draw()
            failures = 0
        except Exception as e:
            failures += 1
            recover = studio.rebuild if scene is studio else dashboard.reload
            if not handle_critical_error(e, type(scene).__name__, toasts=toasts,
                                         recovery_action=recover, consecutive=failures):
                raise
        pygame.display.flip()

    if client is not None:
        client.close()
    telemetry.close()
    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
