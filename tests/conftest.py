"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test files.
"""

import json
import os
from typing import Any, Dict, Generator, List, Optional, Tuple

import httpx
import pygame
import pytest

# Headless display for the pygame session
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")


@pytest.fixture(scope="session", autouse=True)
def pygame_init() -> Generator[None, None, None]:
    """
    Initialize pygame for the test session.
    This runs once before all tests and cleans up after.
    """
    pygame.init()
    pygame.display.set_mode((800, 600), pygame.HIDDEN)
    yield
    pygame.quit()


@pytest.fixture
def sample_screen() -> pygame.Surface:
    """
    Create a sample pygame surface for tests that need a screen.
    """
    return pygame.Surface((320, 240))


# ============================================================================
# Store fakes
# ============================================================================

class FakeStore:
    """
    In-memory PostgREST stand-in behind httpx.MockTransport.

    Responses are queued per (method, table). A queue hands out its entries
    in order and keeps repeating the last one; unqueued requests get 200 []
    (GET) or 201 [] (writes).
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], List[Tuple[int, Any]]] = {}

    def add(self, method: str, table: str, body: Any = None, status: int = 200) -> "FakeStore":
        self.routes.setdefault((method.upper(), table), []).append((status, body))
        return self

    def set(self, method: str, table: str, body: Any = None, status: int = 200) -> "FakeStore":
        """Replace whatever is queued for (method, table)."""
        self.routes[(method.upper(), table)] = [(status, body)]
        return self

    def error(self, method: str, table: str, code: str, message: str = "denied", status: int = 403) -> "FakeStore":
        return self.add(method, table, {"code": code, "message": message, "details": None, "hint": None}, status)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        table = request.url.path.split("/rest/v1/", 1)[1]
        queue = self.routes.get((request.method, table))
        if queue:
            status, body = queue.pop(0) if len(queue) > 1 else queue[0]
        else:
            status, body = (200, []) if request.method == "GET" else (201, [])
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def calls(self, method: Optional[str] = None, table: Optional[str] = None) -> List[httpx.Request]:
        out = []
        for request in self.requests:
            path = request.url.path.split("/rest/v1/", 1)[1]
            if method and request.method != method.upper():
                continue
            if table and path != table:
                continue
            out.append(request)
        return out

    @staticmethod
    def params(request: httpx.Request) -> List[Tuple[str, str]]:
        return list(request.url.params.multi_items())

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def store_client(fake_store):
    """StoreClient wired to `fake_store`."""
    from engine.store.client import StoreClient
    client = StoreClient("https://test.supabase.co", "anon-key", transport=httpx.MockTransport(fake_store.handler))
    yield client
    client.close()


@pytest.fixture
def toasts():
    from engine.toasts import ToastLog
    return ToastLog()


@pytest.fixture
def hub():
    from engine.store.realtime import RealtimeHub
    return RealtimeHub()


# ============================================================================
# Avatar fixtures
# ============================================================================

@pytest.fixture
def sample_avatar_config():
    """
    A fully specified avatar, as the store would return it.
    """
    from systems.avatar.config import AvatarConfig
    return AvatarConfig(
        profile_id="profile-1",
        skin_tone="#c68642",
        body_type="muscular",
        gender="male",
        height=1.0,
        weight=0.5,
        muscle_definition=0.5,
        hair_style_key="mohawk",
        hair_color="#8b4513",
        jacket_color="#222222",
        beard_style="full",
    ).with_defaults()
