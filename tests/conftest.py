"""Shared fixtures: a scripted game server behind ``httpx.MockTransport``."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from echoveil.api.gateway_client import GatewayClient

BASE_URL = "http://game.test"
DEVICE_ID = "device-1234"


class FakeGameServer:
    """Route table keyed by ``(method, path)``; unmatched requests get a 404."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        content: Optional[bytes] = None,
        error: Optional[type] = None,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if error is not None:
                raise error("simulated failure", request=request)
            if content is not None:
                return httpx.Response(status, content=content)
            return httpx.Response(status, json=json_body)

        self.routes[(method, path)] = handler

    def add_handler(self, method: str, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        return handler(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture
def server():
    """Scripted backend."""
    return FakeGameServer()


@pytest.fixture
def gateway(server):
    """Gateway client wired to the scripted backend."""
    return GatewayClient(BASE_URL, DEVICE_ID, transport=httpx.MockTransport(server))


@pytest.fixture
def offline_gateway():
    """Gateway client whose every request fails to connect."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return GatewayClient(BASE_URL, DEVICE_ID, transport=httpx.MockTransport(refuse))


@pytest.fixture
def campaign_payload():
    """A campaign in the backend's shape."""
    return {
        "id": "camp-1",
        "title": "The Kessel Job",
        "difficulty": "heroic",
        "gmStyle": "gritty",
        "worldState": {"currentLocation": "Kessel"},
        "currentScene": {
            "description": "Spice dust hangs in the air.",
            "location": "Kessel",
            "choices": ["Bribe the guard", "Sneak past"],
            "npcs": [{"name": "Guard"}],
        },
        "combatState": {
            "active": True,
            "currentTurn": 1,
            "initiative": [
                {"id": "pc-1", "name": "Kael", "hp": 30, "maxHp": 40, "ac": 16, "isPlayer": True},
                {"id": "npc-1", "name": "Trooper", "hp": 8, "maxHp": 20, "ac": 12, "initiative": 9},
            ],
        },
        "history": [
            {"type": "narration", "text": "You arrive at Kessel.", "timestamp": "2024-05-01T10:00:00.000Z"},
            {"type": "action", "text": "I look around.", "timestamp": "2024-05-01T10:01:00Z"},
        ],
        "unknownField": {"ignored": True},
    }
