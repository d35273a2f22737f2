"""Pytest configuration and fixtures."""
from __future__ import annotations

from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from rollcall import server


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_server_state() -> Iterator[None]:
    """Reset the module-level store and observers between tests to prevent cross-test pollution."""
    server.reset_state()
    yield
    server.reset_state()


@pytest.fixture
def client() -> Iterator[TestClient]:
    """TestClient sharing one event loop for HTTP calls and WebSocket sessions."""
    with TestClient(server.app) as test_client:
        yield test_client


class FakeWebSocket:
    """Minimal stand-in for a starlette WebSocket used by the hub and sync handler."""

    def __init__(self, fail_on_send: bool = False) -> None:
        self.client_state = WebSocketState.CONNECTING
        self.application_state = WebSocketState.CONNECTING
        self.sent: List[str] = []
        self.fail_on_send = fail_on_send

    async def accept(self) -> None:
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_text(self, data: str) -> None:
        if self.fail_on_send:
            raise RuntimeError("socket write failed")
        self.sent.append(data)

    def close(self) -> None:
        self.client_state = WebSocketState.DISCONNECTED


@pytest.fixture
def fake_ws_factory():
    def _make(**kwargs) -> FakeWebSocket:
        return FakeWebSocket(**kwargs)
    return _make
