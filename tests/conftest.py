"""
Pytest configuration and fixtures.
"""

import asyncio
import json
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from aliasgate.config import AliasgateConfig
from aliasgate.router import router
from aliasgate.session import RealtimeSessionClient

_CLOSE = object()


class FakeConnection:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.inbound: asyncio.Queue[Any] = asyncio.Queue()
        self.closed = False

    async def send(self, message: str) -> None:
        if self.closed:
            from websockets.exceptions import ConnectionClosedOK

            raise ConnectionClosedOK(None, None)
        self.sent.append(json.loads(message))

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.inbound.put_nowait(_CLOSE)

    def push(self, message: dict[str, Any] | str) -> None:
        self.inbound.put_nowait(message if isinstance(message, str) else json.dumps(message))

    def fail(self, exc: BaseException) -> None:
        self.inbound.put_nowait(exc)

    def __aiter__(self) -> "FakeConnection":
        return self

    async def __anext__(self) -> str:
        item = await self.inbound.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    def sent_types(self) -> list[str]:
        return [message["type"] for message in self.sent]


class RecordingSink:
    """Telemetry sink double that keeps every emitted event."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def emit(self, event: Any) -> None:
        self.events.append(event)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep deployment variables from the host out of the tests."""
    for name in ("VERCEL_URL", "ALIASGATE_DEPLOYMENT_HOST", "ALIASGATE_LIVE_WS_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    return AliasgateConfig()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def app(config, sink):
    app = FastAPI()
    app.extra["aliasgate_config"] = config
    app.extra["aliasgate_telemetry"] = sink
    app.include_router(router)
    return app


@pytest.fixture
def http(app):
    return TestClient(app)


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def connection_factory():
    return FakeConnection


@pytest.fixture
def connector_calls():
    return []


@pytest.fixture
def session(connection, connector_calls, sink):
    async def connector(url: str) -> FakeConnection:
        connector_calls.append(url)
        return connection

    return RealtimeSessionClient(
        "https://app.example.com/aliasgate/live",
        telemetry=sink,
        connector=connector,
    )


@pytest.fixture
def next_event():
    async def wait(events, timeout: float = 1.0):
        return await asyncio.wait_for(events.get(), timeout)

    return wait
