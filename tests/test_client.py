"""
Tests for the gateway HTTP client against the in-process app.
"""

import httpx
import pytest

from aliasgate.client import GatewayClient
from aliasgate.errors import AliasNotFound
from aliasgate.redaction import SENTINEL
from aliasgate.telemetry import HttpWriter


@pytest.fixture
async def gateway(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://gateway.test") as http:
        yield GatewayClient(http)


async def test_list_aliases(gateway):
    aliases = await gateway.list_aliases()

    assert [alias.alias_name for alias in aliases] == ["orbit", "codemax", "vision", "echo"]


async def test_live_config(gateway):
    live = await gateway.live_config("vision-v1.1")

    assert live.alias_name == "vision"
    assert live.limits.max_context == 64000
    assert live.live_url == "/aliasgate/live"


async def test_live_config_default_alias(gateway):
    live = await gateway.live_config()

    assert live.alias_id == "echo-v1.0"


async def test_live_config_unknown_alias(gateway):
    with pytest.raises(AliasNotFound) as excinfo:
        await gateway.live_config("ghost-v0")

    assert excinfo.value.alias_id == "ghost-v0"
    assert str(excinfo.value) == "orbit is temporarily unavailable. Please try again shortly."


async def test_send_log_through_http_writer(gateway, sink):
    writer = HttpWriter(gateway)

    await writer.write({"alias": "echo-v1.0", "task_type": "audio", "endpoint": "x"})

    assert sink.events == [{"alias": "echo-v1.0", "task_type": "audio", "endpoint": SENTINEL}]
