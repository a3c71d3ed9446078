"""
Aliasgate HTTP Client

Talks to the gateway's HTTP surface: lists aliases, fetches the live-session
config for an alias and posts telemetry to the log ingestion endpoint.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from aliasgate.errors import AliasNotFound
from aliasgate.models import AliasListResponse, LiveConfigResponse, PublicAlias

LOG = logging.getLogger(__name__)


@dataclass
class GatewayClient:
    """
    Client for the aliasgate HTTP endpoints.

    Usage:
        async with httpx.AsyncClient(base_url="https://app.example.com") as http:
            client = GatewayClient(http)
            live = await client.live_config("echo-v1.0")
    """

    http: httpx.AsyncClient
    prefix: str = "/aliasgate"

    async def list_aliases(self) -> list[PublicAlias]:
        response = await self.http.get(f"{self.prefix}/aliases")
        response.raise_for_status()
        return AliasListResponse.model_validate_json(response.content).aliases

    async def live_config(self, alias_id: str | None = None) -> LiveConfigResponse:
        """
        Fetch the live-session config for an alias.

        Raises:
            AliasNotFound: If the gateway cannot resolve the alias
            httpx.HTTPStatusError: For any other non-success status
        """
        params = {"alias_id": alias_id} if alias_id else None
        response = await self.http.get(f"{self.prefix}/live-config", params=params)
        if response.status_code == 404:
            body = response.json()
            raise AliasNotFound(body.get("alias_id") or alias_id or "", body.get("error", ""))
        response.raise_for_status()
        return LiveConfigResponse.model_validate_json(response.content)

    async def send_log(self, payload: dict[str, Any]) -> None:
        response = await self.http.post(f"{self.prefix}/log", json=payload)
        response.raise_for_status()
        LOG.debug("Telemetry delivered (%d)", response.status_code)
