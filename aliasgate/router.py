"""
FastAPI Router for the aliasgate HTTP surface

Exposes the public alias catalog, resolves the live-session endpoint for an
alias, answers the live route liveness probe and ingests client telemetry.
Private resolutions are used server-side only and never serialized.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from aliasgate.catalog import (
    choose_route,
    get_public_alias,
    list_public_aliases,
    resolve_private_alias,
)
from aliasgate.config import AliasgateConfig
from aliasgate.errors import classify_error, user_facing_error
from aliasgate.models import (
    AliasListResponse,
    ErrorResponse,
    LiveConfigResponse,
    LivenessResponse,
    TelemetryEvent,
)
from aliasgate.redaction import redact
from aliasgate.telemetry import TelemetrySink

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/aliasgate", tags=["aliasgate"])

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
NOT_FOUND_ALIAS_NAME = "orbit"
LIVE_ALIAS_NAME = "echo"


def get_config(request: Request) -> AliasgateConfig:
    config = request.app.extra.get("aliasgate_config")
    if config is None:
        return AliasgateConfig()
    if not isinstance(config, AliasgateConfig):
        return AliasgateConfig.model_validate(config)
    return config


def get_telemetry(request: Request) -> TelemetrySink:
    sink = request.app.extra.get("aliasgate_telemetry")
    if sink is None:
        return TelemetrySink()
    return sink


def method_not_allowed() -> JSONResponse:
    return JSONResponse(ErrorResponse(error="Method not allowed").model_dump(exclude_none=True), 405)


def parse_log_body(raw: bytes) -> dict[str, Any]:
    """Parse an ingestion body; anything that is not a JSON object becomes {}."""
    try:
        payload = json.loads(raw) if raw else {}
        if isinstance(payload, str):
            payload = json.loads(payload)
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@router.api_route("/aliases", methods=ALL_METHODS)
async def list_aliases(request: Request) -> Response:
    """List the public alias catalog in declaration order."""
    if request.method != "GET":
        return method_not_allowed()

    body = AliasListResponse(aliases=list_public_aliases())
    return JSONResponse(body.model_dump(mode="json"))


@router.api_route("/live-config", methods=ALL_METHODS)
async def live_config(request: Request) -> Response:
    """
    Resolve the live-session endpoint for an alias.

    The response carries public alias fields and the live channel URL only.
    Unknown aliases answer 404 with a templated message and emit a telemetry
    error event.
    """
    if request.method != "GET":
        return method_not_allowed()

    config = get_config(request)
    alias_id = request.query_params.get("alias_id") or config.default_alias_id
    public_alias = get_public_alias(alias_id)
    resolution = resolve_private_alias(alias_id, config)

    if public_alias is None or resolution is None:
        LOG.info("Live config requested for unresolvable alias")
        get_telemetry(request).emit(
            TelemetryEvent(
                alias=alias_id,
                task_type="audio",
                error_class=classify_error("unknown_alias"),
            )
        )
        body = ErrorResponse(
            alias_id=alias_id,
            error=user_facing_error(NOT_FOUND_ALIAS_NAME, "unknown_alias"),
        )
        return JSONResponse(body.model_dump(), 404)

    route = choose_route(resolution.routing_policy)
    LOG.debug("Alias %s routed to %s", public_alias.alias_id, route)

    body = LiveConfigResponse(
        alias_id=public_alias.alias_id,
        alias_name=public_alias.alias_name,
        alias_version=public_alias.alias_version,
        capabilities=list(public_alias.capabilities),
        limits=public_alias.limits,
        status=public_alias.status,
        live_url=config.live_url(),
    )
    return JSONResponse(body.model_dump(mode="json"))


@router.api_route("/live", methods=ALL_METHODS)
async def live_probe(request: Request) -> Response:
    """
    Liveness probe for the live route.

    The realtime channel itself is established out-of-band; anything other
    than GET is told to upgrade.
    """
    if request.method == "GET":
        body = LivenessResponse(message="Live route is available.")
        return JSONResponse(body.model_dump())

    body = ErrorResponse(error=user_facing_error(LIVE_ALIAS_NAME, "upgrade_required"))
    return JSONResponse(body.model_dump(exclude_none=True), 426)


@router.api_route("/log", methods=ALL_METHODS)
async def ingest_log(request: Request) -> Response:
    """Accept a client telemetry event; malformed bodies are treated as {}."""
    if request.method != "POST":
        return method_not_allowed()

    payload = parse_log_body(await request.body())
    get_telemetry(request).emit(redact(payload))
    return Response(status_code=204)
