"""Pydantic models for alias records, telemetry events and HTTP payloads."""

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

AliasName = Literal["orbit", "codemax", "echo", "vision"]
AliasStatus = Literal["healthy", "degraded"]
TaskType = Literal["chat", "code", "vision", "audio"]

TASK_TYPES: tuple[str, ...] = ("chat", "code", "vision", "audio")
DEFAULT_TELEMETRY_ALIAS = "orbit-v3.2"


class AliasLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_context: int = Field(gt=0)
    tokens_per_second: float = Field(gt=0)
    max_output: int = Field(gt=0)


class PublicAlias(BaseModel):
    """Alias record that is safe to hand to clients."""

    model_config = ConfigDict(frozen=True)

    alias_id: str
    alias_name: AliasName
    alias_version: str
    capabilities: tuple[str, ...]
    limits: AliasLimits
    default_temperature: float = Field(ge=0.0, le=2.0)
    status: AliasStatus = "healthy"


class RoutingPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    fallbacks: tuple[str, ...] = ()
    weights: dict[str, int] | None = None

    @field_validator("weights")
    @classmethod
    def non_negative_weights(cls, value: dict[str, int] | None) -> dict[str, int] | None:
        if value is not None and any(share < 0 for share in value.values()):
            raise ValueError("route weights must be non-negative")
        return value

    def ordered_routes(self) -> list[str]:
        return [self.primary, *self.fallbacks]


class PrivateResolution(BaseModel):
    """Server-only mapping from an alias to its backend. Never serialized to clients."""

    model_config = ConfigDict(frozen=True)

    alias_name: AliasName
    alias_version: str
    provider_id: str
    provider_model_id: str
    endpoint_ref: str
    key_ref: str
    routing_policy: RoutingPolicy

    def __repr__(self) -> str:
        return f"PrivateResolution(alias_name={self.alias_name!r}, alias_version={self.alias_version!r})"

    __str__ = __repr__


def _non_negative(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


class TelemetryEvent(BaseModel):
    """
    Usage or error record emitted for observability.

    Inputs are coerced rather than rejected: telemetry must never fail the
    caller, so malformed numbers become None and unknown task types fall back
    to "chat". The timestamp is stamped by the sink at emission.
    """

    alias: str = DEFAULT_TELEMETRY_ALIAS
    task_type: TaskType = "chat"
    latency_ms: float | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    cost_usd: float | None = None
    error_class: str | None = None

    @field_validator("alias", mode="before")
    @classmethod
    def default_alias(cls, value: Any) -> str:
        if isinstance(value, str) and value:
            return value
        return DEFAULT_TELEMETRY_ALIAS

    @field_validator("task_type", mode="before")
    @classmethod
    def known_task_type(cls, value: Any) -> str:
        return value if value in TASK_TYPES else "chat"

    @field_validator("latency_ms", "cost_usd", mode="before")
    @classmethod
    def non_negative_number(cls, value: Any) -> float | None:
        return _non_negative(value)

    @field_validator("input_tokens", "output_tokens", mode="before")
    @classmethod
    def non_negative_count(cls, value: Any) -> int | None:
        number = _non_negative(value)
        if number is None or number != int(number):
            return None
        return int(number)

    @field_validator("error_class", mode="before")
    @classmethod
    def optional_text(cls, value: Any) -> str | None:
        return str(value) if value else None


class AliasListResponse(BaseModel):
    aliases: list[PublicAlias]


class LiveConfigResponse(BaseModel):
    alias_id: str
    alias_name: AliasName
    alias_version: str
    capabilities: list[str]
    limits: AliasLimits
    status: AliasStatus
    live_url: str


class ErrorResponse(BaseModel):
    error: str
    alias_id: str | None = None


class LivenessResponse(BaseModel):
    status: Literal["ok"] = "ok"
    message: str
