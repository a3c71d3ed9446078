"""
Alias catalog and private resolution.

The public catalog is static and safe to expose. Each alias has exactly one
private resolution whose provider/endpoint/key references come from
deployment configuration, falling back to development placeholders.
"""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from aliasgate.config import AliasgateConfig
from aliasgate.errors import ConfigurationError
from aliasgate.models import AliasLimits, PrivateResolution, PublicAlias, RoutingPolicy

LOG = logging.getLogger(__name__)

PUBLIC_ALIAS_CATALOG: tuple[PublicAlias, ...] = (
    PublicAlias(
        alias_id="orbit-v3.2",
        alias_name="orbit",
        alias_version="v3.2",
        capabilities=(
            "Reasoning: long-context",
            "Reasoning: tool use",
            "Reasoning: structured output",
        ),
        limits=AliasLimits(max_context=128000, tokens_per_second=70, max_output=8192),
        default_temperature=0.2,
        status="healthy",
    ),
    PublicAlias(
        alias_id="codemax-v2.4",
        alias_name="codemax",
        alias_version="v2.4",
        capabilities=(
            "Code: repo-aware edits",
            "Code: patch generation",
            "Code: refactor support",
        ),
        limits=AliasLimits(max_context=256000, tokens_per_second=50, max_output=8192),
        default_temperature=0.1,
        status="healthy",
    ),
    PublicAlias(
        alias_id="vision-v1.1",
        alias_name="vision",
        alias_version="v1.1",
        capabilities=(
            "Vision: image understanding",
            "Vision: OCR-like extraction",
            "Vision: chart reading",
        ),
        limits=AliasLimits(max_context=64000, tokens_per_second=40, max_output=4096),
        default_temperature=0.2,
        status="healthy",
    ),
    PublicAlias(
        alias_id="echo-v1.0",
        alias_name="echo",
        alias_version="v1.0",
        capabilities=(
            "Audio: speech-to-text",
            "Audio: text-to-speech",
            "Audio: conversational turn-taking",
        ),
        limits=AliasLimits(max_context=64000, tokens_per_second=35, max_output=4096),
        default_temperature=0.3,
        status="healthy",
    ),
)


@dataclass(frozen=True)
class _ResolutionDefaults:
    provider_id: str
    provider_model_id: str
    endpoint_ref: str
    key_ref: str
    routing_policy: RoutingPolicy


# Development placeholders. Production deployments override every reference.
_RESOLUTION_DEFAULTS: dict[str, _ResolutionDefaults] = {
    "orbit-v3.2": _ResolutionDefaults(
        provider_id="provider-orbit-primary",
        provider_model_id="model-orbit-reasoning",
        endpoint_ref="endpoint://orbit-primary",
        key_ref="secret://orbit-key",
        routing_policy=RoutingPolicy(
            primary="orbit-primary-route",
            fallbacks=("orbit-fallback-route-a", "orbit-fallback-route-b"),
            weights={
                "orbit-primary-route": 90,
                "orbit-fallback-route-a": 7,
                "orbit-fallback-route-b": 3,
            },
        ),
    ),
    "codemax-v2.4": _ResolutionDefaults(
        provider_id="provider-codemax-primary",
        provider_model_id="model-codemax-code",
        endpoint_ref="endpoint://codemax-primary",
        key_ref="secret://codemax-key",
        routing_policy=RoutingPolicy(
            primary="codemax-primary-route",
            fallbacks=("codemax-fallback-route-a",),
            weights={"codemax-primary-route": 95, "codemax-fallback-route-a": 5},
        ),
    ),
    "vision-v1.1": _ResolutionDefaults(
        provider_id="provider-vision-primary",
        provider_model_id="model-vision-image",
        endpoint_ref="endpoint://vision-primary",
        key_ref="secret://vision-key",
        routing_policy=RoutingPolicy(
            primary="vision-primary-route",
            fallbacks=("vision-fallback-route-a",),
            weights={"vision-primary-route": 92, "vision-fallback-route-a": 8},
        ),
    ),
    "echo-v1.0": _ResolutionDefaults(
        provider_id="provider-echo-primary",
        provider_model_id="model-echo-audio",
        endpoint_ref="endpoint://echo-primary",
        key_ref="secret://echo-key",
        routing_policy=RoutingPolicy(
            primary="echo-primary-route",
            fallbacks=("echo-fallback-route-a",),
            weights={"echo-primary-route": 90, "echo-fallback-route-a": 10},
        ),
    ),
}

REFERENCE_FIELDS: tuple[str, ...] = ("provider_id", "provider_model_id", "endpoint_ref", "key_ref")


def list_public_aliases() -> list[PublicAlias]:
    return list(PUBLIC_ALIAS_CATALOG)


def get_public_alias(alias_id: str) -> PublicAlias | None:
    for alias in PUBLIC_ALIAS_CATALOG:
        if alias.alias_id == alias_id:
            return alias
    return None


def resolve_private_alias(
    alias_id: str,
    config: AliasgateConfig | None = None,
) -> PrivateResolution | None:
    """
    Resolve an alias to its private backend configuration.

    Returns None when the alias has no resolution; callers decide whether
    that is a not-found condition.
    """
    defaults = _RESOLUTION_DEFAULTS.get(alias_id)
    public = get_public_alias(alias_id)
    if defaults is None or public is None:
        return None

    if config is None:
        config = AliasgateConfig()
    overrides = config.overrides_for(public.alias_name)

    return PrivateResolution(
        alias_name=public.alias_name,
        alias_version=public.alias_version,
        provider_id=overrides.provider_id or defaults.provider_id,
        provider_model_id=overrides.provider_model_id or defaults.provider_model_id,
        endpoint_ref=overrides.endpoint_ref or defaults.endpoint_ref,
        key_ref=overrides.key_ref or defaults.key_ref,
        routing_policy=defaults.routing_policy,
    )


def choose_route(
    policy: RoutingPolicy,
    rand: Callable[[], float] = random.random,
) -> str:
    """Pick a route id by weight; the primary wins when no positive weights exist."""
    routes = policy.ordered_routes()
    weights = policy.weights or {}
    shares = [(route, weights.get(route, 0)) for route in routes]
    total = sum(share for _, share in shares)
    if total <= 0:
        return policy.primary

    point = rand() * total
    for route, share in shares:
        if point < share:
            return route
        point -= share
    return next(route for route, share in reversed(shares) if share > 0)


def default_reference_fields(config: AliasgateConfig) -> list[str]:
    """List "<alias_name>.<field>" for every reference still on its development default."""
    missing = []
    for alias in PUBLIC_ALIAS_CATALOG:
        overrides = config.overrides_for(alias.alias_name)
        for name in REFERENCE_FIELDS:
            if not getattr(overrides, name):
                missing.append(f"{alias.alias_name}.{name}")
    return missing


def check_deployment(config: AliasgateConfig) -> list[str]:
    """
    Report aliases that would resolve to development placeholders.

    Logs a warning per missing reference. In production the gap is fatal
    and ConfigurationError is raised.
    """
    missing = default_reference_fields(config)
    for reference in missing:
        LOG.warning("Alias reference %s uses a development default", reference)
    if missing and config.is_production:
        raise ConfigurationError(missing)
    return missing
