"""
aliasgate - Vendor-neutral alias gateway for live sessions

Exposes a stable alias catalog to clients, resolves each alias to a private
backend configuration that never leaves the server, redacts vendor/model
identifiers and secrets from everything it logs, and reduces backend and
transport failures to a small set of user-safe messages.
"""

from aliasgate.catalog import (
    get_public_alias,
    list_public_aliases,
    resolve_private_alias,
)
from aliasgate.client import GatewayClient
from aliasgate.config import AliasgateConfig
from aliasgate.errors import (
    AliasgateError,
    AliasNotFound,
    ConfigurationError,
    ErrorKind,
    NotConnected,
    classify_error,
    user_facing_error,
    user_message,
)
from aliasgate.models import (
    LiveConfigResponse,
    PrivateResolution,
    PublicAlias,
    TelemetryEvent,
)
from aliasgate.redaction import redact
from aliasgate.session import RealtimeSessionClient, SessionStatus
from aliasgate.telemetry import TelemetrySink
from aliasgate.wire import MediaChunk, SessionConfig

__all__ = [
    # Catalog
    "get_public_alias",
    "list_public_aliases",
    "resolve_private_alias",
    # Clients
    "GatewayClient",
    "RealtimeSessionClient",
    "SessionStatus",
    "SessionConfig",
    "MediaChunk",
    # Config
    "AliasgateConfig",
    # Models
    "LiveConfigResponse",
    "PrivateResolution",
    "PublicAlias",
    "TelemetryEvent",
    # Redaction and telemetry
    "redact",
    "TelemetrySink",
    # Errors
    "AliasgateError",
    "AliasNotFound",
    "ConfigurationError",
    "ErrorKind",
    "NotConnected",
    "classify_error",
    "user_facing_error",
    "user_message",
]

__version__ = "0.1.0"
