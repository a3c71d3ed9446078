"""
Error taxonomy for aliasgate.

Raw backend and transport errors are classified where they are observed.
Only the ErrorKind and one of the fixed user-facing templates travel further;
the raw text never does.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    AUTH = "auth"
    TOOL_FAILURE = "tool_failure"
    SERVICE_UNAVAILABLE = "service_unavailable"


# First match wins; a message may contain terms from several kinds.
_CLASSIFICATION_ORDER: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.TIMEOUT, ("timeout",)),
    (ErrorKind.RATE_LIMITED, ("rate", "quota", "429")),
    (ErrorKind.AUTH, ("401", "403", "auth")),
    (ErrorKind.TOOL_FAILURE, ("tool",)),
)

_TEMPLATES: dict[ErrorKind, str] = {
    ErrorKind.TIMEOUT: "{alias} is taking longer than expected. Please try again.",
    ErrorKind.RATE_LIMITED: "{alias} is temporarily unavailable. Switching to a fallback route.",
}
_DEFAULT_TEMPLATE = "{alias} is temporarily unavailable. Please try again shortly."


def classify_error(message: str | None) -> ErrorKind:
    """Map a raw error message to an ErrorKind (service_unavailable when nothing matches)."""
    text = (message or "").lower()
    for kind, terms in _CLASSIFICATION_ORDER:
        if any(term in text for term in terms):
            return kind
    return ErrorKind.SERVICE_UNAVAILABLE


def user_message(alias_name: str, kind: ErrorKind) -> str:
    return _TEMPLATES.get(kind, _DEFAULT_TEMPLATE).format(alias=alias_name)


def user_facing_error(alias_name: str, raw_message: str | None) -> str:
    """Classify a raw message and render the template for it."""
    return user_message(alias_name, classify_error(raw_message))


class AliasgateError(Exception):
    """Base exception for aliasgate errors."""


class NotConnected(AliasgateError):
    """Raised when a session is used outside the connected state."""

    def __init__(self, alias_name: str) -> None:
        self.alias_name = alias_name
        self.kind = classify_error("not_connected")
        super().__init__(user_message(alias_name, self.kind))


class AliasNotFound(AliasgateError):
    """Raised by the gateway client when the gateway cannot resolve an alias."""

    def __init__(self, alias_id: str, message: str) -> None:
        self.alias_id = alias_id
        super().__init__(message)


class ConfigurationError(AliasgateError):
    """Raised when a production deployment still relies on development references."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing deployment references: {', '.join(missing)}")
