"""
Realtime channel envelopes.

Outbound messages are ``{type, payload}`` envelopes. Inbound frames arrive
either in the structured shape (``setupComplete`` / ``toolCall`` /
``toolCallCancellation`` / ``serverContent``) or in the typed ``session.*``
shape; normalize() maps both onto one tagged union. Anything it cannot map
becomes Unrecognized.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from aliasgate.models import AliasName, LiveConfigResponse

Part = dict[str, Any]

AUDIO_MIME_PREFIX = "audio/pcm"

ClientMessageType = Literal[
    "session.start",
    "session.stop",
    "session.client_content",
    "session.realtime_input",
    "session.tool_response",
]


class ClientEnvelope(BaseModel):
    type: ClientMessageType
    payload: dict[str, Any] | None = None

    def dumps(self) -> str:
        return self.model_dump_json(exclude_none=True)


class SessionConfig(BaseModel):
    """
    Config sent with session.start.

    Alias fields select the query parameters of the channel URL; any other
    field (response modalities, speech config, system instruction) is passed
    through untouched.
    """

    model_config = ConfigDict(extra="allow")

    alias_id: str | None = None
    alias_name: AliasName | None = None
    alias_version: str | None = None

    @classmethod
    def from_live_config(cls, live: LiveConfigResponse, **settings: Any) -> "SessionConfig":
        return cls(
            alias_id=live.alias_id,
            alias_name=live.alias_name,
            alias_version=live.alias_version,
            **settings,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


@dataclass(frozen=True)
class MediaChunk:
    mime_type: str
    data: str

    @property
    def is_image(self) -> bool:
        return "image" in self.mime_type

    def to_wire(self) -> dict[str, str]:
        return {"mimeType": self.mime_type, "data": self.data}


@dataclass(frozen=True)
class Transcription:
    text: str
    is_final: bool = False


@dataclass(frozen=True)
class SetupComplete:
    pass


@dataclass(frozen=True)
class ToolCall:
    function_calls: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class ToolCallCancellation:
    ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ServerContent:
    interrupted: bool = False
    input_transcription: Transcription | None = None
    output_transcription: Transcription | None = None
    model_turn: list[Part] | None = None
    turn_complete: bool = False


@dataclass(frozen=True)
class ServerError:
    message: str | None = None


@dataclass(frozen=True)
class Unrecognized:
    reason: str


InboundMessage = (
    SetupComplete | ToolCall | ToolCallCancellation | ServerContent | ServerError | Unrecognized
)


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _transcription(value: Any) -> Transcription | None:
    if not isinstance(value, dict):
        return None
    return Transcription(text=str(value.get("text") or ""), is_final=bool(value.get("isFinal", False)))


def parse_tool_call(value: Any) -> ToolCall:
    calls = _mapping(value).get("functionCalls")
    if not isinstance(calls, list):
        calls = []
    return ToolCall(function_calls=[call for call in calls if isinstance(call, dict)])


def parse_tool_call_cancellation(value: Any) -> ToolCallCancellation:
    ids = _mapping(value).get("ids")
    if not isinstance(ids, list):
        ids = []
    return ToolCallCancellation(ids=[str(item) for item in ids])


def parse_server_content(value: Any) -> ServerContent:
    content = _mapping(value)
    model_turn = content.get("modelTurn")
    parts = None
    if isinstance(model_turn, dict):
        raw_parts = model_turn.get("parts")
        parts = [part for part in raw_parts if isinstance(part, dict)] if isinstance(raw_parts, list) else []

    return ServerContent(
        interrupted=bool(content.get("interrupted", False)),
        input_transcription=_transcription(content.get("inputTranscription")),
        output_transcription=_transcription(content.get("outputTranscription")),
        model_turn=parts,
        turn_complete=bool(content.get("turnComplete", False)),
    )


def _normalize_structured(message: dict[str, Any]) -> InboundMessage:
    # Presence decides the kind; backends send empty objects such as {"setupComplete": {}}.
    if message.get("setupComplete") not in (None, False):
        return SetupComplete()
    if message.get("toolCall") is not None:
        return parse_tool_call(message["toolCall"])
    if message.get("toolCallCancellation") is not None:
        return parse_tool_call_cancellation(message["toolCallCancellation"])
    if isinstance(message.get("serverContent"), dict):
        return parse_server_content(message["serverContent"])
    return Unrecognized("empty structured message")


def _normalize_typed(message: dict[str, Any]) -> InboundMessage:
    message_type = message.get("type")
    payload = message.get("payload")
    if payload is None:
        payload = message.get("data")
    payload = _mapping(payload)

    match message_type:
        case "session.error":
            error = payload.get("message") or message.get("message")
            return ServerError(message=str(error) if error else None)
        case "session.setup_complete":
            return SetupComplete()
        case "session.tool_call":
            return parse_tool_call(payload)
        case "session.tool_call_cancellation":
            return parse_tool_call_cancellation(payload)
        case "session.interrupted":
            return ServerContent(interrupted=True)
        case "session.turn_complete":
            return ServerContent(turn_complete=True)
        case "session.input_transcription":
            return ServerContent(input_transcription=_transcription(payload))
        case "session.output_transcription":
            return ServerContent(output_transcription=_transcription(payload))
        case "session.audio":
            data = payload.get("data") or payload.get("base64") or ""
            return ServerContent(
                model_turn=[{"inlineData": {"mimeType": AUDIO_MIME_PREFIX, "data": data}}]
            )
        case "session.content":
            return parse_server_content(payload)
        case _:
            return Unrecognized(f"unknown message type {message_type!r}")


STRUCTURED_KEYS = ("setupComplete", "toolCall", "toolCallCancellation", "serverContent")


def normalize(raw: str | bytes | dict[str, Any]) -> InboundMessage:
    """Map one inbound frame onto the InboundMessage union. Never raises."""
    message: Any = raw
    if isinstance(raw, str | bytes):
        try:
            message = json.loads(raw)
        except ValueError:
            return Unrecognized("invalid JSON")

    if not isinstance(message, dict):
        return Unrecognized("not an object")

    if any(key in message for key in STRUCTURED_KEYS):
        return _normalize_structured(message)
    return _normalize_typed(message)


def is_audio_part(part: Part) -> bool:
    inline = part.get("inlineData")
    if not isinstance(inline, dict):
        return False
    mime_type = inline.get("mimeType")
    return isinstance(mime_type, str) and mime_type.startswith(AUDIO_MIME_PREFIX)


def partition_parts(parts: list[Part]) -> tuple[list[Part], list[Part]]:
    """Split model-turn parts into (audio parts, everything else), preserving order."""
    audio: list[Part] = []
    other: list[Part] = []
    for part in parts:
        (audio if is_audio_part(part) else other).append(part)
    return audio, other
