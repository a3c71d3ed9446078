"""
Realtime Session Client

Opens a duplex channel to the live endpoint of an alias, sends control and
media envelopes over it and turns inbound frames into SessionEvents.

Every failure is classified where it is observed; consumers only ever see
the templated user-facing message.
"""

import asyncio
import base64
import binascii
import contextlib
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed

from aliasgate.errors import NotConnected, classify_error, user_message
from aliasgate.events import (
    AudioReceived,
    Closed,
    ContentReceived,
    EventHub,
    InputTranscription,
    Interrupted,
    Opened,
    OutputTranscription,
    SessionError,
    SetupCompleted,
    Subscription,
    ToolCallCancelled,
    ToolCallReceived,
    TurnComplete,
)
from aliasgate.models import LiveConfigResponse, TaskType, TelemetryEvent
from aliasgate.redaction import redact_string
from aliasgate.telemetry import TelemetrySink
from aliasgate.wire import (
    ClientEnvelope,
    InboundMessage,
    MediaChunk,
    Part,
    ServerContent,
    ServerError,
    SessionConfig,
    SetupComplete,
    ToolCall,
    ToolCallCancellation,
    Unrecognized,
    normalize,
    partition_parts,
)

LOG = logging.getLogger(__name__)

DEFAULT_LIVE_PATH = "/aliasgate/live"
DEFAULT_ALIAS_ID = "echo-v1.0"
OPEN_TIMEOUT_SECONDS = 12.0
ALIAS_QUERY_FIELDS = ("alias_id", "alias_name", "alias_version")


class SessionStatus(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Connection(Protocol):
    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...


Connector = Callable[[str], Awaitable[Connection]]


def default_connector(url: str) -> Awaitable[Connection]:
    # The session enforces its own open timeout.
    return ws_connect(url, open_timeout=None)


def decode_audio(part: Part) -> bytes | None:
    data = part.get("inlineData", {}).get("data")
    if not isinstance(data, str) or not data:
        return None
    try:
        return base64.b64decode(data) or None
    except (binascii.Error, ValueError):
        LOG.warning("Dropping undecodable audio part (%d chars)", len(data))
        return None


@dataclass
class RealtimeSessionClient:
    """
    Client for one logical live session.

    Usage:
        client = RealtimeSessionClient("https://app.example.com/aliasgate/live")
        with client.subscribe() as events:
            if await client.connect(SessionConfig(alias_id="echo-v1.0")):
                await client.send({"text": "hello"})
                async for event in events:
                    ...
    """

    live_base_url: str = DEFAULT_LIVE_PATH
    origin: str | None = None
    telemetry: TelemetrySink | None = None
    open_timeout: float = OPEN_TIMEOUT_SECONDS
    connector: Connector = default_connector
    active_alias_id: str = DEFAULT_ALIAS_ID

    status: SessionStatus = field(default=SessionStatus.DISCONNECTED, init=False)
    websocket: Connection | None = field(default=None, init=False, repr=False)
    turn_started_at: float | None = field(default=None, init=False)
    hub: EventHub = field(default_factory=EventHub, init=False, repr=False)

    _attempt: asyncio.Future[bool] | None = field(default=None, init=False, repr=False)
    _open_task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _open_timer: asyncio.TimerHandle | None = field(default=None, init=False, repr=False)
    _reader_task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_live_config(cls, live: LiveConfigResponse, **kwargs: Any) -> "RealtimeSessionClient":
        return cls(live_base_url=live.live_url, active_alias_id=live.alias_id, **kwargs)

    @property
    def alias_name(self) -> str:
        return self.active_alias_id.split("-")[0] or "orbit"

    def subscribe(self) -> Subscription:
        return self.hub.subscribe()

    def build_socket_url(self, config: SessionConfig) -> str:
        """
        Resolve the channel URL for a session.

        Appends ``/live`` when missing, maps http(s) to ws(s), resolves a
        same-origin path against ``origin`` and sets the alias query
        parameters present in config.
        """
        base = (self.live_base_url or DEFAULT_LIVE_PATH).strip()
        if not base.endswith(("/live", "/live/")):
            base = f"{base.rstrip('/')}/live"

        if base.startswith("http://"):
            base = f"ws://{base.removeprefix('http://')}"
        elif base.startswith("https://"):
            base = f"wss://{base.removeprefix('https://')}"
        elif base.startswith("/"):
            if not self.origin:
                raise ValueError(f"Live path {base!r} needs an origin to resolve against")
            origin = urlsplit(self.origin)
            scheme = "wss" if origin.scheme in ("https", "wss") else "ws"
            base = f"{scheme}://{origin.netloc}{base}"

        parts = urlsplit(base)
        query = dict(parse_qsl(parts.query))
        for name in ALIAS_QUERY_FIELDS:
            value = getattr(config, name)
            if value:
                query[name] = value
        return urlunsplit(parts._replace(query=urlencode(query)))

    async def connect(self, config: SessionConfig) -> bool:
        """
        Open the channel and start the session.

        Returns False without doing anything while a connection is open or
        being opened. Otherwise returns True once session.start has been
        sent and False on any failure, including an open that exceeds
        open_timeout. Failures are published as SessionError.
        """
        if self.status is not SessionStatus.DISCONNECTED:
            return False

        self.active_alias_id = config.alias_id or self.active_alias_id
        try:
            url = self.build_socket_url(config)
        except ValueError as exc:
            LOG.warning("Cannot resolve live channel URL: %s", exc)
            self._fail("connect_failed")
            return False

        self.status = SessionStatus.CONNECTING
        LOG.info("Connecting live session for %s", self.active_alias_id)

        loop = asyncio.get_running_loop()
        attempt: asyncio.Future[bool] = loop.create_future()
        self._attempt = attempt
        self._open_timer = loop.call_later(self.open_timeout, self._on_open_timeout, attempt)
        self._open_task = asyncio.create_task(self._open(url, config, attempt))

        try:
            return await attempt
        except asyncio.CancelledError:
            self._abort_open()
            self.status = SessionStatus.DISCONNECTED
            raise
        finally:
            if self._attempt is attempt:
                self._attempt = None

    async def disconnect(self) -> bool:
        """Stop the session from any state. Safe to call repeatedly."""
        self._abort_open()
        if self._attempt is not None:
            self._settle(self._attempt, False)
            self._attempt = None

        websocket, self.websocket = self.websocket, None
        self.status = SessionStatus.DISCONNECTED
        self.turn_started_at = None

        if websocket is not None:
            with contextlib.suppress(ConnectionClosed):
                await websocket.send(ClientEnvelope(type="session.stop").dumps())
            await websocket.close()

        reader, self._reader_task = self._reader_task, None
        if reader is not None and reader is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await reader

        LOG.info("Live session for %s disconnected", self.active_alias_id)
        return True

    async def send(self, parts: Part | list[Part], turn_complete: bool = True) -> None:
        """Send client content. Raises NotConnected outside the connected state."""
        self._require_connected()
        self._mark_turn_start()
        turns = parts if isinstance(parts, list) else [parts]
        await self._send_wire(
            ClientEnvelope(
                type="session.client_content",
                payload={"turns": turns, "turnComplete": turn_complete},
            )
        )

    async def send_realtime_input(self, chunks: Sequence[MediaChunk]) -> None:
        """Stream media chunks. Raises NotConnected outside the connected state."""
        self._require_connected()
        self._mark_turn_start()
        await self._send_wire(
            ClientEnvelope(
                type="session.realtime_input",
                payload={"chunks": [chunk.to_wire() for chunk in chunks]},
            )
        )

        task_type: TaskType = "vision" if any(chunk.is_image for chunk in chunks) else "audio"
        self._emit_telemetry(task_type)

    async def send_tool_response(self, function_responses: list[dict[str, Any]]) -> None:
        self._require_connected()
        await self._send_wire(
            ClientEnvelope(
                type="session.tool_response",
                payload={"functionResponses": function_responses},
            )
        )

    async def _open(self, url: str, config: SessionConfig, attempt: asyncio.Future[bool]) -> None:
        try:
            websocket = await self.connector(url)
        except Exception as exc:
            LOG.warning("Live channel failed to open: %s", redact_string(str(exc)))
            if self._settle(attempt, False):
                self._clear_open_timer()
                self._fail(str(exc) or "connect_failed")
            return

        if attempt.done():
            LOG.debug("Closing live channel that opened after the attempt settled")
            await websocket.close()
            return

        self._clear_open_timer()
        self.websocket = websocket
        self.status = SessionStatus.CONNECTED
        self.hub.publish(Opened())
        self._reader_task = asyncio.create_task(self._read(websocket))

        try:
            await self._send_wire(
                ClientEnvelope(type="session.start", payload={"config": config.to_wire()})
            )
        except NotConnected:
            self._settle(attempt, False)
            return

        self._settle(attempt, True)
        LOG.info("Live session for %s connected", self.active_alias_id)

    def _on_open_timeout(self, attempt: asyncio.Future[bool]) -> None:
        self._open_timer = None
        if attempt.done() or self.status is not SessionStatus.CONNECTING:
            return

        LOG.warning("Live channel did not open within %.1fs", self.open_timeout)
        if self._open_task is not None:
            self._open_task.cancel()
        self._settle(attempt, False)
        self._fail("timeout")

    async def _read(self, websocket: Connection) -> None:
        try:
            async for raw in websocket:
                message = normalize(raw)
                if isinstance(message, ServerError):
                    self._fail(message.message or "session_error")
                    await websocket.close()
                    break
                self._dispatch(message)
        except ConnectionClosed as exc:
            if self.websocket is websocket:
                self._fail(str(exc))
        except Exception:
            LOG.exception("Error in live session for %s", self.active_alias_id)
            if self.websocket is websocket:
                self._fail("transport_error")
        finally:
            if self.websocket is websocket:
                self.websocket = None
                self.status = SessionStatus.DISCONNECTED
            self.hub.publish(Closed())

    def _dispatch(self, message: InboundMessage) -> None:
        match message:
            case SetupComplete():
                self.hub.publish(SetupCompleted())
            case ToolCall(function_calls=calls):
                self.hub.publish(ToolCallReceived(calls))
            case ToolCallCancellation(ids=ids):
                self.hub.publish(ToolCallCancelled(ids))
            case ServerContent():
                self._handle_content(message)
            case Unrecognized(reason=reason):
                LOG.debug("Dropping inbound message: %s", reason)

    def _handle_content(self, content: ServerContent) -> None:
        if content.interrupted:
            self.hub.publish(Interrupted())
            return

        if content.input_transcription is not None:
            transcription = content.input_transcription
            self.hub.publish(InputTranscription(transcription.text, transcription.is_final))

        if content.output_transcription is not None:
            transcription = content.output_transcription
            self.hub.publish(OutputTranscription(transcription.text, transcription.is_final))

        if content.model_turn is not None:
            audio_parts, other_parts = partition_parts(content.model_turn)
            # Audio goes straight to playback, one event per frame.
            for part in audio_parts:
                data = decode_audio(part)
                if data is not None:
                    self.hub.publish(AudioReceived(data))
            if other_parts:
                self.hub.publish(ContentReceived(other_parts))

        if content.turn_complete:
            latency_ms = None
            if self.turn_started_at is not None:
                latency_ms = round((time.monotonic() - self.turn_started_at) * 1000)
            self.turn_started_at = None
            self.hub.publish(TurnComplete(latency_ms))
            self._emit_telemetry("audio", latency_ms=latency_ms)

    def _fail(self, raw_message: str) -> None:
        """Classify a raw failure, report it and drop to disconnected."""
        kind = classify_error(raw_message)
        self.status = SessionStatus.DISCONNECTED
        LOG.info("Live session for %s failed (%s)", self.active_alias_id, kind)
        self._emit_telemetry("audio", error_class=kind)
        self.hub.publish(SessionError(message=user_message(self.alias_name, kind), kind=kind))

    def _settle(self, attempt: asyncio.Future[bool], value: bool) -> bool:
        """Resolve a connect attempt; only the first settlement counts."""
        if attempt.done():
            return False
        attempt.set_result(value)
        return True

    def _abort_open(self) -> None:
        self._clear_open_timer()
        if self._open_task is not None and not self._open_task.done():
            self._open_task.cancel()
        self._open_task = None

    def _clear_open_timer(self) -> None:
        if self._open_timer is not None:
            self._open_timer.cancel()
            self._open_timer = None

    def _require_connected(self) -> None:
        if self.websocket is None or self.status is not SessionStatus.CONNECTED:
            raise NotConnected(self.alias_name)

    def _mark_turn_start(self) -> None:
        if self.turn_started_at is None:
            self.turn_started_at = time.monotonic()

    async def _send_wire(self, envelope: ClientEnvelope) -> None:
        """Send one envelope; a dropped channel fails the session and raises NotConnected."""
        websocket = self.websocket
        if websocket is None:
            return
        try:
            await websocket.send(envelope.dumps())
        except ConnectionClosed as exc:
            if self.websocket is websocket:
                self.websocket = None
                self._fail(str(exc))
            await websocket.close()
            raise NotConnected(self.alias_name) from exc

    def _emit_telemetry(self, task_type: TaskType, **fields: Any) -> None:
        if self.telemetry is None:
            return
        self.telemetry.emit(TelemetryEvent(alias=self.active_alias_id, task_type=task_type, **fields))
