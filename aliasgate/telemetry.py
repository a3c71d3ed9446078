"""
Telemetry sink.

emit() is synchronous and never raises: it coerces the event, stamps a
timestamp, redacts it and writes one JSON line to the
``aliasgate.telemetry.events`` logger. Diagnostics go to this module's own
logger. When the sink is running, the same payload is queued for the
asynchronous writers (Redis list, gateway HTTP endpoint). A full queue drops
the event; a failing writer is logged and skipped.
"""

import asyncio
import contextlib
import json
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from aliasgate.client import GatewayClient

from aliasgate.config import AliasgateConfig
from aliasgate.models import TelemetryEvent
from aliasgate.redaction import redact

LOG = logging.getLogger(__name__)
TELEMETRY_LOG = logging.getLogger("aliasgate.telemetry.events")


class TelemetryWriter(Protocol):
    async def write(self, payload: dict[str, Any]) -> None: ...


@dataclass
class RedisListWriter:
    """Push telemetry lines onto a capped Redis list."""

    redis: "Redis"
    list_name: str = "aliasgate:telemetry"
    max_len: int = 10_000

    async def write(self, payload: dict[str, Any]) -> None:
        await self.redis.lpush(self.list_name, json.dumps(payload, separators=(",", ":")))
        await self.redis.ltrim(self.list_name, 0, self.max_len - 1)


@dataclass
class HttpWriter:
    """Deliver telemetry to the gateway log ingestion endpoint."""

    client: "GatewayClient"

    async def write(self, payload: dict[str, Any]) -> None:
        await self.client.send_log(payload)


def build_payload(event: TelemetryEvent | Mapping[str, Any]) -> dict[str, Any]:
    """Coerce, timestamp and redact an event into the dict that gets written."""
    if not isinstance(event, TelemetryEvent):
        try:
            event = TelemetryEvent.model_validate(dict(event))
        except ValidationError:
            LOG.debug("Discarding malformed telemetry fields")
            event = TelemetryEvent()

    payload = event.model_dump(exclude_none=True)
    payload["timestamp"] = datetime.now(UTC).isoformat(timespec="milliseconds")
    return redact(payload)


@dataclass
class TelemetrySink:
    """
    Fire-and-forget telemetry emitter.

    Usage:
        sink = TelemetrySink(writers=[RedisListWriter(redis)])
        async with sink.running():
            sink.emit(TelemetryEvent(alias="echo-v1.0", task_type="audio"))
    """

    writers: list[TelemetryWriter] = field(default_factory=list)
    queue_size: int = 1_000
    drain_timeout: float = 1.0
    dropped: int = field(default=0, init=False)
    queue: asyncio.Queue[dict[str, Any]] | None = field(default=None, init=False)

    @classmethod
    def from_config(cls, config: AliasgateConfig, redis: "Redis | None" = None) -> "TelemetrySink":
        writers: list[TelemetryWriter] = []
        if redis is not None:
            writers.append(
                RedisListWriter(
                    redis,
                    list_name=config.telemetry_list,
                    max_len=config.telemetry_list_max_len,
                )
            )
        return cls(writers=writers, queue_size=config.telemetry_queue_size)

    def emit(self, event: TelemetryEvent | Mapping[str, Any]) -> dict[str, Any] | None:
        """Emit one event. Returns the written payload, or None if emission failed."""
        try:
            payload = build_payload(event)
            TELEMETRY_LOG.info(json.dumps(payload, separators=(",", ":"), default=str))
        except Exception:
            LOG.exception("Failed to emit telemetry event")
            return None

        if self.queue is not None and self.writers:
            try:
                self.queue.put_nowait(payload)
            except asyncio.QueueFull:
                self.dropped += 1
                LOG.debug("Telemetry queue full, dropped %d events so far", self.dropped)
        return payload

    @asynccontextmanager
    async def running(self) -> AsyncIterator["TelemetrySink"]:
        """Run the delivery worker for the duration of the context."""
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=self.queue_size)
        self.queue = queue
        worker = asyncio.create_task(self.deliver(queue))

        try:
            yield self
        finally:
            self.queue = None
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(queue.join(), timeout=self.drain_timeout)
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker

    async def deliver(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        while True:
            payload = await queue.get()
            try:
                for writer in self.writers:
                    await self.write_one(writer, payload)
            finally:
                queue.task_done()

    async def write_one(self, writer: TelemetryWriter, payload: dict[str, Any]) -> None:
        try:
            await writer.write(payload)
        except Exception:
            LOG.debug("Telemetry writer %s failed", type(writer).__name__, exc_info=True)
