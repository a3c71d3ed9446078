"""Session events delivered to consumers of RealtimeSessionClient."""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from aliasgate.wire import Part

LOG = logging.getLogger(__name__)

MAX_PENDING_EVENTS = 1_000


@dataclass(frozen=True)
class Opened:
    pass


@dataclass(frozen=True)
class SetupCompleted:
    pass


@dataclass(frozen=True)
class ToolCallReceived:
    function_calls: list[dict[str, Any]]


@dataclass(frozen=True)
class ToolCallCancelled:
    ids: list[str]


@dataclass(frozen=True)
class Interrupted:
    pass


@dataclass(frozen=True)
class InputTranscription:
    text: str
    is_final: bool


@dataclass(frozen=True)
class OutputTranscription:
    text: str
    is_final: bool


@dataclass(frozen=True)
class AudioReceived:
    data: bytes


@dataclass(frozen=True)
class ContentReceived:
    parts: list[Part]


@dataclass(frozen=True)
class TurnComplete:
    latency_ms: int | None = None


@dataclass(frozen=True)
class SessionError:
    """Carries the user-facing message only; raw transport detail is never attached."""

    message: str
    kind: str


@dataclass(frozen=True)
class Closed:
    pass


SessionEvent = (
    Opened
    | SetupCompleted
    | ToolCallReceived
    | ToolCallCancelled
    | Interrupted
    | InputTranscription
    | OutputTranscription
    | AudioReceived
    | ContentReceived
    | TurnComplete
    | SessionError
    | Closed
)


@dataclass(eq=False)
class Subscription:
    """
    One listener's view of the event stream.

    The queue is bounded; when a listener falls behind, the oldest event is
    discarded to make room and counted in ``dropped``.

    Usage:
        with client.subscribe() as events:
            async for event in events:
                ...
    """

    hub: "EventHub"
    queue: asyncio.Queue[SessionEvent] = field(default_factory=asyncio.Queue)
    dropped: int = 0

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __aiter__(self) -> AsyncIterator[SessionEvent]:
        return self

    async def __anext__(self) -> SessionEvent:
        return await self.queue.get()

    async def get(self) -> SessionEvent:
        return await self.queue.get()

    def drain(self) -> list[SessionEvent]:
        """Return every event queued so far without waiting."""
        events = []
        while not self.queue.empty():
            events.append(self.queue.get_nowait())
        return events

    def put(self, event: SessionEvent) -> None:
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
            LOG.debug("Subscriber behind, dropped %d events so far", self.dropped)
        self.queue.put_nowait(event)

    def close(self) -> None:
        self.hub.unsubscribe(self)


@dataclass(eq=False)
class EventHub:
    queue_size: int = MAX_PENDING_EVENTS
    subscriptions: list[Subscription] = field(default_factory=list)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, asyncio.Queue(maxsize=self.queue_size))
        self.subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self.subscriptions:
            self.subscriptions.remove(subscription)

    def publish(self, event: SessionEvent) -> None:
        LOG.debug("Session event %s", type(event).__name__)
        for subscription in self.subscriptions:
            subscription.put(event)
