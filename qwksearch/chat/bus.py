"""Ordered fan-out of one handler's events to independent consumers."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing

from .constants import STREAM_FAILURE_MESSAGE
from .stream import StreamEvent

LOGGER = logging.getLogger(__name__)


class EventSubscription:
    """Consumer side of the bus: yields events in emission order until a terminal one."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
        self._detached = False
        self._finished = False

    @property
    def detached(self) -> bool:
        return self._detached

    @property
    def finished(self) -> bool:
        """True once the terminal event has been handed to the consumer."""

        return self._finished

    def deliver(self, event: StreamEvent) -> None:
        if not self._detached:
            self._queue.put_nowait(event)

    def detach(self) -> None:
        """Stop receiving events; the other subscribers are unaffected."""

        self._detached = True

    def __aiter__(self) -> "EventSubscription":
        return self

    async def __anext__(self) -> StreamEvent:
        if self._finished:
            raise StopAsyncIteration
        event = await self._queue.get()
        if event.terminal:
            self._finished = True
        return event


class AnswerEventBus:
    """Single producer, many subscribers, one request.

    Every subscriber owns an unbounded queue so a lagging consumer (a slow
    database write or a slow client socket) never holds back the others. The
    bus guarantees that exactly one terminal event closes the sequence: a
    handler that returns without one gets ``messageEnd`` and a handler that
    raises gets ``error``.
    """

    def __init__(self, name: str = "answer") -> None:
        self.name = name
        self._subscriptions: list[EventSubscription] = []
        self._started = False
        self._closed = False
        self._published = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def published(self) -> int:
        return self._published

    def subscribe(self, name: str) -> EventSubscription:
        if self._started:
            raise RuntimeError("Cannot subscribe after the producer started")
        subscription = EventSubscription(name)
        self._subscriptions.append(subscription)
        return subscription

    def publish(self, event: StreamEvent) -> None:
        if self._closed:
            raise RuntimeError(f"Event bus {self.name} already terminated")
        self._published += 1
        for subscription in self._subscriptions:
            subscription.deliver(event)
        if event.terminal:
            self._closed = True

    async def pump(self, source: AsyncGenerator[StreamEvent, None]) -> None:
        """Drain ``source`` into every subscriber, closing it after the terminal event."""

        self._started = True
        try:
            async with aclosing(source) as events:
                async for event in events:
                    self.publish(event)
                    if event.terminal:
                        break
        except asyncio.CancelledError:
            if not self._closed:
                self.publish(StreamEvent.error(STREAM_FAILURE_MESSAGE))
            raise
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Answer producer failed | bus=%s events=%d", self.name, self._published, exc_info=exc)
            if not self._closed:
                self.publish(StreamEvent.error(str(exc) or STREAM_FAILURE_MESSAGE))
        else:
            if not self._closed:
                self.publish(StreamEvent.message_end())

    def start(self, source: AsyncGenerator[StreamEvent, None]) -> asyncio.Task[None]:
        self._started = True
        return asyncio.create_task(self.pump(source), name=f"answer-bus-{self.name}")


__all__ = ["AnswerEventBus", "EventSubscription"]
