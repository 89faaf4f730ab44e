"""Answer event bus ordering and termination tests."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator

import pytest

from qwksearch.chat.bus import AnswerEventBus, EventSubscription
from qwksearch.chat.stream import StreamEvent, encode_frame


async def _drain(subscription: EventSubscription) -> list[StreamEvent]:
    return [event async for event in subscription]


async def _scripted(events: list[StreamEvent], *, fail_after: bool = False) -> AsyncGenerator[StreamEvent, None]:
    for event in events:
        await asyncio.sleep(0)
        yield event
    if fail_after:
        raise RuntimeError("model connection reset")


def _run_bus(source: AsyncGenerator[StreamEvent, None], *, subscribers: int = 2) -> list[list[StreamEvent]]:
    async def _run() -> list[list[StreamEvent]]:
        bus = AnswerEventBus()
        subscriptions = [bus.subscribe(f"consumer-{index}") for index in range(subscribers)]
        producer = bus.start(source)
        drained = await asyncio.gather(*(_drain(subscription) for subscription in subscriptions))
        await producer
        return list(drained)

    return asyncio.run(_run())


def test_every_subscriber_sees_emission_order() -> None:
    events = [
        StreamEvent.response("Paris "),
        StreamEvent.sources([{"url": "https://paris.fr"}]),
        StreamEvent.response("is the capital [1]."),
        StreamEvent.message_end(),
    ]

    network, persistence = _run_bus(_scripted(events))

    assert network == events
    assert persistence == events


def test_missing_terminal_event_is_completed_with_message_end() -> None:
    network, _ = _run_bus(_scripted([StreamEvent.response("partial")]))

    assert [event.type for event in network] == ["response", "messageEnd"]


def test_producer_failure_becomes_single_error_event() -> None:
    network, persistence = _run_bus(_scripted([StreamEvent.response("Par")], fail_after=True))

    assert [event.type for event in network] == ["response", "error"]
    assert network[-1].data == "model connection reset"
    assert persistence == network


def test_events_after_terminal_are_dropped() -> None:
    events = [
        StreamEvent.response("done"),
        StreamEvent.message_end(),
        StreamEvent.response("late"),
        StreamEvent.error("late failure"),
    ]

    (network,) = _run_bus(_scripted(events), subscribers=1)

    assert [event.type for event in network] == ["response", "messageEnd"]


def test_detached_subscriber_does_not_hold_back_the_others() -> None:
    async def _run() -> tuple[list[StreamEvent], int]:
        bus = AnswerEventBus()
        network = bus.subscribe("network")
        persistence = bus.subscribe("persistence")
        network.detach()
        producer = bus.start(_scripted([StreamEvent.response(str(index)) for index in range(50)]))
        stored = await _drain(persistence)
        await producer
        return stored, bus.published

    stored, published = asyncio.run(_run())

    assert len(stored) == 51
    assert published == 51


def test_subscribing_after_start_is_rejected() -> None:
    async def _run() -> None:
        bus = AnswerEventBus()
        bus.subscribe("network")
        producer = bus.start(_scripted([StreamEvent.message_end()]))
        with pytest.raises(RuntimeError):
            bus.subscribe("late")
        await producer

    asyncio.run(_run())


def test_wire_frames() -> None:
    assert StreamEvent.response("Hi").as_frame("abc") == {"type": "message", "data": "Hi", "messageId": "abc"}
    assert StreamEvent.sources([]).as_frame("abc") == {"type": "sources", "data": [], "messageId": "abc"}
    assert StreamEvent.message_end().as_frame("abc") == {"type": "messageEnd"}
    assert StreamEvent.error("boom").as_frame("abc") == {"type": "error", "data": "boom"}
    assert encode_frame({"type": "messageEnd"}) == b'{"type": "messageEnd"}\n'
