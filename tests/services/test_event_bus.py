"""
Event bus: publishing, subscription, middleware, filtering and priorities.
"""

import pytest

from models.color import LedColor
from models.enums import StopReason
from models.events import (
    AnimationStoppedEvent,
    BrightnessChangedEvent,
    EventSource,
    EventType,
    LedStripChangedEvent,
)
from services.event_bus import EventBus
from services.middleware import log_middleware

STRIP = [LedColor.from_rgb(1, 2, 3)]


@pytest.mark.asyncio
async def test_basic_pub_sub():
    bus = EventBus()
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe(EventType.BRIGHTNESS_CHANGED, handler)
    await bus.publish(BrightnessChangedEvent(40))
    await bus.publish(LedStripChangedEvent(STRIP))

    assert len(received) == 1
    assert received[0].brightness == 40


@pytest.mark.asyncio
async def test_filtering():
    bus = EventBus()
    runtime_frames = []
    control_frames = []

    bus.subscribe(
        EventType.LED_STRIP_CHANGED,
        runtime_frames.append,
        filter_fn=lambda e: e.source == EventSource.ANIMATION_RUNTIME
    )
    bus.subscribe(
        EventType.LED_STRIP_CHANGED,
        control_frames.append,
        filter_fn=lambda e: e.source == EventSource.CONTROL_PLANE
    )

    await bus.publish(LedStripChangedEvent(STRIP, source=EventSource.ANIMATION_RUNTIME))
    await bus.publish(LedStripChangedEvent(STRIP))
    await bus.publish(LedStripChangedEvent(STRIP, source=EventSource.ANIMATION_RUNTIME))

    assert len(runtime_frames) == 2
    assert len(control_frames) == 1


@pytest.mark.asyncio
async def test_middleware_blocking():
    bus = EventBus()
    received = []

    def block_runtime(event):
        if event.source == EventSource.ANIMATION_RUNTIME:
            return None
        return event

    bus.add_middleware(block_runtime)
    bus.subscribe(EventType.LED_STRIP_CHANGED, received.append)

    await bus.publish(LedStripChangedEvent(STRIP))
    await bus.publish(LedStripChangedEvent(STRIP, source=EventSource.ANIMATION_RUNTIME))

    assert len(received) == 1
    assert received[0].source == EventSource.CONTROL_PLANE
    # blocked events are not recorded either
    assert len(bus.get_event_history()) == 1


@pytest.mark.asyncio
async def test_priority():
    bus = EventBus()
    execution_order = []

    async def low(event):
        execution_order.append("low")

    async def high(event):
        execution_order.append("high")

    async def medium(event):
        execution_order.append("medium")

    bus.subscribe(EventType.BRIGHTNESS_CHANGED, low, priority=0)
    bus.subscribe(EventType.BRIGHTNESS_CHANGED, high, priority=100)
    bus.subscribe(EventType.BRIGHTNESS_CHANGED, medium, priority=50)

    await bus.publish(BrightnessChangedEvent(10))

    assert execution_order == ["high", "medium", "low"]


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = EventBus()
    received = []

    unsubscribe = bus.subscribe(EventType.BRIGHTNESS_CHANGED, received.append)
    await bus.publish(BrightnessChangedEvent(10))
    unsubscribe()
    unsubscribe()
    await bus.publish(BrightnessChangedEvent(20))

    assert [e.brightness for e in received] == [10]


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_others():
    bus = EventBus()
    received = []

    async def broken(event):
        raise RuntimeError("handler bug")

    bus.subscribe(EventType.ANIMATION_STOPPED, broken, priority=10)
    bus.subscribe(EventType.ANIMATION_STOPPED, received.append)

    await bus.publish(AnimationStoppedEvent(STRIP, StopReason.REQUESTED))

    assert len(received) == 1


@pytest.mark.asyncio
async def test_history_is_bounded():
    bus = EventBus(history_limit=3)
    for level in range(5):
        await bus.publish(BrightnessChangedEvent(level))

    history = bus.get_event_history(limit=10)
    assert [e.brightness for e in history] == [2, 3, 4]

    bus.clear_history()
    assert bus.get_event_history() == []


@pytest.mark.asyncio
async def test_log_middleware_passes_events_through():
    bus = EventBus()
    received = []
    bus.add_middleware(log_middleware)
    bus.subscribe(EventType.ANIMATION_STOPPED, received.append)

    event = AnimationStoppedEvent(STRIP, StopReason.PREEMPTED, exit_code=-9)
    await bus.publish(event)

    assert received == [event]
    assert event.to_data() == {"led_strip": STRIP, "reason": StopReason.PREEMPTED, "exit_code": -9}
