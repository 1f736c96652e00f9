"""
Socket.IO relay: event bus events become client emits
"""

import pytest

from api.socketio.registry import register_socketio
from api.socketio.server import create_socketio_server
from models.color import LedColor
from models.enums import StopReason
from models.events import (
    AnimationFinishedEvent,
    AnimationStartedEvent,
    AnimationStoppedEvent,
    BrightnessChangedEvent,
    LedStripChangedEvent,
)

STRIP = [LedColor.from_rgb(1, 2, 3), LedColor.black()]
STRIP_PAYLOAD = [{"red": 1, "green": 2, "blue": 3}, {"red": 0, "green": 0, "blue": 0}]


class FakeSocketIO:
    """Records emits and keeps handlers registered through @sio.event"""

    def __init__(self):
        self.emitted = []
        self.handlers = {}

    async def emit(self, event, data=None, room=None, **kwargs):
        self.emitted.append((event, data, room))

    def event(self, handler):
        self.handlers[handler.__name__] = handler
        return handler


@pytest.fixture
def sio(services):
    fake = FakeSocketIO()
    register_socketio(fake, services)
    return fake


@pytest.mark.asyncio
async def test_led_strip_changes_are_broadcast(sio, event_bus):
    await event_bus.publish(LedStripChangedEvent(STRIP))
    await event_bus.publish(BrightnessChangedEvent("auto"))

    assert sio.emitted == [
        ("led-strip-changed", {"ledStrip": STRIP_PAYLOAD}, None),
        ("brightness-changed", {"brightness": "auto"}, None),
    ]


@pytest.mark.asyncio
async def test_animation_lifecycle_is_broadcast(sio, event_bus):
    await event_bus.publish(AnimationStartedEvent(STRIP, pid=42))
    await event_bus.publish(AnimationStoppedEvent(STRIP, StopReason.PREEMPTED))
    await event_bus.publish(AnimationFinishedEvent(STRIP, error="ValueError: boom"))

    assert sio.emitted == [
        ("animation-started", {"ledStrip": STRIP_PAYLOAD}, None),
        ("animation-stopped", {"ledStrip": STRIP_PAYLOAD, "reason": "preempted"}, None),
        ("animation-finished", {"ledStrip": STRIP_PAYLOAD, "error": "ValueError: boom"}, None),
    ]


@pytest.mark.asyncio
async def test_unsubscribed_broadcaster_stays_quiet(services, event_bus):
    fake = FakeSocketIO()
    for unsubscribe in register_socketio(fake, services):
        unsubscribe()

    await event_bus.publish(LedStripChangedEvent(STRIP))

    assert fake.emitted == []


@pytest.mark.asyncio
async def test_connect_sends_snapshot(sio, surface):
    surface.fill_leds(LedColor.from_rgb(10, 20, 30))

    await sio.handlers["connect"]("sid-1", {"REMOTE_ADDR": "192.168.0.20"})

    (event, data, room) = sio.emitted[0]
    assert event == "led-strip-snapshot"
    assert room == "sid-1"
    assert data["ledStrip"] == [{"red": 10, "green": 20, "blue": 30}] * 10
    assert data["brightness"] == 100
    assert data["animationRunning"] is False

    await sio.handlers["disconnect"]("sid-1")


def test_server_accepts_any_origin():
    server = create_socketio_server(["*"])

    assert server.eio.cors_allowed_origins == "*"
