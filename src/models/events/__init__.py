"""
Event system for the LED strip web server

Events published on the EventBus by the LED strip service and the animation
session manager, consumed by the Socket.IO broadcaster.
"""

# Event type, base class, and sources
from models.events.types import EventType
from models.events.base import Event
from models.events.sources import EventSource

# LED surface events
from models.events.led_strip_events import (
    LedStripChangedEvent,
    BrightnessChangedEvent,
)

# Animation session events
from models.events.animation_events import (
    AnimationStartedEvent,
    AnimationStoppedEvent,
    AnimationFinishedEvent,
)

__all__ = [
    # Type, base, and sources
    "EventType",
    "Event",
    "EventSource",

    # LED surface
    "LedStripChangedEvent",
    "BrightnessChangedEvent",

    # Animation sessions
    "AnimationStartedEvent",
    "AnimationStoppedEvent",
    "AnimationFinishedEvent",
]
