from dataclasses import dataclass
from typing import List

from models.brightness import Brightness
from models.color import LedColor
from models.events.base import Event
from models.events.types import EventType
from models.events.sources import EventSource


@dataclass(init=False)
class LedStripChangedEvent(Event):
    """Rendered strip after a show(), in the server or inside a runtime"""
    led_strip: List[LedColor]

    def __init__(self, led_strip: List[LedColor], source: EventSource = EventSource.CONTROL_PLANE):
        super().__init__(type=EventType.LED_STRIP_CHANGED, source=source)
        self.led_strip = led_strip


@dataclass(init=False)
class BrightnessChangedEvent(Event):
    brightness: Brightness

    def __init__(self, brightness: Brightness, source: EventSource = EventSource.CONTROL_PLANE):
        super().__init__(type=EventType.BRIGHTNESS_CHANGED, source=source)
        self.brightness = brightness
