from dataclasses import dataclass
from typing import List, Optional

from models.color import LedColor
from models.enums import StopReason
from models.events.base import Event
from models.events.types import EventType
from models.events.sources import EventSource


@dataclass(init=False)
class AnimationStartedEvent(Event):
    led_strip: List[LedColor]
    pid: Optional[int]

    def __init__(self, led_strip: List[LedColor], pid: Optional[int] = None):
        super().__init__(
            type=EventType.ANIMATION_STARTED,
            source=EventSource.ANIMATION_SESSION,
        )
        self.led_strip = led_strip
        self.pid = pid


@dataclass(init=False)
class AnimationStoppedEvent(Event):
    led_strip: List[LedColor]
    reason: StopReason
    exit_code: Optional[int]

    def __init__(self, led_strip: List[LedColor], reason: StopReason, exit_code: Optional[int] = None):
        super().__init__(
            type=EventType.ANIMATION_STOPPED,
            source=EventSource.ANIMATION_SESSION,
        )
        self.led_strip = led_strip
        self.reason = reason
        self.exit_code = exit_code


@dataclass(init=False)
class AnimationFinishedEvent(Event):
    led_strip: List[LedColor]
    error: Optional[str]

    def __init__(self, led_strip: List[LedColor], error: Optional[str] = None):
        super().__init__(
            type=EventType.ANIMATION_FINISHED,
            source=EventSource.ANIMATION_SESSION,
        )
        self.led_strip = led_strip
        self.error = error
