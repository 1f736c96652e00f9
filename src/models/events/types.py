from enum import Enum, auto


class EventType(Enum):
    # LED surface
    LED_STRIP_CHANGED = auto()
    BRIGHTNESS_CHANGED = auto()

    # Animation sessions
    ANIMATION_STARTED = auto()
    ANIMATION_STOPPED = auto()
    ANIMATION_FINISHED = auto()
