from enum import Enum, auto


class EventSource(Enum):
    """Event source identifiers for application events"""
    CONTROL_PLANE = auto()       # HTTP handlers / services in the server process
    ANIMATION_SESSION = auto()   # Session manager lifecycle (start, stop, finish)
    ANIMATION_RUNTIME = auto()   # Relayed from the runtime child process
