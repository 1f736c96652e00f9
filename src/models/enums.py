"""
Enums for the LED strip web server
"""

from enum import Enum, auto


class SessionState(Enum):
    """
    Lifecycle of one animation session

    STARTING: runtime process is being spawned
    RUNNING: runtime process spawned and considered live
    FINISHED: runtime reported completion (script ended or raised)
    STOPPED: runtime was killed (stop, pre-emption, crash, unresponsive)
    """
    STARTING = auto()
    RUNNING = auto()
    FINISHED = auto()
    STOPPED = auto()


class StopReason(Enum):
    """Why a session ended in the STOPPED state"""
    REQUESTED = "requested"        # explicit stop()
    PREEMPTED = "preempted"        # a newer start() replaced it
    EXITED = "exited"              # process died without reporting finished
    UNRESPONSIVE = "unresponsive"  # query timed out
    SHUTDOWN = "shutdown"          # server shutdown


class StripDriver(Enum):
    """Physical strip driver selection"""
    AUTO = "auto"          # ws281x on a Raspberry Pi with rpi_ws281x, else virtual
    VIRTUAL = "virtual"    # in-memory buffer only
    WS281X = "ws281x"      # rpi_ws281x PixelStrip


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    HARDWARE = auto()    # Physical strip drivers
    ANIMATION = auto()   # Script output, animation lifecycle
    SESSION = auto()     # Session manager (spawn, kill, relay)
    PROTOCOL = auto()    # Session protocol encode/decode
    SANDBOX = auto()     # Script validation and execution
    SYSTEM = auto()      # Startup, errors

    API = auto()
    AUTH = auto()
    SOCKETIO = auto()
    EVENT = auto()       # Event bus events and handling

    SHUTDOWN = auto()
    LIFECYCLE = auto()
    TASK = auto()

    GENERAL = auto()    # Default general category
