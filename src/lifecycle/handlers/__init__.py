from .animation_shutdown_handler import AnimationShutdownHandler
from .api_server_shutdown_handler import APIServerShutdownHandler
from .led_shutdown_handler import LEDShutdownHandler

__all__ = [
    "AnimationShutdownHandler",
    "APIServerShutdownHandler",
    "LEDShutdownHandler",
]
