"""
Models package - Data models for the LED strip web server
"""

from .enums import SessionState, StopReason, StripDriver, LogLevel, LogCategory
from .color import LedColor
from .brightness import AUTO_BRIGHTNESS, Brightness, parse_brightness

__all__ = [
    'SessionState',
    'StopReason',
    'StripDriver',
    'LogLevel',
    'LogCategory',
    'LedColor',
    'AUTO_BRIGHTNESS',
    'Brightness',
    'parse_brightness',
]
