"""
Hardware Layer

Low-level LED output only:

- IPhysicalStrip protocol and drivers (VirtualStrip, WS281xStrip)
- LedSurface: pixel buffer + brightness + show() on top of a driver

WS281xStrip is not re-exported here: it needs the optional rpi_ws281x
package and is imported lazily by the strip factory.
"""
from .led.strip_interface import IPhysicalStrip
from .led.virtual_strip import VirtualStrip
from .led.led_surface import LedSurface

__all__ = [
    "IPhysicalStrip",
    "VirtualStrip",
    "LedSurface",
]
