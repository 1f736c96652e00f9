from .strip_interface import IPhysicalStrip
from .virtual_strip import VirtualStrip
from .strip_factory import create_strip
from .led_surface import LedSurface

__all__ = [
    "IPhysicalStrip",
    "VirtualStrip",
    "create_strip",
    "LedSurface",
]
