# hardware/led/strip_interface.py
"""
IPhysicalStrip Protocol
========================
Hardware abstraction for LED strips.
Minimal contract the LedSurface needs from a physical driver (WS281x, virtual).
"""

from __future__ import annotations
from typing import Protocol, List
from models.color import LedColor


class IPhysicalStrip(Protocol):
    """
    Protocol defining minimal LED strip hardware interface.

    All implementations must provide:
    - led_count: total pixels
    - apply_frame: atomic push of a full, already brightness-scaled frame
    - get_frame: last frame pushed (what the LEDs currently show)
    - clear: turn off all LEDs
    - shutdown: release the hardware
    """

    @property
    def led_count(self) -> int:
        """Total number of addressable pixels."""
        ...

    def apply_frame(self, pixels: List[LedColor]) -> None:
        """
        Atomic push of entire frame to hardware (single DMA transfer).
        """
        ...

    def get_frame(self) -> List[LedColor]:
        """Last frame pushed to the hardware."""
        ...

    def clear(self) -> None:
        """Turn off all LEDs (set to black + push)."""
        ...

    def shutdown(self) -> None:
        """Release the driver (clear + free resources)."""
        ...
