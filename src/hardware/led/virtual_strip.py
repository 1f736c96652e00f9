from __future__ import annotations
from typing import List
from models.color import LedColor
from hardware.led.strip_interface import IPhysicalStrip


class VirtualStrip(IPhysicalStrip):
    """In-memory strip for development machines, tests and the runtime child off-Pi."""

    def __init__(self, pixel_count: int):
        if pixel_count <= 0:
            raise ValueError(f"pixel_count must be positive (received {pixel_count})")
        self.pixel_count = pixel_count
        self._buffer = [LedColor.black() for _ in range(self.pixel_count)]
        self.frames_pushed = 0

    @property
    def led_count(self) -> int:
        return self.pixel_count

    def apply_frame(self, pixels: List[LedColor]) -> None:
        frame = list(pixels[:self.led_count])
        frame.extend(LedColor.black() for _ in range(self.led_count - len(frame)))
        self._buffer = frame
        self.frames_pushed += 1

    def get_frame(self) -> List[LedColor]:
        return list(self._buffer)

    def clear(self) -> None:
        self.apply_frame([])

    def shutdown(self) -> None:
        self.clear()
