"""
WS281xStrip - rpi_ws281x driver

Frames arrive already brightness-scaled by LedSurface, so the chip runs at
full brightness; the only transformation left is the wire color order.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List

from rpi_ws281x import Color, PixelStrip, ws

from hardware.led.strip_interface import IPhysicalStrip
from models.color import LedColor
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)


# Wire order -> index of (red, green, blue) in the transmitted triple
COLOR_ORDER_MAP = {
    "RGB": (0, 1, 2),
    "RBG": (0, 2, 1),
    "GRB": (1, 0, 2),
    "GBR": (1, 2, 0),
    "BRG": (2, 0, 1),
    "BGR": (2, 1, 0),
}


@dataclass(frozen=True)
class WS281xConfig:
    gpio_pin: int
    led_count: int
    color_order: str = "GRB"  # WS2812 default
    frequency_hz: int = 800_000
    dma_channel: int = 10
    invert: bool = False
    channel: int = 0  # PWM channel (0 or 1)

    def __post_init__(self):
        if self.color_order.upper() not in COLOR_ORDER_MAP:
            raise ValueError(f"Unsupported color order: {self.color_order}")


class WS281xStrip(IPhysicalStrip):
    """One PixelStrip; apply_frame() writes every pixel then shows once"""

    def __init__(self, config: WS281xConfig) -> None:
        self.config = config
        self._order = COLOR_ORDER_MAP[config.color_order.upper()]

        # Reordering happens in _wire_color, so the library is told the strip is RGB
        self._pixel_strip = PixelStrip(
            config.led_count,
            config.gpio_pin,
            config.frequency_hz,
            config.dma_channel,
            config.invert,
            255,
            config.channel,
            ws.WS2811_STRIP_RGB,
        )
        self._pixel_strip.begin()
        self._frame: List[LedColor] = [LedColor.black()] * config.led_count

        log.info(
            "WS281x strip ready",
            gpio=config.gpio_pin,
            count=config.led_count,
            order=config.color_order,
        )

    @property
    def led_count(self) -> int:
        return self.config.led_count

    def _wire_color(self, color: LedColor) -> int:
        wire: List[int] = [0, 0, 0]
        for channel, position in zip(color.to_rgb(), self._order):
            wire[position] = channel
        return Color(*wire)

    def apply_frame(self, pixels: List[LedColor]) -> None:
        """Push a full frame; LEDs beyond len(pixels) are turned off"""
        frame = list(pixels[:self.led_count])
        frame.extend([LedColor.black()] * (self.led_count - len(frame)))

        for index, color in enumerate(frame):
            self._pixel_strip.setPixelColor(index, self._wire_color(color))

        try:
            self._pixel_strip.show()
        except Exception as ex:
            log.error("WS281x show() failed", error=str(ex))
            raise
        self._frame = frame

    def get_frame(self) -> List[LedColor]:
        return list(self._frame)

    def clear(self) -> None:
        self.apply_frame([])

    def shutdown(self) -> None:
        log.info(f"Turning off WS281x strip on GPIO {self.config.gpio_pin}")
        self.clear()
