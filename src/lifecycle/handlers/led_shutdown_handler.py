from __future__ import annotations

from typing import TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from hardware.led.led_surface import LedSurface

log = get_logger().for_category(LogCategory.SHUTDOWN)


class LEDShutdownHandler(IShutdownHandler):
    """
    Turns the strip off and releases the driver.

    Runs after the animation runtime is gone, so nothing repaints the strip.

    Priority: 50
    """

    def __init__(self, surface: "LedSurface"):
        self.surface = surface

    @property
    def shutdown_priority(self) -> int:
        return 50

    async def shutdown(self) -> None:
        log.info("Clearing LEDs...")
        self.surface.clear_leds()
        self.surface.strip.shutdown()
        log.info("LEDs cleared")
