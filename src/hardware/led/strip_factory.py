# hardware/led/strip_factory.py

from typing import Optional
from runtime.runtime_info import RuntimeInfo
from hardware.led.strip_interface import IPhysicalStrip
from hardware.led.virtual_strip import VirtualStrip
from models.enums import StripDriver
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)


def create_strip(
    *,
    pixel_count: int,
    driver: StripDriver = StripDriver.AUTO,
    gpio_pin: Optional[int] = None,
    color_order: str = "GRB",
) -> IPhysicalStrip:
    """
    Factory that NEVER crashes the app on PC / WSL.

    AUTO picks WS281x only on a Raspberry Pi with rpi_ws281x installed.
    An explicit WS281X request that fails to initialise falls back to a
    VirtualStrip with an error log, so the web server still comes up.
    """
    wants_hardware = driver is StripDriver.WS281X or (
        driver is StripDriver.AUTO
        and RuntimeInfo.is_raspberry_pi()
        and RuntimeInfo.has_ws281x()
    )

    if wants_hardware:
        try:
            from hardware.led.ws281x_strip import WS281xStrip, WS281xConfig

            if gpio_pin is None:
                raise ValueError("gpio_pin is required for the ws281x driver")

            return WS281xStrip(WS281xConfig(
                gpio_pin=gpio_pin,
                led_count=pixel_count,
                color_order=color_order,
            ))
        except Exception as ex:
            log.error(
                "WS281x strip unavailable, using virtual strip",
                error=str(ex),
                error_type=type(ex).__name__,
            )

    log.debug("Using virtual strip", count=pixel_count)
    return VirtualStrip(pixel_count)
