"""
Brightness values

A brightness is an int 0-100 or the sentinel "auto", where the surface infers
the brightness from the strip content.
"""

from typing import Any, Literal, Union

from models.errors import InvalidBrightnessError

AUTO_BRIGHTNESS = "auto"

Brightness = Union[int, Literal["auto"]]


def parse_brightness(value: Any) -> Brightness:
    """
    Validate a brightness value

    Numeric strings are accepted because the runtime receives its initial
    brightness on the command line.

    Raises:
        InvalidBrightnessError: anything but 0-100 or "auto"
    """
    if value == AUTO_BRIGHTNESS:
        return AUTO_BRIGHTNESS

    # bool is an int subclass; True is not a brightness
    if isinstance(value, bool):
        raise InvalidBrightnessError(value)

    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise InvalidBrightnessError(value) from None

    if isinstance(value, float) and value.is_integer():
        value = int(value)

    if not isinstance(value, int) or not 0 <= value <= 100:
        raise InvalidBrightnessError(value)

    return value


def auto_brightness(load: float, max_load: float) -> int:
    """
    Brightness picked for "auto"

    Args:
        load: Average channel load of the raw strip, 0.0-1.0
        max_load: Highest load allowed at full brightness

    Returns:
        100 while the load fits, otherwise the percentage that scales the
        strip down to max_load
    """
    if load <= max_load or load <= 0:
        return 100
    return max(0, min(100, int(100 * max_load / load)))
