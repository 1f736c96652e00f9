"""
LED Surface - pixel buffer + brightness + commit

The surface owns the raw pixel buffer of one strip and its brightness. Writes
are buffered; show() renders the buffer through the brightness-scaling rule
and pushes it to the physical strip in one frame.

The same class runs in the control process (wrapping the real or virtual
strip) and inside every animation runtime child (wrapping the child's own
strip instance).

Example:
    surface = LedSurface(VirtualStrip(10))
    surface.on_led_strip_changed(lambda strip: print(strip[0]))

    await surface.fill_leds({"red": 255, "green": 0, "blue": 0}).show()
    surface.set_brightness(50)
    surface.get_led_strip()[0]   # rgb(128, 0, 0)
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Iterable, List, Optional

from hardware.led.strip_interface import IPhysicalStrip
from models.brightness import AUTO_BRIGHTNESS, Brightness, auto_brightness, parse_brightness
from models.color import LedColor
from models.errors import LedIndexError, LedStripLengthError
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)

LedStripListener = Callable[[List[LedColor]], Any]
BrightnessListener = Callable[[Brightness], None]


class LedSurface:
    """
    Addressable strip abstraction used by HTTP handlers and animation scripts

    Invariants:
    - the strip length is fixed at construction (strip.led_count)
    - brightness is always a validated 0-100 int or "auto"
    - strip listeners fire once per show(), with the rendered strip
    """

    def __init__(
        self,
        strip: IPhysicalStrip,
        brightness: Brightness = 100,
        auto_brightness_max_load: float = 0.5,
    ):
        self._strip = strip
        self._leds: List[LedColor] = [LedColor.black() for _ in range(strip.led_count)]
        self._brightness: Brightness = parse_brightness(brightness)
        self._auto_max_load = auto_brightness_max_load

        self._strip_listeners: List[LedStripListener] = []
        self._brightness_listeners: List[BrightnessListener] = []

    # === Properties ===

    @property
    def led_count(self) -> int:
        return len(self._leds)

    @property
    def strip(self) -> IPhysicalStrip:
        return self._strip

    # === Brightness ===

    def set_brightness(self, value: Brightness) -> 'LedSurface':
        """Validate and store brightness; takes effect on the next show()"""
        self._brightness = parse_brightness(value)

        for listener in list(self._brightness_listeners):
            try:
                listener(self._brightness)
            except Exception as ex:
                log.error("Brightness listener failed", error=str(ex), listener=getattr(listener, "__name__", listener))

        return self

    def get_brightness(self) -> Brightness:
        return self._brightness

    def effective_brightness(self) -> int:
        """Numeric brightness used for rendering ("auto" resolved against the buffer)"""
        if self._brightness != AUTO_BRIGHTNESS:
            return self._brightness

        if not self._leds:
            return 100
        total = sum(c.red + c.green + c.blue for c in self._leds)
        load = total / (3 * 255 * len(self._leds))
        return auto_brightness(load, self._auto_max_load)

    # === Pixel writes (buffered) ===

    def set_led(self, index: int, color: Any) -> 'LedSurface':
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < self.led_count:
            raise LedIndexError(index, self.led_count)
        self._leds[index] = LedColor.coerce(color)
        return self

    def fill_leds(self, color: Any) -> 'LedSurface':
        fill = LedColor.coerce(color)
        self._leds = [fill] * self.led_count
        return self

    def clear_leds(self) -> 'LedSurface':
        return self.fill_leds(LedColor.black())

    def set_led_strip(self, colors: Iterable[Any]) -> 'LedSurface':
        """Replace the whole buffer; the length must match the strip"""
        leds = [LedColor.coerce(c) for c in colors]
        if len(leds) != self.led_count:
            raise LedStripLengthError(self.led_count, len(leds))
        self._leds = leds
        return self

    def restore(self, raw: Optional[List[LedColor]], brightness: Optional[Brightness]) -> 'LedSurface':
        """
        Adopt a state rendered elsewhere without pushing it

        Used when an animation session hands control back: the hardware
        already shows that state, so no show() and no listener calls.
        """
        if brightness is not None:
            self._brightness = parse_brightness(brightness)
        if raw is not None and len(raw) == self.led_count:
            self._leds = [LedColor.coerce(c) for c in raw]
        elif raw is not None:
            log.warn("Ignoring restored strip with wrong length", expected=self.led_count, received=len(raw))
        return self

    # === Reads ===

    def get_led_strip(self) -> List[LedColor]:
        """Rendered strip (brightness applied), as the LEDs show it after show()"""
        brightness = self.effective_brightness()
        return [c.scaled(brightness) for c in self._leds]

    def get_raw_led_strip(self) -> List[LedColor]:
        """Buffered colors before brightness scaling"""
        return list(self._leds)

    # === Commit ===

    async def show(self) -> None:
        """
        Push the rendered buffer to the physical strip and notify listeners

        Async listeners are awaited in registration order; a failing listener
        is logged and does not stop the others.
        """
        rendered = self.get_led_strip()
        self._strip.apply_frame(rendered)

        for listener in list(self._strip_listeners):
            try:
                result = listener(list(rendered))
                if inspect.isawaitable(result):
                    await result
            except Exception as ex:
                log.error("Led strip listener failed", error=str(ex), listener=getattr(listener, "__name__", listener))

    # === Subscriptions ===

    def on_led_strip_changed(self, callback: LedStripListener) -> Callable[[], None]:
        """Subscribe to show(); returns an unsubscribe function"""
        self._strip_listeners.append(callback)
        return lambda: self._remove(self._strip_listeners, callback)

    def on_brightness_changed(self, callback: BrightnessListener) -> Callable[[], None]:
        """Subscribe to set_brightness(); returns an unsubscribe function"""
        self._brightness_listeners.append(callback)
        return lambda: self._remove(self._brightness_listeners, callback)

    @staticmethod
    def _remove(listeners: list, callback) -> None:
        if callback in listeners:
            listeners.remove(callback)
