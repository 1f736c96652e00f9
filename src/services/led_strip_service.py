"""
LED Strip Service - direct strip writes from the control plane

Every write runs inside AnimationSessionManager.idle_surface(): it fails while
an animation session owns the strip, and a concurrent start() waits until the
write has been shown and LED_STRIP_CHANGED published.
Reads and brightness go through the AnimationSessionManager, which knows
whether the surface or the runtime is authoritative.
"""

from typing import Any, List, Optional

from hardware.led.led_surface import LedSurface
from models.brightness import Brightness, parse_brightness
from models.color import LedColor
from models.events import BrightnessChangedEvent, LedStripChangedEvent
from services.animation_session_manager import AnimationSessionManager
from services.event_bus import EventBus
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.HARDWARE)


class LedStripService:
    """Single-writer gate in front of the LED surface"""

    def __init__(self, surface: LedSurface, sessions: AnimationSessionManager, event_bus: EventBus):
        self.surface = surface
        self.sessions = sessions
        self.event_bus = event_bus

    @property
    def led_count(self) -> int:
        return self.surface.led_count

    # === Writes ===

    async def fill(self, color: Any, brightness: Optional[Brightness] = None) -> List[LedColor]:
        async with self.sessions.idle_surface():
            fill = LedColor.coerce(color)
            new_brightness = self._parse_optional(brightness)
            self.surface.fill_leds(fill)
            return await self._commit(new_brightness)

    async def clear(self) -> List[LedColor]:
        async with self.sessions.idle_surface():
            self.surface.clear_leds()
            return await self._commit(None)

    async def set_led(self, index: int, color: Any, brightness: Optional[Brightness] = None) -> List[LedColor]:
        async with self.sessions.idle_surface():
            new_brightness = self._parse_optional(brightness)
            self.surface.set_led(index, color)
            return await self._commit(new_brightness)

    async def set_strip(self, colors: List[Any], brightness: Optional[Brightness] = None) -> List[LedColor]:
        async with self.sessions.idle_surface():
            new_brightness = self._parse_optional(brightness)
            self.surface.set_led_strip(colors)
            return await self._commit(new_brightness)

    # === Reads / brightness (session aware) ===

    async def get_strip(self) -> List[LedColor]:
        return await self.sessions.query_led_strip()

    async def set_brightness(self, brightness: Brightness) -> None:
        await self.sessions.set_brightness(brightness)

    def get_brightness(self) -> Brightness:
        return self.sessions.get_brightness()

    # === Internals ===

    @staticmethod
    def _parse_optional(brightness: Optional[Brightness]) -> Optional[Brightness]:
        # Validate before any buffer write so a bad request changes nothing
        return parse_brightness(brightness) if brightness is not None else None

    async def _commit(self, brightness: Optional[Brightness]) -> List[LedColor]:
        if brightness is not None:
            self.surface.set_brightness(brightness)

        await self.surface.show()
        rendered = self.surface.get_led_strip()

        await self.event_bus.publish(LedStripChangedEvent(rendered))
        if brightness is not None:
            await self.event_bus.publish(BrightnessChangedEvent(brightness))

        log.debug("Led strip updated", brightness=self.surface.get_brightness())
        return rendered
