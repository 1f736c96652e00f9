from typing import Callable, List

from models.events import (
    AnimationFinishedEvent,
    AnimationStartedEvent,
    AnimationStoppedEvent,
    BrightnessChangedEvent,
    EventType,
    LedStripChangedEvent,
)
from services.service_container import ServiceContainer
from api.socketio.led_strip.dto import led_strip_payload
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SOCKETIO)


def register_led_strip_broadcaster(sio, services: ServiceContainer) -> List[Callable[[], None]]:
    """
    Relay LED strip and animation events from the event bus to every client.

    Emitted events:
        led-strip-changed   {ledStrip}
        brightness-changed  {brightness}
        animation-started   {ledStrip}
        animation-stopped   {ledStrip, reason}
        animation-finished  {ledStrip, error}
    """
    bus = services.event_bus

    async def on_led_strip_changed(event: LedStripChangedEvent):
        await sio.emit("led-strip-changed", {"ledStrip": led_strip_payload(event.led_strip)})

    async def on_brightness_changed(event: BrightnessChangedEvent):
        await sio.emit("brightness-changed", {"brightness": event.brightness})

    async def on_animation_started(event: AnimationStartedEvent):
        await sio.emit("animation-started", {"ledStrip": led_strip_payload(event.led_strip)})

    async def on_animation_stopped(event: AnimationStoppedEvent):
        await sio.emit("animation-stopped", {
            "ledStrip": led_strip_payload(event.led_strip),
            "reason": event.reason.value,
        })

    async def on_animation_finished(event: AnimationFinishedEvent):
        await sio.emit("animation-finished", {
            "ledStrip": led_strip_payload(event.led_strip),
            "error": event.error,
        })

    unsubscribers = [
        bus.subscribe(EventType.LED_STRIP_CHANGED, on_led_strip_changed),  # type: ignore
        bus.subscribe(EventType.BRIGHTNESS_CHANGED, on_brightness_changed),  # type: ignore
        bus.subscribe(EventType.ANIMATION_STARTED, on_animation_started),  # type: ignore
        bus.subscribe(EventType.ANIMATION_STOPPED, on_animation_stopped),  # type: ignore
        bus.subscribe(EventType.ANIMATION_FINISHED, on_animation_finished),  # type: ignore
    ]
    log.debug("LED strip broadcaster registered", events=len(unsubscribers))
    return unsubscribers
