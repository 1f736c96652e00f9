"""
LED strip endpoints - read and write the strip, brightness

Writes are rejected with 409 ANIMATION_RUNNING while an animation session
owns the strip; reads and brightness work in both modes (the session
manager asks the runtime when one is running).
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_service_container
from api.middleware.auth import require_api_key
from api.schemas.led_strip import (
    BrightnessRequest,
    BrightnessResponse,
    FillRequest,
    LedStripResponse,
    SetLedStripRequest,
)
from services.service_container import ServiceContainer
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)

router = APIRouter(prefix="/led-strip", tags=["LED strip"], dependencies=[Depends(require_api_key)])


@router.get(
    "",
    response_model=LedStripResponse,
    summary="Get led strip",
    description="Rendered strip (brightness applied); asks the animation runtime while one is running"
)
async def get_led_strip(
    services: ServiceContainer = Depends(get_service_container)
) -> LedStripResponse:
    """
    **Errors:**
    - 504: animation runtime did not answer (session stopped)
    - 409: animation ended while waiting
    """
    led_strip = await services.led_strip_service.get_strip()
    return LedStripResponse(led_strip=led_strip)


@router.post(
    "/fill",
    response_model=LedStripResponse,
    summary="Fill led strip",
    description="Set every LED to one color and show it"
)
async def fill_led_strip(
    request: FillRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> LedStripResponse:
    led_strip = await services.led_strip_service.fill(request.color, request.brightness)
    return LedStripResponse(led_strip=led_strip)


@router.post(
    "/clear",
    response_model=LedStripResponse,
    summary="Clear led strip",
    description="Turn every LED off and show it"
)
async def clear_led_strip(
    services: ServiceContainer = Depends(get_service_container)
) -> LedStripResponse:
    led_strip = await services.led_strip_service.clear()
    return LedStripResponse(led_strip=led_strip)


@router.post(
    "/led/{led_index}/set",
    response_model=LedStripResponse,
    summary="Set single LED",
    description="Set one LED's color and show it"
)
async def set_single_led(
    led_index: int,
    request: FillRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> LedStripResponse:
    """
    **Errors:**
    - 400: index outside 0..led_count-1, invalid color or brightness
    - 409: animation running
    """
    led_strip = await services.led_strip_service.set_led(led_index, request.color, request.brightness)
    return LedStripResponse(led_strip=led_strip)


@router.post(
    "/set",
    response_model=LedStripResponse,
    summary="Set whole led strip",
    description="Replace every LED; the strip must have exactly led_count entries"
)
async def set_led_strip(
    request: SetLedStripRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> LedStripResponse:
    led_strip = await services.led_strip_service.set_strip(request.led_strip, request.brightness)
    return LedStripResponse(led_strip=led_strip)


@router.post(
    "/brightness/set",
    response_model=BrightnessResponse,
    summary="Set brightness",
    description="0-100 or 'auto'; forwarded to the animation runtime while one is running"
)
async def set_brightness(
    request: BrightnessRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> BrightnessResponse:
    await services.led_strip_service.set_brightness(request.brightness)
    return BrightnessResponse(brightness=services.led_strip_service.get_brightness())


@router.get(
    "/brightness",
    response_model=BrightnessResponse,
    summary="Get brightness"
)
async def get_brightness(
    services: ServiceContainer = Depends(get_service_container)
) -> BrightnessResponse:
    return BrightnessResponse(brightness=services.led_strip_service.get_brightness())
