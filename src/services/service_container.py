"""Service Container - Dependency injection container for all core services"""

from dataclasses import dataclass
from typing import Optional

from hardware.led.led_surface import LedSurface
from models.config import AppConfig
from services.animation_session_manager import AnimationSessionManager
from services.auth_service import AuthService
from services.event_bus import EventBus
from services.led_strip_service import LedStripService


@dataclass
class ServiceContainer:
    """
    Centralized dependency injection container for core services.

    Built once in main_asyncio and handed to the API layer through
    api.dependencies.set_service_container().

    Services included:
    - surface: the process-wide LED surface
    - event_bus: pub-sub event routing (Socket.IO broadcaster subscribes here)
    - sessions: animation session manager (runtime processes)
    - led_strip_service: direct strip writes, single-writer policy
    - auth_service: API-key users (None when auth is disabled)

    Usage:
        @router.get("/led-strip")
        async def get_led_strip(services: ServiceContainer = Depends(get_services)):
            return await services.led_strip_service.get_strip()
    """

    config: AppConfig
    surface: LedSurface
    event_bus: EventBus
    sessions: AnimationSessionManager
    led_strip_service: LedStripService
    auth_service: Optional[AuthService] = None
