"""Services layer"""

from .event_bus import EventBus
from .animation_session_manager import AnimationSession, AnimationSessionManager
from .led_strip_service import LedStripService
from .auth_service import AuthService
from .persister import JsonPersister
from .service_container import ServiceContainer

__all__ = [
    "EventBus",
    "AnimationSession",
    "AnimationSessionManager",
    "LedStripService",
    "AuthService",
    "JsonPersister",
    "ServiceContainer",
]
