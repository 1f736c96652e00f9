"""
Shared fixtures

Session tests spawn real runtime processes (python -m runtime.animation_runtime);
scripts are short and every fixture stops what it started.
"""

import asyncio
import sys
from pathlib import Path
from typing import List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set UTF-8 encoding for output (fixes Unicode symbol rendering)
if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore
if hasattr(sys.stderr, 'reconfigure') and sys.stderr.encoding != 'UTF-8':
    sys.stderr.reconfigure(encoding='utf-8')  # type: ignore

# pytest's pythonpath setting covers this too; kept for running files directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from api.dependencies import set_service_container
from api.main import create_app
from hardware.led.led_surface import LedSurface
from hardware.led.virtual_strip import VirtualStrip
from models.config import AnimationConfig, AppConfig
from models.events import Event, EventType
from services.animation_session_manager import AnimationSessionManager
from services.event_bus import EventBus
from services.led_strip_service import LedStripService
from services.service_container import ServiceContainer

LED_COUNT = 10

# Generous: a runtime child imports pydantic before it answers
SESSION_TIMEOUT = 15.0


class EventRecorder:
    """Subscribes to every event type and keeps what was published"""

    def __init__(self, bus: EventBus):
        self.events: List[Event] = []
        self._changed = asyncio.Event()
        for event_type in EventType:
            bus.subscribe(event_type, self._record)

    async def _record(self, event: Event) -> None:
        self.events.append(event)
        self._changed.set()

    def of_type(self, event_type: EventType) -> List[Event]:
        return [e for e in self.events if e.type == event_type]

    def types(self) -> List[EventType]:
        return [e.type for e in self.events]

    async def wait_for(self, event_type: EventType, count: int = 1, timeout: float = SESSION_TIMEOUT) -> List[Event]:
        """Wait until `count` events of a type were published"""
        async def _wait():
            while len(self.of_type(event_type)) < count:
                self._changed.clear()
                await self._changed.wait()
        await asyncio.wait_for(_wait(), timeout=timeout)
        return self.of_type(event_type)


@pytest.fixture
def strip() -> VirtualStrip:
    return VirtualStrip(LED_COUNT)


@pytest.fixture
def surface(strip) -> LedSurface:
    return LedSurface(strip)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(event_bus) -> EventRecorder:
    return EventRecorder(event_bus)


@pytest_asyncio.fixture
async def sessions(surface, event_bus):
    manager = AnimationSessionManager(
        surface,
        event_bus,
        animation_config=AnimationConfig(query_timeout=SESSION_TIMEOUT),
    )
    yield manager
    await manager.stop()


@pytest.fixture
def services(surface, event_bus, sessions) -> ServiceContainer:
    """Container without auth; request handlers run against the virtual strip"""
    container = ServiceContainer(
        config=AppConfig(use_auth=False),
        surface=surface,
        event_bus=event_bus,
        sessions=sessions,
        led_strip_service=LedStripService(surface, sessions, event_bus),
    )
    set_service_container(container)
    yield container
    set_service_container(None)


@pytest_asyncio.fixture
async def client(services):
    app = create_app(log_requests=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
