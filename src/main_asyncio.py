"""
main_asyncio.py - Application entry point for the LED strip webserver
----------------------------------------------------------------------

Responsible for:
- loading configuration and the LED strip driver
- wiring services (Dependency Injection)
- starting the HTTP servers (control plane + registration confirmation)
- graceful shutdown on Ctrl+C / SIGTERM
"""

import sys

# ---------------------------------------------------------------------------
# UTF-8 ENCODING FIX (important for Raspberry Pi)
# ---------------------------------------------------------------------------

if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore
if hasattr(sys.stderr, 'reconfigure') and sys.stderr.encoding != 'UTF-8':
    sys.stderr.reconfigure(encoding='utf-8')  # type: ignore

import asyncio
import socket
from typing import List, Optional

from api.confirmation import create_confirmation_app
from api.dependencies import set_service_container
from api.main import create_app
from api.socketio.registry import register_socketio
from api.socketio.server import create_socketio_server, wrap_app_with_socketio
from hardware.led.led_surface import LedSurface
from hardware.led.strip_factory import create_strip
from lifecycle import ShutdownCoordinator
from lifecycle.api_server_wrapper import APIServerWrapper
from lifecycle.handlers import AnimationShutdownHandler, APIServerShutdownHandler, LEDShutdownHandler
from lifecycle.task_registry import create_tracked_task, TaskCategory, TaskRegistry
from managers import ConfigManager
from models.config import AppConfig
from models.enums import LogCategory
from services import (
    AnimationSessionManager,
    AuthService,
    EventBus,
    JsonPersister,
    LedStripService,
    ServiceContainer,
)
from services.middleware import log_middleware
from utils.logger import get_logger, configure_logger

# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------

log = get_logger().for_category(LogCategory.SYSTEM)


def _local_address() -> str:
    """LAN address for the confirmation link (falls back to localhost)"""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
            # No packet is sent; connect() only selects the outgoing interface
            probe.connect(("10.255.255.255", 1))
            return probe.getsockname()[0]
    except OSError:
        return "127.0.0.1"


def build_services(config: AppConfig) -> ServiceContainer:
    """Create the LED surface and every service on top of it"""
    strip_config = config.strip

    log.info("Initializing LED strip...", led_count=strip_config.led_count, driver=strip_config.driver.value)
    strip = create_strip(
        pixel_count=strip_config.led_count,
        driver=strip_config.driver,
        gpio_pin=strip_config.gpio_pin,
        color_order=strip_config.color_order,
    )
    surface = LedSurface(
        strip,
        brightness=strip_config.brightness,
        auto_brightness_max_load=strip_config.auto_brightness_max_load,
    )

    log.info("Initializing event bus...")
    event_bus = EventBus()
    event_bus.add_middleware(log_middleware)

    log.info("Initializing services...")
    sessions = AnimationSessionManager(
        surface,
        event_bus,
        animation_config=config.animation,
        strip_config=strip_config,
    )
    led_strip_service = LedStripService(surface, sessions, event_bus)

    auth_service: Optional[AuthService] = None
    if config.use_auth:
        auth_service = AuthService(
            JsonPersister(config.storage_dir),
            confirmation_base_url=f"http://{_local_address()}:{config.confirmation_port}",
        )

    return ServiceContainer(
        config=config,
        surface=surface,
        event_bus=event_bus,
        sessions=sessions,
        led_strip_service=led_strip_service,
        auth_service=auth_service,
    )


# ---------------------------------------------------------------------------
# Application Entry
# ---------------------------------------------------------------------------

async def main(config_path: Optional[str] = None):
    """Main async entry point (dependency injection and event loop startup)."""

    # ========================================================================
    # 1. CONFIGURATION
    # ========================================================================

    config_manager = ConfigManager(config_path)
    config = config_manager.load()
    configure_logger(config.log_level)

    log.info("Starting LED strip webserver...")
    if config_manager.used_defaults:
        log.warn("Running on factory defaults")

    # ========================================================================
    # 2. SERVICES
    # ========================================================================

    services = build_services(config)
    if services.auth_service is not None:
        await services.auth_service.load()

    set_service_container(services)
    log.info("Service container registered with API")

    # ========================================================================
    # 3. API SERVERS
    # ========================================================================

    app = create_app(cors_origins=config.cors_origins, log_requests=config.log_requests)

    asgi_app = app
    if config.use_socketio:
        sio = create_socketio_server(config.cors_origins)
        register_socketio(sio, services)
        asgi_app = wrap_app_with_socketio(app, sio)
        log.info("Socket.IO broadcast channel enabled")

    servers: List[APIServerWrapper] = [
        APIServerWrapper(asgi_app, host=config.host, port=config.port, name="API server"),
    ]
    if services.auth_service is not None:
        servers.append(APIServerWrapper(
            create_confirmation_app(services.auth_service),
            host=config.host,
            port=config.confirmation_port,
            name="Confirmation server",
        ))

    log.info("Starting API server tasks...")
    for server in servers:
        create_tracked_task(
            server.start(),
            category=TaskCategory.API,
            description=f"{server.name} (port {server.port})"
        )

    # ========================================================================
    # 4. SHUTDOWN COORDINATOR
    # ========================================================================

    log.info("Initializing shutdown system...")

    coordinator = ShutdownCoordinator()

    coordinator.register(AnimationShutdownHandler(services.sessions))
    coordinator.register(APIServerShutdownHandler(servers))
    coordinator.register(LEDShutdownHandler(services.surface))

    loop = asyncio.get_running_loop()
    coordinator.setup_signal_handlers(loop)

    log.info("🏁 Application initialized. Waiting for exit signal...", port=config.port)

    # Wait for shutdown signal (Ctrl+C, SIGTERM) or a failed server task
    await coordinator.wait_for_shutdown()

    await coordinator.shutdown_all()

    registry = TaskRegistry.instance()
    leftover = await registry.cancel_remaining()
    if leftover:
        log.debug(f"Cancelled {leftover} task(s) left after shutdown")
    log.info("👋 Shut down cleanly.", tasks=registry.summary())


# ---------------------------------------------------------------------------
# ENTRY POINT
# ---------------------------------------------------------------------------

def run() -> None:
    try:
        asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")


if __name__ == "__main__":
    run()
