from socketio import AsyncServer, ASGIApp
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SOCKETIO)


def create_socketio_server(cors_origins: list[str]) -> AsyncServer:
    """Create and configure a Socket.IO AsyncServer."""
    # python-socketio takes "*" as a plain string, not a list entry
    allowed = "*" if "*" in cors_origins else cors_origins
    log.debug("Socket.IO server created", cors_origins=cors_origins)
    return AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=allowed,
        ping_timeout=60,
        ping_interval=25,
        logger=False,
        engineio_logger=False,
    )


def wrap_app_with_socketio(app, socketio_server: AsyncServer):
    """Wrap FastAPI app with Socket.IO ASGI middleware."""
    return ASGIApp(socketio_server, app)
