from api.socketio.led_strip.dto import led_strip_payload
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SOCKETIO)


def register_on_connect(sio, services):
    """
    Registers connection lifecycle handlers for Socket.IO.
    Sends the current strip to a client as soon as it connects.
    """

    @sio.event
    async def connect(sid, environ, auth=None):
        """Handle client connection and send initial state"""
        client_ip = environ.get('REMOTE_ADDR', 'unknown')
        log.info(f"Client connected: {sid} from {client_ip}")

        # While an animation runs the surface is stale; the next
        # led-strip-changed from the runtime brings the client up to date
        surface = services.surface
        await sio.emit("led-strip-snapshot", {
            "ledStrip": led_strip_payload(surface.get_led_strip()),
            "brightness": services.sessions.get_brightness(),
            "animationRunning": services.sessions.is_running,
        }, room=sid)

    @sio.event
    async def disconnect(sid):
        """Handle client disconnection"""
        log.info(f"Client disconnected: {sid}")
