from api.socketio.led_strip.broadcaster import register_led_strip_broadcaster
from api.socketio.led_strip.on_connect import register_on_connect


def register_socketio(sio, services):
    """Attach every Socket.IO handler and event-bus broadcaster; returns the bus unsubscribers"""
    unsubscribers = register_led_strip_broadcaster(sio, services)
    register_on_connect(sio, services)
    return unsubscribers
