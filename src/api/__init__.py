"""
LED strip webserver - API layer

REST and Socket.IO interfaces over the LED surface and the animation
session manager.

Structure:
- routes/     : Endpoint handlers
- schemas/    : Pydantic request/response schemas
- middleware/ : Auth, error handling, request logging
- socketio/   : Broadcast channel (event bus -> Socket.IO clients)
- confirmation: Registration confirmation app (separate port)
"""

from api.main import create_app

__all__ = ["create_app"]
