"""
Registration confirmation app

Served on its own port (auth.confirmation_port) so the link written to the
log can be opened from a browser on the local network without an API key.
"""

from fastapi import FastAPI, Query
from fastapi.responses import PlainTextResponse
from typing import Optional

from api.middleware.error_handler import MissingParameterError, register_exception_handlers
from services.auth_service import AuthService
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.AUTH)


def create_confirmation_app(auth_service: AuthService) -> FastAPI:
    """
    Build the confirmation app bound to one AuthService.

    GET /confirm-registration?name=<name> releases the waiting
    POST /register of that name.
    """
    app = FastAPI(
        title="LED strip registration confirmation",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    register_exception_handlers(app)

    @app.get("/confirm-registration", response_class=PlainTextResponse)
    async def confirm_registration(name: Optional[str] = Query(None)) -> str:
        """
        **Errors:**
        - 400: name missing, or nobody is registering under that name
        """
        if not name:
            raise MissingParameterError("name")
        auth_service.confirm_registration(name)
        return f"User '{name}' was successfully registered."

    log.debug("Confirmation app created")
    return app
