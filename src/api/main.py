"""
FastAPI application factory for the control plane

Shared by main_asyncio.py and the tests; services reach the routes through
api.dependencies.set_service_container(), so building an app never touches
hardware.

Paths are the ones existing strip clients call (/led-strip/..., /register,
/login, /login-required) and carry no version prefix. Introspection lives
under /api.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Any, Dict, List, Optional

from api.routes import animation, auth, led_strip, system
from api.middleware.error_handler import register_exception_handlers
from api.middleware.request_logging import register_request_logging
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SYSTEM)

SERVICE_NAME = "led-strip-webserver"

ROUTERS = (
    (auth.router, ""),
    (led_strip.router, ""),
    (animation.router, ""),
    (system.router, "/api"),
)


def _add_cors(app: FastAPI, origins: List[str]) -> None:
    # Credentials cannot be combined with a wildcard origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    log.debug("CORS enabled", origins=origins)


def create_app(
    title: str = "LED Strip Webserver",
    description: str = "REST API for LED strips and sandboxed animation scripts",
    version: str = "1.0.0",
    docs_enabled: bool = True,
    cors_origins: Optional[List[str]] = None,
    log_requests: bool = True,
) -> FastAPI:
    """
    Args:
        docs_enabled: Serve /docs, /redoc and /openapi.json
        cors_origins: Allowed browser origins (default: any)
        log_requests: Log every request through the API category
    """
    app = FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    _add_cors(app, cors_origins or ["*"])
    if log_requests:
        register_request_logging(app)
    register_exception_handlers(app)

    for router, prefix in ROUTERS:
        app.include_router(router, prefix=prefix)

    @app.get("/api/health", tags=["System"], summary="Liveness probe")
    async def health_check() -> Dict[str, Any]:
        """Open endpoint; /api/system/health has the detailed view"""
        return {"status": "healthy", "service": SERVICE_NAME, "version": version}

    @app.get("/", include_in_schema=False)
    async def root() -> Dict[str, Any]:
        return {
            "message": title,
            "docs": "/docs" if docs_enabled else None,
            "health": "/api/health",
        }

    log.info(f"{title} v{version} app created", routes=len(app.routes))
    return app
