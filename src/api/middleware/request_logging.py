"""
Request logging middleware

Logs every HTTP request (method, path, query) and its status and duration.
Enabled by `logging.log_requests`. API keys in the query string are masked.
"""

import time

from fastapi import FastAPI, Request

from utils.logger import get_logger
from models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)


def _masked_query(request: Request) -> dict:
    return {
        key: ("***" if key == "apiKey" else value)
        for key, value in request.query_params.items()
    }


def register_request_logging(app: FastAPI) -> None:
    """Attach the request logger to the app"""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        query = _masked_query(request)

        message = f"Requested ({request.method.lower()}) route '{request.url.path}'"
        if query:
            log.info(message, query=query)
        else:
            log.info(message)

        response = await call_next(request)

        log.debug(
            f"{request.method} {request.url.path} -> {response.status_code}",
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
