"""
Error handling middleware for API

FastAPI calls the handler registered for the raised exception type and
returns its JSON response instead of a bare 500.

Handlers defined here:
- RequestValidationError: bad request format (422)
- DomainError: API-level errors with an explicit code and status
- LedStripError: core errors from the surface, session manager and auth
  service, converted to DomainError through CORE_ERRORS
- Exception: anything unexpected (500)
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import uuid
from typing import Dict, Optional, Tuple, Type
import json

from api.schemas.error import ErrorResponse, ErrorDetail, ValidationErrorResponse
from models.errors import (
    AnimationRunningError,
    ForbiddenError,
    InvalidBrightnessError,
    InvalidColorError,
    LedIndexError,
    LedStripError,
    LedStripLengthError,
    NoActiveSessionError,
    ProtocolError,
    RegistrationNotPendingError,
    RegistrationPendingError,
    RuntimeUnresponsiveError,
    ScriptValidationError,
    SessionChannelError,
    SessionEndedError,
    SpawnFailedError,
    UnauthorizedError,
    UserExistsError,
)
from utils.logger import get_logger
from models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)


class DomainError(Exception):
    """Base class for domain-specific errors"""
    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
        status_code: int = 400
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


class MissingParameterError(DomainError):
    """Required query parameter absent"""
    def __init__(self, name: str):
        super().__init__(
            code="MISSING_PARAMETER",
            message=f"Request must contain '{name}' as query parameter.",
            details={"parameter": name},
            status_code=400
        )


# Core error class -> (code, HTTP status); looked up along the MRO so
# subclasses (SandboxViolation...) inherit their parent's mapping
CORE_ERRORS: Dict[Type[LedStripError], Tuple[str, int]] = {
    InvalidBrightnessError: ("INVALID_BRIGHTNESS", 400),
    InvalidColorError: ("INVALID_COLOR", 400),
    LedIndexError: ("INVALID_LED_INDEX", 400),
    LedStripLengthError: ("INVALID_LED_STRIP", 400),
    ScriptValidationError: ("INVALID_ANIMATION_SCRIPT", 400),
    AnimationRunningError: ("ANIMATION_RUNNING", 409),
    NoActiveSessionError: ("NO_ACTIVE_ANIMATION", 409),
    SpawnFailedError: ("ANIMATION_SPAWN_FAILED", 500),
    RuntimeUnresponsiveError: ("ANIMATION_UNRESPONSIVE", 504),
    SessionEndedError: ("ANIMATION_SESSION_ENDED", 409),
    SessionChannelError: ("ANIMATION_CHANNEL_ERROR", 502),
    ProtocolError: ("ANIMATION_PROTOCOL_ERROR", 502),
    UnauthorizedError: ("UNAUTHORIZED", 401),
    ForbiddenError: ("FORBIDDEN", 403),
    UserExistsError: ("USER_EXISTS", 403),
    RegistrationPendingError: ("REGISTRATION_PENDING", 403),
    RegistrationNotPendingError: ("REGISTRATION_NOT_PENDING", 400),
}

# Attributes copied into ErrorDetail.details when the error carries them
_DETAIL_ATTRIBUTES = ("index", "led_count", "expected", "received", "line", "name", "value")


def to_domain_error(exc: LedStripError) -> DomainError:
    """Convert a core error to the DomainError the API responds with"""
    code, status_code = "LED_STRIP_ERROR", 500
    for klass in type(exc).__mro__:
        if klass in CORE_ERRORS:
            code, status_code = CORE_ERRORS[klass]
            break

    details = {
        attr: getattr(exc, attr)
        for attr in _DETAIL_ATTRIBUTES
        if getattr(exc, attr, None) is not None
    }
    return DomainError(code=code, message=str(exc), details=details, status_code=status_code)


def _error_response(exc: DomainError) -> JSONResponse:
    request_id = str(uuid.uuid4())

    log.warn(
        f"Domain error ({request_id}): {exc.code} - {exc.message}",
        status=exc.status_code,
    )

    response = ErrorResponse(
        error=ErrorDetail(
            code=exc.code,
            message=exc.message,
            details=exc.details,
        ),
        request_id=request_id
    )

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=exc.status_code,
        content=json.loads(response.model_dump_json()),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI app"""

    # Handle validation errors (bad request format)
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors (bad JSON structure)"""
        request_id = str(uuid.uuid4())
        errors = exc.errors()

        log.warn(f"Validation error ({request_id}): {len(errors)} errors", path=request.url.path)

        # Convert Pydantic errors to readable format
        validation_errors = []
        for error in errors:
            field = ".".join(str(x) for x in error["loc"][1:])  # Skip "body"
            validation_errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"]
            })

        response = ValidationErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details={"error_count": len(errors)},
            ),
            validation_errors=validation_errors,
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=json.loads(response.model_dump_json())
        )

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        """Handle API-level business logic errors"""
        return _error_response(exc)

    @app.exception_handler(LedStripError)
    async def core_exception_handler(request: Request, exc: LedStripError):
        """Handle errors raised by the surface, session manager and auth service"""
        return _error_response(to_domain_error(exc))

    # Handle unexpected errors (server errors)
    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors"""
        request_id = str(uuid.uuid4())

        log.error(
            f"Unexpected error ({request_id}): {type(exc).__name__}: {str(exc)}",
            path=request.url.path,
            exception_type=type(exc).__name__,
        )

        response = ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred. Please try again.",
                details={"request_id": request_id},
            ),
            request_id=request_id
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=json.loads(response.model_dump_json())
        )
