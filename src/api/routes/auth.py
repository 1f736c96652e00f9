"""
Auth endpoints - registration, login and whether login is required

These routes are open: they are how a client gets a key in the first place.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from api.dependencies import get_service_container
from api.middleware.error_handler import DomainError, MissingParameterError
from api.schemas.auth import LoginRequiredResponse, LoginResponse, RegisterRequest, RegisterResponse
from services.auth_service import AuthService
from services.service_container import ServiceContainer
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.AUTH)

router = APIRouter(tags=["Auth"])


class AuthDisabledError(DomainError):
    """Registration/login requested while auth is switched off"""
    def __init__(self):
        super().__init__(
            code="AUTH_DISABLED",
            message="Authentication is disabled on this server.",
            status_code=404
        )


def _auth_service(services: ServiceContainer) -> AuthService:
    if services.auth_service is None:
        raise AuthDisabledError()
    return services.auth_service


@router.get(
    "/login-required",
    response_model=LoginRequiredResponse,
    summary="Is an API key required"
)
async def login_required(
    services: ServiceContainer = Depends(get_service_container)
) -> LoginRequiredResponse:
    return LoginRequiredResponse(login_required=services.config.use_auth)


@router.post(
    "/register",
    response_model=RegisterResponse,
    summary="Register an API key",
    description="Waits until an operator opens the confirmation link written to the server log"
)
async def register(
    request: RegisterRequest,
    services: ServiceContainer = Depends(get_service_container)
) -> RegisterResponse:
    """
    **Errors:**
    - 403: name already registered, or already waiting for confirmation
    """
    user = await _auth_service(services).register(request.name, request.api_key)
    return RegisterResponse(api_key=user.api_key)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Check an API key"
)
async def login(
    api_key: Optional[str] = Query(None, alias="apiKey"),
    services: ServiceContainer = Depends(get_service_container)
) -> LoginResponse:
    """
    **Errors:**
    - 400: apiKey query parameter missing
    - 403: unknown key or user not allowed
    """
    if not api_key:
        raise MissingParameterError("apiKey")
    user = _auth_service(services).login(api_key)
    log.info(f"User '{user.name}' logged in")
    return LoginResponse(logged_in=True)
