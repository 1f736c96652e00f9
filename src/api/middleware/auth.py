"""
Authentication dependency for API

LED routes declare `Depends(require_api_key)`. The key is read from the
`apiKey` query parameter (what existing clients send) or from an
`Authorization: Bearer <key>` header, and resolved through AuthService.

Unknown or missing key -> 401, known user that is not allowed -> 403.
With `auth.use_auth: false` every request passes and no user is attached.
"""

from fastapi import Depends, Header, Query
from typing import Optional

from api.dependencies import get_service_container
from models.errors import UnauthorizedError
from models.user import User
from services.service_container import ServiceContainer


def extract_api_key(api_key: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """Query parameter wins; otherwise parse "Bearer <key>" """
    if api_key:
        return api_key
    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedError("Invalid Authorization header format. Expected: Bearer <key>")
    return parts[1]


async def require_api_key(
    api_key: Optional[str] = Query(None, alias="apiKey"),
    authorization: Optional[str] = Header(None),
    services: ServiceContainer = Depends(get_service_container),
) -> Optional[User]:
    """
    FastAPI dependency that authenticates the caller.

    Returns:
        The User, or None when auth is disabled

    Raises:
        UnauthorizedError: missing/unknown key (401)
        ForbiddenError: user not allowed (403)
    """
    if not services.config.use_auth or services.auth_service is None:
        return None

    key = extract_api_key(api_key, authorization)
    return services.auth_service.authenticate(key)
