"""
Auth Service - API-key users with out-of-band registration confirmation

A client registers {name, apiKey}; the request stays open until an operator
opens the confirmation link printed to the log (served by the confirmation
server on its own port). Confirmed users are persisted as JSON.
"""

import asyncio
from typing import Dict, List, Optional
from urllib.parse import quote

from models.errors import (
    ForbiddenError,
    RegistrationNotPendingError,
    RegistrationPendingError,
    UnauthorizedError,
    UserExistsError,
)
from models.user import User
from services.persister import JsonPersister
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.AUTH)

USERS_KEY = "webserver-api-keys.json"


class AuthService:
    """
    Example:
        auth = AuthService(JsonPersister(".storage"), "http://192.168.0.10:45452")
        await auth.load()

        user = await auth.register("phone", "secret")   # waits for confirm_registration("phone")
        auth.authenticate("secret")                     # -> User
    """

    def __init__(self, persister: JsonPersister, confirmation_base_url: str = "http://localhost:45452"):
        self._persister = persister
        self._confirmation_base_url = confirmation_base_url.rstrip("/")
        self._users: List[User] = []
        self._pending: Dict[str, asyncio.Future] = {}

    # === Persistence ===

    async def load(self) -> None:
        raw = await self._persister.load(USERS_KEY)
        if raw is None:
            self._users = []
            await self._save()
        else:
            self._users = [User.model_validate(entry) for entry in raw]
        log.info("Users loaded", count=len(self._users))

    async def _save(self) -> None:
        await self._persister.save(USERS_KEY, [u.model_dump(by_alias=True) for u in self._users])

    # === Lookup ===

    @property
    def users(self) -> List[User]:
        return list(self._users)

    def get_user_by_name(self, name: str) -> Optional[User]:
        return next((u for u in self._users if u.name == name), None)

    def get_user_by_api_key(self, api_key: str) -> Optional[User]:
        return next((u for u in self._users if u.api_key == api_key), None)

    def is_pending(self, name: str) -> bool:
        return name in self._pending

    # === Registration ===

    def confirmation_link(self, name: str) -> str:
        return f"{self._confirmation_base_url}/confirm-registration?name={quote(name)}"

    async def register(self, name: str, api_key: str) -> User:
        """
        Register a user once an operator confirms it

        Raises:
            UserExistsError: name already registered
            RegistrationPendingError: same name already waiting for confirmation
        """
        if self.get_user_by_name(name) is not None:
            raise UserExistsError(name)
        if name in self._pending:
            raise RegistrationPendingError(name)

        confirmation = asyncio.get_running_loop().create_future()
        self._pending[name] = confirmation

        log.info(
            f"User '{name}' would like to register",
            confirm=self.confirmation_link(name),
        )

        try:
            await confirmation
        finally:
            self._pending.pop(name, None)

        # Another registration may have won while this one waited
        if self.get_user_by_name(name) is not None:
            raise UserExistsError(name)

        user = User(name=name, api_key=api_key, allowed=True)
        self._users.append(user)
        await self._save()

        log.info(f"User '{name}' registered")
        return user

    def confirm_registration(self, name: str) -> None:
        """
        Release a waiting register() call

        Raises:
            RegistrationNotPendingError: nobody is registering under that name
        """
        confirmation = self._pending.get(name)
        if confirmation is None or confirmation.done():
            raise RegistrationNotPendingError(name)
        confirmation.set_result(None)
        log.info(f"Registration of '{name}' confirmed")

    # === Authentication ===

    def authenticate(self, api_key: Optional[str]) -> User:
        """
        Resolve an API key to an allowed user

        Raises:
            UnauthorizedError: missing or unknown key
            ForbiddenError: user is not allowed
        """
        if not api_key:
            raise UnauthorizedError()
        user = self.get_user_by_api_key(api_key)
        if user is None:
            raise UnauthorizedError()
        if not user.allowed:
            raise ForbiddenError()
        return user

    def login(self, api_key: str) -> User:
        """
        Raises:
            ForbiddenError: unknown key or user not allowed
        """
        user = self.get_user_by_api_key(api_key)
        if user is None:
            raise ForbiddenError("User is not registered. Try to register again.")
        if not user.allowed:
            raise ForbiddenError("You are not allowed to login.")
        return user
