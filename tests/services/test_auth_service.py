import asyncio
import json

import pytest
import pytest_asyncio

from models.errors import (
    ForbiddenError,
    RegistrationNotPendingError,
    RegistrationPendingError,
    UnauthorizedError,
    UserExistsError,
)
from services.auth_service import USERS_KEY, AuthService
from services.persister import JsonPersister


@pytest.fixture
def persister(tmp_path):
    return JsonPersister(tmp_path / "storage")


@pytest_asyncio.fixture
async def auth(persister):
    service = AuthService(persister, "http://192.168.0.10:45452")
    await service.load()
    return service


async def wait_until_pending(auth: AuthService, name: str) -> None:
    for _ in range(100):
        if auth.is_pending(name):
            return
        await asyncio.sleep(0)
    raise AssertionError(f"registration of {name!r} never became pending")


async def register_confirmed(auth: AuthService, name: str, api_key: str):
    task = asyncio.create_task(auth.register(name, api_key))
    await wait_until_pending(auth, name)
    auth.confirm_registration(name)
    return await task


@pytest.mark.asyncio
async def test_load_creates_empty_user_file(auth, persister):
    assert auth.users == []
    assert json.loads(persister.path_for(USERS_KEY).read_text()) == []


@pytest.mark.asyncio
async def test_registration_waits_for_confirmation(auth, persister):
    task = asyncio.create_task(auth.register("phone", "secret"))
    await wait_until_pending(auth, "phone")

    assert not task.done()
    assert auth.get_user_by_name("phone") is None

    auth.confirm_registration("phone")
    user = await task

    assert user.name == "phone"
    assert user.api_key == "secret"
    assert not auth.is_pending("phone")
    assert json.loads(persister.path_for(USERS_KEY).read_text()) == [
        {"name": "phone", "apiKey": "secret", "allowed": True}
    ]


@pytest.mark.asyncio
async def test_users_survive_reload(auth, persister):
    await register_confirmed(auth, "phone", "secret")

    reloaded = AuthService(persister)
    await reloaded.load()

    assert reloaded.get_user_by_api_key("secret").name == "phone"


@pytest.mark.asyncio
async def test_duplicate_name_is_rejected(auth):
    await register_confirmed(auth, "phone", "secret")

    with pytest.raises(UserExistsError):
        await auth.register("phone", "other")


@pytest.mark.asyncio
async def test_second_pending_registration_is_rejected(auth):
    first = asyncio.create_task(auth.register("phone", "secret"))
    await wait_until_pending(auth, "phone")

    with pytest.raises(RegistrationPendingError):
        await auth.register("phone", "other")

    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first
    assert not auth.is_pending("phone")


def test_confirming_unknown_registration(auth):
    with pytest.raises(RegistrationNotPendingError):
        auth.confirm_registration("nobody")


def test_confirmation_link_quotes_name(auth):
    assert auth.confirmation_link("my phone") == (
        "http://192.168.0.10:45452/confirm-registration?name=my%20phone"
    )


@pytest.mark.asyncio
async def test_authenticate(auth):
    await register_confirmed(auth, "phone", "secret")

    assert auth.authenticate("secret").name == "phone"

    with pytest.raises(UnauthorizedError):
        auth.authenticate(None)
    with pytest.raises(UnauthorizedError):
        auth.authenticate("wrong")


@pytest.mark.asyncio
async def test_disallowed_user_is_forbidden(persister):
    await persister.save(USERS_KEY, [{"name": "kid", "apiKey": "k", "allowed": False}])
    auth = AuthService(persister)
    await auth.load()

    with pytest.raises(ForbiddenError):
        auth.authenticate("k")
    with pytest.raises(ForbiddenError):
        auth.login("k")


@pytest.mark.asyncio
async def test_login(auth):
    await register_confirmed(auth, "phone", "secret")

    assert auth.login("secret").name == "phone"
    with pytest.raises(ForbiddenError):
        auth.login("unknown")
