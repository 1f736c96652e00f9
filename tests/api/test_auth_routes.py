"""
API-key auth: protected routes, registration with confirmation, login
"""

import asyncio

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.confirmation import create_confirmation_app
from api.dependencies import set_service_container
from api.main import create_app
from models.config import AppConfig
from services.auth_service import USERS_KEY, AuthService
from services.persister import JsonPersister


@pytest_asyncio.fixture
async def auth_service(tmp_path):
    persister = JsonPersister(tmp_path)
    await persister.save(USERS_KEY, [
        {"name": "phone", "apiKey": "phone-key", "allowed": True},
        {"name": "kid", "apiKey": "kid-key", "allowed": False},
    ])
    service = AuthService(persister, "http://127.0.0.1:45452")
    await service.load()
    return service


@pytest_asyncio.fixture
async def secured(services, auth_service):
    services.config = AppConfig(use_auth=True)
    services.auth_service = auth_service
    set_service_container(services)

    app = create_app(log_requests=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest_asyncio.fixture
async def confirmation(auth_service):
    app = create_confirmation_app(auth_service)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://confirm") as http:
        yield http


# === Protected routes ===

@pytest.mark.asyncio
async def test_missing_key_is_unauthorized(secured):
    response = await secured.get("/led-strip")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_unknown_key_is_unauthorized(secured):
    response = await secured.get("/led-strip", params={"apiKey": "nope"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_key_in_query(secured):
    response = await secured.get("/led-strip", params={"apiKey": "phone-key"})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_key_in_bearer_header(secured):
    response = await secured.get("/led-strip/brightness", headers={"Authorization": "Bearer phone-key"})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_malformed_authorization_header(secured):
    response = await secured.get("/led-strip", headers={"Authorization": "Token phone-key"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_disallowed_user_is_forbidden(secured):
    response = await secured.post("/led-strip/clear", params={"apiKey": "kid-key"})

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_animation_and_system_routes_are_protected(secured):
    assert (await secured.get("/led-strip/animation")).status_code == 401
    assert (await secured.get("/api/system/health")).status_code == 401
    assert (await secured.get("/api/health")).status_code == 200


# === Open routes ===

@pytest.mark.asyncio
async def test_login_required(secured):
    assert (await secured.get("/login-required")).json() == {"loginRequired": True}


@pytest.mark.asyncio
async def test_login_not_required_without_auth(client):
    assert (await client.get("/login-required")).json() == {"loginRequired": False}


@pytest.mark.asyncio
async def test_register_and_login_disabled_without_auth(client):
    register = await client.post("/register", json={"name": "phone", "apiKey": "k"})
    login = await client.post("/login", params={"apiKey": "k"})

    assert register.status_code == 404
    assert register.json()["error"]["code"] == "AUTH_DISABLED"
    assert login.status_code == 404


@pytest.mark.asyncio
async def test_login(secured):
    response = await secured.post("/login", params={"apiKey": "phone-key"})

    assert response.json() == {"loggedIn": True}


@pytest.mark.asyncio
async def test_login_failures(secured):
    missing = await secured.post("/login")
    unknown = await secured.post("/login", params={"apiKey": "nope"})
    disallowed = await secured.post("/login", params={"apiKey": "kid-key"})

    assert missing.status_code == 400
    assert missing.json()["error"]["code"] == "MISSING_PARAMETER"
    assert unknown.status_code == 403
    assert disallowed.status_code == 403


# === Registration ===

@pytest.mark.asyncio
async def test_registration_is_confirmed_out_of_band(secured, confirmation, auth_service):
    registering = asyncio.create_task(
        secured.post("/register", json={"name": "tablet", "apiKey": "tablet-key"})
    )
    for _ in range(200):
        if auth_service.is_pending("tablet"):
            break
        await asyncio.sleep(0.01)

    assert not registering.done()

    confirmed = await confirmation.get("/confirm-registration", params={"name": "tablet"})
    assert confirmed.status_code == 200
    assert confirmed.text == "User 'tablet' was successfully registered."

    response = await asyncio.wait_for(registering, 5)
    assert response.status_code == 200
    assert response.json() == {"apiKey": "tablet-key"}

    assert (await secured.get("/led-strip", params={"apiKey": "tablet-key"})).status_code == 200


@pytest.mark.asyncio
async def test_register_existing_name(secured):
    response = await secured.post("/register", json={"name": "phone", "apiKey": "other"})

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "USER_EXISTS"


@pytest.mark.asyncio
async def test_register_requires_fields(secured):
    response = await secured.post("/register", json={"name": ""})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_confirm_unknown_registration(confirmation):
    unknown = await confirmation.get("/confirm-registration", params={"name": "ghost"})
    missing = await confirmation.get("/confirm-registration")

    assert unknown.status_code == 400
    assert unknown.json()["error"]["code"] == "REGISTRATION_NOT_PENDING"
    assert missing.status_code == 400
