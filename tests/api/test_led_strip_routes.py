"""
LED strip endpoints through the ASGI app (auth disabled)
"""

import pytest

from models.color import LedColor

RED = {"red": 255, "green": 0, "blue": 0}
BLACK = {"red": 0, "green": 0, "blue": 0}


@pytest.mark.asyncio
async def test_get_led_strip(client):
    response = await client.get("/led-strip")

    assert response.status_code == 200
    assert response.json() == {"ledStrip": [BLACK] * 10}


@pytest.mark.asyncio
async def test_fill(client, strip):
    response = await client.post("/led-strip/fill", json={"color": RED})

    assert response.status_code == 200
    assert response.json()["ledStrip"] == [RED] * 10
    assert strip.get_frame() == [LedColor(**RED)] * 10


@pytest.mark.asyncio
async def test_fill_with_brightness(client):
    response = await client.post("/led-strip/fill", json={"color": RED, "brightness": 50})

    assert response.json()["ledStrip"][0] == {"red": 128, "green": 0, "blue": 0}
    assert (await client.get("/led-strip/brightness")).json() == {"brightness": 50}


@pytest.mark.asyncio
async def test_fill_with_invalid_color(client):
    response = await client.post("/led-strip/fill", json={"color": {"red": 300, "green": 0, "blue": 0}})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_COLOR"


@pytest.mark.asyncio
async def test_fill_without_color_is_a_validation_error(client):
    response = await client.post("/led-strip/fill", json={})

    assert response.status_code == 422
    body = response.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["validation_errors"]


@pytest.mark.asyncio
async def test_clear(client):
    await client.post("/led-strip/fill", json={"color": RED})
    response = await client.post("/led-strip/clear")

    assert response.json()["ledStrip"] == [BLACK] * 10


@pytest.mark.asyncio
async def test_set_single_led(client):
    response = await client.post("/led-strip/led/2/set", json={"color": RED})

    led_strip = response.json()["ledStrip"]
    assert led_strip[2] == RED
    assert led_strip[1] == BLACK


@pytest.mark.asyncio
async def test_set_single_led_out_of_range(client):
    response = await client.post("/led-strip/led/10/set", json={"color": RED})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_LED_INDEX"
    assert error["details"]["index"] == 10


@pytest.mark.asyncio
async def test_set_whole_strip(client):
    colors = [{"red": i, "green": i, "blue": i} for i in range(10)]
    response = await client.post("/led-strip/set", json={"ledStrip": colors})

    assert response.status_code == 200
    assert response.json()["ledStrip"] == colors


@pytest.mark.asyncio
async def test_set_whole_strip_with_wrong_length(client):
    response = await client.post("/led-strip/set", json={"ledStrip": [RED] * 3})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INVALID_LED_STRIP"
    assert error["details"]["expected"] == 10


@pytest.mark.asyncio
async def test_brightness(client, surface):
    response = await client.post("/led-strip/brightness/set", json={"brightness": 30})

    assert response.json() == {"brightness": 30}
    assert surface.get_brightness() == 30


@pytest.mark.asyncio
async def test_auto_brightness(client):
    response = await client.post("/led-strip/brightness/set", json={"brightness": "auto"})

    assert response.json() == {"brightness": "auto"}


@pytest.mark.asyncio
@pytest.mark.parametrize("brightness", [101, -1, "dim"])
async def test_invalid_brightness(client, surface, brightness):
    response = await client.post("/led-strip/brightness/set", json={"brightness": brightness})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_BRIGHTNESS"
    assert surface.get_brightness() == 100


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/health")

    assert response.json()["status"] == "healthy"
