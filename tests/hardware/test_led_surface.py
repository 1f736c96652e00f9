import pytest

from hardware.led.led_surface import LedSurface
from hardware.led.strip_factory import create_strip
from hardware.led.virtual_strip import VirtualStrip
from models.color import LedColor
from models.enums import StripDriver
from models.errors import InvalidBrightnessError, InvalidColorError, LedIndexError, LedStripLengthError

RED = LedColor.from_rgb(255, 0, 0)
WHITE = LedColor.from_rgb(255, 255, 255)
BLACK = LedColor.black()


def test_new_surface_is_black_at_full_brightness(surface):
    assert surface.led_count == 10
    assert surface.get_brightness() == 100
    assert surface.get_led_strip() == [BLACK] * 10


def test_writes_are_buffered_until_show(surface, strip):
    surface.fill_leds(RED)

    assert surface.get_raw_led_strip() == [RED] * 10
    assert strip.get_frame() == [BLACK] * 10
    assert strip.frames_pushed == 0


@pytest.mark.asyncio
async def test_show_pushes_rendered_frame(surface, strip):
    surface.fill_leds(RED).set_brightness(50)
    await surface.show()

    assert strip.frames_pushed == 1
    assert strip.get_frame() == [LedColor.from_rgb(128, 0, 0)] * 10
    # raw buffer keeps full colors
    assert surface.get_raw_led_strip() == [RED] * 10


def test_set_led_and_chaining(surface):
    result = surface.set_led(0, {"red": 1, "green": 2, "blue": 3}).set_led(9, (4, 5, 6))

    assert result is surface
    strip = surface.get_led_strip()
    assert strip[0].to_rgb() == (1, 2, 3)
    assert strip[9].to_rgb() == (4, 5, 6)
    assert strip[1] == BLACK


@pytest.mark.parametrize("index", [-1, 10, 100, True, "3", 1.0])
def test_set_led_rejects_out_of_range_index(surface, index):
    with pytest.raises(LedIndexError):
        surface.set_led(index, RED)


def test_set_led_rejects_invalid_color(surface):
    with pytest.raises(InvalidColorError):
        surface.set_led(0, {"red": 300, "green": 0, "blue": 0})
    assert surface.get_raw_led_strip()[0] == BLACK


def test_set_led_strip_requires_exact_length(surface):
    with pytest.raises(LedStripLengthError) as info:
        surface.set_led_strip([RED] * 9)

    assert info.value.expected == 10
    assert info.value.received == 9
    assert surface.get_raw_led_strip() == [BLACK] * 10


def test_set_led_strip_replaces_buffer(surface):
    colors = [LedColor.from_rgb(i, i, i) for i in range(10)]
    surface.set_led_strip(colors)
    assert surface.get_raw_led_strip() == colors


def test_clear_leds(surface):
    surface.fill_leds(RED).clear_leds()
    assert surface.get_raw_led_strip() == [BLACK] * 10


def test_invalid_brightness_keeps_previous_value(surface):
    surface.set_brightness(40)
    with pytest.raises(InvalidBrightnessError):
        surface.set_brightness(101)
    assert surface.get_brightness() == 40


def test_auto_brightness_limits_load(surface):
    surface.fill_leds(WHITE).set_brightness("auto")

    assert surface.get_brightness() == "auto"
    # full white is load 1.0 -> scaled to the 0.5 max load
    assert surface.effective_brightness() == 50
    assert surface.get_led_strip()[0].to_rgb() == (128, 128, 128)


def test_auto_brightness_keeps_light_strips_at_full(surface):
    surface.set_led(0, WHITE).set_brightness("auto")
    assert surface.effective_brightness() == 100


@pytest.mark.asyncio
async def test_listeners_receive_rendered_strip_once_per_show(surface):
    received = []
    unsubscribe = surface.on_led_strip_changed(received.append)

    surface.fill_leds(RED).set_brightness(50)
    await surface.show()
    unsubscribe()
    await surface.show()

    assert len(received) == 1
    assert received[0][0].to_rgb() == (128, 0, 0)


@pytest.mark.asyncio
async def test_async_listeners_are_awaited(surface):
    received = []

    async def listener(led_strip):
        received.append(led_strip)

    surface.on_led_strip_changed(listener)
    await surface.show()

    assert len(received) == 1


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_surface(surface, strip):
    received = []

    def broken(_):
        raise RuntimeError("listener bug")

    surface.on_led_strip_changed(broken)
    surface.on_led_strip_changed(received.append)

    await surface.fill_leds(RED).show()

    assert strip.frames_pushed == 1
    assert len(received) == 1


def test_brightness_listeners(surface):
    received = []
    unsubscribe = surface.on_brightness_changed(received.append)

    surface.set_brightness(30)
    unsubscribe()
    surface.set_brightness(60)

    assert received == [30]


def test_restore_adopts_state_without_show(surface, strip):
    received = []
    surface.on_led_strip_changed(received.append)

    surface.restore([RED] * 10, 20)

    assert surface.get_raw_led_strip() == [RED] * 10
    assert surface.get_brightness() == 20
    assert strip.frames_pushed == 0
    assert received == []


def test_restore_ignores_wrong_length_strip(surface):
    surface.restore([RED] * 3, None)
    assert surface.get_raw_led_strip() == [BLACK] * 10
    assert surface.get_brightness() == 100


def test_factory_virtual_driver():
    strip = create_strip(pixel_count=5, driver=StripDriver.VIRTUAL)
    assert isinstance(strip, VirtualStrip)
    assert strip.led_count == 5


def test_factory_falls_back_to_virtual_without_hardware():
    # No rpi_ws281x / no Pi: never raises, gives a virtual strip
    strip = create_strip(pixel_count=5, driver=StripDriver.AUTO, gpio_pin=18)
    assert strip.led_count == 5


def test_surface_uses_strip_length():
    assert LedSurface(VirtualStrip(3)).led_count == 3
