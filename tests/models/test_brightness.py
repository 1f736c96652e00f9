import pytest

from models.brightness import AUTO_BRIGHTNESS, auto_brightness, parse_brightness
from models.errors import InvalidBrightnessError


@pytest.mark.parametrize("value,expected", [
    (0, 0),
    (100, 100),
    (55, 55),
    ("80", 80),
    (" 7 ", 7),
    (40.0, 40),
    ("auto", AUTO_BRIGHTNESS),
])
def test_parse_valid(value, expected):
    assert parse_brightness(value) == expected


@pytest.mark.parametrize("value", [-1, 101, 50.5, True, False, None, "AUTO", "bright", [50]])
def test_parse_invalid(value):
    with pytest.raises(InvalidBrightnessError):
        parse_brightness(value)


def test_invalid_brightness_is_a_value_error():
    with pytest.raises(ValueError):
        parse_brightness(200)


def test_auto_brightness_full_while_load_fits():
    assert auto_brightness(0.0, 0.5) == 100
    assert auto_brightness(0.5, 0.5) == 100


def test_auto_brightness_scales_down_to_max_load():
    assert auto_brightness(1.0, 0.5) == 50
    # floored
    assert auto_brightness(0.75, 0.5) == 66
