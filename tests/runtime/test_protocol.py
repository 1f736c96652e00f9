import json

import pytest

from models.color import LedColor
from models.errors import ProtocolError
from runtime.protocol import (
    FinishedMessage,
    GetLedStripMessage,
    LedStripChangedMessage,
    LedStripMessage,
    SetBrightnessMessage,
    decode_message,
    encode_message,
)

STRIP = [LedColor.from_rgb(1, 2, 3), LedColor.from_rgb(4, 5, 6)]


@pytest.mark.parametrize("message", [
    SetBrightnessMessage(brightness=80),
    SetBrightnessMessage(brightness="auto"),
    GetLedStripMessage(request_id=7),
    LedStripChangedMessage(led_strip=STRIP),
    LedStripMessage(request_id=7, led_strip=STRIP),
    FinishedMessage(),
    FinishedMessage(error="ValueError: boom", led_strip=STRIP, brightness=40),
])
def test_every_message_kind_survives_the_wire(message):
    line = encode_message(message)

    assert line.endswith(b"\n")
    assert line.count(b"\n") == 1
    assert decode_message(line) == message


def test_wire_format_uses_action_tag_and_color_keys():
    payload = json.loads(encode_message(LedStripMessage(request_id=1, led_strip=STRIP[:1])))

    assert payload == {
        "action": "led-strip",
        "request_id": 1,
        "led_strip": [{"red": 1, "green": 2, "blue": 3}],
    }


def test_decode_accepts_str_lines():
    message = decode_message('{"action": "get-led-strip", "request_id": 3}\n')
    assert isinstance(message, GetLedStripMessage)
    assert message.request_id == 3


@pytest.mark.parametrize("line", [
    b"",
    b"\n",
    b"not json\n",
    b"\xff\xfe\n",
    b'{"brightness": 50}\n',
    b'{"action": "explode"}\n',
    b'{"action": "set-brightness", "brightness": 50, "extra": 1}\n',
    b'{"action": "get-led-strip"}\n',
    b'{"action": "led-strip-changed", "led_strip": [{"red": 999, "green": 0, "blue": 0}]}\n',
])
def test_malformed_lines_are_rejected(line):
    with pytest.raises(ProtocolError):
        decode_message(line)
