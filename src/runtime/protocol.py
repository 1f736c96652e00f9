"""
Session protocol - messages between the session manager and the runtime

Newline-delimited JSON, one message per line, UTF-8. Every message carries an
"action" tag used as the pydantic discriminator.

Parent -> child:
    {"action": "set-brightness", "brightness": 80}
    {"action": "get-led-strip", "request_id": 3}

Child -> parent:
    {"action": "led-strip-changed", "led_strip": [...]}
    {"action": "led-strip", "request_id": 3, "led_strip": [...]}
    {"action": "finished", "error": null, "led_strip": [...], "brightness": 80}
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from models.brightness import Brightness
from models.color import LedColor
from models.errors import ProtocolError


class _Message(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


# === Parent -> child ===

class SetBrightnessMessage(_Message):
    action: Literal["set-brightness"] = "set-brightness"
    brightness: Brightness


class GetLedStripMessage(_Message):
    action: Literal["get-led-strip"] = "get-led-strip"
    request_id: int


# === Child -> parent ===

class LedStripChangedMessage(_Message):
    action: Literal["led-strip-changed"] = "led-strip-changed"
    led_strip: List[LedColor]


class LedStripMessage(_Message):
    """Reply to GetLedStripMessage with the same request_id"""
    action: Literal["led-strip"] = "led-strip"
    request_id: int
    led_strip: List[LedColor]


class FinishedMessage(_Message):
    """
    Last message of a session

    error is the script's failure text (None on success). led_strip is the
    raw buffer and brightness the surface brightness at exit, so the control
    process can adopt the final state.
    """
    action: Literal["finished"] = "finished"
    error: Optional[str] = None
    led_strip: Optional[List[LedColor]] = None
    brightness: Optional[Brightness] = None


SessionMessage = Annotated[
    Union[
        SetBrightnessMessage,
        GetLedStripMessage,
        LedStripChangedMessage,
        LedStripMessage,
        FinishedMessage,
    ],
    Field(discriminator="action"),
]

_adapter: TypeAdapter = TypeAdapter(SessionMessage)


def encode_message(message: BaseModel) -> bytes:
    """Serialize one message as a JSON line"""
    return message.model_dump_json().encode("utf-8") + b"\n"


def decode_message(line: Union[bytes, str]) -> SessionMessage:
    """
    Parse one JSON line into its message model

    Raises:
        ProtocolError: invalid UTF-8, invalid JSON or unknown shape
    """
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as ex:
            raise ProtocolError(f"Session message is not UTF-8: {ex}") from ex

    line = line.strip()
    if not line:
        raise ProtocolError("Empty session message")

    try:
        return _adapter.validate_json(line)
    except ValidationError as ex:
        raise ProtocolError(
            f"Invalid session message: {ex.error_count()} error(s), first: {ex.errors()[0]['msg']}"
        ) from ex
