"""
LED strip schemas - request/response bodies for /led-strip routes

Field names keep the camelCase keys HTTP clients already send (ledStrip,
...). Colors are accepted loosely and validated by the service so a bad
color is a 400 INVALID_COLOR, like an out-of-range index.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union

from models.color import LedColor

BrightnessValue = Union[int, str]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FillRequest(_CamelModel):
    """Body of POST /led-strip/fill and POST /led-strip/led/{led_index}/set"""
    color: Dict[str, Any] = Field(description="Color as {red, green, blue} with 0-255 channels")
    brightness: Optional[BrightnessValue] = Field(None, description="0-100 or 'auto'")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"color": {"red": 255, "green": 0, "blue": 0}, "brightness": 80}
        },
    )


class SetLedStripRequest(_CamelModel):
    """Body of POST /led-strip/set"""
    led_strip: List[Dict[str, Any]] = Field(alias="ledStrip", description="One color per LED")
    brightness: Optional[BrightnessValue] = Field(None, description="0-100 or 'auto'")


class BrightnessRequest(_CamelModel):
    """Body of POST /led-strip/brightness/set"""
    brightness: BrightnessValue = Field(description="0-100 or 'auto'")


class LedStripResponse(_CamelModel):
    """Rendered strip, brightness applied"""
    led_strip: List[LedColor] = Field(alias="ledStrip")


class BrightnessResponse(_CamelModel):
    brightness: BrightnessValue
