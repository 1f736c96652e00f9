"""
LedColor model - one RGB pixel

Immutable value type shared by the LED surface, the session protocol and the
API schemas. Serializes as {"red": .., "green": .., "blue": ..}, the wire
format used by HTTP clients and the runtime child.
"""

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models.errors import InvalidColorError


class LedColor(BaseModel):
    """
    RGB color with 8-bit channels

    Examples:
        red = LedColor(red=255, green=0, blue=0)
        red = LedColor.from_rgb(255, 0, 0)
        red = LedColor.coerce({"red": 255, "green": 0, "blue": 0})
        red = LedColor.coerce((255, 0, 0))

        half = red.scaled(50)   # LedColor(red=128, green=0, blue=0)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    red: int = Field(0, ge=0, le=255, strict=True)
    green: int = Field(0, ge=0, le=255, strict=True)
    blue: int = Field(0, ge=0, le=255, strict=True)

    # === CONSTRUCTORS ===

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> 'LedColor':
        return cls(red=r, green=g, blue=b)

    @classmethod
    def black(cls) -> 'LedColor':
        return cls()

    @classmethod
    def coerce(cls, value: Any) -> 'LedColor':
        """
        Build a LedColor from the loose shapes scripts and clients send

        Accepts LedColor, a mapping with red/green/blue keys, or a 3-item
        sequence of ints.

        Raises:
            InvalidColorError: value has another shape or channels out of range
        """
        if isinstance(value, LedColor):
            return value

        try:
            if isinstance(value, dict):
                return cls.model_validate(value)
            if isinstance(value, (tuple, list)) and len(value) == 3:
                r, g, b = value
                return cls(red=r, green=g, blue=b)
        except ValidationError as ex:
            raise InvalidColorError(
                f"Color channels must be integers between 0 and 255 (received {value!r})."
            ) from ex

        raise InvalidColorError(
            f"Color must look like {{'red': 255, 'green': 0, 'blue': 0}} (received {value!r})."
        )

    # === RENDERING ===

    def to_rgb(self) -> Tuple[int, int, int]:
        return self.red, self.green, self.blue

    def scaled(self, brightness: int) -> 'LedColor':
        """Apply a 0-100 brightness: channel * brightness / 100, rounded"""
        if brightness >= 100:
            return self
        return LedColor(
            red=round(self.red * brightness / 100),
            green=round(self.green * brightness / 100),
            blue=round(self.blue * brightness / 100),
        )

    def __str__(self) -> str:
        return f"rgb({self.red}, {self.green}, {self.blue})"
