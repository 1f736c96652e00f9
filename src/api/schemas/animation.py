"""
Animation schemas - Pydantic models for /led-strip/animation requests/responses
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Union


class StartAnimationRequest(BaseModel):
    """Body of POST /led-strip/animation/start"""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "animationScript": (
                    "for i in range(led_count):\n"
                    "    leds.set_led(i, (255, 0, 0))\n"
                    "    await leds.show()\n"
                    "    await sleep(0.05)\n"
                ),
                "brightness": 60,
            }
        },
    )

    animation_script: str = Field(alias="animationScript", description="Animation script source")
    brightness: Optional[Union[int, str]] = Field(None, description="Initial brightness, 0-100 or 'auto'")


class AnimationStatusResponse(BaseModel):
    """GET /led-strip/animation"""
    running: bool = Field(description="Whether an animation session owns the strip")
    state: Optional[str] = Field(None, description="Session state while running (starting, running)")
    pid: Optional[int] = Field(None, description="Runtime process id")


class AnimationFinishedResponse(BaseModel):
    """GET /led-strip/animation/finished"""
    state: str = Field(description="How the session ended: finished or stopped")
