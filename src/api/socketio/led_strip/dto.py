from typing import Any, Dict, List

from models.color import LedColor


def led_strip_payload(led_strip: List[LedColor]) -> List[Dict[str, Any]]:
    """LedColor list as plain {red, green, blue} dicts for emit()"""
    return [color.model_dump() for color in led_strip]
