"""
Configuration models

Typed view of config.yaml, built by ConfigManager.from_dict(). Defaults match
factory_defaults.yaml.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.brightness import Brightness, parse_brightness
from models.enums import LogLevel, StripDriver


@dataclass
class StripConfig:
    led_count: int = 141
    driver: StripDriver = StripDriver.AUTO
    gpio_pin: int = 18
    color_order: str = "GRB"
    brightness: Brightness = 100
    auto_brightness_max_load: float = 0.5

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StripConfig':
        led_count = int(data.get("led_count", cls.led_count))
        if led_count <= 0:
            raise ValueError(f"strip.led_count must be positive (received {led_count})")

        return cls(
            led_count=led_count,
            driver=StripDriver(str(data.get("driver", cls.driver.value)).lower()),
            gpio_pin=int(data.get("gpio_pin", cls.gpio_pin)),
            color_order=str(data.get("color_order", cls.color_order)).upper(),
            brightness=parse_brightness(data.get("brightness", cls.brightness)),
            auto_brightness_max_load=float(data.get("auto_brightness_max_load", cls.auto_brightness_max_load)),
        )


@dataclass
class AnimationConfig:
    query_timeout: float = 5.0
    # StreamReader line limit for runtime messages (one strip per line)
    stream_limit: int = 1024 * 1024
    runtime_log_level: LogLevel = LogLevel.INFO

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnimationConfig':
        return cls(
            query_timeout=float(data.get("query_timeout", cls.query_timeout)),
            stream_limit=int(data.get("stream_limit", cls.stream_limit)),
            runtime_log_level=LogLevel[str(data.get("runtime_log_level", cls.runtime_log_level.name)).upper()],
        )


@dataclass
class AppConfig:
    """Whole server configuration"""
    host: str = "0.0.0.0"
    port: int = 45451
    confirmation_port: int = 45452
    use_auth: bool = True
    use_socketio: bool = True
    log_requests: bool = True
    log_level: LogLevel = LogLevel.INFO
    storage_dir: str = ".storage"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    strip: StripConfig = field(default_factory=StripConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'AppConfig':
        data = data or {}
        server = data.get("server", {}) or {}
        auth = data.get("auth", {}) or {}
        logging = data.get("logging", {}) or {}

        return cls(
            host=str(server.get("host", cls.host)),
            port=int(server.get("port", cls.port)),
            confirmation_port=int(auth.get("confirmation_port", cls.confirmation_port)),
            use_auth=bool(auth.get("use_auth", cls.use_auth)),
            use_socketio=bool(server.get("use_socketio", cls.use_socketio)),
            log_requests=bool(logging.get("log_requests", cls.log_requests)),
            log_level=LogLevel[str(logging.get("level", cls.log_level.name)).upper()],
            storage_dir=str(data.get("storage_dir", cls.storage_dir)),
            cors_origins=list(server.get("cors_origins", ["*"])),
            strip=StripConfig.from_dict(data.get("strip", {}) or {}),
            animation=AnimationConfig.from_dict(data.get("animation", {}) or {}),
        )
