import pytest

from managers.config_manager import CONFIG_ENV_VAR, ConfigManager
from models.enums import LogLevel, StripDriver


@pytest.fixture
def defaults(tmp_path):
    path = tmp_path / "defaults.yaml"
    path.write_text(
        "server:\n"
        "  port: 45451\n"
        "strip:\n"
        "  led_count: 141\n"
        "  driver: virtual\n",
        encoding="utf-8",
    )
    return path


def test_loads_main_file(tmp_path, defaults):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "server:\n"
        "  port: 8080\n"
        "  cors_origins: [http://localhost:3000]\n"
        "auth:\n"
        "  use_auth: false\n"
        "logging:\n"
        "  level: debug\n"
        "strip:\n"
        "  led_count: 30\n"
        "  driver: VIRTUAL\n"
        "  brightness: auto\n"
        "animation:\n"
        "  query_timeout: 2.5\n",
        encoding="utf-8",
    )

    manager = ConfigManager(config_file, defaults_path=defaults)
    config = manager.load()

    assert not manager.used_defaults
    assert config.port == 8080
    assert config.cors_origins == ["http://localhost:3000"]
    assert config.use_auth is False
    assert config.log_level == LogLevel.DEBUG
    assert config.strip.led_count == 30
    assert config.strip.driver == StripDriver.VIRTUAL
    assert config.strip.brightness == "auto"
    assert config.animation.query_timeout == 2.5
    # untouched sections keep their defaults
    assert config.confirmation_port == 45452
    assert config.use_socketio is True


def test_includes_are_merged(tmp_path, defaults):
    (tmp_path / "server.yaml").write_text("server:\n  port: 9000\n", encoding="utf-8")
    (tmp_path / "strip.yaml").write_text("strip:\n  led_count: 12\n", encoding="utf-8")
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "include:\n"
        "  - server.yaml\n"
        "  - strip.yaml\n"
        "strip:\n"
        "  led_count: 60\n",
        encoding="utf-8",
    )

    config = ConfigManager(config_file, defaults_path=defaults).load()

    assert config.port == 9000
    # main file wins over includes
    assert config.strip.led_count == 60


@pytest.mark.parametrize("content", [
    "server: [unclosed\n",
    "- just\n- a list\n",
    "strip:\n  led_count: 0\n",
    "strip:\n  brightness: 150\n",
    "strip:\n  driver: plasma\n",
])
def test_falls_back_to_defaults(tmp_path, defaults, content):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(content, encoding="utf-8")

    manager = ConfigManager(config_file, defaults_path=defaults)
    config = manager.load()

    assert manager.used_defaults
    assert config.strip.led_count == 141
    assert config.strip.driver == StripDriver.VIRTUAL


def test_missing_file_falls_back(tmp_path, defaults):
    manager = ConfigManager(tmp_path / "nope.yaml", defaults_path=defaults)

    assert manager.load().port == 45451
    assert manager.used_defaults


def test_environment_variable_selects_file(tmp_path, defaults, monkeypatch):
    config_file = tmp_path / "env.yaml"
    config_file.write_text("server:\n  port: 7000\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    manager = ConfigManager(defaults_path=defaults)

    assert manager.config_path == config_file
    assert manager.load().port == 7000


def test_shipped_configuration_loads():
    manager = ConfigManager("config/config.yaml")
    config = manager.load()

    assert not manager.used_defaults
    assert config.port == 45451
    assert config.strip.led_count == 141
