"""
Config Manager

Loads the YAML configuration (with include: support) and builds the typed
AppConfig. Falls back to factory defaults when the main file cannot be used.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Union

from models.config import AppConfig
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

# Environment override for the main config file
CONFIG_ENV_VAR = "LED_WEBSERVER_CONFIG"

SRC_DIR = Path(__file__).parent.parent


class ConfigManager:
    """
    Configuration manager with include system support

    Loads config.yaml and processes an include: directive to merge modular
    YAML files. Any failure (missing file, broken YAML, invalid values) falls
    back to factory_defaults.yaml.

    Example:
        config = ConfigManager().load()   # AppConfig
        config.port                       # 45451
        config.strip.led_count            # 141

        # Raw dict stays available
        manager = ConfigManager("config/config.yaml")
        manager.load()
        manager.data["strip"]
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        defaults_path: Union[str, Path] = "config/factory_defaults.yaml",
    ):
        """
        Args:
            config_path: Main config file (relative paths resolve against src/).
                Defaults to $LED_WEBSERVER_CONFIG, then config/config.yaml
            defaults_path: Factory defaults fallback
        """
        self.config_path = self._resolve(config_path or os.environ.get(CONFIG_ENV_VAR) or "config/config.yaml")
        self.factory_defaults_path = self._resolve(defaults_path)
        self.data: Dict = {}
        self.config: Optional[AppConfig] = None
        self.used_defaults = False

    @staticmethod
    def _resolve(path: Union[str, Path]) -> Path:
        path = Path(path)
        return path if path.is_absolute() else SRC_DIR / path

    def load(self) -> AppConfig:
        """
        Load YAML configuration

        Process:
        1. Load the main config file
        2. If it has an 'include:' list, merge those files in order
        3. Build AppConfig
        4. On any failure, load factory defaults instead
        """
        try:
            self.data = self._load_file(self.config_path)
            self.config = AppConfig.from_dict(self.data)
            self.used_defaults = False
            log.info("Configuration loaded", path=str(self.config_path))

        except Exception as ex:
            log.error("Failed to load config", path=str(self.config_path), error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")

            self.data = self._load_file(self.factory_defaults_path)
            self.config = AppConfig.from_dict(self.data)
            self.used_defaults = True

        log.debug(
            "Effective configuration",
            port=self.config.port,
            led_count=self.config.strip.led_count,
            driver=self.config.strip.driver.value,
            use_auth=self.config.use_auth,
        )
        return self.config

    def _load_file(self, path: Path) -> Dict:
        with open(path, "r", encoding="utf-8") as f:
            main_config = yaml.safe_load(f) or {}

        if not isinstance(main_config, dict):
            raise ValueError(f"{path.name} must contain a mapping at the top level")

        includes = main_config.pop("include", None)
        if not includes:
            return main_config

        log.info("Using include-based configuration", files=len(includes))
        merged = self._load_with_includes(includes, path.parent)
        # Keys in the main file win over included ones
        merged.update(main_config)
        return merged

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict:
        """Load and merge YAML files from an include list (later files win)"""
        merged: Dict = {}

        for filename in include_list:
            filepath = config_dir / filename
            with open(filepath, "r", encoding="utf-8") as f:
                file_data = yaml.safe_load(f)
            if file_data:
                merged.update(file_data)
                log.info(f"Loaded {filename}", keys=str(list(file_data.keys())))

        return merged
