"""
Configuration persistence for the P2P rate alert system.
"""

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict

import yaml

from ..models.config import Configuration
from ..utils.logging import get_logger

logger = get_logger("config_manager")


class FileConfigurationManager:
    """
    Loads and saves the operator configuration file.

    The file format follows the extension: ``.yaml``/``.yml`` files are
    YAML, anything else is JSON. The configuration is read from disk on
    every ``get_config`` call so edits are visible on the next cycle.
    """

    def __init__(self, config_path: str):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. Created if missing.

        Raises:
            OSError: If the file cannot be created or read.
        """
        self.config_path = Path(config_path)
        self._lock = threading.Lock()

        # Fail fast if the location is unusable
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "a+", encoding="utf-8") as f:
            f.seek(0)
            content = f.read()

        try:
            self._parse(content)
        except ValueError as e:
            logger.warning(
                "Configuration file missing or invalid, writing defaults",
                extra={"config_path": str(self.config_path), "error": str(e)},
            )
            self.save_config(Configuration())

    @property
    def is_yaml(self) -> bool:
        return self.config_path.suffix.lower() in (".yaml", ".yml")

    def _parse(self, content: str) -> Configuration:
        if not content.strip():
            raise ValueError("configuration file is empty")

        try:
            if self.is_yaml:
                raw_config = yaml.safe_load(content)
            else:
                raw_config = json.loads(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        if not isinstance(raw_config, dict):
            raise ValueError("configuration root must be a mapping")

        try:
            config = Configuration.from_dict(raw_config)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Error parsing configuration: {e}")

        config.validate()
        return config

    def load_config(self) -> Configuration:
        """
        Load configuration from file.

        Raises:
            ValueError: If the file content is invalid.
            OSError: If the file cannot be read.
        """
        with open(self.config_path, "r", encoding="utf-8") as f:
            return self._parse(f.read())

    def get_config(self) -> Configuration:
        """
        Get the current configuration.

        A file that became unreadable or invalid since startup yields the
        defaults rather than an exception.
        """
        try:
            return self.load_config()
        except (OSError, ValueError) as e:
            logger.error(
                "Could not read configuration, using defaults",
                extra={"config_path": str(self.config_path), "error": str(e)},
            )
            return Configuration()

    def save_config(self, config: Configuration) -> None:
        """Persist the configuration. Failures are logged, never raised."""
        data = config.to_dict()

        with self._lock:
            try:
                tmp_path = self.config_path.with_name(self.config_path.name + ".tmp")
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(self._dump(data))
                os.replace(tmp_path, self.config_path)
                logger.info(
                    "Configuration saved", extra={"config_path": str(self.config_path)}
                )
            except OSError as e:
                logger.error(
                    "Could not save configuration",
                    extra={"config_path": str(self.config_path), "error": str(e)},
                )

    def _dump(self, data: Dict[str, Any]) -> str:
        if self.is_yaml:
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        return json.dumps(data, indent=2)
