import os
from logging import Logger
from typing import Any

import yaml
from simple_logger.logger import get_logger


class Config:
    def __init__(self, logger: Logger | None = None) -> None:
        self.logger = logger or get_logger(name="config")
        self.data_dir: str = os.environ.get("REPO_BOT_DATA_DIR", "/home/repo-bot/data")
        self.config_path: str = os.path.join(self.data_dir, "config.yaml")
        self.exists()

    def exists(self) -> None:
        if not os.path.isfile(self.config_path):
            raise FileNotFoundError(f"Config file {self.config_path} not found")

    @property
    def root_data(self) -> dict[str, Any]:
        try:
            with open(self.config_path) as fd:
                return yaml.safe_load(fd) or {}
        except FileNotFoundError:
            # Existence is validated in __init__, so the file vanished in between.
            self.logger.exception(f"Config file not found: {self.config_path}")
            raise
        except yaml.YAMLError:
            self.logger.exception(f"Config file has invalid YAML syntax: {self.config_path}")
            raise
        except PermissionError:
            self.logger.exception(f"Permission denied reading config file: {self.config_path}")
            raise

    def get_value(self, value: str, return_on_none: Any = None, extra_dict: dict[str, Any] | None = None) -> Any:
        """
        Get value from config

        Supports dot notation for nested values (e.g., "graphql.retry-count", "rest.timeout")

        Order of getting value:
            1. extra_dict (caller overrides)
            2. Root level config file (config.yaml)
        """
        if extra_dict:
            result = self._get_nested_value(value, extra_dict)
            if result is not None:
                return result

        result = self._get_nested_value(value, self.root_data)
        if result is not None:
            return result

        return return_on_none

    def _get_nested_value(self, key: str, data: dict[str, Any]) -> Any:
        """
        Get value from nested dict using dot notation.

        Args:
            key: Key with optional dot notation (e.g., "graphql.timeout")
            data: Dictionary to search

        Returns:
            Value if found, None otherwise
        """
        current = data

        for k in key.split("."):
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return None

        return current
