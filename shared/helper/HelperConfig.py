"""Central configuration helper for bluffy."""

import logging
import os
from typing import Any

from shared.models.config import EnvConfig


class HelperConfig:
    """Central configuration helper. Reads all settings from environment variables."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string environment variable.

        Args:
            key (str): Environment variable name (case-insensitive).
            default (str | None): Fallback value if the variable is not set.

        Returns:
            str: The resolved value.

        Raises:
            ValueError: If the variable is not set and no default is provided.
        """
        key = key.upper()
        val = os.getenv(key) or None  # empty string → None
        if val is None and default is None:
            raise ValueError(f"Environment variable '{key}' is not set.")
        return val.strip() if val is not None else default

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric environment variable.

        Args:
            key (str): Environment variable name (case-insensitive).
            default (float | int | None): Fallback value if the variable is not set.

        Returns:
            float | int: The resolved numeric value.

        Raises:
            ValueError: If the variable is not set and no default is provided.
            ValueError: If the value cannot be parsed as a number.
        """
        key = key.upper()
        raw = os.getenv(key) or None
        if raw is None:
            if default is None:
                raise ValueError(f"Environment variable '{key}' is not set.")
            return default
        try:
            return int(raw) if "." not in raw else float(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key}' is not a valid number: '{raw}'.")

    def get_env_config_val(self, config: EnvConfig) -> Any:
        """Resolve a declared EnvConfig entry with the reader matching its val_type.

        Args:
            config (EnvConfig): The declared key, type and default.

        Returns:
            Any: The resolved value.

        Raises:
            ValueError: If the type is unsupported or the value is missing/invalid.
        """
        if config.val_type == "string":
            return self.get_string_val(config.env_key, default=config.default)
        elif config.val_type == "number":
            return self.get_number_val(config.env_key, default=config.default)
        raise ValueError(f"Unsupported config value type '{config.val_type}' for env key '{config.env_key}'.")

    def get_logger(self) -> logging.Logger:
        """Return the application logger."""
        return self._logger
