"""
Module for loading uploader configuration.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.digital-downloads.com/api/v1/"


@dataclass(frozen=True)
class UploadConfig:
    """Explicit settings for talking to the control plane and storage backend."""
    access_token: str
    base_url: str = DEFAULT_BASE_URL
    max_concurrency: int = 4
    part_timeout: float = 300.0
    request_timeout: float = 30.0

    def __post_init__(self):
        """Validate the configuration."""
        for name in ("access_token", "base_url"):
            if not isinstance(getattr(self, name), str):
                raise ConfigError(f"{name} must be a string")
        if not isinstance(self.max_concurrency, int) or isinstance(self.max_concurrency, bool):
            raise ConfigError(f"max_concurrency must be an integer, got {self.max_concurrency!r}")
        for name in ("part_timeout", "request_timeout"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ConfigError(f"{name} must be a number, got {value!r}")
        if not self.access_token:
            raise ConfigError("access_token cannot be empty")
        if not self.base_url:
            raise ConfigError("base_url cannot be empty")
        if self.max_concurrency < 1:
            raise ConfigError(f"max_concurrency must be at least 1, got {self.max_concurrency}")
        if self.part_timeout <= 0 or self.request_timeout <= 0:
            raise ConfigError("timeouts must be positive")


def load_config(config_file: Optional[Path] = None,
                env: Optional[Mapping[str, str]] = None,
                **overrides) -> UploadConfig:
    """Build an UploadConfig from a JSON file and environment variables.

    Values from the environment win over the file, and explicit overrides
    win over both. Overrides set to None are ignored.

    Args:
        config_file: Optional path to a JSON config file
        env: Environment mapping (ACCESS_TOKEN, DDA_BASE_URL)
        **overrides: Field values taking precedence over everything else

    Returns:
        Validated UploadConfig

    Raises:
        ConfigError: If the config file is unreadable or not a JSON object,
            a value has the wrong type, or no access token is set
    """
    values = {}
    if config_file:
        try:
            with open(config_file) as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Error loading config file {config_file}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {config_file} must contain a JSON object")
        values.update(loaded)

    env = env or {}
    if env.get("ACCESS_TOKEN"):
        values["access_token"] = env["ACCESS_TOKEN"]
    if env.get("DDA_BASE_URL"):
        values["base_url"] = env["DDA_BASE_URL"]

    values.update({k: v for k, v in overrides.items() if v is not None})

    if not values.get("access_token"):
        raise ConfigError("env var ACCESS_TOKEN was not provided")

    known = set(UploadConfig.__dataclass_fields__)
    unknown = set(values) - known
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

    return UploadConfig(**{k: v for k, v in values.items() if k in known})
