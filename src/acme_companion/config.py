"""Configuration loading from an optional YAML file and the environment."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from ruamel.yaml import YAML
from pydantic import ValidationError

from acme_companion.models.config import CompanionConfig
from acme_companion.preflight.notices import DEPRECATED_INPUTS


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "/app/companion.yaml"

# Environment variable -> location in the configuration tree
ENV_FIELDS: Dict[str, Tuple[str, ...]] = {
    "DOCKER_HOST": ("docker", "host"),
    "DOCKER_API_VERSION": ("docker", "api_version"),
    "NGINX_PROXY_CONTAINER": ("containers", "proxy"),
    "NGINX_DOCKER_GEN_CONTAINER": ("containers", "renderer"),
    "DHPARAM_BITS": ("dhparam", "bits"),
    "DHPARAM_LOCK_TIMEOUT": ("dhparam", "lock_timeout"),
    "ACME_CA_URI": ("acme", "ca_uri"),
    "LOG_LEVEL": ("log_level",),
}

# An empty DHPARAM_BITS is an error, not "unset"
KEEP_EMPTY = {"DHPARAM_BITS"}


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


class ConfigManager:
    """Builds the validated companion configuration."""

    def __init__(self, env: Optional[Mapping[str, str]] = None, config_file: Optional[Path] = None):
        """Initialize configuration manager."""
        self.env = dict(os.environ if env is None else env)
        if config_file is None:
            config_file = Path(self.env.get("COMPANION_CONFIG_FILE") or DEFAULT_CONFIG_FILE)
        self.config_file = Path(config_file)
        self.yaml = YAML(typ="safe")
        self.config: Optional[CompanionConfig] = None

    def load(self) -> CompanionConfig:
        """Load, merge and validate configuration."""
        data = self._read_file()
        data = merge_dicts(data, self._read_env())

        try:
            self.config = CompanionConfig(**data)
        except ValidationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise

        logger.debug(f"Loaded configuration: {self.config}")
        return self.config

    def _read_file(self) -> Dict[str, Any]:
        """Read the optional YAML configuration file."""
        if not self.config_file.exists():
            logger.debug(f"No configuration file at {self.config_file}")
            return {}

        data = self.yaml.load(self.config_file.read_text())
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {self.config_file} must contain a mapping")
        logger.debug(f"Loaded configuration file: {self.config_file}")
        return data

    def _read_env(self) -> Dict[str, Any]:
        """Translate recognized environment variables into a config tree."""
        data: Dict[str, Any] = {}

        for name, path in ENV_FIELDS.items():
            if name not in self.env:
                continue
            value = self.env[name]
            if value == "" and name not in KEEP_EMPTY:
                continue
            node = data
            for key in path[:-1]:
                node = node.setdefault(key, {})
            node[path[-1]] = value

        if "DEBUG" in self.env:
            data["debug"] = self.env["DEBUG"] == "true"

        data["deprecated_env"] = {
            name: self.env[name] for name in DEPRECATED_INPUTS if name in self.env
        }
        return data
