"""
Configuration management for the link crawler.
"""

import os
import threading
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict
from pathlib import Path
import json
import logging
from jsonschema import validate, ValidationError

from link_crawler.concurrent.models import ClaimPolicy
from link_crawler.utils.errors import ConfigurationError


@dataclass
class TraversalConfig:
    """Traversal run settings."""
    root: str = "http://golang.org/"
    max_depth: int = 4
    # "on_fetch" (fetcher claims) or "on_spawn" (parent claims before scheduling)
    claim_policy: str = ClaimPolicy.ON_FETCH.value
    # Registered fetcher name: "fixture" or "http"
    fetcher: str = "fixture"
    # None waits for completion indefinitely
    wait_timeout: Optional[float] = None


@dataclass
class HTTPConfig:
    """HTTP fetcher settings."""
    timeout: float = 10.0
    user_agent: str = "link-crawler/0.1 (+https://pypi.org/project/link-crawler/)"


@dataclass
class SystemConfig:
    """Main system configuration."""
    traversal: TraversalConfig = field(default_factory=TraversalConfig)
    http: HTTPConfig = field(default_factory=HTTPConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def claim_policy(self) -> ClaimPolicy:
        return ClaimPolicy(self.traversal.claim_policy)


# Configuration schema for validation
CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "traversal": {
            "type": "object",
            "properties": {
                "root": {"type": "string", "minLength": 1},
                "max_depth": {"type": "integer", "minimum": 0, "maximum": 100},
                "claim_policy": {"type": "string", "enum": [p.value for p in ClaimPolicy]},
                "fetcher": {"type": "string", "enum": ["fixture", "http"]},
                "wait_timeout": {"type": ["number", "null"], "exclusiveMinimum": 0}
            },
            "additionalProperties": False
        },
        "http": {
            "type": "object",
            "properties": {
                "timeout": {"type": "number", "exclusiveMinimum": 0, "maximum": 300},
                "user_agent": {"type": "string", "minLength": 1}
            },
            "additionalProperties": False
        },
        "log_level": {
            "type": "string",
            "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        },
        "log_file": {"type": ["string", "null"]}
    },
    "additionalProperties": False
}


class ConfigManager:
    """Configuration manager with schema validation and change detection."""

    def __init__(self, config_path: str = "config.json"):
        self.config_path = Path(config_path)
        self._config: Optional[SystemConfig] = None
        self._last_modified: Optional[float] = None
        self._lock = threading.RLock()

    def validate_config(self, config_data: Dict[str, Any]) -> None:
        """Validate configuration data against schema."""
        try:
            validate(instance=config_data, schema=CONFIG_SCHEMA)
        except ValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e.message}",
                {"path": list(e.absolute_path)}
            )

    def load_config(self) -> SystemConfig:
        """Load configuration from file or environment variables."""
        with self._lock:
            if self.config_path.exists():
                current_modified = self.config_path.stat().st_mtime
                if self._config is None or current_modified != self._last_modified:
                    self._load_from_file()
                    self._last_modified = current_modified
            elif self._config is None:
                self._load_from_env()

            return self._config or SystemConfig()

    def _load_from_file(self) -> None:
        """Load configuration from JSON file with validation."""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.error(f"Failed to load config from file: {e}")
            if self._config is None:
                self._config = SystemConfig()
            return

        self.validate_config(config_data)
        self._config = self._dict_to_config(config_data)
        self._override_with_env_vars()
        logging.info(f"Configuration loaded and validated from {self.config_path}")

    def _override_with_env_vars(self) -> None:
        """Override configuration with environment variables."""
        traversal = self._config.traversal

        if os.getenv("CRAWLER_ROOT"):
            traversal.root = os.getenv("CRAWLER_ROOT")

        if os.getenv("CRAWLER_MAX_DEPTH"):
            traversal.max_depth = self._int_env("CRAWLER_MAX_DEPTH")

        if os.getenv("CRAWLER_CLAIM_POLICY"):
            traversal.claim_policy = os.getenv("CRAWLER_CLAIM_POLICY")

        if os.getenv("CRAWLER_FETCHER"):
            traversal.fetcher = os.getenv("CRAWLER_FETCHER")

        if os.getenv("CRAWLER_LOG_LEVEL"):
            self._config.log_level = os.getenv("CRAWLER_LOG_LEVEL").upper()

        self.validate_config(self._to_dict(self._config))

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        self._config = SystemConfig()
        self._override_with_env_vars()
        logging.info("Configuration loaded from environment variables")

    @staticmethod
    def _int_env(name: str) -> int:
        value = os.getenv(name)
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(
                f"Environment variable {name} must be an integer",
                {"value": value}
            )

    def _dict_to_config(self, data: Dict[str, Any]) -> SystemConfig:
        """Convert dictionary to SystemConfig object."""
        config = SystemConfig()

        if "traversal" in data:
            config.traversal = TraversalConfig(**data["traversal"])

        if "http" in data:
            config.http = HTTPConfig(**data["http"])

        config.log_level = data.get("log_level", config.log_level)
        config.log_file = data.get("log_file", config.log_file)

        return config

    @staticmethod
    def _to_dict(config: SystemConfig) -> Dict[str, Any]:
        return {
            "traversal": asdict(config.traversal),
            "http": asdict(config.http),
            "log_level": config.log_level,
            "log_file": config.log_file
        }

    def reload_if_changed(self) -> bool:
        """Check if config file has changed and reload if necessary."""
        with self._lock:
            if not self.config_path.exists():
                return False

            current_modified = self.config_path.stat().st_mtime
            if current_modified != self._last_modified:
                self.load_config()
                return True
            return False

    def export_config(self) -> Dict[str, Any]:
        """Export current configuration as dictionary."""
        with self._lock:
            if not self._config:
                return {}
            return self._to_dict(self._config)

    def save_config(self, config_path: Optional[str] = None) -> None:
        """Save current configuration to file."""
        with self._lock:
            if not self._config:
                raise ConfigurationError("No configuration loaded to save")

            save_path = Path(config_path) if config_path else self.config_path
            config_dict = self.export_config()

            # Validate before saving
            self.validate_config(config_dict)

            with open(save_path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)

            logging.info(f"Configuration saved to {save_path}")


def get_config(config_path: str = "config.json") -> SystemConfig:
    """Load the system configuration from ``config_path`` or the environment."""
    return ConfigManager(config_path).load_config()
