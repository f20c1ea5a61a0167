"""
Configuration loader for the DOI deposit job.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..core.exceptions import ConfigError


logger = logging.getLogger(__name__)


class DepositConfig:
    """
    Configuration for the DOI deposit job.

    Loads YAML configuration files and applies environment overrides.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (optional)
        """
        self.config_path = Path(config_path) if config_path else None
        self.config = self._default_config()
        if self.config_path:
            _merge(self.config, self._load_config())
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        logger.info(f"Loading config from: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"Config root must be a mapping: {self.config_path}")
        return config

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "deposit": {
                "export_dir": "local/deposit/export",
                "file_prefix": "datacite",
                "document_format": "datacite-xml",
            },
            "transport": {
                "type": "datacite",
                "api_url": "https://mds.datacite.org/",
                "test_api_url": "https://mds.test.datacite.org/",
                "test_mode": False,
                "timeout": 30,
                "user_agent": None,
            },
            "log_sink": {
                "enabled": True,
                "base_dir": "local/deposit/run_logs",
            },
            "logging": {
                "level": "INFO",
                "structured": False,
            },
            "collaborators": {
                "factory": None,
            },
            "tenants": [],
        }

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        export_dir = os.environ.get("DOI_DEPOSIT_EXPORT_DIR")
        if export_dir:
            self.config.setdefault("deposit", {})["export_dir"] = export_dir

        log_dir = os.environ.get("DOI_DEPOSIT_LOG_DIR")
        if log_dir:
            self.config.setdefault("log_sink", {})["base_dir"] = log_dir

        api_url = os.environ.get("DOI_DEPOSIT_API_URL")
        if api_url:
            self.config.setdefault("transport", {})["api_url"] = api_url

    def get_deposit_config(self) -> Dict[str, Any]:
        """Get deposit (export file) configuration."""
        return self.config.get("deposit", {})

    def get_transport_config(self) -> Dict[str, Any]:
        """Get transport configuration."""
        return self.config.get("transport", {})

    def get_log_sink_config(self) -> Dict[str, Any]:
        """Get run log sink configuration."""
        return self.config.get("log_sink", {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get Python logging configuration."""
        return self.config.get("logging", {})

    def get_tenants(self) -> List[Dict[str, Any]]:
        """Get the in-memory tenant definitions."""
        return self.config.get("tenants") or []

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge ``override`` into ``base``."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
