"""Configuration management for pipeline-cli."""

import logging
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from pipeline_cli.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Config:
    """Manages tool settings from file and environment variables."""

    DEFAULT_CONFIG_PATH = Path.home() / ".pipeline-cli" / "config.yaml"

    DEFAULT_CONFIG = {
        "kubeconfig_dir": "/root/.cert",
        "registry_user": None,
        "registry_password": None,
        "smtp_host": None,
        "smtp_port": 25,
        "smtp_sender": "pipeline-cli@localhost",
        "sonar_scanner": "sonar-scanner",
        "command_timeout": None,
        "scan_timeout": 900,
    }

    ENV_OVERRIDES = {
        "PIPELINE_KUBECONFIG_DIR": "kubeconfig_dir",
        "PIPELINE_REGISTRY_USER": "registry_user",
        "PIPELINE_REGISTRY_PASSWORD": "registry_password",
        "PIPELINE_SMTP_HOST": "smtp_host",
        "PIPELINE_SMTP_PORT": "smtp_port",
        "PIPELINE_SMTP_SENDER": "smtp_sender",
        "PIPELINE_SONAR_SCANNER": "sonar_scanner",
        "PIPELINE_COMMAND_TIMEOUT": "command_timeout",
        "PIPELINE_SCAN_TIMEOUT": "scan_timeout",
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file. Defaults to ~/.pipeline-cli/config.yaml
        """
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        self.file_config: Dict[str, Any] = {}
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file, then apply environment overrides.

        Returns:
            Dictionary containing configuration values
        """
        config = self.DEFAULT_CONFIG.copy()

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    self.file_config = yaml.safe_load(f) or {}
                    config.update(self.file_config)
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Failed to load config from %s: %s", self.config_path, e)

        for env_var, key in self.ENV_OVERRIDES.items():
            if os.getenv(env_var):
                config[key] = os.getenv(env_var)

        return config

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.config[key] = value
        self.file_config[key] = value

    def save(self) -> None:
        """Save file-level settings. Environment overrides are not written."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            yaml.dump(self.file_config, f, default_flow_style=False)

    def _seconds(self, key: str) -> Optional[float]:
        value = self.get(key)
        if value in (None, ""):
            return None
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid {key} '{value}': must be a number of seconds", str(self.config_path))
        return seconds if seconds > 0 else None

    @property
    def kubeconfig_dir(self) -> Path:
        """Directory holding one kubeconfig per environment."""
        return Path(self.get('kubeconfig_dir', '/root/.cert'))

    @property
    def registry_user(self) -> Optional[str]:
        return self.get('registry_user')

    @property
    def registry_password(self) -> Optional[str]:
        return self.get('registry_password')

    @property
    def smtp_host(self) -> Optional[str]:
        return self.get('smtp_host')

    @property
    def smtp_port(self) -> int:
        try:
            return int(self.get('smtp_port', 25))
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid smtp_port '{self.get('smtp_port')}'", str(self.config_path))

    @property
    def smtp_sender(self) -> str:
        return self.get('smtp_sender', 'pipeline-cli@localhost')

    @property
    def sonar_scanner(self) -> str:
        return self.get('sonar_scanner', 'sonar-scanner')

    @property
    def command_timeout(self) -> Optional[float]:
        """Timeout for ordinary external commands (None waits indefinitely)."""
        return self._seconds('command_timeout')

    @property
    def scan_timeout(self) -> float:
        """Wall-clock budget for the vulnerability scan."""
        return self._seconds('scan_timeout') or 900


# Global config instance
_config_instance: Optional[Config] = None


def get_config(config_path: Optional[Path] = None) -> Config:
    """Get global configuration instance.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(config_path)

    return _config_instance


def load_parameters(path: Path) -> Dict[str, Any]:
    """Load pipeline parameters from a YAML file.

    Args:
        path: Path to a pipeline.yaml with camelCase parameter keys

    Returns:
        Mapping of parameter names to values

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping
    """
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load pipeline parameters from {path}: {e}", str(path))

    if not isinstance(data, dict):
        raise ConfigurationError(f"Pipeline parameters in {path} must be a mapping", str(path))
    return data


def parse_overrides(pairs) -> Dict[str, str]:
    """Parse repeated key=value options into a dictionary.

    Raises:
        ConfigurationError: If a pair has no '='
    """
    overrides = {}
    for pair in pairs:
        if '=' not in pair:
            raise ConfigurationError(f"Invalid parameter override '{pair}': expected key=value")
        key, value = pair.split('=', 1)
        overrides[key.strip()] = value.strip()
    return overrides
