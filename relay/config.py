"""
load the relay config from config.yaml, .env and environment variables
"""

import os
import yaml
from dotenv import load_dotenv
from pathlib import Path
from typing import Dict, Any, List


class Config:
    """Configuration loader that reads from config.yaml and environment variables."""

    def __init__(self, config_path: str = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to config.yaml file. If None, looks for config.yaml
                        in the same directory as this module.
        """
        if config_path is None:
            config_path = Path(__file__).parent / "config.yaml"

        self.config_path = Path(config_path)
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file and override with environment variables."""
        try:
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        return self._apply_env_overrides(config)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        env_mappings = {
            'RELAY_HOST': ('server', 'host'),
            'RELAY_PORT': ('server', 'port'),
            'FETCHER_USER_AGENT': ('fetcher', 'user_agent'),
            'FETCHER_TIMEOUT': ('fetcher', 'timeout'),
            'RELAY_MAX_REDIRECTS': ('relay', 'max_redirects'),
            'LOG_LEVEL': ('logging', 'level'),
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                current = config
                for key in config_path[:-1]:
                    if not isinstance(current.get(key), dict):
                        current[key] = {}
                    current = current[key]

                current[config_path[-1]] = self._convert_env_value(env_value)

        # Comma separated list, e.g. "https://a.example,https://b.example"
        origins = os.getenv('CORS_ALLOW_ORIGINS')
        if origins is not None:
            config.setdefault('cors', {})['allow_origins'] = [
                origin.strip() for origin in origins.split(',') if origin.strip()
            ]

        return config

    def _convert_env_value(self, value: str):
        """Numeric relay settings (port, timeout, redirect bound) come back as numbers."""
        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, *keys, default=None):
        """Get configuration value by walking nested keys.

        Args:
            *keys: Configuration keys (e.g., 'fetcher', 'timeout')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        current = self._config
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    @property
    def server(self) -> Dict[str, Any]:
        return self.get('server', default={})

    @property
    def fetcher(self) -> Dict[str, Any]:
        """Get HTTP fetcher configuration."""
        return self.get('fetcher', default={})

    @property
    def relay(self) -> Dict[str, Any]:
        """Get meta refresh handling configuration."""
        return self.get('relay', default={})

    @property
    def local_hosts(self) -> List[str]:
        return self.get('access', 'local_hosts', default=['localhost', '127.0.0.1'])

    @property
    def cors_origins(self) -> List[str]:
        return self.get('cors', 'allow_origins', default=[]) or []

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.get('logging', default={})


# .env values count as environment overrides
load_dotenv()

# Global configuration instance
config = Config()
