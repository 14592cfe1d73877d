"""
Configuration management for fmshell
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from fmshell.core.constants import (
    CHUNK_SIZE,
    DEFAULT_COMPRESSION_ALGORITHM,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_HASH_ALGORITHM,
    INTERRUPT_THRESHOLD,
    POLL_INTERVAL,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FMSHELL_CONFIG"


class Config:
    """Configuration manager for fmshell"""

    DEFAULT_CONFIG_PATH = Path.home() / ".fmshell" / "config.json"

    # Default configuration
    DEFAULTS = {
        "shell": {
            "interrupt_threshold": INTERRUPT_THRESHOLD,
            "poll_interval": POLL_INTERVAL,
        },
        "files": {
            "chunk_size": CHUNK_SIZE,
        },
        "hash": {
            "default_algorithm": DEFAULT_HASH_ALGORITHM,
        },
        "compression": {
            "default_algorithm": DEFAULT_COMPRESSION_ALGORITHM,
            "level": DEFAULT_COMPRESSION_LEVEL,
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration

        Args:
            config_path: Optional custom config path. Falls back to the
                FMSHELL_CONFIG environment variable, then ~/.fmshell/config.json
        """
        if config_path is None and os.environ.get(CONFIG_ENV_VAR):
            config_path = Path(os.environ[CONFIG_ENV_VAR])
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        self.config = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file or create default"""
        defaults = copy.deepcopy(self.DEFAULTS)

        if not self.config_path.exists():
            try:
                self.save(defaults)
            except OSError as e:
                logger.warning("Could not write default config to %s: %s", self.config_path, e)
            return defaults

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                user_config = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in config file %s: %s, using defaults", self.config_path, e)
            return defaults
        except OSError as e:
            logger.warning("Error reading config file %s: %s, using defaults", self.config_path, e)
            return defaults

        if not isinstance(user_config, dict):
            logger.warning("Config file %s is not a JSON object, using defaults", self.config_path)
            return defaults

        # User config takes precedence
        return self._deep_merge(defaults, user_config)

    def save(self, config: Optional[Dict[str, Any]] = None):
        """Save configuration to file"""
        config = config if config is not None else self.config

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key

        Examples:
            config.get('shell.interrupt_threshold')
            config.get('compression.level', 6)
        """
        value = self.config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                base[key] = self._deep_merge(base[key], value)
            else:
                base[key] = value
        return base


# Global config instance
_config = None


def get_config() -> Config:
    """Get global config instance"""
    global _config
    if _config is None:
        _config = Config()
    return _config
