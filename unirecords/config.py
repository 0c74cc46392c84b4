"""
Configuration loading for the records platform.
"""

import json
import logging
import sys
from typing import Any, Dict, Optional

from .core.exceptions import ConfigurationError

DEFAULT_CONFIG: Dict[str, Any] = {
    'log_level': 'INFO',
    'host': '0.0.0.0',
    'port': 8000,
    'title': 'University Records API',
}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge defaults, an optional JSON file and explicit overrides (highest wins).

    Overrides whose value is None are ignored so unset CLI flags keep the
    file or default value.
    """
    config = dict(DEFAULT_CONFIG)

    if path:
        try:
            with open(path, 'r') as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}",
                                     details={'path': path})
        if not isinstance(file_config, dict):
            raise ConfigurationError("Configuration file must contain a JSON object",
                                     details={'path': path})
        config.update(file_config)

    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value

    config['log_level'] = resolve_log_level(config['log_level'])
    return config


def resolve_log_level(level: Any) -> str:
    """Normalize a log level name, rejecting unknown ones."""
    name = str(level).upper()
    if not isinstance(logging.getLevelName(name), int):
        raise ConfigurationError(f"Unknown log level: {level}", details={'log_level': level})
    return name


def configure_logging(config: Dict[str, Any]) -> None:
    logging.basicConfig(
        level=config['log_level'],
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
