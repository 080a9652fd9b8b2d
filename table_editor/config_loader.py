"""
Configuration loading utilities for the editable table.

This module loads the application configuration from YAML with fallback to
defaults, and configures logging from it.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

from .exceptions import ConfigurationLoadError

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("config.yaml")

# Cached configuration, see get_config_value()
_config_cache: Optional[Dict[str, Any]] = None


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'Editable Table',
            'version': '1.0.0',
            'debug': False
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        },
        'table': {
            'page_size': 10,
            'update_width': 82,
            'delete_width': 96
        },
        'modal': {
            'size': 'm',
            'easy_close': False
        },
        'notifications': {
            'enabled': True,
            'position': 'center-top'
        },
        'i18n': {
            'translations_file': None
        }
    }


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Read a YAML configuration file without applying defaults.

    Raises:
        ConfigurationLoadError: If the file cannot be read or parsed
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        raise ConfigurationLoadError(config_path, e) from e

    return user_config if user_config is not None else {}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application configuration.

    Missing, empty or malformed files fall back to the defaults.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)

    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        config_path = CONFIG_FILE

    default_config = get_default_config()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return default_config

    try:
        user_config = read_config_file(config_path)
    except ConfigurationLoadError as e:
        logger.error(e.message)
        logger.info("Using default configuration")
        return default_config

    if not user_config:
        logger.warning(f"Configuration file is empty: {config_path}")
        return default_config

    if not isinstance(user_config, dict):
        logger.error(f"Configuration file is not a valid dictionary: {config_path}")
        logger.info("Using default configuration")
        return default_config

    config = deep_merge(default_config, user_config)
    logger.info(f"Successfully loaded configuration from {config_path}")
    return config


def get_config_value(section: str, key: str, default: Any = None) -> Any:
    """
    Get a configuration value from the cached configuration.

    Args:
        section: Configuration section name
        key: Key within the section
        default: Value returned when the section or key is missing
    """
    global _config_cache

    if _config_cache is None:
        _config_cache = load_config()

    section_values = _config_cache.get(section)
    if not isinstance(section_values, dict):
        return default
    return section_values.get(key, default)


def reload_config() -> Dict[str, Any]:
    """Drop the cached configuration and read it again."""
    global _config_cache
    _config_cache = None
    _config_cache = load_config()
    return _config_cache


def get_logging_level(level_str: Optional[str]) -> int:
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    if not isinstance(level_str, str):
        return logging.INFO
    return level_map.get(level_str.upper(), logging.INFO)


def configure_logging(config: Optional[Dict[str, Any]] = None) -> int:
    """
    Configure the root logger from the logging section of the configuration.

    Returns:
        The logging level that was applied
    """
    if config is None:
        config = load_config()

    logging_config = config.get('logging', {}) or {}
    level = get_logging_level(logging_config.get('level', 'INFO'))
    log_format = logging_config.get('format') or get_default_config()['logging']['format']

    logging.basicConfig(level=level, format=log_format)
    logger.info(f"Logging configured to level: {logging.getLevelName(level)}")
    return level
