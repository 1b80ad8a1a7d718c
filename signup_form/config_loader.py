"""
Configuration loading utilities for the signup form.

Loads config.yaml, merges it over the built-in defaults and exposes the
validation constants consumed by the schema engine.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

from pydantic import ValidationError

from .exceptions import ConfigurationError, ConfigurationLoadError
from .models import ValidationSettings

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("config.yaml")

# Module-level cache, cleared by reload_config()
_config_cache = None


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
            'name': 'Signup Form',
            'version': '1.0.0'
        },
        'logging': {
            'level': 'INFO'
        },
        'ui': {
            'page_title': 'Create user'
        },
        'validation': {
            'max_avatar_size_mb': 10,
            'email_domain': '@gmail.com',
            'min_password_length': 8,
            'min_techs': 2,
            'knowledge_min': 1,
            'knowledge_max': 100,
            'default_knowledge': 0
        }
    }


def read_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """
    Read a YAML configuration file.

    Returns:
        The parsed mapping, or None if the file is empty

    Raises:
        ConfigurationLoadError: If the file cannot be read, parsed,
            or does not contain a mapping
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationLoadError(config_path, e, f"YAML parsing error in {config_path}: {e}")
    except (IOError, OSError) as e:
        raise ConfigurationLoadError(config_path, e)

    if user_config is not None and not isinstance(user_config, dict):
        raise ConfigurationLoadError(
            config_path,
            TypeError(f"expected a mapping, got {type(user_config).__name__}"),
        )

    return user_config


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application configuration, falling back to defaults on any problem.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)

    Returns:
        Complete configuration dictionary
    """
    global _config_cache

    if config_path is None:
        if _config_cache is not None:
            return _config_cache
        config_path = CONFIG_PATH

    default_config = get_default_config()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        config = default_config
    else:
        try:
            user_config = read_config_file(config_path)
        except ConfigurationLoadError as e:
            logger.error(str(e))
            logger.info("Using default configuration")
            user_config = None

        if user_config is None:
            config = default_config
        else:
            config = deep_merge(default_config, user_config)
            logger.info(f"Successfully loaded configuration from {config_path}")

    if config_path == CONFIG_PATH:
        _config_cache = config
    return config


def reload_config() -> Dict[str, Any]:
    """
    Force reload of configuration from file.
    Useful for testing or when configuration changes.
    """
    global _config_cache
    _config_cache = None
    return load_config()


def get_config_value(section: str, key: str, default: Any = None) -> Any:
    """
    Get a specific configuration value.

    Args:
        section: Configuration section (e.g., 'validation', 'ui')
        key: Configuration key within section
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    config = load_config()
    section_values = config.get(section)
    if not isinstance(section_values, dict):
        return default
    return section_values.get(key, default)


def get_validation_settings(config: Optional[Dict[str, Any]] = None) -> ValidationSettings:
    """
    Build the validation constants from configuration.

    Raises:
        ConfigurationError: If the 'validation' section holds invalid values
    """
    if config is None:
        config = load_config()

    section = config.get('validation') or {}
    if not isinstance(section, dict):
        raise ConfigurationError('validation', ["section must be a mapping"])

    try:
        return ValidationSettings(**section)
    except ValidationError as e:
        issues = [
            f"{'.'.join(str(loc) for loc in err.get('loc', ())) or 'validation'}: {err.get('msg')}"
            for err in e.errors()
        ]
        raise ConfigurationError('validation', issues) from e
