"""Configuration loading with YAML, environment override, and Docker secrets support.

The process-wide default configuration lives here and is meant for the
outermost application layer (the CLI). Library code takes an explicit
KeeneticSettings instead.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import yaml
from pydantic import ValidationError

from keenetic_client.config.settings import KeeneticSettings
from keenetic_client.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

ENV_PREFIX = "KEENETIC_"

# Thread-safe global config storage
_config: Optional[KeeneticSettings] = None
_config_lock = threading.Lock()


def resolve_file_secrets() -> Dict[str, str]:
    """Resolve Docker secrets pattern (_FILE suffix) from environment.

    Scans environment for variables matching KEENETIC_*_FILE pattern,
    reads the file contents, and returns a dict of the base variable
    names to their values.

    Example:
        KEENETIC_PASSWORD_FILE=/run/secrets/router_password
        -> Returns {"PASSWORD": "<file contents>"}
    """
    secrets: Dict[str, str] = {}
    suffix = "_FILE"

    for key, filepath in os.environ.items():
        if not (key.startswith(ENV_PREFIX) and key.endswith(suffix)):
            continue

        base_name = key[len(ENV_PREFIX) : -len(suffix)]
        path = Path(filepath)
        if not path.exists():
            # Let ensure_complete() report the missing value
            logger.warning("secret_file_not_found", env_var=key, path=filepath)
            continue
        try:
            secrets[base_name] = path.read_text().strip()
        except PermissionError:
            raise ConfigurationError(
                f"Cannot read secret file '{filepath}' specified by {key}: permission denied"
            )
        except OSError as e:
            raise ConfigurationError(
                f"Error reading secret file '{filepath}' specified by {key}: {e}"
            )

    return secrets


def load_yaml_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file if specified.

    Args:
        config_path: Path to YAML config file. If None, checks CONFIG_PATH env var.

    Returns:
        Dict of configuration values from YAML, or empty dict if no file.
    """
    path = config_path or os.environ.get("CONFIG_PATH")

    if not path:
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            hint="Ensure CONFIG_PATH points to a valid YAML file, or remove it to use environment variables only.",
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}")
    except PermissionError:
        raise ConfigurationError(f"Cannot read configuration file {path}: permission denied")


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """Format Pydantic validation errors into user-friendly messages."""
    messages: List[str] = []
    for error in errors:
        loc = ".".join(str(part) for part in error.get("loc", []))
        msg = error.get("msg", "Invalid value")
        input_val = error.get("input")

        if input_val is not None:
            messages.append(f"Configuration error: '{loc}' {msg}, got: {input_val}")
        else:
            messages.append(f"Configuration error: '{loc}' {msg}")

    return messages


def load_config(config_path: Optional[str] = None) -> KeeneticSettings:
    """Load, validate and store the default configuration.

    Configuration is loaded with the following precedence:
    1. Environment variables (highest priority)
    2. Docker secrets (_FILE pattern)
    3. YAML configuration file
    4. Default values (lowest priority)

    Args:
        config_path: Optional path to YAML config file (sets CONFIG_PATH env).

    Returns:
        Validated and complete KeeneticSettings instance.

    Raises:
        ConfigurationError: File unreadable, a value is invalid, or
            host/login/password is missing.
    """
    global _config

    if config_path:
        os.environ["CONFIG_PATH"] = config_path

    # Validate YAML file exists and is readable (gives better errors)
    # The actual loading happens in the pydantic settings source
    _ = load_yaml_config()

    secrets = resolve_file_secrets()
    for key, value in secrets.items():
        env_key = f"{ENV_PREFIX}{key}"
        if env_key not in os.environ:
            os.environ[env_key] = value

    try:
        settings = KeeneticSettings()
    except ValidationError as e:
        raise ConfigurationError("\n".join(format_validation_errors(e.errors())))

    settings.ensure_complete()

    with _config_lock:
        _config = settings
    return settings


def get_config() -> KeeneticSettings:
    """Get the current default configuration.

    Raises:
        ConfigurationError: If configuration has not been loaded.
    """
    with _config_lock:
        if _config is None:
            raise ConfigurationError("Configuration not loaded. Call load_config() first.")
        return _config


def reset_config() -> None:
    """Forget the default configuration."""
    global _config
    with _config_lock:
        _config = None
