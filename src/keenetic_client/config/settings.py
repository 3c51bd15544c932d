"""Pydantic settings model for the Keenetic client configuration."""

from __future__ import annotations

import os
from typing import Any, Dict, Literal, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from keenetic_client.exceptions import ConfigurationError


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads values from a YAML file.

    The YAML file path is determined by the CONFIG_PATH environment variable.
    """

    def get_field_value(
        self, field: Any, field_name: str
    ) -> Tuple[Any, str, bool]:
        """Get field value from YAML config."""
        yaml_config = self._load_yaml_config()
        field_value = yaml_config.get(field_name)
        return field_value, field_name, False

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load YAML configuration file."""
        config_path = os.environ.get("CONFIG_PATH")
        if not config_path:
            return {}

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (FileNotFoundError, yaml.YAMLError, PermissionError):
            # Errors will be handled by loader.py
            return {}

    def __call__(self) -> Dict[str, Any]:
        """Return the YAML config values."""
        return self._load_yaml_config()


class KeeneticSettings(BaseSettings):
    """Keenetic client configuration settings.

    Configuration is loaded in the following precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (KEENETIC_ prefix)
    3. Docker secrets (_FILE pattern, applied via env by the loader)
    4. YAML configuration file (via CONFIG_PATH)
    5. Default values

    Settings are frozen: a session built from them never sees them change.
    Use a new settings object (and a new client) to change credentials.
    """

    model_config = SettingsConfigDict(
        env_prefix="KEENETIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Required before any network operation (checked by ensure_complete)
    host: str = Field(
        default="",
        description="Router hostname or IP address, optionally with http:// or https://",
    )
    login: str = Field(
        default="",
        description="Router admin login",
    )
    password: str = Field(
        default="",
        description="Router admin password",
        repr=False,
    )

    # Timeouts
    request_timeout: float = Field(
        default=30,
        description="Total request timeout in seconds",
        gt=0,
    )
    connect_timeout: float = Field(
        default=10,
        description="Connection timeout in seconds",
        gt=0,
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format: json (production) or text (development)",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Put the YAML file below env and .env in precedence."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}
        normalized = v.upper()
        if normalized == "WARN":
            normalized = "WARNING"
        if normalized not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: DEBUG, INFO, WARNING, ERROR"
            )
        return normalized

    @field_validator("host", "login")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @property
    def base_url(self) -> str:
        """Base URL of the router, without trailing slash.

        Example:
            >>> KeeneticSettings(host="10.0.0.1").base_url
            'http://10.0.0.1'
        """
        host = self.host.rstrip("/")
        if host.startswith(("http://", "https://")):
            return host
        return f"http://{host}"

    def ensure_complete(self) -> None:
        """Check that everything needed to talk to the router is present.

        Raises:
            ConfigurationError: host, login or password is empty.
        """
        if not self.host:
            raise ConfigurationError(
                "Host is required",
                hint="Set KEENETIC_HOST or 'host:' in the config file.",
            )
        if not self.login:
            raise ConfigurationError(
                "Login is required",
                hint="Set KEENETIC_LOGIN or 'login:' in the config file.",
            )
        if not self.password:
            raise ConfigurationError(
                "Password is required",
                hint="Set KEENETIC_PASSWORD, KEENETIC_PASSWORD_FILE or 'password:' in the config file.",
            )
