"""Keenetic RCI session core.

This module provides the RciTransport request pipeline along with the
challenge-response authenticator, the session cookie jar, custom
exceptions and an opt-in retry decorator.
"""

from keenetic_client.api.auth import Authenticator, derive_auth_token
from keenetic_client.api.cookies import CookieJar
from keenetic_client.api.session import create_retry_decorator
from keenetic_client.api.transport import RciTransport
from keenetic_client.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    KeeneticError,
    NotFoundError,
    TimeoutError,
)

__all__ = [
    # Transport
    "RciTransport",
    # Session
    "Authenticator",
    "CookieJar",
    "derive_auth_token",
    "create_retry_decorator",
    # Exceptions
    "ApiError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "KeeneticError",
    "NotFoundError",
    "TimeoutError",
]
