"""Challenge-response authentication for Keenetic routers.

This module handles:
- Deriving the auth token from the router's challenge and realm
- The GET /auth -> POST /auth handshake
- Single-flight locking so concurrent callers never run it twice

Handshake:
    GET /auth
        200 -> the session cookie is already authenticated, done
        401 -> X-NDM-Challenge and X-NDM-Realm headers carry the challenge
    token = SHA256_hex(challenge + MD5_hex(login + ":" + realm + ":" + password))
    POST /auth {"login": login, "password": token}
        200 -> authenticated
"""

from __future__ import annotations

import hashlib
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional

import httpx
import structlog

from keenetic_client.exceptions import (
    AuthenticationError,
    ConnectionError,
    KeeneticError,
    TimeoutError,
)

from .endpoints import AUTH, CHALLENGE_HEADER, REALM_HEADER

if TYPE_CHECKING:
    from keenetic_client.config import KeeneticSettings

logger = structlog.get_logger(__name__)

# Performs one raw HTTP exchange: (method, path, json_body) -> response.
# Raises httpx.TimeoutException / httpx.TransportError untouched.
SendFn = Callable[..., httpx.Response]


def derive_auth_token(login: str, password: str, realm: str, challenge: str) -> str:
    """Derive the password token expected by POST /auth.

    Example:
        >>> token = derive_auth_token("admin", "secret", "KEENETIC", "abc")
        >>> len(token)
        64
    """
    inner = hashlib.md5(f"{login}:{realm}:{password}".encode("utf-8")).hexdigest()
    return hashlib.sha256(f"{challenge}{inner}".encode("utf-8")).hexdigest()


class Authenticator:
    """Runs the handshake and owns the session's authenticated flag.

    Attributes:
        settings: Complete KeeneticSettings (host, login, password, timeouts).
    """

    def __init__(
        self,
        settings: "KeeneticSettings",
        send: SendFn,
        log: Optional[Any] = None,
    ) -> None:
        self.settings = settings
        self._send = send
        self._log = log if log is not None else logger
        self._lock = threading.Lock()
        self._authenticated = False
        # Finished handshakes, and the error of the last one if it failed
        self._completed_attempts = 0
        self._last_error: Optional[KeeneticError] = None

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    @property
    def lock(self) -> threading.Lock:
        """Lock guarding the handshake and the authenticated flag."""
        return self._lock

    def ensure_authenticated(self) -> bool:
        """Authenticate unless the session already is.

        Callers arriving while another thread runs the handshake wait for it
        and reuse its outcome, including its error. Failures are raised,
        never retried; a call made after a failure starts a new handshake.

        Returns:
            True once the session is authenticated.

        Raises:
            AuthenticationError: Handshake rejected or malformed.
            TimeoutError: Router did not answer in time.
            ConnectionError: Router unreachable.
        """
        if self._authenticated:
            return True

        seen_attempts = self._completed_attempts
        with self._lock:
            if self._authenticated:
                return True
            if self._completed_attempts != seen_attempts and self._last_error is not None:
                # Waited on a handshake that failed
                raise self._last_error

            try:
                self._perform_handshake()
            except KeeneticError as e:
                self._last_error = e
                raise
            else:
                self._last_error = None
            finally:
                self._completed_attempts += 1
            return True

    def invalidate(self) -> None:
        """Mark the session unauthenticated. Caller must hold the lock."""
        self._authenticated = False

    def _perform_handshake(self) -> None:
        self._log.debug("auth_challenge_requested", host=self.settings.host)
        challenge_response = self._exchange("GET")

        if challenge_response.status_code == 200:
            self._authenticated = True
            self._log.info("already_authenticated", host=self.settings.host)
            return

        if challenge_response.status_code != 401:
            raise AuthenticationError(
                self._with_context(
                    f"Unexpected response: HTTP {challenge_response.status_code}"
                ),
                status_code=challenge_response.status_code,
            )

        challenge = challenge_response.headers.get(CHALLENGE_HEADER)
        realm = challenge_response.headers.get(REALM_HEADER)
        if not challenge or not realm:
            raise AuthenticationError(
                self._with_context("Missing challenge headers from router"),
                hint="Make sure the host points to a Keenetic router web interface.",
                status_code=challenge_response.status_code,
            )

        self._log.debug("auth_challenge_received", realm=realm, login=self.settings.login)

        token = derive_auth_token(
            login=self.settings.login,
            password=self.settings.password,
            realm=realm,
            challenge=challenge,
        )
        auth_response = self._exchange(
            "POST", json_body={"login": self.settings.login, "password": token}
        )

        if auth_response.status_code != 200:
            raise AuthenticationError(
                self._with_context(f"Authentication failed: HTTP {auth_response.status_code}"),
                hint="Check the router login and password.",
                status_code=auth_response.status_code,
            )

        self._authenticated = True
        self._log.info("authentication_successful", host=self.settings.host)

    def _exchange(self, method: str, json_body: Any = None) -> httpx.Response:
        """Send one /auth request, mapping transport failures to typed errors."""
        try:
            return self._send(method, AUTH, json_body=json_body)
        except httpx.ConnectTimeout as e:
            raise TimeoutError(
                self._with_context(
                    f"Connection timed out after {self.settings.connect_timeout:g}s"
                ),
                timeout=self.settings.connect_timeout,
            ) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(
                self._with_context(
                    f"Authentication timed out after {self.settings.request_timeout:g}s"
                ),
                timeout=self.settings.request_timeout,
            ) from e
        except httpx.TransportError as e:
            raise ConnectionError(
                self._with_context(f"Connection failed: {e}"),
                reason=str(e),
            ) from e

    def _with_context(self, message: str) -> str:
        """Annotate an auth failure with connection details (never the password)."""
        details = [
            message,
            f"host={self.settings.host}",
            f"login={self.settings.login}",
            f"timeout={self.settings.request_timeout:g}s",
            f"connect_timeout={self.settings.connect_timeout:g}s",
        ]
        return " | ".join(details)
