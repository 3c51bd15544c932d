"""Authenticated request pipeline for the Keenetic RCI interface.

RciTransport performs one logical HTTP exchange per call:

1. Authenticate on demand (skipped for /auth itself)
2. Build URL and headers, replaying the session cookie jar
3. Send JSON or raw body with the configured timeouts
4. Merge Set-Cookie headers from the response into the jar
5. Classify the outcome into a result or a typed error
6. Decode the body (empty -> None, non-JSON -> raw text)

Example usage:
    from keenetic_client.config import KeeneticSettings
    from keenetic_client.api.transport import RciTransport

    settings = KeeneticSettings(host="192.168.1.1", login="admin", password="secret")

    with RciTransport(settings) as transport:
        system = transport.get("/rci/show/system")
        results = transport.batch([{"show": {"system": {}}}, {"show": {"version": {}}}])
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx
import structlog

from keenetic_client import __version__
from keenetic_client.exceptions import ApiError, ConnectionError, NotFoundError, TimeoutError

from .auth import Authenticator
from .cookies import CookieJar
from .endpoints import AUTH, RCI_BATCH

if TYPE_CHECKING:
    from keenetic_client.config import KeeneticSettings

USER_AGENT = f"keenetic-client/{__version__}"

Command = Dict[str, Any]


class RciTransport:
    """HTTP session against one router.

    Owns the cookie jar, the authenticator (and its authenticated flag), and
    one httpx.Client. Safe to share between threads. Two transports share
    nothing.

    Attributes:
        settings: Complete KeeneticSettings.
    """

    def __init__(
        self,
        settings: "KeeneticSettings",
        logger: Optional[Any] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            settings: Configuration; validated here, before any I/O.
            logger: Optional structlog-style logger receiving request and
                auth traces. Defaults to this module's logger.
            transport: Optional httpx transport (e.g. httpx.MockTransport).

        Raises:
            ConfigurationError: host, login or password is missing.
        """
        settings.ensure_complete()
        self.settings = settings
        self._log = logger if logger is not None else structlog.get_logger(__name__)
        self._cookies = CookieJar()
        self._client = httpx.Client(
            timeout=httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout),
            transport=transport,
        )
        self._auth = Authenticator(settings, self._send, log=self._log)

    @property
    def authenticated(self) -> bool:
        return self._auth.authenticated

    @property
    def cookies(self) -> Dict[str, str]:
        """Snapshot of the session cookie jar."""
        return self._cookies.as_dict()

    def ensure_authenticated(self) -> bool:
        """Run the handshake unless already authenticated. See Authenticator."""
        return self._auth.ensure_authenticated()

    def reset(self) -> None:
        """Drop cookies and authenticated state.

        Use after abandoning a call midway; the next request performs the
        full handshake again.
        """
        with self._auth.lock:
            self._auth.invalidate()
            self._cookies.clear()
        self._log.debug("session_reset", host=self.settings.host)

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET a path, e.g. /rci/show/system. Returns the decoded body."""
        return self._request("GET", path, params=params)

    def get_raw(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        """GET a path and return the body as text, not JSON-decoded; None when empty."""
        return self._request("GET", path, params=params, decode=False)

    def post(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        """POST a JSON object to a path. Returns the decoded body."""
        return self._request("POST", path, json_body=dict(body) if body is not None else {})

    def post_raw(
        self,
        path: str,
        content: Union[str, bytes],
        content_type: str = "text/plain",
    ) -> Optional[str]:
        """POST an opaque body (e.g. a configuration backup).

        Returns:
            The response body as text, not JSON-decoded; None when empty.
        """
        return self._request(
            "POST", path, content=content, content_type=content_type, decode=False
        )

    def batch(self, commands: Sequence[Command]) -> List[Any]:
        """Execute several RCI commands in one POST /rci/.

        Args:
            commands: Non-empty list of command objects, e.g.
                [{"show": {"system": {}}}, {"show": {"version": {}}}]

        Returns:
            List of per-command results in the same order as commands.

        Raises:
            TypeError: commands is not a list.
            ValueError: commands is empty.
        """
        if not isinstance(commands, (list, tuple)):
            raise TypeError("Commands must be a list")
        if not commands:
            raise ValueError("Commands list cannot be empty")

        return self._request("POST", RCI_BATCH, json_body=list(commands))

    def rci(self, body: Union[Command, Sequence[Command]]) -> List[Any]:
        """Execute one command or a list of commands through batch().

        Example:
            >>> transport.rci({"show": {"system": {}}})
            [{'cpuload': 15, ...}]
        """
        commands = list(body) if isinstance(body, (list, tuple)) else [body]
        return self.batch(commands)

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json_body: Any = None,
        content: Union[str, bytes, None] = None,
        content_type: Optional[str] = None,
        decode: bool = True,
    ) -> Any:
        if path != AUTH:
            self._auth.ensure_authenticated()

        self._log.debug("request", method=method, path=path)

        try:
            response = self._send(
                method,
                path,
                params=params,
                json_body=json_body,
                content=content,
                content_type=content_type,
            )
        except httpx.ConnectTimeout as e:
            raise TimeoutError(
                f"Connection timed out after {self.settings.connect_timeout:g}s",
                timeout=self.settings.connect_timeout,
            ) from e
        except httpx.TimeoutException as e:
            raise TimeoutError(
                f"Request timed out after {self.settings.request_timeout:g}s",
                timeout=self.settings.request_timeout,
            ) from e
        except httpx.TransportError as e:
            raise ConnectionError(f"Connection failed: {e}", reason=str(e)) from e

        self._raise_for_status(response, path)

        if not decode:
            return response.text or None
        return self._decode(response)

    def _send(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json_body: Any = None,
        content: Union[str, bytes, None] = None,
        content_type: Optional[str] = None,
    ) -> httpx.Response:
        """Perform a single HTTP exchange and merge its cookies.

        httpx transport exceptions propagate unchanged.
        """
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
            "User-Agent": USER_AGENT,
        }
        cookie_header = self._cookies.header_value()
        if cookie_header:
            headers["Cookie"] = cookie_header

        body: Union[str, bytes, None] = None
        if content is not None:
            body = content
            headers["Content-Type"] = content_type or "text/plain"
        elif json_body is not None:
            body = json.dumps(json_body)
            headers["Content-Type"] = "application/json"

        response = self._client.request(
            method,
            f"{self.settings.base_url}{path}",
            params=dict(params) if params else None,
            content=body,
            headers=headers,
        )

        self._cookies.update_from_response(response)
        # Cookies are replayed from the session jar only
        self._client.cookies.clear()

        self._log.debug(
            "response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    def _raise_for_status(self, response: httpx.Response, path: str) -> None:
        status = response.status_code

        if status == 404:
            raise NotFoundError(f"Resource not found: {path}", path=path)

        # 401 is passed through: some RCI paths answer 401 with a usable body
        if response.is_success or status == 401:
            return

        raise ApiError(
            f"API request failed with status {status}",
            status_code=status,
            response_body=response.text,
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        text = response.text
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    def __enter__(self) -> "RciTransport":
        return self

    def __exit__(
        self,
        exc_type: Any,
        exc_val: Any,
        exc_tb: Any,
    ) -> None:
        self.close()
