"""Keenetic router client.

KeeneticClient ties the authenticated transport to the resource facades.
Authentication happens lazily on the first request.

Example usage:
    from keenetic_client.config import KeeneticSettings
    from keenetic_client.client import KeeneticClient

    settings = KeeneticSettings(host="192.168.1.1", login="admin", password="secret")

    with KeeneticClient(settings) as client:
        print(client.system.info()["model"])
        for device in client.devices.active():
            print(device["mac"], device["name"])

        # Raw RCI access for anything the facades do not cover
        client.rci({"show": {"interface": {}}})
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx

from keenetic_client.api.transport import Command, RciTransport
from keenetic_client.resources import Devices, Hotspot, StartupConfig, System

if TYPE_CHECKING:
    from keenetic_client.config import KeeneticSettings


class KeeneticClient:
    """Client for one Keenetic router.

    Attributes:
        settings: KeeneticSettings the client was built with.
        transport: Underlying RciTransport (session, cookies, auth).
        system: System status, firmware and maintenance operations.
        devices: Registered hosts (name, access, static IP).
        hotspot: IP policies and per-host policy assignment.
        startup_config: Configuration save, backup and restore.

    Example:
        client = KeeneticClient(settings)
        try:
            resources = client.system.resources()
        finally:
            client.close()
    """

    def __init__(
        self,
        settings: "KeeneticSettings",
        logger: Optional[Any] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Configuration for the router connection.
            logger: Optional structlog-style logger for request/auth traces.
            transport: Optional httpx transport, mainly for tests.

        Raises:
            ConfigurationError: host, login or password is missing.
        """
        self.settings = settings
        self.transport = RciTransport(settings, logger=logger, transport=transport)

        self.system = System(self)
        self.devices = Devices(self)
        self.hotspot = Hotspot(self)
        self.startup_config = StartupConfig(self)

    @property
    def authenticated(self) -> bool:
        return self.transport.authenticated

    def authenticate(self) -> bool:
        """Authenticate now instead of on the first request."""
        return self.transport.ensure_authenticated()

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.transport.get(path, params)

    def get_raw(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        return self.transport.get_raw(path, params)

    def post(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        return self.transport.post(path, body)

    def post_raw(
        self,
        path: str,
        content: Union[str, bytes],
        content_type: str = "text/plain",
    ) -> Optional[str]:
        return self.transport.post_raw(path, content, content_type=content_type)

    def batch(self, commands: Sequence[Command]) -> List[Any]:
        return self.transport.batch(commands)

    def rci(self, body: Union[Command, Sequence[Command]]) -> List[Any]:
        """Execute arbitrary RCI command(s).

        Example:
            >>> client.rci([
            ...     {"show": {"system": {}}},
            ...     {"show": {"version": {}}},
            ... ])
        """
        return self.transport.rci(body)

    def get_session_cookies(self) -> Dict[str, str]:
        """Cookies of the current session (name -> value)."""
        return self.transport.cookies

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "KeeneticClient":
        return self

    def __exit__(
        self,
        exc_type: Any,
        exc_val: Any,
        exc_tb: Any,
    ) -> None:
        self.close()
