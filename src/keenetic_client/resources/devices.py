"""Registered hosts (devices) known to the router.

Endpoints:
    GET  /rci/show/ip/hotspot/host   registered hosts
    GET  /rci/show/associations      Wi-Fi stations (rssi, rates, mode)
    POST /rci/                       writes, always batch format

MAC addresses come back upper-case; writes must use lower-case.

Write commands used by update():
    name       -> {"known": {"host": {"mac": ..., "name": ...}}}
    access     -> {"ip": {"hotspot": {"host": {"mac": ..., "permit"|"deny": true}}}}
    schedule   -> {"ip": {"hotspot": {"host": {"mac": ..., "schedule": ...}}}}
    policy     -> {"ip": {"hotspot": {"host": {"mac": ..., "policy": ... | {"no": true}}}}}
    static_ip  -> {"ip": {"dhcp": {"host": {"mac": ..., "ip": ... | "no": true}}}}
"""

from typing import Any, Dict, List

import structlog

from keenetic_client.api.endpoints import show_path
from keenetic_client.exceptions import NotFoundError

from .base import Resource, as_list, check_command_status, normalize_boolean

logger = structlog.get_logger(__name__)

UPDATABLE_ATTRIBUTES = ("name", "access", "schedule", "policy", "static_ip")


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


class Devices(Resource):
    """Device (host) listing and management."""

    def all(self) -> List[Dict[str, Any]]:
        """All registered hosts, with Wi-Fi association data merged in."""
        hosts_response = self._get(show_path("ip/hotspot/host"))
        associations_response = self._get(show_path("associations"))

        associations = _associations_by_mac(associations_response)

        if isinstance(hosts_response, dict):
            hosts = as_list(hosts_response.get("host", hosts_response))
        else:
            hosts = as_list(hosts_response)

        return [
            _normalize_device(host, associations)
            for host in hosts
            if isinstance(host, dict)
        ]

    def active(self) -> List[Dict[str, Any]]:
        return [device for device in self.all() if device["active"]]

    def find(self, mac: str) -> Dict[str, Any]:
        """Find a device by MAC address (case-insensitive).

        Raises:
            NotFoundError: No registered device has that MAC.
        """
        wanted = mac.lower()
        for device in self.all():
            if (device.get("mac") or "").lower() == wanted:
                return device
        raise NotFoundError(f"Device with MAC {mac} not found")

    def update(self, mac: str, **attributes: Any) -> Any:
        """Update name, access, schedule, routing policy or static IP.

        All requested changes go out in a single batch. Passing "" or None
        for policy or static_ip removes the assignment.

        Args:
            mac: Device MAC address (case-insensitive).
            **attributes: Any of name, access ("permit"/"deny"), schedule,
                policy, static_ip.

        Returns:
            Batch results, or {} when no attributes were given.

        Raises:
            TypeError: Unknown attribute name.
            ApiError: The router rejected one of the commands.
        """
        unknown = set(attributes) - set(UPDATABLE_ATTRIBUTES)
        if unknown:
            raise TypeError(f"Unknown device attributes: {', '.join(sorted(unknown))}")

        mac = mac.lower()
        commands: List[Dict[str, Any]] = []

        if "name" in attributes:
            commands.append({"known": {"host": {"mac": mac, "name": attributes["name"]}}})

        if "access" in attributes or "schedule" in attributes:
            host: Dict[str, Any] = {"mac": mac}
            if attributes.get("access") == "permit":
                host["permit"] = True
            elif attributes.get("access") == "deny":
                host["deny"] = True
            if "schedule" in attributes:
                host["schedule"] = attributes["schedule"]
            commands.append({"ip": {"hotspot": {"host": host}}})

        if "policy" in attributes:
            policy = attributes["policy"]
            value = {"no": True} if _is_blank(policy) else policy
            commands.append({"ip": {"hotspot": {"host": {"mac": mac, "policy": value}}}})

        if "static_ip" in attributes:
            static_ip = attributes["static_ip"]
            dhcp_host: Dict[str, Any] = {"mac": mac}
            if _is_blank(static_ip):
                dhcp_host["no"] = True
            else:
                dhcp_host["ip"] = static_ip
            commands.append({"ip": {"dhcp": {"host": dhcp_host}}})

        if not commands:
            return {}

        logger.debug("device_update", mac=mac, attributes=sorted(attributes))
        return check_command_status(self.client.batch(commands))

    def delete(self, mac: str) -> Any:
        """Unregister a device. It may reappear when it connects again."""
        return check_command_status(
            self.client.batch([{"ip": {"hotspot": {"host": {"mac": mac.lower(), "no": True}}}}])
        )


def _associations_by_mac(response: Any) -> Dict[str, Dict[str, Any]]:
    if not isinstance(response, dict):
        return {}

    lookup: Dict[str, Dict[str, Any]] = {}
    for station in as_list(response.get("station")):
        if not isinstance(station, dict) or not station.get("mac"):
            continue
        lookup[station["mac"].upper()] = station
    return lookup


def _normalize_device(
    host: Dict[str, Any], associations: Dict[str, Dict[str, Any]]
) -> Dict[str, Any]:
    mac = host.get("mac")

    # Static reservation is flagged by dhcp.static; the reserved address is in ip
    dhcp = host.get("dhcp")
    is_static = isinstance(dhcp, dict) and dhcp.get("static") is True

    mws = host.get("mws")
    wifi_ap = mws.get("ap") if isinstance(mws, dict) else host.get("ap")
    mws_cid = mws.get("cid") if isinstance(mws, dict) else None

    station = associations.get(mac.upper(), {}) if mac else {}

    return {
        "mac": mac,
        "name": host.get("name") or host.get("hostname"),
        "hostname": host.get("hostname"),
        "ip": host.get("ip"),
        "static_ip": host.get("ip") if is_static else None,
        "interface": host.get("interface"),
        "via": host.get("via"),
        "wifi_ap": wifi_ap,
        "mws_cid": mws_cid,
        "active": normalize_boolean(host.get("active")) is True,
        "registered": normalize_boolean(host.get("registered")) is True,
        "access": host.get("access"),
        "schedule": host.get("schedule"),
        "rxbytes": host.get("rxbytes"),
        "txbytes": host.get("txbytes"),
        "uptime": host.get("uptime"),
        "first_seen": host.get("first-seen"),
        "last_seen": host.get("last-seen"),
        "link": host.get("link"),
        "rssi": station.get("rssi"),
        "txrate": station.get("txrate"),
        "rxrate": station.get("rxrate"),
        "wifi_mode": station.get("mode"),
        "wifi_ht": station.get("ht"),
        "wifi_vht": station.get("vht"),
        "wifi_he": station.get("he"),
    }
