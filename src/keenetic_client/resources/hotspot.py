"""IP policies and per-host policy assignment.

All reads and writes here go through POST /rci/ in batch format:
    policies  [{"show": {"sc": {"ip": {"policy": {}}}}}]
    hosts     [{"show": {"sc": {"ip": {"hotspot": {"host": {}}}}}},
               {"show": {"ip": {"hotspot": {}}}}]

Host data is merged from the saved configuration (policy, permit, deny,
schedule) and runtime state (ip, active, traffic counters).
"""

import json
from typing import Any, Dict, List, Optional

from .base import (
    SAVE_CONFIG_COMMAND,
    Resource,
    as_list,
    check_command_status,
    normalize_boolean,
)

# Tells the web UI to refresh its policy consumer view after a change
WEBHELP_EVENT = {
    "webhelp": {
        "event": {
            "push": {
                "data": json.dumps(
                    {"type": "configuration_change", "value": {"url": "/policies/policy-consumers"}},
                    separators=(",", ":"),
                )
            }
        }
    }
}


def _dig(obj: Any, *keys: Any) -> Any:
    for key in keys:
        if isinstance(obj, dict):
            obj = obj.get(key)
        elif isinstance(obj, list) and isinstance(key, int) and -len(obj) <= key < len(obj):
            obj = obj[key]
        else:
            return None
    return obj


class Hotspot(Resource):
    """Hotspot hosts and IP policies."""

    def policies(self) -> List[Dict[str, Any]]:
        response = self.client.batch([{"show": {"sc": {"ip": {"policy": {}}}}}])
        return [
            _normalize_policy(policy)
            for policy in as_list(_dig(response, 0, "show", "sc", "ip", "policy"))
            if isinstance(policy, dict)
        ]

    def hosts(self) -> List[Dict[str, Any]]:
        response = self.client.batch(
            [
                {"show": {"sc": {"ip": {"hotspot": {"host": {}}}}}},
                {"show": {"ip": {"hotspot": {}}}},
            ]
        )
        config_hosts = as_list(_dig(response, 0, "show", "sc", "ip", "hotspot", "host"))
        runtime_hosts = as_list(_dig(response, 1, "show", "ip", "hotspot", "host"))
        return _merge_hosts(config_hosts, runtime_hosts)

    def set_host_policy(self, mac: str, policy: Optional[str], permit: bool = True) -> Any:
        """Assign a policy to a host, or remove it with policy=None.

        The change is saved to the startup configuration in the same batch.

        Raises:
            ValueError: mac is empty.
        """
        if not mac or not mac.strip():
            raise ValueError("MAC address is required")

        host: Dict[str, Any] = {"mac": mac.lower(), "permit": permit}
        if policy is None or not str(policy).strip():
            host["policy"] = {"no": True}
        else:
            host["policy"] = policy

        return check_command_status(
            self.client.batch(
                [WEBHELP_EVENT, {"ip": {"hotspot": {"host": host}}}, SAVE_CONFIG_COMMAND]
            )
        )

    def find_policy(self, policy_id: str) -> Optional[Dict[str, Any]]:
        for policy in self.policies():
            if policy["id"] == policy_id:
                return policy
        return None

    def find_host(self, mac: str) -> Optional[Dict[str, Any]]:
        wanted = mac.lower()
        for host in self.hosts():
            if host["mac"].lower() == wanted:
                return host
        return None


def _normalize_policy(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": data.get("id"),
        "description": data.get("description"),
        "global": normalize_boolean(data.get("global")),
        "interfaces": [
            {"name": iface.get("name"), "priority": iface.get("priority")}
            for iface in as_list(data.get("interface"))
            if isinstance(iface, dict)
        ],
    }


def _merge_hosts(
    config_hosts: List[Any], runtime_hosts: List[Any]
) -> List[Dict[str, Any]]:
    runtime_by_mac: Dict[str, Dict[str, Any]] = {}
    for host in runtime_hosts:
        if isinstance(host, dict) and host.get("mac"):
            runtime_by_mac[host["mac"].upper()] = host

    merged = []
    for config_host in config_hosts:
        if not isinstance(config_host, dict) or not config_host.get("mac"):
            continue
        runtime_host = runtime_by_mac.pop(config_host["mac"].upper(), {})
        merged.append(_normalize_host(config_host, runtime_host))

    # Hosts seen at runtime but absent from the configuration
    for runtime_host in runtime_by_mac.values():
        merged.append(_normalize_host({}, runtime_host))

    return merged


def _normalize_host(config: Dict[str, Any], runtime: Dict[str, Any]) -> Dict[str, Any]:
    mac = config.get("mac") or runtime.get("mac")
    return {
        "mac": mac.upper(),
        "name": config.get("name") or runtime.get("name") or runtime.get("hostname"),
        "hostname": runtime.get("hostname"),
        "ip": runtime.get("ip"),
        "interface": runtime.get("interface"),
        "via": runtime.get("via"),
        "policy": config.get("policy"),
        "permit": normalize_boolean(config.get("permit")),
        "deny": normalize_boolean(config.get("deny")),
        "schedule": config.get("schedule"),
        "active": normalize_boolean(runtime.get("active")),
        "registered": normalize_boolean(runtime.get("registered")),
        "access": runtime.get("access"),
        "rxbytes": runtime.get("rxbytes"),
        "txbytes": runtime.get("txbytes"),
        "uptime": runtime.get("uptime"),
        "first_seen": runtime.get("first-seen"),
        "last_seen": runtime.get("last-seen"),
    }
