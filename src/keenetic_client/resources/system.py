"""System status, firmware information and maintenance operations.

Endpoints:
    GET  /rci/show/system         cpuload, memtotal, memfree, ..., uptime
    GET  /rci/show/version        model, device, release, ndm, ...
    GET  /rci/show/defaults       default system-name, domain-name, ...
    GET  /rci/show/license        valid, active, expires, features, services
    GET  /rci/show/system/update  firmware update availability
    GET  /rci/show/button         physical button configuration
    POST /rci/system/reboot
    POST /rci/system/led          {"mode": "on" | "off" | "auto"}
"""

from typing import Any, Dict, Optional

import structlog

from keenetic_client.api.endpoints import rci_path, show_path

from .base import (
    Resource,
    deep_normalize_keys,
    normalize_boolean,
    normalize_booleans,
    normalize_keys,
)

logger = structlog.get_logger(__name__)

LED_MODES = ("on", "off", "auto")


class System(Resource):
    """Router system information."""

    def resources(self) -> Dict[str, Any]:
        """CPU, memory and swap usage plus uptime.

        Returns:
            {"cpu": {"load_percent": 15},
             "memory": {"total", "free", "used", "buffers", "cached", "used_percent"},
             "swap": {...} or None when the router has no swap,
             "uptime": 86400}
        """
        response = self._get(show_path("system"))
        if not isinstance(response, dict):
            return {}

        cpuload = response.get("cpuload")
        return {
            "cpu": {"load_percent": int(cpuload)} if cpuload is not None else None,
            "memory": _memory_usage(response),
            "swap": _swap_usage(response),
            "uptime": response.get("uptime"),
        }

    def info(self) -> Dict[str, Any]:
        """Model, hardware and firmware details."""
        response = self._get(show_path("version"))
        if not isinstance(response, dict):
            return {}

        ndm = response.get("ndm") or {}
        ndw = response.get("ndw") or {}
        return {
            "model": response.get("model"),
            "device": response.get("device"),
            "manufacturer": response.get("manufacturer"),
            "vendor": response.get("vendor"),
            "hw_version": response.get("hw_version"),
            "hw_id": response.get("hw_id"),
            "firmware": response.get("title"),
            "firmware_version": response.get("release"),
            "ndm_version": ndm.get("exact") or ndm.get("version"),
            "ndw_version": ndw.get("version"),
            "arch": response.get("arch"),
            "components": response.get("components"),
            "sandbox": response.get("sandbox"),
        }

    def uptime(self) -> Optional[int]:
        response = self._get(show_path("system"))
        if isinstance(response, dict):
            return response.get("uptime")
        return None

    def defaults(self) -> Dict[str, Any]:
        response = self._get(show_path("defaults"))
        if not isinstance(response, dict):
            return {}
        return deep_normalize_keys(response)

    def license(self) -> Dict[str, Any]:
        """License status with enabled features and services.

        Keys the router leaves out are omitted from the result.
        """
        response = self._get(show_path("license"))
        if not isinstance(response, dict):
            return {}

        result = {
            "valid": normalize_boolean(response.get("valid")),
            "active": normalize_boolean(response.get("active")),
            "expires": response.get("expires"),
            "type": response.get("type"),
            "features": [
                normalize_keys(f) if isinstance(f, dict) else f
                for f in response.get("features") or []
            ],
            "services": [
                normalize_booleans(normalize_keys(s), ("enabled", "active"))
                if isinstance(s, dict)
                else s
                for s in response.get("services") or []
            ],
        }
        return {key: value for key, value in result.items() if value is not None}

    def check_updates(self) -> Dict[str, Any]:
        response = self._get(show_path("system/update"))
        if not isinstance(response, dict):
            return {}
        return normalize_booleans(deep_normalize_keys(response), ("available", "downloading"))

    def button_config(self) -> Dict[str, Any]:
        response = self._get(show_path("button"))
        if not isinstance(response, dict):
            return {}
        return deep_normalize_keys(response)

    def reboot(self) -> Any:
        """Restart the router. It is unreachable for a minute or two afterwards."""
        logger.info("reboot_requested", host=self.client.settings.host)
        return self._post(rci_path("system/reboot"), {})

    def set_led_mode(self, mode: str) -> Any:
        """Set front panel LEDs to "on", "off" or "auto".

        Raises:
            ValueError: Unknown mode.
        """
        if mode not in LED_MODES:
            raise ValueError(
                f"Invalid LED mode: {mode}. Valid modes: {', '.join(LED_MODES)}"
            )
        return self._post(rci_path("system/led"), {"mode": mode})


def _memory_usage(response: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    total = response.get("memtotal")
    free = response.get("memfree")
    if not total or free is None:
        return None

    buffers = response.get("membuffers") or 0
    cached = response.get("memcache") or 0
    used = total - free - buffers - cached
    return {
        "total": total,
        "free": free,
        "used": used,
        "buffers": buffers,
        "cached": cached,
        "used_percent": round(used / total * 100, 1),
    }


def _swap_usage(response: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    total = response.get("swaptotal")
    free = response.get("swapfree")
    if not total or free is None:
        return None

    used = total - free
    return {
        "total": total,
        "free": free,
        "used": used,
        "used_percent": round(used / total * 100, 1),
    }
