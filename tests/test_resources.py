"""Tests for the resource facades (system, devices, hotspot, startup config)."""

import httpx
import pytest

from fake_router import json_response, request_json
from keenetic_client.exceptions import ApiError, NotFoundError
from keenetic_client.resources.base import (
    SAVE_CONFIG_COMMAND,
    as_list,
    check_command_status,
    deep_normalize_keys,
    normalize_boolean,
)
from keenetic_client.resources.hotspot import WEBHELP_EVENT


HOSTS = {
    "host": [
        {
            "mac": "AA:BB:CC:DD:EE:01",
            "name": "Laptop",
            "hostname": "laptop",
            "ip": "192.168.1.10",
            "interface": "Bridge0",
            "active": True,
            "registered": True,
            "access": "permit",
            "first-seen": 100,
            "last-seen": 5,
            "dhcp": {"static": True},
            "mws": {"ap": "WifiMaster0/AccessPoint0", "cid": "abc"},
        },
        {
            "mac": "AA:BB:CC:DD:EE:02",
            "hostname": "phone",
            "ip": "192.168.1.11",
            "active": "no",
            "registered": "yes",
        },
    ]
}

ASSOCIATIONS = {
    "station": [
        {"mac": "aa:bb:cc:dd:ee:01", "rssi": -52, "txrate": 866, "rxrate": 780, "mode": "11ac"}
    ]
}


class TestHelpers:
    """Tests for the normalization helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True), ("true", True), ("yes", True), ("1", True), (1, True),
            (False, False), ("false", False), ("no", False), ("0", False), (0, False),
            ("auto", "auto"), (None, None), (5, 5),
        ],
    )
    def test_normalize_boolean(self, value, expected):
        """Test router boolean spellings map to bool; other values pass through."""
        assert normalize_boolean(value) == expected

    def test_as_list(self):
        """Test lone objects are wrapped and None becomes empty."""
        assert as_list(None) == []
        assert as_list({"a": 1}) == [{"a": 1}]
        assert as_list([1, 2]) == [1, 2]

    def test_deep_normalize_keys(self):
        """Test kebab-case keys are converted at every level."""
        data = {"system-name": "r1", "items": [{"first-seen": 1}]}

        assert deep_normalize_keys(data) == {"system_name": "r1", "items": [{"first_seen": 1}]}


class TestCheckCommandStatus:
    """Tests for check_command_status()."""

    def test_success_passes_through(self):
        """Test results without an error status are returned unchanged."""
        response = [{"status": [{"status": "message", "message": "saved"}]}]

        assert check_command_status(response) is response

    def test_nested_error_raises(self):
        """Test an error status anywhere in the result raises ApiError."""
        response = [
            {},
            {"ip": {"hotspot": {"host": {"status": [{"status": "error", "message": "invalid MAC"}]}}}},
        ]

        with pytest.raises(ApiError) as exc_info:
            check_command_status(response)

        assert "invalid MAC" in str(exc_info.value)
        assert exc_info.value.status_code == 200
        assert exc_info.value.response_body is response


class TestSystem:
    """Tests for client.system."""

    def test_resources(self, client, router):
        """Test CPU and memory usage are computed from /rci/show/system."""
        router.add(
            "GET",
            "/rci/show/system",
            json_response(
                {
                    "cpuload": 15,
                    "memtotal": 1000,
                    "memfree": 400,
                    "membuffers": 100,
                    "memcache": 100,
                    "swaptotal": 0,
                    "swapfree": 0,
                    "uptime": 86400,
                }
            ),
        )

        result = client.system.resources()

        assert result["cpu"] == {"load_percent": 15}
        assert result["memory"] == {
            "total": 1000,
            "free": 400,
            "used": 400,
            "buffers": 100,
            "cached": 100,
            "used_percent": 40.0,
        }
        assert result["swap"] is None
        assert result["uptime"] == 86400

    def test_info(self, client, router):
        """Test firmware fields are renamed from /rci/show/version."""
        router.add(
            "GET",
            "/rci/show/version",
            json_response(
                {
                    "model": "Giga",
                    "device": "KN-1011",
                    "title": "4.1.7",
                    "release": "4.01.C.7.0-0",
                    "ndm": {"exact": "0-abc123", "version": "4.01"},
                    "arch": "mips",
                }
            ),
        )

        info = client.system.info()

        assert info["model"] == "Giga"
        assert info["device"] == "KN-1011"
        assert info["firmware"] == "4.1.7"
        assert info["firmware_version"] == "4.01.C.7.0-0"
        assert info["ndm_version"] == "0-abc123"
        assert info["ndw_version"] is None

    def test_license_drops_missing_keys(self, client, router):
        """Test license() omits keys the router leaves out and normalizes services."""
        router.add(
            "GET",
            "/rci/show/license",
            json_response(
                {"valid": "yes", "services": [{"name": "cloud", "enabled": "true", "active": 0}]}
            ),
        )

        result = client.system.license()

        assert result["valid"] is True
        assert "expires" not in result
        assert result["services"] == [{"name": "cloud", "enabled": True, "active": False}]

    def test_reboot(self, client, router):
        """Test reboot() posts an empty object to /rci/system/reboot."""
        router.add("POST", "/rci/system/reboot", httpx.Response(200))

        client.system.reboot()

        assert request_json(router.last("POST", "/rci/system/reboot")) == {}

    def test_set_led_mode(self, client, router):
        """Test set_led_mode() posts the mode."""
        router.add("POST", "/rci/system/led", json_response({}))

        client.system.set_led_mode("off")

        assert request_json(router.last("POST", "/rci/system/led")) == {"mode": "off"}

    def test_set_led_mode_rejects_unknown(self, client, router):
        """Test an unknown LED mode raises ValueError before any request."""
        with pytest.raises(ValueError, match="Invalid LED mode"):
            client.system.set_led_mode("blink")

        assert router.requests == []


class TestDevices:
    """Tests for client.devices."""

    @pytest.fixture(autouse=True)
    def _routes(self, router):
        router.add("GET", "/rci/show/ip/hotspot/host", json_response(HOSTS))
        router.add("GET", "/rci/show/associations", json_response(ASSOCIATIONS))

    def test_all_merges_association_data(self, client):
        """Test devices carry normalized fields and Wi-Fi stats by MAC."""
        devices = client.devices.all()

        assert len(devices) == 2
        laptop, phone = devices
        assert laptop["mac"] == "AA:BB:CC:DD:EE:01"
        assert laptop["static_ip"] == "192.168.1.10"
        assert laptop["wifi_ap"] == "WifiMaster0/AccessPoint0"
        assert laptop["rssi"] == -52
        assert laptop["wifi_mode"] == "11ac"
        assert laptop["first_seen"] == 100
        assert phone["name"] == "phone"
        assert phone["active"] is False
        assert phone["registered"] is True
        assert phone["static_ip"] is None
        assert phone["rssi"] is None

    def test_active(self, client):
        """Test active() keeps only active devices."""
        assert [d["mac"] for d in client.devices.active()] == ["AA:BB:CC:DD:EE:01"]

    def test_find_is_case_insensitive(self, client):
        """Test find() matches MAC regardless of case."""
        assert client.devices.find("aa:bb:cc:dd:ee:02")["hostname"] == "phone"

    def test_find_missing_raises(self, client):
        """Test find() raises NotFoundError for unknown MAC."""
        with pytest.raises(NotFoundError, match="not found"):
            client.devices.find("00:00:00:00:00:00")

    def test_update_builds_single_batch(self, client, router):
        """Test update() sends all changes in one batch with a lower-case MAC."""
        router.add("POST", "/rci/", json_response([{}, {}, {}]))

        client.devices.update("AA:BB:CC:DD:EE:01", name="Work laptop", access="deny", policy=None)

        assert request_json(router.last("POST", "/rci/")) == [
            {"known": {"host": {"mac": "aa:bb:cc:dd:ee:01", "name": "Work laptop"}}},
            {"ip": {"hotspot": {"host": {"mac": "aa:bb:cc:dd:ee:01", "deny": True}}}},
            {"ip": {"hotspot": {"host": {"mac": "aa:bb:cc:dd:ee:01", "policy": {"no": True}}}}},
        ]

    def test_update_static_ip(self, client, router):
        """Test static_ip sets or removes a DHCP reservation."""
        router.add("POST", "/rci/", json_response([{}]))

        client.devices.update("AA:BB:CC:DD:EE:01", static_ip="192.168.1.50")
        assert request_json(router.last("POST", "/rci/")) == [
            {"ip": {"dhcp": {"host": {"mac": "aa:bb:cc:dd:ee:01", "ip": "192.168.1.50"}}}}
        ]

        client.devices.update("AA:BB:CC:DD:EE:01", static_ip="")
        assert request_json(router.last("POST", "/rci/")) == [
            {"ip": {"dhcp": {"host": {"mac": "aa:bb:cc:dd:ee:01", "no": True}}}}
        ]

    def test_update_without_attributes(self, client, router):
        """Test update() with nothing to change sends no request."""
        assert client.devices.update("AA:BB:CC:DD:EE:01") == {}
        assert router.count("POST", "/rci/") == 0

    def test_update_unknown_attribute(self, client):
        """Test unknown attributes raise TypeError."""
        with pytest.raises(TypeError, match="colour"):
            client.devices.update("AA:BB:CC:DD:EE:01", colour="blue")

    def test_update_reports_command_error(self, client, router):
        """Test an error status inside the batch result raises ApiError."""
        router.add(
            "POST",
            "/rci/",
            json_response([{"known": {"host": {"status": [{"status": "error", "message": "bad name"}]}}}]),
        )

        with pytest.raises(ApiError, match="bad name"):
            client.devices.update("AA:BB:CC:DD:EE:01", name="")

    def test_delete(self, client, router):
        """Test delete() unregisters the host."""
        router.add("POST", "/rci/", json_response([{}]))

        client.devices.delete("AA:BB:CC:DD:EE:02")

        assert request_json(router.last("POST", "/rci/")) == [
            {"ip": {"hotspot": {"host": {"mac": "aa:bb:cc:dd:ee:02", "no": True}}}}
        ]


class TestHotspot:
    """Tests for client.hotspot."""

    def test_policies(self, client, router):
        """Test policies are read from the batch result and normalized."""
        router.add(
            "POST",
            "/rci/",
            json_response(
                [
                    {
                        "show": {
                            "sc": {
                                "ip": {
                                    "policy": {
                                        "id": "Policy0",
                                        "description": "VPN",
                                        "global": "no",
                                        "interface": {"name": "Wireguard0", "priority": 1},
                                    }
                                }
                            }
                        }
                    }
                ]
            ),
        )

        policies = client.hotspot.policies()

        assert policies == [
            {
                "id": "Policy0",
                "description": "VPN",
                "global": False,
                "interfaces": [{"name": "Wireguard0", "priority": 1}],
            }
        ]

    def test_hosts_merges_config_and_runtime(self, client, router):
        """Test hosts combine saved policy with runtime state; runtime-only hosts follow."""
        router.add(
            "POST",
            "/rci/",
            json_response(
                [
                    {"show": {"sc": {"ip": {"hotspot": {"host": [
                        {"mac": "aa:bb:cc:dd:ee:01", "policy": "Policy0", "permit": True},
                    ]}}}}},
                    {"show": {"ip": {"hotspot": {"host": [
                        {"mac": "AA:BB:CC:DD:EE:01", "ip": "192.168.1.10", "active": "yes"},
                        {"mac": "AA:BB:CC:DD:EE:03", "hostname": "tv", "active": False},
                    ]}}}},
                ]
            ),
        )

        hosts = client.hotspot.hosts()

        assert [h["mac"] for h in hosts] == ["AA:BB:CC:DD:EE:01", "AA:BB:CC:DD:EE:03"]
        assert hosts[0]["policy"] == "Policy0"
        assert hosts[0]["ip"] == "192.168.1.10"
        assert hosts[0]["active"] is True
        assert hosts[1]["name"] == "tv"
        assert hosts[1]["policy"] is None

    def test_set_host_policy(self, client, router):
        """Test set_host_policy() sends webhelp event, host change and save together."""
        router.add("POST", "/rci/", json_response([{}, {}, {}]))

        client.hotspot.set_host_policy("AA:BB:CC:DD:EE:01", "Policy0")

        assert request_json(router.last("POST", "/rci/")) == [
            WEBHELP_EVENT,
            {"ip": {"hotspot": {"host": {"mac": "aa:bb:cc:dd:ee:01", "permit": True, "policy": "Policy0"}}}},
            SAVE_CONFIG_COMMAND,
        ]

    def test_clear_host_policy(self, client, router):
        """Test policy=None removes the assignment."""
        router.add("POST", "/rci/", json_response([{}, {}, {}]))

        client.hotspot.set_host_policy("AA:BB:CC:DD:EE:01", None)

        host = request_json(router.last("POST", "/rci/"))[1]["ip"]["hotspot"]["host"]
        assert host["policy"] == {"no": True}

    def test_set_host_policy_requires_mac(self, client, router):
        """Test an empty MAC raises ValueError before any request."""
        with pytest.raises(ValueError, match="MAC address is required"):
            client.hotspot.set_host_policy("  ", "Policy0")

        assert router.requests == []


class TestStartupConfig:
    """Tests for client.startup_config."""

    def test_save(self, client, router):
        """Test save() runs the configuration save command."""
        router.add("POST", "/rci/", json_response([{}]))

        client.startup_config.save()

        assert request_json(router.last("POST", "/rci/")) == [SAVE_CONFIG_COMMAND]

    def test_download(self, client, router):
        """Test download() returns the configuration text."""
        router.add(
            "GET",
            "/ci/startup-config.txt",
            httpx.Response(200, text="! $$$ Model: Keenetic Giga\nsystem\n    hostname r1\n"),
        )

        assert client.startup_config.download().startswith("! $$$ Model")

    @pytest.mark.parametrize("body", ["true", '{"a": 1}', "42\n"])
    def test_download_keeps_json_looking_text(self, client, router, body):
        """Test a body that parses as JSON comes back byte-for-byte as text."""
        router.add("GET", "/ci/startup-config.txt", httpx.Response(200, text=body))

        assert client.startup_config.download() == body

    def test_download_empty(self, client, router):
        """Test an empty configuration body gives None."""
        router.add("GET", "/ci/startup-config.txt", httpx.Response(200))

        assert client.startup_config.download() is None

    def test_upload(self, client, router):
        """Test upload() posts the text unchanged as text/plain."""
        router.add("POST", "/ci/startup-config.txt", httpx.Response(200))
        content = "system\n    hostname r1\n"

        client.startup_config.upload(content)

        request = router.last("POST", "/ci/startup-config.txt")
        assert request.content == content.encode()
        assert request.headers["content-type"] == "text/plain"

    def test_upload_rejects_empty(self, client, router):
        """Test blank content raises ValueError before any request."""
        with pytest.raises(ValueError, match="cannot be empty"):
            client.startup_config.upload("   \n")

        assert router.requests == []
