"""Fixed RCI endpoint paths.

The Keenetic firmware exposes:
- /auth for the challenge-response handshake (GET challenge, POST response)
- /rci/show/<path> for reads
- /rci/ for batch commands (body must be a JSON array)
- /rci/<path> for endpoint-specific single writes
- /ci/startup-config.txt for configuration backup and restore
"""

AUTH = "/auth"
RCI_BATCH = "/rci/"
RCI_SHOW_PREFIX = "/rci/show"
STARTUP_CONFIG = "/ci/startup-config.txt"

CHALLENGE_HEADER = "X-NDM-Challenge"
REALM_HEADER = "X-NDM-Realm"


def show_path(path: str) -> str:
    """Build a read path under /rci/show.

    Example:
        >>> show_path("ip/hotspot/host")
        '/rci/show/ip/hotspot/host'
        >>> show_path("/system")
        '/rci/show/system'
    """
    return f"{RCI_SHOW_PREFIX}/{path.strip('/')}"


def rci_path(path: str) -> str:
    """Build a single-write path under /rci.

    Example:
        >>> rci_path("system/reboot")
        '/rci/system/reboot'
    """
    return f"/rci/{path.strip('/')}"
