"""Startup configuration save, backup and restore.

Endpoints:
    POST /rci/                   [{"system": {"configuration": {"save": {}}}}]
    GET  /ci/startup-config.txt  plain-text configuration
    POST /ci/startup-config.txt  plain-text configuration (applied after reboot)
"""

from typing import Any, Optional

import structlog

from keenetic_client.api.endpoints import STARTUP_CONFIG

from .base import SAVE_CONFIG_COMMAND, Resource

logger = structlog.get_logger(__name__)


class StartupConfig(Resource):
    """Router configuration file management."""

    def save(self) -> Any:
        """Flush the running configuration to persistent storage."""
        return self.client.batch([SAVE_CONFIG_COMMAND])

    def download(self) -> Optional[str]:
        """Return the startup configuration exactly as the router sent it."""
        return self._get_raw(STARTUP_CONFIG)

    def upload(self, content: str) -> Optional[str]:
        """Upload a configuration backup.

        An invalid configuration can lock you out of the router; keep
        physical access when restoring.

        Raises:
            ValueError: content is empty.
        """
        if content is None or not content.strip():
            raise ValueError("Configuration content cannot be empty")

        logger.info("startup_config_upload", size=len(content))
        return self._post_raw(STARTUP_CONFIG, content)
