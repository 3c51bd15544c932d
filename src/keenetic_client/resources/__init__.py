"""Resource facades built on the RCI transport."""

from .devices import Devices
from .hotspot import Hotspot
from .startup_config import StartupConfig
from .system import System

__all__ = [
    "Devices",
    "Hotspot",
    "StartupConfig",
    "System",
]
