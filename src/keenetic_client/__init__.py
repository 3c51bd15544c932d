"""
Keenetic Client - Python client for the Keenetic router RCI interface.

This package authenticates against Keenetic routers with their
challenge-response scheme, keeps the cookie session, and issues read,
write and batch RCI commands.

Features:
- Single-flight authentication safe to share between threads
- Typed errors for configuration, auth, connection, timeout and API failures
- Configuration via YAML with environment variable overrides
- Resource facades for system, devices, hotspot policies and config backup
"""

__version__ = "0.3.0"
__all__ = ["__version__"]
