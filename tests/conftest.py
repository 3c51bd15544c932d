"""Shared pytest fixtures.

Key goals:
- Keep KEENETIC_* environment variables and the default configuration
  from leaking between tests.
- Provide a transport and a client wired to FakeRouter through
  httpx.MockTransport.
"""

from __future__ import annotations

import os

import httpx
import pytest
import structlog

from fake_router import LOGIN, PASSWORD, FakeRouter
from keenetic_client.api.transport import RciTransport
from keenetic_client.client import KeeneticClient
from keenetic_client.config import KeeneticSettings, reset_config


def _drop_keenetic_env() -> None:
    for key in list(os.environ):
        if key.startswith("KEENETIC_") or key == "CONFIG_PATH":
            del os.environ[key]


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Ensure environment and global config do not leak across tests."""
    for key in list(os.environ):
        if key.startswith("KEENETIC_") or key == "CONFIG_PATH":
            monkeypatch.delenv(key)
    reset_config()
    yield
    # load_config() writes CONFIG_PATH and resolved secrets to os.environ
    _drop_keenetic_env()
    reset_config()
    structlog.reset_defaults()


@pytest.fixture
def settings():
    """Complete settings for a router at 192.168.1.1."""
    return KeeneticSettings(host="192.168.1.1", login=LOGIN, password=PASSWORD)


@pytest.fixture
def router():
    return FakeRouter()


@pytest.fixture
def transport(settings, router):
    """RciTransport wired to the fake router."""
    rci = RciTransport(settings, transport=httpx.MockTransport(router))
    yield rci
    rci.close()


@pytest.fixture
def client(settings, router):
    """KeeneticClient wired to the fake router."""
    keenetic = KeeneticClient(settings, transport=httpx.MockTransport(router))
    yield keenetic
    keenetic.close()
