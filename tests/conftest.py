"""Shared fixtures for the Pogoplug client tests."""

from __future__ import annotations

import httpx
import pytest

from pypogoplug.native import ClientConfig, MemorySessionStore, PogoplugClient
from pypogoplug.native.auth import ENV_API_URL, ENV_CONFIG, ENV_EMAIL, ENV_PASSWORD
from pypogoplug.native.models import DEFAULT_API_URL

TEST_EMAIL = "user@example.com"
TEST_PASSWORD = "hunter2"


def api_url(method: str, **params: str) -> str:
    """Build the URL the client requests for an API method."""
    return str(httpx.URL(f"{DEFAULT_API_URL}json/{method}", params=params))


def login_url() -> str:
    return api_url("loginUser", email=TEST_EMAIL, password=TEST_PASSWORD)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep local POGOPLUG_* settings out of the tests."""
    for name in (ENV_CONFIG, ENV_EMAIL, ENV_PASSWORD, ENV_API_URL):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(email=TEST_EMAIL, password=TEST_PASSWORD)


@pytest.fixture
def session() -> MemorySessionStore:
    return MemorySessionStore("T1")


@pytest.fixture
def client(config: ClientConfig, session: MemorySessionStore) -> PogoplugClient:
    """Create a PogoplugClient holding the token "T1"."""
    return PogoplugClient(config, session)
