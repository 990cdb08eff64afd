"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import secrets

import pytest

from tests.helpers.webhook_builders import (
    REPO_URL,
    FakeRegistryFetcher,
    RecordingDispatchClient,
    snapshot,
)
from upm_dispatch.registry.models import RegistryStatus

_DISPATCH_ENV_VARS = (
    "UPM_DISPATCH_WEBHOOK_SECRET",
    "UPM_DISPATCH_GITHUB_TOKEN",
    "UPM_DISPATCH_REGISTRY_URL",
    "UPM_DISPATCH_TARGET_REPOSITORY",
    "UPM_DISPATCH_API_URL",
    "UPM_DISPATCH_EVENT_TYPE",
    "UPM_DISPATCH_MANIFEST_FILENAME",
    "UPM_DISPATCH_REGISTRY_HOST",
    "UPM_DISPATCH_TIMEOUT_S",
    "UPM_DISPATCH_GITHUB_APP_ID",
    "UPM_DISPATCH_GITHUB_APP_PRIVATE_KEY",
    "UPM_DISPATCH_GITHUB_APP_INSTALLATION_OWNER",
)


@pytest.fixture(autouse=True)
def _clean_dispatch_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment settings out of every test."""
    for name in _DISPATCH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def webhook_secret() -> str:
    """Return a random shared webhook secret."""
    return secrets.token_hex(16)


@pytest.fixture
def active_fetcher() -> FakeRegistryFetcher:
    """Return a fetcher whose registry lists the test repository as active."""
    return FakeRegistryFetcher(snapshot((REPO_URL, RegistryStatus.ACTIVE)))


@pytest.fixture
def dispatch_client() -> RecordingDispatchClient:
    """Return a dispatch client that records requests."""
    return RecordingDispatchClient()
