"""Pytest configuration for bosh-ssh tests."""

import pytest
from loguru import logger

SETTINGS_ENV = (
    "DIRECTOR_URL",
    "UAA_URL",
    "BOSH_CLIENT",
    "BOSH_CLIENT_SECRET",
    "BOSH_CA_CERT",
    "BOSH_SSH_SESSION_NAME",
    "BOSH_SSH_BOSH_COMMAND",
    "BOSH_SSH_TMUX_COMMAND",
    "BOSH_SSH_TMUX_TIMEOUT",
    "BOSH_SSH_HTTP_TIMEOUT",
    "BOSH_SSH_HTTP_RETRIES",
    "BOSH_SSH_CLEANUP_ON_ERROR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's BOSH environment out of the tests."""
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def quiet_logger():
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def bosh_env(monkeypatch):
    """Minimal valid environment."""
    monkeypatch.setenv("DIRECTOR_URL", "https://director.example:25555")
    monkeypatch.setenv("UAA_URL", "https://director.example:8443")
    monkeypatch.setenv("BOSH_CLIENT", "admin")
    monkeypatch.setenv("BOSH_CLIENT_SECRET", "s3cret")
