"""pytest configuration and shared fixtures."""

import base64
from collections.abc import Iterator
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

from dashguard.auth.credentials import hash_password
from dashguard.config import GateConfig, SecretMode

USERNAME = "alice"
PASSWORD = "s3cret"

# Hashing is deliberately slow, so do it once per session
PASSWORD_PHC = hash_password(PASSWORD)

# Property tests run alongside the autouse environment fixture
settings.register_profile("dashguard", suppress_health_check=[HealthCheck.function_scoped_fixture])
settings.load_profile("dashguard")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep real environment variables and .env files out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith(("HANGFIRE_", "DASHGUARD_")):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def plaintext_config() -> GateConfig:
    """Gate configured with a plaintext password."""
    return GateConfig(
        username=USERNAME,
        credential_secret=PASSWORD,
        secret_mode=SecretMode.PLAINTEXT,
    )


@pytest.fixture
def hashed_config() -> GateConfig:
    """Gate configured with a password hash record."""
    return GateConfig(
        username=USERNAME,
        credential_secret=PASSWORD_PHC,
        secret_mode=SecretMode.HASHED,
    )


def basic_header(username: str, password: str) -> str:
    """Build an ``Authorization`` header value for the Basic scheme."""
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"
