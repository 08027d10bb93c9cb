"""
Shared pytest configuration and fixtures.

This module provides fixtures and configuration used across all test suites
(unit and integration tests).
"""

import pytest
from pathlib import Path
from typing import Any, Dict

from saml_test_util.config.schema import (
    AdminConfig,
    AuthSourceConfig,
    Config,
    LoggingConfig,
    NameIDConfig,
)


ADMIN_PASSWORD = "s3cret-admin"


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def project_root() -> Path:
    """
    Return the project root directory.

    Returns:
        Path: Absolute path to the project root directory.
    """
    return Path(__file__).parent.parent


@pytest.fixture
def src_dir(project_root: Path) -> Path:
    """
    Return the src directory path.

    Args:
        project_root: Project root directory fixture.

    Returns:
        Path: Absolute path to the src directory.
    """
    return project_root / "src"


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def session() -> Dict[str, Any]:
    """Return an empty dict standing in for the user session."""
    return {}


@pytest.fixture
def app_config(tmp_path: Path) -> Config:
    """
    Return a configuration with one password and two static sources.

    The admin gate is disabled; tests covering the gate enable it explicitly.

    Args:
        tmp_path: Pytest's temporary directory fixture.

    Returns:
        Config: Validated configuration.
    """
    return Config(
        admin=AdminConfig(protected=False, auth_source="admin"),
        auth_sources={
            "admin": AuthSourceConfig(
                type="password",
                username="admin",
                password_env_var="SAML_TEST_ADMIN_PASSWORD",
                attributes={"user": ["admin"]},
            ),
            "example-static": AuthSourceConfig(
                type="static",
                attributes={
                    "uid": ["testuser"],
                    "mail": ["a@x.com", "b@x.com"],
                    "cn": ["Test User"],
                },
                name_id=NameIDConfig(
                    value="_b806c4f98188b42e48d3eb5444db613dbde463e2e8",
                    format="urn:oasis:names:tc:SAML:2.0:nameid-format:transient",
                ),
            ),
            "no-nameid": AuthSourceConfig(
                type="static",
                attributes={"eduPersonAffiliation": ["member"]},
                session_duration=60,
            ),
        },
        logging=LoggingConfig(log_file=tmp_path / "logs" / "test.log"),
    )


@pytest.fixture
def admin_password(monkeypatch: pytest.MonkeyPatch) -> str:
    """Set the admin source password in the environment."""
    monkeypatch.setenv("SAML_TEST_ADMIN_PASSWORD", ADMIN_PASSWORD)
    return ADMIN_PASSWORD
