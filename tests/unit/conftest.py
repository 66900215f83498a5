"""Shared fixtures for unit tests."""

from typing import Generator

import pytest
import structlog
from pytest import MonkeyPatch
from structlog.testing import LogCapture

# Every setting the CLI and configuration reconciliation read from the environment.
CONFIGURATION_ENV_VARS = (
    "GITHUB_PAT_TOKEN",
    "GITHUB_APP_ID",
    "GITHUB_APP_PRIVATE_KEY_PATH",
    "GITHUB_APP_INSTALLATION_ID",
    "DEFAULT_PR_REVIEWER",
    "PR_SYNC_BASE_BRANCHES",
    "PR_SYNC_TEMPLATE_REPO",
    "PR_SYNC_TEMPLATE_BRANCH",
    "PR_SYNC_TEMPLATE_PATH",
)


@pytest.fixture(autouse=True)
def log_output() -> Generator[LogCapture, None, None]:
    """Capture the structlog events of each test so they can be asserted on."""
    capture = LogCapture()
    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars, capture],
        cache_logger_on_first_use=False,
    )
    yield capture
    structlog.reset_defaults()


@pytest.fixture
def clean_env(monkeypatch: MonkeyPatch) -> MonkeyPatch:
    """Remove every GitHub authentication and sync setting from the environment."""
    for name in CONFIGURATION_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
