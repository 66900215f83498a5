"""Unit tests for GitHub authentication validation and sync configuration reconciliation."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from pytest import MonkeyPatch

from release_sync_manager.configuration import driver
from release_sync_manager.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError, RequiredConfigurationElementError
from release_sync_manager.configuration.models import GitHubAuthenticationType, SyncConfig
from release_sync_manager.configuration.reconcile import (
    parse_branch_list,
    reconcile_sync_configuration,
    validate_github_authentication_configuration,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, []),
        ("", []),
        ("main", ["main"]),
        (" main, preview ,,release ", ["main", "preview", "release"]),
    ],
)
def test_parse_branch_list(value: str | None, expected: list[str]) -> None:
    """Test splitting of comma separated branch lists."""
    assert parse_branch_list(value) == expected


@pytest.mark.asyncio
async def test_reconcile_uses_defaults(clean_env: MonkeyPatch) -> None:
    """Test that only the default reviewer is required."""
    # When
    config = await reconcile_sync_configuration(cli_default_reviewer="reviewer")

    # Then
    assert config == SyncConfig(default_reviewer="reviewer")
    assert config.allowed_base_branches == ["main", "preview"]
    assert config.template_repo is None
    assert config.template_branch == "main"
    assert config.template_path == ".github/pr-sync-template.md"


@pytest.mark.asyncio
async def test_reconcile_reads_environment(clean_env: MonkeyPatch) -> None:
    """Test that environment variables fill in missing CLI values."""
    # Given
    clean_env.setenv("DEFAULT_PR_REVIEWER", "env-reviewer")
    clean_env.setenv("PR_SYNC_BASE_BRANCHES", "main,release")
    clean_env.setenv("PR_SYNC_TEMPLATE_REPO", "org/templates")

    # When
    config = await reconcile_sync_configuration()

    # Then
    assert config.default_reviewer == "env-reviewer"
    assert config.allowed_base_branches == ["main", "release"]
    assert config.template_repo == "org/templates"


@pytest.mark.asyncio
async def test_reconcile_prefers_cli_values(clean_env: MonkeyPatch) -> None:
    """Test that CLI values take precedence over the environment."""
    clean_env.setenv("DEFAULT_PR_REVIEWER", "env-reviewer")
    clean_env.setenv("PR_SYNC_BASE_BRANCHES", "main,release")

    config = await reconcile_sync_configuration(cli_default_reviewer="cli-reviewer", cli_base_branches=["develop"])

    assert config.default_reviewer == "cli-reviewer"
    assert config.allowed_base_branches == ["develop"]


@pytest.mark.asyncio
async def test_reconcile_requires_default_reviewer(clean_env: MonkeyPatch) -> None:
    """Test that a missing default reviewer names both the CLI option and the environment variable."""
    with pytest.raises(RequiredConfigurationElementError) as exc_info:
        await reconcile_sync_configuration()
    assert exc_info.value.cli_name == "default_reviewer"
    assert exc_info.value.env_name == "DEFAULT_PR_REVIEWER"
    assert "Pass --default-reviewer or set the DEFAULT_PR_REVIEWER environment variable." in str(exc_info.value)


def test_get_sync_config_runs_reconciliation() -> None:
    """Test that the synchronous driver returns the reconciled configuration."""
    fake_config = SyncConfig(default_reviewer="reviewer")
    with patch(
        "release_sync_manager.configuration.reconcile.reconcile_sync_configuration",
        new=AsyncMock(return_value=fake_config),
    ) as mock_reconcile:
        result = driver.get_sync_config(default_reviewer="reviewer", base_branches=["main"])
    mock_reconcile.assert_awaited_once_with(
        cli_default_reviewer="reviewer",
        cli_base_branches=["main"],
        cli_template_repo=None,
        cli_template_branch=None,
        cli_template_path=None,
    )
    assert result == fake_config


@pytest.mark.asyncio
async def test_validate_github_authentication_with_pat() -> None:
    """Test that a personal access token alone selects PAT authentication."""
    auth_type = await validate_github_authentication_configuration("token", None, None, None)
    assert auth_type == GitHubAuthenticationType.PAT


@pytest.mark.asyncio
async def test_validate_github_authentication_with_app() -> None:
    """Test that a complete GitHub App configuration selects App authentication."""
    auth_type = await validate_github_authentication_configuration(None, 123, Path("app.pem"), 456)
    assert auth_type == GitHubAuthenticationType.APP


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "pat,app_id,key_path,installation_id,message",
    [
        ("token", 123, None, None, "Both a personal access token and a GitHub App configuration are given."),
        (None, None, None, None, "No GitHub authentication configured."),
        (
            None,
            123,
            None,
            456,
            "Incomplete GitHub App configuration, missing: GitHub App private key path "
            "(--github-app-private-key-path or GITHUB_APP_PRIVATE_KEY_PATH).",
        ),
    ],
)
async def test_validate_github_authentication_rejects_bad_configuration(
    pat: str | None, app_id: int | None, key_path: Path | None, installation_id: int | None, message: str
) -> None:
    """Test that ambiguous, missing, and partial authentication settings are rejected with a hint."""
    with pytest.raises(GitHubAuthenticationConfigurationUndefinedError) as exc_info:
        await validate_github_authentication_configuration(pat, app_id, key_path, installation_id)
    assert message in str(exc_info.value)
