"""Reconcile configuration between CLI arguments and environment variables."""

from pathlib import Path

import structlog

from release_sync_manager.configuration.env import Settings
from release_sync_manager.configuration.exceptions import (
    GitHubAuthenticationConfigurationUndefinedError,
    RequiredConfigurationElementError,
)
from release_sync_manager.configuration.models import GitHubAuthenticationType, SyncConfig
from release_sync_manager.utils.constants import (
    DEFAULT_ALLOWED_BASE_BRANCHES,
    DEFAULT_SYNC_TEMPLATE_BRANCH,
    DEFAULT_SYNC_TEMPLATE_PATH,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


# (label, CLI option, environment variable) of each GitHub App setting.
GITHUB_APP_SETTINGS: tuple[tuple[str, str, str], ...] = (
    ("GitHub App ID", "--github-app-id", "GITHUB_APP_ID"),
    ("GitHub App private key path", "--github-app-private-key-path", "GITHUB_APP_PRIVATE_KEY_PATH"),
    ("GitHub App installation ID", "--github-app-installation-id", "GITHUB_APP_INSTALLATION_ID"),
)


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Decide whether the repository commands authenticate with a PAT or as a GitHub App.

    Exactly one of the two may be configured, and a GitHub App configuration
    must name all three of its settings.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If neither or both are configured, or the GitHub App configuration is partial.
    """
    app_values = (github_app_id, github_app_private_key_path, github_app_installation_id)
    if github_pat_token and any(app_values):
        raise GitHubAuthenticationConfigurationUndefinedError(
            "Both a personal access token and a GitHub App configuration are given. Use one or the other."
        )
    if github_pat_token:
        logger.debug("Authenticating with a personal access token")
        return GitHubAuthenticationType.PAT
    if not any(app_values):
        raise GitHubAuthenticationConfigurationUndefinedError(
            "No GitHub authentication configured. Pass --github-pat-token or set GITHUB_PAT_TOKEN, or configure a GitHub App."
        )

    missing = [f"{label} ({option} or {env_name})" for (label, option, env_name), value in zip(GITHUB_APP_SETTINGS, app_values) if not value]
    if missing:
        raise GitHubAuthenticationConfigurationUndefinedError(f"Incomplete GitHub App configuration, missing: {', '.join(missing)}.")
    logger.debug("Authenticating as a GitHub App", github_app_id=github_app_id)
    return GitHubAuthenticationType.APP


def parse_branch_list(value: str | None) -> list[str]:
    """Split a comma separated list of branch names, dropping empty entries."""
    if not value:
        return []
    return [branch.strip() for branch in value.split(",") if branch.strip()]


async def reconcile_sync_configuration(
    cli_default_reviewer: str | None = None,
    cli_base_branches: list[str] | None = None,
    cli_template_repo: str | None = None,
    cli_template_branch: str | None = None,
    cli_template_path: str | None = None,
) -> SyncConfig:
    """Reconciles the pull request sync configuration from the CLI and the environment.

    Values given on the command line take precedence over environment variables.

    Raises:
        RequiredConfigurationElementError: If no default reviewer is configured.

    Returns:
        SyncConfig: The reconciled sync configuration.
    """
    settings = Settings()

    default_reviewer = cli_default_reviewer or settings.DEFAULT_PR_REVIEWER
    if not default_reviewer:
        raise RequiredConfigurationElementError(
            name="default pull request reviewer",
            cli_name="default_reviewer",
            env_name="DEFAULT_PR_REVIEWER",
        )

    base_branches = cli_base_branches or parse_branch_list(settings.PR_SYNC_BASE_BRANCHES) or list(DEFAULT_ALLOWED_BASE_BRANCHES)
    config = SyncConfig(
        default_reviewer=default_reviewer,
        allowed_base_branches=base_branches,
        template_repo=cli_template_repo or settings.PR_SYNC_TEMPLATE_REPO,
        template_branch=cli_template_branch or settings.PR_SYNC_TEMPLATE_BRANCH or DEFAULT_SYNC_TEMPLATE_BRANCH,
        template_path=cli_template_path or settings.PR_SYNC_TEMPLATE_PATH or DEFAULT_SYNC_TEMPLATE_PATH,
    )
    logger.debug(
        "Reconciled sync configuration",
        default_reviewer=config.default_reviewer,
        allowed_base_branches=config.allowed_base_branches,
        template_repo=config.template_repo,
    )
    return config
