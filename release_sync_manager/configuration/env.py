"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment variable settings for the application.

    Values are read when the model is instantiated, so tests and the CLI see
    the environment as it is at that moment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # GitHub authentication
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_PAT_TOKEN: str | None = None
    GITHUB_APP_ID: str | None = None
    GITHUB_APP_PRIVATE_KEY_PATH: Path | None = None
    GITHUB_APP_INSTALLATION_ID: str | None = None

    # Pull request sync
    DEFAULT_PR_REVIEWER: str | None = None
    PR_SYNC_BASE_BRANCHES: str | None = None
    """Comma separated list of the base branches pull requests may target."""
    PR_SYNC_TEMPLATE_REPO: str | None = None
    PR_SYNC_TEMPLATE_BRANCH: str | None = None
    PR_SYNC_TEMPLATE_PATH: str | None = None
