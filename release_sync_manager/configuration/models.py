"""Models for configuration between CLI arguments and environment variables."""

from dataclasses import dataclass, field
from enum import Enum

from release_sync_manager.utils.constants import (
    DEFAULT_ALLOWED_BASE_BRANCHES,
    DEFAULT_SYNC_TEMPLATE_BRANCH,
    DEFAULT_SYNC_TEMPLATE_PATH,
)


class GitHubAuthenticationType(str, Enum):
    """Enum for GitHub authentication types."""

    PAT = "pat"
    APP = "app"


class EventType(str, Enum):
    """Enum for the GitHub event that triggered a sync run."""

    ISSUE = "issue"
    PULL_REQUEST = "pr"


@dataclass
class SyncConfig:
    """Configuration class for the pull request sync commands."""

    default_reviewer: str
    allowed_base_branches: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_BASE_BRANCHES))
    template_repo: str | None = None
    template_branch: str = DEFAULT_SYNC_TEMPLATE_BRANCH
    template_path: str = DEFAULT_SYNC_TEMPLATE_PATH
