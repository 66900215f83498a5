"""Contains results of the pull request synchronization workflows."""

from release_sync_manager.schemas.github import PullRequestUpdate
from release_sync_manager.synchronize.models import SyncSettings, SyncState


class SyncBotResult:
    """Contains the pull request update computed by the sync bot."""

    def __init__(self, update: PullRequestUpdate, settings: SyncSettings, notices: list[str], state: SyncState) -> None:
        """Initialize the result with the pull request update, the settings it reflects, notices, and the resulting sync state."""
        self.update = update
        self.settings = settings
        self.notices = notices
        self.state = state


class StatusCheckResult:
    """Contains the outcome of the pull request status check."""

    def __init__(self, body: str, settings: SyncSettings, problems: list[str], notices: list[str], state: SyncState) -> None:
        """Initialize the result with the refreshed body, settings, problems, notices, and the resulting sync state."""
        self.body = body
        self.settings = settings
        self.problems = problems
        self.notices = notices
        self.state = state

    @property
    def success(self) -> bool:
        """Whether every aspect of the pull request is valid and in sync."""
        return self.settings.all_in_sync


class SyncWorkflowResult:
    """Contains the outcome of a sync workflow run against GitHub."""

    def __init__(
        self,
        issue_number: int | None = None,
        pull_request_number: int | None = None,
        skipped_reason: str | None = None,
        problems: list[str] | None = None,
        notices: list[str] | None = None,
        state: SyncState | None = None,
    ) -> None:
        """Initialize the result with the resolved numbers and the outcome."""
        self.issue_number = issue_number
        self.pull_request_number = pull_request_number
        self.skipped_reason = skipped_reason
        self.problems = problems or []
        self.notices = notices or []
        self.state = state

    @property
    def skipped(self) -> bool:
        """Whether the workflow stopped before syncing anything."""
        return self.skipped_reason is not None

    @property
    def success(self) -> bool:
        """Whether the workflow ran and found no problems."""
        return not self.skipped and not self.problems
