"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod

from release_sync_manager.github.results import LookupResult
from release_sync_manager.schemas.github import (
    IssueRecord,
    IssueUpdate,
    MilestoneRecord,
    ProjectRecord,
    PullRequestRecord,
    PullRequestUpdate,
)


class GitHubClientBase(ABC):
    """Base ABC for GitHub clients."""

    # Issues
    @abstractmethod
    async def find_issue(self, issue_number: int) -> LookupResult[IssueRecord]:
        """Look up an issue of the repository that may not exist."""
        pass

    @abstractmethod
    async def update_issue(self, issue_number: int, update: IssueUpdate) -> IssueRecord:
        """Write the fields set on the update to an issue."""
        pass

    # Pull Requests
    @abstractmethod
    async def get_pull_request(self, pull_request_number: int) -> PullRequestRecord:
        """Get a pull request of the repository."""
        pass

    @abstractmethod
    async def find_pull_request(self, pull_request_number: int) -> LookupResult[PullRequestRecord]:
        """Look up a pull request of the repository that may not exist."""
        pass

    @abstractmethod
    async def update_pull_request(self, pull_request_number: int, update: PullRequestUpdate) -> PullRequestRecord:
        """Write the fields set on the update to a pull request."""
        pass

    @abstractmethod
    async def request_reviewers(self, pull_request_number: int, reviewers: list[str]) -> None:
        """Request reviews of a pull request."""
        pass

    # Organizational projects
    @abstractmethod
    async def list_issue_projects(self, issue_number: int) -> list[ProjectRecord]:
        """List the organizational projects an issue belongs to."""
        pass

    @abstractmethod
    async def list_pull_request_projects(self, pull_request_number: int) -> list[ProjectRecord]:
        """List the organizational projects a pull request belongs to."""
        pass

    @abstractmethod
    async def add_pull_request_to_project(self, pull_request: PullRequestRecord, project: ProjectRecord) -> None:
        """Add a pull request to an organizational project."""
        pass

    # Labels and milestones
    @abstractmethod
    async def label_exists(self, name: str) -> bool:
        """Check whether a label exists in the repository."""
        pass

    @abstractmethod
    async def find_milestone(self, title: str) -> MilestoneRecord | None:
        """Find a milestone of the repository by its exact title."""
        pass

    @abstractmethod
    async def list_milestone_items(self, milestone_number: int) -> tuple[list[IssueRecord], list[PullRequestRecord]]:
        """List every issue and every pull request of a milestone, in that order."""
        pass

    # Repository content
    @abstractmethod
    async def get_file_content(self, repo: str, path: str, ref: str) -> str:
        """Get the text content of a file from any repository in 'owner/repo' format."""
        pass
