"""GitHub client adapter for the githubkit library."""

import base64
from functools import wraps
from pathlib import Path
from typing import Any, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import RequestFailed
from githubkit.versions.latest.models import ContentFile, Issue, Label, Milestone, PullRequest

from release_sync_manager.configuration.models import GitHubAuthenticationType
from release_sync_manager.schemas.github import (
    IssueRecord,
    IssueUpdate,
    MilestoneRecord,
    ProjectRecord,
    PullRequestRecord,
    PullRequestUpdate,
)
from release_sync_manager.utils.constants import ORGANIZATION_OWNER_TYPENAME
from release_sync_manager.utils.github import split_repository
from release_sync_manager.utils.retry import retry_on_rate_limit

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_client
from .results import Found, LookupFailed, LookupResult, NotFound

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

PROJECTS_QUERY = """
query ($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issueOrPullRequest(number: $number) {
      ... on Issue {
        projectsV2(first: 100) {
          nodes { id number title owner { __typename } }
        }
      }
      ... on PullRequest {
        projectsV2(first: 100) {
          nodes { id number title owner { __typename } }
        }
      }
    }
  }
}
"""

ADD_PROJECT_ITEM_MUTATION = """
mutation ($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
    item { id }
  }
}
"""

PULL_REQUEST_FIELDS = ("title", "body", "state")
ISSUE_FIELDS_OF_PULL_REQUEST = ("labels", "assignees", "milestone")


def handle_github_422(func: F) -> F:
    """Decorator to handle GitHub 422 Unprocessable Entity errors, logging and raising with details."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except RequestFailed as exc:
            if exc.response.status_code == 422:
                try:
                    error_data = exc.response.json()
                except ValueError:
                    error_data = {}
                message = error_data.get("message", "Unprocessable Entity")
                errors = error_data.get("errors", [])
                logger.error(
                    "GitHub 422 Unprocessable Entity",
                    function=func.__name__,
                    message=message,
                    errors=errors,
                    url=getattr(exc.response, "url", None),
                    status_code=422,
                )
                raise ValueError(
                    f"GitHub 422 error in {func.__name__}: {message} | errors: {errors} | url: {getattr(exc.response, 'url', None)}"
                ) from exc
            raise

    return wrapper  # type: ignore


def _dump(model: Any) -> dict[str, Any]:
    """Dump a githubkit model to a dictionary of the fields GitHub returned."""
    return model.model_dump(exclude_unset=True)  # type: ignore[no-any-return]


def _is_not_found(exc: RequestFailed) -> bool:
    return exc.response.status_code in (404, 410)


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name

    @classmethod
    async def create(
        cls,
        repo: str,
        github_auth_type: GitHubAuthenticationType,
        github_pat_token: str | None = None,
        github_app_id: int | None = None,
        github_app_private_key_path: Path | None = None,
        github_app_installation_id: int | None = None,
        github_api_url: str = "https://api.github.com",
    ) -> Self:
        """Create a new GitHub client adapter.

        Args:
            repo: Repository in 'owner/repo' format
            github_auth_type: Type of authentication (PAT or APP)
            github_pat_token: Personal access token (required for PAT auth)
            github_app_id: GitHub App ID (required for APP auth)
            github_app_private_key_path: Path to private key file (required for APP auth)
            github_app_installation_id: Installation ID (required for APP auth)
            github_api_url: GitHub API URL (defaults to https://api.github.com)

        Returns:
            Configured GitHubKitAdapter instance
        """
        owner, repo_name = split_repository(repo)
        logger.info(
            "Creating client for GitHub instance and repository",
            github_api_url=github_api_url,
            owner=owner,
            repo_name=repo_name,
        )
        client = await get_github_client(
            repo=repo,
            github_auth_type=github_auth_type,
            github_pat_token=github_pat_token,
            github_app_id=github_app_id,
            github_app_private_key_path=github_app_private_key_path,
            github_app_installation_id=github_app_installation_id,
            github_api_url=github_api_url,
        )
        return cls(client, owner, repo_name)

    # Issues
    @retry_on_rate_limit()
    async def _get_issue_data(self, issue_number: int) -> dict[str, Any]:
        response: Response[Issue] = await self.client.rest.issues.async_get(owner=self.owner, repo=self.repo_name, issue_number=issue_number)
        return _dump(response.parsed_data)

    async def find_issue(self, issue_number: int) -> LookupResult[IssueRecord]:
        """Look up an issue, telling apart a missing issue, a pull request, and a failed request."""
        try:
            data = await self._get_issue_data(issue_number)
        except RequestFailed as exc:
            if _is_not_found(exc):
                return NotFound(f"The issue '{issue_number}' does not exist.")
            return LookupFailed(f"Failed to get the issue '{issue_number}'.", error=exc)
        if data.get("pull_request"):
            return NotFound(f"The number '{issue_number}' belongs to a pull request, not an issue.")
        return Found(IssueRecord.model_validate(data))

    @handle_github_422
    @retry_on_rate_limit()
    async def update_issue(self, issue_number: int, update: IssueUpdate) -> IssueRecord:
        """Write the fields set on the update to an issue."""
        response: Response[Issue] = await self.client.rest.issues.async_update(
            owner=self.owner,
            repo=self.repo_name,
            issue_number=issue_number,
            **update.to_request_data(),
        )
        return IssueRecord.model_validate(_dump(response.parsed_data))

    # Pull Requests
    @retry_on_rate_limit()
    async def get_pull_request(self, pull_request_number: int) -> PullRequestRecord:
        """Get a pull request from the repository."""
        response: Response[PullRequest] = await self.client.rest.pulls.async_get(
            owner=self.owner, repo=self.repo_name, pull_number=pull_request_number
        )
        return PullRequestRecord.model_validate(_dump(response.parsed_data))

    async def find_pull_request(self, pull_request_number: int) -> LookupResult[PullRequestRecord]:
        """Look up a pull request, telling apart a missing pull request and a failed request."""
        try:
            return Found(await self.get_pull_request(pull_request_number))
        except RequestFailed as exc:
            if _is_not_found(exc):
                return NotFound(f"The pull request '{pull_request_number}' does not exist.")
            return LookupFailed(f"Failed to get the pull request '{pull_request_number}'.", error=exc)

    @handle_github_422
    @retry_on_rate_limit()
    async def update_pull_request(self, pull_request_number: int, update: PullRequestUpdate) -> PullRequestRecord:
        """Write the fields set on the update to a pull request.

        Labels, assignees, and the milestone of a pull request are written
        through the issues API, the remaining fields through the pulls API.
        """
        data = update.to_request_data()
        pull_request_fields = {key: data[key] for key in PULL_REQUEST_FIELDS if key in data}
        issue_fields = {key: data[key] for key in ISSUE_FIELDS_OF_PULL_REQUEST if key in data}
        if pull_request_fields:
            await self.client.rest.pulls.async_update(
                owner=self.owner,
                repo=self.repo_name,
                pull_number=pull_request_number,
                **pull_request_fields,
            )
        if issue_fields:
            await self.client.rest.issues.async_update(
                owner=self.owner,
                repo=self.repo_name,
                issue_number=pull_request_number,
                **issue_fields,
            )
        logger.debug("Updated pull request", pull_request_number=pull_request_number, fields=sorted(data))
        return await self.get_pull_request(pull_request_number)

    @handle_github_422
    @retry_on_rate_limit()
    async def request_reviewers(self, pull_request_number: int, reviewers: list[str]) -> None:
        """Request reviews of a pull request."""
        await self.client.rest.pulls.async_request_reviewers(
            owner=self.owner,
            repo=self.repo_name,
            pull_number=pull_request_number,
            reviewers=reviewers,
        )

    # Organizational projects
    @retry_on_rate_limit()
    async def _list_projects(self, number: int) -> list[ProjectRecord]:
        data: dict[str, Any] = await self.client.async_graphql(
            PROJECTS_QUERY,
            variables={"owner": self.owner, "repo": self.repo_name, "number": number},
        )
        item = (data.get("repository") or {}).get("issueOrPullRequest") or {}
        nodes = (item.get("projectsV2") or {}).get("nodes") or []
        return [
            ProjectRecord(id=node["id"], number=node.get("number"), title=node["title"])
            for node in nodes
            if node and (node.get("owner") or {}).get("__typename") == ORGANIZATION_OWNER_TYPENAME
        ]

    async def list_issue_projects(self, issue_number: int) -> list[ProjectRecord]:
        """List the organizational projects an issue belongs to."""
        return await self._list_projects(issue_number)

    async def list_pull_request_projects(self, pull_request_number: int) -> list[ProjectRecord]:
        """List the organizational projects a pull request belongs to."""
        return await self._list_projects(pull_request_number)

    @retry_on_rate_limit()
    async def add_pull_request_to_project(self, pull_request: PullRequestRecord, project: ProjectRecord) -> None:
        """Add a pull request to an organizational project."""
        if not project.id or not pull_request.node_id:
            raise ValueError(f"Cannot add pull request '{pull_request.number}' to project '{project.title}' without node IDs.")
        await self.client.async_graphql(
            ADD_PROJECT_ITEM_MUTATION,
            variables={"projectId": project.id, "contentId": pull_request.node_id},
        )
        logger.info("Added pull request to project", pull_request_number=pull_request.number, project=project.title)

    # Labels and milestones
    @retry_on_rate_limit()
    async def label_exists(self, name: str) -> bool:
        """Check whether a label exists in the repository."""
        try:
            response: Response[Label] = await self.client.rest.issues.async_get_label(owner=self.owner, repo=self.repo_name, name=name)
        except RequestFailed as exc:
            if _is_not_found(exc):
                return False
            raise
        return response.parsed_data is not None

    @retry_on_rate_limit()
    async def find_milestone(self, title: str, per_page: int = 100) -> MilestoneRecord | None:
        """Find a milestone of the repository by its exact title, handling pagination."""
        page: int = 1
        while True:
            response: Response[list[Milestone]] = await self.client.rest.issues.async_list_milestones(
                owner=self.owner,
                repo=self.repo_name,
                state="all",
                per_page=per_page,
                page=page,
            )
            milestones: list[Milestone] = response.parsed_data
            for milestone in milestones:
                if milestone.title == title:
                    return MilestoneRecord.model_validate(_dump(milestone))
            if len(milestones) < per_page:
                return None
            page += 1

    @retry_on_rate_limit()
    async def _list_milestone_item_data(self, milestone_number: int, per_page: int = 100) -> list[dict[str, Any]]:
        all_items: list[dict[str, Any]] = []
        page: int = 1
        while True:
            response: Response[list[Issue]] = await self.client.rest.issues.async_list_for_repo(
                owner=self.owner,
                repo=self.repo_name,
                milestone=str(milestone_number),
                state="all",
                per_page=per_page,
                page=page,
            )
            items: list[Issue] = response.parsed_data
            all_items.extend(_dump(item) for item in items)
            if len(items) < per_page:
                break
            page += 1
        return all_items

    async def list_milestone_items(self, milestone_number: int) -> tuple[list[IssueRecord], list[PullRequestRecord]]:
        """List every issue and every pull request of a milestone in one pass, handling pagination.

        The issues endpoint returns both kinds of item; pull requests carry a ``pull_request`` key.
        """
        items = await self._list_milestone_item_data(milestone_number)
        issues = [IssueRecord.model_validate(item) for item in items if not item.get("pull_request")]
        pull_requests = [PullRequestRecord.model_validate(item) for item in items if item.get("pull_request")]
        logger.debug("Listed milestone items", milestone_number=milestone_number, issues=len(issues), pull_requests=len(pull_requests))
        return issues, pull_requests

    # Repository content
    @retry_on_rate_limit()
    async def get_file_content(self, repo: str, path: str, ref: str) -> str:
        """Get the text content of a file from any repository in 'owner/repo' format."""
        owner, repo_name = split_repository(repo)
        response: Response[ContentFile] = await self.client.rest.repos.async_get_content(owner=owner, repo=repo_name, path=path, ref=ref)
        return base64.b64decode(response.parsed_data.content).decode("utf-8")
