"""Unit tests for the GitHubKitAdapter class and related GitHub operations."""

import base64
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from githubkit.exception import RequestFailed

from release_sync_manager.github.adapter import GitHubKitAdapter
from release_sync_manager.github.results import Found, LookupFailed, NotFound
from release_sync_manager.schemas.github import ProjectRecord, PullRequestRecord, PullRequestUpdate

PULL_REQUEST_DATA: dict[str, Any] = {
    "number": 7,
    "title": "Add export",
    "body": "Body",
    "state": "open",
    "labels": [{"name": "enhancement"}],
    "assignees": [{"login": "alice"}],
    "head": {"ref": "feature/42-add-export", "sha": "abc123"},
    "base": {"ref": "main", "sha": "def456"},
    "requested_reviewers": [{"login": "reviewer"}],
    "node_id": "PR_7",
}


class DummyResponse:
    """A dummy response object to mock GitHub API responses."""

    def __init__(self, data: Any = None, status_code: int = 200) -> None:
        """Initialize the dummy response with parsed data that dumps to the given value."""
        self.status_code: int = status_code
        self.parsed_data = self._model(data) if not isinstance(data, list) else [self._model(item) for item in data]

    @staticmethod
    def _model(data: Any) -> MagicMock:
        model = MagicMock()
        model.model_dump.return_value = data
        if isinstance(data, dict):
            for key, value in data.items():
                setattr(model, key, value)
        return model


def request_failed(status_code: int, json_data: dict[str, Any] | None = None) -> RequestFailed:
    """Build a RequestFailed error with the given status code."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = {}
    response.json.return_value = json_data or {}
    return RequestFailed(response)


@pytest.mark.asyncio
async def test_find_issue_found() -> None:
    """Test that an existing issue is returned."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.rest.issues.async_get = AsyncMock(return_value=DummyResponse({"number": 42, "title": "Add export", "labels": ["bug"]}))
    result = await adapter.find_issue(42)
    assert isinstance(result, Found)
    assert result.value.number == 42
    assert result.value.label_names == {"bug"}
    adapter.client.rest.issues.async_get.assert_awaited_once_with(owner="owner", repo="repo", issue_number=42)


@pytest.mark.asyncio
async def test_find_issue_rejects_pull_request() -> None:
    """Test that a pull request number is not accepted as an issue."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    data = {"number": 7, "title": "A PR", "pull_request": {"url": "https://api.github.com/repos/owner/repo/pulls/7"}}
    adapter.client.rest.issues.async_get = AsyncMock(return_value=DummyResponse(data))
    result = await adapter.find_issue(7)
    assert result == NotFound("The number '7' belongs to a pull request, not an issue.")


@pytest.mark.asyncio
async def test_find_issue_not_found_and_failed() -> None:
    """Test that missing issues and failed requests are told apart."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.rest.issues.async_get = AsyncMock(side_effect=request_failed(404))
    assert isinstance(await adapter.find_issue(42), NotFound)

    adapter.client.rest.issues.async_get = AsyncMock(side_effect=request_failed(500))
    result = await adapter.find_issue(42)
    assert isinstance(result, LookupFailed)
    assert isinstance(result.error, RequestFailed)


@pytest.mark.asyncio
async def test_find_pull_request() -> None:
    """Test pull request lookup and parsing of its branch references."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.rest.pulls.async_get = AsyncMock(return_value=DummyResponse(PULL_REQUEST_DATA))
    result = await adapter.find_pull_request(7)
    assert isinstance(result, Found)
    assert result.value.head_ref == "feature/42-add-export"
    assert result.value.base_ref == "main"
    assert result.value.requested_reviewer_logins == {"reviewer"}

    adapter.client.rest.pulls.async_get = AsyncMock(side_effect=request_failed(404))
    assert await adapter.find_pull_request(7) == NotFound("The pull request '7' does not exist.")


@pytest.mark.asyncio
async def test_update_pull_request_splits_fields_between_apis() -> None:
    """Test that issue-level fields go through the issues API and the rest through the pulls API."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.rest.pulls.async_update = AsyncMock()
    adapter.client.rest.issues.async_update = AsyncMock()
    adapter.client.rest.pulls.async_get = AsyncMock(return_value=DummyResponse(PULL_REQUEST_DATA))

    update = PullRequestUpdate(title="Add export", body="Body", labels=["enhancement"], milestone=None)
    result = await adapter.update_pull_request(7, update)

    adapter.client.rest.pulls.async_update.assert_awaited_once_with(owner="owner", repo="repo", pull_number=7, title="Add export", body="Body")
    adapter.client.rest.issues.async_update.assert_awaited_once_with(
        owner="owner", repo="repo", issue_number=7, labels=["enhancement"], milestone=None
    )
    assert result.number == 7


@pytest.mark.asyncio
async def test_update_pull_request_body_only_skips_issues_api() -> None:
    """Test that a body-only update does not touch the issues API."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.rest.pulls.async_update = AsyncMock()
    adapter.client.rest.issues.async_update = AsyncMock()
    adapter.client.rest.pulls.async_get = AsyncMock(return_value=DummyResponse(PULL_REQUEST_DATA))

    await adapter.update_pull_request(7, PullRequestUpdate(body="New body"))

    adapter.client.rest.pulls.async_update.assert_awaited_once()
    adapter.client.rest.issues.async_update.assert_not_awaited()


@pytest.mark.asyncio
async def test_request_reviewers_422_raises_value_error() -> None:
    """Test that a 422 response is converted to a ValueError with details."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    error = request_failed(422, {"message": "Reviews may only be requested from collaborators.", "errors": []})
    adapter.client.rest.pulls.async_request_reviewers = AsyncMock(side_effect=error)
    with pytest.raises(ValueError, match="Reviews may only be requested from collaborators."):
        await adapter.request_reviewers(7, ["outsider"])


@pytest.mark.asyncio
async def test_list_projects_keeps_organization_projects() -> None:
    """Test that only projects owned by an organization are returned."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.async_graphql = AsyncMock(
        return_value={
            "repository": {
                "issueOrPullRequest": {
                    "projectsV2": {
                        "nodes": [
                            {"id": "PVT_1", "number": 1, "title": "Roadmap", "owner": {"__typename": "Organization"}},
                            {"id": "PVT_2", "number": 2, "title": "Personal", "owner": {"__typename": "User"}},
                            None,
                        ]
                    }
                }
            }
        }
    )
    projects = await adapter.list_issue_projects(42)
    assert projects == [ProjectRecord(id="PVT_1", number=1, title="Roadmap")]
    assert adapter.client.async_graphql.await_args.kwargs["variables"] == {"owner": "owner", "repo": "repo", "number": 42}


@pytest.mark.asyncio
async def test_list_projects_handles_missing_item() -> None:
    """Test that a number unknown to GraphQL has no projects."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.async_graphql = AsyncMock(return_value={"repository": {"issueOrPullRequest": None}})
    assert await adapter.list_pull_request_projects(7) == []


@pytest.mark.asyncio
async def test_add_pull_request_to_project() -> None:
    """Test adding a pull request to a project, which needs both node IDs."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.async_graphql = AsyncMock(return_value={})
    pr = PullRequestRecord.model_validate(PULL_REQUEST_DATA)
    await adapter.add_pull_request_to_project(pr, ProjectRecord(id="PVT_1", title="Roadmap"))
    assert adapter.client.async_graphql.await_args.kwargs["variables"] == {"projectId": "PVT_1", "contentId": "PR_7"}

    with pytest.raises(ValueError):
        await adapter.add_pull_request_to_project(pr, ProjectRecord(title="Roadmap"))


@pytest.mark.asyncio
async def test_label_exists() -> None:
    """Test that a 404 means the label does not exist and other errors propagate."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.rest.issues.async_get_label = AsyncMock(return_value=DummyResponse({"name": "bug"}))
    assert await adapter.label_exists("bug") is True

    adapter.client.rest.issues.async_get_label = AsyncMock(side_effect=request_failed(404))
    assert await adapter.label_exists("missing") is False

    adapter.client.rest.issues.async_get_label = AsyncMock(side_effect=request_failed(500))
    with pytest.raises(RequestFailed):
        await adapter.label_exists("bug")


@pytest.mark.asyncio
async def test_find_milestone_paginates() -> None:
    """Test that milestones are searched page by page by exact title."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    first_page = DummyResponse([{"number": 1, "title": "v1.0.0"}, {"number": 2, "title": "v1.1.0"}])
    second_page = DummyResponse([{"number": 3, "title": "v1.2.0"}])
    adapter.client.rest.issues.async_list_milestones = AsyncMock(side_effect=[first_page, second_page])

    milestone = await adapter.find_milestone("v1.2.0", per_page=2)

    assert milestone is not None
    assert milestone.number == 3
    assert adapter.client.rest.issues.async_list_milestones.await_count == 2


@pytest.mark.asyncio
async def test_find_milestone_missing() -> None:
    """Test that an unknown milestone title returns None."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    adapter.client.rest.issues.async_list_milestones = AsyncMock(return_value=DummyResponse([{"number": 1, "title": "v1.0.0"}]))
    assert await adapter.find_milestone("v9.9.9") is None


@pytest.mark.asyncio
async def test_list_milestone_items_split_issues_and_pull_requests() -> None:
    """Test that one pass over the milestone is split into issues and pull requests on the pull_request key."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    items = [
        {"number": 1, "title": "An issue", "html_url": "https://github.com/owner/repo/issues/1"},
        {"number": 2, "title": "A PR", "pull_request": {"url": "x"}, "html_url": "https://github.com/owner/repo/pull/2"},
    ]
    adapter.client.rest.issues.async_list_for_repo = AsyncMock(return_value=DummyResponse(items))

    issues, prs = await adapter.list_milestone_items(4)

    assert [issue.number for issue in issues] == [1]
    assert [pr.number for pr in prs] == [2]
    assert adapter.client.rest.issues.async_list_for_repo.await_args.kwargs["milestone"] == "4"
    assert adapter.client.rest.issues.async_list_for_repo.await_args.kwargs["state"] == "all"
    adapter.client.rest.issues.async_list_for_repo.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_file_content_decodes_base64() -> None:
    """Test that file content from another repository is decoded."""
    adapter = GitHubKitAdapter(MagicMock(), "owner", "repo")
    encoded = base64.b64encode("✅ Template".encode("utf-8")).decode("ascii")
    adapter.client.rest.repos.async_get_content = AsyncMock(return_value=DummyResponse({"content": encoded}))

    content = await adapter.get_file_content("org/templates", ".github/pr-sync-template.md", "main")

    assert content == "✅ Template"
    adapter.client.rest.repos.async_get_content.assert_awaited_once_with(
        owner="org", repo="templates", path=".github/pr-sync-template.md", ref="main"
    )
