"""Orchestrates the synchronization of pull requests with the issues they close."""

import structlog
from structlog.contextvars import bound_contextvars

from release_sync_manager.configuration.models import EventType, SyncConfig
from release_sync_manager.github.abc import GitHubClientBase
from release_sync_manager.github.results import Found, LookupFailed, LookupResult
from release_sync_manager.schemas.github import IssueRecord, IssueUpdate, ProjectRecord, PullRequestRecord, PullRequestUpdate, UserRecord
from release_sync_manager.synchronize.exceptions import PullRequestMetadataError, SyncLookupError
from release_sync_manager.synchronize.metadata import parse_closed_by_pr_metadata, upsert_closed_by_pr_metadata
from release_sync_manager.synchronize.reconcile import run_as_status_check, run_as_sync_bot
from release_sync_manager.synchronize.results import SyncWorkflowResult
from release_sync_manager.synchronize.template import render_default_sync_template, syncing_disabled
from release_sync_manager.utils.helpers import issue_number_from_feature_branch

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class SyncDataCache:
    """Memoizes issue, pull request, and project lookups for a single sync run."""

    def __init__(self, adapter: GitHubClientBase) -> None:
        """Initialize an empty cache in front of the adapter."""
        self.adapter = adapter
        self._issues: dict[int, LookupResult[IssueRecord]] = {}
        self._pull_requests: dict[int, LookupResult[PullRequestRecord]] = {}
        self._issue_projects: dict[int, list[ProjectRecord]] = {}
        self._pull_request_projects: dict[int, list[ProjectRecord]] = {}

    async def find_issue(self, issue_number: int) -> LookupResult[IssueRecord]:
        """Look up an issue once per run."""
        if issue_number not in self._issues:
            self._issues[issue_number] = await self.adapter.find_issue(issue_number)
        return self._issues[issue_number]

    async def find_pull_request(self, pull_request_number: int) -> LookupResult[PullRequestRecord]:
        """Look up a pull request once per run."""
        if pull_request_number not in self._pull_requests:
            self._pull_requests[pull_request_number] = await self.adapter.find_pull_request(pull_request_number)
        return self._pull_requests[pull_request_number]

    async def issue_projects(self, issue_number: int) -> list[ProjectRecord]:
        """List the organizational projects of an issue once per run."""
        if issue_number not in self._issue_projects:
            self._issue_projects[issue_number] = await self.adapter.list_issue_projects(issue_number)
        return self._issue_projects[issue_number]

    async def pull_request_projects(self, pull_request_number: int) -> list[ProjectRecord]:
        """List the organizational projects of a pull request once per run."""
        if pull_request_number not in self._pull_request_projects:
            self._pull_request_projects[pull_request_number] = await self.adapter.list_pull_request_projects(pull_request_number)
        return self._pull_request_projects[pull_request_number]


async def _find_issue(cache: SyncDataCache, issue_number: int) -> tuple[IssueRecord | None, str | None]:
    """Return the issue, or None with the reason it was not found."""
    result = await cache.find_issue(issue_number)
    if isinstance(result, Found):
        return result.value, None
    if isinstance(result, LookupFailed):
        raise SyncLookupError(result.reason) from result.error
    return None, result.reason


async def _find_pull_request(cache: SyncDataCache, pull_request_number: int) -> tuple[PullRequestRecord | None, str | None]:
    """Return the pull request, or None with the reason it was not found."""
    result = await cache.find_pull_request(pull_request_number)
    if isinstance(result, Found):
        return result.value, None
    if isinstance(result, LookupFailed):
        raise SyncLookupError(result.reason) from result.error
    return None, result.reason


async def _resolved_records(cache: SyncDataCache, issue_number: int, pull_request_number: int) -> tuple[IssueRecord, PullRequestRecord]:
    """Return the issue and pull request a resolution named, both already looked up by the cache."""
    issue, issue_reason = await _find_issue(cache, issue_number)
    pr, pr_reason = await _find_pull_request(cache, pull_request_number)
    if issue is None or pr is None:
        raise SyncLookupError(issue_reason or pr_reason or "The issue or pull request disappeared during the sync run.")
    return issue, pr


async def resolve_issue_and_pull_request_numbers(
    adapter: GitHubClientBase,
    number: int,
    event_type: EventType,
    cache: SyncDataCache | None = None,
) -> SyncWorkflowResult:
    """Resolve the issue and pull request a sync run is about.

    For issue events the pull request number comes from the issue's
    closed-by-pr metadata. For pull request events the issue number comes
    from the pull request's feature branch.

    Args:
        adapter (GitHubClientBase): The GitHub adapter.
        number (int): The number of the issue or pull request that triggered the run.
        event_type (EventType): Whether the run was triggered by an issue or a pull request.
        cache (SyncDataCache | None): The lookup cache of the run.

    Returns:
        SyncWorkflowResult: Both numbers, or a skipped result naming why they could not be resolved.

    Raises:
        SyncLookupError: If GitHub could not be queried.
    """
    cache = cache or SyncDataCache(adapter)

    if event_type == EventType.ISSUE:
        issue, reason = await _find_issue(cache, number)
        if issue is None:
            return SyncWorkflowResult(issue_number=number, skipped_reason=reason)
        try:
            pull_request_number = parse_closed_by_pr_metadata(issue.body)
        except PullRequestMetadataError as exc:
            return SyncWorkflowResult(issue_number=number, skipped_reason=str(exc))
        if pull_request_number is None:
            return SyncWorkflowResult(issue_number=number, skipped_reason=f"The issue '{number}' is not linked to a pull request.")
        pr, reason = await _find_pull_request(cache, pull_request_number)
        if pr is None:
            return SyncWorkflowResult(issue_number=number, pull_request_number=pull_request_number, skipped_reason=reason)
        return SyncWorkflowResult(issue_number=number, pull_request_number=pull_request_number)

    pr, reason = await _find_pull_request(cache, number)
    if pr is None:
        return SyncWorkflowResult(pull_request_number=number, skipped_reason=reason)
    issue_number = issue_number_from_feature_branch(pr.head_ref)
    if issue_number is None or issue_number < 1:
        return SyncWorkflowResult(
            pull_request_number=number,
            skipped_reason=f"The head branch '{pr.head_ref}' of pull request '{number}' is not a feature branch.",
        )
    issue, reason = await _find_issue(cache, issue_number)
    if issue is None:
        return SyncWorkflowResult(issue_number=issue_number, pull_request_number=number, skipped_reason=reason)
    return SyncWorkflowResult(issue_number=issue_number, pull_request_number=number)


def _log_notices(notices: list[str]) -> None:
    for notice in notices:
        logger.debug("Sync template notice", notice=notice)


async def run_sync_status_workflow(
    adapter: GitHubClientBase,
    number: int,
    event_type: EventType,
    config: SyncConfig,
) -> SyncWorkflowResult:
    """Run the sync bot for issue events or the status check for pull request events."""
    cache = SyncDataCache(adapter)
    resolution = await resolve_issue_and_pull_request_numbers(adapter, number, event_type, cache)
    if resolution.skipped or resolution.issue_number is None or resolution.pull_request_number is None:
        logger.info("Skipping sync", number=number, event_type=event_type.value, reason=resolution.skipped_reason)
        return resolution

    issue, pr = await _resolved_records(cache, resolution.issue_number, resolution.pull_request_number)

    with bound_contextvars(issue_number=issue.number, pull_request_number=pr.number):
        if syncing_disabled(pr.body or ""):
            logger.info("Syncing is disabled in the pull request description")
            return SyncWorkflowResult(
                issue_number=issue.number,
                pull_request_number=pr.number,
                skipped_reason=f"Syncing is disabled for pull request '{pr.number}'.",
            )

        issue_projects = await cache.issue_projects(issue.number)
        pr_projects = await cache.pull_request_projects(pr.number)

        if event_type == EventType.ISSUE:
            bot_result = run_as_sync_bot(issue, pr, issue_projects, pr_projects, config)
            _log_notices(bot_result.notices)
            await adapter.update_pull_request(pr.number, bot_result.update)
            logger.info("Synced pull request with issue", state=bot_result.state.value)
            return SyncWorkflowResult(
                issue_number=issue.number,
                pull_request_number=pr.number,
                notices=bot_result.notices,
                state=bot_result.state,
            )

        check_result = run_as_status_check(issue, pr, issue_projects, pr_projects, config)
        _log_notices(check_result.notices)
        if check_result.body != (pr.body or "").replace("\r\n", "\n").replace("\r", "\n"):
            await adapter.update_pull_request(pr.number, PullRequestUpdate(body=check_result.body))
        for problem in check_result.problems:
            logger.warning("Pull request is out of sync", problem=problem)
        logger.info("Checked pull request sync status", state=check_result.state.value, success=check_result.success)
        return SyncWorkflowResult(
            issue_number=issue.number,
            pull_request_number=pr.number,
            problems=check_result.problems,
            notices=check_result.notices,
            state=check_result.state,
        )


async def load_sync_template(adapter: GitHubClientBase, config: SyncConfig) -> str:
    """Load the sync template from the template repository, or render the bundled one."""
    if config.template_repo:
        logger.info(
            "Loading sync template",
            template_repo=config.template_repo,
            template_branch=config.template_branch,
            template_path=config.template_path,
        )
        return await adapter.get_file_content(config.template_repo, config.template_path, config.template_branch)
    return render_default_sync_template(config.allowed_base_branches)


async def run_sync_pr_to_issue_workflow(adapter: GitHubClientBase, number: int, config: SyncConfig) -> SyncWorkflowResult:
    """Run the initial sync of a newly opened pull request with the issue named by its feature branch.

    The pull request is added to the organizational projects of the issue,
    the issue gets a closed-by-pr back-link, the default reviewer is
    requested, and the sync template is applied to the pull request.
    """
    cache = SyncDataCache(adapter)
    resolution = await resolve_issue_and_pull_request_numbers(adapter, number, EventType.PULL_REQUEST, cache)
    if resolution.skipped or resolution.issue_number is None:
        logger.info("Skipping initial sync", pull_request_number=number, reason=resolution.skipped_reason)
        return resolution

    issue, pr = await _resolved_records(cache, resolution.issue_number, number)
    notices: list[str] = []

    with bound_contextvars(issue_number=issue.number, pull_request_number=pr.number):
        if syncing_disabled(pr.body or ""):
            logger.info("Syncing is disabled in the pull request description")
            return SyncWorkflowResult(
                issue_number=issue.number,
                pull_request_number=pr.number,
                skipped_reason=f"Syncing is disabled for pull request '{pr.number}'.",
            )

        # Must run before any write to GitHub.
        try:
            issue_body = upsert_closed_by_pr_metadata(issue.body, pr.number)
        except PullRequestMetadataError as exc:
            logger.warning("Cannot link the issue to the pull request", error=str(exc))
            return SyncWorkflowResult(issue_number=issue.number, pull_request_number=pr.number, skipped_reason=str(exc))

        issue_projects = await cache.issue_projects(issue.number)
        pr_projects = list(await cache.pull_request_projects(pr.number))
        pr_project_titles = {project.title for project in pr_projects}
        for project in issue_projects:
            if project.title not in pr_project_titles:
                await adapter.add_pull_request_to_project(pr, project)
                pr_projects.append(project)
                notices.append(f"Added the pull request to the project '{project.title}'.")

        if issue_body != (issue.body or ""):
            await adapter.update_issue(issue.number, IssueUpdate(body=issue_body))
            notices.append(f"Linked the issue to pull request '{pr.number}'.")

        if config.default_reviewer not in pr.requested_reviewer_logins:
            try:
                await adapter.request_reviewers(pr.number, [config.default_reviewer])
            except ValueError as exc:
                logger.warning("Could not request the default reviewer", reviewer=config.default_reviewer, error=str(exc))
                notices.append(f"Could not request a review from '{config.default_reviewer}'.")
            else:
                pr = pr.model_copy(update={"requested_reviewers": [*pr.requested_reviewers, UserRecord(login=config.default_reviewer)]})
                notices.append(f"Requested a review from '{config.default_reviewer}'.")

        template = await load_sync_template(adapter, config)
        bot_result = run_as_sync_bot(issue, pr, issue_projects, pr_projects, config, template=template)
        notices.extend(bot_result.notices)
        _log_notices(notices)
        await adapter.update_pull_request(pr.number, bot_result.update)
        logger.info("Applied the sync template to the pull request", state=bot_result.state.value)
        return SyncWorkflowResult(
            issue_number=issue.number,
            pull_request_number=pr.number,
            notices=notices,
            state=bot_result.state,
        )
