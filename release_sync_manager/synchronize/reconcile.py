"""Compares a pull request against the issue it closes and computes the changes needed to sync them.

The issue is the source of truth. Nothing in this module talks to GitHub: the
callers fetch the records and write the returned updates.
"""

import structlog

from release_sync_manager.configuration.models import SyncConfig
from release_sync_manager.schemas.github import IssueRecord, ProjectRecord, PullRequestRecord, PullRequestUpdate
from release_sync_manager.synchronize.models import SyncSettings
from release_sync_manager.synchronize.results import StatusCheckResult, SyncBotResult
from release_sync_manager.synchronize.template import (
    determine_sync_state,
    process_sync_template,
    update_head_branch_var,
    update_issue_var,
)
from release_sync_manager.utils.helpers import is_feature_branch, issue_number_from_feature_branch

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def is_head_branch_valid(pr: PullRequestRecord) -> bool:
    """The head branch follows the feature branch convention."""
    return is_feature_branch(pr.head_ref)


def is_base_branch_valid(pr: PullRequestRecord, allowed_base_branches: list[str]) -> bool:
    """The base branch is one of the allowed base branches."""
    return pr.base_ref in allowed_base_branches


def is_issue_number_valid(issue: IssueRecord, pr: PullRequestRecord) -> bool:
    """The issue number embedded in the head branch is the number of the issue."""
    branch_issue_number = issue_number_from_feature_branch(pr.head_ref)
    return branch_issue_number is not None and branch_issue_number >= 1 and branch_issue_number == issue.number


def is_title_in_sync(issue: IssueRecord, pr: PullRequestRecord) -> bool:
    """The titles are equal once surrounding whitespace is removed."""
    return issue.title.strip() == pr.title.strip()


def is_default_reviewer_valid(pr: PullRequestRecord, default_reviewer: str) -> bool:
    """The default reviewer has been requested to review the pull request."""
    return default_reviewer in pr.requested_reviewer_logins


def are_assignees_in_sync(issue: IssueRecord, pr: PullRequestRecord) -> bool:
    """Both have the same set of assignees."""
    return issue.assignee_logins == pr.assignee_logins


def are_labels_in_sync(issue: IssueRecord, pr: PullRequestRecord) -> bool:
    """Both have the same set of labels."""
    return issue.label_names == pr.label_names


def is_milestone_in_sync(issue: IssueRecord, pr: PullRequestRecord) -> bool:
    """Both have no milestone or the same milestone."""
    if issue.milestone is None or pr.milestone is None:
        return issue.milestone is None and pr.milestone is None
    return issue.milestone.number == pr.milestone.number


def are_projects_in_sync(issue_projects: list[ProjectRecord], pr_projects: list[ProjectRecord]) -> bool:
    """Both belong to the same set of organizational projects."""
    return {project.title for project in issue_projects} == {project.title for project in pr_projects}


def build_sync_settings(
    issue: IssueRecord,
    pr: PullRequestRecord,
    issue_projects: list[ProjectRecord],
    pr_projects: list[ProjectRecord],
    config: SyncConfig,
) -> SyncSettings:
    """Compare every aspect of a pull request against its issue."""
    return SyncSettings(
        issue_number=issue.number,
        head_branch_valid=is_head_branch_valid(pr),
        base_branch_valid=is_base_branch_valid(pr, config.allowed_base_branches),
        issue_number_valid=is_issue_number_valid(issue, pr),
        title_in_sync=is_title_in_sync(issue, pr),
        default_reviewer_valid=is_default_reviewer_valid(pr, config.default_reviewer),
        assignees_in_sync=are_assignees_in_sync(issue, pr),
        labels_in_sync=are_labels_in_sync(issue, pr),
        projects_in_sync=are_projects_in_sync(issue_projects, pr_projects),
        milestone_in_sync=is_milestone_in_sync(issue, pr),
    )


def build_pull_request_update_from_issue(issue: IssueRecord) -> PullRequestUpdate:
    """Build the update that copies the issue's title, labels, assignees, and milestone onto the pull request."""
    return PullRequestUpdate(
        title=issue.title,
        labels=sorted(issue.label_names),
        assignees=sorted(issue.assignee_logins),
        milestone=issue.milestone.number if issue.milestone is not None else None,
    )


def _project_pull_request(issue: IssueRecord, pr: PullRequestRecord) -> PullRequestRecord:
    """Return the pull request as it will look once the issue's fields are copied onto it."""
    return pr.model_copy(
        update={
            "title": issue.title,
            "labels": list(issue.labels),
            "assignees": list(issue.assignees),
            "milestone": issue.milestone,
        }
    )


def run_as_sync_bot(
    issue: IssueRecord,
    pr: PullRequestRecord,
    issue_projects: list[ProjectRecord],
    pr_projects: list[ProjectRecord],
    config: SyncConfig,
    template: str | None = None,
) -> SyncBotResult:
    """Compute the pull request update that brings it in sync with its issue.

    Args:
        issue (IssueRecord): The issue closed by the pull request.
        pr (PullRequestRecord): The pull request to sync.
        issue_projects (list[ProjectRecord]): Organizational projects of the issue.
        pr_projects (list[ProjectRecord]): Organizational projects of the pull request.
        config (SyncConfig): The sync configuration.
        template (str | None): Sync template to apply, or None to refresh the current description.

    Returns:
        SyncBotResult: The full pull request update (fields and description), the settings it reflects, and notices.
    """
    field_update = build_pull_request_update_from_issue(issue)
    projected_pr = _project_pull_request(issue, pr)
    settings = build_sync_settings(issue, projected_pr, issue_projects, pr_projects, config)

    source = template if template is not None else pr.body or ""
    processed = process_sync_template(source, settings)
    body = update_issue_var(processed.content, issue.number)
    if pr.head_ref:
        body = update_head_branch_var(body, pr.head_ref)

    update = PullRequestUpdate(**field_update.to_request_data(), body=body)
    logger.debug(
        "Computed sync bot update",
        issue_number=issue.number,
        pull_request_number=pr.number,
        failing_flags=settings.failing_flags,
    )
    return SyncBotResult(update=update, settings=settings, notices=processed.notices, state=determine_sync_state(body, settings))


def _describe_names(names: set[str]) -> str:
    return ", ".join(sorted(names)) or "none"


def build_problems_list(
    settings: SyncSettings,
    issue: IssueRecord,
    pr: PullRequestRecord,
    issue_projects: list[ProjectRecord],
    pr_projects: list[ProjectRecord],
    config: SyncConfig,
) -> list[str]:
    """Describe every aspect that is not valid or not in sync, with its current and expected values."""
    problems: list[str] = []
    if not settings.head_branch_valid:
        problems.append(f"The head branch '{pr.head_ref}' is not a valid feature branch.")
    if not settings.base_branch_valid:
        problems.append(
            f"The base branch '{pr.base_ref}' is not a valid base branch. Expected one of: {', '.join(config.allowed_base_branches)}."
        )
    if not settings.issue_number_valid:
        problems.append(f"The head branch '{pr.head_ref}' does not contain the issue number '{issue.number}'.")
    if not settings.title_in_sync:
        problems.append(f"The pr title '{pr.title}' does not match with the issue title '{issue.title}'.")
    if not settings.default_reviewer_valid:
        problems.append(
            f"The default reviewer '{config.default_reviewer}' is not a requested reviewer. "
            f"Requested reviewers: {_describe_names(pr.requested_reviewer_logins)}."
        )
    if not settings.assignees_in_sync:
        problems.append(
            f"The pr assignees '{_describe_names(pr.assignee_logins)}' do not match the issue assignees "
            f"'{_describe_names(issue.assignee_logins)}'."
        )
    if not settings.labels_in_sync:
        problems.append(
            f"The pr labels '{_describe_names(pr.label_names)}' do not match the issue labels '{_describe_names(issue.label_names)}'."
        )
    if not settings.milestone_in_sync:
        pr_milestone = pr.milestone.title if pr.milestone is not None else "none"
        issue_milestone = issue.milestone.title if issue.milestone is not None else "none"
        problems.append(f"The pr milestone '{pr_milestone}' does not match the issue milestone '{issue_milestone}'.")
    if not settings.projects_in_sync:
        pr_titles = {project.title for project in pr_projects}
        issue_titles = {project.title for project in issue_projects}
        problems.append(f"The pr projects '{_describe_names(pr_titles)}' do not match the issue projects '{_describe_names(issue_titles)}'.")
    return problems


def run_as_status_check(
    issue: IssueRecord,
    pr: PullRequestRecord,
    issue_projects: list[ProjectRecord],
    pr_projects: list[ProjectRecord],
    config: SyncConfig,
) -> StatusCheckResult:
    """Check whether a pull request is in sync with its issue without changing any of its fields.

    Only the checklist of the existing pull request description is refreshed.
    """
    settings = build_sync_settings(issue, pr, issue_projects, pr_projects, config)
    processed = process_sync_template(pr.body or "", settings)
    problems = build_problems_list(settings, issue, pr, issue_projects, pr_projects, config)
    return StatusCheckResult(
        body=processed.content,
        settings=settings,
        problems=problems,
        notices=processed.notices,
        state=determine_sync_state(processed.content, settings),
    )
