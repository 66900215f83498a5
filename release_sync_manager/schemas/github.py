"""Pydantic schemas for the GitHub records consumed by the synchronization and release notes logic."""

from typing import Any, Literal

from pydantic import BaseModel, field_validator


class LabelRecord(BaseModel):
    """Pydantic model for a GitHub label."""

    name: str
    description: str | None = None


class UserRecord(BaseModel):
    """Pydantic model for a GitHub user."""

    login: str


class MilestoneRecord(BaseModel):
    """Pydantic model for a GitHub milestone."""

    number: int
    title: str
    state: str | None = None


class BranchRef(BaseModel):
    """Pydantic model for the head or base reference of a pull request."""

    ref: str


class IssueTypeRecord(BaseModel):
    """Pydantic model for the type of a GitHub issue."""

    name: str


class ProjectRecord(BaseModel):
    """Pydantic model for an organizational project (Projects V2)."""

    id: str | None = None
    number: int | None = None
    title: str


class IssueRecord(BaseModel):
    """Pydantic model for a GitHub issue."""

    number: int
    title: str
    body: str | None = None
    labels: list[LabelRecord] = []
    assignees: list[UserRecord] = []
    milestone: MilestoneRecord | None = None
    state: str = "open"
    html_url: str = ""
    type: IssueTypeRecord | None = None

    @field_validator("labels", mode="before")
    @classmethod
    def normalize_labels(cls, value: Any) -> Any:
        """Accept labels given as bare strings in addition to label objects."""
        if value is None:
            return []
        return [{"name": label} if isinstance(label, str) else label for label in value]

    @field_validator("assignees", mode="before")
    @classmethod
    def normalize_assignees(cls, value: Any) -> Any:
        """Treat a missing assignee list as empty."""
        if value is None:
            return []
        return value

    @property
    def label_names(self) -> set[str]:
        """Names of all labels attached to the issue."""
        return {label.name for label in self.labels}

    @property
    def assignee_logins(self) -> set[str]:
        """Logins of all users assigned to the issue."""
        return {assignee.login for assignee in self.assignees}


class PullRequestRecord(IssueRecord):
    """Pydantic model for a GitHub pull request.

    Pull requests listed through a milestone come back in issue shape, which
    is why the branch references are optional.
    """

    head: BranchRef | None = None
    base: BranchRef | None = None
    requested_reviewers: list[UserRecord] = []
    node_id: str | None = None

    @field_validator("requested_reviewers", mode="before")
    @classmethod
    def normalize_requested_reviewers(cls, value: Any) -> Any:
        """Treat a missing reviewer list as empty."""
        if value is None:
            return []
        return value

    @property
    def head_ref(self) -> str:
        """Name of the head branch, or an empty string when unknown."""
        return self.head.ref if self.head is not None else ""

    @property
    def base_ref(self) -> str:
        """Name of the base branch, or an empty string when unknown."""
        return self.base.ref if self.base is not None else ""

    @property
    def requested_reviewer_logins(self) -> set[str]:
        """Logins of all users requested to review the pull request."""
        return {reviewer.login for reviewer in self.requested_reviewers}


class IssueUpdate(BaseModel):
    """Partial update payload for an issue.

    Only fields that were explicitly set are sent to GitHub, so
    ``milestone=None`` clears the milestone while leaving it unset keeps it.
    """

    title: str | None = None
    body: str | None = None
    state: Literal["open", "closed"] | None = None
    labels: list[str] | None = None
    assignees: list[str] | None = None
    milestone: int | None = None

    def to_request_data(self) -> dict[str, Any]:
        """Return only the fields that should be written."""
        return self.model_dump(exclude_unset=True)


class PullRequestUpdate(IssueUpdate):
    """Partial update payload for a pull request."""
