"""Data models describing the sync status between a pull request and its issue."""

from enum import Enum

from pydantic import BaseModel


class SyncState(str, Enum):
    """Lifecycle state of the sync checklist embedded in a pull request description."""

    NO_TEMPLATE = "no-template"
    TEMPLATE_APPLIED = "template-applied"
    IN_SYNC = "in-sync"
    OUT_OF_SYNC = "out-of-sync"
    SYNC_DISABLED = "sync-disabled"


class SyncSettings(BaseModel):
    """Result of comparing a pull request against the issue it closes.

    Every flag defaults to True so that a partial settings object only
    affects the aspects it explicitly names.
    """

    issue_number: int | None = None
    head_branch_valid: bool = True
    base_branch_valid: bool = True
    issue_number_valid: bool = True
    title_in_sync: bool = True
    default_reviewer_valid: bool = True
    assignees_in_sync: bool = True
    labels_in_sync: bool = True
    projects_in_sync: bool = True
    milestone_in_sync: bool = True

    def flags(self) -> dict[str, bool]:
        """Return every boolean flag keyed by field name."""
        return {name: value for name, value in self.model_dump().items() if isinstance(value, bool)}

    @property
    def all_in_sync(self) -> bool:
        """Whether every aspect of the pull request is valid and in sync."""
        return all(self.flags().values())

    @property
    def failing_flags(self) -> list[str]:
        """Names of the flags that are false, in declaration order."""
        return [name for name, value in self.flags().items() if not value]
