"""General utility functions for feature branch names."""

from release_sync_manager.utils.constants import FEATURE_BRANCH_PATTERN


def is_feature_branch(branch: str) -> bool:
    """Return whether a branch name follows the 'feature/<issue>-<description>' convention."""
    return FEATURE_BRANCH_PATTERN.match(branch) is not None


def issue_number_from_feature_branch(branch: str) -> int | None:
    """Extract the issue number embedded in a feature branch name.

    Returns None when the branch is not a feature branch.
    """
    match = FEATURE_BRANCH_PATTERN.match(branch)
    if match is None:
        return None
    return int(match.group("issue_number"))
