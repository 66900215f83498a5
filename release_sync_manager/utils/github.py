"""Contains utility functions for GitHub interactions."""

import re

REPOSITORY_PATTERN = re.compile(r"^(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+)$")


def split_repository(repo: str | None) -> tuple[str, str]:
    """Split a repository given as 'owner/repo' into its owner and name.

    Surrounding whitespace and slashes are ignored.

    Raises:
        ValueError: If the repository is missing or not in 'owner/repo' format.
    """
    if repo is None:
        raise ValueError("A repository in 'owner/repo' format is required.")
    match = REPOSITORY_PATTERN.match(repo.strip().strip("/"))
    if match is None:
        raise ValueError(f"Repository '{repo}' must be in the format 'owner/repo'.")
    return match.group("owner"), match.group("repo")
