"""Reads and writes the pull request back-link embedded in an issue body.

The back-link is an HTML comment such as ``<!--closed-by-pr:42-->`` naming the
pull request that closes the issue.
"""

import re

from release_sync_manager.synchronize.exceptions import PullRequestMetadataError

CLOSED_BY_PR_PATTERN = r"<!--\s*closed-by-pr:\s*(\d+)\s*-->"
# Matches anything that looks like a back-link, including malformed ones.
LOOSE_CLOSED_BY_PR_PATTERN = r"<!--\s*closed-by-pr\b.*?-->"


def _closed_by_pr_markers(body: str) -> list[str]:
    return re.findall(LOOSE_CLOSED_BY_PR_PATTERN, body)


def parse_closed_by_pr_metadata(body: str | None) -> int | None:
    """Return the pull request number embedded in an issue body.

    Args:
        body (str | None): The issue body.

    Returns:
        int | None: The pull request number, or None when the body has no back-link.

    Raises:
        PullRequestMetadataError: If the body has more than one back-link or the back-link is malformed.
    """
    if not body:
        return None
    markers = _closed_by_pr_markers(body)
    if not markers:
        return None
    if len(markers) > 1:
        raise PullRequestMetadataError(f"Found {len(markers)} closed-by-pr markers in the issue body, expected at most one.", body=body)
    match = re.fullmatch(CLOSED_BY_PR_PATTERN, markers[0])
    if match is None or int(match.group(1)) < 1:
        raise PullRequestMetadataError(f"Malformed closed-by-pr marker '{markers[0]}' in the issue body.", body=body)
    return int(match.group(1))


def upsert_closed_by_pr_metadata(body: str | None, pr_number: int) -> str:
    """Add or replace the pull request back-link in an issue body.

    The marker is appended after a blank line when the body has none and
    replaced in place when it has exactly one.

    Raises:
        PullRequestMetadataError: If the pull request number is not positive or the body has more than one back-link.
    """
    if pr_number < 1:
        raise PullRequestMetadataError(f"The pull request number must be greater than 0, got {pr_number}.")
    marker = f"<!--closed-by-pr:{pr_number}-->"
    body = body or ""
    markers = _closed_by_pr_markers(body)
    if len(markers) > 1:
        raise PullRequestMetadataError(f"Found {len(markers)} closed-by-pr markers in the issue body, expected at most one.", body=body)
    if markers:
        return re.sub(LOOSE_CLOSED_BY_PR_PATTERN, lambda _: marker, body, count=1)
    if not body:
        return marker
    return f"{body}\n\n{marker}"
