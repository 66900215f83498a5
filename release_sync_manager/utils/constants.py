"""Shared constants used across the application."""

import re

# Pull Request Sync Constants
# ---------------------------

FEATURE_BRANCH_PATTERN = re.compile(r"^feature/(?P<issue_number>[0-9]+)-(?!-)[a-z-]+$")
"""Pattern to match feature branch names (e.g., feature/123-my-feature)."""

DEFAULT_ALLOWED_BASE_BRANCHES = ["main", "preview"]
"""Base branches a pull request may target when none are configured."""

DEFAULT_SYNC_TEMPLATE_PATH = ".github/pr-sync-template.md"
"""Default path of the pull request sync template inside a template repository."""

DEFAULT_SYNC_TEMPLATE_BRANCH = "main"
"""Default branch of the template repository to read the sync template from."""

ORGANIZATION_OWNER_TYPENAME = "Organization"
"""GraphQL type name of organization-owned projects."""

# Release Notes Constants
# -----------------------

RELEASE_NOTES_FILE_NAME_TEMPLATE = "Release-Notes-{version}.md"
"""File name of a generated release notes document."""

RELEASE_NOTES_DIRECTORY_TEMPLATE = "{release_type}-releases"
"""Directory (relative to the configured release notes directory) per release type."""

RELEASE_NOTES_VERSION_PATTERN = re.compile(r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)(-preview\.([1-9]\d*))?$")
"""Pattern a release version must match (e.g., v1.2.3 or v1.2.3-preview.4)."""

SEMANTIC_VERSION_TOKEN_PATTERN = re.compile(
    r"(?<![\w.])v?(?P<version>(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?)(?!\w)(?!\.\w)"
)
"""Pattern to match semantic-version-looking tokens inside a title."""

DEFAULT_OTHER_CATEGORY_NAME = "Other 🪧"
"""Name of the catch-all release notes category."""
