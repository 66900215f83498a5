"""Reads and updates the sync status checklist embedded in a pull request description.

A sync line looks like::

    ✅The pull request title matches the linked issue title exactly.<!--title-->

The leading glyph tells whether the aspect named by the trailing HTML comment
marker is in sync. Apart from rendering the bundled template, everything in
this module is a pure text transformation.
"""

import re
from enum import Enum

import structlog

from release_sync_manager.synchronize.exceptions import SyncTemplateError
from release_sync_manager.synchronize.models import SyncSettings, SyncState
from release_sync_manager.utils.templates import TEMPLATES_DIRECTORY, render_template_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

IN_SYNC_GLYPH = "✅"
OUT_OF_SYNC_GLYPH = "❌"

SYNC_LINE_PATTERN = r"^\s*(✅|❌).+<!--\s*(?P<marker>[\w-]+)\s*-->\s*$"
MARKER_PATTERN = r"<!--\s*(?P<marker>[\w-]+)\s*-->"
CHECKBOX_PATTERN = r"^\s*[-*]\s*\[(?P<state>[ xX])\]"
ISSUE_NUMBER_VAR_PATTERN = r"\$\{\{\s*issue-num(?:ber)?\s*\}\}"
HEAD_BRANCH_VAR_PATTERN = r"\$\{\{\s*head-branch\s*\}\}"

SYNC_ENABLED_MARKER = "sync-enabled"
SYNC_DISABLED_MARKER = "sync-disabled"
LEGACY_SYNC_FLAG_MARKER = "sync-flag"
TOGGLE_MARKERS = frozenset({SYNC_ENABLED_MARKER, SYNC_DISABLED_MARKER, LEGACY_SYNC_FLAG_MARKER})

DEFAULT_SYNC_TEMPLATE_PATH = TEMPLATES_DIRECTORY / "pr_sync_template.md.j2"


class SyncAspect(str, Enum):
    """An aspect of a pull request that is tracked by one line of the sync checklist.

    The value is the name used in the line's HTML comment marker. Each member
    also names the ``SyncSettings`` flag that decides the line's glyph.
    """

    settings_field: str

    def __new__(cls, marker_name: str, settings_field: str) -> "SyncAspect":
        member = str.__new__(cls, marker_name)
        member._value_ = marker_name
        member.settings_field = settings_field
        return member

    HEAD_BRANCH = ("head-branch", "head_branch_valid")
    BASE_BRANCH = ("base-branch", "base_branch_valid")
    VALID_ISSUE_NUMBER = ("valid-issue-number", "issue_number_valid")
    TITLE = ("title", "title_in_sync")
    DEFAULT_REVIEWER = ("default-reviewer", "default_reviewer_valid")
    ASSIGNEES = ("assignees", "assignees_in_sync")
    LABELS = ("labels", "labels_in_sync")
    PROJECTS = ("projects", "projects_in_sync")
    MILESTONE = ("milestone", "milestone_in_sync")

    @property
    def marker(self) -> str:
        """The HTML comment marker that identifies this aspect's line."""
        return f"<!--{self.value}-->"

    def is_in_sync(self, settings: SyncSettings) -> bool:
        """Read this aspect's flag from the settings."""
        return bool(getattr(settings, self.settings_field))


class TemplateProcessingResult:
    """Contains the refreshed template and the notices produced while refreshing it."""

    def __init__(self, content: str, notices: list[str], evaluated_aspects: list[SyncAspect]) -> None:
        """Initialize the result with the refreshed content, notices, and the aspects found in the template."""
        self.content = content
        self.notices = notices
        self.evaluated_aspects = evaluated_aspects


def is_sync_line(line: str) -> bool:
    """Return whether the line is a sync status line (status glyph, text, trailing marker)."""
    return re.search(SYNC_LINE_PATTERN, line) is not None


def is_line_in_sync(line: str) -> bool:
    """Return whether the line is marked as in sync."""
    return IN_SYNC_GLYPH in line and OUT_OF_SYNC_GLYPH not in line


def _is_ambiguous(line: str) -> bool:
    return IN_SYNC_GLYPH in line and OUT_OF_SYNC_GLYPH in line


def set_line_sync_status(line: str, desired_in_sync: bool) -> str:
    """Set the status glyph of a line.

    A line carrying both glyphs is returned unchanged.

    Args:
        line (str): The line to update.
        desired_in_sync (bool): True to mark the line in sync, False to mark it out of sync.

    Returns:
        str: The updated line.
    """
    if _is_ambiguous(line):
        return line
    if desired_in_sync:
        return line.replace(OUT_OF_SYNC_GLYPH, IN_SYNC_GLYPH)
    return line.replace(IN_SYNC_GLYPH, OUT_OF_SYNC_GLYPH)


def _line_marker(line: str) -> str | None:
    markers = re.findall(MARKER_PATTERN, line)
    if not markers:
        return None
    return markers[-1]


def _split_lines(template: str) -> list[str]:
    return template.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def process_sync_template(template: str, settings: SyncSettings) -> TemplateProcessingResult:
    """Refresh every sync line of a template against the given settings.

    Sync lines are dispatched on their marker to the matching aspect and get
    the glyph of that aspect's flag. Toggle lines and non-sync lines pass
    through unchanged. Line endings are normalized to ``\\n``.

    Args:
        template (str): The pull request description or sync template.
        settings (SyncSettings): The sync settings to reflect in the checklist.

    Returns:
        TemplateProcessingResult: The refreshed content and the notices describing what happened.
    """
    lines = _split_lines(template)
    notices: list[str] = []
    evaluated: list[SyncAspect] = []

    for index, line in enumerate(lines):
        if not is_sync_line(line):
            continue

        marker = _line_marker(line)
        if marker in TOGGLE_MARKERS:
            continue

        try:
            aspect = SyncAspect(marker)
        except ValueError:
            notices.append(f"Line {index + 1} has the unrecognized sync marker '<!--{marker}-->' and was left unchanged.")
            continue

        if aspect not in evaluated:
            evaluated.append(aspect)

        if _is_ambiguous(line):
            notices.append(f"Line {index + 1} for '{aspect.value}' carries both status glyphs and was left unchanged.")
            continue

        desired = aspect.is_in_sync(settings)
        updated = set_line_sync_status(line, desired)
        status = "in sync" if desired else "out of sync"
        if updated != line:
            notices.append(f"Marked '{aspect.value}' as {status}.")
        else:
            notices.append(f"'{aspect.value}' is already marked as {status}.")
        lines[index] = updated

    for aspect in SyncAspect:
        if aspect not in evaluated:
            notices.append(f"No sync line with the marker '{aspect.marker}' was found.")

    return TemplateProcessingResult(content="\n".join(lines), notices=notices, evaluated_aspects=evaluated)


def update_issue_var(template: str, issue_number: int) -> str:
    """Replace every issue number variable (``${{ issue-number }}``) with the issue number.

    Raises:
        SyncTemplateError: If the issue number is less than 1.
    """
    if issue_number < 1:
        raise SyncTemplateError(f"The issue number must be greater than 0, got {issue_number}.")
    return re.sub(ISSUE_NUMBER_VAR_PATTERN, lambda _: str(issue_number), template)


def update_head_branch_var(template: str, branch: str) -> str:
    """Replace every head branch variable (``${{ head-branch }}``) with the branch name.

    Raises:
        SyncTemplateError: If the branch name is empty.
    """
    if not branch or not branch.strip():
        raise SyncTemplateError("The head branch name must not be empty.")
    return re.sub(HEAD_BRANCH_VAR_PATTERN, lambda _: branch, template)


def _toggle_verdict(line: str) -> bool | None:
    """Return True if a toggle line enables syncing, False if it disables it, None if it says neither."""
    markers = {marker for marker in re.findall(MARKER_PATTERN, line) if marker in TOGGLE_MARKERS}
    if not markers:
        return None
    if SYNC_DISABLED_MARKER in markers and SYNC_ENABLED_MARKER not in markers:
        return False
    if SYNC_ENABLED_MARKER in markers:
        return True
    # Only the legacy flag line is switched by its checkbox.
    checkbox = re.search(CHECKBOX_PATTERN, line)
    if checkbox is None:
        return None
    return checkbox.group("state") in ("x", "X")


def syncing_disabled(template: str) -> bool:
    """Return whether the template turns syncing off.

    Syncing is disabled only when some toggle line says disabled and none
    says enabled. A template without toggle lines keeps syncing enabled.
    """
    verdicts = [_toggle_verdict(line) for line in _split_lines(template)]
    return False in verdicts and True not in verdicts


def determine_sync_state(body: str | None, settings: SyncSettings | None = None) -> SyncState:
    """Classify a pull request description by the state of its sync checklist."""
    body = body or ""
    if not any(is_sync_line(line) for line in _split_lines(body)):
        return SyncState.NO_TEMPLATE
    if syncing_disabled(body):
        return SyncState.SYNC_DISABLED
    if settings is None:
        return SyncState.TEMPLATE_APPLIED
    return SyncState.IN_SYNC if settings.all_in_sync else SyncState.OUT_OF_SYNC


def describe_base_branches(allowed_base_branches: list[str]) -> str:
    """Describe the allowed base branches in prose, e.g. "a 'main' or 'preview' branch"."""
    if not allowed_base_branches:
        raise SyncTemplateError("At least one allowed base branch is required.")
    if len(allowed_base_branches) == 1:
        return f"the branch '{allowed_base_branches[0]}'"
    if len(allowed_base_branches) == 2:
        return f"a '{allowed_base_branches[0]}' or '{allowed_base_branches[1]}' branch"
    all_but_last = "', '".join(allowed_base_branches[:-1])
    return f"a '{all_but_last}', or '{allowed_base_branches[-1]}' branch"


def render_default_sync_template(allowed_base_branches: list[str]) -> str:
    """Render the bundled pull request sync template."""
    rendered = render_template_file(DEFAULT_SYNC_TEMPLATE_PATH, base_branches=describe_base_branches(allowed_base_branches))
    logger.debug("Rendered default sync template", allowed_base_branches=allowed_base_branches)
    return rendered
