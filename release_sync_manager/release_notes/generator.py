"""Main release notes generation orchestration."""

import asyncio

import structlog

from release_sync_manager.github.abc import GitHubClientBase
from release_sync_manager.release_notes.exceptions import ReleaseNotesConfigurationError
from release_sync_manager.release_notes.markdown import MarkdownWriter
from release_sync_manager.release_notes.models import (
    CategoryDimension,
    CategorySection,
    ReleaseNoteItem,
    ReleaseNotesResult,
    ReleaseNotesSettings,
    ReleaseNotesStatus,
)
from release_sync_manager.release_notes.sanitizer import sanitize_title
from release_sync_manager.schemas.github import IssueRecord, PullRequestRecord
from release_sync_manager.utils.constants import RELEASE_NOTES_VERSION_PATTERN

logger = structlog.get_logger(__name__)


def replace_placeholders(text: str, settings: ReleaseNotesSettings) -> str:
    """Replace the ${VERSION}, ${RELEASETYPE}, ${ENVIRONMENT}, and ${REPONAME} placeholders."""
    return (
        text.replace("${VERSION}", settings.version or "")
        .replace("${RELEASETYPE}", settings.chosen_release_type)
        .replace("${ENVIRONMENT}", settings.chosen_release_type)
        .replace("${REPONAME}", settings.repo_name)
    )


def validate_release_notes_settings(settings: ReleaseNotesSettings) -> None:
    """Validate the settings that do not need GitHub to be checked.

    Raises:
        ReleaseNotesConfigurationError: Naming the first missing or invalid setting.
    """
    if not settings.owner_name.strip():
        raise ReleaseNotesConfigurationError("The 'ownerName' setting is required and cannot be empty.", setting="ownerName")
    if not settings.repo_name.strip():
        raise ReleaseNotesConfigurationError("The 'repoName' setting is required and cannot be empty.", setting="repoName")
    if not settings.header_text.strip():
        raise ReleaseNotesConfigurationError("The 'headerText' setting is required and cannot be empty.", setting="headerText")
    if not settings.milestone_name.strip():
        raise ReleaseNotesConfigurationError("The 'milestoneName' setting is required and cannot be empty.", setting="milestoneName")
    if settings.version is None or RELEASE_NOTES_VERSION_PATTERN.match(settings.version) is None:
        raise ReleaseNotesConfigurationError(
            f"The 'version' setting '{settings.version}' must be in the format 'vX.Y.Z' or 'vX.Y.Z-preview.N'.",
            setting="version",
        )
    release_type_names = [name.strip() for name in settings.release_type_names if name.strip()]
    if release_type_names and settings.chosen_release_type not in release_type_names:
        raise ReleaseNotesConfigurationError(
            f"The 'chosenReleaseType' setting '{settings.chosen_release_type}' must be one of: {', '.join(release_type_names)}.",
            setting="chosenReleaseType",
        )


async def validate_labels(adapter: GitHubClientBase, setting_name: str, labels: list[str]) -> None:
    """Check that every label exists in the repository, one concurrent lookup per distinct label.

    Raises:
        ReleaseNotesConfigurationError: Listing every label that does not exist.
    """
    distinct_labels = list(dict.fromkeys(label.strip() for label in labels if label.strip()))
    if not distinct_labels:
        return
    results = await asyncio.gather(*(adapter.label_exists(label) for label in distinct_labels))
    missing = [label for label, exists in zip(distinct_labels, results, strict=True) if not exists]
    if missing:
        raise ReleaseNotesConfigurationError(
            f"The following '{setting_name}' label(s) do not exist: {', '.join(missing)}",
            setting=setting_name,
        )


class ReleaseNotesGenerator:
    """Buckets a milestone's issues and pull requests into categories and renders the document."""

    def __init__(self, settings: ReleaseNotesSettings, writer: MarkdownWriter | None = None) -> None:
        """Initialize with the release notes settings."""
        self.settings = settings
        self.writer = writer or MarkdownWriter()

    def _is_ignored(self, item: IssueRecord) -> bool:
        return not item.label_names.isdisjoint(self.settings.ignore_labels)

    def _to_item(self, item: IssueRecord) -> ReleaseNoteItem:
        return ReleaseNoteItem(number=item.number, url=item.html_url, title=sanitize_title(item.title, self.settings))

    def _issue_type_sections(self, issues: list[IssueRecord]) -> list[CategorySection]:
        sections: list[CategorySection] = []
        for category_name, type_name in self.settings.issue_category_issue_type_mappings.items():
            type_name = type_name.strip() or category_name
            matches = [issue for issue in issues if issue.type is not None and issue.type.name == type_name]
            if matches:
                sections.append(
                    CategorySection(name=category_name, dimension=CategoryDimension.ISSUE_TYPE, items=[self._to_item(i) for i in matches])
                )
        return sections

    def _label_sections(
        self,
        mappings: dict[str, str],
        items: list[IssueRecord],
        dimension: CategoryDimension,
    ) -> list[CategorySection]:
        sections: list[CategorySection] = []
        for category_name, label in mappings.items():
            label = label.strip()
            if not label:
                continue
            matches = [item for item in items if label in item.label_names]
            if matches:
                sections.append(CategorySection(name=category_name, dimension=dimension, items=[self._to_item(i) for i in matches]))
        return sections

    def _other_section(self, issues: list[IssueRecord]) -> list[CategorySection]:
        name = (self.settings.other_category_name or "").strip()
        if not name:
            return []
        category_labels = {label.strip() for label in self.settings.issue_category_label_mappings.values()}
        matches = [issue for issue in issues if issue.label_names.isdisjoint(category_labels)]
        if not matches:
            return []
        return [CategorySection(name=name, dimension=CategoryDimension.OTHER, items=[self._to_item(i) for i in matches])]

    def build(self, issues: list[IssueRecord], prs: list[PullRequestRecord]) -> ReleaseNotesResult:
        """Build the release notes document.

        Items carrying an ignore label are left out of every category. The
        remaining items are grouped by issue type, issue label, pull request
        label, and finally into the catch-all category. The dimensions are
        evaluated independently, so an item may be listed more than once.

        Args:
            issues (list[IssueRecord]): Issues of the milestone.
            prs (list[PullRequestRecord]): Pull requests of the milestone.

        Returns:
            ReleaseNotesResult: The rendered document with its sections and the ignored item numbers.
        """
        kept_issues = [issue for issue in issues if not self._is_ignored(issue)]
        kept_prs = [pr for pr in prs if not self._is_ignored(pr)]
        ignored_issues = [issue.number for issue in issues if self._is_ignored(issue)]
        ignored_pull_requests = [pr.number for pr in prs if self._is_ignored(pr)]

        sections = [
            *self._issue_type_sections(kept_issues),
            *self._label_sections(self.settings.issue_category_label_mappings, kept_issues, CategoryDimension.ISSUE_LABEL),
            *self._label_sections(self.settings.pr_category_label_mappings, kept_prs, CategoryDimension.PR_LABEL),
            *self._other_section(kept_issues),
        ]

        content = self.writer.render_document(
            header_text=replace_placeholders(self.settings.header_text, self.settings),
            extra_info=self.settings.extra_info,
            sections=sections,
        )
        logger.info(
            "Built release notes",
            sections=[section.name for section in sections],
            ignored_issues=ignored_issues,
            ignored_pull_requests=ignored_pull_requests,
        )
        return ReleaseNotesResult(
            status=ReleaseNotesStatus.SUCCESS if sections else ReleaseNotesStatus.NO_CONTENT,
            content=content,
            sections=sections,
            ignored_issues=ignored_issues,
            ignored_pull_requests=ignored_pull_requests,
            version=self.settings.version,
        )


async def generate_release_notes(adapter: GitHubClientBase, settings: ReleaseNotesSettings) -> ReleaseNotesResult:
    """Validate the settings against the repository and generate the release notes of the milestone.

    Raises:
        ReleaseNotesConfigurationError: If a setting is invalid, a referenced label does not exist, or the milestone is missing.
    """
    validate_release_notes_settings(settings)
    await validate_labels(adapter, "issueCategoryLabelMappings", list(settings.issue_category_label_mappings.values()))
    await validate_labels(adapter, "prCategoryLabelMappings", list(settings.pr_category_label_mappings.values()))
    await validate_labels(adapter, "ignoreLabels", settings.ignore_labels)

    milestone_name = replace_placeholders(settings.milestone_name, settings)
    milestone = await adapter.find_milestone(milestone_name)
    if milestone is None:
        raise ReleaseNotesConfigurationError(f"The milestone '{milestone_name}' does not exist.", setting="milestoneName")

    logger.info("Fetching milestone items", milestone=milestone.title, milestone_number=milestone.number)
    issues, prs = await adapter.list_milestone_items(milestone.number)
    return ReleaseNotesGenerator(settings).build(issues, prs)
