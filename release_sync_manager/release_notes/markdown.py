"""Markdown rendering and writing of release notes documents."""

from pathlib import Path

import structlog

from release_sync_manager.release_notes.exceptions import ReleaseNotesConfigurationError
from release_sync_manager.release_notes.models import CategorySection, ExtraInfo, ReleaseNoteItem, ReleaseNotesSettings
from release_sync_manager.utils.constants import RELEASE_NOTES_DIRECTORY_TEMPLATE, RELEASE_NOTES_FILE_NAME_TEMPLATE

logger = structlog.get_logger(__name__)


class MarkdownWriter:
    """Renders the parts of a release notes document."""

    def render_title(self, header_text: str, has_extra_info: bool = False) -> str:
        """Render the centered document title."""
        extra_empty_line = "\n" if has_extra_info else ""
        return f'<h1 align="center" style="color: mediumseagreen;font-weight: bold;">\n{header_text}\n</h1>{extra_empty_line}'

    def render_extra_info(self, extra_info: ExtraInfo) -> str:
        """Render the centered extra info block."""
        result = f'<h2 align="center" style="font-weight: bold;">{extra_info.title}</h2>\n\n'
        result += '<div align="center">\n\n'
        result += extra_info.text
        result += "\n</div>\n"
        return result

    def render_category_header(self, name: str) -> str:
        """Render the header of a category section."""
        return f'<h2 align="center" style="font-weight: bold;">{name}</h2>'

    def render_line_item(self, item: ReleaseNoteItem, position: int) -> str:
        """Render one numbered line item; positions start at 1."""
        return f"{position}. [#{item.number}]({item.url}) - {item.title}."

    def render_section(self, section: CategorySection) -> str:
        """Render a category header followed by its numbered line items."""
        lines = [f"{self.render_category_header(section.name)}\n"]
        lines.extend(self.render_line_item(item, position) for position, item in enumerate(section.items, start=1))
        return "\n".join(lines) + "\n"

    def render_document(self, header_text: str, extra_info: ExtraInfo | None, sections: list[CategorySection]) -> str:
        """Assemble the title, the optional extra info block, and every non-empty section."""
        parts = [self.render_title(header_text, has_extra_info=extra_info is not None)]
        if extra_info is not None:
            parts.append(self.render_extra_info(extra_info))
        parts.extend(self.render_section(section) for section in sections if section.items)
        return "\n".join(parts)


def release_notes_path(settings: ReleaseNotesSettings, working_directory: Path) -> Path:
    """Return the path the release notes for the settings' version and release type are written to.

    Raises:
        ReleaseNotesConfigurationError: If the release notes directory is unset or does not exist.
    """
    relative_dir = settings.relative_release_notes_dir_path.strip()
    if not relative_dir:
        raise ReleaseNotesConfigurationError(
            "The 'relativeReleaseNotesDirPath' setting is not set. Set it to the directory the release notes are saved in.",
            setting="relativeReleaseNotesDirPath",
        )
    base_dir = working_directory / relative_dir.rstrip("/")
    if not base_dir.is_dir():
        raise ReleaseNotesConfigurationError(
            f"The release notes directory '{relative_dir}' does not exist. Create it or update the 'relativeReleaseNotesDirPath' setting.",
            setting="relativeReleaseNotesDirPath",
        )
    release_dir = base_dir / RELEASE_NOTES_DIRECTORY_TEMPLATE.format(release_type=settings.chosen_release_type)
    return release_dir / RELEASE_NOTES_FILE_NAME_TEMPLATE.format(version=settings.version)


def write_release_notes(settings: ReleaseNotesSettings, content: str, working_directory: Path) -> Path:
    """Write a release notes document and return its path."""
    path = release_notes_path(settings, working_directory)
    path.parent.mkdir(exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("Wrote release notes", path=str(path), version=settings.version)
    return path
