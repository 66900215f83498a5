"""Release notes generation module."""

from .exceptions import ReleaseNotesConfigurationError
from .generator import ReleaseNotesGenerator, generate_release_notes, replace_placeholders, validate_labels, validate_release_notes_settings
from .markdown import MarkdownWriter, write_release_notes
from .models import (
    CategoryDimension,
    CategorySection,
    ReleaseNoteItem,
    ReleaseNotesResult,
    ReleaseNotesSettings,
    ReleaseNotesStatus,
    create_empty_settings_file,
    load_release_notes_settings,
)
from .sanitizer import sanitize_title

__all__ = [
    "CategoryDimension",
    "CategorySection",
    "MarkdownWriter",
    "ReleaseNoteItem",
    "ReleaseNotesConfigurationError",
    "ReleaseNotesGenerator",
    "ReleaseNotesResult",
    "ReleaseNotesSettings",
    "ReleaseNotesStatus",
    "create_empty_settings_file",
    "generate_release_notes",
    "load_release_notes_settings",
    "replace_placeholders",
    "sanitize_title",
    "validate_labels",
    "validate_release_notes_settings",
    "write_release_notes",
]
