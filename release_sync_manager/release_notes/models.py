"""Data models for release notes generation."""

import json
from enum import Enum
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from ruamel.yaml.error import YAMLError

from release_sync_manager.release_notes.exceptions import ReleaseNotesConfigurationError
from release_sync_manager.utils.constants import DEFAULT_OTHER_CATEGORY_NAME
from release_sync_manager.utils.yaml import load_yaml_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class ReleaseNotesStatus(str, Enum):
    """Status of release notes generation."""

    SUCCESS = "success"
    NO_CONTENT = "no_content"


class CategoryDimension(str, Enum):
    """The dimension a release notes category selects items by."""

    ISSUE_TYPE = "issue_type"
    ISSUE_LABEL = "issue_label"
    PR_LABEL = "pr_label"
    OTHER = "other"


class ExtraInfo(BaseModel):
    """Free-form block rendered below the release notes title."""

    title: str = ""
    text: str = ""


class ReleaseNotesSettings(BaseModel):
    """Settings for generating the release notes of one milestone.

    Field names follow the camelCase keys of the settings file.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    owner_name: str = ""
    repo_name: str = ""
    milestone_name: str = ""
    header_text: str = ""
    chosen_release_type: str = ""
    release_type_names: list[str] = []
    relative_release_notes_dir_path: str = ""
    version: str | None = None
    extra_info: ExtraInfo | None = None
    emojis_to_remove_from_title: list[str] = []
    issue_category_issue_type_mappings: dict[str, str] = {}
    issue_category_label_mappings: dict[str, str] = {}
    pr_category_label_mappings: dict[str, str] = {}
    ignore_labels: list[str] = []
    word_replacements: dict[str, str] = {}
    first_word_replacements: dict[str, str] = {}
    style_words_list: dict[str, str] = {}
    bolded_versions: bool = False
    italic_versions: bool = False
    other_category_name: str | None = None
    schema_url: str | None = Field(default=None, alias="$schema")


class ReleaseNoteItem(BaseModel):
    """One issue or pull request listed in a release notes category."""

    number: int
    url: str
    title: str


class CategorySection(BaseModel):
    """A populated release notes category."""

    name: str
    dimension: CategoryDimension
    items: list[ReleaseNoteItem]


class ReleaseNotesResult(BaseModel):
    """Result of release notes generation."""

    status: ReleaseNotesStatus
    content: str
    sections: list[CategorySection] = []
    ignored_issues: list[int] = []
    ignored_pull_requests: list[int] = []
    version: str | None = None


def load_release_notes_settings(path: Path) -> ReleaseNotesSettings:
    """Load release notes settings from a JSON or YAML file.

    Raises:
        ReleaseNotesConfigurationError: If the file cannot be parsed or a setting has the wrong type.
    """
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = load_yaml_file(path)
        else:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
    except (json.JSONDecodeError, YAMLError, ValueError) as e:
        raise ReleaseNotesConfigurationError(f"The settings file {path.absolute()} could not be parsed: {e}") from e
    if not isinstance(data, dict):
        raise ReleaseNotesConfigurationError(f"Expected a mapping at the top level of {path.absolute()}, got {type(data).__name__}")
    try:
        settings = ReleaseNotesSettings.model_validate(data)
    except ValidationError as e:
        first_error = e.errors()[0]
        setting = ".".join(str(part) for part in first_error["loc"])
        raise ReleaseNotesConfigurationError(f"The setting '{setting}' is invalid: {first_error['msg']}", setting=setting) from e
    logger.debug("Loaded release notes settings", path=str(path))
    return settings


def create_empty_settings_file(path: Path) -> Path:
    """Write a skeleton release notes settings file to fill out by hand.

    Raises:
        FileExistsError: If a file already exists at the path.
    """
    if path.exists():
        raise FileExistsError(f"A settings file already exists at {path.absolute()}")
    skeleton = ReleaseNotesSettings(
        release_type_names=["production", "preview"],
        extra_info=ExtraInfo(),
        bolded_versions=True,
        italic_versions=True,
        other_category_name=DEFAULT_OTHER_CATEGORY_NAME,
    )
    data = skeleton.model_dump(by_alias=True, exclude={"schema_url", "version"})
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=4, ensure_ascii=False)
        f.write("\n")
    logger.info("Created empty release notes settings file", path=str(path))
    return path
