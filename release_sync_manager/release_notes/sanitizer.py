"""Title sanitization for release notes line items.

The rules run in a fixed order, each on the output of the previous one:

1. strip the configured emoji substrings
2. apply the whole-title word replacements
3. replace the first word when its capitalized form matches a configured key
4. bold and/or italicize the configured words
5. bold and/or italicize every semantic version found in the title
"""

import re

from release_sync_manager.release_notes.models import ReleaseNotesSettings
from release_sync_manager.utils.constants import SEMANTIC_VERSION_TOKEN_PATTERN

BOLD_SYNTAX = "**"
ITALIC_SYNTAX = "_"


def _capitalize_first_letter(word: str) -> str:
    return word[:1].upper() + word[1:]


def strip_emojis(title: str, emojis: list[str]) -> str:
    """Remove every occurrence of each emoji substring."""
    for emoji in emojis:
        if emoji:
            title = title.replace(emoji, "")
    return title.strip()


def replace_words(title: str, replacements: dict[str, str]) -> str:
    """Replace every occurrence of each key with its value."""
    for word, replacement in replacements.items():
        if word:
            title = title.replace(word, replacement)
    return title


def replace_first_word(title: str, replacements: dict[str, str]) -> str:
    """Replace the leading word when its capitalized form matches the capitalized form of a key."""
    words = title.split(" ")
    first_word = _capitalize_first_letter(words[0])
    for word, replacement in replacements.items():
        if first_word == _capitalize_first_letter(word):
            words[0] = replacement
            break
    return " ".join(words)


def parse_styles(style_list: str) -> tuple[bool, bool]:
    """Parse a style list such as ``"bold,italic"`` into (bold, italic)."""
    styles = {style.strip() for style in style_list.lower().split(",")}
    return "bold" in styles, "italic" in styles


def style_words(title: str, style_words_list: dict[str, str]) -> str:
    """Bold and/or italicize every whole-word occurrence of the configured words."""
    for word, style_list in style_words_list.items():
        if not word:
            continue
        bold, italic = parse_styles(style_list)
        if not bold and not italic:
            continue
        bold_syntax = BOLD_SYNTAX if bold else ""
        italic_syntax = ITALIC_SYNTAX if italic else ""
        styled = f"{italic_syntax}{bold_syntax}{word}{bold_syntax}{italic_syntax}"
        title = re.sub(rf"(?<!\w){re.escape(word)}(?!\w)", lambda _: styled, title)
    return title


def style_versions(title: str, bold: bool, italic: bool) -> str:
    """Bold and/or italicize every semantic version in the title, rendered with a 'v' prefix."""
    if not bold and not italic:
        return title
    bold_syntax = BOLD_SYNTAX if bold else ""
    italic_syntax = ITALIC_SYNTAX if italic else ""
    return SEMANTIC_VERSION_TOKEN_PATTERN.sub(
        lambda match: f"v{italic_syntax}{bold_syntax}{match.group('version')}{bold_syntax}{italic_syntax}",
        title,
    )


def sanitize_title(title: str, settings: ReleaseNotesSettings) -> str:
    """Apply every title sanitization rule of the settings, in order."""
    title = strip_emojis(title, settings.emojis_to_remove_from_title)
    title = replace_words(title, settings.word_replacements)
    title = replace_first_word(title, settings.first_word_replacements)
    title = style_words(title, settings.style_words_list)
    title = style_versions(title, settings.bolded_versions, settings.italic_versions)
    return title
