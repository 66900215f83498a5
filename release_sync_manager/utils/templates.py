"""Contains utilities for rendering the bundled Jinja2 templates."""

from pathlib import Path
from typing import Any

import jinja2
import structlog

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

TEMPLATES_DIRECTORY = Path(__file__).parent.parent / "templates"


def construct_jinja2_environment() -> jinja2.Environment:
    """Construct a Jinja2 environment that fails on undefined variables and keeps the final newline."""
    return jinja2.Environment(undefined=jinja2.StrictUndefined, keep_trailing_newline=True)


def construct_jinja2_template_from_file(template_path: Path | str, environment: jinja2.Environment | None = None) -> jinja2.Template:
    """Construct a Jinja2 template from a file."""
    if environment is None:
        environment = construct_jinja2_environment()
    try:
        template_content = Path(template_path).read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.error("Jinja2 template not found", template_path=str(template_path))
        raise
    return environment.from_string(template_content)


def render_template_file(template_path: Path | str, **context: Any) -> str:
    """Render a Jinja2 template file with the given variables.

    Raises:
        jinja2.UndefinedError: If the template uses a variable missing from the context.
    """
    template = construct_jinja2_template_from_file(template_path)
    try:
        return template.render(**context)
    except jinja2.UndefinedError as exc:
        logger.error("Failed to render template", template_path=str(template_path), variables=sorted(context), error=str(exc))
        raise
