"""Render updates through Jinja2 text templates."""

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, TextIO

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError

from .errors import ConfigInvalid, RenderFailure
from .models import Update

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """\
--------------------------------------------------------------------------------
{{ title }}

ID: {{ id }}
Type: {{ kind }}
Severity: {{ severity }}
Date: {{ issued }}

Description:
{{ description }}

{% if references %}Issues:{% for ref in references %}
  * {{ ref.type }}: [{{ ref.id }}] {{ ref.title }}{% endfor %}

{% endif %}"""


def _environment(loader=None) -> Environment:
    return Environment(
        loader=loader,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


def default_template() -> Template:
    """Build the built-in update layout."""
    return _environment().from_string(DEFAULT_TEMPLATE)


def load_template(path: str) -> Template:
    """
    Load a custom template file.

    Args:
        path: Path to a Jinja2 template file

    Returns:
        Compiled template

    Raises:
        ConfigInvalid: If the file is missing, unreadable or not a valid template
    """
    template_path = Path(path)
    if not template_path.is_file():
        raise ConfigInvalid(f"template file not found: '{path}'")

    env = _environment(FileSystemLoader(str(template_path.parent)))
    try:
        template = env.get_template(template_path.name)
    except TemplateError as e:
        raise ConfigInvalid(f"failed parsing template file '{path}': {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigInvalid(f"failed reading template file '{path}': {e}") from e

    logger.debug(f"Loaded template from {template_path}")
    return template


def template_context(update: Update) -> Dict[str, Any]:
    """Expose the update fields as top-level template names."""
    context = {f.name: getattr(update, f.name) for f in fields(update)}
    context["update"] = update
    return context


def render_update(update: Update, sink: TextIO, template: Template) -> int:
    """
    Write one rendered update to the sink.

    Output is streamed chunk by chunk, so text already written stays in
    the sink if the template fails part-way.

    Returns:
        Number of characters written
    """
    written = 0
    try:
        for chunk in template.generate(template_context(update)):
            sink.write(chunk)
            written += len(chunk)
    except (TemplateError, TypeError, ValueError, ArithmeticError) as e:
        raise RenderFailure(f"failed rendering update '{update.id}': {e}") from e
    return written
