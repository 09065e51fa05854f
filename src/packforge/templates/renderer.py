"""Strict string template rendering."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import jinja2

from packforge.errors import TemplateError

# Missing keys must fail instead of rendering as empty strings. Block and
# comment tags sit inside double braces so shell such as ${#ARGS[@]} is
# copied unchanged.
_ENVIRONMENT = jinja2.Environment(
    block_start_string="{{%",
    block_end_string="%}}",
    comment_start_string="{{#",
    comment_end_string="#}}",
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


def render_template_string(template: str, context: Mapping[str, str]) -> str:
    """Render a template string against a context mapping.

    Raises:
        TemplateError: If the template is malformed or references a key
            that is not present in the context.
    """
    try:
        compiled = _ENVIRONMENT.from_string(template)
    except jinja2.TemplateSyntaxError as e:
        raise TemplateError(f"Failed to parse template string: {e}", template) from e

    try:
        return compiled.render(dict(context))
    except jinja2.TemplateError as e:
        raise TemplateError(f"Failed to render template string: {e}", template) from e


def render_path(path: Path | str, context: Mapping[str, str]) -> Path:
    """Render a filesystem path whose components may contain template expressions."""
    return Path(render_template_string(str(path), context))
