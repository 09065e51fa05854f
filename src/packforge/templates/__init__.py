"""Template rendering and the shared template context."""

from packforge.templates.context import (
    TEMPLATE_KEYS,
    TemplateContext,
    build_template_context,
    normalize_arch,
)
from packforge.templates.renderer import render_path, render_template_string
from packforge.templates.tree import copy_template_dir

__all__ = [
    "TEMPLATE_KEYS",
    "TemplateContext",
    "build_template_context",
    "copy_template_dir",
    "normalize_arch",
    "render_path",
    "render_template_string",
]
