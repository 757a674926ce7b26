"""Template rendering engine for Neur.

This module uses Jinja2 to render pages and layouts. Templates are addressed
by their path relative to the source directory, so a page can extend or
include any other markup file in the tree (``{% extends "_base.html" %}``).

Key class:
- TemplateEngine: Compiles the source tree's templates and renders them.

Escaping is chosen per render call: values named in ``safe_keys`` are
inserted verbatim while everything else stays autoescaped.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    Template,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
    select_autoescape,
)
from markupsafe import Markup

from .errors import TemplateRenderError
from .utils import FileKind, classify, iter_entries, template_name

__all__ = ["FALLBACK_TEMPLATE", "TemplateEngine"]

# Used for documents whose directory has no layout.
FALLBACK_TEMPLATE = "{{ content }}"


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if isinstance(exc, TemplateSyntaxError):
        return f"Template syntax error on line {exc.lineno}: {exc.message}"
    if isinstance(exc, TemplateNotFound):
        return f"Template not found: {error_msg}"
    if isinstance(exc, UndefinedError):
        return f"Undefined variable: {error_msg}"
    if isinstance(exc, TypeError):
        return f"Type error: {error_msg}"

    return f"{error_type}: {error_msg}"


class TemplateEngine:
    """Template rendering engine using Jinja2.

    All markup files under the source directory are compiled when the engine
    is created, so templates may reference each other regardless of the
    order in which the generator later visits them, and a syntax error
    anywhere in the tree is reported before any output is written.

    Attributes:
        source: Source directory; the root of the template namespace.
        env: Jinja2 environment.
        names: Template names compiled at construction.
    """

    def __init__(self, source: Path):
        """Initialize the template engine.

        Args:
            source: Directory whose markup files become templates.

        Raises:
            TemplateRenderError: If any markup file fails to compile.
        """
        self.source = source
        self.env = Environment(
            loader=FileSystemLoader(str(source)),
            autoescape=select_autoescape(["html", "htm", "xml"]),
            keep_trailing_newline=True,
            cache_size=-1,
        )
        self._fallback = self.env.from_string(FALLBACK_TEMPLATE)
        self.names: list[str] = []
        self._seed(source)

    def _seed(self, directory: Path) -> None:
        """Compile every markup file below ``directory``."""
        for entry in iter_entries(directory):
            if entry.is_dir():
                self._seed(entry)
            elif classify(entry) is FileKind.MARKUP:
                name = template_name(entry, self.source)
                try:
                    self.env.get_template(name)
                except (TemplateSyntaxError, UnicodeDecodeError) as exc:
                    raise TemplateRenderError(
                        entry, _format_error_message(exc), exc
                    ) from exc
                self.names.append(name)

    def template_name(self, path: Path) -> str:
        """Return the lookup name of a file in the source tree."""
        return template_name(path, self.source)

    def render(
        self,
        name: str,
        context: Mapping[str, Any],
        safe_keys: Iterable[str] = (),
        source_path: Path | None = None,
    ) -> str:
        """Render a named template.

        Args:
            name: Template name relative to the source directory.
            context: Variables to make available in the template.
            safe_keys: Context keys whose values are inserted without
                escaping for this render only.
            source_path: File being generated, reported on failure.

        Returns:
            Rendered string.

        Raises:
            TemplateRenderError: If the template cannot be loaded or rendered.
        """
        try:
            template = self.env.get_template(name)
        except Exception as exc:
            raise self._error(exc, source_path) from exc
        return self._render(template, context, safe_keys, source_path)

    def render_fallback(
        self, context: Mapping[str, Any], source_path: Path | None = None
    ) -> str:
        """Render the built-in template that emits only ``content``.

        Args:
            context: Variables for the template; ``content`` is inserted as-is.
            source_path: File being generated, reported on failure.

        Returns:
            Rendered string.
        """
        return self._render(self._fallback, context, ("content",), source_path)

    def _render(
        self,
        template: Template,
        context: Mapping[str, Any],
        safe_keys: Iterable[str],
        source_path: Path | None,
    ) -> str:
        values = dict(context)
        for key in safe_keys:
            if key in values:
                values[key] = Markup(values[key])
        try:
            return template.render(values)
        except Exception as exc:
            raise self._error(exc, source_path) from exc

    def _error(self, exc: Exception, source_path: Path | None) -> TemplateRenderError:
        path = source_path
        if isinstance(exc, TemplateSyntaxError) and exc.filename:
            path = Path(exc.filename)
        return TemplateRenderError(path, _format_error_message(exc), exc)
