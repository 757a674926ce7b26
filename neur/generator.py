"""Site generation for Neur.

This module contains the core logic for building a static site: it walks the
source directory depth-first, mirrors every directory into the output
directory and routes each file to the transform for its extension.

| extension | transform |
|-----------|-----------|
| ``.css``  | check, minify and print the stylesheet |
| ``.html`` | render the page with Jinja2 (partials are skipped) |
| ``.md``   | render the document inside its layout, write ``.html`` |
| other     | copy byte-for-byte |

Any failure aborts the run. Files already written stay on disk.

Key classes:
- Generator: Runs the walk and the transforms for one configuration.
- RunResult: Output directory and files written by a run.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import Config
from .errors import FileSystemError
from .extractors import extract_frontmatter
from .html_utils import compact_html
from .layouts import LAYOUT_FILENAME, LayoutRegistry
from .renderers import MarkdownRenderer, default_markdown_renderer
from .stylesheets import transform_stylesheet
from .templates import TemplateEngine
from .utils import (
    MARKUP_SUFFIX,
    FileKind,
    classify,
    is_partial,
    iter_entries,
    mirror_path,
)

logger = logging.getLogger(__name__)

CONTENT_KEY = "content"


@dataclass
class RunResult:
    """Result of a generator run.

    Attributes:
        output_dir: Directory the site was generated into.
        written: Output files in the order they were written.
    """

    output_dir: Path
    written: list[Path] = field(default_factory=list)


def _filesystem_error(exc: OSError, fallback: Path | None = None) -> FileSystemError:
    """Wrap an OSError, keeping the path the operating system reported."""
    path = Path(exc.filename) if exc.filename else fallback
    return FileSystemError(path, exc.strerror or str(exc), exc)


def build_context(
    front_matter: dict[str, Any], content: str, path: Path | None = None
) -> dict[str, Any]:
    """Assemble the rendering context of a content document.

    The rendered body always wins over a front matter key of the same name.

    Args:
        front_matter: Mapping parsed from the document's front matter.
        content: Rendered HTML body.
        path: Source document, used in the warning for a shadowed key.

    Returns:
        Context with every front matter key plus ``content``.
    """
    if CONTENT_KEY in front_matter:
        logger.warning(
            "%s: front matter key '%s' is reserved and was ignored",
            path,
            CONTENT_KEY,
        )
    context = dict(front_matter)
    context[CONTENT_KEY] = content
    return context


class Generator:
    """Mirrors a source tree into an output tree, transforming known files.

    Attributes:
        config: Settings for this generator.
        templates: Template engine seeded with the source tree's markup.
        layouts: Directories providing a layout, rebuilt on every run.
        markdown: Renderer used for document bodies.
    """

    def __init__(
        self,
        config: Config,
        markdown_renderer: MarkdownRenderer | None = None,
    ):
        """Initialize the generator.

        Args:
            config: Validated settings.
            markdown_renderer: Optional custom Markdown renderer.

        Raises:
            FileSystemError: If the source directory cannot be read.
            TemplateRenderError: If a markup file fails to compile.
        """
        self.config = config
        self.markdown = markdown_renderer or default_markdown_renderer
        self.layouts = LayoutRegistry(config.source)
        try:
            self.templates = TemplateEngine(config.source)
        except OSError as exc:
            raise _filesystem_error(exc, config.source) from exc
        self._written: list[Path] = []
        self._handlers: dict[FileKind, Callable[[Path], None]] = {
            FileKind.STYLESHEET: self.stylesheet,
            FileKind.MARKUP: self.markup,
            FileKind.DOCUMENT: self.document,
            FileKind.OTHER: self.copy,
        }

    def run(self) -> RunResult:
        """Generate the whole site.

        Layouts are discovered across the full tree first, then the tree is
        walked and every file transformed.

        Returns:
            RunResult listing the files written.

        Raises:
            GeneratorError: On the first failure of any kind.
        """
        source = self.config.source
        output = self.config.output
        logger.info(
            "Generating %s into %s (%d templates)",
            source,
            output,
            len(self.templates.names),
        )
        self.layouts = LayoutRegistry(source)
        self._written = []
        try:
            self.layouts.discover()
            self.directory(source)
        except OSError as exc:
            raise _filesystem_error(exc) from exc
        logger.info("Wrote %d files into %s", len(self._written), output)
        return RunResult(output_dir=output, written=list(self._written))

    def directory(self, path: Path) -> None:
        """Mirror a directory and process everything inside it."""
        self.dest(path).mkdir(parents=True, exist_ok=True)
        for entry in iter_entries(path):
            if entry.is_dir():
                self.directory(entry)
            else:
                self.file(entry)

    def file(self, path: Path) -> None:
        """Route a file to the transform for its extension."""
        kind = classify(path)
        logger.debug("Processing %s as %s", path, kind.value)
        self._handlers[kind](path)

    def stylesheet(self, path: Path) -> None:
        """Check, minify and print a stylesheet to the mirrored path."""
        text = self._read(path)
        self._write(self.dest(path), transform_stylesheet(text, self.config.minify, path))

    def markup(self, path: Path) -> None:
        """Render a page, or register a layout when the file is a partial."""
        if is_partial(path):
            if path.name == LAYOUT_FILENAME:
                self.layouts.register(path.parent)
            return
        rendered = self.templates.render(
            self.templates.template_name(path), {}, source_path=path
        )
        self._write_html(self.dest(path), rendered)

    def document(self, path: Path) -> None:
        """Render a Markdown document inside its layout as an HTML page."""
        text = self._read(path)
        front_matter, body = extract_frontmatter(text, path)
        context = build_context(front_matter, self.markdown.render(body), path)

        layout = self.layouts.resolve(path.parent)
        if layout is None:
            rendered = self.templates.render_fallback(context, source_path=path)
        else:
            rendered = self.templates.render(
                layout, context, safe_keys=(CONTENT_KEY,), source_path=path
            )
        self._write_html(self.dest(path).with_suffix(MARKUP_SUFFIX), rendered)

    def copy(self, path: Path) -> None:
        """Copy a file byte-for-byte to the mirrored path."""
        dest = self.dest(path)
        shutil.copyfile(path, dest)
        self._written.append(dest)

    def dest(self, path: Path) -> Path:
        """Return the output path mirroring a source path."""
        return mirror_path(path, self.config.source, self.config.output)

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise FileSystemError(path, f"File is not valid UTF-8: {exc}", exc) from exc

    def _write_html(self, dest: Path, rendered: str) -> None:
        if self.config.minify:
            rendered = compact_html(rendered)
        self._write(dest, rendered)

    def _write(self, dest: Path, text: str) -> None:
        with open(dest, "w", encoding="utf-8") as f:
            f.write(text)
        self._written.append(dest)
