"""Markdown rendering for Neur.

This module turns the body of a content document into HTML with mistune.
Fenced code blocks tagged with a language are highlighted by Pygments.

Key classes:
- HighlightRenderer: mistune HTML renderer with Pygments code blocks.
- MarkdownRenderer: Renders Markdown source to an HTML fragment.
"""

from __future__ import annotations

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

PLUGINS = ["strikethrough", "footnotes", "table", "url"]


class HighlightRenderer(mistune.HTMLRenderer):
    """Markdown renderer with syntax highlighting and raw HTML passthrough."""

    def __init__(self):
        super().__init__(escape=False)

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'javascript').

        Returns:
            HTML string with highlighted code.
        """
        lang = info.split()[0] if info and info.strip() else None
        if lang:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        lang_class = f' class="language-{lang}"' if lang else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown content to HTML."""

    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        A fresh parser is built per call so no state leaks between documents.

        Args:
            content: Markdown source content.

        Returns:
            Rendered HTML fragment.
        """
        markdown = mistune.create_markdown(renderer=HighlightRenderer(), plugins=PLUGINS)
        return markdown(content)


default_markdown_renderer = MarkdownRenderer()
