"""HTML utility functions for Neur.

This module wraps the HTML compactor used when the ``minify`` setting is on.

Functions:
    compact_html: Minify a rendered HTML document.
"""

from __future__ import annotations

import minify_html


def compact_html(markup: str) -> str:
    """Minify rendered HTML.

    Collapses whitespace, drops comments and optional tags, and minifies
    inline ``<style>`` and ``<script>`` contents.

    Args:
        markup: Rendered HTML document or fragment.

    Returns:
        The compacted HTML.
    """
    return minify_html.minify(markup, minify_css=True, minify_js=True)
