"""Front matter extraction for Neur.

A content document may open with a metadata block fenced by marker lines:

- ``---`` fences hold YAML, parsed with ``yaml.safe_load``.
- ``+++`` fences hold TOML, parsed with ``tomllib``.

The block is removed from the document before the body is rendered.
"""

from __future__ import annotations

import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from .errors import FrontMatterError


def _load_yaml(block: str) -> Any:
    return yaml.safe_load(block)


def _load_toml(block: str) -> Any:
    return tomllib.loads(block)


FENCES: dict[str, Callable[[str], Any]] = {
    "---": _load_yaml,
    "+++": _load_toml,
}


def split_frontmatter(text: str) -> tuple[str | None, str | None, str]:
    """Split a document into its fence, front matter block and body.

    Args:
        text: Raw document content.

    Returns:
        Tuple of (fence, block, body). ``fence`` and ``block`` are None when
        the document has no front matter; ``block`` alone is None when the
        opening fence is never closed.
    """
    lines = text.splitlines(keepends=True)
    if not lines:
        return None, None, text
    fence = lines[0].rstrip()
    if fence not in FENCES:
        return None, None, text
    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip() == fence:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return fence, block, body
    return fence, None, text


def extract_frontmatter(
    text: str, path: Path | None = None
) -> tuple[dict[str, Any], str]:
    """Extract front matter from content.

    Args:
        text: Raw file content.
        path: Source file, attached to any error raised.

    Returns:
        Tuple of (front matter dict, remaining content).

    Raises:
        FrontMatterError: If the block is unterminated, does not parse,
            or does not hold a mapping.
    """
    fence, block, body = split_frontmatter(text)
    if fence is None:
        return {}, text
    if block is None:
        raise FrontMatterError(path, f"Front matter opened with {fence!r} is never closed")
    try:
        data = FENCES[fence](block)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise FrontMatterError(path, f"Invalid front matter: {exc}", exc) from exc
    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise FrontMatterError(
            path,
            f"Front matter must be a mapping of keys to values, got {type(data).__name__}",
        )
    return {str(key): value for key, value in data.items()}, body
