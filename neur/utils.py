"""Utility functions for Neur.

This module contains the small path helpers shared by the generator,
the template engine and the layout registry.

Key functions:
    classify: Map a file to the transform that handles it.
    is_partial: Check whether a markup file is a partial or layout.
    mirror_path: Re-root a source path under the output directory.
    template_name: Address a source file in the template namespace.
    iter_entries: List a directory the way the walker sees it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

STYLESHEET_SUFFIX = ".css"
MARKUP_SUFFIX = ".html"
DOCUMENT_SUFFIX = ".md"


class FileKind(Enum):
    """Closed set of transforms a source file can be routed to."""

    STYLESHEET = "stylesheet"
    MARKUP = "markup"
    DOCUMENT = "document"
    OTHER = "other"


_KIND_BY_SUFFIX = {
    STYLESHEET_SUFFIX: FileKind.STYLESHEET,
    MARKUP_SUFFIX: FileKind.MARKUP,
    DOCUMENT_SUFFIX: FileKind.DOCUMENT,
}


def classify(path: Path) -> FileKind:
    """Return the kind of transform that handles a file.

    Matching is case-sensitive on the last suffix only, so ``page.HTML``
    and ``archive.tar.css.bak`` are both copied verbatim.

    Args:
        path: Path to the source file.

    Returns:
        The FileKind for the file's extension.

    Examples:
        >>> classify(Path("site/post.md"))
        <FileKind.DOCUMENT: 'document'>

        >>> classify(Path("site/logo.png"))
        <FileKind.OTHER: 'other'>
    """
    return _KIND_BY_SUFFIX.get(path.suffix, FileKind.OTHER)


def is_partial(path: Path) -> bool:
    """Check if a markup file is a partial rather than a page.

    A name with exactly one leading underscore marks a partial or layout.
    Two or more leading underscores escape the rule and mark a page again.

    Args:
        path: Path to check.

    Returns:
        True if the file must not be rendered to the output directory.
    """
    name = path.name
    return name.startswith("_") and not name.startswith("__")


def mirror_path(path: Path, source: Path, output: Path) -> Path:
    """Re-root a path from the source directory to the output directory.

    Args:
        path: Path inside ``source``.
        source: Source root directory.
        output: Output root directory.

    Returns:
        The corresponding path inside ``output``.
    """
    return output / path.relative_to(source)


def template_name(path: Path, source: Path) -> str:
    """Return the template lookup name of a file under the source root.

    Args:
        path: Path inside ``source``.
        source: Source root directory.

    Returns:
        Relative path with forward slashes, e.g. ``blog/_template.html``.
    """
    return path.relative_to(source).as_posix()


def iter_entries(directory: Path) -> Iterator[Path]:
    """Yield the directories and regular files inside a directory.

    Entries come back in name order. Symlinks and special files
    (sockets, FIFOs, devices) are skipped.

    Args:
        directory: Directory to list.

    Yields:
        Paths of sub-directories and regular files.
    """
    for entry in sorted(directory.iterdir()):
        if entry.is_symlink():
            logger.debug("Skipping symlink %s", entry)
            continue
        if entry.is_dir() or entry.is_file():
            yield entry
        else:
            logger.debug("Skipping special file %s", entry)
