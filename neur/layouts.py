"""Layout discovery for Neur.

A directory provides a layout when it holds a file named ``_template.html``.
Every content document is rendered inside the layout of its own directory,
or of the nearest ancestor directory that has one.

Layouts are discovered in a pass over the whole source tree before any
document is rendered, so the order in which the generator visits entries
never decides which layout a document gets.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from .utils import iter_entries, template_name

logger = logging.getLogger(__name__)

LAYOUT_FILENAME = "_template.html"


class LayoutRegistry:
    """Set of directories that provide a layout template.

    Attributes:
        source: Source directory; no lookup climbs above it.
    """

    def __init__(self, source: Path):
        self.source = source
        self._directories: set[Path] = set()

    def __contains__(self, directory: object) -> bool:
        return directory in self._directories

    def __iter__(self) -> Iterator[Path]:
        return iter(sorted(self._directories))

    def __len__(self) -> int:
        return len(self._directories)

    def register(self, directory: Path) -> None:
        """Record that ``directory`` holds a layout file."""
        if directory not in self._directories:
            logger.debug("Registered layout in %s", directory)
            self._directories.add(directory)

    def discover(self, directory: Path | None = None) -> None:
        """Register every layout found below ``directory``.

        Args:
            directory: Directory to scan, the source root by default.
        """
        directory = self.source if directory is None else directory
        for entry in iter_entries(directory):
            if entry.is_dir():
                self.discover(entry)
            elif entry.name == LAYOUT_FILENAME:
                self.register(entry.parent)

    def resolve(self, directory: Path) -> str | None:
        """Find the layout that applies to documents in ``directory``.

        Args:
            directory: Directory containing the document.

        Returns:
            Template name of the nearest layout, or None if neither the
            directory nor any ancestor up to the source root has one.
        """
        for candidate in (directory, *directory.parents):
            if candidate in self._directories:
                return template_name(candidate / LAYOUT_FILENAME, self.source)
            if candidate == self.source:
                break
        return None
