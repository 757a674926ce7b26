"""Error types raised by Neur.

Errors are split by phase so the CLI can tell the user whether the
configuration or the site itself is broken. Generation errors carry the
source file that caused them whenever one is known.
"""

from __future__ import annotations

from pathlib import Path


class NeurError(Exception):
    """Base class for every error Neur reports to the user."""


class ConfigError(NeurError):
    """Raised when the configuration cannot be loaded or is invalid."""


class GeneratorError(NeurError):
    """Error during site generation with file context.

    Attributes:
        source_path: Path to the source file that caused the error, if known.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path | None,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        if source_path is None:
            super().__init__(message)
        else:
            super().__init__(f"{source_path}: {message}")


class FileSystemError(GeneratorError):
    """Creating, reading, writing or copying a file failed."""


class StylesheetError(GeneratorError):
    """A stylesheet could not be parsed or printed."""


class FrontMatterError(GeneratorError):
    """A document's front matter block is malformed."""


class TemplateRenderError(GeneratorError):
    """The template engine failed to compile or render a template."""
