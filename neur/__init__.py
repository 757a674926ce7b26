"""Neur static site generator.

This package mirrors a source directory into an output directory, compiling
stylesheets, rendering Jinja2 pages and turning Markdown documents into HTML
pages wrapped in per-directory layouts. Every other file is copied unchanged.

The main entry point is the CLI module, which resolves the configuration
and runs the generator once.
"""

__all__ = ["__version__"]
__version__ = "0.3.0"
