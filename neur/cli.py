"""Command-line interface for Neur.

This module defines the ``neur`` command using the Click framework. The
command resolves the configuration, generates the site once and reports
failures with the phase, and when known the file, that caused them.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .errors import ConfigError, GeneratorError


@click.command()
@click.version_option(version=__version__, prog_name="neur")
@click.option(
    "-s",
    "--source",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory to read the site from (default: src).",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory to write the site to (default: dist).",
)
@click.option(
    "-m",
    "--minify/--no-minify",
    default=None,
    help="Compact generated HTML and CSS.",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Settings file to use instead of ./neur.toml.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log every processed file.")
def cli(
    source: Path | None,
    output: Path | None,
    minify: bool | None,
    config_path: Path | None,
    verbose: bool,
):
    """Generate a static site from a source directory."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("neur").setLevel(logging.DEBUG if verbose else logging.WARNING)
    from .config import resolve_config
    from .generator import Generator

    try:
        config = resolve_config(
            source=source, output=output, minify=minify, config_path=config_path
        )
    except ConfigError as exc:
        click.echo(
            click.style("While loading the configuration:", fg="red", bold=True),
            err=True,
        )
        click.echo(click.style(f"  {exc}", fg="white"), err=True)
        raise SystemExit(1) from None

    try:
        result = Generator(config).run()
    except GeneratorError as exc:
        click.echo(
            click.style("While generating the site:", fg="red", bold=True), err=True
        )
        if exc.source_path is not None:
            click.echo(click.style(f"  File: {exc.source_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    count = len(result.written)
    noun = "file" if count == 1 else "files"
    click.echo(f"Generated {count} {noun} into {result.output_dir}")


def main():
    """Entry point for the CLI application."""
    cli()
