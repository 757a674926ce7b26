"""Configuration loading for Neur.

Settings come from three layers, highest precedence first:

1. Command-line options.
2. A TOML settings file: the one named with ``--config``, otherwise
   ``neur.toml`` in the working directory when it exists.
3. Built-in defaults (``src``, ``dist``, no minification).

Key functions:
- load_options: Read the recognised keys from a TOML settings file.
- resolve_config: Merge all layers into a validated Config.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError

CONFIG_FILENAME = "neur.toml"

DEFAULT_CONFIG: dict[str, Any] = {
    "source": "src",
    "output": "dist",
    "minify": False,
}

_OPTION_TYPES: dict[str, type] = {
    "source": str,
    "output": str,
    "minify": bool,
}


@dataclass(frozen=True)
class Config:
    """Validated settings for one generator run.

    Attributes:
        source: Directory to read the site from.
        output: Directory to write the generated site to.
        minify: Whether to compact generated HTML and CSS.
    """

    source: Path
    output: Path
    minify: bool = False

    def __post_init__(self):
        source = self.source.resolve()
        output = self.output.resolve()
        if output.is_relative_to(source):
            raise ConfigError("Output directory can't be under source directory.")
        if source.is_relative_to(output):
            raise ConfigError("Source directory can't be under output directory.")


def load_options(path: Path) -> dict[str, Any]:
    """Load settings from a TOML file.

    Args:
        path: Settings file to read.

    Returns:
        Dictionary holding the recognised keys found in the file.

    Raises:
        ConfigError: If the file cannot be read, is not valid TOML, or gives
            a recognised key a value of the wrong type.
    """
    try:
        with open(path, "rb") as f:
            loaded = tomllib.load(f)
    except OSError as exc:
        raise ConfigError(f"Could not read {path}: {exc.strerror or exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc

    options: dict[str, Any] = {}
    for key, expected in _OPTION_TYPES.items():
        if key not in loaded:
            continue
        value = loaded[key]
        if not isinstance(value, expected):
            raise ConfigError(
                f"{path}: '{key}' must be a {expected.__name__}, "
                f"got {type(value).__name__}"
            )
        options[key] = value
    return options


def resolve_config(
    source: Path | None = None,
    output: Path | None = None,
    minify: bool | None = None,
    config_path: Path | None = None,
    cwd: Path | None = None,
) -> Config:
    """Merge command-line values, the settings file and defaults.

    Args:
        source: Source directory given on the command line.
        output: Output directory given on the command line.
        minify: Minify flag given on the command line.
        config_path: Explicit settings file; it must exist.
        cwd: Directory searched for ``neur.toml``, the current one by default.

    Returns:
        The validated Config.

    Raises:
        ConfigError: If the settings file is unusable or the directories
            are nested inside each other.
    """
    cwd = Path.cwd() if cwd is None else cwd
    options = DEFAULT_CONFIG.copy()

    if config_path is not None:
        options.update(load_options(config_path))
    elif (cwd / CONFIG_FILENAME).exists():
        options.update(load_options(cwd / CONFIG_FILENAME))

    cli_values = {"source": source, "output": output, "minify": minify}
    options.update({k: v for k, v in cli_values.items() if v is not None})

    return Config(
        source=Path(options["source"]),
        output=Path(options["output"]),
        minify=bool(options["minify"]),
    )
