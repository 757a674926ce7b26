"""Stylesheet processing for Neur.

Every stylesheet goes through three steps:

1. ``check_stylesheet`` scans the source and rejects text that cannot be a
   valid stylesheet (unbalanced braces, unterminated strings or comments).
2. ``csscompressor.compress`` applies structural minification: comments,
   redundant units, zero values, colours and empty rules are collapsed.
3. ``print_stylesheet`` either keeps the compact text or expands it to one
   declaration per line, depending on the ``minify`` setting.

Functions:
    check_stylesheet: Validate stylesheet source.
    print_stylesheet: Render compressed CSS compact or expanded.
    transform_stylesheet: Run all three steps for one file.
"""

from __future__ import annotations

from pathlib import Path

import csscompressor

from .errors import StylesheetError

INDENT = "  "


def _line_of(text: str, index: int) -> int:
    return text.count("\n", 0, index) + 1


def check_stylesheet(text: str, path: Path | None = None) -> None:
    """Validate the block structure of a stylesheet.

    Args:
        text: Stylesheet source.
        path: Source file, attached to any error raised.

    Raises:
        StylesheetError: On an unterminated comment or string, a closing
            brace without an opening one, or an unclosed block.
    """
    depth = 0
    openings: list[int] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            if end == -1:
                raise StylesheetError(
                    path, f"Unterminated comment on line {_line_of(text, index)}"
                )
            index = end + 2
            continue
        if char == "\\":
            index += 2
            continue
        if char in "\"'":
            end = index + 1
            while end < length and text[end] != char:
                if text[end] == "\\":
                    end += 1
                elif text[end] == "\n":
                    break
                end += 1
            if end >= length or text[end] != char:
                raise StylesheetError(
                    path, f"Unterminated string on line {_line_of(text, index)}"
                )
            index = end + 1
            continue
        if char == "{":
            depth += 1
            openings.append(index)
        elif char == "}":
            if depth == 0:
                raise StylesheetError(
                    path, f"Unexpected '}}' on line {_line_of(text, index)}"
                )
            depth -= 1
            openings.pop()
        index += 1
    if depth:
        raise StylesheetError(
            path, f"Unclosed block opened on line {_line_of(text, openings[-1])}"
        )


def _expand(css: str) -> str:
    """Expand compressed CSS to one declaration per line."""
    lines: list[str] = []
    current: list[str] = []
    depth = 0
    parens = 0
    quote: str | None = None

    def flush() -> None:
        statement = "".join(current).strip()
        current.clear()
        if statement:
            lines.append(f"{INDENT * depth}{statement}")

    index = 0
    while index < len(css):
        char = css[index]
        if quote:
            current.append(char)
            if char == "\\" and index + 1 < len(css):
                current.append(css[index + 1])
                index += 1
            elif char == quote:
                quote = None
        elif css.startswith("/*", index):
            end = css.find("*/", index + 2)
            end = len(css) if end == -1 else end + 2
            current.append(css[index:end])
            index = end
            continue
        elif char == "\\":
            current.append(css[index : index + 2])
            index += 2
            continue
        elif char in "\"'":
            quote = char
            current.append(char)
        elif char == "(":
            parens += 1
            current.append(char)
        elif char == ")":
            parens = max(parens - 1, 0)
            current.append(char)
        elif parens:
            current.append(char)
        elif char == "{":
            current.append(" {")
            flush()
            depth += 1
        elif char == ";":
            current.append(";")
            flush()
        elif char == "}":
            if current and "".join(current).strip():
                current.append(";")
            flush()
            depth = max(depth - 1, 0)
            lines.append(f"{INDENT * depth}}}")
        else:
            current.append(char)
        index += 1
    flush()
    return "\n".join(lines) + "\n" if lines else ""


def print_stylesheet(css: str, minify: bool) -> str:
    """Print compressed CSS.

    Args:
        css: Output of ``csscompressor.compress``.
        minify: Keep the compact form instead of expanding it.

    Returns:
        Stylesheet text ready to be written.
    """
    if minify:
        return css
    return _expand(css)


def transform_stylesheet(text: str, minify: bool, path: Path | None = None) -> str:
    """Check, minify and print one stylesheet.

    Args:
        text: Stylesheet source.
        minify: Whether to compact whitespace in the printed output.
        path: Source file, attached to any error raised.

    Returns:
        The transformed stylesheet.

    Raises:
        StylesheetError: If the stylesheet is malformed or cannot be printed.
    """
    check_stylesheet(text, path)
    try:
        compressed = csscompressor.compress(text)
    except (ValueError, IndexError) as exc:
        raise StylesheetError(path, f"Could not minify stylesheet: {exc}", exc) from exc
    return print_stylesheet(compressed, minify)
