"""Selection-text extraction from source files."""

from __future__ import annotations

from pathlib import Path


def read_selection(file_path: Path | str, line: int, start_column: int, end_column: int) -> str:
    """Return the text of ``line`` (one origin) between two zero-origin columns.

    Read failures propagate to the caller; nothing is retried.
    """
    with open(file_path, encoding="utf-8") as handle:
        code = handle.read()
    lines = code.split("\n")
    if line < 1 or line > len(lines):
        raise ValueError(f"Line {line} is outside {file_path} ({len(lines)} lines)")
    return lines[line - 1][start_column:end_column]


__all__ = ["read_selection"]
