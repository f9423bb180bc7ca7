"""Tokenizer turning annotation comment bodies into ordered tag lists."""

from __future__ import annotations

import re
from typing import List, Optional

from ..models import Tag

TAG_MARKER = "@"
DESCRIPTION_TAG = "@desc"

# Placeholder value for nullary tags such as `@interface`; never survives
# into an emitted tag value.
_NULLARY_SENTINEL = "\x00nullary\x00"

_LINE_HEAD_SPACE = re.compile(r"^[\t ]*", re.MULTILINE)
_FIRST_STAR = re.compile(r"^\*[\t ]?")
_LINE_HEAD_STAR = re.compile(r"^\*[\t ]?", re.MULTILINE)
_TAG_START = re.compile(r"^(@\w+)(?:[\t ](.*))?$")


def normalise_comment(comment: str) -> str:
    """Strip comment decoration (`*` gutters, indentation, trailing blanks)."""
    text = comment.replace("\r\n", "\n")
    text = _LINE_HEAD_SPACE.sub("", text)
    text = _FIRST_STAR.sub("", text, count=1)
    text = _LINE_HEAD_STAR.sub("", text)
    text = text.strip(" \t\n")
    if text and not text.startswith(TAG_MARKER):
        text = f"{DESCRIPTION_TAG} {text}"
    return text


def parse_comment(comment: Optional[str]) -> List[Tag]:
    """Parse a raw comment body into `Tag` objects.

    Malformed or missing input never raises; it yields an empty or partial list.
    """
    if comment is None or not comment.strip():
        return []

    text = normalise_comment(comment)
    if not text:
        return []

    tags: List[Tag] = []
    current_name: Optional[str] = None
    current_lines: List[str] = []

    for line in text.split("\n"):
        match = _TAG_START.match(line)
        if match:
            if current_name is not None:
                tags.append(_build_tag(current_name, current_lines))
            current_name = match.group(1)
            first = match.group(2)
            current_lines = [_NULLARY_SENTINEL if first is None else first]
        elif current_name is not None:
            current_lines.append(line)

    if current_name is not None:
        tags.append(_build_tag(current_name, current_lines))
    return tags


def _build_tag(name: str, lines: List[str]) -> Tag:
    value = "\n".join(lines).replace(_NULLARY_SENTINEL, "", 1)
    return Tag(tag_name=name, tag_value=value.strip())


__all__ = ["DESCRIPTION_TAG", "TAG_MARKER", "normalise_comment", "parse_comment"]
