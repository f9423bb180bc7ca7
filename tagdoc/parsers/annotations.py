"""Parser for `{type} [name=default] - description` annotation values.

The parser is pure: it never touches the filesystem or shared state, so every
behaviour can be exercised with plain string fixtures.
"""

from __future__ import annotations

import ast
import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional

from ..models import ParsedAnnotation

WILDCARD_TYPE = "*"

# `@` is excluded so that an inline `{@link Foo}` is never taken for a type.
_TYPE_CLAUSE = re.compile(r"^\{([^@]*?)\}(\s+|$)")
_NAME_TOKEN = re.compile(r"^(\S+)\s*")
_DESCRIPTION = re.compile(r"^(?:-(?:\s+|$))?(.*)$", re.DOTALL)
_GENERIC_UNION = re.compile(r"<.*?\|.*?>")
_SPREAD_UNION = re.compile(r"^\.\.\.\(.*?\)")


class AnnotationError(ValueError):
    """Raised when an annotation value cannot be parsed."""


class MalformedType(AnnotationError):
    """Raised when a type clause yields an empty alternative."""


class MalformedParam(AnnotationError):
    """Raised when a requested clause cannot be extracted."""


@dataclass
class AnnotationClauses:
    """Raw clause substrings cut from an annotation value."""

    type_text: Optional[str] = None
    name_text: Optional[str] = None
    description: Optional[str] = None


def split_clauses(
    value: str,
    *,
    with_type: bool = True,
    with_name: bool = True,
    with_desc: bool = True,
) -> AnnotationClauses:
    """Cut the requested clauses out of ``value`` without interpreting them."""
    remaining = value.strip()
    clauses = AnnotationClauses()

    if with_type:
        match = _TYPE_CLAUSE.match(remaining)
        if match:
            clauses.type_text = match.group(1)
            remaining = remaining[match.end():]
        else:
            clauses.type_text = WILDCARD_TYPE

    if with_name:
        if remaining.startswith("["):
            name_text = _bracketed_prefix(remaining)
            if name_text is None:
                raise MalformedParam(f"Unbalanced optional name in annotation: {value!r}")
            clauses.name_text = name_text
            remaining = remaining[len(name_text):].strip()
        else:
            match = _NAME_TOKEN.match(remaining)
            if not match:
                raise MalformedParam(f"Missing name in annotation: {value!r}")
            clauses.name_text = match.group(1)
            remaining = remaining[match.end():]

    if with_desc:
        match = _DESCRIPTION.match(remaining)
        clauses.description = match.group(1).strip() if match else remaining

    return clauses


def refine(clauses: AnnotationClauses) -> ParsedAnnotation:
    """Interpret raw clauses into a :class:`ParsedAnnotation`."""
    type_text = clauses.type_text
    result = ParsedAnnotation(types=[WILDCARD_TYPE])

    if type_text is not None:
        if type_text.startswith("?"):
            result.nullable = True
        elif type_text.startswith("!"):
            result.nullable = False
        if type_text[:1] in ("?", "!"):
            type_text = type_text[1:]
        result.types = _split_types(type_text)
        bare = _strip_parens(type_text) if type_text.startswith("(") else type_text
        result.spread = bare.startswith("...")

    if any(not alternative for alternative in result.types):
        raise MalformedType(
            f"Empty type found name={clauses.name_text!r} desc={clauses.description!r}"
        )

    name_text = clauses.name_text
    if name_text:
        result.optional = name_text.startswith("[")
        if result.optional:
            name_text = _strip_brackets(name_text)
        name, separator, default = name_text.partition("=")
        if separator:
            result.default_value = default.strip()
            result.default_raw = parse_literal(result.default_value)
        result.name = name.strip()

    result.description = clauses.description
    return result


def parse_annotation(
    value: str,
    *,
    with_type: bool = True,
    with_name: bool = True,
    with_desc: bool = True,
) -> ParsedAnnotation:
    """Split and refine ``value`` in one step."""
    return refine(
        split_clauses(value, with_type=with_type, with_name=with_name, with_desc=with_desc)
    )


def parse_literal(text: str) -> Any:
    """Best-effort literal parse of a default value, falling back to ``text``."""
    try:
        return json.loads(text)
    except ValueError:
        pass
    try:
        return ast.literal_eval(text)
    except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError):
        return text


def _split_types(type_text: str) -> List[str]:
    if type_text.startswith("{"):
        return [type_text]
    if type_text.startswith("("):
        return _strip_parens(type_text).split("|")
    if "|" in type_text:
        if _GENERIC_UNION.search(type_text) or _SPREAD_UNION.match(type_text):
            # Left whole for a consumer that understands generic / spread unions.
            return [type_text]
        return type_text.split("|")
    return [type_text]


def _strip_parens(text: str) -> str:
    text = text[1:] if text.startswith("(") else text
    return text[:-1] if text.endswith(")") else text


def _strip_brackets(text: str) -> str:
    text = text[1:] if text.startswith("[") else text
    return text[:-1] if text.endswith("]") else text


def _bracketed_prefix(text: str) -> Optional[str]:
    depth = 0
    for index, char in enumerate(text):
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if depth == 0:
            return text[: index + 1]
    return None


__all__ = [
    "AnnotationClauses",
    "AnnotationError",
    "MalformedParam",
    "MalformedType",
    "WILDCARD_TYPE",
    "parse_annotation",
    "parse_literal",
    "refine",
    "split_clauses",
]
