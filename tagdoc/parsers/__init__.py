"""Comment and annotation parsers."""

from .annotations import (
    AnnotationClauses,
    AnnotationError,
    MalformedParam,
    MalformedType,
    parse_annotation,
    refine,
    split_clauses,
)
from .comments import parse_comment

__all__ = [
    "AnnotationClauses",
    "AnnotationError",
    "MalformedParam",
    "MalformedType",
    "parse_annotation",
    "parse_comment",
    "refine",
    "split_clauses",
]
