"""Per-category tag interpretation for documentation records."""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..models import Diagnostic, DocRecord, SymbolContext, Tag
from .categories import CATEGORIES, CategorySpec, get_category
from .interpreter import (
    BOOTSTRAP_RULES,
    Rule,
    RuleContext,
    RuleDependencyError,
    RuleEvaluator,
    UndeclaredRule,
)


class TagInterpreter:
    """Populates a record's attributes from its tags and symbol context."""

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict

    def interpret(
        self,
        record: DocRecord,
        tags: Sequence[Tag],
        symbol: SymbolContext,
        diagnostics: Optional[List[Diagnostic]] = None,
    ) -> DocRecord:
        spec = get_category(record.category)
        RuleEvaluator(
            spec.rules,
            record,
            tags,
            symbol,
            strict=self.strict,
            diagnostics=diagnostics,
        ).run()
        record.tags_known, record.tags_unknown = partition_tags(spec, tags)
        return record


def partition_tags(spec: CategorySpec, tags: Sequence[Tag]) -> tuple[List[Tag], List[Tag]]:
    """Split ``tags`` into those the category handles and the rest."""
    known: List[Tag] = []
    unknown: List[Tag] = []
    for tag in tags:
        (known if tag.tag_name in spec.tags else unknown).append(tag)
    return known, unknown


__all__ = [
    "BOOTSTRAP_RULES",
    "CATEGORIES",
    "CategorySpec",
    "Rule",
    "RuleContext",
    "RuleDependencyError",
    "RuleEvaluator",
    "TagInterpreter",
    "UndeclaredRule",
    "get_category",
    "partition_tags",
]
