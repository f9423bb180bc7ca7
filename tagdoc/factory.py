"""Record creation sink fed by an external source walker."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .logging import get_logger
from .models import Diagnostic, DocRecord, SymbolContext, Tag
from .parsers.comments import parse_comment
from .rules import TagInterpreter, get_category
from .rules.categories import FILE, MEMORY, TEST_FILE
from .stores.symbol_store import SymbolStore

MODULE_CATEGORIES = frozenset({FILE, TEST_FILE, MEMORY})

logger = get_logger("factory")


class DocFactory:
    """Turns (category, comment, context) triples into stored records.

    The walker visits a file's module record before the symbols it declares;
    each later record's ``module_id`` points at that module record.
    """

    def __init__(
        self,
        store: SymbolStore | None = None,
        *,
        strict: bool = False,
        diagnostics: Optional[List[Diagnostic]] = None,
    ) -> None:
        self.store = store if store is not None else SymbolStore()
        self.diagnostics: List[Diagnostic] = diagnostics if diagnostics is not None else []
        self._interpreter = TagInterpreter(strict=strict)
        self._modules: Dict[Optional[str], int] = {}

    def create(
        self,
        category: str,
        comment: Optional[str] = None,
        *,
        context: SymbolContext,
        tags: Optional[Sequence[Tag]] = None,
    ) -> DocRecord:
        """Interpret one symbol and insert the resulting record into the store."""
        get_category(category)
        if tags is None:
            tags = parse_comment(comment)

        record = DocRecord(id=self.store.next_id(), category=category)
        if category in MODULE_CATEGORIES:
            self._modules[context.file_path] = record.id
        else:
            record.module_id = self._modules.get(context.file_path)

        self._interpreter.interpret(record, tags, context, self.diagnostics)
        self.store.insert(record)
        logger.debug("Created %s record %d (%s)", category, record.id, record.longname)
        return record

    def create_from_mapping(self, entry: Mapping[str, Any]) -> DocRecord:
        """Create a record from a ``{"category", "comment", "context"}`` mapping."""
        if not isinstance(entry, Mapping):
            raise ValueError("symbol entries must be JSON objects")
        unexpected = sorted(set(entry) - {"category", "comment", "context", "tags"})
        if unexpected:
            raise ValueError(f"Unknown symbol entry fields: {', '.join(unexpected)}")
        category = entry.get("category")
        if not isinstance(category, str):
            raise ValueError("symbol entries need a string 'category'")

        context_data = entry.get("context")
        if context_data is None:
            context_data = {}
        if not isinstance(context_data, Mapping):
            raise ValueError("'context' must be a JSON object")
        context = SymbolContext.from_dict(dict(context_data))

        tags = _tags_from(entry.get("tags"))

        comment = entry.get("comment")
        if comment is not None and not isinstance(comment, str):
            raise ValueError("'comment' must be a string or null")
        return self.create(category, comment, context=context, tags=tags)


def _tags_from(raw: Any) -> Optional[List[Tag]]:
    """Accept pre-tokenized tags as a list of `{"tag_name", "tag_value"}` objects."""
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ValueError("'tags' must be a list")
    tags: List[Tag] = []
    for item in raw:
        if not isinstance(item, Mapping) or not isinstance(item.get("tag_name"), str):
            raise ValueError("each tag needs a string 'tag_name'")
        tags.append(Tag(item["tag_name"], str(item.get("tag_value", ""))))
    return tags


__all__ = ["DocFactory", "MODULE_CATEGORIES"]
