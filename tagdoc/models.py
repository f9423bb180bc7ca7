"""Core data models shared across tagdoc components."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class Tag:
    """A single `@tag value` pair in the order it appeared in a comment."""

    tag_name: str
    tag_value: str

    def to_dict(self) -> Dict[str, str]:
        return {"tag_name": self.tag_name, "tag_value": self.tag_value}


@dataclass
class ParsedAnnotation:
    """Structured form of a `{type} [name=default] - description` annotation."""

    types: List[str]
    nullable: Optional[bool] = None
    spread: bool = False
    name: Optional[str] = None
    optional: Optional[bool] = None
    default_value: Optional[str] = None
    default_raw: Any = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "types": list(self.types),
            "nullable": self.nullable,
            "spread": self.spread,
        }
        if self.name is not None:
            data["name"] = self.name
            data["optional"] = bool(self.optional)
        if self.default_value is not None:
            data["default_value"] = self.default_value
            data["default_raw"] = self.default_raw
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass
class SymbolContext:
    """What the source walker knows about a symbol besides its comment."""

    file_path: Optional[str] = None
    abs_path: Optional[str] = None
    import_path: Optional[str] = None
    import_style: Optional[str] = None
    name: Optional[str] = None
    owner: Optional[str] = None
    static: Optional[bool] = None
    export: bool = False
    qualifier: Optional[str] = None
    is_async: bool = False
    generator: bool = False
    superclass: Optional[str] = None
    superclass_location: Optional[Tuple[int, int, int]] = None
    test_name: Optional[str] = None
    test_id: Optional[int] = None
    line_number: Optional[int] = None
    decorators: List[str] = field(default_factory=list)
    content: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SymbolContext":
        known = {item.name for item in fields(cls)}
        unexpected = sorted(set(data) - known)
        if unexpected:
            raise ValueError(f"Unknown symbol context fields: {', '.join(unexpected)}")
        values = dict(data)
        location = values.get("superclass_location")
        if location is not None:
            values["superclass_location"] = tuple(location)
        return cls(**values)


@dataclass
class Diagnostic:
    """A non-fatal problem found while interpreting a record's tags."""

    record_id: int
    file_path: Optional[str]
    tag_name: str
    tag_value: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "file_path": self.file_path,
            "tag_name": self.tag_name,
            "tag_value": self.tag_value,
            "message": self.message,
        }


@dataclass
class DocRecord:
    """Finalized attribute set for one documented symbol.

    Tag-derived fields stay ``None`` until a rule fills them. Fields prefixed
    with ``resolved_`` are owned by :class:`tagdoc.resolver.GraphResolver`.
    """

    id: int
    category: str
    module_id: Optional[int] = None
    kind: Optional[str] = None
    name: Optional[str] = None
    memberof: Optional[str] = None
    longname: Optional[str] = None
    static: bool = True
    qualifier: Optional[str] = None
    access: Optional[str] = None
    export: Optional[bool] = None
    ignore: bool = False
    undocument: bool = False
    file_path: Optional[str] = None

    description: Optional[str] = None
    params: Optional[List[ParsedAnnotation]] = None
    properties: Optional[List[ParsedAnnotation]] = None
    returns: Optional[ParsedAnnotation] = None
    type: Optional[ParsedAnnotation] = None
    typedef: Optional[ParsedAnnotation] = None
    examples: Optional[List[str]] = None
    see: Optional[List[str]] = None
    since: Optional[str] = None
    version: Optional[str] = None
    deprecated: Any = None
    experimental: Any = None
    abstract: Optional[bool] = None
    override: Optional[bool] = None
    todo: Optional[List[str]] = None
    throws: Optional[List[ParsedAnnotation]] = None
    emits: Optional[List[ParsedAnnotation]] = None
    listens: Optional[List[ParsedAnnotation]] = None
    extends: Optional[List[str]] = None
    implements: Optional[List[str]] = None
    interface: Optional[bool] = None
    external_link: Optional[str] = None
    test_targets: Optional[List[str]] = None
    test_id: Optional[int] = None

    import_path: Optional[str] = None
    import_style: Optional[str] = None
    is_async: Optional[bool] = None
    generator: Optional[bool] = None
    decorators: Optional[List[str]] = None
    line_number: Optional[int] = None
    content: Optional[str] = None

    tags_known: List[Tag] = field(default_factory=list)
    tags_unknown: List[Tag] = field(default_factory=list)

    resolved_extends_chain: Optional[List[str]] = None
    resolved_direct_subclasses: Optional[List[str]] = None
    resolved_indirect_subclasses: Optional[List[str]] = None
    resolved_indirect_implements: Optional[List[str]] = None
    resolved_direct_implemented: Optional[List[str]] = None
    resolved_indirect_implemented: Optional[List[str]] = None
    resolved_dependent_file_paths: Optional[List[str]] = None

    def __setattr__(self, key: str, value: Any) -> None:
        if key == "id" and "id" in self.__dict__:
            raise AttributeError("DocRecord.id is immutable")
        super().__setattr__(key, value)

    def to_dict(self) -> Dict[str, Any]:
        """Return a flat, JSON-serialisable view of the record."""
        data: Dict[str, Any] = {}
        for item in fields(self):
            data[item.name] = _serialise(getattr(self, item.name))
        return data


def _serialise(value: Any) -> Any:
    if isinstance(value, (ParsedAnnotation, Tag)):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialise(item) for item in value]
    return value


__all__ = [
    "Diagnostic",
    "DocRecord",
    "ParsedAnnotation",
    "SymbolContext",
    "Tag",
]
