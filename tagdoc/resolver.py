"""Whole-store resolution passes run after every record has been created."""

from __future__ import annotations

import posixpath
import re
from typing import List, Optional, Set, Tuple

from .config import ResolveConfig
from .logging import get_logger
from .models import DocRecord
from .rules.categories import CLASS, CLASS_MEMBER, CLASS_METHOD, CLASS_PROPERTY, FILE
from .stores.symbol_store import Not, Regex, SymbolStore

logger = get_logger("resolver")

PRIVATE_PREFIX = "_"

_MEMBER_CATEGORIES = (CLASS_MEMBER, CLASS_PROPERTY)
_ACCESSOR_QUALIFIERS = ("get", "method", "set")
_DERIVED_FIELDS = (
    "resolved_extends_chain",
    "resolved_direct_subclasses",
    "resolved_indirect_subclasses",
    "resolved_indirect_implements",
    "resolved_direct_implemented",
    "resolved_indirect_implemented",
    "resolved_dependent_file_paths",
)


class _SeenGuard:
    """Tracks which derived lists were already reset during one resolve run."""

    def __init__(self) -> None:
        self._seen: Set[Tuple[int, str]] = set()

    def append(self, record: DocRecord, attribute: str, *values: str) -> None:
        key = (record.id, attribute)
        if key not in self._seen:
            self._seen.add(key)
            setattr(record, attribute, [])
        getattr(record, attribute).extend(values)

    def append_unique(self, record: DocRecord, attribute: str, *values: str) -> None:
        self.append(record, attribute)
        current = getattr(record, attribute)
        for value in values:
            if value not in current:
                current.append(value)


class GraphResolver:
    """Resolves inheritance, visibility and duplication across a store."""

    def __init__(self, config: Optional[ResolveConfig] = None) -> None:
        self.config = config or ResolveConfig()

    def resolve(self, store: SymbolStore, *, log: bool = True) -> SymbolStore:
        """Run every pass in order over ``store`` and return it."""
        # Common path removal rewrites the names the later passes match on.
        if self.config.remove_common_path:
            self._log(log, "resolve: removing common path")
            self._resolve_common_path(store)

        self._log(log, "resolve: extends chain")
        self._resolve_extends_chain(store)

        self._log(log, "resolve: necessary")
        self._resolve_necessary(store)

        self._log(log, "resolve: access")
        self._resolve_access(store)

        if not self.config.keep_unexported:
            self._log(log, "resolve: unexported identifier")
            self._resolve_unexported(store)

        if not self.config.keep_undocumented:
            self._log(log, "resolve: undocumented identifier")
            self._resolve_undocumented(store)

        self._log(log, "resolve: duplication")
        self._resolve_duplication(store)

        self._log(log, "resolve: ignore")
        self._resolve_ignore(store)
        return store

    @staticmethod
    def _log(enabled: bool, message: str) -> None:
        if enabled:
            logger.info(message)

    # ------------------------------------------------------------------
    # Passes

    def _resolve_common_path(self, store: SymbolStore) -> None:
        records = [
            record
            for record in store.find({"kind": Not(["memory", "external"])})
            if record.file_path
        ]
        common = common_directory([record.file_path for record in records])
        if not common:
            return

        logger.info("common path removed: %s", common)
        for record in records:
            for attribute in ("longname", "memberof", "name"):
                value = getattr(record, attribute)
                if value and value.startswith(common):
                    setattr(record, attribute, value[len(common):])
            for attribute in ("extends", "implements", "test_targets"):
                references = getattr(record, attribute)
                if references:
                    setattr(record, attribute, [_strip_prefix(name, common) for name in references])

    def _resolve_extends_chain(self, store: SymbolStore) -> None:
        for record in store:
            for attribute in _DERIVED_FIELDS:
                setattr(record, attribute, None)

        seen = _SeenGuard()
        classes = store.find({"category": CLASS})

        for record in classes:
            self._extends_chain(store, record, seen)
            self._implemented(store, record, seen)

        for record in classes:
            if not record.resolved_dependent_file_paths:
                continue
            file_record = _first(store.find({"category": FILE, "file_path": record.file_path}))
            if file_record is None:
                continue
            seen.append_unique(
                file_record, "resolved_dependent_file_paths", *record.resolved_dependent_file_paths
            )

    def _extends_chain(self, store: SymbolStore, origin: DocRecord, seen: _SeenGuard) -> None:
        if not origin.extends:
            return

        chain: List[str] = []
        current = origin
        while current.extends:
            target = current.extends[0]
            parent = _first(store.find_by_name(target))
            if parent is None:
                chain.append(target)
                break
            if parent.longname == origin.longname or parent.longname in chain:
                break
            chain.append(parent.longname)
            current = parent

        if not chain:
            return

        direct = _first(store.find_by_name(chain[0]))
        if direct is not None:
            seen.append(direct, "resolved_direct_subclasses", origin.longname)
            self._add_dependent(direct, origin, seen)

        for longname in chain[1:]:
            ancestor = _first(store.find_by_name(longname))
            if ancestor is not None:
                seen.append(ancestor, "resolved_indirect_subclasses", origin.longname)
                self._add_dependent(ancestor, origin, seen)

        for longname in chain:
            ancestor = _first(store.find_by_name(longname))
            if ancestor is not None and ancestor.implements:
                seen.append(origin, "resolved_indirect_implements", *ancestor.implements)

        origin.resolved_extends_chain = list(reversed(chain))

    def _implemented(self, store: SymbolStore, record: DocRecord, seen: _SeenGuard) -> None:
        for longname in record.implements or []:
            interface = _first(store.find_by_name(longname))
            if interface is not None:
                seen.append(interface, "resolved_direct_implemented", record.longname)
                self._add_dependent(interface, record, seen)

        for longname in record.resolved_indirect_implements or []:
            interface = _first(store.find_by_name(longname))
            if interface is not None:
                seen.append(interface, "resolved_indirect_implemented", record.longname)
                self._add_dependent(interface, record, seen)

    @staticmethod
    def _add_dependent(target: DocRecord, dependent: DocRecord, seen: _SeenGuard) -> None:
        paths = [dependent.file_path] if dependent.file_path else []
        seen.append_unique(target, "resolved_dependent_file_paths", *paths)

    def _resolve_necessary(self, store: SymbolStore) -> None:
        def promote(record: DocRecord) -> Optional[DocRecord]:
            children = [
                *(record.resolved_direct_subclasses or []),
                *(record.resolved_indirect_subclasses or []),
                *(record.resolved_direct_implemented or []),
                *(record.resolved_indirect_implemented or []),
            ]
            for name in children:
                child = _first(store.find({"longname": name}))
                if child is not None and not child.ignore and child.export:
                    record.export = True
                    return record
            return None

        store.query({"export": False}).update(promote, in_place=True)

    def _resolve_access(self, store: SymbolStore) -> None:
        allowed = list(self.config.access)
        auto_private = self.config.auto_private

        def apply(record: DocRecord) -> DocRecord:
            if not record.access:
                private = auto_private and (record.name or "").startswith(PRIVATE_PREFIX)
                record.access = "private" if private else "public"
            if record.access not in allowed:
                record.ignore = True
            return record

        store.query().update(apply, in_place=True)

    def _resolve_unexported(self, store: SymbolStore) -> None:
        store.query({"export": False}).update({"ignore": True})

    def _resolve_undocumented(self, store: SymbolStore) -> None:
        store.query({"undocument": True}).update({"ignore": True})

    def _resolve_duplication(self, store: SymbolStore) -> None:
        ignored: Set[int] = set()
        for record in store.find({"category": _MEMBER_CATEGORIES}):
            accessors = store.find(
                {
                    "longname": record.longname,
                    "category": CLASS_METHOD,
                    "qualifier": _ACCESSOR_QUALIFIERS,
                }
            )
            if accessors:
                ignored.add(record.id)
                continue

            duplicates = store.find({"longname": record.longname, "category": _MEMBER_CATEGORIES})
            if len(duplicates) > 1:
                ids = sorted(duplicate.id for duplicate in duplicates)
                ignored.update(ids[1:])

        if ignored:
            store.query({"id": sorted(ignored)}).update({"ignore": True})

    def _resolve_ignore(self, store: SymbolStore) -> None:
        removed = 0
        for record in store.find({"ignore": True}):
            if record.longname:
                pattern = re.compile(f"^{re.escape(record.longname)}[.~#]")
                removed += store.query({"longname": Regex(pattern)}).remove()
        removed += store.query({"ignore": True}).remove()

        # Relations were derived with the removed records still present.
        if removed:
            self._resolve_extends_chain(store)


def common_directory(paths: List[str]) -> str:
    """Return the directory prefix (with trailing ``/``) shared by ``paths``."""
    if not paths:
        return ""
    split: List[List[str]] = [posixpath.dirname(path).split("/") for path in paths]
    shared: List[str] = []
    for parts in zip(*split):
        if any(part != parts[0] for part in parts) or not parts[0]:
            break
        shared.append(parts[0])
    return "/".join(shared) + "/" if shared else ""


def _strip_prefix(value: str, prefix: str) -> str:
    return value[len(prefix):] if value.startswith(prefix) else value


def _first(records: List[DocRecord]) -> Optional[DocRecord]:
    return records[0] if records else None


__all__ = ["GraphResolver", "PRIVATE_PREFIX", "common_directory"]
