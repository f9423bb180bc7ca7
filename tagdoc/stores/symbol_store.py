"""In-memory, queryable collection of documentation records."""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Pattern, Set, Union

from ..models import DocRecord

Predicate = Mapping[str, Any]
Updater = Union[Callable[[DocRecord], Optional[DocRecord]], Mapping[str, Any]]

_MEMBERSHIP_TYPES = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class Not:
    """Matches when the wrapped value does not."""

    value: Any


class Regex:
    """Matches string fields where ``pattern`` is found."""

    def __init__(self, pattern: Union[str, Pattern[str]]) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def __repr__(self) -> str:
        return f"Regex({self.pattern.pattern!r})"


def value_matches(actual: Any, expected: Any) -> bool:
    """Evaluate one field of a predicate against a record value."""
    if isinstance(expected, Not):
        return not value_matches(actual, expected.value)
    if isinstance(expected, Regex):
        return isinstance(actual, str) and expected.pattern.search(actual) is not None
    if isinstance(expected, _MEMBERSHIP_TYPES):
        return any(_equals(actual, item) for item in expected)
    return _equals(actual, expected)


def record_matches(record: DocRecord, predicate: Predicate) -> bool:
    """AND every field of ``predicate`` against ``record``."""
    return all(value_matches(getattr(record, name, None), expected) for name, expected in predicate.items())


def _equals(actual: Any, expected: Any) -> bool:
    # Keep `True == 1` and `False == 0` from matching across types.
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    return actual == expected


class Cursor:
    """Deferred selection over a store; matching happens when an action runs."""

    def __init__(self, store: "SymbolStore", predicates: tuple[Predicate, ...]) -> None:
        self._store = store
        self._predicates = predicates

    def records(self) -> List[DocRecord]:
        return self._store.find(*self._predicates)

    def __iter__(self) -> Iterator[DocRecord]:
        return iter(self.records())

    def __len__(self) -> int:
        return len(self.records())

    def update(self, updater: Updater, *, in_place: bool = False) -> int:
        """Apply ``updater`` to every matched record and return how many changed.

        A mapping sets attributes directly. A callable receives a working copy;
        returning it commits the copy onto the stored record, returning
        ``None`` discards it. With ``in_place`` the callable receives the stored
        record itself and must only mutate it when it returns it.
        """
        changed = 0
        for record in self.records():
            if isinstance(updater, Mapping):
                for key, value in updater.items():
                    setattr(record, key, value)
                changed += 1
                continue

            working = record if in_place else copy.deepcopy(record)
            result = updater(working)
            if result is None:
                continue
            if not isinstance(result, DocRecord) or result.id != record.id:
                raise ValueError("update callbacks must return the record they were given or None")
            if result is record:
                changed += 1
                continue
            for key, value in vars(result).items():
                if key != "id":
                    setattr(record, key, value)
            changed += 1
        return changed

    def remove(self) -> int:
        """Delete every matched record immediately and return the count."""
        removed = self.records()
        for record in removed:
            self._store.discard(record.id)
        return len(removed)


class SymbolStore:
    """Insertion-ordered record collection with set-based predicate matching."""

    def __init__(self) -> None:
        self._records: Dict[int, DocRecord] = {}
        self._used: Set[int] = set()
        self._reserved: Set[int] = set()
        self._next_id = 0

    def next_id(self) -> int:
        """Reserve and return a fresh record id; ids are never reused."""
        record_id = self._next_id
        while record_id in self._used or record_id in self._reserved:
            record_id += 1
        self._reserved.add(record_id)
        self._next_id = record_id + 1
        return record_id

    def insert(self, record: DocRecord) -> DocRecord:
        """Store ``record``; its id must never have been stored before."""
        if record.id in self._used:
            raise ValueError(f"Record id {record.id} was already used in this store")
        self._reserved.discard(record.id)
        self._used.add(record.id)
        self._next_id = max(self._next_id, record.id + 1)
        self._records[record.id] = record
        return record

    def get(self, record_id: int) -> Optional[DocRecord]:
        return self._records.get(record_id)

    def discard(self, record_id: int) -> None:
        self._records.pop(record_id, None)

    def find(self, *predicates: Predicate) -> List[DocRecord]:
        """Return records matching any predicate (all records when none given)."""
        if not predicates:
            return list(self._records.values())
        return [
            record
            for record in self._records.values()
            if any(record_matches(record, predicate) for predicate in predicates)
        ]

    def find_by_name(self, longname: str) -> List[DocRecord]:
        return self.find({"longname": longname})

    def query(self, *predicates: Predicate) -> Cursor:
        return Cursor(self, predicates)

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self._records.values()]

    def __iter__(self) -> Iterator[DocRecord]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records


__all__ = [
    "Cursor",
    "Not",
    "Predicate",
    "Regex",
    "SymbolStore",
    "record_matches",
    "value_matches",
]
