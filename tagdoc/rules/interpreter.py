"""Memoised evaluation of per-category attribute rules.

Each category declares a mapping of attribute name to rule. A rule is a plain
callable receiving a :class:`RuleContext`; before reading another attribute it
calls ``ctx.ensure("<rule>")`` so that dependencies are applied lazily, in
whatever order they happen to be demanded, and never more than once.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Set

from ..logging import get_logger
from ..models import Diagnostic, DocRecord, ParsedAnnotation, SymbolContext, Tag
from ..parsers.annotations import AnnotationClauses, AnnotationError, refine, split_clauses

Rule = Callable[["RuleContext"], None]

BOOTSTRAP_RULES = ("kind", "qualifier", "name")

logger = get_logger("rules")


class RuleDependencyError(RuntimeError):
    """Raised when rules cannot be applied in a consistent order."""


class UndeclaredRule(RuleDependencyError):
    """Raised in strict mode when a demanded rule is missing from the registry."""


class RuleContext:
    """View of one record under construction, handed to every rule."""

    def __init__(
        self,
        evaluator: "RuleEvaluator",
        record: DocRecord,
        tags: Sequence[Tag],
        symbol: SymbolContext,
        diagnostics: List[Diagnostic],
    ) -> None:
        self._evaluator = evaluator
        self.record = record
        self.tags = list(tags)
        self.symbol = symbol
        self.diagnostics = diagnostics

    def ensure(self, rule_name: str) -> None:
        """Apply ``rule_name`` now unless it already ran for this record."""
        self._evaluator.ensure(rule_name)

    # ------------------------------------------------------------------
    # Tag lookups

    def find_all(self, names: Iterable[str]) -> List[Tag]:
        wanted = set(names)
        return [tag for tag in self.tags if tag.tag_name in wanted]

    def find(self, names: Iterable[str]) -> Optional[Tag]:
        """Return the last tag matching any of ``names``."""
        found = self.find_all(names)
        return found[-1] if found else None

    def find_all_values(self, names: Iterable[str]) -> List[str]:
        return [tag.tag_value for tag in self.find_all(names)]

    def find_value(self, names: Iterable[str]) -> Optional[str]:
        tag = self.find(names)
        return tag.tag_value if tag else None

    # ------------------------------------------------------------------
    # Annotation parsing with diagnostics

    def clauses(
        self,
        tag: Tag,
        *,
        with_type: bool = True,
        with_name: bool = True,
        with_desc: bool = True,
    ) -> Optional[AnnotationClauses]:
        try:
            return split_clauses(
                tag.tag_value, with_type=with_type, with_name=with_name, with_desc=with_desc
            )
        except AnnotationError as exc:
            self.report(tag, str(exc))
            return None

    def parse(
        self,
        tag: Tag,
        *,
        with_type: bool = True,
        with_name: bool = True,
        with_desc: bool = True,
    ) -> Optional[ParsedAnnotation]:
        clauses = self.clauses(tag, with_type=with_type, with_name=with_name, with_desc=with_desc)
        if clauses is None:
            return None
        return self.refine(tag, clauses)

    def refine(self, tag: Tag, clauses: AnnotationClauses) -> Optional[ParsedAnnotation]:
        try:
            return refine(clauses)
        except AnnotationError as exc:
            self.report(tag, str(exc))
            return None

    def report(self, tag: Tag, message: str) -> None:
        """Record a non-fatal annotation problem against this record."""
        file_path = self.record.file_path or self.symbol.file_path
        logger.debug("Skipping %s on record %d (%s): %s", tag.tag_name, self.record.id, file_path, message)
        self.diagnostics.append(
            Diagnostic(
                record_id=self.record.id,
                file_path=file_path,
                tag_name=tag.tag_name,
                tag_value=tag.tag_value,
                message=message,
            )
        )


class RuleEvaluator:
    """Runs a category's rules over one record, each at most once."""

    def __init__(
        self,
        rules: Mapping[str, Rule],
        record: DocRecord,
        tags: Sequence[Tag],
        symbol: SymbolContext,
        *,
        strict: bool = False,
        diagnostics: Optional[List[Diagnostic]] = None,
    ) -> None:
        self._rules = rules
        self._strict = strict
        self._applied: Set[str] = set()
        self._running: List[str] = []
        self.context = RuleContext(
            self, record, tags, symbol, diagnostics if diagnostics is not None else []
        )

    @property
    def applied(self) -> Set[str]:
        return set(self._applied)

    def ensure(self, rule_name: str) -> None:
        if rule_name in self._applied:
            return
        if rule_name in self._running:
            cycle = " -> ".join([*self._running, rule_name])
            raise RuleDependencyError(f"Circular rule dependency: {cycle}")

        rule = self._rules.get(rule_name)
        if rule is None:
            if self._strict:
                raise UndeclaredRule(
                    f"Rule '{rule_name}' is not declared for category "
                    f"'{self.context.record.category}'"
                )
            logger.debug(
                "Rule '%s' not declared for category '%s'; skipping",
                rule_name,
                self.context.record.category,
            )
            self._applied.add(rule_name)
            return

        self._running.append(rule_name)
        try:
            rule(self.context)
        finally:
            self._running.pop()
        self._applied.add(rule_name)

    def run(self) -> DocRecord:
        """Apply the bootstrap rules, then every remaining declared rule."""
        for rule_name in BOOTSTRAP_RULES:
            self.ensure(rule_name)
        for rule_name in self._rules:
            self.ensure(rule_name)
        return self.context.record


__all__ = [
    "BOOTSTRAP_RULES",
    "Rule",
    "RuleContext",
    "RuleDependencyError",
    "RuleEvaluator",
    "UndeclaredRule",
]
