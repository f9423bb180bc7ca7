"""Capability table mapping each symbol category to its rules and tags."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping

from ..logging import get_logger
from ..selection import read_selection
from . import common
from .common import COMMON_TAGS, DOC_RULES, fixed_kind, reference_names
from .interpreter import Rule, RuleContext

logger = get_logger("rules")

MEMORY_NAME = "In memory code"

FILE = "File"
TEST_FILE = "TestFile"
MEMORY = "Memory"
CLASS = "Class"
FUNCTION = "Function"
VARIABLE = "Variable"
ASSIGNMENT = "Assignment"
CLASS_MEMBER = "ClassMember"
CLASS_PROPERTY = "ClassProperty"
CLASS_METHOD = "ClassMethod"
TYPEDEF = "Typedef"
EXTERNAL = "External"
TEST = "Test"


@dataclass(frozen=True)
class CategorySpec:
    """Rules and accepted tags for one symbol category."""

    name: str
    rules: Mapping[str, Rule]
    tags: FrozenSet[str]


# Module scope ------------------------------------------------------------


def rule_export(ctx: RuleContext) -> None:
    ctx.record.export = bool(ctx.symbol.export)


def rule_import_path(ctx: RuleContext) -> None:
    ctx.record.import_path = ctx.symbol.import_path


def rule_import_style(ctx: RuleContext) -> None:
    ctx.ensure("name")
    ctx.record.import_style = ctx.symbol.import_style if ctx.record.name else None


# Classes -----------------------------------------------------------------


def rule_extends(ctx: RuleContext) -> None:
    tagged = reference_names(ctx, ["@extends", "@extend"])
    if tagged:
        ctx.record.extends = tagged
        return

    symbol = ctx.symbol
    if symbol.superclass:
        ctx.record.extends = [symbol.superclass]
    elif symbol.superclass_location:
        source = symbol.abs_path or symbol.file_path
        if source is None:
            logger.warning("Cannot read superclass of %s without a file path", ctx.record.name)
            return
        line, start_column, end_column = symbol.superclass_location
        selection = read_selection(Path(source), line, start_column, end_column).strip()
        if selection:
            ctx.record.extends = [selection]


def rule_implements(ctx: RuleContext) -> None:
    ctx.record.implements = reference_names(ctx, ["@implements", "@implement"])


def rule_interface(ctx: RuleContext) -> None:
    tag = ctx.find(["@interface"])
    ctx.record.interface = tag is not None and tag.tag_value in ("", "true")


# Files and in-memory code ------------------------------------------------


def rule_file_name(ctx: RuleContext) -> None:
    ctx.record.name = ctx.symbol.file_path


def rule_name_as_longname(ctx: RuleContext) -> None:
    ctx.ensure("name")
    ctx.record.longname = ctx.record.name


def rule_no_memberof(ctx: RuleContext) -> None:
    ctx.record.memberof = None


def rule_memory_name(ctx: RuleContext) -> None:
    ctx.record.name = MEMORY_NAME


# Typedefs and externals --------------------------------------------------


def rule_typedef_name(ctx: RuleContext) -> None:
    tags = ctx.find_all(["@typedef"])
    if not tags:
        logger.warning("Cannot resolve typedef name for record %d", ctx.record.id)
        return
    name = None
    for tag in tags:
        clauses = ctx.clauses(tag, with_desc=False)
        if clauses is not None:
            name = clauses.name_text
    ctx.record.name = name


def rule_typedef(ctx: RuleContext) -> None:
    tag = ctx.find(["@typedef"])
    if tag is None or not tag.tag_value:
        return
    parsed = ctx.parse(tag, with_desc=False)
    if parsed is None:
        return
    parsed.nullable = None
    parsed.spread = False
    ctx.record.typedef = parsed


def rule_external_name(ctx: RuleContext) -> None:
    tags = ctx.find_all(["@external"])
    if not tags:
        logger.warning("Cannot resolve external name for record %d", ctx.record.id)
        return
    for tag in tags:
        value = tag.tag_value.strip()
        if value.startswith("{"):
            clauses = ctx.clauses(tag, with_name=False)
            if clauses is None:
                continue
            ctx.record.name = clauses.type_text
            ctx.record.external_link = clauses.description or None
        elif value:
            name, _, link = value.partition(" ")
            ctx.record.name = name
            ctx.record.external_link = link.strip() or None


# Methods -----------------------------------------------------------------

DEFAULT_METHOD_QUALIFIER = "method"


def rule_method_qualifier(ctx: RuleContext) -> None:
    ctx.record.qualifier = ctx.symbol.qualifier or DEFAULT_METHOD_QUALIFIER


# Tests -------------------------------------------------------------------


def rule_test_name(ctx: RuleContext) -> None:
    ctx.record.name = ctx.symbol.test_name
    ctx.record.test_id = ctx.symbol.test_id


def rule_test_memberof(ctx: RuleContext) -> None:
    ctx.ensure("file_path")
    ctx.record.memberof = ctx.symbol.owner or ctx.record.file_path


def rule_test_targets(ctx: RuleContext) -> None:
    ctx.record.test_targets = reference_names(ctx, ["@test", "@testTarget"])


# Composition -------------------------------------------------------------

_MODULE_RULES: Dict[str, Rule] = {
    "memberof": common.rule_memberof_file,
    "export": rule_export,
    "import_path": rule_import_path,
    "import_style": rule_import_style,
}

_CALLABLE_RULES: Dict[str, Rule] = {"callable_flags": common.rule_callable_flags}

_FILE_RULES: Dict[str, Rule] = {
    "name": rule_file_name,
    "memberof": rule_no_memberof,
    "longname": rule_name_as_longname,
    "content": common.rule_content,
    "undocument": common.rule_never_undocumented,
}

_CLASS_TAGS = frozenset({"@extends", "@extend", "@implements", "@implement", "@interface"})


def _compose(kind: str, *groups: Mapping[str, Rule]) -> Dict[str, Rule]:
    rules: Dict[str, Rule] = {"kind": fixed_kind(kind)}
    rules.update(DOC_RULES)
    for group in groups:
        rules.update(group)
    return rules


def _build_categories() -> Dict[str, CategorySpec]:
    specs: List[CategorySpec] = [
        CategorySpec(FILE, _compose("file", _FILE_RULES), COMMON_TAGS),
        CategorySpec(TEST_FILE, _compose("testFile", _FILE_RULES), COMMON_TAGS),
        CategorySpec(
            MEMORY,
            _compose("memory", _FILE_RULES, {"name": rule_memory_name}),
            COMMON_TAGS,
        ),
        CategorySpec(
            CLASS,
            _compose(
                "class",
                _MODULE_RULES,
                {
                    "extends": rule_extends,
                    "implements": rule_implements,
                    "interface": rule_interface,
                },
            ),
            COMMON_TAGS | _CLASS_TAGS,
        ),
        CategorySpec(FUNCTION, _compose("function", _MODULE_RULES, _CALLABLE_RULES), COMMON_TAGS),
        CategorySpec(VARIABLE, _compose("variable", _MODULE_RULES), COMMON_TAGS),
        CategorySpec(ASSIGNMENT, _compose("variable", _MODULE_RULES), COMMON_TAGS),
        CategorySpec(
            CLASS_MEMBER,
            _compose("member", {"memberof": common.rule_memberof_owner}),
            COMMON_TAGS,
        ),
        CategorySpec(
            CLASS_PROPERTY,
            _compose("member", {"memberof": common.rule_memberof_owner}),
            COMMON_TAGS,
        ),
        CategorySpec(
            CLASS_METHOD,
            _compose(
                "method",
                {
                    "memberof": common.rule_memberof_owner,
                    "qualifier": rule_method_qualifier,
                },
                _CALLABLE_RULES,
            ),
            COMMON_TAGS,
        ),
        CategorySpec(
            TYPEDEF,
            _compose(
                "typedef",
                {
                    "memberof": common.rule_memberof_file,
                    "name": rule_typedef_name,
                    "typedef": rule_typedef,
                },
            ),
            COMMON_TAGS | {"@typedef"},
        ),
        CategorySpec(
            EXTERNAL,
            _compose(
                "external",
                {
                    "memberof": common.rule_memberof_file,
                    "name": rule_external_name,
                    "longname": rule_name_as_longname,
                },
            ),
            COMMON_TAGS | {"@external"},
        ),
        CategorySpec(
            TEST,
            _compose(
                "test",
                {
                    "memberof": rule_test_memberof,
                    "name": rule_test_name,
                    "test_targets": rule_test_targets,
                },
            ),
            COMMON_TAGS | {"@test", "@testTarget"},
        ),
    ]
    return {spec.name: spec for spec in specs}


CATEGORIES: Dict[str, CategorySpec] = _build_categories()


def get_category(name: str) -> CategorySpec:
    """Return the capability entry for ``name`` or raise ``ValueError``."""
    try:
        return CATEGORIES[name]
    except KeyError:
        known = ", ".join(sorted(CATEGORIES))
        raise ValueError(f"Unknown symbol category '{name}' (expected one of: {known})") from None


__all__ = [
    "ASSIGNMENT",
    "CATEGORIES",
    "CLASS",
    "CLASS_MEMBER",
    "CLASS_METHOD",
    "CLASS_PROPERTY",
    "CategorySpec",
    "EXTERNAL",
    "FILE",
    "FUNCTION",
    "MEMORY",
    "MEMORY_NAME",
    "TEST",
    "TEST_FILE",
    "TYPEDEF",
    "VARIABLE",
    "get_category",
]
