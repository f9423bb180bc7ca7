"""Attribute rules shared by every symbol category."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..models import ParsedAnnotation
from ..parsers.annotations import WILDCARD_TYPE
from .interpreter import Rule, RuleContext


SCOPE_SEPARATOR = "~"
STATIC_SEPARATOR = "."
INSTANCE_SEPARATOR = "#"

UNDOCUMENTED_TAG = "@_undocument"

COMMON_TAGS = frozenset(
    {
        "@abstract",
        "@access",
        "@deprecated",
        "@desc",
        "@emits",
        "@example",
        "@experimental",
        "@ignore",
        "@listens",
        "@param",
        "@override",
        "@private",
        "@property",
        "@protected",
        "@public",
        "@return",
        "@returns",
        "@see",
        "@since",
        "@throws",
        "@todo",
        "@type",
        "@version",
        UNDOCUMENTED_TAG,
    }
)

_ACCESS_BY_TAG = {
    "@public": "public",
    "@protected": "protected",
    "@private": "private",
}


def fixed_kind(kind: str) -> Rule:
    """Return a rule assigning a constant ``kind``."""

    def rule_kind(ctx: RuleContext) -> None:
        ctx.record.kind = kind

    return rule_kind


def rule_qualifier(ctx: RuleContext) -> None:
    ctx.record.qualifier = ctx.symbol.qualifier


def rule_declared_name(ctx: RuleContext) -> None:
    ctx.record.name = ctx.symbol.name


def rule_file_path(ctx: RuleContext) -> None:
    ctx.record.file_path = ctx.symbol.file_path


def rule_static(ctx: RuleContext) -> None:
    static = ctx.symbol.static
    ctx.record.static = True if static is None else bool(static)


def rule_memberof_file(ctx: RuleContext) -> None:
    ctx.ensure("file_path")
    ctx.record.memberof = ctx.record.file_path


def rule_memberof_owner(ctx: RuleContext) -> None:
    ctx.record.memberof = ctx.symbol.owner


def rule_longname(ctx: RuleContext) -> None:
    ctx.ensure("memberof")
    ctx.ensure("name")
    ctx.ensure("static")

    record = ctx.record
    if record.name is None:
        record.longname = None
    elif not record.memberof:
        record.longname = record.name
    elif SCOPE_SEPARATOR in record.memberof:
        separator = STATIC_SEPARATOR if record.static else INSTANCE_SEPARATOR
        record.longname = f"{record.memberof}{separator}{record.name}"
    else:
        record.longname = f"{record.memberof}{SCOPE_SEPARATOR}{record.name}"


def rule_abstract(ctx: RuleContext) -> None:
    if ctx.find(["@abstract"]):
        ctx.record.abstract = True


def rule_access(ctx: RuleContext) -> None:
    tag = ctx.find(["@access", *_ACCESS_BY_TAG])
    if tag is None:
        ctx.record.access = None
    elif tag.tag_name == "@access":
        ctx.record.access = tag.tag_value.strip() or None
    else:
        ctx.record.access = _ACCESS_BY_TAG[tag.tag_name]


def rule_deprecated(ctx: RuleContext) -> None:
    tag = ctx.find(["@deprecated"])
    if tag:
        ctx.record.deprecated = tag.tag_value or True


def rule_experimental(ctx: RuleContext) -> None:
    tag = ctx.find(["@experimental"])
    if tag:
        ctx.record.experimental = tag.tag_value or True


def rule_description(ctx: RuleContext) -> None:
    ctx.record.description = ctx.find_value(["@desc"])


def rule_emits(ctx: RuleContext) -> None:
    ctx.record.emits = _typed_descriptions(ctx, ["@emits"])


def rule_listens(ctx: RuleContext) -> None:
    ctx.record.listens = _typed_descriptions(ctx, ["@listens"])


def rule_throws(ctx: RuleContext) -> None:
    ctx.record.throws = _typed_descriptions(ctx, ["@throws"])


def rule_examples(ctx: RuleContext) -> None:
    ctx.record.examples = ctx.find_all_values(["@example"]) or None


def rule_see(ctx: RuleContext) -> None:
    ctx.record.see = ctx.find_all_values(["@see"]) or None


def rule_todo(ctx: RuleContext) -> None:
    ctx.record.todo = ctx.find_all_values(["@todo"]) or None


def rule_since(ctx: RuleContext) -> None:
    tag = ctx.find(["@since"])
    if tag:
        ctx.record.since = tag.tag_value


def rule_version(ctx: RuleContext) -> None:
    tag = ctx.find(["@version"])
    if tag:
        ctx.record.version = tag.tag_value


def rule_ignore(ctx: RuleContext) -> None:
    if ctx.find(["@ignore"]):
        ctx.record.ignore = True


def rule_override(ctx: RuleContext) -> None:
    if ctx.find(["@override"]):
        ctx.record.override = True


def rule_params(ctx: RuleContext) -> None:
    tags = ctx.find_all(["@param"])
    if not tags:
        return
    params: List[ParsedAnnotation] = []
    for tag in tags:
        clauses = ctx.clauses(tag)
        if clauses is None:
            continue
        if not clauses.type_text or not clauses.name_text:
            ctx.report(tag, "param is missing a type or a name")
            continue
        parsed = ctx.refine(tag, clauses)
        if parsed is not None:
            params.append(parsed)
    ctx.record.params = params


def rule_properties(ctx: RuleContext) -> None:
    tags = ctx.find_all(["@property"])
    if not tags:
        return
    properties = [ctx.parse(tag) for tag in tags]
    ctx.record.properties = [parsed for parsed in properties if parsed is not None]


def rule_returns(ctx: RuleContext) -> None:
    tag = ctx.find(["@return", "@returns"])
    if tag is None or not tag.tag_value:
        return
    ctx.record.returns = ctx.parse(tag, with_name=False)


def rule_type(ctx: RuleContext) -> None:
    tag = ctx.find(["@type"])
    if tag is None or not tag.tag_value:
        return
    ctx.record.type = ctx.parse(tag, with_name=False, with_desc=False)


def rule_undocument(ctx: RuleContext) -> None:
    ctx.record.undocument = bool(ctx.find([UNDOCUMENTED_TAG])) or not ctx.tags


def rule_never_undocumented(ctx: RuleContext) -> None:
    ctx.record.undocument = False


def rule_line_number(ctx: RuleContext) -> None:
    ctx.record.line_number = ctx.symbol.line_number


def rule_decorators(ctx: RuleContext) -> None:
    ctx.record.decorators = list(ctx.symbol.decorators) or None


def rule_callable_flags(ctx: RuleContext) -> None:
    ctx.record.is_async = bool(ctx.symbol.is_async)
    ctx.record.generator = bool(ctx.symbol.generator)


def rule_content(ctx: RuleContext) -> None:
    ctx.record.content = ctx.symbol.content


def reference_names(ctx: RuleContext, names: Iterable[str]) -> Optional[List[str]]:
    """Collect `{Name}` (or bare `Name`) references from the given tags."""
    found: List[str] = []
    for tag in ctx.find_all(names):
        clauses = ctx.clauses(tag, with_name=False, with_desc=False)
        if clauses is None:
            continue
        reference = clauses.type_text
        if reference == WILDCARD_TYPE and tag.tag_value.strip():
            reference = tag.tag_value.split()[0]
        if reference:
            found.append(reference)
    return found or None


def _typed_descriptions(ctx: RuleContext, names: Iterable[str]) -> Optional[List[ParsedAnnotation]]:
    tags = ctx.find_all(names)
    if not tags:
        return None
    results: List[ParsedAnnotation] = []
    for tag in tags:
        parsed = ctx.parse(tag, with_name=False)
        if parsed is not None:
            results.append(parsed)
    return results


DOC_RULES = {
    "qualifier": rule_qualifier,
    "name": rule_declared_name,
    "file_path": rule_file_path,
    "static": rule_static,
    "longname": rule_longname,
    "abstract": rule_abstract,
    "access": rule_access,
    "deprecated": rule_deprecated,
    "description": rule_description,
    "emits": rule_emits,
    "examples": rule_examples,
    "experimental": rule_experimental,
    "ignore": rule_ignore,
    "line_number": rule_line_number,
    "listens": rule_listens,
    "override": rule_override,
    "params": rule_params,
    "properties": rule_properties,
    "returns": rule_returns,
    "see": rule_see,
    "since": rule_since,
    "todo": rule_todo,
    "throws": rule_throws,
    "type": rule_type,
    "undocument": rule_undocument,
    "version": rule_version,
    "decorators": rule_decorators,
}


__all__ = [
    "COMMON_TAGS",
    "DOC_RULES",
    "INSTANCE_SEPARATOR",
    "SCOPE_SEPARATOR",
    "STATIC_SEPARATOR",
    "UNDOCUMENTED_TAG",
    "fixed_kind",
    "reference_names",
]
