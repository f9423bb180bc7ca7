"""Tests for per-category tag interpretation."""

from __future__ import annotations

from pathlib import Path

import pytest

from tagdoc.models import DocRecord, SymbolContext, Tag
from tagdoc.parsers.comments import parse_comment
from tagdoc.rules import CATEGORIES, TagInterpreter, UndeclaredRule, get_category
from tagdoc.rules.categories import (
    CLASS,
    CLASS_MEMBER,
    CLASS_METHOD,
    EXTERNAL,
    FILE,
    FUNCTION,
    MEMORY,
    MEMORY_NAME,
    TEST,
    TYPEDEF,
    VARIABLE,
)


def _interpret(category: str, comment, *, tags=None, strict: bool = False, **context):
    record = DocRecord(id=1, category=category)
    diagnostics = []
    TagInterpreter(strict=strict).interpret(
        record,
        parse_comment(comment) if tags is None else tags,
        SymbolContext(**context),
        diagnostics,
    )
    return record, diagnostics


def test_every_category_is_registered() -> None:
    assert set(CATEGORIES) == {
        "File",
        "TestFile",
        "Memory",
        "Class",
        "Function",
        "Variable",
        "Assignment",
        "ClassMember",
        "ClassProperty",
        "ClassMethod",
        "Typedef",
        "External",
        "Test",
    }


def test_unknown_category_raises_value_error() -> None:
    with pytest.raises(ValueError, match="Unknown symbol category"):
        get_category("Namespace")


@pytest.mark.parametrize("category", sorted(CATEGORIES))
def test_every_category_satisfies_strict_mode(category: str) -> None:
    context = {"file_path": "src/a.js", "name": "thing", "owner": "src/a.js~Owner", "test_name": "t"}
    tags = [Tag("@typedef", "{Object} Thing"), Tag("@external", "Thing")]

    record, _ = _interpret(category, None, tags=tags, strict=True, **context)

    assert record.kind is not None


def test_class_record_from_comment() -> None:
    comment = "*\n * A shape.\n * @implements {src/i.js~Drawable}\n * @since 0.3.0\n "

    record, diagnostics = _interpret(
        CLASS, comment, name="Shape", file_path="src/shape.js", export=True, import_path="pkg/shape"
    )

    assert diagnostics == []
    assert record.kind == "class"
    assert record.name == "Shape"
    assert record.memberof == "src/shape.js"
    assert record.longname == "src/shape.js~Shape"
    assert record.export is True
    assert record.static is True
    assert record.import_path == "pkg/shape"
    assert record.description == "A shape."
    assert record.implements == ["src/i.js~Drawable"]
    assert record.since == "0.3.0"
    assert record.interface is False
    assert record.undocument is False


def test_interface_flag() -> None:
    record, _ = _interpret(CLASS, "*\n * @interface\n ", name="Drawable", file_path="src/i.js")

    assert record.interface is True


@pytest.mark.parametrize(("static", "separator"), [(True, "."), (False, "#")])
def test_member_longname_separator(static: bool, separator: str) -> None:
    record, _ = _interpret(
        CLASS_MEMBER, "* the size", name="size", owner="src/a.js~Box", static=static, file_path="src/a.js"
    )

    assert record.kind == "member"
    assert record.memberof == "src/a.js~Box"
    assert record.longname == f"src/a.js~Box{separator}size"
    assert record.export is None


def test_method_keeps_qualifier_and_callable_flags() -> None:
    comment = "*\n * @param {number} [delta=1] - step\n * @returns {number} the new value\n "

    record, _ = _interpret(
        CLASS_METHOD,
        comment,
        name="bump",
        owner="src/a.js~Counter",
        static=False,
        qualifier="get",
        is_async=True,
        file_path="src/a.js",
    )

    assert record.kind == "method"
    assert record.qualifier == "get"
    assert record.is_async is True
    assert record.generator is False
    assert record.params[0].name == "delta"
    assert record.params[0].default_raw == 1
    assert record.returns.types == ["number"]
    assert record.returns.description == "the new value"


def test_method_without_qualifier_defaults_to_plain_method() -> None:
    record, _ = _interpret(
        CLASS_METHOD,
        None,
        name="draw",
        owner="src/a.js~Canvas",
        static=False,
        file_path="src/a.js",
    )

    assert record.qualifier == "method"


def test_member_qualifier_stays_unset() -> None:
    record, _ = _interpret(
        CLASS_MEMBER, None, name="size", owner="src/a.js~Box", static=False, file_path="src/a.js"
    )

    assert record.qualifier is None


def test_function_without_comment_is_undocumented() -> None:
    record, _ = _interpret(FUNCTION, None, name="helper", file_path="src/a.js")

    assert record.undocument is True
    assert record.export is False


def test_injected_undocument_tag() -> None:
    record, _ = _interpret(
        FUNCTION, None, tags=[Tag("@_undocument", "")], name="helper", file_path="src/a.js"
    )

    assert record.undocument is True


def test_file_record_uses_path_as_name() -> None:
    record, _ = _interpret(FILE, None, file_path="src/a.js", content="export const a = 1;")

    assert record.kind == "file"
    assert record.name == "src/a.js"
    assert record.longname == "src/a.js"
    assert record.memberof is None
    assert record.undocument is False
    assert record.content == "export const a = 1;"


def test_memory_record_name() -> None:
    record, _ = _interpret(MEMORY, None, content="/** @typedef {number} Id */")

    assert record.kind == "memory"
    assert record.name == MEMORY_NAME
    assert record.longname == MEMORY_NAME


def test_access_tags() -> None:
    private, _ = _interpret(VARIABLE, "* @private", name="x", file_path="src/a.js")
    protected, _ = _interpret(VARIABLE, "* @access protected", name="y", file_path="src/a.js")
    untagged, _ = _interpret(VARIABLE, "* plain", name="z", file_path="src/a.js")

    assert private.access == "private"
    assert protected.access == "protected"
    assert untagged.access is None


def test_lifecycle_tags() -> None:
    comment = "*\n * @deprecated\n * @experimental not stable\n * @version 2.1\n * @todo tidy\n * @todo test\n "

    record, _ = _interpret(FUNCTION, comment, name="f", file_path="src/a.js")

    assert record.deprecated is True
    assert record.experimental == "not stable"
    assert record.version == "2.1"
    assert record.todo == ["tidy", "test"]


def test_variable_type_and_examples() -> None:
    comment = "*\n * @type {?number}\n * @example\n * limit = 3;\n * @see https://example.com\n "

    record, _ = _interpret(VARIABLE, comment, name="limit", file_path="src/a.js")

    assert record.type.types == ["number"]
    assert record.type.nullable is True
    assert record.examples == ["limit = 3;"]
    assert record.see == ["https://example.com"]


def test_throws_emits_listens() -> None:
    comment = "*\n * @throws {TypeError} bad input\n * @emits {ChangeEvent} on change\n * @listens {Tick}\n "

    record, _ = _interpret(FUNCTION, comment, name="f", file_path="src/a.js")

    assert record.throws[0].types == ["TypeError"]
    assert record.throws[0].description == "bad input"
    assert record.emits[0].types == ["ChangeEvent"]
    assert record.listens[0].types == ["Tick"]


def test_unknown_tags_are_partitioned() -> None:
    comment = "*\n * @frobnicate yes\n * @extends {Base}\n * @since 1.0\n "

    record, _ = _interpret(FUNCTION, comment, name="f", file_path="src/a.js")

    assert [tag.tag_name for tag in record.tags_known] == ["@since"]
    assert [tag.tag_name for tag in record.tags_unknown] == ["@frobnicate", "@extends"]
    assert record.extends is None


def test_malformed_params_produce_diagnostics() -> None:
    comment = "*\n * @param {number}\n * @param {string|} bad\n * @param {} empty\n * @param {boolean} ok\n "

    record, diagnostics = _interpret(FUNCTION, comment, name="f", file_path="src/a.js")

    assert [param.name for param in record.params] == ["ok"]
    assert len(diagnostics) == 3
    assert {diagnostic.tag_name for diagnostic in diagnostics} == {"@param"}
    assert all(diagnostic.file_path == "src/a.js" for diagnostic in diagnostics)


def test_typedef_takes_name_from_tag() -> None:
    comment = "*\n * @typedef {Object} Options\n * @property {string} name - the name\n * @property {number} [size=0]\n "

    record, _ = _interpret(TYPEDEF, comment, file_path="src/types.js")

    assert record.kind == "typedef"
    assert record.name == "Options"
    assert record.longname == "src/types.js~Options"
    assert record.typedef.types == ["Object"]
    assert record.typedef.spread is False
    assert [prop.name for prop in record.properties] == ["name", "size"]
    assert record.properties[1].optional is True


def test_external_with_braced_name() -> None:
    comment = "* @external {XMLHttpRequest} https://developer.mozilla.org/docs/Web/API/XMLHttpRequest"

    record, _ = _interpret(EXTERNAL, comment, file_path="src/externals.js")

    assert record.kind == "external"
    assert record.name == "XMLHttpRequest"
    assert record.longname == "XMLHttpRequest"
    assert record.external_link == "https://developer.mozilla.org/docs/Web/API/XMLHttpRequest"


def test_external_with_bare_name() -> None:
    record, _ = _interpret(EXTERNAL, "* @external Buffer", file_path="src/externals.js")

    assert record.name == "Buffer"
    assert record.external_link is None


def test_test_record() -> None:
    comment = "*\n * @test {src/a.js~add}\n "

    record, _ = _interpret(
        TEST, comment, test_name="adds numbers", test_id=3, file_path="test/a.test.js"
    )

    assert record.kind == "test"
    assert record.name == "adds numbers"
    assert record.test_id == 3
    assert record.memberof == "test/a.test.js"
    assert record.longname == "test/a.test.js~adds numbers"
    assert record.test_targets == ["src/a.js~add"]


def test_nested_test_uses_owner_scope() -> None:
    record, _ = _interpret(
        TEST, None, test_name="inner", owner="test/a.test.js~outer", file_path="test/a.test.js"
    )

    assert record.memberof == "test/a.test.js~outer"
    assert record.longname == "test/a.test.js~outer.inner"


def test_extends_tag_wins_over_context() -> None:
    record, _ = _interpret(
        CLASS, "* @extends {src/base.js~Base}", name="Child", file_path="src/a.js", superclass="Other"
    )

    assert record.extends == ["src/base.js~Base"]


def test_extends_from_context_superclass() -> None:
    record, _ = _interpret(CLASS, None, name="Child", file_path="src/a.js", superclass="src/base.js~Base")

    assert record.extends == ["src/base.js~Base"]


def test_extends_read_from_source_selection(tmp_path: Path) -> None:
    source = tmp_path / "b.js"
    source.write_text("// header\nclass B extends Base {}\n", encoding="utf-8")

    record, _ = _interpret(
        CLASS,
        None,
        name="B",
        file_path="src/b.js",
        abs_path=str(source),
        superclass_location=(2, 16, 20),
    )

    assert record.extends == ["Base"]


def test_extends_selection_propagates_missing_file(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        _interpret(
            CLASS,
            None,
            name="B",
            file_path="src/b.js",
            abs_path=str(tmp_path / "missing.js"),
            superclass_location=(1, 0, 4),
        )


def test_strict_mode_is_satisfied_by_class_rules() -> None:
    record, _ = _interpret(CLASS, None, strict=True, name="A", file_path="src/a.js")

    assert record.longname == "src/a.js~A"


def test_strict_mode_reports_undeclared_rules(monkeypatch: pytest.MonkeyPatch) -> None:
    spec = get_category(FUNCTION)
    rules = dict(spec.rules)
    del rules["qualifier"]
    monkeypatch.setitem(CATEGORIES, FUNCTION, type(spec)(spec.name, rules, spec.tags))

    with pytest.raises(UndeclaredRule):
        _interpret(FUNCTION, None, strict=True, name="f", file_path="src/a.js")
