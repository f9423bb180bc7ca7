"""Tests for the annotation parser."""

from __future__ import annotations

import pytest

from tagdoc.parsers.annotations import (
    MalformedParam,
    MalformedType,
    WILDCARD_TYPE,
    parse_annotation,
    parse_literal,
    split_clauses,
)


def test_optional_param_with_default() -> None:
    parsed = parse_annotation("{number} [x=5] - the x value")

    assert parsed.types == ["number"]
    assert parsed.name == "x"
    assert parsed.optional is True
    assert parsed.default_value == "5"
    assert parsed.default_raw == 5
    assert parsed.description == "the x value"
    assert parsed.nullable is None
    assert parsed.spread is False


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("{number} limit -1 means unset", "-1 means unset"),
        ("{number} limit - -1 means unset", "-1 means unset"),
        ("{number} limit -\tthe limit", "the limit"),
    ],
)
def test_description_drops_only_a_separating_dash(text: str, expected: str) -> None:
    assert parse_annotation(text).description == expected


def test_union_and_paren_union_parse_identically() -> None:
    plain = parse_annotation("{string|number} value")
    paren = parse_annotation("{(string|number)} value")

    assert plain.types == ["string", "number"]
    assert paren.types == ["string", "number"]
    assert plain.name == paren.name == "value"
    assert plain.optional is False


def test_generic_union_is_kept_whole() -> None:
    parsed = parse_annotation("{Array<string|number>} items")

    assert parsed.types == ["Array<string|number>"]


def test_spread_union_is_kept_whole() -> None:
    parsed = parse_annotation("{...(string|number)} values")

    assert parsed.types == ["...(string|number)"]
    assert parsed.spread is True


def test_spread_type() -> None:
    parsed = parse_annotation("{...number} args - numbers to add")

    assert parsed.types == ["...number"]
    assert parsed.spread is True
    assert parsed.description == "numbers to add"


def test_record_type_is_opaque() -> None:
    parsed = parse_annotation("{{a: number, b: string|null}} options")

    assert parsed.types == ["{a: number, b: string|null}"]
    assert parsed.name == "options"


@pytest.mark.parametrize(
    ("value", "nullable", "types"),
    [
        ("{?string} name", True, ["string"]),
        ("{!Object} target", False, ["Object"]),
        ("{string} name", None, ["string"]),
    ],
)
def test_nullability_prefix(value, nullable, types) -> None:
    parsed = parse_annotation(value)

    assert parsed.nullable is nullable
    assert parsed.types == types


def test_missing_type_clause_falls_back_to_wildcard() -> None:
    parsed = parse_annotation("name - no type here")

    assert parsed.types == [WILDCARD_TYPE]
    assert parsed.name == "name"
    assert parsed.description == "no type here"


def test_inline_link_is_not_a_type_clause() -> None:
    clauses = split_clauses("{@link Foo} is the thing", with_name=False)

    assert clauses.type_text == WILDCARD_TYPE
    assert clauses.description == "{@link Foo} is the thing"


def test_nested_brackets_in_optional_name() -> None:
    parsed = parse_annotation("{number[]} [list=[1, 2]] - defaults")

    assert parsed.name == "list"
    assert parsed.default_value == "[1, 2]"
    assert parsed.default_raw == [1, 2]
    assert parsed.description == "defaults"


def test_default_split_happens_once() -> None:
    parsed = parse_annotation("{string} [query=a=b]")

    assert parsed.name == "query"
    assert parsed.default_value == "a=b"
    assert parsed.default_raw == "a=b"


def test_type_only_selection() -> None:
    parsed = parse_annotation("{number} trailing words", with_name=False, with_desc=False)

    assert parsed.types == ["number"]
    assert parsed.name is None
    assert parsed.description is None


def test_return_style_selection_keeps_description() -> None:
    parsed = parse_annotation("{Promise<void>} resolves when done", with_name=False)

    assert parsed.types == ["Promise<void>"]
    assert parsed.description == "resolves when done"


@pytest.mark.parametrize("value", ["{string|} x", "{} x", "{(|number)} x"])
def test_empty_alternative_raises_malformed_type(value) -> None:
    with pytest.raises(MalformedType):
        parse_annotation(value)


@pytest.mark.parametrize("value", ["{number} [x=5", "{number}"])
def test_bad_name_raises_malformed_param(value) -> None:
    with pytest.raises(MalformedParam):
        parse_annotation(value)


def test_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        parse_annotation("{number} [x")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("5", 5),
        ("true", True),
        ('"quoted"', "quoted"),
        ("'single'", "single"),
        ("None", None),
        ("not a literal", "not a literal"),
    ],
)
def test_parse_literal(text, expected) -> None:
    assert parse_literal(text) == expected


def test_to_dict_omits_unset_members() -> None:
    assert parse_annotation("{number} the count", with_name=False).to_dict() == {
        "types": ["number"],
        "nullable": None,
        "spread": False,
        "description": "the count",
    }
