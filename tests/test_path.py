"""Tests for property path parsing and navigation in tripline._path."""

from dataclasses import dataclass
from typing import Any

import pytest

from tripline._path import AttributePart, ItemPart, PropertyPath, get_property, get_value_by_path

# --- Test Fixtures ---


@dataclass
class Inner:
    value: float


@dataclass
class Outer:
    inner: Inner
    items: list[Any]


# --- PropertyPath.parse() Tests ---


class TestPropertyPathParse:
    @pytest.mark.parametrize(
        ("path_str", "expected_root", "expected_parts"),
        [
            ("a", "a", ()),
            ("a.b", "a", (AttributePart("b"),)),
            ("a.b.c", "a", (AttributePart("b"), AttributePart("c"))),
            ("a[0]", "a", (ItemPart("0"),)),
            ("a[0].b", "a", (ItemPart("0"), AttributePart("b"))),
            ("a.b[key][1]", "a", (AttributePart("b"), ItemPart("key"), ItemPart("1"))),
            ("[0].name", "", (ItemPart("0"), AttributePart("name"))),
            (r"a\.b.c", "a.b", (AttributePart("c"),)),
            (r"a\[0\]", "a[0]", ()),
        ],
    )
    def test_parse(self, path_str: str, expected_root: str, expected_parts: tuple) -> None:
        path = PropertyPath.parse(path_str)
        assert path.root == expected_root
        assert path.parts == expected_parts

    @pytest.mark.parametrize("path_str", ["", "   ", "a..b", "a.", ".a", "a[0"])
    def test_parse_invalid(self, path_str: str) -> None:
        with pytest.raises(ValueError):  # noqa: PT011
            PropertyPath.parse(path_str)

    @pytest.mark.parametrize("path_str", ["a", "a.b", "a[0].b", "a.b[key][1]"])
    def test_str_round_trip(self, path_str: str) -> None:
        assert str(PropertyPath.parse(path_str)) == path_str

    def test_all_parts(self) -> None:
        assert PropertyPath.parse("a[0]").all_parts == (AttributePart("a"), ItemPart("0"))
        assert PropertyPath.parse("[0]").all_parts == (ItemPart("0"),)


# --- Navigation Tests ---


class TestGetValueByPath:
    def test_attributes_and_items(self) -> None:
        value = Outer(Inner(1.5), [{"name": "x"}])

        assert get_value_by_path(value, PropertyPath.parse("inner.value")) == (True, 1.5)
        assert get_value_by_path(value, PropertyPath.parse("items[0].name")) == (True, "x")
        assert get_value_by_path(value, PropertyPath.parse("items[-1][name]")) == (True, "x")

    def test_mapping_with_int_keys(self) -> None:
        assert get_value_by_path({"a": {1: "one"}}, PropertyPath.parse("a[1]")) == (True, "one")

    def test_leading_index(self) -> None:
        assert get_value_by_path([{"a": 1}], PropertyPath.parse("[0].a")) == (True, 1)

    @pytest.mark.parametrize("path_str", ["missing", "inner.missing", "items[5]", "items[x]", "inner.value.real.x"])
    def test_missing(self, path_str: str) -> None:
        value = Outer(Inner(1.5), [1])

        assert get_value_by_path(value, PropertyPath.parse(path_str)) == (False, None)

    def test_string_is_not_indexed(self) -> None:
        assert get_value_by_path({"s": "abc"}, PropertyPath.parse("s[0]")) == (False, None)


class TestGetProperty:
    def test_mapping_key_before_attribute(self) -> None:
        assert get_property({"keys": 1}, "keys") == (True, 1)
        assert get_property({}, "keys") == (False, None)

    def test_attribute(self) -> None:
        assert get_property(Inner(2.0), "value") == (True, 2.0)
        assert get_property(Inner(2.0), "nope") == (False, None)
