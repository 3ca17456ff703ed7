"""
test_path.py

Tests for the property path parser.

Validates:
- Names, indices and quoted keys are split into segments
- Canonical rendering and path helpers
- Malformed paths are rejected with a position
- Parsing is deterministic
"""

import dataclasses

import pytest

from propath import KeySegment, MalformedPathError, NameSegment, PathParser, PropertyPath, parse_path


class TestSimplePaths:
    """Dot-separated property names."""

    def test_single_name(self):
        path = parse_path("name")
        assert path.segments == (NameSegment("name"),)

    def test_nested_names(self):
        path = parse_path("spouse.name")
        assert path.segments == (NameSegment("spouse"), NameSegment("name"))

    def test_underscores_and_digits(self):
        path = parse_path("_private.field_2")
        assert path.names == ["_private", "field_2"]

    def test_len_and_iteration(self):
        path = parse_path("a.b.c")
        assert len(path) == 3
        assert [str(s) for s in path] == ["a", "b", "c"]


class TestKeyedPaths:
    """Bracketed indices and keys."""

    def test_index(self):
        path = parse_path("nicknames[0]")
        assert path.segments == (NameSegment("nicknames"), KeySegment("0"))
        assert path.last.index == 0

    def test_quoted_key_may_contain_dot(self):
        path = parse_path("settings['log.level']")
        assert path.last == KeySegment("log.level", quoted=True)

    def test_double_quoted_key_may_contain_bracket(self):
        path = parse_path('settings["a]b"]')
        assert path.last.key == "a]b"

    def test_quoted_key_is_never_an_index(self):
        assert parse_path("m['0']").last.index is None

    def test_bare_key_is_not_always_an_index(self):
        assert parse_path("m[home]").last.index is None

    def test_leading_key(self):
        path = parse_path("[0].name")
        assert path.segments == (KeySegment("0"), NameSegment("name"))

    def test_chained_keys(self):
        path = parse_path("grid[0][1].value")
        assert path.names == ["grid", "0", "1", "value"]


class TestRendering:
    """Canonical text and helpers."""

    def test_str_is_canonical(self):
        assert str(parse_path("settings['log.level']")) == "settings['log.level']"
        assert str(parse_path("a[ 1 ].b")) == "a[1].b"

    def test_text_is_preserved(self):
        assert parse_path("a[ 1 ]").text == "a[ 1 ]"

    def test_parent(self):
        path = parse_path("spouse.address.city")
        assert str(path.parent) == "spouse.address"
        assert parse_path("name").parent is None

    def test_prefix(self):
        path = parse_path("addresses[1].city")
        assert path.prefix(1) == "addresses"
        assert path.prefix(2) == "addresses[1]"


class TestMalformedPaths:
    """Paths that do not parse."""

    @pytest.mark.parametrize("text", [
        "",
        "a..b",
        "a.",
        ".a",
        "a.[0]",
        "a[]",
        "a[0",
        "['",
        "[']",
        "a['x'y]",
        "a b",
        "1abc",
        "a[x'y]",
    ])
    def test_rejected(self, text):
        with pytest.raises(MalformedPathError):
            parse_path(text)

    def test_position_of_unterminated_quote(self):
        with pytest.raises(MalformedPathError) as exc_info:
            parse_path("['")
        assert exc_info.value.position == 1
        assert "unterminated quote" in exc_info.value.reason

    def test_position_of_empty_name(self):
        with pytest.raises(MalformedPathError) as exc_info:
            parse_path("a..b")
        assert exc_info.value.position == 2

    def test_message_names_path(self):
        with pytest.raises(MalformedPathError) as exc_info:
            parse_path("a b")
        assert "'a b'" in str(exc_info.value)
        assert "position 1" in str(exc_info.value)

    def test_non_string(self):
        with pytest.raises(MalformedPathError) as exc_info:
            parse_path(123)
        assert exc_info.value.position is None


class TestDeterminism:
    """Same text, same path."""

    def test_equal_results(self):
        assert PathParser("a.b[0]").parse() == PathParser("a.b[0]").parse()

    def test_cached_result_is_shared(self):
        assert parse_path("spouse.name") is parse_path("spouse.name")

    def test_parsed_path_passes_through(self):
        path = parse_path("a.b")
        assert parse_path(path) is path

    def test_path_is_immutable(self):
        path = parse_path("a")
        with pytest.raises(dataclasses.FrozenInstanceError):
            path.text = "b"
        assert isinstance(path, PropertyPath)
