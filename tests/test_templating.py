"""Unit tests for templating module."""

import re

import pytest

from tablecopy.templating import TagSet, render


class TestRender:
    """Tests for render function."""

    def test_flat_tags(self) -> None:
        """Test bare tokens are replaced from the top level."""
        assert render("${firstName} ${lastName}", {"firstName": "John", "lastName": "Doe"}) == "John Doe"

    def test_grouped_tags(self) -> None:
        """Test group.name tokens look up one level down."""
        tags = {"user": {"firstName": "John", "lastName": "Doe"}}
        assert render("${user.firstName} ${user.lastName}", tags) == "John Doe"

    def test_no_token_syntax_remains(self) -> None:
        """Test every token is replaced when all keys exist."""
        out = render("bcp ${t} out ${f} -b ${n}", {"t": "orders", "f": "tmp.bcp", "n": 500})
        assert out == "bcp orders out tmp.bcp -b 500"
        assert "${" not in out

    def test_missing_tag_removed_by_default(self) -> None:
        """Test missing tags become empty strings."""
        assert render("a${missing}b", {"other": 1}) == "ab"

    def test_missing_tag_kept_when_requested(self) -> None:
        """Test keep_missing_tags preserves the token text."""
        assert render("a${missing}b ${g.x}", {"other": 1}, keep_missing_tags=True) == "a${missing}b ${g.x}"

    def test_group_that_is_not_a_mapping(self) -> None:
        """Test group lookups on a scalar value count as missing."""
        assert render("[${a.b}]", {"a": "scalar"}) == "[]"

    def test_none_value_counts_as_missing(self) -> None:
        """Test None values behave like absent keys."""
        assert render("[${a}]", {"a": None}, keep_missing_tags=True) == "[${a}]"

    def test_values_are_not_rescanned(self) -> None:
        """Test substitution is not recursive."""
        assert render("${a}", {"a": "${b}", "b": "x"}) == "${b}"

    def test_value_stringification(self) -> None:
        """Test numbers and booleans stringify deterministically."""
        assert render("${n} ${f} ${t} ${x}", {"n": 10000, "f": 1.5, "t": True, "x": False}) == "10000 1.5 true false"

    def test_empty_source_or_no_tags_return_source(self) -> None:
        """Test empty source or None tags short-circuit."""
        assert render("", {"a": 1}) == ""
        assert render("${a}", None) == "${a}"

    def test_empty_tag_map_still_replaces(self) -> None:
        """Test an empty mapping removes every token."""
        assert render("bcp ${x} out", {}) == "bcp  out"
        assert render("bcp ${x} out", {}, keep_missing_tags=True) == "bcp ${x} out"

    def test_non_scalar_values_are_stringified(self) -> None:
        """Test plain mappings with lists or deep nesting never raise."""
        tags = {"servers": ["h1", "h2"], "g": {"inner": {"k": 1}, "n": 2}}
        assert render("${servers}|${g.n}|${g.inner}", tags) == "h1,h2|2|{'k': 1}"

    def test_custom_template(self) -> None:
        """Test a caller-supplied token pattern."""
        assert render("{{name}}!", {"name": "x"}, template=r"\{\{(?P<name>\w+)\}\}") == "x!"

    def test_malformed_template_raises(self) -> None:
        """Test an invalid regex pattern is reported."""
        with pytest.raises(re.error):
            render("${a}", {"a": 1}, template="(")


class TestTagSet:
    """Tests for TagSet validation."""

    def test_splits_flat_and_groups(self) -> None:
        """Test scalars and mappings are separated."""
        tags = TagSet.from_mapping({"a": 1, "g": {"b": "x"}})
        assert tags.flat == {"a": 1}
        assert tags.groups == {"g": {"b": "x"}}
        assert tags.lookup("g", "b") == "x"
        assert tags.lookup(None, "a") == 1
        assert tags.lookup("missing", "b") is None

    def test_rejects_deep_nesting(self) -> None:
        """Test groups may only contain scalars."""
        with pytest.raises(TypeError):
            TagSet.from_mapping({"g": {"inner": {"too": "deep"}}})

    def test_rejects_unsupported_values(self) -> None:
        """Test lists are not valid tag values."""
        with pytest.raises(TypeError):
            TagSet.from_mapping({"a": [1, 2]})

    def test_render_accepts_tagset(self) -> None:
        """Test a prebuilt TagSet can be passed directly."""
        tags = TagSet.from_mapping({"a": "x", "g": {"b": "y"}})
        assert render("${a}${g.b}", tags) == "xy"
