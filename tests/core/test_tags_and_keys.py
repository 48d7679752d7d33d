from __future__ import annotations

import pytest

from formwire.core.errors import PatternError
from formwire.core.keys import map_key, match_subkey, subkey_pattern
from formwire.core.tags import FieldTag, parse_tag


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, FieldTag(key="")),
        ("", FieldTag(key="")),
        ("name", FieldTag(key="name")),
        ("name,omitempty", FieldTag(key="name", omit_empty=True)),
        ("name,unknown,omitempty", FieldTag(key="name", omit_empty=True)),
        ("name,unknown", FieldTag(key="name")),
        (",omitempty", FieldTag(key="", omit_empty=True)),
        ("-", FieldTag(key="-")),
        ("-,omitempty", FieldTag(key="-")),
    ],
)
def test_parse_tag(raw: str | None, expected: FieldTag) -> None:
    assert parse_tag(raw) == expected


@pytest.mark.parametrize("raw,included", [("name", True), ("-", False), ("", False), (",omitempty", False)])
def test_tag_inclusion(raw: str, included: bool) -> None:
    assert parse_tag(raw).included is included


def test_map_key_and_pattern_agree() -> None:
    pattern = subkey_pattern("filters")
    assert match_subkey(pattern, map_key("filters", "color")) == "color"
    assert match_subkey(pattern, "filters[]") == ""
    assert match_subkey(pattern, "filters[a][b]") == "a][b"


@pytest.mark.parametrize("raw_key", ["filters", "filters[", "filtersX[a]", "xfilters[a]", "filters[a]x", "filters[a]\n", "filters[a\nb]"])
def test_match_subkey_rejects_other_keys(raw_key: str) -> None:
    assert match_subkey(subkey_pattern("filters"), raw_key) is None


def test_logical_key_is_matched_literally() -> None:
    pattern = subkey_pattern("a.b+")
    assert match_subkey(pattern, "a.b+[x]") == "x"
    assert match_subkey(pattern, "aXbb[x]") is None


@pytest.mark.parametrize("key", ["a[b", "a]b", "a[b]"])
def test_bracketed_logical_key_is_rejected(key: str) -> None:
    with pytest.raises(PatternError):
        subkey_pattern(key)
    with pytest.raises(PatternError):
        map_key(key, "x")
