"""Tests for key normalization."""

from datadict.relations.keys import (
    build_composite_key,
    is_empty,
    normalize_key,
    raw_key,
    split_underscore_parts,
)


def test_normalize_key():
    """Trim and case-fold; missing values become empty."""
    assert normalize_key("  Main ") == "main"
    assert normalize_key(None) == ""
    assert normalize_key("   ") == ""
    assert normalize_key("사용자") == "사용자"


def test_normalize_key_dash_placeholder():
    """A lone dash is only empty when asked for."""
    assert normalize_key("-") == "-"
    assert normalize_key(" - ", empty_like_dash=True) == ""


def test_build_composite_key():
    """Parts are normalized and joined; any empty part empties the key."""
    assert build_composite_key(["MAIN", " TB_User "]) == "main|tb_user"
    assert build_composite_key(["MAIN", None]) == ""
    assert build_composite_key(["MAIN", "-"], empty_like_dash=True) == ""
    assert build_composite_key(["MAIN", "-"]) == "main|-"


def test_split_underscore_parts():
    """Segments are trimmed, lowercased and empties dropped."""
    assert split_underscore_parts("USER__ID_ ") == ["user", "id"]
    assert split_underscore_parts(None) == []


def test_is_empty_and_raw_key():
    """Placeholder detection and raw display keys."""
    assert is_empty(None)
    assert is_empty(" - ")
    assert not is_empty("x")
    assert raw_key(["MAIN", None, "Name"]) == "MAIN||Name"
