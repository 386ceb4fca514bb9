"""Tests for Maven version ordering and ranges."""

from __future__ import annotations

import pytest

from cpassembler.model.version import ComparableVersion, VersionRange


def _v(raw: str) -> ComparableVersion:
    return ComparableVersion(raw)


@pytest.mark.parametrize(
    ("lower", "higher"),
    [
        ("9.0", "10.0"),
        ("1.9", "1.10"),
        ("1.0-alpha1", "1.0-beta1"),
        ("1.0-beta2", "1.0-rc1"),
        ("1.0-rc1", "1.0-SNAPSHOT"),
        ("1.0-SNAPSHOT", "1.0"),
        ("1.0", "1.0-sp1"),
        ("1.0", "1.0.1"),
        ("1.0-alpha", "1.0.1"),
        ("2.0-M1", "2.0-RC1"),
    ],
)
def test_versions_are_ordered_numerically_and_by_qualifier(lower: str, higher: str) -> None:
    assert _v(lower) < _v(higher)
    assert _v(higher) > _v(lower)


def test_trailing_zeros_and_release_aliases_are_equal() -> None:
    assert _v("1") == _v("1.0") == _v("1.0.0")
    assert _v("1.0-final") == _v("1.0")
    assert _v("1.0.GA") == _v("1")
    assert hash(_v("1.0")) == hash(_v("1"))


def test_unknown_qualifiers_sort_after_release_alphabetically() -> None:
    assert _v("1.0") < _v("1.0-jre")
    assert _v("1.0-android") < _v("1.0-jre")


def test_snapshot_detection() -> None:
    assert _v("1.2-SNAPSHOT").is_snapshot
    assert not _v("1.2").is_snapshot


def test_sorting_picks_highest() -> None:
    versions = ["1.2", "1.10", "1.9.1", "1.10-rc1"]
    assert str(max(versions, key=ComparableVersion)) == "1.10"


def test_is_range() -> None:
    assert VersionRange.is_range("[1.0,2.0)")
    assert VersionRange.is_range("(,1.0]")
    assert not VersionRange.is_range("1.0")
    assert not VersionRange.is_range("   ")
    assert not VersionRange.is_range(None)


def test_range_bounds() -> None:
    spec = VersionRange.parse("[1.0,2.0)")
    assert spec.contains("1.0")
    assert spec.contains("1.5.3")
    assert not spec.contains("2.0")
    assert not spec.contains("0.9")


def test_open_range_accepts_everything() -> None:
    spec = VersionRange.parse("[0,)")
    assert spec.contains("0.0.1")
    assert spec.contains("99")


def test_exact_and_multiple_restrictions() -> None:
    assert VersionRange.parse("[1.2]").contains("1.2.0")
    assert not VersionRange.parse("[1.2]").contains("1.2.1")

    spec = VersionRange.parse("[1,2),[3,4)")
    assert spec.contains("1.5")
    assert spec.contains("3.0")
    assert not spec.contains("2.5")


def test_select_returns_highest_match() -> None:
    spec = VersionRange.parse("[1.0,2.0)")
    assert spec.select(["0.9", "1.0", "1.9", "1.10", "2.0"]) == "1.10"
    assert spec.select(["2.0", "3.0"]) is None


@pytest.mark.parametrize("spec", ["[1.0", "[2.0,1.0]", "(1.0)", "[1,2,3]", "[1,2) junk"])
def test_invalid_ranges_raise(spec: str) -> None:
    with pytest.raises(ValueError):
        VersionRange.parse(spec)
