"""Tests for version reconciliation."""

from __future__ import annotations

from pathlib import Path

from cpassembler.model.descriptors import create_file, create_maven
from cpassembler.resolution.reconciler import reconcile


def _ids(descriptors) -> list:
    return [d.id for d in descriptors]


def test_highest_version_wins_numerically() -> None:
    result = reconcile(
        [create_maven("org.x:lib:9.0"), create_maven("org.x:lib:10.0"), create_maven("org.x:lib:1.2")]
    )
    assert _ids(result) == ["org.x:lib:10.0"]


def test_groups_keep_first_seen_order() -> None:
    result = reconcile(
        [
            create_maven("org.b:b:1.0"),
            create_maven("org.a:a:1.0"),
            create_maven("org.b:b:2.0"),
        ]
    )
    assert _ids(result) == ["org.b:b:2.0", "org.a:a:1.0"]


def test_one_entry_per_short_id() -> None:
    result = reconcile(
        [
            create_maven("org.x:lib:1.0"),
            create_maven("org.x:lib:1.0-SNAPSHOT"),
            create_maven("org.x:other:3"),
            create_maven("org.x:lib:1.0-rc1"),
        ]
    )
    assert sorted(d.short_id for d in result) == ["org.x:lib", "org.x:other"]
    assert "org.x:lib:1.0" in _ids(result)


def test_equal_versions_keep_first() -> None:
    first = create_maven("org.x:lib:1.0")
    second = create_maven("org.x:lib:jar:1")
    assert reconcile([first, second])[0] is first
    assert reconcile([second, first])[0] is second


def test_file_descriptors_pass_through(tmp_path: Path) -> None:
    classes = create_file(tmp_path / "classes")
    result = reconcile([classes, create_maven("org.x:lib:1.0"), classes])
    assert result == [classes, create_maven("org.x:lib:1.0")]


def test_reconcile_is_deterministic() -> None:
    inputs = [create_maven(f"org.x:lib{i % 3}:{i}") for i in range(10)]
    assert _ids(reconcile(inputs)) == _ids(reconcile(list(inputs)))
