"""Tests for descriptor parsing and the descriptor factory."""

from __future__ import annotations

from pathlib import Path

import pytest

from cpassembler.model.descriptors import (
    FileDescriptor,
    MavenDescriptor,
    MavenId,
    create,
    create_all,
    create_file,
    create_maven,
)
from cpassembler.model.version import ComparableVersion
from cpassembler.resolution.errors import ConfigurationError, MalformedDescriptorError
from cpassembler.runtime.context import BuildContext


def test_parse_full_coordinate() -> None:
    maven_id = MavenId.parse("org.x:lib:jar:sources:1.2")
    assert maven_id.group_id == "org.x"
    assert maven_id.artifact_id == "lib"
    assert maven_id.packaging == "jar"
    assert maven_id.classifier == "sources"
    assert maven_id.version == "1.2"
    assert maven_id.to_id == "org.x:lib:jar:sources:1.2"


def test_classifier_without_packaging_defaults_to_jar() -> None:
    maven_id = MavenId("net.sf", "json-lib", "2.4", classifier="jdk15")
    assert maven_id.to_id == "net.sf:json-lib:jar:jdk15:2.4"
    assert MavenId.parse(maven_id.to_id) == MavenId(
        "net.sf", "json-lib", "2.4", "jar", "jdk15"
    )


def test_missing_version_becomes_open_range() -> None:
    descriptor = create_maven("org.x:lib")
    assert descriptor.id == "org.x:lib:[0,)"
    assert descriptor.version is None
    assert descriptor.maven_id.is_range


def test_short_id_is_stable_across_versions() -> None:
    assert create_maven("org.x:lib:1.0").short_id == "org.x:lib"
    assert create_maven("org.x:lib:jar:2.0").short_id == "org.x:lib"


def test_equality_is_by_id_only() -> None:
    first = create_maven("org.x:lib:1.0", optional=True)
    second = create_maven("org.x:lib:1.0")
    assert first == second
    assert hash(first) == hash(second)
    assert first != create_maven("org.x:lib:1.1")


def test_version_is_comparable() -> None:
    assert create_maven("org.x:lib:10.0").version > create_maven("org.x:lib:9.0").version
    assert create_maven("org.x:lib:[1,2)").version is None
    assert create_maven("org.x:lib:1.0").version == ComparableVersion("1")


@pytest.mark.parametrize(
    "bad",
    [
        "lib",
        "org.x:lib:jar:sources:1.0:extra",
        "org x:lib:1.0",
        "org.x::1.0",
        "org.x:lib:",
        "org.x:lib:[1.0",
        "org.x:lib:1.0)",
    ],
)
def test_malformed_coordinates_raise(bad: str) -> None:
    with pytest.raises(MalformedDescriptorError) as excinfo:
        create(bad)
    assert excinfo.value.descriptor_id == bad


def test_jar_file_calls_materializer_once() -> None:
    calls = []

    def materializer(coordinate: str) -> Path:
        calls.append(coordinate)
        return Path("/repo") / f"{coordinate}.jar"

    descriptor = create_maven("org.x:lib:1.0").bind(materializer)
    assert descriptor.jar_file() == Path("/repo/org.x:lib:1.0.jar")
    assert descriptor.jar_file() == Path("/repo/org.x:lib:1.0.jar")
    assert calls == ["org.x:lib:1.0"]


def test_unbound_maven_descriptor_has_no_file() -> None:
    with pytest.raises(ConfigurationError):
        create_maven("org.x:lib:1.0").jar_file()


def test_file_descriptor_is_its_own_jar(tmp_path: Path) -> None:
    jar = tmp_path / "a.jar"
    descriptor = create_file(jar)
    assert not descriptor.is_maven
    assert descriptor.id == f"file://{jar}"
    assert descriptor.short_id == str(jar)
    assert descriptor.jar_file() == jar


def test_create_absolute_file_id(tmp_path: Path) -> None:
    descriptor = create(f"file://{tmp_path / 'missing.jar'}")
    assert isinstance(descriptor, FileDescriptor)
    assert descriptor.path == tmp_path / "missing.jar"


def test_create_relative_file_prefers_project_directory(tmp_path: Path) -> None:
    project_dir = tmp_path / "app"
    (project_dir / "libs").mkdir(parents=True)
    (project_dir / "libs" / "a.jar").write_bytes(b"")
    (tmp_path / "libs").mkdir()
    (tmp_path / "libs" / "a.jar").write_bytes(b"")
    context = BuildContext.create([], absolute_dir=tmp_path)

    descriptor = create("file://libs/a.jar", False, project_dir, context)
    assert descriptor.jar_file() == project_dir / "libs" / "a.jar"


def test_create_relative_file_falls_back_to_build_root(tmp_path: Path) -> None:
    project_dir = tmp_path / "app"
    project_dir.mkdir()
    (tmp_path / "libs").mkdir()
    (tmp_path / "libs" / "a.jar").write_bytes(b"")
    context = BuildContext.create([], absolute_dir=tmp_path)

    descriptor = create("file://libs/a.jar", False, project_dir, context)
    assert descriptor.jar_file() == context.absolute_dir / "libs" / "a.jar"


def test_create_relative_file_not_found(tmp_path: Path) -> None:
    context = BuildContext.create([], absolute_dir=tmp_path)
    with pytest.raises(ConfigurationError, match="Couldn't find file://libs/a.jar"):
        create("file://libs/a.jar", False, tmp_path, context)


def test_create_all_collects_every_error() -> None:
    batch = create_all(["org.x:lib:1.0", "bad", ("org.y:opt:2.0", True), "also bad"])
    assert not batch.ok
    assert [d.id for d in batch.descriptors] == ["org.x:lib:1.0", "org.y:opt:2.0"]
    assert isinstance(batch.descriptors[1], MavenDescriptor)
    assert batch.descriptors[1].optional
    assert [e.descriptor_id for e in batch.errors] == ["bad", "also bad"]
