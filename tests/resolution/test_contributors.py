"""Tests for classpath contributor aggregation."""

from __future__ import annotations

from pathlib import Path

from cpassembler.model.descriptors import create_file, create_maven
from cpassembler.model.project import Project
from cpassembler.resolution.contributors import ClasspathContributor, run_classpath_contributors
from cpassembler.runtime.context import BuildContext


class _StaticContributor(ClasspathContributor):
    NAME = "static"

    def __init__(self, entries) -> None:
        self.entries = entries
        self.seen = []

    def classpath_entries_for(self, project, context):
        self.seen.append(project.name)
        return self.entries


def test_entries_are_partitioned_and_deduplicated(tmp_path: Path) -> None:
    generated = create_file(tmp_path / "generated")
    first = _StaticContributor([create_maven("org.k:stdlib:1.9"), generated])
    second = _StaticContributor([create_maven("org.k:stdlib:1.9"), create_maven("org.a:ann:1")])
    project = Project(name="app")
    context = BuildContext.create([project], tmp_path, classpath_contributors=[first, second])

    entries = run_classpath_contributors(project, context)

    assert [d.id for d in entries.maven] == ["org.k:stdlib:1.9", "org.a:ann:1"]
    assert entries.files == [generated]
    assert first.seen == second.seen == ["app"]


def test_no_contributors(tmp_path: Path) -> None:
    project = Project(name="app")
    context = BuildContext.create([project], tmp_path)
    entries = run_classpath_contributors(project, context)
    assert entries.maven == [] and entries.files == []


def test_contributor_returning_none_is_ignored(tmp_path: Path) -> None:
    project = Project(name="app")
    context = BuildContext.create(
        [project], tmp_path, classpath_contributors=[_StaticContributor(None)]
    )
    entries = run_classpath_contributors(project, context)
    assert entries.maven == [] and entries.files == []
