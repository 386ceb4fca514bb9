"""Turn a workspace description into a :class:`BuildContext`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from cpassembler.config.schema import DependencyEntry, ProjectConfig, WorkspaceConfig
from cpassembler.model.descriptors import Descriptor, create_all
from cpassembler.model.project import Project
from cpassembler.resolution.contributors import ClasspathContributor
from cpassembler.resolution.errors import ConfigurationError
from cpassembler.runtime.config_loader import (
    ConfigSource,
    is_path_source,
    load_workspace_config,
)
from cpassembler.runtime.context import BuildContext

logger = logging.getLogger("cpassembler.runtime.workspace")


def _default_root(source: ConfigSource) -> Path:
    if isinstance(source, (str, Path)) and is_path_source(source):
        return Path(source).resolve().parent
    return Path.cwd()


def _entries(entries: Sequence[DependencyEntry]) -> List[Tuple[str, bool]]:
    return [(entry.id, entry.optional) for entry in entries]


def _build_project(
    config: ProjectConfig, lookup: BuildContext, errors: List[str]
) -> Project:
    project_dir = lookup.absolute_dir / config.directory
    declared = {}
    for scope_name in ("compile", "provided", "runtime", "test"):
        batch = create_all(
            _entries(getattr(config, scope_name)), project_dir, lookup
        )
        errors.extend(f"{config.name} ({scope_name}): {err}" for err in batch.errors)
        declared[scope_name] = batch.descriptors

    return Project(
        name=config.name,
        directory=Path(config.directory),
        depends_on=tuple(config.depends_on),
        compile_dependencies=tuple(declared["compile"]),
        provided_dependencies=tuple(declared["provided"]),
        runtime_dependencies=tuple(declared["runtime"]),
        test_dependencies=tuple(declared["test"]),
        build_directory=config.build_directory,
    )


def build_context(
    workspace: WorkspaceConfig,
    root: Path,
    classpath_contributors: Optional[List[ClasspathContributor]] = None,
) -> BuildContext:
    """Build the context for an already validated workspace.

    Every project is parsed before reporting, so one error lists every
    malformed or missing dependency id in the workspace.

    Raises:
        ConfigurationError: At least one declared id could not be parsed.
    """
    lookup = BuildContext.create([], absolute_dir=root, config=workspace.resolver)
    errors: List[str] = []
    projects = [_build_project(p, lookup, errors) for p in workspace.projects]

    if errors:
        raise ConfigurationError(
            f"{len(errors)} invalid dependency id(s) in workspace:\n  "
            + "\n  ".join(errors)
        )

    context = BuildContext.create(
        projects,
        absolute_dir=lookup.absolute_dir,
        config=workspace.resolver,
        classpath_contributors=classpath_contributors,
    )
    logger.info(
        "Loaded workspace %s with %d project(s)", context.absolute_dir, len(projects)
    )
    return context


def load_workspace(
    source: ConfigSource,
    root: Optional[Path] = None,
    classpath_contributors: Optional[List[ClasspathContributor]] = None,
) -> BuildContext:
    """Load a workspace file (or mapping) and build its context.

    Args:
        source: Anything :func:`load_workspace_config` accepts.
        root: Build root; defaults to the workspace file's directory, or the
            current directory for inline sources.
        classpath_contributors: Contributors to register on the context.

    Returns:
        BuildContext: Context holding every declared project.
    """
    workspace = load_workspace_config(source)
    return build_context(
        workspace, Path(root) if root else _default_root(source), classpath_contributors
    )


def project_descriptors(project: Project) -> List[Descriptor]:
    """All declared descriptors of ``project``, across scopes."""
    return [
        *project.compile_dependencies,
        *project.provided_dependencies,
        *project.runtime_dependencies,
        *project.test_dependencies,
    ]


__all__ = ["build_context", "load_workspace", "project_descriptors"]
