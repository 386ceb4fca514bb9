"""Build context passed explicitly into every resolution step.

The context is a read-only snapshot: it carries the build root, the
resolver configuration, the project graph and the registered classpath
contributors. Nothing in the engine looks these up from global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional

from cpassembler.config.schema import ResolverConfig

if TYPE_CHECKING:
    from cpassembler.graph.closure import ProjectGraph
    from cpassembler.model.project import Project
    from cpassembler.resolution.contributors import ClasspathContributor


@dataclass(frozen=True)
class BuildContext:
    """Build-wide state shared by all resolve calls.

    Args:
        absolute_dir: Absolute root of the build; relative project
            directories and relative ``file://`` ids are resolved against it.
        project_graph: All in-build projects.
        config: Resolver and output layout settings.
        classpath_contributors: Extension points that inject descriptors.
    """

    absolute_dir: Path
    project_graph: "ProjectGraph"
    config: ResolverConfig = field(default_factory=ResolverConfig)
    classpath_contributors: tuple = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "absolute_dir", Path(self.absolute_dir).resolve())
        object.__setattr__(
            self, "classpath_contributors", tuple(self.classpath_contributors)
        )

    @classmethod
    def create(
        cls,
        projects: Iterable["Project"],
        absolute_dir: Optional[Path] = None,
        config: Optional[ResolverConfig] = None,
        classpath_contributors: Optional[List["ClasspathContributor"]] = None,
    ) -> "BuildContext":
        """Build a context from a plain list of projects."""
        from cpassembler.graph.closure import ProjectGraph

        return cls(
            absolute_dir=absolute_dir or Path.cwd(),
            project_graph=ProjectGraph(projects),
            config=config or ResolverConfig.default(),
            classpath_contributors=tuple(classpath_contributors or ()),
        )

    def project(self, name: str) -> "Project":
        return self.project_graph.get(name)


__all__ = ["BuildContext"]
