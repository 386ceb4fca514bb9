"""Project graph and transitive closure over ``depends_on`` edges.

The closure walk keeps a ``visiting`` path separate from the ``visited`` set:
reaching a project that is still on the path is a cycle and is reported with
the full path, while reaching an already finished project (a diamond) is
simply skipped.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

import networkx as nx

from cpassembler.model.project import Project
from cpassembler.resolution.errors import (
    ConfigurationError,
    DependencyCycleError,
    MissingProjectReferenceError,
)

logger = logging.getLogger("cpassembler.graph.closure")

EdgeFn = Callable[[Project], Iterable[Project]]


def transitive_closure(root: Project, edges: EdgeFn) -> List[Project]:
    """Return every project reachable from ``root``, excluding ``root``.

    Projects are listed in first-discovery (depth-first pre-) order.

    Raises:
        DependencyCycleError: A cycle is reachable from ``root``.
    """
    path: List[str] = [root.name]
    on_path: Set[str] = {root.name}
    visited: Set[str] = set()
    result: List[Project] = []
    stack: List[Tuple[Project, Iterator[Project]]] = [(root, iter(edges(root)))]

    while stack:
        node, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            path.pop()
            on_path.discard(node.name)
            visited.add(node.name)
            continue

        if child.name in on_path:
            start = path.index(child.name)
            raise DependencyCycleError(path[start:] + [child.name])
        if child.name in visited:
            continue

        result.append(child)
        path.append(child.name)
        on_path.add(child.name)
        stack.append((child, iter(edges(child))))

    logger.debug(
        "Closure of %s: %s", root.name, ", ".join(p.name for p in result) or "<empty>"
    )
    return result


class ProjectGraph:
    """Immutable index of the in-build projects.

    Also mirrors the ``depends_on`` relation into a ``networkx.DiGraph`` for
    whole-graph validation (all cycles, all dangling references).
    """

    def __init__(self, projects: Iterable[Project]) -> None:
        self._projects: Dict[str, Project] = {}
        for project in projects:
            if project.name in self._projects:
                raise ConfigurationError(f"Duplicate project name '{project.name}'")
            self._projects[project.name] = project

        self._graph = nx.DiGraph()
        self._missing: List[Tuple[str, str]] = []
        for project in self._projects.values():
            self._graph.add_node(project.name)
            for reference in project.depends_on:
                if reference in self._projects:
                    self._graph.add_edge(project.name, reference)
                else:
                    self._missing.append((project.name, reference))

    def __contains__(self, name: object) -> bool:
        return name in self._projects

    def __iter__(self) -> Iterator[Project]:
        return iter(self._projects.values())

    def __len__(self) -> int:
        return len(self._projects)

    @property
    def names(self) -> List[str]:
        return list(self._projects)

    def get(self, name: str) -> Project:
        try:
            return self._projects[name]
        except KeyError:
            raise ConfigurationError(f"Unknown project '{name}'") from None

    def dependencies_of(self, project: Project) -> List[Project]:
        """Resolve ``project.depends_on`` to projects.

        Raises:
            MissingProjectReferenceError: A name is not part of the build.
        """
        result = []
        for reference in project.depends_on:
            target = self._projects.get(reference)
            if target is None:
                raise MissingProjectReferenceError(project.name, reference)
            result.append(target)
        return result

    def closure(self, project: Union[str, Project]) -> List[Project]:
        root = self.get(project) if isinstance(project, str) else project
        return transitive_closure(root, self.dependencies_of)

    def missing_references(self) -> List[Tuple[str, str]]:
        return list(self._missing)

    def find_cycles(self, limit: Optional[int] = None) -> List[List[str]]:
        """Return elementary cycles of the project graph, at most ``limit``."""
        cycles = nx.simple_cycles(self._graph)
        if limit is not None:
            cycles = itertools.islice(cycles, limit)
        return [list(cycle) for cycle in cycles]

    def validate(self, limit: Optional[int] = None) -> List[ConfigurationError]:
        """Collect every dangling reference and cycle without raising."""
        errors: List[ConfigurationError] = [
            MissingProjectReferenceError(project, reference)
            for project, reference in self._missing
        ]
        for cycle in self.find_cycles(limit):
            errors.append(DependencyCycleError(cycle + [cycle[0]]))
        return errors


__all__ = ["ProjectGraph", "transitive_closure"]
