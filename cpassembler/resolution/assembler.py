"""Classpath assembly: gather candidates, resolve them, reconcile versions.

Candidates come from four places: descriptors passed by the caller, the
project's own declarations, classpath contributors and the projects it
depends on (their class directories and their own declarations). Maven
candidates are resolved concurrently; file candidates pass through. The
merged set is reconciled so that one version per artifact survives, and for
test classpaths the project's own output directories are placed first so
that older builds of the project elsewhere on the classpath cannot shadow
them.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

from cpassembler.model.descriptors import (
    Descriptor,
    create_file,
    create_maven,
)
from cpassembler.model.project import Project, output_dir, output_test_dir
from cpassembler.model.scope import Scope, ScopeFilter
from cpassembler.resolution.client import BaseResolutionClient
from cpassembler.resolution.contributors import run_classpath_contributors
from cpassembler.resolution.errors import ResolutionError, UnresolvableCoordinateError
from cpassembler.resolution.reconciler import reconcile

if TYPE_CHECKING:
    from cpassembler.runtime.context import BuildContext

logger = logging.getLogger("cpassembler.resolution.assembler")


class DependencyManager:
    """Assemble compile and test classpaths for in-build projects.

    The manager holds no per-call state; concurrent ``resolve`` calls for
    different projects are safe as long as the resolution client is.
    """

    def __init__(self, resolver: BaseResolutionClient) -> None:
        self.resolver = resolver

    def resolve(
        self,
        project: Project,
        context: "BuildContext",
        is_test: bool,
        scope_override: Optional[Sequence[Scope]] = None,
        extra_descriptors: Optional[Iterable[Descriptor]] = None,
    ) -> List[Descriptor]:
        """Compute the classpath of ``project``.

        Args:
            project: Project whose classpath is assembled.
            context: Build context (root directory, project graph, contributors).
            is_test: Whether a test classpath is requested.
            scope_override: Scopes to use instead of the default; empty means default.
            extra_descriptors: Additional descriptors supplied by the caller.

        Returns:
            List[Descriptor]: Output directories first (test classpaths), then
            one descriptor per artifact.

        Raises:
            MissingProjectReferenceError: A ``depends_on`` name is unknown.
            DependencyCycleError: The project graph has a reachable cycle.
            UnresolvableCoordinateError: A non-optional descriptor cannot be resolved.
        """
        scope_filter = ScopeFilter.create(is_test, scope_override)
        logger.info(
            "Resolving %s classpath for %s (scopes: %s)",
            "test" if is_test else "compile",
            project.name,
            ", ".join(s.value for s in scope_filter),
        )

        head: List[Descriptor] = []
        if is_test:
            head = [
                create_file(output_dir(project, context)),
                create_file(output_test_dir(project, context)),
            ]

        candidates: Dict[Descriptor, None] = {}
        pass_through: Dict[Descriptor, None] = {}

        for descriptor in extra_descriptors or ():
            candidates.setdefault(descriptor, None)
        for descriptor in scope_filter.to_dependencies(project):
            candidates.setdefault(descriptor, None)

        contributed = run_classpath_contributors(project, context)
        for descriptor in contributed.maven:
            candidates.setdefault(descriptor, None)
        for descriptor in contributed.files:
            pass_through.setdefault(descriptor, None)

        for descriptor in self._dependent_project_dependencies(
            project, context, scope_filter
        ):
            target = candidates if descriptor.is_maven else pass_through
            target.setdefault(descriptor, None)

        resolved = self._resolve_candidates(list(candidates), scope_filter, context)

        merged: Dict[Descriptor, None] = dict.fromkeys(resolved)
        for descriptor in pass_through:
            merged.setdefault(descriptor, None)

        reconciled = reconcile(merged)
        head_keys = set(head)
        result = head + [d for d in reconciled if d not in head_keys]
        logger.info("Classpath for %s has %d entries", project.name, len(result))
        return result

    def _dependent_project_dependencies(
        self, project: Project, context: "BuildContext", scope_filter: ScopeFilter
    ) -> List[Descriptor]:
        """Class directories and declarations of every project ``project`` depends on."""
        siblings = context.project_graph.closure(project)
        result: List[Descriptor] = []

        for sibling in siblings:
            # A project without sources legitimately has no output directories.
            for class_dir in (output_dir(sibling, context), output_test_dir(sibling, context)):
                if class_dir.exists():
                    result.append(create_file(class_dir))
                else:
                    logger.debug("Skipping missing class directory %s", class_dir)

        for sibling in siblings:
            result.extend(scope_filter.to_dependencies(sibling))
        return result

    def _resolve_candidates(
        self,
        candidates: List[Descriptor],
        scope_filter: ScopeFilter,
        context: "BuildContext",
    ) -> List[Descriptor]:
        maven = [c for c in candidates if c.is_maven]
        timeout = context.config.timeout
        outcomes: Dict[Descriptor, List[Descriptor]] = {}

        if maven:
            workers = min(context.config.max_workers, len(maven))
            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="cpassembler-resolve"
            ) as pool:
                futures = [
                    (d, pool.submit(self._resolve_one, d, scope_filter, timeout))
                    for d in maven
                ]

            # The pool has shut down: every resolution is finished before merging.
            errors: List[ResolutionError] = []
            for descriptor, future in futures:
                try:
                    outcomes[descriptor] = future.result()
                except UnresolvableCoordinateError as exc:
                    if descriptor.optional:
                        logger.warning("Dropping optional dependency %s: %s", descriptor.id, exc)
                        outcomes[descriptor] = []
                    else:
                        errors.append(exc)
            if errors:
                for extra in errors[1:]:
                    logger.error("%s", extra)
                raise errors[0]

        result: List[Descriptor] = []
        for candidate in candidates:
            if candidate.is_maven:
                result.extend(outcomes[candidate])
            else:
                result.append(candidate)
        return result

    def _resolve_one(
        self, descriptor: Descriptor, scope_filter: ScopeFilter, timeout: float
    ) -> List[Descriptor]:
        coordinates = self.resolver.resolve_all(
            descriptor.id, scope_filter.scopes, timeout=timeout
        )
        logger.debug("%s resolved to %s", descriptor.id, ", ".join(coordinates))
        return [
            create_maven(coordinate).bind(self.resolver.materialize)
            for coordinate in coordinates
        ]


def classpath_files(classpath: Iterable[Descriptor]) -> List[Path]:
    """Materialize every entry and return the file paths, in order."""
    return [descriptor.jar_file() for descriptor in classpath]


def classpath_string(classpath: Iterable[Descriptor]) -> str:
    """Render a classpath the way a compiler's ``-classpath`` option expects."""
    return os.pathsep.join(str(path) for path in classpath_files(classpath))


__all__ = ["DependencyManager", "classpath_files", "classpath_string"]
