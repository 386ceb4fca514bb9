"""Classpath contributors: extension points that inject extra descriptors.

Plugins implement :class:`ClasspathContributor` and are registered on the
:class:`~cpassembler.runtime.context.BuildContext`. Their Maven entries go
through resolution like declared dependencies; their file entries are passed
through untouched.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List

from cpassembler.model.descriptors import Descriptor

if TYPE_CHECKING:
    from cpassembler.model.project import Project
    from cpassembler.runtime.context import BuildContext

logger = logging.getLogger("cpassembler.resolution.contributors")


class ClasspathContributor(ABC):
    """Base class for classpath contributors."""

    NAME: str = "base"

    @abstractmethod
    def classpath_entries_for(
        self, project: "Project", context: "BuildContext"
    ) -> Iterable[Descriptor]:
        """Return the descriptors this contributor adds for ``project``.

        Args:
            project: Project whose classpath is being assembled.
            context: Build context of the current resolution.

        Returns:
            Iterable[Descriptor]: Maven or file descriptors, in any order.
        """
        raise NotImplementedError


@dataclass
class ContributedEntries:
    """Contributor output partitioned by resolution path."""

    maven: List[Descriptor] = field(default_factory=list)
    files: List[Descriptor] = field(default_factory=list)


def run_classpath_contributors(
    project: "Project", context: "BuildContext"
) -> ContributedEntries:
    """Union the output of every registered contributor.

    Duplicates across contributors are dropped here; version duplicates are
    left for the reconciler.
    """
    maven: dict = {}
    files: dict = {}
    for contributor in context.classpath_contributors:
        entries = list(contributor.classpath_entries_for(project, context) or ())
        logger.debug(
            "Contributor %s added %d entries for %s",
            getattr(contributor, "NAME", type(contributor).__name__),
            len(entries),
            project.name,
        )
        for entry in entries:
            (maven if entry.is_maven else files).setdefault(entry, None)

    return ContributedEntries(maven=list(maven), files=list(files))


__all__ = ["ClasspathContributor", "ContributedEntries", "run_classpath_contributors"]
