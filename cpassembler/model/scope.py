"""Dependency scopes and the scope filter used to pick declared dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from cpassembler.model.descriptors import Descriptor
    from cpassembler.model.project import Project


class Scope(str, Enum):
    """Declared usage category of a dependency."""

    COMPILE = "compile"
    PROVIDED = "provided"
    RUNTIME = "runtime"
    TEST = "test"

    @property
    def project_attribute(self) -> str:
        """Name of the ``Project`` field holding dependencies of this scope."""
        return f"{self.value}_dependencies"

    @classmethod
    def parse(cls, value: str) -> "Scope":
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(f"Invalid scope '{value}'. Valid scopes: {valid}") from exc


@dataclass(frozen=True)
class ScopeFilter:
    """Effective set of scopes for one resolution request.

    Use :meth:`create` rather than the constructor: it applies the default
    rules (``TEST`` for test classpaths, ``COMPILE`` otherwise) when no
    override, or an empty one, is given.
    """

    scopes: Tuple[Scope, ...]

    @classmethod
    def create(
        cls, is_test: bool, override: Optional[Sequence[Scope]] = None
    ) -> "ScopeFilter":
        if override:
            return cls(tuple(dict.fromkeys(override)))
        return cls((Scope.TEST,) if is_test else (Scope.COMPILE,))

    def __contains__(self, scope: object) -> bool:
        return scope in self.scopes

    def __iter__(self):
        return iter(self.scopes)

    def to_dependencies(self, project: "Project") -> List["Descriptor"]:
        """Return the project's declared descriptors whose scope is accepted."""
        result: dict = {}
        for scope in self.scopes:
            for descriptor in getattr(project, scope.project_attribute):
                result.setdefault(descriptor, None)
        return list(result)


def parse_scopes(values: Optional[Iterable[str]]) -> List[Scope]:
    """Parse scope names coming from configuration or the command line."""
    return [Scope.parse(v) for v in values or []]


__all__ = ["Scope", "ScopeFilter", "parse_scopes"]
