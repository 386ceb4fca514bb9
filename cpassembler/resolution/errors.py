"""Exception hierarchy for classpath resolution.

Configuration errors describe a broken build description (unknown project
names, cycles, unparsable ids) and are never retried. Resolution errors come
from the artifact repositories; the assembler tolerates them for optional
descriptors and propagates them otherwise.
"""

from __future__ import annotations

from typing import Iterable, Sequence


class CpAssemblerError(Exception):
    """Base class for every error raised by cpassembler."""


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigurationError(CpAssemblerError):
    """The build description is malformed.

    Raised when a workspace file or a project declares something the engine
    cannot make sense of. Aborts assembly for the affected project.
    """


class MissingProjectReferenceError(ConfigurationError):
    """A project's ``depends_on`` names a project absent from the build."""

    def __init__(self, project: str, reference: str) -> None:
        self.project = project
        self.reference = reference
        super().__init__(
            f"Project '{project}' depends on unknown project '{reference}'"
        )


class DependencyCycleError(ConfigurationError):
    """The project graph contains a cycle reachable from the resolved project.

    ``path`` is closed: its first and last elements are the same project.
    """

    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__("Dependency cycle detected: " + " -> ".join(self.path))


class MalformedDescriptorError(ConfigurationError):
    """An id matches neither the file-prefix grammar nor the coordinate grammar."""

    def __init__(self, descriptor_id: str, reason: str) -> None:
        self.descriptor_id = descriptor_id
        self.reason = reason
        super().__init__(f"Malformed dependency '{descriptor_id}': {reason}")


# =============================================================================
# Resolution errors
# =============================================================================


class ResolutionError(CpAssemblerError):
    """Base class for failures reported by a resolution client."""


class UnresolvableCoordinateError(ResolutionError):
    """No repository could satisfy a coordinate."""

    def __init__(
        self, coordinate: str, repositories: Iterable[str], reason: str | None = None
    ) -> None:
        self.coordinate = coordinate
        self.repositories = list(repositories)
        self.reason = reason
        message = f"Could not resolve {coordinate} from {', '.join(self.repositories) or 'no repositories'}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ArtifactDownloadError(ResolutionError):
    """The bytes of a resolved artifact could not be fetched into the local cache."""

    def __init__(self, coordinate: str, url: str | None = None, reason: str | None = None) -> None:
        self.coordinate = coordinate
        self.url = url
        message = f"Failed to download {coordinate}"
        if url:
            message += f" from {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


__all__ = [
    "CpAssemblerError",
    "ConfigurationError",
    "MissingProjectReferenceError",
    "DependencyCycleError",
    "MalformedDescriptorError",
    "ResolutionError",
    "UnresolvableCoordinateError",
    "ArtifactDownloadError",
]
