"""Dependency descriptors: the unit the classpath is assembled from.

Two variants share the :class:`Descriptor` interface:

* :class:`MavenDescriptor` wraps a symbolic coordinate that must go through a
  resolution client before it names a file.
* :class:`FileDescriptor` already names a concrete path (a jar or a class
  directory) and bypasses resolution.

Ids use the ``file://`` prefix for paths and
``group:artifact[:packaging[:classifier]]:version`` for coordinates.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Callable,
    ClassVar,
    Iterable,
    List,
    Optional,
    Tuple,
    Union,
)

from cpassembler.model.version import ComparableVersion, VersionRange
from cpassembler.resolution.errors import (
    ConfigurationError,
    MalformedDescriptorError,
)

if TYPE_CHECKING:
    from cpassembler.runtime.context import BuildContext

logger = logging.getLogger("cpassembler.model.descriptors")

FILE_PREFIX = "file://"
OPEN_RANGE = "[0,)"
DEFAULT_PACKAGING = "jar"

_NAME_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")

Materializer = Callable[[str], Path]


@dataclass(frozen=True)
class MavenId:
    """Parsed Maven coordinate."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    packaging: Optional[str] = None
    classifier: Optional[str] = None

    @classmethod
    def parse(cls, coordinate: str) -> "MavenId":
        """Parse ``group:artifact[:packaging[:classifier]][:version]``.

        Raises:
            MalformedDescriptorError: If the string does not follow the grammar.
        """
        text = coordinate.strip()
        parts = text.split(":")
        if len(parts) < 2 or len(parts) > 5:
            raise MalformedDescriptorError(
                coordinate, "expected group:artifact[:packaging[:classifier]]:version"
            )

        group_id, artifact_id = parts[0], parts[1]
        packaging = classifier = version = None
        if len(parts) == 3:
            version = parts[2]
        elif len(parts) == 4:
            packaging, version = parts[2], parts[3]
        elif len(parts) == 5:
            packaging, classifier, version = parts[2], parts[3], parts[4]

        for label, value in (
            ("group", group_id),
            ("artifact", artifact_id),
            ("packaging", packaging),
            ("classifier", classifier),
        ):
            if value is not None and not _NAME_RE.match(value):
                raise MalformedDescriptorError(coordinate, f"invalid {label} '{value}'")

        if version is not None:
            version = version.strip()
            if not version:
                raise MalformedDescriptorError(coordinate, "empty version")
            if VersionRange.is_range(version):
                try:
                    VersionRange.parse(version)
                except ValueError as exc:
                    raise MalformedDescriptorError(coordinate, str(exc)) from exc
            elif any(ch in "[](), \t" for ch in version):
                raise MalformedDescriptorError(coordinate, f"invalid version '{version}'")

        return cls(group_id, artifact_id, version, packaging, classifier)

    @property
    def short_id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def has_version(self) -> bool:
        return self.version is not None

    @property
    def is_range(self) -> bool:
        return VersionRange.is_range(self.version)

    def with_version(self, version: str) -> "MavenId":
        return replace(self, version=version)

    @property
    def to_id(self) -> str:
        """Canonical id; a missing version becomes the open range ``[0,)``."""
        parts = [self.group_id, self.artifact_id]
        if self.packaging or self.classifier:
            parts.append(self.packaging or "jar")
            if self.classifier:
                parts.append(self.classifier)
        parts.append(self.version or OPEN_RANGE)
        return ":".join(parts)

    def __str__(self) -> str:
        return self.to_id


class Descriptor(ABC):
    """Capability shared by every classpath entry."""

    is_maven: ClassVar[bool]
    optional: bool

    @property
    @abstractmethod
    def id(self) -> str:
        """Full id string, file prefix or coordinate."""

    @property
    @abstractmethod
    def short_id(self) -> str:
        """Reconciliation key, stable across versions of one artifact."""

    @property
    def version(self) -> Optional[ComparableVersion]:
        return None

    @abstractmethod
    def jar_file(self) -> Path:
        """Path of the binary on disk, materialized on first call."""

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class MavenDescriptor(Descriptor):
    """A symbolic coordinate, optionally bound to a materializer once resolved."""

    is_maven: ClassVar[bool] = True

    maven_id: MavenId
    optional: bool = field(default=False, compare=False)
    materializer: Optional[Materializer] = field(default=None, compare=False, repr=False)

    @property
    def id(self) -> str:
        return self.maven_id.to_id

    @property
    def short_id(self) -> str:
        return self.maven_id.short_id

    @property
    def version(self) -> Optional[ComparableVersion]:
        if self.maven_id.version is None or self.maven_id.is_range:
            return None
        return ComparableVersion(self.maven_id.version)

    def bind(self, materializer: Materializer) -> "MavenDescriptor":
        return replace(self, materializer=materializer)

    def jar_file(self) -> Path:
        cached = self.__dict__.get("_jar_file")
        if cached is None:
            if self.materializer is None:
                raise ConfigurationError(
                    f"{self.id} has not been resolved; no artifact file is available"
                )
            cached = self.materializer(self.id)
            object.__setattr__(self, "_jar_file", cached)
        return cached


@dataclass(frozen=True)
class FileDescriptor(Descriptor):
    """A concrete path that bypasses resolution."""

    is_maven: ClassVar[bool] = False

    path: Path
    optional: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    @property
    def id(self) -> str:
        return FILE_PREFIX + str(self.path)

    @property
    def short_id(self) -> str:
        return str(self.path)

    def jar_file(self) -> Path:
        return self.path


# =============================================================================
# Factory
# =============================================================================


def create_maven(coordinate: str, optional: bool = False) -> MavenDescriptor:
    return MavenDescriptor(MavenId.parse(coordinate), optional=optional)


def create_file(path: Union[str, Path]) -> FileDescriptor:
    return FileDescriptor(Path(path))


def create(
    descriptor_id: str,
    optional: bool = False,
    project_directory: Optional[Union[str, Path]] = None,
    context: Optional["BuildContext"] = None,
) -> Descriptor:
    """Parse an id into the right descriptor variant.

    Relative ``file://`` paths are looked up under ``project_directory``
    first and then under the build's absolute directory; the first one that
    exists wins.

    Raises:
        MalformedDescriptorError: The id matches neither grammar.
        ConfigurationError: A relative file id exists in none of the locations.
    """
    if descriptor_id.startswith(FILE_PREFIX):
        raw_path = descriptor_id[len(FILE_PREFIX):]
        if not raw_path:
            raise MalformedDescriptorError(descriptor_id, "empty path")
        path = Path(raw_path)
        if project_directory is not None and not path.is_absolute():
            roots = [Path(project_directory)]
            if context is not None:
                roots.append(context.absolute_dir)
            found = next((root / path for root in roots if (root / path).exists()), None)
            if found is None:
                raise ConfigurationError(f"Couldn't find {descriptor_id}")
            path = found
        return create_file(path)

    return create_maven(descriptor_id, optional)


DescriptorInput = Union[str, Tuple[str, bool]]


@dataclass
class DescriptorBatch:
    """Outcome of parsing several ids; malformed ids do not stop the batch."""

    descriptors: List[Descriptor] = field(default_factory=list)
    errors: List[ConfigurationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def create_all(
    inputs: Iterable[DescriptorInput],
    project_directory: Optional[Union[str, Path]] = None,
    context: Optional["BuildContext"] = None,
) -> DescriptorBatch:
    """Parse every id, collecting all errors instead of failing on the first."""
    batch = DescriptorBatch()
    for item in inputs:
        descriptor_id, optional = (item, False) if isinstance(item, str) else item
        try:
            batch.descriptors.append(
                create(descriptor_id, optional, project_directory, context)
            )
        except ConfigurationError as exc:
            logger.warning("%s", exc)
            batch.errors.append(exc)
    return batch


__all__ = [
    "FILE_PREFIX",
    "OPEN_RANGE",
    "MavenId",
    "Descriptor",
    "MavenDescriptor",
    "FileDescriptor",
    "DescriptorBatch",
    "create",
    "create_all",
    "create_maven",
    "create_file",
]
