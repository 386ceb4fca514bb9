"""Read-only project model consumed by the assembler."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Tuple

from cpassembler.model.descriptors import Descriptor

if TYPE_CHECKING:
    from cpassembler.runtime.context import BuildContext


@dataclass(frozen=True)
class Project:
    """One in-build project.

    Args:
        name: Unique name within the build.
        directory: Base directory, relative to the build root or absolute.
        depends_on: Names of other in-build projects, in declaration order.
        compile_dependencies: Descriptors declared in the compile scope.
        provided_dependencies: Descriptors declared in the provided scope.
        runtime_dependencies: Descriptors declared in the runtime scope.
        test_dependencies: Descriptors declared in the test scope.
        build_directory: Overrides ``ResolverConfig.build_directory``.
    """

    name: str
    directory: Path = Path(".")
    depends_on: Tuple[str, ...] = ()
    compile_dependencies: Tuple[Descriptor, ...] = ()
    provided_dependencies: Tuple[Descriptor, ...] = ()
    runtime_dependencies: Tuple[Descriptor, ...] = ()
    test_dependencies: Tuple[Descriptor, ...] = ()
    build_directory: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "directory", Path(self.directory))
        for name in (
            "depends_on",
            "compile_dependencies",
            "provided_dependencies",
            "runtime_dependencies",
            "test_dependencies",
        ):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def base_dir(self, context: "BuildContext") -> Path:
        if self.directory.is_absolute():
            return self.directory
        return context.absolute_dir / self.directory

    def build_dir(self, context: "BuildContext") -> Path:
        return self.base_dir(context) / (
            self.build_directory or context.config.build_directory
        )


def output_dir(project: Project, context: "BuildContext") -> Path:
    """Directory holding the project's compiled classes."""
    return project.build_dir(context) / context.config.classes_directory


def output_test_dir(project: Project, context: "BuildContext") -> Path:
    """Directory holding the project's compiled test classes."""
    return project.build_dir(context) / context.config.test_classes_directory


__all__ = ["Project", "output_dir", "output_test_dir"]
