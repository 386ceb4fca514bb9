"""Configuration schema and validation for cpassembler."""

from .schema import (
    MAVEN_CENTRAL,
    DependencyEntry,
    ProjectConfig,
    ResolverConfig,
    WorkspaceConfig,
)

__all__ = [
    "MAVEN_CENTRAL",
    "DependencyEntry",
    "ProjectConfig",
    "ResolverConfig",
    "WorkspaceConfig",
]
