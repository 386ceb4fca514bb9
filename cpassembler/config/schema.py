"""Configuration schema definitions using Pydantic for validation.

Resolver settings and workspace descriptions are validated here so that
mistakes in a workspace file are reported before any resolution starts.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

MAVEN_CENTRAL = "https://repo1.maven.org/maven2"


class ResolverConfig(BaseModel):
    """Settings for artifact resolution and output directory layout.

    Attributes:
        repositories: Remote Maven repositories, tried in order.
        local_repository: Directory where POMs and jars are cached.
        timeout: Timeout for a single HTTP request (seconds).
        max_workers: Maximum number of concurrent coordinate resolutions.
        build_directory: Project-relative directory holding build outputs.
        classes_directory: Build-relative directory of compiled classes.
        test_classes_directory: Build-relative directory of compiled tests.
    """

    repositories: List[str] = Field(default_factory=lambda: [MAVEN_CENTRAL])
    local_repository: Path = Field(
        default_factory=lambda: Path(".cpassembler_cache") / "repository"
    )
    timeout: float = Field(default=60.0, gt=0.0, le=3600.0)
    max_workers: int = Field(default=8, ge=1, le=64)
    build_directory: str = "build"
    classes_directory: str = "classes"
    test_classes_directory: str = "test-classes"

    model_config = {"extra": "forbid"}

    @field_validator("repositories")
    @classmethod
    def validate_repositories(cls, v: List[str]) -> List[str]:
        """Require at least one http(s) repository and strip trailing slashes."""
        if not v:
            raise ValueError("repositories must contain at least one URL")
        cleaned = []
        for url in v:
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"Repository URL must be http(s): {url}")
            cleaned.append(url.rstrip("/"))
        return cleaned

    @classmethod
    def default(cls) -> "ResolverConfig":
        return cls()


class DependencyEntry(BaseModel):
    """One declared dependency id, e.g. ``org.x:lib:1.0`` or ``file://libs/a.jar``."""

    id: str = Field(min_length=1)
    optional: bool = False


def _normalize_entries(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, list):
        return [{"id": item} if isinstance(item, str) else item for item in value]
    return value


class ProjectConfig(BaseModel):
    """Workspace description of one project.

    Attributes:
        name: Unique project name.
        directory: Project directory relative to the workspace root.
        depends_on: Names of in-build projects this project depends on.
        compile/provided/runtime/test: Declared dependencies per scope.
        build_directory: Optional per-project build directory override.
    """

    name: str = Field(min_length=1)
    directory: str = "."
    depends_on: List[str] = Field(default_factory=list)
    compile: List[DependencyEntry] = Field(default_factory=list)
    provided: List[DependencyEntry] = Field(default_factory=list)
    runtime: List[DependencyEntry] = Field(default_factory=list)
    test: List[DependencyEntry] = Field(default_factory=list)
    build_directory: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator("compile", "provided", "runtime", "test", mode="before")
    @classmethod
    def accept_plain_ids(cls, v: Any) -> Any:
        """Allow plain strings as shorthand for non-optional entries."""
        return _normalize_entries(v)

    @field_validator("depends_on")
    @classmethod
    def validate_depends_on(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(name.strip() for name in v if name.strip()))


class WorkspaceConfig(BaseModel):
    """Top-level workspace file: resolver settings plus the project list."""

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    projects: List[ProjectConfig] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def check_unique_names(self) -> "WorkspaceConfig":
        seen: Dict[str, int] = {}
        for project in self.projects:
            seen[project.name] = seen.get(project.name, 0) + 1
        duplicates = sorted(name for name, count in seen.items() if count > 1)
        if duplicates:
            raise ValueError(f"Duplicate project names: {', '.join(duplicates)}")
        return self

    @classmethod
    def default(cls) -> "WorkspaceConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceConfig":
        """Build a WorkspaceConfig from a parsed mapping.

        ``projects`` may be given as a list or as a mapping keyed by name.
        """
        payload = dict(data)
        projects = payload.get("projects")
        if isinstance(projects, dict):
            payload["projects"] = [
                {"name": name, **(body or {})} for name, body in projects.items()
            ]
        return cls.model_validate(payload)
