"""Minimal POM model used by the Maven resolver.

Only what classpath resolution needs is read: coordinates, parent, properties,
dependencies and dependency management. Lookups are restricted to direct
children so that a parent's ``<groupId>`` is never mistaken for the project's.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional

logger = logging.getLogger("cpassembler.resolution.pom")

_PROPERTY_RE = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_PASSES = 10


@dataclass(frozen=True)
class PomDependency:
    """One ``<dependency>`` element, uninterpolated."""

    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: str = "compile"
    optional: bool = False
    type: str = "jar"
    classifier: Optional[str] = None
    exclusions: FrozenSet[str] = frozenset()

    @property
    def short_id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def interpolate(self, properties: Mapping[str, str]) -> "PomDependency":
        return PomDependency(
            group_id=interpolate(self.group_id, properties),
            artifact_id=interpolate(self.artifact_id, properties),
            version=interpolate(self.version, properties) if self.version else None,
            scope=interpolate(self.scope, properties).lower(),
            optional=self.optional,
            type=interpolate(self.type, properties),
            classifier=(
                interpolate(self.classifier, properties) if self.classifier else None
            ),
            exclusions=self.exclusions,
        )

    def is_excluded_by(self, exclusions: FrozenSet[str]) -> bool:
        return bool(
            {
                self.short_id,
                f"{self.group_id}:*",
                f"*:{self.artifact_id}",
                "*:*",
            }
            & exclusions
        )


@dataclass(frozen=True)
class ParentRef:
    group_id: str
    artifact_id: str
    version: str


@dataclass
class Pom:
    """A parsed, not yet inherited, POM document."""

    artifact_id: str
    group_id: Optional[str] = None
    version: Optional[str] = None
    packaging: str = "jar"
    parent: Optional[ParentRef] = None
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: List[PomDependency] = field(default_factory=list)
    managed_dependencies: List[PomDependency] = field(default_factory=list)


@dataclass
class EffectivePom:
    """A POM with parent inheritance and property interpolation applied.

    ``managed`` maps ``group:artifact`` to the managed version.
    """

    group_id: str
    artifact_id: str
    version: str
    packaging: str
    properties: Dict[str, str]
    dependencies: List[PomDependency]
    managed: Dict[str, str]


def interpolate(value: str, properties: Mapping[str, str]) -> str:
    """Replace ``${name}`` references; unknown names are left in place."""
    for _ in range(_MAX_INTERPOLATION_PASSES):
        replaced = _PROPERTY_RE.sub(
            lambda m: properties.get(m.group(1), m.group(0)), value
        )
        if replaced == value:
            break
        value = replaced
    return value


def _child(elem: ET.Element, tag: str, ns: str) -> Optional[ET.Element]:
    return elem.find(f"{{{ns}}}{tag}" if ns else tag)


def _children(elem: ET.Element, path: str, ns: str) -> List[ET.Element]:
    if ns:
        path = "/".join(f"{{{ns}}}{part}" for part in path.split("/"))
    return elem.findall(path)


def _child_text(elem: ET.Element, tag: str, ns: str) -> Optional[str]:
    target = _child(elem, tag, ns)
    if target is not None and target.text:
        return target.text.strip()
    return None


def _detect_namespace(root: ET.Element) -> str:
    if root.tag.startswith("{"):
        return root.tag.split("}")[0][1:]
    return ""


def _local_name(tag: str) -> str:
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


def _parse_dependency(elem: ET.Element, ns: str) -> Optional[PomDependency]:
    group_id = _child_text(elem, "groupId", ns)
    artifact_id = _child_text(elem, "artifactId", ns)
    if not group_id or not artifact_id:
        return None

    exclusions = set()
    for excl in _children(elem, "exclusions/exclusion", ns):
        excl_group = _child_text(excl, "groupId", ns) or "*"
        excl_artifact = _child_text(excl, "artifactId", ns) or "*"
        exclusions.add(f"{excl_group}:{excl_artifact}")

    return PomDependency(
        group_id=group_id,
        artifact_id=artifact_id,
        version=_child_text(elem, "version", ns),
        scope=(_child_text(elem, "scope", ns) or "compile").lower(),
        optional=(_child_text(elem, "optional", ns) or "false").lower() == "true",
        type=_child_text(elem, "type", ns) or "jar",
        classifier=_child_text(elem, "classifier", ns),
        exclusions=frozenset(exclusions),
    )


def parse_pom(text: str) -> Pom:
    """Parse POM XML text.

    Raises:
        ValueError: The document is not XML or has no ``artifactId``.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"Invalid POM XML: {exc}") from exc

    ns = _detect_namespace(root)
    artifact_id = _child_text(root, "artifactId", ns)
    if not artifact_id:
        raise ValueError("POM has no artifactId")

    parent = None
    parent_elem = _child(root, "parent", ns)
    if parent_elem is not None:
        p_group = _child_text(parent_elem, "groupId", ns)
        p_artifact = _child_text(parent_elem, "artifactId", ns)
        p_version = _child_text(parent_elem, "version", ns)
        if p_group and p_artifact and p_version:
            parent = ParentRef(p_group, p_artifact, p_version)

    properties: Dict[str, str] = {}
    props_elem = _child(root, "properties", ns)
    if props_elem is not None:
        for prop in props_elem:
            if isinstance(prop.tag, str):
                properties[_local_name(prop.tag)] = (prop.text or "").strip()

    dependencies = [
        dep
        for dep in (
            _parse_dependency(e, ns) for e in _children(root, "dependencies/dependency", ns)
        )
        if dep is not None
    ]
    managed = [
        dep
        for dep in (
            _parse_dependency(e, ns)
            for e in _children(root, "dependencyManagement/dependencies/dependency", ns)
        )
        if dep is not None
    ]

    return Pom(
        artifact_id=artifact_id,
        group_id=_child_text(root, "groupId", ns),
        version=_child_text(root, "version", ns),
        packaging=_child_text(root, "packaging", ns) or "jar",
        parent=parent,
        properties=properties,
        dependencies=dependencies,
        managed_dependencies=managed,
    )


__all__ = [
    "PomDependency",
    "ParentRef",
    "Pom",
    "EffectivePom",
    "interpolate",
    "parse_pom",
]
