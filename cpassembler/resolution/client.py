"""Resolution clients: turn symbolic coordinates into concrete artifacts.

:class:`BaseResolutionClient` is the contract the assembler depends on.
:class:`MavenResolver` implements it against Maven-layout HTTP repositories
with a local on-disk repository as cache. HTTP and XML failures surface as
:class:`~cpassembler.resolution.errors.ResolutionError` subclasses.
"""

from __future__ import annotations

import logging
import threading
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, TypeVar

import requests

from cpassembler.config.schema import ResolverConfig
from cpassembler.model.descriptors import OPEN_RANGE, MavenId
from cpassembler.model.scope import Scope
from cpassembler.model.version import ComparableVersion, VersionRange
from cpassembler.resolution.errors import (
    ArtifactDownloadError,
    UnresolvableCoordinateError,
)
from cpassembler.resolution.pom import EffectivePom, PomDependency, interpolate, parse_pom

logger = logging.getLogger("cpassembler.resolution.client")

T = TypeVar("T")

_MAX_PARENT_DEPTH = 20
_NON_TRANSITIVE_SCOPES = {"test", "provided", "system", "import"}


class _TransientFetchError(Exception):
    """A repository request failed in a way that may succeed on retry."""


class BaseResolutionClient(ABC):
    """Contract between the assembler and an artifact resolver."""

    repositories: List[str] = []

    @abstractmethod
    def resolve_all(
        self,
        coordinate: str,
        scopes: Sequence[Scope],
        timeout: Optional[float] = None,
    ) -> List[str]:
        """Resolve a coordinate and its transitive dependencies.

        Args:
            coordinate: Symbolic coordinate; the version may be a range or absent.
            scopes: Effective scopes of the request.
            timeout: Optional per-request time budget (seconds).

        Returns:
            List[str]: Concrete coordinates, the requested artifact first.

        Raises:
            UnresolvableCoordinateError: No repository satisfies the request.
        """
        raise NotImplementedError

    @abstractmethod
    def materialize(self, coordinate: str) -> Path:
        """Fetch the artifact's bytes into the local cache and return its path.

        Raises:
            ArtifactDownloadError: The bytes could not be fetched.
        """
        raise NotImplementedError


def transitive_scopes(scopes: Sequence[Scope]) -> FrozenSet[str]:
    """Maven scopes of transitive dependencies followed for a request."""
    allowed = {"compile"}
    if Scope.RUNTIME in scopes or Scope.TEST in scopes:
        allowed.add("runtime")
    return frozenset(allowed)


@dataclass(frozen=True)
class _Node:
    maven_id: MavenId
    exclusions: FrozenSet[str]
    depth: int


class MavenResolver(BaseResolutionClient):
    """Resolve coordinates against Maven repositories.

    Documents and jars are cached in ``config.local_repository`` using the
    standard ``group/path/artifact/version`` layout. In-memory caches are
    guarded by per-key locks so concurrent lookups of the same coordinate
    perform a single fetch.
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or ResolverConfig.default()
        self.repositories = list(self.config.repositories)
        self.local_repository = Path(self.config.local_repository)
        self._session = session or requests.Session()

        self._lock = threading.Lock()
        self._key_locks: Dict[str, threading.RLock] = {}
        self._documents: Dict[str, Optional[str]] = {}
        self._effective: Dict[str, EffectivePom] = {}
        self._versions: Dict[str, List[str]] = {}
        self._jars: Dict[str, Path] = {}
        logger.debug(
            "MavenResolver initialized (repositories=%s, local=%s)",
            ", ".join(self.repositories),
            self.local_repository,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_all(
        self,
        coordinate: str,
        scopes: Sequence[Scope],
        timeout: Optional[float] = None,
    ) -> List[str]:
        root_id = self._concrete(MavenId.parse(coordinate), coordinate, timeout)
        allowed = transitive_scopes(scopes)
        root_pom = self._effective_pom(root_id, coordinate, timeout)

        resolved: Dict[str, MavenId] = {root_id.short_id: root_id}
        hidden = set()
        queue = deque([_Node(root_id, frozenset(), 0)])

        while queue:
            node = queue.popleft()
            pom = root_pom if node.depth == 0 else self._effective_pom(
                node.maven_id, coordinate, timeout
            )
            for dep in pom.dependencies:
                if dep.optional:
                    continue
                if dep.scope in _NON_TRANSITIVE_SCOPES or dep.scope not in allowed:
                    continue
                if dep.short_id in resolved or dep.is_excluded_by(node.exclusions):
                    continue

                # Root management overrides transitive versions only.
                if node.depth > 0:
                    version = root_pom.managed.get(dep.short_id) or dep.version
                else:
                    version = dep.version
                version = version or pom.managed.get(dep.short_id)
                if not version:
                    raise UnresolvableCoordinateError(
                        dep.short_id,
                        self.repositories,
                        f"no version declared or managed (required by {node.maven_id})",
                    )
                dep_id = MavenId(
                    dep.group_id,
                    dep.artifact_id,
                    version,
                    packaging=dep.type if dep.type != "jar" else None,
                    classifier=dep.classifier,
                )
                dep_id = self._concrete(dep_id, coordinate, timeout)
                resolved[dep.short_id] = dep_id
                if dep.type == "pom":
                    hidden.add(dep.short_id)
                queue.append(
                    _Node(dep_id, node.exclusions | dep.exclusions, node.depth + 1)
                )

        result = [mid.to_id for key, mid in resolved.items() if key not in hidden]
        logger.debug("Resolved %s to %d artifact(s)", coordinate, len(result))
        return result

    def materialize(self, coordinate: str) -> Path:
        maven_id = self._concrete(MavenId.parse(coordinate), coordinate, None)
        key = f"jar:{maven_id.to_id}"
        return self._once(self._jars, key, lambda: self._download_jar(maven_id))

    # ------------------------------------------------------------------
    # Caching
    # ------------------------------------------------------------------

    def _key_lock(self, key: str) -> threading.RLock:
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.RLock()
            return lock

    def _once(self, cache: Dict[str, T], key: str, loader: Callable[[], T]) -> T:
        if key in cache:
            return cache[key]
        with self._key_lock(key):
            if key not in cache:
                cache[key] = loader()
            return cache[key]

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def _concrete(
        self, maven_id: MavenId, requested: str, timeout: Optional[float]
    ) -> MavenId:
        if maven_id.has_version and not maven_id.is_range:
            return maven_id

        spec = maven_id.version or OPEN_RANGE
        candidates = self._available_versions(maven_id, timeout)
        releases = [v for v in candidates if not ComparableVersion(v).is_snapshot]
        selected = VersionRange.parse(spec).select(releases or candidates)
        if selected is None:
            raise UnresolvableCoordinateError(
                maven_id.to_id,
                self.repositories,
                f"no version matches {spec} (required by {requested})",
            )
        logger.debug("Selected %s for %s", selected, maven_id.to_id)
        return maven_id.with_version(selected)

    def _available_versions(self, maven_id: MavenId, timeout: Optional[float]) -> List[str]:
        key = f"versions:{maven_id.short_id}"
        return self._once(
            self._versions, key, lambda: self._fetch_versions(maven_id, timeout)
        )

    def _fetch_versions(self, maven_id: MavenId, timeout: Optional[float]) -> List[str]:
        versions: Dict[str, None] = {}
        failures: List[str] = []
        for repo in self.repositories:
            url = f"{self._artifact_base(repo, maven_id)}/maven-metadata.xml"
            try:
                text = self._get_text(url, timeout)
            except _TransientFetchError as exc:
                failures.append(str(exc))
                continue
            if not text:
                continue
            try:
                root = ET.fromstring(text)
            except ET.ParseError as exc:
                logger.warning("Ignoring invalid metadata %s: %s", url, exc)
                continue
            for elem in root.findall("versioning/versions/version"):
                if elem.text and elem.text.strip():
                    versions.setdefault(elem.text.strip(), None)
        if failures and not versions:
            raise UnresolvableCoordinateError(
                maven_id.short_id, self.repositories, "; ".join(failures)
            )
        return list(versions)

    # ------------------------------------------------------------------
    # POMs
    # ------------------------------------------------------------------

    def _effective_pom(
        self, maven_id: MavenId, requested: str, timeout: Optional[float], depth: int = 0
    ) -> EffectivePom:
        key = f"pom:{maven_id.group_id}:{maven_id.artifact_id}:{maven_id.version}"
        return self._once(
            self._effective,
            key,
            lambda: self._build_effective_pom(maven_id, requested, timeout, depth),
        )

    def _build_effective_pom(
        self, maven_id: MavenId, requested: str, timeout: Optional[float], depth: int
    ) -> EffectivePom:
        if depth > _MAX_PARENT_DEPTH:
            raise UnresolvableCoordinateError(
                maven_id.to_id, self.repositories, "parent POM chain too deep"
            )

        text = self._pom_text(maven_id, timeout)
        if text is None:
            raise UnresolvableCoordinateError(
                maven_id.to_id,
                self.repositories,
                f"POM not found (required by {requested})",
            )
        try:
            pom = parse_pom(text)
        except ValueError as exc:
            raise UnresolvableCoordinateError(
                maven_id.to_id, self.repositories, str(exc)
            ) from exc

        parent: Optional[EffectivePom] = None
        if pom.parent is not None:
            parent_id = MavenId(
                pom.parent.group_id, pom.parent.artifact_id, pom.parent.version
            )
            parent = self._effective_pom(parent_id, requested, timeout, depth + 1)

        group_id = pom.group_id or (parent.group_id if parent else maven_id.group_id)
        version = pom.version or (parent.version if parent else maven_id.version or "")

        properties: Dict[str, str] = dict(parent.properties) if parent else {}
        properties.update(pom.properties)
        properties.update(
            {
                "project.groupId": group_id,
                "project.artifactId": pom.artifact_id,
                "project.version": version,
                "pom.groupId": group_id,
                "pom.version": version,
                "groupId": group_id,
                "version": version,
            }
        )
        if parent is not None:
            properties["project.parent.groupId"] = parent.group_id
            properties["project.parent.version"] = parent.version
        version = interpolate(version, properties)
        properties["project.version"] = version

        managed: Dict[str, str] = dict(parent.managed) if parent else {}
        for entry in (d.interpolate(properties) for d in pom.managed_dependencies):
            if entry.scope == "import" and entry.type == "pom" and entry.version:
                bom = self._effective_pom(
                    MavenId(entry.group_id, entry.artifact_id, entry.version),
                    requested,
                    timeout,
                    depth + 1,
                )
                for short_id, managed_version in bom.managed.items():
                    managed.setdefault(short_id, managed_version)
            elif entry.version:
                managed[entry.short_id] = entry.version

        dependencies: Dict[str, PomDependency] = {}
        for dep in parent.dependencies if parent else []:
            dependencies[dep.short_id] = dep
        for dep in pom.dependencies:
            dependencies[dep.short_id] = dep.interpolate(properties)

        return EffectivePom(
            group_id=group_id,
            artifact_id=pom.artifact_id,
            version=version,
            packaging=pom.packaging,
            properties=properties,
            dependencies=list(dependencies.values()),
            managed=managed,
        )

    def _pom_text(self, maven_id: MavenId, timeout: Optional[float]) -> Optional[str]:
        key = f"doc:{maven_id.group_id}:{maven_id.artifact_id}:{maven_id.version}"
        return self._once(
            self._documents, key, lambda: self._fetch_pom(maven_id, timeout)
        )

    def _fetch_pom(self, maven_id: MavenId, timeout: Optional[float]) -> Optional[str]:
        filename = f"{maven_id.artifact_id}-{maven_id.version}.pom"
        local_path = self._local_dir(maven_id) / filename
        if local_path.exists():
            logger.debug("Using cached POM %s", local_path)
            return local_path.read_text(encoding="utf-8")

        failures: List[str] = []
        for repo in self.repositories:
            url = f"{self._artifact_base(repo, maven_id)}/{maven_id.version}/{filename}"
            try:
                text = self._get_text(url, timeout)
            except _TransientFetchError as exc:
                failures.append(str(exc))
                continue
            if text is None:
                continue
            try:
                local_path.parent.mkdir(parents=True, exist_ok=True)
                local_path.write_text(text, encoding="utf-8")
            except OSError as exc:
                logger.warning("Could not cache POM %s: %s", local_path, exc)
            return text
        # Transient failures are not cached.
        if failures:
            raise UnresolvableCoordinateError(
                maven_id.to_id, self.repositories, "; ".join(failures)
            )
        return None

    # ------------------------------------------------------------------
    # Jars
    # ------------------------------------------------------------------

    def _download_jar(self, maven_id: MavenId) -> Path:
        extension = maven_id.packaging or "jar"
        if extension in {"bundle", "maven-plugin", "ejb"}:
            extension = "jar"
        suffix = f"-{maven_id.classifier}" if maven_id.classifier else ""
        filename = f"{maven_id.artifact_id}-{maven_id.version}{suffix}.{extension}"
        local_path = self._local_dir(maven_id) / filename
        if local_path.exists():
            return local_path

        last_url = None
        for repo in self.repositories:
            url = f"{self._artifact_base(repo, maven_id)}/{maven_id.version}/{filename}"
            last_url = url
            if self._download_file(url, local_path, maven_id.to_id):
                return local_path
        raise ArtifactDownloadError(maven_id.to_id, last_url, "not found in any repository")

    def _download_file(self, url: str, target_path: Path, coordinate: str) -> bool:
        """Stream ``url`` into ``target_path``; False when the repository lacks it."""
        partial = target_path.with_name(target_path.name + ".part")
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Downloading %s", url)
            response = self._session.get(url, timeout=self.config.timeout, stream=True)
            if response.status_code == 404:
                return False
            response.raise_for_status()
            with partial.open("wb") as out:
                for chunk in response.iter_content(chunk_size=8192):
                    out.write(chunk)
            partial.replace(target_path)
            return True
        except (requests.RequestException, OSError) as exc:
            partial.unlink(missing_ok=True)
            raise ArtifactDownloadError(coordinate, url, str(exc)) from exc

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _get_text(self, url: str, timeout: Optional[float]) -> Optional[str]:
        """GET ``url``; None when the repository does not have it.

        Raises:
            _TransientFetchError: Network failure or a 5xx response.
        """
        try:
            response = self._session.get(url, timeout=timeout or self.config.timeout)
        except requests.RequestException as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise _TransientFetchError(f"{url}: {exc}") from exc
        if response.status_code >= 500:
            logger.warning("HTTP %d for %s", response.status_code, url)
            raise _TransientFetchError(f"{url}: HTTP {response.status_code}")
        if response.status_code == 404:
            logger.debug("Not found: %s", url)
            return None
        if response.status_code >= 400:
            logger.warning("HTTP %d for %s", response.status_code, url)
            return None
        return response.text

    @staticmethod
    def _artifact_base(repo: str, maven_id: MavenId) -> str:
        return "/".join(
            [repo.rstrip("/"), maven_id.group_id.replace(".", "/"), maven_id.artifact_id]
        )

    def _local_dir(self, maven_id: MavenId) -> Path:
        return (
            self.local_repository
            / Path(*maven_id.group_id.split("."))
            / maven_id.artifact_id
            / (maven_id.version or "unspecified")
        )


__all__ = ["BaseResolutionClient", "MavenResolver", "transitive_scopes"]
