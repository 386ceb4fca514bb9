"""Maven version ordering and version ranges.

Versions are split into numeric and qualifier items at ``.``, ``-``, ``_``
and at every digit/letter transition, so ``1.10-rc2`` becomes
``[1, 10, "rc", 2]``. Numeric items compare numerically (``10.0 > 9.0``),
known qualifiers follow the Maven release ladder and anything unknown sorts
after a plain release, alphabetically.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

_TOKEN_RE = re.compile(r"\d+|[a-z]+")

_QUALIFIER_ALIASES = {
    "a": "alpha",
    "b": "beta",
    "m": "milestone",
    "cr": "rc",
    "ga": "",
    "final": "",
    "release": "",
}

_QUALIFIER_ORDER = {
    "alpha": 0,
    "beta": 1,
    "milestone": 2,
    "rc": 3,
    "snapshot": 4,
    "": 5,
    "sp": 6,
}

Item = Union[int, str]


def _tokenize(raw: str) -> List[Item]:
    items: List[Item] = []
    for token in _TOKEN_RE.findall(raw.lower()):
        if token.isdigit():
            items.append(int(token))
        else:
            items.append(_QUALIFIER_ALIASES.get(token, token))
    while items and items[-1] in (0, ""):
        items.pop()
    return items


def _qualifier_key(value: str) -> Tuple[int, str]:
    order = _QUALIFIER_ORDER.get(value)
    if order is None:
        return (len(_QUALIFIER_ORDER), value)
    return (order, "")


def _compare_items(left: Optional[Item], right: Optional[Item]) -> int:
    # A missing item behaves like 0 against numbers and like a release against qualifiers.
    if left is None:
        left = 0 if isinstance(right, int) else ""
    if right is None:
        right = 0 if isinstance(left, int) else ""

    if isinstance(left, int) and isinstance(right, int):
        return (left > right) - (left < right)
    if isinstance(left, int):
        return 1
    if isinstance(right, int):
        return -1
    lkey, rkey = _qualifier_key(left), _qualifier_key(right)
    return (lkey > rkey) - (lkey < rkey)


@functools.total_ordering
class ComparableVersion:
    """A version string with numeric-aware ordering.

    ``ComparableVersion("10.0") > ComparableVersion("9.0")`` and
    ``ComparableVersion("1.0") == ComparableVersion("1")``.
    """

    __slots__ = ("raw", "items")

    def __init__(self, raw: str) -> None:
        self.raw = raw
        self.items = _tokenize(raw)

    def compare(self, other: "ComparableVersion") -> int:
        length = max(len(self.items), len(other.items))
        for index in range(length):
            left = self.items[index] if index < len(self.items) else None
            right = other.items[index] if index < len(other.items) else None
            result = _compare_items(left, right)
            if result:
                return result
        return 0

    @property
    def is_snapshot(self) -> bool:
        return self.raw.upper().endswith("SNAPSHOT")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComparableVersion):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: "ComparableVersion") -> bool:
        if not isinstance(other, ComparableVersion):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash(tuple(self.items))

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"ComparableVersion({self.raw!r})"


@dataclass(frozen=True)
class Restriction:
    """One bracketed interval of a version range; ``None`` bounds are open."""

    lower: Optional[ComparableVersion]
    lower_inclusive: bool
    upper: Optional[ComparableVersion]
    upper_inclusive: bool

    def contains(self, version: ComparableVersion) -> bool:
        if self.lower is not None:
            result = version.compare(self.lower)
            if result < 0 or (result == 0 and not self.lower_inclusive):
                return False
        if self.upper is not None:
            result = version.compare(self.upper)
            if result > 0 or (result == 0 and not self.upper_inclusive):
                return False
        return True


_RANGE_RE = re.compile(r"([\[(])([^\[\]()]*)([\])])")


class VersionRange:
    """Maven version range such as ``[1.0,2.0)``, ``(,1.5]`` or ``[1.2]``.

    Several intervals may be joined with commas: ``[1,2),[3,4)``.
    """

    def __init__(self, spec: str, restrictions: List[Restriction]) -> None:
        self.spec = spec
        self.restrictions = restrictions

    @staticmethod
    def is_range(spec: Optional[str]) -> bool:
        text = (spec or "").strip()
        return bool(text) and text[0] in "[("

    @classmethod
    def parse(cls, spec: str) -> "VersionRange":
        """Parse a bracketed range; raises ValueError on anything else."""
        text = spec.strip()
        restrictions: List[Restriction] = []
        position = 0
        for match in _RANGE_RE.finditer(text):
            between = text[position:match.start()].strip().strip(",").strip()
            if between:
                raise ValueError(f"Unexpected text {between!r} in range {spec!r}")
            position = match.end()
            opening, body, closing = match.groups()
            parts = [part.strip() for part in body.split(",")]
            if len(parts) == 1:
                if not parts[0] or opening != "[" or closing != "]":
                    raise ValueError(f"Single version range must be [x]: {spec!r}")
                exact = ComparableVersion(parts[0])
                restrictions.append(Restriction(exact, True, exact, True))
                continue
            if len(parts) != 2:
                raise ValueError(f"Too many bounds in range {spec!r}")
            lower = ComparableVersion(parts[0]) if parts[0] else None
            upper = ComparableVersion(parts[1]) if parts[1] else None
            if lower is not None and upper is not None and lower > upper:
                raise ValueError(f"Lower bound above upper bound in {spec!r}")
            restrictions.append(
                Restriction(lower, opening == "[", upper, closing == "]")
            )
        if not restrictions or text[position:].strip():
            raise ValueError(f"Invalid version range {spec!r}")
        return cls(spec, restrictions)

    def contains(self, version: Union[str, ComparableVersion]) -> bool:
        if isinstance(version, str):
            version = ComparableVersion(version)
        return any(r.contains(version) for r in self.restrictions)

    def select(self, candidates: Iterable[str]) -> Optional[str]:
        """Return the highest candidate inside the range, or None."""
        matching = [c for c in candidates if self.contains(c)]
        if not matching:
            return None
        return max(matching, key=ComparableVersion)

    def __str__(self) -> str:
        return self.spec


__all__ = ["ComparableVersion", "Restriction", "VersionRange"]
