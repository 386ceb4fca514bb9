"""Collapse several versions of one artifact to a single winner."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from cpassembler.model.descriptors import Descriptor
from cpassembler.model.version import ComparableVersion

logger = logging.getLogger("cpassembler.resolution.reconciler")

_NO_VERSION = ComparableVersion("")


def _version_key(descriptor: Descriptor) -> ComparableVersion:
    return descriptor.version or _NO_VERSION


def reconcile(descriptors: Iterable[Descriptor]) -> List[Descriptor]:
    """Keep the highest version of every ``short_id``.

    Groups are emitted in first-seen order. Within a group the sort is
    stable, so equal versions keep their input order and the first wins.
    """
    groups: Dict[str, List[Descriptor]] = {}
    for descriptor in descriptors:
        groups.setdefault(descriptor.short_id, []).append(descriptor)

    result: List[Descriptor] = []
    for short_id, group in groups.items():
        ordered = sorted(group, key=_version_key, reverse=True)
        winner = ordered[0]
        if len(ordered) > 1:
            logger.debug(
                "Reconciled %s to %s (candidates: %s)",
                short_id,
                winner.id,
                ", ".join(d.id for d in ordered),
            )
        result.append(winner)
    return result


__all__ = ["reconcile"]
