"""
DependencyBuild deduplication index.

A DependencyBuild is found by its ``dependency-build-id`` label, the
source identity of the location it builds. Normally at most one exists;
when a creation race leaves duplicates, every lookup site resolves them
the same way through :func:`pick_most_recent`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, TypeVar

from jvmbuild.contracts.types import ARTIFACT_BUILD_ID_LABEL, DEPENDENCY_BUILD_ID_LABEL
from jvmbuild.models import DependencyBuild, DiscoveryTask, Resource, SCMInfo
from jvmbuild.naming import coordinate_key, source_identity
from jvmbuild.storage.base import ObjectStore

T = TypeVar("T", bound=Resource)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created(obj: Resource) -> datetime:
    ts = obj.metadata.creation_timestamp
    if ts is None:
        return _EPOCH
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def pick_most_recent(candidates: Iterable[T]) -> Optional[T]:
    """
    The candidate with the latest creation timestamp.

    Ties keep the earliest candidate in iteration order. Returns None for
    an empty input.
    """
    chosen: Optional[T] = None
    for candidate in candidates:
        if chosen is None or _created(chosen) < _created(candidate):
            chosen = candidate
    return chosen


def identity_of(scm: SCMInfo) -> str:
    """Source identity of an SCM location."""
    return source_identity(scm.scm_url, scm.tag, scm.path)


def find_dependency_builds(
    store: ObjectStore, namespace: str, identity: str
) -> List[DependencyBuild]:
    """Every DependencyBuild labelled with ``identity`` (zero, one or, after a race, more)."""
    return store.list(DependencyBuild, namespace, {DEPENDENCY_BUILD_ID_LABEL: identity})


def find_discovery_tasks(store: ObjectStore, namespace: str, gav: str) -> List[DiscoveryTask]:
    """Every discovery TaskRun created for ``gav``."""
    return store.list(DiscoveryTask, namespace, {ARTIFACT_BUILD_ID_LABEL: coordinate_key(gav)})
