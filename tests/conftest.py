"""
Pytest configuration and fixtures for jvmbuild tests.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Generator, Iterable, Optional

import pytest

from jvmbuild.config import reset_config
from jvmbuild.contracts.types import (
    ARTIFACT_BUILD_ID_LABEL,
    DEPENDENCY_BUILD_ID_LABEL,
    ArtifactBuildState,
)
from jvmbuild.events import MemoryEventRecorder
from jvmbuild.models import (
    ArtifactBuild,
    DependencyBuild,
    DiscoveryTask,
    ObjectMeta,
    SCMInfo,
    TaskRunResult,
    new_artifact_build,
    owner_reference_for,
)
from jvmbuild.naming import coordinate_key, generate_resource_name
from jvmbuild.reconciler import ArtifactBuildReconciler
from jvmbuild.storage import MemoryStore

NAMESPACE = "test-namespace"


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def test_env() -> Dict[str, str]:
    """Test environment variables."""
    return {
        "JVMBUILD_NAMESPACE": NAMESPACE,
        "JVMBUILD_STORAGE_TYPE": "memory",
    }


@pytest.fixture(autouse=True)
def set_test_env(test_env: Dict[str, str]) -> Generator[None, None, None]:
    """Set test environment variables for each test."""
    original = {}
    for key, value in test_env.items():
        original[key] = os.environ.get(key)
        os.environ[key] = value
    reset_config()

    yield

    for key, value in original.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    reset_config()


# ============================================================================
# Store Fixtures
# ============================================================================


class TickingClock:
    """Returns a strictly increasing timestamp on every call."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store(clock: TickingClock) -> MemoryStore:
    """In-memory store whose creation timestamps increase with every create."""
    return MemoryStore(namespace=NAMESPACE, clock=clock)


@pytest.fixture
def recorder() -> MemoryEventRecorder:
    return MemoryEventRecorder()


@pytest.fixture
def reconciler(store: MemoryStore, recorder: MemoryEventRecorder) -> ArtifactBuildReconciler:
    return ArtifactBuildReconciler(store, recorder=recorder)


# ============================================================================
# Object Factories
# ============================================================================


@pytest.fixture
def make_artifact_build(store: MemoryStore) -> Callable[..., ArtifactBuild]:
    """Create an ArtifactBuild, optionally in a given state with SCM info."""

    def _make(
        gav: str = "org.foo:bar:1.2.3",
        state: Optional[ArtifactBuildState] = None,
        scm: Optional[SCMInfo] = None,
        annotations: Optional[Dict[str, str]] = None,
    ) -> ArtifactBuild:
        abr = new_artifact_build(gav, generate_resource_name(gav), NAMESPACE)
        if annotations:
            abr.metadata.annotations.update(annotations)
        abr = store.create(abr)
        if state is not None or scm is not None:
            if state is not None:
                abr.status.state = state
            if scm is not None:
                abr.status.scm_info = scm
            abr = store.update_status(abr)
        return abr

    return _make


@pytest.fixture
def make_discovery_task(store: MemoryStore) -> Callable[..., DiscoveryTask]:
    """Create a discovery TaskRun for an ArtifactBuild, complete if results are given."""

    def _make(
        abr: ArtifactBuild,
        results: Optional[Dict[str, str]] = None,
        created_at: Optional[datetime] = None,
    ) -> DiscoveryTask:
        task = DiscoveryTask(
            metadata=ObjectMeta(
                generate_name=f"{abr.name}-scm-discovery-",
                namespace=NAMESPACE,
                labels={ARTIFACT_BUILD_ID_LABEL: coordinate_key(abr.gav)},
                owner_references=[owner_reference_for(abr)],
                creation_timestamp=created_at,
            )
        )
        if results is not None:
            task.status.completion_time = datetime(2024, 1, 2, tzinfo=timezone.utc)
            task.status.task_results = [TaskRunResult(name=k, value=v) for k, v in results.items()]
        return store.create(task)

    return _make


@pytest.fixture
def make_dependency_build(store: MemoryStore) -> Callable[..., DependencyBuild]:
    """Create a DependencyBuild with a given identity label, state and owners."""

    def _make(
        identity: str,
        state: str = "",
        owners: Iterable[ArtifactBuild] = (),
        scm: Optional[SCMInfo] = None,
        contaminants: Iterable[str] = (),
        name: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> DependencyBuild:
        build = DependencyBuild(
            metadata=ObjectMeta(
                name=name,
                generate_name=None if name else "dep-",
                namespace=NAMESPACE,
                labels={DEPENDENCY_BUILD_ID_LABEL: identity},
                owner_references=[owner_reference_for(o) for o in owners],
                creation_timestamp=created_at,
            )
        )
        if scm is not None:
            build.spec.scm_info = scm
        build = store.create(build)
        if state or contaminants:
            build.status.state = state
            build.status.contaminants = list(contaminants)
            build = store.update_status(build)
        return build

    return _make


@pytest.fixture
def scm() -> SCMInfo:
    return SCMInfo(scm_url="https://example/repo", tag="v1", path="", scm_type="git")


@pytest.fixture
def discovery_results(scm: SCMInfo) -> Dict[str, str]:
    return {
        "scm-url": scm.scm_url,
        "scm-tag": scm.tag,
        "scm-type": scm.scm_type,
        "context": scm.path,
        "message": "found in pom",
    }
