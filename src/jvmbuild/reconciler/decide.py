"""
Per-state decisions for the ArtifactBuild state machine.

Every function here is pure: it reads a Snapshot and returns a Plan,
never touching the store. Decisions are re-derived from current state on
every invocation, so a missed or repeated trigger is harmless.

    New ──> Discovering ──> Building ──> Complete
                 │              │   └──> Failed
                 │              └──> New (DependencyBuild vanished)
                 ├──> Complete / Failed (existing build already done)
                 └──> Missing (no tag discovered)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from jvmbuild.contracts.timeouts import MISSING_TASK_REQUEUE_S
from jvmbuild.contracts.types import (
    ARTIFACT_BUILD_ID_LABEL,
    DEFAULT_DISCOVERY_TASK,
    DEPENDENCY_BUILD_ID_LABEL,
    DISCOVERY_TASK_GAV_PARAM,
    TASK_RUN_LABEL,
    ArtifactBuildState,
    DependencyBuildState,
    EventReason,
    EventType,
)
from jvmbuild.dedup import identity_of, pick_most_recent
from jvmbuild.models import (
    ArtifactBuild,
    DependencyBuild,
    DependencyBuildSpec,
    DiscoveryTask,
    ObjectMeta,
    Param,
    TaskRef,
    TaskRunSpec,
    owner_reference_for,
    set_owner_reference,
)
from jvmbuild.naming import coordinate_key
from jvmbuild.reconciler.contamination import acknowledge_contamination
from jvmbuild.reconciler.plan import (
    AttachOwner,
    CreateDependencyBuild,
    CreateDiscoveryTask,
    Plan,
    RecordEvent,
    Snapshot,
    UpdateArtifactBuildStatus,
)

# DependencyBuild states mirrored onto dependent ArtifactBuilds
_MIRRORED_STATES = {
    DependencyBuildState.COMPLETE.value: ArtifactBuildState.COMPLETE,
    DependencyBuildState.FAILED.value: ArtifactBuildState.FAILED,
    DependencyBuildState.CONTAMINATED.value: ArtifactBuildState.FAILED,
}


@dataclass(frozen=True)
class Policy:
    """Tunables that shape decisions."""
    discovery_task_ref: str = DEFAULT_DISCOVERY_TASK
    missing_task_requeue_seconds: float = MISSING_TASK_REQUEUE_S


def mirrored_state(build: DependencyBuild) -> Optional[ArtifactBuildState]:
    """ArtifactBuild state implied by a finished DependencyBuild, else None."""
    return _MIRRORED_STATES.get(build.state)


def _with_state(abr: ArtifactBuild, state: ArtifactBuildState) -> ArtifactBuild:
    updated = abr.model_copy(deep=True)
    updated.status.state = state
    return updated


def _status_update(original: ArtifactBuild, updated: ArtifactBuild) -> UpdateArtifactBuildStatus:
    return UpdateArtifactBuildStatus(updated, from_state=original.state)


def _attach(build: DependencyBuild, abr: ArtifactBuild) -> Optional[AttachOwner]:
    """AttachOwner effect if ``abr`` is not yet an owner of ``build``."""
    updated = build.model_copy(deep=True)
    if set_owner_reference(updated, abr):
        return AttachOwner(updated)
    return None


def discovery_task_for(abr: ArtifactBuild, policy: Policy) -> DiscoveryTask:
    """The TaskRun that resolves ``abr``'s GAV, owned by ``abr``."""
    return DiscoveryTask(
        metadata=ObjectMeta(
            generate_name=f"{abr.name}-scm-discovery-",
            namespace=abr.namespace,
            labels={
                ARTIFACT_BUILD_ID_LABEL: coordinate_key(abr.gav),
                TASK_RUN_LABEL: "",
            },
            owner_references=[owner_reference_for(abr)],
        ),
        spec=TaskRunSpec(
            task_ref=TaskRef(name=policy.discovery_task_ref),
            params=[Param(name=DISCOVERY_TASK_GAV_PARAM, value=abr.gav)],
        ),
    )


def dependency_build_for(abr: ArtifactBuild, identity: str) -> DependencyBuild:
    """A new DependencyBuild for ``abr``'s SCM location, owned by ``abr``."""
    return DependencyBuild(
        metadata=ObjectMeta(
            generate_name=f"{abr.name}-",
            namespace=abr.namespace,
            labels={DEPENDENCY_BUILD_ID_LABEL: identity},
            owner_references=[owner_reference_for(abr)],
        ),
        spec=DependencyBuildSpec(scm_info=abr.status.scm_info.model_copy()),
    )


def decide_new(snapshot: Snapshot, policy: Policy) -> Plan:
    # Status first: if task creation then fails, Discovering tolerates a missing task
    abr = snapshot.abr
    updated = _with_state(abr, ArtifactBuildState.DISCOVERING)
    return Plan([
        _status_update(abr, updated),
        CreateDiscoveryTask(discovery_task_for(updated, policy)),
    ])


def decide_discovering(snapshot: Snapshot, policy: Policy) -> Plan:
    abr = snapshot.abr
    task = pick_most_recent(snapshot.discovery_tasks)
    if task is None:
        return Plan(
            [RecordEvent(
                EventType.WARNING,
                EventReason.NO_DISCOVERY_TASK,
                f"The ArtifactBuild {abr.namespace}/{abr.name} did not have an associated "
                f"TaskRun for hash {coordinate_key(abr.gav)} of GAV {abr.gav}",
            )],
            requeue_after=policy.missing_task_requeue_seconds,
        )
    if not task.is_complete:
        return Plan()

    updated = abr.model_copy(deep=True)
    updated.status.scm_info = task.scm_info()
    updated.status.message = task.message()

    if not updated.status.scm_info.tag:
        updated.status.state = ArtifactBuildState.MISSING
        return Plan([
            RecordEvent(
                EventType.WARNING,
                EventReason.MISSING_TAG,
                f"The ArtifactBuild {abr.namespace}/{abr.name} had an empty tag field "
                f"{task.results()}",
            ),
            _status_update(abr, updated),
        ])

    identity = identity_of(updated.status.scm_info)
    existing = pick_most_recent(snapshot.dependency_builds)
    if existing is None:
        updated.status.state = ArtifactBuildState.BUILDING
        return Plan([
            _status_update(abr, updated),
            CreateDependencyBuild(dependency_build_for(updated, identity), identity),
        ])

    effects = []
    attach = _attach(existing, abr)
    if attach is not None:
        effects.append(attach)
    updated.status.state = mirrored_state(existing) or ArtifactBuildState.BUILDING
    effects.append(_status_update(abr, updated))
    return Plan(effects)


def decide_building(snapshot: Snapshot, policy: Policy) -> Plan:
    abr = snapshot.abr
    existing = pick_most_recent(snapshot.dependency_builds)
    if existing is None:
        return Plan([
            RecordEvent(
                EventType.WARNING,
                EventReason.MISSING_DEPENDENCY_BUILD,
                f"The ArtifactBuild {abr.namespace}/{abr.name} in state Building was "
                f"missing a DependencyBuild",
            ),
            _status_update(abr, _with_state(abr, ArtifactBuildState.NEW)),
        ])

    effects = []
    attach = _attach(existing, abr)
    if attach is not None:
        effects.append(attach)
    state = mirrored_state(existing)
    if state is not None:
        effects.append(_status_update(abr, _with_state(abr, state)))
    return Plan(effects)


def decide_complete(snapshot: Snapshot, policy: Policy) -> Plan:
    return Plan(acknowledge_contamination(snapshot))


def decide_terminal(snapshot: Snapshot, policy: Policy) -> Plan:
    """Failed and Missing wait for an external retrigger."""
    return Plan()


DECIDERS: Dict[ArtifactBuildState, Callable[[Snapshot, Policy], Plan]] = {
    ArtifactBuildState.NEW: decide_new,
    ArtifactBuildState.DISCOVERING: decide_discovering,
    ArtifactBuildState.BUILDING: decide_building,
    ArtifactBuildState.COMPLETE: decide_complete,
    ArtifactBuildState.FAILED: decide_terminal,
    ArtifactBuildState.MISSING: decide_terminal,
}


def decide(snapshot: Snapshot, policy: Optional[Policy] = None) -> Plan:
    """Plan the next step for the ArtifactBuild in ``snapshot``."""
    return DECIDERS[snapshot.state](snapshot, policy or Policy())
