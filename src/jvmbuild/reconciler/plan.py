"""
Snapshots, effects and plans.

A reconcile observes a :class:`Snapshot` of the store, decides a
:class:`Plan` from it without touching the store, then applies the plan's
effects in order. Effects are a closed set of tagged variants; the
applier dispatches on their type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from jvmbuild.contracts.types import ArtifactBuildState, EventReason, EventType
from jvmbuild.models import ArtifactBuild, DependencyBuild, DiscoveryTask


@dataclass
class Snapshot:
    """
    Everything a decision needs, read fresh from the store.

    Only the fields relevant to the ArtifactBuild's current state are
    populated.
    """
    abr: ArtifactBuild
    discovery_tasks: List[DiscoveryTask] = field(default_factory=list)
    # DependencyBuilds sharing the resolved source identity
    dependency_builds: List[DependencyBuild] = field(default_factory=list)
    # Contaminating DependencyBuilds by name; None when not found
    contaminating_builds: Dict[str, Optional[DependencyBuild]] = field(default_factory=dict)

    @property
    def state(self) -> ArtifactBuildState:
        return self.abr.state


@dataclass(frozen=True)
class UpdateArtifactBuildStatus:
    abr: ArtifactBuild
    from_state: ArtifactBuildState


@dataclass(frozen=True)
class CreateDiscoveryTask:
    task: DiscoveryTask


@dataclass(frozen=True)
class CreateDependencyBuild:
    build: DependencyBuild
    identity: str


@dataclass(frozen=True)
class AttachOwner:
    """Persist a DependencyBuild whose owner references gained the ArtifactBuild."""
    build: DependencyBuild


@dataclass(frozen=True)
class RemoveContaminant:
    """Persist a DependencyBuild status with ``contaminant`` removed."""
    build: DependencyBuild
    contaminant: str


@dataclass(frozen=True)
class RecordEvent:
    event_type: EventType
    reason: EventReason
    message: str


Effect = Union[
    UpdateArtifactBuildStatus,
    CreateDiscoveryTask,
    CreateDependencyBuild,
    AttachOwner,
    RemoveContaminant,
    RecordEvent,
]


@dataclass
class Plan:
    """Ordered effects plus an optional retry request."""
    effects: List[Effect] = field(default_factory=list)
    requeue_after: Optional[float] = None

    @property
    def next_state(self) -> Optional[ArtifactBuildState]:
        """State the ArtifactBuild ends in, or None if its status is untouched."""
        state = None
        for effect in self.effects:
            if isinstance(effect, UpdateArtifactBuildStatus):
                state = effect.abr.state
        return state

    def of_type(self, effect_type: type) -> List[Effect]:
        return [e for e in self.effects if isinstance(e, effect_type)]


@dataclass
class ReconcileResult:
    """What the caller should do after a reconcile."""
    requeue_after: Optional[float] = None
    state: Optional[ArtifactBuildState] = None
