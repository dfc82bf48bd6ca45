"""
Contamination acknowledgement.

The build pipeline marks a DependencyBuild Contaminated and lists the
ArtifactBuilds it tainted in ``status.contaminants``; each tainted
ArtifactBuild carries a ``contaminated-by-*`` annotation naming the
build. Once such an ArtifactBuild is Complete it retracts its own entry.
The orchestrator never marks anything Contaminated itself.
"""

from __future__ import annotations

from typing import List

from jvmbuild.contracts.types import DependencyBuildState, EventReason, EventType
from jvmbuild.models import ArtifactBuild, contamination_markers
from jvmbuild.reconciler.plan import Effect, RecordEvent, RemoveContaminant, Snapshot


def contaminating_build_names(abr: ArtifactBuild) -> List[str]:
    """Distinct DependencyBuild names referenced by contamination annotations."""
    return list(dict.fromkeys(contamination_markers(abr)))


def acknowledge_contamination(snapshot: Snapshot) -> List[Effect]:
    abr = snapshot.abr
    effects: List[Effect] = []
    for name in contaminating_build_names(abr):
        build = snapshot.contaminating_builds.get(name)
        if build is None:
            effects.append(RecordEvent(
                EventType.NORMAL,
                EventReason.CANNOT_GET_DEPENDENCY_BUILD,
                f"Could not find the DependencyBuild {name} for ArtifactBuild "
                f"{abr.namespace}/{abr.name}",
            ))
            continue
        if build.state != DependencyBuildState.CONTAMINATED.value:
            continue
        if abr.name not in build.status.contaminants:
            continue
        updated = build.model_copy(deep=True)
        updated.status.contaminants = [c for c in build.status.contaminants if c != abr.name]
        effects.append(RemoveContaminant(updated, abr.name))
    return effects
