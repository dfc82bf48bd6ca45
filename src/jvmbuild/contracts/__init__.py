"""
Shared contracts for the jvmbuild orchestrator.

Centralizes the names that cross process boundaries: resource states,
label and annotation keys, discovery task result names and event reasons.
Everything that reads or writes ArtifactBuild, DependencyBuild or TaskRun
objects should use these definitions to prevent naming drift between the
controller, the CLI and the build pipeline.

Example:
    from jvmbuild.contracts import ArtifactBuildState, DEPENDENCY_BUILD_ID_LABEL

    if abr.status.state == ArtifactBuildState.COMPLETE:
        ...
"""

from jvmbuild.contracts.types import (
    ARTIFACT_BUILD_ID_LABEL,
    CONTAMINATED_BY_ANNOTATION_PREFIX,
    DEPENDENCY_BUILD_ID_LABEL,
    TASK_RUN_LABEL,
    ArtifactBuildState,
    DependencyBuildState,
    DiscoveryResult,
    EventReason,
    EventType,
)

__all__ = [
    "ARTIFACT_BUILD_ID_LABEL",
    "CONTAMINATED_BY_ANNOTATION_PREFIX",
    "DEPENDENCY_BUILD_ID_LABEL",
    "TASK_RUN_LABEL",
    "ArtifactBuildState",
    "DependencyBuildState",
    "DiscoveryResult",
    "EventReason",
    "EventType",
]
