"""
Resource models for ArtifactBuild, DependencyBuild and discovery TaskRuns.

These models provide Python type safety and validation for the custom
resources the orchestrator reconciles, matching the wire format of the
Kubernetes API.
"""

from jvmbuild.models.builds import (
    ArtifactBuild,
    ArtifactBuildSpec,
    ArtifactBuildStatus,
    DependencyBuild,
    DependencyBuildSpec,
    DependencyBuildStatus,
    SCMInfo,
    contamination_markers,
    new_artifact_build,
)
from jvmbuild.models.meta import (
    ObjectMeta,
    OwnerReference,
    Resource,
    has_owner,
    owner_reference_for,
    set_owner_reference,
)
from jvmbuild.models.taskrun import (
    DiscoveryTask,
    Param,
    TaskRef,
    TaskRunResult,
    TaskRunSpec,
    TaskRunStatus,
)

__all__ = [
    "ArtifactBuild",
    "ArtifactBuildSpec",
    "ArtifactBuildStatus",
    "DependencyBuild",
    "DependencyBuildSpec",
    "DependencyBuildStatus",
    "DiscoveryTask",
    "ObjectMeta",
    "OwnerReference",
    "Param",
    "Resource",
    "SCMInfo",
    "TaskRef",
    "TaskRunResult",
    "TaskRunSpec",
    "TaskRunStatus",
    "contamination_markers",
    "has_owner",
    "new_artifact_build",
    "owner_reference_for",
    "set_owner_reference",
]
