"""
Core type definitions - single source of truth.

State enums, label keys and result names shared by the reconciler, the
storage backends and the CLI. Values match the strings stored on the
cluster objects, so changing any of them is a wire-format change.
"""

from __future__ import annotations

from enum import Enum

# =============================================================================
# API coordinates
# =============================================================================

JVM_BUILD_GROUP = "jvmbuildservice.io"
JVM_BUILD_VERSION = "v1alpha1"
ARTIFACT_BUILD_PLURAL = "artifactbuilds"
DEPENDENCY_BUILD_PLURAL = "dependencybuilds"

TEKTON_GROUP = "tekton.dev"
TEKTON_VERSION = "v1beta1"
TASK_RUN_PLURAL = "taskruns"

# =============================================================================
# Labels and annotations
# =============================================================================

# Discovery tasks: coordinateKey(GAV)
ARTIFACT_BUILD_ID_LABEL = "jvmbuildservice.io/artifact-build-id"

# DependencyBuilds: sourceIdentity(URL, Tag, Path)
DEPENDENCY_BUILD_ID_LABEL = "jvmbuildservice.io/dependency-build-id"

# Marks every TaskRun created by this controller
TASK_RUN_LABEL = "jvmbuildservice.io/taskrun"

# ArtifactBuild annotations, suffixed per contaminant; value is the
# contaminating DependencyBuild name
CONTAMINATED_BY_ANNOTATION_PREFIX = "jvmbuildservice.io/contaminated-by-"

# Cluster task performing SCM discovery for a GAV
DEFAULT_DISCOVERY_TASK = "lookup-artifact-location"
DISCOVERY_TASK_GAV_PARAM = "GAV"


class ArtifactBuildState(str, Enum):
    """Lifecycle of an ArtifactBuild."""
    NEW = "ArtifactBuildNew"
    DISCOVERING = "ArtifactBuildDiscovering"
    BUILDING = "ArtifactBuildBuilding"
    COMPLETE = "ArtifactBuildComplete"
    FAILED = "ArtifactBuildFailed"
    MISSING = "ArtifactBuildMissing"

    @classmethod
    def parse(cls, value: str | None) -> "ArtifactBuildState":
        """Parse a stored state; empty or unset means New."""
        if not value:
            return cls.NEW
        return cls(value)

    @property
    def is_terminal(self) -> bool:
        return self in (
            ArtifactBuildState.COMPLETE,
            ArtifactBuildState.FAILED,
            ArtifactBuildState.MISSING,
        )


class DependencyBuildState(str, Enum):
    """
    States of a DependencyBuild.

    Only Complete, Failed and Contaminated are interpreted by the
    orchestrator; the build pipeline may use the others freely.
    """
    NEW = "DependencyBuildNew"
    BUILDING = "DependencyBuildBuilding"
    COMPLETE = "DependencyBuildComplete"
    FAILED = "DependencyBuildFailed"
    CONTAMINATED = "DependencyBuildContaminated"


class DiscoveryResult(str, Enum):
    """Result names written by the discovery task."""
    SCM_URL = "scm-url"
    SCM_TAG = "scm-tag"
    SCM_TYPE = "scm-type"
    CONTEXT_PATH = "context"
    MESSAGE = "message"


class EventType(str, Enum):
    """Kubernetes event types."""
    NORMAL = "Normal"
    WARNING = "Warning"


class EventReason(str, Enum):
    """Reasons attached to events emitted by the reconciler."""
    NO_DISCOVERY_TASK = "NoTaskRun"
    MISSING_TAG = "MissingTag"
    MISSING_DEPENDENCY_BUILD = "MissingDependencyBuild"
    CANNOT_GET_DEPENDENCY_BUILD = "CannotGetDependencyBuild"


ARTIFACT_BUILD_STATE_VALUES = [s.value for s in ArtifactBuildState]
DEPENDENCY_BUILD_STATE_VALUES = [s.value for s in DependencyBuildState]
