"""
Pydantic models for the ArtifactBuild and DependencyBuild CRDs.

An ArtifactBuild is one requested GAV; a DependencyBuild is one unique
source location (SCM URL, tag, path) shared by every ArtifactBuild that
resolves to it. Models match the OpenAPI schema of the
``jvmbuildservice.io/v1alpha1`` resources.
"""

from __future__ import annotations

from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jvmbuild.contracts.types import (
    ARTIFACT_BUILD_PLURAL,
    CONTAMINATED_BY_ANNOTATION_PREFIX,
    DEPENDENCY_BUILD_PLURAL,
    JVM_BUILD_GROUP,
    JVM_BUILD_VERSION,
    ArtifactBuildState,
)
from jvmbuild.models.meta import Resource


class SCMInfo(BaseModel):
    """Source location resolved by discovery."""
    scm_url: str = Field("", alias="scmURL")
    scm_type: str = Field("", alias="scmType")
    tag: str = ""
    path: str = ""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ArtifactBuildSpec(BaseModel):
    gav: str = Field(..., description="group:artifact:version coordinate")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ArtifactBuildStatus(BaseModel):
    state: ArtifactBuildState = ArtifactBuildState.NEW
    scm_info: SCMInfo = Field(default_factory=SCMInfo, alias="scmInfo")
    message: str = ""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("state", mode="before")
    @classmethod
    def empty_state_is_new(cls, v):
        if v is None or isinstance(v, str):
            return ArtifactBuildState.parse(v)
        return v


class ArtifactBuild(Resource):
    """A request to build the library identified by ``spec.gav``."""
    GROUP: ClassVar[str] = JVM_BUILD_GROUP
    VERSION: ClassVar[str] = JVM_BUILD_VERSION
    KIND: ClassVar[str] = "ArtifactBuild"
    PLURAL: ClassVar[str] = ARTIFACT_BUILD_PLURAL

    spec: ArtifactBuildSpec
    status: ArtifactBuildStatus = Field(default_factory=ArtifactBuildStatus)

    @property
    def gav(self) -> str:
        return self.spec.gav

    @property
    def state(self) -> ArtifactBuildState:
        return self.status.state


class DependencyBuildSpec(BaseModel):
    scm_info: SCMInfo = Field(default_factory=SCMInfo, alias="scmInfo")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class DependencyBuildStatus(BaseModel):
    # Opaque beyond Complete/Failed/Contaminated, so kept as a plain string
    state: str = ""
    contaminants: List[str] = Field(default_factory=list)
    message: str = ""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class DependencyBuild(Resource):
    """A shared build of one source location."""
    GROUP: ClassVar[str] = JVM_BUILD_GROUP
    VERSION: ClassVar[str] = JVM_BUILD_VERSION
    KIND: ClassVar[str] = "DependencyBuild"
    PLURAL: ClassVar[str] = DEPENDENCY_BUILD_PLURAL

    spec: DependencyBuildSpec = Field(default_factory=DependencyBuildSpec)
    status: DependencyBuildStatus = Field(default_factory=DependencyBuildStatus)

    @property
    def state(self) -> str:
        return self.status.state


def contamination_markers(abr: ArtifactBuild) -> List[str]:
    """
    DependencyBuild names referenced by the ArtifactBuild's contamination
    annotations, in annotation key order.
    """
    annotations = abr.metadata.annotations
    return [
        annotations[key]
        for key in sorted(annotations)
        if key.startswith(CONTAMINATED_BY_ANNOTATION_PREFIX) and annotations[key]
    ]


def new_artifact_build(gav: str, name: str, namespace: Optional[str] = None) -> ArtifactBuild:
    """Build an unsaved ArtifactBuild for ``gav``."""
    abr = ArtifactBuild(spec=ArtifactBuildSpec(gav=gav))
    abr.metadata.name = name
    abr.metadata.namespace = namespace
    return abr
