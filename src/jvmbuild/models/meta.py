"""
Kubernetes object metadata models.

Mirrors the subset of ``metav1.ObjectMeta`` the orchestrator reads and
writes. Field aliases match the wire format so objects round-trip through
the Kubernetes API without translation. Fields not modelled here are
kept as extras, so a read-modify-write never drops what the build
pipeline or other controllers set (finalizers, conditions, recipes).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OwnerReference(BaseModel):
    """Back-reference from a dependent object to one of its owners."""
    api_version: str = Field(..., alias="apiVersion")
    kind: str
    name: str
    uid: str
    controller: Optional[bool] = None
    block_owner_deletion: Optional[bool] = Field(None, alias="blockOwnerDeletion")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ObjectMeta(BaseModel):
    """Object identity, labels, annotations and ownership."""
    name: Optional[str] = None
    generate_name: Optional[str] = Field(None, alias="generateName")
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resource_version: Optional[str] = Field(None, alias="resourceVersion")
    creation_timestamp: Optional[datetime] = Field(None, alias="creationTimestamp")
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    owner_references: List[OwnerReference] = Field(
        default_factory=list, alias="ownerReferences"
    )

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Resource(BaseModel):
    """
    Base for every stored object.

    Subclasses declare their API coordinates as class variables so the
    storage backends can address them generically.
    """
    GROUP: ClassVar[str]
    VERSION: ClassVar[str]
    KIND: ClassVar[str]
    PLURAL: ClassVar[str]

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def api_version(cls) -> str:
        return f"{cls.GROUP}/{cls.VERSION}"

    @property
    def name(self) -> str:
        return self.metadata.name or ""

    @property
    def namespace(self) -> str:
        return self.metadata.namespace or ""

    def to_body(self) -> Dict[str, Any]:
        """Serialize to a Kubernetes API request body."""
        body = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        body["apiVersion"] = self.api_version()
        body["kind"] = self.KIND
        return body


def owner_reference_for(owner: Resource) -> OwnerReference:
    """Build a non-controller owner reference pointing at ``owner``."""
    return OwnerReference(
        api_version=owner.api_version(),
        kind=owner.KIND,
        name=owner.name,
        uid=owner.metadata.uid or "",
    )


def has_owner(obj: Resource, owner: Resource) -> bool:
    """True if ``owner`` is already among ``obj``'s owner references (by uid)."""
    uid = owner.metadata.uid
    return any(ref.uid == uid for ref in obj.metadata.owner_references)


def set_owner_reference(obj: Resource, owner: Resource) -> bool:
    """
    Attach ``owner`` to ``obj`` if it is not already an owner.

    Never sets a controller reference: a DependencyBuild is shared by many
    ArtifactBuilds and none of them controls it. Returns True when the
    reference list changed.
    """
    if has_owner(obj, owner):
        return False
    obj.metadata.owner_references.append(owner_reference_for(owner))
    return True
