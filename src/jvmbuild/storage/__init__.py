"""
Storage abstraction layer for the orchestrator.

The object store is the only shared mutable resource: every reconcile
reads current state from it and writes back through its compare-and-set
update path.

- Kubernetes (custom objects, production)
- Memory (tests and local dry runs)

Example:
    from jvmbuild.storage import get_storage, StorageType
    from jvmbuild.models import ArtifactBuild

    store = get_storage(StorageType.MEMORY)
    abr = store.get(ArtifactBuild, "default", "bar.1.2.3-1c4e0d2a")
"""

from jvmbuild.storage.base import (
    BaseStore,
    ConflictError,
    NotFoundError,
    ObjectStore,
    StorageType,
    StoreError,
    get_storage,
)
from jvmbuild.storage.kubernetes import KubernetesStore
from jvmbuild.storage.memory import MemoryStore

__all__ = [
    "BaseStore",
    "ConflictError",
    "KubernetesStore",
    "MemoryStore",
    "NotFoundError",
    "ObjectStore",
    "StorageType",
    "StoreError",
    "get_storage",
]
