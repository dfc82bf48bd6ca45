"""
Base object store protocol and factory.

Defines the interface that all storage backends must implement. Stores
hold ArtifactBuild, DependencyBuild and discovery TaskRun objects, address
them by kind + namespace + name, filter them by label equality and reject
writes made from a stale read (optimistic concurrency on
``metadata.resourceVersion``).
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar, runtime_checkable

from jvmbuild.models.meta import Resource

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)


class StoreError(Exception):
    """A store operation failed; retrying later may succeed."""


class NotFoundError(StoreError):
    """The addressed object does not exist."""

    def __init__(self, kind: str, namespace: str, name: str):
        super().__init__(f"{kind} {namespace}/{name} not found")
        self.kind = kind
        self.namespace = namespace
        self.name = name


class ConflictError(StoreError):
    """The write was based on a stale resourceVersion or the name is taken."""


class StorageType(str, Enum):
    """Available storage backend types."""
    KUBERNETES = "kubernetes"
    MEMORY = "memory"


@runtime_checkable
class ObjectStore(Protocol):
    """
    Protocol defining the object store interface.

    All storage implementations must provide these methods.
    """

    def get(self, kind: Type[R], namespace: str, name: str) -> R:
        """Get an object; raises NotFoundError."""
        ...

    def list(
        self,
        kind: Type[R],
        namespace: str,
        labels: Optional[Dict[str, str]] = None,
    ) -> List[R]:
        """List objects whose labels contain every pair in ``labels``."""
        ...

    def create(self, obj: R) -> R:
        """Create an object, honouring metadata.generateName."""
        ...

    def update(self, obj: R) -> R:
        """Replace metadata and spec; raises ConflictError on a stale read."""
        ...

    def update_status(self, obj: R) -> R:
        """Replace status only; raises ConflictError on a stale read."""
        ...


class BaseStore(ABC):
    """
    Abstract base class for storage backends.

    Provides common functionality and default implementations.
    """

    def __init__(self, namespace: str = "default"):
        self.namespace = namespace

    @abstractmethod
    def get(self, kind: Type[R], namespace: str, name: str) -> R:
        """Get an object; raises NotFoundError."""
        pass

    @abstractmethod
    def list(
        self,
        kind: Type[R],
        namespace: str,
        labels: Optional[Dict[str, str]] = None,
    ) -> List[R]:
        """List objects whose labels contain every pair in ``labels``."""
        pass

    @abstractmethod
    def create(self, obj: R) -> R:
        """Create an object, honouring metadata.generateName."""
        pass

    @abstractmethod
    def update(self, obj: R) -> R:
        """Replace metadata and spec; raises ConflictError on a stale read."""
        pass

    @abstractmethod
    def update_status(self, obj: R) -> R:
        """Replace status only; raises ConflictError on a stale read."""
        pass

    def find(self, kind: Type[R], namespace: str, name: str) -> Optional[R]:
        """Like get(), but returns None when the object does not exist."""
        try:
            return self.get(kind, namespace, name)
        except NotFoundError:
            return None


# Storage backend registry
_BACKENDS: Dict[StorageType, Type[BaseStore]] = {}


def register_backend(storage_type: StorageType):
    """Decorator to register a storage backend."""
    def decorator(cls: Type[BaseStore]) -> Type[BaseStore]:
        _BACKENDS[storage_type] = cls
        return cls
    return decorator


def get_storage(
    storage_type: Optional[StorageType] = None,
    namespace: str = "default",
    **kwargs: Any,
) -> BaseStore:
    """
    Get a storage backend instance.

    Auto-detects the appropriate backend if not specified:
    - Uses Kubernetes if running in-cluster or a kubeconfig is present
    - Falls back to the in-memory store otherwise

    Args:
        storage_type: Explicit storage type to use
        namespace: Default namespace for the backend
        **kwargs: Additional backend-specific options

    Returns:
        Storage backend instance
    """
    # Import backends to register them
    from jvmbuild.storage import kubernetes, memory  # noqa: F401

    if storage_type is None:
        storage_type = _detect_storage_type()

    if storage_type not in _BACKENDS:
        raise ValueError(f"Unknown storage type: {storage_type}")

    backend_class = _BACKENDS[storage_type]
    return backend_class(namespace=namespace, **kwargs)


def _detect_storage_type() -> StorageType:
    """Auto-detect the appropriate storage type."""
    if os.path.exists("/var/run/secrets/kubernetes.io/serviceaccount"):
        logger.info("Detected in-cluster Kubernetes environment")
        return StorageType.KUBERNETES

    if os.environ.get("KUBECONFIG"):
        logger.info("Detected KUBECONFIG environment variable")
        return StorageType.KUBERNETES

    if os.path.exists(os.path.expanduser("~/.kube/config")):
        logger.info("Detected local kubeconfig file")
        return StorageType.KUBERNETES

    logger.info("No Kubernetes detected, using in-memory storage")
    return StorageType.MEMORY
