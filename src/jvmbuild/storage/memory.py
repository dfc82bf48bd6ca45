"""
In-memory storage backend.

Behaves like the Kubernetes API for the operations the orchestrator uses:
server-assigned uid, resourceVersion and creationTimestamp, generateName
suffixes, label-equality listing, status subresource semantics and
resourceVersion conflict detection. Used for tests and local dry runs.
"""

from __future__ import annotations

import logging
import random
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from jvmbuild.models.meta import Resource
from jvmbuild.storage.base import (
    BaseStore,
    ConflictError,
    NotFoundError,
    R,
    StorageType,
    register_backend,
)

logger = logging.getLogger(__name__)

# Same alphabet the API server uses for generateName suffixes
_SUFFIX_ALPHABET = "bcdfghjklmnpqrstvwxz2456789"
_SUFFIX_LENGTH = 5

_Key = Tuple[str, str, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@register_backend(StorageType.MEMORY)
class MemoryStore(BaseStore):
    """
    Dictionary-backed object store.

    Objects are held as wire-format dicts and re-parsed on every read, so
    callers never share mutable state with the store.
    """

    def __init__(
        self,
        namespace: str = "default",
        clock: Optional[Callable[[], datetime]] = None,
        **_: Any,
    ):
        super().__init__(namespace=namespace)
        self._objects: Dict[_Key, Dict[str, Any]] = {}
        self._version = 0
        self._lock = threading.Lock()
        self._clock = clock or _utcnow

    @staticmethod
    def _key(kind: Type[Resource], namespace: str, name: str) -> _Key:
        return (kind.PLURAL, namespace, name)

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _generate_name(self, kind: Type[Resource], namespace: str, prefix: str) -> str:
        while True:
            suffix = "".join(random.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
            name = f"{prefix}{suffix}"
            if self._key(kind, namespace, name) not in self._objects:
                return name

    def _stored(self, kind: Type[Resource], namespace: str, name: str) -> Dict[str, Any]:
        body = self._objects.get(self._key(kind, namespace, name))
        if body is None:
            raise NotFoundError(kind.KIND, namespace, name)
        return body

    def get(self, kind: Type[R], namespace: str, name: str) -> R:
        with self._lock:
            return kind.model_validate(self._stored(kind, namespace, name))

    def list(
        self,
        kind: Type[R],
        namespace: str,
        labels: Optional[Dict[str, str]] = None,
    ) -> List[R]:
        selector = labels or {}
        with self._lock:
            items = []
            for (plural, ns, _), body in self._objects.items():
                if plural != kind.PLURAL or ns != namespace:
                    continue
                obj_labels = body.get("metadata", {}).get("labels", {})
                if all(obj_labels.get(k) == v for k, v in selector.items()):
                    items.append(kind.model_validate(body))
            return items

    def create(self, obj: R) -> R:
        kind = type(obj)
        namespace = obj.metadata.namespace or self.namespace
        with self._lock:
            name = obj.metadata.name
            if not name:
                if not obj.metadata.generate_name:
                    raise ValueError(f"{kind.KIND} needs metadata.name or metadata.generateName")
                name = self._generate_name(kind, namespace, obj.metadata.generate_name)
            key = self._key(kind, namespace, name)
            if key in self._objects:
                raise ConflictError(f"{kind.KIND} {namespace}/{name} already exists")

            created = obj.model_copy(deep=True)
            created.metadata.name = name
            created.metadata.namespace = namespace
            created.metadata.uid = str(uuid.uuid4())
            created.metadata.resource_version = self._next_version()
            if created.metadata.creation_timestamp is None:
                created.metadata.creation_timestamp = self._clock()
            self._objects[key] = created.to_body()
            logger.debug(f"Created {kind.KIND} {namespace}/{name}")
            return kind.model_validate(self._objects[key])

    def _replace(self, obj: R, status_only: bool) -> R:
        kind = type(obj)
        namespace = obj.namespace or self.namespace
        with self._lock:
            stored = self._stored(kind, namespace, obj.name)
            stored_version = stored["metadata"].get("resourceVersion")
            if obj.metadata.resource_version != stored_version:
                raise ConflictError(
                    f"{kind.KIND} {namespace}/{obj.name} was modified "
                    f"(have {obj.metadata.resource_version}, stored {stored_version})"
                )
            incoming = obj.to_body()
            body = dict(stored)
            if status_only:
                body["status"] = incoming.get("status", {})
            else:
                metadata = dict(incoming["metadata"])
                for immutable in ("name", "namespace", "uid", "creationTimestamp"):
                    if immutable in stored["metadata"]:
                        metadata[immutable] = stored["metadata"][immutable]
                body["metadata"] = metadata
                body["spec"] = incoming.get("spec", {})
            body["metadata"] = dict(body["metadata"], resourceVersion=self._next_version())
            self._objects[self._key(kind, namespace, obj.name)] = body
            return kind.model_validate(body)

    def update(self, obj: R) -> R:
        return self._replace(obj, status_only=False)

    def update_status(self, obj: R) -> R:
        return self._replace(obj, status_only=True)

    def delete(self, kind: Type[Resource], namespace: str, name: str) -> None:
        """Remove an object (test helper; the orchestrator never deletes)."""
        with self._lock:
            if self._objects.pop(self._key(kind, namespace, name), None) is None:
                raise NotFoundError(kind.KIND, namespace, name)
