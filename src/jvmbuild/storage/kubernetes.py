"""
Kubernetes storage backend.

Reads and writes ArtifactBuild, DependencyBuild and TaskRun custom
objects through ``CustomObjectsApi``. List calls go straight to the API
server (no informer cache) so freshly created objects are visible to the
next reconcile.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type

from jvmbuild.contracts.timeouts import K8S_API_CONNECT_TIMEOUT_S, K8S_API_READ_TIMEOUT_S
from jvmbuild.models.meta import Resource
from jvmbuild.storage.base import (
    BaseStore,
    ConflictError,
    NotFoundError,
    R,
    StorageType,
    StoreError,
    register_backend,
)

logger = logging.getLogger(__name__)

# Kubernetes client is optional - only import if available
try:
    from kubernetes import client, config
    from kubernetes.client.rest import ApiException
    K8S_AVAILABLE = True
except ImportError:
    K8S_AVAILABLE = False
    logger.warning("kubernetes package not installed - KubernetesStore unavailable")


def load_kube_config(kubeconfig: Optional[str] = None) -> None:
    """Load in-cluster config, falling back to a kubeconfig file."""
    if kubeconfig:
        config.load_kube_config(config_file=kubeconfig)
        return
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def label_selector(labels: Optional[Dict[str, str]]) -> str:
    """Render an equality label selector (``k1=v1,k2=v2``)."""
    return ",".join(f"{k}={v}" for k, v in sorted((labels or {}).items()))


@register_backend(StorageType.KUBERNETES)
class KubernetesStore(BaseStore):
    """
    Custom-object storage backend.

    ArtifactBuild and DependencyBuild use the status subresource, so
    ``update_status`` goes through ``replace_namespaced_custom_object_status``
    and ``update`` never touches status.
    """

    def __init__(
        self,
        namespace: str = "default",
        kubeconfig: Optional[str] = None,
        api: Optional[Any] = None,
        request_timeout: tuple = (K8S_API_CONNECT_TIMEOUT_S, K8S_API_READ_TIMEOUT_S),
    ):
        super().__init__(namespace=namespace)
        self._request_timeout = request_timeout

        if api is not None:
            self.custom_api = api
            return

        if not K8S_AVAILABLE:
            raise RuntimeError(
                "kubernetes package required for KubernetesStore. "
                "Install with: pip install kubernetes"
            )

        load_kube_config(kubeconfig)
        self.custom_api = client.CustomObjectsApi()
        logger.debug(f"KubernetesStore initialized for namespace {namespace}")

    @staticmethod
    def _coordinates(kind: Type[Resource]) -> Dict[str, str]:
        return {"group": kind.GROUP, "version": kind.VERSION, "plural": kind.PLURAL}

    def _call(self, kind: Type[Resource], namespace: str, obj_name: str, fn, **kwargs):
        """Invoke an API method, translating ApiException into store errors."""
        try:
            return fn(
                namespace=namespace,
                _request_timeout=self._request_timeout,
                **self._coordinates(kind),
                **kwargs,
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(kind.KIND, namespace, obj_name) from e
            if e.status == 409:
                raise ConflictError(f"{kind.KIND} {namespace}/{obj_name}: {e.reason}") from e
            logger.error(f"K8s API error on {kind.KIND} {namespace}/{obj_name}: {e.status} {e.reason}")
            raise StoreError(f"{kind.KIND} {namespace}/{obj_name}: {e.status} {e.reason}") from e

    def get(self, kind: Type[R], namespace: str, name: str) -> R:
        body = self._call(
            kind, namespace, name,
            self.custom_api.get_namespaced_custom_object,
            name=name,
        )
        return kind.model_validate(body)

    def list(
        self,
        kind: Type[R],
        namespace: str,
        labels: Optional[Dict[str, str]] = None,
    ) -> List[R]:
        result = self._call(
            kind, namespace, "",
            self.custom_api.list_namespaced_custom_object,
            label_selector=label_selector(labels),
        )
        return [kind.model_validate(item) for item in result.get("items", [])]

    def create(self, obj: R) -> R:
        kind = type(obj)
        namespace = obj.namespace or self.namespace
        body = self._call(
            kind, namespace, obj.name or obj.metadata.generate_name or "",
            self.custom_api.create_namespaced_custom_object,
            body=obj.to_body(),
        )
        created = kind.model_validate(body)
        logger.debug(f"Created {kind.KIND} {namespace}/{created.name}")
        return created

    def update(self, obj: R) -> R:
        kind = type(obj)
        namespace = obj.namespace or self.namespace
        body = self._call(
            kind, namespace, obj.name,
            self.custom_api.replace_namespaced_custom_object,
            name=obj.name,
            body=obj.to_body(),
        )
        return kind.model_validate(body)

    def update_status(self, obj: R) -> R:
        kind = type(obj)
        namespace = obj.namespace or self.namespace
        body = self._call(
            kind, namespace, obj.name,
            self.custom_api.replace_namespaced_custom_object_status,
            name=obj.name,
            body=obj.to_body(),
        )
        return kind.model_validate(body)
