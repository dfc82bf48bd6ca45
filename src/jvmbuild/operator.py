"""
kopf operator entry point.

Run with:
    kopf run -m jvmbuild.operator --namespace jvm-builds

or through ``jvmbuild controller``. Triggers:
- ArtifactBuild resume/create/update and a periodic resync timer
- TaskRun and DependencyBuild watch events, fanned out to every owning
  ArtifactBuild

Every trigger runs the same level-triggered reconcile. Requeue requests
and retryable store errors become ``kopf.TemporaryError`` so kopf retries
after the requested delay.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

import kopf

from jvmbuild.config import JvmBuildConfig, get_config
from jvmbuild.contracts.types import (
    ARTIFACT_BUILD_ID_LABEL,
    ARTIFACT_BUILD_PLURAL,
    DEPENDENCY_BUILD_PLURAL,
    JVM_BUILD_GROUP,
    JVM_BUILD_VERSION,
    TASK_RUN_PLURAL,
    TEKTON_GROUP,
    TEKTON_VERSION,
)
from jvmbuild.events import EventRecorder, KubernetesEventRecorder
from jvmbuild.logger import configure_logging
from jvmbuild.metrics import create_metrics
from jvmbuild.models import ArtifactBuild
from jvmbuild.reconciler import ArtifactBuildReconciler, Policy, ReconcileResult, ReconcileTimeoutError
from jvmbuild.storage import KubernetesStore, StorageType, StoreError, get_storage

logger = logging.getLogger(__name__)

_reconciler: Optional[ArtifactBuildReconciler] = None


def build_reconciler(config: Optional[JvmBuildConfig] = None) -> ArtifactBuildReconciler:
    """Assemble a reconciler from configuration."""
    config = config or get_config()
    storage_type = None if config.storage_type == "auto" else StorageType(config.storage_type)
    store = get_storage(storage_type, namespace=config.namespace, kubeconfig=config.kubeconfig)
    recorder = KubernetesEventRecorder() if isinstance(store, KubernetesStore) else EventRecorder()
    return ArtifactBuildReconciler(
        store,
        recorder=recorder,
        policy=Policy(
            discovery_task_ref=config.discovery_task_ref,
            missing_task_requeue_seconds=config.missing_task_requeue_seconds,
        ),
        metrics=create_metrics(
            otlp_endpoint=config.otlp_endpoint,
            insecure=config.otlp_insecure,
            export_interval_ms=config.metrics_export_interval_ms,
            service_name=config.service_name,
        ),
        timeout=config.reconcile_timeout_seconds,
    )


def get_reconciler() -> ArtifactBuildReconciler:
    global _reconciler
    if _reconciler is None:
        _reconciler = build_reconciler()
    return _reconciler


def set_reconciler(reconciler: Optional[ArtifactBuildReconciler]) -> None:
    """Replace the process-wide reconciler (for testing)."""
    global _reconciler
    _reconciler = reconciler


def run_reconcile(namespace: str, name: str) -> ReconcileResult:
    """Reconcile one ArtifactBuild, translating retry requests for kopf."""
    try:
        result = get_reconciler().reconcile(namespace, name)
    except (StoreError, ReconcileTimeoutError) as e:
        raise kopf.TemporaryError(
            f"Reconcile of {namespace}/{name} failed: {e}",
            delay=get_config().conflict_retry_seconds,
        ) from e
    if result.requeue_after:
        raise kopf.TemporaryError(
            f"Requeue of {namespace}/{name} requested",
            delay=result.requeue_after,
        )
    return result


def owning_artifact_builds(body: Mapping[str, Any]) -> List[str]:
    """Names of the ArtifactBuilds listed in an object's owner references."""
    refs = body.get("metadata", {}).get("ownerReferences") or []
    return [
        ref["name"]
        for ref in refs
        if ref.get("kind") == ArtifactBuild.KIND and ref.get("apiVersion") == ArtifactBuild.api_version()
    ]


def reconcile_owners(event: Mapping[str, Any]) -> None:
    """
    Reconcile every ArtifactBuild owning the object in a watch event.

    All owners are attempted; the first failure is re-raised afterwards.
    """
    if event.get("type") == "DELETED":
        return
    body = event.get("object") or {}
    namespace = body.get("metadata", {}).get("namespace", "")
    first_error: Optional[Exception] = None
    for name in owning_artifact_builds(body):
        try:
            run_reconcile(namespace, name)
        except kopf.TemporaryError as e:
            logger.info(f"ArtifactBuild {namespace}/{name} will be retried: {e}")
            if first_error is None:
                first_error = e
    if first_error is not None:
        raise first_error


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    config = get_config()
    configure_logging(config.log_level, config.log_format)
    # Events are posted by the reconciler itself
    settings.posting.enabled = False
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(prefix=JVM_BUILD_GROUP)
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(
        prefix=JVM_BUILD_GROUP, key="last-handled-configuration",
    )
    get_reconciler()
    logger.info("jvmbuild operator started")


@kopf.on.resume(JVM_BUILD_GROUP, JVM_BUILD_VERSION, ARTIFACT_BUILD_PLURAL, id="reconcile-resume")
@kopf.on.create(JVM_BUILD_GROUP, JVM_BUILD_VERSION, ARTIFACT_BUILD_PLURAL, id="reconcile-create")
@kopf.on.update(JVM_BUILD_GROUP, JVM_BUILD_VERSION, ARTIFACT_BUILD_PLURAL, id="reconcile-update")
def artifact_build_changed(name: str, namespace: str, **_: Any) -> None:
    run_reconcile(namespace, name)


@kopf.timer(
    JVM_BUILD_GROUP, JVM_BUILD_VERSION, ARTIFACT_BUILD_PLURAL,
    interval=get_config().resync_interval_seconds,
    id="resync",
)
def resync_artifact_build(name: str, namespace: str, **_: Any) -> None:
    run_reconcile(namespace, name)


@kopf.on.event(
    TEKTON_GROUP, TEKTON_VERSION, TASK_RUN_PLURAL,
    labels={ARTIFACT_BUILD_ID_LABEL: kopf.PRESENT},
)
def discovery_task_event(event: Mapping[str, Any], **_: Any) -> None:
    reconcile_owners(event)


@kopf.on.event(JVM_BUILD_GROUP, JVM_BUILD_VERSION, DEPENDENCY_BUILD_PLURAL)
def dependency_build_event(event: Mapping[str, Any], **_: Any) -> None:
    reconcile_owners(event)
