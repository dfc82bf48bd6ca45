"""
ArtifactBuild reconciler.

Each call to :meth:`ArtifactBuildReconciler.reconcile` is an independent,
at-least-once invocation: it reads the ArtifactBuild and the objects its
state depends on, decides a plan, and applies it through the store's
compare-and-set writes. Nothing is cached between invocations.

Error policy:
- ArtifactBuild not found: stop silently (deleted concurrently)
- ArtifactBuild unparseable (state outside the enum): log and stop, no retry
- store errors, conflicts and budget overrun: propagate for a fresh retry
- anomalies (task not visible, DependencyBuild vanished): handled in the plan
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from opentelemetry import trace
from pydantic import ValidationError

from jvmbuild.contracts.timeouts import RECONCILE_TIMEOUT_S
from jvmbuild.contracts.types import ArtifactBuildState
from jvmbuild.dedup import find_dependency_builds, find_discovery_tasks, identity_of, pick_most_recent
from jvmbuild.events import EventRecorder
from jvmbuild.logger import ReconcileLogger
from jvmbuild.metrics import ReconcileMetrics
from jvmbuild.models import ArtifactBuild, DependencyBuild
from jvmbuild.reconciler.contamination import contaminating_build_names
from jvmbuild.reconciler.decide import Policy, decide
from jvmbuild.reconciler.plan import (
    AttachOwner,
    CreateDependencyBuild,
    CreateDiscoveryTask,
    Plan,
    ReconcileResult,
    RecordEvent,
    RemoveContaminant,
    Snapshot,
    UpdateArtifactBuildStatus,
)
from jvmbuild.storage.base import NotFoundError, ObjectStore

logger = logging.getLogger(__name__)

tracer = trace.get_tracer("jvmbuild.reconciler")


class ReconcileTimeoutError(Exception):
    """The reconcile ran past its execution budget; retry from scratch."""


class ArtifactBuildReconciler:
    """
    Drives ArtifactBuilds through New, Discovering, Building and a
    terminal state.

    Example:
        reconciler = ArtifactBuildReconciler(store, KubernetesEventRecorder())
        result = reconciler.reconcile("default", "bar.1.2.3-1c4e0d2a")
    """

    def __init__(
        self,
        store: ObjectStore,
        recorder: Optional[EventRecorder] = None,
        policy: Optional[Policy] = None,
        structured_logger: Optional[ReconcileLogger] = None,
        metrics: Optional[ReconcileMetrics] = None,
        timeout: float = RECONCILE_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.recorder = recorder or EventRecorder()
        self.policy = policy or Policy()
        self.structured_logger = structured_logger or ReconcileLogger()
        self.metrics = metrics
        self.timeout = timeout
        self._clock = clock
        self._appliers = {
            UpdateArtifactBuildStatus: self._apply_status_update,
            CreateDiscoveryTask: self._apply_create_task,
            CreateDependencyBuild: self._apply_create_build,
            AttachOwner: self._apply_attach_owner,
            RemoveContaminant: self._apply_remove_contaminant,
            RecordEvent: self._apply_event,
        }

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Run one reconcile of ``namespace/name``."""
        started = self._clock()
        deadline = started + self.timeout
        state = "unknown"
        outcome = "error"
        with tracer.start_as_current_span(
            "artifactbuild.reconcile",
            attributes={"k8s.namespace.name": namespace, "artifactbuild.name": name},
        ) as span:
            try:
                try:
                    snapshot = self.observe(namespace, name, deadline)
                except ValidationError as e:
                    # Unknown state: no retry until the object itself changes
                    outcome = "invalid"
                    logger.warning(f"ArtifactBuild {namespace}/{name} cannot be parsed, skipping: {e}")
                    return ReconcileResult()
                if snapshot is None:
                    outcome = "not_found"
                    return ReconcileResult()
                state = snapshot.state.value
                span.set_attribute("artifactbuild.state", state)

                plan = decide(snapshot, self.policy)
                self.apply(plan, snapshot, deadline)

                outcome = "requeue" if plan.requeue_after else "ok"
                return ReconcileResult(
                    requeue_after=plan.requeue_after,
                    state=plan.next_state or snapshot.state,
                )
            except ReconcileTimeoutError:
                outcome = "timeout"
                raise
            finally:
                if self.metrics is not None:
                    self.metrics.record_reconcile(state, outcome, self._clock() - started)

    def _check_deadline(self, deadline: float) -> None:
        if self._clock() > deadline:
            raise ReconcileTimeoutError(f"reconcile exceeded {self.timeout}s budget")

    def observe(self, namespace: str, name: str, deadline: Optional[float] = None) -> Optional[Snapshot]:
        """
        Read the ArtifactBuild and whatever its current state depends on.

        ``deadline`` is a value of the reconciler clock; it defaults to one
        full budget from now.
        """
        if deadline is None:
            deadline = self._clock() + self.timeout
        self._check_deadline(deadline)
        try:
            abr = self.store.get(ArtifactBuild, namespace, name)
        except NotFoundError:
            logger.debug(f"ArtifactBuild {namespace}/{name} not found, skipping")
            return None

        snapshot = Snapshot(abr=abr)
        state = abr.state
        if state == ArtifactBuildState.DISCOVERING:
            self._check_deadline(deadline)
            snapshot.discovery_tasks = find_discovery_tasks(self.store, namespace, abr.gav)
            task = pick_most_recent(snapshot.discovery_tasks)
            if task is not None and task.is_complete and task.scm_info().tag:
                self._check_deadline(deadline)
                snapshot.dependency_builds = find_dependency_builds(
                    self.store, namespace, identity_of(task.scm_info())
                )
        elif state == ArtifactBuildState.BUILDING:
            self._check_deadline(deadline)
            snapshot.dependency_builds = find_dependency_builds(
                self.store, namespace, identity_of(abr.status.scm_info)
            )
        elif state == ArtifactBuildState.COMPLETE:
            for build_name in contaminating_build_names(abr):
                self._check_deadline(deadline)
                try:
                    build = self.store.get(DependencyBuild, namespace, build_name)
                except NotFoundError:
                    build = None
                snapshot.contaminating_builds[build_name] = build
        return snapshot

    def apply(self, plan: Plan, snapshot: Snapshot, deadline: Optional[float] = None) -> None:
        """Execute the plan's effects in order; the first failure propagates."""
        if deadline is None:
            deadline = self._clock() + self.timeout
        for effect in plan.effects:
            self._check_deadline(deadline)
            self._appliers[type(effect)](effect, snapshot)

    def _apply_status_update(self, effect: UpdateArtifactBuildStatus, snapshot: Snapshot) -> None:
        updated = self.store.update_status(effect.abr)
        from_state = effect.from_state.value
        to_state = updated.state.value
        if from_state != to_state:
            self.structured_logger.log_state_changed(
                updated.namespace, updated.name, updated.gav, from_state, to_state,
            )
            if self.metrics is not None:
                self.metrics.record_transition(from_state, to_state)

    def _apply_create_task(self, effect: CreateDiscoveryTask, snapshot: Snapshot) -> None:
        task = self.store.create(effect.task)
        logger.info(f"Created discovery TaskRun {task.namespace}/{task.name} for {snapshot.abr.gav}")

    def _apply_create_build(self, effect: CreateDependencyBuild, snapshot: Snapshot) -> None:
        build = self.store.create(effect.build)
        scm = build.spec.scm_info
        self.structured_logger.log_dependency_build_created(
            build.namespace, build.name, effect.identity, scm.scm_url, scm.tag, snapshot.abr.name,
        )
        if self.metrics is not None:
            self.metrics.record_dependency_build_created()

    def _apply_attach_owner(self, effect: AttachOwner, snapshot: Snapshot) -> None:
        build = self.store.update(effect.build)
        self.structured_logger.log_owner_attached(
            build.namespace, build.name, snapshot.abr.name, len(build.metadata.owner_references),
        )
        if self.metrics is not None:
            self.metrics.record_owner_attached()

    def _apply_remove_contaminant(self, effect: RemoveContaminant, snapshot: Snapshot) -> None:
        build = self.store.update_status(effect.build)
        self.structured_logger.log_contaminant_removed(
            build.namespace, build.name, effect.contaminant, len(build.status.contaminants),
        )
        if self.metrics is not None:
            self.metrics.record_contaminant_removed()

    def _apply_event(self, effect: RecordEvent, snapshot: Snapshot) -> None:
        self.recorder.record(snapshot.abr, effect.event_type, effect.reason, effect.message)
