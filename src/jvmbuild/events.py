"""
Event recording for human observability.

Events are fire-and-forget: the reconciler never reads them back, and a
failure to post one is logged rather than failing the reconcile.

Usage:
    recorder = KubernetesEventRecorder()
    recorder.record(abr, EventType.WARNING, EventReason.MISSING_TAG, "...")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

from jvmbuild.contracts.types import EventReason, EventType
from jvmbuild.models.meta import Resource

logger = logging.getLogger(__name__)

COMPONENT = "artifactbuild-controller"


@dataclass
class RecordedEvent:
    """An event as seen by the recorder."""
    kind: str
    namespace: str
    name: str
    event_type: str
    reason: str
    message: str


class EventRecorder:
    """Logs every event; subclasses additionally publish it."""

    def record(
        self,
        obj: Resource,
        event_type: EventType,
        reason: EventReason,
        message: str,
    ) -> None:
        event = RecordedEvent(
            kind=obj.KIND,
            namespace=obj.namespace,
            name=obj.name,
            event_type=EventType(event_type).value,
            reason=EventReason(reason).value,
            message=message,
        )
        log = logger.warning if event.event_type == EventType.WARNING.value else logger.info
        log(f"{event.kind} {event.namespace}/{event.name} {event.reason}: {message}")
        self._emit(obj, event)

    def _emit(self, obj: Resource, event: RecordedEvent) -> None:
        pass


class MemoryEventRecorder(EventRecorder):
    """Keeps recorded events in a list."""

    def __init__(self):
        self.events: List[RecordedEvent] = []

    def _emit(self, obj: Resource, event: RecordedEvent) -> None:
        self.events.append(event)

    def reasons(self) -> List[str]:
        return [e.reason for e in self.events]


class KubernetesEventRecorder(EventRecorder):
    """Posts core/v1 Events attached to the involved object."""

    def __init__(self, api: Optional[Any] = None, component: str = COMPONENT):
        if api is None:
            from kubernetes import client
            api = client.CoreV1Api()
        self.core_api = api
        self.component = component

    def _emit(self, obj: Resource, event: RecordedEvent) -> None:
        from kubernetes import client
        from kubernetes.client.rest import ApiException

        now = datetime.now(timezone.utc)
        body = client.CoreV1Event(
            metadata=client.V1ObjectMeta(generate_name=f"{event.name}.", namespace=event.namespace),
            involved_object=client.V1ObjectReference(
                api_version=obj.api_version(),
                kind=event.kind,
                name=event.name,
                namespace=event.namespace,
                uid=obj.metadata.uid,
            ),
            reason=event.reason,
            message=event.message,
            type=event.event_type,
            count=1,
            first_timestamp=now,
            last_timestamp=now,
            source=client.V1EventSource(component=self.component),
        )
        try:
            self.core_api.create_namespaced_event(namespace=event.namespace, body=body)
        except ApiException as e:
            logger.warning(f"Failed to post event {event.reason} for {event.namespace}/{event.name}: {e.status} {e.reason}")
