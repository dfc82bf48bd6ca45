"""
Tests for event recorders.
"""

import logging
from unittest.mock import MagicMock

from kubernetes.client.rest import ApiException

from jvmbuild.contracts.types import EventReason, EventType
from jvmbuild.events import EventRecorder, KubernetesEventRecorder, MemoryEventRecorder
from jvmbuild.models import new_artifact_build


def _abr():
    abr = new_artifact_build("org.foo:bar:1", "bar.1-12345678", "builds")
    abr.metadata.uid = "abr-uid"
    return abr


def test_memory_recorder_keeps_events():
    recorder = MemoryEventRecorder()
    recorder.record(_abr(), EventType.WARNING, EventReason.MISSING_TAG, "no tag")

    (event,) = recorder.events
    assert event.kind == "ArtifactBuild"
    assert event.namespace == "builds"
    assert event.name == "bar.1-12345678"
    assert event.event_type == "Warning"
    assert event.reason == "MissingTag"
    assert event.message == "no tag"
    assert recorder.reasons() == ["MissingTag"]


def test_base_recorder_logs(caplog):
    with caplog.at_level(logging.INFO, logger="jvmbuild.events"):
        EventRecorder().record(_abr(), EventType.NORMAL, EventReason.CANNOT_GET_DEPENDENCY_BUILD, "gone")
    assert "CannotGetDependencyBuild: gone" in caplog.text
    assert caplog.records[-1].levelno == logging.INFO


def test_warning_events_log_at_warning(caplog):
    with caplog.at_level(logging.INFO, logger="jvmbuild.events"):
        EventRecorder().record(_abr(), EventType.WARNING, EventReason.NO_DISCOVERY_TASK, "later")
    assert caplog.records[-1].levelno == logging.WARNING


def test_kubernetes_recorder_posts_event():
    api = MagicMock()
    KubernetesEventRecorder(api=api).record(_abr(), EventType.WARNING, EventReason.MISSING_TAG, "no tag")

    kwargs = api.create_namespaced_event.call_args.kwargs
    assert kwargs["namespace"] == "builds"
    body = kwargs["body"]
    assert body.reason == "MissingTag"
    assert body.type == "Warning"
    assert body.involved_object.uid == "abr-uid"
    assert body.involved_object.kind == "ArtifactBuild"
    assert body.involved_object.api_version == "jvmbuildservice.io/v1alpha1"
    assert body.source.component == "artifactbuild-controller"


def test_kubernetes_recorder_failure_is_logged(caplog):
    api = MagicMock()
    api.create_namespaced_event.side_effect = ApiException(status=403, reason="Forbidden")

    with caplog.at_level(logging.WARNING, logger="jvmbuild.events"):
        KubernetesEventRecorder(api=api).record(_abr(), EventType.WARNING, EventReason.MISSING_TAG, "x")
    assert "Failed to post event MissingTag" in caplog.text
