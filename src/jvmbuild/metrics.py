"""
Reconcile metrics.

Counts reconciles, state transitions and DependencyBuild bookkeeping,
exposed via OpenTelemetry for Prometheus/Mimir scraping:

- jvmbuild.artifactbuild.reconciles: reconciles by state and outcome
- jvmbuild.artifactbuild.transitions: state transitions by from/to state
- jvmbuild.artifactbuild.reconcile_duration: reconcile wall time (seconds)
- jvmbuild.dependencybuild.created: DependencyBuilds created
- jvmbuild.dependencybuild.owner_attached: ArtifactBuilds joining an existing build
- jvmbuild.dependencybuild.contaminants_removed: acknowledged contaminations
"""

from __future__ import annotations

import atexit
import logging
from typing import Any, Optional

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from jvmbuild.contracts.timeouts import METRICS_EXPORT_INTERVAL_MS, OTEL_FLUSH_TIMEOUT_MS

logger = logging.getLogger(__name__)

RECONCILES_METRIC = "jvmbuild.artifactbuild.reconciles"
TRANSITIONS_METRIC = "jvmbuild.artifactbuild.transitions"
DURATION_METRIC = "jvmbuild.artifactbuild.reconcile_duration"
CREATED_METRIC = "jvmbuild.dependencybuild.created"
OWNER_ATTACHED_METRIC = "jvmbuild.dependencybuild.owner_attached"
CONTAMINANTS_REMOVED_METRIC = "jvmbuild.dependencybuild.contaminants_removed"


class ReconcileMetrics:
    """
    OTel instruments for the reconciler.

    Uses its own MeterProvider rather than the global one. With no reader
    configured the instruments still work but nothing is exported.
    """

    def __init__(
        self,
        service_name: str = "jvmbuild",
        reader: Optional[MetricReader] = None,
    ):
        resource = Resource.create({"service.name": service_name})
        self._provider = MeterProvider(resource=resource, metric_readers=[reader] if reader else [])
        self._meter = self._provider.get_meter("jvmbuild.reconciler")
        self._setup_instruments()

    def _setup_instruments(self) -> None:
        self._reconciles = self._meter.create_counter(
            RECONCILES_METRIC, unit="1", description="ArtifactBuild reconciles",
        )
        self._transitions = self._meter.create_counter(
            TRANSITIONS_METRIC, unit="1", description="ArtifactBuild state transitions",
        )
        self._duration = self._meter.create_histogram(
            DURATION_METRIC, unit="s", description="ArtifactBuild reconcile duration",
        )
        self._created = self._meter.create_counter(
            CREATED_METRIC, unit="1", description="DependencyBuilds created",
        )
        self._owner_attached = self._meter.create_counter(
            OWNER_ATTACHED_METRIC, unit="1", description="Owners attached to existing DependencyBuilds",
        )
        self._contaminants_removed = self._meter.create_counter(
            CONTAMINANTS_REMOVED_METRIC, unit="1", description="Contaminants removed from DependencyBuilds",
        )

    def record_reconcile(self, state: str, outcome: str, duration_s: float) -> None:
        attrs = {"state": state, "outcome": outcome}
        self._reconciles.add(1, attrs)
        self._duration.record(duration_s, attrs)

    def record_transition(self, from_state: str, to_state: str) -> None:
        self._transitions.add(1, {"from_state": from_state, "to_state": to_state})

    def record_dependency_build_created(self) -> None:
        self._created.add(1)

    def record_owner_attached(self) -> None:
        self._owner_attached.add(1)

    def record_contaminant_removed(self) -> None:
        self._contaminants_removed.add(1)

    def shutdown(self) -> None:
        try:
            self._provider.force_flush(timeout_millis=OTEL_FLUSH_TIMEOUT_MS)
            self._provider.shutdown()
        except Exception as e:
            logger.debug(f"Error during metrics shutdown: {e}")


def create_metrics(
    otlp_endpoint: Optional[str] = None,
    insecure: bool = True,
    export_interval_ms: int = METRICS_EXPORT_INTERVAL_MS,
    service_name: str = "jvmbuild",
) -> ReconcileMetrics:
    """
    Build ReconcileMetrics, exporting over OTLP gRPC when an endpoint is given.
    """
    reader: Optional[Any] = None
    if otlp_endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

        logger.info(f"Configured OTLP metrics exporter to {otlp_endpoint}")
        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=otlp_endpoint, insecure=insecure),
            export_interval_millis=export_interval_ms,
        )
    metrics = ReconcileMetrics(service_name=service_name, reader=reader)
    atexit.register(metrics.shutdown)
    return metrics
