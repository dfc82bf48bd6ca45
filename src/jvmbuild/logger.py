"""
Structured logging for reconcile events.

Outputs JSON-formatted logs for Loki ingestion. Only state-changing
events are logged here; diagnostic messages go through the ordinary
module loggers.

Logged events:
- artifactbuild.state_changed
- dependencybuild.created
- dependencybuild.owner_attached
- dependencybuild.contaminant_removed

Usage:
    from jvmbuild.logger import ReconcileLogger

    logger = ReconcileLogger()
    logger.log_state_changed(abr, from_state="ArtifactBuildNew", to_state="ArtifactBuildDiscovering")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Configure structured logger for Loki
_loki_logger = logging.getLogger("jvmbuild.reconcile")
_loki_logger.setLevel(logging.INFO)

# Default handler outputs JSON to stdout (for container/Loki pickup)
if not _loki_logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    _loki_logger.addHandler(handler)
    _loki_logger.propagate = False

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for the root handler in json mode."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "info", log_format: str = "json") -> None:
    """
    Configure the root logger.

    Args:
        level: debug, info, warning or error
        log_format: json (for Loki) or text (for console)
    """
    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


class ReconcileLogger:
    """
    Structured logger for reconcile events.

    Each log entry includes standard fields for filtering:
    - namespace, name, kind of the object acted on
    - event type and event-specific attributes
    """

    def __init__(
        self,
        service_name: str = "jvmbuild",
        extra_labels: Optional[Dict[str, str]] = None,
    ):
        self.service_name = service_name
        self.extra_labels = extra_labels or {}
        self._logger = _loki_logger

    def _emit(
        self,
        event: str,
        kind: str,
        namespace: str,
        name: str,
        level: str = "info",
        **extra_fields: Any,
    ) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "service": self.service_name,
            "kind": kind,
            "namespace": namespace,
            "name": name,
        }
        entry.update({k: v for k, v in extra_fields.items() if v is not None})

        if self.extra_labels:
            entry["labels"] = self.extra_labels

        log_line = json.dumps(entry, default=str)

        if level == "warn":
            self._logger.warning(log_line)
        else:
            self._logger.info(log_line)

    def log_state_changed(
        self,
        namespace: str,
        name: str,
        gav: str,
        from_state: str,
        to_state: str,
    ) -> None:
        """Log an ArtifactBuild state transition."""
        level = "warn" if to_state in ("ArtifactBuildFailed", "ArtifactBuildMissing") else "info"
        self._emit(
            event="artifactbuild.state_changed",
            kind="ArtifactBuild",
            namespace=namespace,
            name=name,
            level=level,
            gav=gav,
            from_state=from_state,
            to_state=to_state,
        )

    def log_dependency_build_created(
        self,
        namespace: str,
        name: str,
        identity: str,
        scm_url: str,
        tag: str,
        owner: str,
    ) -> None:
        """Log creation of a DependencyBuild."""
        self._emit(
            event="dependencybuild.created",
            kind="DependencyBuild",
            namespace=namespace,
            name=name,
            dependency_build_id=identity,
            scm_url=scm_url,
            tag=tag,
            owner=owner,
        )

    def log_owner_attached(self, namespace: str, name: str, owner: str, owner_count: int) -> None:
        """Log an ArtifactBuild joining an existing DependencyBuild."""
        self._emit(
            event="dependencybuild.owner_attached",
            kind="DependencyBuild",
            namespace=namespace,
            name=name,
            owner=owner,
            owner_count=owner_count,
        )

    def log_contaminant_removed(
        self,
        namespace: str,
        name: str,
        contaminant: str,
        remaining: int,
    ) -> None:
        """Log an acknowledged contamination being removed from a DependencyBuild."""
        self._emit(
            event="dependencybuild.contaminant_removed",
            kind="DependencyBuild",
            namespace=namespace,
            name=name,
            contaminant=contaminant,
            remaining=remaining,
        )
