"""
Timeout and retry constants for the orchestrator.

Centralizes timeout values to ensure consistency across the codebase
and make tuning easier.
"""

from __future__ import annotations

# =============================================================================
# Reconciliation
# =============================================================================

# Execution budget for a single reconcile invocation
RECONCILE_TIMEOUT_S = 300.0

# Retry delay when the discovery task for a Discovering build is not visible yet
MISSING_TASK_REQUEUE_S = 60.0

# Retry delay after an optimistic-concurrency conflict or transient store error
CONFLICT_RETRY_S = 5.0

# Periodic resync of every ArtifactBuild
RESYNC_INTERVAL_S = 300.0

# =============================================================================
# Kubernetes API Timeouts
# =============================================================================

# Connect timeout for K8s API calls
K8S_API_CONNECT_TIMEOUT_S = 3

# Read timeout for K8s API calls
K8S_API_READ_TIMEOUT_S = 30

# =============================================================================
# OTel
# =============================================================================

# Timeout for force_flush operations on MeterProvider
OTEL_FLUSH_TIMEOUT_MS = 5000

# Metric export interval
METRICS_EXPORT_INTERVAL_MS = 60000
