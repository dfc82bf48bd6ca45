"""
Centralized configuration for the orchestrator.

Uses Pydantic BaseSettings for environment variable integration
and validation. All configurable values should be defined here.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (JVMBUILD_*)
3. .env file
4. Default values

Example:
    from jvmbuild.config import get_config

    config = get_config()
    print(config.namespace)  # From JVMBUILD_NAMESPACE or default

    # Override at runtime
    config = get_config(storage_type="memory")
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jvmbuild.contracts.timeouts import (
    CONFLICT_RETRY_S,
    METRICS_EXPORT_INTERVAL_MS,
    MISSING_TASK_REQUEUE_S,
    RECONCILE_TIMEOUT_S,
    RESYNC_INTERVAL_S,
)
from jvmbuild.contracts.types import DEFAULT_DISCOVERY_TASK


class JvmBuildConfig(BaseSettings):
    """
    Central configuration for the orchestrator.

    All settings can be overridden via environment variables
    prefixed with JVMBUILD_.

    Example:
        export JVMBUILD_NAMESPACE=jvm-builds
        export JVMBUILD_LOG_LEVEL=debug
    """

    model_config = SettingsConfigDict(
        env_prefix="JVMBUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = Field(
        default="jvmbuild",
        description="Service name for telemetry attribution",
    )

    # Kubernetes
    namespace: str = Field(
        default="default",
        description="Default namespace for ArtifactBuilds",
    )
    kubeconfig: Optional[str] = Field(
        default=None,
        description="Path to kubeconfig file (in-cluster config if not set)",
    )
    storage_type: Literal["auto", "kubernetes", "memory"] = Field(
        default="auto",
        description="Object store backend (auto-detects if not set)",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format (json for Loki, text for console)",
    )

    # Discovery
    discovery_task_ref: str = Field(
        default=DEFAULT_DISCOVERY_TASK,
        description="ClusterTask that resolves a GAV to its SCM location",
    )

    # Reconciliation
    reconcile_timeout_seconds: float = Field(
        default=RECONCILE_TIMEOUT_S,
        gt=0,
        description="Execution budget of a single reconcile",
    )
    missing_task_requeue_seconds: float = Field(
        default=MISSING_TASK_REQUEUE_S,
        gt=0,
        description="Retry delay when a discovery task is not visible yet",
    )
    conflict_retry_seconds: float = Field(
        default=CONFLICT_RETRY_S,
        gt=0,
        description="Retry delay after a store conflict or transient error",
    )
    resync_interval_seconds: float = Field(
        default=RESYNC_INTERVAL_S,
        ge=10,
        description="Interval of the periodic ArtifactBuild resync",
    )

    # Metrics
    otlp_endpoint: Optional[str] = Field(
        default=None,
        description="OTLP gRPC endpoint for metric export (disabled if not set)",
    )
    otlp_insecure: bool = Field(
        default=True,
        description="Use insecure connection to OTLP endpoint",
    )
    metrics_export_interval_ms: int = Field(
        default=METRICS_EXPORT_INTERVAL_MS,
        ge=1000,
        description="Metric export interval",
    )

    @field_validator("otlp_endpoint")
    @classmethod
    def validate_endpoint(cls, v: Optional[str]) -> Optional[str]:
        """Strip the protocol prefix (the gRPC exporter adds its own)."""
        if not v:
            return None
        if v.startswith("http://"):
            v = v[7:]
        elif v.startswith("https://"):
            v = v[8:]
        return v


# Global singleton
_config: Optional[JvmBuildConfig] = None


def get_config(**overrides) -> JvmBuildConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.
    """
    global _config

    if overrides or _config is None:
        _config = JvmBuildConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
