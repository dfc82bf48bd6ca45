"""
jvmbuild - Orchestration core of a JVM dependency build service.

Resolves Java library coordinates (GAVs) to source locations and
schedules deduplicated builds of those sources:

- ArtifactBuild: one per requested GAV
- DependencyBuild: one per unique SCM URL + tag + path, shared by every
  ArtifactBuild that resolves to it
- Contamination tracking between builds

Example usage:
    from jvmbuild import ArtifactBuildReconciler
    from jvmbuild.storage import get_storage

    reconciler = ArtifactBuildReconciler(get_storage())
    reconciler.reconcile("default", "bar.1.2.3-1c4e0d2a")
"""

__version__ = "0.1.0"
__all__ = [
    "ArtifactBuildReconciler",
    "generate_resource_name",
    "source_identity",
    "__version__",
]


# Lazy imports to avoid loading heavy dependencies at import time
def __getattr__(name: str):
    if name == "ArtifactBuildReconciler":
        from jvmbuild.reconciler import ArtifactBuildReconciler
        return ArtifactBuildReconciler
    if name == "generate_resource_name":
        from jvmbuild.naming import generate_resource_name
        return generate_resource_name
    if name == "source_identity":
        from jvmbuild.naming import source_identity
        return source_identity
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
