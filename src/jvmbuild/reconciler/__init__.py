"""
ArtifactBuild reconciliation.

- plan: snapshots, effects and plans
- decide: pure per-state decisions
- contamination: contamination acknowledgement
- artifactbuild: observe / decide / apply driver
"""

from jvmbuild.reconciler.artifactbuild import ArtifactBuildReconciler, ReconcileTimeoutError
from jvmbuild.reconciler.decide import Policy, decide
from jvmbuild.reconciler.plan import Plan, ReconcileResult, Snapshot

__all__ = [
    "ArtifactBuildReconciler",
    "Plan",
    "Policy",
    "ReconcileResult",
    "ReconcileTimeoutError",
    "Snapshot",
    "decide",
]
