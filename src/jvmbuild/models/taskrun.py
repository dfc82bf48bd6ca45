"""
Tekton TaskRun model for the SCM discovery task.

Only the fields the orchestrator sets on creation (params, taskRef) and
the fields it polls (completionTime, taskResults) are modelled; the rest
of the TaskRun is owned by Tekton and ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from jvmbuild.contracts.types import (
    TASK_RUN_PLURAL,
    TEKTON_GROUP,
    TEKTON_VERSION,
    DiscoveryResult,
)
from jvmbuild.models.builds import SCMInfo
from jvmbuild.models.meta import Resource


class TaskRef(BaseModel):
    name: str
    kind: str = "ClusterTask"


class Param(BaseModel):
    name: str
    value: str


class TaskRunSpec(BaseModel):
    task_ref: Optional[TaskRef] = Field(None, alias="taskRef")
    params: List[Param] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class TaskRunResult(BaseModel):
    name: str
    value: str = ""


class TaskRunStatus(BaseModel):
    completion_time: Optional[datetime] = Field(None, alias="completionTime")
    task_results: List[TaskRunResult] = Field(default_factory=list, alias="taskResults")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class DiscoveryTask(Resource):
    """A TaskRun resolving one GAV to its SCM location."""
    GROUP: ClassVar[str] = TEKTON_GROUP
    VERSION: ClassVar[str] = TEKTON_VERSION
    KIND: ClassVar[str] = "TaskRun"
    PLURAL: ClassVar[str] = TASK_RUN_PLURAL

    spec: TaskRunSpec = Field(default_factory=TaskRunSpec)
    status: TaskRunStatus = Field(default_factory=TaskRunStatus)

    @property
    def is_complete(self) -> bool:
        return self.status.completion_time is not None

    def results(self) -> Dict[str, str]:
        """Result name -> value; later duplicates win."""
        return {r.name: r.value for r in self.status.task_results}

    def scm_info(self) -> SCMInfo:
        """SCM location extracted from the task results (empty when absent)."""
        results = self.results()
        return SCMInfo(
            scm_url=results.get(DiscoveryResult.SCM_URL.value, ""),
            tag=results.get(DiscoveryResult.SCM_TAG.value, ""),
            scm_type=results.get(DiscoveryResult.SCM_TYPE.value, ""),
            path=results.get(DiscoveryResult.CONTEXT_PATH.value, ""),
        )

    def message(self) -> str:
        return self.results().get(DiscoveryResult.MESSAGE.value, "")
