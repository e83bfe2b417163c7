"""
Data models for marathon-deployer.

Wire names follow Marathon's camelCase JSON; attributes are snake_case.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


def absolute_app_id(app_id: str) -> str:
    """
    Resolve an app id the way Marathon does.

    Marathon stores and reports ids rooted at "/", so a descriptor id of
    "group/svc" comes back as "/group/svc" in app and deployment listings.
    """
    return "/" + app_id.strip("/")


class MarathonModel(BaseModel):
    """Base for models parsed from Marathon responses."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class AppSpec(MarathonModel):
    """The desired application definition, read once from the descriptor."""

    id: str = Field(..., min_length=1, description="Marathon app id (e.g., /example-service)")
    instances: Optional[int] = Field(
        None, gt=0, description="Desired instance count; None keeps Marathon's current size"
    )
    payload: Dict[str, Any] = Field(
        default_factory=dict, description="Full descriptor, sent to Marathon verbatim"
    )

    @classmethod
    def from_descriptor(cls, data: Dict[str, Any]) -> "AppSpec":
        """Build an AppSpec from a parsed Marathon app descriptor."""
        return cls(id=data.get("id"), instances=data.get("instances"), payload=dict(data))


class HealthCheckResult(MarathonModel):
    """Result of one health check for a task."""

    alive: bool = False


class Task(MarathonModel):
    """One running instance of an app version."""

    id: Optional[str] = None
    host: Optional[str] = None
    version: str
    health_check_results: List[HealthCheckResult] = Field(
        default_factory=list, alias="healthCheckResults"
    )

    @property
    def is_alive(self) -> bool:
        """Does at least one health check report this task alive?"""
        return any(result.alive for result in self.health_check_results)


class AppStatus(MarathonModel):
    """Point-in-time snapshot of an app as reported by Marathon."""

    id: str
    instances: int = 0
    tasks_running: int = Field(0, alias="tasksRunning")
    tasks_staged: int = Field(0, alias="tasksStaged")
    tasks_unhealthy: int = Field(0, alias="tasksUnhealthy")
    tasks_healthy: int = Field(0, alias="tasksHealthy")
    tasks: List[Task] = Field(default_factory=list)

    @property
    def versions(self) -> List[str]:
        """Sorted versions of all tasks in this snapshot."""
        return sorted(task.version for task in self.tasks)


class DeploymentRecord(MarathonModel):
    """An in-flight rollout as listed by Marathon."""

    id: Optional[str] = None
    version: str
    affected_apps: List[str] = Field(default_factory=list, alias="affectedApps")

    def affects(self, app_id: str) -> bool:
        """Is this deployment rolling out the given app? Relative ids are resolved first."""
        target = absolute_app_id(app_id)
        return any(absolute_app_id(affected) == target for affected in self.affected_apps)


class PublishOutcome(MarathonModel):
    """Result of a create or update call."""

    version: Optional[str] = Field(None, description="Version now being rolled out")
    deployment_id: Optional[str] = Field(None, alias="deploymentId")
    instances: Optional[int] = Field(
        None, description="Resolved instance count used to size the convergence timeout"
    )
    created: bool = Field(False, description="Whether the app was created rather than updated")


class DeploymentReport(BaseModel):
    """What a successful deploy invocation did."""

    app_id: str = Field(..., description="Marathon app id")
    created: bool = Field(..., description="True for create, False for update")
    version: str = Field(..., description="Version that was rolled out")
    deployment_id: Optional[str] = Field(None, description="Marathon deployment id if reported")
    instances: int = Field(..., description="Resolved instance count")
    timeout_seconds: float = Field(..., description="Convergence timeout budget")
    converged: bool = Field(False, description="Whether convergence was awaited and reached")
    time_to_first_healthy: Optional[float] = Field(
        None, description="Seconds from publish to the first healthy task of the new version"
    )
    elapsed: float = Field(0.0, description="Total seconds spent in the deploy flow")
