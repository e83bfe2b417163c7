"""
Utility functions for deployment checks.

Pure functions over Marathon snapshots, plus the deployment-listing filter
shared by the guard, the publisher and the convergence watcher.
"""

from typing import List

from marathon_deployer.gateway import OrchestratorGateway
from marathon_deployer.models import AppStatus, DeploymentRecord


def versions_affecting(deployments: List[DeploymentRecord], app_id: str) -> List[str]:
    """Sorted versions of the deployments that roll out app_id."""
    return sorted(d.version for d in deployments if d.affects(app_id))


async def load_deploying_versions(gateway: OrchestratorGateway, app_id: str) -> List[str]:
    """Fetch the deployment listing and return the versions in flight for app_id."""
    return versions_affecting(await gateway.list_deployments(), app_id)


def matching_versions(status: AppStatus, target_version: str) -> List[str]:
    """Task versions in the snapshot equal to target_version."""
    return [version for version in status.versions if version == target_version]


def is_converged(status: AppStatus, target_version: str) -> bool:
    """
    Has target_version fully replaced every other version and become healthy?

    Health uses Marathon's own tasksHealthy counter rather than the
    per-task health check results. A snapshot without tasks only counts as
    converged when the app is scaled to zero instances.
    """
    matching = len(matching_versions(status, target_version))
    if matching == 0:
        return not status.tasks and status.instances == 0
    return status.tasks_healthy == matching and len(status.tasks) == matching


def has_alive_task(status: AppStatus, target_version: str) -> bool:
    """Does any task of target_version report an alive health check?"""
    return any(task.is_alive for task in status.tasks if task.version == target_version)
