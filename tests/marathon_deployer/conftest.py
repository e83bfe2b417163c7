"""
Shared fixtures for marathon-deployer tests.
"""

from typing import Dict, List, Optional
from unittest.mock import AsyncMock, Mock

import pytest

from marathon_deployer.models import AppSpec, AppStatus, DeploymentRecord, PublishOutcome

APP_ID = "/example-service"


class FakeClock:
    """Clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.time = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.time

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.time += seconds


def make_status(
    versions: List[str],
    healthy: Optional[int] = None,
    instances: Optional[int] = None,
    alive: Optional[Dict[str, bool]] = None,
    app_id: str = APP_ID,
) -> AppStatus:
    """Build an AppStatus with one task per version."""
    alive = alive or {}
    tasks = [
        {
            "id": f"task-{i}",
            "version": version,
            "healthCheckResults": [{"alive": alive[version]}] if version in alive else [],
        }
        for i, version in enumerate(versions)
    ]
    return AppStatus.model_validate(
        {
            "id": app_id,
            "instances": len(versions) if instances is None else instances,
            "tasksRunning": len(versions),
            "tasksStaged": 0,
            "tasksHealthy": 0 if healthy is None else healthy,
            "tasksUnhealthy": 0,
            "tasks": tasks,
        }
    )


def make_deployment(version: str, *app_ids: str) -> DeploymentRecord:
    """Build a DeploymentRecord affecting the given apps (APP_ID by default)."""
    return DeploymentRecord.model_validate(
        {"id": f"deploy-{version}", "version": version, "affectedApps": list(app_ids or [APP_ID])}
    )


@pytest.fixture
def clock():
    """Fake clock."""
    return FakeClock()


@pytest.fixture
def gateway():
    """Mock OrchestratorGateway; tests script the side effects."""
    mock = Mock()
    mock.get_app = AsyncMock()
    mock.list_deployments = AsyncMock(return_value=[])
    mock.create_app = AsyncMock(return_value=PublishOutcome(version="v1", deployment_id="d-1"))
    mock.update_app = AsyncMock(return_value=PublishOutcome(version="v2", deployment_id="d-2"))
    return mock


@pytest.fixture
def app_spec():
    """Descriptor without an explicit instance count."""
    return AppSpec.from_descriptor({"id": APP_ID, "cmd": "run.sh", "cpus": 0.5})


@pytest.fixture
def sized_app_spec():
    """Descriptor asking for two instances."""
    return AppSpec.from_descriptor({"id": APP_ID, "cmd": "run.sh", "instances": 2})


@pytest.fixture
def status_factory():
    """Factory for AppStatus snapshots, see make_status."""
    return make_status


@pytest.fixture
def deployment_factory():
    """Factory for DeploymentRecords, see make_deployment."""
    return make_deployment
