"""
Deployment flow for Marathon apps.

Usage:
    from marathon_deployer.deployment import DeploymentOrchestrator

    async with MarathonClient("http://marathon.mesos:8080") as gateway:
        report = await DeploymentOrchestrator(gateway).deploy(spec)
"""

from marathon_deployer.deployment.orchestrator import (
    DeploymentOrchestrator,
    DeploymentPhase,
    run_deploy,
)
from marathon_deployer.deployment.guard import PriorDeploymentGuard
from marathon_deployer.deployment.polling import Clock, MonotonicClock, poll_until
from marathon_deployer.deployment.probe import ExistenceProbe
from marathon_deployer.deployment.publisher import Publisher
from marathon_deployer.deployment.watcher import ConvergenceResult, ConvergenceWatcher

__all__ = [
    # Main orchestrator
    "DeploymentOrchestrator",
    "DeploymentPhase",
    "run_deploy",
    # Steps
    "ExistenceProbe",
    "PriorDeploymentGuard",
    "Publisher",
    "ConvergenceWatcher",
    "ConvergenceResult",
    # Polling
    "Clock",
    "MonotonicClock",
    "poll_until",
]
