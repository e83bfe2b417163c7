"""
End-to-end deploy flow.

probing existence -> [guarding prior deployment] -> publishing ->
[awaiting convergence] -> converged. Any error ends the flow at the phase it
happened in and is raised to the caller unchanged.
"""

import logging
from enum import Enum
from typing import Optional

from marathon_deployer.config.settings import DeployerConfig, DeploymentSettings
from marathon_deployer.deployment.guard import PriorDeploymentGuard
from marathon_deployer.deployment.polling import Clock, MonotonicClock
from marathon_deployer.deployment.probe import ExistenceProbe
from marathon_deployer.deployment.publisher import Publisher
from marathon_deployer.deployment.watcher import ConvergenceWatcher
from marathon_deployer.descriptor import load_app_spec
from marathon_deployer.exceptions import DeployerError
from marathon_deployer.gateway import MarathonClient, OrchestratorGateway
from marathon_deployer.logging_config import LogContext, log_deployment_phase
from marathon_deployer.models import AppSpec, DeploymentReport
from marathon_deployer.utils.log_sanitizer import sanitize_app_id

logger = logging.getLogger(__name__)


class DeploymentPhase(str, Enum):
    """States of the deploy flow."""

    START = "start"
    PROBING_EXISTENCE = "probing_existence"
    GUARDING_PRIOR_DEPLOYMENT = "guarding_prior_deployment"
    PUBLISHING = "publishing"
    AWAITING_CONVERGENCE = "awaiting_convergence"
    CONVERGED = "converged"
    FAILED = "failed"


class DeploymentOrchestrator:
    """Deploys one app descriptor and waits for it to converge."""

    def __init__(
        self,
        gateway: OrchestratorGateway,
        settings: Optional[DeploymentSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            gateway: Marathon gateway, owned by the caller
            settings: Waiting behaviour; defaults match the CLI defaults
            clock: Clock for all waits, injectable for tests
        """
        self.gateway = gateway
        self.settings = settings or DeploymentSettings()
        self.clock = clock or MonotonicClock()
        self.phase = DeploymentPhase.START

        self.probe = ExistenceProbe(gateway)
        self.guard = PriorDeploymentGuard(gateway, clock=self.clock)
        self.publisher = Publisher(gateway, force=self.settings.force)
        self.watcher = ConvergenceWatcher(
            gateway, clock=self.clock, version_check=self.settings.version_check
        )

    def _enter(self, phase: DeploymentPhase, app_id: str, **details) -> None:
        self.phase = phase
        log_deployment_phase(phase.value, sanitize_app_id(app_id), details or None)

    async def deploy(self, spec: AppSpec) -> DeploymentReport:
        """
        Run the full deploy flow for spec.

        Returns:
            DeploymentReport describing the rollout

        Raises:
            DeployerError: The flow failed; the phase is left in self.phase
        """
        with LogContext(app_id=spec.id):
            try:
                return await self._deploy(spec)
            except DeployerError as e:
                failed_in = self.phase
                self.phase = DeploymentPhase.FAILED
                # The caller reports the error itself
                logger.debug(
                    f"Deployment of {sanitize_app_id(spec.id)} failed while {failed_in.value}: {e}"
                )
                raise

    async def _deploy(self, spec: AppSpec) -> DeploymentReport:
        settings = self.settings
        started_at = self.clock.now()

        self._enter(DeploymentPhase.PROBING_EXISTENCE, spec.id)
        exists = await self.probe.exists(spec.id)
        if exists:
            logger.info(f"{sanitize_app_id(spec.id)} already exists - will be updated")
        else:
            logger.info(f"{sanitize_app_id(spec.id)} does not exist yet - will be created")

        if exists and settings.wait_on_running_deployment:
            self._enter(
                DeploymentPhase.GUARDING_PRIOR_DEPLOYMENT,
                spec.id,
                timeout=settings.wait_on_running_deployment_timeout_in_sec,
            )
            await self.guard.await_no_prior_deployment(
                spec.id,
                poll_interval=settings.poll_interval,
                timeout=settings.wait_on_running_deployment_timeout_in_sec,
            )

        self._enter(DeploymentPhase.PUBLISHING, spec.id, create=not exists)
        publish_started = self.clock.now()
        outcome = await self.publisher.publish(exists, spec)

        # Clamped to one instance so an update of a scaled-to-zero app still
        # gets a non-zero budget
        instances = max(outcome.instances or 0, 1)
        timeout_seconds = settings.wait_for_successful_deployment_timeout_in_sec * instances
        report = DeploymentReport(
            app_id=spec.id,
            created=outcome.created,
            version=outcome.version,
            deployment_id=outcome.deployment_id,
            instances=outcome.instances or 0,
            timeout_seconds=timeout_seconds,
        )

        if settings.wait_for_successful_deployment:
            self._enter(
                DeploymentPhase.AWAITING_CONVERGENCE,
                spec.id,
                version=outcome.version,
                timeout=timeout_seconds,
            )
            result = await self.watcher.await_convergence(
                spec.id,
                outcome.version,
                timeout_seconds,
                poll_interval=settings.poll_interval,
                initial_delay=0.0 if outcome.created else settings.initial_delay,
                started_at=publish_started,
            )
            report.converged = True
            report.time_to_first_healthy = result.time_to_first_healthy

        report.elapsed = self.clock.now() - started_at
        self._enter(DeploymentPhase.CONVERGED, spec.id, converged=report.converged)
        return report


async def run_deploy(config: DeployerConfig, clock: Optional[Clock] = None) -> DeploymentReport:
    """
    Load the descriptor named in config and deploy it.

    The descriptor is read before any connection to Marathon is opened, so a
    missing or broken file fails without touching the cluster.
    """
    config.validate_for_deploy()
    spec = load_app_spec(config.descriptor.path)
    logger.info(
        f"deploying Marathon config for {sanitize_app_id(spec.id)} from "
        f"{config.descriptor.path} to {config.marathon.host}"
    )

    async with MarathonClient(
        config.marathon.host,
        token=config.marathon.token,
        timeout=config.marathon.request_timeout,
    ) as gateway:
        orchestrator = DeploymentOrchestrator(gateway, config.deployment, clock=clock)
        return await orchestrator.deploy(spec)
