"""
Wait for a previous deployment of the same app to finish.

Publishing over a rollout that is still in progress makes Marathon run two
overlapping deployments for one app; this guard serializes them.
"""

import logging
from typing import Optional

from marathon_deployer.deployment.helpers import load_deploying_versions
from marathon_deployer.deployment.polling import Clock, MonotonicClock, poll_until
from marathon_deployer.exceptions import PriorDeploymentTimeout
from marathon_deployer.gateway import OrchestratorGateway
from marathon_deployer.utils.log_sanitizer import sanitize_app_id, sanitize_versions

logger = logging.getLogger(__name__)


class PriorDeploymentGuard:
    """Blocks until no in-flight deployment affects an app."""

    def __init__(self, gateway: OrchestratorGateway, clock: Optional[Clock] = None) -> None:
        self.gateway = gateway
        self.clock = clock or MonotonicClock()

    async def await_no_prior_deployment(
        self, app_id: str, poll_interval: float = 5.0, timeout: float = 300.0
    ) -> None:
        """
        Wait until Marathon lists no deployment affecting app_id.

        Raises:
            PriorDeploymentTimeout: Deployments still listed after timeout seconds
            GatewayError: A deployment listing failed
        """
        safe_id = sanitize_app_id(app_id)

        async def no_deployments_in_progress() -> bool:
            logger.info(f"Checking app {safe_id} for deployments in progress...")
            versions = await load_deploying_versions(self.gateway, app_id)
            logger.info(
                f"Checking app {safe_id}. Apps currently being deployed: {len(versions)}, "
                f"versions: {sanitize_versions(versions)}"
            )
            return not versions

        finished = await poll_until(
            no_deployments_in_progress, timeout=timeout, interval=poll_interval, clock=self.clock
        )
        if not finished:
            raise PriorDeploymentTimeout(app_id, timeout)
