"""
Create or update an app in Marathon.
"""

import logging

from marathon_deployer.deployment.helpers import load_deploying_versions
from marathon_deployer.exceptions import GatewayError, PublishFailed
from marathon_deployer.gateway import OrchestratorGateway
from marathon_deployer.models import AppSpec, PublishOutcome
from marathon_deployer.utils.log_sanitizer import sanitize_app_id, sanitize_for_log

logger = logging.getLogger(__name__)


class Publisher:
    """
    Sends the app descriptor to Marathon exactly once.

    The resolved instance count in the outcome sizes the convergence timeout:
    the descriptor's instances if set, otherwise 1 for a new app or the
    current size of an existing one.
    """

    def __init__(self, gateway: OrchestratorGateway, force: bool = False) -> None:
        self.gateway = gateway
        self.force = force

    async def publish(self, exists: bool, spec: AppSpec) -> PublishOutcome:
        """
        Create the app if it does not exist, update it otherwise.

        Raises:
            PublishFailed: Marathon rejected the call or could not be reached
        """
        try:
            if exists:
                return await self._update(spec)
            return await self._create(spec)
        except GatewayError as e:
            raise PublishFailed(spec.id, e) from e

    async def _create(self, spec: AppSpec) -> PublishOutcome:
        outcome = await self.gateway.create_app(spec)
        version = outcome.version
        if not version:
            # No version in the create response; the new app's only
            # deployment carries it
            versions = set(await load_deploying_versions(self.gateway, spec.id))
            if len(versions) != 1:
                raise GatewayError(
                    f"Expected exactly one version for newly created app, but got {sorted(versions)}"
                )
            version = versions.pop()

        instances = spec.instances if spec.instances is not None else 1
        logger.info(
            f"Created app {sanitize_app_id(spec.id)} with version {sanitize_for_log(version)} "
            f"(Id {sanitize_for_log(outcome.deployment_id)})"
        )
        return outcome.model_copy(
            update={"version": version, "instances": instances, "created": True}
        )

    async def _update(self, spec: AppSpec) -> PublishOutcome:
        # The descriptor may omit instances, meaning "keep the current size"
        current = await self.gateway.get_app(spec.id)
        outcome = await self.gateway.update_app(spec.id, spec, force=self.force)
        if not outcome.version:
            raise GatewayError(f"Marathon returned no version for the update of {spec.id}")

        instances = spec.instances if spec.instances is not None else current.instances
        logger.info(
            f"Updated app {sanitize_app_id(spec.id)} to version {sanitize_for_log(outcome.version)} "
            f"(Id {sanitize_for_log(outcome.deployment_id)}), instances {current.instances} -> {instances}"
        )
        return outcome.model_copy(update={"instances": instances, "created": False})
