"""
App existence check.
"""

import logging

from marathon_deployer.exceptions import GatewayError, NotFoundError, ProbeFailed
from marathon_deployer.gateway import OrchestratorGateway
from marathon_deployer.utils.log_sanitizer import sanitize_app_id

logger = logging.getLogger(__name__)


class ExistenceProbe:
    """Answers whether Marathon already knows an app id."""

    def __init__(self, gateway: OrchestratorGateway) -> None:
        self.gateway = gateway

    async def exists(self, app_id: str) -> bool:
        """
        Check whether app_id exists.

        Returns:
            False if Marathon answers 404, True if the app can be fetched

        Raises:
            ProbeFailed: Any other gateway failure
        """
        try:
            await self.gateway.get_app(app_id)
        except NotFoundError:
            logger.debug(f"{sanitize_app_id(app_id)} not found in Marathon")
            return False
        except GatewayError as e:
            raise ProbeFailed(app_id, e) from e
        return True
