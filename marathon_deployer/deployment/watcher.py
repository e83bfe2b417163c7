"""
Wait for a published version to fully replace the old one.
"""

import logging
from dataclasses import dataclass
from typing import List, Literal, Optional

from marathon_deployer.deployment.helpers import (
    has_alive_task,
    is_converged,
    load_deploying_versions,
    matching_versions,
)
from marathon_deployer.deployment.polling import Clock, MonotonicClock, poll_until
from marathon_deployer.exceptions import ConvergenceTimeout, VersionUnreachable
from marathon_deployer.gateway import OrchestratorGateway
from marathon_deployer.utils.log_sanitizer import (
    sanitize_app_id,
    sanitize_for_log,
    sanitize_versions,
)

logger = logging.getLogger(__name__)

VersionCheck = Literal["strict", "tolerant"]


@dataclass
class ConvergenceResult:
    """How a successful wait went."""

    polls: int
    elapsed: float
    time_to_first_healthy: Optional[float] = None


class ConvergenceWatcher:
    """
    Polls an app until every task runs the target version and is healthy.

    Each poll re-reads the app. When no task runs the target version yet, the
    deployment listing decides: if Marathon is still rolling the version out
    the watcher keeps waiting, otherwise the rollout was dropped or superseded
    and in strict mode the watcher fails right away instead of waiting out the
    timeout. Tolerant mode keeps polling until the timeout in that case.
    """

    def __init__(
        self,
        gateway: OrchestratorGateway,
        clock: Optional[Clock] = None,
        version_check: VersionCheck = "strict",
    ) -> None:
        if version_check not in ("strict", "tolerant"):
            raise ValueError(f"Unknown version check mode: {version_check}")
        self.gateway = gateway
        self.clock = clock or MonotonicClock()
        self.version_check = version_check

    async def await_convergence(
        self,
        app_id: str,
        target_version: str,
        timeout_seconds: float,
        poll_interval: float = 5.0,
        initial_delay: float = 0.0,
        started_at: Optional[float] = None,
    ) -> ConvergenceResult:
        """
        Block until target_version has converged.

        Args:
            app_id: Marathon app id
            target_version: Version returned by the create/update call
            timeout_seconds: Total budget, initial_delay included
            poll_interval: Seconds between polls
            initial_delay: Seconds to wait before the first poll
            started_at: Clock time the publish started, for time-to-first-healthy

        Raises:
            ConvergenceTimeout: Not converged within timeout_seconds
            VersionUnreachable: Target version neither running nor deploying (strict mode)
            GatewayError: A status or deployment read failed
        """
        safe_id = sanitize_app_id(app_id)
        safe_version = sanitize_for_log(target_version)
        start = self.clock.now()
        if started_at is None:
            started_at = start
        result = ConvergenceResult(polls=0, elapsed=0.0)

        logger.info(
            f"Checking app {safe_id} with new version {safe_version} for successful deployment... "
            f"(timeout {timeout_seconds:g}s)"
        )

        async def converged() -> bool:
            result.polls += 1
            status = await self.gateway.get_app(app_id)
            current_versions = status.versions
            done_now = is_converged(status, target_version)

            if not done_now and not matching_versions(status, target_version):
                await self._check_still_deploying(app_id, target_version, current_versions)

            if result.time_to_first_healthy is None and has_alive_task(status, target_version):
                result.time_to_first_healthy = self.clock.now() - started_at
                logger.info(
                    f"Time to first healthy instance is {result.time_to_first_healthy:.1f}s"
                )

            logger.info(
                f"Checking app {safe_id}. Running Tasks: {status.tasks_running}, "
                f"Staged tasks: {status.tasks_staged}, "
                f"Unhealthy tasks: {status.tasks_unhealthy}, "
                f"Healthy tasks: {status.tasks_healthy}. "
                f"Current versions: {sanitize_versions(current_versions)}"
            )
            return done_now

        done = await poll_until(
            converged,
            timeout=timeout_seconds,
            interval=poll_interval,
            clock=self.clock,
            initial_delay=initial_delay,
        )
        if not done:
            raise ConvergenceTimeout(app_id, target_version, timeout_seconds)

        result.elapsed = self.clock.now() - start
        logger.info(
            f"App {safe_id} converged on version {safe_version} after {result.polls} poll(s)"
        )
        return result

    async def _check_still_deploying(
        self, app_id: str, target_version: str, current_versions: List[str]
    ) -> None:
        """Raise VersionUnreachable unless target_version is still being rolled out."""
        if self.version_check == "tolerant":
            return

        deploying = await load_deploying_versions(self.gateway, app_id)
        if target_version in deploying:
            logger.debug(
                f"Version {sanitize_for_log(target_version)} not running yet, "
                f"deployment still in progress"
            )
            return

        raise VersionUnreachable(app_id, target_version, current_versions)
