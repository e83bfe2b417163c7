"""
Tests for the convergence watcher.
"""

import pytest

from marathon_deployer.deployment.helpers import is_converged
from marathon_deployer.deployment.watcher import ConvergenceWatcher
from marathon_deployer.exceptions import ConvergenceTimeout, GatewayError, VersionUnreachable


class TestIsConverged:
    """Test the convergence predicate."""

    def test_all_target_and_healthy(self, status_factory):
        """Every task on the target version and healthy."""
        assert is_converged(status_factory(["v2", "v2"], healthy=2), "v2")

    def test_mixed_versions_never_converged(self, status_factory):
        """Old tasks still running block convergence regardless of health."""
        assert not is_converged(status_factory(["v1", "v2", "v2"], healthy=3), "v2")
        assert not is_converged(status_factory(["v1", "v2"], healthy=1), "v2")

    def test_unhealthy_target_tasks(self, status_factory):
        """Healthy counter must match the number of target tasks."""
        assert not is_converged(status_factory(["v2", "v2"], healthy=1), "v2")

    def test_no_tasks(self, status_factory):
        """An empty snapshot only converges for an app scaled to zero."""
        assert not is_converged(status_factory([], instances=2), "v2")
        assert is_converged(status_factory([], instances=0), "v2")


class TestConvergenceWatcher:
    """Test ConvergenceWatcher.await_convergence."""

    @pytest.mark.asyncio
    async def test_converges_on_first_poll(self, gateway, clock, status_factory):
        """Already converged snapshot ends the wait at once."""
        gateway.get_app.return_value = status_factory(["v1"], healthy=1)

        result = await ConvergenceWatcher(gateway, clock=clock).await_convergence(
            "/example-service", "v1", 300
        )

        assert result.polls == 1
        assert gateway.get_app.await_count == 1
        gateway.list_deployments.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_waits_through_rollout(self, gateway, clock, status_factory, deployment_factory):
        """Old version running while the new one deploys keeps polling."""
        gateway.get_app.side_effect = [
            status_factory(["v1", "v1", "v1"], healthy=3),
            status_factory(["v1", "v1", "v2"], healthy=2),
            status_factory(["v2", "v2", "v2"], healthy=3),
        ]
        gateway.list_deployments.return_value = [deployment_factory("v2")]

        result = await ConvergenceWatcher(gateway, clock=clock).await_convergence(
            "/example-service", "v2", 900, poll_interval=5, initial_delay=10
        )

        assert result.polls == 3
        assert clock.sleeps == [10, 5, 5]
        # The deployment listing is only consulted while v2 has no task
        assert gateway.list_deployments.await_count == 1

    @pytest.mark.asyncio
    async def test_version_unreachable_fails_fast(self, gateway, clock, status_factory, deployment_factory):
        """Target neither running nor deploying aborts without waiting out the timeout."""
        gateway.get_app.return_value = status_factory(["v1", "v1"], healthy=2)
        gateway.list_deployments.return_value = [deployment_factory("v3")]

        with pytest.raises(VersionUnreachable) as exc_info:
            await ConvergenceWatcher(gateway, clock=clock).await_convergence(
                "/example-service", "v2", 600
            )

        assert exc_info.value.current_versions == ["v1", "v1"]
        assert exc_info.value.target_version == "v2"
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_tolerant_mode_waits_for_timeout(self, gateway, clock, status_factory):
        """Tolerant mode never raises VersionUnreachable."""
        gateway.get_app.return_value = status_factory(["v1"], healthy=1)

        with pytest.raises(ConvergenceTimeout):
            await ConvergenceWatcher(
                gateway, clock=clock, version_check="tolerant"
            ).await_convergence("/example-service", "v2", 20, poll_interval=5)

        gateway.list_deployments.assert_not_awaited()
        assert gateway.get_app.await_count == 5

    @pytest.mark.asyncio
    async def test_times_out_when_never_healthy(self, gateway, clock, status_factory):
        """New version running but unhealthy until the deadline."""
        gateway.get_app.return_value = status_factory(["v2", "v2"], healthy=1)
        start = clock.now()

        with pytest.raises(ConvergenceTimeout) as exc_info:
            await ConvergenceWatcher(gateway, clock=clock).await_convergence(
                "/example-service", "v2", 60, poll_interval=5
            )

        assert exc_info.value.timeout_seconds == 60
        assert clock.now() - start == 60

    @pytest.mark.asyncio
    async def test_time_to_first_healthy(self, gateway, clock, status_factory):
        """The first alive health check of the new version is timed from publish."""
        published_at = clock.now()
        gateway.get_app.side_effect = [
            status_factory(["v1", "v2"], healthy=1, alive={"v1": True, "v2": False}),
            status_factory(["v1", "v2"], healthy=2, alive={"v1": True, "v2": True}),
            status_factory(["v2", "v2"], healthy=2, alive={"v2": True}),
        ]

        result = await ConvergenceWatcher(gateway, clock=clock).await_convergence(
            "/example-service", "v2", 300, poll_interval=5, started_at=published_at - 3
        )

        assert result.time_to_first_healthy == 8
        assert result.polls == 3

    @pytest.mark.asyncio
    async def test_read_failure_aborts(self, gateway, clock, status_factory):
        """A failed status read inside the loop is fatal."""
        gateway.get_app.side_effect = [
            status_factory(["v1", "v2"], healthy=1),
            GatewayError("GET returned 502", status_code=502),
        ]

        with pytest.raises(GatewayError):
            await ConvergenceWatcher(gateway, clock=clock).await_convergence(
                "/example-service", "v2", 300
            )

    def test_rejects_unknown_version_check(self, gateway):
        """Only strict and tolerant are valid."""
        with pytest.raises(ValueError):
            ConvergenceWatcher(gateway, version_check="lenient")


class TestConvergenceWatcherAppIds:
    """Relative descriptor ids against Marathon's absolute ids."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("app_id,marathon_id", [("svc", "/svc"), ("group/svc", "/group/svc")])
    async def test_relative_id_waits_through_rollout(
        self, gateway, clock, status_factory, deployment_factory, app_id, marathon_id
    ):
        """The new version is found in the listing under the absolute id."""
        gateway.get_app.side_effect = [
            status_factory(["v1", "v1"], healthy=2, app_id=marathon_id),
            status_factory(["v2", "v2"], healthy=2, app_id=marathon_id),
        ]
        gateway.list_deployments.return_value = [deployment_factory("v2", marathon_id)]

        result = await ConvergenceWatcher(gateway, clock=clock).await_convergence(
            app_id, "v2", 300, poll_interval=5
        )

        assert result.polls == 2
        assert gateway.list_deployments.await_count == 1

    @pytest.mark.asyncio
    async def test_relative_id_still_fails_fast_for_other_app(
        self, gateway, clock, status_factory, deployment_factory
    ):
        """A rollout of a different app does not keep the wait alive."""
        gateway.get_app.return_value = status_factory(["v1"], healthy=1, app_id="/svc")
        gateway.list_deployments.return_value = [deployment_factory("v2", "/svc-canary")]

        with pytest.raises(VersionUnreachable):
            await ConvergenceWatcher(gateway, clock=clock).await_convergence("svc", "v2", 300)
