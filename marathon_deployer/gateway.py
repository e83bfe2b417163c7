"""
Marathon REST client.

Wraps the four Marathon v2 endpoints the deploy flow needs and turns HTTP
failures into typed errors: 404 becomes NotFoundError, everything else
becomes GatewayError.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from marathon_deployer.exceptions import GatewayError, NotFoundError
from marathon_deployer.models import AppSpec, AppStatus, DeploymentRecord, PublishOutcome
from marathon_deployer.utils.log_sanitizer import sanitize_app_id, sanitize_for_log

logger = logging.getLogger(__name__)

APPS_PATH = "/v2/apps"
DEPLOYMENTS_PATH = "/v2/deployments"


@runtime_checkable
class OrchestratorGateway(Protocol):
    """Typed calls against the Marathon control plane."""

    async def get_app(self, app_id: str) -> AppStatus:
        """
        Fetch the current status of an app.

        Raises NotFoundError when Marathon does not know the id,
        GatewayError on any other failure.
        """
        ...

    async def list_deployments(self) -> List[DeploymentRecord]:
        """List deployments currently in flight."""
        ...

    async def create_app(self, spec: AppSpec) -> PublishOutcome:
        """Create a new app from its descriptor."""
        ...

    async def update_app(self, app_id: str, spec: AppSpec, force: bool = False) -> PublishOutcome:
        """Replace the definition of an existing app."""
        ...


class MarathonClient:
    """httpx-based OrchestratorGateway for the Marathon v2 API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Marathon client.

        Args:
            base_url: Marathon base URL (e.g., http://marathon.mesos:8080)
            token: Optional bearer token (DC/OS ACS token)
            timeout: Per-request timeout in seconds
            transport: Optional transport override, used by tests
        """
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url, headers=headers, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "MarathonClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    @staticmethod
    def _app_path(app_id: str) -> str:
        # Marathon ids are paths; keep the slashes, escape everything else
        return f"{APPS_PATH}/{quote(app_id.strip('/'), safe='/')}"

    async def _request(
        self, method: str, path: str, params: Optional[Dict[str, str]] = None, **kwargs: Any
    ) -> Any:
        """Send a request and return the decoded JSON body."""
        try:
            response = await self._client.request(method, path, params=params, **kwargs)
        except httpx.HTTPError as e:
            raise GatewayError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"{method} {path} returned 404")
        if response.status_code >= 400:
            try:
                detail = response.json().get("message", response.text)
            except Exception:
                detail = response.text
            raise GatewayError(
                f"{method} {path} returned {response.status_code}: {sanitize_for_log(detail, 200)}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(
                f"{method} {path} returned invalid JSON", status_code=response.status_code
            ) from e

    def _parse(self, model: Any, data: Any, what: str) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise GatewayError(f"Unexpected {what} response from Marathon: {e}") from e

    async def get_app(self, app_id: str) -> AppStatus:
        data = await self._request("GET", self._app_path(app_id))
        if not isinstance(data, dict) or "app" not in data:
            raise GatewayError(f"Unexpected app response from Marathon for {app_id}")
        return self._parse(AppStatus, data["app"], "app")

    async def list_deployments(self) -> List[DeploymentRecord]:
        data = await self._request("GET", DEPLOYMENTS_PATH)
        if not isinstance(data, list):
            raise GatewayError("Unexpected deployments response from Marathon")
        return [self._parse(DeploymentRecord, item, "deployment") for item in data]

    async def create_app(self, spec: AppSpec) -> PublishOutcome:
        logger.debug(f"POST {APPS_PATH} for {sanitize_app_id(spec.id)}")
        data = await self._request("POST", APPS_PATH, json=spec.payload)
        if not isinstance(data, dict):
            raise GatewayError("Unexpected create response from Marathon")

        # Create answers with the full app definition; the deployment id sits
        # in its "deployments" list
        deployments = data.get("deployments") or []
        deployment_id = deployments[0].get("id") if deployments else None
        return PublishOutcome(version=data.get("version"), deployment_id=deployment_id)

    async def update_app(self, app_id: str, spec: AppSpec, force: bool = False) -> PublishOutcome:
        path = self._app_path(app_id)
        logger.debug(f"PUT {path} (force={force})")
        data = await self._request(
            "PUT", path, params={"force": "true" if force else "false"}, json=spec.payload
        )
        return self._parse(PublishOutcome, data, "update")
