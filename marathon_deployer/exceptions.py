"""
Exception hierarchy for marathon-deployer.

Every failure the deploy flow can end in has its own class so the CLI can map
it to an exit code without inspecting messages.
"""

from typing import List, Optional


# Exit code constants
EXIT_SUCCESS = 0  # Deployment converged (or was accepted)
EXIT_ERROR = 1  # General error
EXIT_INVALID_CONFIG = 2  # Invalid arguments or configuration
EXIT_DESCRIPTOR_ERROR = 3  # App descriptor missing or malformed
EXIT_API_ERROR = 4  # Marathon API or transport error
EXIT_PRIOR_DEPLOYMENT_TIMEOUT = 5  # Previous deployment never finished
EXIT_CONVERGENCE_TIMEOUT = 6  # New version never became healthy
EXIT_VERSION_UNREACHABLE = 7  # New version vanished


class DeployerError(Exception):
    """Base class for all deployer errors."""

    exit_code: int = EXIT_ERROR

    def __init__(self, message: str, exit_code: Optional[int] = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(DeployerError):
    """Configuration is missing or invalid."""

    exit_code: int = EXIT_INVALID_CONFIG


class DescriptorLoadError(DeployerError):
    """The app descriptor could not be read or parsed."""

    exit_code: int = EXIT_DESCRIPTOR_ERROR

    def __init__(self, path: str, cause: Exception) -> None:
        super().__init__(f"Failed to load app descriptor from {path}: {cause}")
        self.path = path
        self.cause = cause


class GatewayError(DeployerError):
    """Marathon returned a server error or could not be reached."""

    exit_code: int = EXIT_API_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(GatewayError):
    """Marathon answered 404 for the requested resource."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


class ProbeFailed(DeployerError):
    """Existence check failed for a reason other than 'not found'."""

    exit_code: int = EXIT_API_ERROR

    def __init__(self, app_id: str, cause: Exception) -> None:
        super().__init__(f"Failed to check if an app {app_id} exists: {cause}")
        self.app_id = app_id
        self.cause = cause


class PublishFailed(DeployerError):
    """Create or update of the app was rejected or could not be sent."""

    exit_code: int = EXIT_API_ERROR

    def __init__(self, app_id: str, cause: Exception) -> None:
        super().__init__(f"Failed to publish app {app_id}: {cause}")
        self.app_id = app_id
        self.cause = cause


class PriorDeploymentTimeout(DeployerError):
    """A deployment already running for the app did not finish in time."""

    exit_code: int = EXIT_PRIOR_DEPLOYMENT_TIMEOUT

    def __init__(self, app_id: str, timeout: float) -> None:
        super().__init__(
            f"Previous deployment of {app_id} still hanging. Didn't finish in {timeout:g} seconds"
        )
        self.app_id = app_id
        self.timeout = timeout


class ConvergenceTimeout(DeployerError):
    """The published version did not become fully healthy in time."""

    exit_code: int = EXIT_CONVERGENCE_TIMEOUT

    def __init__(self, app_id: str, target_version: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Deployment of {app_id} version {target_version} still hanging. "
            f"Didn't finish in {timeout_seconds:g} seconds"
        )
        self.app_id = app_id
        self.target_version = target_version
        self.timeout_seconds = timeout_seconds


class VersionUnreachable(DeployerError):
    """The target version is neither running nor being deployed."""

    exit_code: int = EXIT_VERSION_UNREACHABLE

    def __init__(self, app_id: str, target_version: str, current_versions: List[str]) -> None:
        super().__init__(
            f"No version {target_version} and no running deployment found for {app_id}, "
            f"running versions are {current_versions}, deployment aborted."
        )
        self.app_id = app_id
        self.target_version = target_version
        self.current_versions = list(current_versions)
