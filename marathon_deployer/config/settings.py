"""
Configuration settings for marathon-deployer.

Values come from (lowest to highest precedence) defaults, a YAML file,
environment variables and command-line flags.
"""

import os
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from marathon_deployer.exceptions import ConfigurationError


class MarathonSettings(BaseModel):
    """Where and how to reach Marathon."""

    host: Optional[str] = Field(None, description="Marathon base URL (marathonHost)")
    token: Optional[str] = Field(None, description="Optional bearer token for Marathon")
    request_timeout: float = Field(30.0, gt=0, description="Per-request HTTP timeout in seconds")


class DeploymentSettings(BaseModel):
    """Waiting behaviour of the deploy flow."""

    wait_on_running_deployment: bool = Field(
        True, description="Wait for a previous deployment of the same app to finish"
    )
    wait_on_running_deployment_timeout_in_sec: int = Field(
        300, gt=0, description="Max seconds to wait for the previous deployment"
    )
    wait_for_successful_deployment: bool = Field(
        True, description="Wait until the new version is fully rolled out and healthy"
    )
    wait_for_successful_deployment_timeout_in_sec: int = Field(
        300, gt=0, description="Max seconds per instance to wait for the new version"
    )
    poll_interval: float = Field(5.0, gt=0, description="Seconds between status polls")
    initial_delay: float = Field(
        10.0, ge=0, description="Seconds to wait after an update before the first poll"
    )
    version_check: Literal["strict", "tolerant"] = Field(
        "strict",
        description="strict: abort when the new version is neither running nor deploying; "
        "tolerant: keep polling until the timeout",
    )
    force: bool = Field(False, description="Pass force=true to Marathon on update")


class DescriptorSettings(BaseModel):
    """Where the app descriptor lives."""

    path: str = Field("target/marathon.json", description="App descriptor (marathonConfigFile)")


class LoggingSettings(BaseModel):
    """Logging output."""

    console_level: str = Field("INFO", description="Console log level")
    log_file: Optional[str] = Field(None, description="Optional rotating log file")
    use_json: bool = Field(False, description="Write the log file as JSON lines")


class DeployerConfig(BaseModel):
    """Complete marathon-deployer configuration."""

    marathon: MarathonSettings = Field(default_factory=MarathonSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    descriptor: DescriptorSettings = Field(default_factory=DescriptorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DeployerConfig":
        """Load configuration from a YAML file; a missing file yields defaults."""
        config_path = Path(path)
        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except (OSError, yaml.YAMLError, TypeError) as e:
            raise ConfigurationError(f"Cannot read configuration {config_path}: {e}") from e
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration {config_path}: {e}") from e

    def save(self, path: Union[str, Path]) -> None:
        """Write configuration as YAML."""
        config_path = Path(path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def apply_env_overrides(self) -> "DeployerConfig":
        """Apply MARATHON_* environment variables on top of the loaded values."""
        if os.getenv("MARATHON_HOST"):
            self.marathon.host = os.environ["MARATHON_HOST"]
        if os.getenv("MARATHON_TOKEN"):
            self.marathon.token = os.environ["MARATHON_TOKEN"]
        if os.getenv("MARATHON_CONFIG_FILE"):
            self.descriptor.path = os.environ["MARATHON_CONFIG_FILE"]
        return self

    def validate_for_deploy(self) -> None:
        """Check that everything a deploy needs is present."""
        if not self.marathon.host:
            raise ConfigurationError(
                "Marathon host is required (--marathon-host, MARATHON_HOST or marathon.host)"
            )
        if not self.marathon.host.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Marathon host must be an http(s) URL, got {self.marathon.host}"
            )
