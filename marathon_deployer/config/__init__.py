"""Configuration for marathon-deployer."""

from marathon_deployer.config.settings import (
    DeployerConfig,
    DeploymentSettings,
    DescriptorSettings,
    LoggingSettings,
    MarathonSettings,
)

__all__ = [
    "DeployerConfig",
    "DeploymentSettings",
    "DescriptorSettings",
    "LoggingSettings",
    "MarathonSettings",
]
