"""
Pytest configuration for marathon-deployer tests.
"""

import os


def pytest_configure(config):
    """
    Clear environment variables that would leak into configuration tests.
    This runs very early in the pytest lifecycle.
    """
    for name in ("MARATHON_HOST", "MARATHON_TOKEN", "MARATHON_CONFIG_FILE"):
        os.environ.pop(name, None)
