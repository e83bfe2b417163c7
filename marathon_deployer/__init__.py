"""marathon-deployer - Deploy an app to Marathon and wait until it has rolled out."""

__version__ = "1.0.0"
