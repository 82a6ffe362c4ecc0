"""rocktree — deploy and undeploy installed packages in a local tree."""

__version__ = "0.1.0"
