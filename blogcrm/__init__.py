"""blogcrm: GitHub-hosted markdown posts -> structured blog documents."""

__version__ = "0.1.0"
