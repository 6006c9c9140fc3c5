"""Runnable projects: the registry and the bundled simulator programs."""

from consolebridge.projects.registry import (
    DEFAULT_PROJECT_ID,
    ProjectEntry,
    ProjectRegistry,
    build_registry,
)

__all__ = ["DEFAULT_PROJECT_ID", "ProjectEntry", "ProjectRegistry", "build_registry"]
