"""Project registry: project ids mapped to process factories and metadata.

The registry is the only place a project id string is resolved. Every
entry pairs a ``ProjectDescriptor`` with a factory that builds an
unstarted ``ProcessHandle`` and a short banner announced when the
project starts.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, ConfigDict

from consolebridge.domain.errors import UnknownProjectError
from consolebridge.domain.models import ProjectDescriptor
from consolebridge.process.base import ProcessHandle
from consolebridge.process.subprocess_backend import DEFAULT_STDIN_BUFFER_LIMIT, SubprocessHandle

if TYPE_CHECKING:
    from consolebridge.config.settings import ProcessConfig, ProjectConfig, Settings

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_ID = "cpu-scheduler"

SIMULATOR_DIR = Path(__file__).parent / "simulators"

ProcessFactory = Callable[[], ProcessHandle]


class ProjectEntry(BaseModel):
    """A registered project."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    descriptor: ProjectDescriptor
    factory: ProcessFactory
    banner: str = ""


class ProjectRegistry:
    """Maps project ids to process factories and descriptors.

    Lookups for ``info`` fall back to the default project's descriptor;
    ``spawn`` never substitutes a different project.
    """

    def __init__(self, default_id: str = DEFAULT_PROJECT_ID) -> None:
        self._entries: dict[str, ProjectEntry] = {}
        self._default_id = default_id

    @property
    def default_id(self) -> str:
        return self._default_id

    def register(
        self,
        descriptor: ProjectDescriptor,
        factory: ProcessFactory,
        banner: str = "",
        replace: bool = False,
    ) -> None:
        """Add a project.

        Raises:
            ValueError: If the id is already registered and ``replace`` is False.
        """
        if descriptor.id in self._entries and not replace:
            raise ValueError(f"Project already registered: {descriptor.id}")
        self._entries[descriptor.id] = ProjectEntry(
            descriptor=descriptor, factory=factory, banner=banner
        )
        logger.debug("Registered project %s", descriptor.id)

    def get(self, project_id: str) -> ProjectEntry | None:
        return self._entries.get(project_id)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def ids(self) -> list[str]:
        return list(self._entries)

    def catalog(self) -> list[ProjectDescriptor]:
        """Descriptors of every registered project, in registration order."""
        return [entry.descriptor for entry in self._entries.values()]

    def describe(self, project_id: str) -> ProjectDescriptor:
        """Return the descriptor for ``project_id``, or the default one."""
        entry = self._entries.get(project_id) or self._entries.get(self._default_id)
        if entry is None:
            raise UnknownProjectError(project_id)
        return entry.descriptor

    def spawn(self, project_id: str) -> ProcessHandle:
        """Build a new handle for ``project_id`` in the starting state.

        The caller owns the handle and launches it with ``start()``.

        Raises:
            UnknownProjectError: If the project is not registered.
        """
        entry = self._entries.get(project_id)
        if entry is None:
            raise UnknownProjectError(project_id)
        handle = entry.factory()
        logger.debug("Created handle for %s: %r", project_id, handle)
        return handle


# ---------------------------------------------------------------------------
# Built-in projects
# ---------------------------------------------------------------------------

BUILTIN_PROJECTS: list[tuple[ProjectDescriptor, str, str]] = [
    (
        ProjectDescriptor(
            id="cpu-scheduler",
            description="Java CPU Scheduler with multiple algorithms",
            tech=("Java", "Maven", "Algorithms", "Operating Systems"),
            repository_url="https://github.com/ghassanelgendy/cpu-schedulers",
        ),
        "cpu_scheduler.py",
        "Starting CPU Scheduler setup...",
    ),
    (
        ProjectDescriptor(
            id="custom-project-1",
            description="Your custom project 1",
            tech=("Node.js", "React", "TypeScript"),
            repository_url="https://github.com/yourusername/project1",
        ),
        "react_app.py",
        "Starting Custom Project 1...",
    ),
    (
        ProjectDescriptor(
            id="custom-project-2",
            description="Your custom project 2",
            tech=("Python", "Django", "PostgreSQL"),
            repository_url="https://github.com/yourusername/project2",
        ),
        "django_app.py",
        "Starting Custom Project 2...",
    ),
]


def _simulator_factory(
    project_id: str, script: str, processes: ProcessConfig | None
) -> ProcessFactory:
    python = processes.python_executable if processes else sys.executable
    encoding = processes.encoding if processes else "utf-8"
    chunk = processes.read_chunk_size if processes else 4096
    stdin_limit = processes.stdin_buffer_limit if processes else DEFAULT_STDIN_BUFFER_LIMIT

    def factory() -> ProcessHandle:
        return SubprocessHandle(
            [python, "-u", str(SIMULATOR_DIR / script)],
            name=project_id,
            env={"PYTHONIOENCODING": encoding},
            encoding=encoding,
            read_chunk_size=chunk,
            stdin_buffer_limit=stdin_limit,
        )

    return factory


def _command_factory(project: ProjectConfig, processes: ProcessConfig | None) -> ProcessFactory:
    encoding = processes.encoding if processes else "utf-8"
    chunk = processes.read_chunk_size if processes else 4096
    stdin_limit = processes.stdin_buffer_limit if processes else DEFAULT_STDIN_BUFFER_LIMIT

    def factory() -> ProcessHandle:
        return SubprocessHandle(
            list(project.command),
            name=project.id,
            cwd=project.cwd,
            encoding=encoding,
            read_chunk_size=chunk,
            stdin_buffer_limit=stdin_limit,
        )

    return factory


def build_registry(settings: Settings | None = None) -> ProjectRegistry:
    """Create a registry with the built-in simulators and configured projects.

    Projects declared in configuration replace built-ins with the same id.
    """
    processes = settings.processes if settings else None
    registry = ProjectRegistry()

    for descriptor, script, banner in BUILTIN_PROJECTS:
        registry.register(
            descriptor, _simulator_factory(descriptor.id, script, processes), banner=banner
        )

    for project in settings.projects if settings else []:
        if project.id in registry:
            logger.info("Configured project %s replaces the built-in one", project.id)
        registry.register(
            ProjectDescriptor(
                id=project.id,
                description=project.description,
                tech=tuple(project.tech),
                repository_url=project.repository_url,
            ),
            _command_factory(project, processes),
            banner=project.banner or f"Starting {project.id}...",
            replace=True,
        )

    logger.info("Project registry ready: %s", ", ".join(registry.ids()))
    return registry
