"""Shared test fixtures for the consolebridge test suite.

Provides a scripted ProcessHandle that never touches the OS, a registry
wired to it, a session manager, and a list-backed outbound sink.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import pytest

from consolebridge.console.manager import SessionManager
from consolebridge.domain.errors import ProcessSpawnError
from consolebridge.domain.models import OutboundMessage, ProcessEventKind, ProjectDescriptor
from consolebridge.process.base import ProcessHandle
from consolebridge.projects.registry import BUILTIN_PROJECTS, ProjectRegistry


# ---------------------------------------------------------------------------
# Scripted process handle
# ---------------------------------------------------------------------------


class FakeProcessHandle(ProcessHandle):
    """A ProcessHandle driven by the test instead of an OS process."""

    def __init__(self, name: str = "fake", fail_start: bool = False) -> None:
        super().__init__(name=name)
        self.fail_start = fail_start
        self.exit_on_terminate = False
        self.writes: list[str] = []
        self.signals: list[str] = []
        # Set to an Event to suspend start() until the test releases it
        self.launch_gate: asyncio.Event | None = None

    async def start(self) -> None:
        if self.launch_gate is not None:
            await self.launch_gate.wait()
        if self.fail_start:
            self._abandon()
            raise ProcessSpawnError("No such file or directory")
        self._mark_running()

    async def write(self, text: str) -> None:
        if not self.is_alive:
            return
        self.writes.append(text)

    def terminate(self) -> None:
        self.signals.append("SIGTERM")
        if self.exit_on_terminate and self.is_alive:
            self.exit(-15)

    def kill(self) -> None:
        self.signals.append("SIGKILL")
        if self.is_alive:
            self.exit(-9)

    # -- test drivers --------------------------------------------------------

    def stdout(self, text: str) -> None:
        self._emit(ProcessEventKind.STDOUT, text)

    def stderr(self, text: str) -> None:
        self._emit(ProcessEventKind.STDERR, text)

    def fail(self, message: str) -> None:
        self._emit(ProcessEventKind.ERROR, message)

    def exit(self, code: int = 0) -> None:
        self._finish(code)


class FakeSpawner:
    """Process factory that records every handle it creates."""

    def __init__(self, name: str = "fake") -> None:
        self.name = name
        self.handles: list[FakeProcessHandle] = []
        self.fail_start = False
        self.gated = False

    def __call__(self) -> FakeProcessHandle:
        handle = FakeProcessHandle(name=self.name, fail_start=self.fail_start)
        if self.gated:
            handle.launch_gate = asyncio.Event()
        self.handles.append(handle)
        return handle

    @property
    def last(self) -> FakeProcessHandle:
        return self.handles[-1]


# ---------------------------------------------------------------------------
# Registry / manager fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def spawner() -> FakeSpawner:
    return FakeSpawner(name="cpu-scheduler")


@pytest.fixture
def other_spawner() -> FakeSpawner:
    return FakeSpawner(name="custom-project-1")


@pytest.fixture
def registry(spawner: FakeSpawner, other_spawner: FakeSpawner) -> ProjectRegistry:
    """Built-in descriptors and banners, backed by fake processes."""
    reg = ProjectRegistry()
    descriptor, _, banner = BUILTIN_PROJECTS[0]
    reg.register(descriptor, spawner, banner=banner)
    descriptor, _, banner = BUILTIN_PROJECTS[1]
    reg.register(descriptor, other_spawner, banner=banner)
    return reg


@pytest.fixture
def default_descriptor() -> ProjectDescriptor:
    return BUILTIN_PROJECTS[0][0]


@pytest.fixture
def manager(registry: ProjectRegistry) -> SessionManager:
    return SessionManager(registry)


@pytest.fixture
def outbox() -> list[OutboundMessage]:
    """Collects outbound messages; pass ``outbox.append`` as the sink."""
    return []


@pytest.fixture
def settle() -> Callable[[], Awaitable[None]]:
    """Let relay tasks drain their queues."""

    async def _settle() -> None:
        for _ in range(10):
            await asyncio.sleep(0)

    return _settle
