"""Abstract base class for child process handles.

A handle owns exactly one OS process. It exposes writes to the process's
standard input, a single-subscriber stream of output events, and
non-blocking termination. The session manager only talks to this
interface, so tests can swap in scripted handles without spawning
anything.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import AsyncIterator

from consolebridge.domain.errors import ProcessError
from consolebridge.domain.models import ProcessEvent, ProcessEventKind, ProcessState

logger = logging.getLogger(__name__)


class ProcessHandle(ABC):
    """Abstract interface over one spawned child process.

    State moves ``starting -> running -> exited`` and never goes back. A
    handle is not reusable: once it has exited, spawn a new one.

    Example usage::

        handle = SubprocessHandle([sys.executable, "-u", "app.py"])
        await handle.start()
        await handle.write("1\\n")
        async for event in handle.events():
            print(event.kind, event.data)
    """

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._state = ProcessState.STARTING
        self._exit_code: int | None = None
        self._started_at: datetime | None = None
        self._events: asyncio.Queue[ProcessEvent] = asyncio.Queue()
        self._exited = asyncio.Event()
        self._subscribed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def is_alive(self) -> bool:
        """Whether the OS process is running and can accept input."""
        return self._state is ProcessState.RUNNING

    @property
    def exit_code(self) -> int | None:
        """Exit status, set once when the process has been reaped."""
        return self._exit_code

    @property
    def started_at(self) -> datetime | None:
        return self._started_at

    @property
    def uptime(self) -> float:
        """Seconds since launch, or 0.0 if the process never started."""
        if self._started_at is None:
            return 0.0
        return (datetime.now() - self._started_at).total_seconds()

    @abstractmethod
    async def start(self) -> None:
        """Launch the OS process and begin producing events.

        Raises:
            ProcessSpawnError: If the process cannot be started. The
                handle is left in the exited state.
        """
        ...

    @abstractmethod
    async def write(self, text: str) -> None:
        """Write text to the process's standard input.

        Must not raise if the process has already exited; the write is
        logged and dropped instead.
        """
        ...

    @abstractmethod
    def terminate(self) -> None:
        """Ask the process to exit (SIGTERM). Returns immediately."""
        ...

    @abstractmethod
    def kill(self) -> None:
        """Force the process to exit (SIGKILL). Returns immediately."""
        ...

    async def events(self) -> AsyncIterator[ProcessEvent]:
        """Yield output events until, and including, the exit event.

        Only one consumer may subscribe per handle.

        Raises:
            ProcessError: If the stream was already subscribed to.
        """
        if self._subscribed:
            raise ProcessError(f"Event stream of {self._name or 'process'} already consumed")
        self._subscribed = True
        while True:
            event = await self._events.get()
            yield event
            if event.kind is ProcessEventKind.EXIT:
                return

    async def wait(self) -> int | None:
        """Wait until the process has exited and return its exit code."""
        await self._exited.wait()
        return self._exit_code

    # -- helpers for implementations ----------------------------------------

    def _mark_running(self) -> None:
        self._state = ProcessState.RUNNING
        self._started_at = datetime.now()

    def _emit(self, kind: ProcessEventKind, data: str = "") -> None:
        if self._state is ProcessState.EXITED:
            logger.debug("Dropping %s event after exit of %s", kind.value, self._name)
            return
        self._events.put_nowait(ProcessEvent(kind=kind, data=data))

    def _finish(self, exit_code: int | None) -> None:
        """Record the exit, emit the terminal exit event, wake waiters."""
        if self._state is ProcessState.EXITED:
            return
        self._exit_code = exit_code
        self._state = ProcessState.EXITED
        self._events.put_nowait(ProcessEvent(kind=ProcessEventKind.EXIT, exit_code=exit_code))
        self._exited.set()

    def _abandon(self) -> None:
        """Mark a handle whose launch failed as exited, without an exit event."""
        self._state = ProcessState.EXITED
        self._exited.set()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, state={self._state.value})"
