"""asyncio subprocess implementation of ProcessHandle.

Runs the child with piped stdin/stdout/stderr. Output is read in chunks,
decoded incrementally and passed through verbatim, so partial lines
such as interactive prompts reach the client without waiting for a
newline.

Input is queued and fed to stdin by a writer task, so a child that stops
reading never stalls the caller. Queued input beyond the buffer limit is
dropped.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
from pathlib import Path

from consolebridge.domain.errors import ProcessSpawnError
from consolebridge.domain.models import ProcessEventKind, ProcessState
from consolebridge.process.base import ProcessHandle

logger = logging.getLogger(__name__)

DEFAULT_READ_CHUNK_SIZE = 4096
DEFAULT_STDIN_BUFFER_LIMIT = 1024 * 1024


class SubprocessHandle(ProcessHandle):
    """Owns one child process started with ``asyncio.create_subprocess_exec``."""

    def __init__(
        self,
        argv: list[str],
        name: str = "",
        cwd: str | Path | None = None,
        env: dict[str, str] | None = None,
        encoding: str = "utf-8",
        read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
        stdin_buffer_limit: int = DEFAULT_STDIN_BUFFER_LIMIT,
    ) -> None:
        super().__init__(name=name or (argv[0] if argv else ""))
        self._argv = list(argv)
        self._cwd = str(cwd) if cwd is not None else None
        self._env = env
        self._encoding = encoding
        self._read_chunk_size = read_chunk_size
        self._stdin_buffer_limit = stdin_buffer_limit
        self._process: asyncio.subprocess.Process | None = None
        self._watch_task: asyncio.Task[None] | None = None
        self._stdin_task: asyncio.Task[None] | None = None
        self._stdin_queue: asyncio.Queue[bytes] = asyncio.Queue()
        self._pending_input = 0
        self._pending_signal: signal.Signals | None = None

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process else None

    @property
    def argv(self) -> list[str]:
        return list(self._argv)

    @property
    def pending_input(self) -> int:
        """Bytes accepted by ``write`` but not yet taken by the child."""
        return self._pending_input

    async def start(self) -> None:
        """Launch the child process and start pumping its output."""
        if self._state is not ProcessState.STARTING:
            raise ProcessSpawnError(f"{self._name} has already been started")
        if not self._argv:
            self._abandon()
            raise ProcessSpawnError("Empty command")

        env = None
        if self._env is not None:
            env = os.environ.copy()
            env.update(self._env)

        try:
            self._process = await asyncio.create_subprocess_exec(
                *self._argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._cwd,
                env=env,
            )
        except (OSError, ValueError) as e:
            self._abandon()
            raise ProcessSpawnError(f"Cannot start {self._argv[0]}: {e}") from e

        self._mark_running()
        self._stdin_task = asyncio.create_task(self._feed_stdin())
        self._watch_task = asyncio.create_task(self._watch())
        logger.info("Started %s (pid=%d)", self._name, self._process.pid)

        # A stop or disconnect that arrived while launching
        if self._pending_signal is not None:
            self._send_signal(self._pending_signal)

    async def write(self, text: str) -> None:
        """Queue text for stdin and return without waiting for the child.

        The text is logged and dropped if the process is gone or if the
        backlog would exceed the stdin buffer limit.
        """
        process = self._process
        if not self.is_alive or process is None or process.stdin is None:
            logger.warning("Dropping input for %s: process is not running", self._name)
            return
        if process.stdin.is_closing():
            logger.warning("Dropping input for %s: stdin is closed", self._name)
            return
        data = text.encode(self._encoding, errors="replace")
        if self._pending_input + len(data) > self._stdin_buffer_limit:
            logger.warning(
                "Dropping %d bytes of input for %s: %d bytes still unread",
                len(data), self._name, self._pending_input,
            )
            return
        self._pending_input += len(data)
        self._stdin_queue.put_nowait(data)

    def terminate(self) -> None:
        """Send SIGTERM without waiting; the exit event reports the outcome."""
        self._send_signal(signal.SIGTERM)

    def kill(self) -> None:
        """Send SIGKILL without waiting."""
        self._send_signal(signal.SIGKILL)

    def _send_signal(self, sig: signal.Signals) -> None:
        if self._state is ProcessState.STARTING:
            # SIGKILL is never downgraded by a later terminate()
            if self._pending_signal is not signal.SIGKILL:
                self._pending_signal = sig
            return
        process = self._process
        if process is None or process.returncode is not None:
            return
        try:
            process.send_signal(sig)
            logger.info("Sent %s to %s (pid=%d)", sig.name, self._name, process.pid)
        except ProcessLookupError:
            logger.debug("%s already gone when sending %s", self._name, sig.name)

    async def _watch(self) -> None:
        """Pump both output streams, reap the process, then emit exit."""
        process = self._process
        assert process is not None
        await asyncio.gather(
            self._pump(process.stdout, ProcessEventKind.STDOUT),
            self._pump(process.stderr, ProcessEventKind.STDERR),
        )
        exit_code = await process.wait()
        logger.info("%s exited with code %s", self._name, exit_code)
        if self._stdin_task is not None:
            self._stdin_task.cancel()
            try:
                await self._stdin_task
            except asyncio.CancelledError:
                pass
        self._finish(exit_code)

    async def _feed_stdin(self) -> None:
        """Write queued input to the child in order, waiting on its reads."""
        process = self._process
        assert process is not None and process.stdin is not None
        stdin = process.stdin
        while True:
            data = await self._stdin_queue.get()
            try:
                stdin.write(data)
                await stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as e:
                logger.warning("Failed to write to %s: %s", self._name, e)
                return
            finally:
                self._pending_input -= len(data)

    async def _pump(
        self, stream: asyncio.StreamReader | None, kind: ProcessEventKind
    ) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder(self._encoding)(errors="replace")
        try:
            while True:
                chunk = await stream.read(self._read_chunk_size)
                if not chunk:
                    break
                text = decoder.decode(chunk)
                if text:
                    self._emit(kind, text)
            tail = decoder.decode(b"", final=True)
            if tail:
                self._emit(kind, tail)
        except Exception as e:
            logger.warning("Error reading %s of %s: %s", kind.value, self._name, e)
            self._emit(ProcessEventKind.ERROR, str(e))
