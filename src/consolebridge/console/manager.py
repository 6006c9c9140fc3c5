"""SessionManager: the single owner of all live sessions.

Turns transport events (connect, message, disconnect, error) into
session state changes, applies the command router's decisions, and
relays each child process's events back to the session that owns it.
Everything runs on one asyncio event loop, so no locks are taken; no
handler waits on a child process to exit.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import secrets
import time

import psutil
from pydantic import ValidationError

from consolebridge.console import router
from consolebridge.console.session import MessageSink, Session
from consolebridge.domain.errors import ProcessSpawnError, ProtocolError, UnknownProjectError
from consolebridge.domain.models import (
    InboundMessage,
    InitMessage,
    ProcessEventKind,
    ProcessState,
    RouteResult,
    RouterAction,
    ServerStats,
    inbound_adapter,
)
from consolebridge.process.base import ProcessHandle
from consolebridge.projects.registry import ProjectRegistry

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Welcome to the Console Bridge!\n"
    "Connected successfully.\n"
    'Type "help" for available commands.'
)

PROCESSING_ERROR = "Error processing command"

DEFAULT_PROJECT = "default"


class SessionManager:
    """Owns every live ``Session``, keyed by connection id.

    The transport calls ``on_connect`` with a non-blocking sink for
    outbound messages, feeds raw payloads to ``on_message``, and calls
    ``on_disconnect`` exactly when the connection is gone.

    Example usage::

        manager = SessionManager(build_registry())
        connection_id = manager.on_connect(queue.put_nowait)
        await manager.on_message(connection_id, '{"type": "input", "content": "help"}')
        manager.on_disconnect(connection_id)
        await manager.shutdown()
    """

    def __init__(self, registry: ProjectRegistry) -> None:
        self._registry = registry
        self._sessions: dict[str, Session] = {}
        self._relays: set[asyncio.Task[None]] = set()
        # Every launched handle until its exit, attached to a session or not
        self._handles: set[ProcessHandle] = set()
        self._ids = itertools.count(1)
        self._started = time.monotonic()
        self._server_process = psutil.Process()

    @property
    def registry(self) -> ProjectRegistry:
        return self._registry

    @property
    def connection_count(self) -> int:
        return len(self._sessions)

    @property
    def process_count(self) -> int:
        """Launched processes that have not exited yet."""
        return len(self._handles)

    def get(self, connection_id: str) -> Session | None:
        return self._sessions.get(connection_id)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._sessions

    def stats(self) -> ServerStats:
        """Connection count, uptime and resident memory of this server."""
        return ServerStats(
            connections=len(self._sessions),
            uptime_seconds=time.monotonic() - self._started,
            memory_mb=self._server_process.memory_info().rss / (1024 * 1024),
        )

    # ------------------------------------------------------------------
    # Transport events
    # ------------------------------------------------------------------

    def on_connect(self, sink: MessageSink) -> str:
        """Register a new connection and send it the welcome message."""
        connection_id = self._new_connection_id()
        session = Session(connection_id, sink)
        self._sessions[connection_id] = session
        logger.info("Client connected: %s (%d active)", connection_id, len(self._sessions))
        session.system(WELCOME_TEXT)
        return connection_id

    async def on_message(self, connection_id: str, raw_payload: str | bytes) -> None:
        """Handle one inbound payload. Never raises."""
        session = self._sessions.get(connection_id)
        if session is None:
            logger.warning("Message for unknown connection %s dropped", connection_id)
            return

        try:
            message = self._parse(raw_payload)
        except ProtocolError as e:
            logger.warning("[%s] Malformed message: %s", connection_id, e)
            session.error(PROCESSING_ERROR)
            return

        try:
            await self._dispatch(session, message)
        except Exception:
            logger.exception("[%s] Error processing message", connection_id)
            session.error(PROCESSING_ERROR)

    def on_disconnect(self, connection_id: str) -> None:
        """Drop the session and signal its process. Idempotent."""
        session = self._sessions.pop(connection_id, None)
        if session is None:
            return
        handle = session.close()
        if handle is not None:
            logger.info("Client disconnected: %s (terminating %s)", connection_id, handle.name)
        else:
            logger.info("Client disconnected: %s", connection_id)

    def on_error(self, connection_id: str, error: BaseException) -> None:
        """Log a transport error. The session stays in place."""
        logger.error("Connection error for %s: %s", connection_id, error)

    async def shutdown(self, grace: float = 5.0) -> None:
        """Disconnect everyone and reap every child process.

        Processes get ``grace`` seconds to exit after SIGTERM before they
        are killed. This covers every process still running, including
        those whose session is already gone.
        """
        for connection_id in list(self._sessions):
            self.on_disconnect(connection_id)
        handles = [h for h in self._handles if h.state is not ProcessState.EXITED]

        if handles:
            logger.info("Waiting for %d process(es) to exit", len(handles))
            waiters = [asyncio.ensure_future(h.wait()) for h in handles]
            _, pending = await asyncio.wait(waiters, timeout=grace)
            if pending:
                for handle in handles:
                    if handle.state is not ProcessState.EXITED:
                        logger.warning("Killing %s after %.1fs", handle.name, grace)
                        handle.kill()
                await asyncio.wait(pending)

        if self._relays:
            await asyncio.gather(*self._relays, return_exceptions=True)
        logger.info("Session manager shut down")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _new_connection_id(self) -> str:
        # Counter keeps ids unique; the suffix keeps them unguessable
        return f"{next(self._ids)}-{secrets.token_hex(4)}"

    @staticmethod
    def _parse(raw_payload: str | bytes) -> InboundMessage:
        try:
            return inbound_adapter.validate_json(raw_payload)
        except ValidationError as e:
            reasons = "; ".join(err["msg"] for err in e.errors())
            raise ProtocolError(reasons) from e

    async def _dispatch(self, session: Session, message: InboundMessage) -> None:
        if isinstance(message, InitMessage):
            session.project = message.project
            logger.info("[%s] Initialized for project %s", session.connection_id, message.project)
            session.system(
                f"Initialized for project: {message.project}\n"
                'Type "run" to start the application.'
            )
            return

        command = message.content.strip()
        project = message.project or session.project or DEFAULT_PROJECT
        logger.info(
            "[%s] Received command: %s for project: %s", session.connection_id, command, project
        )
        result = router.route(command, project, session, self._registry, self.stats)
        for outbound in result.messages:
            session.send(outbound)
        await self._apply(session, result)

    async def _apply(self, session: Session, result: RouteResult) -> None:
        if result.action is RouterAction.SPAWN and result.project is not None:
            await self._spawn(session, result.project)
        elif result.action is RouterAction.TERMINATE and session.process is not None:
            session.process.terminate()
        elif result.action is RouterAction.FORWARD and session.process is not None:
            await session.process.write((result.text or "") + "\n")

    async def _spawn(self, session: Session, project: str) -> None:
        try:
            handle = self._registry.spawn(project)
        except UnknownProjectError as e:
            session.error(str(e))
            return

        entry = self._registry.get(project)
        session.attach(handle)
        self._handles.add(handle)
        if entry is not None and entry.banner:
            session.output(entry.banner)

        try:
            await handle.start()
        except ProcessSpawnError as e:
            session.detach(handle)
            self._handles.discard(handle)
            logger.error("[%s] Failed to start %s: %s", session.connection_id, project, e)
            session.error(f"Failed to start {project}: {e}")
            return

        task = asyncio.create_task(self._relay(session, handle))
        self._relays.add(task)
        task.add_done_callback(self._relays.discard)

        if session.is_closed:
            # Disconnected while launching
            handle.terminate()

    async def _relay(self, session: Session, handle: ProcessHandle) -> None:
        """Forward ``handle``'s events to ``session`` until the process exits."""
        try:
            async for event in handle.events():
                if event.kind in (ProcessEventKind.STDOUT, ProcessEventKind.STDERR):
                    session.output(event.data)
                elif event.kind is ProcessEventKind.ERROR:
                    session.detach(handle)
                    handle.terminate()
                    session.error(f"Process error: {event.data}")
                elif event.kind is ProcessEventKind.EXIT:
                    session.detach(handle)
                    logger.info(
                        "[%s] %s exited with code %s",
                        session.connection_id, handle.name, event.exit_code,
                    )
                    session.output(f"Process exited with code {event.exit_code}")
        finally:
            self._handles.discard(handle)
