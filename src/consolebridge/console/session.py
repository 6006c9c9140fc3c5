"""Per-connection session state."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from consolebridge.domain.errors import ProcessError
from consolebridge.domain.models import OutboundMessage
from consolebridge.process.base import ProcessHandle

logger = logging.getLogger(__name__)

MessageSink = Callable[[OutboundMessage], None]


class Session:
    """Server-side state for one client connection.

    A session owns at most one ``ProcessHandle``. Outbound notifications
    go through ``sink``, a non-blocking callable supplied by the
    transport (typically ``asyncio.Queue.put_nowait``). Once closed, the
    session silently drops further notifications.
    """

    def __init__(self, connection_id: str, sink: MessageSink) -> None:
        self._connection_id = connection_id
        self._sink = sink
        self.project: str | None = None
        self._process: ProcessHandle | None = None
        self._connected_at = datetime.now()
        self._closed = False

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def connected_at(self) -> datetime:
        return self._connected_at

    @property
    def process(self) -> ProcessHandle | None:
        return self._process

    @property
    def has_process(self) -> bool:
        """Whether a handle is attached, whether still starting or running."""
        return self._process is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def attach(self, handle: ProcessHandle) -> None:
        """Take ownership of ``handle``.

        Raises:
            ProcessError: If the session already owns a process.
        """
        if self._process is not None:
            raise ProcessError(f"Session {self._connection_id} already owns a process")
        self._process = handle

    def detach(self, handle: ProcessHandle) -> bool:
        """Release ``handle`` if it is the one currently owned.

        Returns False when a different (newer) handle is attached, so a
        late exit event of an old process never clears its successor.
        """
        if self._process is not handle:
            return False
        self._process = None
        return True

    def close(self) -> ProcessHandle | None:
        """Stop delivering notifications and signal the owned process.

        Returns the handle that was signalled, if any. The handle is not
        awaited; its exit is reaped in the background.
        """
        self._closed = True
        handle = self._process
        if handle is not None:
            handle.terminate()
        return handle

    def send(self, message: OutboundMessage) -> None:
        if self._closed:
            logger.debug("[%s] Dropping %s message on closed session", self._connection_id, message.type)
            return
        try:
            self._sink(message)
        except Exception as e:
            logger.warning("[%s] Failed to queue %s message: %s", self._connection_id, message.type, e)

    def system(self, content: str) -> None:
        self.send(OutboundMessage.system(content))

    def output(self, content: str) -> None:
        self.send(OutboundMessage.output(content))

    def error(self, content: str) -> None:
        self.send(OutboundMessage.error(content))

    def __repr__(self) -> str:
        return (
            f"Session(id={self._connection_id!r}, project={self.project!r}, "
            f"process={self._process!r}, closed={self._closed})"
        )
